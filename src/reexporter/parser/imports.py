import re
from dataclasses import dataclass
from typing import List, Optional

from tree_sitter import Node

from .language import node_text

_MAJOR_VERSION_RE = re.compile(r"^v[0-9]+$")
_GOPKG_VERSION_RE = re.compile(r"\.v[0-9]+$")


@dataclass(frozen=True)
class GoImport:
    """One import spec of a Go file."""
    path: str
    alias: Optional[str] = None  # Explicit name, "." or "_" when given

    @property
    def name(self) -> str:
        """Name the file uses to refer to the package."""
        return self.alias or assumed_package_name(self.path)

    @property
    def is_standard(self) -> bool:
        """Standard library paths have no dot in them."""
        return "." not in self.path


def assumed_package_name(path: str) -> str:
    """
    Guess the package name of an import path from its last elements.

    Same heuristic as goimports: a trailing major version element (v2) and a
    gopkg.in version suffix are skipped, a "go-" prefix is dropped and the
    name stops at the first character not valid in an identifier.
    """
    parts = [p for p in path.split("/") if p]
    if not parts:
        return ""
    base = parts[-1]
    if _MAJOR_VERSION_RE.match(base) and len(parts) > 1:
        base = parts[-2]
    base = _GOPKG_VERSION_RE.sub("", base)
    if base.startswith("go-"):
        base = base[3:]
    m = re.match(r"[A-Za-z0-9_]*", base)
    return m.group(0) if m else base


def _unquote(literal: str) -> str:
    if len(literal) >= 2 and literal[0] in "\"`" and literal[-1] == literal[0]:
        return literal[1:-1]
    return literal


def parse_imports(root: Node, source: bytes) -> List[GoImport]:
    """Import specs of a parsed Go file in declaration order."""
    imports: List[GoImport] = []
    for decl in root.children:
        if decl.type != "import_declaration":
            continue
        specs: List[Node] = []
        for child in decl.named_children:
            if child.type == "import_spec":
                specs.append(child)
            elif child.type == "import_spec_list":
                specs.extend(c for c in child.named_children if c.type == "import_spec")
        for spec in specs:
            path = _unquote(node_text(spec.child_by_field_name("path"), source))
            name_node = spec.child_by_field_name("name")
            alias = node_text(name_node, source) if name_node is not None else None
            imports.append(GoImport(path=path, alias=alias))
    return imports
