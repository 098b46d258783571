from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Set, Tuple

from tree_sitter import Node, Parser, Tree

from .imports import GoImport, parse_imports
from .language import field_nodes, first_error, new_parser, node_text

GO_EXTENSION = ".go"
TEST_SUFFIX = "_test.go"


@dataclass
class GoFile:
    """A parsed Go source file."""
    path: Path
    source: bytes
    tree: Tree
    package: str
    imports: List[GoImport] = field(default_factory=list)

    @property
    def stem(self) -> str:
        """Base name without the .go extension (what file filters match)."""
        name = self.path.name
        return name[: -len(GO_EXTENSION)] if name.endswith(GO_EXTENSION) else name

    @property
    def root(self) -> Node:
        return self.tree.root_node

    @property
    def error(self) -> Optional[Tuple[int, int, str]]:
        """First syntax error as (line, column, description), or None."""
        return first_error(self.root)

    def declarations(self) -> List[Node]:
        """Top-level declarations; function bodies are never entered."""
        return [
            child for child in self.root.named_children
            if child.type in (
                "type_declaration",
                "const_declaration",
                "var_declaration",
                "function_declaration",
                "method_declaration",
            )
        ]


def package_name(root: Node, source: bytes) -> str:
    for child in root.named_children:
        if child.type == "package_clause":
            for sub in child.named_children:
                if sub.type == "package_identifier":
                    return node_text(sub, source)
    return ""


def parse_go_source(source: bytes, path: Path, parser: Optional[Parser] = None) -> GoFile:
    """
    Parse Go source code.

    Syntax errors do not raise; callers check GoFile.error.
    """
    parser = parser or new_parser()
    tree = parser.parse(source)
    root = tree.root_node
    return GoFile(
        path=path,
        source=source,
        tree=tree,
        package=package_name(root, source),
        imports=parse_imports(root, source),
    )


def value_specs(decl: Node) -> List[Node]:
    """const_spec / var_spec nodes of a const or var declaration."""
    specs: List[Node] = []
    for child in decl.named_children:
        if child.type in ("const_spec", "var_spec"):
            specs.append(child)
        elif child.type == "var_spec_list":
            specs.extend(c for c in child.named_children if c.type == "var_spec")
    return specs


def type_specs(decl: Node) -> List[Node]:
    """type_spec / type_alias nodes of a type declaration."""
    return [c for c in decl.named_children if c.type in ("type_spec", "type_alias")]


def declared_names(go_file: GoFile) -> Set[str]:
    """Every package-level name declared in a file (methods excluded)."""
    names: Set[str] = set()
    source = go_file.source
    for decl in go_file.declarations():
        if decl.type == "type_declaration":
            names.update(node_text(s.child_by_field_name("name"), source) for s in type_specs(decl))
        elif decl.type in ("const_declaration", "var_declaration"):
            for spec in value_specs(decl):
                names.update(node_text(n, source) for n in field_nodes(spec, "name"))
        elif decl.type == "function_declaration":
            names.add(node_text(decl.child_by_field_name("name"), source))
    names.discard("")
    names.discard("_")
    return names
