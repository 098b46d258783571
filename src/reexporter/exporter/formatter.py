"""
GoFormatter: validation and cleanup of generated Go code.

Steps:
1. Syntax verification - parse with tree-sitter and reject ERROR/MISSING nodes
2. Import cleanup - drop imports whose package name is never referenced
3. Formatting - shell out to gofmt when available, otherwise normalize
   whitespace
"""

import re
import shutil
import subprocess
from typing import Callable, List, Optional, Set, Tuple

from tree_sitter import Node

from reexporter.exceptions import FormatError
from reexporter.logging_config import logger
from reexporter.parser.imports import GoImport
from reexporter.parser.language import first_error, new_parser, node_text
from reexporter.settings import DEFAULT_GOFMT_COMMAND

# Anything turning raw generated text into final text, raising FormatError
Formatter = Callable[[str], str]

GOFMT_TIMEOUT = 30

_BLANK_RUN_RE = re.compile(r"\n{3,}")


def _used_package_names(root: Node, source: bytes) -> Set[str]:
    """Identifiers used as package qualifiers outside the import block."""
    used: Set[str] = set()
    stack = [c for c in root.children if c.type != "import_declaration"]
    while stack:
        n = stack.pop()
        if n.type == "qualified_type":
            used.add(node_text(n.child_by_field_name("package"), source))
        elif n.type == "selector_expression":
            operand = n.child_by_field_name("operand")
            if operand is not None and operand.type == "identifier":
                used.add(node_text(operand, source))
        stack.extend(n.children)
    return used


def _import_specs(decl: Node) -> List[Node]:
    specs: List[Node] = []
    for child in decl.named_children:
        if child.type == "import_spec":
            specs.append(child)
        elif child.type == "import_spec_list":
            specs.extend(c for c in child.named_children if c.type == "import_spec")
    return specs


def _line_span(source: bytes, start: int, end: int) -> Tuple[int, int]:
    """Widen [start, end) to whole lines when nothing else shares them."""
    line_start = source.rfind(b"\n", 0, start) + 1
    line_end = source.find(b"\n", end)
    if line_end != -1 and not source[line_start:start].strip() and not source[end:line_end].strip():
        return line_start, line_end + 1
    return start, end


def normalize_whitespace(code: str) -> str:
    """Strip trailing spaces, collapse blank line runs, end with one newline."""
    lines = [line.rstrip() for line in code.split("\n")]
    text = "\n".join(lines).strip("\n")
    return _BLANK_RUN_RE.sub("\n\n", text) + "\n"


class GoFormatter:
    """
    Validate and clean generated Go code.

    Usage:
        formatter = GoFormatter(use_gofmt=False)
        code = formatter.format(raw)  # or formatter(raw)
    """

    def __init__(self, use_gofmt: bool = True, gofmt_command: str = DEFAULT_GOFMT_COMMAND):
        self.use_gofmt = use_gofmt
        self.gofmt_command = gofmt_command
        self._parser = new_parser()

    def __call__(self, code: str) -> str:
        return self.format(code)

    def format(self, code: str) -> str:
        """
        Raises:
            FormatError: On syntax errors or gofmt failures; always carries
                the unformatted code.
        """
        source = code.encode("utf-8")
        tree = self._parser.parse(source)

        error = first_error(tree.root_node)
        if error is not None:
            line, column, description = error
            raise FormatError(f"{line}:{column}: {description}", code)

        cleaned = self.prune_imports(code, tree.root_node, source)

        gofmt = self._gofmt_path()
        if gofmt is None:
            return normalize_whitespace(cleaned)
        return self._run_gofmt(gofmt, cleaned, code)

    def prune_imports(self, code: str, root: Optional[Node] = None, source: Optional[bytes] = None) -> str:
        """Remove import specs whose package is not referenced."""
        if source is None:
            source = code.encode("utf-8")
        if root is None:
            root = self._parser.parse(source).root_node

        used = _used_package_names(root, source)
        removals: List[Node] = []
        for decl in root.children:
            if decl.type != "import_declaration":
                continue
            specs = _import_specs(decl)
            unused = []
            for spec in specs:
                path = node_text(spec.child_by_field_name("path"), source).strip('"`')
                name_node = spec.child_by_field_name("name")
                imp = GoImport(path, node_text(name_node, source) if name_node is not None else None)
                if imp.alias in ("_", ".") or imp.name in used:
                    continue
                logger.debug(f"Dropping unused import {path}")
                unused.append(spec)
            # A declaration left without specs goes as a whole
            removals.extend([decl] if specs and len(unused) == len(specs) else unused)

        if not removals:
            return code

        out = source
        for node in sorted(removals, key=lambda n: n.start_byte, reverse=True):
            start, end = _line_span(out, node.start_byte, node.end_byte)
            out = out[:start] + out[end:]
        return out.decode("utf-8")

    def _gofmt_path(self) -> Optional[str]:
        if not self.use_gofmt:
            return None
        path = shutil.which(self.gofmt_command)
        if path is None:
            logger.debug(f"Formatter '{self.gofmt_command}' not found in PATH, skipping")
        return path

    def _run_gofmt(self, gofmt: str, code: str, original: str) -> str:
        try:
            result = subprocess.run(
                [gofmt],
                input=code,
                capture_output=True,
                text=True,
                timeout=GOFMT_TIMEOUT,
            )
        except subprocess.TimeoutExpired as e:
            raise FormatError(f"{self.gofmt_command} timed out after {GOFMT_TIMEOUT}s", original, e) from e
        except OSError as e:
            raise FormatError(f"{self.gofmt_command} could not run: {e}", original, e) from e

        if result.returncode != 0:
            raise FormatError((result.stderr or result.stdout).strip(), original)

        logger.debug(f"Formatted generated code with {self.gofmt_command}")
        return result.stdout
