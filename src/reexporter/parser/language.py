from functools import lru_cache
from typing import Iterator, List, Optional, Tuple

import tree_sitter_go as tsgo
from tree_sitter import Language, Node, Parser

from reexporter.logging_config import logger


@lru_cache(maxsize=None)
def go_language() -> Language:
    """The tree-sitter Go grammar, loaded once."""
    lang = Language(tsgo.language())
    logger.debug("Loaded tree-sitter Go grammar")
    return lang


def new_parser() -> Parser:
    """
    Create a tree-sitter parser for Go.

    Parsers are not shared between callers; each loader or formatter keeps
    its own.
    """
    parser = Parser()
    parser.language = go_language()
    return parser


def node_text(node: Optional[Node], source: bytes) -> str:
    """Source text covered by a node."""
    if node is None:
        return ""
    return source[node.start_byte:node.end_byte].decode("utf-8")


def field_nodes(node: Node, field_name: str) -> List[Node]:
    """All children stored under a field (e.g. every name of `a, b int`)."""
    return list(node.children_by_field_name(field_name))


def iter_errors(node: Node) -> Iterator[Node]:
    """Yield ERROR and MISSING nodes below node, in source order."""
    if not node.has_error:
        return
    stack = [node]
    while stack:
        current = stack.pop()
        if current.type == "ERROR" or current.is_missing:
            yield current
            continue
        if current.has_error:
            stack.extend(reversed(current.children))


def first_error(node: Node) -> Optional[Tuple[int, int, str]]:
    """(line, column, description) of the first syntax error, 1-based."""
    for err in iter_errors(node):
        row, column = err.start_point
        if err.is_missing:
            return row + 1, column + 1, f"missing {err.type}"
        return row + 1, column + 1, "syntax error"
    return None
