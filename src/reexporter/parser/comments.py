"""
Doc and line comments of Go declarations.

tree-sitter keeps comments as sibling nodes, so the comment group that
documents a declaration is rebuilt from the siblings around it, following
the rules of go/ast: a doc comment group ends on the line right above the
declaration, and a line comment starts on the declaration's last line.
"""

import re
from typing import List, Optional

from tree_sitter import Node

from reexporter.schemas import Comment
from .language import node_text

# //go:generate, //line, //export ... are directives, not documentation
_DIRECTIVE_RE = re.compile(r"^(line |extern |export |[a-z0-9]+:[a-z0-9])")


def _previous(node: Node) -> Optional[Node]:
    """Previous named sibling, skipping punctuation and terminators."""
    sib = node.prev_sibling
    while sib is not None and not sib.is_named:
        sib = sib.prev_sibling
    return sib


def _next(node: Node) -> Optional[Node]:
    sib = node.next_sibling
    while sib is not None and not sib.is_named:
        sib = sib.next_sibling
    return sib


def comment_text(raw_comments: List[str]) -> str:
    """
    Text of a comment group with the comment markers removed.

    Mirrors go/ast.CommentGroup.Text: directives are dropped, trailing
    whitespace is removed, leading and trailing blank lines are removed and
    runs of blank lines collapse to one.
    """
    lines: List[str] = []
    for raw in raw_comments:
        if raw.startswith("//"):
            body = raw[2:]
            if _DIRECTIVE_RE.match(body):
                continue
            if body.startswith(" "):
                body = body[1:]
            lines.append(body)
        elif raw.startswith("/*"):
            lines.extend(raw[2:-2].split("\n"))
        else:
            lines.append(raw)

    lines = [line.rstrip() for line in lines]

    result: List[str] = []
    for line in lines:
        if not line and (not result or not result[-1]):
            continue
        result.append(line)
    while result and not result[-1]:
        result.pop()

    return "\n".join(result)


def doc_comments(node: Node, source: bytes) -> List[str]:
    """
    Raw comments forming the doc group directly above node.

    A comment that trails the previous declaration on its own line does not
    count as documentation.
    """
    group: List[Node] = []
    expected_row = node.start_point[0] - 1
    sib = _previous(node)

    while sib is not None and sib.type == "comment" and sib.end_point[0] == expected_row:
        before = _previous(sib)
        if before is not None and before.type != "comment" and before.end_point[0] == sib.start_point[0]:
            break
        group.insert(0, sib)
        expected_row = sib.start_point[0] - 1
        sib = before

    return [node_text(c, source) for c in group]


def line_comment(node: Node, source: bytes) -> List[str]:
    """Raw comments starting on the last line of node."""
    group: List[Node] = []
    row = node.end_point[0]
    sib = _next(node)
    while sib is not None and sib.type == "comment" and sib.start_point[0] == row:
        group.append(sib)
        row = sib.end_point[0]
        sib = _next(sib)
    return [node_text(c, source) for c in group]


def parse_comment(node: Node, source: bytes, decl: Optional[Node] = None) -> Comment:
    """
    Comment of a declaration or of one spec inside a declaration.

    Args:
        node: The spec (type_spec, const_spec, ...) or the declaration itself
        source: File content
        decl: Enclosing declaration; its doc group is used when the spec has
            none of its own, and its line comment when it holds a single spec
    """
    doc = doc_comments(node, source)
    if not doc and decl is not None and decl is not node:
        doc = doc_comments(decl, source)

    line = line_comment(node, source)
    if not line and decl is not None and decl is not node and decl.end_point[0] == node.end_point[0]:
        line = line_comment(decl, source)

    c = Comment()
    line_text = comment_text(line).strip()
    if line_text:
        c.line = line_text
    doc_text = comment_text(doc).strip()
    if doc_text:
        c.doc = doc_text.split("\n")
    return c
