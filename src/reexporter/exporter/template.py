"""
Template rendering of an ExportRegistry.

The Go template lives in templates/exported.go.j2 and is rendered with
Jinja2. Besides the Jinja2 built-ins it can call:

  map_property(items, name)        -> [item.name for item in items]
  parenthesize(brackets, cond, s)  -> s wrapped in brackets when cond holds
  comment_block(comment, indent)   -> doc comment lines
  line_comment(comment)            -> " // text" or ""
"""

from collections.abc import Mapping, Sequence
from functools import lru_cache
from typing import Any, List, Optional

import jinja2

from reexporter.exceptions import RenderError
from reexporter.logging_config import logger
from reexporter.schemas import Comment, Projectable
from .registry import ExportRegistry

TEMPLATE_NAME = "exported.go.j2"
_MISSING = object()


def map_property(items: Any, prop: str) -> List[Any]:
    """
    Extract the property prop from each element of a list.

    Mappings are read by key, Projectable records through project().
    Elements without the property are skipped; anything that is not a list
    yields an empty list.
    """
    if isinstance(items, (str, bytes)) or not isinstance(items, Sequence):
        return []

    result = []
    for item in items:
        value = _MISSING
        if isinstance(item, Mapping):
            value = item.get(prop, _MISSING)
        elif isinstance(item, Projectable):
            try:
                value = item.project(prop)
            except KeyError:
                value = _MISSING
        if value is not _MISSING:
            result.append(value)
    return result


def _holds(condition: Any) -> bool:
    """Emptiness semantics: False, 0, "", None and empty containers do not hold."""
    if isinstance(condition, bool):
        return condition
    if condition is None:
        return False
    if isinstance(condition, (int, float)):
        return condition != 0
    if isinstance(condition, (str, bytes, Sequence, Mapping, set, frozenset)):
        return len(condition) != 0
    return bool(condition)


def parenthesize(*params: Any) -> str:
    """
    Conditionally wrap a string in brackets.

    The last parameter is the value to wrap. Optional parameters before it:
    a two-character bracket string (default "()") and then a condition
    (default True).

        parenthesize("x")                 -> "(x)"
        parenthesize("[]", "x")           -> "[x]"
        parenthesize("[]", [], "x")       -> "x"
    """
    if len(params) == 0 or len(params) > 3:
        return ""

    brackets = "()"
    condition = True

    if len(params) > 1 and isinstance(params[0], str) and len(params[0]) == 2:
        brackets = params[0]
    if len(params) > 2:
        condition = _holds(params[1])

    last = params[-1]
    s = last if isinstance(last, str) else str(last)

    if not condition:
        return s
    return brackets[0] + s + brackets[1]


def comment_block(comment: Optional[Comment], indent: int = 0) -> str:
    if comment is None:
        return ""
    prefix = "\t" * indent
    return "".join(
        f"{prefix}// {line}\n" if line else f"{prefix}//\n" for line in comment.doc
    )


def line_comment(comment: Optional[Comment]) -> str:
    if comment is None or not comment.line:
        return ""
    return f" // {comment.line}"


def create_environment(loader: Optional[jinja2.BaseLoader] = None) -> jinja2.Environment:
    env = jinja2.Environment(
        loader=loader or jinja2.PackageLoader("reexporter.exporter", "templates"),
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
        undefined=jinja2.StrictUndefined,
        autoescape=False,
    )
    env.globals.update(
        map_property=map_property,
        parenthesize=parenthesize,
        comment_block=comment_block,
        line_comment=line_comment,
    )
    return env


@lru_cache(maxsize=1)
def default_template() -> jinja2.Template:
    return create_environment().get_template(TEMPLATE_NAME)


def render_template(exports: ExportRegistry, template: Optional[jinja2.Template] = None) -> str:
    """
    Render the registry into Go source.

    Raises:
        RenderError: If the template fails; carries the output produced
            before the failure.
    """
    template = template or default_template()
    chunks: List[str] = []
    try:
        for chunk in template.generate(exports=exports):
            chunks.append(chunk)
    except Exception as e:
        logger.error(f"Template {template.name} failed: {e}")
        raise RenderError(f"{type(e).__name__}: {e}", "".join(chunks), e) from e
    return "".join(chunks)
