"""
Function signatures and type expressions of Go declarations.

Type expressions are copied from the source with one change: names of
package-level declarations get the source package as qualifier, so that
`func New(o Options) *Client` is forwarded as
`func New(o store.Options) *store.Client`.
"""

from typing import AbstractSet, List, Optional, Set, Tuple

from tree_sitter import Node

from reexporter.schemas import Parameter, Signature
from .imports import GoImport
from .language import field_nodes, node_text

_PARAMETER_NODES = (
    "parameter_declaration",
    "variadic_parameter_declaration",
    "type_parameter_declaration",
)


class TypeQualifier:
    """
    Renders type expressions of one source file for use in another package.

    Records which imports of the file the rendered expressions refer to.
    """

    def __init__(self, package: str, local_names: AbstractSet[str], imports: List[GoImport]):
        self.package = package
        self.local_names = set(local_names)
        self._imports_by_name = {
            imp.name: imp for imp in imports if imp.alias not in (".", "_")
        }
        self.referenced: List[GoImport] = []

    def _reference(self, package_name: str) -> None:
        imp = self._imports_by_name.get(package_name)
        if imp is not None and imp not in self.referenced:
            self.referenced.append(imp)

    def render(self, node: Optional[Node], source: bytes, type_params: AbstractSet[str] = frozenset()) -> str:
        if node is None:
            return ""

        inserts: List[Tuple[int, bytes]] = []
        prefix = (self.package + ".").encode("utf-8")
        stack = [node]
        while stack:
            n = stack.pop()
            if n.type == "qualified_type":
                self._reference(node_text(n.child_by_field_name("package"), source))
                continue
            if n.type == "selector_expression":
                operand = n.child_by_field_name("operand")
                if operand is not None and operand.type == "identifier":
                    self._reference(node_text(operand, source))
                    continue
            if n.type == "type_identifier" or (
                n.type == "identifier" and (n.parent is None or n.parent.type not in _PARAMETER_NODES)
            ):
                name = node_text(n, source)
                if name in self.local_names and name not in type_params:
                    inserts.append((n.start_byte, prefix))
                continue
            stack.extend(n.children)

        text = source[node.start_byte:node.end_byte]
        for offset, insert in sorted(inserts, reverse=True):
            rel = offset - node.start_byte
            text = text[:rel] + insert + text[rel:]
        return text.decode("utf-8")


def type_parameter_names(list_node: Optional[Node], source: bytes) -> Set[str]:
    if list_node is None:
        return set()
    return {
        node_text(name, source)
        for decl in list_node.named_children
        if decl.type == "type_parameter_declaration"
        for name in field_nodes(decl, "name")
    }


def parameters_from_list(
    list_node: Optional[Node],
    source: bytes,
    qualifier: TypeQualifier,
    type_params: AbstractSet[str] = frozenset(),
) -> List[Parameter]:
    """
    Expand a parameter, result or type-parameter list.

    `a, b T` yields two parameters typed T, an unnamed field yields one
    parameter with an empty name, and `xs ...T` yields xs typed T with the
    variadic flag set.
    """
    params: List[Parameter] = []
    if list_node is None:
        return params

    for decl in list_node.named_children:
        if decl.type not in _PARAMETER_NODES:
            continue
        type_text = qualifier.render(decl.child_by_field_name("type"), source, type_params)
        variadic = decl.type == "variadic_parameter_declaration"
        if type_text.startswith("..."):
            type_text, variadic = type_text[3:], True

        names = [node_text(n, source) for n in field_nodes(decl, "name")] or [""]
        for name in names:
            params.append(Parameter(name=name, type=type_text, variadic=variadic))

    return params


def parse_type_parameters(node: Node, source: bytes, qualifier: TypeQualifier) -> List[Parameter]:
    """Type parameters of a generic type or function declaration."""
    list_node = node.child_by_field_name("type_parameters")
    names = type_parameter_names(list_node, source)
    return parameters_from_list(list_node, source, qualifier, names)


def parse_function_signature(decl: Node, source: bytes, qualifier: TypeQualifier) -> Signature:
    """Parse the signature of a function_declaration node."""
    list_node = decl.child_by_field_name("type_parameters")
    type_params = type_parameter_names(list_node, source)

    sig = Signature(
        types=parameters_from_list(list_node, source, qualifier, type_params),
        parameters=parameters_from_list(decl.child_by_field_name("parameters"), source, qualifier, type_params),
    )

    result = decl.child_by_field_name("result")
    if result is not None:
        if result.type == "parameter_list":
            sig.results = parameters_from_list(result, source, qualifier, type_params)
        else:
            sig.results = [Parameter(type=qualifier.render(result, source, type_params))]

    return sig
