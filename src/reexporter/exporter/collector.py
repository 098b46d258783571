import posixpath
from typing import List, NamedTuple

from tree_sitter import Node

from reexporter.config import ExportKind, ModuleExport
from reexporter.logging_config import logger
from reexporter.parser import GoFile, GoImport, GoPackage, PackageLoader, TypeQualifier, parse_function_signature
from reexporter.parser.comments import parse_comment
from reexporter.parser.go_parser import type_specs, value_specs
from reexporter.parser.language import field_nodes, node_text
from reexporter.parser.signature import parse_type_parameters
from .registry import ExportRegistry


class SymbolDecision(NamedTuple):
    """What happened to one declared name."""
    package: str
    file: str
    kind: str
    name: str
    export_name: str
    included: bool
    reason: str = ""


def resolve_import_path(import_path: str, package_path: str) -> str:
    """Resolve ./ and ../ imports against the generated package's import path."""
    if import_path.startswith(("./", "../")):
        return posixpath.normpath(posixpath.join(package_path, import_path))
    return import_path


def _import_alias(imp: GoImport) -> str:
    """Explicit name worth keeping in the generated import block."""
    if imp.alias in (None, ".", "_"):
        return ""
    if imp.alias == GoImport(imp.path).name:
        return ""
    return imp.alias


class SymbolCollector:
    """
    Walks the top-level declarations of configured packages and fills an
    ExportRegistry with everything the configuration accepts.
    """

    def __init__(self, registry: ExportRegistry, loader: PackageLoader, package_path: str):
        self.registry = registry
        self.loader = loader
        self.package_path = package_path
        self.decisions: List[SymbolDecision] = []

    def collect(self, export: ModuleExport) -> GoPackage:
        """
        Collect one configured package.

        Raises:
            ModuleLoadError: If the package cannot be loaded.
        """
        import_path = resolve_import_path(export.import_path, self.package_path)

        # The package itself is always imported
        self.registry.add_import(import_path)

        pkg = self.loader.load(import_path)
        # The package clause may differ from the last path element
        self.registry.add_import(import_path, _import_alias(GoImport(import_path, pkg.name)))

        # Non-standard imports may be needed by forwarded declarations;
        # unused ones are pruned by the formatter
        for imp in pkg.imports:
            if not imp.is_standard:
                imp = self._named(imp)
                self.registry.add_import(imp.path, _import_alias(imp))

        local_names = pkg.local_names()
        for go_file in pkg.files:
            if not export.include_file(go_file.stem):
                logger.debug(f"Skipping {go_file.path.name}: excluded by file filter")
                self._decide(pkg, go_file, "file", go_file.stem, "", False, "file filter")
                continue

            qualifier = TypeQualifier(pkg.name, local_names, [self._named(i) for i in go_file.imports])
            for decl in go_file.declarations():
                if decl.type == "type_declaration":
                    self._collect_types(export, pkg, go_file, decl, qualifier)
                elif decl.type in ("const_declaration", "var_declaration"):
                    self._collect_values(export, pkg, go_file, decl)
                elif decl.type == "function_declaration":
                    self._collect_function(export, pkg, go_file, decl, qualifier)
                # Methods are reached through their types

            for imp in qualifier.referenced:
                self.registry.add_import(imp.path, _import_alias(imp))

        return pkg

    def _named(self, imp: GoImport) -> GoImport:
        """Give an unaliased import its package clause name when the path suggests another."""
        if imp.alias or imp.is_standard:
            return imp
        real = self.loader.package_name(imp.path)
        if real and real != imp.name:
            return GoImport(imp.path, real)
        return imp

    def _decide(self, pkg: GoPackage, go_file: GoFile, kind: str, name: str,
                export_name: str, included: bool, reason: str = "") -> None:
        self.decisions.append(
            SymbolDecision(pkg.import_path, go_file.path.name, kind, name, export_name, included, reason)
        )

    def _check(self, export: ModuleExport, pkg: GoPackage, go_file: GoFile, name: str, kind: ExportKind):
        decision = export.decide(name, kind)
        self._decide(pkg, go_file, kind.value, name, decision.name, decision.included, decision.reason)
        if decision.included:
            logger.debug(f"Exporting {kind.value} {pkg.name}.{name} as {decision.name}")
        return decision

    def _collect_types(self, export: ModuleExport, pkg: GoPackage, go_file: GoFile,
                       decl: Node, qualifier: TypeQualifier) -> None:
        source = go_file.source
        for spec in type_specs(decl):
            name = node_text(spec.child_by_field_name("name"), source)
            decision = self._check(export, pkg, go_file, name, ExportKind.TYPE)
            if not decision.included:
                continue
            self.registry.add_type(
                decision.name,
                name,
                pkg.name,
                parse_comment(spec, source, decl),
                parse_type_parameters(spec, source, qualifier),
            )

    def _collect_values(self, export: ModuleExport, pkg: GoPackage, go_file: GoFile, decl: Node) -> None:
        source = go_file.source
        if decl.type == "const_declaration":
            kind, add = ExportKind.CONSTANT, self.registry.add_constant
        else:
            kind, add = ExportKind.VARIABLE, self.registry.add_variable

        for spec in value_specs(decl):
            comment = None
            for name_node in field_nodes(spec, "name"):
                name = node_text(name_node, source)
                decision = self._check(export, pkg, go_file, name, kind)
                if not decision.included:
                    continue
                if comment is None:
                    comment = parse_comment(spec, source, decl)
                add(decision.name, name, pkg.name, comment)

    def _collect_function(self, export: ModuleExport, pkg: GoPackage, go_file: GoFile,
                          decl: Node, qualifier: TypeQualifier) -> None:
        source = go_file.source
        name = node_text(decl.child_by_field_name("name"), source)
        decision = self._check(export, pkg, go_file, name, ExportKind.FUNCTION)
        if not decision.included:
            return

        comment = parse_comment(decl, source)
        # Only doc comments are carried for functions
        comment.line = ""
        self.registry.add_function(
            decision.name,
            name,
            pkg.name,
            comment,
            parse_function_signature(decl, source, qualifier),
        )
