import bisect
from typing import Dict, List, Optional, Set

from reexporter.schemas import Comment, FunctionSymbolRecord, Signature, SymbolRecord


def _export_key(record: SymbolRecord) -> str:
    return record.export_name


def insert_sorted(records: List[SymbolRecord], record: SymbolRecord) -> None:
    """
    Insert keeping records sorted by export name.

    Records with equal export names keep their insertion order: the new one
    goes after every existing equal record.
    """
    bisect.insort_right(records, record, key=_export_key)


class ExportRegistry:
    """
    Everything collected for one generated file.

    Types, variables and constants are kept sorted by export name; functions
    stay in discovery order. Nothing is de-duplicated except imports.
    """

    def __init__(self, package: str):
        self.package = package                      # Package name of the generated file
        self.imports: List[str] = []                # Import paths, first-seen order
        self.import_aliases: Dict[str, str] = {}    # Import path -> explicit name
        self._seen_imports: Set[str] = set()
        self.types: List[SymbolRecord] = []
        self.variables: List[SymbolRecord] = []
        self.constants: List[SymbolRecord] = []
        self.functions: List[FunctionSymbolRecord] = []

    def add_import(self, path: str, alias: Optional[str] = None) -> None:
        """
        Add an import path if it isn't there yet.

        An alias given for a path already present is kept when the path had
        none.
        """
        if path in self._seen_imports:
            if alias and path not in self.import_aliases:
                self.import_aliases[path] = alias
            return
        self._seen_imports.add(path)
        self.imports.append(path)
        if alias:
            self.import_aliases[path] = alias

    def add_type(self, export_name: str, name: str, pkg: str, comment: Optional[Comment] = None,
                 type_parameters=None) -> SymbolRecord:
        record = SymbolRecord(
            export_name=export_name,
            name=name,
            package=pkg,
            comment=comment or Comment(),
            type_parameters=list(type_parameters or []),
        )
        insert_sorted(self.types, record)
        return record

    def add_variable(self, export_name: str, name: str, pkg: str, comment: Optional[Comment] = None) -> SymbolRecord:
        record = SymbolRecord(export_name=export_name, name=name, package=pkg, comment=comment or Comment())
        insert_sorted(self.variables, record)
        return record

    def add_constant(self, export_name: str, name: str, pkg: str, comment: Optional[Comment] = None) -> SymbolRecord:
        record = SymbolRecord(export_name=export_name, name=name, package=pkg, comment=comment or Comment())
        insert_sorted(self.constants, record)
        return record

    def add_function(self, export_name: str, name: str, pkg: str, comment: Optional[Comment] = None,
                     signature: Optional[Signature] = None) -> FunctionSymbolRecord:
        record = FunctionSymbolRecord(
            export_name=export_name,
            name=name,
            package=pkg,
            comment=comment or Comment(),
            signature=signature or Signature(),
        )
        self.functions.append(record)
        return record

    def import_specs(self) -> List[str]:
        """Import lines as they appear in the generated import block."""
        specs = []
        for path in self.imports:
            alias = self.import_aliases.get(path)
            specs.append(f'{alias} "{path}"' if alias else f'"{path}"')
        return specs

    def is_empty(self) -> bool:
        return not (self.types or self.variables or self.constants or self.functions)

    def counts(self) -> Dict[str, int]:
        return {
            "types": len(self.types),
            "variables": len(self.variables),
            "constants": len(self.constants),
            "functions": len(self.functions),
        }
