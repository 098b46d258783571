"""
Configuration models for exported.yaml.

Example:

    common:
      output: exported.go
      exclude:
        names: ["/^Test/"]
    exports:
      - import: ./internal/store
        exclude:
          functions: true
        rename:
          Open: OpenStore
"""

from enum import Enum
from typing import Dict, List, NamedTuple, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .filter import Filter

DEFAULT_OUTPUT = "exported.go"


class ExportKind(str, Enum):
    TYPE = "type"
    VARIABLE = "variable"
    CONSTANT = "constant"
    FUNCTION = "function"


class ExportDecision(NamedTuple):
    """Outcome of ModuleExport.decide for one identifier."""
    name: str
    included: bool
    reason: str = ""


def is_exported(identifier: str) -> bool:
    """Go's rule: an identifier is exported if it starts with an upper-case letter."""
    return bool(identifier) and identifier[0].isupper()


class Exclusion(BaseModel):
    """What kinds of symbols to leave out of the generated file."""
    model_config = ConfigDict(extra="ignore")

    types: bool = False      # Do not export types
    variables: bool = False  # Do not export variables
    constants: bool = False  # Do not export constants
    functions: bool = False  # Do not export functions
    names: List[Filter] = Field(default_factory=list)  # Do not export names matching these filters
    files: List[Filter] = Field(default_factory=list)  # Do not export from files (base name, no extension) matching these

    @field_validator("names", "files", mode="before")
    @classmethod
    def _none_is_empty(cls, value):
        return [] if value is None else value

    @field_validator("types", "variables", "constants", "functions", mode="before")
    @classmethod
    def _none_is_false(cls, value):
        return False if value is None else value

    def excludes_kind(self, kind: ExportKind) -> bool:
        return {
            ExportKind.TYPE: self.types,
            ExportKind.VARIABLE: self.variables,
            ExportKind.CONSTANT: self.constants,
            ExportKind.FUNCTION: self.functions,
        }[kind]

    def merged_with(self, default: "Exclusion") -> "Exclusion":
        """
        Combine with the shared default entry.

        Kind flags are OR-ed; the default's filters are appended after this
        entry's own filters without de-duplication.
        """
        return Exclusion(
            types=self.types or default.types,
            variables=self.variables or default.variables,
            constants=self.constants or default.constants,
            functions=self.functions or default.functions,
            names=list(self.names) + list(default.names),
            files=list(self.files) + list(default.files),
        )


class ModuleExport(BaseModel):
    """Export settings for one Go package (or the shared `common` entry)."""
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    import_path: str = Field("", alias="import")  # Package import path, "./x" is relative to the config's package
    output: str = ""                                # Output file name
    exclude: Exclusion = Field(default_factory=Exclusion)
    rename: Dict[str, str] = Field(default_factory=dict)  # Original name -> exported name

    @field_validator("import_path", "output", mode="before")
    @classmethod
    def _none_is_blank(cls, value):
        return "" if value is None else value

    @field_validator("exclude", mode="before")
    @classmethod
    def _none_is_default_exclusion(cls, value):
        return {} if value is None else value

    @field_validator("rename", mode="before")
    @classmethod
    def _none_is_empty_map(cls, value):
        return {} if value is None else value

    def include_file(self, file_name: str) -> bool:
        """
        Check a source file against the file filters.

        Args:
            file_name: Base name of the file without the .go extension

        Returns:
            False if any file filter matches, True otherwise
        """
        return not any(f.match(file_name) for f in self.exclude.files)

    def decide(self, identifier: str, kind: ExportKind) -> ExportDecision:
        """
        Decide whether an identifier is exported and under which name.

        Checks run in a fixed order: naming convention, kind exclusion,
        name filters, and only then renaming.
        """
        if not identifier or not is_exported(identifier):
            return ExportDecision("", False, "not exported")

        if self.exclude.excludes_kind(kind):
            return ExportDecision(identifier, False, f"{kind.value}s excluded")

        for f in self.exclude.names:
            if f.match(identifier):
                return ExportDecision(identifier, False, f"name filter {f.text}")

        return ExportDecision(self.rename.get(identifier, identifier), True)

    def export_as(self, identifier: str, kind: ExportKind) -> Tuple[str, bool]:
        """Return (export name, included) for an identifier."""
        decision = self.decide(identifier, kind)
        return decision.name, decision.included

    def merged_with(self, default: "ModuleExport") -> "ModuleExport":
        """Apply the shared default entry to this entry."""
        rename = dict(self.rename)
        # Default entries overwrite the entry's own mapping on conflict
        rename.update(default.rename)
        return ModuleExport(
            import_path=self.import_path,
            output=self.output or default.output,
            exclude=self.exclude.merged_with(default.exclude),
            rename=rename,
        )


class Configuration(BaseModel):
    """The whole exported.yaml file."""
    model_config = ConfigDict(extra="ignore")

    common: ModuleExport = Field(default_factory=ModuleExport)  # Shared default entry
    exports: List[ModuleExport] = Field(default_factory=list)   # Per-package entries

    @field_validator("common", mode="before")
    @classmethod
    def _none_is_default_common(cls, value):
        return {} if value is None else value

    @field_validator("exports", mode="before")
    @classmethod
    def _none_is_no_exports(cls, value):
        return [] if value is None else value
