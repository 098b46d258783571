from pathlib import Path
from typing import Any, Callable, ClassVar, Dict, List, Protocol, Tuple, runtime_checkable

from pydantic import BaseModel, Field


@runtime_checkable
class Projectable(Protocol):
    """
    Records whose properties template helpers may read by name.

    project() raises KeyError for names the record does not expose.
    """
    def project(self, prop: str) -> Any: ...


class ProjectableModel(BaseModel):
    """
    Pydantic base implementing Projectable.

    Only the names listed in __projections__ are reachable; zero-argument
    methods are called, fields are returned as-is.
    """
    __projections__: ClassVar[Tuple[str, ...]] = ()

    def project(self, prop: str) -> Any:
        if prop not in self.__projections__:
            raise KeyError(prop)
        value = getattr(self, prop)
        return value() if callable(value) else value


class Comment(BaseModel):
    """Documentation and line comment attached to a declaration."""
    doc: List[str] = Field(default_factory=list)  # Doc comment lines, comment markers removed
    line: str = ""                                # Trailing comment on the declaration's line


class Parameter(ProjectableModel):
    """
    A type parameter, parameter or result of a function.
    """
    __projections__ = ("name", "type", "variadic", "variable", "parameter")

    name: str = ""          # Empty for unnamed parameters
    type: str               # Type expression, qualified for use in the generated package
    variadic: bool = False  # The type was written as ...T

    def variable(self) -> str:
        """The parameter as it appears in a call."""
        if self.variadic:
            return self.name + "..."
        return self.name

    def parameter(self) -> str:
        """The parameter as it appears in a signature."""
        text = f"{self.name} " if self.name else ""
        if self.variadic:
            text += "..."
        return text + self.type

    def __str__(self) -> str:
        return self.parameter()


class Signature(ProjectableModel):
    """Type parameters, parameters and results of a function."""
    __projections__ = ("types", "parameters", "results")

    types: List[Parameter] = Field(default_factory=list)
    parameters: List[Parameter] = Field(default_factory=list)
    results: List[Parameter] = Field(default_factory=list)

    def forwarded(self, package: str = "") -> "Signature":
        """
        Copy with every parameter named, so a wrapper can pass them on.

        Unnamed and blank parameters are called p0, p1, ... by position.
        Parameters and named results spelled like package would hide it in
        the wrapper body; they become p<i> and r<i>.
        """
        def usable(name: str) -> bool:
            return bool(name) and name != "_" and name != package

        def hides_package(name: str) -> bool:
            return bool(package) and name == package

        if all(usable(p.name) for p in self.parameters) and not any(hides_package(r.name) for r in self.results):
            return self

        taken = {p.name for p in self.types + self.parameters + self.results}
        if package:
            taken.add(package)

        def rename(params: List[Parameter], prefix: str, keep: Callable[[str], bool]) -> List[Parameter]:
            renamed = []
            for i, p in enumerate(params):
                if keep(p.name):
                    renamed.append(p)
                    continue
                candidate = f"{prefix}{i}"
                while candidate in taken:
                    candidate = "_" + candidate
                taken.add(candidate)
                renamed.append(p.model_copy(update={"name": candidate}))
            return renamed

        return self.model_copy(update={
            "parameters": rename(self.parameters, "p", usable),
            "results": rename(self.results, "r", lambda name: not hides_package(name)),
        })

    def results_need_parentheses(self) -> bool:
        return len(self.results) > 1 or any(r.name for r in self.results)


class SymbolRecord(ProjectableModel):
    """A type, variable or constant forwarded into the generated file."""
    __projections__ = ("export_name", "name", "package", "comment", "type_parameters")

    export_name: str   # Name used in the generated file
    name: str          # Original name in the source package
    package: str       # Package name qualifying the original
    comment: Comment = Field(default_factory=Comment)
    type_parameters: List[Parameter] = Field(default_factory=list)  # Only for generic types


class FunctionSymbolRecord(SymbolRecord):
    """A function forwarded through a wrapper."""
    __projections__ = SymbolRecord.__projections__ + ("signature",)

    signature: Signature = Field(default_factory=Signature)


class GoModule(BaseModel):
    """The go.mod enclosing a directory."""
    root: str                   # Directory holding go.mod
    path: str                   # Module path from the module directive
    requires: Dict[str, str] = Field(default_factory=dict)  # Required module path -> version

    def package_path(self, directory: str) -> str:
        """Canonical import path of a directory inside this module."""
        rel = Path(directory).resolve().relative_to(Path(self.root).resolve())
        if str(rel) in ("", "."):
            return self.path
        return f"{self.path}/{rel.as_posix()}"


class GenerationResult(BaseModel):
    """One generated file."""
    config_path: str
    output_path: str
    package_path: str
    code: str
    types: int = 0
    variables: int = 0
    constants: int = 0
    functions: int = 0
    written: bool = False
