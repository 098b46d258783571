# Custom exceptions for reexporter

from typing import Optional


class ReexporterError(Exception):
    """Base exception for all application-specific errors."""
    pass


class ConfigLoadError(ReexporterError):
    """Raised when an exported.yaml file cannot be read or is malformed."""
    def __init__(self, path: str, message: str):
        self.path = path
        self.message = message
        super().__init__(f"Failed to load configuration {path}: {message}")


class FilterCompileError(ReexporterError):
    """Raised when a /regex/ filter does not compile."""
    def __init__(self, pattern: str, message: str):
        self.pattern = pattern
        self.message = message
        super().__init__(f"Invalid filter pattern '{pattern}': {message}")


class ModuleResolutionError(ReexporterError):
    """Raised when no go.mod is found above a directory."""
    def __init__(self, directory: str, message: str = "go.mod not found"):
        self.directory = directory
        self.message = message
        super().__init__(f"{message} (searched upward from {directory})")


class ModuleLoadError(ReexporterError):
    """Raised when a configured Go package cannot be resolved or parsed."""
    def __init__(self, import_path: str, message: str = "failed to load packages"):
        self.import_path = import_path
        self.message = message
        super().__init__(f"{message}: {import_path}")


class BuildConstraintError(ReexporterError):
    """Raised when a //go:build expression cannot be parsed."""
    def __init__(self, expression: str, message: str):
        self.expression = expression
        self.message = message
        super().__init__(f"Invalid build constraint '{expression.strip()}': {message}")


def number_lines(code: str) -> str:
    """Prefix every line of code with its 1-based line number."""
    return "".join(
        f"  {n:4d}: {line}\n" for n, line in enumerate(code.split("\n"), start=1)
    )


class GeneratedCodeError(ReexporterError):
    """
    Base for failures that happen after symbol collection.

    Carries the complete unformatted text so the defect can be located
    without re-running the generator.
    """
    stage = "generating"

    def __init__(self, message: str, code: str, cause: Optional[BaseException] = None):
        self.message = message
        self.code = code
        self.cause = cause
        super().__init__(message)

    def __str__(self) -> str:
        return f"Error {self.stage} generated code: {self.message}\n" + number_lines(self.code)


class RenderError(GeneratedCodeError):
    """Raised when the template fails to execute."""
    stage = "rendering"


class FormatError(GeneratedCodeError):
    """Raised when the rendered code fails validation or gofmt."""
    stage = "formatting"
