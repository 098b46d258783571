from typing import List

# Directories never searched for configuration files
DEFAULT_IGNORE_PATTERNS = [
    ".git/",
    ".*/",
    "vendor/",
    "node_modules/",
    "testdata/",
    "__pycache__/",
]

# Prefix of an output name replaced by the package's last path segment
PACKAGE_NAME_MARKER = "__"


def output_name(output: str, package_path: str) -> str:
    """
    Resolve the output file name of a generation unit.

    A leading "__" is replaced by the last segment of the package path:
    "__gen.go" in package example.com/app/api becomes "apigen.go".
    """
    if output.startswith(PACKAGE_NAME_MARKER):
        segment = package_path.rstrip("/").rsplit("/", 1)[-1]
        return segment + output[len(PACKAGE_NAME_MARKER):]
    return output


def validate_output_name(output: str) -> List[str]:
    """Problems with a resolved output name; empty when it is usable."""
    problems = []
    if not output:
        problems.append("output name is empty")
    if "/" in output or "\\" in output:
        problems.append(f"output name '{output}' must not contain a path separator")
    return problems
