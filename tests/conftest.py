"""
Pytest configuration for the reexporter test suite.

This conftest.py provides:
- Machine-mode logging (suppresses console output)
- A temporary Go module on disk with example packages
- A formatter that does not depend on a Go toolchain
"""

import os
import textwrap
from pathlib import Path

import pytest

from reexporter.exporter import GoFormatter
from reexporter.logging_config import setup_logging
from reexporter.module import ModuleResolver
from reexporter.settings import Settings


# ============================================================================
# GLOBAL CONFIGURATION
# ============================================================================

def pytest_configure(config):
    """Keep test output free of log noise."""
    os.environ.setdefault("REEXPORTER_MACHINE_MODE", "1")


@pytest.fixture(autouse=True)
def setup_test_logging():
    """
    Machine mode by default - suppress console logs for clean test output.
    """
    setup_logging(level="DEBUG", suppress_console=True, force=True)


# ============================================================================
# GO MODULE FIXTURES
# ============================================================================

MODULE_PATH = "example.com/app"

AA_GO = """\
package aa

// MyEnum is an example enumeration type
type MyEnum int

const (
	EnumValue1 MyEnum = iota // EnumValue1
	EnumValue2               // EnumValue2
	EnumValue3               // EnumValue3
)

// MyVar is an example variable
var MyVar = "Hello, World!" // MyVar

// SayHello prints a greeting message using MyVar.
func SayHello() {
	println(MyVar)
}
"""

AB_GO = """\
package ab

// Sum adds two numbers of a generic type T which can be either int or float64.
func Sum[T int | float64](a, b T) (r T) {
	r = a + b
	return
}

// SumAll adds a variadic number of values of a generic type T which can be either int or float64.
func SumAll[T int | float64](values ...T) T {
	var total T
	for _, v := range values {
		total += v
	}
	return total
}
"""


def write_file(root: Path, rel: str, content: str) -> Path:
    """Write content below root, creating parent directories."""
    path = root / rel
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(textwrap.dedent(content), encoding="utf-8")
    return path


@pytest.fixture
def go_module(tmp_path):
    """
    Create a Go module with two example packages.

    Layout:
        go.mod              module example.com/app
        a/aa/aa.go          enum type, constants, variable, function
        a/ab/ab.go          generic functions
        api/                empty directory for configuration files

    Returns:
        Path to the module root.
    """
    write_file(tmp_path, "go.mod", f"module {MODULE_PATH}\n\ngo 1.22\n")
    write_file(tmp_path, "a/aa/aa.go", AA_GO)
    write_file(tmp_path, "a/ab/ab.go", AB_GO)
    (tmp_path / "api").mkdir()
    yield tmp_path


@pytest.fixture
def formatter():
    """Formatter that never shells out to gofmt."""
    return GoFormatter(use_gofmt=False)


@pytest.fixture
def settings():
    """Settings independent of the environment of the test run."""
    return Settings(use_gofmt=False, module_cache=None)


@pytest.fixture
def resolver():
    """A fresh resolver; caches are never shared between tests."""
    return ModuleResolver()
