"""
This facade exposes the public API for the config module.
"""
from .filter import Filter
from .loader import load_config, parse_config
from .models import (
    DEFAULT_OUTPUT,
    Configuration,
    Exclusion,
    ExportDecision,
    ExportKind,
    ModuleExport,
    is_exported,
)

__all__ = [
    "DEFAULT_OUTPUT",
    "Configuration",
    "Exclusion",
    "ExportDecision",
    "ExportKind",
    "Filter",
    "ModuleExport",
    "is_exported",
    "load_config",
    "parse_config",
]
