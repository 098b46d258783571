"""
This facade exposes the public API for the scanner module.
Other parts of the application should only import from here, not from
internal modules.
"""
from .config import DEFAULT_IGNORE_PATTERNS, output_name
from .facade import find_config_files, generate_all, generate_config, group_by_output

__all__ = [
    "DEFAULT_IGNORE_PATTERNS",
    "find_config_files",
    "generate_all",
    "generate_config",
    "group_by_output",
    "output_name",
]
