"""
reexporter - generate Go files that forward selected symbols of other
packages through a single package.
"""

__version__ = "0.1.0"

# Core exports
from reexporter.config import Configuration, ModuleExport, load_config, parse_config
from reexporter.exporter import Exporter, ExportRegistry, GoFormatter
from reexporter.module import ModuleResolver
from reexporter.scanner import generate_all
from reexporter.schemas import GenerationResult

__all__ = [
    "__version__",
    "Configuration",
    "ExportRegistry",
    "Exporter",
    "GenerationResult",
    "GoFormatter",
    "ModuleExport",
    "ModuleResolver",
    "generate_all",
    "load_config",
    "parse_config",
]
