"""
This facade exposes the public API for the exporter module.
"""
from .collector import SymbolCollector, SymbolDecision, resolve_import_path
from .exporter import Exporter
from .formatter import Formatter, GoFormatter
from .registry import ExportRegistry
from .template import map_property, parenthesize, render_template

__all__ = [
    "ExportRegistry",
    "Exporter",
    "Formatter",
    "GoFormatter",
    "SymbolCollector",
    "SymbolDecision",
    "map_property",
    "parenthesize",
    "render_template",
    "resolve_import_path",
]
