import posixpath
from pathlib import Path
from typing import List, Optional, Sequence

from reexporter.config import ModuleExport
from reexporter.logging_config import logger
from reexporter.parser import PackageLoader
from reexporter.schemas import GoModule
from reexporter.tracing import trace
from .collector import SymbolCollector, SymbolDecision
from .formatter import Formatter, GoFormatter
from .registry import ExportRegistry
from .template import render_template


class Exporter:
    """
    Runs one generation unit: collect every configured package, render the
    registry and hand the text to the formatter.

    Usage:
        exporter = Exporter(config.exports, module, "example.com/app/api")
        code = exporter.generate()
    """

    def __init__(
        self,
        exports: Sequence[ModuleExport],
        module: GoModule,
        package_path: str,
        loader: Optional[PackageLoader] = None,
        formatter: Optional[Formatter] = None,
        module_cache: Optional[Path] = None,
    ):
        self.exports = list(exports)
        self.module = module
        self.package_path = package_path
        self.loader = loader or PackageLoader(module, module_cache)
        self.formatter = formatter if formatter is not None else GoFormatter()
        self.registry: Optional[ExportRegistry] = None
        self.decisions: List[SymbolDecision] = []

    @property
    def package_name(self) -> str:
        return posixpath.basename(self.package_path)

    @trace
    def generate(self) -> str:
        """
        Generate the forwarding file.

        Raises:
            ModuleLoadError: If a configured package cannot be loaded.
            RenderError: If the template fails.
            FormatError: If the rendered code is invalid or gofmt fails.
        """
        self.collect()
        code = render_template(self.registry)
        return self.formatter(code)

    def collect(self) -> ExportRegistry:
        """Fill a fresh registry from every configured package, in order."""
        self.registry = ExportRegistry(self.package_name)
        collector = SymbolCollector(self.registry, self.loader, self.package_path)
        for export in self.exports:
            pkg = collector.collect(export)
            logger.debug(f"Collected {pkg.import_path} ({len(pkg.files)} files)")
        self.decisions = collector.decisions
        return self.registry
