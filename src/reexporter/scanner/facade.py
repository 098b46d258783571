import os
import time
from pathlib import Path
from typing import Dict, List, Optional

import pathspec

from reexporter.config import ModuleExport, load_config
from reexporter.exceptions import ConfigLoadError
from reexporter.exporter import Exporter, Formatter, GoFormatter
from reexporter.logging_config import logger
from reexporter.module import ModuleResolver
from reexporter.parser import PackageLoader
from reexporter.schemas import GenerationResult
from reexporter.settings import Settings
from reexporter.tracing import trace
from .config import DEFAULT_IGNORE_PATTERNS, output_name, validate_output_name


def find_config_files(root: Path, config_name: str) -> List[Path]:
    """
    Find every configuration file below root, sorted by path.

    Directories matching DEFAULT_IGNORE_PATTERNS are not entered.
    """
    root = Path(root)
    spec = pathspec.PathSpec.from_lines("gitwildmatch", DEFAULT_IGNORE_PATTERNS)

    found: List[Path] = []
    for current, dirs, files in os.walk(root):
        current_path = Path(current)

        # Prune in place so os.walk does not descend
        kept = []
        for d in sorted(dirs):
            rel = (current_path / d).relative_to(root).as_posix() + "/"
            if spec.match_file(rel):
                logger.debug(f"Ignoring directory '{rel}' due to ignore rules.")
            else:
                kept.append(d)
        dirs[:] = kept

        if config_name in files:
            found.append(current_path / config_name)

    return sorted(found)


def group_by_output(exports: List[ModuleExport], package_path: str) -> Dict[str, List[ModuleExport]]:
    """Group merged entries by resolved output file name, first-seen order."""
    groups: Dict[str, List[ModuleExport]] = {}
    for export in exports:
        groups.setdefault(output_name(export.output, package_path), []).append(export)
    return groups


@trace
def generate_config(
    config_path: Path,
    settings: Optional[Settings] = None,
    dry_run: bool = False,
    resolver: Optional[ModuleResolver] = None,
    formatter: Optional[Formatter] = None,
) -> List[GenerationResult]:
    """
    Run the pipeline for one configuration file.

    Every output file named by its entries is one generation unit. Nothing
    is written for a unit that fails.

    Raises:
        ReexporterError: On the first failing unit.
    """
    settings = settings or Settings.from_env()
    resolver = resolver or ModuleResolver()
    if formatter is None:
        formatter = GoFormatter(use_gofmt=settings.use_gofmt, gofmt_command=settings.gofmt_command)

    config_path = Path(config_path)
    config = load_config(config_path)

    directory = config_path.parent
    module = resolver.resolve(directory)
    package_path = module.package_path(str(directory))
    loader = PackageLoader(module, settings.module_cache)

    results: List[GenerationResult] = []
    if not config.exports:
        logger.warning(f"No exports configured in {config_path}")
        return results

    for name, exports in group_by_output(config.exports, package_path).items():
        problems = validate_output_name(name)
        if problems:
            raise ConfigLoadError(str(config_path), "; ".join(problems))

        logger.info(f"Generating {name} for {package_path} from {len(exports)} package(s)")
        exporter = Exporter(exports, module, package_path, loader=loader, formatter=formatter)
        code = exporter.generate()

        output_path = directory / name
        if not dry_run:
            output_path.write_text(code, encoding="utf-8")
            logger.info(f"Wrote {output_path}")

        results.append(
            GenerationResult(
                config_path=str(config_path),
                output_path=str(output_path),
                package_path=package_path,
                code=code,
                written=not dry_run,
                **exporter.registry.counts(),
            )
        )
    return results


@trace
def generate_all(
    root: Path,
    settings: Optional[Settings] = None,
    dry_run: bool = False,
    resolver: Optional[ModuleResolver] = None,
    formatter: Optional[Formatter] = None,
) -> List[GenerationResult]:
    """
    Generate the forwarding files for every configuration file below root.

    Args:
        root: Directory to search
        settings: Process settings; read from the environment when None
        dry_run: Render and format without writing files
        resolver: Module resolver shared across configuration files
        formatter: Replacement for the default GoFormatter

    Returns:
        One GenerationResult per generated file, in processing order

    Raises:
        ReexporterError: The first failure aborts the run; files written
            before it are kept.
    """
    start_time = time.time()
    settings = settings or Settings.from_env()
    resolver = resolver or ModuleResolver()
    if formatter is None:
        formatter = GoFormatter(use_gofmt=settings.use_gofmt, gofmt_command=settings.gofmt_command)

    root = Path(root)
    logger.info(f"Searching '{root}' for {settings.config_name} files")
    config_files = find_config_files(root, settings.config_name)
    logger.info(f"Found {len(config_files)} configuration file(s)")

    results: List[GenerationResult] = []
    for config_path in config_files:
        results.extend(
            generate_config(config_path, settings, dry_run=dry_run, resolver=resolver, formatter=formatter)
        )

    logger.info(f"Generated {len(results)} file(s) in {time.time() - start_time:.2f} seconds.")
    return results
