from pathlib import Path
from typing import Union

import yaml
from pydantic import ValidationError

from reexporter.exceptions import ConfigLoadError
from reexporter.logging_config import logger
from .models import DEFAULT_OUTPUT, Configuration


def parse_config(text: str, source: str = "<string>") -> Configuration:
    """
    Parse exported.yaml content and merge the `common` entry into every export.

    Args:
        text: YAML document
        source: Name used in error messages

    Returns:
        Configuration whose exports already carry the merged defaults

    Raises:
        ConfigLoadError: On YAML syntax errors or invalid structure.
        FilterCompileError: When a /regex/ filter does not compile.
    """
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ConfigLoadError(source, str(e)) from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigLoadError(source, f"expected a mapping at top level, got {type(data).__name__}")

    try:
        config = Configuration.model_validate(data)
    except ValidationError as e:
        raise ConfigLoadError(source, str(e)) from e

    if not config.common.output:
        config.common.output = DEFAULT_OUTPUT

    config.exports = [export.merged_with(config.common) for export in config.exports]

    logger.debug(f"Loaded {len(config.exports)} export entries from {source}")
    return config


def load_config(path: Union[str, Path]) -> Configuration:
    """Load the exporter configuration from the given YAML file."""
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except (IOError, UnicodeDecodeError) as e:
        raise ConfigLoadError(str(path), str(e)) from e

    return parse_config(text, source=str(path))
