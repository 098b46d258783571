"""
Process-level settings for reexporter.

Values come from the environment and can be overridden per call:

  REEXPORTER_CONFIG_NAME   name of the configuration files to look for
                           (default: exported.yaml)
  REEXPORTER_GOFMT         formatter command run on generated code
                           (default: gofmt)
  REEXPORTER_NO_GOFMT      disable the external formatter when truthy
  GOMODCACHE / GOPATH      where required modules are looked up
  GOOS / GOARCH            target platform for build constraints (default:
                           the host)
  REEXPORTER_BUILD_TAGS    extra build tags, comma separated
"""

import os
from pathlib import Path
from typing import Optional

from pydantic import BaseModel

DEFAULT_CONFIG_NAME = "exported.yaml"
DEFAULT_GOFMT_COMMAND = "gofmt"


def default_module_cache() -> Path:
    """Locate the Go module cache the same way the go command does."""
    modcache = os.getenv("GOMODCACHE")
    if modcache:
        return Path(modcache)
    gopath = os.getenv("GOPATH")
    if gopath:
        # GOPATH may be a list; the first entry holds the module cache
        return Path(gopath.split(os.pathsep)[0]) / "pkg" / "mod"
    return Path.home() / "go" / "pkg" / "mod"


class Settings(BaseModel):
    """Settings shared by the scanner, the loader and the formatter."""
    config_name: str = DEFAULT_CONFIG_NAME
    gofmt_command: str = DEFAULT_GOFMT_COMMAND
    use_gofmt: bool = True
    module_cache: Optional[Path] = None

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            config_name=os.getenv("REEXPORTER_CONFIG_NAME", DEFAULT_CONFIG_NAME),
            gofmt_command=os.getenv("REEXPORTER_GOFMT", DEFAULT_GOFMT_COMMAND),
            use_gofmt=os.getenv("REEXPORTER_NO_GOFMT", "").lower() not in ("1", "true", "yes"),
            module_cache=default_module_cache(),
        )
