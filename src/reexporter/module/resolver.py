"""
Locate the go.mod enclosing a directory.

The resolver owns its cache, so independent resolvers (one per test, one
per worker) never share state.
"""

import re
from pathlib import Path
from typing import Dict, Tuple, Union

from reexporter.exceptions import ModuleResolutionError
from reexporter.logging_config import logger
from reexporter.schemas import GoModule

GO_MOD = "go.mod"

_MODULE_RE = re.compile(r'^module\s+("?)([^"\s]+)\1\s*$')
_REQUIRE_RE = re.compile(r'^([^\s"]+|"[^"]+")\s+(\S+)$')


def _strip_comment(line: str) -> str:
    idx = line.find("//")
    if idx != -1:
        line = line[:idx]
    return line.strip()


def parse_go_mod(text: str, source: str = GO_MOD) -> Tuple[str, Dict[str, str]]:
    """
    Read the module path and the required modules from go.mod content.

    Only the module and require directives are interpreted.

    Raises:
        ModuleResolutionError: If there is no module directive.
    """
    module_path = ""
    requires: Dict[str, str] = {}
    in_require_block = False

    for raw in text.splitlines():
        line = _strip_comment(raw)
        if not line:
            continue

        if in_require_block:
            if line == ")":
                in_require_block = False
                continue
            m = _REQUIRE_RE.match(line)
            if m:
                requires[m.group(1).strip('"')] = m.group(2)
            continue

        m = _MODULE_RE.match(line)
        if m:
            module_path = m.group(2)
            continue

        if line.startswith("require"):
            rest = line[len("require"):].strip()
            if rest == "(":
                in_require_block = True
                continue
            m = _REQUIRE_RE.match(rest)
            if m:
                requires[m.group(1).strip('"')] = m.group(2)

    if not module_path:
        raise ModuleResolutionError(source, "go.mod has no module directive")

    return module_path, requires


class ModuleResolver:
    """
    Finds and caches the Go module of directories.

    Usage:
        resolver = ModuleResolver()
        module = resolver.resolve(Path("internal/api"))
        module.package_path("internal/api")  # example.com/app/internal/api
    """

    def __init__(self):
        self._cache: Dict[Path, GoModule] = {}

    def resolve(self, directory: Union[str, Path]) -> GoModule:
        """
        Return the module whose go.mod is closest above directory.

        Raises:
            ModuleResolutionError: If the filesystem root is reached without
                finding a go.mod, or the go.mod is unusable.
        """
        start = Path(directory).resolve()
        cached = self._cache.get(start)
        if cached is not None:
            return cached

        current = start
        while True:
            go_mod = current / GO_MOD
            if go_mod.is_file():
                module = self._load(go_mod)
                self._cache[start] = module
                self._cache[current] = module
                logger.debug(f"Resolved module {module.path} for {start}")
                return module

            parent = current.parent
            if parent == current:
                raise ModuleResolutionError(str(start))
            current = parent

    def _load(self, go_mod: Path) -> GoModule:
        try:
            text = go_mod.read_text(encoding="utf-8")
        except (IOError, UnicodeDecodeError) as e:
            raise ModuleResolutionError(str(go_mod.parent), f"cannot read go.mod: {e}") from e

        module_path, requires = parse_go_mod(text, source=str(go_mod))
        return GoModule(root=str(go_mod.parent), path=module_path, requires=requires)

    def clear(self) -> None:
        self._cache.clear()

    def __len__(self) -> int:
        return len(self._cache)
