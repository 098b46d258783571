"""
PackageLoader: resolve a Go import path to a directory and parse it.

Resolution order:
  1. the main module (import path under the go.mod module path)
  2. <module root>/vendor/<import path>
  3. the module cache, at the version named by the longest matching
     require directive of go.mod

Packages are parsed without type checking. Files left out by build
constraints (see build.py) are skipped. Files are read in lexicographic
order of their names so collection order never depends on the filesystem.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Set

from reexporter.exceptions import BuildConstraintError, ModuleLoadError
from reexporter.logging_config import logger
from reexporter.schemas import GoModule
from .build import BuildContext
from .go_parser import GO_EXTENSION, TEST_SUFFIX, GoFile, declared_names, parse_go_source
from .imports import GoImport
from .language import new_parser


@dataclass
class GoPackage:
    """A loaded Go package."""
    import_path: str
    name: str
    directory: Path
    files: List[GoFile] = field(default_factory=list)
    imports: List[GoImport] = field(default_factory=list)  # Direct imports, first occurrence order

    def local_names(self) -> Set[str]:
        names: Set[str] = set()
        for go_file in self.files:
            names |= declared_names(go_file)
        return names


def escape_module_path(path: str) -> str:
    """Module cache escaping: every upper-case letter becomes '!' + lower-case."""
    return "".join("!" + c.lower() if c.isupper() else c for c in path)


class PackageLoader:
    """
    Loads Go packages for one main module.

    Usage:
        loader = PackageLoader(module)
        pkg = loader.load("example.com/app/internal/store")
    """

    def __init__(self, module: GoModule, module_cache: Optional[Path] = None,
                 build: Optional[BuildContext] = None):
        self.module = module
        self.module_cache = module_cache
        self.build = build or BuildContext.from_env()
        self._parser = new_parser()
        self._names: Dict[str, Optional[str]] = {}

    def resolve_directory(self, import_path: str) -> Path:
        """
        Map an import path to the directory holding its sources.

        Raises:
            ModuleLoadError: If no candidate directory exists.
        """
        root = Path(self.module.root)
        module_path = self.module.path

        if import_path == module_path:
            return root
        if import_path.startswith(module_path + "/"):
            return root / import_path[len(module_path) + 1:]

        vendored = root / "vendor" / import_path
        if vendored.is_dir():
            return vendored

        required = self._required_module(import_path)
        if required is not None and self.module_cache is not None:
            req_path, version = required
            base = self.module_cache / f"{escape_module_path(req_path)}@{escape_module_path(version)}"
            sub = import_path[len(req_path):].lstrip("/")
            return base / sub if sub else base

        raise ModuleLoadError(import_path, f"package is not in module {module_path} and not required by go.mod")

    def _required_module(self, import_path: str):
        best = None
        for req_path, version in self.module.requires.items():
            if import_path == req_path or import_path.startswith(req_path + "/"):
                if best is None or len(req_path) > len(best[0]):
                    best = (req_path, version)
        return best

    def _source_paths(self, directory: Path) -> List[Path]:
        """Go files of a directory the go command would consider, sorted."""
        return sorted(
            p for p in directory.iterdir()
            if p.is_file()
            and p.name.endswith(GO_EXTENSION)
            and not p.name.endswith(TEST_SUFFIX)
            and not p.name.startswith(("_", "."))
        )

    def _read_source(self, path: Path) -> Optional[bytes]:
        """Source of a file, or None when build constraints leave it out."""
        if not self.build.match_file_name(path.name):
            logger.debug(f"Skipping {path.name}: not built for {self.build.goos}/{self.build.goarch}")
            return None
        source = path.read_bytes()
        if not self.build.match_source(source.decode("utf-8")):
            logger.debug(f"Skipping {path.name}: excluded by build constraint")
            return None
        return source

    def package_name(self, import_path: str) -> Optional[str]:
        """
        Name from the package clause of an import path, or None when the
        package is not reachable from this module (standard library
        packages, missing requirements).
        """
        if import_path in self._names:
            return self._names[import_path]

        name = None
        try:
            directory = self.resolve_directory(import_path)
        except ModuleLoadError:
            directory = None
        if directory is not None and directory.is_dir():
            for path in self._source_paths(directory):
                try:
                    source = self._read_source(path)
                except (OSError, UnicodeDecodeError, BuildConstraintError) as e:
                    logger.debug(f"{path}: {e}")
                    continue
                if source is not None:
                    name = parse_go_source(source, path, self._parser).package or None
                    break

        self._names[import_path] = name
        return name

    def load(self, import_path: str) -> GoPackage:
        """
        Parse every .go file of a package that takes part in the build.

        Test files and files excluded by build constraints are skipped.

        Raises:
            ModuleLoadError: If the package cannot be found, has no Go files,
                mixes package clauses or any file has syntax errors. Per-file
                details are logged, the error itself stays aggregate.
        """
        directory = self.resolve_directory(import_path)
        if not directory.is_dir():
            raise ModuleLoadError(import_path, f"directory {directory} does not exist")

        paths = self._source_paths(directory)
        if not paths:
            raise ModuleLoadError(import_path, f"no Go files in {directory}")

        files: List[GoFile] = []
        failures = 0
        for path in paths:
            try:
                source = self._read_source(path)
            except (OSError, UnicodeDecodeError, BuildConstraintError) as e:
                logger.error(f"{path}: {e}")
                failures += 1
                continue
            if source is None:
                continue

            logger.debug(f"Parsing Go file: {path}")
            go_file = parse_go_source(source, path, self._parser)
            error = go_file.error
            if error is not None:
                line, column, description = error
                logger.error(f"{path}:{line}:{column}: {description}")
                failures += 1
                continue
            files.append(go_file)

        if failures:
            raise ModuleLoadError(import_path)
        if not files:
            raise ModuleLoadError(import_path, f"build constraints exclude all Go files in {directory}")

        names = {f.package for f in files}
        if len(names) != 1:
            logger.error(f"{directory}: found packages {', '.join(sorted(names))}")
            raise ModuleLoadError(import_path, "multiple packages in one directory")

        imports: List[GoImport] = []
        seen: Set[str] = set()
        for go_file in files:
            for imp in go_file.imports:
                if imp.path not in seen:
                    seen.add(imp.path)
                    imports.append(imp)

        pkg = GoPackage(
            import_path=import_path,
            name=names.pop(),
            directory=directory,
            files=files,
            imports=imports,
        )
        self._names[import_path] = pkg.name
        logger.debug(f"Loaded package {pkg.name} ({import_path}) with {len(files)} files")
        return pkg
