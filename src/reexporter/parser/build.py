"""
Build constraints of Go source files.

A file takes part in a build only when its name suffix (_GOOS, _GOARCH or
_GOOS_GOARCH) matches the target platform and the //go:build line in its
header holds for the target's tags. Legacy // +build lines are honoured
when a file has no //go:build line.

The target is the host platform unless GOOS or GOARCH say otherwise;
REEXPORTER_BUILD_TAGS adds tags (comma separated). cgo is never enabled.
"""

import os
import platform
import re
from dataclasses import dataclass, field
from typing import Callable, FrozenSet, List, Optional

from reexporter.exceptions import BuildConstraintError

KNOWN_OS = frozenset({
    "aix", "android", "darwin", "dragonfly", "freebsd", "hurd", "illumos", "ios", "js",
    "linux", "nacl", "netbsd", "openbsd", "plan9", "solaris", "wasip1", "windows", "zos",
})

KNOWN_ARCH = frozenset({
    "386", "amd64", "amd64p32", "arm", "armbe", "arm64", "arm64be", "loong64", "mips",
    "mipsle", "mips64", "mips64le", "mips64p32", "mips64p32le", "ppc", "ppc64", "ppc64le",
    "riscv", "riscv64", "s390", "s390x", "sparc", "sparc64", "wasm",
})

UNIX_OS = frozenset({
    "aix", "android", "darwin", "dragonfly", "freebsd", "hurd", "illumos", "ios", "linux",
    "netbsd", "openbsd", "solaris",
})

# platform.machine() -> GOARCH
_MACHINE_ARCH = {
    "x86_64": "amd64",
    "amd64": "amd64",
    "i386": "386",
    "i686": "386",
    "x86": "386",
    "aarch64": "arm64",
    "arm64": "arm64",
    "armv6l": "arm",
    "armv7l": "arm",
    "ppc64le": "ppc64le",
    "ppc64": "ppc64",
    "s390x": "s390x",
    "riscv64": "riscv64",
    "loongarch64": "loong64",
}

_GO_BUILD_RE = re.compile(r"^//go:build(\s|$)")
_PLUS_BUILD_RE = re.compile(r"^//\s*\+build(\s|$)")
_TOKEN_RE = re.compile(r"\s*(&&|\|\||!|\(|\)|[A-Za-z0-9_.]+)")
_RELEASE_TAG_RE = re.compile(r"^go1\.[0-9]+$")


def host_goos() -> str:
    return platform.system().lower()


def host_goarch() -> str:
    machine = platform.machine().lower()
    return _MACHINE_ARCH.get(machine, machine)


def header_comments(source: str) -> List[str]:
    """Line comments above the package clause."""
    lines: List[str] = []
    in_block = False
    for raw in source.splitlines():
        line = raw.strip()
        if in_block:
            in_block = "*/" not in line
            continue
        if not line:
            continue
        if line.startswith("//"):
            lines.append(line)
            continue
        if line.startswith("/*"):
            in_block = "*/" not in line[2:]
            continue
        break
    return lines


def _tokens(expr: str) -> List[str]:
    tokens: List[str] = []
    pos = 0
    expr = expr.rstrip()
    while pos < len(expr):
        m = _TOKEN_RE.match(expr, pos)
        if m is None:
            raise BuildConstraintError(expr, f"unexpected character at offset {pos}")
        tokens.append(m.group(1))
        pos = m.end()
    return tokens


class _ExprParser:
    """Recursive descent over `a && (b || !c)`."""

    def __init__(self, expr: str, has_tag: Callable[[str], bool]):
        self.expr = expr
        self.tokens = _tokens(expr)
        self.pos = 0
        self.has_tag = has_tag

    def _peek(self) -> Optional[str]:
        return self.tokens[self.pos] if self.pos < len(self.tokens) else None

    def _take(self) -> str:
        token = self._peek()
        if token is None:
            raise BuildConstraintError(self.expr, "unexpected end of expression")
        self.pos += 1
        return token

    def evaluate(self) -> bool:
        result = self._or()
        if self._peek() is not None:
            raise BuildConstraintError(self.expr, f"unexpected token {self._peek()!r}")
        return result

    def _or(self) -> bool:
        result = self._and()
        while self._peek() == "||":
            self._take()
            right = self._and()
            result = result or right
        return result

    def _and(self) -> bool:
        result = self._not()
        while self._peek() == "&&":
            self._take()
            right = self._not()
            result = result and right
        return result

    def _not(self) -> bool:
        if self._peek() == "!":
            self._take()
            return not self._not()
        return self._atom()

    def _atom(self) -> bool:
        token = self._take()
        if token == "(":
            result = self._or()
            if self._take() != ")":
                raise BuildConstraintError(self.expr, "missing )")
            return result
        if token in ("&&", "||", ")"):
            raise BuildConstraintError(self.expr, f"unexpected token {token!r}")
        return self.has_tag(token)


@dataclass(frozen=True)
class BuildContext:
    """
    Target platform and tags used to select the files of a package.

    Usage:
        build = BuildContext(goos="linux", goarch="amd64")
        build.match_file_name("os_windows.go")  # False
    """
    goos: str
    goarch: str
    tags: FrozenSet[str] = field(default_factory=frozenset)

    @classmethod
    def from_env(cls) -> "BuildContext":
        tags = os.getenv("REEXPORTER_BUILD_TAGS", "")
        return cls(
            goos=os.getenv("GOOS") or host_goos(),
            goarch=os.getenv("GOARCH") or host_goarch(),
            tags=frozenset(t.strip() for t in tags.split(",") if t.strip()),
        )

    def has_tag(self, tag: str) -> bool:
        if tag in (self.goos, self.goarch, "gc") or tag in self.tags:
            return True
        if tag == "unix":
            return self.goos in UNIX_OS
        # android implies linux, illumos implies solaris, ios implies darwin
        if (tag, self.goos) in (("linux", "android"), ("solaris", "illumos"), ("darwin", "ios")):
            return True
        return bool(_RELEASE_TAG_RE.match(tag))

    def match_file_name(self, name: str) -> bool:
        """Check the _GOOS / _GOARCH suffix of a file name."""
        stem = name.split(".", 1)[0]
        if "_" not in stem:
            return True
        parts = stem[stem.index("_"):].split("_")
        if parts and parts[-1] == "test":
            parts = parts[:-1]
        if len(parts) >= 2 and parts[-2] in KNOWN_OS and parts[-1] in KNOWN_ARCH:
            return self.has_tag(parts[-2]) and self.has_tag(parts[-1])
        if parts and (parts[-1] in KNOWN_OS or parts[-1] in KNOWN_ARCH):
            return self.has_tag(parts[-1])
        return True

    def evaluate(self, expr: str) -> bool:
        """
        Evaluate a //go:build expression.

        Raises:
            BuildConstraintError: If the expression is malformed.
        """
        return _ExprParser(expr, self.has_tag).evaluate()

    def _plus_build_line(self, options: str) -> bool:
        # Spaces separate alternatives, commas separate required terms
        for option in options.split():
            terms = option.split(",")
            if all(
                (not self.has_tag(t[1:])) if t.startswith("!") else self.has_tag(t)
                for t in terms
            ):
                return True
        return False

    def match_source(self, source: str) -> bool:
        """
        Check the build constraint in the header of a Go file.

        Raises:
            BuildConstraintError: If a //go:build expression is malformed.
        """
        header = header_comments(source)
        for line in header:
            if _GO_BUILD_RE.match(line):
                return self.evaluate(line[len("//go:build"):])

        plus_lines = [line for line in header if _PLUS_BUILD_RE.match(line)]
        return all(self._plus_build_line(line.split("+build", 1)[1]) for line in plus_lines)

