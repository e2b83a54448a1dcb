"""Decide which rebuild steps a set of changed files calls for.

Both predicates err toward inclusion: an unneeded install or build is
harmless, a skipped one leaves the service running stale code.
"""

from pathlib import PurePosixPath
from typing import Iterable

DEPENDENCY_FILES = frozenset({
    "package.json",
    "package-lock.json",
    "npm-shrinkwrap.json",
    "yarn.lock",
    "pnpm-lock.yaml",
    "bun.lockb",
})

SOURCE_EXTENSIONS = frozenset({
    ".ts", ".tsx", ".mts", ".cts",
    ".js", ".jsx", ".mjs", ".cjs",
})

BUILD_CONFIG_FILES = frozenset({
    "tsconfig.json",
    "tsconfig.build.json",
})

SOURCE_PREFIXES = ("src/",)


def _is_build_config(name: str) -> bool:
    if name in BUILD_CONFIG_FILES:
        return True
    # tsconfig.<anything>.json
    return name.startswith("tsconfig.") and name.endswith(".json")


def dependencies_changed(changes: Iterable[str]) -> bool:
    """True if any changed path is a dependency manifest or lockfile."""
    return any(PurePosixPath(path).name in DEPENDENCY_FILES for path in changes)


def build_required(changes: Iterable[str]) -> bool:
    """True if any changed path is source code, build config, or under src/."""
    for path in changes:
        posix = PurePosixPath(path)
        if posix.suffix in SOURCE_EXTENSIONS:
            return True
        if _is_build_config(posix.name):
            return True
        if path.startswith(SOURCE_PREFIXES):
            return True
    return False
