"""Build targets and the platform token vocabulary."""

from __future__ import annotations

import logging
import platform
import sys
from collections.abc import Iterable

from pydantic import BaseModel

logger = logging.getLogger(__name__)

PLATFORM_TOKENS: dict[str, tuple[str, str]] = {
    "win32": ("win", "x86"),
    "win64": ("win", "x64"),
    "linux32": ("linux", "x86"),
    "linux64": ("linux", "x64"),
    "osx32": ("osx", "x86"),
    "osx64": ("osx", "x64"),
}

_PLATFORM_IDS: dict[str, str] = {
    "osx": "darwin",
    "mac": "darwin",
    "darwin": "darwin",
    "win": "win32",
    "win32": "win32",
    "windows": "win32",
    "linux": "linux",
}

_ARCH_IDS: dict[str, str] = {
    "x86": "ia32",
    "ia32": "ia32",
    "i386": "ia32",
    "i686": "ia32",
    "x64": "x64",
    "x86_64": "x64",
    "amd64": "x64",
}

# runtime distributions are published under these short names
_DIST_PLATFORMS: dict[str, str] = {"darwin": "osx", "win32": "win", "linux": "linux"}
_DIST_ARCHES: dict[str, str] = {"ia32": "ia32", "x64": "x64"}


def normalize_platform(name: str) -> str:
    """Map any known platform alias to darwin, win32 or linux.

    Unknown names are returned lowercased and untouched.
    """
    key = name.lower()
    return _PLATFORM_IDS.get(key, key)


def normalize_arch(name: str) -> str:
    """Map any known architecture alias to ia32 or x64."""
    key = name.lower()
    return _ARCH_IDS.get(key, key)


class Target(BaseModel):
    """An immutable (platform, architecture) pair."""

    model_config = {"frozen": True}

    platform: str
    arch: str

    @property
    def platform_id(self) -> str:
        return normalize_platform(self.platform)

    @property
    def arch_id(self) -> str:
        return normalize_arch(self.arch)

    @property
    def build_name(self) -> str:
        """Canonical name used for build directories, e.g. ``osx-x64``."""
        plat = _DIST_PLATFORMS.get(self.platform_id, self.platform_id)
        arch = _DIST_ARCHES.get(self.arch_id, self.arch_id)
        return f"{plat}-{arch}"

    def __str__(self) -> str:
        return self.build_name


def host_target() -> Target:
    """Return the target describing the running interpreter's host."""
    return Target(platform=sys.platform, arch=platform.machine() or "x64")


def parse_platforms(platforms: str | Iterable[str] | None) -> list[Target]:
    """Parse a platform token list into targets, preserving order.

    Unrecognized tokens are logged once each and skipped. An empty list
    selects the host platform.
    """
    if platforms is None:
        tokens: list[str] = []
    elif isinstance(platforms, str):
        tokens = platforms.split(",")
    else:
        tokens = list(platforms)

    tokens = [tok.strip() for tok in tokens if tok.strip()]
    if not tokens:
        target = host_target()
        logger.debug("No platforms given; using host target %s", target)
        return [target]

    targets: list[Target] = []
    for token in tokens:
        pair = PLATFORM_TOKENS.get(token)
        if pair is None:
            logger.warning("Unrecognized platform '%s'; skipping", token)
            continue
        targets.append(Target(platform=pair[0], arch=pair[1]))

    return targets
