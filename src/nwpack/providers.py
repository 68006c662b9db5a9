"""Version resolution and artifact providers.

Fetching runtimes and codecs over the network is left to callers; the
providers here serve artifacts that were already extracted to disk.
"""

from __future__ import annotations

import logging
import re
import shutil
from pathlib import Path
from typing import Protocol

from .errors import DownloadError, UnresolvedVersionError
from .targets import Target

logger = logging.getLogger(__name__)

DEFAULT_FLAVOR = "normal"

_VERSION_PATTERN = re.compile(r"^v?(\d+\.\d+\.\d+(?:-(?:alpha|beta|rc)\d*)?)(?:-(sdk|normal))?$")


class VersionResolver(Protocol):
    def resolve(self, spec: str) -> tuple[str, str]:
        """Return the concrete ``(version, flavor)`` for a version spec."""
        ...


class BinaryProvider(Protocol):
    def fetch(
        self,
        *,
        version: str,
        target: Target,
        flavor: str = DEFAULT_FLAVOR,
        mirror: str | None = None,
    ) -> Path:
        """Return a local directory holding the extracted runtime."""
        ...


class CodecProvider(Protocol):
    def fetch(self, scratch_dir: Path, *, version: str, target: Target) -> Path:
        """Place the codec library for a runtime into ``scratch_dir``."""
        ...


class SpecVersionResolver:
    """Resolve explicit version specs such as ``0.14.7`` or ``0.14.7-sdk``."""

    def resolve(self, spec: str) -> tuple[str, str]:
        match = _VERSION_PATTERN.match(spec.strip())
        if match is None:
            raise UnresolvedVersionError(
                f"cannot resolve version spec '{spec}'; "
                "use an explicit version or a resolver that can look up releases"
            )
        version, flavor = match.group(1), match.group(2) or DEFAULT_FLAVOR
        logger.debug("Resolved version '%s' -> %s (%s)", spec, version, flavor)
        return version, flavor


def runtime_dirname(version: str, target: Target, flavor: str = DEFAULT_FLAVOR) -> str:
    """Directory name of an extracted runtime, e.g. ``nwjs-sdk-v0.14.7-osx-x64``."""
    prefix = "nwjs-sdk" if flavor == "sdk" else "nwjs"
    return f"{prefix}-v{version}-{target.build_name}"


class LocalBinaryProvider:
    """Serve runtimes from a directory of pre-extracted distributions."""

    def __init__(self, root: str | Path) -> None:
        self.root = Path(root).expanduser()

    def fetch(
        self,
        *,
        version: str,
        target: Target,
        flavor: str = DEFAULT_FLAVOR,
        mirror: str | None = None,
    ) -> Path:
        if mirror is not None:
            logger.debug("Ignoring mirror '%s' for local runtimes", mirror)
        path = self.root / runtime_dirname(version, target, flavor)
        if not path.is_dir():
            raise DownloadError(f"runtime not available: {path}")
        logger.info("Using runtime %s", path)
        return path


class LocalCodecProvider:
    """Serve codec libraries from directories named ``<version>-<target>``."""

    def __init__(self, root: str | Path) -> None:
        self.root = Path(root).expanduser()

    def fetch(self, scratch_dir: Path, *, version: str, target: Target) -> Path:
        path = self.root / f"{version}-{target.build_name}"
        if not path.is_dir():
            raise DownloadError(f"codec not available: {path}")
        try:
            shutil.copytree(path, scratch_dir, dirs_exist_ok=True)
        except (OSError, shutil.Error) as exc:
            raise DownloadError(f"cannot extract codec from {path}: {exc}") from exc
        logger.debug("Extracted codec %s to %s", path, scratch_dir)
        return scratch_dir
