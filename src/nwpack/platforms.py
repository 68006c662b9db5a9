"""Platform profiles: the per-OS layout and capabilities of a runtime."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from .errors import UnsupportedPlatformError
from .targets import Target, normalize_platform

logger = logging.getLogger(__name__)

# (strategy, stage name) pairs shared by every platform
BUILD_STAGES: tuple[tuple[str, str], ...] = (
    ("required", "load-manifest"),
    ("required", "reset-build-dir"),
    ("required", "copy-runtime"),
    ("optional", "inject-codec"),
    ("required", "embed-application"),
    ("required", "patch-metadata"),
    ("optional", "replace-icon"),
)


@dataclass(frozen=True)
class PlatformProfile:
    """Describes where things live inside a runtime and how it is branded.

    Paths are POSIX-style and relative to the build directory.
    """

    name: str
    app_dir: str
    metadata_format: str
    metadata_file: str
    executable: str
    codec_library: str
    icon_option: str
    icon_slot: str
    bundle_root: str | None = None
    bundle_extension: str | None = None
    locale_pattern: re.Pattern[str] | None = None
    stages: tuple[tuple[str, str], ...] = BUILD_STAGES


DARWIN = PlatformProfile(
    name="darwin",
    bundle_root="nwjs.app",
    bundle_extension="app",
    app_dir="nwjs.app/Contents/Resources/app.nw",
    metadata_format="plist",
    metadata_file="nwjs.app/Contents/Info.plist",
    executable="nwjs.app/Contents/MacOS/nwjs",
    codec_library="libffmpeg.dylib",
    icon_option="mac_icns",
    icon_slot="nwjs.app/Contents/Resources/app.icns",
    locale_pattern=re.compile(r"/nwjs\.app/Contents/Resources/[a-zA-Z0-9_]+\.lproj"),
    stages=(*BUILD_STAGES, ("required", "rename-bundle")),
)

WIN32 = PlatformProfile(
    name="win32",
    app_dir="package.nw",
    metadata_format="manifest",
    metadata_file="nw.exe.manifest",
    executable="nw.exe",
    codec_library="ffmpeg.dll",
    icon_option="win_ico",
    icon_slot="app.ico",
)

LINUX = PlatformProfile(
    name="linux",
    app_dir="package.nw",
    metadata_format="launcher",
    metadata_file="{launcher}.desktop",
    executable="nw",
    codec_library="libffmpeg.so",
    icon_option="linux_icon",
    icon_slot="app.png",
)

PROFILES: dict[str, PlatformProfile] = {p.name: p for p in (DARWIN, WIN32, LINUX)}


def profile_for(target: Target | str) -> PlatformProfile:
    """Return the profile for a target or platform name."""
    platform = target.platform_id if isinstance(target, Target) else normalize_platform(target)
    profile = PROFILES.get(platform)
    if profile is None:
        raise UnsupportedPlatformError(f"no build profile for platform '{platform}'")
    logger.debug("Using '%s' profile for platform '%s'", profile.name, platform)
    return profile
