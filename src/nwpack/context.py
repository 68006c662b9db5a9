"""Runtime execution context for the build pipeline."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .manifest import Manifest
    from .platforms import PlatformProfile
    from .providers import CodecProvider
    from .request import BuildOptions
    from .targets import Target


class BuildContext:
    """Mutable state passed through the stages of a single pipeline run."""

    def __init__(
        self,
        source: Path,
        runtime_dir: Path,
        version: str,
        target: Target,
        profile: PlatformProfile,
        options: BuildOptions,
        *,
        codec_provider: CodecProvider | None = None,
        dry_run: bool = False,
    ) -> None:
        self.source = source
        self.runtime_dir = runtime_dir
        self.version = version
        self.target = target
        self.profile = profile
        self.options = options
        self.codec_provider = codec_provider
        self.dry_run = dry_run

        # filled in by the stages as the run progresses
        self.manifest: Manifest | None = None
        self.build_name: str | None = None
        self.build_dir: Path | None = None
        self.codec_path: Path | None = None
        self.installed = False
        self.bundle_path: Path | None = None

    @property
    def app_dir(self) -> Path:
        """Directory inside the bundle that receives the application source."""
        return self.require_build_dir() / self.profile.app_dir

    def require_manifest(self) -> Manifest:
        if self.manifest is None:
            raise RuntimeError("manifest has not been loaded")
        return self.manifest

    def require_build_dir(self) -> Path:
        if self.build_dir is None:
            raise RuntimeError("build directory has not been computed")
        return self.build_dir
