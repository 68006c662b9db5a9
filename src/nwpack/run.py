"""Run mode: stage a runtime in a scratch directory and launch it."""

from __future__ import annotations

import logging
import shutil
import subprocess
import tempfile
import time
from collections.abc import Callable, Sequence
from pathlib import Path

from pydantic import BaseModel

from . import fsutil
from .codec import inject_codec
from .errors import DownloadError, ExternalProcessError, NotFoundError
from .platforms import PlatformProfile, profile_for
from .providers import BinaryProvider, CodecProvider, SpecVersionResolver, VersionResolver
from .request import CodecPolicy
from .targets import Target, host_target

logger = logging.getLogger(__name__)

SETTLE_DELAY = 1.0


class RunOptions(BaseModel):
    """Options for launching an application with a runtime.

    As with builds, the default 'latest' version needs a resolver that can look
    up releases.
    """

    model_config = {"extra": "forbid"}

    version: str = "latest"
    with_ffmpeg: bool = False
    codec_policy: CodecPolicy = CodecPolicy.BEST_EFFORT
    detached: bool = False
    mirror: str | None = None


def get_executable(runtime_dir: Path, profile: PlatformProfile) -> Path:
    """Locate the runtime's entry point executable."""
    executable = runtime_dir / profile.executable
    if not executable.is_file():
        raise NotFoundError(f"runtime executable not found: {executable}")
    return executable


class RunPipeline:
    """Launch an application directly with a staged runtime."""

    def __init__(
        self,
        binary_provider: BinaryProvider,
        *,
        codec_provider: CodecProvider | None = None,
        version_resolver: VersionResolver | None = None,
        target: Target | None = None,
        settle_delay: float = SETTLE_DELAY,
        launcher: Callable[..., subprocess.Popen] = subprocess.Popen,
    ) -> None:
        self.binary_provider = binary_provider
        self.codec_provider = codec_provider
        self.version_resolver = version_resolver or SpecVersionResolver()
        self.target = target
        self.settle_delay = settle_delay
        self.launcher = launcher

    def run(self, args: Sequence[str], options: RunOptions | None = None) -> int:
        """Launch the runtime with ``args``.

        Attached runs return the child's exit code. Detached runs return 0
        once the settling delay has passed.
        """
        options = options if options is not None else RunOptions()
        target = self.target or host_target()
        profile = profile_for(target)

        version, flavor = self.version_resolver.resolve(options.version)
        binary_dir = self.binary_provider.fetch(
            version=version,
            target=target,
            flavor=flavor,
            mirror=options.mirror,
        )

        working_dir = Path(tempfile.mkdtemp(prefix="nwpack-run-"))
        logger.info("Working directory: %s", working_dir)
        detached = False
        try:
            fsutil.copy_tree(binary_dir, working_dir)

            if options.with_ffmpeg:
                if self.codec_provider is None:
                    raise DownloadError("codec inclusion requested but no codec provider is configured")
                logger.info("Installing codec for runtime %s", version)
                inject_codec(
                    working_dir,
                    profile,
                    self.codec_provider,
                    version=version,
                    target=target,
                    policy=options.codec_policy,
                )

            command = [str(get_executable(working_dir, profile)), *args]

            if options.detached:
                self._launch(command, start_new_session=True)
                detached = True
                # exiting too early can take the child down during startup
                time.sleep(self.settle_delay)
                logger.info("Exiting without waiting for the runtime process")
                return 0

            code = self._launch(command).wait()
        finally:
            # a detached child keeps using its working directory
            if not detached:
                shutil.rmtree(working_dir, ignore_errors=True)

        logger.info("Runtime exited with code %d", code)
        return code

    def _launch(self, command: list[str], **kwargs) -> subprocess.Popen:
        logger.debug("Launching %s", command)
        try:
            return self.launcher(command, **kwargs)
        except OSError as exc:
            raise ExternalProcessError(f"cannot launch {command[0]}: {exc}") from exc
