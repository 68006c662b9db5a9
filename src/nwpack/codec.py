"""Codec library replacement shared by the build and run pipelines."""

from __future__ import annotations

import logging
import tempfile
from pathlib import Path

from . import fsutil
from .errors import NotFoundError
from .platforms import PlatformProfile
from .providers import CodecProvider
from .request import CodecPolicy
from .targets import Target

logger = logging.getLogger(__name__)


def inject_codec(
    runtime_dir: Path,
    profile: PlatformProfile,
    provider: CodecProvider,
    *,
    version: str,
    target: Target,
    policy: CodecPolicy = CodecPolicy.BEST_EFFORT,
) -> Path | None:
    """Overwrite the runtime's codec library with the provided one.

    Returns the replaced file, or None when the runtime had no codec library
    and the policy is best-effort.
    """
    search_root = runtime_dir / profile.bundle_root if profile.bundle_root else runtime_dir
    with tempfile.TemporaryDirectory(prefix="nwpack-codec-") as scratch:
        codec_dir = provider.fetch(Path(scratch), version=version, target=target)
        replacement = codec_dir / profile.codec_library
        if not replacement.is_file():
            raise NotFoundError(f"codec artifact has no {profile.codec_library}: {codec_dir}")

        existing = fsutil.find_file(search_root, profile.codec_library)
        if existing is None:
            if policy is CodecPolicy.STRICT:
                raise NotFoundError(f"no {profile.codec_library} found under {search_root}")
            logger.warning("No %s found under %s; codec not replaced", profile.codec_library, search_root)
            return None

        fsutil.copy_file(replacement, existing)
        logger.debug("Replaced %s", existing)
        return existing
