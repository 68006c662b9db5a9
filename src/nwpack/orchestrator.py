"""Build orchestration: one request, many targets, one at a time."""

from __future__ import annotations

import logging
from pathlib import Path

from .pipeline import build_bundle
from .platforms import profile_for
from .providers import BinaryProvider, CodecProvider, SpecVersionResolver, VersionResolver
from .request import BuildRequest

logger = logging.getLogger(__name__)


class BuildOrchestrator:
    """Resolve the runtime version, then package each requested target in turn."""

    def __init__(
        self,
        binary_provider: BinaryProvider,
        *,
        codec_provider: CodecProvider | None = None,
        version_resolver: VersionResolver | None = None,
    ) -> None:
        self.binary_provider = binary_provider
        self.codec_provider = codec_provider
        self.version_resolver = version_resolver or SpecVersionResolver()

    def build(self, request: BuildRequest, *, dry_run: bool = False) -> list[Path]:
        """Build every target of ``request``; the first failure aborts the rest."""
        version, flavor = self.version_resolver.resolve(request.version)
        targets = request.targets
        logger.info(
            "Building '%s' with runtime %s (%s) for %d target(s)",
            request.name,
            version,
            flavor,
            len(targets),
        )

        results: list[Path] = []
        for target in targets:
            # fail before downloading anything for a platform we can't package
            profile_for(target)

            binary_dir = self.binary_provider.fetch(
                version=version,
                target=target,
                flavor=flavor,
                mirror=request.options.mirror,
            )
            build_dir = build_bundle(
                request.source,
                binary_dir,
                version,
                target,
                request.options,
                codec_provider=self.codec_provider,
                dry_run=dry_run,
            )
            logger.info("%s build: %s", target, build_dir)
            results.append(build_dir)

        return results
