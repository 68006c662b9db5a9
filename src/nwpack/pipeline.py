"""Build pipeline: an ordered list of stage operations for one target."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from pathlib import Path

from pydantic import BaseModel, Field

from . import stages  # noqa: F401  (registers the built-in stages)
from .context import BuildContext
from .platforms import PlatformProfile, profile_for
from .providers import CodecProvider
from .request import BuildOptions
from .stage import _stage_registry
from .stageops import Optional, Required, StageOp
from .targets import Target

logger = logging.getLogger(__name__)

_STRATEGY_MAP: dict[str, type[StageOp]] = {
    "required": Required,
    "optional": Optional,
}


class Pipeline(BaseModel):
    """A named, ordered collection of stage operations."""

    model_config = {"arbitrary_types_allowed": True}

    name: str
    ops: list[StageOp] = Field(default_factory=list)

    def __iter__(self) -> Iterator[StageOp]:
        return iter(self.ops)

    def __len__(self) -> int:
        return len(self.ops)

    @property
    def stage_names(self) -> list[str]:
        return [op.stage.name for op in self.ops]

    def build(self, ctx: BuildContext) -> None:
        """Execute every operation in order, stopping at the first failure."""
        logger.debug("Building pipeline '%s'", self.name)
        for idx, op in enumerate(self.ops):
            logger.debug("%d: %s", idx, op.stage.name)
            try:
                op(ctx)
            except Exception:
                logger.error("Stage '%s' failed for %s", op.stage.name, self.name)
                raise


def compose(profile: PlatformProfile) -> Pipeline:
    """Assemble the stage sequence a platform profile calls for."""
    ops: list[StageOp] = []
    for strategy, stage_name in profile.stages:
        if stage_name not in _stage_registry:
            raise ValueError(f"Unknown stage: '{stage_name}'")
        if strategy not in _STRATEGY_MAP:
            raise ValueError(f"Unknown strategy '{strategy}' for stage '{stage_name}'")
        stage_cls = _stage_registry[stage_name]
        logger.debug("Composing stage '%s' -> %s", stage_name, stage_cls.__name__)
        ops.append(_STRATEGY_MAP[strategy](stage_cls()))
    return Pipeline(name=profile.name, ops=ops)


def build_bundle(
    source: str | Path,
    binary_dir: str | Path,
    version: str,
    target: Target,
    options: BuildOptions | None = None,
    *,
    codec_provider: CodecProvider | None = None,
    dry_run: bool = False,
) -> Path:
    """Package one target and return the absolute path of its build directory."""
    profile = profile_for(target)
    ctx = BuildContext(
        source=Path(source).resolve(),
        runtime_dir=Path(binary_dir),
        version=version,
        target=target,
        profile=profile,
        options=options if options is not None else BuildOptions(),
        codec_provider=codec_provider,
        dry_run=dry_run,
    )

    logger.info("Packaging %s for %s", ctx.source, target)
    compose(profile).build(ctx)

    build_dir = ctx.require_build_dir()
    if ctx.codec_path is not None:
        logger.info("Bundled codec: %s", ctx.codec_path)
    logger.info("Done: %s", ctx.bundle_path or build_dir)
    return build_dir
