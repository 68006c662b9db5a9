"""StageOp strategies."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

from .context import BuildContext
from .stage import Stage

logger = logging.getLogger(__name__)


class StageOp(ABC):
    """Wraps a Stage with conditional execution logic."""

    def __init__(self, stage: Stage) -> None:
        self.stage = stage

    @abstractmethod
    def __call__(self, ctx: BuildContext) -> None: ...

    def _run(self, ctx: BuildContext) -> None:
        if ctx.dry_run and not self.stage.readonly:
            logger.info("[DRY RUN] Would run %s", self.stage.name)
        else:
            logger.info("Running %s", self.stage.name)
            self.stage.run(ctx)


class Required(StageOp):
    """Always run the stage."""

    def __call__(self, ctx: BuildContext) -> None:
        self._run(ctx)


class Optional(StageOp):
    """Run only if the stage is enabled for the current options."""

    def __call__(self, ctx: BuildContext) -> None:
        if self.stage.enabled(ctx):
            self._run(ctx)
        else:
            logger.debug("Skipping %s; not requested", self.stage.name)
