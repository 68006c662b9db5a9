"""Stage ABC and stage registration."""

from __future__ import annotations

from abc import ABC, abstractmethod

from .context import BuildContext

_stage_registry: dict[str, type[Stage]] = {}


def stage(name: str):
    """Register a Stage class under a pipeline stage name."""

    def decorator(cls):
        cls.name = name
        _stage_registry[name] = cls
        return cls

    return decorator


class Stage(ABC):
    """Base class for all pipeline stages."""

    name: str = ""

    # read-only stages still run during a dry run
    readonly: bool = False

    def enabled(self, ctx: BuildContext) -> bool:
        """Whether the options in ``ctx`` ask for this stage (defaults to True)."""
        return True

    @abstractmethod
    def run(self, ctx: BuildContext) -> None:
        """Perform the stage, recording results on the context."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"
