"""Build request models: what to package and how."""

from __future__ import annotations

import logging
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, Field, field_validator

from .targets import Target, parse_platforms

logger = logging.getLogger(__name__)


class CodecPolicy(str, Enum):
    """What to do when the runtime has no codec library to replace."""

    BEST_EFFORT = "best-effort"
    STRICT = "strict"


class BuildOptions(BaseModel):
    """Options shared by every target of a build."""

    model_config = {"extra": "forbid"}

    output_dir: Path | None = None
    output_name: str | None = None
    executable_name: str | None = None
    with_ffmpeg: bool = False
    codec_policy: CodecPolicy = CodecPolicy.BEST_EFFORT
    side_by_side: bool = False
    production: bool = False
    install_command: list[str] = Field(default_factory=lambda: ["npm", "install"])
    mac_icns: Path | None = None
    win_ico: Path | None = None
    linux_icon: Path | None = None
    mirror: str | None = None


class BuildRequest(BaseModel):
    """A named build: an application source, a runtime version and targets.

    ``version`` defaults to 'latest', which only a version resolver that can
    look up releases understands; ``SpecVersionResolver`` needs an explicit
    version such as '0.14.7'.
    """

    model_config = {"extra": "forbid"}

    name: str
    source: Path = Path(".")
    version: str = "latest"
    platforms: str = ""
    options: BuildOptions = Field(default_factory=BuildOptions)

    @field_validator("platforms", mode="before")
    @classmethod
    def _join_platforms(cls, value: object) -> object:
        if isinstance(value, (list, tuple)):
            return ",".join(str(v) for v in value)
        return value

    @property
    def targets(self) -> list[Target]:
        """Targets selected by the platform list, in the order given."""
        return parse_platforms(self.platforms)
