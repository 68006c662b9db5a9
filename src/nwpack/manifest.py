"""Application descriptor (package.json) loading."""

from __future__ import annotations

import json
import logging
from pathlib import Path

from pydantic import BaseModel, ValidationError

from .errors import NotFoundError, ParseError

logger = logging.getLogger(__name__)

MANIFEST_FILE = "package.json"


class Manifest(BaseModel):
    """The subset of package.json used to brand a bundle."""

    model_config = {"frozen": True, "extra": "allow", "strict": True}

    name: str
    version: str


def load_manifest(source: str | Path) -> Manifest:
    """Read and validate the descriptor found in an application directory."""
    path = Path(source) / MANIFEST_FILE
    logger.debug("Reading manifest: %s", path)

    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise NotFoundError(f"manifest not found: {path}") from None
    except UnicodeDecodeError as exc:
        raise ParseError(f"{path}: {exc}") from exc
    except OSError as exc:
        raise NotFoundError(f"{path}: {exc}") from exc

    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ParseError(f"{path}: {exc}") from exc

    if not isinstance(data, dict):
        raise ParseError(f"{path}: expected a JSON object")

    try:
        return Manifest.model_validate(data)
    except ValidationError as exc:
        raise ParseError(f"{path}: {exc}") from exc
