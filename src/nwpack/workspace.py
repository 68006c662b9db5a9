"""Workspace: a typed collection of build requests parsed from HCL files."""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable, Iterator, Mapping
from pathlib import Path
from typing import Any, overload

from . import hcl
from .request import BuildOptions, BuildRequest
from .resolve import Resolver

logger = logging.getLogger(__name__)

_OPTION_KEYS = frozenset(BuildOptions.model_fields)


def _default_variables() -> dict[str, Any]:
    return {"env": dict(os.environ), "CWD": os.getcwd}


def _merge_blocks(value: Any) -> dict[str, Any]:
    """Collapse a repeated HCL block (a list of dicts) into one dict."""
    if isinstance(value, list):
        merged: dict[str, Any] = {}
        for block in value:
            merged.update(block)
        return merged
    return dict(value)


def _build_request(
    name: str,
    data: dict[str, Any],
    base_dir: Path | None,
    resolver: Resolver,
) -> BuildRequest:
    """Build a single BuildRequest from parsed HCL data."""
    logger.debug("Building request '%s'", name)
    data = resolver.resolve(dict(data))

    options = _merge_blocks(data.pop("options", {}))
    for key in list(data):
        if key in _OPTION_KEYS:
            options[key] = data.pop(key)

    # relative paths are taken from the directory of the defining file
    if base_dir is not None:
        if "source" in data:
            data["source"] = base_dir / data["source"]
        for key in ("output_dir", "mac_icns", "win_ico", "linux_icon"):
            if options.get(key) is not None:
                options[key] = base_dir / options[key]

    return BuildRequest(name=name, options=BuildOptions(**options), **data)


class Workspace(Mapping[str, BuildRequest]):
    """Configured workspace that accumulates parsed builds and resolves them on access."""

    def __init__(
        self,
        *,
        context: dict[str, Any] | None = None,
        variables: dict[str, Any] | None = None,
    ) -> None:
        self._context = context
        self._resolver = Resolver(variables if variables is not None else _default_variables())
        self._pending: dict[str, tuple[dict[str, Any], Path | None]] = {}

    def load(self, file: str | Path) -> None:
        """Parse an HCL file and add its build blocks."""
        path = Path(file)
        self.add(hcl.load(path, context=self._context), base_dir=path.parent.resolve())

    def add(self, data: dict[str, Any], *, base_dir: Path | None = None) -> None:
        """Extract build blocks from a parsed data dict.

        Raises ValueError if a build name is already loaded.
        """
        for block in data.get("build", []):
            for name, build_data in block.items():
                if name in self._pending:
                    raise ValueError(f"Duplicate build: '{name}'")
                logger.debug("Found build '%s'", name)
                self._pending[name] = (build_data, base_dir)

    def scan(self, path: str | Path, *, recurse: bool = True) -> None:
        """Load every .hcl file found under a directory, in sorted order."""
        root = Path(path)
        files = root.rglob("*.hcl") if recurse else root.glob("*.hcl")
        for file in sorted(files):
            self.load(file)

    def _resolve(self, name: str) -> BuildRequest:
        data, base_dir = self._pending[name]
        return _build_request(name, data, base_dir, self._resolver)

    def __getitem__(self, name: str) -> BuildRequest:
        return self._resolve(name)

    def __contains__(self, name: object) -> bool:
        return name in self._pending

    def __iter__(self) -> Iterator[str]:
        return iter(self._pending)

    def __len__(self) -> int:
        return len(self._pending)

    @overload
    def get(self, name: str) -> BuildRequest | None: ...
    @overload
    def get(self, name: str, default: BuildRequest) -> BuildRequest: ...
    @overload
    def get(self, name: str, default: None) -> BuildRequest | None: ...
    def get(self, name: str, default: Any = None) -> BuildRequest | None:
        if name not in self._pending:
            return default
        return self._resolve(name)

    def filter(self, names: Iterable[str]) -> list[BuildRequest]:
        """Return builds matching the given names, preserving input order."""
        return [self._resolve(n) for n in names if n in self._pending]

    def __repr__(self) -> str:
        return f"Workspace(builds={len(self._pending)})"
