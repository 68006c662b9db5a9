"""Filesystem helpers that report failures as BundleIOError."""

from __future__ import annotations

import logging
import os
import shutil
from collections.abc import Callable
from pathlib import Path, PurePosixPath

from .errors import BundleIOError, NotFoundError

logger = logging.getLogger(__name__)

PathFilter = Callable[[str], bool]


def empty_dir(path: Path) -> None:
    """Make sure ``path`` exists and contains nothing."""
    try:
        if path.is_symlink() or path.is_file():
            path.unlink()
        if path.is_dir():
            for child in path.iterdir():
                if child.is_dir() and not child.is_symlink():
                    shutil.rmtree(child)
                else:
                    child.unlink()
        path.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise BundleIOError(f"cannot reset {path}: {exc}") from exc


def copy_tree(src: Path, dst: Path, *, exclude: PathFilter | None = None) -> None:
    """Copy a directory tree, merging into ``dst`` and keeping symlinks.

    ``exclude`` receives each entry's path relative to ``src`` as a POSIX
    string with a leading slash (e.g. ``/nwjs.app/Contents``) and returns
    True to skip it.
    """
    if not src.is_dir():
        raise NotFoundError(f"source directory not found: {src}")

    def _ignore(directory: str, names: list[str]) -> set[str]:
        if exclude is None:
            return set()
        rel = PurePosixPath("/") / Path(directory).relative_to(src).as_posix()
        return {name for name in names if exclude(str(rel / name))}

    try:
        shutil.copytree(src, dst, symlinks=True, ignore=_ignore, dirs_exist_ok=True)
    except (OSError, shutil.Error) as exc:
        raise BundleIOError(f"cannot copy {src} to {dst}: {exc}") from exc


def copy_file(src: Path, dst: Path) -> None:
    """Copy one file over ``dst``, replacing its contents entirely."""
    if not src.is_file():
        raise NotFoundError(f"file not found: {src}")
    try:
        dst.parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(src, dst)
    except OSError as exc:
        raise BundleIOError(f"cannot copy {src} to {dst}: {exc}") from exc


def rename(src: Path, dst: Path) -> None:
    try:
        os.rename(src, dst)
    except OSError as exc:
        raise BundleIOError(f"cannot rename {src} to {dst}: {exc}") from exc


def write_text(path: Path, text: str, *, mode: int | None = None) -> None:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
        if mode is not None:
            path.chmod(mode)
    except OSError as exc:
        raise BundleIOError(f"cannot write {path}: {exc}") from exc


def find_file(root: Path, name: str) -> Path | None:
    """Return the first file called ``name`` anywhere under ``root``."""
    matches = sorted(p for p in root.rglob(name) if p.is_file())
    if matches:
        return matches[0]
    return None
