"""Shared fixtures: fake runtime distributions, codecs and applications."""

from __future__ import annotations

import json
import plistlib
from pathlib import Path

import pytest

from nwpack.targets import Target

VERSION = "0.14.7"

ORIGINAL_CODEC = b"original-codec-bytes"
PATCHED_CODEC = b"patched-codec-bytes\x00\x01\x02"

DARWIN_X64 = Target(platform="osx", arch="x64")
LINUX_X64 = Target(platform="linux", arch="x64")
WIN_X64 = Target(platform="win", arch="x64")


def _write(path: Path, data: bytes | str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    if isinstance(data, bytes):
        path.write_bytes(data)
    else:
        path.write_text(data)
    return path


def make_darwin_runtime(root: Path, *, with_codec: bool = True) -> Path:
    contents = root / "nwjs.app" / "Contents"
    plist = {
        "CFBundleDisplayName": "nwjs",
        "CFBundleName": "nwjs",
        "CFBundleVersion": "0.0.0",
        "CFBundleShortVersionString": "0.0",
        "CFBundleIdentifier": "io.nwjs.placeholder",
        "CFBundleExecutable": "nwjs",
    }
    _write(contents / "Info.plist", plistlib.dumps(plist))
    _write(contents / "MacOS" / "nwjs", "#!/bin/sh\n")
    _write(contents / "Resources" / "app.icns", b"default-icon")
    _write(contents / "Resources" / "en.lproj" / "InfoPlist.strings", "en")
    _write(contents / "Resources" / "zh_CN.lproj" / "InfoPlist.strings", "zh")
    _write(contents / "Resources" / "nwjs.pak", b"pak")
    if with_codec:
        framework = contents / "Frameworks" / "nwjs Framework.framework" / "Versions" / "A"
        _write(framework / "libffmpeg.dylib", ORIGINAL_CODEC)
    return root


def make_linux_runtime(root: Path) -> Path:
    _write(root / "nw", "#!/bin/sh\n")
    _write(root / "lib" / "libffmpeg.so", ORIGINAL_CODEC)
    _write(root / "locales" / "en-US.pak", b"pak")
    _write(root / "nw.pak", b"pak")
    return root


def make_win_runtime(root: Path) -> Path:
    _write(root / "nw.exe", b"MZ")
    _write(root / "ffmpeg.dll", ORIGINAL_CODEC)
    _write(root / "locales" / "en-US.pak", b"pak")
    return root


@pytest.fixture
def app_source(tmp_path: Path) -> Path:
    src = tmp_path / "app"
    _write(src / "package.json", json.dumps({"name": "Demo", "version": "1.2.3", "main": "index.html"}))
    _write(src / "index.html", "<h1>demo</h1>")
    _write(src / "node_modules" / "dep" / "index.js", "module.exports = 1;")
    return src


@pytest.fixture
def darwin_runtime(tmp_path: Path) -> Path:
    return make_darwin_runtime(tmp_path / "runtime-osx")


@pytest.fixture
def linux_runtime(tmp_path: Path) -> Path:
    return make_linux_runtime(tmp_path / "runtime-linux")


@pytest.fixture
def win_runtime(tmp_path: Path) -> Path:
    return make_win_runtime(tmp_path / "runtime-win")


@pytest.fixture
def runtimes(tmp_path: Path) -> Path:
    """A LocalBinaryProvider root holding every x64 runtime."""
    root = tmp_path / "runtimes"
    make_darwin_runtime(root / f"nwjs-v{VERSION}-osx-x64")
    make_linux_runtime(root / f"nwjs-v{VERSION}-linux-x64")
    make_win_runtime(root / f"nwjs-v{VERSION}-win-x64")
    return root


@pytest.fixture
def codecs(tmp_path: Path) -> Path:
    """A LocalCodecProvider root holding replacement codecs."""
    root = tmp_path / "codecs"
    _write(root / f"{VERSION}-osx-x64" / "libffmpeg.dylib", PATCHED_CODEC)
    _write(root / f"{VERSION}-linux-x64" / "libffmpeg.so", PATCHED_CODEC)
    _write(root / f"{VERSION}-win-x64" / "ffmpeg.dll", PATCHED_CODEC)
    return root
