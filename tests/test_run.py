"""Tests for nwpack.run."""

from __future__ import annotations

from pathlib import Path

import pytest
from conftest import DARWIN_X64, LINUX_X64, PATCHED_CODEC, VERSION

from nwpack.errors import ExternalProcessError, NotFoundError
from nwpack.providers import LocalBinaryProvider, LocalCodecProvider
from nwpack.run import RunOptions, RunPipeline


class FakeProcess:
    def __init__(self, returncode: int) -> None:
        self.returncode = returncode
        self.waited = False

    def wait(self) -> int:
        self.waited = True
        return self.returncode


class FakeLauncher:
    """Stands in for subprocess.Popen and records what it was asked to start."""

    def __init__(self, returncode: int = 0, error: OSError | None = None) -> None:
        self.returncode = returncode
        self.error = error
        self.command: list[str] | None = None
        self.kwargs: dict = {}
        self.process: FakeProcess | None = None
        self.codec: bytes | None = None

    def __call__(self, command, **kwargs):
        if self.error is not None:
            raise self.error
        self.command = command
        self.kwargs = kwargs
        codec = next(Path(command[0]).parent.rglob("libffmpeg.so"), None)
        self.codec = codec.read_bytes() if codec else None
        self.process = FakeProcess(self.returncode)
        return self.process


def _pipeline(runtimes: Path, launcher: FakeLauncher, **kwargs) -> RunPipeline:
    return RunPipeline(
        LocalBinaryProvider(runtimes),
        target=LINUX_X64,
        settle_delay=0,
        launcher=launcher,
        **kwargs,
    )


class TestAttached:
    def test_returns_exit_code(self, runtimes):
        launcher = FakeLauncher(returncode=3)
        code = _pipeline(runtimes, launcher).run(["app"], RunOptions(version=VERSION))

        assert code == 3
        assert launcher.process.waited is True
        assert launcher.command[1:] == ["app"]
        assert Path(launcher.command[0]).name == "nw"

    def test_working_dir_removed(self, runtimes):
        launcher = FakeLauncher()
        _pipeline(runtimes, launcher).run([], RunOptions(version=VERSION))
        assert not Path(launcher.command[0]).parent.exists()

    def test_runtime_is_staged_not_used_in_place(self, runtimes):
        launcher = FakeLauncher()
        _pipeline(runtimes, launcher).run([], RunOptions(version=VERSION))
        assert not Path(launcher.command[0]).is_relative_to(runtimes)

    def test_launch_failure(self, runtimes):
        launcher = FakeLauncher(error=PermissionError("denied"))
        with pytest.raises(ExternalProcessError, match="denied"):
            _pipeline(runtimes, launcher).run([], RunOptions(version=VERSION))

    def test_missing_executable(self, runtimes):
        (runtimes / f"nwjs-v{VERSION}-linux-x64" / "nw").unlink()
        with pytest.raises(NotFoundError):
            _pipeline(runtimes, FakeLauncher()).run([], RunOptions(version=VERSION))

    def test_darwin_executable(self, runtimes):
        launcher = FakeLauncher()
        pipeline = RunPipeline(
            LocalBinaryProvider(runtimes),
            target=DARWIN_X64,
            settle_delay=0,
            launcher=launcher,
        )
        pipeline.run([], RunOptions(version=VERSION))
        assert launcher.command[0].endswith("nwjs.app/Contents/MacOS/nwjs")


class TestDetached:
    def test_reports_success_immediately(self, runtimes):
        launcher = FakeLauncher(returncode=9)
        code = _pipeline(runtimes, launcher).run(["app"], RunOptions(version=VERSION, detached=True))

        assert code == 0
        assert launcher.process.waited is False
        assert launcher.kwargs == {"start_new_session": True}

    def test_working_dir_kept_for_child(self, runtimes):
        launcher = FakeLauncher()
        _pipeline(runtimes, launcher).run([], RunOptions(version=VERSION, detached=True))
        assert Path(launcher.command[0]).is_file()

    def test_waits_settle_delay(self, runtimes, monkeypatch):
        slept: list[float] = []
        monkeypatch.setattr("nwpack.run.time.sleep", slept.append)
        launcher = FakeLauncher()
        pipeline = RunPipeline(
            LocalBinaryProvider(runtimes),
            target=LINUX_X64,
            settle_delay=1.5,
            launcher=launcher,
        )
        pipeline.run([], RunOptions(version=VERSION, detached=True))
        assert slept == [1.5]


class TestCodec:
    def test_codec_injected_before_launch(self, runtimes, codecs):
        launcher = FakeLauncher()
        pipeline = _pipeline(runtimes, launcher, codec_provider=LocalCodecProvider(codecs))
        pipeline.run([], RunOptions(version=VERSION, with_ffmpeg=True))
        assert launcher.codec == PATCHED_CODEC

    def test_original_codec_without_option(self, runtimes, codecs):
        launcher = FakeLauncher()
        pipeline = _pipeline(runtimes, launcher, codec_provider=LocalCodecProvider(codecs))
        pipeline.run([], RunOptions(version=VERSION))
        assert launcher.codec != PATCHED_CODEC
