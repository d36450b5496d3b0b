"""Unit tests for ffmpeg invocation, concat lists, and filler rendering."""

from __future__ import annotations

from pathlib import Path
import subprocess

import pytest

from sentencevoice.audio import FfmpegConcatenator, FillerAssetProvider
from sentencevoice.audio import ffmpeg as ffmpeg_module
from sentencevoice.errors import AssemblyFailure


class _SubprocessRecorder:
    """`subprocess.run` stand-in that records commands and writes output files."""

    def __init__(self) -> None:
        self.commands: list[list[str]] = []
        self.concat_lists: list[str] = []

    def __call__(self, command: list[str], **kwargs: object) -> subprocess.CompletedProcess[str]:
        self.commands.append(list(command))
        if "concat" in command:
            list_path = Path(command[command.index("-i") + 1])
            self.concat_lists.append(list_path.read_text(encoding="utf-8"))
        Path(command[-1]).write_bytes(b"encoded")
        return subprocess.CompletedProcess(command, 0, stdout="", stderr="")


def test_encoding_arguments_cover_supported_formats() -> None:
    """Each supported format should map to mono 24 kHz with its codec."""

    assert ffmpeg_module.encoding_arguments("mp3") == [
        "-ac", "1", "-ar", "24000", "-c:a", "libmp3lame", "-b:a", "128k",
    ]
    assert ffmpeg_module.encoding_arguments("WAV") == [
        "-ac", "1", "-ar", "24000", "-c:a", "pcm_s16le",
    ]
    with pytest.raises(AssemblyFailure, match="Unsupported audio format `ogg`"):
        ffmpeg_module.encoding_arguments("ogg")


def test_concatenator_writes_escaped_list_and_removes_it(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    """Concat list should contain resolved, quoted paths and be cleaned up afterwards."""

    recorder = _SubprocessRecorder()
    monkeypatch.setattr(ffmpeg_module.subprocess, "run", recorder)
    monkeypatch.setattr(ffmpeg_module, "resolve_ffmpeg", lambda command_name="ffmpeg": "ffmpeg")
    clip = tmp_path / "it's.mp3"
    clip.write_bytes(b"clip")
    output = tmp_path / "lesson_combined.mp3"

    FfmpegConcatenator().concatenate([clip, clip], output)

    command = recorder.commands[0]
    assert command[:5] == ["ffmpeg", "-y", "-hide_banner", "-loglevel", "error"]
    assert command[command.index("-f") + 1] == "concat"
    assert command[-1] == str(output)
    escaped = str(clip.resolve()).replace("'", "'\\''")
    assert recorder.concat_lists == [f"file '{escaped}'\nfile '{escaped}'\n"]
    assert not (tmp_path / "lesson_combined.mp3.concat.txt").exists()
    assert output.read_bytes() == b"encoded"


def test_run_ffmpeg_maps_process_failure_with_stderr(monkeypatch: pytest.MonkeyPatch) -> None:
    """Non-zero exits should become assembly failures carrying stderr."""

    def _failing_run(command: list[str], **kwargs: object) -> subprocess.CompletedProcess[str]:
        raise subprocess.CalledProcessError(1, command, stderr="Invalid data found\n")

    monkeypatch.setattr(ffmpeg_module.subprocess, "run", _failing_run)

    with pytest.raises(AssemblyFailure) as exc_info:
        ffmpeg_module.run_ffmpeg(["-i", "x.mp3", "y.mp3"], purpose="testing")

    assert exc_info.value.stage == "assemble"
    assert "ffmpeg failed while testing: Invalid data found" in exc_info.value.detail
    assert exc_info.value.diagnostic == "Invalid data found\n"


def test_run_ffmpeg_reports_missing_tool(monkeypatch: pytest.MonkeyPatch) -> None:
    """A missing executable should surface as an assembly failure with a hint."""

    def _missing_run(command: list[str], **kwargs: object) -> subprocess.CompletedProcess[str]:
        raise FileNotFoundError(command[0])

    monkeypatch.setattr(ffmpeg_module.subprocess, "run", _missing_run)

    with pytest.raises(AssemblyFailure, match="not available on PATH") as exc_info:
        ffmpeg_module.run_ffmpeg(["-version"], purpose="testing")

    assert exc_info.value.hint == "Install ffmpeg, or rerun without `--concat`."


def test_filler_provider_renders_missing_clips_once(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    """Default fillers should be generated on first use and reused afterwards."""

    recorder = _SubprocessRecorder()
    monkeypatch.setattr(ffmpeg_module.subprocess, "run", recorder)
    provider = FillerAssetProvider(tmp_path / "_fillers")

    first = provider.resolve()
    second = provider.resolve()

    assert first == second
    assert first.timer == tmp_path / "_fillers" / "timer.mp3"
    assert first.silence == tmp_path / "_fillers" / "silence.mp3"
    assert len(recorder.commands) == 2
    assert all("lavfi" in command for command in recorder.commands)


def test_filler_provider_uses_configured_assets_and_rejects_missing_ones(tmp_path: Path) -> None:
    """Configured asset paths should be used as-is and must exist."""

    timer = tmp_path / "tick.mp3"
    silence = tmp_path / "pause.mp3"
    timer.write_bytes(b"tick")
    silence.write_bytes(b"pause")

    assets = FillerAssetProvider(tmp_path, timer_path=timer, silence_path=silence).resolve()
    assert (assets.timer, assets.silence) == (timer, silence)

    with pytest.raises(AssemblyFailure, match="Configured timer clip not found"):
        FillerAssetProvider(tmp_path, timer_path=tmp_path / "gone.mp3").resolve()
