"""ffmpeg invocation helpers.

Responsibilities:
- Resolve the `ffmpeg` executable, preferring a copy bundled next to the app.
- Run ffmpeg with captured output and map failures to `AssemblyFailure`.
- Hold the encoding profile per output audio format.
"""

from __future__ import annotations

from pathlib import Path
import shutil
import subprocess
import sys

from ..errors import AssemblyFailure
from ..parsing import normalize_optional_string


SAMPLE_RATE = "24000"
_ENCODING_PROFILES = {
    "mp3": ("libmp3lame", "128k"),
    "m4a": ("aac", "128k"),
    "wav": ("pcm_s16le", None),
}


def resolve_ffmpeg(command_name: str = "ffmpeg") -> str:
    """Resolve ffmpeg from `./bin`, then the app root, then `PATH`."""

    app_root = (
        Path(sys.executable).resolve().parent
        if getattr(sys, "frozen", False)
        else Path(__file__).resolve().parents[2]
    )
    for name in (command_name, f"{command_name}.exe"):
        for candidate in (app_root / "bin" / name, app_root / name):
            if candidate.is_file():
                return str(candidate)
    return shutil.which(command_name) or command_name


def encoding_arguments(audio_format: str) -> list[str]:
    """Return mono/sample-rate/codec arguments for an output audio format."""

    try:
        codec, bitrate = _ENCODING_PROFILES[audio_format.lower()]
    except KeyError as exc:
        supported = ", ".join(sorted(_ENCODING_PROFILES))
        raise AssemblyFailure(
            f"Unsupported audio format `{audio_format}`; supported: {supported}.",
        ) from exc
    arguments = ["-ac", "1", "-ar", SAMPLE_RATE, "-c:a", codec]
    if bitrate is not None:
        arguments.extend(["-b:a", bitrate])
    return arguments


def run_ffmpeg(arguments: list[str], *, purpose: str) -> subprocess.CompletedProcess[str]:
    """Run ffmpeg quietly with `arguments` and return the completed process.

    Raises:
        AssemblyFailure: If ffmpeg is missing or exits non-zero; the failure
            carries ffmpeg's stderr as its diagnostic.
    """

    command = [resolve_ffmpeg(), "-y", "-hide_banner", "-loglevel", "error", *arguments]
    try:
        return subprocess.run(command, check=True, capture_output=True, text=True)
    except FileNotFoundError as exc:
        raise AssemblyFailure(
            "Audio tool `ffmpeg` is not available on PATH.",
            hint="Install ffmpeg, or rerun without `--concat`.",
        ) from exc
    except subprocess.CalledProcessError as exc:
        stderr = normalize_optional_string(exc.stderr) or "no stderr output"
        raise AssemblyFailure(
            f"ffmpeg failed while {purpose}: {stderr}",
            diagnostic=exc.stderr or "",
            hint="Check that every clip is a readable audio file.",
        ) from exc
