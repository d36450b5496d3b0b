"""Timer and silence filler clips placed between spoken clips.

Configured asset paths are used as-is. Missing assets are rendered once with
ffmpeg's lavfi sources into a filler directory and reused afterwards.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from ..errors import AssemblyFailure
from .ffmpeg import encoding_arguments, run_ffmpeg


# Three short 1 kHz ticks, one per second.
TIMER_SOURCE = "aevalsrc=0.4*sin(2*PI*1000*t)*lt(mod(t\\,1)\\,0.08):s=24000:d=3"
TIMER_SECONDS = 3.0
SILENCE_SOURCE = "anullsrc=r=24000:cl=mono"
SILENCE_SECONDS = 1.5


@dataclass(frozen=True, slots=True)
class FillerAssets:
    """Resolved filler clip paths."""

    timer: Path
    silence: Path


class FillerAssetProvider:
    """Resolve filler clips, rendering defaults on first use."""

    def __init__(
        self,
        directory: Path,
        *,
        timer_path: Path | None = None,
        silence_path: Path | None = None,
        audio_format: str = "mp3",
    ) -> None:
        self.directory = directory
        self.timer_path = timer_path
        self.silence_path = silence_path
        self.audio_format = audio_format

    def resolve(self) -> FillerAssets:
        """Return existing filler clips, rendering any that are missing.

        Raises:
            AssemblyFailure: If a configured asset is missing or rendering fails.
        """

        timer = self._resolve_one("timer", self.timer_path, TIMER_SOURCE, TIMER_SECONDS)
        silence = self._resolve_one("silence", self.silence_path, SILENCE_SOURCE, SILENCE_SECONDS)
        return FillerAssets(timer=timer, silence=silence)

    def _resolve_one(
        self,
        name: str,
        configured: Path | None,
        source: str,
        seconds: float,
    ) -> Path:
        if configured is not None:
            if not configured.is_file():
                raise AssemblyFailure(
                    f"Configured {name} clip not found: `{configured}`.",
                    hint=f"Fix the `{name}_asset` path or remove it to use the generated clip.",
                )
            return configured

        path = self.directory / f"{name}.{self.audio_format}"
        if path.is_file() and path.stat().st_size > 0:
            return path
        path.parent.mkdir(parents=True, exist_ok=True)
        run_ffmpeg(
            [
                "-f",
                "lavfi",
                "-i",
                source,
                "-t",
                f"{seconds:g}",
                *encoding_arguments(self.audio_format),
                str(path),
            ],
            purpose=f"rendering the {name} clip",
        )
        return path
