"""Combined study-track assembly and the ffmpeg tooling behind it."""

from .assembler import (
    AudioAssembler,
    AudioConcatenator,
    FfmpegConcatenator,
    plan_track,
    resolve_roles,
)
from .fillers import FillerAssetProvider, FillerAssets

__all__ = [
    "AudioAssembler",
    "AudioConcatenator",
    "FfmpegConcatenator",
    "FillerAssetProvider",
    "FillerAssets",
    "plan_track",
    "resolve_roles",
]
