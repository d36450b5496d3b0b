"""Shared typed data models for SentenceVoice.

This package contains dataclasses used across pipeline modules to avoid
cross-module coupling and circular imports.
"""

from .datatypes import (
    ArtifactKey,
    ArtifactRef,
    EmptyAudioPolicy,
    FailurePolicy,
    LanguagePair,
    PipelineOptions,
    PipelineResult,
    RecordFailure,
    Role,
    SentenceRecord,
    TrackEntry,
)

__all__ = [
    "ArtifactKey",
    "ArtifactRef",
    "EmptyAudioPolicy",
    "FailurePolicy",
    "LanguagePair",
    "PipelineOptions",
    "PipelineResult",
    "RecordFailure",
    "Role",
    "SentenceRecord",
    "TrackEntry",
]
