"""Core datatypes shared across SentenceVoice modules.

Responsibilities:
- Represent immutable records exchanged between pipeline stages.
- Provide explicit typing for artifact keys and assembly plans.

Key types:
- `SentenceRecord`, `LanguagePair`, `ArtifactKey`, `ArtifactRef`,
  `PipelineOptions`, `RecordFailure`, `PipelineResult`, `TrackEntry`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path


class FailurePolicy(str, Enum):
    """How the pipeline reacts to one record's translation or synthesis failure."""

    FAIL_FAST = "fail-fast"
    SKIP = "skip"


class EmptyAudioPolicy(str, Enum):
    """How the synthesizer reacts to a provider response without audio."""

    SKIP = "skip"
    FAIL = "fail"


class Role(str, Enum):
    """Playback role of a language inside one assembled segment."""

    LEAD = "lead"
    STUDY = "study"


@dataclass(frozen=True, slots=True)
class SentenceRecord:
    """One bilingual sentence row.

    Attributes:
        source_text: Sentence in the source language; required and non-empty.
        target_text: Sentence in the target language, from input or translation.
        voice_id: Per-record voice override; after a pipeline run, the voice used
            for the source-language clip.
        fingerprint: Artifact identifier derived from `source_text`.
    """

    source_text: str
    target_text: str | None = None
    voice_id: str | None = None
    fingerprint: str | None = None


@dataclass(frozen=True, slots=True)
class LanguagePair:
    """Source and target languages with the locale codes providers expect.

    Attributes:
        source: Short source language code used for artifact folders (`en`).
        target: Short target language code used for artifact folders (`es`).
        source_locale: Provider locale for source speech (`en-US`).
        target_locale: Provider locale for target speech (`es-ES`).
    """

    source: str = "en"
    target: str = "es"
    source_locale: str = "en-US"
    target_locale: str = "es-ES"


@dataclass(frozen=True, slots=True)
class ArtifactKey:
    """Address of one audio artifact inside an artifact store."""

    language: str
    fingerprint: str
    extension: str = "mp3"

    @property
    def relative_path(self) -> Path:
        """Return `{language}/{fingerprint}.{extension}`."""

        return Path(self.language) / f"{self.fingerprint}.{self.extension}"


@dataclass(frozen=True, slots=True)
class ArtifactRef:
    """Reference to a stored audio artifact.

    Attributes:
        key: Store key of the artifact.
        path: Resolved location of the artifact.
        created: `True` when this call wrote the artifact, `False` when reused.
        voice: Voice identifier requested for the clip.
    """

    key: ArtifactKey
    path: Path
    created: bool
    voice: str | None = None


@dataclass(frozen=True, slots=True)
class PipelineOptions:
    """Per-run switches for `SentencePipeline`.

    Attributes:
        force_voice_id: Voice used for every source clip, overriding record voices.
        disable_translation: Never call the translation provider.
        disable_synthesis: Never call the speech provider.
        random_order: Shuffle records before processing.
        failure_policy: Fail fast or skip records whose stages fail.
    """

    force_voice_id: str | None = None
    disable_translation: bool = False
    disable_synthesis: bool = False
    random_order: bool = False
    failure_policy: FailurePolicy = FailurePolicy.FAIL_FAST


@dataclass(frozen=True, slots=True)
class RecordFailure:
    """One record-level failure captured under the `skip` failure policy."""

    index: int
    source_text: str
    stage: str
    detail: str


@dataclass(slots=True)
class PipelineResult:
    """Outcome of one pipeline execution."""

    records: list[SentenceRecord] = field(default_factory=list)
    failures: list[RecordFailure] = field(default_factory=list)
    translated: int = 0
    synthesized: int = 0
    reused: int = 0


@dataclass(frozen=True, slots=True)
class TrackEntry:
    """One entry of an assembled combined track.

    Attributes:
        kind: `clip`, `timer`, or `silence`.
        path: Audio file for the entry.
        role: Role of a spoken clip; `None` for filler markers.
        language: Language of a spoken clip; `None` for filler markers.
    """

    kind: str
    path: Path
    role: Role | None = None
    language: str | None = None
