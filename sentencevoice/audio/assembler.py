"""Combined study-track assembly.

Responsibilities:
- Resolve which language leads each segment and which one is repeated.
- Build the deterministic clip/filler order for a whole record list.
- Hand the ordered list to a concatenation tool as one batch. The tool writes a
  `.partial` sibling that is renamed onto the final path only when complete.

Track layout per record, with `n` repetitions:

    lead, timer, (study, silence) * n
"""

from __future__ import annotations

from collections.abc import Callable
import os
from pathlib import Path
from typing import Protocol

from ..errors import AssemblyFailure
from ..io.storage import ArtifactStore
from ..models.datatypes import ArtifactKey, LanguagePair, Role, SentenceRecord, TrackEntry
from ..parsing import coerce_repetitions
from ..telemetry.logger import RunLogger
from .ffmpeg import encoding_arguments, run_ffmpeg
from .fillers import FillerAssetProvider


class AudioConcatenator(Protocol):
    """Protocol for tools joining audio files into one output file."""

    def concatenate(self, paths: list[Path], output_path: Path) -> Path:
        """Join `paths` in order into `output_path` and return it."""


class FfmpegConcatenator:
    """Join clips with ffmpeg's concat demuxer, re-encoding to one format."""

    def __init__(self, audio_format: str = "mp3", run_logger: RunLogger | None = None) -> None:
        self.audio_format = audio_format
        self._run_logger = run_logger

    def concatenate(self, paths: list[Path], output_path: Path) -> Path:
        """Encode the ordered clips into `output_path`."""

        output_path.parent.mkdir(parents=True, exist_ok=True)
        list_path = output_path.with_name(f"{output_path.name}.concat.txt")
        list_path.write_text(
            "\n".join(f"file '{self._escape_concat_path(path.resolve())}'" for path in paths)
            + "\n",
            encoding="utf-8",
        )
        if self._run_logger is not None:
            self._run_logger.log_event(
                "assemble", "ffmpeg-start", clips=len(paths), output=output_path.name
            )
        try:
            run_ffmpeg(
                [
                    "-f",
                    "concat",
                    "-safe",
                    "0",
                    "-i",
                    str(list_path),
                    "-vn",
                    "-map_metadata",
                    "-1",
                    *encoding_arguments(self.audio_format),
                    str(output_path),
                ],
                purpose=f"concatenating `{output_path.name}`",
            )
        finally:
            list_path.unlink(missing_ok=True)
        return output_path

    @staticmethod
    def _escape_concat_path(path: Path) -> str:
        """Escape one file path for ffmpeg concat list format."""

        return str(path).replace("'", "'\\''")


def resolve_roles(languages: LanguagePair, reverse_columns: bool) -> dict[Role, str]:
    """Map playback roles to languages; the target language leads by default."""

    if reverse_columns:
        return {Role.LEAD: languages.source, Role.STUDY: languages.target}
    return {Role.LEAD: languages.target, Role.STUDY: languages.source}


def plan_track(
    records: list[SentenceRecord],
    *,
    roles: dict[Role, str],
    repetitions: int,
    clip_path: Callable[[str, str], Path],
    timer: Path,
    silence: Path,
) -> list[TrackEntry]:
    """Return the ordered entries of the combined track.

    `clip_path(language, fingerprint)` locates one spoken clip. Records must
    already carry fingerprints.
    """

    lead_language = roles[Role.LEAD]
    study_language = roles[Role.STUDY]
    entries: list[TrackEntry] = []
    for record in records:
        if not record.fingerprint:
            raise AssemblyFailure(
                f'Sentence "{record.source_text}" has no audio fingerprint.',
                hint="Run the pipeline with synthesis enabled before `--concat`.",
            )
        entries.append(
            TrackEntry(
                kind="clip",
                path=clip_path(lead_language, record.fingerprint),
                role=Role.LEAD,
                language=lead_language,
            )
        )
        entries.append(TrackEntry(kind="timer", path=timer))
        for _ in range(repetitions):
            entries.append(
                TrackEntry(
                    kind="clip",
                    path=clip_path(study_language, record.fingerprint),
                    role=Role.STUDY,
                    language=study_language,
                )
            )
            entries.append(TrackEntry(kind="silence", path=silence))
    return entries


class AudioAssembler:
    """Assemble per-sentence clips into one combined study track."""

    def __init__(
        self,
        *,
        store: ArtifactStore,
        concatenator: AudioConcatenator,
        fillers: FillerAssetProvider,
        languages: LanguagePair | None = None,
        audio_format: str = "mp3",
        run_logger: RunLogger | None = None,
    ) -> None:
        self.store = store
        self.concatenator = concatenator
        self.fillers = fillers
        self.languages = languages if languages is not None else LanguagePair()
        self.audio_format = audio_format
        self._run_logger = run_logger

    def combined_path(self, output_name: Path) -> Path:
        """Return `{output_name}_combined.{ext}`."""

        return output_name.with_name(f"{output_name.name}_combined.{self.audio_format}")

    def assemble(
        self,
        records: list[SentenceRecord],
        output_name: Path,
        repetitions: object = 1,
        reverse_columns: bool = False,
    ) -> Path | None:
        """Build the combined track, or return `None` when it already exists.

        Raises:
            AssemblyFailure: If a clip is missing or the concatenation tool fails.
        """

        output_path = self.combined_path(output_name)
        if output_path.exists():
            self._log("skipped", output=output_path.name)
            return None

        if not records:
            raise AssemblyFailure(
                "There are no sentences to assemble.",
                hint="Add rows to the sentence table.",
            )

        roles = resolve_roles(self.languages, reverse_columns)
        count = coerce_repetitions(repetitions)
        self._require_clips(records, roles, count)
        fillers = self.fillers.resolve()
        entries = plan_track(
            records,
            roles=roles,
            repetitions=count,
            clip_path=self._clip_path,
            timer=fillers.timer,
            silence=fillers.silence,
        )

        partial_path = self.partial_path(output_path)
        partial_path.unlink(missing_ok=True)
        try:
            self.concatenator.concatenate([entry.path for entry in entries], partial_path)
        except AssemblyFailure:
            partial_path.unlink(missing_ok=True)
            raise
        except Exception as exc:
            partial_path.unlink(missing_ok=True)
            raise AssemblyFailure(
                f"Concatenation into `{output_path.name}` failed: {exc}",
                hint="Check disk space and permissions, then rerun; existing clips are reused.",
            ) from exc
        except BaseException:
            partial_path.unlink(missing_ok=True)
            raise

        if not partial_path.is_file() or partial_path.stat().st_size == 0:
            partial_path.unlink(missing_ok=True)
            raise AssemblyFailure(
                f"Concatenation produced no audio in `{output_path}`.",
                hint="Check ffmpeg output and rerun; existing clips are reused.",
            )
        os.replace(partial_path, output_path)
        self._log("complete", output=output_path.name, entries=len(entries))
        return output_path

    def partial_path(self, output_path: Path) -> Path:
        """Return the sibling the concatenation tool writes before the final rename."""

        return output_path.with_name(f"{output_path.stem}.partial{output_path.suffix}")

    def _clip_path(self, language: str, fingerprint: str) -> Path:
        return self.store.path(self._key(language, fingerprint))

    def _key(self, language: str, fingerprint: str) -> ArtifactKey:
        return ArtifactKey(language=language, fingerprint=fingerprint, extension=self.audio_format)

    def _require_clips(
        self, records: list[SentenceRecord], roles: dict[Role, str], repetitions: int
    ) -> None:
        """Fail before any tool runs when a clip the track needs is missing."""

        languages = [roles[Role.LEAD]]
        if repetitions > 0:
            languages.append(roles[Role.STUDY])
        for record in records:
            if not record.fingerprint:
                raise AssemblyFailure(
                    f'Sentence "{record.source_text}" has no audio fingerprint.',
                    hint="Run the pipeline with synthesis enabled before `--concat`.",
                )
            for language in languages:
                if not self.store.exists(self._key(language, record.fingerprint)):
                    raise AssemblyFailure(
                        f'Missing {language} clip for sentence "{record.source_text}".',
                        hint="Rerun without `--disable-synthesis` to create missing clips.",
                    )

    def _log(self, event: str, **context: object) -> None:
        if self._run_logger is not None:
            self._run_logger.log_event("assemble", event, **context)
