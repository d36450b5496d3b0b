"""Pipeline orchestration for SentenceVoice.

Responsibilities:
- Define the stage order for turning sentence records into audio artifacts.
- Translate missing target sentences concurrently, then synthesize clips one at
  a time in record order.
- Apply the configured failure policy to per-record translation and synthesis
  errors.

Key types:
- `SentencePipeline`: orchestration facade.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import replace
import random
from typing import TypeVar

from ..errors import PipelineStageError, SynthesisFailure, TranslationFailure
from ..models.datatypes import (
    FailurePolicy,
    LanguagePair,
    PipelineOptions,
    PipelineResult,
    RecordFailure,
    SentenceRecord,
)
from ..parsing import normalize_optional_string
from ..telemetry.logger import RunLogger
from ..text.fingerprint import fingerprint
from ..translation.resolver import TranslationResolver
from ..tts.synthesizer import SpeechSynthesizer
from ..tts.voices import default_voice, select_voice
from .task_group import OrderedTaskGroup

_StageResult = TypeVar("_StageResult")


class SentencePipeline:
    """Coordinate translation and synthesis for one sentence table."""

    _PHASE_SEQUENCE = ("order", "translate", "synthesize")

    def __init__(
        self,
        *,
        resolver: TranslationResolver,
        synthesizer: SpeechSynthesizer | None,
        languages: LanguagePair | None = None,
        source_voice: str | None = None,
        target_voice: str | None = None,
        task_group: OrderedTaskGroup | None = None,
        rng: random.Random | None = None,
        run_logger: RunLogger | None = None,
        stage_progress_callback: Callable[[str, int, int], None] | None = None,
    ) -> None:
        self.resolver = resolver
        self.synthesizer = synthesizer
        self.languages = languages if languages is not None else LanguagePair()
        self.source_voice = source_voice or default_voice(self.languages.source)
        self.target_voice = target_voice or default_voice(self.languages.target)
        self.task_group = task_group if task_group is not None else OrderedTaskGroup()
        self._rng = rng if rng is not None else random.Random()
        self._run_logger = run_logger
        self._stage_progress_callback = stage_progress_callback

    def run(
        self,
        records: list[SentenceRecord],
        options: PipelineOptions | None = None,
    ) -> list[SentenceRecord]:
        """Return enriched records for the input records."""

        return self.execute(records, options).records

    def execute(
        self,
        records: list[SentenceRecord],
        options: PipelineOptions | None = None,
    ) -> PipelineResult:
        """Run all stages and return enriched records with failures and counters."""

        resolved_options = options if options is not None else PipelineOptions()
        result = PipelineResult()

        ordered = self._run_stage("order", lambda: self._order(records, resolved_options))
        translated = self._run_stage(
            "translate",
            lambda: self._translate(ordered, resolved_options, result),
        )
        if resolved_options.disable_synthesis:
            result.records = translated
            return result

        result.records = self._run_stage(
            "synthesize",
            lambda: self._synthesize(translated, resolved_options, result),
        )
        return result

    def _order(
        self, records: list[SentenceRecord], options: PipelineOptions
    ) -> list[SentenceRecord]:
        """Return a copy of the records, shuffled when random order is requested."""

        ordered = list(records)
        if options.random_order:
            self._rng.shuffle(ordered)
        return ordered

    def _translate(
        self,
        records: list[SentenceRecord],
        options: PipelineOptions,
        result: PipelineResult,
    ) -> list[SentenceRecord]:
        """Resolve target sentences concurrently and rejoin them in input order.

        Records sharing a source sentence are translated with one provider
        request; every duplicate receives the same target or its own failure.
        """

        def _needs_translation(record: SentenceRecord) -> bool:
            if options.disable_translation:
                return False
            return normalize_optional_string(record.target_text) is None

        pending = list(
            dict.fromkeys(record.source_text for record in records if _needs_translation(record))
        )

        def _resolve(source_text: str) -> tuple[str | None, TranslationFailure | None]:
            try:
                return self.resolver.resolve(source_text, self.languages.target), None
            except TranslationFailure as exc:
                if options.failure_policy is FailurePolicy.FAIL_FAST:
                    raise
                return None, exc

        resolved = dict(zip(pending, self.task_group.map(_resolve, pending)))

        enriched: list[SentenceRecord] = []
        for index, record in enumerate(records):
            if _needs_translation(record):
                target_text, error = resolved[record.source_text]
            else:
                target_text = self.resolver.resolve(
                    record.source_text,
                    self.languages.target,
                    existing_text=record.target_text,
                    disable_translation=options.disable_translation,
                )
                error = None
            if error is not None:
                result.failures.append(self._record_failure(index, record, error))
                target_text = record.target_text
            elif target_text is not None and _needs_translation(record):
                result.translated += 1
            enriched.append(
                replace(
                    record,
                    target_text=target_text,
                    fingerprint=fingerprint(record.source_text),
                )
            )
        return enriched

    def _synthesize(
        self,
        records: list[SentenceRecord],
        options: PipelineOptions,
        result: PipelineResult,
    ) -> list[SentenceRecord]:
        """Synthesize source then target clips for each record, strictly in order."""

        if self.synthesizer is None:
            raise PipelineStageError(
                stage="synthesize",
                detail="No speech provider is configured.",
                hint="Configure a TTS provider or rerun with `--disable-synthesis`.",
            )

        enriched: list[SentenceRecord] = []
        for index, record in enumerate(records):
            source_voice = select_voice(
                forced=options.force_voice_id,
                record_voice=record.voice_id,
                language_default=self.source_voice,
            )
            record_fingerprint = record.fingerprint or fingerprint(record.source_text)
            clips = [
                (
                    record.source_text,
                    self.languages.source,
                    self.languages.source_locale,
                    source_voice,
                )
            ]
            if record.target_text:
                clips.append(
                    (
                        record.target_text,
                        self.languages.target,
                        self.languages.target_locale,
                        self.target_voice,
                    )
                )
            try:
                for text, language, locale, voice in clips:
                    artifact = self.synthesizer.synthesize(
                        text,
                        language=language,
                        locale=locale,
                        voice_id=voice,
                        fingerprint=record_fingerprint,
                    )
                    if artifact is None:
                        continue
                    if artifact.created:
                        result.synthesized += 1
                    else:
                        result.reused += 1
            except SynthesisFailure as exc:
                if options.failure_policy is FailurePolicy.FAIL_FAST:
                    raise
                result.failures.append(self._record_failure(index, record, exc))
            enriched.append(replace(record, voice_id=source_voice, fingerprint=record_fingerprint))
        return enriched

    def _record_failure(
        self, index: int, record: SentenceRecord, exc: PipelineStageError
    ) -> RecordFailure:
        """Capture a skipped record failure and log it without sentence text."""

        if self._run_logger is not None:
            self._run_logger.log_event(
                exc.stage,
                "record-skipped",
                level="WARNING",
                index=index,
                error_type=type(exc).__name__,
                fingerprint=fingerprint(record.source_text),
            )
        return RecordFailure(
            index=index,
            source_text=record.source_text,
            stage=exc.stage,
            detail=exc.detail,
        )

    def _stage_position(self, stage_name: str) -> tuple[int, int] | None:
        """Return 1-based stage index and total stage count for known stages."""

        try:
            index = self._PHASE_SEQUENCE.index(stage_name) + 1
        except ValueError:
            return None
        return index, len(self._PHASE_SEQUENCE)

    def _run_stage(
        self,
        stage_name: str,
        action: Callable[[], _StageResult],
    ) -> _StageResult:
        """Run one named stage and emit start/complete/failure telemetry events."""

        stage_position = self._stage_position(stage_name)
        if stage_position and self._stage_progress_callback is not None:
            self._stage_progress_callback(stage_name, stage_position[0], stage_position[1])
        if self._run_logger is not None:
            self._run_logger.log_stage_start(stage_name)
        try:
            result = action()
        except Exception as exc:
            if self._run_logger is not None:
                self._run_logger.log_stage_failure(stage_name, type(exc).__name__)
            raise
        if self._run_logger is not None:
            self._run_logger.log_stage_complete(stage_name)
        return result
