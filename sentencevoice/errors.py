"""Domain exceptions for pipeline and CLI diagnostics.

Every failure a user can see derives from `PipelineStageError`, so the CLI can
render one concise line naming the failing stage and the offending input.
"""

from __future__ import annotations

from pathlib import Path


_MAX_QUOTED_TEXT_CHARS = 80


def _quote_text(text: str) -> str:
    """Return a compact, length-capped quotation of sentence text for diagnostics."""

    compact = " ".join(text.split())
    if len(compact) > _MAX_QUOTED_TEXT_CHARS:
        compact = f"{compact[: _MAX_QUOTED_TEXT_CHARS - 3]}..."
    return f'"{compact}"'


class PipelineStageError(RuntimeError):
    """Raised when a specific pipeline stage fails."""

    def __init__(
        self,
        *,
        stage: str,
        detail: str,
        hint: str | None = None,
    ) -> None:
        """Initialize a stage-scoped pipeline error."""

        super().__init__(detail)
        self.stage = stage
        self.detail = detail
        self.hint = hint


class InputFormatError(PipelineStageError):
    """Raised when the sentence table is missing, malformed, or lacks source text."""

    def __init__(self, detail: str, *, path: Path | None = None, hint: str | None = None) -> None:
        super().__init__(
            stage="input",
            detail=detail,
            hint=hint
            or "Use `;`-separated columns: source sentence, target sentence, voice id.",
        )
        self.path = path


class TranslationFailure(PipelineStageError):
    """Raised when a missing target sentence could not be translated."""

    def __init__(self, source_text: str, reason: str, *, hint: str | None = None) -> None:
        super().__init__(
            stage="translate",
            detail=f"Translation failed for {_quote_text(source_text)}: {reason}",
            hint=hint,
        )
        self.source_text = source_text
        self.reason = reason


class SynthesisFailure(PipelineStageError):
    """Raised when the speech provider fails for one sentence and language."""

    def __init__(
        self,
        text: str,
        language: str,
        reason: str,
        *,
        hint: str | None = None,
    ) -> None:
        super().__init__(
            stage="synthesize",
            detail=f"Speech synthesis failed for {_quote_text(text)} [{language}]: {reason}",
            hint=hint,
        )
        self.text = text
        self.language = language
        self.reason = reason


class AssemblyFailure(PipelineStageError):
    """Raised when the combined track could not be produced."""

    def __init__(self, detail: str, *, diagnostic: str = "", hint: str | None = None) -> None:
        super().__init__(stage="assemble", detail=detail, hint=hint)
        self.diagnostic = diagnostic
