"""Default voices and voice selection rules.

Responsibilities:
- Hold per-language default voices and the precedence used to pick a voice.
"""

from __future__ import annotations


DEFAULT_VOICES: dict[str, str] = {
    "de": "onyx",
    "en": "coral",
    "es": "nova",
    "fr": "shimmer",
    "it": "sage",
    "pt": "alloy",
}
AVAILABLE_VOICES: tuple[str, ...] = (
    "alloy",
    "ash",
    "ballad",
    "coral",
    "echo",
    "fable",
    "nova",
    "onyx",
    "sage",
    "shimmer",
)
FALLBACK_VOICE = "alloy"


def default_voice(language: str) -> str:
    """Return the default voice for a short language code."""

    return DEFAULT_VOICES.get(language.lower(), FALLBACK_VOICE)


def select_voice(
    *,
    forced: str | None,
    record_voice: str | None,
    language_default: str,
) -> str:
    """Pick a voice: forced override, then the record's voice, then the default."""

    return forced or record_voice or language_default
