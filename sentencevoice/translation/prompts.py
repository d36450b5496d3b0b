"""Prompt templates for LLM-backed sentence translation."""

from __future__ import annotations


_LANGUAGE_NAMES = {
    "de": "German",
    "en": "English",
    "es": "Spanish",
    "fr": "French",
    "it": "Italian",
    "pt": "Portuguese",
}


class PromptLibrary:
    """Build prompt strings for sentence translation."""

    def translation_system_prompt(self) -> str:
        """Return deterministic system prompt for strict translation behavior."""

        return (
            "You are a precise translation assistant for language learners. "
            "Return only translated text with no commentary."
        )

    def translate_prompt(self, source_text: str, target_language: str) -> str:
        """Return translation prompt text for one sentence."""

        language_name = _LANGUAGE_NAMES.get(target_language.lower(), target_language)
        return (
            f"Translate the following sentence into {language_name}. Keep it natural "
            "and conversational, preserving meaning and register. Output only the "
            "translated sentence.\n\n"
            f"{source_text}"
        )
