"""Translation interfaces and provider integrations.

Responsibilities:
- Define a protocol for sentence translation implementations.
- Provide DeepL- and OpenAI-backed translators.

Repeated sentences are collapsed by the pipeline before translation, so each
call here is one provider request.
"""

from __future__ import annotations

from typing import Protocol

from ..providers.deepl_client import DeepLClient
from ..providers.openai_client import OpenAIChatClient
from .prompts import PromptLibrary


class Translator(Protocol):
    """Protocol for translation providers."""

    provider_id: str

    def translate(self, text: str, target_language: str) -> str:
        """Translate one sentence into the target language."""


class DeepLTranslator:
    """DeepL-backed sentence translator."""

    def __init__(
        self,
        api_key: str | None = None,
        provider_id: str = "deepl",
    ) -> None:
        self.provider_id = provider_id
        self.client = DeepLClient(api_key=api_key)

    def translate(self, text: str, target_language: str) -> str:
        return self.client.translate_text(text=text, target_lang=target_language)


class OpenAITranslator:
    """OpenAI-backed sentence translator using chat completions."""

    def __init__(
        self,
        model: str = "gpt-4.1-mini",
        provider_id: str = "openai",
        api_key: str | None = None,
    ) -> None:
        """Initialize translator settings and OpenAI client dependencies."""

        self.model = model
        self.provider_id = provider_id
        self.client = OpenAIChatClient(api_key=api_key)
        self.prompts = PromptLibrary()

    def translate(self, text: str, target_language: str) -> str:
        """Translate one sentence with a deterministic prompt."""

        return self.client.chat_completion_text(
            model=self.model,
            system_prompt=self.prompts.translation_system_prompt(),
            user_prompt=self.prompts.translate_prompt(
                source_text=text,
                target_language=target_language,
            ),
            temperature=0.0,
        )
