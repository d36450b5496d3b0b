"""Provider factory helpers for translation and speech stages.

Responsibilities:
- Resolve provider identifiers to concrete stage implementations.
- Keep orchestration independent from concrete provider class construction.
"""

from __future__ import annotations

from .translation.translator import DeepLTranslator, OpenAITranslator, Translator
from .tts.synthesizer import OpenAISpeechProvider, SpeechProvider


class ProviderFactory:
    """Factory for provider-backed stage clients used by the pipeline."""

    @staticmethod
    def create_translator(
        provider_id: str,
        model: str,
        api_key: str | None = None,
    ) -> Translator:
        """Create a translator client for a configured provider identifier."""

        if provider_id == "deepl":
            return DeepLTranslator(api_key=api_key, provider_id=provider_id)
        if provider_id == "openai":
            return OpenAITranslator(model=model, provider_id=provider_id, api_key=api_key)
        raise ValueError(f"Unsupported translator provider `{provider_id}`.")

    @staticmethod
    def create_speech_provider(
        provider_id: str,
        model: str,
        api_key: str | None = None,
        speaking_rate: float = 1.0,
    ) -> SpeechProvider:
        """Create a speech provider for a configured provider identifier."""

        if provider_id == "openai":
            return OpenAISpeechProvider(
                model=model,
                provider_id=provider_id,
                api_key=api_key,
                speaking_rate=speaking_rate,
            )
        raise ValueError(f"Unsupported TTS provider `{provider_id}`.")
