"""Fill in missing target sentences.

`TranslationResolver` is the only caller of `Translator.translate` in the
pipeline. It short-circuits whenever a target sentence already exists or
translation is disabled, and maps provider problems to `TranslationFailure`.
"""

from __future__ import annotations

from ..errors import TranslationFailure
from ..parsing import normalize_optional_string
from ..providers.http_client import ProviderError
from ..telemetry.logger import RunLogger
from ..text.fingerprint import fingerprint
from .translator import Translator


class TranslationResolver:
    """Resolve the target sentence for one source sentence."""

    def __init__(self, translator: Translator | None, run_logger: RunLogger | None = None) -> None:
        self.translator = translator
        self._run_logger = run_logger

    def resolve(
        self,
        source_text: str,
        target_language: str,
        *,
        existing_text: str | None = None,
        disable_translation: bool = False,
    ) -> str | None:
        """Return the existing target sentence or one freshly translated.

        Raises:
            TranslationFailure: If the provider fails or returns no usable text.
        """

        existing = normalize_optional_string(existing_text)
        if existing is not None or disable_translation:
            return existing

        if self.translator is None:
            raise TranslationFailure(
                source_text,
                "no translation provider is configured",
                hint="Configure `--translator` or rerun with `--disable-translation`.",
            )

        if self._run_logger is not None:
            self._run_logger.log_event(
                "translate",
                "request",
                provider=self.translator.provider_id,
                fingerprint=fingerprint(source_text),
                target_language=target_language,
            )
        try:
            translated = self.translator.translate(source_text, target_language)
        except ProviderError as exc:
            raise TranslationFailure(
                source_text,
                str(exc),
                hint="Verify the translator API key, quota, and target language code.",
            ) from exc

        resolved = normalize_optional_string(translated)
        if resolved is None:
            raise TranslationFailure(source_text, "provider returned no translation")
        return resolved
