"""Speech synthesis with artifact-level idempotency.

Responsibilities:
- Define the protocol for speech providers returning raw audio bytes.
- Provide the OpenAI-backed provider.
- Turn one sentence into one stored artifact, skipping provider calls when the
  artifact already exists and pacing calls through the rate limiter.
"""

from __future__ import annotations

from typing import Protocol

from ..errors import SynthesisFailure
from ..io.storage import ArtifactStore
from ..models.datatypes import ArtifactKey, ArtifactRef, EmptyAudioPolicy
from ..providers.http_client import ProviderError
from ..providers.openai_client import OpenAISpeechClient
from ..providers.rate_limiter import RateLimiter
from ..telemetry.logger import RunLogger


class SpeechProvider(Protocol):
    """Protocol for speech provider implementations."""

    provider_id: str

    def synthesize(
        self,
        text: str,
        voice_id: str,
        language_code: str,
        audio_format: str,
    ) -> bytes:
        """Return encoded audio for one sentence, or `b""` when none was produced."""


class OpenAISpeechProvider:
    """OpenAI `/audio/speech` provider.

    OpenAI voices are multilingual and infer the language from the input text,
    so `language_code` is not sent.
    """

    def __init__(
        self,
        model: str = "gpt-4o-mini-tts",
        provider_id: str = "openai",
        api_key: str | None = None,
        speaking_rate: float = 1.0,
    ) -> None:
        self.model = model
        self.provider_id = provider_id
        self.speaking_rate = speaking_rate
        self.client = OpenAISpeechClient(api_key=api_key)

    def synthesize(
        self,
        text: str,
        voice_id: str,
        language_code: str,
        audio_format: str,
    ) -> bytes:
        return self.client.synthesize_speech(
            model=self.model,
            voice=voice_id,
            text=text,
            response_format=audio_format,
            speed=max(0.25, min(4.0, self.speaking_rate)),
        )


class SpeechSynthesizer:
    """Write one audio artifact per (language, fingerprint), at most once."""

    def __init__(
        self,
        provider: SpeechProvider,
        store: ArtifactStore,
        rate_limiter: RateLimiter | None = None,
        empty_audio_policy: EmptyAudioPolicy = EmptyAudioPolicy.SKIP,
        audio_format: str = "mp3",
        run_logger: RunLogger | None = None,
    ) -> None:
        self.provider = provider
        self.store = store
        self.rate_limiter = rate_limiter if rate_limiter is not None else RateLimiter()
        self.empty_audio_policy = EmptyAudioPolicy(empty_audio_policy)
        self.audio_format = audio_format
        self._run_logger = run_logger

    def artifact_key(self, language: str, fingerprint: str) -> ArtifactKey:
        """Return the store key for a clip in this synthesizer's audio format."""

        return ArtifactKey(language=language, fingerprint=fingerprint, extension=self.audio_format)

    def synthesize(
        self,
        text: str,
        *,
        language: str,
        locale: str,
        voice_id: str,
        fingerprint: str,
    ) -> ArtifactRef | None:
        """Return a reference to the clip, synthesizing it only when missing.

        Returns `None` when the provider produced no audio and the empty-audio
        policy is `skip`.

        Raises:
            SynthesisFailure: If the provider call fails, or returns no audio under
                the `fail` policy.
        """

        key = self.artifact_key(language, fingerprint)
        if self.store.exists(key):
            self._log("reused", language=language, fingerprint=fingerprint)
            return ArtifactRef(key=key, path=self.store.path(key), created=False, voice=voice_id)

        limiter_key = f"{self.provider.provider_id}:speech"
        self.rate_limiter.acquire(limiter_key)
        self._log("request", language=language, fingerprint=fingerprint, voice=voice_id)
        try:
            audio = self.provider.synthesize(text, voice_id, locale, self.audio_format)
        except ProviderError as exc:
            raise SynthesisFailure(
                text,
                language,
                str(exc),
                hint="Verify the speech provider API key, quota, and voice id.",
            ) from exc

        if not audio:
            if self.empty_audio_policy is EmptyAudioPolicy.FAIL:
                raise SynthesisFailure(text, language, "provider returned no audio")
            self._log("empty", level="WARNING", language=language, fingerprint=fingerprint)
            return None

        path = self.store.write(key, audio)
        self.rate_limiter.hold(limiter_key)
        return ArtifactRef(key=key, path=path, created=True, voice=voice_id)

    def _log(self, event: str, level: str = "INFO", **context: object) -> None:
        if self._run_logger is not None:
            self._run_logger.log_event("synthesize", event, level=level, **context)
