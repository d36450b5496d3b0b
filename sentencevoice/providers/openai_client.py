"""OpenAI HTTP clients for translation and speech.

Responsibilities:
- Send minimal chat-completions and speech requests to OpenAI's REST API.
- Normalize response extraction for deterministic stage integrations.
"""

from __future__ import annotations

from typing import Any

from .http_client import ProviderError, ProviderHTTPClient


OPENAI_BASE_URL = "https://api.openai.com/v1"


class _OpenAIBaseClient(ProviderHTTPClient):
    """Shared OpenAI settings used by stage-specific clients."""

    provider_label = "OpenAI"
    api_key_hint = "Set `OPENAI_API_KEY` in the environment or a `.env` file."

    def __init__(
        self,
        *,
        api_key: str | None,
        base_url: str = OPENAI_BASE_URL,
        timeout_seconds: float = 60.0,
    ) -> None:
        super().__init__(api_key=api_key, base_url=base_url, timeout_seconds=timeout_seconds)


class OpenAIChatClient(_OpenAIBaseClient):
    """Minimal requests-based OpenAI chat-completions HTTP client."""

    def chat_completion_text(
        self,
        *,
        model: str,
        system_prompt: str,
        user_prompt: str,
        temperature: float = 0.0,
    ) -> str:
        """Return the first assistant text response from a chat-completions request."""

        self._require_api_key()

        payload = {
            "model": model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            "temperature": temperature,
        }
        raw_payload = self._post_bytes(endpoint_path="/chat/completions", json_payload=payload)
        return self._extract_message_text(self._decode_json(raw_payload))

    @staticmethod
    def _extract_message_text(payload: Any) -> str:
        """Extract first assistant message text from a chat-completions payload."""

        choices = payload.get("choices") if isinstance(payload, dict) else None
        if not isinstance(choices, list) or not choices:
            raise ProviderError("OpenAI response missing non-empty `choices` list.")

        first_choice = choices[0]
        if not isinstance(first_choice, dict):
            raise ProviderError("OpenAI response `choices[0]` is malformed.")

        message = first_choice.get("message")
        if not isinstance(message, dict):
            raise ProviderError("OpenAI response missing `choices[0].message` object.")

        content = message.get("content")
        if isinstance(content, list):
            content = "".join(
                item["text"]
                for item in content
                if isinstance(item, dict)
                and item.get("type") == "text"
                and isinstance(item.get("text"), str)
            )
        if not isinstance(content, str):
            return ""
        return content.strip()


class OpenAISpeechClient(_OpenAIBaseClient):
    """Minimal requests-based OpenAI speech HTTP client."""

    def synthesize_speech(
        self,
        *,
        model: str,
        voice: str,
        text: str,
        response_format: str = "mp3",
        speed: float = 1.0,
    ) -> bytes:
        """Return synthesized audio bytes from OpenAI `/audio/speech`.

        An empty body is returned as `b""`; callers decide whether that is an error.
        """

        self._require_api_key()

        payload = {
            "model": model,
            "voice": voice,
            "input": text,
            "response_format": response_format,
            "speed": speed,
        }
        return self._post_bytes(endpoint_path="/audio/speech", json_payload=payload)
