"""DeepL REST client for sentence translation.

Free-tier keys end in `:fx` and are served from `api-free.deepl.com`; all other
keys use `api.deepl.com`.
"""

from __future__ import annotations

from .http_client import ProviderError, ProviderHTTPClient


DEEPL_FREE_BASE_URL = "https://api-free.deepl.com/v2"
DEEPL_PRO_BASE_URL = "https://api.deepl.com/v2"


def deepl_base_url(api_key: str | None) -> str:
    """Return the DeepL endpoint root matching the key tier."""

    if api_key is not None and api_key.strip().endswith(":fx"):
        return DEEPL_FREE_BASE_URL
    return DEEPL_PRO_BASE_URL


class DeepLClient(ProviderHTTPClient):
    """Minimal requests-based DeepL `/translate` client."""

    provider_label = "DeepL"
    api_key_hint = "Set `DEEPL_TOKEN` in the environment or a `.env` file."

    def __init__(
        self,
        *,
        api_key: str | None,
        base_url: str | None = None,
        timeout_seconds: float = 60.0,
    ) -> None:
        super().__init__(
            api_key=api_key,
            base_url=base_url or deepl_base_url(api_key),
            timeout_seconds=timeout_seconds,
        )

    def _auth_headers(self) -> dict[str, str]:
        return {"Authorization": f"DeepL-Auth-Key {self.api_key}"}

    def translate_text(self, *, text: str, target_lang: str) -> str:
        """Translate one text and return the first translation, or `""` when absent."""

        self._require_api_key()

        raw_payload = self._post_bytes(
            endpoint_path="/translate",
            form_payload={"text": text, "target_lang": target_lang.upper()},
        )
        payload = self._decode_json(raw_payload)
        translations = payload.get("translations") if isinstance(payload, dict) else None
        if not isinstance(translations, list):
            raise ProviderError("DeepL response missing `translations` list.")
        if not translations or not isinstance(translations[0], dict):
            return ""
        translated = translations[0].get("text")
        return translated.strip() if isinstance(translated, str) else ""
