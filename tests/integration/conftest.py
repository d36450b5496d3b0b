"""Integration-test fixtures for deterministic provider and audio-tool behavior."""

from __future__ import annotations

from pathlib import Path
import subprocess

import pytest

from sentencevoice.audio import ffmpeg as ffmpeg_module
from sentencevoice.providers import DeepLClient, OpenAIChatClient, OpenAISpeechClient
from tests.provider_doubles import ProviderCalls


_TRANSLATIONS = {"Hello": "Hola", "Bye": "Adiós", "Thank you": "Gracias"}


@pytest.fixture(autouse=True)
def provider_calls(monkeypatch: pytest.MonkeyPatch) -> ProviderCalls:
    """Mock provider HTTP calls and ffmpeg so no network, key, or binary is needed."""

    calls = ProviderCalls()
    monkeypatch.setenv("DEEPL_TOKEN", "integration-key:fx")
    monkeypatch.setenv("OPENAI_API_KEY", "sk-integration")

    def _mock_translate_text(self: DeepLClient, **kwargs: object) -> str:
        _ = self
        calls.translations.append(kwargs)
        return _TRANSLATIONS.get(str(kwargs["text"]), f"[es] {kwargs['text']}")

    def _mock_chat_completion(self: OpenAIChatClient, **kwargs: object) -> str:
        _ = self
        calls.translations.append(kwargs)
        return "integration-mocked-translation"

    def _mock_synthesize_speech(self: OpenAISpeechClient, **kwargs: object) -> bytes:
        _ = self
        calls.speech.append(kwargs)
        return f"ID3:{kwargs['voice']}:{kwargs['text']}".encode("utf-8")

    def _mock_subprocess_run(
        command: list[str], **kwargs: object
    ) -> subprocess.CompletedProcess[str]:
        calls.ffmpeg.append(list(command))
        Path(command[-1]).write_bytes(b"ffmpeg-output")
        return subprocess.CompletedProcess(command, 0, stdout="", stderr="")

    monkeypatch.setattr(DeepLClient, "translate_text", _mock_translate_text)
    monkeypatch.setattr(OpenAIChatClient, "chat_completion_text", _mock_chat_completion)
    monkeypatch.setattr(OpenAISpeechClient, "synthesize_speech", _mock_synthesize_speech)
    monkeypatch.setattr(ffmpeg_module.subprocess, "run", _mock_subprocess_run)
    return calls


@pytest.fixture
def sentence_csv(tmp_path: Path) -> Path:
    """Write a two-sentence table with one translation missing."""

    table_path = tmp_path / "day1.csv"
    table_path.write_text(
        "enSentence;esSentence;voiceId\nHello;Hola;echo\nBye;;\n",
        encoding="utf-8",
    )
    return table_path
