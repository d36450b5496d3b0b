"""CLI error-handling tests for concise stage diagnostics."""

from __future__ import annotations

from pathlib import Path
import subprocess

import pytest
from typer.testing import CliRunner

from sentencevoice.audio import ffmpeg as ffmpeg_module
from sentencevoice.cli import app
from sentencevoice.providers import DeepLClient, OpenAISpeechClient, ProviderError
from tests.provider_doubles import ProviderCalls


def test_build_reports_missing_sentence_table(tmp_path: Path) -> None:
    """A missing table should fail at the input stage with exit code 1."""

    missing = tmp_path / "missing.csv"

    result = CliRunner().invoke(app, ["build", str(missing)])

    assert result.exit_code == 1
    assert "build failed at stage `input`" in result.output
    assert f"Sentence table not found: `{missing}`." in result.output


def test_build_reports_row_without_source_sentence(tmp_path: Path) -> None:
    """Rows lacking a source sentence should be reported with their line number."""

    table_path = tmp_path / "broken.csv"
    table_path.write_text("enSentence;esSentence\n;Hola\n", encoding="utf-8")

    result = CliRunner().invoke(app, ["build", str(table_path)])

    assert result.exit_code == 1
    assert "Row 2" in result.output
    assert "Hint: Use `;`-separated columns" in result.output


def test_build_rejects_non_numeric_repetitions(sentence_csv: Path) -> None:
    """A non-numeric repetition count should be an input error."""

    result = CliRunner().invoke(app, ["build", str(sentence_csv), "--repetitions", "twice"])

    assert result.exit_code == 1
    assert "build failed at stage `input`: Repetition count `twice` is not a number." in (
        result.output
    )


@pytest.mark.parametrize(
    ("value", "message"),
    [
        ("inf", "Repetition count `inf` is not a finite number."),
        ("1e400", "Repetition count `1e400` is not a finite number."),
        ("1e9", "Repetition count `1e9` exceeds the maximum of 100."),
    ],
)
def test_build_rejects_unbounded_repetitions(sentence_csv: Path, value: str, message: str) -> None:
    """Overflowing or oversized repetition counts should be input errors."""

    result = CliRunner().invoke(app, ["build", str(sentence_csv), "--repetitions", value])

    assert result.exit_code == 1
    assert f"build failed at stage `input`: {message}" in result.output
    assert "Pass a whole number from 0 to 100" in result.output


def test_build_reports_missing_config_file() -> None:
    """Build should fail with stage-aware diagnostics when `--config` path is missing."""

    result = CliRunner().invoke(app, ["build", "--config", "missing-sentencevoice.yaml"])

    assert result.exit_code == 1
    assert "build failed at stage `config`" in result.output
    assert "Config file not found: `missing-sentencevoice.yaml`." in result.output


def test_build_requires_input_without_config() -> None:
    """Without a table path or config, build should explain what is missing."""

    result = CliRunner().invoke(app, ["build"])

    assert result.exit_code == 1
    assert "Input CSV path is required" in result.output


def test_build_rejects_unknown_translator(sentence_csv: Path) -> None:
    """Unsupported translator ids should fail at the config stage."""

    result = CliRunner().invoke(app, ["build", str(sentence_csv), "--translator", "google"])

    assert result.exit_code == 1
    assert "build failed at stage `config`" in result.output
    assert "Unsupported `translator_provider` value `google`" in result.output


def test_build_translation_failure_names_sentence(
    monkeypatch: pytest.MonkeyPatch, sentence_csv: Path
) -> None:
    """Provider failures during translation should stop the run and quote the input."""

    def _failing_translate(self: DeepLClient, **kwargs: object) -> str:
        raise ProviderError("DeepL quota is insufficient for this request (HTTP 456).")

    monkeypatch.setattr(DeepLClient, "translate_text", _failing_translate)

    result = CliRunner().invoke(app, ["build", str(sentence_csv)])

    assert result.exit_code == 1
    assert 'build failed at stage `translate`: Translation failed for "Bye"' in result.output
    assert "HTTP 456" in result.output


def test_build_skip_failed_continues_past_synthesis_failures(
    monkeypatch: pytest.MonkeyPatch, sentence_csv: Path, provider_calls: ProviderCalls
) -> None:
    """With `--skip-failed`, failing sentences are listed and the rest are built."""

    def _selective_speech(self: OpenAISpeechClient, **kwargs: object) -> bytes:
        provider_calls.speech.append(kwargs)
        if kwargs["text"] == "Bye":
            raise ProviderError("OpenAI request failed (HTTP 500).")
        return b"ID3"

    monkeypatch.setattr(OpenAISpeechClient, "synthesize_speech", _selective_speech)

    result = CliRunner().invoke(
        app,
        ["build", str(sentence_csv), "--skip-failed", "--synthesis-interval", "0"],
    )

    assert result.exit_code == 0, result.output
    assert "Skipped sentences: 1" in result.output
    assert '  2. [synthesize] Speech synthesis failed for "Bye" [en]' in result.output
    assert [call["text"] for call in provider_calls.speech] == ["Hello", "Hola", "Bye"]


def test_build_reports_assembly_failure_and_keeps_no_partial_track(
    monkeypatch: pytest.MonkeyPatch, sentence_csv: Path
) -> None:
    """ffmpeg failures should surface stderr and leave no combined file."""

    def _failing_run(command: list[str], **kwargs: object) -> subprocess.CompletedProcess[str]:
        if "concat" in command:
            Path(command[-1]).write_bytes(b"partial")
            raise subprocess.CalledProcessError(1, command, stderr="Invalid data found")
        Path(command[-1]).write_bytes(b"filler")
        return subprocess.CompletedProcess(command, 0, stdout="", stderr="")

    monkeypatch.setattr(ffmpeg_module.subprocess, "run", _failing_run)

    result = CliRunner().invoke(
        app,
        ["build", str(sentence_csv), "--concat", "--synthesis-interval", "0"],
    )

    assert result.exit_code == 1
    assert "build failed at stage `assemble`" in result.output
    assert "Invalid data found" in result.output
    assert not (sentence_csv.parent / "day1_combined.mp3").exists()
    assert not (sentence_csv.parent / "day1_combined.partial.mp3").exists()


def test_voices_command_lists_defaults() -> None:
    """Voices command should print default voices per language and all voices."""

    result = CliRunner().invoke(app, ["voices"])

    assert result.exit_code == 0
    assert "  en: coral" in result.output
    assert "  es: nova" in result.output
    assert "Available voices: alloy, ash" in result.output
