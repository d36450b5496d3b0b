"""Integration tests for the `build` command with mocked providers."""

from __future__ import annotations

from pathlib import Path

from typer.testing import CliRunner

from sentencevoice.cli import app
from sentencevoice.text import fingerprint
from tests.provider_doubles import ProviderCalls


def _invoke(*args: str) -> object:
    return CliRunner().invoke(app, ["build", *args, "--synthesis-interval", "0"])


def test_build_translates_synthesizes_and_writes_table_back(
    sentence_csv: Path, provider_calls: ProviderCalls
) -> None:
    """Build should fill the missing translation, create four clips, and persist hashes."""

    result = _invoke(str(sentence_csv))

    assert result.exit_code == 0, result.output
    assert provider_calls.translations == [{"text": "Bye", "target_lang": "es"}]
    assert [(call["voice"], call["text"]) for call in provider_calls.speech] == [
        ("echo", "Hello"),
        ("nova", "Hola"),
        ("coral", "Bye"),
        ("nova", "Adiós"),
    ]
    output_dir = sentence_csv.with_suffix("")
    hello, bye = fingerprint("Hello"), fingerprint("Bye")
    assert (output_dir / "en" / f"{hello}.mp3").read_bytes() == b"ID3:echo:Hello"
    assert (output_dir / "es" / f"{bye}.mp3").read_bytes() == "ID3:nova:Adiós".encode("utf-8")
    assert sentence_csv.read_text(encoding="utf-8").splitlines() == [
        '"enSentence";"esSentence";"audioFileHash";"voiceId"',
        f'"Hello";"Hola";"{hello}";"echo"',
        f'"Bye";"Adiós";"{bye}";"coral"',
    ]
    assert "Translated: 1" in result.output
    assert "Clips synthesized: 4" in result.output
    assert "[progress] command=build | 1/3 stage=order" in result.output
    assert provider_calls.ffmpeg == []


def test_build_rerun_reuses_every_artifact(
    sentence_csv: Path, provider_calls: ProviderCalls
) -> None:
    """A second run over the written-back table should make no provider calls."""

    first = _invoke(str(sentence_csv))
    assert first.exit_code == 0, first.output
    provider_calls.translations.clear()
    provider_calls.speech.clear()

    second = _invoke(str(sentence_csv))

    assert second.exit_code == 0, second.output
    assert provider_calls.translations == []
    assert provider_calls.speech == []
    assert "Clips reused: 4" in second.output
    assert "event=reused" in second.output


def test_build_with_concat_assembles_combined_track_once(
    sentence_csv: Path, provider_calls: ProviderCalls
) -> None:
    """Concat should render fillers, run one concat, and skip on the next run."""

    result = _invoke(str(sentence_csv), "--concat", "--repetitions", "2")

    assert result.exit_code == 0, result.output
    combined = sentence_csv.parent / "day1_combined.mp3"
    assert combined.read_bytes() == b"ffmpeg-output"
    assert f"Combined track: {combined}" in result.output
    concat_commands = [command for command in provider_calls.ffmpeg if "concat" in command]
    filler_commands = [command for command in provider_calls.ffmpeg if "lavfi" in command]
    assert len(concat_commands) == 1
    assert len(filler_commands) == 2
    assert not list(sentence_csv.parent.glob("*.concat.txt"))

    provider_calls.ffmpeg.clear()
    rerun = _invoke(str(sentence_csv), "--concat")

    assert rerun.exit_code == 0, rerun.output
    assert provider_calls.ffmpeg == []
    assert "(already exists, skipped)" in rerun.output


def test_build_disable_translation_keeps_missing_target(
    sentence_csv: Path, provider_calls: ProviderCalls
) -> None:
    """Disabled translation should leave the target blank and synthesize only its source."""

    result = _invoke(str(sentence_csv), "--disable-translation")

    assert result.exit_code == 0, result.output
    assert provider_calls.translations == []
    assert [call["text"] for call in provider_calls.speech] == ["Hello", "Hola", "Bye"]
    assert f'"Bye";"";"{fingerprint("Bye")}";"coral"' in sentence_csv.read_text(encoding="utf-8")


def test_build_disable_synthesis_writes_hashes_without_audio(
    sentence_csv: Path, provider_calls: ProviderCalls
) -> None:
    """Disabled synthesis should still translate and record fingerprints."""

    result = _invoke(str(sentence_csv), "--disable-synthesis")

    assert result.exit_code == 0, result.output
    assert provider_calls.speech == []
    assert not sentence_csv.with_suffix("").exists()
    assert fingerprint("Hello") in sentence_csv.read_text(encoding="utf-8")


def test_build_force_voice_id_overrides_source_voices(
    sentence_csv: Path, provider_calls: ProviderCalls, tmp_path: Path
) -> None:
    """Forced voice should apply to every source clip and be written back."""

    result = _invoke(str(sentence_csv), "--force-voice-id", "sage", "--out", str(tmp_path / "a"))

    assert result.exit_code == 0, result.output
    assert [call["voice"] for call in provider_calls.speech] == ["sage", "nova", "sage", "nova"]
    assert (tmp_path / "a" / "en" / f"{fingerprint('Hello')}.mp3").is_file()
    table_lines = sentence_csv.read_text(encoding="utf-8").splitlines()
    assert all(line.endswith('"sage"') for line in table_lines[1:])


def test_build_with_openai_translator(sentence_csv: Path, provider_calls: ProviderCalls) -> None:
    """`--translator openai` should route missing translations through chat completions."""

    result = _invoke(str(sentence_csv), "--translator", "openai", "--disable-synthesis")

    assert result.exit_code == 0, result.output
    assert len(provider_calls.translations) == 1
    assert provider_calls.translations[0]["model"] == "gpt-4.1-mini"
    assert '"Bye";"integration-mocked-translation"' in sentence_csv.read_text(encoding="utf-8")


def test_build_reads_defaults_from_yaml_config(
    sentence_csv: Path, provider_calls: ProviderCalls, tmp_path: Path
) -> None:
    """YAML config should supply defaults that CLI options can override."""

    config_path = tmp_path / "sentencevoice.yml"
    config_path.write_text(
        f"input_csv: {sentence_csv}\ntarget_voice: shimmer\ndisable_synthesis: true\n",
        encoding="utf-8",
    )

    result = CliRunner().invoke(
        app,
        ["build", "--config", str(config_path), "--enable-synthesis", "--synthesis-interval", "0"],
    )

    assert result.exit_code == 0, result.output
    assert [call["voice"] for call in provider_calls.speech] == [
        "echo",
        "shimmer",
        "coral",
        "shimmer",
    ]
