"""Command-line interface for SentenceVoice.

Responsibilities:
- Expose user-facing commands for building sentence audio.
- Convert CLI arguments into `SentenceVoiceConfig` and wire pipeline stages.

Key public functions:
- `app`: Typer application instance.
- `main`: invoke the Typer application.
"""

from __future__ import annotations

from dataclasses import replace
import os
from pathlib import Path
from typing import Annotated, Any

import typer

from .audio import AudioAssembler, FfmpegConcatenator, FillerAssetProvider
from .cli_rendering import (
    echo_combined_track,
    echo_failures,
    echo_run_summary,
    echo_voice_table,
    exit_with_command_error,
)
from .config import ConfigLoader, RuntimeConfigSources, SentenceVoiceConfig, load_env_file
from .errors import InputFormatError, PipelineStageError
from .io import LocalArtifactStore, SentenceTable
from .models.datatypes import EmptyAudioPolicy, FailurePolicy, PipelineResult
from .parsing import MAX_REPETITIONS, coerce_repetitions
from .pipeline import OrderedTaskGroup, SentencePipeline
from .provider_factory import ProviderFactory
from .providers.rate_limiter import RateLimiter
from .telemetry.logger import RunLogger
from .translation.resolver import TranslationResolver
from .tts import AVAILABLE_VOICES, SpeechSynthesizer
from .tts.voices import DEFAULT_VOICES

app = typer.Typer(
    name="sentencevoice",
    no_args_is_help=True,
    help="SentenceVoice CLI: bilingual sentence tables to study audio.",
)

FILLER_DIRECTORY_NAME = "_fillers"


class BuildProgressIndicator:
    """Render deterministic per-stage progress lines for long-running commands."""

    _SPINNER_FRAMES = "|/-\\"

    def __init__(self, command_name: str) -> None:
        self._command_name = command_name

    def on_stage_start(self, stage_name: str, stage_index: int, stage_total: int) -> None:
        """Print one progress line for a stage start transition."""

        spinner = self._SPINNER_FRAMES[(stage_index - 1) % len(self._SPINNER_FRAMES)]
        typer.echo(
            f"[progress] command={self._command_name} "
            f"{spinner} {stage_index}/{stage_total} stage={stage_name}"
        )


def _load_yaml_config(config_path: Path | None) -> SentenceVoiceConfig | None:
    """Load a YAML config file when requested and map failures to stage errors."""

    if config_path is None:
        return None

    try:
        return ConfigLoader.from_yaml(config_path, require_input=False)
    except FileNotFoundError as exc:
        raise PipelineStageError(
            stage="config",
            detail=f"Config file not found: `{config_path}`.",
            hint="Provide an existing path via `--config <path.yaml>`.",
        ) from exc
    except ValueError as exc:
        raise PipelineStageError(
            stage="config",
            detail=f"Invalid config file `{config_path}`: {exc}",
            hint="Fix config schema/values and rerun.",
        ) from exc
    except Exception as exc:
        raise PipelineStageError(
            stage="config",
            detail=f"Failed to load config file `{config_path}`: {exc}",
            hint="Verify YAML syntax and file permissions.",
        ) from exc


def _resolve_build_config(
    config_file: Path | None,
    input_csv: Path | None,
    overrides: dict[str, Any],
    runtime_cli_values: dict[str, str],
) -> SentenceVoiceConfig:
    """Resolve effective build config from YAML defaults and explicit CLI overrides."""

    loaded_config = _load_yaml_config(config_file)
    if input_csv is None and (loaded_config is None or loaded_config.input_csv == Path("")):
        raise PipelineStageError(
            stage="config",
            detail="Input CSV path is required when `--config` does not provide one.",
            hint="Pass `<input.csv>` or use `--config <path.yaml>` with `input_csv`.",
        )

    base_config = loaded_config if loaded_config is not None else SentenceVoiceConfig(
        input_csv=input_csv or Path("")
    )
    explicit = {key: value for key, value in overrides.items() if value is not None}
    if input_csv is not None:
        explicit["input_csv"] = input_csv
    config = replace(
        base_config,
        **explicit,
        runtime_sources=RuntimeConfigSources(cli=runtime_cli_values, env=os.environ),
    )
    try:
        config.validate()
    except ValueError as exc:
        raise PipelineStageError(
            stage="config",
            detail=str(exc),
            hint="Fix the option value and rerun.",
        ) from exc
    return config


def _build_pipeline(
    config: SentenceVoiceConfig,
    run_logger: RunLogger,
    progress: BuildProgressIndicator,
) -> SentencePipeline:
    """Wire translation and synthesis stages for a resolved config."""

    runtime = config.resolved_provider_runtime()
    translator = None
    if not config.disable_translation:
        translator_key = (
            runtime.deepl_api_key
            if runtime.translator_provider == "deepl"
            else runtime.openai_api_key
        )
        translator = ProviderFactory.create_translator(
            runtime.translator_provider,
            runtime.translate_model,
            api_key=translator_key,
        )

    synthesizer = None
    if not config.disable_synthesis:
        synthesizer = SpeechSynthesizer(
            provider=ProviderFactory.create_speech_provider(
                runtime.tts_provider,
                runtime.tts_model,
                api_key=runtime.openai_api_key,
                speaking_rate=config.tts_speed,
            ),
            store=LocalArtifactStore(config.resolved_output_dir),
            rate_limiter=RateLimiter(min_interval_seconds=config.synthesis_interval_seconds),
            empty_audio_policy=EmptyAudioPolicy(config.empty_audio_policy),
            audio_format=config.audio_format,
            run_logger=run_logger,
        )

    return SentencePipeline(
        resolver=TranslationResolver(translator, run_logger=run_logger),
        synthesizer=synthesizer,
        languages=config.languages(),
        source_voice=config.source_voice,
        target_voice=config.target_voice,
        task_group=OrderedTaskGroup(max_workers=config.translation_concurrency),
        run_logger=run_logger,
        stage_progress_callback=progress.on_stage_start,
    )


def _assemble_combined_track(
    config: SentenceVoiceConfig,
    result: PipelineResult,
    run_logger: RunLogger,
) -> Path | None:
    """Assemble the combined track from records that completed every stage."""

    output_dir = config.resolved_output_dir
    skipped = {failure.index for failure in result.failures}
    records = [record for index, record in enumerate(result.records) if index not in skipped]
    assembler = AudioAssembler(
        store=LocalArtifactStore(output_dir),
        concatenator=FfmpegConcatenator(audio_format=config.audio_format, run_logger=run_logger),
        fillers=FillerAssetProvider(
            output_dir / FILLER_DIRECTORY_NAME,
            timer_path=config.timer_asset,
            silence_path=config.silence_asset,
            audio_format=config.audio_format,
        ),
        languages=config.languages(),
        audio_format=config.audio_format,
        run_logger=run_logger,
    )
    return assembler.assemble(
        records,
        output_dir,
        repetitions=config.repetitions,
        reverse_columns=config.reverse_columns,
    )


@app.command("build")
def build_command(
    input_csv: Annotated[
        Path | None,
        typer.Argument(
            help="Path to the `;`-separated sentence table. Required unless set by `--config`.",
        ),
    ] = None,
    out: Annotated[
        Path | None,
        typer.Option("--out", help="Artifact directory (default: table path without extension)."),
    ] = None,
    config_file: Annotated[
        Path | None,
        typer.Option("--config", help="Path to YAML config file with command defaults."),
    ] = None,
    force_voice_id: Annotated[
        str | None,
        typer.Option("--force-voice-id", help="Voice used for every source clip."),
    ] = None,
    disable_translation: Annotated[
        bool | None,
        typer.Option(
            "--disable-translation/--enable-translation",
            help="Never call the translation provider.",
        ),
    ] = None,
    disable_synthesis: Annotated[
        bool | None,
        typer.Option(
            "--disable-synthesis/--enable-synthesis",
            help="Never call the speech provider.",
        ),
    ] = None,
    random_order: Annotated[
        bool | None,
        typer.Option("--random-order/--keep-order", help="Shuffle sentences before processing."),
    ] = None,
    concat: Annotated[
        bool | None,
        typer.Option("--concat/--no-concat", help="Assemble one combined study track."),
    ] = None,
    repetitions: Annotated[
        str | None,
        typer.Option("--repetitions", help="Study clip repetitions per sentence (default 1)."),
    ] = None,
    reverse_columns: Annotated[
        bool | None,
        typer.Option(
            "--reverse-columns/--no-reverse-columns",
            help="Lead each sentence with the source language instead of the target.",
        ),
    ] = None,
    translator: Annotated[
        str | None,
        typer.Option("--translator", help="Translation provider: `deepl` or `openai`."),
    ] = None,
    skip_failed: Annotated[
        bool | None,
        typer.Option(
            "--skip-failed/--fail-fast",
            help="Skip sentences whose translation or synthesis fails instead of stopping.",
        ),
    ] = None,
    synthesis_interval: Annotated[
        float | None,
        typer.Option(
            "--synthesis-interval",
            help="Minimum seconds between speech requests (default 1.0).",
        ),
    ] = None,
) -> None:
    """Translate, synthesize, and optionally assemble one sentence table."""

    try:
        load_env_file()
        repetition_count = None
        if repetitions is not None:
            try:
                repetition_count = coerce_repetitions(repetitions)
            except ValueError as exc:
                raise InputFormatError(
                    str(exc),
                    hint=f"Pass a whole number from 0 to {MAX_REPETITIONS} to `--repetitions`.",
                ) from exc
        failure_policy = None
        if skip_failed is not None:
            failure_policy = (
                FailurePolicy.SKIP.value if skip_failed else FailurePolicy.FAIL_FAST.value
            )
        runtime_cli_values: dict[str, str] = {}
        if translator is not None:
            runtime_cli_values["translator_provider"] = translator

        config = _resolve_build_config(
            config_file=config_file,
            input_csv=input_csv,
            overrides={
                "output_dir": out,
                "force_voice_id": force_voice_id,
                "disable_translation": disable_translation,
                "disable_synthesis": disable_synthesis,
                "random_order": random_order,
                "concat": concat,
                "repetitions": repetition_count,
                "reverse_columns": reverse_columns,
                "translator_provider": translator,
                "failure_policy": failure_policy,
                "synthesis_interval_seconds": synthesis_interval,
            },
            runtime_cli_values=runtime_cli_values,
        )

        run_logger = RunLogger()
        table = SentenceTable(config.languages())
        records = table.read(config.input_csv)
        pipeline = _build_pipeline(config, run_logger, BuildProgressIndicator("build"))
        result = pipeline.execute(records, config.pipeline_options())
        table.write(config.input_csv, result.records)

        combined: Path | None = None
        if config.concat:
            combined = _assemble_combined_track(config, result, run_logger)
    except Exception as exc:
        exit_with_command_error("build", exc)

    echo_run_summary(result, config.input_csv, config.resolved_output_dir)
    echo_failures(result)
    if config.concat:
        expected = config.resolved_output_dir.with_name(
            f"{config.resolved_output_dir.name}_combined.{config.audio_format}"
        )
        echo_combined_track(combined, expected)


@app.command("voices")
def voices_command() -> None:
    """List default voices per language and all selectable voices."""

    echo_voice_table(DEFAULT_VOICES, AVAILABLE_VOICES)


def main() -> None:
    """CLI entrypoint for console scripts."""
    app()


if __name__ == "__main__":
    main()
