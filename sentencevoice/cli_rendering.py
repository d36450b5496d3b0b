"""CLI output and error rendering helpers.

This module centralizes user-facing CLI presentation for command diagnostics,
run summaries, skipped-record listings, and voice tables.
"""

from __future__ import annotations

from pathlib import Path
from typing import NoReturn

import typer

from .errors import PipelineStageError
from .models.datatypes import PipelineResult


def exit_with_command_error(command_name: str, exc: Exception) -> NoReturn:
    """Print concise diagnostics for command failures and exit with code 1."""

    if isinstance(exc, PipelineStageError):
        typer.secho(
            f"{command_name} failed at stage `{exc.stage}`: {exc.detail}",
            fg=typer.colors.RED,
            err=True,
        )
        if exc.hint:
            typer.secho(f"Hint: {exc.hint}", fg=typer.colors.YELLOW, err=True)
    else:
        typer.secho(f"{command_name} failed: {exc}", fg=typer.colors.RED, err=True)
    raise typer.Exit(code=1) from exc


def echo_run_summary(result: PipelineResult, table_path: Path, output_dir: Path) -> None:
    """Print record and artifact counters for a finished run."""

    typer.echo(f"Sentences: {len(result.records)}")
    typer.echo(f"Translated: {result.translated}")
    typer.echo(f"Clips synthesized: {result.synthesized}")
    typer.echo(f"Clips reused: {result.reused}")
    typer.echo(f"Sentence table: {table_path}")
    typer.echo(f"Artifacts: {output_dir}")


def echo_failures(result: PipelineResult) -> None:
    """Print skipped records, one line each, in record order."""

    if not result.failures:
        return
    typer.secho(f"Skipped sentences: {len(result.failures)}", fg=typer.colors.YELLOW)
    for failure in sorted(result.failures, key=lambda item: item.index):
        typer.echo(f"  {failure.index + 1}. [{failure.stage}] {failure.detail}")


def echo_combined_track(combined: Path | None, expected: Path) -> None:
    """Print the combined track location, or note that an existing one was kept."""

    if combined is None:
        typer.echo(f"Combined track: {expected} (already exists, skipped)")
    else:
        typer.echo(f"Combined track: {combined}")


def echo_voice_table(
    defaults: dict[str, str],
    available: tuple[str, ...],
) -> None:
    """Print default voices per language followed by all selectable voices."""

    typer.echo("Default voices:")
    for language in sorted(defaults):
        typer.echo(f"  {language}: {defaults[language]}")
    typer.echo(f"Available voices: {', '.join(available)}")
