"""Semicolon-separated sentence table adapter.

Responsibilities:
- Read `SentenceRecord` rows from a CSV table with `;` separators.
- Write enriched records back with a fingerprint column.

Table layout for an `en`/`es` pair:

    enSentence;esSentence;audioFileHash;voiceId

Only the source sentence column is required. Header names match
case-insensitively; a table without a recognized header row is read
positionally as `source;target;voice`.
"""

from __future__ import annotations

import csv
from pathlib import Path

from ..errors import InputFormatError
from ..models.datatypes import LanguagePair, SentenceRecord
from ..parsing import normalize_optional_string


CSV_SEPARATOR = ";"
FINGERPRINT_COLUMN = "audioFileHash"
VOICE_COLUMN = "voiceId"


class SentenceTable:
    """Read and write sentence tables for one language pair."""

    def __init__(self, languages: LanguagePair | None = None) -> None:
        self.languages = languages if languages is not None else LanguagePair()

    @property
    def source_column(self) -> str:
        return f"{self.languages.source}Sentence"

    @property
    def target_column(self) -> str:
        return f"{self.languages.target}Sentence"

    @property
    def headers(self) -> list[str]:
        """Return write-back column order."""

        return [self.source_column, self.target_column, FINGERPRINT_COLUMN, VOICE_COLUMN]

    def read(self, path: Path) -> list[SentenceRecord]:
        """Parse sentence records from a table file.

        Raises:
            InputFormatError: If the file is missing or a row has no source sentence.
        """

        try:
            with path.open("r", encoding="utf-8-sig", newline="") as handle:
                rows = [row for row in csv.reader(handle, delimiter=CSV_SEPARATOR)]
        except FileNotFoundError as exc:
            raise InputFormatError(
                f"Sentence table not found: `{path}`.",
                path=path,
                hint="Pass an existing `.csv` file as the first argument.",
            ) from exc
        except (UnicodeDecodeError, csv.Error) as exc:
            raise InputFormatError(
                f"Sentence table `{path}` could not be parsed: {exc}",
                path=path,
            ) from exc

        if not rows:
            return []

        columns = self._header_columns(rows[0], path)
        body = rows[1:] if columns is not None else rows
        first_line = 2 if columns is not None else 1
        if columns is None:
            columns = {"source": 0, "target": 1, "voice": 2}

        records: list[SentenceRecord] = []
        for offset, row in enumerate(body):
            if not any(cell.strip() for cell in row):
                continue
            source_text = self._cell(row, columns.get("source"))
            if source_text is None:
                raise InputFormatError(
                    f"Row {first_line + offset} of `{path}` has no source sentence.",
                    path=path,
                )
            records.append(
                SentenceRecord(
                    source_text=source_text,
                    target_text=self._cell(row, columns.get("target")),
                    voice_id=self._cell(row, columns.get("voice")),
                )
            )
        return records

    def write(self, path: Path, records: list[SentenceRecord]) -> Path:
        """Write records with every value quoted, in `headers` column order."""

        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w", encoding="utf-8", newline="") as handle:
            writer = csv.writer(
                handle,
                delimiter=CSV_SEPARATOR,
                quoting=csv.QUOTE_ALL,
                lineterminator="\n",
            )
            writer.writerow(self.headers)
            for record in records:
                writer.writerow(
                    [
                        record.source_text,
                        record.target_text or "",
                        record.fingerprint or "",
                        record.voice_id or "",
                    ]
                )
        return path

    def _header_columns(self, row: list[str], path: Path) -> dict[str, int] | None:
        """Map logical columns to indices, or return `None` for a headerless table."""

        normalized = [cell.strip().lower() for cell in row]
        known = {
            self.source_column.lower(): "source",
            self.target_column.lower(): "target",
            VOICE_COLUMN.lower(): "voice",
            FINGERPRINT_COLUMN.lower(): "fingerprint",
        }
        columns = {known[name]: index for index, name in enumerate(normalized) if name in known}
        if not columns:
            return None
        if "source" not in columns:
            raise InputFormatError(
                f"Sentence table `{path}` is missing required column `{self.source_column}`.",
                path=path,
            )
        return columns

    @staticmethod
    def _cell(row: list[str], index: int | None) -> str | None:
        if index is None or index >= len(row):
            return None
        return normalize_optional_string(row[index])
