"""Module entrypoint for running SentenceVoice as ``python -m sentencevoice``."""

from __future__ import annotations

from sentencevoice.cli import main


if __name__ == "__main__":
    main()
