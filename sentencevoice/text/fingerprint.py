"""Content fingerprints for sentence artifacts.

The fingerprint is the MD5 hex digest of the UTF-8 encoded source sentence. It
depends on the source text only, so the target sentence or voice can change
without orphaning already generated audio.
"""

from __future__ import annotations

from hashlib import md5


def fingerprint(source_text: str) -> str:
    """Return the stable 32-character artifact identifier for one source sentence."""

    return md5(source_text.encode("utf-8")).hexdigest()
