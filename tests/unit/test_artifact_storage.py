"""Unit tests for artifact store backends."""

from __future__ import annotations

from pathlib import Path

from sentencevoice.io import LocalArtifactStore, MemoryArtifactStore
from sentencevoice.models import ArtifactKey


def test_local_store_lays_out_language_and_fingerprint(tmp_path: Path) -> None:
    """Artifacts should be stored under `{root}/{language}/{fingerprint}.{ext}`."""

    store = LocalArtifactStore(tmp_path / "lesson")
    key = ArtifactKey(language="es", fingerprint="abc123")

    assert not store.exists(key)
    written = store.write(key, b"audio")

    assert written == tmp_path / "lesson" / "es" / "abc123.mp3"
    assert written.read_bytes() == b"audio"
    assert store.exists(key)
    assert store.path(key) == written


def test_local_store_treats_directories_as_missing(tmp_path: Path) -> None:
    """A directory at the artifact location should not count as an existing clip."""

    store = LocalArtifactStore(tmp_path)
    key = ArtifactKey(language="en", fingerprint="abc", extension="wav")
    (tmp_path / "en" / "abc.wav").mkdir(parents=True)

    assert not store.exists(key)


def test_memory_store_round_trips_bytes_with_virtual_paths() -> None:
    """Memory store should keep bytes by key and report deterministic paths."""

    store = MemoryArtifactStore(root=Path("virtual"))
    key = ArtifactKey(language="en", fingerprint="f00")

    path = store.write(key, b"clip")

    assert store.exists(key)
    assert store.read(key) == b"clip"
    assert path == Path("virtual") / "en" / "f00.mp3"
