"""Artifact storage abstraction.

Responsibilities:
- Address audio artifacts by `ArtifactKey` instead of raw paths.
- Expose existence checks used as the idempotency gate for provider calls.
- Offer a filesystem store for real runs and an in-memory store for tests.
"""

from __future__ import annotations

from pathlib import Path
from typing import Protocol

from ..models.datatypes import ArtifactKey


class ArtifactStore(Protocol):
    """Capability set required from an artifact backend."""

    def exists(self, key: ArtifactKey) -> bool:
        """Return whether an artifact is stored under the key."""

    def write(self, key: ArtifactKey, data: bytes) -> Path:
        """Store artifact bytes under the key and return its location."""

    def path(self, key: ArtifactKey) -> Path:
        """Return the location an artifact has, or would have, for the key."""


class LocalArtifactStore:
    """Filesystem-backed store laid out as `{root}/{language}/{fingerprint}.{ext}`."""

    def __init__(self, root: Path) -> None:
        """Initialize the store with a root output directory."""

        self.root = root

    def exists(self, key: ArtifactKey) -> bool:
        """Return whether the artifact file exists on disk."""

        return self.path(key).is_file()

    def write(self, key: ArtifactKey, data: bytes) -> Path:
        """Write artifact bytes, creating parent directories as needed."""

        path = self.path(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
        return path

    def path(self, key: ArtifactKey) -> Path:
        """Return the artifact file path under the store root."""

        return self.root / key.relative_path


class MemoryArtifactStore:
    """In-memory store with virtual paths rooted at `root`."""

    def __init__(self, root: Path = Path("memory")) -> None:
        self.root = root
        self.entries: dict[ArtifactKey, bytes] = {}

    def exists(self, key: ArtifactKey) -> bool:
        return key in self.entries

    def write(self, key: ArtifactKey, data: bytes) -> Path:
        self.entries[key] = data
        return self.path(key)

    def path(self, key: ArtifactKey) -> Path:
        return self.root / key.relative_path

    def read(self, key: ArtifactKey) -> bytes:
        """Return stored bytes for a key."""

        return self.entries[key]
