"""Input/output adapters for SentenceVoice.

This package contains the sentence table adapter and artifact storage
backends used by the pipeline.
"""

from .sentence_table import SentenceTable
from .storage import ArtifactStore, LocalArtifactStore, MemoryArtifactStore

__all__ = ["SentenceTable", "ArtifactStore", "LocalArtifactStore", "MemoryArtifactStore"]
