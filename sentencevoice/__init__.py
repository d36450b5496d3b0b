"""Top-level package for SentenceVoice.

This package turns a bilingual sentence table into per-sentence speech clips
and an optional combined study track. The main orchestration entry point is
`SentencePipeline`.
"""

from .pipeline import SentencePipeline

__all__ = ["SentencePipeline", "__version__"]

__version__ = "0.1.0"
