"""Text identity helpers.

Sentences are addressed by a content fingerprint that names their audio
artifacts on disk.
"""

from .fingerprint import fingerprint

__all__ = ["fingerprint"]
