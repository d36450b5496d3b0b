"""Text-to-speech provider abstractions.

This package contains voice selection rules, the speech provider protocol, and
the idempotent synthesizer used by the pipeline.
"""

from .synthesizer import OpenAISpeechProvider, SpeechProvider, SpeechSynthesizer
from .voices import AVAILABLE_VOICES, default_voice, select_voice

__all__ = [
    "OpenAISpeechProvider",
    "SpeechProvider",
    "SpeechSynthesizer",
    "AVAILABLE_VOICES",
    "default_voice",
    "select_voice",
]
