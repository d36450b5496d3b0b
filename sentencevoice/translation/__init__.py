"""Sentence translation: provider-backed translators and the target resolver."""

from .prompts import PromptLibrary
from .resolver import TranslationResolver
from .translator import DeepLTranslator, OpenAITranslator, Translator

__all__ = [
    "DeepLTranslator",
    "OpenAITranslator",
    "PromptLibrary",
    "TranslationResolver",
    "Translator",
]
