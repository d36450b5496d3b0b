"""Provider HTTP clients and request pacing.

This package wraps the translation and speech REST APIs behind small
requests-based clients that raise `ProviderError` on failure.
"""

from .deepl_client import DeepLClient
from .http_client import ProviderError
from .openai_client import OpenAIChatClient, OpenAISpeechClient
from .rate_limiter import RateLimiter

__all__ = [
    "DeepLClient",
    "OpenAIChatClient",
    "OpenAISpeechClient",
    "ProviderError",
    "RateLimiter",
]
