"""
Text-generation provider abstraction layer.

The brief pipeline talks to a provider through a unified streaming interface.
"""

from .base import (
    DeltaCallback,
    GenerationState,
    LLMProvider,
    LLMResponse,
    ProviderCapabilities,
    StatusCallback,
)
from .openai import OpenAIResponsesProvider
from .factory import create_provider, get_provider_from_env, ProviderType

__all__ = [
    "DeltaCallback",
    "GenerationState",
    "LLMProvider",
    "LLMResponse",
    "ProviderCapabilities",
    "StatusCallback",
    "OpenAIResponsesProvider",
    "create_provider",
    "get_provider_from_env",
    "ProviderType",
]
