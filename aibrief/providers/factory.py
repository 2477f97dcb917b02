"""
Provider factory for creating text-generation provider instances.

Handles provider selection based on configuration and available API keys.
"""

from enum import Enum

from .base import LLMProvider
from .openai import DEFAULT_BASE_URL, OpenAIResponsesProvider


class ProviderType(Enum):
    """Available provider types."""
    OPENAI = "openai"


def create_provider(
    provider_type: ProviderType | str,
    api_key: str,
    default_model: str | None = None,
    **kwargs,
) -> LLMProvider:
    """
    Create a provider instance.

    Args:
        provider_type: The provider to create
        api_key: API key for the provider
        default_model: Optional default model override
        **kwargs: Provider-specific arguments (base_url, timeouts, session_factory)

    Returns:
        Configured LLMProvider instance

    Raises:
        ValueError: If provider_type is unknown
    """
    if isinstance(provider_type, str):
        try:
            provider_type = ProviderType(provider_type.lower())
        except ValueError:
            raise ValueError(
                f"Unknown provider: {provider_type}. "
                f"Available: {[p.value for p in ProviderType]}"
            )

    if provider_type == ProviderType.OPENAI:
        return OpenAIResponsesProvider(
            api_key=api_key,
            default_model=default_model or "gpt-4o-mini",
            base_url=kwargs.get("base_url") or DEFAULT_BASE_URL,
            request_timeout=kwargs.get("request_timeout", 90),
            resource_timeout=kwargs.get("resource_timeout", 120),
            session_factory=kwargs.get("session_factory"),
        )
    raise ValueError(f"Unknown provider type: {provider_type}")


def get_provider_from_env(
    openai_key: str | None = None,
    default_model: str | None = None,
    base_url: str | None = None,
    request_timeout: float = 90,
    resource_timeout: float = 120,
) -> LLMProvider | None:
    """
    Create a provider from configured keys.

    Returns:
        Configured LLMProvider or None if no key is available
    """
    if not openai_key:
        return None
    return create_provider(
        ProviderType.OPENAI,
        openai_key,
        default_model=default_model,
        base_url=base_url,
        request_timeout=request_timeout,
        resource_timeout=resource_timeout,
    )
