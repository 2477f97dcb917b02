"""
Base text-generation provider interface.

Defines the abstract interface that provider implementations must follow.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable

StatusCallback = Callable[[str], None]
DeltaCallback = Callable[[str], None]


class GenerationState(Enum):
    """Lifecycle of a single generation call."""
    IDLE = "idle"
    CONNECTING = "connecting"
    STREAMING = "streaming"
    RETRYING = "retrying"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class ProviderCapabilities:
    """Describes what features a provider supports."""
    supports_system_prompt: bool = True
    supports_streaming: bool = True
    supports_temperature: bool = True


@dataclass
class LLMResponse:
    """Standardized response from any provider."""
    text: str
    model: str
    streamed: bool = True
    attempts: int = 1
    metadata: dict = field(default_factory=dict)


class LLMProvider(ABC):
    """
    Abstract base class for text-generation providers.

    Implementations stream deltas to on_delta sequentially, in arrival
    order, from the task that awaits generate(). Cancelling that task must
    abort the in-flight request.
    """

    state: GenerationState = GenerationState.IDLE

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the provider name (e.g., 'openai')."""
        pass

    @property
    @abstractmethod
    def capabilities(self) -> ProviderCapabilities:
        """Return the provider's capabilities."""
        pass

    @abstractmethod
    async def generate(
        self,
        user_prompt: str,
        system_prompt: str | None = None,
        on_status: StatusCallback | None = None,
        on_delta: DeltaCallback | None = None,
    ) -> LLMResponse:
        """
        Generate text for a prompt, streaming deltas as they arrive.

        Args:
            user_prompt: The instruction document
            system_prompt: Optional system prompt for context
            on_status: Called with human-readable progress messages
            on_delta: Called with each text fragment in arrival order

        Returns:
            LLMResponse with the fully assembled text

        Raises:
            GenerationError: on transport, provider or empty-output failures
        """
        pass
