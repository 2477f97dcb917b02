"""
OpenAI provider implementation.

Talks to the Responses API over aiohttp and consumes its server-sent event
stream directly so that each text delta can be relayed as it arrives.

Retry policy:
- Timeouts are retried exactly once after a short fixed backoff
- Provider error events and HTTP errors are never retried
- A stream that finishes without any text is re-requested once without
  streaming before the call is declared empty
"""

import asyncio
import json
import logging
from dataclasses import dataclass
from typing import AsyncIterable
from urllib.parse import urlparse

import aiohttp
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_fixed

from ..exceptions import (
    EmptyResponseError,
    GenerationError,
    GenerationTimeoutError,
    ProviderAPIError,
    ProviderHTTPError,
)
from ..prompt import SYSTEM_PROMPT, temperature_for_model
from .base import (
    DeltaCallback,
    GenerationState,
    LLMProvider,
    LLMResponse,
    ProviderCapabilities,
    StatusCallback,
)

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.openai.com/v1"


@dataclass
class StreamEvent:
    """What a single server-sent event line means for the assembled text."""
    delta: str | None = None
    completed: bool = False
    error: str | None = None


def parse_stream_line(line: str | bytes) -> StreamEvent | None:
    """
    Interpret one line of the event stream.

    Returns None for lines that carry nothing of interest (blank lines,
    event names, unparseable or unrelated payloads).
    """
    if isinstance(line, bytes):
        line = line.decode("utf-8", errors="replace")
    trimmed = line.strip()
    if not trimmed or trimmed.startswith("event:"):
        return None

    payload = trimmed[len("data:"):].strip() if trimmed.startswith("data:") else trimmed
    if payload == "[DONE]":
        return StreamEvent(completed=True)

    try:
        data = json.loads(payload)
    except ValueError:
        return None
    if not isinstance(data, dict):
        return None

    event_type = data.get("type")
    if event_type == "response.output_text.delta":
        # Delta shapes, in priority order: bare string, {"text": ...}, top-level text
        delta = data.get("delta")
        if isinstance(delta, str):
            return StreamEvent(delta=delta)
        if isinstance(delta, dict) and isinstance(delta.get("text"), str):
            return StreamEvent(delta=delta["text"])
        if isinstance(data.get("text"), str):
            return StreamEvent(delta=data["text"])
        return None
    if event_type == "response.completed":
        return StreamEvent(completed=True)
    if event_type in ("response.error", "error", "response.failed"):
        return StreamEvent(error=_error_message(data) or "AI stream error.")
    return None


def _error_message(data: dict) -> str | None:
    error = data.get("error")
    if not isinstance(error, dict) and isinstance(data.get("response"), dict):
        error = data["response"].get("error")
    if isinstance(error, dict) and error.get("message"):
        return str(error["message"])
    if data.get("message"):
        return str(data["message"])
    return None


async def consume_stream(
    lines: AsyncIterable[str | bytes],
    on_delta: DeltaCallback | None = None,
) -> str:
    """
    Assemble text from an event stream, relaying each delta in order.

    Raises:
        ProviderAPIError: when the stream carries an error event
    """
    assembled = []
    async for line in lines:
        event = parse_stream_line(line)
        if event is None:
            continue
        if event.error:
            raise ProviderAPIError(event.error)
        if event.delta:
            assembled.append(event.delta)
            if on_delta:
                on_delta(event.delta)
        if event.completed:
            break
    return "".join(assembled)


def extract_output_text(data: dict) -> str:
    """Pull the text out of a non-streaming Responses API document."""
    output_text = data.get("output_text")
    if isinstance(output_text, str):
        return output_text

    segments = []
    for item in data.get("output") or []:
        if not isinstance(item, dict):
            continue
        for block in item.get("content") or []:
            if isinstance(block, dict) and isinstance(block.get("text"), str):
                segments.append(block["text"])
    return "".join(segments)


def error_from_response(status: int, body: bytes) -> GenerationError:
    """Build the most specific error for a non-2xx response."""
    try:
        data = json.loads(body)
    except ValueError:
        data = None

    if isinstance(data, dict) and isinstance(data.get("error"), dict):
        error = data["error"]
        message = error.get("message")
        if message:
            code = error.get("code")
            return ProviderAPIError(str(message), code=str(code) if code else None, status=status)

    text = body.decode("utf-8", errors="replace").strip() if body else ""
    return ProviderHTTPError(status, text)


class OpenAIResponsesProvider(LLMProvider):
    """
    OpenAI Responses API provider with streamed output.
    """

    # Model aliases for convenience
    MODEL_ALIASES = {
        "gpt4o": "gpt-4o",
        "gpt4o-mini": "gpt-4o-mini",
        "fast": "gpt-4o-mini",
        "gpt5": "gpt-5",
    }

    def __init__(
        self,
        api_key: str,
        default_model: str = "gpt-4o-mini",
        base_url: str = DEFAULT_BASE_URL,
        request_timeout: float = 90,
        resource_timeout: float = 120,
        retry_backoff: float = 0.9,
        max_attempts: int = 2,
        session_factory=None,
    ):
        """
        Initialize OpenAI provider.

        Args:
            api_key: OpenAI API key
            default_model: Model to use
            base_url: API root; the Responses endpoint is appended to it
            request_timeout: Seconds without any data before the request times out
            resource_timeout: Total seconds allowed for one attempt
            retry_backoff: Seconds to wait before retrying a timed-out attempt
            max_attempts: Attempts per call (timeouts only)
            session_factory: Callable returning an aiohttp-compatible session
        """
        self.api_key = api_key
        self.model = self._resolve_model(default_model)
        self.base_url = base_url.rstrip("/")
        self.request_timeout = request_timeout
        self.resource_timeout = resource_timeout
        self.retry_backoff = retry_backoff
        self.max_attempts = max_attempts
        self._session_factory = session_factory or aiohttp.ClientSession
        self.state = GenerationState.IDLE

    def _resolve_model(self, model: str) -> str:
        """Resolve model alias to full model ID."""
        return self.MODEL_ALIASES.get(model, model)

    @property
    def name(self) -> str:
        return "openai"

    @property
    def capabilities(self) -> ProviderCapabilities:
        return ProviderCapabilities(
            supports_system_prompt=True,
            supports_streaming=True,
            supports_temperature=temperature_for_model(self.model) is not None,
        )

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/responses"

    def build_payload(self, user_prompt: str, system_prompt: str | None, stream: bool = True) -> dict:
        """Request body for the Responses API."""
        messages = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": user_prompt})

        payload = {
            "model": self.model,
            "input": messages,
            "stream": stream,
        }
        temperature = temperature_for_model(self.model)
        if temperature is not None:
            payload["temperature"] = temperature
        return payload

    async def generate(
        self,
        user_prompt: str,
        system_prompt: str | None = SYSTEM_PROMPT,
        on_status: StatusCallback | None = None,
        on_delta: DeltaCallback | None = None,
    ) -> LLMResponse:
        """
        Generate a brief, streaming deltas through on_delta.

        Returns:
            LLMResponse with the assembled text

        Raises:
            GenerationTimeoutError: if the retry also timed out
            ProviderAPIError / ProviderHTTPError: provider rejected the request
            EmptyResponseError: no text from stream or fallback
        """
        status = on_status or (lambda message: None)
        self._validate_endpoint()
        payload = self.build_payload(user_prompt, system_prompt, stream=True)

        def before_retry(retry_state):
            self.state = GenerationState.RETRYING
            logger.warning(
                f"Generation attempt {retry_state.attempt_number} timed out, "
                f"retrying in {self.retry_backoff}s"
            )
            status("Timeout hit, retrying...")

        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_fixed(self.retry_backoff),
            retry=retry_if_exception_type(GenerationTimeoutError),
            before_sleep=before_retry,
            reraise=True,
        )

        try:
            async for attempt in retrying:
                with attempt:
                    self.state = GenerationState.CONNECTING
                    status("Connecting to model...")
                    text, streamed = await self._stream_attempt(payload, status, on_delta)
        except BaseException:
            self.state = GenerationState.FAILED
            raise

        self.state = GenerationState.COMPLETED
        return LLMResponse(
            text=text,
            model=self.model,
            streamed=streamed,
            attempts=attempt.retry_state.attempt_number,
            metadata={"provider": self.name},
        )

    def _validate_endpoint(self):
        parsed = urlparse(self.endpoint)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise GenerationError("The AI endpoint is invalid.")

    def _headers(self) -> dict:
        return {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.api_key}",
        }

    def _timeout(self) -> aiohttp.ClientTimeout:
        return aiohttp.ClientTimeout(total=self.resource_timeout, sock_read=self.request_timeout)

    async def _stream_attempt(
        self,
        payload: dict,
        status: StatusCallback,
        on_delta: DeltaCallback | None,
    ) -> tuple[str, bool]:
        """One streamed request; falls back to a non-streaming request on empty output."""
        try:
            async with self._session_factory() as session:
                async with session.post(
                    self.endpoint,
                    json=payload,
                    headers=self._headers(),
                    timeout=self._timeout(),
                ) as resp:
                    if resp.status < 200 or resp.status >= 300:
                        raise error_from_response(resp.status, await resp.read())

                    self.state = GenerationState.STREAMING
                    status("Streaming response...")
                    assembled = await consume_stream(resp.content, on_delta)
        except asyncio.TimeoutError as e:
            raise GenerationTimeoutError() from e
        except aiohttp.ClientError as e:
            raise GenerationError(f"AI request failed: {e}") from e

        if assembled.strip():
            return assembled, True

        logger.info("Stream finished without text, requesting full response")
        status("No stream data, retrying without streaming...")
        fallback = await self._complete_once(dict(payload, stream=False), status)
        if not fallback.strip():
            raise EmptyResponseError()
        return fallback, False

    async def _complete_once(self, payload: dict, status: StatusCallback) -> str:
        """Single non-streaming request."""
        status("Waiting for full response...")
        try:
            async with self._session_factory() as session:
                async with session.post(
                    self.endpoint,
                    json=payload,
                    headers=self._headers(),
                    timeout=self._timeout(),
                ) as resp:
                    body = await resp.read()
                    if resp.status < 200 or resp.status >= 300:
                        raise error_from_response(resp.status, body)
        except asyncio.TimeoutError as e:
            raise GenerationTimeoutError() from e
        except aiohttp.ClientError as e:
            raise GenerationError(f"AI request failed: {e}") from e

        try:
            data = json.loads(body)
        except ValueError:
            return ""
        return extract_output_text(data) if isinstance(data, dict) else ""
