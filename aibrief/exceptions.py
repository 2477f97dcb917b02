"""
Exception types for fetching, configuration and generation failures.

Routes translate these into HTTPException responses.
"""


class FetchError(Exception):
    """Raised when a feed or page cannot be retrieved."""

    def __init__(self, url: str, message: str, status: int | None = None):
        self.url = url
        self.status = status
        super().__init__(message)


class ConfigurationError(Exception):
    """Raised before any network call when required settings are missing."""

    pass


class GenerationError(Exception):
    """Base class for text-generation failures."""

    pass


class GenerationTimeoutError(GenerationError):
    """The generation request timed out (retry-eligible)."""

    def __init__(self, message: str = "The AI request timed out."):
        super().__init__(message)


class ProviderAPIError(GenerationError):
    """The provider returned an explicit error payload or stream event."""

    def __init__(self, message: str, code: str | None = None, status: int | None = None):
        self.message = message
        self.code = code
        self.status = status
        if code:
            super().__init__(f"AI API error ({code}): {message}")
        else:
            super().__init__(f"AI API error: {message}")


class ProviderHTTPError(GenerationError):
    """Non-2xx response without a parseable error payload."""

    def __init__(self, status: int, body: str = ""):
        self.status = status
        self.body = body
        if body:
            super().__init__(f"AI API error: HTTP {status}. {body}")
        else:
            super().__init__(f"AI API error: HTTP {status}.")


class EmptyResponseError(GenerationError):
    """Streaming and non-streaming attempts both produced no text."""

    def __init__(self):
        super().__init__("The AI response was empty.")
