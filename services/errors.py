from __future__ import annotations

from dataclasses import dataclass

QUOTA_MESSAGE = "API quota exceeded. Please wait a minute and try again."
AUTH_MESSAGE = "API key error. Please check your API keys in .env"
FETCH_MESSAGE = "Could not fetch article. Please check the URL and try again."
EMPTY_IMAGE_MESSAGE = "Failed to generate image"


class CartoonStripError(RuntimeError):
    """Base class for failures raised while producing a cartoon strip."""


class InvalidRequestError(CartoonStripError):
    """Raised when the inbound request fails validation."""


class UpstreamAuthError(CartoonStripError):
    """Raised when an upstream service rejects or lacks our credentials."""


class QuotaExceededError(CartoonStripError):
    """Raised when an upstream service signals a rate limit or exhausted quota."""


class ArticleFetchError(CartoonStripError):
    """Raised when the reader service cannot return article text."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ImageGenerationError(CartoonStripError):
    """Raised when the image service call fails."""


class EmptyImageResultError(ImageGenerationError):
    """Raised when the image service answers without a usable image."""


@dataclass(frozen=True)
class ErrorResponse:
    status_code: int
    message: str


def _mentions(text: str, *markers: str) -> bool:
    return any(marker in text for marker in markers)


def classify_error(exc: BaseException) -> ErrorResponse:
    """Map a pipeline failure onto the status code and message shown to callers.

    Typed errors are matched first. Message markers catch errors that reach
    here untyped, so e.g. a third-party exception mentioning ``quota`` still
    surfaces as 429.
    """
    if isinstance(exc, InvalidRequestError):
        return ErrorResponse(status_code=400, message=str(exc))

    message = str(exc) or exc.__class__.__name__
    fetch_status = exc.status_code if isinstance(exc, ArticleFetchError) else None

    if (
        isinstance(exc, QuotaExceededError)
        or fetch_status == 429
        or _mentions(message, "429", "quota")
    ):
        return ErrorResponse(status_code=429, message=QUOTA_MESSAGE)

    if (
        isinstance(exc, UpstreamAuthError)
        or fetch_status in {401, 403}
        or _mentions(message, "API key", "authentication")
    ):
        return ErrorResponse(status_code=401, message=AUTH_MESSAGE)

    if isinstance(exc, ArticleFetchError) or _mentions(message, "Failed to fetch article"):
        return ErrorResponse(status_code=400, message=FETCH_MESSAGE)

    if isinstance(exc, EmptyImageResultError):
        return ErrorResponse(status_code=500, message=EMPTY_IMAGE_MESSAGE)

    return ErrorResponse(
        status_code=500,
        message=f"Failed to generate cartoon strip: {message}",
    )
