from __future__ import annotations

import logging
from typing import Any, Protocol

import fal_client

from services.errors import (
    EmptyImageResultError,
    ImageGenerationError,
    QuotaExceededError,
    UpstreamAuthError,
)

logger = logging.getLogger(__name__)

__all__ = ["EmptyImageResultError", "ImageGenerationError", "ImageGeneratorService"]


class ImageClient(Protocol):
    async def subscribe(self, application: str, arguments: dict[str, Any]) -> dict[str, Any]:
        ...


def _status_code(exc: BaseException) -> int | None:
    status = getattr(exc, "status_code", None)
    if isinstance(status, int):
        return status
    response = getattr(exc, "response", None)
    status = getattr(response, "status_code", None)
    return status if isinstance(status, int) else None


class ImageGeneratorService:
    """Render a cartoon prompt into an image with a fal.ai model."""

    def __init__(
        self,
        api_key: str | None,
        model: str = "fal-ai/nano-banana-pro",
        image_size: str = "landscape_16_9",
        num_images: int = 1,
        client: ImageClient | None = None,
    ) -> None:
        self._api_key = api_key
        self._model = model
        self._image_size = image_size
        self._num_images = num_images
        self._client = client

    def _get_client(self) -> ImageClient:
        if self._client is None:
            if not self._api_key:
                raise UpstreamAuthError("fal.ai API key is not configured.")
            self._client = fal_client.AsyncClient(key=self._api_key)
        return self._client

    async def generate(self, prompt: str) -> str:
        client = self._get_client()
        try:
            result = await client.subscribe(
                self._model,
                arguments={
                    "prompt": prompt,
                    "image_size": self._image_size,
                    "num_images": self._num_images,
                },
            )
        except Exception as exc:  # noqa: BLE001 - classify fal errors by upstream status
            status = _status_code(exc)
            if status == 429:
                raise QuotaExceededError(f"Image service quota exceeded: {exc}") from exc
            if status in {401, 403}:
                raise UpstreamAuthError(f"Image service authentication failed: {exc}") from exc
            raise ImageGenerationError(f"Image request failed: {exc}") from exc

        images = (result or {}).get("images") or []
        first = images[0] if images else None
        image_url = first.get("url") if isinstance(first, dict) else None
        if not image_url:
            raise EmptyImageResultError("Failed to generate image")

        logger.info("Generated %s image(s) with %s", len(images), self._model)
        return image_url
