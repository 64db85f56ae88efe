from __future__ import annotations

from collections.abc import Callable
from types import SimpleNamespace
from typing import Any

import httpx
import pytest
from fastapi.testclient import TestClient

from app.core.config import Settings
from app.main import create_app
from routers.cartoon import get_cartoon_pipeline
from services.article_fetcher import ArticleFetcherService
from services.cartoon_pipeline import CartoonPipeline
from services.content_extractor import ContentExtractorService
from services.image_generator import ImageGeneratorService

MODEL_REPLY = """CONCEPT: The city council voted to replace every park bench with a paid smart seat. Residents now pay by the minute to sit down.

CENTRAL IMAGE: An elderly man hovering awkwardly above a bench with a coin slot and a glowing meter.

SUPPORTING DETAILS: A pigeon reading a price list.

TENSION: Public space meant for rest now charges for the privilege of resting.

VISUAL METAPHOR: The bench as a parking meter, with people as the cars."""

ARTICLE_TEXT = "Title: Council approves paid benches\n\nThe council voted 7-2 on Tuesday..."


class FakeResponses:
    def __init__(self, output_text: str | None = None, error: Exception | None = None) -> None:
        self.output_text = output_text
        self.error = error
        self.calls: list[dict[str, Any]] = []

    async def create(self, **kwargs: Any) -> SimpleNamespace:
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        return SimpleNamespace(output_text=self.output_text)


class FakeOpenAIClient:
    def __init__(self, output_text: str | None = MODEL_REPLY, error: Exception | None = None) -> None:
        self.responses = FakeResponses(output_text=output_text, error=error)


class FakeImageClient:
    def __init__(self, result: dict[str, Any] | None = None, error: Exception | None = None) -> None:
        self.result = result if result is not None else {
            "images": [{"url": "https://cdn.example.com/strip.png"}]
        }
        self.error = error
        self.calls: list[tuple[str, dict[str, Any]]] = []

    async def subscribe(self, application: str, arguments: dict[str, Any]) -> dict[str, Any]:
        self.calls.append((application, arguments))
        if self.error is not None:
            raise self.error
        return self.result


def reader_transport(
    status_code: int = 200,
    text: str = ARTICLE_TEXT,
    seen: list[httpx.Request] | None = None,
) -> httpx.MockTransport:
    def handler(request: httpx.Request) -> httpx.Response:
        if seen is not None:
            seen.append(request)
        return httpx.Response(status_code, text=text)

    return httpx.MockTransport(handler)


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None, environment="test", rate_limit="1000/minute")


@pytest.fixture
def openai_client() -> FakeOpenAIClient:
    return FakeOpenAIClient()


@pytest.fixture
def image_client() -> FakeImageClient:
    return FakeImageClient()


@pytest.fixture
def make_pipeline(
    openai_client: FakeOpenAIClient, image_client: FakeImageClient
) -> Callable[..., CartoonPipeline]:
    def factory(
        transport: httpx.MockTransport | None = None,
        extractor: ContentExtractorService | None = None,
        image_generator: ImageGeneratorService | None = None,
    ) -> CartoonPipeline:
        return CartoonPipeline(
            fetcher=ArticleFetcherService(
                api_key="reader-key", transport=transport or reader_transport()
            ),
            extractor=extractor or ContentExtractorService(api_key="sk-test", client=openai_client),
            image_generator=image_generator
            or ImageGeneratorService(api_key="fal-test", client=image_client),
        )

    return factory


@pytest.fixture
def make_client(settings: Settings) -> Callable[..., TestClient]:
    def factory(pipeline: CartoonPipeline, **overrides: Any) -> TestClient:
        app = create_app(settings.model_copy(update=overrides))
        app.dependency_overrides[get_cartoon_pipeline] = lambda: pipeline
        return TestClient(app)

    return factory
