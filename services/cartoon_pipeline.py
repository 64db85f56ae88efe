from __future__ import annotations

import logging
import time
from dataclasses import dataclass

from app.core.config import Settings
from services.article_fetcher import ArticleFetcherService
from services.content_extractor import ArticleExtraction, ContentExtractorService
from services.image_generator import ImageGeneratorService
from services.prompt_builder import PanelCount, PromptRequest, Slant, VisualStyle, build_prompt

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GenerateCommand:
    article_url: str
    panel_count: PanelCount
    style: VisualStyle
    slant: Slant


@dataclass(frozen=True)
class GenerationResult:
    image_url: str
    extraction: ArticleExtraction
    prompt: str


class CartoonPipeline:
    """Fetch an article, extract its story elements, and draw the strip."""

    def __init__(
        self,
        fetcher: ArticleFetcherService,
        extractor: ContentExtractorService,
        image_generator: ImageGeneratorService,
    ) -> None:
        self._fetcher = fetcher
        self._extractor = extractor
        self._image_generator = image_generator

    @classmethod
    def from_settings(cls, settings: Settings) -> CartoonPipeline:
        return cls(
            fetcher=ArticleFetcherService(
                endpoint=settings.reader_endpoint,
                api_key=settings.reader_api_key,
                timeout=settings.reader_timeout_seconds,
            ),
            extractor=ContentExtractorService(
                api_key=settings.openai_api_key,
                model=settings.openai_model,
                max_output_tokens=settings.openai_max_output_tokens,
            ),
            image_generator=ImageGeneratorService(
                api_key=settings.fal_key,
                model=settings.image_model,
                image_size=settings.image_size,
                num_images=settings.num_images,
            ),
        )

    async def run(self, command: GenerateCommand) -> GenerationResult:
        started_at = time.perf_counter()

        logger.info("Fetching article %s", command.article_url)
        article_text = await self._fetcher.fetch(command.article_url)

        logger.info("Extracting story elements from %s chars", len(article_text))
        extraction = await self._extractor.extract(article_text)

        prompt = build_prompt(
            PromptRequest(
                extraction=extraction,
                panel_count=command.panel_count,
                style=command.style,
                slant=command.slant,
            )
        )

        logger.info(
            "Generating %s-panel %s/%s strip",
            int(command.panel_count),
            command.style.value,
            command.slant.value,
        )
        image_url = await self._image_generator.generate(prompt)

        logger.info(
            "Cartoon strip ready in %.1fs", time.perf_counter() - started_at
        )
        return GenerationResult(image_url=image_url, extraction=extraction, prompt=prompt)
