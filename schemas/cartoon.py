from __future__ import annotations

from typing import Any

from pydantic import AnyHttpUrl, BaseModel, ConfigDict, TypeAdapter, ValidationError
from pydantic.alias_generators import to_camel

from services.cartoon_pipeline import GenerateCommand, GenerationResult
from services.content_extractor import ArticleExtraction
from services.errors import InvalidRequestError
from services.prompt_builder import PanelCount, Slant, VisualStyle

# AnyHttpUrl, not HttpUrl: no 2083-character cap on long article links.
_http_url = TypeAdapter(AnyHttpUrl)
_PANEL_COUNTS = {item.value for item in PanelCount}


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class GenerateRequest(CamelModel):
    """Raw form input; checked field by field in :meth:`to_command`."""

    article_url: Any = None
    panel_count: Any = None
    style: Any = None
    slant: Any = None

    def _panel_count(self) -> int | None:
        # bool is an int subclass; JSON true must not count as one panel.
        if isinstance(self.panel_count, bool):
            return None
        if isinstance(self.panel_count, float) and self.panel_count.is_integer():
            return int(self.panel_count)
        if isinstance(self.panel_count, int):
            return self.panel_count
        return None

    def to_command(self) -> GenerateCommand:
        if not isinstance(self.article_url, str) or not self.article_url.strip():
            raise InvalidRequestError("Article URL is required")
        article_url = self.article_url.strip()
        try:
            _http_url.validate_python(article_url)
        except ValidationError as exc:
            raise InvalidRequestError("Please enter a valid URL") from exc

        panel_count = self._panel_count()
        if panel_count not in _PANEL_COUNTS:
            raise InvalidRequestError("Panel count must be 1, 3, or 4")

        if not isinstance(self.style, str) or self.style not in {item.value for item in VisualStyle}:
            raise InvalidRequestError("Invalid style")

        if not isinstance(self.slant, str) or self.slant not in {item.value for item in Slant}:
            raise InvalidRequestError("Invalid slant")

        return GenerateCommand(
            article_url=article_url,
            panel_count=PanelCount(panel_count),
            style=VisualStyle(self.style),
            slant=Slant(self.slant),
        )


class ExtractionResponse(CamelModel):
    concept: str
    central_image: str
    supporting_details: str
    tension: str
    visual_metaphor: str
    has_supporting_details: bool

    @classmethod
    def from_extraction(cls, extraction: ArticleExtraction) -> ExtractionResponse:
        return cls(
            concept=extraction.concept,
            central_image=extraction.central_image,
            supporting_details=extraction.supporting_details,
            tension=extraction.tension,
            visual_metaphor=extraction.visual_metaphor,
            has_supporting_details=extraction.has_supporting_details(),
        )


class GenerateResponse(CamelModel):
    image_url: str
    extraction: ExtractionResponse
    prompt: str

    @classmethod
    def from_result(cls, result: GenerationResult) -> GenerateResponse:
        return cls(
            image_url=result.image_url,
            extraction=ExtractionResponse.from_extraction(result.extraction),
            prompt=result.prompt,
        )


class ErrorBody(BaseModel):
    error: str
