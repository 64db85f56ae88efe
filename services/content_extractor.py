from __future__ import annotations

import logging
import re
from dataclasses import dataclass

import openai
from openai import AsyncOpenAI

from services.errors import CartoonStripError, QuotaExceededError, UpstreamAuthError

logger = logging.getLogger(__name__)

PROMPT_TEMPLATE = """
You are a visual storyteller preparing material for an editorial cartoon. Analyze this news article and extract elements for a compelling, SIMPLE cartoon.

Remember: The best editorial cartoons have ONE strong central image, not a busy collage. Less is more.

Respond in this EXACT format (include the labels):

CONCEPT: [2-3 sentences describing the situation, what happened/is happening, and why it matters]

CENTRAL IMAGE: [The ONE key visual that captures the essence of this story. Be specific: describe a single character, object, or scene that could be the hero of the cartoon. Do not list multiple options.]

SUPPORTING DETAILS: [1-2 optional background elements that could enhance the central image, or write "none needed" if the central image is strong enough alone]

TENSION: [1 sentence describing the core conflict, irony, or contrast that makes this story interesting]

VISUAL METAPHOR: [1-2 sentences suggesting how this could be shown as a cartoon - what's the visual joke, symbol, or representation that captures the essence?]

Article:
{article_text}

Remember: Focus on what would make a SIMPLE, CLEAR cartoon. One strong image beats ten weak ones.
""".strip()

NO_SUPPORTING_DETAILS = "none needed"

# (attribute, label, fallback), in the order the model is asked to emit them.
SECTIONS: tuple[tuple[str, str, str], ...] = (
    ("concept", "CONCEPT", "Unable to extract concept"),
    ("central_image", "CENTRAL IMAGE", "Unable to extract central image"),
    ("supporting_details", "SUPPORTING DETAILS", NO_SUPPORTING_DETAILS),
    ("tension", "TENSION", "Unable to extract tension"),
    ("visual_metaphor", "VISUAL METAPHOR", "Unable to extract visual metaphor"),
)


def _section_pattern(label: str, later_labels: list[str]) -> re.Pattern[str]:
    # A section ends where any later label starts a line, or at the end of text.
    stops = [rf"\n\s*(?:{'|'.join(map(re.escape, later_labels))}):"] if later_labels else []
    end = "|".join(stops + [r"\Z"])
    return re.compile(rf"{re.escape(label)}:[ \t]*(.*?)\s*(?={end})", re.DOTALL)


SECTION_PATTERNS: dict[str, re.Pattern[str]] = {
    attribute: _section_pattern(label, [later[1] for later in SECTIONS[index + 1 :]])
    for index, (attribute, label, _) in enumerate(SECTIONS)
}


class ExtractionError(CartoonStripError):
    """Raised when the text model call fails."""


@dataclass(frozen=True)
class ArticleExtraction:
    concept: str
    central_image: str
    supporting_details: str
    tension: str
    visual_metaphor: str

    def has_supporting_details(self) -> bool:
        return self.supporting_details.strip().lower() != NO_SUPPORTING_DETAILS


def parse_extraction(text: str) -> ArticleExtraction:
    """Split a labeled model reply into its five sections.

    Each section runs from its label to the next expected label or the end of
    the text. Missing or blank sections take their fallback, so this never
    fails.
    """
    text = (text or "").strip()
    values: dict[str, str] = {}
    for attribute, _, fallback in SECTIONS:
        match = SECTION_PATTERNS[attribute].search(text)
        value = match.group(1).strip() if match else ""
        if not value:
            logger.debug("Section %s missing from model reply", attribute)
        values[attribute] = value or fallback
    return ArticleExtraction(**values)


class ContentExtractorService:
    """Extract cartoon-ready story elements with the OpenAI responses API."""

    def __init__(
        self,
        api_key: str | None,
        model: str = "gpt-4o",
        max_output_tokens: int = 800,
        client: AsyncOpenAI | None = None,
    ) -> None:
        self._api_key = api_key
        self._model = model
        self._max_output_tokens = max_output_tokens
        self._client = client

    def _get_client(self) -> AsyncOpenAI:
        if self._client is None:
            if not self._api_key:
                raise UpstreamAuthError("OpenAI API key is not configured.")
            self._client = AsyncOpenAI(api_key=self._api_key)
        return self._client

    async def extract(self, article_text: str) -> ArticleExtraction:
        client = self._get_client()
        prompt = PROMPT_TEMPLATE.format(article_text=article_text)

        try:
            response = await client.responses.create(
                model=self._model,
                input=[{"role": "user", "content": prompt}],
                temperature=0.7,
                max_output_tokens=self._max_output_tokens,
            )
        except openai.RateLimitError as exc:
            raise QuotaExceededError(f"OpenAI quota exceeded: {exc}") from exc
        except (openai.AuthenticationError, openai.PermissionDeniedError) as exc:
            raise UpstreamAuthError(f"OpenAI authentication failed: {exc}") from exc
        except Exception as exc:  # noqa: BLE001 - surface OpenAI errors as extraction failures
            raise ExtractionError(f"OpenAI request failed: {exc}") from exc

        content = getattr(response, "output_text", None) or ""
        if not content.strip():
            logger.warning("OpenAI returned empty response; using fallback sections")

        return parse_extraction(content)
