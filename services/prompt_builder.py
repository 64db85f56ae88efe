from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, IntEnum

from services.content_extractor import ArticleExtraction


class PanelCount(IntEnum):
    one = 1
    three = 3
    four = 4


class VisualStyle(str, Enum):
    clean_editorial = "clean_editorial"
    funky_surreal = "funky_surreal"
    cute_but_dark = "cute_but_dark"


class Slant(str, Enum):
    neutral = "neutral"
    playful = "playful"
    dark = "dark"


@dataclass(frozen=True)
class PromptRequest:
    extraction: ArticleExtraction
    panel_count: PanelCount
    style: VisualStyle
    slant: Slant


STYLE_DESCRIPTIONS: dict[VisualStyle, str] = {
    VisualStyle.clean_editorial: (
        "classic New Yorker editorial cartoon style inspired by David Low and Herblock, "
        "confident ink lines, cross-hatching for shadows, limited 2-3 color palette, "
        "caricature with dignified restraint, white space as a compositional element"
    ),
    VisualStyle.funky_surreal: (
        "pop surrealism meets underground comix, inspired by Robert Crumb and Peter Bagge, "
        "grotesque exaggeration, melting forms, impossible physics, "
        "electric neon colors against dark backgrounds, visible chaos energy"
    ),
    VisualStyle.cute_but_dark: (
        "Sanrio meets Edward Gorey aesthetic, kawaii characters with hollow eyes, "
        "soft rounded forms in muted pastels, cute creatures in ominous situations, "
        "the adorable confronting the macabre, unsettling sweetness"
    ),
}

SLANT_DESCRIPTIONS: dict[Slant, str] = {
    Slant.neutral: (
        "documentary witness tone, presenting facts visually without editorializing, "
        "letting the situation speak for itself, journalism in visual form, "
        "the reader draws their own conclusions"
    ),
    Slant.playful: (
        "witty setup-and-punchline structure, absurdist wordplay through visuals, "
        "gentle ribbing not harsh mockery, the joke lands with a smile not a wince, "
        "clever reversals and unexpected visual puns"
    ),
    Slant.dark: (
        "gallows humor that makes you laugh then feel guilty, "
        "uncomfortable truths delivered with deadpan timing, "
        "the punchline is the tragedy itself, nihilistic wit, "
        "finding absurdity in genuine suffering"
    ),
}

PANEL_GUIDANCE: dict[PanelCount, str] = {
    PanelCount.one: """
Panel guidance:
- present a single strong visual metaphor or punchline
- communicate the idea instantly without sequential storytelling
- the central image should dominate the frame
""".strip(),
    PanelCount.three: """
Panel guidance:
- panel 1: establish the situation with the central image
- panel 2: introduce tension, irony, or contrast
- panel 3: deliver the visual payoff or realization
- maintain focus on the central image throughout
""".strip(),
    PanelCount.four: """
Panel guidance:
- panels 1-2: gradual setup and escalation featuring the central image
- panel 3: complication or twist
- panel 4: consequence, punchline, or dark resolution
- the central image should anchor the narrative
""".strip(),
}

PROMPT_TEMPLATE = """
Create a {panel_count}-panel cartoon strip based on a news article.

Story Concept:
{concept}

Central Image (this is the HERO of your cartoon - build everything around it):
{central_image}

Supporting Details (use sparingly, only if they strengthen the central image):
{supporting_details}

Core Tension:
{tension}

Visual Metaphor Suggestion:
{visual_metaphor}

Visual Style:
{style_description}

Creative Slant:
{slant_description}

{panel_guidance}

IMPORTANT - SIMPLICITY GUIDELINES:
- Prioritize clarity over completeness
- A single strong image is better than a busy scene
- Empty space and visual breathing room make cartoons more impactful
- You may OMIT supporting details if they would clutter the composition
- Focus on the central image - it should be immediately readable
- Avoid cramming in too many elements

The cartoon strip must:
- clearly read as a comic strip with {panel_count} distinct {panel_noun}
- feature the central image prominently
- use visual storytelling to communicate the core tension
- use exaggerated expressions and simplified characters
- avoid photorealism and realistic portraiture
- focus on ideas and situations rather than specific real individuals

Composition guidelines:
- panels should be clearly separated and readable
- backgrounds should be minimal and not distract from the central image
- use negative space intentionally
- the viewer's eye should go to the central image first

Do not include:
- copyrighted characters
- recognizable real people unless strictly necessary
- excessive text or long dialogue
- realistic photographic styles
- cluttered or busy compositions

Keep content suitable for general audiences.
""".strip()


def panel_guidance(panel_count: PanelCount) -> str:
    return PANEL_GUIDANCE[panel_count]


def build_prompt(request: PromptRequest) -> str:
    """Render the image-generation prompt for one strip.

    Pure function: identical requests always produce identical text.
    """
    extraction = request.extraction
    count = int(request.panel_count)
    return PROMPT_TEMPLATE.format(
        panel_count=count,
        panel_noun="panel" if count == 1 else "panels",
        concept=extraction.concept,
        central_image=extraction.central_image,
        supporting_details=extraction.supporting_details,
        tension=extraction.tension,
        visual_metaphor=extraction.visual_metaphor,
        style_description=STYLE_DESCRIPTIONS[request.style],
        slant_description=SLANT_DESCRIPTIONS[request.slant],
        panel_guidance=panel_guidance(request.panel_count),
    )
