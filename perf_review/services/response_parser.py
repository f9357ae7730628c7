"""
Best-effort recovery of structured records from model markdown.

Nothing here raises on unexpected output: an element whose section cannot be
found is simply left out of the result.
"""
import enum
import logging
import re
from typing import Dict, List, Optional, Sequence, Set, Union

from perf_review.core import prompts
from perf_review.schemas.plan import PlanElement
from perf_review.schemas.rating import ElementRating, RatingElementInput, RatingParseResult
from perf_review.services.prompt_builder import element_weight

logger = logging.getLogger(__name__)

_REVIEW_HEADER = re.compile(
    r"^#{2,3}\s*\**\s*" + re.escape(prompts.REVIEW_ELEMENT_HEADER.lstrip("# ").rstrip(":")) + r"\s*:\s*(.+?)\s*\**\s*$",
    re.IGNORECASE,
)
_NO_ACTIVITIES = re.compile(
    r"^\W*(?:" + re.escape(prompts.WARNING_GLYPH) + r"|⚠)️?\W*" + re.escape(prompts.NO_ACTIVITIES_MARKER),
    re.IGNORECASE,
)
_BULLET = re.compile(r"^" + re.escape(prompts.BULLET_PREFIX.strip()) + r"\s+(.*\S)\s*$")
_SECTION_HEADER = re.compile(r"^#{1,2}\s")

_RATING_AND_SCORE = re.compile(
    re.escape(prompts.RATING_LABEL) + r"\s*([1-5])\b.*?" + re.escape(prompts.SCORE_LABEL) + r"\s*(\d+)",
    re.IGNORECASE | re.DOTALL,
)
_SUMMARY = re.compile(
    re.escape(prompts.SUMMARY_LABEL) + r"\s*(.*?)(?=\*\*|\Z)",
    re.IGNORECASE | re.DOTALL,
)
_NARRATIVE = re.compile(
    r"^#{2,3}[ \t]*" + re.escape(prompts.NARRATIVE_TITLE) + r"[^\n]*\n(.*)\Z",
    re.IGNORECASE | re.MULTILINE | re.DOTALL,
)
_WHITESPACE = re.compile(r"\s+")


class ReviewParseState(str, enum.Enum):
    SEEKING_HEADER = "seeking_header"
    IN_ELEMENT = "in_element"
    IN_SUGGESTIONS = "in_suggestions"


def _title_key(title: str) -> str:
    return _WHITESPACE.sub(" ", title).strip().lower()


def extract_suggestions(output: str, elements: Sequence[PlanElement]) -> Dict[str, List[str]]:
    """
    Collect suggested-activity bullets for elements the model flagged as
    having no documented activities.

    Keys are the known element titles; only flagged elements appear.
    """
    if output is None:
        raise TypeError("extract_suggestions() expects str, got None")

    known = {_title_key(e.title): e.title for e in elements}
    suggestions: Dict[str, List[str]] = {}
    state = ReviewParseState.SEEKING_HEADER
    current: Optional[str] = None

    for raw_line in output.replace("\r", "").split("\n"):
        line = raw_line.strip()
        if not line:
            continue

        header = _REVIEW_HEADER.match(line)
        if header:
            current = known.get(_title_key(header.group(1)))
            if current is None:
                logger.debug(f"Ignoring section for unknown element '{header.group(1)}'")
            state = ReviewParseState.IN_ELEMENT
            continue

        if _SECTION_HEADER.match(line):
            # A top-level section (e.g. an overall summary) closes the element; sub-headers do not
            state = ReviewParseState.SEEKING_HEADER
            current = None
            continue

        if state is ReviewParseState.IN_ELEMENT and _NO_ACTIVITIES.match(line):
            state = ReviewParseState.IN_SUGGESTIONS
            if current is not None:
                suggestions.setdefault(current, [])
            continue

        if state is ReviewParseState.IN_SUGGESTIONS and current is not None:
            bullet = _BULLET.match(line)
            if bullet and prompts.SUGGESTIONS_GUARD_PHRASE not in bullet.group(1).lower():
                suggestions[current].append(bullet.group(1))

    return suggestions


def _rating_section(output: str, title: str, used: Set[int]) -> Optional[str]:
    """First section for `title` not already claimed; claimed sections are recorded in `used`."""
    pattern = re.compile(
        r"^##[ \t]*\**[ \t]*(?:Critical Element:[ \t]*)?"
        + re.escape(title)
        + r"[ \t]*\**[ \t]*$(.*?)(?=^##[ \t]|\Z)",
        re.IGNORECASE | re.MULTILINE | re.DOTALL,
    )
    for match in pattern.finditer(output):
        if match.start() not in used:
            used.add(match.start())
            return match.group(1)
    return None


def parse_rating_output(
    output: str,
    elements: Sequence[Union[PlanElement, RatingElementInput]],
) -> RatingParseResult:
    """Recover element ratings, the total score and the narrative from rating output."""
    if output is None:
        raise TypeError("parse_rating_output() expects str, got None")

    output = output.replace("\r", "")
    element_ratings: List[ElementRating] = []
    used_sections: Set[int] = set()

    for element in elements:
        section = _rating_section(output, element.title, used_sections)
        if section is None:
            logger.info(f"No rating section found for element '{element.title}'")
            continue

        rating_match = _RATING_AND_SCORE.search(section)
        if not rating_match:
            logger.info(f"No rating/score found in section for element '{element.title}'")
            continue

        summary_match = _SUMMARY.search(section)
        summary = _WHITESPACE.sub(" ", summary_match.group(1)).strip() if summary_match else ""

        element_ratings.append(ElementRating(
            element_id=element.id,
            title=element.title,
            weight=element_weight(element.weight),
            rating=int(rating_match.group(1)),
            score=int(rating_match.group(2)),
            summary=summary,
        ))

    narrative_match = _NARRATIVE.search(output)
    narrative = narrative_match.group(1).strip() if narrative_match else None

    return RatingParseResult(
        element_ratings=element_ratings,
        total_score=sum(r.score for r in element_ratings),
        narrative_summary=narrative or None,
    )


def rating_for_total(total_score: int) -> int:
    """Map a total score back onto the 1-5 summary rating scale."""
    for rating in sorted(prompts.SCORE_BANDS, reverse=True):
        low, _ = prompts.SCORE_BANDS[rating]
        if total_score >= low:
            return rating
    return prompts.MIN_RATING
