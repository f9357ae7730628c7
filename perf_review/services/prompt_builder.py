"""
Deterministic prompt rendering for review drafts and final ratings.

The output-format sections below are load-bearing: response_parser scans the
model output for the same markers, so both sides read them from
perf_review.core.prompts.
"""
import logging
from typing import Iterable, List, Optional, Protocol, Sequence

from perf_review.core import prompts
from perf_review.schemas.plan import PlanElement
from perf_review.schemas.rating import RatingElementInput

logger = logging.getLogger(__name__)


class ActivityLike(Protocol):
    month: str
    content: str


def md_escape(text: Optional[str]) -> str:
    """Content is markdown rendered (and HTML-escaped) later; only CRs are stripped here."""
    return (text or "").replace("\r", "")


def score_band(target_rating: int) -> tuple:
    if target_rating not in prompts.SCORE_BANDS:
        raise ValueError(
            f"target_rating must be between {prompts.MIN_RATING} and {prompts.MAX_RATING}, got {target_rating}"
        )
    return prompts.SCORE_BANDS[target_rating]


def element_weight(weight: Optional[int]) -> int:
    return prompts.DEFAULT_ELEMENT_WEIGHT if weight is None else weight


def _render_element_block(element: PlanElement) -> str:
    lines = [f"### {md_escape(element.title)}"]
    lines.append(f"- Objectives: {md_escape(element.description) or '(not specified)'}")
    if element.results_of_activities:
        lines.append(f"- Expected results of activities: {md_escape(element.results_of_activities)}")
    if element.metrics:
        lines.append(f"- Criteria for evaluation (metrics): {md_escape(element.metrics)}")
    if element.weight is not None:
        lines.append(f"- Element weight: {element.weight}")
    return "\n".join(lines)


def _render_activities(activities: Iterable[ActivityLike]) -> str:
    # sorted() copies; the caller's snapshot is left untouched
    ordered = sorted(activities, key=lambda a: a.month)
    if not ordered:
        return "- (none provided)"
    return "\n".join(f"- [{a.month}] {md_escape(a.content)}" for a in ordered)


def _review_output_contract(elements: Sequence[PlanElement]) -> str:
    titles = "\n".join(f"- {md_escape(e.title)}" for e in elements)
    return f"""Output format (follow exactly, one section per critical element, in this order):
{titles}

For each critical element write the header line:
{prompts.REVIEW_ELEMENT_HEADER} <element title>

Then EITHER, when activities support the element:
A one-sentence statement of the performance level demonstrated.
Then 2-5 bullets ("{prompts.BULLET_PREFIX}...") rewriting the relevant activities as concise, results-focused accomplishments.

OR, when no activities support the element:
{prompts.NO_ACTIVITIES_LINE}
{prompts.SUGGESTIONS_LEAD}
Then 2-3 bullets ("{prompts.BULLET_PREFIX}...") with plausible activities the supervisor could confirm with the employee.
"""


def build_review_prompt(
    employee_name: str,
    period_start: str,
    period_end: str,
    plan_elements: Sequence[PlanElement],
    activities: Iterable[ActivityLike],
    guidance: Optional[str] = None,
) -> str:
    """Render the progress-review prompt for one employee and review period."""
    elements_md = "\n\n".join(_render_element_block(e) for e in plan_elements) or "(no critical elements)"
    activities_md = _render_activities(activities)
    guidance_md = f"\nAdditional guidance:\n{md_escape(guidance)}\n" if guidance else ""

    prompt = f"""Write a progress review draft in markdown.

Employee: {md_escape(employee_name)}
Review period: {period_start} to {period_end}

Critical elements of the performance plan:

{elements_md}

Monthly activities during the period:
{activities_md}

Instructions:
- Map each activity to the critical element(s) it supports.
- Use a professional, factual tone (no hype).
- Do not invent accomplishments; only rewrite what the activities describe.
- Do not add sections other than the ones requested below.
{guidance_md}
{_review_output_contract(plan_elements)}"""
    logger.debug(f"Built review prompt: {len(prompt)} chars, {len(plan_elements)} element(s)")
    return prompt


def _render_rating_element(element: RatingElementInput) -> str:
    weight = element_weight(element.weight)
    activities = md_escape(element.combined_activities) or "(no activities documented)"
    return f"""### {md_escape(element.title)}
- Weight: {weight} (maximum score {prompts.MAX_RATING * weight})
- Objectives: {md_escape(element.description) or '(not specified)'}
- Activities for the fiscal year:
{activities}"""


def build_final_rating_prompt(
    employee_name: str,
    fiscal_year_label: str,
    elements: List[RatingElementInput],
    target_rating: int,
) -> str:
    """Render the fiscal-year final-rating prompt aimed at `target_rating`."""
    low, high = score_band(target_rating)
    elements_md = "\n\n".join(_render_rating_element(e) for e in elements) or "(no critical elements)"

    contract_lines = []
    for e in elements:
        contract_lines.append(
            f"{prompts.RATING_ELEMENT_HEADER} {md_escape(e.title)}\n"
            f"{prompts.SUMMARY_LABEL} <2-4 sentence summary of accomplishments>\n"
            f"{prompts.RATING_LABEL} <{prompts.MIN_RATING}-{prompts.MAX_RATING}>\n"
            f"{prompts.SCORE_LABEL} <rating x {element_weight(e.weight)}>"
        )
    contract_md = "\n\n".join(contract_lines)

    prompt = f"""Draft the final performance rating in markdown.

Employee: {md_escape(employee_name)}
Rating period: {fiscal_year_label}
Target summary rating: {target_rating}
Target total score band: {low}-{high}

Each critical element is rated {prompts.MIN_RATING}-{prompts.MAX_RATING}; its score is rating x weight.
Choose element ratings supported by the activities so that the total score falls within {low}-{high}.

Critical elements:

{elements_md}

Output format (follow exactly):

{contract_md}

{prompts.TOTAL_SCORE_LABEL} <sum of all element scores>

{prompts.NARRATIVE_HEADER}
<one or two paragraphs justifying the summary rating, citing the strongest accomplishments>
"""
    logger.debug(f"Built rating prompt: {len(prompt)} chars, target band {low}-{high}")
    return prompt
