"""
Generation workflows: progress review drafts and fiscal-year final ratings.

Both follow the same path: load a snapshot of the plan and activities, build
the prompt, call the model, parse its markdown and persist the record.
"""
import logging
from typing import List, Sequence, Tuple

from sqlalchemy.orm import Session

from perf_review.models.activity import Activity
from perf_review.models.performance_rating import PerformanceRating
from perf_review.models.review_draft import ReviewDraft
from perf_review.schemas.plan import PlanElement
from perf_review.schemas.rating import RatingElementInput, RatingGenerateRequest
from perf_review.schemas.review import ReviewGenerateRequest
from perf_review.services.ai_orchestrator import AIDomain, AIOrchestrator
from perf_review.services.plan_service import get_employee, get_plan, plan_elements
from perf_review.services.prompt_builder import build_final_rating_prompt, build_review_prompt
from perf_review.services.response_parser import extract_suggestions, parse_rating_output, rating_for_total

logger = logging.getLogger(__name__)


def fiscal_year_months(fiscal_year: int) -> Tuple[str, str]:
    """First and last month key of the Oct-Sep fiscal year ending in `fiscal_year`."""
    return f"{fiscal_year - 1}-10", f"{fiscal_year}-09"


def fiscal_year_label(fiscal_year: int) -> str:
    return f"FY{fiscal_year} (Oct {fiscal_year - 1} - Sep {fiscal_year})"


def _activities_between(db: Session, employee_id: int, plan_id: int, first_month: str, last_month: str) -> List[Activity]:
    return (
        db.query(Activity)
        .filter(
            Activity.employee_id == employee_id,
            Activity.plan_id == plan_id,
            Activity.month >= first_month,
            Activity.month <= last_month,
        )
        .order_by(Activity.month, Activity.id)
        .all()
    )


def combine_activities(activities: Sequence[Activity]) -> str:
    ordered = sorted(activities, key=lambda a: a.month)
    return "\n".join(f"[{a.month}] {a.content.strip()}" for a in ordered)


def generate_review(db: Session, request: ReviewGenerateRequest) -> ReviewDraft:
    employee = get_employee(db, request.employee_id)
    plan = get_plan(db, request.plan_id)

    elements = plan_elements(plan)
    if request.element_ids:
        wanted = set(request.element_ids)
        elements = [e for e in elements if e.id in wanted]
        if not elements:
            logger.warning(f"None of the requested element ids exist on plan {plan.id}")

    activities = _activities_between(
        db, employee.id, plan.id, request.period_start[:7], request.period_end[:7]
    )
    logger.info(
        f"Generating review for employee {employee.id}, plan {plan.id}: "
        f"{len(elements)} element(s), {len(activities)} activit(ies)"
    )

    prompt = build_review_prompt(
        employee_name=employee.display_name,
        period_start=request.period_start,
        period_end=request.period_end,
        plan_elements=elements,
        activities=activities,
        guidance=request.guidance,
    )
    ai = AIOrchestrator.run(prompt, provider=request.provider, model=request.model, domain=AIDomain.REVIEW)
    if ai.truncated:
        logger.warning(f"Review prompt for plan {plan.id} was truncated at the character budget")

    suggestions = extract_suggestions(ai.output, elements)

    review = ReviewDraft(
        employee_id=employee.id,
        plan_id=plan.id,
        period_start=request.period_start,
        period_end=request.period_end,
        provider=ai.provider,
        model=ai.model,
        truncated=ai.truncated,
        output_markdown=ai.output,
        suggestions=suggestions,
    )
    db.add(review)
    db.commit()
    db.refresh(review)
    return review


def _rating_inputs(elements: Sequence[PlanElement], combined: str) -> List[RatingElementInput]:
    return [
        RatingElementInput(
            id=e.id,
            title=e.title,
            weight=e.weight,
            description=e.description,
            combined_activities=combined,
        )
        for e in elements
    ]


def generate_rating(db: Session, request: RatingGenerateRequest) -> PerformanceRating:
    employee = get_employee(db, request.employee_id)
    plan = get_plan(db, request.plan_id)

    first_month, last_month = fiscal_year_months(request.fiscal_year)
    activities = _activities_between(db, employee.id, plan.id, first_month, last_month)
    label = fiscal_year_label(request.fiscal_year)
    rating_elements = _rating_inputs(plan_elements(plan), combine_activities(activities))

    prompt = build_final_rating_prompt(
        employee_name=employee.display_name,
        fiscal_year_label=label,
        elements=rating_elements,
        target_rating=request.target_rating,
    )
    ai = AIOrchestrator.run(prompt, provider=request.provider, model=request.model, domain=AIDomain.RATING)
    if ai.truncated:
        logger.warning(f"Rating prompt for plan {plan.id} was truncated at the character budget")

    parsed = parse_rating_output(ai.output, rating_elements)
    missing = len(rating_elements) - len(parsed.element_ratings)
    if missing:
        logger.warning(f"{missing} element(s) missing from rating output for plan {plan.id}")

    rating = PerformanceRating(
        employee_id=employee.id,
        plan_id=plan.id,
        fiscal_year=request.fiscal_year,
        fiscal_year_label=label,
        target_rating=request.target_rating,
        overall_rating=rating_for_total(parsed.total_score),
        element_ratings=[r.model_dump() for r in parsed.element_ratings],
        total_score=parsed.total_score,
        narrative_summary=parsed.narrative_summary,
        output_markdown=ai.output,
        provider=ai.provider,
        model=ai.model,
        truncated=ai.truncated,
    )
    db.add(rating)
    db.commit()
    db.refresh(rating)
    return rating
