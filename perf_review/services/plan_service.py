import os
import re
import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from perf_review.core import prompts
from perf_review.core.config import settings
from perf_review.core.exceptions import NotFoundError, ValidationFailedError
from perf_review.models.activity import Activity
from perf_review.models.employee import Employee
from perf_review.models.performance_rating import PerformanceRating
from perf_review.models.plan import Plan
from perf_review.models.review_draft import ReviewDraft
from perf_review.schemas.plan import PlanElement, PlanElementCreate, PlanElementMetricsUpdate
from perf_review.services.plan_document import extract_pdf_text
from perf_review.services.plan_segmenter import segment

logger = logging.getLogger(__name__)


def get_employee(db: Session, employee_id: int) -> Employee:
    employee = db.get(Employee, employee_id)
    if not employee:
        raise NotFoundError("Employee", employee_id)
    return employee


def get_plan(db: Session, plan_id: int) -> Plan:
    plan = db.get(Plan, plan_id)
    if not plan:
        raise NotFoundError("Plan", plan_id)
    return plan


def plan_elements(plan: Plan) -> List[PlanElement]:
    return [PlanElement.model_validate(e) for e in (plan.elements or [])]


def _store_elements(plan: Plan, elements: List[PlanElement]) -> None:
    # Reassign the whole list so the JSON column is flagged dirty
    plan.elements = [e.model_dump() for e in elements]


def elements_with_fallback(text: str) -> List[PlanElement]:
    """
    Segment plan text; when nothing is recognized keep a single element
    carrying an excerpt of the text so the plan remains usable and editable.
    """
    elements = segment(text)
    if elements:
        return elements
    logger.warning("No critical elements recognized in plan text; using unparsed fallback element")
    return [PlanElement(
        title=prompts.UNPARSED_PLAN_TITLE,
        description=text[:prompts.UNPARSED_PLAN_EXCERPT_CHARS],
    )]


def _safe_file_name(file_name: str) -> str:
    return re.sub(r"[^a-zA-Z0-9._-]+", "_", file_name) or "plan.pdf"


def create_plan_from_upload(db: Session, employee_id: int, file_name: str, pdf_bytes: bytes) -> Plan:
    get_employee(db, employee_id)
    if not pdf_bytes:
        raise ValidationFailedError("pdf file is empty")
    if len(pdf_bytes) > settings.max_upload_bytes:
        raise ValidationFailedError(
            f"File size exceeds {settings.max_upload_bytes // (1024 * 1024)}MB limit"
        )

    extracted_text = extract_pdf_text(pdf_bytes)
    elements = elements_with_fallback(extracted_text)

    plan = Plan(employee_id=employee_id, file_name=file_name or "plan.pdf", extracted_text=extracted_text)
    _store_elements(plan, elements)
    db.add(plan)
    db.flush()

    os.makedirs(settings.upload_dir, exist_ok=True)
    pdf_path = os.path.join(settings.upload_dir, f"plan_{plan.id}__{_safe_file_name(plan.file_name)}")
    with open(pdf_path, "wb") as f:
        f.write(pdf_bytes)
    plan.pdf_path = pdf_path

    db.commit()
    db.refresh(plan)
    logger.info(f"Stored plan {plan.id} for employee {employee_id} with {len(elements)} element(s)")
    return plan


def reparse_plan(db: Session, plan_id: int) -> Plan:
    plan = get_plan(db, plan_id)
    elements = elements_with_fallback(plan.extracted_text or "")
    _store_elements(plan, elements)
    db.commit()
    db.refresh(plan)
    logger.info(f"Re-segmented plan {plan.id}: {len(elements)} element(s)")
    return plan


def replace_elements(db: Session, plan_id: int, elements: List[PlanElement]) -> Plan:
    plan = get_plan(db, plan_id)
    ids = [e.id for e in elements]
    if len(ids) != len(set(ids)):
        raise ValidationFailedError("Element ids must be unique within a plan")
    _store_elements(plan, elements)
    db.commit()
    db.refresh(plan)
    return plan


def add_element(db: Session, plan_id: int, payload: PlanElementCreate) -> PlanElement:
    plan = get_plan(db, plan_id)
    elements = plan_elements(plan)
    element = PlanElement(**payload.model_dump())
    elements.append(element)
    _store_elements(plan, elements)
    db.commit()
    return element


def _blank_to_none(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    return value.strip() or None


def update_element_metrics(
    db: Session, plan_id: int, element_id: str, payload: PlanElementMetricsUpdate
) -> PlanElement:
    plan = get_plan(db, plan_id)
    elements = plan_elements(plan)
    element = next((e for e in elements if e.id == element_id), None)
    if element is None:
        raise NotFoundError("Element", element_id)

    fields = payload.model_fields_set
    if "results_of_activities" in fields:
        element.results_of_activities = _blank_to_none(payload.results_of_activities)
    if "metrics" in fields:
        element.metrics = _blank_to_none(payload.metrics)
    if "weight" in fields:
        element.weight = payload.weight

    _store_elements(plan, elements)
    db.commit()
    return element


def delete_plan(db: Session, plan_id: int) -> None:
    """Delete a plan with its activities, reviews, ratings and stored PDF."""
    plan = get_plan(db, plan_id)
    pdf_path = plan.pdf_path

    removed = {
        "activities": db.query(Activity).filter(Activity.plan_id == plan_id).delete(),
        "reviews": db.query(ReviewDraft).filter(ReviewDraft.plan_id == plan_id).delete(),
        "ratings": db.query(PerformanceRating).filter(PerformanceRating.plan_id == plan_id).delete(),
    }
    db.delete(plan)
    db.commit()

    # File goes only once the rows are gone
    if pdf_path:
        try:
            os.remove(pdf_path)
        except FileNotFoundError:
            logger.warning(f"Stored PDF already missing: {pdf_path}")
        except OSError as e:
            logger.warning(f"Failed to delete PDF file {pdf_path}: {e}")
    logger.info(f"Deleted plan {plan_id}", extra={"cascade": removed})
