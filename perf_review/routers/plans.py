from fastapi import APIRouter, Depends, UploadFile, File, Form
from sqlalchemy.orm import Session
from typing import List, Optional
import logging

from perf_review.database import get_db
from perf_review.models.plan import Plan
from perf_review.schemas.plan import (
    PlanElement,
    PlanElementCreate,
    PlanElementMetricsUpdate,
    PlanElementsUpdate,
    PlanResponse,
)
from perf_review.services import plan_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/plans", tags=["plans"])

@router.get("", response_model=List[PlanResponse])
def list_plans(employee_id: Optional[int] = None, db: Session = Depends(get_db)):
    query = db.query(Plan)
    if employee_id:
        query = query.filter(Plan.employee_id == employee_id)
    return query.order_by(Plan.id).all()

@router.get("/{plan_id}", response_model=PlanResponse)
def get_plan(plan_id: int, db: Session = Depends(get_db)):
    return plan_service.get_plan(db, plan_id)

@router.post("/upload", response_model=PlanResponse)
async def upload_plan(
    employee_id: int = Form(...),
    pdf: UploadFile = File(...),
    db: Session = Depends(get_db),
):
    """Upload a performance plan PDF and segment it into critical elements."""
    logger.info(f"Plan upload received: {pdf.filename} for employee {employee_id}")
    pdf_bytes = await pdf.read()
    return plan_service.create_plan_from_upload(db, employee_id, pdf.filename or "plan.pdf", pdf_bytes)

@router.post("/{plan_id}/reparse", response_model=PlanResponse)
def reparse_plan(plan_id: int, db: Session = Depends(get_db)):
    return plan_service.reparse_plan(db, plan_id)

@router.put("/{plan_id}/elements", response_model=PlanResponse)
def replace_elements(plan_id: int, payload: PlanElementsUpdate, db: Session = Depends(get_db)):
    return plan_service.replace_elements(db, plan_id, payload.elements)

@router.post("/{plan_id}/elements", response_model=PlanElement)
def add_element(plan_id: int, payload: PlanElementCreate, db: Session = Depends(get_db)):
    return plan_service.add_element(db, plan_id, payload)

@router.put("/{plan_id}/elements/{element_id}/metrics", response_model=PlanElement)
def update_element_metrics(
    plan_id: int, element_id: str, payload: PlanElementMetricsUpdate, db: Session = Depends(get_db)
):
    return plan_service.update_element_metrics(db, plan_id, element_id, payload)

@router.delete("/{plan_id}")
def delete_plan(plan_id: int, db: Session = Depends(get_db)):
    plan_service.delete_plan(db, plan_id)
    return {"ok": True}
