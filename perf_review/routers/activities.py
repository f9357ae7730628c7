from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List, Optional

from perf_review.core.exceptions import NotFoundError, ValidationFailedError
from perf_review.database import get_db
from perf_review.models.activity import Activity
from perf_review.schemas.activity import ActivityCreate, ActivityResponse, ActivityUpdate
from perf_review.services.plan_service import get_employee, get_plan

router = APIRouter(prefix="/activities", tags=["activities"])

def _get_activity(db: Session, activity_id: int) -> Activity:
    activity = db.get(Activity, activity_id)
    if not activity:
        raise NotFoundError("Activity", activity_id)
    return activity

@router.get("", response_model=List[ActivityResponse])
def list_activities(employee_id: Optional[int] = None, plan_id: Optional[int] = None, db: Session = Depends(get_db)):
    query = db.query(Activity)
    if employee_id:
        query = query.filter(Activity.employee_id == employee_id)
    if plan_id:
        query = query.filter(Activity.plan_id == plan_id)
    return query.order_by(Activity.month, Activity.id).all()

@router.post("", response_model=ActivityResponse)
def create_activity(payload: ActivityCreate, db: Session = Depends(get_db)):
    get_employee(db, payload.employee_id)
    plan = get_plan(db, payload.plan_id)
    if plan.employee_id != payload.employee_id:
        raise ValidationFailedError("Plan does not belong to this employee")

    activity = Activity(**payload.model_dump())
    db.add(activity)
    db.commit()
    db.refresh(activity)
    return activity

@router.put("/{activity_id}", response_model=ActivityResponse)
def update_activity(activity_id: int, payload: ActivityUpdate, db: Session = Depends(get_db)):
    activity = _get_activity(db, activity_id)
    if payload.content is not None:
        activity.content = payload.content
    if payload.month is not None:
        activity.month = payload.month
    db.commit()
    db.refresh(activity)
    return activity

@router.delete("/{activity_id}")
def delete_activity(activity_id: int, db: Session = Depends(get_db)):
    activity = _get_activity(db, activity_id)
    db.delete(activity)
    db.commit()
    return {"ok": True}
