from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List, Optional

from perf_review.core.exceptions import NotFoundError
from perf_review.database import get_db
from perf_review.models.review_draft import ReviewDraft
from perf_review.schemas.review import ReviewDraftResponse, ReviewGenerateRequest
from perf_review.services.review_service import generate_review

router = APIRouter(prefix="/reviews", tags=["reviews"])

@router.get("", response_model=List[ReviewDraftResponse])
def list_reviews(employee_id: Optional[int] = None, plan_id: Optional[int] = None, db: Session = Depends(get_db)):
    query = db.query(ReviewDraft)
    if employee_id:
        query = query.filter(ReviewDraft.employee_id == employee_id)
    if plan_id:
        query = query.filter(ReviewDraft.plan_id == plan_id)
    return query.order_by(ReviewDraft.created_at.desc(), ReviewDraft.id.desc()).all()

@router.post("/generate", response_model=ReviewDraftResponse)
def generate(request: ReviewGenerateRequest, db: Session = Depends(get_db)):
    """Draft a progress review for the period with the configured LLM."""
    return generate_review(db, request)

@router.delete("/{review_id}")
def delete_review(review_id: int, db: Session = Depends(get_db)):
    review = db.get(ReviewDraft, review_id)
    if not review:
        raise NotFoundError("Review", review_id)
    db.delete(review)
    db.commit()
    return {"deleted": True}
