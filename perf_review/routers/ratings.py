from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List, Optional

from perf_review.core.exceptions import NotFoundError
from perf_review.database import get_db
from perf_review.models.performance_rating import PerformanceRating
from perf_review.schemas.rating import PerformanceRatingResponse, RatingGenerateRequest
from perf_review.services.review_service import generate_rating

router = APIRouter(prefix="/ratings", tags=["ratings"])

@router.get("", response_model=List[PerformanceRatingResponse])
def list_ratings(employee_id: Optional[int] = None, plan_id: Optional[int] = None, db: Session = Depends(get_db)):
    query = db.query(PerformanceRating)
    if employee_id:
        query = query.filter(PerformanceRating.employee_id == employee_id)
    if plan_id:
        query = query.filter(PerformanceRating.plan_id == plan_id)
    return query.order_by(PerformanceRating.created_at.desc(), PerformanceRating.id.desc()).all()

@router.post("/generate", response_model=PerformanceRatingResponse)
def generate(request: RatingGenerateRequest, db: Session = Depends(get_db)):
    """Draft the fiscal-year final rating aimed at the requested summary rating."""
    return generate_rating(db, request)

@router.delete("/{rating_id}")
def delete_rating(rating_id: int, db: Session = Depends(get_db)):
    rating = db.get(PerformanceRating, rating_id)
    if not rating:
        raise NotFoundError("Rating", rating_id)
    db.delete(rating)
    db.commit()
    return {"deleted": True}
