from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime
from typing import List, Literal, Optional

from perf_review.schemas.review import PromptMeta

class RatingElementInput(BaseModel):
    """An element as presented to the final-rating prompt."""
    id: str
    title: str
    weight: Optional[int] = None
    description: str = ""
    combined_activities: str = ""

class ElementRating(BaseModel):
    element_id: str
    title: str
    weight: int
    rating: int = Field(ge=1, le=5)
    score: int
    summary: str = ""

class RatingParseResult(BaseModel):
    element_ratings: List[ElementRating] = []
    total_score: int = 0
    narrative_summary: Optional[str] = None

class RatingGenerateRequest(BaseModel):
    employee_id: int
    plan_id: int
    fiscal_year: int = Field(ge=2000, le=2100, description="Calendar year in which the fiscal year ends")
    target_rating: int = Field(ge=1, le=5)
    provider: Optional[Literal["openai", "anthropic"]] = None
    model: Optional[str] = None

class PerformanceRatingResponse(BaseModel):
    id: int
    employee_id: int
    plan_id: int
    fiscal_year: int
    fiscal_year_label: str
    target_rating: int
    overall_rating: int
    element_ratings: List[ElementRating]
    total_score: int
    narrative_summary: Optional[str] = None
    output_markdown: str
    prompt_meta: PromptMeta
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)

PerformanceRatingResponse.model_rebuild()
