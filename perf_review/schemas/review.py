from pydantic import BaseModel, ConfigDict, Field, model_validator
from datetime import datetime
from typing import Dict, List, Literal, Optional

DATE_PATTERN = r"^\d{4}-\d{2}-\d{2}$"

class PromptMeta(BaseModel):
    provider: str
    model: str
    truncated: bool = False

class ReviewGenerateRequest(BaseModel):
    employee_id: int
    plan_id: int
    period_start: str = Field(pattern=DATE_PATTERN)
    period_end: str = Field(pattern=DATE_PATTERN)
    element_ids: Optional[List[str]] = None
    guidance: Optional[str] = None
    provider: Optional[Literal["openai", "anthropic"]] = None
    model: Optional[str] = None

    @model_validator(mode="after")
    def check_period(self):
        if self.period_start > self.period_end:
            raise ValueError("period_start must not be after period_end")
        return self

class ReviewDraftResponse(BaseModel):
    id: int
    employee_id: int
    plan_id: int
    period_start: str
    period_end: str
    created_at: datetime
    prompt_meta: PromptMeta
    output_markdown: str
    suggestions: Dict[str, List[str]] = {}

    model_config = ConfigDict(from_attributes=True)

ReviewDraftResponse.model_rebuild()
