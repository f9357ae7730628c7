import secrets
from pydantic import BaseModel, ConfigDict, Field, field_validator
from datetime import datetime
from typing import List, Optional


def new_element_id() -> str:
    return "el_" + secrets.token_hex(8)


class PlanElementCreate(BaseModel):
    title: str = Field(min_length=1)
    description: str = ""
    weight: Optional[int] = Field(default=None, ge=0)
    results_of_activities: Optional[str] = None
    metrics: Optional[str] = None

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("title must not be blank")
        return v.strip()


class PlanElement(PlanElementCreate):
    """One critical element of a performance plan."""
    id: str = Field(default_factory=new_element_id)


class PlanElementsUpdate(BaseModel):
    elements: List[PlanElement]


class PlanElementMetricsUpdate(BaseModel):
    # Empty string clears the field; omitted fields are left untouched
    results_of_activities: Optional[str] = None
    metrics: Optional[str] = None
    weight: Optional[int] = Field(default=None, ge=0)


class PlanResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    employee_id: int
    file_name: str
    uploaded_at: datetime
    extracted_text: str
    elements: List[PlanElement]

PlanResponse.model_rebuild()
