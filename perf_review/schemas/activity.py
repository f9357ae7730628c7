from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime
from typing import Optional

MONTH_PATTERN = r"^\d{4}-(0[1-9]|1[0-2])$"

class ActivityCreate(BaseModel):
    employee_id: int
    plan_id: int
    month: str = Field(pattern=MONTH_PATTERN)
    content: str = Field(min_length=1)

class ActivityUpdate(BaseModel):
    month: Optional[str] = Field(default=None, pattern=MONTH_PATTERN)
    content: Optional[str] = Field(default=None, min_length=1)

class ActivityResponse(BaseModel):
    id: int
    employee_id: int
    plan_id: int
    month: str
    content: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
