from pydantic import BaseModel, ConfigDict, EmailStr, Field
from datetime import datetime
from typing import Optional

class EmployeeCreate(BaseModel):
    display_name: str = Field(min_length=1)
    email: Optional[EmailStr] = None

class EmployeeResponse(BaseModel):
    id: int
    display_name: str
    email: Optional[str] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
