from pydantic import BaseModel, Field
from typing import Optional
from datetime import date

class WorkExperienceCreate(BaseModel):
    company: str = Field(..., min_length=1)
    position: str = Field(..., min_length=1)
    start_date: date
    end_date: Optional[date] = None  # None if currently working
    description: Optional[str] = None

class WorkExperienceUpdate(BaseModel):
    company: Optional[str] = None
    position: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    description: Optional[str] = None
