from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime

class EventCreate(BaseModel):
    title: str = Field(..., min_length=1)
    description: Optional[str] = None
    date: datetime
    location: Optional[str] = None

class EventResponse(BaseModel):
    id: str
    title: str
    description: Optional[str] = None
    date: datetime
    location: Optional[str] = None
    created_by: dict
    attendees: List[str] = []
    created_at: Optional[datetime] = None
