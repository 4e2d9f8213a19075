from pydantic import BaseModel
from typing import Optional, Literal
from datetime import datetime

ApplicationStatus = Literal["pending", "reviewed", "interviewed", "rejected", "accepted"]

# 1. Input: Apply for a job
class ApplicationCreate(BaseModel):
    resume_link: Optional[str] = None

# 2. Input: Update Status (poster only)
class ApplicationStatusUpdate(BaseModel):
    application_id: str
    status: ApplicationStatus

# 3. Output: one applicant as seen by the poster
class ApplicantResponse(BaseModel):
    user_id: str
    name: Optional[str] = None
    email: Optional[str] = None
    application_id: str
    status: str
    applied_at: datetime
    resume_link: Optional[str] = None
