from pydantic import BaseModel, Field
from typing import List, Optional, Literal
from datetime import datetime

JobLocation = Literal["remote", "in-office", "hybrid"]
JobType = Literal["full-time", "part-time", "contract", "internship"]
ExperienceLevel = Literal["entry", "mid", "senior"]
JobStatus = Literal["open", "closed", "filled"]


class RequiredEducation(BaseModel):
    degree: str = Field(..., min_length=1)  # "Bachelors", "Masters", "PhD"
    branch: str = Field(..., min_length=1)  # "CSE", "IT", "ECE", "BBA"


# 1. Input: What the poster sends
class JobCreate(BaseModel):
    title: str = Field(..., min_length=1)
    company: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    location: JobLocation
    job_type: JobType
    experience_level: ExperienceLevel
    min_experience: int = Field(..., ge=0)  # years
    application_deadline: datetime
    required_skills: List[str] = Field(..., min_length=1)
    required_education: RequiredEducation
    graduation_year: int
    benefits_offered: List[str] = []


# 2. Status Update Schema
class JobStatusUpdate(BaseModel):
    """Schema for updating job status"""
    status: JobStatus


# 3. Output: a job as listed to other users (no applications attached)
class JobResponse(BaseModel):
    id: str
    title: str
    company: str
    description: str
    location: str
    job_type: str
    experience_level: str
    min_experience: int
    application_deadline: datetime
    required_skills: List[str]
    required_education: RequiredEducation
    graduation_year: int
    benefits_offered: List[str] = []
    status: str = "open"
    posted_by: dict
    already_applied: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
