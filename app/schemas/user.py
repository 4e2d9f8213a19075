from pydantic import BaseModel, EmailStr, Field
from typing import Optional, List
from datetime import datetime

# 1. For Registration (Input)
class UserCreate(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    graduation_year: int
    current_job: Optional[str] = None
    major: str = Field(..., min_length=1)
    degree: str = Field(..., min_length=1)
    university: str = Field(..., min_length=1)

# 2. For Login (Input)
class UserLogin(BaseModel):
    email: str
    password: str

class TokenResponse(BaseModel):
    access_token: str
    token_type: str

# 3. Privacy flags; unset flags are left untouched on update
class PrivacySettings(BaseModel):
    show_email: Optional[bool] = None
    show_phone: Optional[bool] = None
    show_location: Optional[bool] = None

# 4. For Updating Profile (Input). Empty values are ignored, not cleared.
class UserProfileUpdate(BaseModel):
    name: Optional[str] = None
    graduation_year: Optional[int] = None
    current_job: Optional[str] = None
    bio: Optional[str] = None
    location: Optional[str] = None
    company: Optional[str] = None
    job_title: Optional[str] = None
    linkedin_profile: Optional[str] = None
    university: Optional[str] = None
    degree: Optional[str] = None
    major: Optional[str] = None
    minor: Optional[str] = None
    skills: Optional[List[str]] = None
    achievements: Optional[List[str]] = None
    interests: Optional[List[str]] = None
    privacy_settings: Optional[PrivacySettings] = None

# 5. Output: public profile fields shared by every profile view
class UserProfileBase(BaseModel):
    id: str
    email: EmailStr
    name: str
    graduation_year: Optional[int] = None
    current_job: Optional[str] = None
    bio: Optional[str] = None
    location: Optional[str] = None
    company: Optional[str] = None
    job_title: Optional[str] = None
    linkedin_profile: Optional[str] = None
    university: Optional[str] = None
    degree: Optional[str] = None
    major: Optional[str] = None
    minor: Optional[str] = None
    skills: List[str] = []
    achievements: List[str] = []
    interests: List[str] = []
    work_experience: List[dict] = []
    profile_image: str = ""
    privacy_settings: dict = {}
    is_verified_user: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

# 6. Output: alumni search result (connection lists are not exposed)
class AlumniSearchResult(UserProfileBase):
    pass

# 7. Output: own profile
class UserResponse(UserProfileBase):
    connections: List[str] = []
