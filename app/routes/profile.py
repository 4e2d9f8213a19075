# ========================================
# app/routes/profile.py - PROFILES, WORK HISTORY, CONNECTIONS
# ========================================

from fastapi import APIRouter, Depends, File, Query, UploadFile
from typing import List, Optional

from app.database import get_db
from app.schemas.experience import WorkExperienceCreate, WorkExperienceUpdate
from app.schemas.user import AlumniSearchResult, UserProfileUpdate, UserResponse
from app.services.profiles import ProfileDirectory
from app.utils.auth import get_current_user
from app.utils.images import get_image_store, read_image_upload

router = APIRouter(prefix="/api/profile", tags=["Profile"])


def get_profile_directory(db=Depends(get_db), image_store=Depends(get_image_store)) -> ProfileDirectory:
    return ProfileDirectory(db, image_store)


# ===========================
# OWN PROFILE
# ===========================

# ✅ 1. GET MY PROFILE
@router.get("/me", response_model=UserResponse)
async def get_profile(
    current_user: dict = Depends(get_current_user),
    profiles: ProfileDirectory = Depends(get_profile_directory)
):
    """Get the current user's profile."""
    return await profiles.get_profile(current_user)


# ✅ 2. UPDATE MY PROFILE
@router.put("/me", response_model=UserResponse)
async def update_profile(
    profile_data: UserProfileUpdate,
    current_user: dict = Depends(get_current_user),
    profiles: ProfileDirectory = Depends(get_profile_directory)
):
    """Update the current user's profile. Empty values leave fields unchanged."""
    return await profiles.update_profile(current_user, profile_data.model_dump(exclude_unset=True))


# ✅ 3. DETAILED PROFILE (own or another user's)
@router.get("/detailed")
@router.get("/detailed/{user_id}")
async def get_detailed_profile(
    user_id: Optional[str] = None,
    current_user: dict = Depends(get_current_user),
    profiles: ProfileDirectory = Depends(get_profile_directory)
):
    """Profile with connection count and whether you are connected."""
    return await profiles.get_detailed_profile(current_user, user_id)


# ===========================
# PROFILE IMAGE
# ===========================

# ✅ 4. UPLOAD PROFILE IMAGE
@router.post("/image", response_model=UserResponse)
async def upload_profile_image(
    image: UploadFile = File(...),
    current_user: dict = Depends(get_current_user),
    profiles: ProfileDirectory = Depends(get_profile_directory)
):
    upload = await read_image_upload(image)
    return await profiles.upload_profile_image(current_user, upload)


# ✅ 5. REMOVE PROFILE IMAGE
@router.delete("/image", response_model=UserResponse)
async def remove_profile_image(
    current_user: dict = Depends(get_current_user),
    profiles: ProfileDirectory = Depends(get_profile_directory)
):
    return await profiles.remove_profile_image(current_user)


# ===========================
# WORK EXPERIENCE
# ===========================

# ✅ 6. ADD WORK EXPERIENCE
@router.post("/work-experience", response_model=UserResponse, status_code=201)
async def add_work_experience(
    experience: WorkExperienceCreate,
    current_user: dict = Depends(get_current_user),
    profiles: ProfileDirectory = Depends(get_profile_directory)
):
    return await profiles.add_work_experience(current_user, experience.model_dump())


# ✅ 7. UPDATE WORK EXPERIENCE
@router.put("/work-experience/{experience_id}", response_model=UserResponse)
async def update_work_experience(
    experience_id: str,
    experience_update: WorkExperienceUpdate,
    current_user: dict = Depends(get_current_user),
    profiles: ProfileDirectory = Depends(get_profile_directory)
):
    """Update an existing work experience entry."""
    return await profiles.update_work_experience(
        current_user, experience_id, experience_update.model_dump(exclude_unset=True)
    )


# ✅ 8. DELETE WORK EXPERIENCE
@router.delete("/work-experience/{experience_id}", response_model=UserResponse)
async def delete_work_experience(
    experience_id: str,
    current_user: dict = Depends(get_current_user),
    profiles: ProfileDirectory = Depends(get_profile_directory)
):
    return await profiles.delete_work_experience(current_user, experience_id)


# ===========================
# DISCOVERY
# ===========================

# ✅ 9. SEARCH ALUMNI
@router.get("/search", response_model=List[AlumniSearchResult])
async def search_alumni(
    name: Optional[str] = Query(None),
    graduation_year: Optional[int] = Query(None),
    major: Optional[str] = Query(None),
    company: Optional[str] = Query(None),
    job_title: Optional[str] = Query(None),
    skills: Optional[str] = Query(None, description="Matches any skill containing this text"),
    university: Optional[str] = Query(None),
    location: Optional[str] = Query(None),
    current_user: dict = Depends(get_current_user),
    profiles: ProfileDirectory = Depends(get_profile_directory)
):
    """Case-insensitive alumni search; at most 20 results."""
    filters = {
        "name": name,
        "graduation_year": graduation_year,
        "major": major,
        "company": company,
        "job_title": job_title,
        "skills": skills,
        "university": university,
        "location": location,
    }
    return await profiles.search_alumni(filters)


# ✅ 10. SUGGESTED CONNECTIONS
@router.get("/suggested")
async def get_suggested_connections(
    current_user: dict = Depends(get_current_user),
    profiles: ProfileDirectory = Depends(get_profile_directory)
):
    return await profiles.suggest_connections(current_user)


# ===========================
# CONNECTIONS
# ===========================

# ✅ 11. CONNECT
@router.post("/connect/{connection_id}")
async def add_connection(
    connection_id: str,
    current_user: dict = Depends(get_current_user),
    profiles: ProfileDirectory = Depends(get_profile_directory)
):
    return await profiles.add_connection(current_user, connection_id)


# ✅ 12. DISCONNECT
@router.delete("/connect/{connection_id}")
async def remove_connection(
    connection_id: str,
    current_user: dict = Depends(get_current_user),
    profiles: ProfileDirectory = Depends(get_profile_directory)
):
    return await profiles.remove_connection(current_user, connection_id)


# ✅ 13. LIST CONNECTIONS (own or another user's)
@router.get("/connections")
@router.get("/connections/{user_id}")
async def get_connections(
    user_id: Optional[str] = None,
    current_user: dict = Depends(get_current_user),
    profiles: ProfileDirectory = Depends(get_profile_directory)
):
    return await profiles.list_connections(current_user, user_id)
