# ========================================
# app/routes/events.py - ALUMNI EVENTS
# ========================================

from fastapi import APIRouter, Depends, status
from typing import List

from app.database import get_db
from app.schemas.event import EventCreate, EventResponse
from app.services.events import EventCalendar
from app.utils.auth import get_current_user

router = APIRouter(prefix="/api/events", tags=["Events"])


def get_calendar(db=Depends(get_db)) -> EventCalendar:
    return EventCalendar(db)


# ✅ 1. CREATE EVENT
@router.post("", response_model=EventResponse, status_code=status.HTTP_201_CREATED)
async def create_event(
    event: EventCreate,
    current_user: dict = Depends(get_current_user),
    calendar: EventCalendar = Depends(get_calendar)
):
    return await calendar.create_event(current_user, event.model_dump())


# ✅ 2. LIST EVENTS
@router.get("", response_model=List[EventResponse])
async def get_events(
    current_user: dict = Depends(get_current_user),
    calendar: EventCalendar = Depends(get_calendar)
):
    """Up to 20 events, soonest first."""
    return await calendar.list_events()


# ✅ 3. REGISTER FOR EVENT
@router.post("/{event_id}/register", response_model=EventResponse)
async def register_for_event(
    event_id: str,
    current_user: dict = Depends(get_current_user),
    calendar: EventCalendar = Depends(get_calendar)
):
    return await calendar.register_for_event(current_user, event_id)
