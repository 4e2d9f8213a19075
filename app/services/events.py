import logging
from datetime import datetime
from typing import List

from pymongo import ReturnDocument

from app.utils.errors import Conflict, NotFound
from app.utils.helpers import fetch_users, parse_object_id, to_naive_utc

logger = logging.getLogger(__name__)

EVENTS_LIMIT = 20


def serialize_event(event: dict, creators: dict) -> dict:
    data = {key: value for key, value in event.items() if key != "_id"}
    data["id"] = str(event["_id"])
    data["created_by"] = creators.get(event["created_by"], {"id": event["created_by"]})
    return data


class EventCalendar:
    def __init__(self, db):
        self.db = db

    async def create_event(self, user: dict, spec: dict) -> dict:
        event = {
            "title": spec["title"],
            "description": spec.get("description"),
            "date": to_naive_utc(spec["date"]),
            "location": spec.get("location"),
            "created_by": str(user["_id"]),
            "attendees": [],
            "created_at": datetime.utcnow(),
        }
        result = await self.db.events.insert_one(event)
        event["_id"] = result.inserted_id

        logger.info("Event %s created by %s", event["_id"], event["created_by"])
        creators = await fetch_users(self.db, [event["created_by"]], ("name",))
        return serialize_event(event, creators)

    async def list_events(self) -> List[dict]:
        events = await self.db.events.find().sort("date", 1).limit(EVENTS_LIMIT).to_list(EVENTS_LIMIT)
        creators = await fetch_users(self.db, [event["created_by"] for event in events], ("name",))
        return [serialize_event(event, creators) for event in events]

    async def register_for_event(self, user: dict, event_id: str) -> dict:
        event_oid = parse_object_id(event_id, "event ID")
        user_id = str(user["_id"])

        event = await self.db.events.find_one({"_id": event_oid})
        if not event:
            raise NotFound("Event not found")
        if user_id in event.get("attendees", []):
            raise Conflict("Already registered")

        updated = await self.db.events.find_one_and_update(
            {"_id": event_oid, "attendees": {"$ne": user_id}},
            {"$addToSet": {"attendees": user_id}},
            return_document=ReturnDocument.AFTER
        )
        if not updated:
            raise Conflict("Already registered")

        creators = await fetch_users(self.db, [updated["created_by"]], ("name",))
        return serialize_event(updated, creators)
