from datetime import date, datetime, timezone
from typing import Dict, Iterable, List, Optional

from bson import ObjectId

from app.utils.errors import ValidationFailed


def parse_object_id(value: str, label: str = "ID") -> ObjectId:
    """Convert a path/body id to ObjectId, rejecting malformed input with 400."""
    if not value or not ObjectId.is_valid(value):
        raise ValidationFailed(f"Invalid {label}")
    return ObjectId(value)


def to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    # Mongo hands back naive UTC datetimes; store them the same way so
    # comparisons against datetime.utcnow() stay consistent.
    if value is None:
        return None
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc).replace(tzinfo=None)
        return value
    if isinstance(value, date):
        return datetime.combine(value, datetime.min.time())
    return value


def is_blank(value) -> bool:
    """True for None, empty strings and empty lists/dicts."""
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    if isinstance(value, (list, tuple, set, dict)):
        return len(value) == 0
    return False


def paginate(items: List, page: int, limit: int) -> List:
    skip = (page - 1) * limit
    return items[skip:skip + limit]


def serialize_subdocument(doc: dict) -> dict:
    data = {key: value for key, value in doc.items() if key != "_id"}
    data["id"] = str(doc["_id"])
    return data


def summarize_user(user: dict, fields: Iterable[str]) -> dict:
    summary = {"id": str(user["_id"])}
    for field in fields:
        summary[field] = user.get(field)
    return summary


async def fetch_users(db, user_ids: Iterable[str], fields: Iterable[str]) -> Dict[str, dict]:
    """Resolve user id strings to small summaries in one round trip.

    Ids that no longer resolve are simply missing from the result.
    """
    fields = list(fields)
    object_ids = list({ObjectId(uid) for uid in user_ids if uid and ObjectId.is_valid(uid)})
    if not object_ids:
        return {}

    projection = {field: 1 for field in fields}
    users = await db.users.find({"_id": {"$in": object_ids}}, projection).to_list(length=None)

    return {str(user["_id"]): summarize_user(user, fields) for user in users}
