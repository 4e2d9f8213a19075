import logging
from datetime import datetime
from typing import List

from pymongo import ReturnDocument

from app.utils.errors import NotFound, ValidationFailed
from app.utils.helpers import fetch_users, is_blank, parse_object_id

logger = logging.getLogger(__name__)


def serialize_message(message: dict) -> dict:
    return {
        "id": str(message["_id"]),
        "sender": message["sender"],
        "receiver": message["receiver"],
        "content": message["content"],
        "read": message.get("read", False),
        "created_at": message["created_at"],
    }


class MessagingLedger:
    def __init__(self, db):
        self.db = db

    async def send_message(self, sender: dict, receiver_id: str, content: str) -> dict:
        if is_blank(content):
            raise ValidationFailed("Message content is required")

        receiver = await self.db.users.find_one(
            {"_id": parse_object_id(receiver_id, "receiver ID")}, {"_id": 1}
        )
        if not receiver:
            raise NotFound("Receiver not found")

        message = {
            "sender": str(sender["_id"]),
            "receiver": str(receiver["_id"]),
            "content": content,
            "read": False,
            "created_at": datetime.utcnow(),
        }
        result = await self.db.messages.insert_one(message)
        message["_id"] = result.inserted_id

        return serialize_message(message)

    async def list_conversations(self, user: dict) -> List[dict]:
        """One entry per counterpart, most recent conversation first."""
        user_id = str(user["_id"])

        messages = await self.db.messages.find(
            {"$or": [{"sender": user_id}, {"receiver": user_id}]}
        ).sort("created_at", -1).to_list(length=None)

        grouped = {}
        for message in messages:
            other = message["receiver"] if message["sender"] == user_id else message["sender"]
            grouped.setdefault(other, []).append(serialize_message(message))

        people = await fetch_users(self.db, list(grouped), ("name",))
        return [
            {"user": people.get(other, {"id": other}), "messages": thread}
            for other, thread in grouped.items()
        ]

    async def mark_read(self, user: dict, message_id: str) -> dict:
        # Only the receiver may flip the flag; anyone else sees a 404 so the
        # message's existence is not leaked.
        message = await self.db.messages.find_one_and_update(
            {"_id": parse_object_id(message_id, "message ID"), "receiver": str(user["_id"])},
            {"$set": {"read": True}},
            return_document=ReturnDocument.AFTER
        )
        if not message:
            raise NotFound("Message not found")

        return serialize_message(message)
