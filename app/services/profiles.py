"""
Profiles, work history and the symmetric connection graph.

Connections are stored on both users as id strings. Adding or removing a
connection issues two independent single-document updates; they are not
wrapped in a transaction, so a failure between them can leave the relation
one-sided until the caller retries.
"""

import logging
import re
from datetime import datetime
from typing import Optional

from bson import ObjectId
from pymongo import ReturnDocument

from app.utils.errors import Conflict, NotFound, ValidationFailed
from app.utils.helpers import (
    fetch_users,
    is_blank,
    parse_object_id,
    serialize_subdocument,
    summarize_user,
    to_naive_utc,
)
from app.utils.images import ImageStore, ImageUpload

logger = logging.getLogger(__name__)

PROFILE_FIELDS = (
    "name", "graduation_year", "current_job",
    "bio", "location", "company", "job_title", "linkedin_profile",
    "university", "degree", "major", "minor",
    "skills", "achievements", "interests",
    "privacy_settings",
)

SEARCH_TEXT_FIELDS = ("name", "major", "company", "job_title", "skills", "university", "location")
SUGGESTION_FIELDS = ("major", "graduation_year", "company", "university")
SUGGESTION_SUMMARY = ("name", "job_title", "company", "major", "graduation_year")
CONNECTION_SUMMARY = ("name", "email", "job_title", "company", "location")

CLEARABLE_EXPERIENCE_FIELDS = ("end_date", "description")

SEARCH_LIMIT = 20
SUGGESTION_LIMIT = 10


def new_user_document(email: str, password_hash: str, profile: dict) -> dict:
    """Defaults every freshly registered user starts with."""
    now = datetime.utcnow()
    return {
        "email": email,
        "password": password_hash,
        "name": profile["name"],
        "graduation_year": profile["graduation_year"],
        "current_job": profile.get("current_job"),
        "major": profile["major"],
        "degree": profile["degree"],
        "university": profile["university"],
        "skills": [],
        "achievements": [],
        "interests": [],
        "work_experience": [],
        "profile_image": "",
        "profile_image_id": "",
        "connections": [],
        "privacy_settings": {"show_email": False, "show_phone": False, "show_location": True},
        "is_verified_user": False,
        "created_at": now,
        "updated_at": now,
    }


def serialize_user(user: dict) -> dict:
    data = {
        key: value for key, value in user.items()
        if key not in ("_id", "password", "profile_image_id")
    }
    data["id"] = str(user["_id"])
    data["work_experience"] = [serialize_subdocument(exp) for exp in user.get("work_experience", [])]
    return data


class ProfileDirectory:
    def __init__(self, db, image_store: Optional[ImageStore] = None):
        self.db = db
        self.image_store = image_store

    async def _get_user(self, user_id: str) -> dict:
        user = await self.db.users.find_one({"_id": parse_object_id(user_id, "user ID")})
        if not user:
            raise NotFound("User not found")
        return user

    async def _set_fields(self, user: dict, updates: dict, extra: Optional[dict] = None) -> dict:
        updates["updated_at"] = datetime.utcnow()
        operation = {"$set": updates}
        if extra:
            operation.update(extra)

        updated = await self.db.users.find_one_and_update(
            {"_id": user["_id"]},
            operation,
            return_document=ReturnDocument.AFTER
        )
        if not updated:
            raise NotFound("User not found")
        return serialize_user(updated)

    # ===========================
    # PROFILE
    # ===========================

    async def get_profile(self, user: dict) -> dict:
        return serialize_user(user)

    async def get_detailed_profile(self, viewer: dict, user_id: Optional[str] = None) -> dict:
        """Profile with the connection list collapsed into a count and a flag."""
        user = viewer if user_id is None else await self._get_user(user_id)

        connections = user.get("connections", [])
        profile = serialize_user(user)
        profile.pop("connections", None)
        profile["connection_count"] = len(connections)
        profile["is_connected"] = str(viewer["_id"]) in connections

        return profile

    async def update_profile(self, user: dict, patch: dict) -> dict:
        """Partial update: only allow-listed, non-empty values are applied."""
        updates = {}
        for field in PROFILE_FIELDS:
            value = patch.get(field)
            if is_blank(value):
                continue

            # Merge nested option sets key by key instead of replacing them
            if isinstance(value, dict):
                for key, nested in value.items():
                    if nested is not None:
                        updates[f"{field}.{key}"] = nested
                continue

            updates[field] = value

        if not updates:
            return serialize_user(user)

        logger.info("Updating profile %s fields=%s", user["_id"], sorted(updates))
        return await self._set_fields(user, updates)

    # ===========================
    # WORK EXPERIENCE
    # ===========================

    async def add_work_experience(self, user: dict, entry: dict) -> dict:
        experience = {
            "_id": ObjectId(),
            "company": entry["company"],
            "position": entry["position"],
            "start_date": to_naive_utc(entry["start_date"]),
            "end_date": to_naive_utc(entry.get("end_date")),
            "description": entry.get("description"),
        }
        if experience["end_date"] and experience["end_date"] < experience["start_date"]:
            raise ValidationFailed("End date cannot be before start date")

        return await self._set_fields(user, {}, {"$push": {"work_experience": experience}})

    async def update_work_experience(self, user: dict, experience_id: str, patch: dict) -> dict:
        experience_oid = parse_object_id(experience_id, "experience ID")

        experiences = user.get("work_experience", [])
        index = next((i for i, exp in enumerate(experiences) if exp["_id"] == experience_oid), None)
        if index is None:
            raise NotFound("Work experience not found")

        # An explicit null clears end_date (back to "current") or description;
        # required fields cannot be nulled
        changes = {
            key: value for key, value in patch.items()
            if value is not None or key in CLEARABLE_EXPERIENCE_FIELDS
        }
        if not changes:
            raise ValidationFailed("No fields to update")

        for key in ("start_date", "end_date"):
            if key in changes:
                changes[key] = to_naive_utc(changes[key])

        merged = {**experiences[index], **changes}
        if merged.get("end_date") and merged["end_date"] < merged["start_date"]:
            raise ValidationFailed("End date cannot be before start date")

        updated = await self.db.users.find_one_and_update(
            {"_id": user["_id"], f"work_experience.{index}._id": experience_oid},
            {"$set": {f"work_experience.{index}": merged, "updated_at": datetime.utcnow()}},
            return_document=ReturnDocument.AFTER
        )
        if not updated:
            raise NotFound("Work experience not found")
        return serialize_user(updated)

    async def delete_work_experience(self, user: dict, experience_id: str) -> dict:
        experience_oid = parse_object_id(experience_id, "experience ID")

        if not any(exp["_id"] == experience_oid for exp in user.get("work_experience", [])):
            raise NotFound("Work experience not found")

        return await self._set_fields(user, {}, {"$pull": {"work_experience": {"_id": experience_oid}}})

    # ===========================
    # PROFILE IMAGE
    # ===========================

    async def upload_profile_image(self, user: dict, image: ImageUpload) -> dict:
        user_id = str(user["_id"])
        previous_image_id = user.get("profile_image_id")

        url, image_id = await self.image_store.upload(image, folder=f"profile_images/{user_id}")
        profile = await self._set_fields(user, {"profile_image": url, "profile_image_id": image_id})

        # The old image is unreferenced now; losing it must not fail the update
        await self.image_store.discard(previous_image_id)
        return profile

    async def remove_profile_image(self, user: dict) -> dict:
        await self.image_store.discard(user.get("profile_image_id"))
        return await self._set_fields(user, {"profile_image": "", "profile_image_id": ""})

    # ===========================
    # DISCOVERY
    # ===========================

    async def search_alumni(self, filters: dict) -> list:
        query = {}
        for field in SEARCH_TEXT_FIELDS:
            value = filters.get(field)
            if not is_blank(value):
                query[field] = {"$regex": re.escape(value.strip()), "$options": "i"}

        if filters.get("graduation_year") is not None:
            query["graduation_year"] = filters["graduation_year"]

        alumni = await self.db.users.find(
            query, {"password": 0, "connections": 0, "profile_image_id": 0}
        ).limit(SEARCH_LIMIT).to_list(SEARCH_LIMIT)

        return [serialize_user(user) for user in alumni]

    async def suggest_connections(self, user: dict) -> list:
        """Users sharing major, year, company or university, not yet connected."""
        shared = [{field: user[field]} for field in SUGGESTION_FIELDS if not is_blank(user.get(field))]
        if not shared:
            return []

        excluded = [user["_id"]] + [
            ObjectId(uid) for uid in user.get("connections", []) if ObjectId.is_valid(uid)
        ]

        projection = {field: 1 for field in SUGGESTION_SUMMARY}
        suggestions = await self.db.users.find(
            {"_id": {"$nin": excluded}, "$or": shared}, projection
        ).limit(SUGGESTION_LIMIT).to_list(SUGGESTION_LIMIT)

        return [summarize_user(suggestion, SUGGESTION_SUMMARY) for suggestion in suggestions]

    # ===========================
    # CONNECTIONS
    # ===========================

    async def add_connection(self, user: dict, target_id: str) -> dict:
        target = await self._get_user(target_id)

        user_id = str(user["_id"])
        target_id = str(target["_id"])

        if user_id == target_id:
            raise Conflict("Cannot connect to yourself")
        if target_id in user.get("connections", []):
            raise Conflict("Already connected")

        result = await self.db.users.update_one(
            {"_id": user["_id"], "connections": {"$ne": target_id}},
            {"$addToSet": {"connections": target_id}}
        )
        if result.matched_count == 0:
            raise Conflict("Already connected")

        await self.db.users.update_one(
            {"_id": target["_id"]},
            {"$addToSet": {"connections": user_id}}
        )

        logger.info("Connected %s <-> %s", user_id, target_id)
        return {"message": "Connection established successfully", "connection_id": target_id}

    async def remove_connection(self, user: dict, target_id: str) -> dict:
        target = await self._get_user(target_id)

        user_id = str(user["_id"])
        target_id = str(target["_id"])

        # Removing a connection that does not exist is not an error
        await self.db.users.update_one({"_id": user["_id"]}, {"$pull": {"connections": target_id}})
        await self.db.users.update_one({"_id": target["_id"]}, {"$pull": {"connections": user_id}})

        logger.info("Disconnected %s <-> %s", user_id, target_id)
        return {"message": "Connection removed successfully", "connection_id": target_id}

    async def list_connections(self, viewer: dict, user_id: Optional[str] = None) -> list:
        owner = viewer if user_id is None else await self._get_user(user_id)

        viewer_id = str(viewer["_id"])
        connection_ids = [uid for uid in owner.get("connections", []) if uid != viewer_id]

        people = await fetch_users(self.db, connection_ids, CONNECTION_SUMMARY)
        return [people[uid] for uid in connection_ids if uid in people]
