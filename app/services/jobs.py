"""
Job postings with their applications embedded in the job document.

Every mutation touches a single job document: applying is one conditional
$push, status changes are one $set. Applications are located by linear scan
of the embedded list, which is fine at the sizes a single posting reaches.
"""

import logging
import re
from datetime import datetime
from typing import List, Optional

from bson import ObjectId
from pymongo import ReturnDocument

from app.utils.errors import Conflict, Forbidden, NotFound
from app.utils.helpers import fetch_users, parse_object_id, to_naive_utc

logger = logging.getLogger(__name__)

POSTER_FIELDS = ("name", "email")
APPLICANT_FIELDS = ("name", "email")


def serialize_application(application: dict) -> dict:
    return {
        "id": str(application["_id"]),
        "applicant": application["applicant"],
        "resume_link": application.get("resume_link"),
        "status": application["status"],
        "applied_at": application.get("applied_at"),
    }


def serialize_job(job: dict, applications: Optional[List[dict]] = None) -> dict:
    """Render a job; applications are only included when passed explicitly."""
    data = {key: value for key, value in job.items() if key not in ("_id", "applications")}
    data["id"] = str(job["_id"])
    if applications is not None:
        data["applications"] = [serialize_application(app) for app in applications]
    return data


def has_applied(job: dict, user_id: str) -> bool:
    return any(app.get("applicant") == user_id for app in job.get("applications", []))


def parse_skills(skills: Optional[str]) -> List[str]:
    if not skills:
        return []
    return [skill.strip() for skill in skills.split(",") if skill.strip()]


class JobBoard:
    def __init__(self, db):
        self.db = db

    async def _get_job(self, job_id: str) -> dict:
        job = await self.db.jobs.find_one({"_id": parse_object_id(job_id, "job ID")})
        if not job:
            raise NotFound("Job not found")
        return job

    async def _get_owned_job(self, user: dict, job_id: str, action: str) -> dict:
        job = await self._get_job(job_id)
        if job.get("posted_by") != str(user["_id"]):
            raise Forbidden(f"Not authorized to {action}")
        return job

    async def _attach_posters(self, jobs: List[dict]) -> List[dict]:
        """Replace each posted_by id with a {id, name, email} summary."""
        posters = await fetch_users(self.db, [job["posted_by"] for job in jobs], POSTER_FIELDS)
        for job in jobs:
            job["posted_by"] = posters.get(job["posted_by"], {"id": job["posted_by"]})
        return jobs

    async def _own_application_view(self, jobs: List[dict], user_id: str) -> List[dict]:
        """Jobs with applications narrowed to the user's own, newest application first."""
        results = []
        for job in jobs:
            own = [app for app in job.get("applications", []) if app.get("applicant") == user_id]
            data = serialize_job(job, own)
            data["already_applied"] = True
            results.append(data)

        results.sort(
            key=lambda job: job["applications"][0]["applied_at"] if job["applications"] else datetime.min,
            reverse=True
        )
        return await self._attach_posters(results)

    # ===========================
    # POSTING
    # ===========================

    async def create_job(self, poster: dict, spec: dict) -> dict:
        now = datetime.utcnow()
        job = {
            **spec,
            "application_deadline": to_naive_utc(spec["application_deadline"]),
            "status": "open",
            "posted_by": str(poster["_id"]),
            "applications": [],
            "created_at": now,
            "updated_at": now,
        }

        result = await self.db.jobs.insert_one(job)
        job["_id"] = result.inserted_id

        logger.info("Job %s created by %s", job["_id"], job["posted_by"])
        data = serialize_job(job)
        data["already_applied"] = False
        return (await self._attach_posters([data]))[0]

    async def update_job_status(self, user: dict, job_id: str, status: str) -> dict:
        job = await self._get_owned_job(user, job_id, "update this job")

        updated = await self.db.jobs.find_one_and_update(
            {"_id": job["_id"]},
            {"$set": {"status": status, "updated_at": datetime.utcnow()}},
            return_document=ReturnDocument.AFTER
        )
        if not updated:
            raise NotFound("Job not found")

        logger.info("Job %s status -> %s", job["_id"], status)
        data = serialize_job(updated, updated.get("applications", []))
        data["already_applied"] = has_applied(updated, str(user["_id"]))
        return (await self._attach_posters([data]))[0]

    # ===========================
    # LISTINGS
    # ===========================

    async def list_open_jobs(self, user: dict) -> List[dict]:
        """Open, unexpired jobs the user neither posted nor applied to."""
        user_id = str(user["_id"])
        query = {
            "status": "open",
            "application_deadline": {"$gte": datetime.utcnow()},
            "applications.applicant": {"$ne": user_id},
            "posted_by": {"$ne": user_id},
        }

        jobs = await self.db.jobs.find(query, {"applications": 0}).sort("created_at", -1).to_list(length=None)

        results = []
        for job in jobs:
            data = serialize_job(job)
            data["already_applied"] = False
            results.append(data)
        return await self._attach_posters(results)

    async def search_jobs(self, filters: dict, user: dict) -> List[dict]:
        user_id = str(user["_id"])
        query = {"status": "open"}

        if filters.get("title"):
            query["title"] = {"$regex": re.escape(filters["title"]), "$options": "i"}
        if filters.get("location"):
            query["location"] = filters["location"]
        if filters.get("job_type"):
            query["job_type"] = filters["job_type"]
        if filters.get("min_experience") is not None:
            query["min_experience"] = {"$lte": filters["min_experience"]}
        if filters.get("graduation_year") is not None:
            query["graduation_year"] = {"$gte": filters["graduation_year"]}
        if filters.get("branch"):
            query["required_education.branch"] = filters["branch"]
        if filters.get("degree"):
            query["required_education.degree"] = filters["degree"]

        skills = parse_skills(filters.get("skills"))
        if skills:
            query["$or"] = [
                {"required_skills": {"$regex": re.escape(skill), "$options": "i"}}
                for skill in skills
            ]

        jobs = await self.db.jobs.find(query).sort("created_at", -1).to_list(length=None)

        results = []
        for job in jobs:
            data = serialize_job(job)
            data["already_applied"] = has_applied(job, user_id)
            results.append(data)
        return await self._attach_posters(results)

    async def list_my_jobs(self, poster: dict) -> List[dict]:
        """The caller's own postings, applicants resolved to name and email."""
        jobs = await self.db.jobs.find(
            {"posted_by": str(poster["_id"])}
        ).sort("created_at", -1).to_list(length=None)

        applicant_ids = [app["applicant"] for job in jobs for app in job.get("applications", [])]
        applicants = await fetch_users(self.db, applicant_ids, APPLICANT_FIELDS)

        results = []
        for job in jobs:
            data = serialize_job(job, job.get("applications", []))
            for app in data["applications"]:
                app["applicant"] = applicants.get(app["applicant"], {"id": app["applicant"]})
            data["already_applied"] = False
            results.append(data)
        return await self._attach_posters(results)

    async def list_jobs_by_user(self, viewer: dict, user_id: str) -> List[dict]:
        poster_id = str(parse_object_id(user_id, "user ID"))
        viewer_id = str(viewer["_id"])

        jobs = await self.db.jobs.find({"posted_by": poster_id}).sort("created_at", -1).to_list(length=None)

        results = []
        for job in jobs:
            data = serialize_job(job)
            data["already_applied"] = has_applied(job, viewer_id)
            results.append(data)
        return await self._attach_posters(results)

    async def get_job(self, viewer: dict, job_id: str) -> dict:
        job = await self._get_job(job_id)
        viewer_id = str(viewer["_id"])

        own = [app for app in job.get("applications", []) if app.get("applicant") == viewer_id]
        data = serialize_job(job, own)
        data["already_applied"] = bool(own)
        return (await self._attach_posters([data]))[0]

    async def jobs_applied_by_user(self, user: dict) -> List[dict]:
        user_id = str(user["_id"])
        jobs = await self.db.jobs.find({"applications.applicant": user_id}).to_list(length=None)
        return await self._own_application_view(jobs, user_id)

    async def jobs_offered_to_user(self, user: dict) -> List[dict]:
        user_id = str(user["_id"])
        jobs = await self.db.jobs.find({
            "applications": {"$elemMatch": {"applicant": user_id, "status": "accepted"}}
        }).to_list(length=None)
        return await self._own_application_view(jobs, user_id)

    # ===========================
    # APPLICATIONS
    # ===========================

    async def apply_for_job(self, applicant: dict, job_id: str, resume_link: Optional[str]) -> dict:
        job = await self._get_job(job_id)
        user_id = str(applicant["_id"])

        if job.get("posted_by") == user_id:
            raise Forbidden("You cannot apply to your own job")
        if has_applied(job, user_id):
            raise Conflict("Already applied")

        application = {
            "_id": ObjectId(),
            "applicant": user_id,
            "resume_link": resume_link,
            "status": "pending",
            "applied_at": datetime.utcnow(),
        }

        # Guarded push: a concurrent duplicate loses here, a concurrent
        # application by someone else is appended alongside ours.
        result = await self.db.jobs.update_one(
            {"_id": job["_id"], "applications.applicant": {"$ne": user_id}},
            {"$push": {"applications": application}}
        )
        if result.matched_count == 0:
            if await self.db.jobs.count_documents({"_id": job["_id"]}) == 0:
                raise NotFound("Job not found")
            raise Conflict("Already applied")

        logger.info("User %s applied to job %s", user_id, job["_id"])
        return serialize_application(application)

    async def update_application_status(self, user: dict, job_id: str, application_id: str, status: str) -> dict:
        job = await self._get_owned_job(user, job_id, "update applications")
        application_oid = parse_object_id(application_id, "application ID")

        applications = job.get("applications", [])
        index = next((i for i, app in enumerate(applications) if app["_id"] == application_oid), None)
        if index is None:
            raise NotFound("Application not found")

        # Applications are only ever appended, so the index stays valid; the
        # _id guard catches anything unexpected.
        result = await self.db.jobs.update_one(
            {"_id": job["_id"], f"applications.{index}._id": application_oid},
            {"$set": {f"applications.{index}.status": status, "updated_at": datetime.utcnow()}}
        )
        if result.matched_count == 0:
            raise NotFound("Application not found")

        logger.info("Application %s on job %s -> %s", application_oid, job["_id"], status)
        return {"message": "Application status updated successfully", "application_id": application_id, "status": status}

    async def list_applicants(self, poster: dict, job_id: str) -> List[dict]:
        job = await self._get_owned_job(poster, job_id, "view applicants for this job")

        applications = job.get("applications", [])
        people = await fetch_users(self.db, [app["applicant"] for app in applications], APPLICANT_FIELDS)

        applicants = []
        for app in applications:
            person = people.get(app["applicant"], {})
            applicants.append({
                "user_id": app["applicant"],
                "name": person.get("name"),
                "email": person.get("email"),
                "application_id": str(app["_id"]),
                "status": app["status"],
                "applied_at": app["applied_at"],
                "resume_link": app.get("resume_link"),
            })
        return applicants
