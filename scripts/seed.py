#!/usr/bin/env python3
"""
Seed a development database with demo alumni, posts and jobs.

Safe to run repeatedly: users are matched by email, posts by author and
content, jobs by title and company, and existing documents are skipped.

    python scripts/seed.py
"""

import asyncio
import logging
import os
import sys
from datetime import datetime, timedelta
from pathlib import Path

from bson import ObjectId
from dotenv import load_dotenv
from motor.motor_asyncio import AsyncIOMotorClient

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from app.database import DEFAULT_DATABASE_NAME, ensure_indexes  # noqa: E402
from app.services.profiles import new_user_document  # noqa: E402
from app.utils.logger import setup_logging  # noqa: E402
from app.utils.security import get_password_hash  # noqa: E402

logger = logging.getLogger("seed")

DEMO_PASSWORD = "Password123!"

USERS = [
    {"email": "alice@alumni.org", "name": "Alice Moreau", "graduation_year": 2020,
     "current_job": "Software Engineer", "major": "Computer Science", "degree": "BSc"},
    {"email": "bob@alumni.org", "name": "Bob Okafor", "graduation_year": 2018,
     "current_job": "Product Manager", "major": "Business", "degree": "BBA"},
    {"email": "carol@alumni.org", "name": "Carol Lindqvist", "graduation_year": 2019,
     "current_job": "Data Scientist", "major": "Statistics", "degree": "MSc"},
    {"email": "dave@alumni.org", "name": "Dave Ramirez", "graduation_year": 2017,
     "current_job": "DevOps Engineer", "major": "Computer Science", "degree": "BSc"},
    {"email": "eve@alumni.org", "name": "Eve Tanaka", "graduation_year": 2021,
     "current_job": "UI/UX Designer", "major": "Design", "degree": "BDes"},
    {"email": "frank@alumni.org", "name": "Frank Adeyemi", "graduation_year": 2015,
     "current_job": "CTO", "major": "Electronics", "degree": "MEng"},
]
UNIVERSITY = "State University"

POSTS = [
    {"author": "alice@alumni.org", "content": "Excited to share that I started a new role at ExampleCorp!",
     "likes": ["bob@alumni.org", "dave@alumni.org"], "comments": [("bob@alumni.org", "Congrats!")]},
    {"author": "bob@alumni.org", "content": "Looking for collaborators on an open-source data project.",
     "likes": ["alice@alumni.org", "carol@alumni.org"], "comments": [("carol@alumni.org", "I can help!")]},
    {"author": "carol@alumni.org", "content": "Just published a blog about ML model interpretability.",
     "likes": [], "comments": []},
    {"author": "dave@alumni.org", "content": "Automating infra tasks saved us 10 hours/week.",
     "likes": ["alice@alumni.org"], "comments": [("frank@alumni.org", "Nice work!")]},
    {"author": "eve@alumni.org", "content": "Design critique: new dashboard layout ready for feedback.",
     "likes": ["bob@alumni.org", "alice@alumni.org"], "comments": [("frank@alumni.org", "Looks clean")]},
    {"author": "frank@alumni.org", "content": "Launching our new product next month, thrilled!",
     "likes": ["alice@alumni.org", "bob@alumni.org", "carol@alumni.org"],
     "comments": [("dave@alumni.org", "Congrats team!")]},
]

JOBS = [
    {"poster": "alice@alumni.org", "applicants": ["bob@alumni.org"], "deadline_days": 30,
     "title": "Frontend Engineer", "company": "ExampleCorp", "description": "Work on React-based web application.",
     "location": "remote", "job_type": "full-time", "experience_level": "mid", "min_experience": 2,
     "required_skills": ["JavaScript", "React", "CSS"],
     "required_education": {"degree": "Bachelors", "branch": "CSE"},
     "graduation_year": 2018, "benefits_offered": ["Health insurance", "Stock options"]},
    {"poster": "carol@alumni.org", "applicants": ["alice@alumni.org"], "deadline_days": 45,
     "title": "Data Scientist", "company": "DataWorks", "description": "Develop ML models and pipelines.",
     "location": "hybrid", "job_type": "full-time", "experience_level": "senior", "min_experience": 4,
     "required_skills": ["Python", "PyTorch", "SQL"],
     "required_education": {"degree": "Masters", "branch": "Statistics"},
     "graduation_year": 2016, "benefits_offered": ["Flexible hours", "Gym stipend"]},
    {"poster": "dave@alumni.org", "applicants": ["eve@alumni.org"], "deadline_days": 60,
     "title": "DevOps Engineer", "company": "InfraWorks",
     "description": "Build and maintain CI/CD pipelines and cloud infra.",
     "location": "in-office", "job_type": "full-time", "experience_level": "mid", "min_experience": 3,
     "required_skills": ["AWS", "Docker", "Kubernetes"],
     "required_education": {"degree": "Bachelors", "branch": "CSE"},
     "graduation_year": 2015, "benefits_offered": ["401k", "Health insurance"]},
    {"poster": "eve@alumni.org", "applicants": ["bob@alumni.org"], "deadline_days": 20,
     "title": "Product Designer", "company": "Designify", "description": "Design user interfaces and prototypes.",
     "location": "remote", "job_type": "contract", "experience_level": "entry", "min_experience": 0,
     "required_skills": ["Figma", "User Research"],
     "required_education": {"degree": "Bachelors", "branch": "Design"},
     "graduation_year": 2020, "benefits_offered": ["Flexible schedule"]},
    {"poster": "frank@alumni.org", "applicants": [], "deadline_days": 90,
     "title": "CTO Advisor", "company": "StartupHub", "description": "Advisor role for technical strategy and hiring.",
     "location": "remote", "job_type": "part-time", "experience_level": "senior", "min_experience": 8,
     "required_skills": ["Leadership", "Architecture"],
     "required_education": {"degree": "Masters", "branch": "Electronics"},
     "graduation_year": 2010, "benefits_offered": ["Equity"]},
]


async def seed_users(db) -> dict:
    """Insert missing demo users; return {email: user id string} for all of them."""
    for user in USERS:
        if await db.users.find_one({"email": user["email"]}, {"_id": 1}):
            logger.info("Skipping existing user %s", user["email"])
            continue

        profile = {**user, "university": UNIVERSITY}
        doc = new_user_document(user["email"], get_password_hash(DEMO_PASSWORD), profile)
        await db.users.insert_one(doc)
        logger.info("Inserted user %s", user["email"])

    emails = [user["email"] for user in USERS]
    users = await db.users.find({"email": {"$in": emails}}, {"email": 1}).to_list(length=None)
    return {user["email"]: str(user["_id"]) for user in users}


async def seed_posts(db, ids: dict) -> int:
    inserted = 0
    now = datetime.utcnow()
    for post in POSTS:
        author_id = ids[post["author"]]
        if await db.posts.find_one({"author": author_id, "content": post["content"]}, {"_id": 1}):
            logger.info("Skipping existing post by %s", post["author"])
            continue

        await db.posts.insert_one({
            "content": post["content"],
            "image_url": "",
            "image_id": "",
            "author": author_id,
            "likes": [ids[email] for email in post["likes"]],
            "comments": [
                {"_id": ObjectId(), "comment": text, "author": ids[email], "created_at": now}
                for email, text in post["comments"]
            ],
            "created_at": now,
            "updated_at": now,
        })
        inserted += 1
        logger.info("Inserted post by %s", post["author"])
    return inserted


async def seed_jobs(db, ids: dict) -> int:
    inserted = 0
    now = datetime.utcnow()
    for listing in JOBS:
        if await db.jobs.find_one({"title": listing["title"], "company": listing["company"]}, {"_id": 1}):
            logger.info("Skipping existing job %s at %s", listing["title"], listing["company"])
            continue

        job = {key: value for key, value in listing.items() if key not in ("poster", "applicants", "deadline_days")}
        job.update({
            "application_deadline": now + timedelta(days=listing["deadline_days"]),
            "status": "open",
            "posted_by": ids[listing["poster"]],
            "applications": [
                {"_id": ObjectId(), "applicant": ids[email], "resume_link": None,
                 "status": "pending", "applied_at": now}
                for email in listing["applicants"]
            ],
            "created_at": now,
            "updated_at": now,
        })
        await db.jobs.insert_one(job)
        inserted += 1
        logger.info("Inserted job %s at %s", listing["title"], listing["company"])
    return inserted


async def seed(db) -> dict:
    ids = await seed_users(db)
    posts = await seed_posts(db, ids)
    jobs = await seed_jobs(db, ids)
    return {"users": len(ids), "posts": posts, "jobs": jobs}


async def main():
    load_dotenv()
    setup_logging()

    mongo_uri = os.getenv("MONGO_URI")
    if not mongo_uri:
        logger.error("Please set MONGO_URI in the environment or .env file")
        sys.exit(1)

    client = AsyncIOMotorClient(mongo_uri)
    try:
        await client.admin.command("ping")
        db = client[os.getenv("DATABASE_NAME", DEFAULT_DATABASE_NAME)]
        await ensure_indexes(db)

        summary = await seed(db)
        logger.info("Seeding complete: %s", summary)
    finally:
        client.close()


if __name__ == "__main__":
    asyncio.run(main())
