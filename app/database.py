import logging
import os

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorGridFSBucket
from pymongo import ASCENDING, DESCENDING

load_dotenv()

logger = logging.getLogger(__name__)

DEFAULT_DATABASE_NAME = "alumni_network"
IMAGE_BUCKET_NAME = "images"


async def connect_to_mongo(app: FastAPI):
    """Open the process-wide Mongo client and hang it on app.state."""
    mongo_uri = os.getenv("MONGO_URI")
    if not mongo_uri:
        raise ValueError("MONGO_URI environment variable is not set! Check your .env file.")

    database_name = os.getenv("DATABASE_NAME", DEFAULT_DATABASE_NAME)

    client = AsyncIOMotorClient(mongo_uri)
    await client.admin.command("ping")

    db = client[database_name]
    app.state.mongo_client = client
    app.state.db = db
    app.state.fs_bucket = AsyncIOMotorGridFSBucket(db, bucket_name=IMAGE_BUCKET_NAME)

    await ensure_indexes(db)

    if "mongodb+srv" in mongo_uri:
        logger.info("Connected to MongoDB Atlas, database=%s", database_name)
    else:
        logger.info("Connected to MongoDB, database=%s", database_name)


async def close_mongo_connection(app: FastAPI):
    client = getattr(app.state, "mongo_client", None)
    if client:
        client.close()
        logger.info("MongoDB connection closed")


async def ensure_indexes(db):
    await db.users.create_index("email", unique=True)

    await db.jobs.create_index("status")
    await db.jobs.create_index("location")
    await db.jobs.create_index("job_type")
    await db.jobs.create_index("min_experience")
    await db.jobs.create_index("required_education.branch")
    await db.jobs.create_index([("posted_by", ASCENDING), ("created_at", DESCENDING)])

    await db.posts.create_index([("author", ASCENDING), ("created_at", DESCENDING)])

    await db.messages.create_index("sender")
    await db.messages.create_index("receiver")

    await db.events.create_index("date")


def get_db(request: Request):
    return request.app.state.db


def get_fs_bucket(request: Request):
    return request.app.state.fs_bucket
