"""
Shared fixtures: the FastAPI app wired to an in-memory Mongo (mongomock-motor)
and an in-memory image store, plus helpers to register users and post jobs.
"""
from datetime import datetime, timedelta
from types import SimpleNamespace

import pytest
import pytest_asyncio
from bson import ObjectId
from httpx import ASGITransport, AsyncClient
from mongomock_motor import AsyncMongoMockClient

from app.database import get_db
from app.main import app
from app.utils.errors import NotFound
from app.utils.images import ImageStore, get_image_store


REGISTRATION_FIELDS = {"graduation_year", "current_job", "major", "degree", "university"}


class InMemoryImageStore(ImageStore):
    """GridFS stand-in that keeps uploads in a dict."""

    def __init__(self, fail_deletes=False):
        super().__init__(fs_bucket=None)
        self.files = {}
        self.deleted = []
        self.fail_deletes = fail_deletes

    async def upload(self, image, folder):
        image_id = str(ObjectId())
        self.files[image_id] = (image.contents, image.content_type)
        return f"/api/images/{image_id}", image_id

    async def delete(self, image_id):
        if self.fail_deletes:
            raise RuntimeError("storage unavailable")
        self.deleted.append(image_id)
        self.files.pop(image_id, None)

    async def open(self, image_id):
        if image_id not in self.files:
            raise NotFound("Image not found")
        return self.files[image_id]


@pytest.fixture
def db():
    return AsyncMongoMockClient()["alumni_network_test"]


@pytest.fixture
def image_store():
    return InMemoryImageStore()


@pytest_asyncio.fixture
async def client(db, image_store):
    app.dependency_overrides[get_db] = lambda: db
    app.dependency_overrides[get_image_store] = lambda: image_store

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def make_user(client):
    """Register a user and return its id and auth headers."""

    async def _make_user(name="Alice", email=None, **fields):
        payload = {
            "email": email or f"{name.lower()}@alumni.org",
            "password": "secret123",
            "name": name,
            "graduation_year": 2020,
            "major": "Computer Science",
            "degree": "B.Tech",
            "university": "State University",
        }
        profile = {key: fields.pop(key) for key in list(fields) if key not in REGISTRATION_FIELDS}
        payload.update(fields)

        response = await client.post("/api/auth/register", json=payload)
        assert response.status_code == 201, response.text
        headers = {"Authorization": f"Bearer {response.json()['access_token']}"}

        if profile:
            me = await client.put("/api/profile/me", json=profile, headers=headers)
        else:
            me = await client.get("/api/profile/me", headers=headers)
        assert me.status_code == 200, me.text
        return SimpleNamespace(id=me.json()["id"], email=payload["email"], headers=headers)

    return _make_user


def job_payload(**overrides):
    payload = {
        "title": "Backend Engineer",
        "company": "Acme",
        "description": "Build APIs",
        "location": "remote",
        "job_type": "full-time",
        "experience_level": "mid",
        "min_experience": 2,
        "application_deadline": (datetime.utcnow() + timedelta(days=30)).isoformat(),
        "required_skills": ["Python", "MongoDB"],
        "required_education": {"degree": "Bachelors", "branch": "CSE"},
        "graduation_year": 2020,
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def job_spec():
    return job_payload


@pytest.fixture
def post_job(client):
    """Create a job as the given user and return its id."""

    async def _post_job(poster, **overrides):
        response = await client.post("/api/jobs", json=job_payload(**overrides), headers=poster.headers)
        assert response.status_code == 201, response.text
        return response.json()["id"]

    return _post_job
