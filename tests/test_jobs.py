"""
Tests for the job board: postings, listings, applications and their review
"""
from datetime import datetime, timedelta

from bson import ObjectId


class TestPosting:
    """Creating jobs and changing their status"""

    async def test_create_job_starts_open(self, client, make_user, job_spec):
        poster = await make_user("Poster")
        response = await client.post("/api/jobs", json=job_spec(), headers=poster.headers)

        assert response.status_code == 201
        body = response.json()
        assert body["status"] == "open"
        assert body["posted_by"]["id"] == poster.id
        assert body["posted_by"]["name"] == "Poster"
        assert "applications" not in body

    async def test_rejects_unknown_location(self, client, make_user, job_spec):
        poster = await make_user("Poster")
        response = await client.post("/api/jobs", json=job_spec(location="moon"), headers=poster.headers)
        assert response.status_code == 422

    async def test_rejects_negative_experience(self, client, make_user, job_spec):
        poster = await make_user("Poster")
        response = await client.post("/api/jobs", json=job_spec(min_experience=-1), headers=poster.headers)
        assert response.status_code == 422

    async def test_requires_at_least_one_skill(self, client, make_user, job_spec):
        poster = await make_user("Poster")
        response = await client.post("/api/jobs", json=job_spec(required_skills=[]), headers=poster.headers)
        assert response.status_code == 422

    async def test_poster_can_close_job(self, client, make_user, post_job):
        poster = await make_user("Poster")
        job_id = await post_job(poster)

        response = await client.patch(f"/api/jobs/{job_id}/status", json={"status": "closed"}, headers=poster.headers)
        assert response.status_code == 200
        assert response.json()["status"] == "closed"

    async def test_other_user_cannot_change_status(self, client, make_user, post_job):
        poster = await make_user("Poster")
        other = await make_user("Other")
        job_id = await post_job(poster)

        response = await client.patch(f"/api/jobs/{job_id}/status", json={"status": "filled"}, headers=other.headers)
        assert response.status_code == 403

    async def test_invalid_status_value(self, client, make_user, post_job):
        poster = await make_user("Poster")
        job_id = await post_job(poster)

        response = await client.patch(f"/api/jobs/{job_id}/status", json={"status": "archived"}, headers=poster.headers)
        assert response.status_code == 422

    async def test_unknown_job(self, client, make_user):
        alice = await make_user("Alice")
        response = await client.get(f"/api/jobs/{ObjectId()}", headers=alice.headers)
        assert response.status_code == 404

    async def test_malformed_job_id(self, client, make_user):
        alice = await make_user("Alice")
        response = await client.get("/api/jobs/12345", headers=alice.headers)
        assert response.status_code == 400


class TestListings:
    """Open listing, search and per-user views"""

    async def test_open_listing_excludes_own_applied_and_expired(self, client, make_user, post_job):
        poster = await make_user("Poster")
        seeker = await make_user("Seeker")

        open_id = await post_job(poster, title="Open role")
        applied_id = await post_job(poster, title="Applied role")
        await post_job(poster, title="Expired role", application_deadline=(datetime.utcnow() - timedelta(days=1)).isoformat())
        closed_id = await post_job(poster, title="Closed role")
        await post_job(seeker, title="My own role")

        await client.patch(f"/api/jobs/{closed_id}/status", json={"status": "closed"}, headers=poster.headers)
        await client.post(f"/api/jobs/{applied_id}/apply", headers=seeker.headers)

        response = await client.get("/api/jobs", headers=seeker.headers)
        assert response.status_code == 200
        jobs = response.json()
        assert [job["id"] for job in jobs] == [open_id]
        assert jobs[0]["already_applied"] is False

    async def test_search_only_returns_open_jobs(self, client, make_user, post_job):
        poster = await make_user("Poster")
        seeker = await make_user("Seeker")
        open_id = await post_job(poster, title="Data Engineer")
        closed_id = await post_job(poster, title="Data Scientist")
        await client.patch(f"/api/jobs/{closed_id}/status", json={"status": "closed"}, headers=poster.headers)

        response = await client.get("/api/jobs/search", params={"title": "data"}, headers=seeker.headers)
        assert response.status_code == 200
        assert [job["id"] for job in response.json()] == [open_id]

    async def test_search_filters(self, client, make_user, post_job):
        poster = await make_user("Poster")
        seeker = await make_user("Seeker")
        junior_id = await post_job(poster, min_experience=1, location="hybrid", required_skills=["React"])
        await post_job(poster, min_experience=5, location="hybrid", required_skills=["React"])
        await post_job(poster, min_experience=1, location="remote", required_skills=["Go"])

        response = await client.get(
            "/api/jobs/search",
            params={"min_experience": 2, "location": "hybrid", "skills": "react, rust"},
            headers=seeker.headers
        )
        assert [job["id"] for job in response.json()] == [junior_id]

    async def test_search_marks_applied_jobs(self, client, make_user, post_job):
        poster = await make_user("Poster")
        seeker = await make_user("Seeker")
        job_id = await post_job(poster)
        await client.post(f"/api/jobs/{job_id}/apply", headers=seeker.headers)

        response = await client.get("/api/jobs/search", headers=seeker.headers)
        assert response.json()[0]["already_applied"] is True

    async def test_jobs_by_user(self, client, make_user, post_job):
        poster = await make_user("Poster")
        seeker = await make_user("Seeker")
        job_id = await post_job(poster)

        response = await client.get(f"/api/jobs/user/{poster.id}", headers=seeker.headers)
        assert response.status_code == 200
        assert [job["id"] for job in response.json()] == [job_id]

    async def test_single_job_shows_only_own_application(self, client, make_user, post_job):
        poster = await make_user("Poster")
        alice = await make_user("Alice")
        bob = await make_user("Bob")
        job_id = await post_job(poster)
        await client.post(f"/api/jobs/{job_id}/apply", headers=alice.headers)
        await client.post(f"/api/jobs/{job_id}/apply", headers=bob.headers)

        response = await client.get(f"/api/jobs/{job_id}", headers=alice.headers)
        body = response.json()
        assert body["already_applied"] is True
        assert [app["applicant"] for app in body["applications"]] == [alice.id]


class TestApplications:
    """Applying, reviewing applicants and the offered view"""

    async def test_application_review_flow(self, client, make_user, post_job):
        poster = await make_user("Poster")
        alice = await make_user("Alice")
        bob = await make_user("Bob")
        job_id = await post_job(poster)

        response = await client.post(
            f"/api/jobs/{job_id}/apply",
            json={"resume_link": "https://cv.example.org/alice.pdf"},
            headers=alice.headers
        )
        assert response.status_code == 201
        application = response.json()["application"]
        assert application["status"] == "pending"
        assert application["applicant"] == alice.id

        await client.post(f"/api/jobs/{job_id}/apply", headers=bob.headers)

        response = await client.get(f"/api/jobs/{job_id}/applicants", headers=poster.headers)
        assert response.status_code == 200
        applicants = {a["user_id"]: a for a in response.json()}
        assert set(applicants) == {alice.id, bob.id}
        assert applicants[alice.id]["name"] == "Alice"
        assert applicants[alice.id]["email"] == "alice@alumni.org"
        assert applicants[alice.id]["resume_link"] == "https://cv.example.org/alice.pdf"
        assert all(a["status"] == "pending" for a in applicants.values())

        response = await client.patch(
            f"/api/jobs/{job_id}/application",
            json={"application_id": applicants[alice.id]["application_id"], "status": "accepted"},
            headers=poster.headers
        )
        assert response.status_code == 200

        response = await client.get(f"/api/jobs/{job_id}/applicants", headers=poster.headers)
        statuses = {a["user_id"]: a["status"] for a in response.json()}
        assert statuses == {alice.id: "accepted", bob.id: "pending"}

        offered = await client.get("/api/jobs/offered", headers=alice.headers)
        assert [job["id"] for job in offered.json()] == [job_id]
        assert offered.json()[0]["applications"][0]["status"] == "accepted"

        not_offered = await client.get("/api/jobs/offered", headers=bob.headers)
        assert not_offered.json() == []

    async def test_duplicate_application(self, client, make_user, post_job):
        poster = await make_user("Poster")
        alice = await make_user("Alice")
        job_id = await post_job(poster)

        await client.post(f"/api/jobs/{job_id}/apply", headers=alice.headers)
        response = await client.post(f"/api/jobs/{job_id}/apply", headers=alice.headers)
        assert response.status_code == 400
        assert response.json()["detail"] == "Already applied"

    async def test_poster_cannot_apply(self, client, make_user, post_job):
        poster = await make_user("Poster")
        job_id = await post_job(poster)

        response = await client.post(f"/api/jobs/{job_id}/apply", headers=poster.headers)
        assert response.status_code == 403

    async def test_apply_to_missing_job(self, client, make_user):
        alice = await make_user("Alice")
        response = await client.post(f"/api/jobs/{ObjectId()}/apply", headers=alice.headers)
        assert response.status_code == 404

    async def test_only_poster_sees_applicants(self, client, make_user, post_job):
        poster = await make_user("Poster")
        alice = await make_user("Alice")
        job_id = await post_job(poster)

        response = await client.get(f"/api/jobs/{job_id}/applicants", headers=alice.headers)
        assert response.status_code == 403

    async def test_only_poster_updates_applications(self, client, make_user, post_job):
        poster = await make_user("Poster")
        alice = await make_user("Alice")
        job_id = await post_job(poster)
        response = await client.post(f"/api/jobs/{job_id}/apply", headers=alice.headers)
        application_id = response.json()["application"]["id"]

        response = await client.patch(
            f"/api/jobs/{job_id}/application",
            json={"application_id": application_id, "status": "accepted"},
            headers=alice.headers
        )
        assert response.status_code == 403

    async def test_unknown_application(self, client, make_user, post_job):
        poster = await make_user("Poster")
        job_id = await post_job(poster)

        response = await client.patch(
            f"/api/jobs/{job_id}/application",
            json={"application_id": str(ObjectId()), "status": "reviewed"},
            headers=poster.headers
        )
        assert response.status_code == 404

    async def test_invalid_application_status(self, client, make_user, post_job):
        poster = await make_user("Poster")
        job_id = await post_job(poster)

        response = await client.patch(
            f"/api/jobs/{job_id}/application",
            json={"application_id": str(ObjectId()), "status": "hired"},
            headers=poster.headers
        )
        assert response.status_code == 422

    async def test_applied_view_lists_own_applications(self, client, make_user, post_job):
        poster = await make_user("Poster")
        alice = await make_user("Alice")
        bob = await make_user("Bob")
        first = await post_job(poster, title="First")
        second = await post_job(poster, title="Second")
        await post_job(poster, title="Untouched")

        await client.post(f"/api/jobs/{first}/apply", headers=alice.headers)
        await client.post(f"/api/jobs/{first}/apply", headers=bob.headers)
        await client.post(f"/api/jobs/{second}/apply", headers=alice.headers)

        response = await client.get("/api/jobs/applied", headers=alice.headers)
        assert response.status_code == 200
        jobs = response.json()
        assert {job["id"] for job in jobs} == {first, second}
        for job in jobs:
            assert job["already_applied"] is True
            assert [app["applicant"] for app in job["applications"]] == [alice.id]

    async def test_applied_and_offered_are_newest_application_first(self, client, make_user, post_job, db):
        poster = await make_user("Poster")
        alice = await make_user("Alice")
        job_a = await post_job(poster, title="Job A")
        job_b = await post_job(poster, title="Job B")

        # Applied to B first, then A
        application_ids = {}
        for job_id, hours_ago in ((job_b, 2), (job_a, 1)):
            response = await client.post(f"/api/jobs/{job_id}/apply", headers=alice.headers)
            application_ids[job_id] = response.json()["application"]["id"]
            await db.jobs.update_one(
                {"_id": ObjectId(job_id)},
                {"$set": {"applications.0.applied_at": datetime.utcnow() - timedelta(hours=hours_ago)}}
            )

        applied = await client.get("/api/jobs/applied", headers=alice.headers)
        assert [job["id"] for job in applied.json()] == [job_a, job_b]

        for job_id in (job_b, job_a):
            await client.patch(
                f"/api/jobs/{job_id}/application",
                json={"application_id": application_ids[job_id], "status": "accepted"},
                headers=poster.headers
            )

        offered = await client.get("/api/jobs/offered", headers=alice.headers)
        assert [job["id"] for job in offered.json()] == [job_a, job_b]

    async def test_my_jobs_resolve_applicants(self, client, make_user, post_job):
        poster = await make_user("Poster")
        alice = await make_user("Alice")
        job_id = await post_job(poster)
        await client.post(f"/api/jobs/{job_id}/apply", headers=alice.headers)

        response = await client.get("/api/jobs/me", headers=poster.headers)
        assert response.status_code == 200
        jobs = response.json()
        assert [job["id"] for job in jobs] == [job_id]
        assert jobs[0]["applications"][0]["applicant"]["name"] == "Alice"
