"""
Tests for alumni events
"""
from datetime import datetime, timedelta

from bson import ObjectId


def event_payload(title, days_ahead):
    return {
        "title": title,
        "description": "Annual meetup",
        "date": (datetime.utcnow() + timedelta(days=days_ahead)).isoformat(),
        "location": "Main Hall",
    }


class TestEvents:

    async def test_create_event(self, client, make_user):
        alice = await make_user("Alice")
        response = await client.post("/api/events", json=event_payload("Reunion", 10), headers=alice.headers)

        assert response.status_code == 201
        body = response.json()
        assert body["created_by"]["name"] == "Alice"
        assert body["attendees"] == []

    async def test_list_is_soonest_first(self, client, make_user):
        alice = await make_user("Alice")
        await client.post("/api/events", json=event_payload("Later", 30), headers=alice.headers)
        await client.post("/api/events", json=event_payload("Sooner", 3), headers=alice.headers)

        response = await client.get("/api/events", headers=alice.headers)
        assert [event["title"] for event in response.json()] == ["Sooner", "Later"]

    async def test_title_required(self, client, make_user):
        alice = await make_user("Alice")
        response = await client.post("/api/events", json=event_payload("", 3), headers=alice.headers)
        assert response.status_code == 422

    async def test_register_once(self, client, make_user):
        alice = await make_user("Alice")
        bob = await make_user("Bob")
        event = (await client.post("/api/events", json=event_payload("Reunion", 10), headers=alice.headers)).json()

        response = await client.post(f"/api/events/{event['id']}/register", headers=bob.headers)
        assert response.status_code == 200
        assert response.json()["attendees"] == [bob.id]

        again = await client.post(f"/api/events/{event['id']}/register", headers=bob.headers)
        assert again.status_code == 400
        assert again.json()["detail"] == "Already registered"

    async def test_register_unknown_event(self, client, make_user):
        alice = await make_user("Alice")
        response = await client.post(f"/api/events/{ObjectId()}/register", headers=alice.headers)
        assert response.status_code == 404
