"""
Tests for direct messages and conversation grouping
"""
from bson import ObjectId


async def send(client, sender, receiver, content):
    response = await client.post(
        "/api/messages", json={"receiver_id": receiver.id, "content": content}, headers=sender.headers
    )
    assert response.status_code == 201, response.text
    return response.json()


class TestSendMessage:

    async def test_send_starts_unread(self, client, make_user):
        alice = await make_user("Alice")
        bob = await make_user("Bob")

        message = await send(client, alice, bob, "Hi Bob")
        assert message["sender"] == alice.id
        assert message["receiver"] == bob.id
        assert message["read"] is False

    async def test_blank_content(self, client, make_user):
        alice = await make_user("Alice")
        bob = await make_user("Bob")
        response = await client.post(
            "/api/messages", json={"receiver_id": bob.id, "content": "  "}, headers=alice.headers
        )
        assert response.status_code == 400

    async def test_unknown_receiver(self, client, make_user):
        alice = await make_user("Alice")
        response = await client.post(
            "/api/messages", json={"receiver_id": str(ObjectId()), "content": "hello?"}, headers=alice.headers
        )
        assert response.status_code == 404
        assert response.json()["detail"] == "Receiver not found"


class TestConversations:

    async def test_grouped_by_counterpart(self, client, make_user):
        alice = await make_user("Alice")
        bob = await make_user("Bob")
        carol = await make_user("Carol")

        await send(client, alice, bob, "one")
        await send(client, bob, alice, "two")
        await send(client, carol, alice, "three")
        await send(client, bob, carol, "not for alice")

        response = await client.get("/api/messages/conversations", headers=alice.headers)
        assert response.status_code == 200
        conversations = {c["user"]["id"]: c for c in response.json()}

        assert set(conversations) == {bob.id, carol.id}
        assert conversations[bob.id]["user"]["name"] == "Bob"
        assert sorted(m["content"] for m in conversations[bob.id]["messages"]) == ["one", "two"]
        assert [m["content"] for m in conversations[carol.id]["messages"]] == ["three"]

    async def test_no_messages(self, client, make_user):
        alice = await make_user("Alice")
        response = await client.get("/api/messages/conversations", headers=alice.headers)
        assert response.json() == []


class TestMarkRead:

    async def test_receiver_marks_read(self, client, make_user):
        alice = await make_user("Alice")
        bob = await make_user("Bob")
        message = await send(client, alice, bob, "ping")

        response = await client.put(f"/api/messages/{message['id']}/read", headers=bob.headers)
        assert response.status_code == 200
        assert response.json()["read"] is True

    async def test_sender_cannot_mark_read(self, client, make_user, db):
        alice = await make_user("Alice")
        bob = await make_user("Bob")
        message = await send(client, alice, bob, "ping")

        response = await client.put(f"/api/messages/{message['id']}/read", headers=alice.headers)
        assert response.status_code == 404

        stored = await db.messages.find_one({"_id": ObjectId(message["id"])})
        assert stored["read"] is False

    async def test_malformed_id(self, client, make_user):
        alice = await make_user("Alice")
        response = await client.put("/api/messages/xyz/read", headers=alice.headers)
        assert response.status_code == 400
