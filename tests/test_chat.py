"""
Tests for direct messaging and the live thread subscription
"""
import asyncio
from datetime import datetime

import pytest
from starlette.websockets import WebSocketDisconnect

from campconnect.core.errors import BackendUnavailableError, ValidationError
from campconnect.schemas.schemas import ChatMessage
from campconnect.services.chat_service import ChatService, MessageHub, thread_id


def _message(second: int, sender: str = "a") -> ChatMessage:
    return ChatMessage(
        id=f"m{second}",
        sender_id=sender,
        sender_name=sender.upper(),
        message=f"message at {second}",
        timestamp=datetime(2024, 1, 1, 12, 0, second),
    )


class TestThreadId:

    @pytest.mark.parametrize("a, b", [
        ("alice", "bob"),
        ("64b7f0c2a1b2c3d4e5f60718", "64b7f0c2a1b2c3d4e5f60719"),
        ("Z", "a"),
        ("same", "same"),
    ])
    def test_order_independent(self, a, b):
        assert thread_id(a, b) == thread_id(b, a)

    def test_format(self):
        assert thread_id("bob", "alice") == "alice_bob"


class TestChatService:

    def test_send_and_history(self, make_user, mongo_db):
        asha = make_user(name="Asha")
        ravi = make_user(name="Ravi")
        service = ChatService()

        service.send({"id": asha["id"], "name": "Asha"}, ravi["id"], "hi Ravi")
        service.send({"id": ravi["id"], "name": "Ravi"}, asha["id"], "hi Asha")

        history = service.history(ravi["id"], asha["id"])
        assert [m.message for m in history] == ["hi Ravi", "hi Asha"]
        assert [m.sender_name for m in history] == ["Asha", "Ravi"]
        assert mongo_db.messages.count_documents({"thread_id": thread_id(asha["id"], ravi["id"])}) == 2

    def test_blank_message_not_stored(self, mongo_db):
        with pytest.raises(ValidationError):
            ChatService().send({"id": "a", "name": "A"}, "b", "  ")
        assert mongo_db.messages.count_documents({}) == 0

    def test_history_sorted_by_timestamp(self, mongo_db):
        for second in (3, 1, 2):
            mongo_db.messages.insert_one({
                "thread_id": "a_b",
                "sender_id": "a",
                "sender_name": "A",
                "message": str(second),
                "timestamp": datetime(2024, 1, 1, 0, 0, second),
            })
        assert [m.message for m in ChatService().history("b", "a")] == ["1", "2", "3"]


class TestSubscription:

    @pytest.mark.asyncio
    async def test_initial_snapshot_is_history(self):
        hub = MessageHub()
        subscription = hub.subscribe("a_b", lambda: [_message(2), _message(1)])

        snapshot = await subscription.__anext__()

        assert [m.id for m in snapshot.messages] == ["m1", "m2"]
        assert snapshot.latest_message_id == "m2"
        subscription.cancel()

    @pytest.mark.asyncio
    async def test_out_of_order_pushes_render_in_timestamp_order(self):
        hub = MessageHub()
        subscription = hub.subscribe("a_b", lambda: [])
        assert (await subscription.__anext__()).messages == []

        for second in (1, 3, 2):
            hub.publish("a_b", _message(second))

        snapshots = [await subscription.__anext__() for _ in range(3)]

        assert [m.id for m in snapshots[1].messages] == ["m1", "m3"]
        assert [m.id for m in snapshots[-1].messages] == ["m1", "m2", "m3"]
        assert snapshots[-1].latest_message_id == "m3"
        subscription.cancel()

    @pytest.mark.asyncio
    async def test_message_in_history_and_push_kept_once(self):
        hub = MessageHub()
        subscription = hub.subscribe("a_b", lambda: [_message(1)])
        await subscription.__anext__()

        hub.publish("a_b", _message(1))
        hub.publish("a_b", _message(2))

        snapshot = await subscription.__anext__()
        assert [m.id for m in snapshot.messages] == ["m1", "m2"]
        subscription.cancel()

    @pytest.mark.asyncio
    async def test_other_threads_not_delivered(self):
        hub = MessageHub()
        subscription = hub.subscribe("a_b", lambda: [])
        await subscription.__anext__()

        hub.publish("a_c", _message(1))
        hub.publish("a_b", _message(2))

        snapshot = await subscription.__anext__()
        assert [m.id for m in snapshot.messages] == ["m2"]
        subscription.cancel()

    @pytest.mark.asyncio
    async def test_cancel_unregisters_and_ends_iteration(self):
        hub = MessageHub()
        subscription = hub.subscribe("a_b", lambda: [])
        await subscription.__anext__()

        consumer = asyncio.create_task(subscription.__anext__())
        await asyncio.sleep(0)
        subscription.cancel()

        with pytest.raises(StopAsyncIteration):
            await consumer
        assert hub.subscriber_count("a_b") == 0

        hub.publish("a_b", _message(1))
        assert [s async for s in subscription] == []

    @pytest.mark.asyncio
    async def test_failed_history_load_leaves_nothing_subscribed(self):
        hub = MessageHub()

        def broken_loader():
            raise BackendUnavailableError(title="Failed to fetch messages")

        with pytest.raises(BackendUnavailableError):
            hub.subscribe("a_b", broken_loader)
        assert hub.subscriber_count("a_b") == 0

    @pytest.mark.asyncio
    async def test_send_publishes_to_subscribers(self, message_hub):
        service = ChatService()
        subscription = service.subscribe("b", "a")
        await subscription.__anext__()

        sent = service.send({"id": "a", "name": "A"}, "b", "hello")

        snapshot = await subscription.__anext__()
        assert snapshot.thread_id == "a_b"
        assert snapshot.latest_message_id == sent.id
        subscription.cancel()
        assert message_hub.subscriber_count("a_b") == 0


class TestChatApi:

    def test_post_and_get_messages(self, client, make_user):
        asha = make_user(name="Asha")
        ravi = make_user(name="Ravi")

        sent = client.post(f"/api/chats/{ravi['id']}/messages", json={"message": "hi"}, headers=asha["headers"])
        assert sent.status_code == 201
        assert sent.json()["sender_name"] == "Asha"

        body = client.get(f"/api/chats/{asha['id']}/messages", headers=ravi["headers"]).json()
        assert body["thread_id"] == thread_id(asha["id"], ravi["id"])
        assert [m["message"] for m in body["messages"]] == ["hi"]
        assert body["latest_message_id"] == sent.json()["id"]

    def test_sending_needs_a_profile(self, client, make_user):
        stranger = make_user(with_profile=False)
        response = client.post("/api/chats/someone/messages", json={"message": "hi"}, headers=stranger["headers"])
        assert response.status_code == 404

    def test_live_thread_over_websocket(self, client, make_user, message_hub):
        asha = make_user(name="Asha")
        ravi = make_user(name="Ravi")

        with client.websocket_connect(f"/api/chats/{ravi['id']}/ws?token={asha['token']}") as ws:
            first = ws.receive_json()
            assert first["thread_id"] == thread_id(asha["id"], ravi["id"])
            assert first["messages"] == []

            sent = client.post(f"/api/chats/{asha['id']}/messages", json={"message": "hello"},
                               headers=ravi["headers"])
            snapshot = ws.receive_json()
            assert [m["message"] for m in snapshot["messages"]] == ["hello"]
            assert snapshot["latest_message_id"] == sent.json()["id"]

            ws.send_json({"message": "hey!"})
            snapshot = ws.receive_json()
            assert [m["sender_name"] for m in snapshot["messages"]] == ["Ravi", "Asha"]

            ws.send_json({"message": "   "})
            error = ws.receive_json()
            assert error["error"]["code"] == "VALIDATION_ERROR"

        assert message_hub.subscriber_count(thread_id(asha["id"], ravi["id"])) == 0

    def test_malformed_frames_keep_the_thread_live(self, client, make_user, message_hub):
        asha = make_user(name="Asha")
        ravi = make_user(name="Ravi")
        thread = thread_id(asha["id"], ravi["id"])

        with client.websocket_connect(f"/api/chats/{ravi['id']}/ws?token={asha['token']}") as ws:
            ws.receive_json()

            ws.send_json(["not", "an", "object"])
            assert ws.receive_json()["error"]["field"] == "message"

            ws.send_text("not json at all")
            assert ws.receive_json()["error"]["code"] == "VALIDATION_ERROR"
            assert message_hub.subscriber_count(thread) == 1

            ws.send_json({"message": "still here"})
            snapshot = ws.receive_json()
            assert [m["message"] for m in snapshot["messages"]] == ["still here"]

        assert message_hub.subscriber_count(thread) == 0

    def test_websocket_rejects_bad_token(self, client):
        with pytest.raises(WebSocketDisconnect):
            with client.websocket_connect("/api/chats/someone/ws?token=bad") as ws:
                ws.receive_json()
