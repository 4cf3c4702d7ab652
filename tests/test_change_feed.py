import asyncio
import threading
import uuid

import pytest
from fastapi.websockets import WebSocketDisconnect

from saver_backend.api.change_feed import ChangeFeed, SUPPORT_TOPIC, change_feed, support_chat_topic
from saver_backend.database.entities.user_status import ROLE_ADMIN
from conftest import login


def test_publish_reaches_every_subscriber_of_the_topic():
    async def scenario():
        feed = ChangeFeed()
        first = feed.subscribe(SUPPORT_TOPIC)
        second = feed.subscribe(SUPPORT_TOPIC)
        other = feed.subscribe(support_chat_topic("abc"))
        chat_id = uuid.uuid4()

        delivered = feed.publish(SUPPORT_TOPIC, {"type": "chat_opened", "chat_id": chat_id})

        assert delivered == 2
        assert await first.get() == {"type": "chat_opened", "chat_id": str(chat_id)}
        assert await second.get() == {"type": "chat_opened", "chat_id": str(chat_id)}
        assert other.empty()

    asyncio.run(scenario())


def test_unsubscribed_queues_stop_receiving():
    async def scenario():
        feed = ChangeFeed()
        queue = feed.subscribe("support:1")

        feed.unsubscribe("support:1", queue)

        assert feed.subscriber_count("support:1") == 0
        assert feed.publish("support:1", {"type": "message"}) == 0
        await asyncio.sleep(0)
        assert queue.empty()
        feed.unsubscribe("support:1", queue)

    asyncio.run(scenario())


def test_publish_from_a_worker_thread_wakes_the_subscriber():
    async def scenario():
        feed = ChangeFeed()
        queue = feed.subscribe(SUPPORT_TOPIC)

        worker = threading.Thread(target=feed.publish, args=(SUPPORT_TOPIC, {"type": "message"}))
        worker.start()
        event = await asyncio.wait_for(queue.get(), timeout=5)
        worker.join()

        assert event == {"type": "message"}

    asyncio.run(scenario())


def test_chat_socket_streams_messages_and_releases_its_subscription(client, make_account):
    make_account()
    login(client, "clinician@saver.test")
    chat_id = client.post("/support/chats").json()["id"]
    topic = support_chat_topic(chat_id)

    with client.websocket_connect(f"/ws/support/{chat_id}") as ws:
        assert ws.receive_json() == {"type": "subscribed", "topic": topic}
        assert change_feed.subscriber_count(topic) == 1

        client.post(f"/support/chats/{chat_id}/messages", json={"content": "Still cannot upload."})
        event = ws.receive_json()
        assert event["type"] == "message"
        assert event["message"]["content"] == "Still cannot upload."

    assert change_feed.subscriber_count(topic) == 0


def test_idle_socket_releases_its_subscription_on_disconnect(client, make_account):
    make_account()
    login(client, "clinician@saver.test")
    chat_id = client.post("/support/chats").json()["id"]
    topic = support_chat_topic(chat_id)

    with client.websocket_connect(f"/ws/support/{chat_id}") as ws:
        ws.receive_json()

    assert change_feed.subscriber_count(topic) == 0


def test_inbox_socket_refuses_non_admins(client, make_account):
    with pytest.raises(WebSocketDisconnect) as anonymous:
        with client.websocket_connect("/ws/support") as ws:
            ws.receive_json()
    assert anonymous.value.code == 1008

    make_account()
    login(client, "clinician@saver.test")
    with pytest.raises(WebSocketDisconnect) as member:
        with client.websocket_connect("/ws/support") as ws:
            ws.receive_json()
    assert member.value.code == 1008


def test_chat_socket_refuses_strangers(client, other_client, make_account):
    make_account()
    make_account(email="nosy@saver.test")
    login(client, "clinician@saver.test")
    login(other_client, "nosy@saver.test")
    chat_id = client.post("/support/chats").json()["id"]

    with pytest.raises(WebSocketDisconnect) as exc_info:
        with other_client.websocket_connect(f"/ws/support/{chat_id}") as ws:
            ws.receive_json()
    assert exc_info.value.code == 1008


def test_inbox_socket_sees_new_support_chats(client, other_client, make_account):
    make_account(email="admin@saver.test", role=ROLE_ADMIN)
    make_account()
    login(client, "admin@saver.test")
    login(other_client, "clinician@saver.test")

    with client.websocket_connect("/ws/support") as ws:
        assert ws.receive_json() == {"type": "subscribed", "topic": SUPPORT_TOPIC}
        chat_id = other_client.post("/support/chats").json()["id"]
        event = ws.receive_json()

    assert event["type"] == "chat_opened"
    assert event["chat"]["id"] == chat_id
    assert change_feed.subscriber_count(SUPPORT_TOPIC) == 0
