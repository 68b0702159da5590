#tests/realtime/test_rooms.py
import asyncio
import threading

import pytest

from taskmaster.realtime.rooms import (
    ConnectionClosed,
    RoomManager,
    SocketConnection,
    task_room,
    team_room,
    user_room,
)


class FakeWebSocket:
    def __init__(self, fail: bool = False):
        self.sent = []
        self.fail = fail

    async def send_json(self, message):
        if self.fail:
            raise RuntimeError("peer went away")
        self.sent.append(message)


def test_room_names():
    assert user_room(7) == "user:7"
    assert task_room(3) == "task:3"
    assert team_room(12) == "team:12"

def test_connect_joins_personal_room(make_connection):
    rooms = RoomManager()
    conn = make_connection(1)
    rooms.connect(conn, 1)
    assert rooms.rooms_of(conn) == {"user:1"}
    assert rooms.subscribers("user:1") == 1

def test_join_leave_and_empty_rooms_are_dropped(make_connection):
    rooms = RoomManager()
    conn = make_connection(1)
    rooms.connect(conn, 1)
    rooms.join(conn, "task:5")
    rooms.join(conn, "task:5")
    assert rooms.subscribers("task:5") == 1

    rooms.leave(conn, "task:5")
    assert "task:5" not in rooms.room_names()
    assert rooms.rooms_of(conn) == {"user:1"}

    # выход из комнаты, где соединения нет, ничего не ломает
    rooms.leave(conn, "team:9")

def test_disconnect_removes_connection_everywhere(make_connection):
    rooms = RoomManager()
    first, second = make_connection(1), make_connection(2)
    rooms.connect(first, 1)
    rooms.connect(second, 2)
    for conn in (first, second):
        rooms.join(conn, "team:1")
    rooms.join(first, "task:1")

    rooms.disconnect(first)

    assert rooms.rooms_of(first) == set()
    assert rooms.room_names() == {"user:2", "team:1"}
    assert rooms.subscribers("team:1") == 1

def test_publish_reaches_every_subscriber(make_connection):
    rooms = RoomManager()
    a, b, outsider = make_connection(1), make_connection(2), make_connection(3)
    for conn in (a, b, outsider):
        rooms.connect(conn, conn.user_id)
    rooms.join(a, "task:1")
    rooms.join(b, "task:1")

    delivered = rooms.publish("task:1", "task:updated", {"task": {"id": 1}})

    assert delivered == 2
    expected = {"event": "task:updated", "room": "task:1", "data": {"task": {"id": 1}}}
    assert a.messages == [expected]
    assert b.messages == [expected]
    assert outsider.messages == []

def test_publish_to_empty_room_is_dropped():
    rooms = RoomManager()
    assert rooms.publish("task:404", "task:updated", {}) == 0

def test_failing_connection_does_not_affect_others(make_connection):
    rooms = RoomManager()
    broken, healthy = make_connection(1, failing=True), make_connection(2)
    rooms.join(broken, "team:1")
    rooms.join(healthy, "team:1")

    delivered = rooms.publish("team:1", "team:member-removed", {"user_id": 5})

    assert delivered == 1
    assert healthy.events("team:member-removed")

def test_events_keep_publish_order(make_connection):
    rooms = RoomManager()
    conn = make_connection(1)
    rooms.connect(conn, 1)
    for n in range(20):
        rooms.publish("user:1", "notification:new", {"n": n})
    assert [m["data"]["n"] for m in conn.messages] == list(range(20))

def test_concurrent_publish_and_join(make_connection):
    rooms = RoomManager()
    conns = [make_connection(i) for i in range(50)]

    def joiner():
        for conn in conns:
            rooms.join(conn, "team:1")

    def publisher():
        for n in range(200):
            rooms.publish("team:1", "task:updated", {"n": n})

    threads = [threading.Thread(target=joiner), threading.Thread(target=publisher)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert rooms.subscribers("team:1") == 50

# ==== SocketConnection ====

def test_socket_connection_sends_in_fifo_order():
    async def scenario():
        websocket = FakeWebSocket()
        conn = SocketConnection(websocket, user_id=1)
        pump = asyncio.create_task(conn.pump())
        for n in range(5):
            conn.send({"n": n})
        conn.close()
        await pump
        return websocket.sent

    sent = asyncio.run(scenario())
    assert [m["n"] for m in sent] == [0, 1, 2, 3, 4]

def test_socket_connection_accepts_sends_from_other_threads():
    async def scenario():
        websocket = FakeWebSocket()
        conn = SocketConnection(websocket, user_id=1)
        pump = asyncio.create_task(conn.pump())
        await asyncio.to_thread(lambda: [conn.send({"n": n}) for n in range(3)])
        conn.close()
        await pump
        return websocket.sent

    assert [m["n"] for m in asyncio.run(scenario())] == [0, 1, 2]

def test_closed_socket_connection_rejects_send():
    async def scenario():
        conn = SocketConnection(FakeWebSocket(), user_id=1)
        conn.close()
        assert conn.closed
        with pytest.raises(ConnectionClosed):
            conn.send({"event": "late"})
        await conn.pump()

    asyncio.run(scenario())

def test_pump_stops_when_socket_fails():
    async def scenario():
        conn = SocketConnection(FakeWebSocket(fail=True), user_id=1)
        pump = asyncio.create_task(conn.pump())
        conn.send({"event": "boom"})
        await pump
        return conn

    assert asyncio.run(scenario()).closed
