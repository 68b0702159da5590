# taskmaster/realtime/rooms.py
"""
Реестр комнат для live-соединений.

Комната: именованная группа подписчиков: ``user:<id>``, ``task:<id>``, ``team:<id>``.
Публикация best-effort: если подписчиков нет, событие теряется, ошибка доставки
одному соединению логируется и не влияет на остальных и на сам запрос.

Обработчики HTTP работают в threadpool, поэтому реестр защищён ``threading.Lock``,
а ``SocketConnection.send`` только ставит сообщение в очередь своего event loop.
"""
import asyncio
import logging
import threading
from typing import Any, Dict, Optional, Protocol, Set

from fastapi import WebSocket

logger = logging.getLogger("TaskMaster.Realtime")


def user_room(user_id: int) -> str:
    return f"user:{user_id}"

def task_room(task_id: int) -> str:
    return f"task:{task_id}"

def team_room(team_id: int) -> str:
    return f"team:{team_id}"


class Connection(Protocol):
    """Всё, что умеет принять сообщение без блокировки."""
    user_id: int

    def send(self, message: Dict[str, Any]) -> None: ...


class ConnectionClosed(Exception):
    pass


class SocketConnection:
    """
    Обёртка над WebSocket: send() потокобезопасен и не блокирует,
    pump() в цикле соединения отправляет сообщения в порядке постановки.
    """

    def __init__(self, websocket: WebSocket, user_id: int, loop: Optional[asyncio.AbstractEventLoop] = None):
        self.websocket = websocket
        self.user_id = user_id
        self._loop = loop or asyncio.get_running_loop()
        self._queue: "asyncio.Queue[Optional[Dict[str, Any]]]" = asyncio.Queue()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def send(self, message: Dict[str, Any]) -> None:
        if self._closed:
            raise ConnectionClosed(f"connection of user {self.user_id} is closed")
        self._loop.call_soon_threadsafe(self._queue.put_nowait, message)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        # None: сигнал остановки для pump()
        self._loop.call_soon_threadsafe(self._queue.put_nowait, None)

    async def pump(self) -> None:
        while True:
            message = await self._queue.get()
            if message is None:
                break
            try:
                await self.websocket.send_json(message)
            except Exception as e:
                logger.warning(f"Dropping socket of user {self.user_id}: {e}")
                self._closed = True
                break


class RoomManager:
    """
    room -> set[connection]. Пустые комнаты удаляются сразу.
    Создаётся один раз при старте приложения (app.state.rooms).
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._rooms: Dict[str, Set[Connection]] = {}
        self._joined: Dict[Connection, Set[str]] = {}

    def connect(self, conn: Connection, user_id: int) -> None:
        self.join(conn, user_room(user_id))
        logger.info(f"User {user_id} connected")

    def join(self, conn: Connection, room: str) -> None:
        with self._lock:
            self._rooms.setdefault(room, set()).add(conn)
            self._joined.setdefault(conn, set()).add(room)

    def leave(self, conn: Connection, room: str) -> None:
        with self._lock:
            self._discard(conn, room)
            rooms = self._joined.get(conn)
            if rooms is not None:
                rooms.discard(room)

    def disconnect(self, conn: Connection) -> None:
        with self._lock:
            for room in self._joined.pop(conn, set()):
                self._discard(conn, room)
        logger.info(f"User {getattr(conn, 'user_id', '?')} disconnected")

    def _discard(self, conn: Connection, room: str) -> None:
        members = self._rooms.get(room)
        if members is None:
            return
        members.discard(conn)
        if not members:
            del self._rooms[room]

    def rooms_of(self, conn: Connection) -> Set[str]:
        with self._lock:
            return set(self._joined.get(conn, set()))

    def subscribers(self, room: str) -> int:
        with self._lock:
            return len(self._rooms.get(room, ()))

    def room_names(self) -> Set[str]:
        with self._lock:
            return set(self._rooms)

    def publish(self, room: str, event: str, data: Any) -> int:
        """
        Отправить событие всем подписчикам комнаты. Никогда не бросает.
        Возвращает число соединений, принявших сообщение.
        """
        with self._lock:
            targets = list(self._rooms.get(room, ()))
        if not targets:
            logger.debug(f"No subscribers for {event} in {room}, dropped")
            return 0
        message = {"event": event, "room": room, "data": data}
        delivered = 0
        for conn in targets:
            try:
                conn.send(message)
                delivered += 1
            except Exception as e:
                logger.warning(f"Failed to deliver {event} to a connection in {room}: {e}")
        return delivered
