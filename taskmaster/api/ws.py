#taskmaster/api/ws.py
"""
WebSocket: подписка на комнаты user/task/team.

Подключение: /ws?token=<JWT>. После connect соединение уже в комнате user:<id>.
Сообщения клиента: {"event": "task:join" | "task:leave" | "team:join" | "team:leave", "id": N}.

Соединение не держит сессию БД: каждая проверка доступа открывает свою
короткую сессию, иначе простаивающий сокет занимал бы соединение из пула.
"""
import asyncio
import json
import logging
from typing import Any, Callable, Dict, Optional

from fastapi import APIRouter, Depends, Query, WebSocket, WebSocketDisconnect, status
from fastapi.concurrency import run_in_threadpool
from sqlalchemy.orm import Session

from taskmaster.core.exceptions import BaseAppException
from taskmaster.core.security import user_id_from_token
from taskmaster.crud.membership import role_of
from taskmaster.crud.task import get_visible_task
from taskmaster.crud.user import get_user
from taskmaster.dependencies import get_session_factory
from taskmaster.models.user import User as UserModel
from taskmaster.realtime.rooms import RoomManager, SocketConnection, task_room, team_room, user_room

logger = logging.getLogger("TaskMaster.WebSocket")

router = APIRouter(tags=["Realtime"])

ROOM_EVENTS = ("task:join", "task:leave", "team:join", "team:leave")

SessionFactory = Callable[[], Session]

def _error(message: str) -> Dict[str, Any]:
    return {"event": "error", "room": None, "data": {"message": message}}

def _load_user(session_factory: SessionFactory, user_id: int) -> Optional[UserModel]:
    with session_factory() as db:
        return get_user(db, user_id)

def _check_access(session_factory: SessionFactory, user: UserModel, kind: str, target_id: int) -> Optional[str]:
    """Возвращает текст ошибки или None, если подписка разрешена."""
    with session_factory() as db:
        if kind == "team":
            return None if role_of(db, target_id, user.id) is not None else "Not a member of this team"
        try:
            get_visible_task(db, target_id, user)
        except BaseAppException as e:
            return e.message
        return None

async def _handle_message(
    raw: str,
    conn: SocketConnection,
    rooms: RoomManager,
    session_factory: SessionFactory,
    user: UserModel,
) -> None:
    try:
        message = json.loads(raw)
    except json.JSONDecodeError:
        conn.send(_error("Malformed message"))
        return
    if not isinstance(message, dict):
        conn.send(_error("Malformed message"))
        return

    event, target_id = message.get("event"), message.get("id")
    if event not in ROOM_EVENTS:
        conn.send(_error(f"Unknown event: {event}"))
        return
    if isinstance(target_id, bool) or not isinstance(target_id, int):
        conn.send(_error("Field 'id' must be an integer"))
        return

    kind, action = event.split(":")
    room = task_room(target_id) if kind == "task" else team_room(target_id)
    if action == "leave":
        rooms.leave(conn, room)
        conn.send({"event": "room:left", "room": room, "data": {"room": room}})
        return

    denied = await run_in_threadpool(_check_access, session_factory, user, kind, target_id)
    if denied:
        logger.warning(f"User {user.id} was refused {room}: {denied}")
        conn.send(_error(denied))
        return
    rooms.join(conn, room)
    conn.send({"event": "room:joined", "room": room, "data": {"room": room}})

@router.websocket("/ws")
async def websocket_endpoint(
    websocket: WebSocket,
    token: Optional[str] = Query(None),
    session_factory: SessionFactory = Depends(get_session_factory),
):
    user_id = user_id_from_token(token)
    user = await run_in_threadpool(_load_user, session_factory, user_id) if user_id is not None else None
    if user is None or not user.is_active:
        logger.warning("Rejected websocket connection with invalid token")
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    rooms: RoomManager = websocket.app.state.rooms
    await websocket.accept()
    conn = SocketConnection(websocket, user.id)
    rooms.connect(conn, user.id)
    pump = asyncio.create_task(conn.pump())
    conn.send({"event": "connected", "room": user_room(user.id), "data": {"user_id": user.id}})
    try:
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                raise WebSocketDisconnect(message.get("code", status.WS_1000_NORMAL_CLOSURE))
            raw = message.get("text")
            if raw is None:
                # бинарные кадры протоколом не предусмотрены
                conn.send(_error("Malformed message"))
                continue
            await _handle_message(raw, conn, rooms, session_factory, user)
    except WebSocketDisconnect:
        pass
    finally:
        rooms.disconnect(conn)
        conn.close()
        await pump
