import json
import logging
from typing import Callable, Dict, Optional

import socketio

from config import CORS_ORIGINS

logger = logging.getLogger(__name__)

UPDATE_EVENT = "update"

# Create a Socket.IO server with ASGI compatibility
sio = socketio.AsyncServer(
    async_mode="asgi",
    cors_allowed_origins="*" if CORS_ORIGINS == ["*"] else CORS_ORIGINS,
)
sio_app = socketio.ASGIApp(sio, socketio_path="ws")


class Connection:
    """A connected socket and the tags it registered with."""

    def __init__(self, sid: str):
        self.sid = sid
        self.dealer_id: Optional[str] = None
        self.user_id: Optional[str] = None


class ConnectionRegistry:
    def __init__(self):
        self._connections: Dict[str, Connection] = {}

    def add(self, sid: str) -> Connection:
        connection = Connection(sid)
        self._connections[sid] = connection
        return connection

    def get(self, sid: str) -> Optional[Connection]:
        return self._connections.get(sid)

    def tag(self, sid: str, dealer_id: Optional[str] = None, user_id: Optional[str] = None) -> Connection:
        connection = self._connections.get(sid) or self.add(sid)
        if dealer_id:
            connection.dealer_id = dealer_id
        if user_id:
            connection.user_id = user_id
        return connection

    def remove(self, sid: str):
        self._connections.pop(sid, None)

    def all(self):
        return list(self._connections.values())

    def clear(self):
        self._connections.clear()

    def __len__(self):
        return len(self._connections)


connections = ConnectionRegistry()


def register_tags(sid: str, data) -> Optional[Connection]:
    if not isinstance(data, dict):
        return None
    connection = connections.tag(sid, data.get("dealerId"), data.get("userId"))
    if connection.dealer_id:
        logger.info(f"🏪 Dealer {connection.dealer_id} connected via socket {sid}")
    if connection.user_id:
        logger.info(f"👤 User {connection.user_id} connected via socket {sid}")
    return connection


# When a socket client connects
@sio.event
async def connect(sid, environ):
    connections.add(sid)
    logger.info(f"🔗 {sid} connected")


# When a socket client disconnects
@sio.event
async def disconnect(sid):
    connections.remove(sid)
    logger.info(f"❎ {sid} disconnected")


@sio.on("register")
async def register(sid, data):
    register_tags(sid, data)


@sio.on("message")
async def message(sid, data):
    if isinstance(data, str):
        try:
            data = json.loads(data)
        except ValueError:
            logger.error(f"Error parsing socket message from {sid}")
            return
    if isinstance(data, dict) and data.get("type") == "register":
        register_tags(sid, data)


def for_dealer(dealer_id: Optional[str]) -> Callable[[Connection], bool]:
    """Car events reach the owning dealer's sockets and untagged sockets."""
    return lambda connection: not connection.dealer_id or connection.dealer_id == dealer_id


async def broadcast_update(message: dict, filter_fn: Optional[Callable[[Connection], bool]] = None) -> int:
    """Emit `message` to every connection passing `filter_fn`. Returns the number reached."""
    delivered = 0
    for connection in connections.all():
        if filter_fn is not None and not filter_fn(connection):
            continue
        try:
            await sio.emit(UPDATE_EVENT, message, to=connection.sid)
            delivered += 1
        except Exception as e:
            logger.error(f"❌ Dropping socket {connection.sid} after failed emit: {e}")
            connections.remove(connection.sid)
    return delivered


async def broadcast_car_event(event_type: str, car: dict, dealer_id: Optional[str]) -> int:
    return await broadcast_update(
        {"type": event_type, "data": car, "dealerId": dealer_id},
        for_dealer(dealer_id),
    )
