import asyncio
from unittest.mock import AsyncMock, patch

from app.socketio import socket_server
from app.socketio.socket_server import broadcast_car_event, broadcast_update, connections, for_dealer


def connect(*sids):
    for sid in sids:
        asyncio.run(socket_server.connect(sid, {}))


def test_connect_register_and_disconnect():
    connect("a")
    asyncio.run(socket_server.register("a", {"dealerId": "d1", "userId": "u1"}))

    connection = connections.get("a")
    assert connection.dealer_id == "d1"
    assert connection.user_id == "u1"

    asyncio.run(socket_server.disconnect("a"))
    assert connections.get("a") is None
    assert len(connections) == 0


def test_register_through_message_envelope():
    connect("a", "b")
    asyncio.run(socket_server.message("a", '{"type": "register", "dealerId": "d7"}'))
    asyncio.run(socket_server.message("b", {"type": "chat", "dealerId": "d9"}))
    asyncio.run(socket_server.message("b", "not json"))

    assert connections.get("a").dealer_id == "d7"
    assert connections.get("b").dealer_id is None


def test_car_events_reach_owner_and_untagged_sockets():
    connect("owner", "other", "anonymous")
    connections.tag("owner", dealer_id="d1")
    connections.tag("other", dealer_id="d2")

    with patch.object(socket_server.sio, "emit", new_callable=AsyncMock) as emit:
        delivered = asyncio.run(broadcast_car_event("CAR_ADDED", {"_id": "c1"}, "d1"))

    assert delivered == 2
    assert {c.kwargs["to"] for c in emit.await_args_list} == {"owner", "anonymous"}
    event, payload = emit.await_args_list[0].args
    assert event == "update"
    assert payload == {"type": "CAR_ADDED", "data": {"_id": "c1"}, "dealerId": "d1"}


def test_unfiltered_broadcast_reaches_everyone():
    connect("a", "b")
    connections.tag("a", dealer_id="d1")

    with patch.object(socket_server.sio, "emit", new_callable=AsyncMock) as emit:
        assert asyncio.run(broadcast_update({"type": "CAR_ADDED"})) == 2
    assert emit.await_count == 2


def test_failed_emit_forgets_the_connection():
    connect("good", "broken")

    async def flaky_emit(event, data, to=None):
        if to == "broken":
            raise ConnectionError("socket closed")

    with patch.object(socket_server.sio, "emit", side_effect=flaky_emit):
        assert asyncio.run(broadcast_update({"type": "CAR_UPDATED"})) == 1

    assert connections.get("broken") is None
    assert connections.get("good") is not None


def test_for_dealer_filter():
    connections.add("x")
    untagged = connections.get("x")
    tagged = connections.tag("y", dealer_id="d1")

    assert for_dealer("d1")(tagged)
    assert not for_dealer("d2")(tagged)
    assert for_dealer("d2")(untagged)
