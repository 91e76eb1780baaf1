import asyncio
import json

from starlette.websockets import WebSocketDisconnect

from edubridge.routers.messages import socket_sender
from edubridge.utils.realtime_bus import LocalBus, stop_subscription, user_channel
from edubridge.utils.websocket_manager import manager


class ClosedSocket:

    def __init__(self, error):
        self.error = error

    async def send_text(self, message):
        raise self.error


class RecordingSocket:

    def __init__(self):
        self.sent = []

    async def send_text(self, message):
        self.sent.append(message)


class FakeSubscriber:

    def __init__(self):
        self.cancelled = False

    async def run(self):
        await asyncio.Future()

    async def cancel(self):
        self.cancelled = True


async def test_sender_ignores_closed_sockets():
    for error in (RuntimeError("closed"), WebSocketDisconnect(1000)):
        # must not raise, otherwise the subscriber task dies with it
        await socket_sender(ClosedSocket(error), "u1")("hello")


async def test_sender_forwards_messages():
    socket = RecordingSocket()
    await socket_sender(socket, "u1")("hello")
    assert socket.sent == ["hello"]


async def test_stop_subscription_waits_for_the_task():
    subscriber = FakeSubscriber()
    task = asyncio.create_task(subscriber.run())
    await asyncio.sleep(0)

    await stop_subscription(subscriber, task)

    assert task.done() and task.cancelled()
    assert subscriber.cancelled


async def test_stop_subscription_without_subscriber():
    await stop_subscription(None, None)


async def test_local_bus_delivers_to_registered_sockets():
    socket = RecordingSocket()
    manager.active_connections["u2"] = [socket]
    try:
        await LocalBus().publish(user_channel("u2"), json.dumps({"type": "ping"}))
    finally:
        manager.active_connections.pop("u2", None)

    assert socket.sent == ['{"type": "ping"}']
    assert not hasattr(LocalBus(), "subscribe")
