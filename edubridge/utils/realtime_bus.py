import asyncio
import contextlib
import json
import logging
from typing import Any, Awaitable, Callable, Dict, Iterable, Optional

import redis.asyncio as redis
from redis.exceptions import RedisError

from edubridge.config import get_settings
from edubridge.utils.websocket_manager import manager


logger = logging.getLogger(__name__)


class LocalBus:
    """Delivers straight to sockets held by this process."""

    # sockets of this process are registered with `manager`, nothing to subscribe to
    enabled = False

    async def publish(self, channel: str, message: str) -> None:
        await manager.send_personal_message(channel.split(":", 1)[-1], message)


class RedisBus:
    """Fans messages out through Redis pub/sub so every worker can deliver."""

    enabled = True

    def __init__(self, url: str) -> None:
        self._redis = redis.from_url(url)

    async def publish(self, channel: str, message: str) -> None:
        await self._redis.publish(channel, message)

    async def subscribe(self, channel: str, on_message: Callable[[str], Awaitable[None]]):
        pubsub = self._redis.pubsub()
        await pubsub.subscribe(channel)

        class _Sub:
            _running = True

            async def run(self_inner):
                while self_inner._running:
                    try:
                        msg = await pubsub.get_message(ignore_subscribe_messages=True, timeout=1.0)
                        if msg and msg.get("type") == "message":
                            data = msg.get("data")
                            if isinstance(data, bytes):
                                data = data.decode("utf-8")
                            await on_message(data)
                    except RedisError:
                        logger.warning("Redis subscription on %s failed, retrying", channel)
                        await asyncio.sleep(0.5)

            async def cancel(self_inner):
                self_inner._running = False
                await pubsub.unsubscribe(channel)
                await pubsub.close()

        return _Sub()

    async def close(self) -> None:
        await self._redis.close()


_bus = None


def get_bus():
    global _bus
    if _bus is None:
        url = get_settings().redis_url
        _bus = RedisBus(url) if url else LocalBus()
    return _bus


async def stop_subscription(subscriber, task: Optional[asyncio.Task]) -> None:
    """Cancel a running subscriber task, wait for it to finish, then release the subscription."""
    if task is not None:
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task
    if subscriber is not None:
        await subscriber.cancel()


async def close_bus() -> None:
    global _bus
    if isinstance(_bus, RedisBus):
        await _bus.close()
    _bus = None


def user_channel(user_id: str) -> str:
    return f"user:{user_id}"


async def notify_users(user_ids: Iterable[str], event: str, payload: Dict[str, Any], exclude: Optional[str] = None) -> None:
    """Push an event to every listed user; delivery problems are logged, not raised."""
    data = json.dumps({"type": event, **payload}, default=str)
    bus = get_bus()
    for user_id in set(user_ids):
        if user_id == exclude:
            continue
        try:
            await bus.publish(user_channel(user_id), data)
        except RedisError:
            logger.warning("Realtime publish to %s failed", user_id, exc_info=True)
