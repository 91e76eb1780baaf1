import asyncio
import json
import logging
from typing import Awaitable, Callable, List

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect, status

from edubridge.database.connection import mongo_db_dependency
from edubridge.repositories.message_repository import MessageGroupRepository, MessageRepository
from edubridge.repositories.user_repository import UserRepository
from edubridge.schemas.message import (
    ConversationOut,
    GroupCreate,
    GroupOut,
    InboxEntry,
    MarkReadResult,
    MessageCreate,
    MessageOut,
    UnreadCount,
)
from edubridge.services.auth_service import PasswordAuthenticator
from edubridge.services.message_service import MessageService
from edubridge.utils.dependencies import get_authenticator, get_current_user, resolve_token
from edubridge.utils.errors import ServiceError
from edubridge.utils.realtime_bus import get_bus, stop_subscription, user_channel
from edubridge.utils.websocket_manager import manager


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/messages", tags=["messages"])


def get_message_service(db=Depends(mongo_db_dependency)) -> MessageService:
    return MessageService(MessageRepository(db), MessageGroupRepository(db), UserRepository(db))


@router.post("", response_model=MessageOut, status_code=status.HTTP_201_CREATED)
async def send_message(payload: MessageCreate, current_user: dict = Depends(get_current_user), service: MessageService = Depends(get_message_service)):
    return await service.send_message(current_user["_id"], payload)


@router.get("/conversations", response_model=List[ConversationOut])
async def list_conversations(current_user: dict = Depends(get_current_user), service: MessageService = Depends(get_message_service)):
    return await service.list_conversations(current_user["_id"])


@router.get("/inbox", response_model=List[InboxEntry])
async def inbox(current_user: dict = Depends(get_current_user), service: MessageService = Depends(get_message_service)):
    return await service.inbox(current_user["_id"])


@router.get("/unread", response_model=UnreadCount)
async def unread(current_user: dict = Depends(get_current_user), service: MessageService = Depends(get_message_service)):
    return UnreadCount(unread=await service.unread_total(current_user["_id"]))


@router.get("/users/{partner_id}", response_model=List[MessageOut])
async def open_thread(partner_id: str, current_user: dict = Depends(get_current_user), service: MessageService = Depends(get_message_service)):
    return await service.open_thread(current_user["_id"], partner_id)


@router.post("/users/{partner_id}/read", response_model=MarkReadResult)
async def mark_read(partner_id: str, current_user: dict = Depends(get_current_user), service: MessageService = Depends(get_message_service)):
    return MarkReadResult(updated=await service.mark_read(current_user["_id"], partner_id))


@router.post("/groups", response_model=GroupOut, status_code=status.HTTP_201_CREATED)
async def create_group(payload: GroupCreate, current_user: dict = Depends(get_current_user), service: MessageService = Depends(get_message_service)):
    return await service.create_group(current_user["_id"], payload)


@router.get("/groups", response_model=List[GroupOut])
async def list_groups(current_user: dict = Depends(get_current_user), service: MessageService = Depends(get_message_service)):
    return await service.list_groups(current_user["_id"])


@router.get("/groups/{group_id}", response_model=List[MessageOut])
async def group_messages(group_id: str, current_user: dict = Depends(get_current_user), service: MessageService = Depends(get_message_service)):
    return await service.group_messages(current_user["_id"], group_id)


def socket_sender(websocket: WebSocket, user_id: str) -> Callable[[str], Awaitable[None]]:
    """Forward bus messages to `websocket`, ignoring a socket that has already gone away."""

    async def _send(message: str) -> None:
        try:
            await websocket.send_text(message)
        except (RuntimeError, WebSocketDisconnect):
            logger.debug("Socket for user %s closed before delivery", user_id)

    return _send


@router.websocket("/ws/{user_id}")
async def message_socket(websocket: WebSocket, user_id: str, authenticator: PasswordAuthenticator = Depends(get_authenticator)):
    # token comes in the query string: ?token=...
    token = websocket.query_params.get("token")
    if not token:
        await websocket.close(code=4401)
        return
    try:
        user = await resolve_token(token, authenticator)
    except ServiceError:
        await websocket.close(code=4401)
        return
    if user["_id"] != user_id:
        await websocket.close(code=4403)
        return

    await manager.connect(user_id, websocket)
    bus = get_bus()
    subscriber = None
    sub_task = None
    if bus.enabled:
        subscriber = await bus.subscribe(user_channel(user_id), socket_sender(websocket, user_id))
        sub_task = asyncio.create_task(subscriber.run())

    try:
        while True:
            data = await websocket.receive_text()
            try:
                msg = json.loads(data)
            except json.JSONDecodeError:
                await websocket.send_text(json.dumps({"type": "error", "error": "Invalid JSON"}))
                continue
            if msg.get("type") in ("typing_start", "typing_stop") and msg.get("to"):
                await bus.publish(user_channel(msg["to"]), json.dumps({"type": msg["type"], "from": user_id}))
            elif msg.get("type") == "ping":
                await websocket.send_text(json.dumps({"type": "pong"}))
            else:
                await websocket.send_text(json.dumps({"type": "error", "error": "Unsupported event"}))
    except WebSocketDisconnect:
        logger.debug("Socket for user %s disconnected", user_id)
    finally:
        manager.disconnect(user_id, websocket)
        await stop_subscription(subscriber, sub_task)
