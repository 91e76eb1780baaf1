from typing import List

from fastapi import APIRouter, Depends

from edubridge.database.connection import mongo_db_dependency
from edubridge.repositories.chat_repository import ChatRepository
from edubridge.schemas.chat import ChatMessageCreate, ChatMessageOut, ChatReply, ChatSessionOut
from edubridge.services.chat_service import ChatService
from edubridge.services.chatbot_client import ChatbotClient, get_chatbot
from edubridge.utils.dependencies import get_current_user


router = APIRouter(prefix="/chat", tags=["chat"])


def get_chat_service(db=Depends(mongo_db_dependency), chatbot: ChatbotClient = Depends(get_chatbot)) -> ChatService:
    return ChatService(ChatRepository(db), chatbot)


@router.post("", response_model=ChatReply)
async def send_chat_message(payload: ChatMessageCreate, current_user: dict = Depends(get_current_user), service: ChatService = Depends(get_chat_service)):
    return await service.send(current_user["_id"], payload.content, payload.session_id)


@router.get("/sessions", response_model=List[ChatSessionOut])
async def list_sessions(current_user: dict = Depends(get_current_user), service: ChatService = Depends(get_chat_service)):
    return await service.list_sessions(current_user["_id"])


@router.get("/sessions/{session_id}/messages", response_model=List[ChatMessageOut])
async def list_messages(session_id: str, current_user: dict = Depends(get_current_user), service: ChatService = Depends(get_chat_service)):
    return await service.list_messages(current_user["_id"], session_id)
