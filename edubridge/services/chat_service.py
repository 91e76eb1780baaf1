from typing import List, Optional

from edubridge.repositories.chat_repository import ChatRepository
from edubridge.schemas.chat import ChatMessageOut, ChatReply, ChatSessionOut
from edubridge.services.chatbot_client import ChatbotClient
from edubridge.utils.errors import ForbiddenError, NotFoundError


class ChatService:

    def __init__(self, chat_repo: ChatRepository, chatbot: ChatbotClient) -> None:
        self._chat_repo = chat_repo
        self._chatbot = chatbot

    async def send(self, user_id: str, content: str, session_id: Optional[str] = None) -> ChatReply:
        content = content.strip()
        if session_id:
            session = await self._owned_session(user_id, session_id)
        else:
            session = await self._chat_repo.create_session(user_id, content[:60])

        user_message = await self._chat_repo.add_message(session["_id"], content, is_user_message=True)
        reply = await self._chatbot.complete(content)
        ai_message = await self._chat_repo.add_message(session["_id"], reply, is_user_message=False)
        await self._chat_repo.touch(session["_id"])
        return ChatReply(
            session_id=session["_id"],
            messages=[ChatMessageOut.from_doc(user_message), ChatMessageOut.from_doc(ai_message)],
        )

    async def list_sessions(self, user_id: str) -> List[ChatSessionOut]:
        return [ChatSessionOut.from_doc(s) for s in await self._chat_repo.list_sessions(user_id)]

    async def list_messages(self, user_id: str, session_id: str) -> List[ChatMessageOut]:
        await self._owned_session(user_id, session_id)
        return [ChatMessageOut.from_doc(m) for m in await self._chat_repo.list_messages(session_id)]

    async def _owned_session(self, user_id: str, session_id: str) -> dict:
        session = await self._chat_repo.get_by_id(session_id)
        if not session:
            raise NotFoundError("Chat session not found")
        if session["user_id"] != user_id:
            raise ForbiddenError("This chat session belongs to another user")
        return session
