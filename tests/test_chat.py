import pytest
import requests

from edubridge.config import Settings
from edubridge.repositories.chat_repository import ChatRepository
from edubridge.services.chat_service import ChatService
from edubridge.services import chatbot_client
from edubridge.services.chatbot_client import ERROR_REPLY, NOT_CONFIGURED_REPLY, ChatbotClient, close_chatbot, get_chatbot
from edubridge.utils.errors import ForbiddenError, NotFoundError


class FakeResponse:

    def __init__(self, status_code=200, payload=None, text=""):
        self.status_code = status_code
        self.ok = 200 <= status_code < 300
        self._payload = payload
        self.text = text

    def json(self):
        if self._payload is None:
            raise ValueError("no json")
        return self._payload


class FakeSession:

    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.calls = []
        self.closed = False

    def post(self, url, headers=None, json=None, timeout=None):
        self.calls.append({"url": url, "headers": headers, "json": json})
        if self.error:
            raise self.error
        return self.response

    def close(self):
        self.closed = True


def make_settings(api_key="test-key"):
    settings = Settings()
    settings.openrouter_api_key = api_key
    return settings


async def test_missing_key_returns_fallback_without_calling_out():
    session = FakeSession()
    client = ChatbotClient(make_settings(api_key=None), session=session)

    assert await client.complete("hi") == NOT_CONFIGURED_REPLY
    assert session.calls == []


async def test_successful_completion():
    session = FakeSession(FakeResponse(payload={"choices": [{"message": {"content": "Photosynthesis is..."}}]}))
    client = ChatbotClient(make_settings(), session=session)

    assert await client.complete("What is photosynthesis?") == "Photosynthesis is..."
    sent = session.calls[0]
    assert sent["headers"]["Authorization"] == "Bearer test-key"
    assert sent["json"]["messages"][0]["role"] == "system"
    assert sent["json"]["messages"][1] == {"role": "user", "content": "What is photosynthesis?"}


async def test_http_error_is_reported_in_reply(caplog):
    session = FakeSession(FakeResponse(status_code=429, text="rate limited"))
    client = ChatbotClient(make_settings(), session=session)

    assert await client.complete("hi") == f"{ERROR_REPLY} (Error: 429)"
    record = caplog.records[-1]
    assert record.levelname == "ERROR"
    assert record.args == (429, "rate limited")
    assert record.getMessage() == "OpenRouter API error 429: rate limited"


async def test_transport_failure_degrades():
    session = FakeSession(error=requests.ConnectionError("down"))
    client = ChatbotClient(make_settings(), session=session)

    assert await client.complete("hi") == ERROR_REPLY


async def test_malformed_body_degrades():
    session = FakeSession(FakeResponse(payload={"unexpected": True}))
    client = ChatbotClient(make_settings(), session=session)

    assert await client.complete("hi") == ERROR_REPLY


class EchoBot:

    async def complete(self, message):
        return f"echo: {message}"


async def test_chat_session_flow(db, make_user):
    service = ChatService(ChatRepository(db), EchoBot())
    user = await make_user()

    reply = await service.send(user["_id"], "  Explain fractions  ")
    assert [m.content for m in reply.messages] == ["Explain fractions", "echo: Explain fractions"]
    assert [m.is_user_message for m in reply.messages] == [True, False]

    await service.send(user["_id"], "More examples", session_id=reply.session_id)

    sessions = await service.list_sessions(user["_id"])
    assert len(sessions) == 1
    assert sessions[0].title == "Explain fractions"
    messages = await service.list_messages(user["_id"], reply.session_id)
    assert len(messages) == 4


async def test_chat_session_belongs_to_owner(db, make_user):
    service = ChatService(ChatRepository(db), EchoBot())
    owner = await make_user()
    other = await make_user()
    reply = await service.send(owner["_id"], "hello")

    with pytest.raises(ForbiddenError):
        await service.list_messages(other["_id"], reply.session_id)
    with pytest.raises(NotFoundError):
        await service.send(owner["_id"], "hello", session_id="65a000000000000000000000")


def test_chatbot_is_shared_and_closed_on_shutdown(monkeypatch):
    session = FakeSession()
    monkeypatch.setattr(chatbot_client, "_chatbot", ChatbotClient(make_settings(), session=session))

    assert get_chatbot() is get_chatbot()

    close_chatbot()
    assert session.closed
    assert chatbot_client._chatbot is None
    # closing twice is harmless
    close_chatbot()
