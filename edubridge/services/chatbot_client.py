import logging
from typing import Optional

import requests
from starlette.concurrency import run_in_threadpool

from edubridge.config import Settings, get_settings


logger = logging.getLogger(__name__)


SYSTEM_PROMPT = (
    "You are a helpful educational assistant for EduBridge Manager. You help students with their "
    "academic queries, explain concepts, and provide guidance on assignments. Keep your responses "
    "focused on educational content and be supportive and encouraging."
)

NOT_CONFIGURED_REPLY = (
    "I'm sorry, but the AI service is not configured properly. Please contact the administrator."
)
ERROR_REPLY = "I'm sorry, but I encountered an error while processing your request. Please try again later."


class ChatbotClient:
    """Chat-completion client that never raises: failures become an apology text."""

    def __init__(self, settings: Settings, session: Optional[requests.Session] = None, timeout: float = 30.0) -> None:
        self._api_key = settings.openrouter_api_key
        self._url = settings.openrouter_url
        self._model = settings.openrouter_model
        self._session = session or requests.Session()
        self._timeout = timeout

    async def complete(self, message: str) -> str:
        if not self._api_key:
            logger.warning("OPENROUTER_API_KEY is not set, returning fallback reply")
            return NOT_CONFIGURED_REPLY
        # requests is blocking, keep it off the event loop
        return await run_in_threadpool(self._complete_sync, message)

    def close(self) -> None:
        self._session.close()

    def _complete_sync(self, message: str) -> str:
        try:
            response = self._session.post(
                self._url,
                headers={
                    "Content-Type": "application/json",
                    "Authorization": f"Bearer {self._api_key}",
                    "X-Title": "EduBridge Manager",
                },
                json={
                    "model": self._model,
                    "messages": [
                        {"role": "system", "content": SYSTEM_PROMPT},
                        {"role": "user", "content": message},
                    ],
                    "max_tokens": 1000,
                },
                timeout=self._timeout,
            )
        except requests.RequestException as e:
            logger.error("AI request failed: %s", e)
            return ERROR_REPLY

        if not response.ok:
            logger.error("OpenRouter API error %s: %s", response.status_code, response.text)
            return f"{ERROR_REPLY} (Error: {response.status_code})"

        try:
            return response.json()["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            logger.error("Unexpected OpenRouter response: %s", e)
            return ERROR_REPLY


_chatbot: Optional[ChatbotClient] = None


def get_chatbot() -> ChatbotClient:
    """One client, and so one connection pool, per process."""
    global _chatbot
    if _chatbot is None:
        _chatbot = ChatbotClient(get_settings())
    return _chatbot


def close_chatbot() -> None:
    global _chatbot
    if _chatbot is not None:
        _chatbot.close()
        _chatbot = None
