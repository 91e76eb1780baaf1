import os
from functools import lru_cache
from typing import Optional

from dotenv import load_dotenv


load_dotenv()


class Settings:

    def __init__(self) -> None:
        self.mongo_url: str = os.getenv("MONGO_URL", "mongodb://localhost:27017")
        self.mongo_db_name: str = os.getenv("MONGO_DB_NAME", "edubridge")
        self.jwt_secret: str = os.getenv("JWT_SECRET", "dev-secret-change-me")
        self.jwt_algorithm: str = "HS256"
        self.jwt_expire_minutes: int = int(os.getenv("JWT_EXPIRE_MINUTES", str(60 * 24 * 30)))
        # "password" verifies stored hashes, "bypass" logs everyone in as the fixed admin
        self.auth_mode: str = os.getenv("AUTH_MODE", "password").lower()
        self.openrouter_api_key: Optional[str] = os.getenv("OPENROUTER_API_KEY") or None
        self.openrouter_url: str = os.getenv("OPENROUTER_URL", "https://openrouter.ai/api/v1/chat/completions")
        self.openrouter_model: str = os.getenv("OPENROUTER_MODEL", "openai/gpt-3.5-turbo")
        self.redis_url: Optional[str] = os.getenv("REDIS_URL") or None
        self.log_level: str = os.getenv("LOG_LEVEL", "INFO").upper()


@lru_cache
def get_settings() -> Settings:
    return Settings()
