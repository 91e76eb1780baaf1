import logging
from typing import Any, Dict, Optional

from pymongo.errors import DuplicateKeyError

from edubridge.config import Settings
from edubridge.repositories.user_repository import UserRepository
from edubridge.utils.errors import UnauthorizedError
from edubridge.utils.security import create_access_token, verify_password


logger = logging.getLogger(__name__)


BYPASS_ADMIN_EMAIL = "admin@example.com"
BYPASS_ADMIN_NAME = "Admin User"


class PasswordAuthenticator:
    """Checks credentials against the stored bcrypt hash."""

    def __init__(self, user_repository: UserRepository) -> None:
        self.user_repository = user_repository

    async def authenticate(self, email: str, password: str) -> Optional[dict]:
        user = await self.user_repository.get_user_by_email(email)
        if not user:
            return None
        if not verify_password(password, user.get("hashed_password", "")):
            return None
        return user

    async def resolve(self, subject: str) -> Optional[dict]:
        return await self.user_repository.get_by_id(subject)


class BypassAuthenticator(PasswordAuthenticator):
    """Every login succeeds as the fixed administrator. Development only.

    The administrator is a stored user, created on first login, so it has a
    real id and shows up in conversations like anyone else. Its password hash
    is empty, which never verifies in password mode.
    """

    async def authenticate(self, email: str, password: str) -> Optional[dict]:
        admin = await self.user_repository.get_user_by_email(BYPASS_ADMIN_EMAIL)
        if admin:
            return admin
        try:
            admin = await self.user_repository.create_user(
                email=BYPASS_ADMIN_EMAIL,
                hashed_password="",
                name=BYPASS_ADMIN_NAME,
                role="ADMIN",
            )
            logger.warning("AUTH_MODE=bypass: created administrator %s", admin["_id"])
        except DuplicateKeyError:
            admin = await self.user_repository.get_user_by_email(BYPASS_ADMIN_EMAIL)
        return admin


def build_authenticator(settings: Settings, user_repository: UserRepository) -> PasswordAuthenticator:
    if settings.auth_mode == "bypass":
        return BypassAuthenticator(user_repository)
    if settings.auth_mode != "password":
        logger.warning("Unknown AUTH_MODE %r, falling back to password", settings.auth_mode)
    return PasswordAuthenticator(user_repository)


class AuthService:

    def __init__(self, authenticator: PasswordAuthenticator) -> None:
        self.authenticator = authenticator

    async def login(self, email: str, password: str) -> Dict[str, Any]:
        user = await self.authenticator.authenticate(email, password)
        if not user:
            logger.info("Failed login for %s", email)
            raise UnauthorizedError("Invalid email or password")
        token = create_access_token(user["_id"], {"role": user.get("role")})
        return {"access_token": token, "token_type": "bearer", "user": user}
