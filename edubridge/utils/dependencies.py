from typing import Callable, Optional

import jwt
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from edubridge.config import Settings, get_settings
from edubridge.database.connection import mongo_db_dependency
from edubridge.repositories.user_repository import UserRepository
from edubridge.services.auth_service import PasswordAuthenticator, build_authenticator
from edubridge.utils.errors import ForbiddenError, UnauthorizedError
from edubridge.utils.security import decode_access_token


security = HTTPBearer(auto_error=False)


def get_authenticator(db=Depends(mongo_db_dependency), settings: Settings = Depends(get_settings)) -> PasswordAuthenticator:
    return build_authenticator(settings, UserRepository(db))


async def resolve_token(token: str, authenticator: PasswordAuthenticator) -> dict:
    try:
        payload = decode_access_token(token)
    except jwt.PyJWTError:
        raise UnauthorizedError("Invalid token")
    subject = payload.get("sub")
    if not subject:
        raise UnauthorizedError("Invalid token")
    user = await authenticator.resolve(subject)
    if not user:
        raise UnauthorizedError("User not found")
    return user


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    authenticator: PasswordAuthenticator = Depends(get_authenticator),
) -> dict:
    if not credentials:
        raise UnauthorizedError("Missing token")
    return await resolve_token(credentials.credentials, authenticator)


def require_roles(*roles: str) -> Callable:
    async def _checker(current_user: dict = Depends(get_current_user)) -> dict:
        if current_user.get("role") not in roles:
            raise ForbiddenError("You do not have permission to perform this action")
        return current_user

    return _checker


require_staff = require_roles("ADMIN", "STAFF")
require_admin = require_roles("ADMIN")
