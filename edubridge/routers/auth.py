from fastapi import APIRouter, Depends, status

from edubridge.database.connection import mongo_db_dependency
from edubridge.schemas.user import LoginRequest, Token, UserCreate, UserPublic
from edubridge.services.auth_service import AuthService, PasswordAuthenticator
from edubridge.services.user_service import UserService
from edubridge.utils.dependencies import get_authenticator, get_current_user


router = APIRouter(prefix="/auth", tags=["auth"])


def get_auth_service(authenticator: PasswordAuthenticator = Depends(get_authenticator)) -> AuthService:
    return AuthService(authenticator)


@router.post("/register", response_model=UserPublic, status_code=status.HTTP_201_CREATED)
async def register(payload: UserCreate, db=Depends(mongo_db_dependency)):
    return await UserService(db).register_user(payload)


@router.post("/login", response_model=Token)
async def login(payload: LoginRequest, service: AuthService = Depends(get_auth_service)):
    result = await service.login(payload.email, payload.password)
    return Token(
        access_token=result["access_token"],
        token_type=result["token_type"],
        user=UserPublic.from_doc(result["user"]),
    )


@router.get("/me", response_model=UserPublic)
async def me(current_user: dict = Depends(get_current_user)):
    return UserPublic.from_doc(current_user)
