"""Auth API router: register, login, me, logout."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.lt_common.database import get_db_session
from src.lt_common.response import ApiResponse, success_response
from src.lt_gateway.auth.dependencies import require_roles
from src.lt_gateway.auth.identity import parse_bearer
from src.lt_gateway.auth.policy import ANY_ROLE
from src.lt_gateway.auth.principal import Principal
from src.lt_gateway.user.schemas import (
    LoginRequest,
    LoginResponse,
    MessageResponse,
    RegisterRequest,
    RegisterResponse,
    SessionInfo,
    UserInfo,
)
from src.lt_gateway.user.service import AuthService

router = APIRouter(prefix="/auth", tags=["auth"])
_service = AuthService()


def get_auth_service() -> AuthService:
    return _service


@router.post(
    "/register",
    status_code=status.HTTP_201_CREATED,
    summary="Register a user (provider account + local profile)",
)
async def register(
    body: RegisterRequest,
    db: Annotated[AsyncSession, Depends(get_db_session)],
    service: Annotated[AuthService, Depends(get_auth_service)],
) -> ApiResponse:
    async with db.begin():
        user = await service.register(db, body)
    data = RegisterResponse(user=UserInfo.from_model(user))
    return success_response(data.model_dump(mode="json"))


@router.post("/login", summary="Password login")
async def login(
    body: LoginRequest,
    db: Annotated[AsyncSession, Depends(get_db_session)],
    service: Annotated[AuthService, Depends(get_auth_service)],
) -> ApiResponse:
    user, session = await service.login(db, body.email, body.password)
    data = LoginResponse(
        user=UserInfo.from_model(user),
        session=SessionInfo(
            access_token=session.access_token,
            refresh_token=session.refresh_token,
            token_type=session.token_type,
            expires_in=session.expires_in,
        ),
    )
    return success_response(data.model_dump(mode="json"))


@router.get("/me", summary="Current user profile")
async def me(
    principal: Annotated[Principal, Depends(require_roles(ANY_ROLE))],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    service: Annotated[AuthService, Depends(get_auth_service)],
) -> ApiResponse:
    user = await service.get_profile(db, principal.id)
    return success_response(UserInfo.from_model(user).model_dump(mode="json"))


@router.post("/logout", summary="Revoke the provider session")
async def logout(
    request: Request,
    principal: Annotated[Principal, Depends(require_roles(ANY_ROLE))],
    service: Annotated[AuthService, Depends(get_auth_service)],
) -> ApiResponse:
    await service.logout(parse_bearer(request.headers.get("Authorization")))
    data = MessageResponse(message="Sesión cerrada exitosamente")
    return success_response(data.model_dump(mode="json"))
