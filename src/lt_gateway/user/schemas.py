"""Pydantic request/response schemas for lt_gateway.

All responses are wrapped in ApiResponse at the router layer.
"""

from pydantic import BaseModel, EmailStr, Field

from src.lt_common.enums import EstadoUsuario, Role
from src.lt_gateway.user.db_models import UserModel


class RegisterRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=128)
    nombre: str = Field(..., min_length=2, max_length=120)
    rol: Role = Role.OPERADOR


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=6)


class UserInfo(BaseModel):
    id: str
    email: str
    nombre: str
    rol: Role
    estado: EstadoUsuario
    created_at: str | None = None

    @classmethod
    def from_model(cls, user: UserModel) -> "UserInfo":
        return cls(
            id=str(user.id),
            email=user.email,
            nombre=user.nombre,
            rol=Role(user.rol),
            estado=EstadoUsuario(user.estado),
            created_at=user.created_at.isoformat() if user.created_at else None,
        )


class SessionInfo(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int


class LoginResponse(BaseModel):
    user: UserInfo
    session: SessionInfo


class RegisterResponse(BaseModel):
    user: UserInfo
    message: str = "Usuario registrado exitosamente"


class MessageResponse(BaseModel):
    message: str
