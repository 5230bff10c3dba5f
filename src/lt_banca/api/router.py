"""lt_banca REST endpoints.

GET   /bancas                       — list, page/limit + estado filter
GET   /bancas/{banca_id}            — detail
POST  /bancas                       — create (admin)
PATCH /bancas/{banca_id}            — partial update (admin)
POST  /bancas/{banca_id}/activar    — (admin)
POST  /bancas/{banca_id}/desactivar — (admin)
"""

import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.lt_banca.application.schemas import CreateBancaRequest, UpdateBancaRequest
from src.lt_banca.application.service import BancaApplicationService
from src.lt_common.database import get_db_session
from src.lt_common.enums import EstadoBanca
from src.lt_common.pagination import Pagination, pagination_params
from src.lt_common.response import ApiResponse, success_response
from src.lt_gateway.auth.dependencies import require_roles
from src.lt_gateway.auth.policy import ADMIN_ONLY, ADMIN_OR_SUPERVISOR
from src.lt_gateway.auth.principal import Principal

router = APIRouter(prefix="/bancas", tags=["bancas"])

_service = BancaApplicationService()


def get_banca_service() -> BancaApplicationService:
    return _service


@router.get("")
async def list_bancas(
    principal: Annotated[Principal, Depends(require_roles(ADMIN_OR_SUPERVISOR))],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    service: Annotated[BancaApplicationService, Depends(get_banca_service)],
    pagination: Annotated[Pagination, Depends(pagination_params)],
    estado: EstadoBanca | None = Query(None, description="activa | inactiva"),
) -> ApiResponse:
    items, meta = await service.list_bancas(db, pagination, estado)
    filters = {"estado": estado.value} if estado else {}
    return success_response([i.model_dump(mode="json") for i in items], meta, filters)


@router.get("/{banca_id}")
async def get_banca(
    banca_id: uuid.UUID,
    principal: Annotated[Principal, Depends(require_roles(ADMIN_OR_SUPERVISOR))],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    service: Annotated[BancaApplicationService, Depends(get_banca_service)],
) -> ApiResponse:
    banca = await service.get_banca(db, str(banca_id))
    return success_response(banca.model_dump(mode="json"))


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_banca(
    body: CreateBancaRequest,
    principal: Annotated[Principal, Depends(require_roles(ADMIN_ONLY))],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    service: Annotated[BancaApplicationService, Depends(get_banca_service)],
) -> ApiResponse:
    async with db.begin():
        banca = await service.create_banca(db, body)
    return success_response(banca.model_dump(mode="json"))


@router.patch("/{banca_id}")
async def update_banca(
    banca_id: uuid.UUID,
    body: UpdateBancaRequest,
    principal: Annotated[Principal, Depends(require_roles(ADMIN_ONLY))],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    service: Annotated[BancaApplicationService, Depends(get_banca_service)],
) -> ApiResponse:
    async with db.begin():
        banca = await service.update_banca(db, str(banca_id), body)
    return success_response(banca.model_dump(mode="json"))


@router.post("/{banca_id}/activar")
async def activate_banca(
    banca_id: uuid.UUID,
    principal: Annotated[Principal, Depends(require_roles(ADMIN_ONLY))],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    service: Annotated[BancaApplicationService, Depends(get_banca_service)],
) -> ApiResponse:
    async with db.begin():
        banca = await service.set_estado(db, str(banca_id), EstadoBanca.ACTIVA)
    return success_response(banca.model_dump(mode="json"))


@router.post("/{banca_id}/desactivar")
async def deactivate_banca(
    banca_id: uuid.UUID,
    principal: Annotated[Principal, Depends(require_roles(ADMIN_ONLY))],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    service: Annotated[BancaApplicationService, Depends(get_banca_service)],
) -> ApiResponse:
    async with db.begin():
        banca = await service.set_estado(db, str(banca_id), EstadoBanca.INACTIVA)
    return success_response(banca.model_dump(mode="json"))
