"""lt_vendedor REST endpoints (admin or supervisor).

GET    /vendedores                                 — list, page/limit + estado
GET    /vendedores/{vendedor_id}                   — detail
POST   /vendedores                                 — create
PATCH  /vendedores/{vendedor_id}                   — partial update
POST   /vendedores/{vendedor_id}/bancas            — replace assignments
GET    /vendedores/{vendedor_id}/bancas            — assigned bancas
DELETE /vendedores/{vendedor_id}/bancas/{banca_id} — remove one assignment
"""

import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.lt_common.database import get_db_session
from src.lt_common.enums import EstadoVendedor
from src.lt_common.pagination import Pagination, pagination_params
from src.lt_common.response import ApiResponse, success_response
from src.lt_gateway.auth.dependencies import require_roles
from src.lt_gateway.auth.policy import ADMIN_OR_SUPERVISOR
from src.lt_gateway.auth.principal import Principal
from src.lt_vendedor.application.schemas import (
    AssignBancasRequest,
    CreateVendedorRequest,
    UpdateVendedorRequest,
)
from src.lt_vendedor.application.service import VendedorApplicationService

router = APIRouter(prefix="/vendedores", tags=["vendedores"])

_service = VendedorApplicationService()


def get_vendedor_service() -> VendedorApplicationService:
    return _service


@router.get("")
async def list_vendedores(
    principal: Annotated[Principal, Depends(require_roles(ADMIN_OR_SUPERVISOR))],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    service: Annotated[VendedorApplicationService, Depends(get_vendedor_service)],
    pagination: Annotated[Pagination, Depends(pagination_params)],
    estado: EstadoVendedor | None = Query(None, description="activo | inactivo"),
) -> ApiResponse:
    items, meta = await service.list_vendedores(db, pagination, estado)
    filters = {"estado": estado.value} if estado else {}
    return success_response([i.model_dump(mode="json") for i in items], meta, filters)


@router.get("/{vendedor_id}")
async def get_vendedor(
    vendedor_id: uuid.UUID,
    principal: Annotated[Principal, Depends(require_roles(ADMIN_OR_SUPERVISOR))],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    service: Annotated[VendedorApplicationService, Depends(get_vendedor_service)],
) -> ApiResponse:
    vendedor = await service.get_vendedor(db, str(vendedor_id))
    return success_response(vendedor.model_dump(mode="json"))


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_vendedor(
    body: CreateVendedorRequest,
    principal: Annotated[Principal, Depends(require_roles(ADMIN_OR_SUPERVISOR))],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    service: Annotated[VendedorApplicationService, Depends(get_vendedor_service)],
) -> ApiResponse:
    async with db.begin():
        vendedor = await service.create_vendedor(db, body)
    return success_response(vendedor.model_dump(mode="json"))


@router.patch("/{vendedor_id}")
async def update_vendedor(
    vendedor_id: uuid.UUID,
    body: UpdateVendedorRequest,
    principal: Annotated[Principal, Depends(require_roles(ADMIN_OR_SUPERVISOR))],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    service: Annotated[VendedorApplicationService, Depends(get_vendedor_service)],
) -> ApiResponse:
    async with db.begin():
        vendedor = await service.update_vendedor(db, str(vendedor_id), body)
    return success_response(vendedor.model_dump(mode="json"))


@router.post("/{vendedor_id}/bancas")
async def assign_bancas(
    vendedor_id: uuid.UUID,
    body: AssignBancasRequest,
    principal: Annotated[Principal, Depends(require_roles(ADMIN_OR_SUPERVISOR))],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    service: Annotated[VendedorApplicationService, Depends(get_vendedor_service)],
) -> ApiResponse:
    async with db.begin():
        bancas = await service.assign_bancas(
            db, str(vendedor_id), [str(b) for b in body.banca_ids]
        )
    return success_response(
        {
            "message": "Vendedor asignado a bancas exitosamente",
            "bancas": [b.model_dump(mode="json") for b in bancas],
        }
    )


@router.get("/{vendedor_id}/bancas")
async def list_vendedor_bancas(
    vendedor_id: uuid.UUID,
    principal: Annotated[Principal, Depends(require_roles(ADMIN_OR_SUPERVISOR))],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    service: Annotated[VendedorApplicationService, Depends(get_vendedor_service)],
) -> ApiResponse:
    bancas = await service.list_bancas(db, str(vendedor_id))
    return success_response([b.model_dump(mode="json") for b in bancas])


@router.delete("/{vendedor_id}/bancas/{banca_id}")
async def remove_vendedor_banca(
    vendedor_id: uuid.UUID,
    banca_id: uuid.UUID,
    principal: Annotated[Principal, Depends(require_roles(ADMIN_OR_SUPERVISOR))],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    service: Annotated[VendedorApplicationService, Depends(get_vendedor_service)],
) -> ApiResponse:
    async with db.begin():
        await service.remove_banca(db, str(vendedor_id), str(banca_id))
    return success_response({"message": "Vendedor removido de la banca exitosamente"})
