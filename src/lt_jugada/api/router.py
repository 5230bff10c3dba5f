"""lt_jugada REST endpoints.

GET  /jugadas                     — list, page/limit + filters (any role)
GET  /jugadas/{jugada_id}         — detail (any role)
POST /jugadas                     — create (any role, IP allow-list)
POST /jugadas/batch               — batch create (any role, IP allow-list)
POST /jugadas/{jugada_id}/anular  — cancel (admin or supervisor)
"""

import uuid
from datetime import datetime
from typing import Annotated, Any

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.lt_common.database import get_db_session
from src.lt_common.datetime_utils import as_utc
from src.lt_common.enums import EstadoJugada
from src.lt_common.pagination import Pagination, pagination_params
from src.lt_common.response import ApiResponse, success_response
from src.lt_gateway.auth.dependencies import require_roles
from src.lt_gateway.auth.policy import ADMIN_OR_SUPERVISOR, ANY_ROLE
from src.lt_gateway.auth.principal import Principal
from src.lt_gateway.security.client_ip import client_ip
from src.lt_gateway.security.ip_guard import IpGuard
from src.lt_jugada.application.schemas import CreateJugadaBatchRequest, CreateJugadaRequest
from src.lt_jugada.application.service import JugadaApplicationService
from src.lt_jugada.domain.models import JugadaFilters

router = APIRouter(prefix="/jugadas", tags=["jugadas"])

_service = JugadaApplicationService()
_ip_guard = IpGuard()


def get_jugada_service() -> JugadaApplicationService:
    return _service


def get_ip_guard() -> IpGuard:
    return _ip_guard


def jugada_filters(
    fecha_desde: datetime | None = Query(None),
    fecha_hasta: datetime | None = Query(None),
    banca_id: uuid.UUID | None = Query(None),
    vendedor_id: uuid.UUID | None = Query(None),
    sorteo_id: uuid.UUID | None = Query(None),
    estado: EstadoJugada | None = Query(None, description="valida | anulada"),
    numero: int | None = Query(None, ge=0, le=99),
) -> JugadaFilters:
    return JugadaFilters(
        fecha_desde=as_utc(fecha_desde) if fecha_desde else None,
        fecha_hasta=as_utc(fecha_hasta) if fecha_hasta else None,
        banca_id=str(banca_id) if banca_id else None,
        vendedor_id=str(vendedor_id) if vendedor_id else None,
        sorteo_id=str(sorteo_id) if sorteo_id else None,
        estado=estado.value if estado else None,
        numero=numero,
    )


def _echo(filters: JugadaFilters) -> dict[str, Any]:
    echoed: dict[str, Any] = {}
    for key, value in filters.as_params().items():
        if value is None:
            continue
        echoed[key] = value.isoformat() if isinstance(value, datetime) else value
    return echoed


@router.get("")
async def list_jugadas(
    principal: Annotated[Principal, Depends(require_roles(ANY_ROLE))],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    service: Annotated[JugadaApplicationService, Depends(get_jugada_service)],
    pagination: Annotated[Pagination, Depends(pagination_params)],
    filters: Annotated[JugadaFilters, Depends(jugada_filters)],
) -> ApiResponse:
    items, meta = await service.list_jugadas(db, pagination, filters)
    return success_response(
        [i.model_dump(mode="json") for i in items], meta, _echo(filters)
    )


# Declared before /{jugada_id} routes.
@router.post("/batch", status_code=status.HTTP_201_CREATED)
async def create_jugadas_batch(
    request: Request,
    body: CreateJugadaBatchRequest,
    principal: Annotated[Principal, Depends(require_roles(ANY_ROLE))],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    service: Annotated[JugadaApplicationService, Depends(get_jugada_service)],
    ip_guard: Annotated[IpGuard, Depends(get_ip_guard)],
) -> ApiResponse:
    async with db.begin():
        await ip_guard.check(db, client_ip(request), [str(j.banca_id) for j in body.jugadas])
        jugadas = await service.create_batch(db, body, principal)
    return success_response([j.model_dump(mode="json") for j in jugadas])


@router.get("/{jugada_id}")
async def get_jugada(
    jugada_id: uuid.UUID,
    principal: Annotated[Principal, Depends(require_roles(ANY_ROLE))],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    service: Annotated[JugadaApplicationService, Depends(get_jugada_service)],
) -> ApiResponse:
    jugada = await service.get_jugada(db, str(jugada_id))
    return success_response(jugada.model_dump(mode="json"))


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_jugada(
    request: Request,
    body: CreateJugadaRequest,
    principal: Annotated[Principal, Depends(require_roles(ANY_ROLE))],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    service: Annotated[JugadaApplicationService, Depends(get_jugada_service)],
    ip_guard: Annotated[IpGuard, Depends(get_ip_guard)],
) -> ApiResponse:
    async with db.begin():
        await ip_guard.check(db, client_ip(request), [str(body.banca_id)])
        jugada = await service.create_jugada(db, body, principal)
    return success_response(jugada.model_dump(mode="json"))


@router.post("/{jugada_id}/anular")
async def cancel_jugada(
    jugada_id: uuid.UUID,
    principal: Annotated[Principal, Depends(require_roles(ADMIN_OR_SUPERVISOR))],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    service: Annotated[JugadaApplicationService, Depends(get_jugada_service)],
) -> ApiResponse:
    async with db.begin():
        jugada = await service.cancel_jugada(db, str(jugada_id), principal)
    return success_response(jugada.model_dump(mode="json"))
