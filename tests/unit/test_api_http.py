"""HTTP-level tests: routing, auth ordering, envelopes and status codes.

The real identity resolver runs against in-memory usuarios; services are
swapped through FastAPI dependency_overrides.
"""

import asyncio
import math
import uuid
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import timedelta
from unittest.mock import AsyncMock

import pytest
from httpx import AsyncClient

from src.lt_banca.api.router import get_banca_service
from src.lt_banca.application.service import BancaApplicationService
from src.lt_common.database import get_db_session
from src.lt_common.datetime_utils import utc_now
from src.lt_common.errors import BancaNameExistsError
from src.lt_jugada.api.router import get_ip_guard, get_jugada_service
from src.lt_jugada.application.service import JugadaApplicationService
from src.lt_jugada.domain.lifecycle import WagerLifecycleEngine
from src.lt_gateway.auth.dependencies import get_identity_session_factory
from src.lt_gateway.security.ip_guard import IpGuard
from src.main import app

SORTEO_ID = str(uuid.uuid4())


@pytest.fixture
def jugada_stack(bancas, vendedores, jugadas, resultados) -> JugadaApplicationService:
    engine = WagerLifecycleEngine(bancas, vendedores, jugadas, resultados, grace_minutes=10)
    service = JugadaApplicationService(repo=jugadas, engine=engine)
    app.dependency_overrides[get_jugada_service] = lambda: service
    app.dependency_overrides[get_ip_guard] = lambda: IpGuard(bancas=bancas)
    return service


class TestHealthAndEnvelope:
    async def test_health(self, client: AsyncClient) -> None:
        resp = await client.get("/health")
        assert resp.status_code == 200
        assert resp.json()["status"] == "ok"

    async def test_unknown_route_uses_error_envelope(self, client: AsyncClient) -> None:
        resp = await client.get("/no-such-route")
        assert resp.status_code == 404
        assert "error" in resp.json()

    async def test_request_id_echoed(self, client: AsyncClient) -> None:
        resp = await client.get("/health", headers={"X-Request-ID": "trace-1"})
        assert resp.headers["X-Request-ID"] == "trace-1"


class TestAuthOrdering:
    async def test_missing_token_is_401_on_admin_route(
        self, client: AsyncClient, auth_headers
    ) -> None:
        auth_headers()  # wires overrides
        resp = await client.post("/bancas", json={"nombre": "Banca Nueva"})
        assert resp.status_code == 401
        assert resp.json() == {"error": "Token requerido"}

    async def test_invalid_token_is_401(self, client: AsyncClient, auth_headers) -> None:
        auth_headers()
        resp = await client.get("/bancas", headers={"Authorization": "Bearer nope"})
        assert resp.status_code == 401

    async def test_401_precedes_body_validation(
        self, client: AsyncClient, auth_headers
    ) -> None:
        auth_headers()
        resp = await client.post("/jugadas", json={"numeros": "not-a-list"})
        assert resp.status_code == 401

    async def test_inactive_user_is_401(self, client: AsyncClient, auth_headers) -> None:
        headers = auth_headers("admin", estado="inactivo")
        resp = await client.get("/bancas", headers=headers)
        assert resp.status_code == 401

    async def test_operador_forbidden_on_admin_route(
        self, client: AsyncClient, auth_headers
    ) -> None:
        resp = await client.post(
            "/bancas", json={"nombre": "Banca Nueva"}, headers=auth_headers("operador")
        )
        assert resp.status_code == 403

    async def test_supervisor_forbidden_on_admin_only(
        self, client: AsyncClient, auth_headers
    ) -> None:
        resp = await client.post(
            "/bancas", json={"nombre": "Banca Nueva"}, headers=auth_headers("supervisor")
        )
        assert resp.status_code == 403


class TestBancasHttp:
    async def test_duplicate_name_is_409(self, client: AsyncClient, auth_headers) -> None:
        repo = AsyncMock()
        repo.create.side_effect = BancaNameExistsError()
        app.dependency_overrides[get_banca_service] = lambda: BancaApplicationService(repo=repo)

        resp = await client.post(
            "/bancas", json={"nombre": "Banca Central"}, headers=auth_headers("admin")
        )

        assert resp.status_code == 409
        assert resp.json() == {"error": "Ya existe una banca con ese nombre"}

    async def test_validation_error_shape(self, client: AsyncClient, auth_headers) -> None:
        resp = await client.post(
            "/bancas", json={"nombre": "X", "ip_whitelist": ["bad"]}, headers=auth_headers()
        )
        assert resp.status_code == 400
        body = resp.json()
        assert body["error"] == "Validation error"
        fields = {d["field"] for d in body["details"]}
        assert "nombre" in fields

    async def test_malformed_id_is_400(self, client: AsyncClient, auth_headers) -> None:
        resp = await client.get("/bancas/not-a-uuid", headers=auth_headers("supervisor"))
        assert resp.status_code == 400


class TestJugadasHttp:
    async def test_create_returns_201(
        self, client: AsyncClient, auth_headers, jugada_stack, bancas, vendedores
    ) -> None:
        banca = bancas.add()
        vendedor = vendedores.add(bancas=[banca])

        resp = await client.post(
            "/jugadas",
            json={
                "banca_id": banca.id,
                "vendedor_id": vendedor.id,
                "draw_id": SORTEO_ID,
                "numbers": [3, 33],
            },
            headers=auth_headers("operador"),
        )

        assert resp.status_code == 201
        data = resp.json()["data"]
        assert data["estado"] == "valida"
        assert data["numeros"] == [3, 33]
        assert data["premio"] == 0

    async def test_create_against_inactive_banca_is_400(
        self, client: AsyncClient, auth_headers, jugada_stack, bancas, vendedores, jugadas
    ) -> None:
        banca = bancas.add(estado="inactiva")
        vendedor = vendedores.add(bancas=[banca])

        resp = await client.post(
            "/jugadas",
            json={
                "banca_id": banca.id,
                "vendedor_id": vendedor.id,
                "sorteo_id": SORTEO_ID,
                "numeros": [1],
            },
            headers=auth_headers("operador"),
        )

        assert resp.status_code == 400
        assert resp.json()["error"] == "La banca debe estar activa para registrar jugadas"
        assert jugadas.rows == {}

    async def test_ip_allow_list_enforced(
        self, client: AsyncClient, auth_headers, jugada_stack, bancas, vendedores, jugadas
    ) -> None:
        banca = bancas.add(ip_whitelist=["10.1.1.1"])
        vendedor = vendedores.add(bancas=[banca])
        headers = {**auth_headers("operador"), "X-Forwarded-For": "10.9.9.9"}

        resp = await client.post(
            "/jugadas",
            json={
                "banca_id": banca.id,
                "vendedor_id": vendedor.id,
                "sorteo_id": SORTEO_ID,
                "numeros": [1],
            },
            headers=headers,
        )

        assert resp.status_code == 403
        assert jugadas.rows == {}

    async def test_batch_with_inactive_banca_persists_nothing(
        self, client: AsyncClient, auth_headers, jugada_stack, bancas, vendedores, jugadas
    ) -> None:
        good, bad = bancas.add(), bancas.add(estado="inactiva")
        vendedor = vendedores.add(bancas=[good, bad])
        item = {"vendedor_id": vendedor.id, "sorteo_id": SORTEO_ID, "numeros": [8]}

        resp = await client.post(
            "/jugadas/batch",
            json={"jugadas": [{**item, "banca_id": good.id}, {**item, "banca_id": bad.id}]},
            headers=auth_headers("operador"),
        )

        assert resp.status_code == 400
        assert resp.json()["error"] == f"Banca {bad.id} no válida"
        assert jugadas.rows == {}

    async def test_batch_created(
        self, client: AsyncClient, auth_headers, jugada_stack, bancas, vendedores
    ) -> None:
        banca = bancas.add()
        vendedor = vendedores.add(bancas=[banca])
        item = {
            "banca_id": banca.id,
            "vendedor_id": vendedor.id,
            "sorteo_id": SORTEO_ID,
            "numeros": [8],
        }

        resp = await client.post(
            "/jugadas/batch", json={"jugadas": [item, item]}, headers=auth_headers("operador")
        )

        assert resp.status_code == 201
        assert len(resp.json()["data"]) == 2

    async def test_cancel_after_window_is_400(
        self, client: AsyncClient, auth_headers, jugada_stack, jugadas
    ) -> None:
        jugada = jugadas.seed(SORTEO_ID, utc_now() - timedelta(minutes=11))

        resp = await client.post(
            f"/jugadas/{jugada.id}/anular", headers=auth_headers("supervisor")
        )

        assert resp.status_code == 400
        assert resp.json() == {"error": "No se puede anular la jugada después de 10 minutos"}

    async def test_cancel_with_published_result_is_400(
        self, client: AsyncClient, auth_headers, jugada_stack, jugadas, resultados
    ) -> None:
        fecha_hora = utc_now() - timedelta(minutes=5)
        jugada = jugadas.seed(SORTEO_ID, fecha_hora)
        resultados.publish(SORTEO_ID, fecha_hora.date())

        resp = await client.post(
            f"/jugadas/{jugada.id}/anular", headers=auth_headers("admin")
        )

        assert resp.status_code == 400
        assert resp.json() == {
            "error": "No se puede anular la jugada porque el resultado ya fue publicado"
        }

    async def test_cancel_within_window(
        self, client: AsyncClient, auth_headers, jugada_stack, jugadas
    ) -> None:
        jugada = jugadas.seed(SORTEO_ID, utc_now() - timedelta(minutes=2))
        resp = await client.post(
            f"/jugadas/{jugada.id}/anular", headers=auth_headers("supervisor")
        )
        assert resp.status_code == 200
        assert resp.json()["data"]["estado"] == "anulada"

    async def test_operador_cannot_cancel(
        self, client: AsyncClient, auth_headers, jugada_stack, jugadas
    ) -> None:
        jugada = jugadas.seed(SORTEO_ID, utc_now())
        resp = await client.post(
            f"/jugadas/{jugada.id}/anular", headers=auth_headers("operador")
        )
        assert resp.status_code == 403
        assert jugadas.rows[jugada.id].estado == "valida"

    async def test_get_missing_is_404(
        self, client: AsyncClient, auth_headers, jugada_stack
    ) -> None:
        resp = await client.get(f"/jugadas/{uuid.uuid4()}", headers=auth_headers("operador"))
        assert resp.status_code == 404

    async def test_list_pagination_meta(
        self, client: AsyncClient, auth_headers, jugada_stack, jugadas
    ) -> None:
        now = utc_now()
        for i in range(45):
            jugadas.seed(SORTEO_ID, now - timedelta(minutes=i))
        for i in range(3):
            jugadas.seed(SORTEO_ID, now, estado="anulada")

        resp = await client.get(
            "/jugadas",
            params={"estado": "valida", "page": 2, "limit": 20},
            headers=auth_headers("operador"),
        )

        assert resp.status_code == 200
        body = resp.json()
        assert len(body["data"]) <= 20
        assert body["meta"]["page"] == 2
        assert body["meta"]["total"] == 45
        assert body["meta"]["totalPages"] == math.ceil(45 / 20)
        assert body["filters"] == {"estado": "valida"}

    async def test_list_rejects_numero_out_of_range(
        self, client: AsyncClient, auth_headers, jugada_stack
    ) -> None:
        resp = await client.get(
            "/jugadas", params={"numero": 100}, headers=auth_headers("operador")
        )
        assert resp.status_code == 400


class BoundedSessionPool:
    """Hands out one shared session, never more than ``size`` checkouts at once."""

    def __init__(self, session, size: int) -> None:
        self._session = session
        self._slots = asyncio.Semaphore(size)
        self.checked_out = 0
        self.peak = 0

    @asynccontextmanager
    async def checkout(self) -> AsyncIterator:
        await asyncio.wait_for(self._slots.acquire(), timeout=1)
        self.checked_out += 1
        self.peak = max(self.peak, self.checked_out)
        try:
            yield self._session
        finally:
            self.checked_out -= 1
            self._slots.release()


class TestSessionUsage:
    async def test_identity_session_closed_before_handler(
        self, client: AsyncClient, auth_headers, jugada_stack, db
    ) -> None:
        resp = await client.get("/jugadas", headers=auth_headers("operador"))
        assert resp.status_code == 200
        assert db.closed == 1

    async def test_concurrent_requests_share_a_single_connection_pool(
        self, client: AsyncClient, auth_headers, jugada_stack, db
    ) -> None:
        headers = auth_headers("operador")
        pool = BoundedSessionPool(db, size=1)

        async def _handler_session() -> AsyncIterator:
            async with pool.checkout() as session:
                yield session

        app.dependency_overrides[get_identity_session_factory] = lambda: pool.checkout
        app.dependency_overrides[get_db_session] = _handler_session

        responses = await asyncio.gather(
            *(client.get("/jugadas", headers=headers) for _ in range(3))
        )

        assert [r.status_code for r in responses] == [200, 200, 200]
        assert pool.peak == 1


class TestSecurityHeaders:
    async def test_headers_present_on_success(self, client: AsyncClient) -> None:
        resp = await client.get("/health")
        assert resp.headers["X-Content-Type-Options"] == "nosniff"
        assert resp.headers["X-Frame-Options"] == "SAMEORIGIN"
        assert "Strict-Transport-Security" in resp.headers

    async def test_headers_present_on_error_envelope(
        self, client: AsyncClient, auth_headers
    ) -> None:
        auth_headers()
        resp = await client.get("/jugadas")
        assert resp.status_code == 401
        assert resp.headers["Referrer-Policy"] == "no-referrer"
