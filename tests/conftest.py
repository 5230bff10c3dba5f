"""Shared test fixtures.

Settings are read at import time, so the environment is prepared before
anything under ``src`` is imported.
"""

import os

os.environ.setdefault("SUPABASE_JWT_SECRET", "test-jwt-secret-with-enough-length-1234")
os.environ.setdefault("SUPABASE_SERVICE_ROLE_KEY", "service-role-test-key")
os.environ.setdefault("SUPABASE_ANON_KEY", "anon-test-key")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import uuid  # noqa: E402
from collections.abc import AsyncIterator, Callable  # noqa: E402
from contextlib import asynccontextmanager  # noqa: E402
from dataclasses import replace  # noqa: E402
from datetime import date, datetime, timedelta, timezone  # noqa: E402
from decimal import Decimal  # noqa: E402
from typing import Any  # noqa: E402

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from jose import jwt  # noqa: E402

from config.settings import settings  # noqa: E402
from src.lt_banca.domain.models import Banca  # noqa: E402
from src.lt_common.enums import EstadoUsuario, Role  # noqa: E402
from src.lt_gateway.auth.principal import Principal  # noqa: E402
from src.lt_gateway.user.db_models import UserModel  # noqa: E402
from src.lt_jugada.domain.models import (  # noqa: E402
    Jugada,
    JugadaFilters,
    NuevaJugada,
    Resultado,
)
from src.lt_vendedor.domain.models import Vendedor  # noqa: E402
from src.main import app  # noqa: E402

NOW = datetime(2026, 3, 14, 15, 0, tzinfo=timezone.utc)


# ---------------------------------------------------------------------------
# Session / clock
# ---------------------------------------------------------------------------


class FakeSession:
    """Stands in for AsyncSession where repositories are faked."""

    def __init__(self) -> None:
        self.transactions = 0
        self.closed = 0

    async def __aenter__(self) -> "FakeSession":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        self.closed += 1

    @asynccontextmanager
    async def begin(self) -> AsyncIterator["FakeSession"]:
        self.transactions += 1
        yield self


class FakeClock:
    def __init__(self, now: datetime = NOW) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now = self.now + timedelta(**kwargs)


# ---------------------------------------------------------------------------
# In-memory repositories
# ---------------------------------------------------------------------------


class InMemoryBancas:
    def __init__(self) -> None:
        self.rows: dict[str, Banca] = {}
        self.locked: list[str] = []

    def add(self, estado: str = "activa", ip_whitelist: list[str] | None = None) -> Banca:
        banca = Banca(
            id=str(uuid.uuid4()),
            nombre=f"Banca {len(self.rows) + 1}",
            ubicacion="Santo Domingo",
            estado=estado,
            ip_whitelist=ip_whitelist or [],
            created_at=NOW,
            updated_at=NOW,
        )
        self.rows[banca.id] = banca
        return banca

    async def get_by_id(self, db: Any, banca_id: str, lock: bool = False) -> Banca | None:
        if lock:
            self.locked.append(banca_id)
        return self.rows.get(banca_id)


class InMemoryVendedores:
    def __init__(self) -> None:
        self.rows: dict[str, Vendedor] = {}
        self.assignments: set[tuple[str, str]] = set()

    def add(self, estado: str = "activo", bancas: list[Banca] | None = None) -> Vendedor:
        n = len(self.rows) + 1
        vendedor = Vendedor(
            id=str(uuid.uuid4()),
            nombre=f"Vendedor {n}",
            cedula=f"{n:011d}",
            telefono=None,
            estado=estado,
            created_at=NOW,
            updated_at=NOW,
        )
        self.rows[vendedor.id] = vendedor
        for banca in bancas or []:
            self.assignments.add((vendedor.id, banca.id))
        return vendedor

    async def get_by_id(self, db: Any, vendedor_id: str) -> Vendedor | None:
        return self.rows.get(vendedor_id)

    async def is_assigned(self, db: Any, vendedor_id: str, banca_id: str) -> bool:
        return (vendedor_id, banca_id) in self.assignments


class InMemoryJugadas:
    def __init__(self) -> None:
        self.rows: dict[str, Jugada] = {}
        self.insert_calls = 0

    def _build(self, data: NuevaJugada, fecha_hora: datetime) -> Jugada:
        return Jugada(
            id=str(uuid.uuid4()),
            banca_id=data.banca_id,
            vendedor_id=data.vendedor_id,
            sorteo_id=data.sorteo_id,
            numeros=list(data.numeros),
            fecha_hora=fecha_hora,
            estado="valida",
            premio=Decimal("0"),
            created_at=fecha_hora,
            updated_at=fecha_hora,
        )

    def seed(self, sorteo_id: str, fecha_hora: datetime, estado: str = "valida") -> Jugada:
        jugada = self._build(
            NuevaJugada(str(uuid.uuid4()), str(uuid.uuid4()), sorteo_id, [7]), fecha_hora
        )
        jugada.estado = estado
        self.rows[jugada.id] = jugada
        return jugada

    async def insert(self, db: Any, jugada: NuevaJugada, fecha_hora: datetime) -> Jugada:
        self.insert_calls += 1
        row = self._build(jugada, fecha_hora)
        self.rows[row.id] = row
        return row

    async def insert_many(
        self, db: Any, jugadas: list[NuevaJugada], fecha_hora: datetime
    ) -> list[Jugada]:
        self.insert_calls += 1
        rows = [self._build(j, fecha_hora) for j in jugadas]
        for row in rows:
            self.rows[row.id] = row
        return rows

    async def get_by_id(self, db: Any, jugada_id: str) -> Jugada | None:
        row = self.rows.get(jugada_id)
        return replace(row) if row else None

    async def mark_cancelled(self, db: Any, jugada_id: str) -> Jugada | None:
        row = self.rows.get(jugada_id)
        if row is None or row.estado != "valida":
            return None
        row.estado = "anulada"
        return replace(row)

    def _matching(self, filters: JugadaFilters) -> list[Jugada]:
        rows = sorted(self.rows.values(), key=lambda j: j.fecha_hora, reverse=True)
        if filters.estado:
            rows = [j for j in rows if j.estado == filters.estado]
        if filters.numero is not None:
            rows = [j for j in rows if filters.numero in j.numeros]
        return rows

    async def list_jugadas(
        self, db: Any, filters: JugadaFilters, limit: int, offset: int
    ) -> list[Jugada]:
        return self._matching(filters)[offset: offset + limit]

    async def count_jugadas(self, db: Any, filters: JugadaFilters) -> int:
        return len(self._matching(filters))


class InMemoryResultados:
    def __init__(self) -> None:
        self.rows: dict[tuple[str, date], Resultado] = {}

    def publish(self, sorteo_id: str, fecha: date, publicado: bool = True) -> None:
        self.rows[(sorteo_id, fecha)] = Resultado(sorteo_id, fecha, publicado)

    async def get_for(self, db: Any, sorteo_id: str, fecha: date) -> Resultado | None:
        return self.rows.get((sorteo_id, fecha))


class InMemoryUsers:
    def __init__(self) -> None:
        self.rows: dict[str, UserModel] = {}

    def add(self, rol: str = "admin", estado: str = "activo") -> UserModel:
        user = UserModel(
            id=uuid.uuid4(),
            email=f"{rol}-{len(self.rows)}@example.com",
            nombre=f"Usuario {rol}",
            rol=rol,
            estado=estado,
        )
        self.rows[str(user.id)] = user
        return user

    async def get_by_id(self, db: Any, user_id: str) -> UserModel | None:
        return self.rows.get(user_id)

    async def create(self, db: Any, user: UserModel) -> UserModel:
        self.rows[str(user.id)] = user
        return user


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def db() -> FakeSession:
    return FakeSession()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def bancas() -> InMemoryBancas:
    return InMemoryBancas()


@pytest.fixture
def vendedores() -> InMemoryVendedores:
    return InMemoryVendedores()


@pytest.fixture
def jugadas() -> InMemoryJugadas:
    return InMemoryJugadas()


@pytest.fixture
def resultados() -> InMemoryResultados:
    return InMemoryResultados()


@pytest.fixture
def users() -> InMemoryUsers:
    return InMemoryUsers()


@pytest.fixture
def make_principal() -> Callable[..., Principal]:
    def _make(role: Role = Role.ADMIN) -> Principal:
        return Principal(
            id=str(uuid.uuid4()),
            email=f"{role.value}@example.com",
            role=role,
            estado=EstadoUsuario.ACTIVO,
        )

    return _make


@pytest.fixture
def make_token() -> Callable[..., str]:
    def _make(sub: str, expires_in: int = 3600, **claims: Any) -> str:
        payload: dict[str, Any] = {
            "sub": sub,
            "aud": settings.JWT_AUDIENCE,
            "exp": datetime.now(timezone.utc) + timedelta(seconds=expires_in),
            "role": "authenticated",
        }
        payload.update(claims)
        return jwt.encode(payload, settings.SUPABASE_JWT_SECRET, algorithm=settings.JWT_ALGORITHM)

    return _make


@pytest.fixture
async def client() -> AsyncIterator[AsyncClient]:
    """Async HTTP client for testing FastAPI endpoints."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers(
    users: InMemoryUsers, db: FakeSession, make_token: Callable[..., str]
) -> Callable[..., dict[str, str]]:
    """Wire the real identity resolver to in-memory usuarios and the fake session.

    Returns a factory: ``auth_headers("supervisor")`` -> Authorization header
    for a freshly created user with that rol.
    """
    from src.lt_common.database import get_db_session
    from src.lt_gateway.auth.dependencies import (
        get_identity_resolver,
        get_identity_session_factory,
    )
    from src.lt_gateway.auth.identity import IdentityResolver

    resolver = IdentityResolver(users=users)
    app.dependency_overrides[get_identity_resolver] = lambda: resolver
    app.dependency_overrides[get_identity_session_factory] = lambda: lambda: db
    app.dependency_overrides[get_db_session] = lambda: db

    def _headers(rol: str = "admin", estado: str = "activo") -> dict[str, str]:
        user = users.add(rol=rol, estado=estado)
        return {"Authorization": f"Bearer {make_token(str(user.id))}"}

    return _headers
