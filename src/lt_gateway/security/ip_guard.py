"""IP allow-list enforcement for wager creation, plus pluggable geolocation.

Two independent checks, run in this order:
  1. allow-list: for every referenced banca with a non-empty ip_whitelist,
     the client IP must be listed, else 403.
  2. geolocation: a GeoProviderProtocol resolves the country. The default
     NoopGeoProvider resolves nothing, so every IP passes. When a real
     provider reports a foreign country, a warning is logged, and the request
     is rejected only if GEOFENCE_ENFORCE is on.

An unknown banca id is not rejected here; the lifecycle engine reports it.
"""

import logging
from collections.abc import Iterable
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.lt_banca.domain.repository import BancaRepositoryProtocol
from src.lt_banca.infrastructure.persistence import BancaRepository
from src.lt_common.errors import GeofenceError, IpNotAllowedError

logger = logging.getLogger(__name__)


class GeoProviderProtocol(Protocol):
    async def get_country(self, ip: str) -> str | None: ...


class NoopGeoProvider:
    """Accepts all IPs: no lookup, country always unknown."""

    async def get_country(self, ip: str) -> str | None:
        logger.debug("noop geo provider, accepting ip=%s", ip)
        return None


class IpGuard:
    def __init__(
        self,
        bancas: BancaRepositoryProtocol | None = None,
        geo: GeoProviderProtocol | None = None,
    ) -> None:
        self._bancas: BancaRepositoryProtocol = bancas or BancaRepository()
        self._geo: GeoProviderProtocol = geo or NoopGeoProvider()

    async def check(self, db: AsyncSession, ip: str, banca_ids: Iterable[str]) -> None:
        for banca_id in dict.fromkeys(banca_ids):
            logger.debug("checking ip restrictions ip=%s banca=%s", ip, banca_id)
            banca = await self._bancas.get_by_id(db, banca_id)
            if banca is None or not banca.ip_whitelist:
                continue
            if ip not in banca.ip_whitelist:
                logger.warning("ip %s rejected for banca %s", ip, banca_id)
                raise IpNotAllowedError(ip)

        await self._check_geofence(ip)

    async def _check_geofence(self, ip: str) -> None:
        country = await self._geo.get_country(ip)
        if country is None or country == settings.GEOFENCE_COUNTRY:
            return
        logger.warning(
            "access from outside %s ip=%s country=%s", settings.GEOFENCE_COUNTRY, ip, country
        )
        if settings.GEOFENCE_ENFORCE:
            raise GeofenceError(country)
