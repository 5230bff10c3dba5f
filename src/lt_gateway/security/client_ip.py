"""Client IP extraction, reverse-proxy aware."""

from starlette.requests import Request

from config.settings import settings

_UNKNOWN_IP = "127.0.0.1"


def client_ip(request: Request) -> str:
    """First X-Forwarded-For hop when TRUST_PROXY is on, else the socket peer."""
    if settings.TRUST_PROXY:
        forwarded = request.headers.get("X-Forwarded-For")
        if forwarded:
            first = forwarded.split(",")[0].strip()
            if first:
                return first
    if request.client is not None and request.client.host:
        return request.client.host
    return _UNKNOWN_IP
