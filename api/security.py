import hmac
import os

from dotenv import load_dotenv
from fastapi import Header, HTTPException, Request, Security, status
from fastapi.security import APIKeyHeader

from settings import Settings


load_dotenv()

API_KEY_HEADER = os.getenv("API_KEY_HEADER", "X-API-Key")
api_key_header = APIKeyHeader(name=API_KEY_HEADER, auto_error=False)

PUBLIC_PATHS = {
    "/health",
    "/docs",
    "/redoc",
    "/openapi.json",
}


def verify_api_access(
    request: Request,
    provided_key: str | None = Security(api_key_header),
) -> None:
    path = request.url.path
    if path in PUBLIC_PATHS:
        return

    settings: Settings = request.app.state.settings

    client_ip = request.client.host if request.client else None
    if settings.allowed_ips and client_ip not in settings.allowed_ips:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Access denied from this IP address.",
        )

    # Open access when no service key is configured (local development).
    if not settings.service_api_key:
        return

    if not provided_key or not hmac.compare_digest(provided_key, settings.service_api_key):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or missing API key.",
        )


def get_user_id(x_user_id: str | None = Header(default=None, alias="X-User-Id")) -> str | None:
    user_id = (x_user_id or "").strip()
    return user_id or None
