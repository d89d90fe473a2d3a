import secrets

from fastapi import Depends, Header, Request

from tradedocs.api.services import Services
from tradedocs.processor.exceptions import UnauthorizedError

_BEARER = "bearer "


def get_services(request: Request) -> Services:
    return request.app.state.services


def get_identity(
    authorization: str | None = Header(default=None),
    services: Services = Depends(get_services),
) -> bool:
    """Boolean admin identity from a bearer token. No configured token means no admin."""
    expected = services.settings.admin_api_token
    if not expected or not authorization:
        return False
    if not authorization.lower().startswith(_BEARER):
        return False
    presented = authorization[len(_BEARER):].strip()
    return secrets.compare_digest(presented.encode("utf-8"), expected.encode("utf-8"))


def require_admin(is_admin: bool = Depends(get_identity)) -> None:
    if not is_admin:
        raise UnauthorizedError("Admin credentials required")
