from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError

from ...domain.entities import Identity, Role
from ...domain.errors import Unauthorized
from ...domain.policy import ensure_role

bearer = HTTPBearer(auto_error=False)


def get_current_user(
    request: Request,
    creds: HTTPAuthorizationCredentials | None = Depends(bearer),
) -> Identity:
    if creds is None or not creds.credentials:
        raise Unauthorized("Authorization header required")
    try:
        return request.app.state.tokens.decode_token(creds.credentials)
    except JWTError:
        raise Unauthorized("Invalid or expired token")


def require_roles(*roles: Role):
    allowed = frozenset(roles)

    def dependency(user: Identity = Depends(get_current_user)) -> Identity:
        ensure_role(user, allowed)
        return user

    return dependency


require_admin = require_roles(Role.ADMIN)
