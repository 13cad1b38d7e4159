"""FastAPI auth dependencies.

Learn: require_user is the single gate in front of every protected
route. It is attached once per router in api/__init__.py via
include_router(..., dependencies=[Depends(require_user)]), so FastAPI
runs it before any handler on that router — a handler cannot forget it.

The guard either lets the request through with request.state.user set,
or raises AuthenticationFailure (401) before the handler body runs.
Handlers read the identity with Depends(get_current_user).
"""

from typing import Optional

import structlog
from fastapi import Depends, Header, Request
from sqlalchemy.ext.asyncio import AsyncSession

from keepmark.auth.jwt import TokenError, TokenIssuer
from keepmark.db.engine import get_db
from keepmark.db.models import User
from keepmark.errors import AuthenticationFailure, InternalInconsistency
from keepmark.services.user_service import UserService

logger = structlog.get_logger()


def get_token_issuer(request: Request) -> TokenIssuer:
    return request.app.state.token_issuer


def _bearer_token(authorization: Optional[str]) -> Optional[str]:
    """Pull the token out of an `Authorization: Bearer <token>` header."""
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


async def require_user(
    request: Request,
    authorization: Optional[str] = Header(None),
    issuer: TokenIssuer = Depends(get_token_issuer),
    db: AsyncSession = Depends(get_db),
) -> User:
    """Authenticate the request or reject it (401)."""
    token = _bearer_token(authorization)
    if token is None:
        logger.info("auth.guard_rejected", reason="missing_token", path=request.url.path)
        raise AuthenticationFailure()

    try:
        user_id = issuer.verify(token)
    except TokenError as e:
        logger.info(
            "auth.guard_rejected",
            reason=type(e).__name__,
            path=request.url.path,
        )
        raise AuthenticationFailure("Invalid or expired token")

    svc = UserService(db, issuer, bcrypt_rounds=request.app.state.settings.bcrypt_rounds)
    user = await svc.get_by_id(user_id)
    if user is None:
        logger.error("auth.user_missing", user_id=user_id)
        raise InternalInconsistency()

    request.state.user = user
    structlog.contextvars.bind_contextvars(user_id=user.id)
    return user


def get_current_user(request: Request) -> User:
    """The identity attached by require_user."""
    user = getattr(request.state, "user", None)
    if user is None:
        raise AuthenticationFailure()
    return user
