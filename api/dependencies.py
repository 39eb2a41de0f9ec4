"""
FastAPI dependencies (shared across routes).
"""

from __future__ import annotations

import logging
from typing import Any, AsyncGenerator, Dict, Optional

from fastapi import Depends, Header, Request
from sqlalchemy.ext.asyncio import AsyncSession

from api.errors import InvalidToken, Unauthorized
from auth.tokens import InvalidTokenError, TokenService
from config.settings import Settings
from database.session import get_db_session
from database.users import UserStore

logger = logging.getLogger(__name__)

_BEARER_PREFIX = "Bearer "


async def db_session(session: AsyncSession = Depends(get_db_session)) -> AsyncGenerator[AsyncSession, None]:
    """Re-export so routes import from a single place."""
    yield session


def app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_token_service(request: Request) -> TokenService:
    return request.app.state.token_service


def get_user_store(session: AsyncSession = Depends(db_session)) -> UserStore:
    return UserStore(session)


def _extract_token(authorization: Optional[str]) -> str:
    if not authorization:
        return ""
    if authorization.startswith(_BEARER_PREFIX):
        return authorization[len(_BEARER_PREFIX):].strip()
    return authorization.strip()


async def get_current_claims(
    request: Request,
    authorization: Optional[str] = Header(None, alias="Authorization"),
    tokens: TokenService = Depends(get_token_service),
) -> Dict[str, Any]:
    """
    Gate for protected routes.

    No token → 401, bad signature / expired → 400, otherwise the verified
    claims are stored on ``request.state.claims`` and returned.
    """
    token = _extract_token(authorization)
    if not token:
        raise Unauthorized()
    try:
        claims = tokens.verify(token)
    except InvalidTokenError as exc:
        logger.warning("Rejected token on %s %s: %s", request.method, request.url.path, exc)
        raise InvalidToken() from exc
    request.state.claims = claims
    return claims
