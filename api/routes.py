"""
REST API routes — register, login, list and delete users.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Query, status
from fastapi.concurrency import run_in_threadpool
from sqlalchemy.exc import SQLAlchemyError

from api.dependencies import app_settings, get_current_claims, get_token_service, get_user_store
from api.errors import Conflict, InternalError, InvalidCredentials, NotFound, ValidationFailed
from auth.password import hash_password, verify_password
from auth.tokens import TokenService
from config.settings import Settings
from database.users import DuplicateEmailError, UserStore
from utils.schemas import (
    ErrorResponse,
    LoginRequest,
    MessageResponse,
    RegisterRequest,
    TokenResponse,
    UserOut,
)
from utils.validators import parse_pagination, validate_registration

logger = logging.getLogger(__name__)

router = APIRouter()

_AUTH_ERRORS = {
    401: {"model": ErrorResponse, "description": "No token supplied"},
    400: {"model": ErrorResponse, "description": "Invalid or expired token"},
}


# ── Auth ───────────────────────────────────────────────────────────────


@router.post(
    "/register",
    response_model=UserOut,
    status_code=status.HTTP_201_CREATED,
    tags=["Auth"],
    summary="Register a new user",
    responses={400: {"model": ErrorResponse, "description": "Invalid payload or email taken"}},
)
async def register(
    req: RegisterRequest,
    store: UserStore = Depends(get_user_store),
    settings: Settings = Depends(app_settings),
) -> Any:
    errors = validate_registration(req.model_dump())
    if errors:
        raise ValidationFailed(errors)

    password_hash = await run_in_threadpool(hash_password, req.password, settings.bcrypt_rounds)
    try:
        user = await store.create(req.name, req.email, password_hash)
    except DuplicateEmailError:
        logger.info("Registration refused, email taken: %s", req.email)
        raise Conflict("Email already exists")
    return user


@router.post(
    "/login",
    response_model=TokenResponse,
    tags=["Auth"],
    summary="Login a user",
    responses={
        404: {"model": ErrorResponse, "description": "Unknown email"},
        400: {"model": ErrorResponse, "description": "Wrong password"},
    },
)
async def login(
    req: LoginRequest,
    store: UserStore = Depends(get_user_store),
    tokens: TokenService = Depends(get_token_service),
) -> Dict[str, str]:
    user = await store.find_by_email(req.email)
    if user is None:
        raise NotFound("User not found")

    valid = await run_in_threadpool(verify_password, req.password, user.password_hash)
    if not valid:
        logger.info("Login failed for user %s: bad password", user.id)
        raise InvalidCredentials()

    logger.info("Login: %s (%s)", user.name, user.id)
    return {"token": tokens.issue_for(user)}


# ── Users ──────────────────────────────────────────────────────────────


@router.get(
    "/users",
    response_model=List[UserOut],
    tags=["User"],
    summary="Retrieve a list of users with pagination",
    responses=_AUTH_ERRORS,
)
async def list_users(
    page: Optional[str] = Query(None, description="The page number (default 1)"),
    limit: Optional[str] = Query(None, description="The number of users per page"),
    name: Optional[str] = Query(None, description="Filter by name"),
    claims: Dict[str, Any] = Depends(get_current_claims),
    store: UserStore = Depends(get_user_store),
    settings: Settings = Depends(app_settings),
) -> Any:
    page_no, page_size = parse_pagination(
        page, limit,
        default_limit=settings.default_page_size,
        max_limit=settings.max_page_size,
    )
    return await store.list(name_pattern=name, page=page_no, limit=page_size)


@router.delete(
    "/users/{user_id}",
    response_model=MessageResponse,
    tags=["User"],
    summary="Delete a user by ID",
    responses={
        **_AUTH_ERRORS,
        404: {"model": ErrorResponse, "description": "User not found"},
        500: {"model": ErrorResponse, "description": "Store failure"},
    },
)
async def delete_user(
    user_id: int,
    claims: Dict[str, Any] = Depends(get_current_claims),
    store: UserStore = Depends(get_user_store),
) -> Dict[str, str]:
    try:
        user = await store.find_by_id(user_id)
        if user is None:
            raise NotFound("User not found")
        removed = await store.delete(user_id)
    except SQLAlchemyError:
        logger.exception("Deleting user %s failed", user_id)
        raise InternalError("An error occurred while deleting the user")

    if not removed:
        # lost a race with a concurrent delete
        raise NotFound("User not found")

    logger.info("User %s deleted by %s", user_id, claims.get("id"))
    return {"message": "User deleted successfully"}
