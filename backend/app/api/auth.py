"""Authentication API endpoints."""

import logging
from datetime import UTC, datetime
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import (
    claims_user_id,
    get_bearer_token,
    get_current_claims,
    get_token_issuer,
)
from app.core import get_db
from app.models.user import User
from app.schemas.auth import (
    AuthResponse,
    LoginRequest,
    MessageResponse,
    RegisterRequest,
    TokenStatusResponse,
    UserResponse,
)
from app.services.auth import AuthService, InvalidCredentialsError, UserExistsError
from app.services.token_blacklist import TokenBlacklistError, TokenBlacklistService
from app.services.tokens import TokenIssuer

logger = logging.getLogger(__name__)

LOGOUT_REASON = "User logout"

router = APIRouter(prefix="/auth", tags=["auth"])


def get_auth_service(db: AsyncSession = Depends(get_db)) -> AuthService:
    """Dependency to get auth service."""
    return AuthService(db)


def get_blacklist_service(db: AsyncSession = Depends(get_db)) -> TokenBlacklistService:
    """Dependency to get token blacklist service."""
    return TokenBlacklistService(db)


def _auth_response(user: User, issuer: TokenIssuer) -> AuthResponse:
    issued = issuer.issue(user)
    return AuthResponse(
        token=issued.token,
        user_id=user.id,
        username=user.username,
        email=user.email,
        role=user.role,
        expires_at=issued.expires_at,
    )


@router.post(
    "/register",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
)
async def register(
    request: RegisterRequest,
    auth_service: AuthService = Depends(get_auth_service),
    issuer: TokenIssuer = Depends(get_token_issuer),
) -> AuthResponse:
    """Register a new user and return a session token.

    Returns 400 if the email or username is already in use.
    """
    try:
        user = await auth_service.register(
            email=request.email,
            username=request.username,
            password=request.password,
            role=request.role,
        )
    except UserExistsError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        ) from e
    return _auth_response(user, issuer)


@router.post("/login", response_model=AuthResponse)
async def login(
    request: LoginRequest,
    auth_service: AuthService = Depends(get_auth_service),
    issuer: TokenIssuer = Depends(get_token_issuer),
) -> AuthResponse:
    """Authenticate and get a session token."""
    try:
        user = await auth_service.authenticate(
            username=request.username,
            password=request.password,
        )
    except InvalidCredentialsError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid username or password",
        ) from e

    logger.info(f"User logged in: {user.username}")
    return _auth_response(user, issuer)


@router.post("/logout", response_model=MessageResponse)
async def logout(
    token: str = Depends(get_bearer_token),
    claims: dict[str, Any] = Depends(get_current_claims),
    blacklist: TokenBlacklistService = Depends(get_blacklist_service),
) -> MessageResponse:
    """Log out by blacklisting the presented token until it expires.

    Any later request carrying the same token is rejected with 401.
    """
    try:
        await blacklist.revoke(token, claims_user_id(claims), reason=LOGOUT_REASON)
    except TokenBlacklistError as e:
        logger.error(f"Logout failed for user {claims.get('username')}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="An error occurred during logout",
        ) from e

    logger.info(f"User logged out: {claims.get('username')}")
    return MessageResponse(message="Logged out successfully")


@router.get("/token-status", response_model=TokenStatusResponse)
async def token_status(
    token: str = Depends(get_bearer_token),
    claims: dict[str, Any] = Depends(get_current_claims),
    blacklist: TokenBlacklistService = Depends(get_blacklist_service),
) -> TokenStatusResponse:
    """Report whether the presented token is blacklisted, with its identity claims."""
    is_blacklisted = await blacklist.is_revoked(token)
    return TokenStatusResponse(
        is_valid=not is_blacklisted,
        is_blacklisted=is_blacklisted,
        user_id=claims.get("sub"),
        username=claims.get("username"),
        email=claims.get("email"),
        role=claims.get("role"),
        checked_at=datetime.now(UTC),
    )


@router.get("/profile", response_model=UserResponse)
async def profile(
    claims: dict[str, Any] = Depends(get_current_claims),
    auth_service: AuthService = Depends(get_auth_service),
) -> UserResponse:
    """Get the current user's profile."""
    user = await auth_service.get_user_by_id(claims_user_id(claims))
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found",
        )
    return UserResponse.model_validate(user)
