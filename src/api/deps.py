"""FastAPI dependency injection functions."""

from collections.abc import Iterator
from typing import Annotated

from fastapi import Depends, Header, HTTPException, Request, status
from supabase import Client

from src.api.middleware.auth import AuthError, AuthErrorCode, decode_jwt
from src.core.config import get_settings
from src.core.supabase import create_auth_client, create_user_client
from src.schemas.auth import UserContext
from src.services.auth_service import AuthService
from src.services.profile_service import ProfileService
from src.services.ride_service import RideService


def _bearer_token(authorization: str) -> str:
    if not authorization:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authorization header required",
            headers={"WWW-Authenticate": "Bearer"},
        )

    parts = authorization.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authorization header format. Expected: Bearer <token>",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return parts[1]


async def get_bearer_token(
    authorization: Annotated[str, Header(description="Bearer token")] = "",
) -> str:
    """Return the raw access token from the Authorization header."""
    return _bearer_token(authorization)


async def get_optional_bearer_token(
    authorization: Annotated[str | None, Header()] = None,
) -> str | None:
    """Return the raw access token if an Authorization header is present."""
    if not authorization:
        return None

    return _bearer_token(authorization)


async def get_current_user(
    authorization: Annotated[str, Header(description="Bearer token")] = "",
) -> UserContext:
    """Extract and validate the current user from the Authorization header.

    This dependency requires a valid JWT token in the Authorization header.
    Use this for endpoints that require authentication.

    Args:
        authorization: The Authorization header value (Bearer token).

    Returns:
        UserContext: The authenticated user's context.

    Raises:
        HTTPException: 401 if token is missing, invalid, or expired.
    """
    token = _bearer_token(authorization)

    try:
        payload = decode_jwt(token)
        return payload.to_user_context()

    except AuthError as e:
        if e.code == AuthErrorCode.TOKEN_EXPIRED:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Token has expired",
                headers={"WWW-Authenticate": "Bearer"},
            ) from e

        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=e.message,
            headers={"WWW-Authenticate": "Bearer"},
        ) from e

    except ValueError as e:
        # sub claim that is not a UUID
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token subject",
            headers={"WWW-Authenticate": "Bearer"},
        ) from e


async def get_optional_user(
    authorization: Annotated[str | None, Header()] = None,
) -> UserContext | None:
    """Extract the current user if an Authorization header is present.

    Returns None if no token is provided. A token that is present but
    invalid still raises 401.

    Args:
        authorization: Optional Authorization header value.

    Returns:
        UserContext | None: The user context if authenticated, None otherwise.
    """
    if not authorization:
        return None

    return await get_current_user(authorization)


def get_supabase(request: Request) -> Client:
    """Database client built by the application lifespan."""
    return request.app.state.supabase


def get_user_supabase(token: Annotated[str, Depends(get_bearer_token)]) -> Client:
    """Per-request database client acting as the caller.

    Its database calls carry the caller's access token, so row-level
    security checks ownership against the caller.
    """
    return create_user_client(token)


def get_profile_service(request: Request) -> ProfileService:
    """Application-scoped profile service."""
    return request.app.state.profile_service


def get_ride_service(request: Request) -> RideService:
    """Application-scoped ride directory."""
    return request.app.state.ride_service


def get_auth_service(
    profile_service: Annotated[ProfileService, Depends(get_profile_service)],
) -> Iterator[AuthService]:
    """Per-request auth service on an isolated auth client."""
    service = AuthService(
        create_auth_client(),
        profile_service,
        redirect_url=get_settings().auth_redirect_url,
    )
    try:
        yield service
    finally:
        service.close()


# Type aliases for cleaner dependency injection
CurrentUser = Annotated[UserContext, Depends(get_current_user)]
OptionalUser = Annotated[UserContext | None, Depends(get_optional_user)]
BearerToken = Annotated[str, Depends(get_bearer_token)]
OptionalBearerToken = Annotated[str | None, Depends(get_optional_bearer_token)]
SupabaseClient = Annotated[Client, Depends(get_supabase)]
UserSupabaseClient = Annotated[Client, Depends(get_user_supabase)]
ProfileServiceDep = Annotated[ProfileService, Depends(get_profile_service)]
RideServiceDep = Annotated[RideService, Depends(get_ride_service)]
AuthServiceDep = Annotated[AuthService, Depends(get_auth_service)]
