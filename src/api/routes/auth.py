"""Authentication API routes."""

from fastapi import APIRouter, status

from src.api.deps import AuthServiceDep, BearerToken, CurrentUser, OptionalBearerToken, OptionalUser
from src.schemas.auth import (
    LoginRequest,
    LoginResponse,
    LogoutRequest,
    LogoutResponse,
    SessionResponse,
    SignupRequest,
    SignupResponse,
)

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post(
    "/signup",
    response_model=SignupResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Sign up new user",
    description="Create an account with an official university email address.",
)
async def signup(data: SignupRequest, service: AuthServiceDep) -> SignupResponse:
    """Sign up a new user.

    Non-university addresses are rejected with 422 before the auth
    provider is contacted. Provider errors come back as 400 with the
    provider's message.

    Args:
        data: Signup request with email, password and full name.
        service: Auth service.

    Returns:
        SignupResponse: User ID, email, and confirmation email status.
    """
    result = await service.sign_up(
        email=data.email,
        password=data.password,
        full_name=data.full_name,
    )
    return SignupResponse(**result)


@router.post(
    "/login",
    response_model=LoginResponse,
    summary="Log in",
    description="Log in with email and password. The user's profile is created on first login.",
)
async def login(data: LoginRequest, service: AuthServiceDep) -> LoginResponse:
    """Log in with email and password.

    Args:
        data: Login credentials.
        service: Auth service.

    Returns:
        LoginResponse: Tokens and the user's profile.
    """
    result = await service.sign_in(email=data.email, password=data.password)
    return LoginResponse(**result)


@router.post(
    "/logout",
    response_model=LogoutResponse,
    summary="Log out",
    description="End the caller's session with the auth provider.",
)
async def logout(
    user: CurrentUser,
    token: BearerToken,
    service: AuthServiceDep,
    data: LogoutRequest | None = None,
) -> LogoutResponse:
    """Log out the authenticated user.

    Args:
        user: The authenticated user context.
        token: The caller's access token.
        service: Auth service.
        data: Optional refresh token of the session.

    Returns:
        LogoutResponse: Confirmation message.
    """
    result = await service.sign_out(token, data.refresh_token if data else None)
    return LogoutResponse(**result)


@router.get(
    "/session",
    response_model=SessionResponse,
    summary="Current session",
    description="Returns the caller's identity and profile, or an anonymous session.",
)
async def get_session(
    user: OptionalUser,
    token: OptionalBearerToken,
    service: AuthServiceDep,
) -> SessionResponse:
    """Return the current session.

    A profile that cannot be resolved is reported as null rather than
    failing the request.

    Args:
        user: The authenticated user context, if any.
        token: The caller's access token, if any.
        service: Auth service.

    Returns:
        SessionResponse: Identity and profile.
    """
    result = await service.get_session(user, token)
    return SessionResponse(
        authenticated=user is not None,
        user=result["user"],
        profile=result["profile"],
    )
