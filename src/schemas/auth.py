"""Authentication schemas for JWT tokens and user context."""

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from src.schemas.profile import ProfileResponse


class UserContext(BaseModel):
    """Authenticated user context extracted from JWT token.

    This model represents the authenticated user for the current request.
    It is populated by the auth middleware from the validated JWT.
    """

    model_config = ConfigDict(from_attributes=True)

    user_id: UUID = Field(description="Unique identifier for the user (from JWT sub claim)")
    email: str | None = Field(default=None, description="User's email address if available")
    role: str | None = Field(default=None, description="User's role (e.g., 'authenticated')")
    full_name: str | None = Field(default=None, description="Name given at sign-up (user metadata)")


class TokenPayload(BaseModel):
    """JWT token payload structure for Supabase tokens.

    Represents the claims contained in a Supabase-issued JWT.
    Used for validation and extraction of user information.
    """

    model_config = ConfigDict(from_attributes=True)

    sub: str = Field(description="Subject - the user's UUID")
    email: str | None = Field(default=None, description="User's email address")
    role: str | None = Field(default=None, description="User's role")
    exp: int = Field(description="Expiration timestamp (Unix epoch)")
    iat: int = Field(description="Issued at timestamp (Unix epoch)")
    aud: str | None = Field(default=None, description="Audience - intended recipient")
    iss: str | None = Field(default=None, description="Issuer - token issuer URL")
    user_metadata: dict[str, Any] = Field(default_factory=dict, description="Metadata supplied at sign-up")

    @property
    def expiration_datetime(self) -> datetime:
        """Get expiration as datetime object."""
        return datetime.fromtimestamp(self.exp)

    def to_user_context(self) -> UserContext:
        """Convert token payload to UserContext.

        Returns:
            UserContext: User context derived from token claims.
        """
        return UserContext(
            user_id=UUID(self.sub),
            email=self.email,
            role=self.role,
            full_name=self.user_metadata.get("full_name"),
        )


class AuthenticatedResponse(BaseModel):
    """Response for authenticated test endpoint."""

    model_config = ConfigDict(from_attributes=True)

    authenticated: bool = Field(default=True, description="Authentication status")
    user_id: str = Field(description="Authenticated user ID")
    email: str | None = Field(default=None, description="User email if available")
    role: str | None = Field(default=None, description="User role if available")


# Signup and login schemas


class SignupRequest(BaseModel):
    """Request schema for user signup."""

    model_config = ConfigDict(from_attributes=True)

    email: str = Field(..., description="University email address", min_length=3, max_length=255)
    password: str = Field(..., description="User's password", min_length=6, max_length=100)
    full_name: str = Field(..., description="User's full name", min_length=1, max_length=255)


class SignupResponse(BaseModel):
    """Response schema for user signup."""

    model_config = ConfigDict(from_attributes=True)

    user_id: str = Field(description="Newly created user ID")
    email: str = Field(description="User's email address")
    message: str = Field(description="Success message")
    email_sent: bool = Field(description="Whether a confirmation email was sent")


class LoginRequest(BaseModel):
    """Request schema for user login."""

    model_config = ConfigDict(from_attributes=True)

    email: str = Field(..., description="User's email address")
    password: str = Field(..., description="User's password")


class LoginResponse(BaseModel):
    """Response schema for user login."""

    model_config = ConfigDict(from_attributes=True)

    access_token: str = Field(description="JWT access token")
    refresh_token: str | None = Field(default=None, description="Refresh token if available")
    user_id: str = Field(description="User ID")
    email: str = Field(description="User's email address")
    expires_in: int = Field(description="Token expiration time in seconds")
    profile: ProfileResponse | None = Field(default=None, description="Resolved profile, if available")


class LogoutRequest(BaseModel):
    """Request schema for user logout."""

    model_config = ConfigDict(from_attributes=True)

    refresh_token: str | None = Field(default=None, description="Refresh token of the session to end")


class LogoutResponse(BaseModel):
    """Response schema for user logout."""

    model_config = ConfigDict(from_attributes=True)

    message: str = Field(description="Status message")


class SessionResponse(BaseModel):
    """Current session as seen by the API."""

    model_config = ConfigDict(from_attributes=True)

    authenticated: bool = Field(description="Whether a valid session was presented")
    user: UserContext | None = Field(default=None, description="Authenticated identity")
    profile: ProfileResponse | None = Field(default=None, description="Resolved profile, if available")
