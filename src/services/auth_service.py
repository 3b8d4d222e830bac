"""Authentication business logic service."""

import logging
import re
from typing import Any

from supabase import Client

from src.api.middleware.error_handler import AuthProviderError, ValidationError
from src.core.supabase import scope_to_user
from src.schemas.auth import UserContext
from src.services.profile_service import ProfileService

logger = logging.getLogger(__name__)

# Only official university addresses may sign up
UNIVERSITY_EMAIL_PATTERN = re.compile(r"^[^@]+@(iqra\.edu\.pk|student\.iqra\.edu\.pk)$")
UNIVERSITY_EMAIL_MESSAGE = (
    "Please use your official Iqra University email address "
    "(@iqra.edu.pk or @student.iqra.edu.pk)"
)


def is_university_email(email: str) -> bool:
    """Check whether an address belongs to an allowed university domain."""
    return UNIVERSITY_EMAIL_PATTERN.fullmatch(email) is not None


def _user_context(user: Any) -> UserContext:
    metadata = getattr(user, "user_metadata", None) or {}
    return UserContext(
        user_id=user.id,
        email=user.email,
        role=getattr(user, "role", None),
        full_name=metadata.get("full_name"),
    )


class AuthService:
    """Service for signing users up, in and out.

    Wraps an isolated auth client. For as long as the service lives it
    listens to the client's auth-state changes, tracking the signed-in
    user and dropping the cached profile on sign-out.
    """

    def __init__(self, client: Client, profile_service: ProfileService, redirect_url: str | None = None) -> None:
        """Initialize auth service.

        Args:
            client: Isolated Supabase client from create_auth_client().
            profile_service: Service used to provision profiles.
            redirect_url: Where confirmation emails should send the user.
        """
        self.client = client
        self.profile_service = profile_service
        self.redirect_url = redirect_url
        self.current_user: UserContext | None = None
        self.profile: dict[str, Any] | None = None
        self._subscription = self.client.auth.on_auth_state_change(self._on_auth_state_change)

    def _on_auth_state_change(self, event: Any, session: Any) -> None:
        logger.info("Auth event: %s", event)
        if session is not None and session.user is not None:
            user = _user_context(session.user)
            if self.current_user is None or self.current_user.user_id != user.user_id:
                self.profile = None
            self.current_user = user
        else:
            self.current_user = None
            self.profile = None

    def close(self) -> None:
        """Stop listening to auth-state changes."""
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None

    async def get_session(self, user: UserContext | None, access_token: str | None = None) -> dict[str, Any]:
        """Return the current identity and its profile.

        Args:
            user: Identity verified from the request's bearer token, if any.
            access_token: That bearer token, used to act as the user when
                the profile has to be created.

        Returns:
            dict: ``user`` and ``profile`` (either may be None).
        """
        self.current_user = user
        if user is not None and access_token:
            scope_to_user(self.client, access_token)
        self.profile = await self.profile_service.resolve_profile(user, client=self.client)
        return {"user": user, "profile": self.profile}

    async def sign_up(
        self,
        email: str,
        password: str,
        full_name: str,
    ) -> dict[str, Any]:
        """Sign up a new user with a university email address.

        Args:
            email: University email address.
            password: User's password.
            full_name: Name stored in the user's metadata.

        Returns:
            dict: Created user id, email and whether a confirmation email was sent.

        Raises:
            ValidationError: If the email is not a university address.
            AuthProviderError: If the auth provider rejects the sign-up.
        """
        if not is_university_email(email):
            raise ValidationError(UNIVERSITY_EMAIL_MESSAGE)

        options: dict[str, Any] = {"data": {"full_name": full_name}}
        if self.redirect_url:
            options["email_redirect_to"] = self.redirect_url

        try:
            response = self.client.auth.sign_up(
                {
                    "email": email,
                    "password": password,
                    "options": options,
                }
            )
        except Exception as e:
            logger.error("Signup failed: %s", e)
            raise AuthProviderError(getattr(e, "message", None) or str(e)) from e

        if not response.user:
            raise AuthProviderError("Failed to create user account")

        user = response.user
        logger.info("User signed up: %s", user.id)

        # Without email confirmation the provider signs the user in immediately
        if response.session is not None:
            scope_to_user(self.client, response.session.access_token)
            self.current_user = _user_context(user)
            self.profile = await self.profile_service.resolve_profile(self.current_user, client=self.client)

        return {
            "user_id": str(user.id),
            "email": user.email or email,
            "email_sent": response.session is None,
            "message": "Account created. Please check your email to confirm your address.",
        }

    async def sign_in(
        self,
        email: str,
        password: str,
    ) -> dict[str, Any]:
        """Sign in with email and password, then resolve the profile.

        Args:
            email: User's email address.
            password: User's password.

        Returns:
            dict: Tokens, user id, email and the resolved profile.

        Raises:
            AuthProviderError: If the provider rejects the credentials.
        """
        try:
            response = self.client.auth.sign_in_with_password(
                {
                    "email": email,
                    "password": password,
                }
            )
        except Exception as e:
            logger.error("Login failed: %s", e)
            raise AuthProviderError(getattr(e, "message", None) or str(e)) from e

        if not response.user or not response.session:
            raise AuthProviderError("Login failed: No session created")

        user = response.user
        session = response.session
        logger.info("User logged in: %s", user.id)

        scope_to_user(self.client, session.access_token)
        self.current_user = _user_context(user)
        self.profile = await self.profile_service.resolve_profile(self.current_user, client=self.client)

        return {
            "access_token": session.access_token,
            "refresh_token": session.refresh_token,
            "user_id": str(user.id),
            "email": user.email or email,
            "expires_in": session.expires_in or 3600,
            "profile": self.profile,
        }

    async def sign_out(self, access_token: str, refresh_token: str | None = None) -> dict[str, Any]:
        """Sign the session out with the provider.

        Args:
            access_token: User's access token.
            refresh_token: User's refresh token, if known.

        Returns:
            dict: Logout response.

        Raises:
            AuthProviderError: If the provider reports an error.
        """
        try:
            self.client.auth.set_session(access_token, refresh_token or "")
            self.client.auth.sign_out()
        except Exception as e:
            logger.error("Logout failed: %s", e)
            raise AuthProviderError(getattr(e, "message", None) or str(e)) from e

        self.current_user = None
        self.profile = None
        logger.info("User logged out")

        return {"message": "Logged out successfully"}
