"""Profile business logic service."""

import logging
from typing import Any
from uuid import UUID

from postgrest.exceptions import APIError as PostgrestAPIError
from supabase import Client

from src.api.middleware.error_handler import StoreError
from src.models.profile import ProfileCreate
from src.schemas.auth import UserContext
from src.schemas.profile import ProfileUpdate

logger = logging.getLogger(__name__)

DEFAULT_UNIVERSITY = "Iqra University"
UNKNOWN_USER_NAME = "Unknown User"


class ProfileService:
    """Service for reading and provisioning user profiles."""

    def __init__(self, client: Client, university: str = DEFAULT_UNIVERSITY) -> None:
        """Initialize profile service.

        Args:
            client: Supabase client used for database calls.
            university: University recorded on newly provisioned profiles.
        """
        self.client = client
        self.university = university

    async def get_profile(self, user_id: UUID, client: Client | None = None) -> dict[str, Any] | None:
        """Get a profile by user ID. Never creates one.

        Args:
            user_id: The auth user ID (also the profile ID).
            client: Client to query with. Defaults to the shared client.

        Returns:
            dict | None: The profile data or None if not found.
        """
        db = client or self.client
        response = (
            db.table("profiles")
            .select("*")
            .eq("id", str(user_id))
            .execute()
        )

        return response.data[0] if response.data else None

    async def ensure_profile(self, user: UserContext, client: Client | None = None) -> dict[str, Any]:
        """Make sure a profile row exists for the user and return it.

        Idempotent: the insert ignores an existing row with the same id,
        so repeated or concurrent calls leave exactly one row.

        Args:
            user: The authenticated user.
            client: Client acting as the user, so the insert passes the
                owner-only policy on profiles. Defaults to the shared client.

        Returns:
            dict: The profile data.

        Raises:
            StoreError: If the database rejects the lookup or the insert.
        """
        db = client or self.client

        try:
            profile = await self.get_profile(user.user_id, client=db)
            if profile:
                return profile

            logger.info("Profile not found for user %s, creating", user.user_id)
            profile_data: ProfileCreate = {
                "id": str(user.user_id),
                "full_name": user.full_name or UNKNOWN_USER_NAME,
                "email": user.email or "",
                "university": self.university,
            }

            response = (
                db.table("profiles")
                .upsert(profile_data, on_conflict="id", ignore_duplicates=True)
                .execute()
            )
            if response.data:
                return response.data[0]

            # Another request created the row first
            profile = await self.get_profile(user.user_id, client=db)
        except PostgrestAPIError as e:
            logger.error("Error ensuring profile for user %s: %s", user.user_id, e.message)
            raise StoreError(e.message or str(e), code=e.code) from e

        if profile is None:
            raise StoreError(f"Profile for user {user.user_id} could not be created")
        return profile

    async def resolve_profile(
        self,
        user: UserContext | None,
        client: Client | None = None,
    ) -> dict[str, Any] | None:
        """Ensure the user's profile, degrading to None on any failure.

        Args:
            user: The authenticated user, if any.
            client: Client acting as the user.

        Returns:
            dict | None: The profile data, or None when there is no user
            or the lookup/creation failed.
        """
        if user is None:
            return None

        try:
            return await self.ensure_profile(user, client=client)
        except Exception as e:
            logger.error("Error resolving profile for user %s: %s", user.user_id, e)
            return None

    async def update_profile(
        self,
        user_id: UUID,
        data: ProfileUpdate,
        client: Client | None = None,
    ) -> dict[str, Any] | None:
        """Update the owner's profile.

        Args:
            user_id: The auth user ID.
            data: The fields to update.
            client: Client acting as the owner. Defaults to the shared client.

        Returns:
            dict | None: The updated profile data or None if not found.

        Raises:
            StoreError: If the database rejects the update.
        """
        db = client or self.client
        update_data = data.model_dump(exclude_unset=True, exclude_none=True)

        if not update_data:
            return await self.get_profile(user_id, client=db)

        try:
            response = (
                db.table("profiles")
                .update(update_data)
                .eq("id", str(user_id))
                .execute()
            )
        except PostgrestAPIError as e:
            raise StoreError(e.message or str(e), code=e.code) from e

        return response.data[0] if response.data else None
