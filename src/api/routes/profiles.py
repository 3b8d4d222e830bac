"""Profile API routes."""

from fastapi import APIRouter, HTTPException, status

from src.api.deps import CurrentUser, ProfileServiceDep, UserSupabaseClient
from src.schemas.profile import ProfileResponse, ProfileUpdate

router = APIRouter(prefix="/profiles", tags=["profiles"])


@router.get(
    "/me",
    response_model=ProfileResponse,
    summary="Get current user's profile",
    description="Returns the authenticated user's profile, creating it on first access.",
)
async def get_my_profile(
    user: CurrentUser,
    service: ProfileServiceDep,
    db: UserSupabaseClient,
) -> ProfileResponse:
    """Get the authenticated user's profile.

    Args:
        user: The authenticated user context.
        service: Profile service.
        db: Database client acting as the caller.

    Returns:
        ProfileResponse: The user's profile data.
    """
    profile = await service.ensure_profile(user, client=db)
    return ProfileResponse(**profile)


@router.put(
    "/me",
    response_model=ProfileResponse,
    summary="Update current user's profile",
    description="Updates the authenticated user's name or phone number.",
)
async def update_my_profile(
    data: ProfileUpdate,
    user: CurrentUser,
    service: ProfileServiceDep,
    db: UserSupabaseClient,
) -> ProfileResponse:
    """Update the authenticated user's profile.

    Args:
        data: Fields to update.
        user: The authenticated user context.
        service: Profile service.
        db: Database client acting as the caller.

    Returns:
        ProfileResponse: The updated profile data.

    Raises:
        HTTPException: 404 if profile not found.
    """
    await service.ensure_profile(user, client=db)
    profile = await service.update_profile(user.user_id, data, client=db)

    if not profile:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Profile not found",
        )

    return ProfileResponse(**profile)
