"""Ride directory API routes."""

from datetime import date
from uuid import UUID

from fastapi import APIRouter, HTTPException, Query, status

from src.api.deps import CurrentUser, RideServiceDep, UserSupabaseClient
from src.schemas.ride import (
    PreferenceSuggestions,
    RideCreate,
    RideRequestCreate,
    RideRequestResponse,
    RideResponse,
)

router = APIRouter(prefix="/rides", tags=["rides"])


@router.get(
    "",
    response_model=list[RideResponse],
    summary="Browse rides",
    description=(
        "Lists active rides departing today or later, soonest first. "
        "Optional filters narrow by origin, destination and date."
    ),
)
async def list_rides(
    service: RideServiceDep,
    from_location: str | None = Query(default=None, alias="from", description="Origin contains (case-insensitive)"),
    to_location: str | None = Query(default=None, alias="to", description="Destination contains (case-insensitive)"),
    departure_date: date | None = Query(default=None, alias="date", description="Exact departure date"),
) -> list[RideResponse]:
    """Browse or search rides.

    Args:
        service: Ride directory.
        from_location: Origin substring filter.
        to_location: Destination substring filter.
        departure_date: Exact date filter.

    Returns:
        list[RideResponse]: Matching rides with their drivers.
    """
    if from_location or to_location or departure_date:
        rides = await service.search(from_location, to_location, departure_date)
    else:
        rides = await service.list_active_upcoming()

    return [RideResponse(**ride) for ride in rides]


@router.get(
    "/preferences",
    response_model=PreferenceSuggestions,
    summary="Suggested ride preferences",
    description="Preference tags offered when posting a ride. Other tags are accepted too.",
)
async def get_preference_suggestions(service: RideServiceDep) -> PreferenceSuggestions:
    """Return the suggested preference tags."""
    return PreferenceSuggestions(preferences=service.preference_suggestions())


@router.post(
    "",
    response_model=RideResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Offer a ride",
    description="Posts a new ride with the authenticated user as driver.",
)
async def create_ride(
    data: RideCreate,
    user: CurrentUser,
    service: RideServiceDep,
    db: UserSupabaseClient,
) -> RideResponse:
    """Post a new ride.

    Args:
        data: Ride details.
        user: The authenticated user context.
        service: Ride directory.
        db: Database client acting as the caller.

    Returns:
        RideResponse: The created ride with its driver.
    """
    ride = await service.create_ride(data, driver_id=user.user_id, client=db)
    return RideResponse(**ride)


@router.get(
    "/{ride_id}",
    response_model=RideResponse,
    summary="Get ride details",
)
async def get_ride(ride_id: UUID, service: RideServiceDep) -> RideResponse:
    """Get a single ride with its driver.

    Raises:
        HTTPException: 404 if not found.
    """
    ride = await service.get_ride(ride_id)
    if not ride:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Ride not found",
        )

    return RideResponse(**ride)


@router.post(
    "/{ride_id}/requests",
    response_model=RideRequestResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Request to join a ride",
    description="Sends a join request to the ride's driver on behalf of the authenticated user.",
)
async def request_ride(
    ride_id: UUID,
    user: CurrentUser,
    service: RideServiceDep,
    db: UserSupabaseClient,
    data: RideRequestCreate | None = None,
) -> RideRequestResponse:
    """Request to join a ride.

    Args:
        ride_id: The ride to join.
        user: The authenticated user context.
        service: Ride directory.
        db: Database client acting as the caller.
        data: Optional message to the driver.

    Returns:
        RideRequestResponse: The pending request.
    """
    request = await service.request_to_join(
        ride_id,
        passenger_id=user.user_id,
        message=data.message if data else "",
        client=db,
    )
    return RideRequestResponse(**request)
