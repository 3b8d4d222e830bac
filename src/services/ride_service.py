"""Ride directory business logic service."""

import logging
from datetime import date, datetime, timezone
from typing import Any
from uuid import UUID

from postgrest.exceptions import APIError as PostgrestAPIError
from supabase import Client

from src.api.middleware.error_handler import StoreError
from src.models.ride import RideInsert, RideRequestInsert
from src.schemas.ride import PREFERENCE_SUGGESTIONS, RideCreate

logger = logging.getLogger(__name__)

# Ride columns plus the driver's profile embedded under "driver"
RIDE_SELECT = "*, driver:profiles(*)"

# (from_location, to_location, departure_date) a ride list was fetched with
RideFilters = tuple[str | None, str | None, date | None]


def utc_today() -> date:
    """Current date in UTC, the cut-off for upcoming rides."""
    return datetime.now(timezone.utc).date()


def sort_by_departure(rides: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Stable ascending sort on (departure_date, departure_time).

    Both columns arrive as ISO strings, so string order is
    chronological order.
    """
    return sorted(rides, key=lambda ride: (str(ride["departure_date"]), str(ride["departure_time"])))


class RideService:
    """Service for listing, searching and posting rides.

    One instance is shared by the whole application. It holds the most
    recently fetched ride list together with the filters it was fetched
    with. A failed read returns that list only when it answers the same
    filters; otherwise it returns no rides.
    """

    def __init__(self, client: Client) -> None:
        """Initialize ride service.

        Args:
            client: Supabase client used for public reads.
        """
        self.client = client
        self.rides: list[dict[str, Any]] = []
        self.rides_filters: RideFilters = (None, None, None)

    def _upcoming_query(self) -> Any:
        return (
            self.client.table("rides")
            .select(RIDE_SELECT)
            .eq("status", "active")
            .gte("departure_date", utc_today().isoformat())
        )

    def _fetch(self, query: Any) -> list[dict[str, Any]]:
        response = (
            query.order("departure_date")
            .order("departure_time")
            .execute()
        )
        return sort_by_departure(response.data or [])

    async def list_active_upcoming(self) -> list[dict[str, Any]]:
        """List active rides departing today or later, soonest first.

        Returns:
            list[dict]: Rides with their driver embedded. On failure the
            held list is returned if it is an unfiltered listing.
        """
        return await self.search()

    async def search(
        self,
        from_location: str | None = None,
        to_location: str | None = None,
        departure_date: date | None = None,
    ) -> list[dict[str, Any]]:
        """Search active upcoming rides.

        Locations match case-insensitively anywhere in the column; the
        date must match exactly. Omitted filters are ignored.

        Args:
            from_location: Substring of the pickup location.
            to_location: Substring of the destination.
            departure_date: Exact departure date.

        Returns:
            list[dict]: Matching rides, soonest first. On failure the held
            list is returned if it was fetched with the same filters,
            otherwise an empty list.
        """
        filters: RideFilters = (from_location or None, to_location or None, departure_date)

        try:
            query = self._upcoming_query()
            if from_location:
                query = query.ilike("from_location", f"%{from_location}%")
            if to_location:
                query = query.ilike("to_location", f"%{to_location}%")
            if departure_date:
                query = query.eq("departure_date", departure_date.isoformat())

            self.rides = self._fetch(query)
            self.rides_filters = filters
        except Exception as e:
            logger.error("Error fetching rides %s: %s", filters, e)
            if filters != self.rides_filters:
                return []

        return self.rides

    async def get_ride(self, ride_id: UUID) -> dict[str, Any] | None:
        """Get a ride with its driver by ID.

        Args:
            ride_id: The ride's UUID.

        Returns:
            dict | None: The ride data or None if not found.
        """
        response = (
            self.client.table("rides")
            .select(RIDE_SELECT)
            .eq("id", str(ride_id))
            .execute()
        )

        return response.data[0] if response.data else None

    async def create_ride(
        self,
        data: RideCreate,
        driver_id: UUID,
        client: Client | None = None,
    ) -> dict[str, Any]:
        """Post a new ride owned by the driver.

        Seat and price values are stored as given.

        Args:
            data: Ride details.
            driver_id: Profile ID of the driver.
            client: Client acting as the driver, so the insert passes the
                driver-only policy on rides. Defaults to the shared client.

        Returns:
            dict: The stored ride with its driver embedded.

        Raises:
            StoreError: If the database rejects the insert or returns no row.
        """
        db = client or self.client
        ride_data: RideInsert = {
            "driver_id": str(driver_id),
            "from_location": data.from_location,
            "to_location": data.to_location,
            "departure_date": data.departure_date.isoformat(),
            "departure_time": data.departure_time.isoformat(),
            "available_seats": data.available_seats,
            "total_seats": data.total_seats,
            "price_per_person": data.price_per_person,
            "preferences": data.preferences,
            "additional_notes": data.additional_notes,
        }
        logger.info("Creating ride for driver %s", driver_id)

        try:
            response = db.table("rides").insert(ride_data).execute()
            if not response.data:
                raise StoreError("Ride was not returned after insert")
            created = response.data[0]
            ride = await self.get_ride(created["id"]) or created
        except PostgrestAPIError as e:
            logger.error("Error creating ride: %s", e.message)
            raise StoreError(e.message or str(e), code=e.code) from e

        await self.list_active_upcoming()
        return ride

    async def request_to_join(
        self,
        ride_id: UUID,
        passenger_id: UUID,
        message: str = "",
        client: Client | None = None,
    ) -> dict[str, Any]:
        """Record a passenger's request to join a ride.

        Seats are not checked or decremented, duplicate pending requests
        are not rejected, and the ride's status is not checked.

        Args:
            ride_id: The requested ride.
            passenger_id: Profile ID of the passenger.
            message: Optional note to the driver.
            client: Client acting as the passenger. Defaults to the shared client.

        Returns:
            dict: The created request.

        Raises:
            StoreError: If the database rejects the insert or returns no row.
        """
        db = client or self.client
        request_data: RideRequestInsert = {
            "ride_id": str(ride_id),
            "passenger_id": str(passenger_id),
            "status": "pending",
            "message": message,
        }

        try:
            response = db.table("ride_requests").insert(request_data).execute()
        except PostgrestAPIError as e:
            logger.error("Error requesting ride %s: %s", ride_id, e.message)
            raise StoreError(e.message or str(e), code=e.code) from e

        if not response.data:
            raise StoreError("Ride request was not returned after insert")

        logger.info("Passenger %s requested ride %s", passenger_id, ride_id)
        return response.data[0]

    @staticmethod
    def preference_suggestions() -> list[str]:
        """Preference tags offered when posting a ride."""
        return list(PREFERENCE_SUGGESTIONS)
