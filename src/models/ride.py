"""Ride and ride request type definitions for database operations."""

from datetime import date, datetime, time
from typing import Literal, TypedDict
from uuid import UUID

from src.models.profile import Profile

# Status values matching the database columns
RideStatus = Literal["active", "completed", "cancelled"]
RideRequestStatus = Literal["pending", "accepted", "rejected"]


class Ride(TypedDict, total=False):
    """Rides table row representation.

    When selected with the driver embedded, the row also carries
    a ``driver`` key holding the driver's profile.
    """

    id: UUID
    driver_id: UUID
    from_location: str
    to_location: str
    departure_date: date
    departure_time: time
    available_seats: int
    total_seats: int
    price_per_person: float
    preferences: list[str]
    additional_notes: str
    status: RideStatus
    created_at: datetime
    updated_at: datetime
    driver: Profile | None


class RideInsert(TypedDict):
    """Data inserted when a driver posts a ride."""

    driver_id: str
    from_location: str
    to_location: str
    departure_date: str
    departure_time: str
    available_seats: int
    total_seats: int
    price_per_person: float
    preferences: list[str]
    additional_notes: str


class RideRequest(TypedDict):
    """Ride_requests table row representation.

    Status is written once at creation; nothing in this service
    moves a request past ``pending``.
    """

    id: UUID
    ride_id: UUID
    passenger_id: UUID
    status: RideRequestStatus
    message: str
    created_at: datetime


class RideRequestInsert(TypedDict):
    """Data inserted when a passenger asks to join a ride."""

    ride_id: str
    passenger_id: str
    status: RideRequestStatus
    message: str
