"""Ride Pydantic schemas for API request/response models."""

from datetime import date, datetime, time
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, model_validator

from src.models.ride import RideRequestStatus, RideStatus
from src.schemas.profile import ProfileResponse

# Tags offered by the create form. Free-form strings are accepted too.
PREFERENCE_SUGGESTIONS: list[str] = [
    "No Smoking",
    "Music OK",
    "Quiet Ride",
    "Pets OK",
    "Conversation Welcome",
    "No Pets",
]


class RideCreate(BaseModel):
    """Schema for posting a new ride.

    Seat and price bounds mirror the input widgets; the available/total
    relation is not checked here.
    """

    model_config = ConfigDict(from_attributes=True)

    from_location: str = Field(..., min_length=1, max_length=255, description="Pickup location")
    to_location: str = Field(..., min_length=1, max_length=255, description="Destination")
    departure_date: date = Field(..., description="Departure date")
    departure_time: time = Field(..., description="Departure time")
    available_seats: int = Field(default=1, ge=1, le=4, description="Seats offered")
    total_seats: int | None = Field(default=None, ge=1, le=4, description="Seats in the car (defaults to available_seats)")
    price_per_person: float = Field(default=0, ge=0, description="Price per passenger")
    preferences: list[str] = Field(default_factory=list, description="Preference tags")
    additional_notes: str = Field(default="", max_length=1000, description="Free-text notes")

    @model_validator(mode="after")
    def default_total_seats(self) -> "RideCreate":
        """Use available_seats as total_seats when not given."""
        if self.total_seats is None:
            self.total_seats = self.available_seats
        return self


class DriverSummary(ProfileResponse):
    """Driver profile embedded in a ride response."""


class RideResponse(BaseModel):
    """Schema for ride API responses."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID = Field(description="Ride unique identifier")
    driver_id: UUID = Field(description="Profile ID of the driver")
    from_location: str = Field(description="Pickup location")
    to_location: str = Field(description="Destination")
    departure_date: date = Field(description="Departure date")
    departure_time: time = Field(description="Departure time")
    available_seats: int = Field(description="Seats still offered")
    total_seats: int = Field(description="Seats in the car")
    price_per_person: float = Field(description="Price per passenger")
    preferences: list[str] = Field(default_factory=list, description="Preference tags")
    additional_notes: str | None = Field(default="", description="Free-text notes")
    status: RideStatus = Field(description="Lifecycle status")
    created_at: datetime = Field(description="Creation timestamp")
    updated_at: datetime = Field(description="Last update timestamp")
    driver: DriverSummary | None = Field(default=None, description="Driver profile")


class RideRequestCreate(BaseModel):
    """Schema for asking to join a ride."""

    model_config = ConfigDict(from_attributes=True)

    message: str = Field(default="", max_length=1000, description="Optional note to the driver")


class RideRequestResponse(BaseModel):
    """Schema for ride request API responses."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID = Field(description="Request unique identifier")
    ride_id: UUID = Field(description="Requested ride")
    passenger_id: UUID = Field(description="Profile ID of the passenger")
    status: RideRequestStatus = Field(description="Request status")
    message: str | None = Field(default="", description="Note to the driver")
    created_at: datetime = Field(description="Creation timestamp")


class PreferenceSuggestions(BaseModel):
    """Suggested preference tags for the create form."""

    preferences: list[str] = Field(description="Suggested tags")
