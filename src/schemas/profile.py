"""Profile Pydantic schemas for API request/response models."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class ProfileBase(BaseModel):
    """Base profile fields shared across schemas."""

    full_name: str = Field(max_length=255, description="User display name")
    email: str = Field(max_length=255, description="University email address")
    university: str = Field(description="University affiliation")
    phone: str | None = Field(default=None, max_length=32, description="Optional phone number")


class ProfileUpdate(BaseModel):
    """Schema for updating a profile.

    All fields are optional for partial updates.
    """

    model_config = ConfigDict(from_attributes=True)

    full_name: str | None = Field(default=None, min_length=1, max_length=255, description="New display name")
    phone: str | None = Field(default=None, max_length=32, description="New phone number")


class ProfileResponse(ProfileBase):
    """Schema for profile API responses."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID = Field(description="Profile identifier (same as the auth user ID)")
    rating: float = Field(default=0, description="Average rating")
    total_rides: int = Field(default=0, description="Number of completed rides")
    created_at: datetime = Field(description="Profile creation timestamp")
    updated_at: datetime = Field(description="Last update timestamp")
