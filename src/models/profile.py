"""Profile model type definitions for database operations."""

from datetime import datetime
from typing import TypedDict
from uuid import UUID


class Profile(TypedDict):
    """Profile table row representation.

    The id matches the authenticated user's id. Rows are only ever
    mutated by their owner (enforced by row-level security).
    """

    id: UUID
    full_name: str
    email: str
    university: str
    phone: str | None
    rating: float
    total_rides: int
    created_at: datetime
    updated_at: datetime


class ProfileCreate(TypedDict, total=False):
    """Data used to provision a profile for a newly seen user."""

    id: str
    full_name: str
    email: str
    university: str
