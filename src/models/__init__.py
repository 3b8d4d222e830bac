"""Database model type definitions."""

from src.models.profile import Profile, ProfileCreate
from src.models.ride import Ride, RideInsert, RideRequest, RideRequestInsert, RideRequestStatus, RideStatus

__all__ = [
    "Profile",
    "ProfileCreate",
    "Ride",
    "RideInsert",
    "RideRequest",
    "RideRequestInsert",
    "RideRequestStatus",
    "RideStatus",
]
