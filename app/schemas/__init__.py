"""
Pydantic schemas package
"""

from .common import *
from .tenant import *
from .guest import *

__all__ = [
    "StandardResponse",
    "ErrorResponse",
    "TenantConfig",
    "Venue",
    "Theme",
    "TenantValidationResponse",
    "TenantStats",
    "Attendance",
    "GuestRecord",
    "RSVPSubmission",
]
