"""
Guest record (RSVP) schemas
"""

import re
from enum import Enum
from typing import Iterable, List, Optional, Union
from pydantic import BaseModel, ConfigDict, Field, field_validator

NAME_MAX_LENGTH = 100
RELATIONSHIP_MAX_LENGTH = 50
MESSAGE_MAX_LENGTH = 1000

_UNSAFE_PATTERNS = [
    re.compile(p, re.IGNORECASE)
    for p in (
        r"<script", r"javascript:", r"on\w+\s*=", r"<iframe", r"<object",
        r"<embed", r"<link", r"<meta", r"data:text/html", r"vbscript:",
    )
]

class Attendance(str, Enum):
    YES = "yes"
    NO = "no"
    MAYBE = "maybe"

class GuestRecord(BaseModel):
    """One guest's response, scoped to a single tenant.

    ``id`` is a string in the file backend and an integer in the relational
    backend. It is unique inside one tenant only.
    """
    model_config = ConfigDict(populate_by_name=True)

    id: Union[int, str, None] = None
    name: str = ""
    relationship: str = ""
    attendance: Optional[Attendance] = None
    message: str = ""
    submitted_at: str = Field(default="", alias="submittedAt")

    @field_validator("message", mode="before")
    @classmethod
    def _none_message(cls, v):
        return "" if v is None else v

    def missing_fields(self, required: Iterable[str]) -> List[str]:
        missing = []
        for field in required:
            value = getattr(self, field)
            if value is None or (isinstance(value, str) and not value.strip()):
                missing.append(field)
        return missing

    def to_public(self) -> dict:
        return self.model_dump(by_alias=True, mode="json")

class RSVPSubmission(BaseModel):
    """Body of an RSVP submission"""
    name: str = Field(min_length=1, max_length=NAME_MAX_LENGTH)
    relationship: str = Field(min_length=1, max_length=RELATIONSHIP_MAX_LENGTH)
    attendance: Attendance
    message: Optional[str] = Field(default="", max_length=MESSAGE_MAX_LENGTH)

    @field_validator("name", "relationship", mode="before")
    @classmethod
    def _strip(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("message")
    @classmethod
    def _safe_message(cls, v):
        if v and any(p.search(v) for p in _UNSAFE_PATTERNS):
            raise ValueError("Message contains potentially unsafe content")
        return v or ""
