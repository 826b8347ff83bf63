"""
Tenant configuration schemas
"""

from datetime import date
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field

# Fields that must be present and non-empty in every tenant configuration
REQUIRED_CONFIG_FIELDS = ("id", "brideName", "groomName", "weddingDate")

class Venue(BaseModel):
    """Ceremony / reception venue"""
    model_config = ConfigDict(populate_by_name=True)

    name: str
    address: str
    map_link: Optional[str] = Field(default=None, alias="mapLink")

class Theme(BaseModel):
    """Two-colour page theme"""
    model_config = ConfigDict(populate_by_name=True)

    primary_color: str = Field(alias="primaryColor")
    secondary_color: str = Field(alias="secondaryColor")

class TenantConfig(BaseModel):
    """Descriptive configuration of one tenant"""
    model_config = ConfigDict(populate_by_name=True)

    id: str
    bride_name: str = Field(alias="brideName")
    groom_name: str = Field(alias="groomName")
    wedding_date: date = Field(alias="weddingDate")
    venue: Optional[Venue] = None
    theme: Optional[Theme] = None
    is_active: bool = Field(default=True, alias="isActive")
    created_at: Optional[str] = Field(default=None, alias="createdAt")
    updated_at: Optional[str] = Field(default=None, alias="updatedAt")

    def to_public(self) -> dict:
        return self.model_dump(by_alias=True, mode="json", exclude_none=True)

class TenantValidationResponse(BaseModel):
    """Result of GET /api/tenant/validate"""
    isValid: bool
    tenantId: Optional[str] = None
    error: Optional[str] = None

class TenantStats(BaseModel):
    """RSVP counts for one tenant"""
    tenant: str
    total: int
    yes: int = 0
    no: int = 0
    maybe: int = 0
