"""
Public routes - health, tenant error page and tenant landing summary
"""

from typing import Optional
from fastapi import APIRouter, Request

from app.utils.responses import success_response, error_response
from app.utils.tenant import get_default_tenant_id, get_tenant_path

router = APIRouter()

@router.get("/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "ok"}

@router.get("/tenant-error")
async def tenant_error(tenant: Optional[str] = None, error: Optional[str] = None):
    """Target of redirects for unknown, inactive or malformed tenants"""
    return error_response(
        message=error or "Tenant not found",
        error_code="TENANT_UNAVAILABLE",
        details={"tenant": tenant, "home": "/"},
        status_code=404
    )

@router.get("/")
async def root():
    """Default (unscoped) deployment"""
    return success_response(
        message="Wedding invitation platform",
        data={"tenant": get_default_tenant_id()}
    )

@router.get("/{tenant_slug}")
async def tenant_home(tenant_slug: str, request: Request):
    """Landing summary of a tenant already resolved by TenantMiddleware"""
    validation = getattr(request.state, "tenant", None)
    if validation is None or validation.lookup is None or validation.lookup.config is None:
        return error_response(message="Tenant not found", error_code="TENANT_NOT_FOUND", status_code=404)

    config = validation.lookup.config
    return success_response(
        message="Tenant resolved",
        data={
            "tenant": validation.tenant_id,
            "config": config.to_public(),
            "rsvpPath": get_tenant_path(validation.tenant_id, "/rsvp"),
        }
    )
