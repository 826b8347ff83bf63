"""
Tenant API routes - validation, configuration and listing
"""

from typing import Optional
from fastapi import APIRouter, Depends, Query

from app.schemas.tenant import TenantValidationResponse
from app.services.repositories import TenantBackend, get_backend
from app.services.tenant_service import TenantService
from app.services.validator import TenantValidator
from app.utils.responses import success_response, error_response
from app.utils.errors import TenantNotFoundError
from app.utils.slug import validate_slug

router = APIRouter()

@router.get("/tenant/validate", response_model=TenantValidationResponse)
def validate_tenant(
    tenant: Optional[str] = Query(default=None),
    backend: TenantBackend = Depends(get_backend)
):
    """Report whether a tenant identifier resolves to an active tenant"""
    if not tenant:
        return error_response(
            message="Tenant ID is required",
            error_code="TENANT_REQUIRED",
            details="Please provide a tenant parameter in the query string",
            status_code=400
        )

    validation = TenantValidator(backend.registry).validate(tenant)
    return TenantValidationResponse(
        isValid=validation.valid,
        tenantId=validation.tenant_id if validation.valid else None,
        error=validation.error
    )

@router.get("/config/tenant")
def get_tenant_config(
    tenant: Optional[str] = Query(default=None),
    backend: TenantBackend = Depends(get_backend)
):
    """Public configuration of an active tenant.

    Unlike validation, a malformed configuration is not folded into
    "not found": it propagates and is answered with a 500.
    """
    check = validate_slug(tenant)
    if not check.valid:
        return error_response(
            message="Invalid tenant",
            error_code="TENANT_INVALID_FORMAT",
            details=f"invalid format: {check.reason}",
            status_code=400
        )

    config = backend.config_store.get(tenant)
    if config is None:
        raise TenantNotFoundError(tenant)

    return success_response(message="Tenant configuration retrieved", data=config.to_public())

@router.get("/tenants")
def list_tenants(backend: TenantBackend = Depends(get_backend)):
    """Identifiers of all active tenants"""
    tenants = TenantService.list_tenants(backend)
    return success_response(message="Active tenants retrieved", data={"tenants": tenants, "count": len(tenants)})
