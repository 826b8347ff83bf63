"""
Tenant-scoped RSVP routes
"""

import logging
from typing import Optional
from fastapi import APIRouter, Depends, Query, Request

from app.schemas.guest import RSVPSubmission
from app.services.repositories import TenantBackend, get_backend
from app.services.rsvp_service import RSVPService
from app.services.tenant_service import TenantService
from app.services.validator import TenantValidation, TenantValidator
from app.utils.errors import TenantNotFoundError
from app.utils.responses import success_response, error_response, rate_limit_error
from app.utils.security import rate_limit_check, rate_limit_key, get_client_ip

logger = logging.getLogger(__name__)

router = APIRouter()

def invalid_tenant(validation: TenantValidation):
    return error_response(
        message="Invalid tenant",
        error_code="TENANT_INVALID",
        details=validation.error,
        status_code=400
    )

@router.get("/rsvp/tenant")
def list_rsvps(
    tenant: Optional[str] = Query(default=None),
    backend: TenantBackend = Depends(get_backend)
):
    """All RSVPs of one tenant"""
    validation = TenantValidator(backend.registry).validate(tenant)
    if not validation.valid:
        return invalid_tenant(validation)

    records = backend.record_store.read_all(validation.resolved_id)
    return success_response(
        message="RSVP data retrieved",
        data={
            "rsvps": [r.to_public() for r in records],
            "tenant": validation.tenant_id,
            "count": len(records)
        }
    )

@router.post("/rsvp/tenant")
def submit_rsvp(
    request: Request,
    submission: RSVPSubmission,
    tenant: Optional[str] = Query(default=None),
    id: Optional[str] = Query(default=None),
    backend: TenantBackend = Depends(get_backend)
):
    """Create an RSVP, or update the one named by ``id`` when it exists"""
    client_ip = get_client_ip(request)
    if not rate_limit_check(rate_limit_key(tenant, client_ip)):
        rate_limit_error()

    validation = TenantValidator(backend.registry).validate(tenant)
    if not validation.valid:
        return invalid_tenant(validation)

    record, is_update = RSVPService(backend.record_store).submit(
        validation.resolved_id,
        submission,
        guest_id=id
    )

    return success_response(
        message="RSVP updated successfully" if is_update else "RSVP submitted successfully",
        data={"rsvp": record.to_public(), "tenant": validation.tenant_id},
        status_code=200 if is_update else 201
    )

@router.get("/rsvp/tenant/stats")
def rsvp_stats(
    tenant: Optional[str] = Query(default=None),
    backend: TenantBackend = Depends(get_backend)
):
    """Attendance counts for one tenant"""
    stats = TenantService.get_tenant_stats(backend, tenant)
    if stats is None:
        raise TenantNotFoundError(tenant or "")
    return success_response(message="RSVP statistics retrieved", data=stats.model_dump())
