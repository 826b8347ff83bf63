"""
Tenant listing and per-tenant RSVP statistics
"""

import logging
from typing import List, Optional

from app.schemas.tenant import TenantStats
from app.services.repositories import TenantBackend
from app.services.validator import TenantValidator

logger = logging.getLogger(__name__)

class TenantService:
    """Read-only tenant queries over whichever backend is configured"""

    @staticmethod
    def list_tenants(backend: TenantBackend) -> List[str]:
        """Identifiers of all active tenants"""
        return backend.registry.list_active()

    @staticmethod
    def get_tenant_stats(backend: TenantBackend, tenant_id: str) -> Optional[TenantStats]:
        """RSVP counts for an active tenant; None when unknown or inactive"""
        validation = TenantValidator(backend.registry).validate(tenant_id)
        if not validation.valid:
            return None

        counts = backend.record_store.attendance_counts(validation.resolved_id)
        return TenantStats(tenant=tenant_id, total=sum(counts.values()), **counts)
