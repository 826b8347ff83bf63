"""
Tenant validation: slug format plus registry lookup, returned as a result
"""

import logging
from dataclasses import dataclass
from typing import Optional, Union

from app.services.registry import TenantLookup, TenantRegistry
from app.utils.errors import ConfigurationError, TenantStoreError
from app.utils.slug import validate_slug

logger = logging.getLogger(__name__)


@dataclass
class TenantValidation:
    valid: bool
    tenant_id: Optional[str] = None
    resolved_id: Optional[Union[str, int]] = None
    error: Optional[str] = None
    lookup: Optional[TenantLookup] = None


class TenantValidator:
    """Validates tenant identifiers without raising.

    Every call queries the registry again, so activating or deactivating a
    tenant takes effect on the next request.
    """

    def __init__(self, registry: TenantRegistry):
        self.registry = registry

    def validate(self, tenant_id: Optional[str]) -> TenantValidation:
        if not tenant_id:
            return TenantValidation(valid=False, error="no identifier provided")

        check = validate_slug(tenant_id)
        if not check.valid:
            logger.info(f"Rejected tenant identifier {tenant_id!r}: {check.reason}")
            return TenantValidation(valid=False, tenant_id=tenant_id, error=f"invalid format: {check.reason}")

        try:
            lookup = self.registry.lookup(tenant_id)
        except ConfigurationError as e:
            logger.error(f"Tenant '{tenant_id}' has a broken configuration: {e.message}")
            return TenantValidation(valid=False, tenant_id=tenant_id, error=f"error validating tenant: {e.message}")
        except TenantStoreError as e:
            logger.exception(f"Error validating tenant '{tenant_id}'")
            return TenantValidation(valid=False, tenant_id=tenant_id, error=f"error validating tenant: {e.message}")

        if not lookup.found or not lookup.is_active:
            logger.warning(f"Tenant '{tenant_id}' not found or inactive")
            return TenantValidation(
                valid=False,
                tenant_id=tenant_id,
                error=f"Tenant '{tenant_id}' not found or inactive",
                lookup=lookup,
            )

        return TenantValidation(valid=True, tenant_id=tenant_id, resolved_id=lookup.key, lookup=lookup)
