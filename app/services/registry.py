"""
Tenant registries: look a tenant up by identifier in the configured backend
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Protocol, Union

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from app.schemas.tenant import TenantConfig
from app.services.config_store import FileConfigStore, parse_config, tenant_to_payload
from app.services.repositories import TenantRepo
from app.utils.errors import ConfigurationError, StorageError

logger = logging.getLogger(__name__)


@dataclass
class TenantLookup:
    """Uniform lookup result for both backends.

    ``key`` is what record stores are scoped by: the slug for the file
    backend, the surrogate integer id for the relational one.
    """
    found: bool
    is_active: bool = False
    key: Optional[Union[str, int]] = None
    config: Optional[TenantConfig] = None


NOT_FOUND = TenantLookup(found=False)


class TenantRegistry(Protocol):
    def lookup(self, tenant_id: str) -> TenantLookup: ...

    def list_active(self) -> List[str]: ...


class FileTenantRegistry:
    """A tenant exists when its config.json exists; ``isActive`` gates access"""

    def __init__(self, config_store: FileConfigStore):
        self.config_store = config_store

    def lookup(self, tenant_id: str) -> TenantLookup:
        config = self.config_store.load(tenant_id)
        if config is None:
            return NOT_FOUND
        return TenantLookup(found=True, is_active=config.is_active, key=tenant_id, config=config)

    def list_active(self) -> List[str]:
        """Active tenants; a broken configuration only hides its own tenant"""
        active = []
        for tenant_id in self.config_store.list_tenant_ids():
            try:
                config = self.config_store.get(tenant_id)
            except ConfigurationError as e:
                logger.error(f"Skipping tenant '{tenant_id}' with broken configuration: {e.message}")
                continue
            if config is not None:
                active.append(tenant_id)
        return active


class SqlTenantRegistry:
    """Single-row lookup on the unique slug of the tenants table"""

    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    def lookup(self, tenant_id: str) -> TenantLookup:
        try:
            with self.session_factory() as db:
                tenant = TenantRepo.get_by_slug(db, tenant_id)
                if tenant is None:
                    return NOT_FOUND
                key, is_active = tenant.id, bool(tenant.is_active)
                payload = tenant_to_payload(tenant)
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to get tenant by slug: {e}", details={"tenant": tenant_id}) from e

        config = parse_config(payload, tenant_id) if is_active else None
        return TenantLookup(found=True, is_active=is_active, key=key, config=config)

    def list_active(self) -> List[str]:
        try:
            with self.session_factory() as db:
                return TenantRepo.list_active_slugs(db)
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to list tenants: {e}") from e
