"""
Tenant configuration stores (config.json per tenant, or the tenants table)
"""

import json
import logging
import os
from typing import Any, Dict, Optional

from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from app.models import Tenant
from app.schemas.tenant import REQUIRED_CONFIG_FIELDS, TenantConfig
from app.services.repositories import TenantRepo
from app.utils.errors import (
    ConfigurationError,
    ConfigurationFormatError,
    MissingConfigFieldsError,
    StorageError,
    TenantFormatError,
)
from app.utils.slug import validate_slug

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "config.json"


def parse_config(payload: Any, tenant_id: str) -> TenantConfig:
    """Validate a decoded configuration document against its lookup key"""
    if not isinstance(payload, dict):
        raise ConfigurationFormatError("expected a JSON object", tenant_id)

    missing = [
        field for field in REQUIRED_CONFIG_FIELDS
        if payload.get(field) is None or (isinstance(payload.get(field), str) and not payload[field].strip())
    ]
    if missing:
        raise MissingConfigFieldsError(missing, tenant_id)

    if str(payload["id"]) != tenant_id:
        # the identifier inside the document must match where it was found
        raise MissingConfigFieldsError(["id"], tenant_id)

    try:
        return TenantConfig.model_validate(payload)
    except ValidationError as e:
        raise ConfigurationError(
            f"invalid configuration: {e.error_count()} field error(s)",
            details={
                "tenant": tenant_id,
                "errors": [f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()],
            },
        ) from e


def tenant_to_payload(tenant: Tenant) -> Dict[str, Any]:
    payload: Dict[str, Any] = {
        "id": tenant.slug,
        "brideName": tenant.bride_name,
        "groomName": tenant.groom_name,
        "weddingDate": tenant.wedding_date.isoformat() if tenant.wedding_date else None,
        "isActive": bool(tenant.is_active),
        "createdAt": tenant.created_at.isoformat() if tenant.created_at else None,
        "updatedAt": tenant.updated_at.isoformat() if tenant.updated_at else None,
    }
    if tenant.venue_name or tenant.venue_address:
        payload["venue"] = {
            "name": tenant.venue_name,
            "address": tenant.venue_address,
            "mapLink": tenant.venue_map_link,
        }
    if tenant.theme_primary_color and tenant.theme_secondary_color:
        payload["theme"] = {
            "primaryColor": tenant.theme_primary_color,
            "secondaryColor": tenant.theme_secondary_color,
        }
    return payload


class FileConfigStore:
    """Reads ``<data_dir>/<tenant>/config.json``"""

    def __init__(self, data_dir: str):
        self.data_dir = data_dir

    def tenant_dir(self, tenant_id: str) -> str:
        check = validate_slug(tenant_id)
        if not check.valid:
            raise TenantFormatError(f"invalid format: {check.reason}", details={"tenant": tenant_id})
        return os.path.join(self.data_dir, tenant_id)

    def config_path(self, tenant_id: str) -> str:
        return os.path.join(self.tenant_dir(tenant_id), CONFIG_FILENAME)

    def get(self, tenant_id: str) -> Optional[TenantConfig]:
        """Configuration of an active tenant, ``None`` when absent or inactive"""
        config = self.load(tenant_id)
        if config is None or not config.is_active:
            return None
        return config

    def load(self, tenant_id: str) -> Optional[TenantConfig]:
        """Configuration regardless of the activity flag"""
        path = self.config_path(tenant_id)
        try:
            with open(path, "r", encoding="utf-8") as f:
                raw = f.read()
        except FileNotFoundError:
            return None
        except UnicodeDecodeError as e:
            logger.error(f"Undecodable bytes in {path}: {e}")
            raise ConfigurationFormatError(f"Invalid encoding ({e.reason} at byte {e.start})", tenant_id) from e
        except OSError as e:
            raise StorageError(f"Failed to read tenant configuration: {e}", details={"tenant": tenant_id}) from e

        try:
            payload = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.error(f"Malformed JSON in {path}: {e}")
            raise ConfigurationFormatError(f"Invalid JSON ({e.msg})", tenant_id) from e

        return parse_config(payload, tenant_id)

    def list_tenant_ids(self):
        """Directory names under the data root that hold a config file"""
        try:
            entries = sorted(os.listdir(self.data_dir))
        except FileNotFoundError:
            return []
        except OSError as e:
            raise StorageError(f"Failed to list tenants: {e}") from e
        return [
            name for name in entries
            if validate_slug(name).valid and os.path.isfile(os.path.join(self.data_dir, name, CONFIG_FILENAME))
        ]


class SqlConfigStore:
    """Builds TenantConfig from active rows of the tenants table"""

    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    def get(self, tenant_id: str) -> Optional[TenantConfig]:
        try:
            with self.session_factory() as db:
                tenant = TenantRepo.get_active_by_slug(db, tenant_id)
                if tenant is None:
                    return None
                payload = tenant_to_payload(tenant)
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to get tenant: {e}", details={"tenant": tenant_id}) from e
        return parse_config(payload, tenant_id)
