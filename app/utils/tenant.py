"""
Tenant identification from request paths and tenant-aware URL helpers
"""

import logging
import re
from typing import TYPE_CHECKING, NamedTuple, Optional
from urllib.parse import urlsplit

from app.core.config import settings
from app.utils.slug import has_valid_characters

if TYPE_CHECKING:
    from app.services.validator import TenantValidator

logger = logging.getLogger(__name__)

_DISALLOWED = re.compile(r"[^A-Za-z0-9_-]")


class TenantIdentification(NamedTuple):
    tenant_id: Optional[str]
    is_valid: bool
    error: Optional[str] = None
    should_fallback: bool = False


def extract_tenant_from_path(pathname: Optional[str]) -> Optional[str]:
    """Return the first path segment when it looks like a tenant identifier.

    ``/john-jane``, ``/john-jane/`` and ``/john-jane/rsvp?x=1`` all give
    ``john-jane``. The root path, an empty path and a first segment with
    disallowed characters give ``None``.
    """
    if not pathname:
        return None

    path = pathname.split("?", 1)[0].split("#", 1)[0]
    candidate = (path[1:] if path.startswith("/") else path).split("/")[0]

    if not candidate.strip():
        return None
    if not has_valid_characters(candidate):
        return None
    return candidate


def extract_tenant_from_request(url: str) -> Optional[str]:
    """Extract the tenant from a full request URL or a bare path"""
    if not url:
        return None
    try:
        parts = urlsplit(url)
    except ValueError as e:
        logger.error(f"Error parsing URL for tenant extraction: {e}")
        return None
    if parts.scheme or parts.netloc:
        return extract_tenant_from_path(parts.path)
    return extract_tenant_from_path(url)


def get_default_tenant_id() -> str:
    return settings.DEFAULT_TENANT_ID


def is_default_tenant(tenant_id: Optional[str]) -> bool:
    return tenant_id is None or tenant_id == get_default_tenant_id()


def sanitize_tenant_id(value: str) -> str:
    """Drop every character a tenant identifier may not contain"""
    return _DISALLOWED.sub("", value or "")


def get_tenant_path(tenant_id: Optional[str], sub_path: str = "") -> str:
    """Build a tenant-scoped path; the default tenant is served unprefixed"""
    clean = sub_path if sub_path.startswith("/") else f"/{sub_path}"
    if is_default_tenant(tenant_id):
        return clean if sub_path else "/"
    return f"/{tenant_id}{clean}"


def create_tenant_redirect_url(tenant_id: Optional[str], target_path: str = "/") -> str:
    if is_default_tenant(tenant_id):
        return target_path
    return get_tenant_path(tenant_id, target_path)


def identify_tenant(pathname: str, validator: "TenantValidator") -> TenantIdentification:
    """Resolve the tenant for a path, suggesting a fallback when it is invalid"""
    tenant_id = extract_tenant_from_path(pathname)
    if tenant_id is None:
        return TenantIdentification(tenant_id=None, is_valid=True)

    validation = validator.validate(tenant_id)
    if validation.valid:
        return TenantIdentification(tenant_id=tenant_id, is_valid=True)

    return TenantIdentification(
        tenant_id=tenant_id,
        is_valid=False,
        error=validation.error,
        should_fallback=True,
    )
