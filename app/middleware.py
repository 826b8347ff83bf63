"""
Tenant resolution middleware for page requests
"""

import logging
from typing import Callable
from urllib.parse import urlencode

from fastapi import Request, Response
from fastapi.responses import RedirectResponse
from starlette.concurrency import run_in_threadpool
from starlette.middleware.base import BaseHTTPMiddleware

from app.services.repositories import get_backend
from app.services.validator import TenantValidator
from app.utils.tenant import extract_tenant_from_path

logger = logging.getLogger(__name__)

EXCLUDED_PREFIXES = ("/api", "/static", "/health", "/tenant-error", "/docs", "/redoc", "/openapi.json", "/favicon.ico")

class TenantMiddleware(BaseHTTPMiddleware):
    """Validate the tenant in the first path segment before serving a page.

    Valid tenants continue with ``request.state.tenant`` set and an
    ``x-tenant-id`` response header. Invalid ones are redirected to
    ``/tenant-error``. Paths without a tenant segment are served as the
    default deployment.
    """

    @staticmethod
    def should_skip(path: str) -> bool:
        return path.startswith(EXCLUDED_PREFIXES) or "." in path

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        path = request.url.path
        request.state.tenant = None
        if self.should_skip(path):
            return await call_next(request)

        tenant_id = extract_tenant_from_path(path)
        if not tenant_id:
            return await call_next(request)

        provider = request.app.dependency_overrides.get(get_backend, get_backend)
        validator = TenantValidator(provider().registry)
        validation = await run_in_threadpool(validator.validate, tenant_id)

        if not validation.valid:
            logger.warning(f"Invalid tenant access attempt: {tenant_id} ({validation.error})")
            query = urlencode({"tenant": tenant_id, "error": validation.error or "Tenant not found"})
            return RedirectResponse(url=f"/tenant-error?{query}", status_code=307)

        request.state.tenant = validation
        response = await call_next(request)
        response.headers["x-tenant-id"] = tenant_id
        return response
