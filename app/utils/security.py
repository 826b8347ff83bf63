"""
Request throttling for public RSVP submissions
"""

import time
from collections import defaultdict
from typing import Optional

from app.core.config import settings

WINDOW_SECONDS = 60

# In-memory submission timestamps keyed by "<tenant>:<client ip>"
rate_limiter = defaultdict(list)

def rate_limit_key(tenant_id: Optional[str], client_ip: str) -> str:
    return f"{tenant_id or '-'}:{client_ip}"

def rate_limit_check(key: str, limit: int = None) -> bool:
    """Sliding one-minute window; each tenant throttles a client separately"""
    if limit is None:
        limit = settings.RATE_LIMIT_PER_MINUTE

    current_time = time.time()
    window_start = current_time - WINDOW_SECONDS

    rate_limiter[key] = [t for t in rate_limiter[key] if t > window_start]
    if len(rate_limiter[key]) >= limit:
        return False

    rate_limiter[key].append(current_time)
    return True

def get_client_ip(request) -> str:
    """Client address, preferring reverse proxy headers"""
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()

    real_ip = request.headers.get("X-Real-IP")
    if real_ip:
        return real_ip

    return request.client.host if request.client else "unknown"
