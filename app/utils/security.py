"""
Admin authentication and request throttling for the public RSVP endpoints
"""

from fastapi import HTTPException, Depends, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
import secrets
import time
from collections import defaultdict

from app.core.config import settings

# "{scope}:{ip}" -> request timestamps inside the current window
rate_limiter = defaultdict(list)

RATE_LIMIT_WINDOW = 60

security = HTTPBearer()

def verify_admin_token(credentials: HTTPAuthorizationCredentials = Depends(security)):
    """Dashboard routes need the couple's admin token"""
    if not settings.ADMIN_TOKEN:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Admin access is not configured"
        )
    if not secrets.compare_digest(credentials.credentials, settings.ADMIN_TOKEN):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid admin token"
        )
    return credentials.credentials

def rate_limit_check(client_ip: str, scope: str = "rsvp", limit: int = None) -> bool:
    """
    Sliding one-minute window per client and scope.

    Name lookups are throttled so the guest list cannot be enumerated by
    guessing names; each scope counts separately.
    """
    if limit is None:
        limit = settings.RATE_LIMIT_PER_MINUTE

    key = f"{scope}:{client_ip}"
    now = time.time()
    window_start = now - RATE_LIMIT_WINDOW

    recent = [t for t in rate_limiter[key] if t > window_start]
    if len(recent) >= limit:
        rate_limiter[key] = recent
        return False

    recent.append(now)
    rate_limiter[key] = recent
    return True

def get_client_ip(request) -> str:
    """Client address, honouring the reverse proxy headers"""
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()

    real_ip = request.headers.get("X-Real-IP")
    if real_ip:
        return real_ip.strip()

    return request.client.host if request.client else "unknown"
