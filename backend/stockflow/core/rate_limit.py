"""Request rate limiting shared by all routers.

Authenticated callers are limited per user id, whether the token came in
the Authorization header or the access_token cookie, so several clerks
behind one warehouse NAT do not share a bucket. Anonymous calls fall back
to the client address.
"""

from fastapi import Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from stockflow.core.config import settings
from stockflow.core.rbac import token_payload_from_request


def rate_limit_key(request: Request) -> str:
    payload = token_payload_from_request(request)
    if payload and payload.get("sub"):
        return f"user:{payload['sub']}"
    return get_remote_address(request)


limiter = Limiter(key_func=rate_limit_key, enabled=settings.rate_limit_enabled)
