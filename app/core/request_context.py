from typing import Optional, Dict
from fastapi import Request

# Headers set by the reverse proxy / gateway
HDR_REQUEST_ID = "X-Request-Id"
HDR_FORWARDED_FOR = "X-Forwarded-For"
HDR_REAL_IP = "X-Real-IP"

def get_client_ip(request: Request) -> Optional[str]:
    """First hop of X-Forwarded-For, then X-Real-IP, then the socket peer"""
    forwarded = request.headers.get(HDR_FORWARDED_FOR)
    if forwarded:
        return forwarded.split(",")[0].strip() or None
    real_ip = request.headers.get(HDR_REAL_IP)
    if real_ip:
        return real_ip
    return request.client.host if request.client else None

def get_request_context(request: Request) -> Dict[str, Optional[str]]:
    """
    Extracts endpoint, client IP, user-agent and request_id from the FastAPI Request.
    - request_id is read from headers but falls back to None.
    """
    return {
        "ip_address": get_client_ip(request),
        "user_agent": request.headers.get("user-agent"),
        "endpoint": f"{request.method} {request.url.path}",
        "request_id": request.headers.get(HDR_REQUEST_ID),
    }
