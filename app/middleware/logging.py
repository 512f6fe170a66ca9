import time
import logging
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from app.core.request_context import get_client_ip, HDR_REQUEST_ID

logger = logging.getLogger("access")

class LoggingMiddleware(BaseHTTPMiddleware):
    """Access log for every HTTP request, with latency and request id"""
    
    async def dispatch(self, request: Request, call_next):
        start_time = time.perf_counter()
        request_id = request.headers.get(HDR_REQUEST_ID, "-")
        
        response = await call_next(request)
        
        process_time = time.perf_counter() - start_time
        level = logging.WARNING if response.status_code >= 500 else logging.INFO
        logger.log(
            level,
            f"{request.method} {request.url.path} - "
            f"Status: {response.status_code} - "
            f"Client: {get_client_ip(request) or 'unknown'} - "
            f"Request: {request_id} - "
            f"Time: {process_time:.4f}s"
        )
        
        response.headers["X-Process-Time"] = f"{process_time:.4f}"
        return response
