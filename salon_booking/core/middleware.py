# salon_booking/core/middleware.py
"""Custom middleware for request handling"""
import uuid
import time
import logging
from starlette.requests import Request

logger = logging.getLogger(__name__)


async def correlation_id_middleware(request: Request, call_next):
    """Add correlation ID to all requests for tracing"""
    correlation_id = request.headers.get("X-Correlation-ID") or str(uuid.uuid4())
    request.state.correlation_id = correlation_id

    response = await call_next(request)
    response.headers["X-Correlation-ID"] = correlation_id
    return response


async def request_logging_middleware(request: Request, call_next):
    """Log all incoming requests"""
    start_time = time.time()
    correlation_id = getattr(request.state, "correlation_id", "unknown")
    tenant_id = request.headers.get("X-Tenant-ID", "-")

    logger.info(f"[{correlation_id}] {request.method} {request.url.path} started (tenant={tenant_id})")

    response = await call_next(request)

    duration = time.time() - start_time
    logger.info(
        f"[{correlation_id}] {request.method} {request.url.path} "
        f"completed {response.status_code} in {round(duration * 1000, 2)}ms"
    )

    return response
