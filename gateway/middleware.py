"""
FastAPI middleware for request logging and timing.
"""
import time
import logging
from fastapi import Request

logger = logging.getLogger(__name__)


async def log_requests_middleware(request: Request, call_next):
    """Middleware for request logging and timing

    Only the path is logged; query strings carry secret tokens.
    """
    start_time = time.time()
    response = await call_next(request)
    process_time = time.time() - start_time

    if request.url.path.startswith(("/health", "/healthz")):
        logger.debug(f"{request.method} {request.url.path} - {response.status_code} - {process_time:.3f}s")
    else:
        logger.info(f"{request.method} {request.url.path} - {response.status_code} - {process_time:.3f}s")

    return response
