import time

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from .utils import get_logger, log_event


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, logger=None):
        super().__init__(app)
        self.logger = logger or get_logger("http")

    async def dispatch(self, request: Request, call_next):
        start = time.time()
        ip = (request.client.host if request.client else None) or ""
        status = 500
        try:
            response: Response = await call_next(request)
            status = response.status_code
            return response
        finally:
            log_event(
                self.logger,
                "request",
                ip=ip,
                method=request.method,
                path=request.url.path,
                status=status,
                duration_ms=int((time.time() - start) * 1000),
            )
