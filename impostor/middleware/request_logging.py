"""
Request logging middleware
请求日志中间件
"""

import time
import logging
from typing import Callable
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)


class LoggingMiddleware(BaseHTTPMiddleware):
    """Logs every request with status and latency"""

    def __init__(self, app, quiet_paths: tuple = ("/health",)):
        super().__init__(app)
        self.quiet_paths = set(quiet_paths)

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        start_time = time.time()
        client_ip = self._get_client_ip(request)
        path = request.url.path

        try:
            response = await call_next(request)
        except Exception as e:
            process_time = time.time() - start_time
            logger.error(
                f"Request error: {request.method} {path} "
                f"from {client_ip} in {process_time:.3f}s - {str(e)}"
            )
            raise

        process_time = time.time() - start_time
        response.headers["X-Process-Time"] = f"{process_time:.4f}"

        # Clients poll rooms every couple of seconds, keep successful reads at DEBUG
        if path in self.quiet_paths or (request.method == "GET" and response.status_code < 400):
            log = logger.debug
        else:
            log = logger.info
        log(
            f"Response: {response.status_code} "
            f"for {request.method} {path} from {client_ip} "
            f"in {process_time:.3f}s"
        )

        if response.status_code == 403:
            logger.warning(f"Forbidden room access: {client_ip} on {path}")
        elif response.status_code >= 500:
            logger.error(f"Server error {response.status_code}: {client_ip} on {path}")
        elif response.status_code >= 400:
            logger.warning(f"Client error {response.status_code}: {client_ip} on {path}")

        return response

    def _get_client_ip(self, request: Request) -> str:
        """Get client IP address from request"""
        forwarded_for = request.headers.get("X-Forwarded-For")
        if forwarded_for:
            return forwarded_for.split(",")[0].strip()

        real_ip = request.headers.get("X-Real-IP")
        if real_ip:
            return real_ip

        return request.client.host if request.client else "unknown"
