import time
import logging
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)

class LoggingMiddleware(BaseHTTPMiddleware):
    """Middleware for logging requests and responses"""

    async def dispatch(self, request: Request, call_next):
        start_time = time.time()

        client_ip = request.client.host if request.client else "unknown"
        logger.info(f"Request: {request.method} {request.url.path} from {client_ip}")

        response = await call_next(request)

        process_time = time.time() - start_time

        # Merchant routes carry bearer tokens; keep them marked in the log
        sensitive_paths = ["/api-keys", "/merchants/"]
        is_sensitive = any(path in str(request.url.path) for path in sensitive_paths)

        logger.info(
            f"Response: {request.method} {request.url.path} "
            f"status={response.status_code} time={process_time:.4f}s"
            + (" [SENSITIVE]" if is_sensitive else "")
        )

        response.headers["X-Process-Time"] = str(process_time)

        return response
