from starlette.middleware.base import BaseHTTPMiddleware
import logging

from imghost.api.fastapi.middleware.errors.handlers import error_response

logger = logging.getLogger(__name__)

class CatchAllExceptionMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request, call_next):
        try:
            return await call_next(request)
        except Exception as exc:
            logger.error(f"{type(exc).__name__} on {request.url.path} (500): {exc}", exc_info=True)
            return error_response(500, "Internal Server Error")
