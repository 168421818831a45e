from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.responses import PlainTextResponse

from imghost.exceptions import ImgHostError

logger = logging.getLogger(__name__)


def error_response(status: int, detail: str, headers: dict[str, str] | None = None) -> PlainTextResponse:
    """Every failure leaves as a plain-text status plus a short message."""
    return PlainTextResponse(detail, status_code=status, headers=headers)


def _log(request: Request, status: int, detail: str, exc: BaseException | None = None) -> None:
    extra = {"http_method": request.method, "path": request.url.path, "status_code": status}
    if status >= 500:
        logger.error("%s %s -> %d: %s", request.method, request.url.path, status, detail,
                     exc_info=exc, extra=extra)
    else:
        logger.warning("%s %s -> %d: %s", request.method, request.url.path, status, detail,
                       extra=extra)


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(ImgHostError)
    async def _imghost_error(request: Request, exc: ImgHostError):
        _log(request, exc.status_code, exc.detail, exc)
        return error_response(exc.status_code, exc.detail)

    @app.exception_handler(StarletteHTTPException)
    async def _http_error(request: Request, exc: StarletteHTTPException):
        detail = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
        _log(request, exc.status_code, detail)
        return error_response(exc.status_code, detail, headers=getattr(exc, "headers", None))

    @app.exception_handler(RequestValidationError)
    async def _validation_error(request: Request, exc: RequestValidationError):
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err.get('loc', ()))}: {err.get('msg', 'invalid')}"
            for err in exc.errors()
        )
        detail = f"Invalid request: {problems}" if problems else "Invalid request"
        _log(request, 400, detail)
        return error_response(400, detail)
