from collections import defaultdict
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI
from fastapi.routing import APIRoute
from fastapi.staticfiles import StaticFiles
import logging

from imghost.api.fastapi.middleware.errors.catchall import CatchAllExceptionMiddleware
from imghost.api.fastapi.middleware.errors.handlers import register_error_handlers
from imghost.api.fastapi.middleware.request_size_limit import RequestSizeLimitMiddleware
from imghost.api.fastapi.middleware.timeout import BodyReadTimeoutMiddleware, HandlerTimeoutMiddleware
from imghost.api.fastapi.routers import health, index, serve, upload
from imghost.app import CURRENT_ENVIRONMENT
from imghost.app.settings import HostSettings, load_settings
from imghost.http import new_async_httpx_client
from imghost.storage import LocalStore

logger = logging.getLogger(__name__)

# room for the multipart envelope around a file at the size cap
MULTIPART_OVERHEAD = 16 * 1024


def _gen_operation_id_factory():
    used: dict[str, int] = defaultdict(int)

    def _normalize(s: str) -> str:
        return "_".join(x for x in s.strip().replace(" ", "_").split("_") if x)

    def _gen(route: APIRoute) -> str:
        base = _normalize(route.name or getattr(route.endpoint, "__name__", "op"))
        method = next(iter(route.methods or ["GET"])).lower()

        # the serve router is mounted twice; later copies get a suffix
        candidate = base
        if used[candidate]:
            candidate = f"{base}_{method}_{used[base] + 1}"
        used[base] += 1
        return candidate

    return _gen


def _lifespan_factory(client: httpx.AsyncClient):
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        settings: HostSettings = app.state.settings
        logger.info(
            "%s serving %s at %s [env: %s]",
            settings.name, settings.upload_dir, settings.serve_path, CURRENT_ENVIRONMENT,
        )
        try:
            yield
        finally:
            await client.aclose()
            logger.info("shutting down")

    return lifespan


def create_app(
    settings: HostSettings | None = None,
    *,
    http_transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    """
    Build the hosting app around one immutable settings object.

    Settings, the disk store and the outbound HTTP client live on
    `app.state` and reach handlers through the dependencies module.
    `http_transport` replaces the network for remote fetches (tests).
    """
    settings = settings or load_settings()

    store = LocalStore(
        settings.upload_dir,
        name_length=settings.name_length,
        name_attempts=settings.name_attempts,
    )
    store.ensure_dir()

    client_kwargs = {"transport": http_transport} if http_transport is not None else {}
    client = new_async_httpx_client(**client_kwargs)

    app = FastAPI(
        title=settings.name,
        generate_unique_id_function=_gen_operation_id_factory(),
        lifespan=_lifespan_factory(client),
    )
    app.state.settings = settings
    app.state.store = store
    app.state.http_client = client

    # innermost first; CatchAll ends up outermost
    app.add_middleware(RequestSizeLimitMiddleware, max_bytes=settings.max_upload_bytes + MULTIPART_OVERHEAD)
    app.add_middleware(BodyReadTimeoutMiddleware, timeout_seconds=settings.read_timeout)
    app.add_middleware(HandlerTimeoutMiddleware, timeout_seconds=settings.write_timeout)
    app.add_middleware(CatchAllExceptionMiddleware)
    register_error_handlers(app)

    app.include_router(health.router)
    app.include_router(index.router)
    app.include_router(upload.router)
    app.mount(settings.static_path, StaticFiles(packages=[("imghost", "static")]), name="static")
    app.include_router(serve.router, prefix=settings.serve_path)
    # bare /<name> goes last so it never shadows the routes above
    app.include_router(serve.router)

    logger.debug("App built: upload_dir=%s serve_path=%s", settings.upload_dir, settings.serve_path)
    return app
