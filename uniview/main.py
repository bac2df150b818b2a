from __future__ import annotations

import logging
import random
import uuid

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from uniview import __version__
from uniview.auth import AuthService
from uniview.config import Settings, settings as default_settings
from uniview.data_loader import load_dataset_from_file
from uniview.errors import UniviewError
from uniview.responses import fail
from uniview.routes import ROUTERS
from uniview.services import LotService
from uniview.store import ParkingStore

logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def load_store(store: ParkingStore, path: str) -> None:
    try:
        store.load(load_dataset_from_file(path))
    except Exception as e:
        # the lot service falls back to fixed data on first access
        logger.error("Error loading parking data: %s", e)


def _register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(UniviewError)
    async def _uniview_error(request: Request, exc: UniviewError):
        return fail(exc.code, exc.message, exc.status_code, exc.details, request)

    @app.exception_handler(RequestValidationError)
    async def _validation_error(request: Request, exc: RequestValidationError):
        fields = [".".join(str(p) for p in err.get("loc", ())) for err in exc.errors()]
        return fail("VALIDATION_ERROR", "Invalid request", 400, {"fields": fields}, request)

    @app.exception_handler(StarletteHTTPException)
    async def _http_error(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 404:
            return fail("NOT_FOUND", f"Route {request.method} {request.url.path} not found", 404, request=request)
        return fail("HTTP_ERROR", str(exc.detail), exc.status_code, request=request)

    @app.exception_handler(Exception)
    async def _unhandled(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        message = str(exc) if app.state.settings.is_development else "Internal server error"
        return fail("INTERNAL_ERROR", message, 500, request=request)


def create_app(
    settings: Settings | None = None,
    store: ParkingStore | None = None,
    rng: random.Random | None = None,
) -> FastAPI:
    settings = settings or default_settings
    configure_logging(settings.log_level)

    store = store or ParkingStore()

    app = FastAPI(title="Uniview Parking API", version=__version__)
    app.state.settings = settings
    app.state.store = store
    app.state.lot_service = LotService(
        store,
        prediction_cache_ttl_s=settings.prediction_cache_ttl_s,
        rng=rng,
    )
    app.state.auth_service = AuthService(
        store,
        secret=settings.token_secret,
        access_ttl_s=settings.access_token_ttl_s,
        refresh_ttl_s=settings.refresh_token_ttl_s,
    )

    @app.middleware("http")
    async def request_context(request: Request, call_next):
        request.state.request_id = uuid.uuid4().hex
        if settings.is_development:
            logger.info("%s %s", request.method, request.url.path)
        response = await call_next(request)
        response.headers["X-Request-ID"] = request.state.request_id
        return response

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_list,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    _register_error_handlers(app)

    for router in ROUTERS:
        app.include_router(router)
        app.include_router(router, prefix=API_PREFIX)

    @app.on_event("startup")
    def load_data():
        if not store.available:
            load_store(store, settings.data_path)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "uniview.main:app",
        host=default_settings.host,
        port=default_settings.port,
        log_level=default_settings.log_level.lower(),
    )
