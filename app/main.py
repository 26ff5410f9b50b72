from contextlib import asynccontextmanager
from typing import Optional

import structlog
from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.routes_commands import router as commands_router
from app.routes_device import router as device_router
from core.errors import PillHubError
from data.db import init_db, make_engine
from push.client import PushClient
from utils.env import Settings, load_settings
from utils.logging import configure_logging

log = structlog.get_logger(__name__)

CORS_ALLOW_HEADERS = [
    "authorization", "x-client-info", "apikey", "content-type",
    "x-device-serial", "x-device-secret",
]

PREFLIGHT_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": ", ".join(CORS_ALLOW_HEADERS),
    "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
}

def _error(status: int, message: str) -> JSONResponse:
    return JSONResponse({"error": message}, status_code=status)

def create_app(settings: Optional[Settings] = None, push: Optional[PushClient] = None) -> FastAPI:
    settings = settings or load_settings()
    configure_logging(settings.log_level, cache_loggers=settings.cache_loggers)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        init_db(app.state.engine)
        yield
        app.state.engine.dispose()

    app = FastAPI(title="PillHub", version="0.1.0", lifespan=lifespan)
    app.state.settings = settings
    app.state.engine = make_engine(settings.database_url)
    app.state.push = push or PushClient(settings.push_base_url, settings.service_key, timeout=settings.push_timeout)

    @app.exception_handler(PillHubError)
    async def _pillhub_error(request: Request, exc: PillHubError):
        return _error(exc.status_code, exc.message)

    @app.exception_handler(RequestValidationError)
    async def _validation_error(request: Request, exc: RequestValidationError):
        fields = [".".join(str(p) for p in err.get("loc", ()) if p != "body") for err in exc.errors()]
        return JSONResponse({"error": "Missing or invalid fields", "fields": fields}, status_code=400)

    @app.middleware("http")
    async def _unexpected_errors(request: Request, call_next):
        try:
            return await call_next(request)
        except Exception as e:
            # message only; never the request body (it carries device secrets)
            log.exception("request.failed", path=request.url.path)
            return _error(500, str(e) or type(e).__name__)

    # wraps everything above, including the 500 responses
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=CORS_ALLOW_HEADERS,
    )

    # outermost: every OPTIONS gets an empty 200, whatever headers it asks for
    @app.middleware("http")
    async def _preflight(request: Request, call_next):
        if request.method == "OPTIONS":
            return Response(status_code=200, headers=PREFLIGHT_HEADERS)
        return await call_next(request)

    @app.get("/health")
    async def health():
        return {"ok": True}

    app.include_router(device_router, tags=["device"])
    app.include_router(commands_router, tags=["commands"])
    return app

app = create_app()
