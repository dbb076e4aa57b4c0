import time

import structlog
from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import SQLAlchemyError

from .config import Settings, settings, validate_runtime_config
from .domain.entities import Identity
from .infrastructure.db import Database
from .infrastructure.metrics import http_request_duration_seconds, http_requests_total, metrics_endpoint
from .infrastructure.security import PasswordHasher, TokenService
from .infrastructure.storage import build_storage
from .interfaces.http.authz import require_admin
from .interfaces.http.errors import register_exception_handlers
from .interfaces.http.ratelimit import configure_limiter
from .interfaces.http.routers import assignments as assignments_router
from .interfaces.http.routers import auth as auth_router
from .interfaces.http.routers import upload as upload_router
from .interfaces.http.routers import users as users_router
from .logging import configure_logging

VERSION = "0.1.0"

logger = structlog.get_logger()


def create_app(config: Settings | None = None) -> FastAPI:
    config = config or settings
    configure_logging(config.LOG_LEVEL)

    app = FastAPI(title="Social Learning API", version=VERSION)
    app.state.settings = config
    app.state.database = Database(config.DATABASE_URL)
    app.state.hasher = PasswordHasher(rounds=config.PASSWORD_HASH_ROUNDS)
    app.state.tokens = TokenService.from_settings(config)
    app.state.storage = build_storage(config)
    app.state.limiter = configure_limiter(config)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def observe_requests(request: Request, call_next):
        start_time = time.time()
        response = await call_next(request)
        duration = time.time() - start_time

        # route template keeps metric label cardinality bounded
        route = request.scope.get("route")
        endpoint = getattr(route, "path", request.url.path)
        http_requests_total.labels(method=request.method, endpoint=endpoint, status=response.status_code).inc()
        http_request_duration_seconds.labels(method=request.method, endpoint=endpoint).observe(duration)
        logger.info(
            "http_request",
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
            duration_ms=round(duration * 1000, 2),
        )
        return response

    register_exception_handlers(app)

    @app.on_event("startup")
    def on_startup():
        logger.info("Starting social learning API", version=VERSION, env=config.APP_ENV)
        validate_runtime_config(config)
        try:
            app.state.database.connect()
            app.state.database.create_schema()
        except SQLAlchemyError:
            logger.exception("Database initialization failed")

    @app.on_event("shutdown")
    def on_shutdown():
        app.state.database.dispose()

    @app.get("/health")
    def health():
        return {"status": "ok"}

    @app.get("/db-status")
    def db_status():
        return app.state.database.status()

    @app.get("/admin/ping")
    def admin_ping(user: Identity = Depends(require_admin)):
        return {"ok": True, "scope": "admin"}

    @app.get("/metrics")
    def metrics():
        """Prometheus metrics endpoint"""
        return metrics_endpoint()

    for module in (auth_router, assignments_router, users_router, upload_router):
        app.include_router(module.router, prefix=config.API_PREFIX)

    return app


app = create_app()
