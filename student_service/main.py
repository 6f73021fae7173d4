"""Student records API.

Run: uvicorn student_service.main:app --reload
"""
import time
import logging
from datetime import datetime, timezone

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from .config import Settings, get_settings
from .infrastructure.repositories import InMemoryStudentRepository, InMemoryUserRepository
from .infrastructure.security import PasswordHasher, TokenService
from .infrastructure.seed import seed_demo_data
from .interfaces.http.errors import register_exception_handlers
from .interfaces.http.ratelimit import build_limiter
from .interfaces.http.routers import auth as auth_router
from .interfaces.http.routers import students as students_router

VERSION = "1.0.0"

logger = structlog.get_logger()


def configure_logging(settings: Settings) -> None:
    log_level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)
    structlog.configure(
        processors=[
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.add_log_level,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer()
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the application; without explicit settings they come from the environment."""
    settings = settings or get_settings()
    configure_logging(settings)

    app = FastAPI(title="Student Records Service", version=VERSION)

    hasher = PasswordHasher(rounds=settings.BCRYPT_ROUNDS)
    app.state.settings = settings
    app.state.token_service = TokenService(settings)
    app.state.students = InMemoryStudentRepository()
    app.state.users = InMemoryUserRepository(hasher)

    app.state.limiter = build_limiter(settings)
    app.state.rate_limited = auth_router.build_rate_limited(app.state.limiter, settings)
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    register_exception_handlers(app)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start_time = time.time()
        response = await call_next(request)
        duration = time.time() - start_time
        logger.info(
            "http_request",
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
            duration_ms=round(duration * 1000, 2)
        )
        return response

    @app.on_event("startup")
    def on_startup():
        logger.info("Starting student records service", version=VERSION)
        if settings.SEED_DEMO_DATA and app.state.students.count() == 0:
            seed_demo_data(app.state.students, app.state.users, settings.DEMO_ADMIN_PASSWORD)

    @app.get(f"{settings.API_PREFIX}/health")
    def health():
        return {
            "status": "ok",
            "message": "Student Management API is running",
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    app.include_router(auth_router.router, prefix=settings.API_PREFIX)
    app.include_router(students_router.router, prefix=settings.API_PREFIX)
    return app


app = create_app()
