"""
Lecture Reports API application.

Run locally with:
    uvicorn lecture_reports.main:app --reload
"""
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from lecture_reports import __version__
from lecture_reports.api.v1.endpoints.health import health_payload
from lecture_reports.api.v1.router import api_router
from lecture_reports.core.config import settings
from lecture_reports.core.database import AsyncSessionLocal, close_db, init_db
from lecture_reports.core.exceptions import LectureReportsError, error_response
from lecture_reports.core.logging_config import logger
from lecture_reports.core.middleware import (
    RequestLoggingMiddleware,
    RequestSizeLimitMiddleware,
    SecurityHeadersMiddleware,
)
from lecture_reports.core.rate_limiter import limiter, rate_limit_exceeded_handler
from lecture_reports.utils.responses import error_body

PLACEHOLDER_SECRETS = {"", "CHANGE_ME"}


def validate_critical_config() -> None:
    """Refuse to start without a database or a real JWT secret"""
    missing = []
    if not settings.DATABASE_URL:
        missing.append("DATABASE_URL")
    if settings.JWT_SECRET_KEY in PLACEHOLDER_SECRETS:
        missing.append("JWT_SECRET_KEY")
    if missing:
        for name in missing:
            logger.critical(f"[Startup] {name} is not set")
        raise RuntimeError(f"Missing critical configuration: {', '.join(missing)}")

    if settings.SECRET_KEY in PLACEHOLDER_SECRETS:
        logger.warning("[Startup] SECRET_KEY is still the placeholder value")
    if not settings.RATE_LIMIT_ENABLED:
        logger.warning("[Startup] Rate limiting is disabled; login and register are not throttled")


async def ensure_database_ready() -> bool:
    """Create missing tables and the role rows users reference"""
    from lecture_reports.db.seed_data import ensure_roles

    try:
        await init_db()
        async with AsyncSessionLocal() as session:
            created = await ensure_roles(session)
            await session.commit()
    except Exception as e:
        logger.error(f"[Startup] Database not ready: {e}")
        return False

    if created:
        logger.info(f"[Startup] Inserted roles: {', '.join(role.name for role in created)}")
    return True


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Starting {settings.APP_NAME} {__version__} ({settings.ENVIRONMENT})")
    validate_critical_config()
    if not await ensure_database_ready():
        logger.warning("[Startup] Continuing without a ready database; requests will fail until it is reachable")

    yield

    logger.info(f"Shutting down {settings.APP_NAME}")
    await close_db()


def register_exception_handlers(app: FastAPI) -> None:
    """Every error leaves the API in the same envelope as error_body()"""

    @app.exception_handler(LectureReportsError)
    async def lecture_reports_error_handler(request: Request, exc: LectureReportsError):
        if exc.status_code >= 500:
            logger.log_error_with_context(exc, context=f"{request.method} {request.url.path}")
        else:
            logger.info(f"[{exc.code}] {exc.message} ({request.method} {request.url.path})")
        return JSONResponse(status_code=exc.status_code, content=error_response(exc))

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        message = exc.detail if isinstance(exc.detail, str) else "Request failed"
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(message, f"HTTP_{exc.status_code}"),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        errors = jsonable_encoder(exc.errors())
        content = error_body("Invalid request data", "REQUEST_VALIDATION_ERROR", {"errors": errors})
        content["detail"] = errors
        return JSONResponse(status_code=422, content=content)

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.log_error_with_context(exc, context=f"{request.method} {request.url.path}")
        message = str(exc) if settings.DEBUG else "An error occurred"
        return JSONResponse(status_code=500, content=error_body(message, "INTERNAL_ERROR"))

    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)


def create_app() -> FastAPI:
    app = FastAPI(
        title=settings.APP_NAME,
        description="Weekly lecture reports, reviewer feedback and lecturer ratings",
        version=__version__,
        lifespan=lifespan,
        redirect_slashes=False,
    )
    app.state.limiter = limiter

    # Last added runs first: CORS, body cap, headers, logging, then rate limits
    app.add_middleware(SlowAPIMiddleware)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestSizeLimitMiddleware, max_size=settings.MAX_REQUEST_SIZE)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "X-Response-Time", "Retry-After"],
    )

    register_exception_handlers(app)

    @app.get("/", tags=["Root"])
    async def root():
        return {
            "message": f"Welcome to {settings.APP_NAME}",
            "version": __version__,
            "docs": "/docs",
            "health": "/health",
        }

    @app.get("/health", tags=["Health"])
    async def health_check():
        return await health_payload()

    app.include_router(api_router, prefix=f"/api/{settings.API_VERSION}")
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "lecture_reports.main:app",
        host=settings.SERVER_HOST,
        port=settings.SERVER_PORT,
        reload=settings.DEBUG,
    )
