import logging
import time

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from fastapi.responses import JSONResponse

from . import __version__
from .api.deps import get_token_service, memory_storage
from .api.routes.appointments import router as appointments_router
from .api.routes.auth import router as auth_router
from .api.routes.chat import router as chat_router
from .api.routes.doctors import router as doctors_router
from .api.routes.pharmacies import router as pharmacies_router
from .api.routes.prescriptions import router as prescriptions_router
from .core.config import settings
from .core.database import SessionLocal, init_db
from .core.exceptions import AppError
from .services.pharmacy_service import seed_pharmacies
from .storage.sql import SQLStorage

logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("sehat_saathi")

API_PREFIX = "/api"

app = FastAPI(
    title=settings.APP_NAME,
    version=__version__,
    description="Appointment booking and prescriptions for patients and doctors",
    openapi_url=f"{API_PREFIX}/openapi.json",
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PATCH", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type"],
)

# The test client talks to "testserver", which is not a real host
if not settings.TESTING:
    app.add_middleware(TrustedHostMiddleware, allowed_hosts=settings.ALLOWED_HOSTS)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    started = time.perf_counter()
    response = await call_next(request)
    elapsed = time.perf_counter() - started

    response.headers["X-Process-Time"] = f"{elapsed:.6f}"
    logger.info(
        f"{request.method} {request.url.path} -> {response.status_code} "
        f"({elapsed * 1000:.1f} ms)"
    )
    return response


def app_error_response(exc: AppError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=exc.headers)


@app.exception_handler(AppError)
async def handle_app_error(request: Request, exc: AppError):
    return app_error_response(exc)


@app.exception_handler(RequestValidationError)
async def handle_request_validation(request: Request, exc: RequestValidationError):
    issues = []
    for error in exc.errors():
        location = [str(part) for part in error["loc"] if part != "body"]
        issues.append({"path": ".".join(location), "message": error["msg"]})
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": "Validation error", "error": "VALIDATION_ERROR", "issues": issues},
    )


# Status-code handlers win over class handlers, so NotFoundError raised by a
# service arrives here too.
@app.exception_handler(status.HTTP_404_NOT_FOUND)
async def handle_not_found(request: Request, exc: HTTPException):
    if isinstance(exc, AppError):
        return app_error_response(exc)
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content={
            "detail": f"No route for {request.method} {request.url.path}",
            "error": "NOT_FOUND",
            "path": request.url.path,
        },
    )


@app.exception_handler(status.HTTP_500_INTERNAL_SERVER_ERROR)
async def handle_internal_error(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "An unexpected error occurred", "error": "INTERNAL_SERVER_ERROR"},
    )


for router in (auth_router, appointments_router, prescriptions_router, doctors_router,
               pharmacies_router, chat_router):
    app.include_router(router, prefix=API_PREFIX)


def seed_default_pharmacies():
    if settings.STORAGE_BACKEND == "memory":
        seed_pharmacies(memory_storage)
        return
    db = SessionLocal()
    try:
        seed_pharmacies(SQLStorage(db))
    finally:
        db.close()


@app.on_event("startup")
async def on_startup():
    logger.info(f"{settings.APP_NAME} {__version__} starting")

    # Refuse to serve requests without a signing secret
    get_token_service()

    if settings.STORAGE_BACKEND == "memory":
        logger.info("Storage: in-memory (data is lost on restart)")
    else:
        db_url = settings.get_database_url
        logger.info(f"Storage: SQL ({db_url.split(':', 1)[0]})")
        try:
            init_db()
        except Exception:
            logger.exception("Could not create database tables")
            raise

    if settings.SEED_PHARMACIES:
        seed_default_pharmacies()


@app.on_event("shutdown")
async def on_shutdown():
    logger.info(f"{settings.APP_NAME} stopped")


@app.get("/health", tags=["Meta"])
async def health_check():
    return {"status": "healthy", "version": __version__, "storage": settings.STORAGE_BACKEND}


@app.get("/", tags=["Meta"])
async def root():
    return {
        "service": settings.APP_NAME,
        "version": __version__,
        "docs": app.docs_url,
        "health": "/health",
    }


@app.get(f"{API_PREFIX}/info", tags=["Meta"])
async def api_info():
    """Map of the public endpoint groups."""
    return {
        "name": settings.APP_NAME,
        "version": __version__,
        "endpoints": {
            "authentication": f"{API_PREFIX}/auth",
            "appointments": f"{API_PREFIX}/appointments",
            "prescriptions": f"{API_PREFIX}/prescriptions",
            "doctors": f"{API_PREFIX}/doctors",
            "pharmacies": f"{API_PREFIX}/pharmacies",
            "assistant": f"{API_PREFIX}/chat/ai",
            "openapi": app.openapi_url,
        },
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("sehat_saathi.main:app", host=settings.HOST, port=settings.PORT, reload=settings.DEBUG)
