import logging
import os

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import FRONTEND_URL
from .domain.automation.router import router as automation_router
from .domain.bookings.router import router as bookings_router
from .domain.clients.router import router as clients_router
from .domain.conversations.router import router as conversations_router
from .domain.metrics.router import router as metrics_router
from .errors import ConfigurationMissing, UpstreamRequestError
from .security_headers import SecurityHeadersMiddleware

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Reduce verbosity of third-party libraries
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)

SECURITY_HEADERS_ENABLED = os.getenv("SECURITY_HEADERS_ENABLED", "true").lower() == "true"

app = FastAPI(title="Clinic Dashboard API", version="1.0.0")


@app.exception_handler(ConfigurationMissing)
async def configuration_missing_handler(request: Request, exc: ConfigurationMissing):
    """Missing credentials are the one failure surfaced to the dashboard as an error"""
    logger.error(f"{request.method} {request.url.path} - {exc}")
    return JSONResponse(status_code=500, content={"detail": str(exc)})


@app.exception_handler(UpstreamRequestError)
async def upstream_request_error_handler(request: Request, exc: UpstreamRequestError):
    logger.error(f"{request.method} {request.url.path} - {exc}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "details": exc.details},
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.warning(f"Validation error for {request.url.path}: {exc.errors()}")
    return JSONResponse(status_code=422, content={"detail": jsonable_encoder(exc.errors())})


@app.middleware("http")
async def log_requests(request: Request, call_next):
    try:
        response = await call_next(request)
        return response
    except Exception as e:
        logger.error(f"{request.method} {request.url.path} - Error: {str(e)}")
        raise


if SECURITY_HEADERS_ENABLED:
    app.add_middleware(SecurityHeadersMiddleware, exclude_paths=["/health", "/docs", "/openapi.json"])
    logger.info("Security headers enabled")
else:
    logger.warning("Security headers DISABLED - only use in development!")


# CORS Configuration
ALLOWED_ORIGINS = os.getenv("ALLOWED_ORIGINS", f"{FRONTEND_URL},http://localhost:3000").split(",")

logger.info(f"CORS allowed origins: {ALLOWED_ORIGINS}")

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS", "PATCH"],
    allow_headers=["*"],
)

# Routes
app.include_router(conversations_router)
app.include_router(metrics_router)
app.include_router(bookings_router)
app.include_router(clients_router)
app.include_router(automation_router)


@app.get("/")
def root():
    return {"message": "Clinic Dashboard API is running"}


@app.get("/health")
def health():
    return {"status": "healthy"}
