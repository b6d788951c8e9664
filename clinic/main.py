import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

# Import all models to ensure they're registered with SQLAlchemy Base
from . import (
    models,  # noqa: F401
    models_notification,  # noqa: F401
)
from .config import ALLOWED_ORIGINS
from .database import Base, engine
from .domain.appointments import router as appointments_router
from .domain.otp import router as otp_router
from .domain.users import router as users_router
from .exceptions import ClinicError

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Reduce verbosity of third-party libraries
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Application starting up...")
    create_tables()
    yield
    logger.info("Application shutting down...")


def create_tables(bind=None) -> None:
    """Create missing tables. Another worker winning the race is fine; anything else stops startup."""
    try:
        Base.metadata.create_all(bind=bind or engine, checkfirst=True)
    except Exception as e:
        if "already exists" not in str(e):
            logger.error(f"❌ Failed to create database tables: {e}")
            raise
        logger.info("Database tables already exist (created by another worker)")
    else:
        logger.info("✅ Database tables ready")


app = FastAPI(title="Clinic Booking API", version="1.0.0", lifespan=lifespan)


@app.exception_handler(ClinicError)
async def clinic_error_handler(request: Request, exc: ClinicError):
    """Domain errors carry their own status code"""
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} - {exc.detail}")
    else:
        logger.info(f"{request.method} {request.url.path} - {exc.status_code}: {exc.detail}")
    return JSONResponse(
        status_code=exc.status_code, content={"success": False, "message": exc.detail}
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.warning(f"Validation error for {request.url.path}: {exc.errors()}")
    return JSONResponse(status_code=422, content={"detail": jsonable_errors(exc)})


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    logger.exception(f"❌ Unexpected error on {request.method} {request.url.path}: {str(exc)}")
    return JSONResponse(
        status_code=500, content={"success": False, "message": "Internal server error"}
    )


def jsonable_errors(exc: RequestValidationError) -> list:
    # Validator ValueErrors land in "ctx" as exception objects, which JSON can't encode
    errors = []
    for error in exc.errors():
        error = dict(error)
        if "ctx" in error:
            error["ctx"] = {k: str(v) for k, v in error["ctx"].items()}
        errors.append(error)
    return errors


@app.middleware("http")
async def log_requests(request: Request, call_next):
    try:
        response = await call_next(request)
        return response
    except Exception as e:
        logger.error(f"{request.method} {request.url.path} - Error: {str(e)}")
        raise


# CORS Configuration
logger.info(f"CORS allowed origins: {ALLOWED_ORIGINS}")

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)

# Routes
app.include_router(otp_router)
app.include_router(users_router)
app.include_router(appointments_router)


@app.get("/")
def root():
    return {"message": "Clinic Booking API is running"}


@app.get("/health")
def health():
    return {"status": "healthy"}
