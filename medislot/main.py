import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

# Import models so they're registered with SQLAlchemy Base
from . import models  # noqa: F401
from .database import Base, engine
from .domain.accounts.router import router as accounts_router
from .domain.payments.router import router as payments_router
from .domain.scheduling.router import appointments_router, schedules_router, slots_router

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
    try:
        Base.metadata.create_all(bind=engine, checkfirst=True)
        logger.info("Database tables created successfully")
    except Exception as e:
        # Ignore "already exists" errors from race conditions between workers
        error_msg = str(e)
        if "already exists" in error_msg or "duplicate key" in error_msg:
            logger.info("Database tables already exist (created by another worker)")
        else:
            logger.error(f"Failed to create database tables: {e}")
            raise

    yield
    logger.info("Application shutting down...")


app = FastAPI(title="MediSlot API", version="1.0.0", lifespan=lifespan)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Report request validation failures in the same shape as booking failures"""
    errors = exc.errors()
    message = "; ".join(
        f"{'.'.join(str(part) for part in error.get('loc', ())[1:])}: {error.get('msg')}"
        for error in errors
    )
    logger.info(f"Request validation failed for {request.url.path}: {message}")
    return JSONResponse(
        status_code=422,
        content={"detail": {"error": "validation", "message": message}},
    )


@app.exception_handler(SQLAlchemyError)
async def database_exception_handler(request: Request, exc: SQLAlchemyError):
    """Unexpected storage failures surface as a generic fatal error"""
    logger.error(f"❌ Database error on {request.method} {request.url.path}: {exc}")
    logger.exception(exc)
    return JSONResponse(
        status_code=500,
        content={"detail": {"error": "internal", "message": "Internal server error"}},
    )


# CORS Configuration
ALLOWED_ORIGINS = os.getenv(
    "ALLOWED_ORIGINS", "http://localhost:5173,http://localhost:3000"
).split(",")

logger.info(f"CORS allowed origins: {ALLOWED_ORIGINS}")

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
    allow_headers=["*"],
)

app.include_router(accounts_router)
app.include_router(slots_router)
app.include_router(appointments_router)
app.include_router(schedules_router)
app.include_router(payments_router)


@app.get("/")
def root():
    return {"message": "MediSlot API is running"}


@app.get("/health")
def health():
    return {"status": "healthy"}
