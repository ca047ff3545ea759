# /annotation_backend/main.py

import logging

# --- Core FastAPI Imports ---
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager

# --- Application-specific Imports ---
from .core.config import settings
from .core.errors import AuthenticationError, DomainError
from .core.log_config import configure_logging
from .db.database import init_db
from .routers import (
    admin_router,
    annotations_router,
    auth_router,
    evaluations_router,
    mt_quality_router,
    onboarding_router,
    sentences_router,
)

logger = logging.getLogger(__name__)


# --- Application Lifecycle Management ---
@asynccontextmanager
async def lifespan(app: FastAPI):
    # Runs once at startup.
    configure_logging(settings.LOG_LEVEL)
    init_db()
    logger.info("Annotation backend started")
    yield


# --- FastAPI Application Instance Creation ---
app = FastAPI(
    title="Translation Annotation API",
    description="Sentence distribution, annotation lifecycle, peer evaluation and MT-quality assessment.",
    version="1.0.0",
    lifespan=lifespan
)

# --- Middleware Configuration ---
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# --- Domain Error Translation ---
@app.exception_handler(DomainError)
async def domain_error_handler(request: Request, exc: DomainError):
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, AuthenticationError) else None
    if exc.status_code >= 500:
        logger.error("%s on %s %s: %s", exc.__class__.__name__, request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message}, headers=headers)


# --- API Router Inclusion ---
app.include_router(auth_router.router, prefix="/api", tags=["Auth"])
app.include_router(sentences_router.router, prefix="/api/sentences", tags=["Sentences"])
app.include_router(annotations_router.router, prefix="/api/annotations", tags=["Annotations"])
app.include_router(evaluations_router.router, prefix="/api", tags=["Evaluations"])
app.include_router(mt_quality_router.router, prefix="/api/mt-quality", tags=["MT Quality"])
app.include_router(onboarding_router.router, prefix="/api", tags=["Onboarding"])
app.include_router(admin_router.router, prefix="/api/admin", tags=["Admin"])


# --- Root / Health Check Endpoint ---
@app.get("/", tags=["Health Check"])
async def read_root():
    """A simple health check endpoint to confirm the API is online."""
    return {"status": "Annotation backend is running!", "version": app.version}
