import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from billbook.config import settings
from billbook.database import init_db, get_db_session
from billbook.api.v1.router import api_router
from billbook.core.exceptions import (
    BillbookError,
    ValidationError,
    NotFoundError,
    OverpaymentError,
    CustomerHasDocumentsError,
    SequenceCorruptionError,
    AggregationError,
)


logger = logging.getLogger(__name__)

# Most specific first
ERROR_STATUS_CODES = [
    (ValidationError, 422),
    (NotFoundError, 404),
    (OverpaymentError, 409),
    (CustomerHasDocumentsError, 409),
    (SequenceCorruptionError, 500),
    (AggregationError, 503),
]


def status_code_for(exc: BillbookError) -> int:
    for error_class, status_code in ERROR_STATUS_CODES:
        if isinstance(exc, error_class):
            return status_code
    return 400


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Configure logging and make sure the schema exists."""
    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION}")

    await init_db()

    yield

    logger.info("Shutting down...")


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="GST invoices, dyeing bills, payments and customer ledger.",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router)


@app.exception_handler(BillbookError)
async def billbook_exception_handler(request: Request, exc: BillbookError):
    """Map domain errors to HTTP responses with a stable error_code."""
    status_code = status_code_for(exc)
    if status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.error_code}: {exc.message}")
    else:
        logger.info(f"{request.method} {request.url.path} rejected: {exc.error_code}: {exc.message}")

    return JSONResponse(
        status_code=status_code,
        content={
            "detail": exc.message,
            "error_code": exc.error_code,
            "details": exc.details,
        },
    )


@app.exception_handler(IntegrityError)
async def integrity_exception_handler(request: Request, exc: IntegrityError):
    """Constraint violations, e.g. a document number issued twice."""
    logger.warning(f"{request.method} {request.url.path} hit a constraint: {exc.orig}")
    return JSONResponse(
        status_code=409,
        content={"detail": "Conflicting write, please retry", "error_code": "CONFLICT"},
    )


# Health check endpoint
@app.get("/health", tags=["Health"])
async def health_check():
    """Health check endpoint with database validation."""
    health_status = {
        "status": "healthy",
        "app": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "checks": {
            "database": "unknown"
        }
    }

    # Check database connectivity
    try:
        async with get_db_session() as session:
            result = await session.execute(text("SELECT 1"))
            result.scalar()
            health_status["checks"]["database"] = "connected"
    except SQLAlchemyError as e:
        logger.error(f"Health check database error: {e}")
        health_status["status"] = "unhealthy"
        health_status["checks"]["database"] = f"error: {str(e)}"

    # Return 503 if unhealthy
    if health_status["status"] == "unhealthy":
        return JSONResponse(status_code=503, content=health_status)

    return health_status


@app.get("/", tags=["Root"])
async def root():
    """Root endpoint."""
    return {
        "message": f"Welcome to {settings.APP_NAME}",
        "version": settings.APP_VERSION,
        "docs": "/docs",
    }
