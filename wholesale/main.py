"""
Wholesale FastAPI Main Application
Entry point for the wholesale ordering and allocation REST API
"""
from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from fastapi.responses import JSONResponse

from wholesale.api.v1.api_router import api_router
from wholesale.core.config import settings
from wholesale.core.database import check_db_connection, init_db
from wholesale.core.exceptions import AllocationError
from wholesale.core.logging import get_logger, setup_logging

setup_logging()
logger = get_logger("api")

# Create FastAPI application
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="""
    ## Wholesale Ordering API

    B2B apparel ordering with time-ordered inventory allocation.

    ### Allocation:
    - Stock is granted per color/size option to open purchase orders, oldest first
    - Every order change, cancellation and inbound receipt reallocates the affected products
    - A full reset-and-reallocate pass is available to administrators
    """,
    docs_url=settings.DOCS_URL,
    redoc_url=settings.REDOC_URL,
    openapi_url=settings.OPENAPI_URL,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Add trusted host middleware for production
if not settings.DEBUG:
    app.add_middleware(
        TrustedHostMiddleware,
        allowed_hosts=settings.ALLOWED_HOSTS
    )


@app.get("/health", tags=["System"])
async def health_check():
    """
    Health check endpoint for monitoring and load balancers

    Returns system status and database connectivity
    """
    try:
        db_status = check_db_connection()

        return {
            "status": "healthy" if db_status else "degraded",
            "version": settings.APP_VERSION,
            "database": "connected" if db_status else "disconnected",
            "debug": settings.DEBUG
        }
    except Exception as e:
        logger.error(f"Health check failed: {e}")
        raise HTTPException(status_code=503, detail="Service unavailable")


@app.get("/info", tags=["System"])
async def system_info():
    """System information endpoint"""
    return {
        "application": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "api_version": "v1",
        "docs_url": settings.DOCS_URL,
        "vat_rate": settings.VAT_RATE,
        "open_order_statuses": settings.OPEN_ORDER_STATUSES,
    }


@app.on_event("startup")
async def startup_event():
    """
    Application startup tasks

    Verify database connectivity and create missing tables
    """
    logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION}")

    if not check_db_connection():
        logger.error("Failed to connect to database on startup")
        raise RuntimeError("Database connection failed")

    init_db()
    logger.info("Application startup completed successfully")


@app.on_event("shutdown")
async def shutdown_event():
    logger.info("Shutting down application")


@app.exception_handler(AllocationError)
async def allocation_exception_handler(request, exc: AllocationError):
    """Allocation passes are rolled back as a whole; report the failure"""
    logger.error(f"Allocation failed for products {exc.product_ids}: {exc}")

    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "error": "Allocation failed",
            "detail": str(exc) if settings.DEBUG else "Inventory allocation could not be completed",
            "product_ids": exc.product_ids,
            "type": "allocation_error"
        }
    )


@app.exception_handler(Exception)
async def global_exception_handler(request, exc):
    """
    Global exception handler for unhandled errors

    Args:
        request: FastAPI request object
        exc: Exception that occurred

    Returns:
        JSON error response
    """
    logger.error(f"Unhandled exception: {exc}", exc_info=True)

    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "error": "Internal server error",
            "detail": str(exc) if settings.DEBUG else "An unexpected error occurred",
            "type": "server_error"
        }
    )


app.include_router(api_router, prefix=settings.API_V1_STR)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "wholesale.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower()
    )
