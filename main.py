from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.openapi.utils import get_openapi
from contextlib import asynccontextmanager
import logging
import os

from config.settings import settings
from db.session import create_tables
from core.errors import PaymentError
from middleware.logging import LoggingMiddleware
from utilities.response import error_response, payment_error_response

# Import API routers
from api.merchant import router as merchant_router
from api.payment_links import router as payment_links_router
from api.transactions import router as transactions_router
from api.api_keys import router as api_keys_router
from api.analytics import router as analytics_router
from api.payment import router as payment_router

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager"""
    logger.info("Starting SolPay API...")

    create_tables()
    logger.info("Database tables created/verified")

    yield

    logger.info("Shutting down SolPay API...")

# Create FastAPI app
app = FastAPI(
    title="SolPay API",
    description="Merchant dashboard and Solana payment links with automatic settlement swaps",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan
)

app.add_middleware(LoggingMiddleware)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_origin_regex=settings.CORS_ORIGIN_REGEX,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

@app.exception_handler(PaymentError)
async def payment_exception_handler(request: Request, exc: PaymentError):
    """Map payment flow errors to their status and a machine-readable code"""
    if exc.transfer_signature:
        logger.error(
            f"{exc.code} on {request.url.path} after confirmed transfer {exc.transfer_signature}"
        )
    else:
        logger.warning(f"{exc.code} on {request.url.path}: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content=payment_error_response(exc)
    )

@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    """Handle HTTP exceptions"""
    return JSONResponse(
        status_code=exc.status_code,
        content=error_response(exc.detail if isinstance(exc.detail, str) else str(exc.detail)),
        headers=getattr(exc, "headers", None)
    )

@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle request validation errors"""
    errors = [
        {"field": ".".join(str(p) for p in err.get("loc", [])), "message": err.get("msg")}
        for err in exc.errors()
    ]
    return JSONResponse(
        status_code=422,
        content=error_response("Invalid request", {"errors": errors})
    )

@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Handle general exceptions"""
    logger.error(f"Unhandled exception: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content=error_response("Internal server error")
    )

# Health check
@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "healthy", "message": "SolPay API is running"}

# Root endpoint
@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "message": "SolPay API",
        "version": "1.0.0",
        "docs": "/docs",
        "redoc": "/redoc"
    }

# Include routers
app.include_router(merchant_router, prefix="/api")
app.include_router(payment_links_router, prefix="/api")
app.include_router(transactions_router, prefix="/api")
app.include_router(api_keys_router, prefix="/api")
app.include_router(analytics_router, prefix="/api")
app.include_router(payment_router, prefix="/api")

def custom_openapi():
    if app.openapi_schema:
        return app.openapi_schema
    openapi_schema = get_openapi(
        title=app.title,
        version=app.version,
        description=app.description,
        routes=app.routes,
    )
    components = openapi_schema.setdefault("components", {})
    security_schemes = components.setdefault("securitySchemes", {})
    security_schemes["BearerAuth"] = {
        "type": "http",
        "scheme": "bearer",
        "bearerFormat": "JWT"
    }
    # Everything except the public checkout routes needs a Supabase session token
    for path, methods in openapi_schema.get("paths", {}).items():
        if not path.startswith("/api/") or path.startswith("/api/pay/"):
            continue
        for op in methods.values():
            op.setdefault("security", [{"BearerAuth": []}])
    app.openapi_schema = openapi_schema
    return app.openapi_schema

app.openapi = custom_openapi  # type: ignore

if __name__ == "__main__":
    import uvicorn
    port = int(os.getenv("PORT", 8000))
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=port,
        reload=True,
        log_level="info"
    )
