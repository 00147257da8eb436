from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from fastapi.responses import JSONResponse
import uvicorn
import logging
from contextlib import asynccontextmanager

from app.core.config import settings
from app.core.database import close_db, init_db
from app.core.exceptions import AppError
from app.core.redis_client import close_redis, init_redis
from app.api.v1.api import api_router
from app.core.logging import setup_logging
from app.services.notifier import build_notifier

# Setup logging
setup_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events"""
    # Startup
    logger.info(f"Starting up {settings.APP_NAME}...")
    await init_db()
    if settings.RATE_LIMIT_ENABLED:
        await init_redis()
    app.state.notifier = build_notifier()
    logger.info(f"{settings.APP_NAME} startup complete")

    yield

    # Shutdown
    logger.info(f"Shutting down {settings.APP_NAME}...")
    await close_redis()
    await close_db()


# Create FastAPI app
app = FastAPI(
    title=settings.APP_NAME,
    description="Email OTP sign-in and per-user appliance energy and cost estimates",
    version=settings.VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan
)

# Add middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(
    TrustedHostMiddleware,
    allowed_hosts=settings.ALLOWED_HOSTS
)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message},
        headers=headers,
    )


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    """Report the first invalid field as a 400"""
    errors = exc.errors()
    message = "Invalid input"
    if errors:
        error = errors[0]
        field = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        message = f"{field}: {error.get('msg')}" if field else error.get("msg", message)
    return JSONResponse(status_code=400, content={"detail": message})


# Include API routes
app.include_router(api_router, prefix="/api/v1")


@app.get("/api/health")
async def health_check():
    """Main health check endpoint"""
    return {
        "status": "healthy",
        "service": settings.APP_NAME,
        "version": settings.VERSION,
        "modules": ["otp", "appliances"],
        "email_configured": bool(settings.SMTP_HOST),
    }


# Root endpoint
@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "message": f"{settings.APP_NAME} API is running",
        "version": settings.VERSION,
        "docs": "/docs",
    }


if __name__ == "__main__":
    uvicorn.run(
        "app.main:app",
        host="0.0.0.0",
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level="info"
    )
