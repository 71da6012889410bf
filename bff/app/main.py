"""
FastAPI BFF Application Factory
================================

This is the main entry point for the backend-for-frontend service that sits
between the marketplace web client and the marketplace backend API.

Architecture:
    Browser (buyer/seller/agent/admin dashboards) → BFF (this service) → Backend API
                                                                      → Payment processor

Routers:
    - /api/*                        : Proxied requests to the backend (route table)
    - /api/create-payment-intent    : Payment intent creation
    - /health                       : Health check endpoint

Environment Variables:
    - BACKEND_API_URL: Backend base URL (default: http://localhost:5000/api)
    - BACKEND_TIMEOUT_SECONDS / BACKEND_CONNECT_TIMEOUT_SECONDS: Backend call timeouts
    - STRIPE_SECRET_KEY: Payment processor secret key
    - PAYMENT_CURRENCY: Currency for payment intents (default: aud)
    - ALLOWED_ORIGINS: Comma-separated CORS origins
    - LOG_LEVEL: Logging level (default: INFO)

Running the Service:
    Development:
        uvicorn bff.app.main:app --reload --host 0.0.0.0 --port 3000

    Production:
        uvicorn bff.app.main:app --host 0.0.0.0 --port 3000 --workers 4
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import Any, Dict, Optional

import httpx
import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from bff.app.config import Settings, get_settings, validate_configuration
from bff.app.models import HealthResponse
from bff.app.payments import PaymentGateway, payments_router
from bff.app.proxy import BackendForwarder, proxy_router

SERVICE_NAME = "bff"
SERVICE_VERSION = "1.0.0"


# Configure structured JSON logging
def setup_logging(log_level: str = "INFO") -> None:
    """
    Configure structured logging for the application.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format='{"timestamp": "%(asctime)s", "level": "%(levelname)s", "logger": "%(name)s", "message": "%(message)s", "module": "%(module)s", "function": "%(funcName)s"}',
        handlers=[logging.StreamHandler(sys.stdout)]
    )


def build_backend_client(
    settings: Settings,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> httpx.AsyncClient:
    """
    Create the HTTP client used for every backend call.

    Args:
        settings: Application settings (timeouts)
        transport: Optional transport override (tests use httpx.MockTransport)
    """
    timeout = httpx.Timeout(
        settings.BACKEND_TIMEOUT_SECONDS,
        connect=settings.BACKEND_CONNECT_TIMEOUT_SECONDS,
    )
    return httpx.AsyncClient(timeout=timeout, transport=transport, follow_redirects=False)


# Create FastAPI application
def create_app(
    settings: Optional[Settings] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
    payment_gateway: Optional[PaymentGateway] = None,
) -> FastAPI:
    """
    Application factory function.

    Creates and configures the FastAPI application instance with:
        - Lifespan management (backend client and payment gateway)
        - CORS middleware
        - Route handlers
        - Exception handlers

    Args:
        settings: Settings to use instead of the environment
        transport: Transport for the backend client
        payment_gateway: Gateway to use instead of one built from settings

    Returns:
        FastAPI: Configured application instance
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Application lifespan manager.

        Startup tasks:
            - Validate configuration and log warnings
            - Open the backend HTTP client and wrap it in a BackendForwarder
            - Build the payment gateway

        Shutdown tasks:
            - Close the backend HTTP client
            - Close the payment gateway's HTTP client
        """
        setup_logging(settings.LOG_LEVEL)
        logger = logging.getLogger("bff.main")

        status = validate_configuration(settings)
        for warning in status["warnings"]:
            logger.warning(f"Configuration warning: {warning}")
        for error in status["errors"]:
            logger.error(f"Configuration error: {error}")

        backend_client = build_backend_client(settings, transport)
        app.state.settings = settings
        forwarder = BackendForwarder(backend_client, settings.backend_api_url_str)
        app.state.forwarder = forwarder

        gateway = payment_gateway or PaymentGateway.from_settings(settings)
        app.state.payment_gateway = gateway

        logger.info(
            "BFF service started",
            extra={
                "service": SERVICE_NAME,
                "version": SERVICE_VERSION,
                "backend_url": forwarder.base_url,
                "payments_enabled": gateway is not None,
                "payment_currency": gateway.currency if gateway is not None else None,
            }
        )

        try:
            yield
        finally:
            logger.info("Shutting down BFF service")

            await backend_client.aclose()
            app.state.forwarder = None

            # Injected gateways belong to the caller
            if gateway is not None and payment_gateway is None:
                await gateway.aclose()
            app.state.payment_gateway = None

            logger.info("BFF service shutdown complete")

    app = FastAPI(
        title="Marketplace BFF",
        description="Backend-for-frontend proxy for the property marketplace web client",
        version=SERVICE_VERSION,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc"
    )

    # Configure CORS
    origins = settings.allowed_origins_list
    if origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=origins,
            allow_credentials=True,
            allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
            allow_headers=["*"],
        )

    # Payment route first: it is not part of the backend route table
    app.include_router(payments_router, prefix="/api", tags=["Payments"])
    app.include_router(proxy_router, prefix="/api", tags=["Backend Proxy"])

    @app.get("/health", tags=["System"], response_model=HealthResponse)
    async def health_check() -> Dict[str, str]:
        """
        Health check endpoint.

        Returns:
            dict: Service health information
        """
        return {
            "status": "ok",
            "service": SERVICE_NAME,
            "version": SERVICE_VERSION
        }

    @app.get("/", tags=["System"])
    async def root() -> Dict[str, Any]:
        """Service metadata and available endpoints."""
        return {
            "service": SERVICE_NAME,
            "version": SERVICE_VERSION,
            "description": "Backend-for-frontend proxy for the property marketplace web client",
            "endpoints": {
                "health": "/health",
                "docs": "/docs",
                "api": "/api"
            }
        }

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        """Render framework HTTP errors (404, 405, 503...) as envelopes."""
        return JSONResponse(
            status_code=exc.status_code,
            content={"success": False, "error": str(exc.detail)},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(
            status_code=422,
            content={
                "success": False,
                "error": "Invalid request",
                "detail": jsonable_errors(exc),
            },
        )

    # Global exception handler
    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """
        Global exception handler for unhandled errors.

        Logs the error and returns a standardized error response.
        """
        logger = logging.getLogger("bff.main")
        logger.error(
            f"Unhandled exception: {str(exc)}",
            extra={
                "path": request.url.path,
                "method": request.method,
                "exception_type": type(exc).__name__
            },
            exc_info=True
        )

        return JSONResponse(
            status_code=500,
            content={
                "success": False,
                "error": "Internal server error",
            }
        )

    return app


def jsonable_errors(exc: RequestValidationError) -> list:
    """Validation errors without the non-serializable ``ctx``/``input`` values."""
    return [
        {"loc": list(error.get("loc", ())), "msg": error.get("msg"), "type": error.get("type")}
        for error in exc.errors()
    ]


# Create app instance for uvicorn
app = create_app()


if __name__ == "__main__":
    """
    Direct execution entry point.

    This allows running the service directly with: python -m bff.app.main
    However, using uvicorn command is recommended for production.
    """
    settings = get_settings()

    uvicorn.run(
        "bff.app.main:app",
        host=settings.BFF_HOST,
        port=settings.BFF_PORT,
        log_level=settings.LOG_LEVEL.lower()
    )
