import sys
import time
from contextlib import asynccontextmanager

import httpx
import structlog
import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from src import __version__
from src.api import weather_router
from src.api.health import health_router
from src.config.config import Config, config
from src.exceptions import WeatherRelayError
from src.services.weather_relay_service import WeatherRelayService
from src.utils.logging_config import setup_logging

# Configure logging
setup_logging()
logger = structlog.get_logger(__name__)


def create_app(settings: Config = config) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: Configuration handed to the weather relay

    Returns:
        Configured FastAPI application instance
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Application lifespan manager.

        Opens the shared upstream HTTP client on startup and closes it on
        shutdown.
        """
        logger.info(
            "Starting Weather Relay application",
            environment=settings.environment,
            api_key_loaded="Yes" if settings.api_key_configured else "No",
        )
        if not settings.api_key_configured:
            logger.warning("OPENWEATHER_API_KEY is not set; weather requests will fail")

        client = httpx.AsyncClient(
            timeout=httpx.Timeout(settings.request_timeout, connect=settings.connect_timeout),
            follow_redirects=True,
        )
        app.state.relay_service = WeatherRelayService(settings, client=client)

        try:
            yield
        finally:
            logger.info("Shutting down Weather Relay")
            await client.aclose()

    app = FastAPI(
        title="Weather Relay API",
        description="""
        ## Weather Relay API

        Relays OpenWeatherMap current conditions and 5-day forecast for a
        location in a single call.

        ### Usage:
        - `GET /api/weather?city=London`
        - `GET /api/weather?lat=51.51&lon=-0.13`
        """,
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    app.state.settings = settings

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Request logging middleware
    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        """Log all HTTP requests with timing information."""
        start_time = time.time()

        # Log request
        logger.info(
            "HTTP request started",
            method=request.method,
            path=request.url.path,
            client_ip=request.client.host if request.client else "unknown",
        )

        # Process request
        try:
            response = await call_next(request)
            process_time = time.time() - start_time

            # Log successful response
            logger.info(
                "HTTP request completed",
                method=request.method,
                path=request.url.path,
                status_code=response.status_code,
                process_time=process_time,
            )

            # Add processing time header
            response.headers["X-Process-Time"] = str(process_time)
            return response

        except Exception as e:
            process_time = time.time() - start_time
            logger.error(
                "HTTP request failed",
                method=request.method,
                path=request.url.path,
                error=str(e),
                process_time=process_time,
            )
            raise

    # Relay exception handler
    @app.exception_handler(WeatherRelayError)
    async def relay_exception_handler(request: Request, exc: WeatherRelayError):
        """Render relay errors with the status and body they define."""
        logger.warning(
            "Weather relay error",
            method=request.method,
            path=request.url.path,
            error_type=type(exc).__name__,
            status_code=exc.status_code,
            error=exc.message,
        )

        return JSONResponse(status_code=exc.status_code, content=exc.to_response())

    # Global exception handler
    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Handle unexpected exceptions globally."""
        logger.error(
            "Unhandled exception",
            method=request.method,
            path=request.url.path,
            error=str(exc),
            exc_info=True,
        )

        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Internal server error"},
        )

    # HTTP exception handler
    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        """Handle HTTP exceptions with consistent formatting."""
        logger.warning(
            "HTTP exception",
            method=request.method,
            path=request.url.path,
            status_code=exc.status_code,
            detail=exc.detail,
        )

        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.detail, "code": exc.status_code},
        )

    # Request validation handler
    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """Report malformed query parameters as a 400 with an error message."""
        errors = exc.errors()
        logger.warning(
            "Request validation failed",
            method=request.method,
            path=request.url.path,
            errors=errors,
        )
        message = errors[0].get("msg", "Invalid request") if errors else "Invalid request"

        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": message},
        )

    # Include API routes
    app.include_router(health_router)
    app.include_router(weather_router)

    # Root endpoint (hide from swagger)
    @app.get("/", tags=["Root"], include_in_schema=False)
    async def root():
        """Root endpoint providing basic system information."""
        return {
            "message": "Weather Relay API",
            "version": __version__,
            "status": "running",
            "timestamp": time.time(),
            "docs": "/docs",
            "redoc": "/redoc",
        }

    return app


# Create the application instance
app = create_app()


def main():
    logger.info(
        f"Starting Weather Relay server in {config.environment} environment",
        host=config.api_host,
        port=config.api_port,
        api_key_loaded="Yes" if config.api_key_configured else "No",
    )

    try:
        uvicorn.run(
            app,
            host=config.api_host,
            port=config.api_port,
            log_level=config.log_level.lower(),
            access_log=True,
            server_header=False,
            date_header=False,
        )
    except KeyboardInterrupt:
        logger.info("Server shutdown requested")
    except Exception as e:
        logger.error("Server failed to start", error=str(e))
        sys.exit(1)


if __name__ == "__main__":
    main()
