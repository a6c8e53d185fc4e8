import sys
import logging
from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from insightboard.api.limiter import limiter
from insightboard.api.routes import router
from insightboard.api.metrics import router as metrics_router
from insightboard.api.session import router as session_router
from insightboard.core.config import get_settings
from insightboard.core.errors import ErrorCodes, get_error_response
from insightboard.core.logging import configure_logging
from insightboard.core.middleware import CorrelationIDMiddleware, TimeoutMiddleware
from insightboard.core.security import SecurityHeadersMiddleware, validate_production_security
from insightboard.services.session import AnalysisSession

# Load environment variables
load_dotenv()

# Load and validate configuration
try:
    settings = get_settings()
except Exception as e:
    # Basic logger for startup errors
    logging.basicConfig(level=logging.ERROR)
    logging.getLogger(__name__).error(f"Failed to load configuration: {e}")
    sys.exit(1)

configure_logging(settings.log_level)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Insightboard API",
    description="Upload a CSV or JSON file and get statistics, charts and insights",
    version="1.0.0"
)

# Shared state for routes
app.state.limiter = limiter
app.state.settings = settings
app.state.session = AnalysisSession()


def rate_limit_handler(request: Request, exc: RateLimitExceeded):
    """Handle rate limit exceeded with structured error response."""
    correlation_id = getattr(request.state, 'correlation_id', 'unknown')
    error_info = get_error_response(ErrorCodes.RATE_LIMIT_EXCEEDED)
    error_info['correlation_id'] = correlation_id
    return JSONResponse(
        status_code=429,
        content={"detail": error_info},
        headers={"Retry-After": "60", "X-Correlation-ID": correlation_id}
    )


app.add_exception_handler(RateLimitExceeded, rate_limit_handler)

# Middleware, last added runs first
app.add_middleware(TimeoutMiddleware, timeout_seconds=settings.request_timeout_seconds)
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(GZipMiddleware, minimum_size=1000)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins_list,
    allow_credentials=True,
    allow_methods=["GET", "POST"],
    allow_headers=["Content-Type", "X-Correlation-ID"],
    expose_headers=["X-Correlation-ID"]
)
app.add_middleware(CorrelationIDMiddleware)

validate_production_security(settings.allowed_origins_list)

logger.info(f"CORS allowed origins: {settings.allowed_origins_list}")

app.include_router(router, prefix="/api")
app.include_router(session_router, prefix="/api")
app.include_router(metrics_router, prefix="/api")


@app.get("/")
async def root():
    return {"message": "Insightboard API is running"}


logger.info("Application started successfully")
