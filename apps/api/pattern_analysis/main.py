"""FastAPI application entry point."""
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text

from pattern_analysis.core.config import settings
from pattern_analysis.db.session import engine
from pattern_analysis.services.errors import AnalysisServiceError

# ============================================================================
# Sentry Integration (optional, for production error tracking)
# ============================================================================

if settings.SENTRY_DSN and settings.ENV != "dev":
    import sentry_sdk
    from sentry_sdk.integrations.fastapi import FastApiIntegration
    from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration

    sentry_sdk.init(
        dsn=settings.SENTRY_DSN,
        environment=settings.ENV,
        integrations=[
            FastApiIntegration(transaction_style="endpoint"),
            SqlalchemyIntegration(),
        ],
        traces_sample_rate=0.1,  # 10% of requests for performance monitoring
        send_default_pii=False,  # Complaints and photos are sensitive
    )
    logging.info("Sentry initialized for error tracking")

# ============================================================================
# Rate Limiting
# ============================================================================

from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from pattern_analysis.core.rate_limit import limiter

# ============================================================================
# FastAPI App
# ============================================================================

app = FastAPI(
    title="Pattern Analysis API",
    description="Body-pattern analysis requests, scoring and narrative results",
    version=settings.VERSION,
    docs_url="/docs" if settings.ENV == "dev" else None,
    redoc_url="/redoc" if settings.ENV == "dev" else None,
)

# Add rate limiter
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# CORS middleware - must be added before routers
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,  # Required for cookies
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "X-Requested-With", "X-Payment-Signature"],
)

# ============================================================================
# Service errors
# ============================================================================

ERROR_STATUS_CODES = {
    "not_found": 404,
    "invalid_transition": 409,
    "precondition_failed": 409,
    "validation_error": 422,
}


@app.exception_handler(AnalysisServiceError)
async def analysis_service_error_handler(request: Request, exc: AnalysisServiceError):
    """Single place where service errors become HTTP responses."""
    status_code = ERROR_STATUS_CODES.get(exc.code, 400)
    return JSONResponse(status_code=status_code, content=exc.to_dict())


# ============================================================================
# Routers
# ============================================================================

from pattern_analysis.routers import analysis_requests, results, score_matrix, webhooks

app.include_router(analysis_requests.router, prefix="/analysis-requests", tags=["analysis-requests"])
app.include_router(score_matrix.router, prefix="/analysis-requests", tags=["scoring"])
app.include_router(results.router, prefix="/analysis-requests", tags=["results"])
app.include_router(webhooks.router, prefix="/webhooks", tags=["webhooks"])


# ============================================================================
# Health Check
# ============================================================================

@app.get("/health")
def health():
    """
    Health check endpoint.

    Verifies database connectivity and returns environment info.
    """
    with engine.connect() as conn:
        conn.execute(text("SELECT 1"))
    return {"status": "ok", "env": settings.ENV, "version": settings.VERSION}
