"""
Accident Analytics Service - Main Application

FastAPI application for forensic accident evidence intake, AI analysis and
case reporting.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from accident_analytics.config.settings import settings
from accident_analytics.api.routes.assistant import router as assistant_router
from accident_analytics.api.routes.auth import router as auth_router
from accident_analytics.api.routes.cases import router as cases_router
from accident_analytics.api.routes.intake import router as intake_router
from accident_analytics.core.case_store import CaseStore
from accident_analytics.core.intake_sessions import IntakeSessionRegistry
from accident_analytics.core.sessions import InMemorySessionStore, UserDirectory
from accident_analytics.infrastructure.analysis import get_analysis_provider
from accident_analytics.infrastructure.database import CaseRepository, db_client
from accident_analytics.infrastructure.storage import get_storage_provider
from accident_analytics.models import HealthResponse

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

VERSION = "2.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager"""
    # Startup
    logger.info(f"Starting {settings.service_name} ({settings.environment})")

    repository: Optional[CaseRepository] = None
    if settings.remote_store_configured:
        try:
            await db_client.initialize(settings.database_url)
            repository = CaseRepository(db_client)
        except Exception as e:
            # The case store keeps working on its session list
            logger.error(f"Remote case store unavailable, continuing with session data: {e}")
            await db_client.close()
    else:
        logger.info("No DATABASE_URL configured, case store is session-local")

    storage = get_storage_provider()
    case_store = CaseStore(repository=repository)

    app.state.case_store = case_store
    app.state.intake_registry = IntakeSessionRegistry(get_analysis_provider, case_store, storage)
    app.state.session_store = InMemorySessionStore()
    app.state.user_directory = UserDirectory()

    yield

    # Shutdown
    logger.info("Shutting down Accident Analytics service")
    await app.state.intake_registry.shutdown()
    await db_client.close()


# Create FastAPI app
app = FastAPI(
    title="Accident Analytics Service",
    description="Forensic accident reconstruction: evidence intake, AI analysis and case reports",
    version=VERSION,
    lifespan=lifespan
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(intake_router)
app.include_router(cases_router)
app.include_router(assistant_router)
app.include_router(auth_router)


# Root endpoint
@app.get(
    "/",
    summary="Service Information",
    description="""
Returns basic information about the Accident Analytics service.

**Response Example**:
```json
{
  "service": "accident-analytics-service",
  "version": "2.0.0",
  "status": "running",
  "environment": "production"
}
```

**Authorization**: None required (public endpoint)
    """,
    responses={
        200: {"description": "Service information returned successfully"}
    }
)
async def root():
    """Root endpoint"""
    return {
        "service": settings.service_name,
        "version": VERSION,
        "status": "running",
        "environment": settings.environment
    }


@app.get(
    "/health",
    response_model=HealthResponse,
    summary="Health Check",
    description="""
Returns service health with blob storage and remote case store availability.

`database_available` is null when no remote case store is configured; the
service is still healthy in that case because cases are kept in session data.
Storage being unavailable reports `degraded`.
    """,
    responses={
        200: {"description": "Health status returned"}
    }
)
async def health() -> HealthResponse:
    """Health check"""
    storage_ok = await get_storage_provider().health_check()
    database_ok = await db_client.health_check()

    status = "healthy" if storage_ok and database_ok is not False else "degraded"
    return HealthResponse(
        status=status,
        service=settings.service_name,
        storage_available=storage_ok,
        database_available=database_ok,
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "accident_analytics.main:app",
        host=settings.host,
        port=settings.port,
        reload=True if settings.environment == "development" else False
    )
