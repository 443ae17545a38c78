from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
from newshub.core.config import settings
from newshub.core.database import engine, Base
from newshub.core.logging_config import setup_logging, CorrelationIdMiddleware
from newshub.api.endpoints import admin
from newshub.services.scheduler import scheduler
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
import newshub.models  # noqa: F401  (register tables on Base.metadata)
import logging

setup_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    logger.info("Starting NewsHub application...")

    Base.metadata.create_all(bind=engine)
    logger.info("Database tables created")

    if settings.SCHEDULER_ENABLED:
        scheduler.start()
    else:
        logger.info("Scheduler disabled by configuration")

    yield

    logger.info("Shutting down NewsHub application...")
    if settings.SCHEDULER_ENABLED:
        scheduler.shutdown()


app = FastAPI(
    title="NewsHub - RSS News Aggregator",
    description="Feed ingestion service with scheduled RSS/Atom fetching",
    version="1.0.0",
    lifespan=lifespan,
)

# Add correlation ID middleware (first, so all logs have correlation IDs)
app.add_middleware(CorrelationIdMiddleware)

# Add rate limiting
app.state.limiter = admin.limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(admin.router, prefix="/api/admin", tags=["admin"])


@app.get("/")
def root():
    return {
        "name": "NewsHub",
        "version": "1.0.0",
        "description": "RSS News Aggregator",
    }


@app.get("/health")
def health_check():
    return {"status": "healthy", "scheduler": scheduler.get_status().is_running}
