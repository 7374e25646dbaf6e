"""Main FastAPI application."""
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from academy_web.api import admin, auth, booking, catalog, content
from academy_web.core.config import settings
from academy_web.services.scheduler import maintenance_scheduler

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    logger.info("Starting academy web gateway")
    logger.info(f"Backend API: {settings.BACKEND_API_URL}")
    logger.info(f"Debug mode: {settings.DEBUG}")

    await maintenance_scheduler.start()

    yield

    logger.info("Shutting down academy web gateway")
    await maintenance_scheduler.stop()


app = FastAPI(
    title="Academy Web Gateway",
    description="Public site, booking and admin gateway for a tennis and pickleball academy",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(catalog.router)
app.include_router(content.router)
app.include_router(booking.router)
app.include_router(auth.router)
app.include_router(admin.router)


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "scheduler_running": maintenance_scheduler.running,
    }
