"""
FastAPI app entrypoint.

Owns the background scheduler for the engagement sweeps and exposes the manual
broadcast and device-registration endpoints.
"""
import logging
from contextlib import asynccontextmanager
from pathlib import Path

from apscheduler.schedulers.background import BackgroundScheduler
from dotenv import load_dotenv
from fastapi import FastAPI

# Load .env from the project root before any app code
load_dotenv(Path(__file__).resolve().parent.parent / ".env")

from engagement.api.routes import broadcast, devices  # noqa: E402
from engagement.config import settings, setup_logging  # noqa: E402
from engagement.scheduler.engagement_jobs import register_engagement_jobs  # noqa: E402

setup_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    scheduler = None
    if settings.scheduler_enabled:
        scheduler = BackgroundScheduler(timezone=settings.scheduler_timezone)
        register_engagement_jobs(scheduler)
        scheduler.start()
    else:
        logger.info("SCHEDULER_ENABLED=false; engagement sweeps will not run in this process")
    app.state.scheduler = scheduler
    logger.info("Engagement notifier ready (push provider: %s)", settings.push_provider)
    yield
    if scheduler is not None:
        scheduler.shutdown(wait=False)


app = FastAPI(title="Engagement Notifier", version="0.1.0", lifespan=lifespan)

app.include_router(broadcast.router, tags=["notifications"])
app.include_router(devices.router, tags=["devices"])


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}
