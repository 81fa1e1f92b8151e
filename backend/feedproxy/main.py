"""
FastAPI app entrypoint.

Serves cached upstream feeds; images are written to BHP_IMAGE_DIRECTORY and
served elsewhere under BHP_IMAGE_URL.
"""
import logging
from contextlib import asynccontextmanager
from pathlib import Path

from dotenv import load_dotenv
from fastapi import FastAPI

# Load .env from backend/ before any app code
load_dotenv(Path(__file__).resolve().parent.parent / ".env")

from feedproxy.api.routes import feed
from feedproxy.config import settings
from feedproxy.core.logging import configure_logging
from feedproxy.db.session import SessionLocal, init_db
from feedproxy.scheduler.prune_job import PruneQueue
from feedproxy.services.feed import FeedOrchestrator, FeedProxyConfig

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging(settings.log_file)
    init_db()
    config = FeedProxyConfig.from_settings(settings)
    prune_queue = PruneQueue(
        SessionLocal,
        config.image_directory,
        max_workers=settings.prune_max_workers,
        max_pending=settings.prune_max_pending,
    )
    app.state.prune_queue = prune_queue
    app.state.orchestrator = FeedOrchestrator(config, prune_queue=prune_queue)
    if config.allowed_feed_ids:
        logger.info("Serving %s whitelisted feeds", len(config.allowed_feed_ids))
    logger.info("Feed proxy ready (upstream %s)", config.api_base_url)
    yield
    prune_queue.shutdown(wait=True)


app = FastAPI(title="Feed Proxy", version="0.1.0", lifespan=lifespan)

app.include_router(feed.router, tags=["feed"])


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}
