"""
Feed lookup: GET /?id=<feed-id> (legacy query form) and GET /feeds/{feed_id}.
"""
import logging

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.orm import Session

from feedproxy.core.errors import FeedProxyError, feed_error_to_http
from feedproxy.db.session import get_db
from feedproxy.services.feed import FeedOrchestrator, FeedResponse

router = APIRouter()
logger = logging.getLogger(__name__)


def get_orchestrator(request: Request) -> FeedOrchestrator:
    return request.app.state.orchestrator


def _lookup(orchestrator: FeedOrchestrator, db: Session, feed_id: str) -> FeedResponse:
    feed_id = (feed_id or "").strip()
    if not feed_id:
        raise HTTPException(status_code=400, detail="Missing feed id.")
    logger.info("Get feed %s", feed_id)
    try:
        return orchestrator.get_feed(db, feed_id)
    except FeedProxyError as e:
        http_exc = feed_error_to_http(e)
        if http_exc.status_code >= 500:
            logger.error("Error getting feed %s: %s", feed_id, e)
        else:
            logger.info("Feed %s rejected: %s", feed_id, e)
        raise http_exc from e


@router.get("/", response_model=FeedResponse, response_model_by_alias=True)
def get_feed_by_query(
    id: str = Query("", description="Upstream feed ID"),
    db: Session = Depends(get_db),
    orchestrator: FeedOrchestrator = Depends(get_orchestrator),
):
    """Cached feed by ?id=. 400 without id, 403 not whitelisted, 404 unknown upstream."""
    return _lookup(orchestrator, db, id)


@router.get("/feeds/{feed_id}", response_model=FeedResponse, response_model_by_alias=True)
def get_feed(
    feed_id: str,
    db: Session = Depends(get_db),
    orchestrator: FeedOrchestrator = Depends(get_orchestrator),
):
    return _lookup(orchestrator, db, feed_id)
