"""Server-sent events: tells open pages that a collection they show changed.

The browser side reloads the page on each `change` event, so every signal
results in a full re-fetch. Subscriptions are dropped when the client goes
away.
"""

import asyncio
import logging

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sse_starlette.sse import EventSourceResponse

from storefront.content.realtime import ChangeFeed
from storefront.content.store import SITE_CONTENT, ContentStore
from storefront.db.models import COLLECTIONS
from storefront.web.deps import get_store

logger = logging.getLogger(__name__)

router = APIRouter()

KEEPALIVE_SECONDS = 15.0
WATCHABLE = set(COLLECTIONS) | {SITE_CONTENT}


async def change_stream(
    request: Request,
    feed: ChangeFeed,
    collections: list[str],
    keepalive_seconds: float = KEEPALIVE_SECONDS,
):
    """Yield a `change` event per write on any of `collections`.

    Subscribes on first iteration and unsubscribes when the client
    disconnects or the stream is closed.
    """
    queue: asyncio.Queue[str] = asyncio.Queue()
    subscriptions = [
        feed.subscribe(collection, lambda collection=collection: queue.put_nowait(collection))
        for collection in collections
    ]
    try:
        while True:
            if await request.is_disconnected():
                break
            try:
                collection = await asyncio.wait_for(queue.get(), timeout=keepalive_seconds)
                yield {"event": "change", "data": collection}
            except asyncio.TimeoutError:
                yield {"event": "keepalive", "data": ""}
    finally:
        for subscription in subscriptions:
            feed.unsubscribe(subscription)
        logger.debug(f"Event stream closed for {', '.join(collections)}")


@router.get("/events")
async def events(
    request: Request,
    collections: list[str] = Query(default=[]),
    store: ContentStore = Depends(get_store),
):
    """Stream a `change` event naming the collection each time one is written."""
    unknown = [c for c in collections if c not in WATCHABLE]
    if unknown or not collections:
        raise HTTPException(status_code=400, detail=f"Cannot watch: {', '.join(unknown) or 'nothing'}")

    return EventSourceResponse(change_stream(request, store.feed, collections))
