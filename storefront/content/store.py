"""Content store: typed reads and writes over the site's collections.

One explicitly constructed instance is shared by the web app (see
storefront.main.create_app). Built without an engine, the store is
"unconfigured": reads come back empty and writes report failure, so pages
still render. Database errors are logged and reported the same way.

Every successful write publishes a change signal for its collection on the
store's ChangeFeed.
"""

import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any, AsyncIterator

from sqlalchemy import delete, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

from storefront.content.moderation import PROFANITY_MESSAGE, contains_profanity
from storefront.content.realtime import ChangeFeed
from storefront.db.models import COLLECTIONS, Base, Review, SiteContent, utcnow
from storefront.db.session import create_schema, create_session_factory

logger = logging.getLogger(__name__)

NOT_CONFIGURED = "Not configured"
SITE_CONTENT = "site_content"


class UnknownCollectionError(ValueError):
    """Raised for a collection name the store does not manage."""
    pass


@dataclass
class ReviewResult:
    success: bool
    error: str | None = None


class ContentStore:
    """Reads, writes and change signals for the content collections."""

    def __init__(self, engine: AsyncEngine | None, feed: ChangeFeed | None = None):
        self._engine = engine
        self._session_factory = create_session_factory(engine) if engine is not None else None
        self.feed = feed or ChangeFeed()

    @property
    def configured(self) -> bool:
        return self._session_factory is not None

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        """Open a session. Callers must check `configured` first."""
        if self._session_factory is None:
            raise RuntimeError("Content store is not configured")
        async with self._session_factory() as session:
            yield session

    async def create_schema(self) -> None:
        if self._engine is not None:
            await create_schema(self._engine)
            logger.info("Content store schema created")

    async def dispose(self) -> None:
        if self._engine is not None:
            await self._engine.dispose()

    @staticmethod
    def model_for(collection: str) -> type[Base]:
        try:
            return COLLECTIONS[collection]
        except KeyError:
            raise UnknownCollectionError(f"Unknown collection: {collection}") from None

    # --- Generic collection operations ---

    async def list_records(self, collection: str, **filters: Any) -> list:
        """All rows of a collection, optionally filtered by column equality.

        Ordered by order_index; reviews are newest first.
        """
        model = self.model_for(collection)
        if not self.configured:
            logger.debug(f"Store not configured, returning no {collection}")
            return []

        query = select(model).filter_by(**filters)
        if model is Review:
            query = query.order_by(Review.created_at.desc())
        else:
            query = query.order_by(model.order_index)

        try:
            async with self.session() as session:
                result = await session.execute(query)
                return list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.warning(f"Failed to list {collection}: {e}")
            return []

    async def get_record(self, collection: str, record_id: str):
        model = self.model_for(collection)
        if not self.configured:
            return None
        try:
            async with self.session() as session:
                return await session.get(model, record_id)
        except SQLAlchemyError as e:
            logger.warning(f"Failed to get {collection}/{record_id}: {e}")
            return None

    async def create_record(self, collection: str, fields: dict):
        """Insert a row. Returns the created record, or None on failure."""
        model = self.model_for(collection)
        if not self.configured:
            return None
        record = model(**fields)
        try:
            async with self.session() as session:
                session.add(record)
                await session.commit()
        except SQLAlchemyError as e:
            logger.warning(f"Failed to create {collection} record: {e}")
            return None

        logger.info(f"Created {collection} record {record.id}")
        self.feed.publish(collection)
        return record

    async def update_record(self, collection: str, record_id: str, fields: dict) -> bool:
        """Apply a partial update. False when nothing matched or on failure."""
        model = self.model_for(collection)
        if not self.configured or not fields:
            return False
        try:
            async with self.session() as session:
                result = await session.execute(
                    update(model).where(model.id == record_id).values(**fields)
                )
                await session.commit()
        except SQLAlchemyError as e:
            logger.warning(f"Failed to update {collection}/{record_id}: {e}")
            return False

        if result.rowcount == 0:
            logger.warning(f"No {collection} record {record_id} to update")
            return False

        logger.info(f"Updated {collection} record {record_id}")
        self.feed.publish(collection)
        return True

    async def delete_record(self, collection: str, record_id: str) -> bool:
        model = self.model_for(collection)
        if not self.configured:
            return False
        try:
            async with self.session() as session:
                result = await session.execute(delete(model).where(model.id == record_id))
                await session.commit()
        except SQLAlchemyError as e:
            logger.warning(f"Failed to delete {collection}/{record_id}: {e}")
            return False

        if result.rowcount == 0:
            return False

        logger.info(f"Deleted {collection} record {record_id}")
        self.feed.publish(collection)
        return True

    # --- Reviews ---

    async def list_approved_reviews(self) -> list[Review]:
        return await self.list_records("reviews", is_approved=True)

    async def list_all_reviews(self) -> list[Review]:
        return await self.list_records("reviews")

    async def has_user_reviewed(self, user_id: str) -> bool:
        return len(await self.list_records("reviews", user_id=user_id)) > 0

    async def create_review(
        self,
        user_id: str,
        name: str,
        rating: int,
        review_text: str,
        discord_username: str | None = None,
        discord_avatar: str | None = None,
    ) -> ReviewResult:
        """Insert an approved review after screening name and body.

        The profanity check runs here, at the point of writing, whatever the
        page already checked.
        """
        if not self.configured:
            return ReviewResult(success=False, error=NOT_CONFIGURED)

        if contains_profanity(name) or contains_profanity(review_text):
            logger.info(f"Rejected review from user {user_id}: profanity")
            return ReviewResult(success=False, error=PROFANITY_MESSAGE)

        record = await self.create_record(
            "reviews",
            {
                "user_id": user_id,
                "name": name,
                "rating": rating,
                "review_text": review_text,
                "discord_username": discord_username,
                "discord_avatar": discord_avatar,
                "is_approved": True,
            },
        )
        if record is None:
            return ReviewResult(success=False, error="Failed to submit review")
        return ReviewResult(success=True)

    # --- Site content ---

    async def get_site_content(self, page: str) -> dict[str, dict]:
        """All stored sections of a page, keyed by section name."""
        if not self.configured:
            return {}
        try:
            async with self.session() as session:
                result = await session.execute(select(SiteContent).where(SiteContent.page == page))
                return {row.section: row.content for row in result.scalars().all()}
        except SQLAlchemyError as e:
            logger.warning(f"Failed to load site content for {page}: {e}")
            return {}

    async def update_site_content(self, page: str, section: str, content: dict) -> bool:
        """Upsert the content blob for (page, section)."""
        if not self.configured:
            return False
        try:
            async with self.session() as session:
                result = await session.execute(
                    select(SiteContent).where(
                        SiteContent.page == page,
                        SiteContent.section == section,
                    )
                )
                entry = result.scalar_one_or_none()
                if entry is None:
                    session.add(
                        SiteContent(page=page, section=section, content=content, updated_at=utcnow())
                    )
                else:
                    entry.content = content
                    entry.updated_at = utcnow()
                await session.commit()
        except SQLAlchemyError as e:
            logger.warning(f"Failed to save site content {page}/{section}: {e}")
            return False

        logger.info(f"Saved site content {page}/{section}")
        self.feed.publish(SITE_CONTENT)
        return True
