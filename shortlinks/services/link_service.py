import logging
from typing import Mapping, Optional

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import func

from shortlinks.models.short_link import ShortLink
from shortlinks.schemas.link import LinkSource, ResolvedLink

logger = logging.getLogger(__name__)


class LinkService:
    """
    Token lookup and click counting.

    The session and the static links mapping are injected, so tests can
    hand in their own.
    """

    def __init__(self, db: AsyncSession, static_links: Optional[Mapping[str, str]] = None):
        """
        Args:
            db: Async database session
            static_links: token -> URL pairs loaded from CSV (optional)
        """
        self.db = db
        self.static_links = static_links or {}

    async def get_active_link(self, token: str) -> Optional[ShortLink]:
        """Get the active row for a token, or None. Matching is case-sensitive."""
        result = await self.db.execute(
            select(ShortLink).where(
                ShortLink.token == token,
                ShortLink.is_active.is_(True),
            )
        )
        return result.scalar_one_or_none()

    async def resolve(self, token: str) -> Optional[ResolvedLink]:
        """
        Resolve a token to its redirect target.

        Flow:
        1. Active database row (wins over a CSV entry with the same token)
        2. Static CSV links
        3. None -> not found

        Database errors propagate to the caller.
        """
        link = await self.get_active_link(token)
        if link is not None:
            return ResolvedLink.model_validate(link)

        long_url = self.static_links.get(token)
        if long_url is not None:
            logger.debug("Found token %s in static links", token)
            return ResolvedLink(token=token, long_url=long_url, source=LinkSource.CSV)

        return None

    async def increment_click_count(self, token: str) -> bool:
        """
        Bump click_count for an active token.

        Single UPDATE ... SET click_count = click_count + 1, so concurrent
        increments don't overwrite each other.

        Returns:
            True if a row was updated
        """
        result = await self.db.execute(
            update(ShortLink)
            .where(ShortLink.token == token, ShortLink.is_active.is_(True))
            .values(click_count=ShortLink.click_count + 1, updated_at=func.now())
            .execution_options(synchronize_session=False)
        )
        await self.db.commit()
        return result.rowcount > 0
