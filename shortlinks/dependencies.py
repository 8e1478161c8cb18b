"""
FastAPI dependencies for dependency injection.

Everything shared across requests (settings, session factory, static links,
click tracker) is built once in the application lifespan and stored on
app.state. Routes reach it through these functions instead of module globals.

Pattern: Dependency Injection
- Easy to test (app.dependency_overrides)
- No hidden process-wide state
"""

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from shortlinks.config import Settings
from shortlinks.database.connection import get_db
from shortlinks.hit_processor.click_tracker import ClickTracker
from shortlinks.services.link_service import LinkService


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_click_tracker(request: Request) -> ClickTracker:
    return request.app.state.click_tracker


def get_link_service(request: Request, db: AsyncSession = Depends(get_db)) -> LinkService:
    """
    Get LinkService with the request's session and the static links injected.

    Routes depend on the service, the service depends on infrastructure.
    """
    return LinkService(db=db, static_links=request.app.state.static_links)
