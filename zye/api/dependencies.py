"""
FastAPI dependency providers.

Each request gets its own store (bound to its own DB session) and its own
service objects. Tests replace `get_link_store` and `get_preview_generator`
through `app.dependency_overrides`.
"""

from functools import lru_cache

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from zye.db.session import get_session
from zye.services.link_admin import LinkAdminService
from zye.services.link_store import LinkStore, SQLLinkStore
from zye.services.preview import PreviewGenerator
from zye.services.redirect_service import RedirectService
from zye.services.templates import TemplateRenderer


@lru_cache
def get_template_renderer() -> TemplateRenderer:
    """Templates are read from disk once per process."""
    return TemplateRenderer()


def get_link_store(session: AsyncSession = Depends(get_session)) -> LinkStore:
    return SQLLinkStore(session)


def get_preview_generator(
    renderer: TemplateRenderer = Depends(get_template_renderer),
) -> PreviewGenerator:
    return PreviewGenerator(renderer)


def get_redirect_service(
    store: LinkStore = Depends(get_link_store),
    renderer: TemplateRenderer = Depends(get_template_renderer),
    preview: PreviewGenerator = Depends(get_preview_generator),
) -> RedirectService:
    return RedirectService(store, renderer, preview)


def get_link_admin_service(store: LinkStore = Depends(get_link_store)) -> LinkAdminService:
    return LinkAdminService(store)
