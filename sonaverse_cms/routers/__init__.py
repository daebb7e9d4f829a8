"""Sonaverse CMS API Routers."""

from sonaverse_cms.routers.analytics import router as analytics_router
from sonaverse_cms.routers.auth import router as auth_router
from sonaverse_cms.routers.console import router as console_router
from sonaverse_cms.routers.inquiries import router as inquiries_router
from sonaverse_cms.routers.pages import router as pages_router
from sonaverse_cms.routers.press import router as press_router
from sonaverse_cms.routers.products import router as products_router
from sonaverse_cms.routers.settings import router as settings_router
from sonaverse_cms.routers.slugs import router as slugs_router
from sonaverse_cms.routers.stories import router as stories_router
from sonaverse_cms.routers.users import router as users_router

__all__ = [
    "analytics_router",
    "auth_router",
    "console_router",
    "inquiries_router",
    "pages_router",
    "press_router",
    "products_router",
    "settings_router",
    "slugs_router",
    "stories_router",
    "users_router",
]
