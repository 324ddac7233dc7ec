from app.api.routes.acquisition import router as acquisition_router
from app.api.routes.health import router as health_router
from app.api.routes.lawsuits import router as lawsuits_router
from app.api.routes.notifications import router as notifications_router
from app.api.routes.privacy import router as privacy_router
from app.api.routes.saved_searches import router as saved_searches_router
from app.api.routes.sources import router as sources_router
from app.api.routes.users import router as users_router

__all__ = [
    "acquisition_router",
    "health_router",
    "lawsuits_router",
    "notifications_router",
    "privacy_router",
    "saved_searches_router",
    "sources_router",
    "users_router",
]
