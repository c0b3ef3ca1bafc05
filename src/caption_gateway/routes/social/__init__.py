from .facebook import router as facebook_router
from .instagram import router as instagram_router
from .session import router as session_router

__all__ = ["facebook_router", "instagram_router", "session_router"]
