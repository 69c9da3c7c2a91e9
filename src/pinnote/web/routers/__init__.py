from pinnote.web.routers.comments import router as comments_router
from pinnote.web.routers.live import router as live_router

__all__ = [
    "comments_router",
    "live_router",
]
