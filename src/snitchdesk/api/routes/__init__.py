"""API ルート

FastAPIルーターを機能別に分割。
"""

from .relay import router as relay_router
from .review import router as review_router
from .system import router as system_router

__all__ = [
    "relay_router",
    "review_router",
    "system_router",
]
