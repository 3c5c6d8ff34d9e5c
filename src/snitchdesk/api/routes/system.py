"""System エンドポイント

ヘルスチェックなどシステム系のエンドポイント。
"""

from fastapi import APIRouter

from ...core import __version__
from ..dependencies import EngineDep
from ..models import HealthResponse

router = APIRouter(tags=["System"])


@router.get("/health", response_model=HealthResponse)
async def health_check(engine: EngineDep) -> HealthResponse:
    """ヘルスチェック"""
    return HealthResponse(
        status="healthy",
        version=__version__,
        engine_running=engine.is_running,
        pending_count=engine.machine.pending_count,
        dropped_messages=engine.channel.dropped,
    )
