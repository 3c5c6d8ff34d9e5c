"""Review エンドポイント

表示用スナップショットの取得と、操作者の決定の投入。
"""

import asyncio
import logging

from fastapi import APIRouter, HTTPException, Query, status

from ...core import DecisionSubmitted
from ...core.models import EngineSnapshot, Screen
from ..dependencies import EngineDep
from ..models import DecisionAccepted, DecisionRequest

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Review"])


@router.get("/snapshot", response_model=EngineSnapshot)
async def get_snapshot(
    engine: EngineDep,
    screen: Screen = Screen.MAIN,
    offset: int = Query(default=0, ge=0, description="アラートログの表示開始位置"),
) -> EngineSnapshot:
    """エンジン状態のスナップショットを取得"""
    return engine.snapshot(screen=screen, offset=offset)


@router.post(
    "/review/decision",
    response_model=DecisionAccepted,
    status_code=status.HTTP_202_ACCEPTED,
)
async def submit_decision(body: DecisionRequest, engine: EngineDep) -> DecisionAccepted:
    """操作者の決定を投入

    適用はエンジンループで行う。期限切れや非アクティブな項目への決定は
    エンジン側で無視される。チャネルが上限時間内に空かなければ 503。
    """
    timeout = engine.settings.ingestion.decision_timeout_seconds
    message = DecisionSubmitted(action=body.action, scope=body.scope, item_id=body.item_id)
    try:
        await asyncio.wait_for(engine.channel.put(message), timeout=timeout)
    except TimeoutError:
        logger.warning(f"決定を投入できません（チャネル満杯）: item_id={body.item_id}")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Engine channel is full; decision not accepted",
        ) from None
    return DecisionAccepted(item_id=body.item_id)
