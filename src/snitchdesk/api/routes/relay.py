"""受信リレー エンドポイント

デーモンからの呼び出し（ping / alert / 接続レビュー）を受け、
1呼び出しにつき1メッセージをエンジンチャネルへ非ブロッキングで投入する。
チャネルが満杯でも呼び出しには必ず応答する。
"""

import asyncio
import logging
from datetime import UTC, datetime

from fastapi import APIRouter, Request

from ...core import (
    AlertReceived,
    ReviewRequested,
    StatsReceived,
    dropped_resolution,
    normalize_alert,
)
from ...core.models import AlertMessage, Resolution
from ..dependencies import EngineDep
from ..models import AlertReply, ConnectionReply, ConnectionRequest, PingReply, PingRequest

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Relay"])


@router.post("/ping", response_model=PingReply)
async def ping(body: PingRequest, request: Request, engine: EngineDep) -> PingReply:
    """統計スナップショットを受信"""
    if body.stats is None:
        logger.warning(f"統計なしのPingを受信: id={body.id}")
        return PingReply(id=body.id)

    peer = request.client.host if request.client else None
    engine.channel.offer(StatsReceived(stats=body.stats, peer=peer))
    return PingReply(id=body.id)


@router.post("/alerts", response_model=AlertReply)
async def post_alert(body: AlertMessage, engine: EngineDep) -> AlertReply:
    """アラートを受信（受信時刻で正規化して投入）"""
    alert = normalize_alert(datetime.now(UTC), body)
    engine.channel.offer(AlertReceived(alert=alert))
    return AlertReply(id=body.id)


@router.post("/connections", response_model=ConnectionReply)
async def ask_rule(body: ConnectionRequest, engine: EngineDep) -> ConnectionReply:
    """接続レビューを要求し、解決結果を待って応答

    エンジンに届かなかった場合や上限時間内に応答がない場合は
    既定アクション・ONCE で応答する。
    """
    review = engine.new_review_request(
        body.connection,
        review_window_seconds=body.review_window_seconds,
        default_action=body.default_action,
    )
    reply: asyncio.Future[Resolution] = asyncio.get_running_loop().create_future()

    if not engine.channel.offer(ReviewRequested(request=review, reply=reply)):
        return ConnectionReply.from_resolution(body.id, dropped_resolution(review))

    timeout = engine.review_timeout_bound(review.review_window_seconds)
    try:
        resolution = await asyncio.wait_for(reply, timeout=timeout)
    except TimeoutError:
        logger.warning(
            f"レビュー応答がタイムアウト: item_id={review.item_id}, timeout={timeout}s"
        )
        resolution = dropped_resolution(review)

    return ConnectionReply.from_resolution(body.id, resolution)
