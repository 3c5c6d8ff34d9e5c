"""エンジンチャネル

受信リレー（複数の生産者）からエンジンループ（単一の消費者）へ
メッセージを渡す有界チャネル。

リレーは offer() で非ブロッキングに投入し、満杯なら破棄する。
送信側（デーモン）のRPCがエンジン側の遅延で詰まらないようにするため。
全生産者が同じイベントループ上にあるので、投入順はそのまま消費順になる。
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass

from .models.alert import Alert
from .models.review import Action, ReviewRequest, Scope, Statistics

logger = logging.getLogger(__name__)


# =============================================================================
# メッセージ
# =============================================================================


@dataclass(frozen=True)
class StatsReceived:
    """統計スナップショットの受信"""

    stats: Statistics
    peer: str | None = None


@dataclass(frozen=True)
class AlertReceived:
    """正規化済みアラートの受信"""

    alert: Alert


@dataclass(frozen=True)
class ReviewRequested:
    """レビュー要求の受信

    reply はリレー側で応答を待つ Future。エンジンが解決結果を設定する。
    """

    request: ReviewRequest
    reply: asyncio.Future | None = None


@dataclass(frozen=True)
class DecisionSubmitted:
    """操作者の決定"""

    action: Action
    scope: Scope
    item_id: str | None = None


EngineMessage = StatsReceived | AlertReceived | ReviewRequested | DecisionSubmitted


# =============================================================================
# EngineChannel
# =============================================================================


class EngineChannel:
    """多生産者・単一消費者の有界チャネル

    Attributes:
        capacity: 保持できるメッセージ数の上限
        dropped: 満杯で破棄したメッセージ数
    """

    def __init__(self, capacity: int = 256) -> None:
        self.capacity = capacity
        self.dropped = 0
        self._queue: asyncio.Queue[EngineMessage] = asyncio.Queue(maxsize=capacity)

    def offer(self, message: EngineMessage) -> bool:
        """非ブロッキングで投入（満杯なら破棄して False）"""
        try:
            self._queue.put_nowait(message)
        except asyncio.QueueFull:
            self.dropped += 1
            logger.warning(
                f"エンジンチャネルが満杯のため破棄: {type(message).__name__} "
                f"(capacity={self.capacity}, dropped={self.dropped})"
            )
            return False
        return True

    async def put(self, message: EngineMessage) -> None:
        """空きができるまで待って投入（ローカル操作者の決定用）"""
        await self._queue.put(message)

    async def get(self) -> EngineMessage:
        """メッセージを取り出す（届くまで待機）"""
        return await self._queue.get()

    def get_nowait(self) -> EngineMessage | None:
        """メッセージを取り出す（空なら None）"""
        try:
            return self._queue.get_nowait()
        except asyncio.QueueEmpty:
            return None

    def qsize(self) -> int:
        return self._queue.qsize()
