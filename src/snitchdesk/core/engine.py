"""処分エンジン (Disposition Engine)

レビュー状態機械・アラートログ・最新統計の唯一の所有者。
エンジンチャネルからメッセージを取り出し、期限を評価し、
解決結果を受信リレーの応答 Future へ届ける。

エンジン内部の状態はこのループだけが更新するのでロックは不要。
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections import deque
from collections.abc import Callable
from datetime import UTC, datetime

from .channel import (
    AlertReceived,
    DecisionSubmitted,
    EngineChannel,
    EngineMessage,
    ReviewRequested,
    StatsReceived,
)
from .config import SnitchDeskSettings, get_settings
from .models.alert import Alert
from .models.review import (
    Action,
    ConnectionInfo,
    Disposition,
    Resolution,
    ResolutionReason,
    ReviewRequest,
    Scope,
    Statistics,
)
from .models.view import (
    DEFAULT_CONTROLS,
    HELP_CONTROLS,
    EngineSnapshot,
    ResolutionView,
    ReviewView,
    Screen,
)
from .state import DispositionStateMachine, ReviewState

logger = logging.getLogger(__name__)


def _wall_now() -> datetime:
    return datetime.now(UTC)


class DispositionEngine:
    """処分エンジン

    Attributes:
        settings: 設定
        channel: 受信リレーとの間のチャネル
        machine: レビュー状態機械
    """

    def __init__(
        self,
        settings: SnitchDeskSettings | None = None,
        *,
        channel: EngineChannel | None = None,
        clock: Callable[[], float] = time.monotonic,
        wall_clock: Callable[[], datetime] = _wall_now,
    ):
        """
        Args:
            settings: 設定（省略時はグローバル設定）
            channel: エンジンチャネル（省略時は設定の容量で作成）
            clock: 期限評価用の単調時計（秒）
            wall_clock: アラート打刻用の実時計
        """
        self.settings = settings or get_settings()
        self.channel = channel or EngineChannel(self.settings.ingestion.channel_capacity)
        self.machine = DispositionStateMachine(
            self.settings.rules.get_combination(),
            max_pending=self.settings.review.max_pending,
        )
        self.clock = clock
        self.wall_clock = wall_clock

        max_entries = self.settings.alerts.max_entries
        self._alerts: deque[Alert] = deque(maxlen=max_entries or None)
        self._statistics: Statistics | None = None
        self._peer: str | None = None
        self._replies: dict[str, tuple[ReviewRequest, asyncio.Future]] = {}
        self._last_resolution: Resolution | None = None

        self._running = False
        self._task: asyncio.Task | None = None

    # ------------------------------------------------------------------
    # 読み取り専用ビュー
    # ------------------------------------------------------------------

    @property
    def alerts(self) -> list[Alert]:
        """アラートログ（受信順）"""
        return list(self._alerts)

    @property
    def statistics(self) -> Statistics | None:
        """最新の統計スナップショット"""
        return self._statistics

    @property
    def last_resolution(self) -> Resolution | None:
        return self._last_resolution

    @property
    def is_running(self) -> bool:
        return self._running

    def review_timeout_bound(self, window: float | None = None) -> float:
        """レビュー応答を待つ上限秒数

        待ち行列の全項目が期限まで残った場合でも応答が返る長さ。

        Args:
            window: 要求ごとのレビュー期限（設定値より短い場合は設定値を使う）
        """
        review = self.settings.review
        window = max(window or 0.0, review.review_window_seconds)
        return window * (review.max_pending + 1) + self.settings.ingestion.reply_grace_seconds

    def new_review_request(
        self,
        connection: ConnectionInfo,
        *,
        review_window_seconds: float | None = None,
        default_action: Action | None = None,
    ) -> ReviewRequest:
        """設定の既定値を補ってレビュー要求を作成"""
        review = self.settings.review
        return ReviewRequest.from_connection(
            connection,
            review_window_seconds=(
                review.review_window_seconds
                if review_window_seconds is None
                else review_window_seconds
            ),
            default_action=default_action or review.default_action,
        )

    # ------------------------------------------------------------------
    # ライフサイクル
    # ------------------------------------------------------------------

    async def start(self) -> None:
        """エンジンループを開始"""
        if self._task is not None:
            return
        self._running = True
        self._task = asyncio.create_task(self.run())

    async def stop(self) -> None:
        """エンジンループを停止

        処理中のレビューは復元しない。応答待ちの要求には既定アクションを返す。
        """
        self._running = False
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None

        # チャネルに残った要求も応答待ちなので同様に扱う
        while (message := self.channel.get_nowait()) is not None:
            if isinstance(message, ReviewRequested) and message.reply is not None:
                self._replies[message.request.item_id] = (message.request, message.reply)

        for request, future in self._replies.values():
            if not future.done():
                future.set_result(dropped_resolution(request))
        self._replies.clear()

    async def run(self) -> None:
        """エンジンループ

        メッセージ待ちは tick_interval_seconds で打ち切り、毎回期限を評価する。
        1件のメッセージ処理の失敗でループは止めない。
        """
        self._running = True
        interval = self.settings.review.tick_interval_seconds

        while self._running:
            try:
                message: EngineMessage | None = await asyncio.wait_for(
                    self.channel.get(), timeout=interval
                )
            except TimeoutError:
                message = None

            try:
                if message is not None:
                    self.handle(message)
                self.tick()
            except Exception:
                logger.exception(f"エンジンループでの処理に失敗: {type(message).__name__}")

    # ------------------------------------------------------------------
    # メッセージ処理
    # ------------------------------------------------------------------

    def handle(self, message: EngineMessage) -> None:
        """メッセージを1件処理"""
        now = self.clock()

        if isinstance(message, StatsReceived):
            self._statistics = message.stats
            if message.peer:
                self._peer = message.peer

        elif isinstance(message, AlertReceived):
            self._alerts.append(message.alert)

        elif isinstance(message, ReviewRequested):
            if message.reply is not None:
                self._replies[message.request.item_id] = (message.request, message.reply)
            self._deliver(self.machine.submit(message.request, now))

        elif isinstance(message, DecisionSubmitted):
            self._deliver(
                self.machine.decide(message.action, message.scope, now, item_id=message.item_id)
            )

        else:
            logger.warning(f"未知のメッセージを破棄: {type(message).__name__}")

    def tick(self) -> list[Resolution]:
        """期限を評価して解決結果を届ける"""
        resolutions = self.machine.tick(self.clock())
        self._deliver(resolutions)
        return resolutions

    def drain(self) -> int:
        """チャネルに溜まったメッセージを全て処理

        Returns:
            処理したメッセージ数
        """
        count = 0
        while (message := self.channel.get_nowait()) is not None:
            self.handle(message)
            count += 1
        self.tick()
        return count

    def _deliver(self, resolutions: list[Resolution]) -> None:
        """解決結果を応答 Future と表示状態に反映

        送達に失敗しても再送はしない（呼び出し元がすでに離れている）。
        """
        for resolution in resolutions:
            self._last_resolution = resolution

            if resolution.reason != ResolutionReason.DECIDED:
                self._alerts.append(
                    Alert.simple(self.wall_clock(), _describe_default(resolution))
                )

            entry = self._replies.pop(resolution.item_id, None)
            if entry is None:
                continue
            _, future = entry
            if future.done():
                logger.warning(f"レビュー応答の送達先が既に閉じています: item_id={resolution.item_id}")
                continue
            future.set_result(resolution)

    # ------------------------------------------------------------------
    # スナップショット
    # ------------------------------------------------------------------

    def snapshot(self, *, screen: Screen = Screen.MAIN, offset: int = 0) -> EngineSnapshot:
        """表示用スナップショットを作成

        Args:
            screen: 表示中の画面
            offset: アラートログの表示開始位置（呼び出し側が管理）
        """
        alerts = list(self._alerts)
        offset = max(0, min(offset, len(alerts)))

        review: ReviewView | None = None
        active = self.machine.active
        if self.machine.state == ReviewState.UNDER_REVIEW and active is not None:
            review = ReviewView(
                item_id=active.item_id,
                connection=active.request.connection,
                inputs=active.inputs,
                remaining_seconds=active.remaining(self.clock()),
                default_action=active.default_action,
            )

        last: ResolutionView | None = None
        if self._last_resolution is not None:
            r = self._last_resolution
            last = ResolutionView(
                item_id=r.item_id,
                action=r.disposition.action,
                scope=r.disposition.scope,
                reason=str(r.reason),
                operators=[op.to_dict() for op in r.operators],
            )

        controls = HELP_CONTROLS if screen == Screen.HELP else DEFAULT_CONTROLS
        return EngineSnapshot(
            screen=screen,
            peer=self._peer,
            statistics=self._statistics,
            review=review,
            pending_count=self.machine.pending_count,
            alerts=alerts[offset:],
            alert_total=len(alerts),
            alert_offset=offset,
            controls=list(controls),
            dropped_messages=self.channel.dropped,
            last_resolution=last,
        )


def _describe_default(resolution: Resolution) -> str:
    """既定アクションで解決した項目の通知文"""
    conn = resolution.request.connection
    target = conn.dst_host or conn.dst_ip or "-"
    port = conn.dst_port if conn.dst_port is not None else "-"
    return (
        f"{resolution.disposition.action} {conn.process_path or '-'} -> {target}:{port} "
        f"by default ({resolution.reason})"
    )


def dropped_resolution(request: ReviewRequest) -> Resolution:
    """エンジンが応答できなかった要求の解決結果（既定アクション・ONCE）"""
    return Resolution(
        request=request,
        disposition=Disposition(action=request.default_action, scope=Scope.ONCE),
        reason=ResolutionReason.DROPPED,
    )
