"""状態機械 (State Machines)

レビュー項目の状態遷移を管理。
アクティブなレビュー項目は常に高々1つ。
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass
from enum import Enum, StrEnum

from ..models.operator import MatchOperator
from ..models.review import (
    Action,
    Disposition,
    Resolution,
    ResolutionReason,
    ReviewItem,
    ReviewRequest,
    Scope,
)
from ..rules import PresetCombination, generate_operators

logger = logging.getLogger(__name__)


class TransitionError(Exception):
    """不正な状態遷移"""

    pass


class ReviewState(StrEnum):
    """レビューの状態"""

    IDLE = "idle"
    UNDER_REVIEW = "under_review"
    RESOLVED = "resolved"  # 一時状態。すぐに IDLE へ戻る


class ReviewEvent(StrEnum):
    """状態遷移を起こすイベント"""

    REQUEST_ARRIVED = "request_arrived"
    DECISION_RECEIVED = "decision_received"
    DEADLINE_ELAPSED = "deadline_elapsed"
    RESOLUTION_EMITTED = "resolution_emitted"


@dataclass
class Transition:
    """状態遷移の定義"""

    from_state: Enum
    to_state: Enum
    event_type: Enum


class StateMachine:
    """汎用状態機械基底クラス"""

    def __init__(self, initial_state: Enum, transitions: list[Transition]):
        self.current_state = initial_state
        self._transitions = {(t.from_state, t.event_type): t for t in transitions}

    def can_transition(self, event_type: Enum) -> bool:
        """指定イベントで遷移可能か確認"""
        return (self.current_state, event_type) in self._transitions

    def get_valid_events(self) -> list[Enum]:
        """現在の状態から遷移可能なイベント一覧を取得"""
        return [
            event_type for (state, event_type) in self._transitions if state == self.current_state
        ]

    def transition(self, event_type: Enum) -> Enum:
        """イベントを適用して状態遷移

        Args:
            event_type: 適用するイベント

        Returns:
            遷移後の状態

        Raises:
            TransitionError: 不正な遷移の場合
        """
        key = (self.current_state, event_type)
        transition = self._transitions.get(key)

        if not transition:
            valid = self.get_valid_events()
            raise TransitionError(
                f"Invalid transition: {self.current_state} + {event_type}. Valid events: {valid}"
            )

        self.current_state = transition.to_state
        return self.current_state


class DispositionStateMachine(StateMachine):
    """レビュー状態機械

    状態遷移:
    - IDLE -> UNDER_REVIEW (レビュー要求の到着、または待ち行列の先頭を取り出した時)
    - UNDER_REVIEW -> RESOLVED (期限前の明示的な決定)
    - UNDER_REVIEW -> RESOLVED (期限切れ。既定アクション・ONCE)
    - RESOLVED -> IDLE (解決結果を送出した時)

    レビュー中に届いた要求は FIFO の待ち行列に積む。
    時刻は呼び出し側が単調時計の秒で渡す（now）。

    Attributes:
        combo: FOREVER 決定時のルール生成に使うプリセット組み合わせ
        max_pending: 待ち行列の上限
    """

    def __init__(self, combo: PresetCombination, *, max_pending: int = 32):
        transitions = [
            Transition(ReviewState.IDLE, ReviewState.UNDER_REVIEW, ReviewEvent.REQUEST_ARRIVED),
            Transition(
                ReviewState.UNDER_REVIEW, ReviewState.RESOLVED, ReviewEvent.DECISION_RECEIVED
            ),
            Transition(
                ReviewState.UNDER_REVIEW, ReviewState.RESOLVED, ReviewEvent.DEADLINE_ELAPSED
            ),
            Transition(ReviewState.RESOLVED, ReviewState.IDLE, ReviewEvent.RESOLUTION_EMITTED),
        ]
        super().__init__(ReviewState.IDLE, transitions)
        self.combo = combo
        self.max_pending = max_pending
        self._active: ReviewItem | None = None
        self._pending: deque[ReviewRequest] = deque()

    # ------------------------------------------------------------------
    # 読み取り専用ビュー
    # ------------------------------------------------------------------

    @property
    def state(self) -> ReviewState:
        return ReviewState(self.current_state)

    @property
    def active(self) -> ReviewItem | None:
        """アクティブなレビュー項目"""
        return self._active

    @property
    def pending(self) -> tuple[ReviewRequest, ...]:
        """待ち行列（到着順）"""
        return tuple(self._pending)

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    # ------------------------------------------------------------------
    # 入力
    # ------------------------------------------------------------------

    def submit(self, request: ReviewRequest, now: float) -> list[Resolution]:
        """レビュー要求を受け付ける

        IDLE ならそのままアクティブにし、レビュー中なら待ち行列に積む。
        待ち行列が満杯の場合は既定アクション・ONCE で即時解決する。

        Returns:
            この呼び出しで確定した解決結果
        """
        resolutions = self.tick(now)

        if self.state == ReviewState.IDLE:
            self._activate(request, now)
            # 窓が0秒なら即座に期限切れ
            resolutions.extend(self.tick(now))
            return resolutions

        if len(self._pending) >= self.max_pending:
            logger.warning(
                f"レビュー待ち行列が満杯のため既定アクションで解決: "
                f"item_id={request.item_id}, max_pending={self.max_pending}"
            )
            resolutions.append(
                Resolution(
                    request=request,
                    disposition=Disposition(action=request.default_action, scope=Scope.ONCE),
                    reason=ResolutionReason.OVERFLOW,
                )
            )
            return resolutions

        self._pending.append(request)
        logger.debug(
            f"レビュー待ち行列に追加: item_id={request.item_id}, pending={len(self._pending)}"
        )
        return resolutions

    def decide(
        self,
        action: Action,
        scope: Scope,
        now: float,
        item_id: str | None = None,
    ) -> list[Resolution]:
        """明示的な決定を適用

        期限切れの判定を先に行うので、期限を過ぎた決定は無視される。
        アクティブでない項目を参照する決定も無視する（エラーにはしない）。
        item_id を省略した決定は呼び出し時点のアクティブ項目を対象とし、
        期限切れで次の項目に入れ替わった場合は無視する。

        Args:
            action: ALLOW / DENY
            scope: ONCE / FOREVER
            now: 現在時刻（単調時計の秒）
            item_id: 対象項目ID。None の場合は現在アクティブな項目

        Returns:
            この呼び出しで確定した解決結果
        """
        target = item_id
        if target is None and self._active is not None:
            target = self._active.item_id

        resolutions = self.tick(now)

        active = self._active
        if (
            not self.can_transition(ReviewEvent.DECISION_RECEIVED)
            or active is None
            or target != active.item_id
        ):
            logger.info(f"非アクティブな項目への決定を無視: item_id={target}")
            return resolutions

        self.transition(ReviewEvent.DECISION_RECEIVED)
        resolutions.append(
            self._resolve(active, Disposition(action=action, scope=scope), ResolutionReason.DECIDED)
        )
        resolutions.extend(self._advance(now))
        return resolutions

    def tick(self, now: float) -> list[Resolution]:
        """期限を評価する

        期限切れのアクティブ項目を既定アクション・ONCE で解決し、
        待ち行列の次の項目を新しい期限でアクティブにする。
        自動解決でルールを恒久化することはない。
        """
        resolutions: list[Resolution] = []

        while self._active is not None and self._active.is_expired(now):
            expired = self._active
            self.transition(ReviewEvent.DEADLINE_ELAPSED)
            resolutions.append(
                self._resolve(
                    expired,
                    Disposition(action=expired.default_action, scope=Scope.ONCE),
                    ResolutionReason.EXPIRED,
                )
            )
            self._finish()
            if self._pending:
                self._activate(self._pending.popleft(), now)

        return resolutions

    # ------------------------------------------------------------------
    # 内部処理
    # ------------------------------------------------------------------

    def _activate(self, request: ReviewRequest, now: float) -> None:
        """IDLE -> UNDER_REVIEW（期限はこの時点から計算）"""
        self.transition(ReviewEvent.REQUEST_ARRIVED)
        self._active = ReviewItem(request=request, expiry=now + request.review_window_seconds)
        logger.debug(
            f"レビュー開始: item_id={request.item_id}, "
            f"window={request.review_window_seconds}s, default={request.default_action}"
        )

    def _finish(self) -> None:
        """RESOLVED -> IDLE"""
        self._active = None
        self.transition(ReviewEvent.RESOLUTION_EMITTED)

    def _advance(self, now: float) -> list[Resolution]:
        """解決後に次の項目へ進む"""
        self._finish()
        if self._pending:
            self._activate(self._pending.popleft(), now)
            return self.tick(now)
        return []

    def _resolve(
        self,
        item: ReviewItem,
        disposition: Disposition,
        reason: ResolutionReason,
    ) -> Resolution:
        """解決結果を作成（FOREVER の場合のみルールを生成）"""
        operators: tuple[MatchOperator, ...] = ()
        if disposition.persists_rule:
            operators = tuple(generate_operators(item.inputs, self.combo))

        logger.info(
            f"レビュー解決: item_id={item.item_id}, action={disposition.action}, "
            f"scope={disposition.scope}, reason={reason}, operators={len(operators)}"
        )
        return Resolution(
            request=item.request,
            disposition=disposition,
            reason=reason,
            operators=operators,
        )
