"""接続レビューのデータモデル

デーモンから届く接続情報、レビュー対象の入力値、レビュー項目、
解決結果（Disposition / Resolution）を定義する。
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from ulid import ULID

from .operator import MatchOperator


def generate_item_id() -> str:
    """レビュー項目IDを生成 (ULID形式)"""
    return str(ULID())


class Action(StrEnum):
    """接続に対するアクション"""

    ALLOW = "allow"
    DENY = "deny"


class Scope(StrEnum):
    """決定の有効範囲"""

    ONCE = "once"
    FOREVER = "forever"


class ResolutionReason(StrEnum):
    """レビューが解決した理由"""

    DECIDED = "decided"  # 操作者の明示的な決定
    EXPIRED = "expired"  # 期限切れによる既定アクション
    OVERFLOW = "overflow"  # 待ち行列満杯による既定アクション
    DROPPED = "dropped"  # エンジンへ届かなかった、または応答が期限内に返らなかった


class Disposition(BaseModel):
    """レビューの解決結果 (action, scope)"""

    model_config = ConfigDict(frozen=True)

    action: Action
    scope: Scope = Scope.ONCE

    @property
    def persists_rule(self) -> bool:
        """ルール生成が必要か"""
        return self.scope == Scope.FOREVER


class ConnectionInfo(BaseModel):
    """デーモンから届く接続レコード"""

    model_config = ConfigDict(extra="allow")

    protocol: str = ""
    src_ip: str = ""
    src_port: int = 0
    dst_ip: str = ""
    dst_host: str = ""
    dst_port: int | None = None
    user_id: int | None = None
    process_id: int = 0
    process_path: str = ""
    process_cwd: str = ""
    process_args: list[str] = Field(default_factory=list)
    process_env: dict[str, str] = Field(default_factory=dict)


class ConnectionReviewInputs(BaseModel):
    """ルール生成の入力となる接続属性

    各フィールドは欠損しうる。欠損はエラーではなく通常の状態。
    接続レコードから切り離してあるので、将来のルール編集ツールからも再利用できる。
    """

    model_config = ConfigDict(frozen=True)

    user_id: int | None = None
    process_path: str | None = None
    dst_ip: str | None = None
    dst_port: int | None = None
    protocol: str | None = None
    hostname: str | None = None

    @classmethod
    def from_connection(cls, conn: ConnectionInfo) -> ConnectionReviewInputs:
        """接続レコードから入力値を抽出（空文字列は欠損扱い）"""
        return cls(
            user_id=conn.user_id,
            process_path=conn.process_path or None,
            dst_ip=conn.dst_ip or None,
            dst_port=conn.dst_port,
            protocol=conn.protocol or None,
            hostname=conn.dst_host or None,
        )


class Statistics(BaseModel):
    """デーモンの統計スナップショット

    そのまま転送されるだけで、このコアでは集計しない。
    """

    model_config = ConfigDict(extra="allow")

    daemon_version: str = ""
    rules: int = 0
    uptime: int = 0
    dns_responses: int = 0
    connections: int = 0
    ignored: int = 0
    accepted: int = 0
    dropped: int = 0
    rule_hits: int = 0
    rule_misses: int = 0
    by_proto: dict[str, int] = Field(default_factory=dict)
    by_address: dict[str, int] = Field(default_factory=dict)
    by_host: dict[str, int] = Field(default_factory=dict)
    by_port: dict[str, int] = Field(default_factory=dict)
    by_uid: dict[str, int] = Field(default_factory=dict)
    by_executable: dict[str, int] = Field(default_factory=dict)


@dataclass(frozen=True)
class ReviewRequest:
    """レビュー要求

    review_window_seconds はアクティブになった時点から数える。
    """

    connection: ConnectionInfo
    inputs: ConnectionReviewInputs
    review_window_seconds: float
    default_action: Action
    item_id: str = field(default_factory=generate_item_id)

    @classmethod
    def from_connection(
        cls,
        connection: ConnectionInfo,
        *,
        review_window_seconds: float,
        default_action: Action,
    ) -> ReviewRequest:
        """接続レコードからレビュー要求を作成"""
        return cls(
            connection=connection,
            inputs=ConnectionReviewInputs.from_connection(connection),
            review_window_seconds=review_window_seconds,
            default_action=default_action,
        )


@dataclass(frozen=True)
class ReviewItem:
    """アクティブなレビュー項目

    expiry は単調時計上の絶対期限（秒）。
    """

    request: ReviewRequest
    expiry: float

    @property
    def item_id(self) -> str:
        return self.request.item_id

    @property
    def inputs(self) -> ConnectionReviewInputs:
        return self.request.inputs

    @property
    def default_action(self) -> Action:
        return self.request.default_action

    def is_expired(self, now: float) -> bool:
        """期限切れか"""
        return now >= self.expiry

    def remaining(self, now: float) -> float:
        """期限までの残り秒数（負にはならない）"""
        return max(0.0, self.expiry - now)


@dataclass(frozen=True)
class Resolution:
    """レビューの解決結果

    operators は scope が FOREVER の場合のみ生成される。
    """

    request: ReviewRequest
    disposition: Disposition
    reason: ResolutionReason
    operators: tuple[MatchOperator, ...] = ()
    resolved_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    @property
    def item_id(self) -> str:
        return self.request.item_id

    def to_dict(self) -> dict[str, Any]:
        """APIレスポンス用の辞書に変換"""
        return {
            "item_id": self.item_id,
            "action": str(self.disposition.action),
            "scope": str(self.disposition.scope),
            "reason": str(self.reason),
            "operators": [op.to_dict() for op in self.operators],
            "resolved_at": self.resolved_at.isoformat(),
        }
