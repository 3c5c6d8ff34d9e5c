"""API リクエスト/レスポンスモデル

FastAPIエンドポイントで使用するPydanticモデル。
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from ..core.models import Action, ConnectionInfo, Resolution, Scope, Statistics

# --- 受信リレー ---


class PingRequest(BaseModel):
    """Pingリクエスト（統計の定期送信）"""

    id: int = Field(..., description="相関ID")
    stats: Statistics | None = Field(default=None, description="統計スナップショット")


class PingReply(BaseModel):
    """Pingレスポンス（IDをそのまま返す）"""

    id: int


class AlertReply(BaseModel):
    """アラート受信レスポンス"""

    id: int


class ConnectionRequest(BaseModel):
    """接続レビューリクエスト"""

    id: int = Field(default=0, description="相関ID")
    connection: ConnectionInfo
    review_window_seconds: float | None = Field(
        default=None, ge=0, description="レビュー期限（秒）。省略時は設定値"
    )
    default_action: Action | None = Field(
        default=None, description="期限切れ時の既定アクション。省略時は設定値"
    )


class ConnectionReply(BaseModel):
    """接続レビューレスポンス"""

    id: int
    item_id: str
    action: Action
    scope: Scope
    reason: str
    operators: list[dict[str, Any]] = Field(default_factory=list)

    @classmethod
    def from_resolution(cls, request_id: int, resolution: Resolution) -> ConnectionReply:
        """解決結果からレスポンスを作成"""
        return cls(
            id=request_id,
            item_id=resolution.item_id,
            action=resolution.disposition.action,
            scope=resolution.disposition.scope,
            reason=str(resolution.reason),
            operators=[op.to_dict() for op in resolution.operators],
        )


# --- レビュー操作 ---


class DecisionRequest(BaseModel):
    """操作者の決定リクエスト"""

    action: Action
    scope: Scope = Scope.ONCE
    item_id: str | None = Field(default=None, description="対象項目ID（省略時はアクティブな項目）")


class DecisionAccepted(BaseModel):
    """決定受付レスポンス"""

    accepted: bool = True
    item_id: str | None = None


# --- システム ---


class HealthResponse(BaseModel):
    """ヘルスチェックレスポンス"""

    status: str
    version: str
    engine_running: bool
    pending_count: int
    dropped_messages: int
