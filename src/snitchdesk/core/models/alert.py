"""アラートモデル

デーモンから届くアラートメッセージと、正規化後のアラートレコード。
数値コードの列挙値は送信側のプロトコルが新しい場合を想定し、
未知のコードでもエラーにせず既定値へフォールバックする。
"""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class AlertPriority(StrEnum):
    """アラート優先度"""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @classmethod
    def from_code(cls, code: int) -> AlertPriority:
        """0→LOW, 1→MEDIUM, それ以外→HIGH"""
        if code == 0:
            return cls.LOW
        if code == 1:
            return cls.MEDIUM
        return cls.HIGH


class AlertKind(StrEnum):
    """アラート種別"""

    ERROR = "error"
    WARNING = "warning"
    INFO = "info"

    @classmethod
    def from_code(cls, code: int) -> AlertKind:
        """0→ERROR, 1→WARNING, それ以外→INFO"""
        if code == 0:
            return cls.ERROR
        if code == 1:
            return cls.WARNING
        return cls.INFO


class AlertSource(StrEnum):
    """アラートの発生源"""

    GENERIC = "generic"
    PROCESS_MONITOR = "process_monitor"
    FIREWALL = "firewall"
    CONNECTION = "connection"
    RULE = "rule"
    NETLINK = "netlink"
    KERNEL_EVENT = "kernel_event"

    @classmethod
    def from_code(cls, code: int) -> AlertSource:
        """1..6 を対応する発生源へ。0 と未知のコードは GENERIC"""
        return _SOURCE_CODES.get(code, cls.GENERIC)


_SOURCE_CODES: dict[int, AlertSource] = {
    1: AlertSource.PROCESS_MONITOR,
    2: AlertSource.FIREWALL,
    3: AlertSource.CONNECTION,
    4: AlertSource.RULE,
    5: AlertSource.NETLINK,
    6: AlertSource.KERNEL_EVENT,
}


class AlertPayload(BaseModel):
    """アラートのデータ部

    text 以外のバリアント（proc, conn, rule, fwrule 等）は
    このコアでは表示できないので中身を解釈しない。
    """

    model_config = ConfigDict(extra="allow")

    text: str | None = None


class AlertMessage(BaseModel):
    """デーモンから届くアラートメッセージ"""

    id: int = Field(default=0, description="相関ID")
    priority: int = Field(default=0, description="優先度コード")
    type: int = Field(default=0, description="種別コード")
    what: int = Field(default=0, description="発生源コード")
    action: int = Field(default=0, description="デーモン側のアクションコード")
    data: AlertPayload | None = Field(default=None, description="データ部")

    def payload_variant(self) -> str | None:
        """データ部のバリアント名（データなしは None）"""
        if self.data is None:
            return None
        if self.data.text is not None:
            return "text"
        extra: dict[str, Any] = self.data.model_extra or {}
        return next(iter(extra), "unknown")


class Alert(BaseModel):
    """正規化済みアラート

    receipt_timestamp は受信側で打刻した時刻。送信側の時計は使わない。
    """

    model_config = ConfigDict(frozen=True)

    receipt_timestamp: datetime
    priority: AlertPriority
    kind: AlertKind
    source: AlertSource
    message: str

    @classmethod
    def simple(cls, now: datetime, message: str) -> Alert:
        """ローカル通知用の簡易アラートを作成"""
        return cls(
            receipt_timestamp=now,
            priority=AlertPriority.LOW,
            kind=AlertKind.WARNING,
            source=AlertSource.GENERIC,
            message=message,
        )

    def age_seconds(self, now: datetime) -> int:
        """経過秒数（時計が逆行した場合は0）"""
        return max(0, int((now - self.receipt_timestamp).total_seconds()))
