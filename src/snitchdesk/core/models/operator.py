"""マッチオペレーター (Match Operator)

ファイアウォールルールの1条件を表す値型と、そのシリアライズ規約。
シリアライズ時のフィールド順は type, operand, data, sensitive, list で固定。
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

# sensitive な data をログに出す際の置換文字列
REDACTED = "<redacted>"


class RuleType(StrEnum):
    """オペレーターの種別"""

    SIMPLE = "simple"
    REGEXP = "regexp"
    LIST = "list"  # 複合オペレーター用


class Operand(StrEnum):
    """マッチ対象の属性"""

    USER_ID = "user.id"
    PROCESS_PATH = "process.path"
    DEST_IP = "dest.ip"
    DEST_PORT = "dest.port"
    PROTOCOL = "protocol"
    DEST_HOST = "dest.host"
    LIST = "list"


def decode_rule_type(raw: str) -> RuleType | str:
    """種別タグをデコード

    未知のタグはエラーにせず文字列のまま保持する（前方互換性）。
    """
    try:
        return RuleType(raw)
    except ValueError:
        return raw


def decode_operand(raw: str) -> Operand | str:
    """オペランドタグをデコード（未知タグは文字列のまま保持）"""
    try:
        return Operand(raw)
    except ValueError:
        return raw


class MatchOperator(BaseModel):
    """マッチオペレーター

    ルール生成器のみが生成し、生成後に変更されることはない。
    等価性は構造的に判定される。
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    type: RuleType | str = Field(..., description="オペレーター種別")
    operand: Operand | str = Field(..., description="マッチ対象の属性")
    data: str = Field(..., description="リテラル値または正規表現")
    sensitive: bool = Field(default=False, description="ログにそのまま出力してはならない値か")
    nested: list[MatchOperator] = Field(
        default_factory=list,
        alias="list",
        description="複合オペレーターの子要素",
    )

    @property
    def loggable_data(self) -> str:
        """ログ出力用の data（sensitive の場合は伏せ字）"""
        return REDACTED if self.sensitive else self.data

    def to_dict(self) -> dict[str, Any]:
        """シリアライズ形式の辞書に変換"""
        return self.model_dump(mode="json", by_alias=True)

    def to_json(self) -> str:
        """コンパクトなJSON文字列にシリアライズ"""
        return self.model_dump_json(by_alias=True)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> MatchOperator:
        """シリアライズ形式の辞書から復元

        type / operand の未知タグは文字列として保持する。
        """
        nested_raw = data.get("list", data.get("nested", [])) or []
        return cls(
            type=decode_rule_type(str(data.get("type", ""))),
            operand=decode_operand(str(data.get("operand", ""))),
            data=str(data.get("data", "")),
            sensitive=bool(data.get("sensitive", False)),
            nested=[cls.from_dict(child) for child in nested_raw],
        )

    def __str__(self) -> str:
        return f"{self.type}:{self.operand}={self.loggable_data}"
