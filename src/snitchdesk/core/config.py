"""SnitchDesk 設定管理モジュール

Pydantic Settingsを使用した型安全な設定管理。
snitchdesk.config.yaml と環境変数から設定を読み込む。
"""

from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .models.review import Action
from .rules import PresetCombination, parse_preset_combination

DEFAULT_PRESET = "exact_process_path,exact_dst_ip,exact_dst_port,exact_protocol"


class ServerConfig(BaseModel):
    """受信サーバー設定"""

    host: str = Field(default="127.0.0.1")
    port: int = Field(default=50051, ge=1, le=65535)


class ReviewConfig(BaseModel):
    """レビュー設定"""

    default_action: Action = Field(default=Action.DENY, description="期限切れ時の既定アクション")
    review_window_seconds: float = Field(default=15.0, ge=0, description="レビュー期限（秒）")
    max_pending: int = Field(default=32, ge=0, le=1024, description="レビュー待ち行列の上限")
    tick_interval_seconds: float = Field(
        default=0.25, gt=0, le=5, description="期限評価の間隔（秒）"
    )


class IngestionConfig(BaseModel):
    """受信リレー設定"""

    channel_capacity: int = Field(default=256, ge=1, description="エンジンチャネルの容量")
    reply_grace_seconds: float = Field(
        default=2.0, ge=0, description="レビュー応答待ちの猶予（秒）"
    )
    decision_timeout_seconds: float = Field(
        default=5.0, gt=0, description="操作者の決定をチャネルへ投入する待ち時間の上限（秒）"
    )


class RulesConfig(BaseModel):
    """ルール生成設定"""

    preset: str = Field(default=DEFAULT_PRESET, description="プリセット組み合わせ（カンマ区切り）")

    @field_validator("preset")
    @classmethod
    def validate_preset(cls, v: str) -> str:
        """プリセット文字列を読み込み時に検証（不正なら即エラー）"""
        parse_preset_combination(v)
        return v

    def get_combination(self) -> PresetCombination:
        """プリセット組み合わせを取得"""
        return parse_preset_combination(self.preset)


class AlertsConfig(BaseModel):
    """アラートログ設定"""

    max_entries: int = Field(default=0, ge=0, description="保持する最大件数（0=無制限）")


class LoggingConfig(BaseModel):
    """ロギング設定"""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(default="INFO")


class SnitchDeskSettings(BaseSettings):
    """SnitchDesk全体設定

    設定の優先順位:
    1. 環境変数
    2. snitchdesk.config.yaml
    3. デフォルト値
    """

    model_config = SettingsConfigDict(
        env_prefix="SNITCHDESK_",
        env_nested_delimiter="__",
    )

    server: ServerConfig = Field(default_factory=ServerConfig)
    review: ReviewConfig = Field(default_factory=ReviewConfig)
    ingestion: IngestionConfig = Field(default_factory=IngestionConfig)
    rules: RulesConfig = Field(default_factory=RulesConfig)
    alerts: AlertsConfig = Field(default_factory=AlertsConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def from_yaml(cls, config_path: Path | str | None = None) -> "SnitchDeskSettings":
        """YAMLファイルから設定を読み込む

        Args:
            config_path: 設定ファイルパス。Noneの場合はデフォルトパスを探索

        Returns:
            SnitchDeskSettings インスタンス
        """
        if config_path is None:
            # デフォルトの設定ファイルパスを探索
            search_paths = [
                Path.cwd() / "snitchdesk.config.yaml",
                Path.cwd() / "snitchdesk.config.yml",
                Path.home() / ".snitchdesk" / "config.yaml",
            ]
            for path in search_paths:
                if path.exists():
                    config_path = path
                    break

        if config_path and Path(config_path).exists():
            with open(config_path, encoding="utf-8") as f:
                yaml_config = yaml.safe_load(f) or {}
            return cls.model_validate(yaml_config)

        return cls()


# グローバル設定インスタンス（遅延初期化）
_settings: SnitchDeskSettings | None = None


def get_settings() -> SnitchDeskSettings:
    """設定シングルトンを取得"""
    global _settings
    if _settings is None:
        _settings = SnitchDeskSettings.from_yaml()
    return _settings


def reload_settings(config_path: Path | str | None = None) -> SnitchDeskSettings:
    """設定を再読み込み"""
    global _settings
    _settings = SnitchDeskSettings.from_yaml(config_path)
    return _settings
