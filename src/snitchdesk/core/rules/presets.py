"""プリセット組み合わせ (Preset Combination)

ルール生成時にどの接続属性をマッチ条件にするかを選ぶトグル集合。
カンマ区切りのキー列から構築する。
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class PresetParseError(ValueError):
    """プリセット文字列の解析エラー"""

    def __init__(self, message: str, keys: tuple[str, ...] = ()):
        super().__init__(message)
        self.keys = keys


class HostnameMode(StrEnum):
    """ホスト名マッチのモード"""

    DISABLED = "disabled"
    EXACT = "exact"
    ANY_SUBDOMAIN = "any_subdomain"


EXACT_USER_ID = "exact_user_id"
EXACT_PROCESS_PATH = "exact_process_path"
EXACT_DST_IP = "exact_dst_ip"
EXACT_DST_PORT = "exact_dst_port"
EXACT_PROTOCOL = "exact_protocol"
EXACT_HOSTNAME = "exact_hostname"
ANY_SUBDOMAIN_HOSTNAME = "any_subdomain_hostname"

# 正規の並び順（ルール生成の出力順と一致）
PRESET_KEYS: tuple[str, ...] = (
    EXACT_USER_ID,
    EXACT_PROCESS_PATH,
    EXACT_DST_IP,
    EXACT_DST_PORT,
    EXACT_PROTOCOL,
    EXACT_HOSTNAME,
    ANY_SUBDOMAIN_HOSTNAME,
)

_TOGGLE_KEYS = PRESET_KEYS[:5]

_HOSTNAME_KEYS: dict[str, HostnameMode] = {
    EXACT_HOSTNAME: HostnameMode.EXACT,
    ANY_SUBDOMAIN_HOSTNAME: HostnameMode.ANY_SUBDOMAIN,
}


@dataclass(frozen=True)
class PresetCombination:
    """プリセット組み合わせ

    1インスタンスが1回のルール生成を構成する。
    """

    exact_user_id: bool = False
    exact_process_path: bool = False
    exact_dst_ip: bool = False
    exact_dst_port: bool = False
    exact_protocol: bool = False
    hostname: HostnameMode = HostnameMode.DISABLED

    def keys(self) -> list[str]:
        """有効なキーを正規の順序で返す"""
        enabled = [key for key in _TOGGLE_KEYS if getattr(self, key)]
        for key, mode in _HOSTNAME_KEYS.items():
            if self.hostname == mode:
                enabled.append(key)
        return enabled

    def to_preset_string(self) -> str:
        """カンマ区切りのプリセット文字列に変換"""
        return ",".join(self.keys())


def parse_preset_combination(text: str) -> PresetCombination:
    """プリセット文字列を解析

    前後の空白は除去し、空の要素は無視する（空文字列は全トグル無効）。
    同じキーの重複は許容する。

    Args:
        text: カンマ区切りのキー列（例: "exact_dst_ip,exact_protocol"）

    Returns:
        PresetCombination

    Raises:
        PresetParseError: 未知のキー、またはホスト名モードのキーが両方指定された場合
    """
    keys = [part.strip() for part in text.split(",")]
    keys = [key for key in keys if key]

    unknown = tuple(key for key in keys if key not in PRESET_KEYS)
    if unknown:
        raise PresetParseError(
            f"Unknown preset key(s): {', '.join(unknown)}. Valid keys: {', '.join(PRESET_KEYS)}",
            unknown,
        )

    hostname_keys = tuple(key for key in _HOSTNAME_KEYS if key in keys)
    if len(hostname_keys) > 1:
        raise PresetParseError(
            f"Preset keys are mutually exclusive: {' and '.join(hostname_keys)}",
            hostname_keys,
        )

    toggles = {key: key in keys for key in _TOGGLE_KEYS}
    hostname = _HOSTNAME_KEYS[hostname_keys[0]] if hostname_keys else HostnameMode.DISABLED
    return PresetCombination(**toggles, hostname=hostname)
