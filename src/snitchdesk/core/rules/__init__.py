"""ルール生成

プリセット組み合わせの解析と、マッチオペレーター列の生成。
"""

from .generator import (
    generate_operators,
    match_dst_host,
    match_dst_host_subdomains,
    match_dst_ip,
    match_dst_port,
    match_process_path,
    match_protocol,
    match_user_id,
    subdomain_pattern,
)
from .presets import (
    PRESET_KEYS,
    HostnameMode,
    PresetCombination,
    PresetParseError,
    parse_preset_combination,
)

__all__ = [
    "PRESET_KEYS",
    "HostnameMode",
    "PresetCombination",
    "PresetParseError",
    "parse_preset_combination",
    "generate_operators",
    "match_dst_host",
    "match_dst_host_subdomains",
    "match_dst_ip",
    "match_dst_port",
    "match_process_path",
    "match_protocol",
    "match_user_id",
    "subdomain_pattern",
]
