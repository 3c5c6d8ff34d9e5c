"""ルールオペレーター生成器

解決済みの接続属性とプリセット組み合わせから、
順序付きのマッチオペレーター列を生成する純粋関数群。

出力順は固定:
    user id → process path → dst ip → dst port → protocol → hostname（最大1つ）
デーモンはこの順にオペレーターを AND 評価する想定。
"""

from __future__ import annotations

from ..models.operator import MatchOperator, Operand, RuleType
from ..models.review import ConnectionReviewInputs
from .presets import HostnameMode, PresetCombination


def _simple(operand: Operand, data: str) -> MatchOperator:
    return MatchOperator(type=RuleType.SIMPLE, operand=operand, data=data)


def match_user_id(uid: int) -> MatchOperator:
    """ユーザーID完全一致"""
    return _simple(Operand.USER_ID, str(uid))


def match_process_path(path: str) -> MatchOperator:
    """プロセスパス完全一致"""
    return _simple(Operand.PROCESS_PATH, path)


def match_dst_ip(ip: str) -> MatchOperator:
    """宛先IP完全一致"""
    return _simple(Operand.DEST_IP, ip)


def match_dst_port(port: int) -> MatchOperator:
    """宛先ポート完全一致"""
    return _simple(Operand.DEST_PORT, str(port))


def match_protocol(protocol: str) -> MatchOperator:
    """プロトコル完全一致"""
    return _simple(Operand.PROTOCOL, protocol)


def match_dst_host(hostname: str) -> MatchOperator:
    """宛先ホスト名完全一致"""
    return _simple(Operand.DEST_HOST, hostname)


def subdomain_pattern(hostname: str) -> str:
    """ホスト名とその任意のサブドメインにマッチする正規表現

    "example.com" -> r"(^|\\.)example\\.com$"
    両端をアンカーするので "bexample.com" のような接尾辞だけの一致は拒否される。
    """
    escaped = hostname.replace(".", r"\.")
    return rf"(^|\.){escaped}$"


def match_dst_host_subdomains(hostname: str) -> MatchOperator:
    """宛先ホスト名とそのサブドメインに正規表現でマッチ"""
    return MatchOperator(
        type=RuleType.REGEXP,
        operand=Operand.DEST_HOST,
        data=subdomain_pattern(hostname),
    )


def generate_operators(
    inputs: ConnectionReviewInputs,
    combo: PresetCombination,
) -> list[MatchOperator]:
    """オペレーター列を生成

    トグルが有効でも対応する入力が欠損していれば黙ってスキップする。
    並べ替えや重複除去は行わない。

    Args:
        inputs: 接続属性
        combo: プリセット組み合わせ

    Returns:
        順序付きオペレーター列（最大6個）
    """
    operators: list[MatchOperator] = []

    if combo.exact_user_id and inputs.user_id is not None:
        operators.append(match_user_id(inputs.user_id))
    if combo.exact_process_path and inputs.process_path is not None:
        operators.append(match_process_path(inputs.process_path))
    if combo.exact_dst_ip and inputs.dst_ip is not None:
        operators.append(match_dst_ip(inputs.dst_ip))
    if combo.exact_dst_port and inputs.dst_port is not None:
        operators.append(match_dst_port(inputs.dst_port))
    if combo.exact_protocol and inputs.protocol is not None:
        operators.append(match_protocol(inputs.protocol))

    if inputs.hostname is not None:
        if combo.hostname == HostnameMode.EXACT:
            operators.append(match_dst_host(inputs.hostname))
        elif combo.hostname == HostnameMode.ANY_SUBDOMAIN:
            operators.append(match_dst_host_subdomains(inputs.hostname))

    return operators
