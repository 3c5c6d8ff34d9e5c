"""スナップショットフォーマッタ

エンジンのスナップショットを人間可読な文字列に変換する。
描画ライブラリには依存せず、端末へそのまま出力できるテキストを返す。
"""

from __future__ import annotations

from datetime import UTC, datetime

from ..core.models import (
    Action,
    Alert,
    ConnectionInfo,
    Control,
    EngineSnapshot,
    Screen,
    Statistics,
)
from .constants import (
    BOLD,
    CONNECTIONS_TITLE,
    CYAN,
    DIM,
    HELP_KEYBINDINGS,
    HELP_TITLE,
    MISSING,
    RESET,
    REVERSE,
    STATS_TITLE,
    WHITE,
    YELLOW,
)


def format_ip_address(ip: str) -> str:
    """IPv6アドレスを角括弧で囲む（IPv4はそのまま）"""
    if ":" in ip:
        return f"[{ip}]"
    return ip


def format_stats_panel(stats: Statistics | None) -> str:
    """統計パネルの本文（統計未受信なら空文字列）"""
    if stats is None:
        return ""
    return (
        f"daemon version: {stats.daemon_version} | uptime: {stats.uptime}\n"
        f"rules: {stats.rules} | dns responses: {stats.dns_responses} "
        f"| connections: {stats.connections}\n"
        f"ignored: {stats.ignored} | accepted: {stats.accepted} | dropped: {stats.dropped}\n"
        f"rule hits: {stats.rule_hits} | rule misses: {stats.rule_misses}"
    )


def format_connection_panel(conn: ConnectionInfo | None) -> str:
    """レビュー中の接続パネルの本文（レビュー中でなければ空文字列）"""
    if conn is None:
        return ""

    def _or_missing(value: object) -> object:
        return MISSING if value is None or value == "" else value

    return "\n".join(
        [
            f"src       {format_ip_address(conn.src_ip)}:{conn.src_port}",
            f"dst       {format_ip_address(conn.dst_ip)}:{_or_missing(conn.dst_port)}",
            f"proto     {conn.protocol}",
            f"dst host  {_or_missing(conn.dst_host)}",
            f"uid       {_or_missing(conn.user_id)}",
            f"pid       {conn.process_id}",
            f"ppath     {conn.process_path}",
        ]
    )


def format_alert_line(alert: Alert, now: datetime) -> str:
    """アラートを1行にフォーマット（時計が逆行しても経過秒数は0）"""
    return (
        f"{alert.age_seconds(now)}s ago : {alert.kind} : {alert.priority} "
        f": {alert.source} : {alert.message}"
    )


def format_countdown(remaining_seconds: float, default_action: Action) -> str:
    """期限までのカウントダウン表示"""
    return f" {int(max(0.0, remaining_seconds))}s to disposition, else {default_action} "


def format_controls(controls: list[Control], *, color: bool = True) -> str:
    """操作ボタン行（キーバインドとラベルの組）"""
    if color:
        return "".join(
            f"{WHITE}{c.keybind}{RESET}{REVERSE} {c.label} {RESET}" for c in controls
        )
    return "  ".join(f"{c.keybind} {c.label}" for c in controls)


def format_help(version: str | None = None) -> str:
    """ヘルプ画面の本文"""
    lines: list[str] = []
    if version:
        lines.append(f"snitchdesk {version}")
        lines.append("")
    lines.append("Keybindings")
    lines.extend(f"{key:>7} {description}" for key, description in HELP_KEYBINDINGS)
    return "\n".join(lines)


def _panel(title: str, body: str, *, color: bool, highlight: bool = False) -> str:
    if color:
        c = YELLOW if highlight else CYAN
        header = f"{c}{BOLD}=={title}=={RESET}"
    else:
        header = f"=={title}=="
    return f"{header}\n{body}" if body else header


def render_snapshot(
    snapshot: EngineSnapshot,
    *,
    now: datetime | None = None,
    color: bool = False,
    version: str | None = None,
) -> str:
    """スナップショット全体を画面テキストに変換

    Args:
        snapshot: エンジンのスナップショット
        now: アラート経過秒数の基準時刻（省略時は現在時刻）
        color: ANSI色を付けるか
        version: ヘルプ画面に表示するバージョン
    """
    now = now or datetime.now(UTC)
    controls = format_controls(snapshot.controls, color=color)

    if snapshot.screen == Screen.HELP:
        return "\n".join(
            [_panel(HELP_TITLE, format_help(version), color=color), controls]
        )

    stats_title = f" OpenSnitch ({snapshot.peer}) " if snapshot.peer else STATS_TITLE
    sections = [_panel(stats_title, format_stats_panel(snapshot.statistics), color=color)]

    review = snapshot.review
    connection_body = format_connection_panel(review.connection if review else None)
    if review is not None:
        countdown = format_countdown(review.remaining_seconds, review.default_action)
        connection_body = f"{connection_body}\n{countdown}"
        if snapshot.pending_count:
            connection_body += f"({snapshot.pending_count} pending)"
    sections.append(
        _panel(CONNECTIONS_TITLE, connection_body, color=color, highlight=review is not None)
    )

    alert_lines = "\n".join(format_alert_line(a, now) for a in snapshot.alerts)
    alerts_title = f" Alerts ({snapshot.alert_total}) "
    if color and alert_lines:
        alert_lines = f"{DIM}{alert_lines}{RESET}"
    sections.append(_panel(alerts_title, alert_lines, color=color))

    sections.append(controls)
    return "\n".join(sections)
