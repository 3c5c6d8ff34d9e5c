"""表示層

エンジンのスナップショットを読み取り専用で受け取り、画面テキストを組み立てる。
"""

from .formatter import (
    format_alert_line,
    format_connection_panel,
    format_controls,
    format_countdown,
    format_help,
    format_ip_address,
    format_stats_panel,
    render_snapshot,
)
from .navigation import ViewState, command_for_key, decision_payload, disposition_for_command

__all__ = [
    "format_alert_line",
    "format_connection_panel",
    "format_controls",
    "format_countdown",
    "format_help",
    "format_ip_address",
    "format_stats_panel",
    "render_snapshot",
    "ViewState",
    "command_for_key",
    "decision_payload",
    "disposition_for_command",
]
