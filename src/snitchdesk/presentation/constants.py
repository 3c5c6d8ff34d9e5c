"""表示用の定数定義

パネル見出し・色コードなど、表示に使用する共通定数を集約する。
"""

from __future__ import annotations

# パネル見出し
STATS_TITLE = " OpenSnitch "
CONNECTIONS_TITLE = " New Connections "
HELP_TITLE = " SnitchDesk Help "

# ヘルプ画面のキーバインド説明（キー, 説明）
HELP_KEYBINDINGS: tuple[tuple[str, str], ...] = (
    ("Ctrl+C", "Quit"),
    ("ESC", "Return to main screen"),
    ("H", "Display this help screen"),
    ("A", "Allow connection temporarily"),
    ("D", "Deny connection temporarily"),
    ("J", "Allow connection forever"),
    ("L", "Deny connection forever"),
    ("Arrows", "Scroll alert list"),
)

# 空欄の代わりに表示する文字
MISSING = "-"

# ANSI色定義
CYAN = "\033[36m"
YELLOW = "\033[33m"
WHITE = "\033[37m"
REVERSE = "\033[7m"
RESET = "\033[0m"
DIM = "\033[2m"
BOLD = "\033[1m"
