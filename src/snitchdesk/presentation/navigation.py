"""画面ナビゲーション

表示側だけが持つ状態（表示中の画面とアラートのスクロール位置）と、
キー入力から操作コマンドへの対応付け。
"""

from __future__ import annotations

from dataclasses import dataclass

from ..core.models import DECISION_COMMANDS, ControlCommand, Disposition, EngineSnapshot, Screen

# キー名（小文字）→ 操作コマンド
KEY_COMMANDS: dict[str, ControlCommand] = {
    "ctrl+c": ControlCommand.QUIT,
    "esc": ControlCommand.MAIN,
    "h": ControlCommand.HELP,
    "a": ControlCommand.ALLOW_ONCE,
    "d": ControlCommand.DENY_ONCE,
    "j": ControlCommand.ALLOW_FOREVER,
    "l": ControlCommand.DENY_FOREVER,
    "up": ControlCommand.SCROLL,
    "down": ControlCommand.SCROLL,
}

# スクロールキーの移動量
SCROLL_DELTAS: dict[str, int] = {"up": -1, "down": 1}


def command_for_key(key: str) -> ControlCommand | None:
    """キー名を操作コマンドに変換（未割り当てなら None）"""
    return KEY_COMMANDS.get(key.strip().lower())


def disposition_for_command(command: ControlCommand | None) -> Disposition | None:
    """決定コマンドなら対応する Disposition を返す"""
    if command is None or command not in DECISION_COMMANDS:
        return None
    action, scope = DECISION_COMMANDS[command]
    return Disposition(action=action, scope=scope)


def decision_payload(disposition: Disposition, snapshot: EngineSnapshot) -> dict[str, str] | None:
    """決定リクエストの本文を作成

    表示中の項目IDを必ず付ける（ID省略の決定は繰り上がった項目に適用されない）。
    レビュー中の項目がなければ None。
    """
    if snapshot.review is None:
        return None
    return {
        "action": str(disposition.action),
        "scope": str(disposition.scope),
        "item_id": snapshot.review.item_id,
    }


@dataclass
class ViewState:
    """表示側の状態

    Attributes:
        screen: 表示中の画面
        offset: アラートログの表示開始位置
    """

    screen: Screen = Screen.MAIN
    offset: int = 0

    def show_help(self) -> None:
        self.screen = Screen.HELP

    def show_main(self) -> None:
        self.screen = Screen.MAIN

    def scroll(self, delta: int, total: int) -> int:
        """スクロール位置を移動（0 以上 total-1 以下に丸める）"""
        self.offset = max(0, min(self.offset + delta, max(total - 1, 0)))
        return self.offset

    def handle_key(self, key: str, alert_total: int = 0) -> ControlCommand | Disposition | None:
        """キー入力を処理

        画面切り替えとスクロールはここで適用する。
        決定キーの場合は送信すべき Disposition を返す。
        ヘルプ画面では決定キーを受け付けない。
        """
        command = command_for_key(key)
        if command is None:
            return None

        if command == ControlCommand.HELP:
            self.show_help()
        elif command == ControlCommand.MAIN:
            self.show_main()
        elif command == ControlCommand.SCROLL:
            self.scroll(SCROLL_DELTAS.get(key.strip().lower(), 0), alert_total)
        elif command in DECISION_COMMANDS:
            if self.screen == Screen.HELP:
                return None
            return disposition_for_command(command)

        return command
