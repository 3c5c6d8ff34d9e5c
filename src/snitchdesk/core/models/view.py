"""表示用スナップショットモデル

プレゼンテーション側に渡す読み取り専用のエンジン状態。
"""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field

from .alert import Alert
from .review import Action, ConnectionInfo, ConnectionReviewInputs, Scope, Statistics


class Screen(StrEnum):
    """表示中の画面"""

    MAIN = "main"
    HELP = "help"


class ControlCommand(StrEnum):
    """操作コマンド"""

    QUIT = "quit"
    MAIN = "main"
    HELP = "help"
    ALLOW_ONCE = "allow_once"
    DENY_ONCE = "deny_once"
    ALLOW_FOREVER = "allow_forever"
    DENY_FOREVER = "deny_forever"
    SCROLL = "scroll"


class Control(BaseModel):
    """操作ボタン（ラベルとキーバインド）"""

    model_config = ConfigDict(frozen=True)

    label: str
    keybind: str
    command: ControlCommand


# (action, scope) を伴う決定コマンド
DECISION_COMMANDS: dict[ControlCommand, tuple[Action, Scope]] = {
    ControlCommand.ALLOW_ONCE: (Action.ALLOW, Scope.ONCE),
    ControlCommand.DENY_ONCE: (Action.DENY, Scope.ONCE),
    ControlCommand.ALLOW_FOREVER: (Action.ALLOW, Scope.FOREVER),
    ControlCommand.DENY_FOREVER: (Action.DENY, Scope.FOREVER),
}

DEFAULT_CONTROLS: tuple[Control, ...] = (
    Control(label="Quit", keybind="Ctrl+C", command=ControlCommand.QUIT),
    Control(label="Help", keybind="H", command=ControlCommand.HELP),
    Control(label="Allow once", keybind="A", command=ControlCommand.ALLOW_ONCE),
    Control(label="Deny once", keybind="D", command=ControlCommand.DENY_ONCE),
    Control(label="Allow forever", keybind="J", command=ControlCommand.ALLOW_FOREVER),
    Control(label="Deny forever", keybind="L", command=ControlCommand.DENY_FOREVER),
    Control(label="Scroll alerts", keybind="Arrows", command=ControlCommand.SCROLL),
)

HELP_CONTROLS: tuple[Control, ...] = (
    Control(label="Quit", keybind="Ctrl+C", command=ControlCommand.QUIT),
    Control(label="Return to main screen", keybind="ESC", command=ControlCommand.MAIN),
)


class ReviewView(BaseModel):
    """レビュー中の項目"""

    item_id: str
    connection: ConnectionInfo
    inputs: ConnectionReviewInputs
    remaining_seconds: float
    default_action: Action


class ResolutionView(BaseModel):
    """直近の解決結果"""

    item_id: str
    action: Action
    scope: Scope
    reason: str
    operators: list[dict] = Field(default_factory=list)


class EngineSnapshot(BaseModel):
    """エンジン状態のスナップショット"""

    screen: Screen = Screen.MAIN
    peer: str | None = None
    statistics: Statistics | None = None
    review: ReviewView | None = None
    pending_count: int = 0
    alerts: list[Alert] = Field(default_factory=list)
    alert_total: int = 0
    alert_offset: int = 0
    controls: list[Control] = Field(default_factory=list)
    dropped_messages: int = 0
    last_resolution: ResolutionView | None = None
