"""SnitchDesk Core モジュール

接続レビューのバックエンドロジックを提供:
- Models: オペレーター・アラート・レビューのデータモデル
- Rules: プリセットとルールオペレーター生成
- State: レビュー状態機械
- Engine: 処分エンジンとエンジンチャネル
- Config: 設定管理
"""

__version__ = "0.1.0"

from .channel import (
    AlertReceived,
    DecisionSubmitted,
    EngineChannel,
    EngineMessage,
    ReviewRequested,
    StatsReceived,
)
from .config import SnitchDeskSettings, get_settings, reload_settings
from .engine import DispositionEngine, dropped_resolution
from .normalizer import normalize_alert
from .rules import (
    PresetCombination,
    PresetParseError,
    generate_operators,
    parse_preset_combination,
)
from .state import DispositionStateMachine, ReviewState

__all__ = [
    "__version__",
    # Config
    "get_settings",
    "reload_settings",
    "SnitchDeskSettings",
    # Channel
    "AlertReceived",
    "DecisionSubmitted",
    "EngineChannel",
    "EngineMessage",
    "ReviewRequested",
    "StatsReceived",
    # Engine
    "DispositionEngine",
    "dropped_resolution",
    # Rules
    "PresetCombination",
    "PresetParseError",
    "generate_operators",
    "parse_preset_combination",
    "normalize_alert",
    # State
    "DispositionStateMachine",
    "ReviewState",
]
