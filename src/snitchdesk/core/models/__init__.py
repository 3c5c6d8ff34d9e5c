"""データモデル"""

from .alert import (
    Alert,
    AlertKind,
    AlertMessage,
    AlertPayload,
    AlertPriority,
    AlertSource,
)
from .operator import MatchOperator, Operand, RuleType, decode_operand, decode_rule_type
from .review import (
    Action,
    ConnectionInfo,
    ConnectionReviewInputs,
    Disposition,
    Resolution,
    ResolutionReason,
    ReviewItem,
    ReviewRequest,
    Scope,
    Statistics,
    generate_item_id,
)
from .view import (
    DECISION_COMMANDS,
    DEFAULT_CONTROLS,
    HELP_CONTROLS,
    Control,
    ControlCommand,
    EngineSnapshot,
    ResolutionView,
    ReviewView,
    Screen,
)

__all__ = [
    # Alert
    "Alert",
    "AlertKind",
    "AlertMessage",
    "AlertPayload",
    "AlertPriority",
    "AlertSource",
    # Operator
    "MatchOperator",
    "Operand",
    "RuleType",
    "decode_operand",
    "decode_rule_type",
    # Review
    "Action",
    "ConnectionInfo",
    "ConnectionReviewInputs",
    "Disposition",
    "Resolution",
    "ResolutionReason",
    "ReviewItem",
    "ReviewRequest",
    "Scope",
    "Statistics",
    "generate_item_id",
    # View
    "DECISION_COMMANDS",
    "DEFAULT_CONTROLS",
    "HELP_CONTROLS",
    "Control",
    "ControlCommand",
    "EngineSnapshot",
    "ResolutionView",
    "ReviewView",
    "Screen",
]
