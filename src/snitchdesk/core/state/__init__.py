"""状態管理

レビュー項目の状態機械。
"""

from .machines import (
    DispositionStateMachine,
    ReviewEvent,
    ReviewState,
    StateMachine,
    Transition,
    TransitionError,
)

__all__ = [
    "DispositionStateMachine",
    "ReviewEvent",
    "ReviewState",
    "StateMachine",
    "Transition",
    "TransitionError",
]
