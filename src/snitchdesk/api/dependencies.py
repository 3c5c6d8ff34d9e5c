"""API 依存性注入

FastAPIの依存性注入パターンでグローバル状態を管理。
テスト時にモックへの差し替えが容易になります。
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends

from ..core import DispositionEngine, get_settings


class AppState:
    """アプリケーション状態

    シングルトンパターンで状態を管理。
    テスト時は reset() でリセット可能。
    """

    _instance: AppState | None = None

    def __init__(self) -> None:
        self._engine: DispositionEngine | None = None

    @classmethod
    def get_instance(cls) -> AppState:
        """シングルトンインスタンスを取得"""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """インスタンスをリセット（テスト用）"""
        cls._instance = None

    @property
    def engine(self) -> DispositionEngine:
        """処分エンジンを取得（未設定なら設定から作成）"""
        if self._engine is None:
            self._engine = DispositionEngine(get_settings())
        return self._engine

    @engine.setter
    def engine(self, value: DispositionEngine | None) -> None:
        """処分エンジンを設定"""
        self._engine = value


def get_app_state() -> AppState:
    """アプリケーション状態を取得（依存性注入用）"""
    return AppState.get_instance()


def get_engine() -> DispositionEngine:
    """処分エンジンを取得"""
    return get_app_state().engine


def set_engine(engine: DispositionEngine | None) -> None:
    """処分エンジンを設定（テスト用）"""
    get_app_state().engine = engine


# 型エイリアス（FastAPIの Depends で使用）
EngineDep = Annotated[DispositionEngine, Depends(get_engine)]
