"""SnitchDesk テスト設定"""

from datetime import UTC, datetime

import pytest


class FakeClock:
    """テスト用の単調時計（手動で進める）"""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> float:
        self.now += seconds
        return self.now


FIXED_WALL_TIME = datetime(2024, 1, 1, 12, 0, 0, tzinfo=UTC)


@pytest.fixture
def settings():
    """テスト用の設定（デフォルト値）"""
    from snitchdesk.core.config import SnitchDeskSettings

    return SnitchDeskSettings()


@pytest.fixture
def mock_settings(settings, monkeypatch):
    """get_settings をテスト用の設定に差し替える"""

    def mock_get_settings():
        return settings

    monkeypatch.setattr("snitchdesk.core.config.get_settings", mock_get_settings)
    monkeypatch.setattr("snitchdesk.core.engine.get_settings", mock_get_settings)
    monkeypatch.setattr("snitchdesk.api.dependencies.get_settings", mock_get_settings)
    return settings


@pytest.fixture
def fake_clock():
    """手動で進める単調時計"""
    return FakeClock()


@pytest.fixture
def make_connection():
    """接続レコードのファクトリ"""
    from snitchdesk.core.models import ConnectionInfo

    def _make(**overrides):
        fields = {
            "protocol": "tcp",
            "src_ip": "192.168.1.10",
            "src_port": 51234,
            "dst_ip": "93.184.216.34",
            "dst_host": "example.com",
            "dst_port": 443,
            "user_id": 1000,
            "process_id": 4242,
            "process_path": "/usr/bin/curl",
        }
        fields.update(overrides)
        return ConnectionInfo(**fields)

    return _make


@pytest.fixture
def make_request(make_connection):
    """レビュー要求のファクトリ"""
    from snitchdesk.core.models import Action, ReviewRequest

    def _make(window: float = 15.0, default_action: Action = Action.DENY, **overrides):
        return ReviewRequest.from_connection(
            make_connection(**overrides),
            review_window_seconds=window,
            default_action=default_action,
        )

    return _make


@pytest.fixture
def engine(settings, fake_clock):
    """時計を差し替えた処分エンジン"""
    from snitchdesk.core import DispositionEngine

    return DispositionEngine(settings, clock=fake_clock, wall_clock=lambda: FIXED_WALL_TIME)


@pytest.fixture
def client(settings):
    """テスト用FastAPIクライアント"""
    from fastapi.testclient import TestClient

    from snitchdesk.api.dependencies import AppState, set_engine
    from snitchdesk.api.server import app
    from snitchdesk.core import DispositionEngine

    # グローバル状態をリセット
    AppState.reset()
    set_engine(DispositionEngine(settings))

    with TestClient(app) as client:
        yield client

    # クリーンアップ
    AppState.reset()
