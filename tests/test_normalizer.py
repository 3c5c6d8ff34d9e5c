"""アラート正規化のテスト"""

import logging
from datetime import UTC, datetime, timedelta

import pytest

from snitchdesk.core.models import (
    Alert,
    AlertKind,
    AlertMessage,
    AlertPayload,
    AlertPriority,
    AlertSource,
)
from snitchdesk.core.normalizer import NO_DATA, UNSUPPORTED_DATA, normalize_alert

NOW = datetime(2024, 1, 1, 12, 0, 0, tzinfo=UTC)


class TestEnumFallbacks:
    """数値コードの列挙変換のテスト"""

    @pytest.mark.parametrize(
        ("code", "expected"),
        [(0, AlertPriority.LOW), (1, AlertPriority.MEDIUM), (2, AlertPriority.HIGH)],
    )
    def test_priority_codes(self, code, expected):
        """優先度コードの変換"""
        assert AlertPriority.from_code(code) == expected

    @pytest.mark.parametrize(
        ("code", "expected"),
        [(0, AlertKind.ERROR), (1, AlertKind.WARNING), (2, AlertKind.INFO)],
    )
    def test_kind_codes(self, code, expected):
        """種別コードの変換"""
        assert AlertKind.from_code(code) == expected

    def test_source_codes(self):
        """発生源コード 1..6 は順に対応し、0 は GENERIC"""
        # Act
        sources = [AlertSource.from_code(code) for code in range(7)]

        # Assert
        assert sources == [
            AlertSource.GENERIC,
            AlertSource.PROCESS_MONITOR,
            AlertSource.FIREWALL,
            AlertSource.CONNECTION,
            AlertSource.RULE,
            AlertSource.NETLINK,
            AlertSource.KERNEL_EVENT,
        ]

    def test_unknown_codes_fall_back(self):
        """未知のコードは HIGH / INFO / GENERIC にフォールバック"""
        # Arrange
        raw = AlertMessage(id=7, priority=99, type=99, what=99, data=AlertPayload(text="x"))

        # Act
        alert = normalize_alert(NOW, raw)

        # Assert
        assert alert.priority == AlertPriority.HIGH
        assert alert.kind == AlertKind.INFO
        assert alert.source == AlertSource.GENERIC


class TestNormalizeAlert:
    """normalize_alert のテスト"""

    def test_text_payload_is_verbatim(self):
        """テキストのデータ部はそのままメッセージになる"""
        # Arrange
        raw = AlertMessage(priority=1, type=0, what=2, data=AlertPayload(text="iptables failed"))

        # Act
        alert = normalize_alert(NOW, raw)

        # Assert
        assert alert.message == "iptables failed"
        assert alert.priority == AlertPriority.MEDIUM
        assert alert.kind == AlertKind.ERROR
        assert alert.source == AlertSource.FIREWALL

    def test_unsupported_payload(self, caplog):
        """表示できないデータ部は固定文字列になり、バリアント名がログに残る"""
        # Arrange
        raw = AlertMessage.model_validate({"id": 7, "data": {"proc": {"pid": 1}}})

        # Act
        with caplog.at_level(logging.DEBUG, logger="snitchdesk.core.normalizer"):
            alert = normalize_alert(NOW, raw)

        # Assert
        assert alert.message == UNSUPPORTED_DATA
        assert "variant=proc" in caplog.text
        assert "id=7" in caplog.text

    def test_missing_payload(self):
        """データ部がなければ "no data" """
        alert = normalize_alert(NOW, AlertMessage())
        assert alert.message == NO_DATA

    def test_receipt_timestamp_is_caller_time(self):
        """受信時刻は呼び出し側が渡した時刻"""
        alert = normalize_alert(NOW, AlertMessage(data=AlertPayload(text="t")))
        assert alert.receipt_timestamp == NOW


class TestAlert:
    """Alert のテスト"""

    def test_simple_alert(self):
        """ローカル通知は LOW / WARNING / GENERIC"""
        # Act
        alert = Alert.simple(NOW, "hello")

        # Assert
        assert alert.priority == AlertPriority.LOW
        assert alert.kind == AlertKind.WARNING
        assert alert.source == AlertSource.GENERIC
        assert alert.message == "hello"

    def test_age_seconds(self):
        """経過秒数"""
        alert = Alert.simple(NOW, "m")
        assert alert.age_seconds(NOW + timedelta(seconds=42, milliseconds=900)) == 42

    def test_age_clamps_when_clock_goes_backwards(self):
        """時計が逆行しても経過秒数は0"""
        alert = Alert.simple(NOW, "m")
        assert alert.age_seconds(NOW - timedelta(seconds=5)) == 0
