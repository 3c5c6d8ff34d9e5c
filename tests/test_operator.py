"""マッチオペレーターモデルのテスト"""

import json

from snitchdesk.core.models import (
    MatchOperator,
    Operand,
    RuleType,
    decode_operand,
    decode_rule_type,
)
from snitchdesk.core.models.operator import REDACTED


class TestTagDecoding:
    """種別・オペランドタグのデコードのテスト"""

    def test_known_rule_types_decode_to_enum(self):
        """既知の種別タグは列挙値になる"""
        assert decode_rule_type("simple") is RuleType.SIMPLE
        assert decode_rule_type("regexp") is RuleType.REGEXP
        assert decode_rule_type("list") is RuleType.LIST

    def test_unknown_rule_type_is_preserved(self):
        """未知の種別タグはエラーにならず文字列のまま保持される"""
        # Act
        decoded = decode_rule_type("network")

        # Assert
        assert decoded == "network"
        assert not isinstance(decoded, RuleType)

    def test_known_operands_decode_to_enum(self):
        """既知のオペランドタグは列挙値になる"""
        assert decode_operand("user.id") is Operand.USER_ID
        assert decode_operand("process.path") is Operand.PROCESS_PATH
        assert decode_operand("dest.ip") is Operand.DEST_IP
        assert decode_operand("dest.port") is Operand.DEST_PORT
        assert decode_operand("protocol") is Operand.PROTOCOL
        assert decode_operand("dest.host") is Operand.DEST_HOST

    def test_unknown_operand_is_preserved(self):
        """未知のオペランドタグは文字列のまま保持される"""
        assert decode_operand("process.hash.md5") == "process.hash.md5"


class TestMatchOperatorSerialization:
    """シリアライズのテスト"""

    def test_field_order(self):
        """シリアライズ時のフィールド順は type, operand, data, sensitive, list"""
        # Arrange
        op = MatchOperator(type=RuleType.SIMPLE, operand=Operand.PROTOCOL, data="tcp")

        # Act
        data = op.to_dict()

        # Assert
        assert list(data.keys()) == ["type", "operand", "data", "sensitive", "list"]

    def test_to_json_compact_form(self):
        """コンパクトなJSONにシリアライズされる"""
        # Arrange
        op = MatchOperator(type=RuleType.SIMPLE, operand=Operand.PROTOCOL, data="tcp")

        # Act
        text = op.to_json()

        # Assert
        assert text == (
            '{"type":"simple","operand":"protocol","data":"tcp","sensitive":false,"list":[]}'
        )

    def test_nested_operators_serialized_under_list(self):
        """子要素は list キーでシリアライズされる"""
        # Arrange
        child = MatchOperator(type=RuleType.SIMPLE, operand=Operand.DEST_PORT, data="443")
        parent = MatchOperator(
            type=RuleType.LIST, operand=Operand.LIST, data="", nested=[child]
        )

        # Act
        data = json.loads(parent.to_json())

        # Assert
        assert data["list"][0]["operand"] == "dest.port"
        assert "nested" not in data

    def test_from_dict_roundtrip(self):
        """to_dict の出力から同じオペレーターを復元できる"""
        # Arrange
        child = MatchOperator(type=RuleType.REGEXP, operand=Operand.DEST_HOST, data=r"(^|\.)a\.b$")
        op = MatchOperator(type=RuleType.LIST, operand=Operand.LIST, data="", nested=[child])

        # Act
        restored = MatchOperator.from_dict(op.to_dict())

        # Assert
        assert restored == op

    def test_from_dict_preserves_unknown_tags(self):
        """未知タグを含む辞書も復元できる"""
        # Act
        op = MatchOperator.from_dict({"type": "lists", "operand": "lists.domains", "data": "/etc"})

        # Assert
        assert op.type == "lists"
        assert op.operand == "lists.domains"
        assert op.nested == []


class TestMatchOperatorValue:
    """値型としての振る舞いのテスト"""

    def test_structural_equality(self):
        """同じフィールドを持つオペレーターは等しい"""
        a = MatchOperator(type=RuleType.SIMPLE, operand=Operand.DEST_IP, data="1.1.1.1")
        b = MatchOperator(type=RuleType.SIMPLE, operand=Operand.DEST_IP, data="1.1.1.1")
        assert a == b

    def test_sensitive_data_is_redacted_for_logging(self):
        """sensitive の data はログ用表示で伏せられる"""
        # Arrange
        op = MatchOperator(
            type=RuleType.SIMPLE,
            operand=Operand.PROCESS_PATH,
            data="/home/u/secret",
            sensitive=True,
        )

        # Assert
        assert op.loggable_data == REDACTED
        assert "/home/u/secret" not in str(op)
        assert op.data == "/home/u/secret"
