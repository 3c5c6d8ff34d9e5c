"""CLIモジュールのテスト"""

import json
import sys
from argparse import Namespace
from unittest.mock import MagicMock, patch

import httpx
import pytest

from snitchdesk.cli import DEFAULT_URL, main, run_decide, run_operators, run_serve, run_status
from snitchdesk.core.models import (
    DEFAULT_CONTROLS,
    Action,
    ConnectionInfo,
    ConnectionReviewInputs,
    EngineSnapshot,
    ReviewView,
    Statistics,
)


class TestMainFunction:
    """main関数のテスト"""

    def test_no_command_shows_help(self):
        """コマンドなしでヘルプが表示される"""
        # Arrange
        with patch.object(sys, "argv", ["snitchdesk"]):
            # Act & Assert
            with pytest.raises(SystemExit) as excinfo:
                main()
            assert excinfo.value.code == 1

    def test_serve_command_with_options(self):
        """serveコマンドのオプションが正しく渡される"""
        # Arrange
        with patch.object(
            sys, "argv", ["snitchdesk", "serve", "--host", "0.0.0.0", "--port", "9000"]
        ):
            with patch("snitchdesk.cli.run_serve") as mock_run_serve:
                # Act
                main()

                # Assert
                args = mock_run_serve.call_args[0][0]
                assert args.host == "0.0.0.0"
                assert args.port == 9000
                assert args.config is None

    def test_operators_command(self):
        """operatorsコマンドが正しく処理される"""
        # Arrange
        with patch.object(
            sys, "argv", ["snitchdesk", "operators", "exact_dst_port", "--dst-port", "53"]
        ):
            with patch("snitchdesk.cli.run_operators") as mock_run_operators:
                # Act
                main()

                # Assert
                args = mock_run_operators.call_args[0][0]
                assert args.preset == "exact_dst_port"
                assert args.dst_port == 53

    def test_status_command(self):
        """statusコマンドが正しく処理される"""
        # Arrange
        with patch.object(sys, "argv", ["snitchdesk", "status", "--offset", "2"]):
            with patch("snitchdesk.cli.run_status") as mock_run_status:
                # Act
                main()

                # Assert
                args = mock_run_status.call_args[0][0]
                assert args.offset == 2
                assert args.url == "http://127.0.0.1:50051"

    def test_decide_command(self):
        """decideコマンドが正しく処理される"""
        # Arrange
        with patch.object(sys, "argv", ["snitchdesk", "decide", "allow", "--scope", "forever"]):
            with patch("snitchdesk.cli.run_decide") as mock_run_decide:
                # Act
                main()

                # Assert
                args = mock_run_decide.call_args[0][0]
                assert args.action == "allow"
                assert args.scope == "forever"


class TestRunServe:
    """run_serve関数のテスト"""

    def test_uses_settings_defaults(self, tmp_path):
        """ホスト・ポート未指定なら設定値で起動する"""
        # Arrange
        config_file = tmp_path / "snitchdesk.config.yaml"
        config_file.write_text("server:\n  port: 50099\nlogging:\n  level: DEBUG\n")
        args = Namespace(host=None, port=None, config=str(config_file))

        try:
            with patch("uvicorn.run") as mock_run:
                # Act
                run_serve(args)

            # Assert
            mock_run.assert_called_once_with(
                "snitchdesk.api:app", host="127.0.0.1", port=50099, log_level="debug"
            )
        finally:
            from snitchdesk.core import reload_settings

            reload_settings(tmp_path / "missing.yaml")


class TestRunOperators:
    """run_operators関数のテスト"""

    def test_prints_json_lines(self, capsys):
        """生成したオペレーターを1行ずつJSONで出力する"""
        # Arrange
        args = Namespace(
            preset="exact_dst_ip,any_subdomain_hostname",
            uid=None,
            path=None,
            dst_ip="10.0.0.1",
            dst_port=None,
            protocol=None,
            host="example.org",
        )

        # Act
        run_operators(args)

        # Assert
        lines = capsys.readouterr().out.strip().splitlines()
        assert [json.loads(line)["operand"] for line in lines] == ["dest.ip", "dest.host"]
        assert json.loads(lines[1])["data"] == r"(^|\.)example\.org$"

    def test_invalid_preset_exits(self, capsys):
        """不正なプリセットはエラー終了"""
        # Arrange
        args = Namespace(
            preset="exact_hostname,any_subdomain_hostname",
            uid=None,
            path=None,
            dst_ip=None,
            dst_port=None,
            protocol=None,
            host=None,
        )

        # Act & Assert
        with pytest.raises(SystemExit) as excinfo:
            run_operators(args)
        assert excinfo.value.code == 2
        assert "エラー" in capsys.readouterr().err


class TestRunStatus:
    """run_status関数のテスト"""

    def test_renders_snapshot(self, capsys):
        """取得したスナップショットを表示する"""
        # Arrange
        snapshot = EngineSnapshot(statistics=Statistics(rules=4), controls=list(DEFAULT_CONTROLS))
        response = MagicMock()
        response.json.return_value = snapshot.model_dump(mode="json")
        client = MagicMock()
        client.get.return_value = response
        client.__enter__.return_value = client
        args = Namespace(url="http://127.0.0.1:50051/", offset=0, help_screen=False, color=False)

        with patch("httpx.Client", return_value=client):
            # Act
            run_status(args)

        # Assert
        client.get.assert_called_once_with(
            "http://127.0.0.1:50051/snapshot", params={"screen": "main", "offset": 0}
        )
        out = capsys.readouterr().out
        assert "rules: 4" in out
        assert "Ctrl+C Quit" in out

    def test_connection_error_exits(self, capsys):
        """接続できなければエラー終了"""
        # Arrange
        client = MagicMock()
        client.__enter__.return_value = client
        client.get.side_effect = httpx.ConnectError("refused")
        args = Namespace(url="http://127.0.0.1:1", offset=0, help_screen=False, color=False)

        with patch("httpx.Client", return_value=client):
            # Act & Assert
            with pytest.raises(SystemExit) as excinfo:
                run_status(args)

        assert excinfo.value.code == 1
        assert "接続できません" in capsys.readouterr().err


class TestRunDecide:
    """run_decide関数のテスト"""

    def test_posts_decision(self, capsys):
        """決定を送信して応答を表示する"""
        # Arrange
        response = MagicMock()
        response.json.return_value = {"accepted": True, "item_id": "01ITEM"}
        client = MagicMock()
        client.post.return_value = response
        client.__enter__.return_value = client
        args = Namespace(
            action="deny", scope="forever", item_id="01ITEM", url="http://127.0.0.1:50051"
        )

        with patch("httpx.Client", return_value=client):
            # Act
            run_decide(args)

        # Assert
        client.post.assert_called_once_with(
            "http://127.0.0.1:50051/review/decision",
            json={"action": "deny", "scope": "forever", "item_id": "01ITEM"},
        )
        assert json.loads(capsys.readouterr().out) == {"accepted": True, "item_id": "01ITEM"}

    def test_fetches_item_id_when_omitted(self, capsys):
        """項目ID省略時はレビュー中の項目IDを付けて送信する"""
        # Arrange
        connection = ConnectionInfo(dst_ip="10.0.0.1", dst_port=443, protocol="tcp")
        snapshot = EngineSnapshot(
            review=ReviewView(
                item_id="01SHOWN",
                connection=connection,
                inputs=ConnectionReviewInputs.from_connection(connection),
                remaining_seconds=9.0,
                default_action=Action.DENY,
            )
        )
        snapshot_response = MagicMock()
        snapshot_response.json.return_value = snapshot.model_dump(mode="json")
        post_response = MagicMock()
        post_response.json.return_value = {"accepted": True, "item_id": "01SHOWN"}
        client = MagicMock()
        client.get.return_value = snapshot_response
        client.post.return_value = post_response
        client.__enter__.return_value = client
        args = Namespace(action="allow", scope="forever", item_id=None, url=DEFAULT_URL)

        with patch("httpx.Client", return_value=client):
            # Act
            run_decide(args)

        # Assert
        client.get.assert_called_once_with(f"{DEFAULT_URL}/snapshot")
        client.post.assert_called_once_with(
            f"{DEFAULT_URL}/review/decision",
            json={"action": "allow", "scope": "forever", "item_id": "01SHOWN"},
        )

    def test_nothing_under_review_exits(self, capsys):
        """レビュー中の項目がなければ送信せずにエラー終了"""
        # Arrange
        snapshot_response = MagicMock()
        snapshot_response.json.return_value = EngineSnapshot().model_dump(mode="json")
        client = MagicMock()
        client.get.return_value = snapshot_response
        client.__enter__.return_value = client
        args = Namespace(action="deny", scope="once", item_id=None, url=DEFAULT_URL)

        with patch("httpx.Client", return_value=client):
            # Act & Assert
            with pytest.raises(SystemExit) as excinfo:
                run_decide(args)

        assert excinfo.value.code == 1
        client.post.assert_not_called()
        assert "レビュー中の接続がありません" in capsys.readouterr().err
