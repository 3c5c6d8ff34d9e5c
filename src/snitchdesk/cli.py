"""SnitchDesk CLI

コマンドラインインターフェース。
"""

import argparse
import json
import logging
import sys

DEFAULT_URL = "http://127.0.0.1:50051"


def main():
    """メインエントリーポイント"""
    parser = argparse.ArgumentParser(
        description="SnitchDesk - ファイアウォールデーモンの接続レビュー・処分エンジン",
        prog="snitchdesk",
    )

    subparsers = parser.add_subparsers(dest="command", help="利用可能なコマンド")

    # serve コマンド
    serve_parser = subparsers.add_parser("serve", help="受信リレーと処分エンジンを起動")
    serve_parser.add_argument("--host", default=None, help="バインドするホスト（既定: 設定値）")
    serve_parser.add_argument("--port", type=int, default=None, help="ポート番号（既定: 設定値）")
    serve_parser.add_argument("--config", default=None, help="設定ファイルのパス")

    # operators コマンド
    operators_parser = subparsers.add_parser(
        "operators", help="接続属性からルールオペレーターを生成して表示"
    )
    operators_parser.add_argument(
        "preset", help="プリセット組み合わせ（例: exact_process_path,exact_dst_port）"
    )
    operators_parser.add_argument("--uid", type=int, default=None, help="ユーザーID")
    operators_parser.add_argument("--path", default=None, help="プロセスパス")
    operators_parser.add_argument("--dst-ip", default=None, help="宛先IP")
    operators_parser.add_argument("--dst-port", type=int, default=None, help="宛先ポート")
    operators_parser.add_argument("--protocol", default=None, help="プロトコル")
    operators_parser.add_argument("--host", default=None, help="宛先ホスト名")

    # status コマンド
    status_parser = subparsers.add_parser("status", help="エンジンの状態を表示")
    status_parser.add_argument("--url", default=DEFAULT_URL, help="APIサーバーURL")
    status_parser.add_argument("--offset", type=int, default=0, help="アラートの表示開始位置")
    status_parser.add_argument("--help-screen", action="store_true", help="ヘルプ画面を表示")
    status_parser.add_argument("--color", action="store_true", help="ANSI色を付ける")

    # decide コマンド
    decide_parser = subparsers.add_parser("decide", help="レビュー中の接続に決定を送る")
    decide_parser.add_argument("action", choices=["allow", "deny"], help="アクション")
    decide_parser.add_argument(
        "--scope", default="once", choices=["once", "forever"], help="有効範囲"
    )
    decide_parser.add_argument(
        "--item-id", default=None, help="対象項目ID（省略時はレビュー中の項目）"
    )
    decide_parser.add_argument("--url", default=DEFAULT_URL, help="APIサーバーURL")

    args = parser.parse_args()

    if args.command == "serve":
        run_serve(args)
    elif args.command == "operators":
        run_operators(args)
    elif args.command == "status":
        run_status(args)
    elif args.command == "decide":
        run_decide(args)
    else:
        parser.print_help()
        sys.exit(1)


def run_serve(args):
    """受信リレーと処分エンジンを起動"""
    import uvicorn

    from .core import reload_settings

    settings = reload_settings(args.config)
    logging.basicConfig(
        level=settings.logging.level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    uvicorn.run(
        "snitchdesk.api:app",
        host=args.host or settings.server.host,
        port=args.port or settings.server.port,
        log_level=settings.logging.level.lower(),
    )


def run_operators(args):
    """ルールオペレーターを生成して JSON Lines で表示"""
    from .core.models import ConnectionReviewInputs
    from .core.rules import PresetParseError, generate_operators, parse_preset_combination

    try:
        combo = parse_preset_combination(args.preset)
    except PresetParseError as e:
        print(f"エラー: {e}", file=sys.stderr)
        sys.exit(2)

    inputs = ConnectionReviewInputs(
        user_id=args.uid,
        process_path=args.path,
        dst_ip=args.dst_ip,
        dst_port=args.dst_port,
        protocol=args.protocol,
        hostname=args.host,
    )
    for operator in generate_operators(inputs, combo):
        print(operator.to_json())


def run_status(args):
    """エンジンの状態を表示"""
    import httpx

    from .core import __version__
    from .core.models import EngineSnapshot
    from .presentation import render_snapshot

    screen = "help" if args.help_screen else "main"
    url = f"{args.url.rstrip('/')}/snapshot"
    try:
        with httpx.Client(timeout=5.0) as client:
            response = client.get(url, params={"screen": screen, "offset": args.offset})
            response.raise_for_status()
    except httpx.HTTPError as e:
        print(f"エラー: サーバーに接続できません: {e}", file=sys.stderr)
        sys.exit(1)

    snapshot = EngineSnapshot.model_validate(response.json())
    print(render_snapshot(snapshot, color=args.color, version=__version__))


def run_decide(args):
    """レビュー中の接続に決定を送る

    --item-id 省略時は現在レビュー中の項目IDを取得して付ける。
    """
    import httpx

    from .core.models import Disposition, EngineSnapshot
    from .presentation import decision_payload

    base_url = args.url.rstrip("/")
    disposition = Disposition(action=args.action, scope=args.scope)
    try:
        with httpx.Client(timeout=5.0) as client:
            if args.item_id is None:
                snapshot_response = client.get(f"{base_url}/snapshot")
                snapshot_response.raise_for_status()
                snapshot = EngineSnapshot.model_validate(snapshot_response.json())
                payload = decision_payload(disposition, snapshot)
                if payload is None:
                    print("エラー: レビュー中の接続がありません", file=sys.stderr)
                    sys.exit(1)
            else:
                payload = {"action": args.action, "scope": args.scope, "item_id": args.item_id}
            response = client.post(f"{base_url}/review/decision", json=payload)
            response.raise_for_status()
    except httpx.HTTPError as e:
        print(f"エラー: 決定を送信できません: {e}", file=sys.stderr)
        sys.exit(1)

    print(json.dumps(response.json(), ensure_ascii=False))


if __name__ == "__main__":
    main()
