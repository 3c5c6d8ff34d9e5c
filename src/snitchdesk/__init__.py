"""SnitchDesk

アプリケーションファイアウォールデーモンの接続レビュー・処分エンジン。
"""

from .core import __version__

__all__ = ["__version__"]
