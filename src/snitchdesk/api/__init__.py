"""SnitchDesk API

デーモンからの呼び出しを受ける受信リレーと、操作者向けのレビューAPI。
"""

from .server import app

__all__ = ["app"]
