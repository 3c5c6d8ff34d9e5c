"""SnitchDesk API サーバー

FastAPIベースの受信リレーとレビューAPI。
処分エンジンのループはアプリケーションのライフサイクルに合わせて起動・停止する。
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from ..core import __version__
from .dependencies import get_engine
from .routes import relay_router, review_router, system_router

logger = logging.getLogger(__name__)

# --- ライフサイクル ---


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """アプリケーションライフサイクル"""
    # 起動時
    engine = get_engine()
    await engine.start()
    logger.info(
        f"処分エンジンを起動: preset={engine.settings.rules.preset}, "
        f"window={engine.settings.review.review_window_seconds}s"
    )

    yield

    # シャットダウン時
    await engine.stop()
    logger.info("処分エンジンを停止")


# --- FastAPIアプリケーション ---

app = FastAPI(
    title="SnitchDesk API",
    description="アプリケーションファイアウォールデーモンの接続レビュー・処分エンジン",
    version=__version__,
    lifespan=lifespan,
)

# ルーターを登録
app.include_router(system_router)
app.include_router(relay_router)
app.include_router(review_router)
