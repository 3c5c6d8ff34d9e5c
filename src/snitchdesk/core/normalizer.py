"""アラート正規化

受信したアラートメッセージを正規化済みの Alert に変換する。
"""

from __future__ import annotations

import logging
from datetime import datetime

from .models.alert import Alert, AlertKind, AlertMessage, AlertPriority, AlertSource

logger = logging.getLogger(__name__)

UNSUPPORTED_DATA = "unsupported alert data"
NO_DATA = "no data"


def normalize_alert(now: datetime, raw: AlertMessage) -> Alert:
    """アラートメッセージを正規化

    失敗しない。未知の列挙コードは既定値にフォールバックし、
    表示できないデータ部は固定文字列に置き換える。

    Args:
        now: 受信時刻（receipt_timestamp に使う）
        raw: 受信したアラートメッセージ

    Returns:
        正規化済みアラート
    """
    if raw.data is None:
        message = NO_DATA
    elif raw.data.text is not None:
        message = raw.data.text
    else:
        message = UNSUPPORTED_DATA
        logger.debug(
            f"表示できないアラートデータを置換: id={raw.id}, variant={raw.payload_variant()}"
        )

    return Alert(
        receipt_timestamp=now,
        priority=AlertPriority.from_code(raw.priority),
        kind=AlertKind.from_code(raw.type),
        source=AlertSource.from_code(raw.what),
        message=message,
    )
