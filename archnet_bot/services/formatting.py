from __future__ import annotations

from datetime import datetime
from html import escape
from typing import Sequence

from archnet_bot.models.api import UserSubscription
from archnet_bot.texts.catalog import TEXTS, TextCatalog

_UNITS = ("KB", "MB", "GB", "TB", "PB")


def format_bytes(size: int) -> str:
    """Binary units with one decimal: ``1536 -> "1.5 KB"``."""
    if size < 1024:
        return f"{max(size, 0)} B"
    value = float(size)
    unit = "B"
    for unit in _UNITS:
        value /= 1024
        if value < 1024:
            break
    return f"{value:.1f} {unit}"


def format_expire_time(timestamp_ms: int, never: str = "Never") -> str:
    """Render a Unix-millisecond expiry as ``YYYY-MM-DD`` in local time; 0 means no expiry."""
    if timestamp_ms <= 0:
        return never
    return datetime.fromtimestamp(timestamp_ms // 1000).strftime("%Y-%m-%d")


def usage_percent(used: int, total: int) -> float:
    if total <= 0:
        return 0.0
    return used * 100.0 / total


def format_subscriptions(
    subscriptions: Sequence[UserSubscription],
    language: str,
    texts: TextCatalog = TEXTS,
) -> str:
    if not subscriptions:
        return texts.get("no_subscriptions", language)
    blocks = [texts.get("traffic_title", language)]
    never = texts.get("never", language)
    for item in subscriptions:
        total = format_bytes(item.traffic) if item.traffic > 0 else texts.get("unlimited", language)
        blocks.append(
            texts.get(
                "traffic_item",
                language,
                name=escape(item.name or "-"),
                used=format_bytes(item.used),
                total=total,
                percent=f"{usage_percent(item.used, item.traffic):.1f}",
                download=format_bytes(item.download),
                upload=format_bytes(item.upload),
                expire=format_expire_time(item.expire_time, never=never),
            )
        )
    return "\n\n".join(blocks)
