from __future__ import annotations

import logging
from typing import Any, MutableMapping, Tuple


class UserLogger(logging.LoggerAdapter):
    """Prefixes every record with the Telegram user id it concerns."""

    def process(self, msg: Any, kwargs: MutableMapping[str, Any]) -> Tuple[Any, MutableMapping[str, Any]]:
        return f"[{self.extra['user_id']}] {msg}", kwargs


def for_user(logger: logging.Logger, user_id: int) -> UserLogger:
    return UserLogger(logger, {"user_id": user_id})


def setup_logging(level: str = "INFO", debug: bool = False) -> None:
    resolved = logging.DEBUG if debug else logging.getLevelName(level.upper())
    if not isinstance(resolved, int):
        resolved = logging.INFO
    logging.basicConfig(
        level=resolved,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    if not debug:
        logging.getLogger("aiogram.event").setLevel(logging.WARNING)
