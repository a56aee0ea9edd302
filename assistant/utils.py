import json
import logging
import re
from typing import Any, Optional

LOGGER_NAME = "assistant"

_WS_RE = re.compile(r"\s+")


def normalize_text(text: str) -> str:
    """Lowercase, trim and collapse inner whitespace."""
    return _WS_RE.sub(" ", (text or "").strip().lower())


def format_price(value: float) -> str:
    """Rupee amounts print without a trailing .0 (45999, not 45999.0)."""
    amount = float(value)
    if amount.is_integer():
        return str(int(amount))
    return f"{amount:.2f}"


def get_logger(name: str = "", level: Optional[str] = None) -> logging.Logger:
    """Child of the `assistant` logger; `level`, when given, applies to the whole tree."""
    root = logging.getLogger(LOGGER_NAME)
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(message)s"))
        root.addHandler(handler)
        root.setLevel(logging.INFO)
    if level:
        root.setLevel(level.upper())
    if not name:
        return root
    return root.getChild(name)


def log_event(logger: logging.Logger, event: str, level: int = logging.INFO, **fields: Any) -> None:
    payload = {"event": event}
    payload.update(fields)
    logger.log(level, json.dumps(payload, ensure_ascii=False, default=str))
