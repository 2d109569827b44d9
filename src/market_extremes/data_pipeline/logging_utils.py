from __future__ import annotations

import json
import logging
from typing import Any


def log_event(logger: logging.Logger, event: str, **context: Any) -> None:
    """Log a single structured event payload."""
    payload = {"event": event, **context}
    logger.info(json.dumps(payload, ensure_ascii=False, default=str))
