from __future__ import annotations

from typing import Any


class EngineError(RuntimeError):
    """Base class for library-level engine errors."""

    code = "ENGINE_ERROR"

    def __init__(self, message: str, *, user_message: str | None = None) -> None:
        super().__init__(message)
        self.user_message = user_message or message


class EngineValidationError(EngineError):
    """Caller violated an engine contract (bad lookback, empty universe, ...)."""

    code = "VALIDATION_ERROR"


class EngineDataError(EngineError):
    code = "DATA_ERROR"


def require_positive_int(name: str, value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise EngineValidationError(f"{name} must be a positive integer, got {value!r}")
    return value
