from __future__ import annotations

from enum import Enum
from typing import Any


class _CoercibleEnum(str, Enum):
    def __str__(self) -> str:
        return self.value

    @classmethod
    def coerce(cls, value: Any):
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            text = value.strip()
            for member in cls:
                if text == member.value:
                    return member
            lowered = text.lower()
            for member in cls:
                if lowered == member.value.lower() or lowered == member.name.lower():
                    return member
        return None


class Basis(_CoercibleEnum):
    """Price field compared against the rolling extreme."""

    CLOSE = "close"
    INTRADAY = "intraday"


class BreadthMetric(_CoercibleEnum):
    NEW_LOWS = "new_lows"
    NEW_HIGHS = "new_highs"


class RegimeLabel(_CoercibleEnum):
    RISK_ON = "Risk-On"
    NARROW_MIXED = "Narrow / Mixed"
    RISK_OFF = "Risk-Off"


class Confidence(_CoercibleEnum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class RejectionSeverity(_CoercibleEnum):
    STRONG = "strong"
    NOTABLE = "notable"
    MILD = "mild"
