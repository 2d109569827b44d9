from .enums import Basis, BreadthMetric, Confidence, RegimeLabel, RejectionSeverity
from .ttl_cache import TTLCache
from .universes import (
    UNIVERSES,
    Universe,
    get_universe_symbol_count,
    list_universes,
    resolve_universe,
)

__all__ = [
    "Basis",
    "BreadthMetric",
    "Confidence",
    "RegimeLabel",
    "RejectionSeverity",
    "TTLCache",
    "UNIVERSES",
    "Universe",
    "get_universe_symbol_count",
    "list_universes",
    "resolve_universe",
]
