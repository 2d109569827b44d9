"""Service layer exports for the CLI and embedding applications."""

from market_extremes.services.market_service import (
    BreadthReport,
    HeatmapReport,
    MarketExtremesService,
)

__all__ = [
    "BreadthReport",
    "HeatmapReport",
    "MarketExtremesService",
]
