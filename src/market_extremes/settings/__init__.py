from .environment import (
    parse_env_bool,
    parse_env_float,
    parse_env_int,
    parse_env_list,
    parse_env_str,
)
from .settings import (
    DEFAULT_THRESHOLDS,
    FetchSettings,
    MarketSettings,
    Thresholds,
    load_market_settings,
)

__all__ = [
    "DEFAULT_THRESHOLDS",
    "FetchSettings",
    "MarketSettings",
    "Thresholds",
    "load_market_settings",
    "parse_env_bool",
    "parse_env_float",
    "parse_env_int",
    "parse_env_list",
    "parse_env_str",
]
