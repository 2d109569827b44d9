"""
Market Extremes Command Line Interface.

Usage:
    market-extremes --help
    market-extremes universes
    market-extremes breadth qqq --lookback 100 --search-days 500
    market-extremes heatmap SPX,NDX,DJI,RUT,SOX,IXIC --days 63 --lookback 63
"""

from __future__ import annotations

import argparse
import json
import sys
from collections.abc import Sequence
from typing import Any


def _print_json(payload: Any) -> None:
    print(json.dumps(payload, indent=2, default=str))


def _build_service(settings):
    from .common.ttl_cache import TTLCache
    from .data_pipeline.client import PolygonBarsClient
    from .data_pipeline.errors import ConfigurationError
    from .data_pipeline.fetcher import BulkFetcher
    from .services.market_service import MarketExtremesService

    if not settings.has_api_key:
        raise ConfigurationError("Set MASSIVE_API_KEY or POLYGON_API_KEY to fetch market data")

    client = PolygonBarsClient.from_settings(settings)
    cache = TTLCache(settings.fetch.cache_ttl_seconds, settings.fetch.cache_max_entries)
    fetcher = BulkFetcher(client, settings=settings.fetch, cache=cache)
    return client, MarketExtremesService(fetcher)


def _progress(progress) -> None:
    print(progress.message, file=sys.stderr)


def cmd_universes(args, settings) -> None:
    """List supported universes."""
    from .common.universes import list_universes

    _print_json(
        [
            {
                "id": universe.id,
                "label": universe.label,
                "etf_proxy": universe.etf_proxy,
                "symbol_count": len(universe.symbols),
                "as_of": universe.as_of,
            }
            for universe in list_universes()
        ]
    )


def cmd_breadth(args, settings) -> None:
    """Compute rolling breadth for a universe and report its extremes."""
    client, service = _build_service(settings)
    with client:
        report = service.breadth_report(
            args.universe,
            lookback_days=args.lookback,
            search_days=args.search_days,
            window_days=args.window_days,
            metric=args.metric,
            top_n=args.top,
            on_progress=_progress if args.progress else None,
        )
    _print_json(report.to_dict(include_series=args.series))


def cmd_heatmap(args, settings) -> None:
    """Days-since-high heatmap for a symbol list plus derived signals."""
    symbols = [s.strip().upper() for s in args.symbols.split(",") if s.strip()]
    client, service = _build_service(settings)
    with client:
        report = service.heatmap_report(
            symbols,
            days=args.days,
            lookback=args.lookback,
            on_progress=_progress if args.progress else None,
        )
    _print_json(report.to_dict())


def build_parser() -> argparse.ArgumentParser:
    from . import __version__

    parser = argparse.ArgumentParser(
        prog="market-extremes",
        description="Market Extremes - rolling highs/lows, breadth and regime signals",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--log-level", default=None, help="Override MARKET_EXTREMES_LOG_LEVEL")
    parser.add_argument("--progress", action="store_true", help="Print fetch progress to stderr")

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    universes_parser = subparsers.add_parser("universes", help="List supported universes")
    universes_parser.set_defaults(func=cmd_universes)

    breadth_parser = subparsers.add_parser("breadth", help="Rolling new-low/new-high breadth")
    breadth_parser.add_argument("universe", help="Universe id (e.g. qqq, spy, soxx)")
    breadth_parser.add_argument("--lookback", type=int, default=100, help="Lookback window in sessions")
    breadth_parser.add_argument("--search-days", type=int, default=500, help="Sessions to search for the peak")
    breadth_parser.add_argument("--window-days", type=int, default=100, help="Window width around the peak")
    breadth_parser.add_argument("--metric", choices=["new_lows", "new_highs"], default="new_lows")
    breadth_parser.add_argument("--top", type=int, default=5, help="Number of top readings to report")
    breadth_parser.add_argument("--series", action="store_true", help="Include the full breadth series")
    breadth_parser.set_defaults(func=cmd_breadth)

    heatmap_parser = subparsers.add_parser("heatmap", help="Days-since-high heatmap and signals")
    heatmap_parser.add_argument("symbols", help="Comma-separated symbols")
    heatmap_parser.add_argument("--days", type=int, default=63, help="Sessions to display")
    heatmap_parser.add_argument("--lookback", type=int, default=63, help="Rolling window in sessions")
    heatmap_parser.set_defaults(func=cmd_heatmap)

    return parser


def main(argv: Sequence[str] | None = None) -> None:
    """Main CLI entry point."""
    from .data_pipeline.errors import MarketDataError
    from .engines.errors import EngineError
    from .observability.logging import configure_logging
    from .settings import load_market_settings

    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    settings = load_market_settings()
    configure_logging(
        args.log_level or settings.log_level,
        json_format=settings.log_json,
        log_file=settings.log_file,
    )

    try:
        args.func(args, settings)
    except EngineError as exc:
        print(f"Error: {exc.user_message}", file=sys.stderr)
        sys.exit(2)
    except MarketDataError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
