from __future__ import annotations

import logging
import time
from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor

from market_extremes.common.ttl_cache import TTLCache
from market_extremes.data_pipeline.logging_utils import log_event
from market_extremes.data_pipeline.types import (
    BulkFetchResult,
    FetchCallable,
    FetchProgress,
    ProgressCallback,
    SymbolFetchOutcome,
)
from market_extremes.settings.settings import FetchSettings

LOGGER = logging.getLogger(__name__)


def classify_fetch_error(exc: Exception, status_code: int | None = None) -> str:
    """Map remote fetch exceptions to stable, typed classifications."""
    message = str(exc).lower()
    if status_code is None:
        status_code = getattr(exc, "status_code", None)
    if status_code is None:
        status_code = getattr(getattr(exc, "response", None), "status_code", None)
    if status_code == 429 or "429" in message or "rate limit" in message:
        return "rate_limited"
    if "ssl" in message or "certificate" in message:
        return "ssl_cert_issue"
    if status_code in (401, 403):
        return "auth_or_blocked"
    if status_code == 404:
        return "endpoint_missing"
    if status_code and status_code >= 500:
        return "server_error"
    if "no data" in message:
        return "no_data"
    if "timeout" in message or "timed out" in message:
        return "timeout"
    if "connection" in message:
        return "connection_error"
    if "json" in message or "decode" in message:
        return "parse_error"
    return "unknown"


def is_rate_limit_error(exc: Exception) -> bool:
    return classify_fetch_error(exc) == "rate_limited"


def _batched(items: Sequence[str], size: int) -> list[list[str]]:
    return [list(items[i : i + size]) for i in range(0, len(items), size)]


class BulkFetcher:
    """Batched, retrying acquisition of daily bars for many symbols.

    Batches run sequentially; symbols inside a batch run concurrently. A
    symbol that exhausts its retries is reported as failed and never fails
    the call.
    """

    def __init__(
        self,
        fetch: FetchCallable,
        *,
        settings: FetchSettings | None = None,
        sleep: Callable[[float], None] = time.sleep,
        cache: TTLCache | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.fetch = fetch
        self.settings = settings or FetchSettings()
        self.sleep = sleep
        self.cache = cache
        self.logger = logger or LOGGER

    def fetch_bulk(
        self,
        symbols: Sequence[str],
        days: int,
        on_progress: ProgressCallback | None = None,
    ) -> BulkFetchResult:
        """Fetch ``days`` of history for every symbol in fixed-size batches."""
        started = time.perf_counter()
        requested = list(dict.fromkeys(str(symbol).strip().upper() for symbol in symbols if str(symbol).strip()))
        batches = _batched(requested, max(1, self.settings.batch_size))

        bars_by_symbol: dict[str, list] = {}
        succeeded: list[str] = []
        failed: list[str] = []
        errors: list[dict] = []
        rate_limited = False
        completed = 0

        log_event(
            self.logger,
            "fetch_start",
            symbol_count=len(requested),
            batch_count=len(batches),
            days=days,
        )

        for batch_index, batch in enumerate(batches):
            if on_progress is not None:
                on_progress(
                    FetchProgress(
                        total=len(requested),
                        completed=completed,
                        failed=len(failed),
                        current_batch=batch_index + 1,
                        total_batches=len(batches),
                        message=f"Fetching batch {batch_index + 1}/{len(batches)} ({', '.join(batch)})...",
                    )
                )

            outcomes = self._process_batch(batch, days)

            for outcome in outcomes:
                if outcome.ok:
                    bars_by_symbol[outcome.symbol] = outcome.bars
                    succeeded.append(outcome.symbol)
                else:
                    failed.append(outcome.symbol)
                    if outcome.classification == "rate_limited":
                        rate_limited = True
                    errors.append(
                        {
                            "symbol": outcome.symbol,
                            "classification": outcome.classification,
                            "exception_message": outcome.error,
                            "retry_count": outcome.attempts,
                        }
                    )
                completed += 1

            if batch_index < len(batches) - 1:
                self.sleep(self.settings.batch_delay_seconds)

        if on_progress is not None:
            on_progress(
                FetchProgress(
                    total=len(requested),
                    completed=len(requested),
                    failed=len(failed),
                    current_batch=len(batches),
                    total_batches=len(batches),
                    message=f"Completed: {len(succeeded)} succeeded, {len(failed)} failed",
                )
            )

        fetch_time_ms = (time.perf_counter() - started) * 1000.0
        log_event(
            self.logger,
            "fetch_complete",
            success_count=len(succeeded),
            error_count=len(failed),
            requested_count=len(requested),
            rate_limited=rate_limited,
            fetch_time_ms=round(fetch_time_ms, 1),
        )
        return BulkFetchResult(
            bars_by_symbol=bars_by_symbol,
            succeeded=succeeded,
            failed=failed,
            rate_limited=rate_limited,
            fetch_time_ms=fetch_time_ms,
            errors=errors,
        )

    def _process_batch(self, batch: list[str], days: int) -> list[SymbolFetchOutcome]:
        with ThreadPoolExecutor(max_workers=len(batch)) as executor:
            futures = [executor.submit(self.fetch_with_retry, symbol, days) for symbol in batch]
            return [future.result() for future in futures]

    def fetch_with_retry(self, symbol: str, days: int) -> SymbolFetchOutcome:
        """Run one symbol's attempt sequence.

        Rate-limit failures back off exponentially, everything else linearly.
        """
        cache_key = (symbol, days)
        if self.cache is not None:
            cached = self.cache.get(cache_key)
            if cached is not None:
                return SymbolFetchOutcome(symbol=symbol, bars=list(cached), attempts=0)

        max_attempts = self.settings.retry_attempts + 1
        delay = self.settings.retry_delay_seconds
        last_error = "Max retries exceeded"
        last_class = "unknown"

        for attempt in range(max_attempts):
            try:
                bars = list(self.fetch(symbol, days))
            except Exception as exc:
                last_error = str(exc) or type(exc).__name__
                last_class = classify_fetch_error(exc)
                if attempt == max_attempts - 1:
                    break
                if last_class == "rate_limited":
                    wait_seconds = delay * (2**attempt)
                else:
                    wait_seconds = delay * (attempt + 1)
                log_event(
                    self.logger,
                    "fetch_retry",
                    symbol=symbol,
                    attempt=attempt + 1,
                    classification=last_class,
                    wait_seconds=wait_seconds,
                )
                self.sleep(wait_seconds)
                continue

            if not bars:
                log_event(self.logger, "fetch_symbol_failed", symbol=symbol, classification="no_data")
                return SymbolFetchOutcome(
                    symbol=symbol,
                    bars=[],
                    error=f"No data returned for {symbol}",
                    classification="no_data",
                    attempts=attempt + 1,
                )
            if self.cache is not None:
                self.cache.set(cache_key, tuple(bars))
            return SymbolFetchOutcome(symbol=symbol, bars=bars, attempts=attempt + 1)

        log_event(
            self.logger,
            "fetch_symbol_failed",
            symbol=symbol,
            classification=last_class,
            error=last_error,
            attempts=max_attempts,
        )
        return SymbolFetchOutcome(
            symbol=symbol,
            bars=[],
            error=last_error,
            classification=last_class,
            attempts=max_attempts,
        )
