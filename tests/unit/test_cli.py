"""Unit tests for the command line entry point."""

from __future__ import annotations

import json

import pytest

from market_extremes import cli


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch) -> list[tuple]:
    for name in ("MASSIVE_API_KEY", "POLYGON_API_KEY", "MARKET_EXTREMES_LOG_FILE", "MARKET_EXTREMES_LOG_JSON"):
        monkeypatch.delenv(name, raising=False)
    calls: list[tuple] = []
    monkeypatch.setattr(
        "market_extremes.observability.logging.configure_logging",
        lambda level, **kwargs: calls.append((level, kwargs)),
    )
    return calls


def test_universes_prints_json(capsys, _clean_env) -> None:
    cli.main(["--log-level", "DEBUG", "universes"])

    payload = json.loads(capsys.readouterr().out)
    ids = [row["id"] for row in payload]
    assert ids == ["soxx", "smh", "qqq", "spy", "iwm", "dia"]
    assert payload[-1]["symbol_count"] == 30
    assert _clean_env == [("DEBUG", {"json_format": False, "log_file": None})]


def test_missing_command_exits_non_zero(capsys) -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli.main([])
    assert excinfo.value.code == 1


def test_breadth_without_api_key_fails_cleanly(capsys) -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["breadth", "qqq"])

    assert excinfo.value.code == 1
    assert "MASSIVE_API_KEY" in capsys.readouterr().err


def test_parser_defaults() -> None:
    args = cli.build_parser().parse_args(["heatmap", "SPX,NDX"])

    assert args.days == 63
    assert args.lookback == 63
    assert args.func is cli.cmd_heatmap

    args = cli.build_parser().parse_args(["breadth", "semis", "--metric", "new_highs", "--top", "3"])
    assert args.lookback == 100
    assert args.search_days == 500
    assert args.window_days == 100
    assert args.metric == "new_highs"
    assert args.top == 3
