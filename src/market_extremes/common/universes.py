"""
ETF-proxy symbol universes for breadth analysis.

Official index constituent feeds need licensed data, so each universe uses
the holdings of a liquid ETF tracking the index as a stand-in.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Universe:
    id: str
    label: str
    description: str
    symbols: tuple[str, ...]
    disclosure_text: str
    etf_proxy: str
    as_of: str

    def to_dict(self) -> dict[str, object]:
        return {
            "id": self.id,
            "label": self.label,
            "description": self.description,
            "symbols": list(self.symbols),
            "disclosure_text": self.disclosure_text,
            "etf_proxy": self.etf_proxy,
            "as_of": self.as_of,
        }


SOXX_CONSTITUENTS = (
    "NVDA", "AMD", "AVGO", "INTC", "TXN", "QCOM", "MU", "AMAT", "LRCX", "KLAC",
    "ADI", "MRVL", "NXPI", "ON", "MCHP", "ASML", "ARM", "TSM", "MPWR", "SWKS",
    "QRVO", "TER", "ENTG", "CRUS", "WOLF", "SMTC", "ALGM", "ACLS", "MKSI", "COHR",
)

SMH_CONSTITUENTS = (
    "NVDA", "TSM", "AVGO", "ASML", "AMD",
    "QCOM", "TXN", "INTC", "LRCX", "AMAT",
    "MU", "KLAC", "ADI", "NXPI", "MRVL",
    "MCHP", "ON", "MPWR", "ARM", "SNPS",
    "CDNS", "TER", "SWKS", "ENTG", "QRVO",
)

# Top 50 holdings
QQQ_CONSTITUENTS = (
    "AAPL", "MSFT", "NVDA", "AMZN", "META",
    "GOOGL", "GOOG", "TSLA", "AVGO", "COST",
    "NFLX", "AMD", "PEP", "ADBE", "CSCO",
    "LIN", "TMUS", "INTC", "INTU", "CMCSA",
    "TXN", "QCOM", "AMGN", "HON", "AMAT",
    "ISRG", "BKNG", "SBUX", "VRTX", "MDLZ",
    "GILD", "ADI", "REGN", "LRCX", "MU",
    "PANW", "KLAC", "SNPS", "CDNS", "MRVL",
    "MELI", "PYPL", "MAR", "ORLY", "NXPI",
    "FTNT", "ASML", "CTAS", "MNST", "ABNB",
)

# Top 50 holdings
SPY_CONSTITUENTS = (
    "AAPL", "MSFT", "NVDA", "AMZN", "META",
    "GOOGL", "GOOG", "BRK.B", "TSLA", "UNH",
    "XOM", "JPM", "JNJ", "V", "PG",
    "MA", "HD", "AVGO", "CVX", "MRK",
    "COST", "ABBV", "LLY", "PEP", "KO",
    "WMT", "ADBE", "BAC", "CRM", "CSCO",
    "TMO", "MCD", "NFLX", "AMD", "ACN",
    "ORCL", "LIN", "ABT", "DHR", "INTC",
    "WFC", "TXN", "DIS", "PM", "INTU",
    "VZ", "QCOM", "CMCSA", "NEE", "COP",
)

# Top 40 holdings; the largest small caps only
IWM_CONSTITUENTS = (
    "SMCI", "MSTR", "CELH", "ONTO", "SPSC",
    "CVLT", "ANF", "EXAS", "FIX", "FN",
    "BMI", "SANM", "MOD", "LNTH", "GCM",
    "HALO", "NVEE", "SIG", "ACLX", "CRVL",
    "STEP", "ELF", "VFC", "IDCC", "ATKR",
    "SKY", "GTLS", "CWST", "PLXS", "RUN",
    "DIOD", "VCYT", "POWL", "JANX", "TGTX",
    "PRGS", "CRSR", "TMHC", "KRYS", "RXRX",
)

DIA_CONSTITUENTS = (
    "UNH", "GS", "MSFT", "HD", "CAT",
    "AMGN", "MCD", "V", "CRM", "TRV",
    "AXP", "BA", "HON", "JPM", "IBM",
    "AAPL", "WMT", "PG", "JNJ", "CVX",
    "MRK", "DIS", "NKE", "KO", "MMM",
    "DOW", "CSCO", "INTC", "VZ", "WBA",
)

UNIVERSES: dict[str, Universe] = {
    "soxx": Universe(
        id="soxx",
        label="Semiconductors (SOXX)",
        description="PHLX Semiconductor Index proxy using iShares SOXX ETF constituents",
        symbols=SOXX_CONSTITUENTS,
        disclosure_text=(
            "Using SOXX ETF constituents as a proxy for PHLX/SOX semiconductor breadth. "
            "Official constituent feeds require licensed data."
        ),
        etf_proxy="SOXX",
        as_of="2025-01-01",
    ),
    "smh": Universe(
        id="smh",
        label="Semiconductors (SMH)",
        description="Alternative semiconductor proxy using VanEck SMH ETF constituents",
        symbols=SMH_CONSTITUENTS,
        disclosure_text="Using SMH ETF constituents as an alternative semiconductor breadth proxy.",
        etf_proxy="SMH",
        as_of="2025-01-01",
    ),
    "qqq": Universe(
        id="qqq",
        label="Nasdaq 100 (QQQ)",
        description="Nasdaq 100 proxy using Invesco QQQ Trust top holdings",
        symbols=QQQ_CONSTITUENTS,
        disclosure_text="Using QQQ ETF top 50 holdings as a proxy for Nasdaq 100 breadth.",
        etf_proxy="QQQ",
        as_of="2025-01-01",
    ),
    "spy": Universe(
        id="spy",
        label="S&P 500 (SPY)",
        description="S&P 500 proxy using SPDR SPY ETF top holdings",
        symbols=SPY_CONSTITUENTS,
        disclosure_text=(
            "Using SPY ETF top 50 holdings as a proxy for S&P 500 breadth. "
            "Full S&P 500 breadth requires 500 symbols."
        ),
        etf_proxy="SPY",
        as_of="2025-01-01",
    ),
    "iwm": Universe(
        id="iwm",
        label="Russell 2000 (IWM)",
        description="Russell 2000 proxy using iShares IWM ETF top holdings",
        symbols=IWM_CONSTITUENTS,
        disclosure_text=(
            "Using IWM ETF top 40 holdings as a proxy for Russell 2000 breadth. "
            "This represents the largest small caps only."
        ),
        etf_proxy="IWM",
        as_of="2025-01-01",
    ),
    "dia": Universe(
        id="dia",
        label="Dow 30 (DIA)",
        description="Dow Jones Industrial Average using SPDR DIA ETF constituents",
        symbols=DIA_CONSTITUENTS,
        disclosure_text="Using DIA ETF constituents (all 30 Dow stocks).",
        etf_proxy="DIA",
        as_of="2025-01-01",
    ),
}

UNIVERSE_ALIASES: dict[str, str] = {
    "semiconductors": "soxx",
    "semis": "soxx",
    "sox": "soxx",
    "phlx": "soxx",
    "nasdaq": "qqq",
    "nasdaq100": "qqq",
    "nasdaq-100": "qqq",
    "sp500": "spy",
    "s&p500": "spy",
    "s&p": "spy",
    "russell": "iwm",
    "russell2000": "iwm",
    "smallcaps": "iwm",
    "dow": "dia",
    "dow30": "dia",
    "djia": "dia",
}


def resolve_universe(universe_id: str) -> Universe | None:
    """Look up a universe by id or alias, case-insensitively."""
    normalized = str(universe_id or "").strip().lower()
    resolved = UNIVERSE_ALIASES.get(normalized, normalized)
    return UNIVERSES.get(resolved)


def list_universes() -> list[Universe]:
    return list(UNIVERSES.values())


def get_universe_symbol_count(universe_id: str) -> int:
    universe = resolve_universe(universe_id)
    return len(universe.symbols) if universe is not None else 0
