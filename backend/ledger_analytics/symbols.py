"""Symbol normalization helpers."""
from __future__ import annotations

import re

_QUOTE_SUFFIX = re.compile(r"[:/-](USDT|USDC|BTC|ETH|BNB|EUR|USD|DAI)$")
_MARKET_SUFFIX = re.compile(r"-(SPOT|PERP|FUTURES)$")
_TRAILING_SEPARATORS = re.compile(r"[/:_-]+$")

# Wrapped, bridged and renamed tokens mapped to the asset they track.
SYMBOL_ALIASES: dict[str, str] = {
    "WETH": "ETH",
    "WBTC": "BTC",
    "WBNB": "BNB",
    "WAXE": "AXE",
    "WFTM": "FTM",
    "WAVAX": "AVAX",
    "WMATIC": "MATIC",
    "WPOL": "POL",
    "WCRO": "CRO",
    "WSOL": "SOL",
    "USDC.E": "USDC",
    "USDC.P": "USDC",
    "USDT.E": "USDT",
    "USDT.P": "USDT",
    "BTC.B": "BTC",
    "MANTLE": "MNT",
    "LUNA": "LUNC",
    "UBTC": "BTC",
    "UETH": "ETH",
    "USOL": "SOL",
}


def normalize_symbol(symbol: str | None) -> str:
    """Return the canonical asset symbol for an exchange pair or token name.

    ``"btc-usdt"``, ``"BTCUSDT"``, ``"BTC-PERP"``, ``"Spot::BTC"`` and ``"WBTC"``
    all normalize to ``"BTC"``.
    """

    if not symbol:
        return ""
    s = symbol.strip().upper()
    if "::" in s:
        return normalize_symbol(s.split("::")[-1])
    if ":" in s:
        return normalize_symbol(s.split(":")[0])

    s = _TRAILING_SEPARATORS.sub("", s)
    s = _QUOTE_SUFFIX.sub("", s)
    s = _MARKET_SUFFIX.sub("", s)

    # Concatenated market pairs such as BTCUSDT; a bare quote asset stays as is.
    for quote in ("USDT", "USDC"):
        if s.endswith(quote) and len(s) > len(quote):
            s = s[: -len(quote)]
    if s.endswith("USD") and len(s) > 3:
        s = s[:-3]
    s = _TRAILING_SEPARATORS.sub("", s)

    return SYMBOL_ALIASES.get(s, s)


def symbols_match(left: str | None, right: str | None) -> bool:
    """Return True when both symbols normalize to the same non-empty asset."""

    normalized = normalize_symbol(left)
    return bool(normalized) and normalized == normalize_symbol(right)


__all__ = ["SYMBOL_ALIASES", "normalize_symbol", "symbols_match"]
