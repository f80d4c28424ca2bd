# src/dexvotes/application/formatters.py
"""
Display formatting for token attributes. Pure functions, no state.
"""

import html
import math
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Optional
from xml.sax.saxutils import escape as _xml_escape

ELLIPSIS = "…"

CHAIN_REWARD_SYMBOLS = {
    "solana": "SOL", "ethereum": "ETH", "bsc": "BNB", "polygon": "MATIC",
    "arbitrum": "ETH", "avalanche": "AVAX", "base": "ETH", "optimism": "ETH",
    "fantom": "FTM", "cronos": "CRO", "sui": "SUI", "ton": "TON",
    "pulsechain": "PLS", "mantle": "MNT", "linea": "LINEA", "blast": "BLAST",
}


def _as_number(v: Any) -> Optional[float]:
    if v is None or isinstance(v, bool):
        return None
    try:
        n = float(v)
    except (TypeError, ValueError):
        return None
    if math.isnan(n) or math.isinf(n):
        return None
    return n


def _fixed(n: float, decimals: int) -> str:
    """Fixed-point with half-up rounding on the decimal value."""
    quantum = Decimal(1).scaleb(-decimals)
    return format(Decimal(str(n)).quantize(quantum, rounding=ROUND_HALF_UP), "f")


def format_magnitude(n: Any) -> str:
    """$-prefixed compact amount: $2.3B, $1.5M, $12.4K, $742."""
    value = _as_number(n)
    if not value:
        return "$0"
    if value >= 1e9:
        return f"${_fixed(value / 1e9, 1)}B"
    if value >= 1e6:
        return f"${_fixed(value / 1e6, 1)}M"
    if value >= 1e3:
        return f"${_fixed(value / 1e3, 1)}K"
    return f"${_fixed(value, 0)}"


def leading_zero_count(p: float) -> int:
    """Zero digits between the decimal point and the first significant digit of 0 < p < 1."""
    return max(0, -math.floor(math.log10(p)) - 1)


def format_price(p: Any) -> str:
    """
    USD price with precision that follows magnitude.

    >= 1000 -> grouped, 2 decimals; >= 1 -> 2 decimals; >= 0.01 -> 4 decimals.
    Below 0.01 the precision extends past the leading zeros to show four
    significant digits, capped at 10 decimal places.
    """
    value = _as_number(p)
    if not value:
        return "$0.00"
    if value >= 1000:
        return "$" + f"{Decimal(_fixed(value, 2)):,.2f}"
    if value >= 1:
        return f"${_fixed(value, 2)}"
    if value >= 0.01:
        return f"${_fixed(value, 4)}"
    if value < 0:
        return f"${_fixed(value, 2)}"
    decimals = min(leading_zero_count(value) + 4, 10)
    return f"${_fixed(value, decimals)}"


def format_count(n: int) -> str:
    return f"{int(n):,}"


def escape_html(s: Any) -> str:
    return html.escape(str(s), quote=True)


def escape_xml(s: Any) -> str:
    return _xml_escape(str(s), {'"': "&quot;", "'": "&apos;"})


def truncate(text: str, limit: int, keep: int) -> str:
    """Cuts `text` to `keep` characters plus an ellipsis when it is longer than `limit`."""
    if len(text) > limit:
        return text[:keep] + ELLIPSIS
    return text


def chain_reward_symbol(chain_id: str) -> str:
    chain = (chain_id or "unknown").lower()
    return CHAIN_REWARD_SYMBOLS.get(chain, chain.upper())
