# src/dexvotes/application/services/pair_selector.py
from typing import Optional

from dexvotes.domain.entities import MarketDataDocument, Pair


def select_best_pair(doc: Optional[MarketDataDocument]) -> Optional[Pair]:
    """
    Picks the representative pair: highest USD liquidity, missing liquidity as 0.
    Python's sort is stable (also with reverse=True), so among equal liquidity
    the pair listed first by the upstream wins.
    """
    if doc is None or not doc.pairs:
        return None
    return sorted(doc.pairs, key=lambda p: p.liquidity_usd, reverse=True)[0]
