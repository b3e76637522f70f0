"""Curve pricing: integral evaluation, inverse search and marginal price."""

from curve_engine.pricing.integral import integral, marginal_price, sell_return
from curve_engine.pricing.inverse import SearchResult, search_buy, solve_buy

__all__ = [
    "SearchResult",
    "integral",
    "marginal_price",
    "search_buy",
    "sell_return",
    "solve_buy",
]
