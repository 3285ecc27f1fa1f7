"""
Real Estate Calculation Engine

Pure calculator modules: each takes an input dataclass and returns a
result dict. Missing or non-numeric inputs count as zero.
"""

from recalc.calculations import (
    amortization,
    breakeven,
    buy_rent,
    cap_rate,
    equity_growth,
    flip,
    holding_cost,
    inputs,
    irr,
    monte_carlo,
    mortgage,
    portfolio,
    renovation,
    rental_yield,
    roi,
)

__all__ = [
    "amortization",
    "breakeven",
    "buy_rent",
    "cap_rate",
    "equity_growth",
    "flip",
    "holding_cost",
    "inputs",
    "irr",
    "monte_carlo",
    "mortgage",
    "portfolio",
    "renovation",
    "rental_yield",
    "roi",
]
