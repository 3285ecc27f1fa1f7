"""
IRR and NPV Calculations

Implements IRR using the Newton-Raphson method on periodic cash flows.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Dict, List, Sequence

import numpy as np

from recalc.calculations.inputs import coerce_numeric_fields, to_float

logger = logging.getLogger(__name__)

MAX_ITERATIONS = 1000
TOLERANCE = 1e-6
DEFAULT_GUESS = 0.1


@dataclass(frozen=True)
class IRRResult:
    """Outcome of an IRR solve; rate is the last iterate when not converged."""

    rate: float
    converged: bool
    iterations: int


def calculate_npv(cash_flows: Sequence[float], discount_rate: float) -> float:
    """
    Calculate NPV (Net Present Value) of cash flows.

    Args:
        cash_flows: Array of cash flows (negative = outflow, positive = inflow)
        discount_rate: Periodic discount rate (e.g., 0.10 for 10%)

    Returns:
        NPV value
    """
    periods = np.arange(len(cash_flows))
    return float(np.sum(np.asarray(cash_flows, dtype=float) / (1 + discount_rate) ** periods))


def _npv_derivative(cash_flows: Sequence[float], rate: float) -> float:
    """Calculate derivative of NPV with respect to rate (for Newton-Raphson)."""
    periods = np.arange(len(cash_flows))
    flows = np.asarray(cash_flows, dtype=float)
    return float(-np.sum(periods * flows / (1 + rate) ** (periods + 1)))


def _has_sign_change(cash_flows: Sequence[float]) -> bool:
    return any(cf > 0 for cf in cash_flows) and any(cf < 0 for cf in cash_flows)


def solve_irr(
    cash_flows: Sequence[float],
    guess: float = DEFAULT_GUESS,
    tolerance: float = TOLERANCE,
    max_iterations: int = MAX_ITERATIONS,
) -> IRRResult:
    """
    Solve for IRR without raising.

    Newton-Raphson from the guess; stops when successive rates differ by less
    than the tolerance. When the iteration stalls (flat derivative, rate
    driven to -100% or beyond, non-finite values) or runs out of iterations,
    the last usable rate is returned with converged=False.

    Args:
        cash_flows: Periodic cash flows, first entry usually negative
        guess: Initial rate
        tolerance: Convergence threshold on the rate step
        max_iterations: Iteration cap

    Returns:
        IRRResult
    """
    if len(cash_flows) < 2 or not _has_sign_change(cash_flows):
        return IRRResult(rate=0.0, converged=False, iterations=0)

    rate = guess
    iteration = 0

    for iteration in range(1, max_iterations + 1):
        npv = calculate_npv(cash_flows, rate)
        dnpv = _npv_derivative(cash_flows, rate)

        if dnpv == 0 or not math.isfinite(npv) or not math.isfinite(dnpv):
            break

        new_rate = rate - npv / dnpv

        if not math.isfinite(new_rate) or new_rate <= -1:
            break

        if abs(new_rate - rate) < tolerance:
            return IRRResult(rate=new_rate, converged=True, iterations=iteration)

        rate = new_rate

    logger.warning("IRR did not converge; returning last iterate %.6f", rate)
    return IRRResult(rate=rate, converged=False, iterations=iteration)


def calculate_irr(cash_flows: List[float], guess: float = DEFAULT_GUESS) -> float:
    """
    Calculate IRR (Internal Rate of Return) using Newton-Raphson method.

    Args:
        cash_flows: Array of periodic cash flows
        guess: Initial guess for rate (default 0.1 = 10%)

    Returns:
        Periodic IRR as decimal (e.g., 0.15 for 15%)

    Raises:
        ValueError: If IRR cannot be calculated
    """
    if len(cash_flows) < 2:
        raise ValueError("At least 2 cash flows required")

    if not _has_sign_change(cash_flows):
        raise ValueError("Cash flows must contain both positive and negative values")

    result = solve_irr(cash_flows, guess)
    if not result.converged:
        raise ValueError("IRR calculation did not converge")
    return result.rate


def calculate_multiple(cash_flows: Sequence[float]) -> float:
    """
    Calculate equity multiple.

    Args:
        cash_flows: Array of cash flows (investments are negative)

    Returns:
        Multiple (e.g., 2.0 = 2.0x return), 0 when nothing was invested
    """
    total_inflows = sum(cf for cf in cash_flows if cf > 0)
    total_outflows = abs(sum(cf for cf in cash_flows if cf < 0))

    if total_outflows == 0:
        return 0.0

    return total_inflows / total_outflows


def calculate_profit(cash_flows: Sequence[float]) -> float:
    """Calculate profit (total inflows minus total outflows)."""
    return sum(cash_flows)


@dataclass
class IRRInputs:
    """Periodic cash flows and the Newton-Raphson starting rate."""

    cash_flows: List[float] = field(default_factory=list)
    guess: float = DEFAULT_GUESS

    def __post_init__(self):
        coerce_numeric_fields(self)
        self.cash_flows = [to_float(cf) for cf in self.cash_flows or []]


def analyze_cash_flows(inputs: IRRInputs) -> Dict:
    """IRR with its convergence status, plus multiple, profit and NPV at 10%."""
    result = solve_irr(inputs.cash_flows, inputs.guess)
    return {
        "irr": result.rate,
        "converged": result.converged,
        "iterations": result.iterations,
        "multiple": calculate_multiple(inputs.cash_flows),
        "profit": calculate_profit(inputs.cash_flows),
        "npv_at_10_percent": calculate_npv(inputs.cash_flows, 0.10),
    }
