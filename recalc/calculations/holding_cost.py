"""
Holding Cost Calculations

Monthly cost of carrying a property: debt service, ownership costs and
the opportunity cost of equity, net of vacancy-adjusted rent.
"""

from dataclasses import dataclass, replace
from typing import Dict, List, Optional

from recalc.calculations.amortization import calculate_payment
from recalc.calculations.inputs import coerce_numeric_fields, pct

VACANCY_STEPS = [0.0, 5.0, 10.0, 25.0, 50.0, 100.0]
RATE_STEPS = [-1.0, 0.0, 1.0, 2.0]


@dataclass
class HoldingCostInputs:
    """
    Holding cost inputs.

    Rates are whole percents. property_tax and insurance are annual dollars;
    property_tax_rate, when set, replaces property_tax with a percent of the
    purchase price. hoa_fee, maintenance, utilities, security_landscaping
    and rental_income are monthly dollars.
    """

    purchase_price: float = 0.0
    loan_amount: float = 0.0
    mortgage_rate: float = 0.0
    loan_term: float = 30.0
    monthly_pi: Optional[float] = None

    property_tax: float = 0.0
    property_tax_rate: float = 0.0
    insurance: float = 0.0
    hoa_fee: float = 0.0
    maintenance: float = 0.0
    utilities: float = 0.0
    security_landscaping: float = 0.0

    closing_costs: float = 0.0
    stamp_duty: float = 0.0
    opportunity_cost: float = 0.0

    rental_income: float = 0.0
    vacancy_rate: float = 0.0

    size_sq_ft: Optional[float] = None
    currency: str = "USD"

    def __post_init__(self):
        coerce_numeric_fields(self)


def _monthly_mortgage(inputs: HoldingCostInputs) -> float:
    if inputs.monthly_pi and inputs.monthly_pi > 0:
        return inputs.monthly_pi
    return calculate_payment(
        inputs.loan_amount, inputs.mortgage_rate, int(round(inputs.loan_term * 12))
    )


def _monthly_breakdown(inputs: HoldingCostInputs) -> Dict[str, float]:
    if inputs.property_tax_rate > 0:
        monthly_tax = inputs.purchase_price * pct(inputs.property_tax_rate) / 12
    else:
        monthly_tax = inputs.property_tax / 12

    equity = inputs.purchase_price - inputs.loan_amount
    return {
        "mortgage": _monthly_mortgage(inputs),
        "taxes": monthly_tax,
        "insurance": inputs.insurance / 12,
        "hoa": inputs.hoa_fee,
        "maintenance": inputs.maintenance,
        "utilities": inputs.utilities,
        "security": inputs.security_landscaping,
        "opportunity_cost": equity * pct(inputs.opportunity_cost) / 12,
    }


def _effective_rent(inputs: HoldingCostInputs) -> float:
    return inputs.rental_income * (1 - pct(inputs.vacancy_rate))


def monthly_holding_cost(inputs: HoldingCostInputs) -> float:
    """Monthly costs less vacancy-adjusted rent."""
    return sum(_monthly_breakdown(inputs).values()) - _effective_rent(inputs)


def _vacancy_sensitivity(inputs: HoldingCostInputs) -> List[Dict]:
    return [
        {
            "vacancy_rate": vacancy,
            "monthly_holding_cost": monthly_holding_cost(replace(inputs, vacancy_rate=vacancy)),
        }
        for vacancy in VACANCY_STEPS
    ]


def _interest_rate_sensitivity(inputs: HoldingCostInputs) -> List[Dict]:
    # A stated P&I is fixed, so rate changes only move an amortized payment
    base = replace(inputs, monthly_pi=None)
    rows = []
    for step in RATE_STEPS:
        rate = max(0.0, inputs.mortgage_rate + step)
        rows.append(
            {
                "mortgage_rate": rate,
                "monthly_holding_cost": monthly_holding_cost(replace(base, mortgage_rate=rate)),
            }
        )
    return rows


def calculate_holding_costs(inputs: HoldingCostInputs) -> Dict:
    """
    Calculate monthly and annual holding costs.

    Args:
        inputs: HoldingCostInputs

    Returns:
        Dict with monthly/annual cost, per-sq-ft and per-day cost,
        breakdown, one-time costs and sensitivities
    """
    breakdown = _monthly_breakdown(inputs)
    effective_rent = _effective_rent(inputs)
    monthly_cost = sum(breakdown.values()) - effective_rent
    annual_cost = monthly_cost * 12

    cost_per_sq_ft = None
    if inputs.size_sq_ft and inputs.size_sq_ft > 0:
        cost_per_sq_ft = annual_cost / inputs.size_sq_ft

    one_time_costs = inputs.closing_costs + inputs.stamp_duty

    return {
        "monthly_holding_cost": monthly_cost,
        "annual_holding_cost": annual_cost,
        "gross_monthly_cost": sum(breakdown.values()),
        "effective_rental_income": effective_rent,
        "cost_per_sq_ft": cost_per_sq_ft,
        "cost_per_day": annual_cost / 365,
        "breakdown": breakdown,
        "one_time_costs": one_time_costs,
        "first_year_cost": annual_cost + one_time_costs,
        "vacancy_sensitivity": _vacancy_sensitivity(inputs),
        "interest_rate_sensitivity": _interest_rate_sensitivity(inputs),
        "currency": inputs.currency or "USD",
    }
