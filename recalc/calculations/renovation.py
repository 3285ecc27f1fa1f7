"""
Renovation ROI Calculations

Value added by a renovation, taken as the larger of an appraisal uplift
and the rent increase capitalized at a cap rate.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from recalc.calculations.inputs import coerce_numeric_fields, pct, safe_divide


@dataclass
class RenovationItem:
    label: str = "Renovation"
    cost: float = 0.0

    def __post_init__(self):
        coerce_numeric_fields(self)


@dataclass
class RenovationInputs:
    """Renovation inputs. Percent fields are whole numbers, current_rent monthly."""

    current_value: float = 0.0
    renovation_costs: float = 0.0
    appraisal_uplift_percent: float = 0.0
    rent_increase_percent: float = 0.0
    current_rent: float = 0.0
    cap_rate: float = 6.0
    hold_period_years: float = 5.0
    selling_costs_percent: float = 6.0
    tax_rate: float = 0.0
    reno_events: List[RenovationItem] = field(default_factory=list)

    def __post_init__(self):
        coerce_numeric_fields(self)
        self.reno_events = [
            e if isinstance(e, RenovationItem) else RenovationItem(**e)
            for e in self.reno_events or []
        ]

    @property
    def total_cost(self) -> float:
        """Itemized costs when given, else the single renovation cost."""
        if self.reno_events:
            return sum(e.cost for e in self.reno_events)
        return self.renovation_costs


def calculate_renovation_roi(inputs: RenovationInputs) -> Dict:
    """
    Calculate renovation value uplift and returns.

    Args:
        inputs: RenovationInputs

    Returns:
        Dict with value increase, equity created, ROI and CAGR (percents),
        payback years, sale economics and the valuation method used
    """
    cost = inputs.total_cost

    from_appraisal = inputs.current_value * pct(inputs.appraisal_uplift_percent)
    monthly_rent_increase = inputs.current_rent * pct(inputs.rent_increase_percent)
    annual_rent_increase = monthly_rent_increase * 12
    from_income = (
        annual_rent_increase / pct(inputs.cap_rate) if inputs.cap_rate > 0 else 0.0
    )

    value_increase = max(from_appraisal, from_income)
    new_value = inputs.current_value + value_increase
    equity_created = value_increase - cost

    payback_years: Optional[float] = None
    if annual_rent_increase > 0:
        payback_years = cost / annual_rent_increase

    selling_costs = new_value * pct(inputs.selling_costs_percent)
    capital_gains_tax = max(0.0, new_value - inputs.current_value - cost) * pct(
        inputs.tax_rate
    )
    net_sale_proceeds = new_value - selling_costs - capital_gains_tax
    net_gain_after_sale = net_sale_proceeds - inputs.current_value - cost

    cagr = 0.0
    if inputs.hold_period_years > 0 and cost > 0:
        multiple = (net_gain_after_sale + cost) / cost
        cagr = multiple ** (1 / inputs.hold_period_years) - 1 if multiple > 0 else -1.0

    if inputs.reno_events:
        breakdown = [{"label": e.label, "amount": e.cost} for e in inputs.reno_events]
    else:
        breakdown = [{"label": "Renovation Cost", "amount": cost}]

    return {
        "current_value": inputs.current_value,
        "renovation_cost": cost,
        "value_increase": value_increase,
        "new_value": new_value,
        "equity_created": equity_created,
        "roi": safe_divide(equity_created, cost) * 100,
        "monthly_rent_increase": monthly_rent_increase,
        "annual_rent_gain": annual_rent_increase,
        "payback_years": payback_years,
        "selling_costs": selling_costs,
        "capital_gains_tax": capital_gains_tax,
        "net_sale_proceeds": net_sale_proceeds,
        "net_gain_after_sale": net_gain_after_sale,
        "annualized_roi": cagr * 100,
        "breakdown": breakdown,
        "valuation_methods": {
            "appraisal": from_appraisal,
            "income": from_income,
            "used": "appraisal" if from_appraisal >= from_income else "income",
        },
    }
