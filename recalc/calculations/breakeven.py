"""
Break-Even Calculations

Monthly operating model for long-term (LTR) and short-term (STR) rentals,
and the revenue required to break even under three target modes:

1. CF=0   - revenue covers operating expenses and debt service
2. DSCR   - revenue covers (expenses + debt service) times a target DSCR
3. Margin - revenue covers expenses, debt service and a monthly margin
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

from recalc.calculations.amortization import calculate_dscr, calculate_payment
from recalc.calculations.inputs import coerce_numeric_fields, pct, safe_divide, to_float

DAYS_PER_MONTH = 365 / 12


class BreakEvenMode(str, Enum):
    CASH_FLOW_ZERO = "CF=0"
    DSCR = "DSCR"
    MARGIN = "Margin"

    @classmethod
    def parse(cls, value: Optional[str]) -> "BreakEvenMode":
        """Unrecognized or empty modes fall back to CF=0."""
        for mode in cls:
            if value == mode.value:
                return mode
        return cls.CASH_FLOW_ZERO


# Scenario presets: rent %, occupancy %, rate points, vacancy points
PRESET_SCENARIOS = {
    "Base": {
        "rent_adjustment": 0.0,
        "occupancy_adjustment": 0.0,
        "rate_adjustment": 0.0,
        "vacancy_adjustment": 0.0,
    },
    "Downside": {
        "rent_adjustment": -10.0,
        "occupancy_adjustment": -10.0,
        "rate_adjustment": 1.0,
        "vacancy_adjustment": 5.0,
    },
    "Upside": {
        "rent_adjustment": 10.0,
        "occupancy_adjustment": 5.0,
        "rate_adjustment": -0.5,
        "vacancy_adjustment": -2.0,
    },
}


@dataclass
class BreakEvenInputs:
    """
    Break-even calculator inputs.

    Dollar amounts are monthly unless named otherwise. Percent fields are
    whole numbers. property_type "STR" selects the short-term rental model,
    anything else the long-term rental model.
    """

    property_type: str = "SFH"

    # Acquisition & financing
    purchase_price: float = 0.0
    down_payment: float = 0.0
    closing_costs: float = 0.0
    rehab_cost: float = 0.0
    furnishings_cost: float = 0.0
    lender_points: float = 0.0
    loan_amount: Optional[float] = None
    interest_rate: float = 0.0
    amortization_years: float = 0.0
    loan_term: float = 0.0
    second_lien_amount: float = 0.0
    second_lien_rate: float = 0.0
    mortgage_insurance: float = 0.0

    # Fixed monthly expenses
    property_tax: float = 0.0
    insurance: float = 0.0
    hoa_fee: float = 0.0
    utilities_water: float = 0.0
    utilities_electric: float = 0.0
    utilities_internet: float = 0.0
    utilities_gas: float = 0.0
    admin_costs: float = 0.0

    # Variable expenses, percent of revenue
    management_fee_percent: float = 0.0
    maintenance_reserve_percent: float = 0.0
    capex_reserve_percent: float = 0.0
    leasing_fee_percent: float = 0.0
    vacancy_percent: float = 0.0
    bad_debt_percent: float = 0.0

    # Long-term rental income
    monthly_rent: float = 0.0
    other_income: float = 0.0

    # Short-term rental income & costs
    nightly_rate: float = 0.0
    occupancy_rate: float = 0.0
    occupied_nights: Optional[float] = None
    seasonal_uplift: List[float] = field(default_factory=list)
    upsells: float = 0.0
    cleaning_fee: float = 0.0
    turnover_cost: float = 0.0
    linen_cost: float = 0.0
    channel_fee_percent: float = 0.0

    # Targets
    break_even_mode: Optional[str] = None
    target_dscr: float = 0.0
    target_monthly_margin: float = 0.0

    # Scenario controls
    preset_scenario: Optional[str] = None
    rent_adjustment: float = 0.0
    occupancy_adjustment: float = 0.0
    rate_adjustment: float = 0.0
    vacancy_adjustment: float = 0.0

    def __post_init__(self):
        coerce_numeric_fields(self)
        preset = PRESET_SCENARIOS.get(self.preset_scenario or "")
        if preset:
            for name, value in preset.items():
                setattr(self, name, value)

    @property
    def is_short_term(self) -> bool:
        return (self.property_type or "").strip().upper() == "STR"


def _seasonal_factors(uplift: List[float]) -> List[float]:
    """Twelve calendar-month revenue factors; missing months count as 0% uplift."""
    values = [to_float(v) for v in (uplift or [])][:12]
    values += [0.0] * (12 - len(values))
    return [1 + v / 100 for v in values]


def _variable_percent(inputs: BreakEvenInputs) -> float:
    """Share of revenue consumed by percent-based expenses."""
    vacancy = max(0.0, inputs.vacancy_percent + inputs.vacancy_adjustment)
    share = (
        pct(inputs.management_fee_percent)
        + pct(inputs.maintenance_reserve_percent)
        + pct(inputs.capex_reserve_percent)
        + pct(inputs.leasing_fee_percent)
        + pct(vacancy)
        + pct(inputs.bad_debt_percent)
    )
    if inputs.is_short_term:
        share += pct(inputs.channel_fee_percent)
    return share


def _debt_service(inputs: BreakEvenInputs) -> Dict:
    loan_amount = (
        inputs.loan_amount
        if inputs.loan_amount is not None
        else max(0.0, inputs.purchase_price - inputs.down_payment)
    )
    years = inputs.amortization_years or inputs.loan_term or 30
    term_months = int(round(years * 12))
    rate = max(0.0, inputs.interest_rate + inputs.rate_adjustment)

    first_lien = calculate_payment(loan_amount, rate, term_months)
    second_lien = calculate_payment(
        inputs.second_lien_amount, inputs.second_lien_rate, term_months
    )
    return {
        "loan_amount": loan_amount,
        "first_lien_payment": first_lien,
        "second_lien_payment": second_lien,
        "monthly_debt_service": first_lien + second_lien,
    }


def calculate_break_even(inputs: BreakEvenInputs) -> Dict:
    """
    Calculate monthly NOI, cash flow and the break-even revenue.

    Args:
        inputs: BreakEvenInputs

    Returns:
        Dict with revenue, expenses, NOI, cash flow, ratios and break-even
        figures (monthly unless the key says annual)
    """
    mode = BreakEvenMode.parse(inputs.break_even_mode)
    debt = _debt_service(inputs)
    monthly_debt_service = debt["monthly_debt_service"]

    # === REVENUE ===
    seasonal_factors = _seasonal_factors(inputs.seasonal_uplift)
    if inputs.is_short_term:
        occupied_nights = (
            inputs.occupied_nights
            if inputs.occupied_nights is not None
            else pct(inputs.occupancy_rate) * DAYS_PER_MONTH
        )
        occupied_nights *= 1 + pct(inputs.occupancy_adjustment)
        nightly_rate = inputs.nightly_rate * (1 + pct(inputs.rent_adjustment))
        seasonal_factor = sum(seasonal_factors) / 12
        revenue_by_month = [
            nightly_rate * occupied_nights * factor + inputs.upsells
            for factor in seasonal_factors
        ]
        gross_revenue = nightly_rate * occupied_nights * seasonal_factor + inputs.upsells
    else:
        occupied_nights = 0.0
        nightly_rate = 0.0
        seasonal_factor = 1.0
        rent = inputs.monthly_rent * (1 + pct(inputs.rent_adjustment))
        gross_revenue = rent + inputs.other_income
        revenue_by_month = [gross_revenue] * 12

    # === EXPENSES ===
    fixed_expenses = (
        inputs.property_tax
        + inputs.insurance
        + inputs.hoa_fee
        + inputs.utilities_water
        + inputs.utilities_electric
        + inputs.utilities_internet
        + inputs.utilities_gas
        + inputs.admin_costs
        + inputs.mortgage_insurance
    )
    str_fixed_costs = (
        inputs.cleaning_fee + inputs.turnover_cost + inputs.linen_cost
        if inputs.is_short_term
        else 0.0
    )
    fixed_expenses += str_fixed_costs

    variable_share = _variable_percent(inputs)
    variable_expenses = gross_revenue * variable_share
    operating_expenses = fixed_expenses + variable_expenses

    # === NOI / CASH FLOW ===
    noi = gross_revenue - operating_expenses
    cash_flow = noi - monthly_debt_service
    dscr = calculate_dscr(noi, monthly_debt_service)

    lender_points_fee = pct(inputs.lender_points) * debt["loan_amount"]
    total_acquisition_cost = (
        inputs.purchase_price
        + inputs.closing_costs
        + inputs.rehab_cost
        + inputs.furnishings_cost
        + lender_points_fee
    )
    cash_invested = (
        inputs.down_payment
        + inputs.closing_costs
        + inputs.rehab_cost
        + inputs.furnishings_cost
        + lender_points_fee
    )

    # === BREAK-EVEN ===
    required_outflow = operating_expenses + monthly_debt_service
    if mode is BreakEvenMode.DSCR:
        break_even_revenue = required_outflow * inputs.target_dscr
    elif mode is BreakEvenMode.MARGIN:
        break_even_revenue = required_outflow + inputs.target_monthly_margin
    else:
        break_even_revenue = required_outflow

    if inputs.is_short_term:
        nightly_capacity = occupied_nights * seasonal_factor
        break_even_rent = None
        break_even_nightly_rate = safe_divide(
            break_even_revenue - inputs.upsells, nightly_capacity
        )
        full_occupancy_revenue = nightly_rate * DAYS_PER_MONTH * seasonal_factor
        break_even_occupancy = (
            safe_divide(break_even_revenue - inputs.upsells, full_occupancy_revenue) * 100
        )
    else:
        break_even_rent = break_even_revenue - inputs.other_income
        break_even_nightly_rate = None
        break_even_occupancy = safe_divide(break_even_revenue, gross_revenue) * 100

    # Cash flow when revenue moves; variable costs move with it
    def cash_flow_at(revenue_factor: float) -> float:
        revenue = gross_revenue * revenue_factor
        return revenue * (1 - variable_share) - fixed_expenses - monthly_debt_service

    return {
        "mode": mode.value,
        "property_type": inputs.property_type,
        "loan_amount": debt["loan_amount"],
        "monthly_debt_service": monthly_debt_service,
        "first_lien_payment": debt["first_lien_payment"],
        "second_lien_payment": debt["second_lien_payment"],
        "total_acquisition_cost": total_acquisition_cost,
        "cash_invested": cash_invested,
        "gross_revenue": gross_revenue,
        "annual_gross_revenue": gross_revenue * 12,
        "revenue_by_month": revenue_by_month,
        "occupied_nights": occupied_nights,
        "fixed_expenses": fixed_expenses,
        "variable_expenses": variable_expenses,
        "operating_expenses": operating_expenses,
        "noi": noi,
        "annual_noi": noi * 12,
        "cash_flow": cash_flow,
        "annual_cash_flow": cash_flow * 12,
        "cap_rate": safe_divide(noi * 12, inputs.purchase_price) * 100,
        "dscr": dscr,
        "coc_roi": safe_divide(cash_flow * 12, cash_invested) * 100,
        "operating_expense_ratio": safe_divide(operating_expenses, gross_revenue) * 100,
        "payback_period_months": (
            total_acquisition_cost / cash_flow if cash_flow > 0 else None
        ),
        "break_even_revenue": break_even_revenue,
        "break_even_rent": break_even_rent,
        "break_even_nightly_rate": break_even_nightly_rate,
        "break_even_occupancy": break_even_occupancy,
        "cost_stack": {
            "fixed": fixed_expenses * 12,
            "variable": variable_expenses * 12,
            "debt": monthly_debt_service * 12,
        },
        "sensitivity": {
            "rent_minus_10": cash_flow_at(0.90),
            "rent_plus_10": cash_flow_at(1.10),
            "occupancy_minus_5": cash_flow_at(0.95),
            "occupancy_plus_5": cash_flow_at(1.05),
        },
    }
