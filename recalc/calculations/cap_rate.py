"""
Cap Rate Calculations

Going-in, stabilized and exit capitalization rates from an annual
income and expense statement.
"""

from dataclasses import dataclass
from typing import Dict

from recalc.calculations.inputs import coerce_numeric_fields, pct, safe_divide


@dataclass
class CapRateInputs:
    """Cap rate inputs. Rent is monthly, other income and expenses annual."""

    price: float = 0.0
    rent: float = 0.0
    vacancy_rate: float = 0.0
    parking_income: float = 0.0
    storage_income: float = 0.0
    laundry_income: float = 0.0
    advertising_income: float = 0.0
    service_fees_income: float = 0.0
    event_rentals_income: float = 0.0
    rent_growth_rate: float = 0.0
    taxes: float = 0.0
    insurance: float = 0.0
    maintenance: float = 0.0
    property_management: float = 0.0
    utilities: float = 0.0
    hoa_fees: float = 0.0
    other_expenses: float = 0.0
    expense_growth_rate: float = 0.0
    exit_value: float = 0.0
    exit_cap_rate: float = 0.0
    holding_period: float = 0.0

    def __post_init__(self):
        coerce_numeric_fields(self)

    @property
    def other_income(self) -> float:
        return (
            self.parking_income
            + self.storage_income
            + self.laundry_income
            + self.advertising_income
            + self.service_fees_income
            + self.event_rentals_income
        )

    @property
    def operating_expenses(self) -> float:
        return (
            self.taxes
            + self.insurance
            + self.maintenance
            + self.property_management
            + self.utilities
            + self.hoa_fees
            + self.other_expenses
        )


def calculate_stabilized_noi(
    annual_rent: float,
    other_income: float,
    operating_expenses: float,
    rent_growth: float,
    expense_growth: float,
    years: float,
) -> float:
    """
    NOI after compounding rent and expenses over a holding period.

    Growth rates are decimals. Other income is held flat.
    """
    return (
        annual_rent * (1 + rent_growth) ** years
        + other_income
        - operating_expenses * (1 + expense_growth) ** years
    )


def calculate_cap_rate(inputs: CapRateInputs) -> Dict:
    """
    Calculate NOI and cap rate variants.

    All rates in the result are percents; a zero denominator yields 0.

    Args:
        inputs: CapRateInputs

    Returns:
        Dict with income statement and cap rate figures
    """
    annual_rent = inputs.rent * 12
    other_income = inputs.other_income

    gross_scheduled_income = annual_rent + other_income
    vacancy_loss = gross_scheduled_income * pct(inputs.vacancy_rate)
    effective_gross_income = gross_scheduled_income - vacancy_loss

    operating_expenses = inputs.operating_expenses
    noi = effective_gross_income - operating_expenses

    going_in_cap_rate = safe_divide(noi, inputs.price) * 100

    years = inputs.holding_period or 1
    stabilized_noi = calculate_stabilized_noi(
        annual_rent,
        other_income,
        operating_expenses,
        pct(inputs.rent_growth_rate),
        pct(inputs.expense_growth_rate),
        years,
    )
    stabilized_cap_rate = safe_divide(stabilized_noi, inputs.price) * 100

    # Exit valued on stabilized NOI
    if inputs.exit_value:
        exit_cap_rate = safe_divide(stabilized_noi, inputs.exit_value) * 100
    else:
        exit_cap_rate = inputs.exit_cap_rate

    implied_exit_value = (
        stabilized_noi / pct(exit_cap_rate) if exit_cap_rate > 0 else 0.0
    )

    return {
        "noi": noi,
        "gross_scheduled_income": gross_scheduled_income,
        "vacancy_loss": vacancy_loss,
        "effective_gross_income": effective_gross_income,
        "total_operating_expenses": operating_expenses,
        "going_in_cap_rate": going_in_cap_rate,
        "effective_cap_rate": going_in_cap_rate,
        "stabilized_noi": stabilized_noi,
        "stabilized_cap_rate": stabilized_cap_rate,
        "exit_cap_rate": exit_cap_rate,
        "implied_exit_value": implied_exit_value,
        "break_even_occupancy": safe_divide(operating_expenses, gross_scheduled_income) * 100,
        "expense_ratio": safe_divide(operating_expenses, effective_gross_income) * 100,
    }
