"""
Rental Yield Calculations

Gross and net yield, cap rate and cash-on-cash return for a rental held
on either an amortizing (P+I) or interest-only loan.
"""

from dataclasses import dataclass
from typing import Dict, Optional

from recalc.calculations.amortization import annual_debt_service
from recalc.calculations.inputs import coerce_numeric_fields, pct, safe_divide

PRINCIPAL_AND_INTEREST = "P+I"
INTEREST_ONLY = "IO"


@dataclass
class RentalYieldInputs:
    """
    Rental yield inputs.

    monthly_rent is monthly; other income, CAM recoveries, expenses and
    acquisition costs are annual or one-off dollar amounts.
    turnover_rent_percent is a whole percent of annual rent collected on top
    of base rent. down_payment defaults to price less mortgage.
    """

    property_price: float = 0.0
    monthly_rent: float = 0.0
    other_income: float = 0.0
    vacancy_rate: float = 0.0
    cam_recoveries: float = 0.0
    turnover_rent_percent: float = 0.0

    # Financing
    mortgage_amount: float = 0.0
    down_payment: float = 0.0
    interest_rate: float = 0.0
    loan_term_years: float = 0.0
    loan_type: str = PRINCIPAL_AND_INTEREST

    # Acquisition costs
    stamp_duty: float = 0.0
    legal_fees: float = 0.0
    registration_fees: float = 0.0
    agent_fees: float = 0.0
    renovation_costs: float = 0.0

    # Annual operating expenses
    management_fees: float = 0.0
    maintenance: float = 0.0
    property_taxes: float = 0.0
    insurance: float = 0.0
    utilities: float = 0.0
    hoa_fees: float = 0.0
    security: float = 0.0
    cleaning: float = 0.0
    marketing: float = 0.0
    legal_accounting: float = 0.0
    vacancy_allowance: float = 0.0
    bad_debt_allowance: float = 0.0
    licensing_fees: float = 0.0

    def __post_init__(self):
        coerce_numeric_fields(self)
        self.vacancy_rate = min(max(self.vacancy_rate, 0.0), 100.0)

    @property
    def acquisition_costs(self) -> float:
        return (
            self.stamp_duty
            + self.legal_fees
            + self.registration_fees
            + self.agent_fees
            + self.renovation_costs
        )

    @property
    def annual_expenses(self) -> float:
        return (
            self.management_fees
            + self.maintenance
            + self.property_taxes
            + self.insurance
            + self.utilities
            + self.hoa_fees
            + self.security
            + self.cleaning
            + self.marketing
            + self.legal_accounting
            + self.vacancy_allowance
            + self.bad_debt_allowance
            + self.licensing_fees
        )


def calculate_annual_rent(monthly_rent: float, vacancy_rate: float = 0.0) -> float:
    """Annual rent after vacancy; vacancy_rate is a whole percent."""
    return monthly_rent * 12 * (1 - pct(vacancy_rate))


def calculate_payback_period(
    total_investment: float, annual_cash_flow: float
) -> Optional[float]:
    """Years to recoup the investment, None when cash flow never repays it."""
    if annual_cash_flow <= 0 or total_investment <= 0:
        return None
    return total_investment / annual_cash_flow


def calculate_rental_yield(inputs: RentalYieldInputs) -> Dict:
    """
    Calculate rental yield metrics.

    Args:
        inputs: RentalYieldInputs

    Returns:
        Dict with yields and returns (percents) and annual dollar figures

    Raises:
        ValueError: If property price or monthly rent is not positive
    """
    if inputs.property_price <= 0 or inputs.monthly_rent <= 0:
        raise ValueError("Property price and monthly rent must be positive values")

    annual_rent = calculate_annual_rent(inputs.monthly_rent, inputs.vacancy_rate)
    turnover_rent = annual_rent * pct(inputs.turnover_rent_percent)
    total_income = (
        annual_rent + inputs.other_income + inputs.cam_recoveries + turnover_rent
    )
    expenses = inputs.annual_expenses

    if (inputs.loan_type or PRINCIPAL_AND_INTEREST).upper() == PRINCIPAL_AND_INTEREST:
        debt_service = annual_debt_service(
            inputs.mortgage_amount,
            inputs.interest_rate,
            int(round(inputs.loan_term_years * 12)),
        )
    else:
        debt_service = inputs.mortgage_amount * pct(inputs.interest_rate)

    noi = total_income - expenses
    cash_flow = noi - debt_service

    down_payment = inputs.down_payment or inputs.property_price - inputs.mortgage_amount
    acquisition_costs = inputs.acquisition_costs
    total_cash_invested = down_payment + acquisition_costs

    return {
        "gross_yield": safe_divide(annual_rent, inputs.property_price) * 100,
        "net_yield": safe_divide(annual_rent - expenses, inputs.property_price) * 100,
        "cap_rate": safe_divide(noi, inputs.property_price) * 100,
        "cash_on_cash": safe_divide(cash_flow, total_cash_invested) * 100,
        "annual_rent": annual_rent,
        "turnover_rent": turnover_rent,
        "total_income": total_income,
        "expenses": expenses,
        "noi": noi,
        "annual_debt_service": debt_service,
        "cash_flow": cash_flow,
        "down_payment": down_payment,
        "acquisition_costs": acquisition_costs,
        "total_cash_invested": total_cash_invested,
        "payback_period": calculate_payback_period(total_cash_invested, cash_flow),
    }
