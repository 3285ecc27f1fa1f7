"""
ROI Calculations

Return on investment from appreciation plus cumulative net rental income,
for an all-cash view (calculate_roi) and a leveraged view
(calculate_investment_roi), with year-by-year projections.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional

from recalc.calculations.amortization import calculate_payment
from recalc.calculations.inputs import coerce_numeric_fields, pct, safe_divide


def calculate_escalation_factor(
    annual_rate: float, period: int, frequency: str = "annual"
) -> float:
    """
    Calculate growth factor for a given period.

    Args:
        annual_rate: Annual growth rate as decimal
        period: Period number; years for 'annual', months for 'monthly'
        frequency: 'annual' compounds once per year, 'monthly' per month
    """
    if frequency == "monthly":
        return (1 + annual_rate) ** (period / 12)
    return (1 + annual_rate) ** period


@dataclass
class ROIInputs:
    """All-cash ROI inputs: monthly rent and expenses, whole-percent appreciation."""

    price: float = 0.0
    rent: float = 0.0
    expenses: float = 0.0
    appreciation_rate: float = 0.0
    holding_period: int = 1

    def __post_init__(self):
        coerce_numeric_fields(self)


@dataclass
class InvestmentROIInputs:
    """
    Leveraged ROI inputs.

    rent and other_income are monthly; taxes, insurance, maintenance,
    property_management, utilities and hoa_fees are annual.
    """

    price: float = 0.0
    rent: float = 0.0
    other_income: float = 0.0
    taxes: float = 0.0
    insurance: float = 0.0
    maintenance: float = 0.0
    property_management: float = 0.0
    utilities: float = 0.0
    hoa_fees: float = 0.0
    vacancy_rate: float = 0.0
    appreciation_rate: float = 0.0
    rent_increase_rate: float = 0.0
    holding_period: int = 5
    down_payment: float = 0.0
    closing_costs: float = 0.0
    loan_amount: Optional[float] = None
    interest_rate: float = 0.0
    loan_term: int = 30

    def __post_init__(self):
        coerce_numeric_fields(self)
        if self.loan_amount is None:
            self.loan_amount = max(0.0, self.price - self.down_payment)


def project_roi_by_year(
    price: float,
    monthly_income: float,
    monthly_outflow: float,
    appreciation: float,
    income_growth: float,
    years: int,
    investment: float,
) -> List[Dict]:
    """
    Year-by-year value, cash flow and ROI.

    Income grows from year 2 onward, value compounds every year. ROI to date
    is (appreciation + cumulative cash flow) / investment in percent.

    Args:
        price: Starting property value
        monthly_income: Year-1 monthly income
        monthly_outflow: Monthly expenses plus debt service (held flat)
        appreciation: Annual appreciation as decimal
        income_growth: Annual income growth as decimal
        years: Number of years to project
        investment: Denominator for ROI
    """
    projections = []
    cumulative_cash_flow = 0.0

    for year in range(1, years + 1):
        income = monthly_income * calculate_escalation_factor(income_growth, year - 1)
        value = price * calculate_escalation_factor(appreciation, year)
        annual_cash_flow = (income - monthly_outflow) * 12
        cumulative_cash_flow += annual_cash_flow
        total_return = value - price + cumulative_cash_flow

        projections.append(
            {
                "year": year,
                "property_value": value,
                "monthly_income": income,
                "cash_flow": annual_cash_flow,
                "cumulative_cash_flow": cumulative_cash_flow,
                "total_return": total_return,
                "roi": safe_divide(total_return, investment) * 100,
            }
        )

    return projections


def calculate_roi(inputs: ROIInputs) -> Dict:
    """
    Calculate all-cash ROI over a holding period.

    ROI = (capital gain + net income over the hold) / price, in percent.

    Args:
        inputs: ROIInputs

    Returns:
        Dict with net income, future value, gain, total return, ROI and
        yearly projections
    """
    years = max(0, inputs.holding_period)
    appreciation = pct(inputs.appreciation_rate)

    net_monthly_income = inputs.rent - inputs.expenses
    net_annual_income = net_monthly_income * 12
    future_property_value = inputs.price * calculate_escalation_factor(appreciation, years)
    capital_gain = future_property_value - inputs.price
    total_income = net_annual_income * years
    total_return = capital_gain + total_income

    return {
        "net_annual_income": net_annual_income,
        "future_property_value": future_property_value,
        "capital_gain": capital_gain,
        "total_income": total_income,
        "total_return": total_return,
        "roi": safe_divide(total_return, inputs.price) * 100,
        "annualized_roi": safe_divide(safe_divide(total_return, inputs.price) * 100, years),
        "projections": project_roi_by_year(
            inputs.price,
            inputs.rent,
            inputs.expenses,
            appreciation,
            0.0,
            years,
            inputs.price,
        ),
    }


def calculate_investment_roi(inputs: InvestmentROIInputs) -> Dict:
    """
    Calculate leveraged ROI, cap rate and cash-on-cash return.

    Args:
        inputs: InvestmentROIInputs

    Returns:
        Dict with income statement, cash flow, return metrics (percents)
        and yearly projections
    """
    appreciation = pct(inputs.appreciation_rate)
    rent_growth = pct(inputs.rent_increase_rate)
    years = max(0, inputs.holding_period)

    monthly_mortgage = calculate_payment(
        inputs.loan_amount, inputs.interest_rate, inputs.loan_term * 12
    )

    gross_potential_income = inputs.rent + inputs.other_income
    vacancy_loss = gross_potential_income * pct(inputs.vacancy_rate)
    effective_gross_income = gross_potential_income - vacancy_loss

    monthly_operating_expenses = (
        inputs.taxes
        + inputs.insurance
        + inputs.maintenance
        + inputs.property_management
        + inputs.utilities
        + inputs.hoa_fees
    ) / 12

    monthly_noi = effective_gross_income - monthly_operating_expenses
    annual_noi = monthly_noi * 12

    monthly_cash_flow = monthly_noi - monthly_mortgage
    annual_cash_flow = monthly_cash_flow * 12

    future_value = inputs.price * calculate_escalation_factor(appreciation, years)
    capital_gain = future_value - inputs.price

    total_cash_invested = inputs.down_payment + inputs.closing_costs
    total_gain = capital_gain + annual_cash_flow * years

    return {
        "loan_amount": inputs.loan_amount,
        "monthly_mortgage_payment": monthly_mortgage,
        "gross_potential_income": gross_potential_income,
        "vacancy_loss": vacancy_loss,
        "effective_gross_income": effective_gross_income,
        "monthly_operating_expenses": monthly_operating_expenses,
        "monthly_noi": monthly_noi,
        "annual_noi": annual_noi,
        "monthly_cash_flow": monthly_cash_flow,
        "annual_cash_flow": annual_cash_flow,
        "future_value": future_value,
        "appreciation": capital_gain,
        "total_cash_invested": total_cash_invested,
        "total_gain": total_gain,
        "total_roi": safe_divide(total_gain, total_cash_invested) * 100,
        "cap_rate": safe_divide(annual_noi, inputs.price) * 100,
        "cash_on_cash": safe_divide(annual_cash_flow, total_cash_invested) * 100,
        "payback_years": (
            total_cash_invested / annual_cash_flow
            if annual_cash_flow > 0 and total_cash_invested > 0
            else None
        ),
        "projections": project_roi_by_year(
            inputs.price,
            effective_gross_income,
            monthly_operating_expenses + monthly_mortgage,
            appreciation,
            rent_growth,
            years,
            total_cash_invested,
        ),
    }
