"""
Buy vs Rent Calculations

Compares wealth from buying (home equity) against renting and investing
the upfront cash a purchase would have needed.
"""

from dataclasses import dataclass
from typing import Dict, List

from recalc.calculations.amortization import amortize, calculate_payment
from recalc.calculations.inputs import coerce_numeric_fields, pct


@dataclass
class BuyRentInputs:
    """
    Buy vs rent inputs.

    Rates are whole percents. property_tax and maintenance_percent are
    annual percents of the purchase price; insurance and renter_insurance
    annual dollars; hoa_fee and monthly_rent monthly dollars.
    rent_adjustment and home_value_adjustment are scenario points added to
    rent growth and appreciation.
    """

    home_price: float = 0.0
    down_payment: float = 0.0
    loan_term: float = 30.0
    interest_rate: float = 0.0
    property_tax: float = 0.0
    insurance: float = 0.0
    maintenance_percent: float = 0.0
    hoa_fee: float = 0.0
    closing_costs: float = 0.0

    monthly_rent: float = 0.0
    rent_increase_percent: float = 0.0
    renter_insurance: float = 0.0

    annual_home_appreciation: float = 0.0
    annual_investment_return: float = 0.0
    time_horizon_years: int = 10
    inflation_rate: float = 0.0
    rent_adjustment: float = 0.0
    home_value_adjustment: float = 0.0

    currency: str = "USD"

    def __post_init__(self):
        coerce_numeric_fields(self)
        self.time_horizon_years = max(0, self.time_horizon_years)


def _year_end_balances(principal: float, rate: float, term_months: int, years: int) -> List[float]:
    """Loan balance at the end of each year 1..years."""
    balances = [max(0.0, principal)] * years
    for row in amortize(principal, rate, term_months):
        if (row.month_index + 1) % 12 == 0:
            year = (row.month_index + 1) // 12
            if year > years:
                break
            balances[year - 1] = row.closing_balance
    # Loan paid off inside the horizon
    for year in range(term_months // 12, years):
        balances[year] = 0.0
    return balances


def calculate_buy_rent(inputs: BuyRentInputs) -> Dict:
    """
    Compare buying against renting over a time horizon.

    Args:
        inputs: BuyRentInputs

    Returns:
        Dict with wealth on each path, costs, break-even year (None when
        buying never catches up) and a yearly series
    """
    years = inputs.time_horizon_years
    principal = max(0.0, inputs.home_price - inputs.down_payment)
    term_months = int(round(inputs.loan_term * 12))

    monthly_mortgage = calculate_payment(principal, inputs.interest_rate, term_months)
    annual_mortgage = monthly_mortgage * 12
    annual_buy_cost = (
        annual_mortgage
        + inputs.hoa_fee * 12
        + inputs.home_price * pct(inputs.maintenance_percent)
        + inputs.home_price * pct(inputs.property_tax)
        + inputs.insurance
    )

    appreciation = pct(inputs.annual_home_appreciation) + pct(inputs.home_value_adjustment)
    rent_growth = pct(inputs.rent_increase_percent) + pct(inputs.rent_adjustment)
    investment_return = pct(inputs.annual_investment_return)

    upfront_cash = inputs.down_payment + inputs.closing_costs
    balances = _year_end_balances(principal, inputs.interest_rate, term_months, years)

    yearly = []
    home_value = inputs.home_price
    rent = inputs.monthly_rent
    cumulative_rent = 0.0
    invested = upfront_cash
    break_even_year = None

    for year in range(1, years + 1):
        home_value *= 1 + appreciation
        balance = balances[year - 1]
        equity = home_value - balance

        cumulative_rent += rent * 12 + inputs.renter_insurance
        rent *= 1 + rent_growth
        invested *= 1 + investment_return

        if break_even_year is None and equity >= invested:
            break_even_year = year

        yearly.append(
            {
                "year": year,
                "home_value": home_value,
                "loan_balance": balance,
                "home_equity": equity,
                "cumulative_buy_cost": annual_buy_cost * year + inputs.closing_costs,
                "cumulative_rent": cumulative_rent,
                "rent_investment": invested,
                "net_worth_delta": equity - invested,
            }
        )

    final_balance = balances[-1] if balances else principal
    home_equity = home_value - final_balance
    buy_wealth = home_equity
    rent_wealth = invested

    return {
        "monthly_mortgage_payment": monthly_mortgage,
        "annual_buy_cost": annual_buy_cost,
        "future_home_value": home_value,
        "principal_repaid": principal - final_balance,
        "home_equity": home_equity,
        "buy_wealth": buy_wealth,
        "rent_wealth": rent_wealth,
        "net_worth_delta": buy_wealth - rent_wealth,
        "real_net_worth_delta": (buy_wealth - rent_wealth)
        / (1 + pct(inputs.inflation_rate)) ** years,
        "total_buy_costs": annual_buy_cost * years + inputs.closing_costs,
        "total_rent_costs": cumulative_rent,
        "investment_buy": upfront_cash,
        "investment_rent": invested,
        "break_even_year": break_even_year,
        "yearly": yearly,
        "currency": inputs.currency or "USD",
    }
