"""
Flip Profit Calculations

Short-hold acquisition, rehab and resale economics:

1. Project cost = purchase + rehab (with contingency) + closing + holding
   + financing fees + purchase taxes
2. Loan payoff at sale, interest-only or amortized over the hold
3. Net profit = ARV - project cost - sale costs - loan payoff
4. ROI on cash invested, annualized over the hold
"""

from dataclasses import dataclass, replace
from typing import Dict, List, Optional

from recalc.calculations.amortization import amortize, calculate_payment
from recalc.calculations.inputs import coerce_numeric_fields, pct, safe_divide

PROFIT_CURVE_STEPS = 30


@dataclass
class FlipInputs:
    """Flip inputs. Percent fields are whole numbers; holding costs are monthly
    except the annual property tax."""

    # Acquisition
    purchase_price: float = 0.0
    closing_costs: float = 0.0
    cash_percent: float = 0.0
    lender_points_pct: float = 0.0
    origination_fee: float = 0.0
    underwriting_fee: float = 0.0
    purchase_taxes: float = 0.0

    # Financing
    loan_amount: Optional[float] = None
    interest_rate: float = 0.0
    loan_term_years: float = 30.0
    interest_only: bool = True

    # Rehab
    rehab_budget: float = 0.0
    contingency_pct: float = 0.0
    use_contingency: bool = False
    timeline_months: int = 6

    # Holding
    property_tax_annual: float = 0.0
    insurance_monthly: float = 0.0
    utilities_monthly: float = 0.0
    hoa_monthly: float = 0.0
    maintenance_monthly: float = 0.0

    # Sale
    arv: float = 0.0
    agent_commission_pct: float = 5.0
    staging_marketing: float = 0.0
    seller_closing_costs: float = 0.0
    sale_transfer_taxes: float = 0.0

    def __post_init__(self):
        coerce_numeric_fields(self)
        self.timeline_months = max(0, self.timeline_months)

    @property
    def resolved_loan_amount(self) -> float:
        """Explicit loan amount, else price x (1 - cash%/100)."""
        if self.loan_amount:
            return max(0.0, self.loan_amount)
        cash_fraction = min(max(pct(self.cash_percent), 0.0), 1.0)
        return max(0.0, self.purchase_price * (1 - cash_fraction))

    @property
    def fixed_sale_costs(self) -> float:
        return self.staging_marketing + self.seller_closing_costs + self.sale_transfer_taxes


def calculate_loan_payoff(
    loan_amount: float,
    interest_rate: float,
    hold_months: int,
    interest_only: bool = True,
    loan_term_years: float = 30.0,
) -> Dict:
    """
    Balance owed at sale and the financing cost of the hold.

    Interest-only loans accrue simple interest added to principal. Amortized
    loans pay the level payment each month; the payoff is the balance left
    after hold_months payments.

    Returns:
        Dict with payoff_balance, total_interest and payments_made
    """
    if interest_only:
        total_interest = loan_amount * pct(interest_rate) * (hold_months / 12)
        return {
            "payoff_balance": loan_amount + total_interest,
            "total_interest": total_interest,
            "payments_made": 0.0,
        }

    term_months = int(round(loan_term_years * 12))
    payment = calculate_payment(loan_amount, interest_rate, term_months)
    balance = loan_amount
    total_interest = 0.0
    for row in amortize(loan_amount, interest_rate, term_months):
        if row.month_index >= hold_months:
            break
        total_interest += row.interest_paid
        balance = row.closing_balance

    return {
        "payoff_balance": balance,
        "total_interest": total_interest,
        "payments_made": payment * min(hold_months, term_months),
    }


def calculate_break_even_sale_price(
    total_project_cost: float,
    loan_payoff: float,
    commission_pct: float,
    fixed_sale_costs: float = 0.0,
) -> float:
    """Sale price at which net profit is zero, commission charged on that price."""
    total_costs = total_project_cost + loan_payoff + fixed_sale_costs
    return total_costs / ((1 - pct(commission_pct)) or 1)


def _net_profit(inputs: FlipInputs) -> float:
    return compute_flip_metrics(inputs, include_analysis=False)["net_profit"]


def _sensitivity(inputs: FlipInputs, base_profit: float) -> List[Dict]:
    months = inputs.timeline_months
    scenarios = [
        (
            "ARV",
            replace(inputs, arv=inputs.arv * 1.1),
            replace(inputs, arv=inputs.arv * 0.9),
        ),
        (
            "Rehab Cost",
            replace(inputs, rehab_budget=inputs.rehab_budget * 1.1),
            replace(inputs, rehab_budget=inputs.rehab_budget * 0.9),
        ),
        (
            "Hold Time (mo)",
            replace(inputs, timeline_months=int(round(months * 1.2))),
            replace(inputs, timeline_months=max(1, int(round(months * 0.8)))),
        ),
        (
            "Interest Rate",
            replace(inputs, interest_rate=inputs.interest_rate + 2),
            replace(inputs, interest_rate=max(0.0, inputs.interest_rate - 2)),
        ),
    ]

    return [
        {
            "label": label,
            "delta_up": _net_profit(up) - base_profit,
            "delta_down": base_profit - _net_profit(down),
        }
        for label, up, down in scenarios
    ]


def compute_flip_metrics(inputs: FlipInputs, include_analysis: bool = True) -> Dict:
    """
    Calculate flip project metrics.

    Args:
        inputs: FlipInputs
        include_analysis: Also build the profit curve and sensitivity table

    Returns:
        Dict with costs, payoff, profit, ROI figures and cost breakdown
    """
    months = inputs.timeline_months
    loan_amount = inputs.resolved_loan_amount

    points_fee = loan_amount * pct(inputs.lender_points_pct)
    financing_fees = points_fee + inputs.origination_fee + inputs.underwriting_fee

    rehab_spent = inputs.rehab_budget * (1 + pct(inputs.contingency_pct))

    monthly_holding = (
        inputs.property_tax_annual / 12
        + inputs.insurance_monthly
        + inputs.utilities_monthly
        + inputs.hoa_monthly
        + inputs.maintenance_monthly
    )

    payoff = calculate_loan_payoff(
        loan_amount,
        inputs.interest_rate,
        months,
        inputs.interest_only,
        inputs.loan_term_years or 30,
    )
    # Amortized payments during the hold are carried as a holding cost
    holding_costs = monthly_holding * months + payoff["payments_made"]

    total_project_cost = (
        inputs.purchase_price
        + rehab_spent
        + inputs.closing_costs
        + holding_costs
        + financing_fees
        + inputs.purchase_taxes
    )

    down_payment = max(0.0, inputs.purchase_price - loan_amount)
    cash_rehab = rehab_spent if inputs.use_contingency else inputs.rehab_budget
    total_cash_invested = (
        down_payment
        + inputs.closing_costs
        + financing_fees
        + cash_rehab
    )

    commission = inputs.arv * pct(inputs.agent_commission_pct)
    fixed_sale_costs = inputs.fixed_sale_costs
    sale_costs = commission + fixed_sale_costs

    payoff_balance = payoff["payoff_balance"]
    net_profit = inputs.arv - total_project_cost - sale_costs - payoff_balance

    roi = safe_divide(net_profit, total_cash_invested) * 100
    annualized_roi = safe_divide(roi * 12, months)

    result = {
        "loan_amount": loan_amount,
        "down_payment": down_payment,
        "total_interest": payoff["total_interest"],
        "holding_costs": holding_costs,
        "financing_fees": financing_fees,
        "total_project_cost": total_project_cost,
        "total_cash_invested": total_cash_invested,
        "payoff_balance": payoff_balance,
        "sale_costs": sale_costs,
        "net_profit": net_profit,
        "roi": roi,
        "annualized_roi": annualized_roi,
        "break_even_sale_price": calculate_break_even_sale_price(
            total_project_cost,
            payoff_balance,
            inputs.agent_commission_pct,
            fixed_sale_costs,
        ),
        "cost_breakdown": {
            "purchase_cost": inputs.purchase_price,
            "rehab_cost": rehab_spent,
            "holding_costs": holding_costs,
            "financing_fees": financing_fees,
            "upfront_costs": inputs.closing_costs + financing_fees,
        },
    }

    if not include_analysis:
        return result

    # Profit across sale prices from 60% to 140% of ARV
    low = max(0.0, inputs.arv * 0.6)
    high = max(inputs.arv, inputs.arv * 1.4)
    commission_rate = pct(inputs.agent_commission_pct)
    curve = []
    for step in range(PROFIT_CURVE_STEPS + 1):
        sale_price = low + (high - low) * step / PROFIT_CURVE_STEPS
        costs = sale_price * commission_rate + fixed_sale_costs
        curve.append(
            {
                "sale_price": sale_price,
                "profit": sale_price - total_project_cost - costs - payoff_balance,
            }
        )

    result["profit_curve"] = curve
    result["sensitivity"] = _sensitivity(inputs, net_profit)
    return result
