"""
Mortgage Calculations

Monthly and lifetime cost of a fixed-rate mortgage including taxes,
insurance, HOA dues, PMI and extra principal payments.
"""

from dataclasses import dataclass
from typing import Dict, List

from recalc.calculations.amortization import (
    ExtraPayment,
    amortize,
    calculate_payment,
)
from recalc.calculations.inputs import coerce_numeric_fields


@dataclass
class MortgageInputs:
    """Mortgage calculator inputs. Percentages are whole numbers."""

    home_price: float = 0.0
    down_payment: float = 0.0
    loan_term_years: float = 30.0
    interest_rate: float = 0.0
    annual_property_tax: float = 0.0
    annual_insurance: float = 0.0
    monthly_hoa: float = 0.0
    pmi_percent: float = 0.0
    extra_monthly_payment: float = 0.0
    lump_sum_payment: float = 0.0

    def __post_init__(self):
        coerce_numeric_fields(self)


def _schedule_rows(
    loan_amount: float,
    interest_rate: float,
    n_payments: int,
    extra_monthly: float,
    lump_sum: float = 0.0,
) -> List[Dict]:
    """Amortization rows with running totals, months numbered from 1."""
    extras = [ExtraPayment(0, lump_sum)] if lump_sum > 0 else []
    cumulative_principal = 0.0
    cumulative_interest = 0.0
    rows = []

    for row in amortize(loan_amount, interest_rate, n_payments, extras, extra_monthly):
        principal_payment = row.principal_paid + row.extra_paid
        cumulative_principal += principal_payment
        cumulative_interest += row.interest_paid
        rows.append(
            {
                "month": row.month_index + 1,
                "principal_payment": round(principal_payment, 2),
                "interest_payment": round(row.interest_paid, 2),
                "cumulative_principal": round(cumulative_principal, 2),
                "cumulative_interest": round(cumulative_interest, 2),
                "remaining_balance": round(row.closing_balance, 2),
            }
        )
    return rows


def _payoff_month(rows: List[Dict]) -> int:
    """Number of months until the balance first reaches zero."""
    for row in rows:
        if row["remaining_balance"] <= 0:
            return row["month"]
    return len(rows)


def calculate_mortgage(inputs: MortgageInputs) -> Dict:
    """
    Calculate mortgage payment breakdown and amortization.

    PMI is charged on the original loan amount for the whole term whenever
    pmi_percent is positive; this calculator does not cancel it at any LTV.

    Args:
        inputs: MortgageInputs

    Returns:
        Dict with monthly components, term totals, amortization schedule
        and extra-payment savings

    Raises:
        ValueError: If the loan term is not positive
    """
    n_payments = int(round(inputs.loan_term_years * 12))
    if n_payments <= 0:
        raise ValueError("Loan term must be greater than zero")

    loan_amount = inputs.home_price - inputs.down_payment
    monthly_pi = calculate_payment(loan_amount, inputs.interest_rate, n_payments)

    monthly_taxes = inputs.annual_property_tax / 12
    monthly_insurance = inputs.annual_insurance / 12
    monthly_hoa = inputs.monthly_hoa
    monthly_pmi = (
        loan_amount * (inputs.pmi_percent / 100) / 12 if inputs.pmi_percent > 0 else 0.0
    )

    total_monthly_payment = (
        monthly_pi
        + monthly_taxes
        + monthly_insurance
        + monthly_hoa
        + monthly_pmi
        + inputs.extra_monthly_payment
    )

    # Totals over the scheduled term
    total_principal_paid = max(0.0, loan_amount)
    total_interest_paid = monthly_pi * n_payments - total_principal_paid
    total_taxes = monthly_taxes * n_payments
    total_insurance = monthly_insurance * n_payments
    total_hoa = monthly_hoa * n_payments
    total_pmi = monthly_pmi * n_payments
    total_cost_of_loan = (
        total_principal_paid
        + total_interest_paid
        + total_taxes
        + total_insurance
        + total_hoa
        + total_pmi
    )

    schedule = _schedule_rows(
        loan_amount, inputs.interest_rate, n_payments, inputs.extra_monthly_payment
    )

    # Interest actually saved once extra and lump-sum principal are applied
    accelerated = _schedule_rows(
        loan_amount,
        inputs.interest_rate,
        n_payments,
        inputs.extra_monthly_payment,
        inputs.lump_sum_payment,
    )
    accelerated_interest = accelerated[-1]["cumulative_interest"] if accelerated else 0.0
    interest_saved = max(0.0, total_interest_paid - accelerated_interest)

    payoff_month = _payoff_month(accelerated)

    breakdown = [
        {"label": "Principal", "amount": monthly_pi},
        {
            "label": "Interest",
            "amount": (
                monthly_pi * (total_interest_paid / total_principal_paid)
                if total_principal_paid > 0
                else 0.0
            ),
        },
        {"label": "Taxes", "amount": monthly_taxes},
        {"label": "Insurance", "amount": monthly_insurance},
        {"label": "HOA", "amount": monthly_hoa},
        {"label": "PMI", "amount": monthly_pmi},
    ]

    return {
        "loan_amount": loan_amount,
        "monthly_principal_and_interest": monthly_pi,
        "monthly_taxes": monthly_taxes,
        "monthly_insurance": monthly_insurance,
        "monthly_hoa": monthly_hoa,
        "monthly_pmi": monthly_pmi,
        "total_monthly_payment": total_monthly_payment,
        "total_principal_paid": total_principal_paid,
        "total_interest_paid": total_interest_paid,
        "total_taxes": total_taxes,
        "total_insurance": total_insurance,
        "total_hoa": total_hoa,
        "total_pmi": total_pmi,
        "total_cost_of_loan": total_cost_of_loan,
        "payoff_years": payoff_month // 12,
        "payoff_months": payoff_month % 12,
        "amortization_schedule": schedule,
        "savings_from_extra_payments": (
            inputs.extra_monthly_payment * n_payments + inputs.lump_sum_payment
        ),
        "interest_saved": interest_saved,
        "breakdown": breakdown,
    }
