"""
Loan Amortization Calculations

Implements the level-payment formula and a month-by-month amortization
schedule with optional one-time extra principal payments.
"""

from dataclasses import asdict, dataclass, field
from typing import Dict, Iterable, Iterator, List, Optional

from recalc.calculations.inputs import coerce_numeric_fields


@dataclass(frozen=True)
class ExtraPayment:
    """One-time extra principal payment applied in a given month (0-based)."""

    month_index: int
    amount: float


@dataclass(frozen=True)
class AmortizationRow:
    """A single month of an amortization schedule."""

    month_index: int
    opening_balance: float
    interest_paid: float
    principal_paid: float
    extra_paid: float
    closing_balance: float

    @property
    def total_payment(self) -> float:
        return self.interest_paid + self.principal_paid + self.extra_paid


def monthly_rate(annual_rate_percent: float) -> float:
    """Convert an annual whole-number percent to a monthly decimal rate."""
    return annual_rate_percent / 100 / 12


def calculate_payment(
    principal: float, annual_rate_percent: float, term_months: int
) -> float:
    """
    Calculate the level monthly payment for a fixed-rate loan.

    Args:
        principal: Loan principal amount
        annual_rate_percent: Annual interest rate as whole percent (6.5 = 6.5%)
        term_months: Total amortization period in months

    Returns:
        Monthly payment amount (positive number)

    Raises:
        ValueError: If the rate is -1200% a year or lower (monthly rate <= -100%)
    """
    if principal <= 0:
        return 0.0
    if term_months <= 0:
        return 0.0

    r = monthly_rate(annual_rate_percent)
    if r <= -1:
        raise ValueError("Interest rate must be greater than -1200% per year")

    if r == 0:
        return principal / term_months

    return principal * r / (1 - (1 + r) ** -term_months)


def amortize(
    principal: float,
    annual_rate_percent: float,
    term_months: int,
    extra_payments: Iterable[ExtraPayment] = (),
    extra_monthly: float = 0.0,
) -> Iterator[AmortizationRow]:
    """
    Generate the amortization schedule month by month.

    The scheduled payment is fixed at origination. Extra payments keyed to a
    month reduce principal in that month only; extra_monthly is added to the
    scheduled principal every month. Negative extra amounts count as zero.
    Once the balance reaches zero every following row is all zeros.

    Args:
        principal: Loan principal amount
        annual_rate_percent: Annual interest rate as whole percent
        term_months: Number of scheduled payments
        extra_payments: One-time extra principal payments
        extra_monthly: Constant extra principal paid every month

    Yields:
        AmortizationRow for months 0 .. term_months - 1
    """
    extras: Dict[int, float] = {}
    for payment in extra_payments:
        if payment.amount > 0:
            extras[payment.month_index] = extras.get(payment.month_index, 0.0) + payment.amount
    extra_monthly = max(0.0, extra_monthly)

    r = monthly_rate(annual_rate_percent)
    payment = calculate_payment(principal, annual_rate_percent, term_months)
    balance = max(0.0, principal)

    for month in range(term_months):
        if balance <= 0:
            yield AmortizationRow(month, 0.0, 0.0, 0.0, 0.0, 0.0)
            continue

        interest = balance * r
        scheduled = min(balance, max(0.0, payment - interest) + extra_monthly)

        # Final scheduled payment retires any rounding residue
        if month == term_months - 1:
            scheduled = balance

        extra = min(max(0.0, extras.get(month, 0.0)), balance - scheduled)
        closing = max(0.0, balance - scheduled - extra)

        yield AmortizationRow(month, balance, interest, scheduled, extra, closing)
        balance = closing


def generate_amortization_schedule(
    principal: float,
    annual_rate_percent: float,
    term_months: int,
    extra_payments: Iterable[ExtraPayment] = (),
    extra_monthly: float = 0.0,
) -> List[Dict]:
    """Materialize the amortization schedule as a list of row dicts."""
    schedule = []
    for row in amortize(
        principal, annual_rate_percent, term_months, extra_payments, extra_monthly
    ):
        record = asdict(row)
        record["total_payment"] = row.total_payment
        schedule.append(record)
    return schedule


@dataclass
class AmortizationInputs:
    """Loan schedule inputs; annual_rate is a whole percent."""

    principal: float = 0.0
    annual_rate: float = 0.0
    term_months: int = 360
    extra_monthly: float = 0.0
    extra_payments: List[ExtraPayment] = field(default_factory=list)

    def __post_init__(self):
        coerce_numeric_fields(self)
        self.extra_payments = [
            e if isinstance(e, ExtraPayment) else ExtraPayment(**e)
            for e in self.extra_payments or []
        ]


def calculate_amortization(inputs: AmortizationInputs) -> Dict:
    """
    Payment, full schedule and totals for a loan.

    Raises:
        ValueError: If the rate is -1200% a year or lower
    """
    schedule = generate_amortization_schedule(
        principal=inputs.principal,
        annual_rate_percent=inputs.annual_rate,
        term_months=inputs.term_months,
        extra_payments=inputs.extra_payments,
        extra_monthly=inputs.extra_monthly,
    )

    return {
        "monthly_payment": calculate_payment(
            inputs.principal, inputs.annual_rate, inputs.term_months
        ),
        "schedule": schedule,
        "total_interest": sum(row["interest_paid"] for row in schedule),
        "total_principal": sum(
            row["principal_paid"] + row["extra_paid"] for row in schedule
        ),
    }


def calculate_remaining_balance(
    principal: float,
    annual_rate_percent: float,
    term_months: int,
    payments_completed: int,
) -> float:
    """Calculate remaining loan balance after N scheduled payments."""
    if payments_completed <= 0:
        return max(0.0, principal)

    balance = max(0.0, principal)
    for row in amortize(principal, annual_rate_percent, term_months):
        if row.month_index >= payments_completed:
            break
        balance = row.closing_balance
    return balance


def calculate_total_interest(rows: Iterable[AmortizationRow]) -> float:
    """Calculate total interest paid over a schedule."""
    return sum(row.interest_paid for row in rows)


def annual_debt_service(
    principal: float, annual_rate_percent: float, term_months: int
) -> float:
    """Twelve level payments."""
    return calculate_payment(principal, annual_rate_percent, term_months) * 12


def calculate_dscr(noi: float, debt_service: float) -> Optional[float]:
    """
    Calculate Debt Service Coverage Ratio (DSCR).

    Args:
        noi: Net Operating Income for the period
        debt_service: Debt service for the same period

    Returns:
        DSCR ratio, or None when there is no debt service
    """
    if debt_service == 0:
        return None
    return noi / debt_service
