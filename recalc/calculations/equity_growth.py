"""
Equity Growth Calculations

Month-by-month projection of property value, mortgage balance and equity
over a holding horizon, with renovation events, PMI cancellation by LTV,
carrying costs and sale-exit economics. Optional Monte Carlo bands put a
seeded random walk around the appreciation assumption.

Rate fields accept either whole percents or fractions (5 or 0.05).
"""

import math
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, List, Optional

from dateutil.relativedelta import relativedelta

from recalc.calculations.amortization import AmortizationRow, ExtraPayment, amortize
from recalc.calculations.inputs import (
    coerce_numeric_fields,
    month_index,
    parse_rate,
    to_date,
)
from recalc.calculations.monte_carlo import (
    DEFAULT_SEED,
    percentile_bands,
    simulate_value_paths,
)

DEFAULT_HORIZON_YEARS = 10
DEFAULT_TERM_MONTHS = 360
DEFAULT_MORTGAGE_RATE = 0.05
DEFAULT_APPRECIATION = 0.03
DEFAULT_INFLATION = 0.02
DEFAULT_PMI_STOP_LTV = 0.8
DEFAULT_SELLING_COSTS = 0.06
DEFAULT_VOLATILITY = 0.03
DEFAULT_RUNS = 1000


@dataclass
class RenovationEvent:
    """Renovation on a date: cost spent and value uplift (percent or fraction)."""

    date: Optional[str] = None
    cost: float = 0.0
    uplift: float = 0.0

    def __post_init__(self):
        coerce_numeric_fields(self)


@dataclass
class ExtraPrincipalPayment:
    """One-time principal prepayment on a date."""

    date: Optional[str] = None
    amount: float = 0.0

    def __post_init__(self):
        coerce_numeric_fields(self)


@dataclass
class EquityGrowthInputs:
    """
    Equity growth inputs.

    property_tax and maintenance_percent are annual rates on current value;
    insurance is annual dollars, hoa_fee monthly dollars. Rates left as
    None take the documented defaults; an explicit 0 stays 0.
    """

    start_date: Optional[str] = None
    projection_horizon_years: float = DEFAULT_HORIZON_YEARS

    home_price: float = 0.0
    down_payment: float = 0.0
    mortgage_principal: Optional[float] = None
    mortgage_rate: Optional[float] = None
    mortgage_term_months: int = DEFAULT_TERM_MONTHS

    appreciation: Optional[float] = None
    inflation: Optional[float] = None

    pmi_enabled: bool = False
    pmi_percent: float = 0.0
    pmi_stop_ltv: Optional[float] = None

    property_tax: float = 0.0
    insurance: float = 0.0
    hoa_fee: float = 0.0
    maintenance_percent: float = 0.0

    selling_costs_percent: Optional[float] = None
    capital_gains_rate: float = 0.0
    depreciation_recapture: float = 0.0

    extra_principal_schedule: List[ExtraPrincipalPayment] = field(default_factory=list)
    reno_events: List[RenovationEvent] = field(default_factory=list)

    monte_carlo_enabled: bool = False
    monte_carlo_runs: int = DEFAULT_RUNS
    monte_carlo_seed: int = DEFAULT_SEED
    monte_carlo_mean: Optional[float] = None
    monte_carlo_volatility: Optional[float] = None

    currency: str = "USD"

    def __post_init__(self):
        coerce_numeric_fields(self)
        self.extra_principal_schedule = [
            e if isinstance(e, ExtraPrincipalPayment) else ExtraPrincipalPayment(**e)
            for e in self.extra_principal_schedule or []
        ]
        self.reno_events = [
            e if isinstance(e, RenovationEvent) else RenovationEvent(**e)
            for e in self.reno_events or []
        ]

    @property
    def horizon_years(self) -> float:
        return self.projection_horizon_years or DEFAULT_HORIZON_YEARS

    @property
    def horizon_months(self) -> int:
        return max(1, int(math.floor(self.horizon_years * 12 + 0.5)))

    @property
    def loan_principal(self) -> float:
        """Explicit principal, else home price less down payment."""
        if self.mortgage_principal:
            return self.mortgage_principal
        return max(0.0, self.home_price - self.down_payment)

    @property
    def term_months(self) -> int:
        return self.mortgage_term_months or DEFAULT_TERM_MONTHS


class PMISchedule:
    """
    Monthly PMI on the outstanding balance.

    Charging stops the first month LTV is at or below stop_ltv and never
    resumes, even if LTV later rises again.
    """

    def __init__(self, annual_rate: float, stop_ltv: float, enabled: bool = True):
        self.annual_rate = annual_rate
        self.stop_ltv = stop_ltv
        self.active = enabled and annual_rate > 0
        self.end_month: Optional[int] = None

    def charge(self, month: int, balance: float, ltv: float) -> float:
        if not self.active or balance <= 0:
            return 0.0
        if ltv <= self.stop_ltv:
            self.active = False
            self.end_month = month
            return 0.0
        return self.annual_rate / 12 * balance


def _rate(value: Optional[float], default: float) -> float:
    return parse_rate(default if value is None else value)


def month_start(start: date, offset: int) -> str:
    """YYYY-MM-01 of the month offset months after start."""
    return (start.replace(day=1) + relativedelta(months=offset)).isoformat()


def build_amortization(inputs: EquityGrowthInputs) -> List[AmortizationRow]:
    """Mortgage rows for the loan, with dated prepayments mapped to months."""
    months = inputs.horizon_months
    extras = [
        ExtraPayment(month_index(e.date, inputs.start_date, months), e.amount)
        for e in inputs.extra_principal_schedule
    ]
    annual_rate_percent = _rate(inputs.mortgage_rate, DEFAULT_MORTGAGE_RATE) * 100
    return list(
        amortize(inputs.loan_principal, annual_rate_percent, inputs.term_months, extras)
    )


def renovation_schedule(inputs: EquityGrowthInputs) -> Dict[int, Dict[str, float]]:
    """
    Renovation events keyed by month index.

    Events landing in the same month combine: uplift factors multiply and
    costs add.
    """
    months = inputs.horizon_months
    schedule = {}
    for event in inputs.reno_events:
        idx = month_index(event.date, inputs.start_date, months)
        entry = schedule.setdefault(idx, {"factor": 1.0, "cost": 0.0})
        entry["factor"] *= 1 + parse_rate(event.uplift)
        entry["cost"] += event.cost
    return schedule


def calculate_equity_growth(inputs: EquityGrowthInputs) -> Dict:
    """
    Project equity month by month over the horizon.

    Each month: appreciate value, apply renovations, take the mortgage row,
    accrue PMI until LTV first reaches the stop threshold (never resumes),
    accrue tax, insurance, HOA and maintenance. Exit economics are taken at
    the last month.

    Args:
        inputs: EquityGrowthInputs

    Returns:
        Dict with timelines, monthly table, KPIs, equity sources, cost
        breakdown and event log
    """
    start = to_date(inputs.start_date)
    months = inputs.horizon_months
    years = inputs.horizon_years

    appreciation = _rate(inputs.appreciation, DEFAULT_APPRECIATION)
    inflation = _rate(inputs.inflation, DEFAULT_INFLATION)
    pmi_schedule = PMISchedule(
        parse_rate(inputs.pmi_percent),
        _rate(inputs.pmi_stop_ltv, DEFAULT_PMI_STOP_LTV),
        inputs.pmi_enabled,
    )
    tax_rate = parse_rate(inputs.property_tax)
    maintenance_rate = parse_rate(inputs.maintenance_percent)
    selling_rate = _rate(inputs.selling_costs_percent, DEFAULT_SELLING_COSTS)
    capital_gains_rate = parse_rate(inputs.capital_gains_rate)
    recapture_rate = parse_rate(inputs.depreciation_recapture)

    home_price = inputs.home_price
    principal = inputs.loan_principal
    amortization = build_amortization(inputs)
    renovations = renovation_schedule(inputs)

    monthly_appreciation = appreciation / 12
    monthly_insurance = inputs.insurance / 12
    monthly_hoa = inputs.hoa_fee

    property_values = []
    loan_balances = []
    equity_values = []
    ltv_timeline = []
    monthly_table = []
    event_log = []

    totals = {
        "interest": 0.0,
        "principal": 0.0,
        "extra": 0.0,
        "pmi": 0.0,
        "tax": 0.0,
        "insurance": 0.0,
        "hoa": 0.0,
        "maintenance": 0.0,
        "reno": 0.0,
    }

    value = home_price

    for m in range(months):
        value *= 1 + monthly_appreciation

        reno = renovations.get(m)
        reno_cost = 0.0
        if reno:
            value *= reno["factor"]
            reno_cost = reno["cost"]
            totals["reno"] += reno_cost
            event_log.append(
                {"type": "reno", "month": m, "date": month_start(start, m), "cost": reno_cost}
            )

        if m < len(amortization):
            row = amortization[m]
            balance = row.closing_balance
            interest_paid = row.interest_paid
            principal_paid = row.principal_paid
            extra_paid = row.extra_paid
        else:
            balance = interest_paid = principal_paid = extra_paid = 0.0

        totals["interest"] += interest_paid
        totals["principal"] += principal_paid
        totals["extra"] += extra_paid

        ltv = balance / value if value > 0 else 0.0

        pmi = pmi_schedule.charge(m, balance, ltv)
        if pmi_schedule.end_month == m:
            event_log.append(
                {"type": "pmi_end", "month": m, "date": month_start(start, m), "ltv": ltv}
            )
        totals["pmi"] += pmi

        tax = tax_rate * value / 12
        maintenance = maintenance_rate * value / 12
        totals["tax"] += tax
        totals["insurance"] += monthly_insurance
        totals["hoa"] += monthly_hoa
        totals["maintenance"] += maintenance

        equity = value - balance
        property_values.append(value)
        loan_balances.append(balance)
        equity_values.append(equity)
        ltv_timeline.append(ltv)

        monthly_table.append(
            {
                "month_index": m,
                "date": month_start(start, m),
                "property_value": value,
                "appreciation_pct_monthly": monthly_appreciation,
                "loan_balance": balance,
                "interest_paid": interest_paid,
                "principal_paid": principal_paid,
                "extra_principal": extra_paid,
                "pmi": pmi,
                "tax": tax,
                "insurance": monthly_insurance,
                "hoa": monthly_hoa,
                "maintenance": maintenance,
                "ltv": ltv,
                "equity": equity,
                "reno_cost_this_month": reno_cost,
            }
        )

    # === KPIs ===
    equity_today = max(0.0, home_price - principal)
    last_value = property_values[-1]
    last_balance = loan_balances[-1]
    equity_at_horizon = last_value - last_balance

    # === EXIT ECONOMICS ===
    selling_costs = selling_rate * last_value
    simple_gain = max(0.0, last_value - (home_price + totals["reno"]))
    capital_gains_tax = capital_gains_rate * simple_gain
    recapture_tax = recapture_rate * simple_gain
    net_after_sale = (
        last_value - selling_costs - last_balance - capital_gains_tax - recapture_tax
    )

    if equity_today <= 0:
        equity_cagr = 0.0
    elif equity_at_horizon <= 0:
        equity_cagr = -1.0
    else:
        equity_cagr = (equity_at_horizon / equity_today) ** (1 / years) - 1

    equity_sources = [
        {"label": "Down Payment", "amount": inputs.down_payment or equity_today},
        {"label": "Principal Repaid", "amount": totals["principal"] + totals["extra"]},
        {
            "label": "Net Appreciation (incl. reno uplift - cost)",
            "amount": last_value - (home_price + totals["reno"]),
        },
        {"label": "Liens/HELOC", "amount": 0.0},
        {"label": "Selling Costs", "amount": -selling_costs},
        {"label": "Taxes (CGT/Recapture)", "amount": -(capital_gains_tax + recapture_tax)},
        {"label": "Net After-Sale Equity", "amount": net_after_sale},
    ]

    cost_breakdown = {
        "total_interest_paid": totals["interest"],
        "total_principal_paid": totals["principal"],
        "total_extra_paid": totals["extra"],
        "total_pmi": totals["pmi"],
        "total_property_tax": totals["tax"],
        "total_insurance": totals["insurance"],
        "total_hoa": totals["hoa"],
        "total_maintenance": totals["maintenance"],
        "total_reno_costs": totals["reno"],
        "selling_costs": selling_costs,
        "capital_gains_tax": capital_gains_tax,
        "depreciation_recapture_tax": recapture_tax,
    }
    cost_breakdown["total_cash_outflow"] = sum(
        v
        for k, v in cost_breakdown.items()
        if k not in ("total_principal_paid", "total_extra_paid")
    )

    return {
        "property_values": property_values,
        "loan_balances": loan_balances,
        "equity_values": equity_values,
        "ltv_timeline": ltv_timeline,
        "monthly_table": monthly_table,
        "equity_today": equity_today,
        "equity_at_horizon": equity_at_horizon,
        "equity_at_horizon_real": equity_at_horizon / (1 + inflation) ** years,
        "net_after_sale": net_after_sale,
        "equity_cagr": equity_cagr,
        "equity_sources": equity_sources,
        "cost_breakdown": cost_breakdown,
        "event_log": event_log,
        "pmi_end_month": pmi_schedule.end_month,
        "currency": inputs.currency or "USD",
    }


def monte_carlo_equity(inputs: EquityGrowthInputs) -> Dict[str, List[float]]:
    """
    Percentile bands of equity from simulated value paths.

    Monthly return ~ N(mean/12, volatility/sqrt(12)); the mean defaults to
    the appreciation assumption. Renovation uplifts still apply on their
    month and the loan balance follows the deterministic schedule.

    Args:
        inputs: EquityGrowthInputs

    Returns:
        {"p5": [...], "p50": [...], "p95": [...]} with one value per month
    """
    months = inputs.horizon_months
    runs = inputs.monte_carlo_runs if inputs.monte_carlo_runs > 0 else DEFAULT_RUNS

    if inputs.monte_carlo_mean is not None:
        mean = parse_rate(inputs.monte_carlo_mean) / 12
    else:
        mean = _rate(inputs.appreciation, DEFAULT_APPRECIATION) / 12
    volatility = (
        DEFAULT_VOLATILITY
        if inputs.monte_carlo_volatility is None
        else inputs.monte_carlo_volatility
    ) / math.sqrt(12)

    amortization = build_amortization(inputs)
    balances = [
        amortization[m].closing_balance if m < len(amortization) else 0.0
        for m in range(months)
    ]
    uplifts = {m: r["factor"] for m, r in renovation_schedule(inputs).items()}

    paths = simulate_value_paths(
        inputs.home_price,
        months,
        mean,
        volatility,
        runs,
        seed=inputs.monte_carlo_seed,
        uplift_by_month=uplifts,
    )
    equity_paths = [[v - b for v, b in zip(path, balances)] for path in paths]
    return percentile_bands(equity_paths)


def calculate_equity_growth_with_monte_carlo(inputs: EquityGrowthInputs) -> Dict:
    """Deterministic projection plus mc_percentiles when Monte Carlo is enabled."""
    result = calculate_equity_growth(inputs)
    if inputs.monte_carlo_enabled:
        result["mc_percentiles"] = monte_carlo_equity(inputs)
    return result
