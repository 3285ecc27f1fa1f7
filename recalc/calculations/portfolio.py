"""
Portfolio Calculations

Per-property operating metrics and portfolio aggregates:

1. Property income by type (residential, airbnb, commercial, land)
2. NOI, debt service, cash flow, equity, cap rate, DSCR per property
3. Portfolio totals, value-weighted cap rate, debt-weighted DSCR
4. Portfolio IRR over summed annual cash flows with exit equity
5. LTV trajectory and stress scenarios
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

from recalc.calculations.amortization import calculate_dscr, calculate_payment
from recalc.calculations.inputs import coerce_numeric_fields, pct, safe_divide
from recalc.calculations.irr import calculate_multiple, solve_irr

DEFAULT_HORIZON_YEARS = 10


class PropertyType(str, Enum):
    RESIDENTIAL = "residential"
    AIRBNB = "airbnb"
    COMMERCIAL = "commercial"
    LAND = "land"

    @classmethod
    def parse(cls, value) -> "PropertyType":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value or "").strip().lower())
        except ValueError:
            return cls.RESIDENTIAL


@dataclass
class OperatingExpenses:
    """
    Property operating expenses.

    property_tax and maintenance are annual percents of value,
    management_fees_percent a percent of income, insurance annual dollars,
    hoa, utilities and other monthly dollars.
    """

    property_tax: float = 0.0
    insurance: float = 0.0
    hoa: float = 0.0
    utilities: float = 0.0
    maintenance: float = 0.0
    management_fees_percent: float = 0.0
    other: float = 0.0

    def __post_init__(self):
        coerce_numeric_fields(self)


@dataclass
class Property:
    """
    A portfolio property.

    rent is monthly for residential and annual ground rent for land;
    annual_lease_amount is annual. Rates and growth fields are whole
    percents.
    """

    name: str = ""
    type: PropertyType = PropertyType.RESIDENTIAL

    purchase_price: float = 0.0
    current_value: float = 0.0
    loan_amount: float = 0.0
    loan_balance: Optional[float] = None
    interest_rate: float = 0.0
    term_months: int = 360
    monthly_pi: Optional[float] = None
    down_payment: Optional[float] = None
    closing_costs: float = 0.0

    rent: float = 0.0
    vacancy_rate: float = 0.0
    rent_growth: float = 0.0
    nightly_rate: float = 0.0
    occupancy_rate: float = 0.0
    seasonal_variation: float = 0.0
    annual_lease_amount: float = 0.0
    escalation_clause: float = 0.0

    operating_expenses: OperatingExpenses = field(default_factory=OperatingExpenses)

    horizon_years: int = DEFAULT_HORIZON_YEARS
    appreciation: float = 0.0

    def __post_init__(self):
        coerce_numeric_fields(self)
        self.type = PropertyType.parse(self.type)
        if isinstance(self.operating_expenses, dict):
            self.operating_expenses = OperatingExpenses(**self.operating_expenses)
        elif self.operating_expenses is None:
            self.operating_expenses = OperatingExpenses()

    @property
    def value(self) -> float:
        return self.current_value or self.purchase_price

    @property
    def debt(self) -> float:
        if self.loan_balance is not None:
            return self.loan_balance
        return self.loan_amount

    @property
    def equity_invested(self) -> float:
        """Down payment (price less loan when not given) plus closing costs."""
        down = (
            self.down_payment
            if self.down_payment is not None
            else max(0.0, self.purchase_price - self.loan_amount)
        )
        return down + self.closing_costs


@dataclass
class Portfolio:
    properties: List[Property] = field(default_factory=list)
    currency: str = "USD"
    projection_horizon_years: Optional[int] = None

    def __post_init__(self):
        coerce_numeric_fields(self)
        self.properties = [
            p if isinstance(p, Property) else Property(**p) for p in self.properties or []
        ]


@dataclass(frozen=True)
class Shock:
    """Stress applied to a property: income and value multipliers, rate points."""

    income_factor: float = 1.0
    rate_points: float = 0.0
    value_factor: float = 1.0


NO_SHOCK = Shock()

RISK_SCENARIOS = [
    ("Rent -10%", Shock(income_factor=0.90)),
    ("Occupancy -15%", Shock(income_factor=0.85)),
    ("Interest Rate +2%", Shock(rate_points=2.0)),
    ("Property Value -20%", Shock(value_factor=0.80)),
]


# ---------------------------
# Property-level
# ---------------------------


def property_value(prop: Property, shock: Shock = NO_SHOCK) -> float:
    return prop.value * shock.value_factor


def property_income(prop: Property, shock: Shock = NO_SHOCK) -> float:
    """Annual gross income by property type."""
    if prop.type is PropertyType.AIRBNB:
        income = (
            prop.nightly_rate
            * 365
            * pct(prop.occupancy_rate)
            * (1 + pct(prop.seasonal_variation))
        )
    elif prop.type is PropertyType.COMMERCIAL:
        income = prop.annual_lease_amount * (1 + pct(prop.escalation_clause))
    elif prop.type is PropertyType.LAND:
        income = prop.rent * (1 + pct(prop.rent_growth))
    else:
        income = (
            prop.rent * 12 * (1 - pct(prop.vacancy_rate)) * (1 + pct(prop.rent_growth))
        )
    return income * shock.income_factor


def property_operating_expenses(prop: Property, shock: Shock = NO_SHOCK) -> float:
    """Annual operating expenses."""
    opex = prop.operating_expenses
    value = property_value(prop, shock)
    return (
        value * pct(opex.property_tax)
        + opex.insurance
        + opex.hoa * 12
        + opex.utilities * 12
        + value * pct(opex.maintenance)
        + property_income(prop, shock) * pct(opex.management_fees_percent)
        + opex.other * 12
    )


def property_noi(prop: Property, shock: Shock = NO_SHOCK) -> float:
    return property_income(prop, shock) - property_operating_expenses(prop, shock)


def property_debt_service(prop: Property, shock: Shock = NO_SHOCK) -> float:
    """
    Annual debt service.

    A stated monthly P&I overrides the amortized payment. A rate shock adds
    the payment difference at the shocked rate.
    """
    payment = calculate_payment(prop.loan_amount, prop.interest_rate, prop.term_months)
    monthly = prop.monthly_pi if prop.monthly_pi else payment
    if shock.rate_points:
        shocked = calculate_payment(
            prop.loan_amount, prop.interest_rate + shock.rate_points, prop.term_months
        )
        monthly += shocked - payment
    return monthly * 12


def property_cash_flow(prop: Property, shock: Shock = NO_SHOCK) -> float:
    return property_noi(prop, shock) - property_debt_service(prop, shock)


def property_equity(prop: Property, shock: Shock = NO_SHOCK) -> float:
    return property_value(prop, shock) - prop.debt


def property_cap_rate(prop: Property) -> float:
    """Cap rate in percent."""
    return safe_divide(property_noi(prop), property_value(prop)) * 100


def property_dscr(prop: Property) -> Optional[float]:
    return calculate_dscr(property_noi(prop), property_debt_service(prop))


def property_break_even_rent(prop: Property) -> float:
    """Monthly rent covering expenses and debt service after vacancy."""
    annual_outflow = property_operating_expenses(prop) + property_debt_service(prop)
    vacancy_factor = 1 - pct(prop.vacancy_rate)
    if vacancy_factor <= 0:
        return 0.0
    return annual_outflow / 12 / vacancy_factor


def property_metrics(prop: Property) -> Dict:
    """All per-property figures (annual dollars, percent cap rate)."""
    return {
        "name": prop.name,
        "type": prop.type.value,
        "value": property_value(prop),
        "debt": prop.debt,
        "income": property_income(prop),
        "operating_expenses": property_operating_expenses(prop),
        "noi": property_noi(prop),
        "debt_service": property_debt_service(prop),
        "net_cash_flow": property_cash_flow(prop),
        "equity": property_equity(prop),
        "cap_rate": property_cap_rate(prop),
        "dscr": property_dscr(prop),
        "break_even_rent": property_break_even_rent(prop),
    }


# ---------------------------
# Portfolio-level
# ---------------------------


def total_value(properties: List[Property], shock: Shock = NO_SHOCK) -> float:
    return sum(property_value(p, shock) for p in properties)


def total_equity(properties: List[Property], shock: Shock = NO_SHOCK) -> float:
    return sum(property_equity(p, shock) for p in properties)


def portfolio_noi(properties: List[Property], shock: Shock = NO_SHOCK) -> float:
    return sum(property_noi(p, shock) for p in properties)


def total_cash_flow(properties: List[Property], shock: Shock = NO_SHOCK) -> float:
    return sum(property_cash_flow(p, shock) for p in properties)


def portfolio_cap_rate(properties: List[Property]) -> float:
    """Value-weighted average cap rate in percent."""
    value = total_value(properties)
    weighted = sum(property_cap_rate(p) * property_value(p) for p in properties)
    return safe_divide(weighted, value)


def portfolio_dscr(properties: List[Property]) -> Optional[float]:
    """Total NOI over total debt service."""
    debt_service = sum(property_debt_service(p) for p in properties)
    return calculate_dscr(portfolio_noi(properties), debt_service)


def cash_on_cash_return(properties: List[Property]) -> float:
    """Total annual cash flow over equity invested, in percent."""
    invested = sum(p.equity_invested for p in properties)
    return safe_divide(total_cash_flow(properties), invested) * 100


def portfolio_cash_flows(
    properties: List[Property], horizon_years: Optional[int] = None
) -> List[float]:
    """
    Summed annual cash flows across properties.

    Each property contributes -(down payment + closing costs) at t0, its net
    cash flow in years 1..horizon and its equity on top of the final year.
    """
    vectors = []
    for prop in properties:
        years = max(1, horizon_years or prop.horizon_years or DEFAULT_HORIZON_YEARS)
        flows = [-prop.equity_invested] + [property_cash_flow(prop)] * years
        flows[-1] += property_equity(prop)
        vectors.append(flows)

    length = max(len(v) for v in vectors)
    return [sum(v[i] for v in vectors if i < len(v)) for i in range(length)]


def portfolio_ltv_trajectory(
    properties: List[Property], horizon_years: Optional[int] = None
) -> List[Dict]:
    """Year-by-year LTV with values appreciating and debt held at today's balance."""
    years = horizon_years or max(p.horizon_years or 0 for p in properties)
    debt = sum(p.debt for p in properties)

    trajectory = []
    for year in range(years):
        value = sum(
            property_value(p) * (1 + pct(p.appreciation)) ** year for p in properties
        )
        trajectory.append(
            {"year": year, "total_value": value, "total_debt": debt, "ltv": safe_divide(debt, value)}
        )
    return trajectory


def portfolio_risk_sensitivity(properties: List[Property]) -> List[Dict]:
    """
    Stress scenarios for a tornado chart.

    impact is the change in total equity, cash_flow_impact the change in
    total annual cash flow, both against the unstressed portfolio.
    """
    base_equity = total_equity(properties)
    base_cash_flow = total_cash_flow(properties)

    return [
        {
            "label": label,
            "equity": total_equity(properties, shock),
            "impact": total_equity(properties, shock) - base_equity,
            "cash_flow_impact": total_cash_flow(properties, shock) - base_cash_flow,
        }
        for label, shock in RISK_SCENARIOS
    ]


def analyze_portfolio(portfolio: Portfolio) -> Dict:
    """
    Analyze all properties of a portfolio.

    Args:
        portfolio: Portfolio with at least one property

    Returns:
        Dict with per-property metrics, totals, returns, LTV trajectory
        and risk sensitivity

    Raises:
        ValueError: If the portfolio has no properties
    """
    properties = portfolio.properties
    if not properties:
        raise ValueError("Portfolio must contain at least one property")

    horizon = portfolio.projection_horizon_years
    cash_flows = portfolio_cash_flows(properties, horizon)
    irr = solve_irr(cash_flows)

    allocation: Dict[str, float] = {}
    for prop in properties:
        allocation[prop.type.value] = allocation.get(prop.type.value, 0.0) + property_value(prop)

    return {
        "properties": [property_metrics(p) for p in properties],
        "total_portfolio_value": total_value(properties),
        "total_equity": total_equity(properties),
        "total_noi": portfolio_noi(properties),
        "total_cash_flow": total_cash_flow(properties),
        "avg_cap_rate": portfolio_cap_rate(properties),
        "dscr": portfolio_dscr(properties),
        "cash_on_cash_return": cash_on_cash_return(properties),
        "cash_flows": cash_flows,
        "irr": irr.rate * 100,
        "irr_converged": irr.converged,
        "equity_multiple": calculate_multiple(cash_flows),
        "ltv_trajectory": portfolio_ltv_trajectory(properties, horizon),
        "risk_sensitivity": portfolio_risk_sensitivity(properties),
        "type_allocation": allocation,
        "currency": portfolio.currency or "USD",
    }
