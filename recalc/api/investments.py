"""
Investment analysis endpoints: flips, equity growth, portfolios,
holding costs, renovations and buy vs rent.
"""

from typing import List, Optional

from fastapi import APIRouter
from pydantic import BaseModel

from recalc.api.common import (
    LenientFloat,
    LenientInt,
    OptionalFloat,
    OptionalInt,
    run_calculation,
)
from recalc.calculations.buy_rent import BuyRentInputs, calculate_buy_rent
from recalc.calculations.equity_growth import (
    EquityGrowthInputs,
    calculate_equity_growth_with_monte_carlo,
    monte_carlo_equity,
)
from recalc.calculations.flip import FlipInputs, compute_flip_metrics
from recalc.calculations.holding_cost import HoldingCostInputs, calculate_holding_costs
from recalc.calculations.portfolio import Portfolio, analyze_portfolio
from recalc.calculations.renovation import RenovationInputs, calculate_renovation_roi
from recalc.config import get_settings

router = APIRouter()


class FlipInput(BaseModel):
    """Input for flip profit calculation."""

    purchase_price: LenientFloat = 0.0
    closing_costs: LenientFloat = 0.0
    cash_percent: LenientFloat = 0.0
    lender_points_pct: LenientFloat = 0.0
    origination_fee: LenientFloat = 0.0
    underwriting_fee: LenientFloat = 0.0
    purchase_taxes: LenientFloat = 0.0

    loan_amount: OptionalFloat = None
    interest_rate: LenientFloat = 0.0
    loan_term_years: LenientFloat = 30.0
    interest_only: bool = True

    rehab_budget: LenientFloat = 0.0
    contingency_pct: LenientFloat = 0.0
    use_contingency: bool = False
    timeline_months: LenientInt = 6

    property_tax_annual: LenientFloat = 0.0
    insurance_monthly: LenientFloat = 0.0
    utilities_monthly: LenientFloat = 0.0
    hoa_monthly: LenientFloat = 0.0
    maintenance_monthly: LenientFloat = 0.0

    arv: LenientFloat = 0.0
    agent_commission_pct: LenientFloat = 5.0
    staging_marketing: LenientFloat = 0.0
    seller_closing_costs: LenientFloat = 0.0
    sale_transfer_taxes: LenientFloat = 0.0


@router.post("/flip")
async def calculate_flip_endpoint(inputs: FlipInput):
    """Calculate flip profit, ROI, break-even price and sensitivity."""
    return run_calculation(compute_flip_metrics, FlipInputs, inputs)


class RenovationEventInput(BaseModel):
    date: Optional[str] = None
    cost: LenientFloat = 0.0
    uplift: LenientFloat = 0.0


class ExtraPrincipalInput(BaseModel):
    date: Optional[str] = None
    amount: LenientFloat = 0.0


class EquityGrowthInput(BaseModel):
    """Input for equity growth. Rates may be whole percents or fractions."""

    start_date: Optional[str] = None
    projection_horizon_years: LenientFloat = 10.0

    home_price: LenientFloat = 0.0
    down_payment: LenientFloat = 0.0
    mortgage_principal: OptionalFloat = None
    mortgage_rate: OptionalFloat = None
    mortgage_term_months: LenientInt = 360

    appreciation: OptionalFloat = None
    inflation: OptionalFloat = None

    pmi_enabled: bool = False
    pmi_percent: LenientFloat = 0.0
    pmi_stop_ltv: OptionalFloat = None

    property_tax: LenientFloat = 0.0
    insurance: LenientFloat = 0.0
    hoa_fee: LenientFloat = 0.0
    maintenance_percent: LenientFloat = 0.0

    selling_costs_percent: OptionalFloat = None
    capital_gains_rate: LenientFloat = 0.0
    depreciation_recapture: LenientFloat = 0.0

    extra_principal_schedule: List[ExtraPrincipalInput] = []
    reno_events: List[RenovationEventInput] = []

    monte_carlo_enabled: bool = False
    monte_carlo_runs: OptionalInt = None
    monte_carlo_seed: OptionalInt = None
    monte_carlo_mean: OptionalFloat = None
    monte_carlo_volatility: OptionalFloat = None

    currency: Optional[str] = None


def _equity_growth_overrides(inputs: EquityGrowthInput) -> dict:
    """Fill run count, seed and currency from settings; cap runs and horizon."""
    settings = get_settings()
    runs = inputs.monte_carlo_runs or settings.monte_carlo_default_runs
    seed = inputs.monte_carlo_seed
    return {
        "projection_horizon_years": min(
            inputs.projection_horizon_years, settings.monte_carlo_max_horizon_years
        ),
        "monte_carlo_runs": max(1, min(runs, settings.monte_carlo_max_runs)),
        "monte_carlo_seed": settings.monte_carlo_default_seed if seed is None else seed,
        "currency": inputs.currency or settings.default_currency,
    }


@router.post("/equity-growth")
async def calculate_equity_growth_endpoint(inputs: EquityGrowthInput):
    """Project equity month by month, with Monte Carlo bands when enabled."""
    return run_calculation(
        calculate_equity_growth_with_monte_carlo,
        EquityGrowthInputs,
        inputs,
        **_equity_growth_overrides(inputs),
    )


@router.post("/equity-growth/monte-carlo")
async def calculate_monte_carlo_endpoint(inputs: EquityGrowthInput):
    """P5/P50/P95 equity bands from seeded simulated value paths."""
    return run_calculation(
        monte_carlo_equity,
        EquityGrowthInputs,
        inputs,
        **_equity_growth_overrides(inputs),
    )


class OperatingExpensesInput(BaseModel):
    property_tax: LenientFloat = 0.0
    insurance: LenientFloat = 0.0
    hoa: LenientFloat = 0.0
    utilities: LenientFloat = 0.0
    maintenance: LenientFloat = 0.0
    management_fees_percent: LenientFloat = 0.0
    other: LenientFloat = 0.0


class PropertyInput(BaseModel):
    """One property in a portfolio."""

    name: str = ""
    type: str = "residential"

    purchase_price: LenientFloat = 0.0
    current_value: LenientFloat = 0.0
    loan_amount: LenientFloat = 0.0
    loan_balance: OptionalFloat = None
    interest_rate: LenientFloat = 0.0
    term_months: LenientInt = 360
    monthly_pi: OptionalFloat = None
    down_payment: OptionalFloat = None
    closing_costs: LenientFloat = 0.0

    rent: LenientFloat = 0.0
    vacancy_rate: LenientFloat = 0.0
    rent_growth: LenientFloat = 0.0
    nightly_rate: LenientFloat = 0.0
    occupancy_rate: LenientFloat = 0.0
    seasonal_variation: LenientFloat = 0.0
    annual_lease_amount: LenientFloat = 0.0
    escalation_clause: LenientFloat = 0.0

    operating_expenses: OperatingExpensesInput = OperatingExpensesInput()

    horizon_years: LenientInt = 10
    appreciation: LenientFloat = 0.0


class PortfolioInput(BaseModel):
    properties: List[PropertyInput] = []
    currency: Optional[str] = None
    projection_horizon_years: OptionalInt = None


@router.post("/portfolio")
async def analyze_portfolio_endpoint(inputs: PortfolioInput):
    """Aggregate property metrics, portfolio IRR and stress scenarios."""
    return run_calculation(
        analyze_portfolio,
        Portfolio,
        inputs,
        currency=inputs.currency or get_settings().default_currency,
    )


class HoldingCostInput(BaseModel):
    """Input for holding cost calculation."""

    purchase_price: LenientFloat = 0.0
    loan_amount: LenientFloat = 0.0
    mortgage_rate: LenientFloat = 0.0
    loan_term: LenientFloat = 30.0
    monthly_pi: OptionalFloat = None

    property_tax: LenientFloat = 0.0
    property_tax_rate: LenientFloat = 0.0
    insurance: LenientFloat = 0.0
    hoa_fee: LenientFloat = 0.0
    maintenance: LenientFloat = 0.0
    utilities: LenientFloat = 0.0
    security_landscaping: LenientFloat = 0.0

    closing_costs: LenientFloat = 0.0
    stamp_duty: LenientFloat = 0.0
    opportunity_cost: LenientFloat = 0.0

    rental_income: LenientFloat = 0.0
    vacancy_rate: LenientFloat = 0.0

    size_sq_ft: OptionalFloat = None
    currency: Optional[str] = None


@router.post("/holding-cost")
async def calculate_holding_cost_endpoint(inputs: HoldingCostInput):
    """Calculate monthly and annual holding costs net of rent."""
    return run_calculation(
        calculate_holding_costs,
        HoldingCostInputs,
        inputs,
        currency=inputs.currency or get_settings().default_currency,
    )


class RenovationItemInput(BaseModel):
    label: str = "Renovation"
    cost: LenientFloat = 0.0


class RenovationInput(BaseModel):
    """Input for renovation ROI."""

    current_value: LenientFloat = 0.0
    renovation_costs: LenientFloat = 0.0
    appraisal_uplift_percent: LenientFloat = 0.0
    rent_increase_percent: LenientFloat = 0.0
    current_rent: LenientFloat = 0.0
    cap_rate: LenientFloat = 6.0
    hold_period_years: LenientFloat = 5.0
    selling_costs_percent: LenientFloat = 6.0
    tax_rate: LenientFloat = 0.0
    reno_events: List[RenovationItemInput] = []


@router.post("/renovation")
async def calculate_renovation_endpoint(inputs: RenovationInput):
    """Compare appraisal and income valuation of a renovation."""
    return run_calculation(calculate_renovation_roi, RenovationInputs, inputs)


class BuyRentInput(BaseModel):
    """Input for buy vs rent comparison."""

    home_price: LenientFloat = 0.0
    down_payment: LenientFloat = 0.0
    loan_term: LenientFloat = 30.0
    interest_rate: LenientFloat = 0.0
    property_tax: LenientFloat = 0.0
    insurance: LenientFloat = 0.0
    maintenance_percent: LenientFloat = 0.0
    hoa_fee: LenientFloat = 0.0
    closing_costs: LenientFloat = 0.0

    monthly_rent: LenientFloat = 0.0
    rent_increase_percent: LenientFloat = 0.0
    renter_insurance: LenientFloat = 0.0

    annual_home_appreciation: LenientFloat = 0.0
    annual_investment_return: LenientFloat = 0.0
    time_horizon_years: LenientInt = 10
    inflation_rate: LenientFloat = 0.0
    rent_adjustment: LenientFloat = 0.0
    home_value_adjustment: LenientFloat = 0.0

    currency: Optional[str] = None


@router.post("/buy-rent")
async def calculate_buy_rent_endpoint(inputs: BuyRentInput):
    """Compare wealth from buying against renting and investing."""
    return run_calculation(
        calculate_buy_rent,
        BuyRentInputs,
        inputs,
        currency=inputs.currency or get_settings().default_currency,
    )
