"""
Financing and income calculator endpoints.

These endpoints accept form inputs and return calculated results.
Percent fields are whole numbers (6.5 means 6.5%).
"""

from typing import List, Optional

from fastapi import APIRouter
from pydantic import BaseModel, model_validator

from recalc.api.common import (
    LenientFloat,
    LenientInt,
    OptionalFloat,
    run_calculation,
)
from recalc.calculations import irr
from recalc.calculations.amortization import AmortizationInputs, calculate_amortization
from recalc.calculations.breakeven import BreakEvenInputs, calculate_break_even
from recalc.calculations.cap_rate import CapRateInputs, calculate_cap_rate
from recalc.calculations.mortgage import MortgageInputs, calculate_mortgage
from recalc.calculations.rental_yield import RentalYieldInputs, calculate_rental_yield
from recalc.calculations.roi import (
    InvestmentROIInputs,
    ROIInputs,
    calculate_investment_roi,
    calculate_roi,
)

router = APIRouter()


class MortgageInput(BaseModel):
    """Input for mortgage calculation."""

    home_price: LenientFloat = 0.0
    down_payment: LenientFloat = 0.0
    loan_term_years: LenientFloat = 30.0
    interest_rate: LenientFloat = 0.0
    annual_property_tax: LenientFloat = 0.0
    annual_insurance: LenientFloat = 0.0
    monthly_hoa: LenientFloat = 0.0
    pmi_percent: LenientFloat = 0.0
    extra_monthly_payment: LenientFloat = 0.0
    lump_sum_payment: LenientFloat = 0.0


@router.post("/mortgage")
async def calculate_mortgage_endpoint(inputs: MortgageInput):
    """Calculate mortgage payment breakdown and amortization schedule."""
    return run_calculation(calculate_mortgage, MortgageInputs, inputs)


class ExtraPaymentInput(BaseModel):
    month_index: LenientInt = 0
    amount: LenientFloat = 0.0


class AmortizationInput(BaseModel):
    """Input for amortization calculation."""

    principal: LenientFloat = 0.0
    annual_rate: LenientFloat = 0.0
    term_months: LenientInt = 360
    extra_monthly: LenientFloat = 0.0
    extra_payments: List[ExtraPaymentInput] = []


@router.post("/amortization")
async def calculate_amortization_endpoint(inputs: AmortizationInput):
    """Generate loan amortization schedule."""
    return run_calculation(calculate_amortization, AmortizationInputs, inputs)


class BreakEvenInput(BaseModel):
    """Input for break-even calculation. Dollar amounts are monthly."""

    property_type: str = "SFH"

    purchase_price: LenientFloat = 0.0
    down_payment: LenientFloat = 0.0
    closing_costs: LenientFloat = 0.0
    rehab_cost: LenientFloat = 0.0
    furnishings_cost: LenientFloat = 0.0
    lender_points: LenientFloat = 0.0
    loan_amount: OptionalFloat = None
    interest_rate: LenientFloat = 0.0
    amortization_years: LenientFloat = 0.0
    loan_term: LenientFloat = 0.0
    second_lien_amount: LenientFloat = 0.0
    second_lien_rate: LenientFloat = 0.0
    mortgage_insurance: LenientFloat = 0.0

    property_tax: LenientFloat = 0.0
    insurance: LenientFloat = 0.0
    hoa_fee: LenientFloat = 0.0
    utilities_water: LenientFloat = 0.0
    utilities_electric: LenientFloat = 0.0
    utilities_internet: LenientFloat = 0.0
    utilities_gas: LenientFloat = 0.0
    admin_costs: LenientFloat = 0.0

    management_fee_percent: LenientFloat = 0.0
    maintenance_reserve_percent: LenientFloat = 0.0
    capex_reserve_percent: LenientFloat = 0.0
    leasing_fee_percent: LenientFloat = 0.0
    vacancy_percent: LenientFloat = 0.0
    bad_debt_percent: LenientFloat = 0.0

    monthly_rent: LenientFloat = 0.0
    other_income: LenientFloat = 0.0

    nightly_rate: LenientFloat = 0.0
    occupancy_rate: LenientFloat = 0.0
    occupied_nights: OptionalFloat = None
    seasonal_uplift: List[LenientFloat] = []
    upsells: LenientFloat = 0.0
    cleaning_fee: LenientFloat = 0.0
    turnover_cost: LenientFloat = 0.0
    linen_cost: LenientFloat = 0.0
    channel_fee_percent: LenientFloat = 0.0

    break_even_mode: Optional[str] = None
    target_dscr: LenientFloat = 0.0
    target_monthly_margin: LenientFloat = 0.0

    preset_scenario: Optional[str] = None
    rent_adjustment: LenientFloat = 0.0
    occupancy_adjustment: LenientFloat = 0.0
    rate_adjustment: LenientFloat = 0.0
    vacancy_adjustment: LenientFloat = 0.0

    @model_validator(mode="after")
    def check_variable_percentages(self):
        total = (
            self.vacancy_percent
            + self.management_fee_percent
            + self.maintenance_reserve_percent
        )
        if total > 100:
            raise ValueError(
                "Vacancy, management and maintenance percentages cannot exceed 100% combined"
            )
        return self


@router.post("/break-even")
async def calculate_break_even_endpoint(inputs: BreakEvenInput):
    """Calculate break-even revenue for a long- or short-term rental."""
    return run_calculation(calculate_break_even, BreakEvenInputs, inputs)


class CapRateInput(BaseModel):
    """Input for cap rate calculation. Rent is monthly, everything else annual."""

    price: LenientFloat = 0.0
    rent: LenientFloat = 0.0
    vacancy_rate: LenientFloat = 0.0
    parking_income: LenientFloat = 0.0
    storage_income: LenientFloat = 0.0
    laundry_income: LenientFloat = 0.0
    advertising_income: LenientFloat = 0.0
    service_fees_income: LenientFloat = 0.0
    event_rentals_income: LenientFloat = 0.0
    rent_growth_rate: LenientFloat = 0.0
    taxes: LenientFloat = 0.0
    insurance: LenientFloat = 0.0
    maintenance: LenientFloat = 0.0
    property_management: LenientFloat = 0.0
    utilities: LenientFloat = 0.0
    hoa_fees: LenientFloat = 0.0
    other_expenses: LenientFloat = 0.0
    expense_growth_rate: LenientFloat = 0.0
    exit_value: LenientFloat = 0.0
    exit_cap_rate: LenientFloat = 0.0
    holding_period: LenientFloat = 0.0


@router.post("/cap-rate")
async def calculate_cap_rate_endpoint(inputs: CapRateInput):
    """Calculate NOI and going-in, stabilized and exit cap rates."""
    return run_calculation(calculate_cap_rate, CapRateInputs, inputs)


class ROIInput(BaseModel):
    """Input for all-cash ROI. Rent and expenses are monthly."""

    price: LenientFloat = 0.0
    rent: LenientFloat = 0.0
    expenses: LenientFloat = 0.0
    appreciation_rate: LenientFloat = 0.0
    holding_period: LenientInt = 1


@router.post("/roi")
async def calculate_roi_endpoint(inputs: ROIInput):
    """Calculate ROI from appreciation plus net rental income."""
    return run_calculation(calculate_roi, ROIInputs, inputs)


class InvestmentROIInput(BaseModel):
    """Input for leveraged ROI."""

    price: LenientFloat = 0.0
    rent: LenientFloat = 0.0
    other_income: LenientFloat = 0.0
    taxes: LenientFloat = 0.0
    insurance: LenientFloat = 0.0
    maintenance: LenientFloat = 0.0
    property_management: LenientFloat = 0.0
    utilities: LenientFloat = 0.0
    hoa_fees: LenientFloat = 0.0
    vacancy_rate: LenientFloat = 0.0
    appreciation_rate: LenientFloat = 0.0
    rent_increase_rate: LenientFloat = 0.0
    holding_period: LenientInt = 5
    down_payment: LenientFloat = 0.0
    closing_costs: LenientFloat = 0.0
    loan_amount: OptionalFloat = None
    interest_rate: LenientFloat = 0.0
    loan_term: LenientInt = 30


@router.post("/roi/detailed")
async def calculate_investment_roi_endpoint(inputs: InvestmentROIInput):
    """Calculate leveraged ROI, cap rate and cash-on-cash return."""
    return run_calculation(calculate_investment_roi, InvestmentROIInputs, inputs)


class RentalYieldInput(BaseModel):
    """Input for rental yield calculation."""

    property_price: LenientFloat = 0.0
    monthly_rent: LenientFloat = 0.0
    other_income: LenientFloat = 0.0
    vacancy_rate: LenientFloat = 0.0
    cam_recoveries: LenientFloat = 0.0
    turnover_rent_percent: LenientFloat = 0.0

    mortgage_amount: LenientFloat = 0.0
    down_payment: LenientFloat = 0.0
    interest_rate: LenientFloat = 0.0
    loan_term_years: LenientFloat = 0.0
    loan_type: str = "P+I"

    stamp_duty: LenientFloat = 0.0
    legal_fees: LenientFloat = 0.0
    registration_fees: LenientFloat = 0.0
    agent_fees: LenientFloat = 0.0
    renovation_costs: LenientFloat = 0.0

    management_fees: LenientFloat = 0.0
    maintenance: LenientFloat = 0.0
    property_taxes: LenientFloat = 0.0
    insurance: LenientFloat = 0.0
    utilities: LenientFloat = 0.0
    hoa_fees: LenientFloat = 0.0
    security: LenientFloat = 0.0
    cleaning: LenientFloat = 0.0
    marketing: LenientFloat = 0.0
    legal_accounting: LenientFloat = 0.0
    vacancy_allowance: LenientFloat = 0.0
    bad_debt_allowance: LenientFloat = 0.0
    licensing_fees: LenientFloat = 0.0


@router.post("/rental-yield")
async def calculate_rental_yield_endpoint(inputs: RentalYieldInput):
    """Calculate gross and net rental yield."""
    return run_calculation(calculate_rental_yield, RentalYieldInputs, inputs)


class IRRInput(BaseModel):
    """Input for IRR calculation."""

    cash_flows: List[LenientFloat]
    guess: LenientFloat = irr.DEFAULT_GUESS


class IRRResponse(BaseModel):
    """Response with IRR calculation."""

    irr: float
    converged: bool
    iterations: int
    multiple: float
    profit: float
    npv_at_10_percent: float


@router.post("/irr", response_model=IRRResponse)
async def calculate_irr_endpoint(inputs: IRRInput):
    """Calculate IRR for periodic cash flows; non-convergence is reported, not raised."""
    return run_calculation(irr.analyze_cash_flows, irr.IRRInputs, inputs)
