"""
Tests for the calculation engines.
"""

import pytest

from recalc.calculations.amortization import (
    AmortizationInputs,
    ExtraPayment,
    amortize,
    calculate_amortization,
    calculate_dscr,
    calculate_payment,
    calculate_remaining_balance,
    generate_amortization_schedule,
)
from recalc.calculations.breakeven import (
    BreakEvenInputs,
    BreakEvenMode,
    calculate_break_even,
)
from recalc.calculations.buy_rent import BuyRentInputs, calculate_buy_rent
from recalc.calculations.cap_rate import CapRateInputs, calculate_cap_rate
from recalc.calculations.equity_growth import (
    EquityGrowthInputs,
    PMISchedule,
    calculate_equity_growth,
    calculate_equity_growth_with_monte_carlo,
    monte_carlo_equity,
)
from recalc.calculations.flip import FlipInputs, compute_flip_metrics
from recalc.calculations.holding_cost import HoldingCostInputs, calculate_holding_costs
from recalc.calculations.inputs import month_index, parse_rate, to_float
from recalc.calculations.irr import (
    IRRInputs,
    analyze_cash_flows,
    calculate_irr,
    calculate_multiple,
    calculate_npv,
    solve_irr,
)
from recalc.calculations.monte_carlo import (
    DEFAULT_SEED,
    LinearCongruentialGenerator,
    percentile_bands,
    simulate_value_paths,
)
from recalc.calculations.mortgage import MortgageInputs, calculate_mortgage
from recalc.calculations.portfolio import Portfolio, Property, analyze_portfolio
from recalc.calculations.renovation import RenovationInputs, calculate_renovation_roi
from recalc.calculations.rental_yield import RentalYieldInputs, calculate_rental_yield
from recalc.calculations.roi import (
    InvestmentROIInputs,
    ROIInputs,
    calculate_investment_roi,
    calculate_roi,
)


class TestInputs:
    """Test lenient input coercion."""

    def test_to_float_strings(self):
        assert to_float("1,200") == 1200.0
        assert to_float("6.5%") == 6.5
        assert to_float("") == 0.0
        assert to_float("abc") == 0.0
        assert to_float(None) == 0.0

    def test_parse_rate_accepts_percent_or_fraction(self):
        assert parse_rate(5) == pytest.approx(0.05)
        assert parse_rate(0.05) == pytest.approx(0.05)
        assert parse_rate(-3) == 0.0

    def test_month_index_clamps(self):
        assert month_index("2025-03-15", "2025-01-01", 120) == 2
        assert month_index("2020-01-01", "2025-01-01", 120) == 0
        assert month_index("2050-01-01", "2025-01-01", 120) == 119

    def test_records_default_missing_numbers(self):
        inputs = MortgageInputs(home_price="350000", down_payment="", interest_rate="x")
        assert inputs.home_price == 350000.0
        assert inputs.down_payment == 0.0
        assert inputs.interest_rate == 0.0


class TestAmortization:
    """Test loan amortization calculations."""

    def test_calculate_payment(self):
        """Test monthly payment calculation."""
        # $1M loan at 5% for 30 years
        payment = calculate_payment(1000000, 5, 360)
        assert 5300 < payment < 5500

    def test_zero_rate_payment(self):
        assert calculate_payment(120000, 0, 360) == pytest.approx(120000 / 360)

    def test_zero_rate_schedule_is_level_principal(self):
        rows = list(amortize(120000, 0, 360))
        for row in rows:
            assert row.interest_paid == 0.0
            assert row.principal_paid == pytest.approx(120000 / 360)
        assert rows[-1].closing_balance == pytest.approx(0.0, abs=1e-6)

    def test_zero_principal_or_term(self):
        assert calculate_payment(0, 6, 360) == 0.0
        assert calculate_payment(100000, 6, 0) == 0.0

    def test_rate_at_or_below_minus_100_percent_monthly_raises(self):
        with pytest.raises(ValueError, match="greater than -1200%"):
            calculate_payment(100000, -1200, 360)
        with pytest.raises(ValueError):
            calculate_amortization(AmortizationInputs(principal=100000, annual_rate=-1500))

    def test_schedule_balances_never_increase(self):
        rows = list(amortize(250000, 6.5, 360))
        assert len(rows) == 360
        for prev, row in zip(rows, rows[1:]):
            assert row.closing_balance <= prev.closing_balance
        assert rows[-1].closing_balance == pytest.approx(0.0, abs=1e-6)

    def test_principal_sums_to_loan(self):
        schedule = generate_amortization_schedule(200000, 7, 240)
        paid = sum(r["principal_paid"] + r["extra_paid"] for r in schedule)
        assert paid == pytest.approx(200000, abs=0.01)

    def test_principal_sums_to_loan_with_extra_payments(self):
        schedule = generate_amortization_schedule(
            200000, 7, 240, [ExtraPayment(3, 15000), ExtraPayment(60, 40000)], extra_monthly=250
        )
        paid = sum(r["principal_paid"] + r["extra_paid"] for r in schedule)
        assert paid == pytest.approx(200000, abs=0.01)

    def test_negative_extra_monthly_counts_as_zero(self):
        rows = list(amortize(100000, 6, 120, extra_monthly=-5000))
        plain = list(amortize(100000, 6, 120))
        assert rows == plain
        for prev, row in zip(rows, rows[1:]):
            assert row.closing_balance <= prev.closing_balance
        assert sum(r.principal_paid + r.extra_paid for r in rows) == pytest.approx(
            100000, abs=0.01
        )

    def test_negative_extra_payment_is_ignored(self):
        rows = list(amortize(100000, 6, 120, [ExtraPayment(0, -20000)]))
        assert rows[0].extra_paid == 0.0
        assert rows[0].closing_balance < rows[0].opening_balance
        assert rows == list(amortize(100000, 6, 120))

    def test_calculate_amortization_totals(self):
        result = calculate_amortization(
            AmortizationInputs(
                principal="100,000",
                annual_rate=6,
                term_months=120,
                extra_payments=[{"month_index": 0, "amount": 5000}],
            )
        )
        assert len(result["schedule"]) == 120
        assert result["monthly_payment"] == pytest.approx(calculate_payment(100000, 6, 120))
        assert result["total_principal"] == pytest.approx(100000, abs=0.01)
        assert result["total_interest"] > 0

    def test_extra_payment_shortens_loan(self):
        rows = list(amortize(200000, 6, 360, [ExtraPayment(0, 50000)]))
        payoff = next(r.month_index for r in rows if r.closing_balance <= 0)
        assert payoff < 359
        assert rows[-1].total_payment == 0.0

    def test_remaining_balance(self):
        balance = calculate_remaining_balance(100000, 6, 360, 12)
        assert 98000 < balance < 99000
        assert calculate_remaining_balance(100000, 6, 360, 0) == 100000

    def test_dscr_without_debt(self):
        assert calculate_dscr(10000, 0) is None
        assert calculate_dscr(12500, 10000) == pytest.approx(1.25)


class TestIRRCalculations:
    """Test IRR calculation functions."""

    def test_calculate_irr_simple(self):
        """Investment of 100 returning 110 after one period is a 10% return."""
        irr = calculate_irr([-100, 110])
        assert abs(irr - 0.10) < 0.001

    def test_calculate_irr_multi_period(self):
        irr = calculate_irr([-100, 20, 20, 20, 20, 120])
        assert abs(irr - 0.20) < 0.01

    def test_irr_negative_returns(self):
        assert calculate_irr([-100, 40, 40, 10]) < 0

    def test_irr_requires_sign_change(self):
        with pytest.raises(ValueError):
            calculate_irr([100, 100])
        result = solve_irr([100, 100])
        assert result.converged is False
        assert result.rate == 0.0

    def test_calculate_npv(self):
        assert calculate_npv([-100, 50, 50, 50], 0.10) > 0
        assert calculate_npv([-100, 110], 0.10) == pytest.approx(0.0, abs=1e-9)

    def test_multiple(self):
        assert calculate_multiple([-100, 50, 150]) == pytest.approx(2.0)
        assert calculate_multiple([50, 50]) == 0.0

    def test_analyze_cash_flows(self):
        result = analyze_cash_flows(IRRInputs(cash_flows=["-100", "110"]))
        assert abs(result["irr"] - 0.10) < 0.001
        assert result["converged"] is True
        assert result["multiple"] == pytest.approx(1.1)
        assert result["profit"] == pytest.approx(10)
        assert result["npv_at_10_percent"] == pytest.approx(0.0, abs=1e-9)

    def test_analyze_cash_flows_without_sign_change(self):
        result = analyze_cash_flows(IRRInputs(cash_flows=[100, 100]))
        assert result["converged"] is False
        assert result["multiple"] == 0.0


class TestMortgage:
    """Test mortgage calculator."""

    def test_reference_scenario(self):
        result = calculate_mortgage(
            MortgageInputs(
                home_price=350000,
                down_payment=70000,
                loan_term_years=30,
                interest_rate=6.5,
                annual_property_tax=4200,
                annual_insurance=1500,
                monthly_hoa=200,
                pmi_percent=0.5,
            )
        )
        assert result["loan_amount"] == 280000
        assert abs(result["monthly_principal_and_interest"] - 1769.79) < 0.05
        assert result["monthly_pmi"] == pytest.approx(116.67, abs=0.01)
        assert result["monthly_taxes"] == pytest.approx(350.0)
        assert len(result["amortization_schedule"]) == 360

    def test_schedule_cumulative_fields(self):
        result = calculate_mortgage(
            MortgageInputs(home_price=200000, down_payment=40000, interest_rate=6)
        )
        last = result["amortization_schedule"][-1]
        assert last["cumulative_principal"] == pytest.approx(160000, abs=0.05)
        assert last["remaining_balance"] == 0

    def test_extra_payments_save_interest(self):
        base = dict(home_price=300000, down_payment=60000, interest_rate=6)
        plain = calculate_mortgage(MortgageInputs(**base))
        extra = calculate_mortgage(
            MortgageInputs(extra_monthly_payment=300, lump_sum_payment=10000, **base)
        )
        assert plain["interest_saved"] == pytest.approx(0.0, abs=1.0)
        assert extra["interest_saved"] > 10000
        assert extra["payoff_years"] < 30

    def test_zero_term_raises(self):
        with pytest.raises(ValueError):
            calculate_mortgage(MortgageInputs(home_price=100000, loan_term_years=0))


class TestROI:
    """Test ROI calculators."""

    def test_reference_scenario(self):
        result = calculate_roi(
            ROIInputs(price=300000, rent=2000, expenses=0, appreciation_rate=3, holding_period=5)
        )
        assert result["net_annual_income"] == 24000
        assert result["future_property_value"] == pytest.approx(347782.2, abs=1.0)
        assert result["roi"] == pytest.approx(
            (result["future_property_value"] - 300000 + 120000) / 300000 * 100
        )
        assert len(result["projections"]) == 5

    def test_zero_price_does_not_divide(self):
        result = calculate_roi(ROIInputs(price=0, rent=1000))
        assert result["roi"] == 0.0

    def test_investment_roi_defaults_loan(self):
        result = calculate_investment_roi(
            InvestmentROIInputs(
                price=400000,
                rent=3000,
                taxes=4800,
                insurance=1200,
                down_payment=80000,
                closing_costs=8000,
                interest_rate=6,
                holding_period=5,
            )
        )
        assert result["loan_amount"] == 320000
        assert result["total_cash_invested"] == 88000
        assert result["cap_rate"] == pytest.approx((3000 * 12 - 6000) / 400000 * 100)

    def test_negative_cash_flow_has_no_payback(self):
        result = calculate_investment_roi(
            InvestmentROIInputs(price=400000, rent=500, down_payment=80000, interest_rate=7)
        )
        assert result["annual_cash_flow"] < 0
        assert result["payback_years"] is None


class TestBreakEven:
    """Test break-even calculator."""

    def test_dscr_mode(self):
        inputs = BreakEvenInputs(
            monthly_rent=2500,
            property_tax=250,
            insurance=100,
            loan_amount=200000,
            interest_rate=6,
            amortization_years=30,
            break_even_mode="DSCR",
            target_dscr=1.25,
        )
        result = calculate_break_even(inputs)
        debt = calculate_payment(200000, 6, 360)
        assert result["mode"] == BreakEvenMode.DSCR.value
        assert result["break_even_revenue"] == pytest.approx((350 + debt) * 1.25)
        assert result["break_even_rent"] == pytest.approx(result["break_even_revenue"])

    def test_cash_flow_zero_is_default_mode(self):
        result = calculate_break_even(BreakEvenInputs(monthly_rent=2000, property_tax=300))
        assert result["mode"] == "CF=0"
        assert result["break_even_revenue"] == pytest.approx(300)
        assert result["dscr"] is None

    def test_margin_mode_adds_target_margin(self):
        result = calculate_break_even(
            BreakEvenInputs(
                monthly_rent=2500,
                property_tax=300,
                insurance=100,
                loan_amount=200000,
                interest_rate=6,
                amortization_years=30,
                break_even_mode="Margin",
                target_monthly_margin=250,
            )
        )
        assert result["mode"] == BreakEvenMode.MARGIN.value
        assert result["break_even_revenue"] == pytest.approx(
            result["operating_expenses"] + result["monthly_debt_service"] + 250
        )

    def test_unknown_mode_falls_back_to_cash_flow_zero(self):
        result = calculate_break_even(
            BreakEvenInputs(monthly_rent=2000, property_tax=300, break_even_mode="bogus")
        )
        assert result["mode"] == "CF=0"
        assert result["break_even_revenue"] == pytest.approx(300)

    def test_short_term_rental_revenue(self):
        result = calculate_break_even(
            BreakEvenInputs(property_type="STR", nightly_rate=150, occupancy_rate=60)
        )
        assert result["gross_revenue"] == pytest.approx(150 * 0.6 * 365 / 12)
        assert result["break_even_rent"] is None

    def test_downside_preset_lowers_cash_flow(self):
        base = dict(monthly_rent=2500, loan_amount=200000, interest_rate=6, vacancy_percent=5)
        plain = calculate_break_even(BreakEvenInputs(**base))
        downside = calculate_break_even(BreakEvenInputs(preset_scenario="Downside", **base))
        assert downside["cash_flow"] < plain["cash_flow"]


class TestCapRate:
    def test_going_in_cap_rate(self):
        result = calculate_cap_rate(
            CapRateInputs(price=500000, rent=4000, taxes=6000, insurance=2000)
        )
        assert result["noi"] == 40000
        assert result["going_in_cap_rate"] == pytest.approx(8.0)

    def test_zero_price(self):
        result = calculate_cap_rate(CapRateInputs(rent=1000))
        assert result["going_in_cap_rate"] == 0.0


class TestRentalYield:
    def test_gross_yield(self):
        result = calculate_rental_yield(
            RentalYieldInputs(property_price=300000, monthly_rent=2000)
        )
        assert result["gross_yield"] == pytest.approx(8.0)

    def test_interest_only_debt_service(self):
        result = calculate_rental_yield(
            RentalYieldInputs(
                property_price=300000,
                monthly_rent=2000,
                mortgage_amount=200000,
                interest_rate=5,
                loan_type="IO",
            )
        )
        assert result["annual_debt_service"] == pytest.approx(10000)

    def test_requires_positive_price_and_rent(self):
        with pytest.raises(ValueError):
            calculate_rental_yield(RentalYieldInputs(property_price=0, monthly_rent=2000))

    def test_commercial_income_and_allowances(self):
        base = dict(property_price=500000, monthly_rent=4000, insurance=2000)
        plain = calculate_rental_yield(RentalYieldInputs(**base))
        result = calculate_rental_yield(
            RentalYieldInputs(
                cam_recoveries=6000,
                turnover_rent_percent=5,
                bad_debt_allowance=1000,
                licensing_fees=500,
                **base,
            )
        )
        assert result["turnover_rent"] == pytest.approx(48000 * 0.05)
        assert result["total_income"] == pytest.approx(48000 + 6000 + 2400)
        assert result["expenses"] == pytest.approx(plain["expenses"] + 1500)
        assert result["noi"] == pytest.approx(plain["noi"] + 6000 + 2400 - 1500)

    def test_explicit_down_payment_sets_cash_invested(self):
        base = dict(
            property_price=300000, monthly_rent=2000, mortgage_amount=200000, legal_fees=3000
        )
        implied = calculate_rental_yield(RentalYieldInputs(**base))
        explicit = calculate_rental_yield(RentalYieldInputs(down_payment=120000, **base))
        assert implied["total_cash_invested"] == pytest.approx(103000)
        assert explicit["total_cash_invested"] == pytest.approx(123000)
        assert explicit["cash_on_cash"] < implied["cash_on_cash"]


class TestFlip:
    """Test flip calculator."""

    def _inputs(self, **overrides):
        values = dict(
            purchase_price=200000,
            cash_percent=20,
            interest_rate=8,
            timeline_months=6,
            rehab_budget=40000,
            arv=320000,
            agent_commission_pct=5,
        )
        values.update(overrides)
        return FlipInputs(**values)

    def test_interest_only_payoff(self):
        result = compute_flip_metrics(self._inputs())
        assert result["loan_amount"] == 160000
        assert result["total_interest"] == pytest.approx(6400)
        assert result["payoff_balance"] == pytest.approx(166400)

    def test_break_even_price_zeroes_profit(self):
        result = compute_flip_metrics(self._inputs())
        curve_profit = result["break_even_sale_price"] * 0.95 - (
            result["total_project_cost"] + result["payoff_balance"]
        )
        assert curve_profit == pytest.approx(0.0, abs=1e-6)

    def test_analysis_outputs(self):
        result = compute_flip_metrics(self._inputs())
        assert len(result["profit_curve"]) == 31
        labels = [row["label"] for row in result["sensitivity"]]
        assert labels == ["ARV", "Rehab Cost", "Hold Time (mo)", "Interest Rate"]
        arv = result["sensitivity"][0]
        assert arv["delta_up"] > 0
        assert arv["delta_down"] > 0

    def test_amortized_loan_leaves_lower_payoff(self):
        io = compute_flip_metrics(self._inputs(), include_analysis=False)
        amortized = compute_flip_metrics(
            self._inputs(interest_only=False), include_analysis=False
        )
        assert amortized["payoff_balance"] < io["loan_amount"]
        assert amortized["holding_costs"] > io["holding_costs"]
        assert "profit_curve" not in amortized

    def test_zero_timeline(self):
        result = compute_flip_metrics(self._inputs(timeline_months=0))
        assert result["annualized_roi"] == 0.0


class TestMonteCarlo:
    def test_generator_is_deterministic(self):
        a = LinearCongruentialGenerator(7)
        b = LinearCongruentialGenerator(7)
        draws = [a() for _ in range(5)]
        assert draws == [b() for _ in range(5)]
        assert all(0.0 <= d <= 1.0 for d in draws)

    def test_zero_seed_uses_default(self):
        zero = LinearCongruentialGenerator(0)
        default = LinearCongruentialGenerator(DEFAULT_SEED)
        assert [zero() for _ in range(5)] == [default() for _ in range(5)]

    def test_single_run_bands_collapse(self):
        paths = simulate_value_paths(250000, 12, 0.004, 0.03, 1, seed=987654321)
        bands = percentile_bands(paths)
        assert bands["p5"] == bands["p50"] == bands["p95"] == paths[0]

    def test_percentile_bands_are_ordered(self):
        paths = simulate_value_paths(100000, 24, 0.003, 0.02, 200, seed=1)
        bands = percentile_bands(paths)
        for lo, mid, hi in zip(bands["p5"], bands["p50"], bands["p95"]):
            assert lo <= mid <= hi

    def test_uplift_applied(self):
        flat = simulate_value_paths(100000, 3, 0.0, 0.0, 1)
        lifted = simulate_value_paths(100000, 3, 0.0, 0.0, 1, uplift_by_month={1: 1.1})
        assert flat[0] == [100000, 100000, 100000]
        assert lifted[0][2] == pytest.approx(110000)


class TestEquityGrowth:
    """Test equity growth projection."""

    def _inputs(self, **overrides):
        values = dict(
            start_date="2025-01-01",
            projection_horizon_years=10,
            home_price=400000,
            down_payment=20000,
            mortgage_rate=6,
            appreciation=5,
            pmi_enabled=True,
            pmi_percent=0.005,
            monte_carlo_runs=200,
        )
        values.update(overrides)
        return EquityGrowthInputs(**values)

    def test_equity_identity(self):
        result = calculate_equity_growth(self._inputs())
        assert len(result["equity_values"]) == 120
        for value, balance, equity in zip(
            result["property_values"], result["loan_balances"], result["equity_values"]
        ):
            assert equity == pytest.approx(value - balance)

    def test_pmi_stops_and_never_resumes(self):
        result = calculate_equity_growth(self._inputs())
        end = result["pmi_end_month"]
        assert end is not None
        pmi = [row["pmi"] for row in result["monthly_table"]]
        assert all(p > 0 for p in pmi[:end])
        assert all(p == 0 for p in pmi[end:])
        assert [e["type"] for e in result["event_log"]].count("pmi_end") == 1

    def test_pmi_stays_off_when_ltv_rises_again(self):
        schedule = PMISchedule(annual_rate=0.006, stop_ltv=0.8)
        charges = [
            schedule.charge(month, 300000, ltv)
            for month, ltv in enumerate([0.9, 0.79, 0.85, 0.95])
        ]
        assert charges == [pytest.approx(150), 0.0, 0.0, 0.0]
        assert schedule.end_month == 1

    def test_pmi_disabled_never_charges(self):
        schedule = PMISchedule(annual_rate=0.006, stop_ltv=0.8, enabled=False)
        assert schedule.charge(0, 300000, 0.95) == 0.0
        assert schedule.end_month is None

    def test_renovation_raises_value_and_logs_event(self):
        plain = calculate_equity_growth(self._inputs())
        renovated = calculate_equity_growth(
            self._inputs(reno_events=[{"date": "2026-06-01", "cost": 25000, "uplift": 10}])
        )
        assert renovated["property_values"][-1] == pytest.approx(
            plain["property_values"][-1] * 1.1
        )
        reno = [e for e in renovated["event_log"] if e["type"] == "reno"]
        assert reno == [{"type": "reno", "month": 17, "date": "2026-06-01", "cost": 25000.0}]
        assert renovated["cost_breakdown"]["total_reno_costs"] == 25000

    def test_equity_sources_labels(self):
        result = calculate_equity_growth(self._inputs())
        labels = [s["label"] for s in result["equity_sources"]]
        assert labels[0] == "Down Payment"
        assert labels[-1] == "Net After-Sale Equity"
        assert result["equity_sources"][-1]["amount"] == pytest.approx(result["net_after_sale"])

    def test_real_equity_below_nominal(self):
        result = calculate_equity_growth(self._inputs(inflation=3))
        assert result["equity_at_horizon_real"] < result["equity_at_horizon"]

    def test_monte_carlo_deterministic_and_ordered(self):
        inputs = self._inputs(projection_horizon_years=2)
        first = monte_carlo_equity(inputs)
        second = monte_carlo_equity(inputs)
        assert first == second
        assert len(first["p50"]) == 24
        for lo, mid, hi in zip(first["p5"], first["p50"], first["p95"]):
            assert lo <= mid <= hi

    def test_monte_carlo_single_run(self):
        bands = monte_carlo_equity(
            self._inputs(projection_horizon_years=1, monte_carlo_runs=1, monte_carlo_seed=31337)
        )
        assert bands["p5"] == bands["p50"] == bands["p95"]

    def test_monte_carlo_only_when_enabled(self):
        off = calculate_equity_growth_with_monte_carlo(self._inputs(projection_horizon_years=1))
        on = calculate_equity_growth_with_monte_carlo(
            self._inputs(projection_horizon_years=1, monte_carlo_enabled=True)
        )
        assert "mc_percentiles" not in off
        assert set(on["mc_percentiles"]) == {"p5", "p50", "p95"}


class TestPortfolio:
    """Test portfolio analysis."""

    def _portfolio(self):
        return Portfolio(
            properties=[
                {
                    "name": "Duplex",
                    "type": "residential",
                    "purchase_price": 300000,
                    "current_value": 320000,
                    "loan_amount": 240000,
                    "interest_rate": 6,
                    "rent": 2800,
                    "vacancy_rate": 5,
                    "operating_expenses": {"property_tax": 1, "insurance": 1500},
                },
                Property(
                    name="Cabin",
                    type="airbnb",
                    purchase_price=250000,
                    loan_amount=150000,
                    interest_rate=7,
                    nightly_rate=180,
                    occupancy_rate=55,
                ),
            ],
            projection_horizon_years=5,
        )

    def test_equity_identity(self):
        result = analyze_portfolio(self._portfolio())
        debt = sum(p["debt"] for p in result["properties"])
        assert result["total_equity"] == pytest.approx(result["total_portfolio_value"] - debt)

    def test_single_property_equity(self):
        result = analyze_portfolio(
            Portfolio(
                properties=[
                    {"purchase_price": 300000, "current_value": 340000, "loan_balance": 225000}
                ]
            )
        )
        assert result["total_equity"] == pytest.approx(340000 - 225000)
        assert result["total_portfolio_value"] == pytest.approx(340000)

    def test_cash_flows_and_irr(self):
        result = analyze_portfolio(self._portfolio())
        assert len(result["cash_flows"]) == 6
        assert result["cash_flows"][0] == pytest.approx(-(60000 + 100000))
        assert result["irr_converged"] is True

    def test_risk_scenarios(self):
        result = analyze_portfolio(self._portfolio())
        scenarios = {row["label"]: row for row in result["risk_sensitivity"]}
        assert scenarios["Property Value -20%"]["impact"] == pytest.approx(
            -0.2 * result["total_portfolio_value"]
        )
        assert scenarios["Interest Rate +2%"]["cash_flow_impact"] < 0
        assert scenarios["Rent -10%"]["impact"] == 0

    def test_type_allocation(self):
        result = analyze_portfolio(self._portfolio())
        assert result["type_allocation"] == {"residential": 320000, "airbnb": 250000}

    def test_empty_portfolio_raises(self):
        with pytest.raises(ValueError):
            analyze_portfolio(Portfolio(properties=[]))


class TestHoldingCost:
    def test_monthly_cost(self):
        result = calculate_holding_costs(
            HoldingCostInputs(property_tax=3600, insurance=1200, hoa_fee=100)
        )
        assert result["monthly_holding_cost"] == pytest.approx(500)
        assert result["cost_per_sq_ft"] is None
        assert result["annual_holding_cost"] == pytest.approx(6000)

    def test_vacancy_sensitivity(self):
        result = calculate_holding_costs(
            HoldingCostInputs(property_tax=3600, rental_income=1000, size_sq_ft=1500)
        )
        rows = {row["vacancy_rate"]: row["monthly_holding_cost"] for row in result["vacancy_sensitivity"]}
        assert rows[100.0] - rows[0.0] == pytest.approx(1000)
        assert result["cost_per_sq_ft"] == pytest.approx(result["annual_holding_cost"] / 1500)

    def test_rate_sensitivity_ignores_stated_payment(self):
        result = calculate_holding_costs(
            HoldingCostInputs(loan_amount=200000, mortgage_rate=6, monthly_pi=999)
        )
        costs = [row["monthly_holding_cost"] for row in result["interest_rate_sensitivity"]]
        assert costs == sorted(costs)
        assert result["breakdown"]["mortgage"] == 999


class TestRenovation:
    def test_appraisal_method(self):
        result = calculate_renovation_roi(
            RenovationInputs(current_value=300000, renovation_costs=30000, appraisal_uplift_percent=15)
        )
        assert result["value_increase"] == pytest.approx(45000)
        assert result["equity_created"] == pytest.approx(15000)
        assert result["roi"] == pytest.approx(50.0)
        assert result["valuation_methods"]["used"] == "appraisal"

    def test_income_method_and_items(self):
        result = calculate_renovation_roi(
            RenovationInputs(
                current_value=300000,
                current_rent=2000,
                rent_increase_percent=10,
                cap_rate=6,
                reno_events=[{"label": "Kitchen", "cost": 20000}, {"label": "Bath", "cost": 10000}],
            )
        )
        assert result["renovation_cost"] == 30000
        assert result["valuation_methods"]["income"] == pytest.approx(2400 / 0.06)
        assert result["valuation_methods"]["used"] == "income"
        assert result["payback_years"] == pytest.approx(30000 / 2400)

    def test_loss_has_no_tax(self):
        result = calculate_renovation_roi(
            RenovationInputs(current_value=300000, renovation_costs=50000, appraisal_uplift_percent=5, tax_rate=20)
        )
        assert result["capital_gains_tax"] == 0.0


class TestBuyRent:
    def _inputs(self, **overrides):
        values = dict(
            home_price=400000,
            down_payment=80000,
            interest_rate=6,
            loan_term=30,
            monthly_rent=2200,
            annual_home_appreciation=3,
            annual_investment_return=5,
            time_horizon_years=10,
        )
        values.update(overrides)
        return BuyRentInputs(**values)

    def test_principal_repaid_matches_schedule(self):
        result = calculate_buy_rent(self._inputs())
        remaining = calculate_remaining_balance(320000, 6, 360, 120)
        assert result["principal_repaid"] == pytest.approx(320000 - remaining)
        assert len(result["yearly"]) == 10

    def test_never_breaks_even(self):
        result = calculate_buy_rent(
            self._inputs(annual_home_appreciation=0, annual_investment_return=10)
        )
        assert result["break_even_year"] is None
        assert result["net_worth_delta"] < 0
