"""
Tests for the calculator API endpoints.
"""

import pytest

from recalc.api import investments
from recalc.api.common import CALCULATION_FAILED
from recalc.config import Settings


class TestHealth:
    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"


class TestFinancingEndpoints:
    """Mortgage, amortization and IRR endpoints."""

    def test_mortgage_accepts_form_strings(self, client):
        response = client.post(
            "/api/calculate/mortgage",
            json={
                "home_price": "350,000",
                "down_payment": "70000",
                "loan_term_years": "30",
                "interest_rate": "6.5",
                "pmi_percent": "0.5",
                "monthly_hoa": "",
            },
        )
        assert response.status_code == 200
        data = response.json()
        assert data["loan_amount"] == 280000
        assert abs(data["monthly_principal_and_interest"] - 1769.79) < 0.05
        assert data["monthly_hoa"] == 0

    def test_mortgage_zero_term_is_bad_request(self, client):
        response = client.post(
            "/api/calculate/mortgage",
            json={"home_price": 300000, "loan_term_years": 0},
        )
        assert response.status_code == 400
        assert "term" in response.json()["detail"]

    def test_amortization(self, client):
        response = client.post(
            "/api/calculate/amortization",
            json={
                "principal": 100000,
                "annual_rate": 6,
                "term_months": 120,
                "extra_payments": [{"month_index": 0, "amount": 5000}],
            },
        )
        assert response.status_code == 200
        data = response.json()
        assert len(data["schedule"]) == 120
        assert data["schedule"][0]["extra_paid"] == 5000
        assert data["total_principal"] == pytest.approx(100000, abs=0.01)

    def test_amortization_negative_extra_monthly_is_ignored(self, client):
        response = client.post(
            "/api/calculate/amortization",
            json={
                "principal": 100000,
                "annual_rate": 6,
                "term_months": 120,
                "extra_monthly": -5000,
            },
        )
        assert response.status_code == 200
        data = response.json()
        assert data["total_principal"] == pytest.approx(100000, abs=0.01)
        assert all(row["closing_balance"] >= 0 for row in data["schedule"])

    def test_amortization_impossible_rate_is_bad_request(self, client):
        response = client.post(
            "/api/calculate/amortization",
            json={"principal": 100000, "annual_rate": -1200, "term_months": 360},
        )
        assert response.status_code == 400
        assert "-1200%" in response.json()["detail"]

    def test_irr(self, client):
        response = client.post("/api/calculate/irr", json={"cash_flows": [-100, 110]})
        assert response.status_code == 200
        data = response.json()
        assert abs(data["irr"] - 0.10) < 0.001
        assert data["converged"] is True
        assert data["multiple"] == pytest.approx(1.1)
        assert data["npv_at_10_percent"] == pytest.approx(0.0, abs=1e-6)

    def test_irr_without_sign_change_reports_not_converged(self, client):
        response = client.post("/api/calculate/irr", json={"cash_flows": [100, 100]})
        assert response.status_code == 200
        assert response.json()["converged"] is False


class TestIncomeEndpoints:
    """Break-even, cap rate, ROI and rental yield endpoints."""

    def test_break_even(self, client):
        response = client.post(
            "/api/calculate/break-even",
            json={
                "monthly_rent": 2500,
                "property_tax": 250,
                "loan_amount": 200000,
                "interest_rate": 6,
                "break_even_mode": "DSCR",
                "target_dscr": 1.2,
            },
        )
        assert response.status_code == 200
        assert response.json()["mode"] == "DSCR"

    def test_break_even_rejects_percentages_over_100(self, client):
        response = client.post(
            "/api/calculate/break-even",
            json={
                "vacancy_percent": 50,
                "management_fee_percent": 40,
                "maintenance_reserve_percent": 20,
            },
        )
        assert response.status_code == 422

    def test_cap_rate(self, client):
        response = client.post(
            "/api/calculate/cap-rate",
            json={"price": 500000, "rent": 4000, "taxes": 6000, "insurance": 2000},
        )
        assert response.status_code == 200
        assert response.json()["going_in_cap_rate"] == pytest.approx(8.0)

    def test_roi(self, client):
        response = client.post(
            "/api/calculate/roi",
            json={"price": 300000, "rent": 2000, "appreciation_rate": 3, "holding_period": 5},
        )
        assert response.status_code == 200
        assert response.json()["net_annual_income"] == 24000

    def test_roi_detailed(self, client):
        response = client.post(
            "/api/calculate/roi/detailed",
            json={"price": 400000, "rent": 3000, "down_payment": 80000, "interest_rate": 6},
        )
        assert response.status_code == 200
        data = response.json()
        assert data["loan_amount"] == 320000
        assert len(data["projections"]) == 5

    def test_rental_yield(self, client):
        response = client.post(
            "/api/calculate/rental-yield",
            json={"property_price": 300000, "monthly_rent": 2000},
        )
        assert response.status_code == 200
        assert response.json()["gross_yield"] == pytest.approx(8.0)

    def test_rental_yield_requires_price(self, client):
        response = client.post(
            "/api/calculate/rental-yield",
            json={"property_price": 0, "monthly_rent": 2000},
        )
        assert response.status_code == 400
        assert "positive" in response.json()["detail"]


class TestInvestmentEndpoints:
    """Flip, equity growth, portfolio, holding cost, renovation and buy-rent."""

    def test_flip(self, client):
        response = client.post(
            "/api/calculate/flip",
            json={
                "purchase_price": 200000,
                "cash_percent": 20,
                "interest_rate": 8,
                "timeline_months": 6,
                "rehab_budget": 40000,
                "arv": 320000,
            },
        )
        assert response.status_code == 200
        data = response.json()
        assert data["payoff_balance"] == pytest.approx(166400)
        assert len(data["profit_curve"]) == 31

    def test_unexpected_failure_asks_to_check_inputs(self, client, monkeypatch):
        def boom(inputs):
            raise ZeroDivisionError("boom")

        monkeypatch.setattr(investments, "compute_flip_metrics", boom)
        response = client.post("/api/calculate/flip", json={})
        assert response.status_code == 422
        assert response.json()["detail"] == CALCULATION_FAILED

    def test_equity_growth_with_monte_carlo(self, client):
        payload = {
            "start_date": "2025-01-01",
            "projection_horizon_years": 1,
            "home_price": 400000,
            "down_payment": 80000,
            "mortgage_rate": 6,
            "monte_carlo_enabled": True,
            "monte_carlo_runs": 100,
        }
        first = client.post("/api/calculate/equity-growth", json=payload)
        second = client.post("/api/calculate/equity-growth", json=payload)
        assert first.status_code == 200
        data = first.json()
        assert len(data["monthly_table"]) == 12
        assert data["currency"] == "USD"
        assert data["mc_percentiles"] == second.json()["mc_percentiles"]

    def test_equity_growth_horizon_is_capped(self, client, monkeypatch):
        monkeypatch.setattr(
            investments, "get_settings", lambda: Settings(monte_carlo_max_horizon_years=2)
        )
        response = client.post(
            "/api/calculate/equity-growth",
            json={"projection_horizon_years": 100, "home_price": 300000, "mortgage_rate": 6},
        )
        assert response.status_code == 200
        assert len(response.json()["monthly_table"]) == 24

    def test_monte_carlo_bands(self, client):
        response = client.post(
            "/api/calculate/equity-growth/monte-carlo",
            json={"projection_horizon_years": 1, "home_price": 300000, "monte_carlo_runs": 50},
        )
        assert response.status_code == 200
        bands = response.json()
        assert set(bands) == {"p5", "p50", "p95"}
        assert len(bands["p50"]) == 12

    def test_portfolio(self, client):
        response = client.post(
            "/api/calculate/portfolio",
            json={
                "properties": [
                    {
                        "name": "Duplex",
                        "purchase_price": 300000,
                        "loan_amount": 240000,
                        "interest_rate": 6,
                        "rent": "2,800",
                        "operating_expenses": {"insurance": 1500},
                    }
                ],
                "currency": "EUR",
            },
        )
        assert response.status_code == 200
        data = response.json()
        assert data["total_equity"] == pytest.approx(60000)
        assert data["currency"] == "EUR"
        assert len(data["risk_sensitivity"]) == 4

    def test_empty_portfolio_is_bad_request(self, client):
        response = client.post("/api/calculate/portfolio", json={"properties": []})
        assert response.status_code == 400

    def test_holding_cost(self, client):
        response = client.post(
            "/api/calculate/holding-cost",
            json={"property_tax": 3600, "insurance": 1200, "hoa_fee": 100},
        )
        assert response.status_code == 200
        assert response.json()["monthly_holding_cost"] == pytest.approx(500)

    def test_renovation(self, client):
        response = client.post(
            "/api/calculate/renovation",
            json={"current_value": 300000, "renovation_costs": 30000, "appraisal_uplift_percent": 15},
        )
        assert response.status_code == 200
        assert response.json()["roi"] == pytest.approx(50.0)

    def test_buy_rent(self, client):
        response = client.post(
            "/api/calculate/buy-rent",
            json={
                "home_price": 400000,
                "down_payment": 80000,
                "interest_rate": 6,
                "monthly_rent": 2200,
                "time_horizon_years": 5,
            },
        )
        assert response.status_code == 200
        data = response.json()
        assert len(data["yearly"]) == 5
        assert data["currency"] == "USD"
