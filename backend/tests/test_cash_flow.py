"""Tests for the monthly cash flow forecaster and liquidity analysis."""
import pytest

from fundrisk.engine.cash_flow import (
    analyze_liquidity,
    calendar_month_for,
    cash_flow_volatility,
    contribution_for_month,
    project_cash_flows,
)
from fundrisk.models.cashflow import CashFlowAssumptions
from fundrisk.models.parameters import CashFlowParameters


def _make_assumptions(**overrides) -> CashFlowAssumptions:
    defaults = dict(
        fund_size=10_000_000,
        current_cash=1_000_000,
        expected_principal_repayments=1_200_000,
        expected_interest_collections=600_000,
        planned_originations=1_200_000,
        monthly_operating_expenses=50_000,
        expected_contributions=0,
        planned_distributions=0,
        start_month=2,
    )
    defaults.update(overrides)
    return CashFlowAssumptions(**defaults)


def test_flat_path_when_nothing_moves():
    assumptions = CashFlowAssumptions(fund_size=10_000_000, current_cash=1_500_000)
    projections = project_cash_flows(assumptions)
    assert len(projections) == 12
    for p in projections:
        assert p.opening_cash == 1_500_000
        assert p.closing_cash == 1_500_000
        assert p.net_cash_flow == 0
        assert p.cash_ratio == pytest.approx(15.0)
        assert p.operating_days_coverage is None


def test_months_chain():
    projections = project_cash_flows(_make_assumptions())
    assert projections[0].opening_cash == 1_000_000
    for prev, cur in zip(projections, projections[1:]):
        assert cur.opening_cash == prev.closing_cash
    for p in projections:
        assert p.closing_cash == p.opening_cash + p.net_cash_flow


@pytest.mark.parametrize("current_cash", [12_345.67, 98_765.43, 1_000_000.01])
@pytest.mark.parametrize("opex", [1_234.56, 7_777.77, 50_000.99])
def test_closing_is_exactly_opening_plus_net_with_cents(current_cash, opex):
    projections = project_cash_flows(
        _make_assumptions(current_cash=current_cash, monthly_operating_expenses=opex)
    )
    for prev, cur in zip(projections, projections[1:]):
        assert cur.opening_cash == prev.closing_cash
    for p in projections:
        assert p.closing_cash == p.opening_cash + p.net_cash_flow


def test_negative_horizon_clamped_to_one_month():
    projections = project_cash_flows(_make_assumptions(), months=-1)
    assert len(projections) == 1
    assert projections[0].month == 1


def test_seasonality_applied_by_calendar_month():
    projections = project_cash_flows(_make_assumptions())
    february, april = projections[0], projections[2]
    assert february.calendar_month == 2
    assert february.inflows.principal == pytest.approx(100_000)
    assert february.net_cash_flow == pytest.approx(0)
    assert april.calendar_month == 4
    # collections x0.8, originations x0.7, expenses x1.1
    assert april.inflows.total == pytest.approx(120_000)
    assert april.outflows.total == pytest.approx(125_000)
    assert april.net_cash_flow == pytest.approx(-5_000)


def test_contribution_schedule_twelve_months():
    cfg = CashFlowParameters()
    amounts = [contribution_for_month(cfg, 1_200_000, m, 12) for m in range(1, 13)]
    assert amounts[0] == pytest.approx(160_000)
    assert amounts[3] == pytest.approx(120_000)
    assert amounts[6] == pytest.approx(60_000)
    assert sum(amounts) == pytest.approx(1_200_000)


def test_contribution_tranche_outside_horizon_never_lands():
    cfg = CashFlowParameters()
    amounts = [contribution_for_month(cfg, 1_000_000, m, 6) for m in range(1, 7)]
    assert sum(amounts) == pytest.approx(700_000)


def test_distributions_on_quarter_ends():
    assumptions = CashFlowAssumptions(current_cash=1_000_000, planned_distributions=400_000)
    projections = project_cash_flows(assumptions)
    paid = {p.calendar_month: p.outflows.distributions for p in projections if p.outflows.distributions}
    assert paid == {3: 100_000, 6: 100_000, 9: 100_000, 12: 100_000}
    assert projections[-1].closing_cash == pytest.approx(600_000)


def test_horizon_override_and_wraparound():
    projections = project_cash_flows(_make_assumptions(start_month=11), months=4)
    assert [p.calendar_month for p in projections] == [11, 12, 1, 2]
    assert calendar_month_for(12, 1) == 12


def test_missing_assumptions_recorded():
    from fundrisk.engine.inputs import InputResolver

    resolver = InputResolver("cash_flow")
    project_cash_flows(CashFlowAssumptions(), resolver=resolver)
    assert "current_cash" in resolver.defaults_applied
    assert "fund_size" in resolver.defaults_applied


def test_volatility():
    flat = project_cash_flows(CashFlowAssumptions(current_cash=100))
    assert cash_flow_volatility(flat) == 0.0
    assert cash_flow_volatility(flat[:1]) == 0.0
    seasonal = project_cash_flows(_make_assumptions(planned_originations=0, start_month=1))
    assert cash_flow_volatility(seasonal) > 0


class TestLiquidityAnalysis:
    def test_healthy_fund(self):
        assumptions = _make_assumptions(current_cash=2_000_000)
        result = analyze_liquidity(assumptions, project_cash_flows(assumptions))
        # 20% cash ratio, 40 months of expenses
        assert result.current.cash_ratio == pytest.approx(20.0)
        assert result.current.rating == "Good"
        assert result.current.operating_days_covered == pytest.approx(1200.0)
        assert not result.risk_indicators.cash_shortfall_risk
        assert result.risk_indicators.funding_gaps == []

    def test_shortfall_is_critical(self):
        assumptions = _make_assumptions(current_cash=10_000, monthly_operating_expenses=100_000)
        result = analyze_liquidity(assumptions, project_cash_flows(assumptions))
        assert result.overall_rating == "Critical"
        assert result.risk_indicators.cash_shortfall_risk
        assert result.risk_indicators.funding_gaps
        categories = [r.category for r in result.recommendations]
        assert "Immediate Action" in categories
        assert "Liquidity Planning" in categories
        assert any(r.category == "Liquidity Risk" for r in result.risks)

    def test_contribution_dependence_flagged(self):
        assumptions = _make_assumptions(expected_contributions=5_000_000)
        result = analyze_liquidity(assumptions, project_cash_flows(assumptions))
        assert result.risks[0].category == "Funding Concentration"

    def test_zero_fund_size_has_no_ratio(self):
        assumptions = _make_assumptions(fund_size=0)
        result = analyze_liquidity(assumptions, project_cash_flows(assumptions))
        assert result.current.cash_ratio is None
        assert result.projected.months_below_target == 0
