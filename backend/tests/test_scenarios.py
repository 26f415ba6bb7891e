"""Tests for the cash flow scenario engine."""
import pytest

from fundrisk.engine.scenarios import apply_scenario, get_scenario, list_scenario_names, run_scenarios
from fundrisk.models.cashflow import CashFlowAssumptions


def _make_assumptions(**overrides) -> CashFlowAssumptions:
    defaults = dict(
        fund_size=20_000_000,
        current_cash=2_000_000,
        expected_principal_repayments=6_000_000,
        expected_interest_collections=2_400_000,
        planned_originations=4_000_000,
        monthly_operating_expenses=120_000,
        expected_contributions=1_000_000,
        planned_distributions=800_000,
    )
    defaults.update(overrides)
    return CashFlowAssumptions(**defaults)


def test_default_scenarios():
    assert list_scenario_names() == ["base", "optimistic", "conservative", "stress"]


def test_unknown_scenario_falls_back_to_base():
    assert get_scenario("nonexistent").name == "base"


def test_scenario_ordering():
    result = run_scenarios(_make_assumptions())
    final = {name: o.final_cash for name, o in result.scenarios.items()}
    assert final["optimistic"] >= final["base"] >= final["conservative"] >= final["stress"]


def test_base_matches_unscaled_projection():
    from fundrisk.engine.cash_flow import project_cash_flows

    assumptions = _make_assumptions()
    result = run_scenarios(assumptions)
    base = project_cash_flows(assumptions)
    assert result.scenarios["base"].final_cash == base[-1].closing_cash


def test_expected_final_cash_is_probability_weighted():
    result = run_scenarios(_make_assumptions())
    expected = sum(o.final_cash * o.probability for o in result.scenarios.values())
    assert result.expected_final_cash == pytest.approx(expected, abs=0.01)


def test_liquidity_safe_uses_stress_minimum():
    assert run_scenarios(_make_assumptions()).liquidity_safe
    thin = _make_assumptions(current_cash=0, expected_contributions=0)
    result = run_scenarios(thin)
    assert result.scenarios["stress"].min_cash < 0
    assert not result.liquidity_safe


def test_apply_scenario_leaves_commitments_unscaled():
    assumptions = _make_assumptions()
    stressed = apply_scenario(assumptions, get_scenario("stress"))
    assert stressed.expected_principal_repayments == pytest.approx(4_200_000)
    assert stressed.planned_originations == pytest.approx(4_800_000)
    assert stressed.monthly_operating_expenses == pytest.approx(144_000)
    assert stressed.expected_contributions == assumptions.expected_contributions
    assert stressed.planned_distributions == assumptions.planned_distributions
    # the input is not mutated
    assert assumptions.planned_originations == 4_000_000


def test_negative_horizon_still_reports_every_scenario():
    result = run_scenarios(_make_assumptions(), months=-1)
    for outcome in result.scenarios.values():
        assert len(outcome.projections) == 1
        assert outcome.final_cash == outcome.min_cash
