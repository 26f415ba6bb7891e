"""Tests for portfolio risk aggregation."""
from datetime import date

import pytest

from fundrisk.engine.loan_risk import assess_loan
from fundrisk.engine.portfolio_risk import (
    aggregate,
    analyze_concentration,
    credit_risk_score,
    liquidity_risk_score,
    market_risk_score,
    stress_test,
)
from fundrisk.models.loan import LoanRecord
from fundrisk.models.parameters import PortfolioParameters
from fundrisk.models.risk import MarketContext, PortfolioSnapshot

AS_OF = date(2026, 1, 15)


def _make_snapshot(**overrides) -> PortfolioSnapshot:
    defaults = dict(
        total_value=10_000_000,
        active_loans=40,
        default_rate=2.5,
        delinquency_rate=5.0,
        largest_exposure=8.0,
        top_sector_concentration=22.0,
        geographic_concentration=30.0,
        liquidity_ratio=18.0,
        cash_and_equivalents=1_500_000,
        weighted_average_maturity=30.0,
    )
    defaults.update(overrides)
    return PortfolioSnapshot(**defaults)


def _make_market(**overrides) -> MarketContext:
    defaults = dict(usd_exposure=80.0, avg_funding_maturity=60.0)
    defaults.update(overrides)
    return MarketContext(**defaults)


def test_moderate_portfolio():
    result = aggregate(_make_snapshot(), _make_market(), as_of=AS_OF)
    scores = result.category_scores
    assert scores.credit == 3
    assert scores.concentration == 2.0
    assert scores.liquidity == 3
    assert scores.market == 2
    assert scores.operational == pytest.approx(2.33)
    assert result.overall_score == pytest.approx(51.3)
    assert result.overall_level == "Medium"
    assert result.expected_loss == pytest.approx(112_500.0)
    assert result.cash_ratio == pytest.approx(15.0)
    assert result.maturity_mismatch_months == pytest.approx(30.0)
    assert result.duration_years == pytest.approx(2.5)
    assert result.early_warnings.warning_count == 0
    assert [r.category for r in result.recommendations] == ["Monitoring"]
    assert result.defaults_applied == []


def test_stress_test_incremental_capital_impact():
    result = stress_test(PortfolioParameters(), 10_000_000, 2.5, AS_OF)
    by_name = {s.name: s for s in result.scenarios}
    assert result.base_expected_loss == pytest.approx(112_500.0)
    assert result.capital_buffer == pytest.approx(2_000_000.0)
    assert by_name["base"].capital_impact == 0
    assert by_name["adverse"].projected_loss == pytest.approx(266_250.0)
    assert by_name["adverse"].capital_impact == pytest.approx(153_750.0)
    assert by_name["severely_adverse"].capital_impact == pytest.approx(348_750.0)
    assert result.passes
    assert result.required_actions == []
    assert result.next_test_due == date(2026, 4, 15)


def test_stress_test_fails_for_heavy_defaults():
    result = stress_test(PortfolioParameters(), 10_000_000, 20.0, AS_OF)
    assert not result.passes
    assert "Increase capital buffer" in result.required_actions


def test_stressed_default_rate_capped_at_100_percent():
    result = stress_test(PortfolioParameters(), 1_000_000, 60.0, AS_OF)
    assert max(s.default_rate for s in result.scenarios) == 100.0


def test_early_warnings_and_alerts():
    snapshot = _make_snapshot(
        default_rate=4.0, delinquency_rate=9.0, largest_exposure=18.0, liquidity_ratio=12.0
    )
    result = aggregate(snapshot, _make_market(), as_of=AS_OF)
    report = result.early_warnings
    assert report.warning_count == 4
    # delinquency warning is Medium severity, the other three are High
    assert report.critical_count == 3
    assert report.escalate
    assert report.alerts[0].alert.startswith("URGENT:")


def test_missing_inputs_default_and_are_recorded():
    result = aggregate(PortfolioSnapshot(total_value=1_000_000), as_of=AS_OF)
    assert "default_rate" in result.defaults_applied
    assert "liquidity_ratio" in result.defaults_applied
    assert "usd_exposure" in result.defaults_applied
    assert result.cash_ratio is None
    # WAM 24 vs funding 60
    assert result.maturity_mismatch_months == pytest.approx(36.0)


def test_default_market_and_params():
    result = aggregate(PortfolioSnapshot(total_value=1_000_000), as_of=AS_OF)
    assert 0 <= result.overall_score <= 100
    assert result.stress_test.next_test_due == date(2026, 4, 15)


def test_as_of_is_keyword_only():
    with pytest.raises(TypeError):
        aggregate(_make_snapshot(), _make_market(), None, None, AS_OF)


def test_zero_value_portfolio_is_degenerate_not_error():
    result = aggregate(PortfolioSnapshot(total_value=0), _make_market(), as_of=AS_OF)
    assert result.expected_loss == 0
    assert result.cash_ratio is None
    assert result.stress_test.passes


@pytest.mark.parametrize(
    "default_rate,delinquency_rate,expected",
    [(0.5, 1.0, 1), (1.5, 2.0, 2), (2.5, 4.0, 3), (3.5, 4.0, 4), (6.0, 4.0, 5), (0.0, 16.0, 5)],
)
def test_credit_risk_score(default_rate, delinquency_rate, expected):
    assert credit_risk_score(default_rate, delinquency_rate) == expected


def test_liquidity_and_market_scores():
    assert liquidity_risk_score(5) == 5
    assert liquidity_risk_score(30) == 1
    assert market_risk_score(95, 40) == 3
    assert market_risk_score(50, 12) == 1


def test_concentration_levels():
    analysis = analyze_concentration(PortfolioParameters(), 16.0, 31.0, 55.0)
    assert analysis.single_borrower.risk_level == "High"
    assert analysis.single_borrower.exceeds_limit
    assert analysis.overall_score == 9
    assert analysis.overall_level == "High"


def test_high_risk_portfolio_recommendations():
    snapshot = _make_snapshot(
        default_rate=8.0, delinquency_rate=20.0, largest_exposure=20.0,
        top_sector_concentration=35.0, geographic_concentration=60.0,
        liquidity_ratio=5.0, weighted_average_maturity=48.0,
    )
    result = aggregate(snapshot, _make_market(usd_exposure=95.0), as_of=AS_OF)
    assert result.overall_level == "High"
    categories = {r.category for r in result.recommendations}
    assert {"Critical", "Credit Risk", "Concentration Risk", "Liquidity Risk", "Market Risk"} <= categories


def test_modeled_losses_from_loan_assessments():
    loans = [
        LoanRecord(loan_id="A", principal=100_000, outstanding_balance=100_000),
        LoanRecord(loan_id="B", principal=300_000, outstanding_balance=300_000),
    ]
    assessments = [assess_loan(l, as_of=AS_OF) for l in loans]
    result = aggregate(
        _make_snapshot(), _make_market(), loan_assessments=assessments, as_of=AS_OF
    )
    modeled = result.modeled_losses
    assert modeled.loan_count == 2
    assert modeled.total_exposure == pytest.approx(400_000)
    assert modeled.expected_loss == pytest.approx(sum(a.expected_loss for a in assessments))
    assert modeled.weighted_pd == pytest.approx(0.02)
    assert modeled.rating_distribution == {"AA": 2}
