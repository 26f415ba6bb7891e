"""Invariant tests — properties that must hold across a range of inputs.

Covers score and probability bounds, monotonicity in delinquency and LTV,
idempotence and the no-override selection property.
"""
from datetime import date

import pytest

from fundrisk.engine.credit_scoring import score_credit
from fundrisk.engine.loan_risk import assess_loan
from fundrisk.engine.portfolio_risk import aggregate
from fundrisk.engine.recovery import PolicyFactors, rank_options, select
from fundrisk.models.loan import (
    BorrowerProfile,
    BorrowerType,
    CollateralRecord,
    CollateralType,
    CooperationLevel,
    LoanRecord,
    LoanRequest,
    PaymentHistorySummary,
)
from fundrisk.models.recovery import RecoveryCase
from fundrisk.models.risk import MarketContext, PortfolioSnapshot

AS_OF = date(2026, 3, 31)

_BORROWERS = [
    BorrowerProfile(),
    BorrowerProfile(years_operating=0.5, industry="mining", annual_revenue=10_000,
                    monthly_cash_flow=100),
    BorrowerProfile(years_operating=30, industry="government", annual_revenue=50_000_000,
                    monthly_cash_flow=5_000_000),
]
_REQUESTS = [
    LoanRequest(),
    LoanRequest(amount=5_000_000, collateral_type=CollateralType.unsecured),
    LoanRequest(amount=10_000, collateral_type=CollateralType.real_estate),
]


def _make_loan(**overrides) -> LoanRecord:
    defaults = dict(loan_id="INV001", principal=150_000, outstanding_balance=150_000)
    defaults.update(overrides)
    return LoanRecord(**defaults)


# ---------------------------------------------------------------------------
# Credit
# ---------------------------------------------------------------------------


@pytest.mark.parametrize("borrower", _BORROWERS)
@pytest.mark.parametrize("request_", _REQUESTS)
def test_credit_score_bounds(borrower, request_):
    result = score_credit(borrower, request_)
    assert 0 <= result.score <= 100
    for value in result.sub_scores.model_dump().values():
        assert 0 <= value <= 100


def test_credit_score_idempotent():
    a = score_credit(_BORROWERS[1], _REQUESTS[1])
    b = score_credit(_BORROWERS[1], _REQUESTS[1])
    assert a == b


# ---------------------------------------------------------------------------
# Loan risk
# ---------------------------------------------------------------------------


@pytest.mark.parametrize("dpd", [0, 15, 45, 75, 120, 400])
@pytest.mark.parametrize("ctype", list(CollateralType))
@pytest.mark.parametrize("btype", list(BorrowerType))
def test_pd_lgd_bounds(dpd, ctype, btype):
    result = assess_loan(
        _make_loan(days_past_due=dpd),
        CollateralRecord(collateral_type=ctype, loan_to_value=85),
        BorrowerProfile(borrower_type=btype, debt_service_coverage=1.1),
        as_of=AS_OF,
    )
    assert 0 < result.probability_of_default <= 0.95
    assert 0.10 <= result.loss_given_default <= 0.90
    assert result.expected_loss == round(
        result.exposure * result.probability_of_default * result.loss_given_default, 2
    )


def test_pd_non_decreasing_in_days_past_due():
    pds = [
        assess_loan(_make_loan(days_past_due=dpd), as_of=AS_OF).probability_of_default
        for dpd in range(0, 200, 5)
    ]
    assert pds == sorted(pds)


def test_pd_non_decreasing_in_ltv():
    pds = [
        assess_loan(
            _make_loan(), CollateralRecord(loan_to_value=ltv), None, as_of=AS_OF
        ).probability_of_default
        for ltv in range(0, 150, 5)
    ]
    assert pds == sorted(pds)


def test_pd_non_decreasing_in_late_payments():
    pds = [
        assess_loan(
            _make_loan(payment_history=PaymentHistorySummary(late_payments_12m=n)), as_of=AS_OF
        ).probability_of_default
        for n in range(0, 12)
    ]
    assert pds == sorted(pds)


def test_loan_assessment_idempotent():
    loan = _make_loan(days_past_due=40)
    assert assess_loan(loan, as_of=AS_OF) == assess_loan(loan, as_of=AS_OF)


# ---------------------------------------------------------------------------
# Portfolio
# ---------------------------------------------------------------------------


@pytest.mark.parametrize("default_rate", [0, 1, 5, 25, 100])
@pytest.mark.parametrize("liquidity", [0, 12, 50])
def test_portfolio_scores_bounded(default_rate, liquidity):
    result = aggregate(
        PortfolioSnapshot(total_value=5_000_000, default_rate=default_rate,
                          liquidity_ratio=liquidity),
        MarketContext(),
        as_of=AS_OF,
    )
    assert 0 <= result.overall_score <= 100
    for value in result.category_scores.model_dump().values():
        assert 1 <= value <= 5
    assert all(s.capital_impact >= 0 for s in result.stress_test.scenarios)


# ---------------------------------------------------------------------------
# Recovery
# ---------------------------------------------------------------------------


@pytest.mark.parametrize("dpd", [30, 130, 200, 400])
@pytest.mark.parametrize("collateral", [0, 30_000, 150_000])
@pytest.mark.parametrize("cooperation", list(CooperationLevel))
def test_ranking_sorted_and_selection_from_ranking(dpd, collateral, cooperation):
    case = RecoveryCase(
        loan_id="INV", outstanding_balance=100_000, collateral_value=collateral,
        collateral_type=CollateralType.equipment if collateral else CollateralType.unsecured,
        days_past_due=dpd, cooperation_level=cooperation,
    )
    ranked = rank_options(case)
    values = [o.expected_value for o in ranked]
    assert values == sorted(values, reverse=True)
    selection = select(ranked, PolicyFactors.from_case(case))
    assert selection.option in ranked
    if not selection.policy_override:
        assert selection.option is ranked[0]
