"""Tests for the credit scoring engine and loan recommendation."""
import pytest

from fundrisk.engine.credit_scoring import determine_band, recommend_loan, score_credit
from fundrisk.models.credit import CreditScoreResult, CreditSubScores
from fundrisk.models.loan import BorrowerProfile, CollateralType, LoanRequest
from fundrisk.models.parameters import RiskParameters


def _make_borrower(**overrides) -> BorrowerProfile:
    defaults = dict(
        borrower_id="B001",
        industry="Healthcare services",
        years_operating=5,
        annual_revenue=1_200_000,
        monthly_cash_flow=50_000,
    )
    defaults.update(overrides)
    return BorrowerProfile(**defaults)


def _make_request(**overrides) -> LoanRequest:
    defaults = dict(amount=200_000, collateral_type=CollateralType.real_estate, term_months=24)
    defaults.update(overrides)
    return LoanRequest(**defaults)


def _make_result(score: int) -> CreditScoreResult:
    band = determine_band(score)
    return CreditScoreResult(
        score=score,
        risk_category=band.category,
        category_description=band.description,
        recommended_rate_min=band.rate_min,
        recommended_rate_max=band.rate_max,
        max_ltv=band.max_ltv,
        sub_scores=CreditSubScores(
            financial=50, business=60, collateral=70, character=75, capacity=70
        ),
    )


# ---------------------------------------------------------------------------
# Scoring
# ---------------------------------------------------------------------------


def test_strong_borrower_scores_excellent():
    result = score_credit(_make_borrower(), _make_request())
    # financial 100, business 100, collateral 85, character 75, capacity 91.67
    assert result.score == 93
    assert result.risk_category == "excellent"
    assert result.recommended_rate == pytest.approx(10.0)
    assert result.max_ltv == 80.0
    assert result.sub_scores.financial == 100
    assert result.sub_scores.business == 100
    assert result.sub_scores.capacity == pytest.approx(91.6667, abs=1e-3)
    assert result.defaults_applied == []


def test_empty_inputs_use_neutral_defaults():
    result = score_credit(BorrowerProfile(), LoanRequest())
    # 50*.35 + 60*.25 + 70*.20 + 75*.15 + 70*.05 = 61.25
    assert result.score == 61
    assert result.risk_category == "watchlist"
    assert result.recommended_rate == pytest.approx(22.0)
    for field in ("amount", "financial_data", "years_operating", "collateral_type"):
        assert field in result.defaults_applied


def test_high_risk_sector_penalised():
    neutral = score_credit(_make_borrower(industry=None), _make_request())
    tourism = score_credit(_make_borrower(industry="Coastal Tourism"), _make_request())
    assert neutral.sub_scores.business == 90
    assert tourism.sub_scores.business == 75
    assert tourism.score < neutral.score


def test_sector_match_is_case_insensitive():
    result = score_credit(_make_borrower(industry="EDUCATION"), _make_request())
    assert result.sub_scores.business == 100


def test_capacity_has_floor():
    result = score_credit(
        _make_borrower(annual_revenue=100_000), _make_request(amount=1_000_000)
    )
    assert result.sub_scores.capacity == 30


def test_financial_neutral_without_cash_flow():
    result = score_credit(_make_borrower(monthly_cash_flow=None), _make_request())
    assert result.sub_scores.financial == 50
    assert "financial_data" in result.defaults_applied


def test_negative_amount_clamped():
    result = score_credit(_make_borrower(), _make_request(amount=-5_000))
    assert "amount:clamped" in result.defaults_applied
    assert 0 <= result.score <= 100


def test_non_numeric_amount_treated_as_missing():
    request = LoanRequest.model_validate({"amount": "n/a"})
    assert request.amount is None
    result = score_credit(_make_borrower(), request)
    assert "amount" in result.defaults_applied


@pytest.mark.parametrize(
    "score,category",
    [(100, "excellent"), (90, "excellent"), (89, "good"), (70, "acceptable"),
     (60, "watchlist"), (50, "subprime"), (49, "declined"), (0, "declined")],
)
def test_band_boundaries(score, category):
    assert determine_band(score).category == category


def test_declined_band_has_no_rate():
    band = determine_band(10)
    assert band.rate_min is None
    assert band.max_ltv is None


def test_custom_parameters_respected():
    params = RiskParameters.model_validate(
        {"credit": {"character": 0.0}}
    )
    baseline = score_credit(_make_borrower(), _make_request())
    result = score_credit(_make_borrower(), _make_request(), params)
    assert result.sub_scores.character == 0
    assert result.score < baseline.score


# ---------------------------------------------------------------------------
# Recommendation
# ---------------------------------------------------------------------------


class TestRecommendation:
    def test_full_approval(self):
        rec = recommend_loan(_make_result(93), _make_request(amount=200_000))
        assert rec.decision == "APPROVE"
        assert rec.approved_amount == 200_000
        assert rec.conditions == []
        assert rec.preliminary_decision == "PRE-APPROVED"
        assert rec.turnaround == "2-3 business days"
        assert rec.monitoring.startswith("Standard monitoring")

    def test_partial_approval_below_full_amount_score(self):
        rec = recommend_loan(_make_result(65), _make_request(amount=100_001))
        assert rec.decision == "APPROVE"
        # 75% of 100,001 = 75,000.75 -> 75,001
        assert rec.approved_amount == 75_001
        assert rec.turnaround == "5-7 business days"
        assert "Monthly cash flow reporting" in rec.conditions
        assert len(rec.conditions) == 5

    def test_decline_below_approval_score(self):
        rec = recommend_loan(_make_result(45), _make_request(amount=80_000))
        assert rec.decision == "DECLINE"
        assert rec.preliminary_decision == "REQUIRES REVIEW"
        assert len(rec.conditions) == 8
        assert rec.next_steps[-1] == "Reapply in 6 months"

    def test_rate_range_follows_band(self):
        rec = recommend_loan(_make_result(85), _make_request())
        assert (rec.interest_rate_min, rec.interest_rate_max) == (12.0, 16.0)
        assert rec.max_ltv == 70.0
