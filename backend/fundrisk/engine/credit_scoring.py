"""Credit scoring — weighted five-factor score for a borrower and loan request.

Financial, business, collateral, character and capacity sub-scores are each
clamped to [0, 100], blended by their weights and mapped to a risk category
band carrying a recommended rate range and maximum LTV.
"""
from __future__ import annotations

from fundrisk.engine.inputs import InputResolver, clamp, resolve_params, round_half_up
from fundrisk.models.credit import CreditScoreResult, CreditSubScores, LoanRecommendation
from fundrisk.models.loan import BorrowerProfile, LoanRequest
from fundrisk.models.parameters import CreditBand, CreditParameters, RiskParameters


def _matches_any(industry: str | None, keywords: list[str]) -> bool:
    if not industry:
        return False
    text = industry.lower()
    return any(k.lower() in text for k in keywords)


def _financial_score(
    cfg: CreditParameters,
    resolver: InputResolver,
    revenue: float | None,
    monthly_cash_flow: float | None,
    amount: float,
) -> float:
    if revenue and monthly_cash_flow and amount > 0:
        coverage = (monthly_cash_flow * 12) / (amount * cfg.debt_service_share)
        return min(100.0, coverage * 20)
    resolver.missing("financial_data")
    return cfg.neutral_financial


def _business_score(cfg: CreditParameters, resolver: InputResolver, borrower: BorrowerProfile) -> float:
    years = resolver.optional("years_operating", borrower.years_operating)
    score = cfg.default_business if not years else min(100.0, years * 10 + 40)
    if _matches_any(borrower.industry, cfg.low_risk_sectors):
        score += cfg.low_risk_bonus
    elif _matches_any(borrower.industry, cfg.high_risk_sectors):
        score -= cfg.high_risk_penalty
    return score


def _collateral_score(cfg: CreditParameters, resolver: InputResolver, request: LoanRequest) -> float:
    if request.collateral_type is None:
        resolver.missing("collateral_type")
        return cfg.default_collateral_score
    return cfg.collateral_scores.get(request.collateral_type.value, cfg.default_collateral_score)


def _capacity_score(cfg: CreditParameters, revenue: float | None, amount: float) -> float:
    if revenue and amount:
        return max(cfg.capacity_floor, 100 - (amount / revenue) * 50)
    return cfg.default_capacity


def determine_band(score: int, params: RiskParameters | None = None) -> CreditBand:
    """Return the highest band whose minimum score is met."""
    cfg = resolve_params(params).credit
    bands = sorted(cfg.bands, key=lambda b: b.min_score, reverse=True)
    for band in bands:
        if score >= band.min_score:
            return band
    return bands[-1]


def score_credit(
    borrower: BorrowerProfile,
    request: LoanRequest,
    params: RiskParameters | None = None,
) -> CreditScoreResult:
    """Score a borrower and loan request. Never raises on missing data."""
    params = resolve_params(params)
    cfg = params.credit
    resolver = InputResolver("credit_scoring")

    amount = resolver.non_negative("amount", request.amount)
    revenue = borrower.annual_revenue
    cash_flow = borrower.monthly_cash_flow

    subs = CreditSubScores(
        financial=clamp(_financial_score(cfg, resolver, revenue, cash_flow, amount), 0, 100),
        business=clamp(_business_score(cfg, resolver, borrower), 0, 100),
        collateral=clamp(_collateral_score(cfg, resolver, request), 0, 100),
        character=clamp(cfg.character, 0, 100),
        capacity=clamp(_capacity_score(cfg, revenue, amount), 0, 100),
    )

    blended = sum(getattr(subs, name) * weight for name, weight in cfg.weights.items()) / 100
    score = int(clamp(round_half_up(blended), 0, 100))
    band = determine_band(score, params)

    rate = None
    if band.rate_min is not None and band.rate_max is not None:
        rate = round((band.rate_min + band.rate_max) / 2, 2)

    return CreditScoreResult(
        score=score,
        risk_category=band.category,
        category_description=band.description,
        recommended_rate=rate,
        recommended_rate_min=band.rate_min,
        recommended_rate_max=band.rate_max,
        max_ltv=band.max_ltv,
        sub_scores=subs,
        defaults_applied=resolver.defaults_applied,
    )


# ---------------------------------------------------------------------------
# Recommendation
# ---------------------------------------------------------------------------
def _conditions(score: int) -> list[str]:
    conditions: list[str] = []
    if score < 80:
        conditions += ["Personal guarantee required", "Quarterly financial reporting"]
    if score < 70:
        conditions += [
            "Monthly cash flow reporting",
            "Maintain minimum cash reserves",
            "Insurance requirements",
        ]
    if score < 60:
        conditions += [
            "Weekly monitoring calls",
            "Restricted dividend payments",
            "Additional collateral may be required",
        ]
    return conditions


def _monitoring(score: int) -> str:
    if score >= 80:
        return "Standard monitoring - Quarterly reviews"
    if score >= 70:
        return "Enhanced monitoring - Monthly reviews"
    if score >= 60:
        return "Close monitoring - Bi-weekly reviews"
    return "Intensive monitoring - Weekly reviews"


def _next_steps(score: int) -> list[str]:
    if score >= 80:
        return [
            "Submit formal loan application",
            "Provide required documentation",
            "Schedule property appraisal (if applicable)",
            "Await final underwriting approval",
        ]
    if score >= 60:
        return [
            "Submit formal loan application",
            "Provide comprehensive financial documentation",
            "Schedule property appraisal and inspection",
            "Prepare additional collateral documentation",
            "Await enhanced underwriting review",
        ]
    return [
        "Strengthen financial position",
        "Consider additional collateral",
        "Improve credit profile",
        "Reapply in 6 months",
    ]


def recommend_loan(
    result: CreditScoreResult,
    request: LoanRequest,
    params: RiskParameters | None = None,
) -> LoanRecommendation:
    """Turn a credit score into a lending decision with conditions."""
    cfg = resolve_params(params).credit
    score = result.score
    amount = max(0.0, request.amount or 0.0)
    approved = score >= cfg.approval_min_score

    if score >= cfg.full_amount_min_score:
        approved_amount = amount
    else:
        approved_amount = float(round_half_up(amount * cfg.partial_approval_fraction))

    return LoanRecommendation(
        decision="APPROVE" if approved else "DECLINE",
        approved_amount=approved_amount,
        interest_rate_min=result.recommended_rate_min,
        interest_rate_max=result.recommended_rate_max,
        max_ltv=result.max_ltv,
        conditions=_conditions(score),
        monitoring=_monitoring(score),
        preliminary_decision="PRE-APPROVED" if approved else "REQUIRES REVIEW",
        next_steps=_next_steps(score),
        turnaround="2-3 business days" if score >= cfg.full_amount_min_score else "5-7 business days",
    )
