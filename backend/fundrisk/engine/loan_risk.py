"""Loan risk model — PD, LGD, expected loss and rating for a single loan.

PD starts from a base annual rate and is multiplied by one factor per risk
dimension (DSCR, LTV, delinquency, late payments, industry). Within a
dimension only the largest applicable band multiplier is used. LGD starts from
the collateral type and is adjusted for LTV, borrower type and loan size.
"""
from __future__ import annotations

from datetime import date, timedelta

from fundrisk.engine.inputs import InputResolver, add_months, clamp, resolve_params
from fundrisk.models.loan import (
    BorrowerProfile,
    BorrowerType,
    CollateralRecord,
    CollateralType,
    LoanRecord,
)
from fundrisk.models.parameters import LoanRiskParameters, RiskParameters, ThresholdMultiplier
from fundrisk.models.risk import (
    LoanRiskAssessment,
    LoanRiskScores,
    MitigationAction,
    MonitoringPlan,
    RiskRating,
)

_ESCALATION_TRIGGERS = [
    "Payment delay > 15 days",
    "Covenant violation",
    "Significant financial deterioration",
    "Collateral value decline > 20%",
    "Management or ownership changes",
]


def _band_multiplier(bands: list[ThresholdMultiplier], value: float | None) -> float:
    """Largest applicable multiplier, 1.0 when none applies or value is unknown."""
    if value is None:
        return 1.0
    applicable = [b.multiplier for b in bands if b.applies(value)]
    return max(applicable) if applicable else 1.0


def _contains_any(text: str | None, keywords: list[str]) -> bool:
    if not text:
        return False
    lowered = text.lower()
    return any(k.lower() in lowered for k in keywords)


# ---------------------------------------------------------------------------
# Core formulas
# ---------------------------------------------------------------------------
def probability_of_default(
    cfg: LoanRiskParameters,
    dscr: float | None,
    ltv: float | None,
    days_past_due: float,
    late_payments: float,
    industry: str | None,
) -> tuple[float, dict[str, float]]:
    """Return (PD capped at ``cfg.pd_cap``, multiplier per dimension)."""
    multipliers = {
        "dscr": _band_multiplier(cfg.dscr_bands, dscr),
        "ltv": _band_multiplier(cfg.ltv_bands, ltv),
        "delinquency": _band_multiplier(cfg.dpd_bands, days_past_due),
        "late_payments": _band_multiplier(cfg.late_payment_bands, late_payments),
        "industry": (
            cfg.industry_multiplier if _contains_any(industry, cfg.surcharge_industries) else 1.0
        ),
    }
    pd = cfg.base_pd
    for m in multipliers.values():
        pd *= m
    return min(cfg.pd_cap, pd), multipliers


def loss_given_default(
    cfg: LoanRiskParameters,
    collateral_type: CollateralType,
    ltv: float | None,
    borrower_type: BorrowerType,
    loan_size: float,
) -> float:
    lgd = cfg.collateral_lgd.get(collateral_type.value, cfg.base_lgd)
    if collateral_type == CollateralType.real_estate and ltv is not None:
        if ltv > cfg.real_estate_high_ltv:
            lgd += cfg.real_estate_high_ltv_adj
        elif ltv < cfg.real_estate_low_ltv:
            lgd += cfg.real_estate_low_ltv_adj

    if borrower_type == BorrowerType.individual:
        lgd += cfg.individual_adj

    if loan_size > cfg.large_loan_threshold:
        lgd += cfg.large_loan_adj
    elif loan_size < cfg.small_loan_threshold:
        lgd += cfg.small_loan_adj

    return round(clamp(lgd, cfg.lgd_floor, cfg.lgd_cap), 4)


def assign_rating(cfg: LoanRiskParameters, pd: float) -> RiskRating:
    for band in sorted(cfg.rating_bands, key=lambda b: b.max_pd):
        if pd <= band.max_pd:
            return RiskRating(rating=band.rating, level=band.level, description=band.description)
    last = max(cfg.rating_bands, key=lambda b: b.max_pd)
    return RiskRating(rating=last.rating, level=last.level, description=last.description)


def pd_confidence(cfg: LoanRiskParameters, pd: float) -> str:
    for upper, label in sorted(cfg.confidence_bands):
        if pd < upper:
            return label
    return cfg.confidence_floor


# ---------------------------------------------------------------------------
# Supplementary scores
# ---------------------------------------------------------------------------
def financial_risk_score(
    dscr: float | None, current_ratio: float | None, debt_to_income: float | None
) -> int:
    score = 1
    if dscr is not None:
        if dscr < 1.0:
            score = 5
        elif dscr < 1.25:
            score = 4
        elif dscr < 1.5:
            score = 3
        elif dscr < 2.0:
            score = 2
    if current_ratio is not None:
        if current_ratio < 1.0:
            score = max(score, 4)
        elif current_ratio < 1.2:
            score = max(score, 3)
    if debt_to_income is not None:
        if debt_to_income > 50:
            score = max(score, 4)
        elif debt_to_income > 40:
            score = max(score, 3)
    return score


def collateral_risk_score(ltv: float | None, collateral_type: CollateralType) -> int:
    score = 3
    if ltv is not None:
        if ltv > 90:
            score = 5
        elif ltv > 80:
            score = 4
        elif ltv < 60:
            score = 1
        elif ltv < 70:
            score = 2
    if collateral_type == CollateralType.real_estate:
        score = max(1, score - 1)
    elif collateral_type == CollateralType.unsecured:
        score = 5
    return score


def performance_risk_score(days_past_due: float, late_payments: float) -> int:
    score = 1
    if days_past_due > 90:
        score = 5
    elif days_past_due > 60:
        score = 4
    elif days_past_due > 30:
        score = 3
    elif days_past_due > 0:
        score = 2

    if late_payments > 6:
        score = max(score, 4)
    elif late_payments > 3:
        score = max(score, 3)
    elif late_payments > 1:
        score = max(score, 2)
    return score


def industry_risk_score(industry: str | None) -> int:
    if _contains_any(industry, ["tourism", "hospitality", "restaurant", "entertainment"]):
        return 4
    if _contains_any(industry, ["construction", "retail"]):
        return 3
    if _contains_any(industry, ["manufacturing", "agriculture"]):
        return 2
    if _contains_any(industry, ["healthcare", "education", "government"]):
        return 1
    return 2


def payment_performance_score(days_past_due: float, late_payments: float) -> float:
    score = 100.0
    if days_past_due > 90:
        score -= 50
    elif days_past_due > 60:
        score -= 35
    elif days_past_due > 30:
        score -= 20
    elif days_past_due > 0:
        score -= 10
    score -= late_payments * 3
    return max(0.0, score)


def _risk_factors(
    dscr: float | None,
    ltv: float | None,
    days_past_due: float,
    late_payments: float | None,
    industry: str | None,
    collateral_type: CollateralType,
    years_operating: float | None,
) -> tuple[list[str], list[str]]:
    factors: list[str] = []
    strengths: list[str] = []

    if dscr is not None:
        if dscr < 1.25:
            factors.append("Low debt service coverage ratio")
        elif dscr > 2.0:
            strengths.append("Strong debt service coverage")

    if ltv is not None:
        if ltv > 80:
            factors.append("High loan-to-value ratio")
        elif ltv < 60:
            strengths.append("Conservative loan-to-value ratio")

    if days_past_due > 0:
        factors.append(f"Currently {days_past_due:g} days past due")

    if late_payments is not None:
        if late_payments > 3:
            factors.append("Pattern of late payments")
        elif late_payments == 0:
            strengths.append("Perfect payment history")

    if _contains_any(industry, ["tourism", "hospitality"]):
        factors.append("High-risk industry (tourism/hospitality)")

    if collateral_type == CollateralType.unsecured:
        factors.append("Unsecured loan structure")

    if years_operating is not None:
        if years_operating < 2:
            factors.append("Limited business operating history")
        elif years_operating > 10:
            strengths.append("Established business with long operating history")

    return factors, strengths


def _mitigation_actions(
    level: str, days_past_due: float, dscr: float | None, ltv: float | None
) -> list[MitigationAction]:
    actions: list[MitigationAction] = []
    if level in ("Very High", "High"):
        actions.append(MitigationAction(
            action="Place on watch list for enhanced monitoring",
            category="Monitoring", priority="High", timeline="Immediate",
        ))
        if days_past_due > 30:
            actions.append(MitigationAction(
                action="Initiate formal collection procedures",
                category="Collections", priority="Urgent", timeline="24 hours",
            ))
        actions.append(MitigationAction(
            action="Require additional collateral or guarantees",
            category="Credit Enhancement", priority="High", timeline="30 days",
        ))
        actions.append(MitigationAction(
            action="Consider loan workout or restructuring",
            category="Restructuring", priority="Medium", timeline="60 days",
        ))
    elif level == "Medium":
        actions.append(MitigationAction(
            action="Increase monitoring frequency to monthly",
            category="Monitoring", priority="Medium", timeline="Next month",
        ))
        if dscr is not None and dscr < 1.25:
            actions.append(MitigationAction(
                action="Request updated financial statements",
                category="Documentation", priority="Medium", timeline="15 days",
            ))
    else:
        actions.append(MitigationAction(
            action="Continue routine quarterly monitoring",
            category="Monitoring", priority="Low", timeline="Next quarter",
        ))

    if ltv is not None and ltv > 80:
        actions.append(MitigationAction(
            action="Order updated collateral appraisal",
            category="Collateral Management", priority="Medium", timeline="30 days",
        ))
    return actions


def monitoring_plan(level: str, as_of: date) -> MonitoringPlan:
    """Review cadence by risk level; next review counted from ``as_of``."""
    if level == "Very High":
        frequency = "Weekly"
        requirements = [
            "Weekly payment status check",
            "Monthly financial statement review",
            "Quarterly collateral inspection",
            "Continuous covenant monitoring",
        ]
        next_review = as_of + timedelta(days=7)
    elif level == "High":
        frequency = "Monthly"
        requirements = [
            "Monthly payment performance review",
            "Quarterly financial statements",
            "Semi-annual collateral verification",
            "Quarterly covenant compliance check",
        ]
        next_review = add_months(as_of, 1)
    elif level == "Medium":
        frequency = "Quarterly"
        requirements = [
            "Quarterly payment review",
            "Semi-annual financial statements",
            "Annual collateral appraisal",
            "Annual covenant compliance review",
        ]
        next_review = add_months(as_of, 3)
    else:
        frequency = "Semi-Annual"
        requirements = [
            "Semi-annual performance review",
            "Annual financial statements",
            "Bi-annual collateral verification",
            "Annual risk rating review",
        ]
        next_review = add_months(as_of, 6)

    return MonitoringPlan(
        frequency=frequency,
        requirements=requirements,
        escalation_triggers=list(_ESCALATION_TRIGGERS),
        next_review_date=next_review,
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------
def resolve_ltv(
    resolver: InputResolver,
    cfg: LoanRiskParameters,
    collateral: CollateralRecord | None,
    outstanding: float,
) -> float | None:
    """Stated LTV, else balance / appraised value, else None (neutral)."""
    ltv = collateral.loan_to_value if collateral is not None else None
    if ltv is None and collateral is not None and collateral.appraised_value:
        ltv = outstanding / collateral.appraised_value * 100
    if ltv is None:
        resolver.missing("loan_to_value")
        return None
    return resolver.bounded("loan_to_value", ltv, ltv, cfg.ltv_min, cfg.ltv_max)


def assess_loan(
    loan: LoanRecord,
    collateral: CollateralRecord | None = None,
    borrower: BorrowerProfile | None = None,
    params: RiskParameters | None = None,
    *,
    as_of: date,
) -> LoanRiskAssessment:
    """Assess one loan. ``as_of`` anchors the monitoring schedule."""
    cfg = resolve_params(params).loan_risk
    borrower = borrower or BorrowerProfile()
    resolver = InputResolver(f"loan_risk[{loan.loan_id}]")

    principal = resolver.non_negative("principal", loan.principal, loan.outstanding_balance or 0.0)
    outstanding = resolver.non_negative("outstanding_balance", loan.outstanding_balance, principal)
    days_past_due = resolver.non_negative("days_past_due", loan.days_past_due)
    late_raw = loan.payment_history.late_payments_12m
    late_payments = resolver.non_negative("late_payments_12m", late_raw)
    dscr = resolver.optional("debt_service_coverage", borrower.debt_service_coverage)
    ltv = resolve_ltv(resolver, cfg, collateral, outstanding)

    if collateral is None:
        resolver.missing("collateral")
        collateral_type = CollateralType.unsecured
    else:
        collateral_type = collateral.collateral_type

    pd, multipliers = probability_of_default(
        cfg, dscr, ltv, days_past_due, late_payments, borrower.industry
    )
    lgd = loss_given_default(cfg, collateral_type, ltv, borrower.borrower_type, principal)
    expected_loss = round(outstanding * pd * lgd, 2)
    rating = assign_rating(cfg, pd)

    factors, strengths = _risk_factors(
        dscr, ltv, days_past_due,
        late_payments if late_raw is not None else None,
        borrower.industry, collateral_type, borrower.years_operating,
    )

    return LoanRiskAssessment(
        loan_id=loan.loan_id,
        probability_of_default=pd,
        pd_confidence=pd_confidence(cfg, pd),
        pd_multipliers=multipliers,
        loss_given_default=lgd,
        exposure=round(outstanding, 2),
        expected_loss=expected_loss,
        rating=rating,
        risk_scores=LoanRiskScores(
            financial=financial_risk_score(dscr, borrower.current_ratio, borrower.debt_to_income),
            collateral=collateral_risk_score(ltv, collateral_type),
            performance=performance_risk_score(days_past_due, late_payments),
            industry=industry_risk_score(borrower.industry),
        ),
        payment_performance_score=payment_performance_score(days_past_due, late_payments),
        risk_factors=factors,
        strengths=strengths,
        mitigation_actions=_mitigation_actions(rating.level, days_past_due, dscr, ltv),
        monitoring=monitoring_plan(rating.level, as_of),
        defaults_applied=resolver.defaults_applied,
    )
