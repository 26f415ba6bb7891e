"""Portfolio risk aggregation.

Scores credit, concentration, liquidity, market and operational risk on a 1-5
scale, blends them into an overall 0-100 score, runs a three-scenario stress
test and raises early warnings from the portfolio snapshot.
"""
from __future__ import annotations

import logging
from collections import Counter
from datetime import date

from fundrisk.engine.inputs import InputResolver, add_months, resolve_params, round_half_up
from fundrisk.models.parameters import PortfolioParameters, RiskParameters
from fundrisk.models.risk import (
    Alert,
    CategoryScores,
    ConcentrationAnalysis,
    ConcentrationArea,
    EarlyWarning,
    EarlyWarningReport,
    LoanRiskAssessment,
    MarketContext,
    ModeledLossSummary,
    PortfolioRiskResult,
    PortfolioSnapshot,
    RiskRecommendation,
    StressScenarioResult,
    StressTestResult,
)

logger = logging.getLogger(__name__)

_LEVEL_POINTS = {"High": 3, "Medium": 2, "Low": 1}


# ---------------------------------------------------------------------------
# Category scores
# ---------------------------------------------------------------------------
def credit_risk_score(default_rate: float, delinquency_rate: float) -> int:
    if default_rate > 5 or delinquency_rate > 15:
        return 5
    if default_rate > 3 or delinquency_rate > 10:
        return 4
    if default_rate > 2 or delinquency_rate > 6:
        return 3
    if default_rate > 1 or delinquency_rate > 3:
        return 2
    return 1


def liquidity_risk_score(liquidity_ratio: float) -> int:
    if liquidity_ratio < 10:
        return 5
    if liquidity_ratio < 15:
        return 4
    if liquidity_ratio < 20:
        return 3
    if liquidity_ratio < 25:
        return 2
    return 1


def market_risk_score(usd_exposure: float, wam_months: float) -> int:
    score = 1.0
    if usd_exposure > 90:
        score += 1
    elif usd_exposure > 75:
        score += 0.5
    if wam_months > 36:
        score += 1
    elif wam_months > 24:
        score += 0.5
    return min(5, round_half_up(score))


def operational_risk_score(cfg: PortfolioParameters, largest_exposure: float, default_rate: float) -> float:
    compliance = cfg.operational_compliance_base
    if largest_exposure > 15:
        compliance += 1
    if default_rate > 5:
        compliance += 1
    compliance = min(5.0, compliance)
    return round(
        (cfg.operational_process_score + cfg.operational_system_score + compliance) / 3, 2
    )


# ---------------------------------------------------------------------------
# Concentration
# ---------------------------------------------------------------------------
def _concentration_area(cfg: PortfolioParameters, area: str, value: float) -> ConcentrationArea:
    high, medium = cfg.concentration_levels[area]
    if value > high:
        level = "High"
    elif value > medium:
        level = "Medium"
    else:
        level = "Low"
    limit = cfg.concentration_limits[area]
    return ConcentrationArea(value=value, limit=limit, exceeds_limit=value > limit, risk_level=level)


def analyze_concentration(
    cfg: PortfolioParameters, largest_exposure: float, sector: float, geography: float
) -> ConcentrationAnalysis:
    single = _concentration_area(cfg, "single_borrower", largest_exposure)
    top_sector = _concentration_area(cfg, "sector", sector)
    geo = _concentration_area(cfg, "geography", geography)
    total = sum(_LEVEL_POINTS[a.risk_level] for a in (single, top_sector, geo))
    if total >= 7:
        level = "High"
    elif total >= 5:
        level = "Medium"
    else:
        level = "Low"
    return ConcentrationAnalysis(
        single_borrower=single,
        sector=top_sector,
        geography=geo,
        overall_score=total,
        overall_level=level,
    )


# ---------------------------------------------------------------------------
# Stress test
# ---------------------------------------------------------------------------
def stress_test(
    cfg: PortfolioParameters, total_value: float, default_rate: float, as_of: date
) -> StressTestResult:
    """Scale the default rate and collateral values; capital impact is incremental loss."""
    base_rate = default_rate / 100
    base_loss = total_value * base_rate * cfg.base_lgd
    buffer = total_value * cfg.capital_buffer_ratio

    scenarios: list[StressScenarioResult] = []
    for s in cfg.stress_scenarios:
        stressed_rate = min(1.0, base_rate * s.default_multiplier)
        stressed_lgd = cfg.base_lgd + (1 - cfg.base_lgd) * s.collateral_decline
        projected = total_value * stressed_rate * stressed_lgd
        scenarios.append(StressScenarioResult(
            name=s.name,
            default_rate=round(stressed_rate * 100, 4),
            collateral_decline=s.collateral_decline,
            stressed_lgd=round(stressed_lgd, 4),
            projected_loss=round(projected, 2),
            capital_impact=round(max(0.0, projected - base_loss), 2),
        ))

    worst = max((s.capital_impact for s in scenarios), default=0.0)
    passes = worst <= buffer * cfg.stress_buffer_tolerance
    actions: list[str] = []
    if not passes:
        actions = [
            "Increase capital buffer",
            "Reduce portfolio concentration",
            "Enhance risk monitoring",
        ]

    return StressTestResult(
        base_expected_loss=round(base_loss, 2),
        capital_buffer=round(buffer, 2),
        scenarios=scenarios,
        passes=passes,
        required_actions=actions,
        next_test_due=add_months(as_of, 3),
    )


# ---------------------------------------------------------------------------
# Warnings and recommendations
# ---------------------------------------------------------------------------
def early_warnings(
    cfg: PortfolioParameters,
    default_rate: float,
    delinquency_rate: float,
    largest_exposure: float,
    liquidity_ratio: float,
) -> EarlyWarningReport:
    t = cfg.warning_thresholds
    warnings: list[EarlyWarning] = []
    if default_rate > t["default_rate"]:
        warnings.append(EarlyWarning(
            category="Credit Risk", indicator="Rising Default Rate",
            current=default_rate, threshold=t["default_rate"], severity="High",
        ))
    if delinquency_rate > t["delinquency_rate"]:
        warnings.append(EarlyWarning(
            category="Credit Risk", indicator="High Delinquency Rate",
            current=delinquency_rate, threshold=t["delinquency_rate"], severity="Medium",
        ))
    if largest_exposure > t["largest_exposure"]:
        warnings.append(EarlyWarning(
            category="Concentration Risk", indicator="Single Borrower Concentration",
            current=largest_exposure, threshold=t["largest_exposure"], severity="High",
        ))
    if liquidity_ratio < t["liquidity_ratio"]:
        warnings.append(EarlyWarning(
            category="Liquidity Risk", indicator="Low Liquidity Ratio",
            current=liquidity_ratio, threshold=t["liquidity_ratio"], severity="High",
        ))

    alerts = [
        Alert(
            alert=f"URGENT: {w.indicator}",
            action=f"Immediate review required - {w.category}",
            deadline="24 hours",
        )
        for w in warnings
        if w.severity == "High"
    ]
    return EarlyWarningReport(
        warnings=warnings,
        alerts=alerts,
        warning_count=len(warnings),
        critical_count=len(alerts),
        escalate=bool(alerts),
    )


def risk_recommendations(
    overall_score: float, scores: CategoryScores, concentration: ConcentrationAnalysis
) -> list[RiskRecommendation]:
    recs: list[RiskRecommendation] = []

    def add(category: str, action: str, priority: str, timeline: str) -> None:
        recs.append(RiskRecommendation(
            category=category, action=action, priority=priority, timeline=timeline
        ))

    if overall_score >= 70:
        add("Critical", "Immediate risk reduction required", "Urgent", "30 days")
        add("Portfolio", "Suspend new lending until risk levels reduced", "High", "Immediate")
    elif overall_score >= 40:
        add("Monitoring", "Enhanced risk monitoring and reporting", "High", "Immediate")

    if scores.credit >= 4:
        add("Credit Risk", "Tighten underwriting standards immediately", "High", "30 days")
        add("Credit Risk", "Increase loan loss provisions", "Medium", "Next month-end")

    if concentration.overall_level == "High":
        add("Concentration Risk", "Implement immediate concentration limits", "High", "15 days")
        if concentration.single_borrower.exceeds_limit:
            add(
                "Concentration Risk",
                f"Reduce largest single exposure below {concentration.single_borrower.limit:g}% limit",
                "Urgent",
                "60 days",
            )
        if concentration.sector.exceeds_limit:
            add(
                "Concentration Risk",
                f"Diversify industry exposure below {concentration.sector.limit:g}% limit",
                "Medium",
                "6 months",
            )

    if scores.liquidity >= 4:
        add("Liquidity Risk", "Establish committed credit facilities", "High", "90 days")
        add("Liquidity Risk", "Increase cash reserves to minimum 15%", "Medium", "60 days")

    if scores.market >= 3:
        add("Market Risk", "Consider FX hedging for USD exposure", "Medium", "90 days")
        add("Market Risk", "Implement interest rate risk monitoring", "Medium", "30 days")

    return recs


def summarize_modeled_losses(assessments: list[LoanRiskAssessment]) -> ModeledLossSummary:
    total = sum(a.exposure for a in assessments)
    weighted_pd = (
        sum(a.probability_of_default * a.exposure for a in assessments) / total if total > 0 else 0.0
    )
    return ModeledLossSummary(
        loan_count=len(assessments),
        total_exposure=round(total, 2),
        expected_loss=round(sum(a.expected_loss for a in assessments), 2),
        weighted_pd=round(weighted_pd, 6),
        rating_distribution=dict(Counter(a.rating.rating for a in assessments)),
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------
def aggregate(
    portfolio: PortfolioSnapshot,
    market: MarketContext | None = None,
    params: RiskParameters | None = None,
    loan_assessments: list[LoanRiskAssessment] | None = None,
    *,
    as_of: date,
) -> PortfolioRiskResult:
    """Aggregate portfolio risk. ``as_of`` anchors the stress-test schedule."""
    cfg = resolve_params(params).portfolio
    market = market or MarketContext()
    r = InputResolver("portfolio_risk")

    total_value = r.non_negative("total_value", portfolio.total_value)
    default_rate = r.bounded("default_rate", portfolio.default_rate, 0.0, 0.0, 100.0)
    delinquency_rate = r.bounded("delinquency_rate", portfolio.delinquency_rate, 0.0, 0.0, 100.0)
    largest = r.bounded("largest_exposure", portfolio.largest_exposure, 0.0, 0.0, 100.0)
    sector = r.bounded("top_sector_concentration", portfolio.top_sector_concentration, 0.0, 0.0, 100.0)
    geography = r.bounded("geographic_concentration", portfolio.geographic_concentration, 0.0, 0.0, 100.0)
    liquidity_ratio = r.non_negative(
        "liquidity_ratio", portfolio.liquidity_ratio, cfg.default_liquidity_ratio
    )
    wam = r.non_negative("weighted_average_maturity", portfolio.weighted_average_maturity,
                         cfg.default_wam_months)
    usd_exposure = r.bounded("usd_exposure", market.usd_exposure, cfg.default_usd_exposure, 0.0, 100.0)
    funding_maturity = r.non_negative("avg_funding_maturity", market.avg_funding_maturity,
                                      cfg.default_funding_maturity_months)

    concentration = analyze_concentration(cfg, largest, sector, geography)
    scores = CategoryScores(
        credit=credit_risk_score(default_rate, delinquency_rate),
        concentration=min(5.0, concentration.overall_score / 2),
        liquidity=liquidity_risk_score(liquidity_ratio),
        market=market_risk_score(usd_exposure, wam),
        operational=operational_risk_score(cfg, largest, default_rate),
    )

    weighted = sum(getattr(scores, name) * w for name, w in cfg.weights.items())
    maximum = sum(5 * w for w in cfg.weights.values())
    overall = round(weighted / maximum * 100, 1) if maximum else 0.0
    if overall >= 70:
        level = "High"
    elif overall >= 40:
        level = "Medium"
    else:
        level = "Low"

    cash_ratio = None
    if portfolio.cash_and_equivalents is not None and total_value > 0:
        cash_ratio = round(portfolio.cash_and_equivalents / total_value * 100, 2)

    modeled = summarize_modeled_losses(loan_assessments) if loan_assessments else None
    logger.debug("Portfolio overall risk %.1f (%s)", overall, level)

    return PortfolioRiskResult(
        category_scores=scores,
        overall_score=overall,
        overall_level=level,
        concentration=concentration,
        expected_loss=round(default_rate / 100 * cfg.base_lgd * total_value, 2),
        cash_ratio=cash_ratio,
        maturity_mismatch_months=round(abs(wam - funding_maturity), 1),
        duration_years=round(wam / 12, 2),
        stress_test=stress_test(cfg, total_value, default_rate, as_of),
        early_warnings=early_warnings(cfg, default_rate, delinquency_rate, largest, liquidity_ratio),
        recommendations=risk_recommendations(overall, scores, concentration),
        modeled_losses=modeled,
        defaults_applied=r.defaults_applied,
    )
