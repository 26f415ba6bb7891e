"""Cash flow forecaster — month-by-month fund cash projection.

Collections and originations are horizon totals spread evenly per month and
scaled by calendar-month seasonality. Contributions follow a front-loaded
tranche schedule and distributions are paid on calendar quarter-ends. Each
month opens with the previous month's closing balance.
"""
from __future__ import annotations

import numpy as np

from fundrisk.engine.inputs import InputResolver, resolve_params
from fundrisk.models.cashflow import (
    CashFlowAssumptions,
    CashFlowRecommendation,
    CashFlowRisk,
    CurrentLiquidity,
    FundingGap,
    LiquidityAnalysis,
    LiquidityRiskIndicators,
    MonthlyInflows,
    MonthlyOutflows,
    MonthlyProjection,
    ProjectedLiquidity,
    ScenarioAnalysis,
)
from fundrisk.models.parameters import CashFlowParameters, RiskParameters


def calendar_month_for(start_month: int, month: int) -> int:
    """Calendar month (1-12) of projection month ``month`` (1-based)."""
    return (start_month - 1 + month - 1) % 12 + 1


def contribution_for_month(
    cfg: CashFlowParameters, total: float, month: int, horizon: int
) -> float:
    """Share of total contributions landing in ``month``.

    Each tranche is spread evenly over its months that fall inside the horizon;
    a tranche with no months inside the horizon never lands.
    """
    amount = 0.0
    for tranche in cfg.contribution_schedule:
        last = horizon if tranche.last_month is None else min(tranche.last_month, horizon)
        span = last - tranche.first_month + 1
        if span > 0 and tranche.first_month <= month <= last:
            amount += total * tranche.share / span
    return amount


def distribution_for_month(cfg: CashFlowParameters, annual: float, calendar_month: int) -> float:
    interval = 12 // cfg.distributions_per_year
    if calendar_month % interval == 0:
        return annual / cfg.distributions_per_year
    return 0.0


def resolve_horizon(
    assumptions: CashFlowAssumptions, months: int | None, cfg: CashFlowParameters
) -> int:
    return max(1, months or assumptions.horizon_months or cfg.default_horizon_months)


def project_cash_flows(
    assumptions: CashFlowAssumptions,
    months: int | None = None,
    params: RiskParameters | None = None,
    resolver: InputResolver | None = None,
) -> list[MonthlyProjection]:
    """Project monthly cash flows over the horizon."""
    cfg = resolve_params(params).cash_flow
    r = resolver or InputResolver("cash_flow")
    horizon = resolve_horizon(assumptions, months, cfg)

    fund_size = r.non_negative("fund_size", assumptions.fund_size)
    cash = r.number("current_cash", assumptions.current_cash, 0.0)
    principal_total = r.non_negative("expected_principal_repayments",
                                     assumptions.expected_principal_repayments)
    interest_total = r.non_negative("expected_interest_collections",
                                    assumptions.expected_interest_collections)
    originations_total = r.non_negative("planned_originations", assumptions.planned_originations)
    opex = r.non_negative("monthly_operating_expenses", assumptions.monthly_operating_expenses)
    contributions_total = r.non_negative("expected_contributions", assumptions.expected_contributions)
    distributions_annual = r.non_negative("planned_distributions", assumptions.planned_distributions)

    projections: list[MonthlyProjection] = []
    closing = round(cash, 2)
    for month in range(1, horizon + 1):
        cal = calendar_month_for(assumptions.start_month, month)
        season = cfg.factors_for(cal)
        opening = closing

        principal = round(principal_total / horizon * season.collections, 2)
        interest = round(interest_total / horizon * season.collections, 2)
        contributions = round(
            contribution_for_month(cfg, contributions_total, month, horizon), 2
        )
        inflow_total = round(principal + interest + contributions, 2)

        originations = round(originations_total / horizon * season.originations, 2)
        expenses = round(opex * season.expenses, 2)
        distributions = round(distribution_for_month(cfg, distributions_annual, cal), 2)
        outflow_total = round(originations + expenses + distributions, 2)

        net = round(inflow_total - outflow_total, 2)
        closing = opening + net

        projections.append(MonthlyProjection(
            month=month,
            calendar_month=cal,
            opening_cash=opening,
            inflows=MonthlyInflows(
                principal=principal, interest=interest,
                contributions=contributions, total=inflow_total,
            ),
            outflows=MonthlyOutflows(
                originations=originations, operating_expenses=expenses,
                distributions=distributions, total=outflow_total,
            ),
            net_cash_flow=net,
            closing_cash=closing,
            cash_ratio=round(closing / fund_size * 100, 2) if fund_size > 0 else None,
            operating_days_coverage=(
                round(closing / opex * cfg.days_per_month, 1) if opex > 0 else None
            ),
        ))
    return projections


# ---------------------------------------------------------------------------
# Liquidity analysis
# ---------------------------------------------------------------------------
def current_liquidity_rating(
    cfg: CashFlowParameters, cash_ratio: float | None, months_of_opex: float | None
) -> str:
    for band in cfg.liquidity_rating_bands:
        if cash_ratio is not None and cash_ratio < band.cash_ratio_below:
            return band.rating
        if months_of_opex is not None and months_of_opex < band.months_coverage_below:
            return band.rating
    return cfg.liquidity_rating_top


def cash_flow_volatility(projections: list[MonthlyProjection]) -> float:
    """Coefficient of variation of monthly net cash flow."""
    if len(projections) < 2:
        return 0.0
    flows = np.array([p.net_cash_flow for p in projections], dtype=float)
    mean = float(flows.mean())
    if mean == 0:
        return 0.0
    return round(float(flows.std()) / abs(mean), 4)


def funding_gaps(projections: list[MonthlyProjection]) -> list[FundingGap]:
    return [
        FundingGap(
            month=p.month,
            shortfall=round(abs(p.closing_cash), 2),
            severity="High" if p.closing_cash < -p.outflows.total else "Medium",
        )
        for p in projections
        if p.closing_cash < 0
    ]


def _recommendations(
    current_rating: str,
    shortfall: bool,
    scenarios: ScenarioAnalysis | None,
    average_balance: float,
    fund_size: float,
) -> list[CashFlowRecommendation]:
    recs: list[CashFlowRecommendation] = []
    if current_rating in ("Critical", "Low"):
        recs.append(CashFlowRecommendation(
            category="Immediate Action",
            recommendation="Address liquidity shortage immediately",
            priority="Urgent",
            actions=[
                "Draw on available credit facilities",
                "Accelerate loan collections",
                "Defer non-essential expenditures",
                "Consider emergency LP capital call",
            ],
            timeline="Immediate",
        ))
    if shortfall:
        recs.append(CashFlowRecommendation(
            category="Liquidity Planning",
            recommendation="Address projected cash flow shortfalls",
            priority="High",
            actions=[
                "Establish additional credit facilities",
                "Renegotiate LP commitment schedules",
                "Implement cash flow forecasting system",
                "Create liquidity contingency plan",
            ],
            timeline="30-60 days",
        ))
    if scenarios is not None and not scenarios.liquidity_safe:
        recs.append(CashFlowRecommendation(
            category="Stress Preparedness",
            recommendation="Strengthen stress scenario resilience",
            priority="Medium",
            actions=[
                "Increase minimum cash reserves to 20%",
                "Diversify funding sources",
                "Implement dynamic hedging strategies",
                "Develop crisis communication plan",
            ],
            timeline="90-120 days",
        ))
    if fund_size > 0 and average_balance > fund_size * 0.25:
        recs.append(CashFlowRecommendation(
            category="Cash Optimization",
            recommendation="Optimize excess liquidity deployment",
            priority="Medium",
            actions=[
                "Invest excess cash in short-term securities",
                "Accelerate loan origination pipeline",
                "Consider special dividend to LPs",
                "Evaluate higher-yield cash management",
            ],
            timeline="60-90 days",
        ))
    return recs


def _risks(
    contributions: float,
    principal: float,
    volatility: float,
    operating_days: float | None,
) -> list[CashFlowRisk]:
    risks: list[CashFlowRisk] = []
    funding_base = contributions + principal
    if funding_base > 0 and contributions / funding_base > 0.5:
        risks.append(CashFlowRisk(
            category="Funding Concentration",
            risk="High dependence on LP capital contributions",
            impact="High",
            probability="Medium",
            mitigation="Diversify funding sources and increase operating cash generation",
        ))
    risks.append(CashFlowRisk(
        category="Market Risk",
        risk="Economic downturn could impact cash flows",
        impact="High",
        probability="Low-Medium",
        mitigation="Maintain higher cash reserves and stress test regularly",
    ))
    if volatility > 0.3:
        risks.append(CashFlowRisk(
            category="Volatility Risk",
            risk="High cash flow volatility reduces predictability",
            impact="Medium",
            probability="Medium",
            mitigation="Improve forecasting accuracy and diversify revenue streams",
        ))
    if operating_days is not None and operating_days < 90:
        risks.append(CashFlowRisk(
            category="Liquidity Risk",
            risk="Limited operating cash runway",
            impact="High",
            probability="High",
            mitigation="Increase cash reserves and establish credit facilities",
        ))
    return risks


def analyze_liquidity(
    assumptions: CashFlowAssumptions,
    projections: list[MonthlyProjection],
    params: RiskParameters | None = None,
    scenarios: ScenarioAnalysis | None = None,
) -> LiquidityAnalysis:
    """Summarise current and projected liquidity for a projection run."""
    cfg = resolve_params(params).cash_flow
    cash = assumptions.current_cash or 0.0
    fund_size = max(0.0, assumptions.fund_size or 0.0)
    opex = max(0.0, assumptions.monthly_operating_expenses or 0.0)

    cash_ratio = round(cash / fund_size * 100, 2) if fund_size > 0 else None
    months_of_opex = cash / opex if opex > 0 else None
    operating_days = round(cash / opex * cfg.days_per_month, 1) if opex > 0 else None
    current_rating = current_liquidity_rating(cfg, cash_ratio, months_of_opex)

    balances = [p.closing_cash for p in projections] or [round(cash, 2)]
    min_balance = min(balances)
    average_balance = round(sum(balances) / len(balances), 2)
    below_target = sum(
        1 for p in projections if p.cash_ratio is not None and p.cash_ratio < cfg.target_cash_ratio
    )
    below_minimum = sum(
        1 for p in projections if p.cash_ratio is not None and p.cash_ratio < cfg.minimum_cash_ratio
    )
    volatility = cash_flow_volatility(projections)
    shortfall = any(p.closing_cash < 0 for p in projections)

    if min_balance < 0:
        overall = "Critical"
    elif below_minimum > 3:
        overall = "Low"
    elif below_minimum > 0:
        overall = "Medium"
    else:
        overall = current_rating

    average_flow = (
        round(sum(p.net_cash_flow for p in projections) / len(projections), 2) if projections else 0.0
    )

    return LiquidityAnalysis(
        current=CurrentLiquidity(
            cash=round(cash, 2),
            cash_ratio=cash_ratio,
            operating_days_covered=operating_days,
            rating=current_rating,
        ),
        projected=ProjectedLiquidity(
            max_balance=max(balances),
            min_balance=min_balance,
            average_balance=average_balance,
            months_below_target=below_target,
        ),
        risk_indicators=LiquidityRiskIndicators(
            cash_shortfall_risk=shortfall,
            months_below_minimum=below_minimum,
            cash_flow_volatility=volatility,
            funding_gaps=funding_gaps(projections),
        ),
        overall_rating=overall,
        average_monthly_cash_flow=average_flow,
        recommendations=_recommendations(
            current_rating, shortfall, scenarios, average_balance, fund_size
        ),
        risks=_risks(
            assumptions.expected_contributions or 0.0,
            assumptions.expected_principal_repayments or 0.0,
            volatility,
            operating_days,
        ),
    )
