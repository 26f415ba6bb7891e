"""Recovery strategy optimizer for delinquent loans.

Enumerates the applicable recovery strategies, ranks them by
probability-weighted net recovery and then applies business policy: a
cooperative early-stage borrower is steered to settlement and a
non-cooperative secured borrower to foreclosure when those options are
close enough to the top-ranked one.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass

from fundrisk.engine.inputs import InputResolver, resolve_params, round_half_up
from fundrisk.models.loan import CollateralType, CooperationLevel
from fundrisk.models.parameters import RecoveryParameters, RiskParameters, StrategyTerms
from fundrisk.models.recovery import (
    LiquidationAnalysis,
    LiquidationScenarioResult,
    Milestone,
    RecoveryCase,
    RecoveryOption,
    RecoveryPlan,
    RecoveryProjection,
    RecoveryRisk,
    RecoveryScenarioProjection,
    RecoveryStrategy,
    StrategySelection,
)

logger = logging.getLogger(__name__)

_DESCRIPTIONS = {
    RecoveryStrategy.negotiated_settlement: "Work with borrower for voluntary payment arrangement",
    RecoveryStrategy.collateral_foreclosure: "Legal foreclosure and asset liquidation",
    RecoveryStrategy.legal_judgment: "Court judgment and asset attachment",
    RecoveryStrategy.charge_off: "Write-off with third-party collection agency",
}


@dataclass(frozen=True)
class PolicyFactors:
    """Borrower circumstances that drive policy overrides."""
    cooperation_level: CooperationLevel
    days_past_due: float
    collateral_value: float

    @classmethod
    def from_case(cls, case: RecoveryCase) -> "PolicyFactors":
        return cls(
            cooperation_level=case.cooperation_level,
            days_past_due=max(0.0, case.days_past_due or 0.0),
            collateral_value=max(0.0, case.collateral_value or 0.0),
        )


def _option(
    strategy: RecoveryStrategy,
    terms: StrategyTerms,
    gross: float,
    balance: float,
    probability: float,
) -> RecoveryOption:
    cost = balance * terms.cost_rate
    net = gross - cost
    return RecoveryOption(
        strategy=strategy,
        description=_DESCRIPTIONS[strategy],
        timeline_months_min=terms.timeline_min,
        timeline_months_max=terms.timeline_max,
        estimated_recovery=round(gross, 2),
        cost=round(cost, 2),
        probability=probability,
        net_recovery=round(net, 2),
        expected_value=round(probability * net, 2),
        recovery_roi=round(net / cost * 100, 2) if cost > 0 else 0.0,
    )


def settlement_probability(cfg: RecoveryParameters, days_past_due: float) -> float:
    for upper, probability in sorted(cfg.settlement_probability_bands):
        if days_past_due < upper:
            return probability
    return cfg.settlement.probability


def rank_options(
    case: RecoveryCase,
    params: RiskParameters | None = None,
    resolver: InputResolver | None = None,
) -> list[RecoveryOption]:
    """Applicable strategies sorted by expected value, highest first (stable)."""
    cfg = resolve_params(params).recovery
    r = resolver or InputResolver(f"recovery[{case.loan_id}]")
    balance = r.non_negative("outstanding_balance", case.outstanding_balance)
    collateral = r.non_negative("collateral_value", case.collateral_value)
    dpd = r.non_negative("days_past_due", case.days_past_due)

    settlement_gross = balance * cfg.settlement.recovery_rate
    if collateral > 0:
        settlement_gross = min(settlement_gross, collateral * cfg.settlement_collateral_rate)
    options = [
        _option(
            RecoveryStrategy.negotiated_settlement, cfg.settlement, settlement_gross, balance,
            settlement_probability(cfg, dpd),
        )
    ]

    if collateral > 0:
        rate = cfg.foreclosure_rates.get(case.collateral_type.value, cfg.foreclosure.recovery_rate)
        options.append(_option(
            RecoveryStrategy.collateral_foreclosure, cfg.foreclosure, collateral * rate, balance,
            cfg.foreclosure.probability,
        ))

    options.append(_option(
        RecoveryStrategy.legal_judgment, cfg.legal, balance * cfg.legal.recovery_rate, balance,
        cfg.legal.probability,
    ))

    if dpd > cfg.charge_off_min_dpd:
        options.append(_option(
            RecoveryStrategy.charge_off, cfg.charge_off, balance * cfg.charge_off.recovery_rate,
            balance, cfg.charge_off.probability,
        ))

    return sorted(options, key=lambda o: o.expected_value, reverse=True)


def _find(ranked: list[RecoveryOption], strategy: RecoveryStrategy) -> RecoveryOption | None:
    return next((o for o in ranked if o.strategy == strategy), None)


def apply_policy_overrides(
    ranked: list[RecoveryOption],
    factors: PolicyFactors,
    params: RiskParameters | None = None,
) -> tuple[RecoveryOption, bool, str | None]:
    """Return (chosen option, whether policy overrode the ranking, reason)."""
    if not ranked:
        raise ValueError("no recovery options to select from")
    cfg = resolve_params(params).recovery
    top = ranked[0]

    if (
        factors.cooperation_level == CooperationLevel.cooperative
        and factors.days_past_due < cfg.cooperative_settlement_max_dpd
    ):
        settlement = _find(ranked, RecoveryStrategy.negotiated_settlement)
        if (
            settlement is not None
            and settlement is not top
            and settlement.expected_value >= top.expected_value * cfg.settlement_ev_margin
        ):
            return settlement, True, "Cooperative borrower in early delinquency favours settlement"

    if factors.cooperation_level == CooperationLevel.non_cooperative and factors.collateral_value > 0:
        foreclosure = _find(ranked, RecoveryStrategy.collateral_foreclosure)
        if (
            foreclosure is not None
            and foreclosure is not top
            and foreclosure.estimated_recovery >= top.estimated_recovery * cfg.foreclosure_gross_margin
        ):
            return foreclosure, True, "Non-cooperative borrower with collateral favours foreclosure"

    return top, False, None


def _rationale(option: RecoveryOption, factors: PolicyFactors, ltv: float | None) -> list[str]:
    reasons: list[str] = []
    if option.strategy == RecoveryStrategy.negotiated_settlement:
        reasons.append("Fastest path to recovery with lowest cost")
        if factors.cooperation_level == CooperationLevel.cooperative:
            reasons.append("Borrower cooperation indicates high success probability")
        reasons.append("Preserves business relationship for future opportunities")
    elif option.strategy == RecoveryStrategy.collateral_foreclosure:
        reasons.append("Strong collateral provides secure recovery path")
        if ltv is not None and ltv < 80:
            reasons.append("Conservative LTV provides recovery cushion")
        reasons.append("Legal enforcement ensures definitive outcome")
    elif option.strategy == RecoveryStrategy.legal_judgment:
        reasons.append("Comprehensive legal remedy for asset discovery")
        reasons.append("Enables full enforcement of collection rights")
        if factors.cooperation_level == CooperationLevel.non_cooperative:
            reasons.append("Non-cooperative borrower requires legal pressure")
    else:
        reasons.append("Extended delinquency leaves outsourced collection as the remaining path")
    return reasons


def _milestones(strategy: RecoveryStrategy) -> list[Milestone]:
    steps = {
        RecoveryStrategy.negotiated_settlement: [
            ("Initial borrower contact", "Week 1"),
            ("Financial assessment complete", "Week 2"),
            ("Settlement agreement signed", "Week 4"),
            ("First payment received", "Week 6"),
        ],
        RecoveryStrategy.collateral_foreclosure: [
            ("Legal counsel engaged", "Week 2"),
            ("Foreclosure filed", "Week 6"),
            ("Court judgment obtained", "Month 4"),
            ("Asset liquidated", "Month 8"),
        ],
        RecoveryStrategy.legal_judgment: [
            ("Lawsuit filed", "Month 1"),
            ("Discovery completed", "Month 6"),
            ("Court judgment", "Month 12"),
            ("Collection initiated", "Month 14"),
        ],
    }
    return [Milestone(milestone=m, target=t) for m, t in steps.get(strategy, [])]


def select(
    ranked: list[RecoveryOption],
    factors: PolicyFactors,
    params: RiskParameters | None = None,
    loan_to_value: float | None = None,
) -> StrategySelection:
    option, override, reason = apply_policy_overrides(ranked, factors, params)
    rationale = _rationale(option, factors, loan_to_value)
    if reason:
        rationale.insert(0, reason)
    return StrategySelection(
        option=option,
        policy_override=override,
        rationale=rationale,
        milestones=_milestones(option.strategy),
    )


# ---------------------------------------------------------------------------
# Projections and liquidation
# ---------------------------------------------------------------------------
def project_recovery(
    case: RecoveryCase, option: RecoveryOption, params: RiskParameters | None = None
) -> RecoveryProjection:
    cfg = resolve_params(params).recovery
    balance = max(0.0, case.outstanding_balance or 0.0)

    scenarios: list[RecoveryScenarioProjection] = []
    for s in cfg.projection_scenarios:
        gross = option.estimated_recovery * s.factor
        cost_factor = 1.1 if s.factor > 1 else s.factor
        scenarios.append(RecoveryScenarioProjection(
            name=s.name,
            weight=s.weight,
            gross_recovery=round(gross, 2),
            recovery_costs=round(option.cost * cost_factor, 2),
            net_recovery=round(option.net_recovery * s.factor, 2),
            recovery_rate=round(gross / balance * 100, 1) if balance > 0 else None,
            timeline_months_min=round_half_up(option.timeline_months_min * s.timeline_factor),
            timeline_months_max=round_half_up(option.timeline_months_max * s.timeline_factor),
        ))

    expected = sum(s.net_recovery * s.weight for s in scenarios)
    return RecoveryProjection(
        scenarios=scenarios,
        expected_amount=round(expected, 2),
        recovery_rate=round(expected / balance * 100, 1) if balance > 0 else None,
        roi=round(expected / option.cost * 100, 1) if option.cost > 0 else None,
    )


def analyze_liquidation_cost_benefit(
    estimated_value: float,
    outstanding_debt: float,
    params: RiskParameters | None = None,
) -> LiquidationAnalysis:
    """Cost breakdown and weighted net proceeds of liquidating collateral."""
    cfg = resolve_params(params).recovery
    value = max(0.0, estimated_value)

    costs = {name: value * rate for name, rate in cfg.liquidation_cost_rates.items()}
    if "appraisal" in costs:
        costs["appraisal"] = min(cfg.liquidation_appraisal_cap, costs["appraisal"])
    total_costs = sum(costs.values())

    scenarios = [
        LiquidationScenarioResult(
            name=s.name,
            realization_rate=s.realization_rate,
            gross_recovery=round(value * s.realization_rate, 2),
            total_costs=round(total_costs * s.cost_factor, 2),
            net_recovery=round(value * s.realization_rate - total_costs * s.cost_factor, 2),
        )
        for s in cfg.liquidation_scenarios
    ]
    weights = {s.name: s.weight for s in cfg.liquidation_scenarios}
    expected_net = sum(s.net_recovery * weights[s.name] for s in scenarios)

    proceed = expected_net > outstanding_debt * cfg.liquidation_proceed_ratio
    return LiquidationAnalysis(
        cost_breakdown={k: round(v, 2) for k, v in costs.items()},
        total_estimated_costs=round(total_costs, 2),
        scenarios=scenarios,
        expected_net_recovery=round(expected_net, 2),
        recovery_efficiency=round(expected_net / value * 100, 1) if value > 0 else None,
        recommendation="Proceed with liquidation" if proceed else "Consider alternative strategies",
    )


def identify_recovery_risks(case: RecoveryCase) -> list[RecoveryRisk]:
    risks: list[RecoveryRisk] = []
    dpd = case.days_past_due or 0.0
    if dpd > 360:
        risks.append(RecoveryRisk(
            category="Collection Risk",
            risk="Extended delinquency reduces recovery probability",
            impact="High",
            mitigation="Immediate aggressive collection action required",
        ))
    if case.cooperation_level == CooperationLevel.non_cooperative:
        risks.append(RecoveryRisk(
            category="Borrower Risk",
            risk="Borrower non-cooperation may require legal action",
            impact="Medium",
            mitigation="Prepare for formal legal proceedings",
        ))
    if (case.collateral_value or 0) > 0:
        if case.loan_to_value is not None and case.loan_to_value > 90:
            risks.append(RecoveryRisk(
                category="Collateral Risk",
                risk="High LTV may result in recovery shortfall",
                impact="High",
                mitigation="Obtain updated appraisal and consider additional security",
            ))
        condition = (case.collateral_condition or "").lower()
        if "poor" in condition or "deteriorating" in condition:
            risks.append(RecoveryRisk(
                category="Collateral Risk",
                risk="Deteriorating collateral condition reduces value",
                impact="Medium",
                mitigation="Expedite foreclosure process to preserve value",
            ))
    else:
        risks.append(RecoveryRisk(
            category="Security Risk",
            risk="Unsecured loan limits recovery options",
            impact="Very High",
            mitigation="Focus on income garnishment and asset discovery",
        ))
    risks.append(RecoveryRisk(
        category="Market Risk",
        risk="Asset liquidation dependent on market conditions",
        impact="Medium",
        mitigation="Monitor market conditions and time asset sales appropriately",
    ))
    risks.append(RecoveryRisk(
        category="Legal Risk",
        risk="Legal system enforcement challenges",
        impact="Medium",
        mitigation="Engage experienced local legal counsel",
    ))
    return risks


def _risk_level(risks: list[RecoveryRisk]) -> str:
    if len(risks) > 4:
        return "High"
    if len(risks) > 2:
        return "Medium"
    return "Low"


def optimize(case: RecoveryCase, params: RiskParameters | None = None) -> RecoveryPlan:
    """Rank, select and project a recovery strategy for one case."""
    params = resolve_params(params)
    resolver = InputResolver(f"recovery[{case.loan_id}]")
    ranked = rank_options(case, params, resolver)
    selection = select(ranked, PolicyFactors.from_case(case), params, case.loan_to_value)
    if selection.policy_override:
        logger.info(
            "Recovery %s: policy selected %s over %s",
            case.loan_id, selection.option.strategy.value, ranked[0].strategy.value,
        )

    liquidation = None
    collateral = case.collateral_value or 0.0
    if collateral > 0 and case.collateral_type != CollateralType.unsecured:
        liquidation = analyze_liquidation_cost_benefit(
            collateral, max(0.0, case.outstanding_balance or 0.0), params
        )

    risks = identify_recovery_risks(case)
    return RecoveryPlan(
        loan_id=case.loan_id,
        ranked_options=ranked,
        selection=selection,
        projection=project_recovery(case, selection.option, params),
        risks=risks,
        overall_risk_level=_risk_level(risks),
        liquidation=liquidation,
        defaults_applied=resolver.defaults_applied,
    )
