"""Narrative generation boundary.

Narrative text comes from an external text-generation collaborator. Prompts are
built only from numbers the engines already computed; the collaborator never
feeds back into any calculation. Any collaborator failure degrades the report
to numbers only.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol

from fundrisk.config import settings
from fundrisk.models.cashflow import LiquidityAnalysis, ScenarioAnalysis
from fundrisk.models.credit import CreditScoreResult, LoanRecommendation
from fundrisk.models.recovery import RecoveryPlan
from fundrisk.models.risk import LoanRiskAssessment, PortfolioRiskResult, PortfolioSnapshot

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NarrativeOptions:
    model_tier: str = "standard"
    max_tokens: int = 1200


@dataclass(frozen=True)
class NarrativeResponse:
    text: str | None
    success: bool
    error: str | None = None


class NarrativeClient(Protocol):
    def generate(self, prompt: str, options: NarrativeOptions) -> NarrativeResponse:
        ...


class DisabledNarrativeClient:
    """Used when no collaborator is configured."""

    def generate(self, prompt: str, options: NarrativeOptions) -> NarrativeResponse:
        return NarrativeResponse(text=None, success=False, error="narrative generation disabled")


_client: NarrativeClient | None = None


def set_narrative_client(client: NarrativeClient | None) -> None:
    """Install (or with None, remove) the narrative collaborator."""
    global _client
    _client = client


def get_narrative_client() -> NarrativeClient:
    if _client is not None and settings.NARRATIVE_ENABLED:
        return _client
    return DisabledNarrativeClient()


def default_options() -> NarrativeOptions:
    return NarrativeOptions(
        model_tier=settings.NARRATIVE_MODEL_TIER,
        max_tokens=settings.NARRATIVE_MAX_TOKENS,
    )


def generate_narrative(prompt: str, options: NarrativeOptions | None = None) -> NarrativeResponse:
    """Call the collaborator; never raises."""
    client = get_narrative_client()
    try:
        response = client.generate(prompt, options or default_options())
    except Exception as e:
        logger.warning("Narrative generation failed, returning numbers only: %s", e)
        return NarrativeResponse(text=None, success=False, error=str(e))
    if not response.success:
        logger.debug("Narrative unavailable: %s", response.error)
    return response


def narrate(prompt: str) -> tuple[str | None, bool]:
    """(text, available) pair for attaching to an API response."""
    response = generate_narrative(prompt)
    if response.success and response.text:
        return response.text, True
    return None, False


# ---------------------------------------------------------------------------
# Prompt builders
# ---------------------------------------------------------------------------
def _money(value: float | None) -> str:
    return "n/a" if value is None else f"${value:,.0f}"


def _pct(value: float | None, digits: int = 1) -> str:
    return "n/a" if value is None else f"{value:.{digits}f}%"


def build_credit_prompt(result: CreditScoreResult, recommendation: LoanRecommendation) -> str:
    s = result.sub_scores
    lines = [
        "Summarise this credit assessment for an investment committee.",
        f"Credit score: {result.score}/100 ({result.risk_category}, {result.category_description})",
        f"Sub-scores: financial {s.financial:.0f}, business {s.business:.0f}, "
        f"collateral {s.collateral:.0f}, character {s.character:.0f}, capacity {s.capacity:.0f}",
        f"Recommended rate: {_pct(result.recommended_rate)}; max LTV: {_pct(result.max_ltv, 0)}",
        f"Decision: {recommendation.decision}; approved amount: {_money(recommendation.approved_amount)}",
        f"Conditions: {', '.join(recommendation.conditions) or 'none'}",
    ]
    if result.defaults_applied:
        lines.append(f"Inputs defaulted: {', '.join(result.defaults_applied)}")
    return "\n".join(lines)


def build_loan_risk_prompt(assessment: LoanRiskAssessment) -> str:
    lines = [
        f"Explain the risk profile of loan {assessment.loan_id}.",
        f"PD: {_pct(assessment.probability_of_default * 100)} ({assessment.pd_confidence} confidence)",
        f"LGD: {_pct(assessment.loss_given_default * 100)}; exposure {_money(assessment.exposure)}",
        f"Expected loss: {_money(assessment.expected_loss)}",
        f"Rating: {assessment.rating.rating} ({assessment.rating.level})",
        f"Risk factors: {', '.join(assessment.risk_factors) or 'none'}",
        f"Strengths: {', '.join(assessment.strengths) or 'none'}",
    ]
    return "\n".join(lines)


def build_portfolio_prompt(snapshot: PortfolioSnapshot, result: PortfolioRiskResult) -> str:
    c = result.category_scores
    lines = [
        "Write a portfolio risk commentary for limited partners.",
        f"Portfolio value: {_money(snapshot.total_value)}; active loans: {snapshot.active_loans}",
        f"Overall risk score: {result.overall_score:.1f} ({result.overall_level})",
        f"Category scores (1-5): credit {c.credit:g}, concentration {c.concentration:g}, "
        f"liquidity {c.liquidity:g}, market {c.market:g}, operational {c.operational:g}",
        f"Expected loss: {_money(result.expected_loss)}",
        f"Stress test: {'passed' if result.stress_test.passes else 'failed'}",
        f"Early warnings: {result.early_warnings.warning_count} "
        f"({result.early_warnings.critical_count} critical)",
    ]
    return "\n".join(lines)


def build_cash_flow_prompt(liquidity: LiquidityAnalysis, scenarios: ScenarioAnalysis | None) -> str:
    lines = [
        "Summarise the fund's cash flow outlook.",
        f"Current liquidity: {liquidity.current.rating}, cash ratio {_pct(liquidity.current.cash_ratio)}",
        f"Projected balance: min {_money(liquidity.projected.min_balance)}, "
        f"max {_money(liquidity.projected.max_balance)}",
        f"Overall liquidity rating: {liquidity.overall_rating}",
    ]
    if scenarios is not None:
        for name, outcome in scenarios.scenarios.items():
            lines.append(
                f"Scenario {name}: final {_money(outcome.final_cash)}, min {_money(outcome.min_cash)}"
            )
        lines.append(f"Liquidity safe under stress: {scenarios.liquidity_safe}")
    return "\n".join(lines)


def build_recovery_prompt(plan: RecoveryPlan) -> str:
    chosen = plan.selection.option
    lines = [
        f"Describe the recovery plan for loan {plan.loan_id}.",
        f"Selected strategy: {chosen.strategy.value} "
        f"({'policy override' if plan.selection.policy_override else 'top ranked'})",
        f"Expected value: {_money(chosen.expected_value)}; net recovery {_money(chosen.net_recovery)}",
        f"Projected expected amount: {_money(plan.projection.expected_amount)}",
        f"Rationale: {'; '.join(plan.selection.rationale)}",
    ]
    return "\n".join(lines)
