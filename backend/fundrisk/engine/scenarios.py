"""Scenario definitions — named inflow/outflow multiplier sets.

Each scenario reruns the cash flow forecaster on a copy of the assumptions.
Inflow multipliers scale collections (principal and interest); outflow
multipliers scale originations and operating expenses. Contributions and
distributions are commitments and are never scaled.
"""
from __future__ import annotations

from fundrisk.engine.cash_flow import project_cash_flows
from fundrisk.engine.inputs import resolve_params
from fundrisk.models.cashflow import CashFlowAssumptions, ScenarioAnalysis, ScenarioOutcome
from fundrisk.models.parameters import CashFlowScenarioDefinition, RiskParameters


def get_scenario(name: str, params: RiskParameters | None = None) -> CashFlowScenarioDefinition:
    """Return a scenario definition by name. Defaults to base if unknown."""
    scenarios = {s.name: s for s in resolve_params(params).scenarios}
    return scenarios.get(name, scenarios["base"])


def list_scenario_names(params: RiskParameters | None = None) -> list[str]:
    return [s.name for s in resolve_params(params).scenarios]


def _scaled(value: float | None, multiplier: float) -> float | None:
    return None if value is None else value * multiplier


def apply_scenario(
    assumptions: CashFlowAssumptions, scenario: CashFlowScenarioDefinition
) -> CashFlowAssumptions:
    """Copy of ``assumptions`` with the scenario multipliers applied."""
    return assumptions.model_copy(update={
        "expected_principal_repayments": _scaled(
            assumptions.expected_principal_repayments, scenario.inflow_multiplier
        ),
        "expected_interest_collections": _scaled(
            assumptions.expected_interest_collections, scenario.inflow_multiplier
        ),
        "planned_originations": _scaled(
            assumptions.planned_originations, scenario.outflow_multiplier
        ),
        "monthly_operating_expenses": _scaled(
            assumptions.monthly_operating_expenses, scenario.outflow_multiplier
        ),
    })


def run_scenarios(
    assumptions: CashFlowAssumptions,
    months: int | None = None,
    params: RiskParameters | None = None,
) -> ScenarioAnalysis:
    """Run every configured scenario independently."""
    params = resolve_params(params)
    outcomes: dict[str, ScenarioOutcome] = {}
    for scenario in params.scenarios:
        projections = project_cash_flows(apply_scenario(assumptions, scenario), months, params)
        closing = [p.closing_cash for p in projections]
        outcomes[scenario.name] = ScenarioOutcome(
            name=scenario.name,
            inflow_multiplier=scenario.inflow_multiplier,
            outflow_multiplier=scenario.outflow_multiplier,
            probability=scenario.probability,
            final_cash=closing[-1],
            min_cash=min(closing),
            projections=projections,
        )

    expected = sum(o.final_cash * o.probability for o in outcomes.values())
    stress = outcomes.get("stress")
    if stress is None:
        stress = min(outcomes.values(), key=lambda o: o.min_cash)
    return ScenarioAnalysis(
        scenarios=outcomes,
        expected_final_cash=round(expected, 2),
        liquidity_safe=stress.min_cash >= 0,
    )
