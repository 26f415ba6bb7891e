"""Cash flow forecast orchestration."""
from __future__ import annotations

from fundrisk.engine.cash_flow import analyze_liquidity, project_cash_flows
from fundrisk.engine.inputs import InputResolver
from fundrisk.engine.scenarios import run_scenarios
from fundrisk.models.cashflow import CashFlowForecastRequest, CashFlowForecastResponse
from fundrisk.parameters.registry import get_parameters
from fundrisk.services.narrative_service import build_cash_flow_prompt, narrate


def run_forecast(request: CashFlowForecastRequest) -> CashFlowForecastResponse:
    """Base projection, liquidity analysis and (optionally) the scenario set."""
    params = get_parameters()
    resolver = InputResolver("cash_flow")
    projections = project_cash_flows(request.assumptions, request.months, params, resolver)
    scenarios = (
        run_scenarios(request.assumptions, request.months, params)
        if request.include_scenarios
        else None
    )
    liquidity = analyze_liquidity(request.assumptions, projections, params, scenarios)
    narrative, available = narrate(build_cash_flow_prompt(liquidity, scenarios))
    return CashFlowForecastResponse(
        projections=projections,
        liquidity=liquidity,
        scenarios=scenarios,
        defaults_applied=resolver.defaults_applied,
        narrative=narrative,
        narrative_available=available,
    )
