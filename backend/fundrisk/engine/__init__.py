"""Risk engine — credit scoring, loan and portfolio risk, cash flow, scenarios, recovery."""
from fundrisk.engine.credit_scoring import score_credit, recommend_loan
from fundrisk.engine.loan_risk import assess_loan
from fundrisk.engine.portfolio_risk import aggregate
from fundrisk.engine.cash_flow import project_cash_flows, analyze_liquidity
from fundrisk.engine.scenarios import run_scenarios, get_scenario, list_scenario_names
from fundrisk.engine.recovery import (
    PolicyFactors,
    rank_options,
    apply_policy_overrides,
    select,
    optimize,
    project_recovery,
    analyze_liquidation_cost_benefit,
)

__all__ = [
    "score_credit",
    "recommend_loan",
    "assess_loan",
    "aggregate",
    "project_cash_flows",
    "analyze_liquidity",
    "run_scenarios",
    "get_scenario",
    "list_scenario_names",
    "PolicyFactors",
    "rank_options",
    "apply_policy_overrides",
    "select",
    "optimize",
    "project_recovery",
    "analyze_liquidation_cost_benefit",
]
