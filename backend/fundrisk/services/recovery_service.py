"""Recovery strategy orchestration."""
from __future__ import annotations

from fundrisk.engine.recovery import optimize
from fundrisk.models.recovery import RecoveryStrategyRequest, RecoveryStrategyResponse
from fundrisk.parameters.registry import get_parameters
from fundrisk.services.narrative_service import build_recovery_prompt, narrate


def develop_recovery_strategy(request: RecoveryStrategyRequest) -> RecoveryStrategyResponse:
    plan = optimize(request.case, get_parameters())
    narrative, available = narrate(build_recovery_prompt(plan))
    return RecoveryStrategyResponse(plan=plan, narrative=narrative, narrative_available=available)
