from fastapi import APIRouter

from fundrisk.models.recovery import RecoveryStrategyRequest, RecoveryStrategyResponse
from fundrisk.services.recovery_service import develop_recovery_strategy

router = APIRouter(tags=["recovery"])


@router.post("/recovery/strategy", response_model=RecoveryStrategyResponse)
def recovery_strategy_endpoint(request: RecoveryStrategyRequest):
    """Rank recovery options for a distressed loan and select one under policy."""
    return develop_recovery_strategy(request)
