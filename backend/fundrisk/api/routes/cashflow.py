from fastapi import APIRouter, HTTPException

from fundrisk.engine.scenarios import list_scenario_names
from fundrisk.models.cashflow import CashFlowForecastRequest, CashFlowForecastResponse
from fundrisk.parameters.registry import get_parameters
from fundrisk.services.forecast_service import run_forecast

router = APIRouter(tags=["cashflow"])


@router.post("/cashflow/forecast", response_model=CashFlowForecastResponse)
def forecast_endpoint(request: CashFlowForecastRequest):
    """Monthly projection, liquidity analysis and scenario outcomes."""
    try:
        return run_forecast(request)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))


@router.get("/cashflow/scenarios")
def get_scenarios():
    return list_scenario_names(get_parameters())
