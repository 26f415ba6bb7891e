from datetime import date

from fastapi import APIRouter, Depends, HTTPException

from fundrisk.api.deps import get_as_of
from fundrisk.models.risk import (
    LoanRiskRequest,
    LoanRiskResponse,
    PortfolioRiskRequest,
    PortfolioRiskResponse,
)
from fundrisk.services.risk_service import assess_portfolio, assess_single_loan

router = APIRouter(tags=["risk"])


@router.post("/risk/loan", response_model=LoanRiskResponse)
def assess_loan_endpoint(request: LoanRiskRequest, as_of: date = Depends(get_as_of)):
    """PD, LGD, expected loss, rating and monitoring plan for one loan."""
    return assess_single_loan(request, as_of)


@router.post("/risk/portfolio", response_model=PortfolioRiskResponse)
def assess_portfolio_endpoint(request: PortfolioRiskRequest, as_of: date = Depends(get_as_of)):
    """Aggregate portfolio risk from a snapshot or from loan-level records."""
    if request.snapshot is None and not request.loans:
        raise HTTPException(status_code=422, detail="Provide a snapshot or at least one loan")
    try:
        return assess_portfolio(request, as_of)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
