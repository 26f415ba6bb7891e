from fastapi import APIRouter

from fundrisk.models.credit import CreditScoreRequest, CreditScoreResponse
from fundrisk.services.risk_service import score_borrower

router = APIRouter(tags=["credit"])


@router.post("/credit/score", response_model=CreditScoreResponse)
def score_credit_endpoint(request: CreditScoreRequest):
    """Score a borrower and recommend terms for the requested loan."""
    return score_borrower(request)
