from typing import Optional

from pydantic import BaseModel

from fundrisk.models.loan import BorrowerProfile, LoanRequest


class CreditSubScores(BaseModel):
    """Component scores, each in [0, 100] before weighting."""
    financial: float
    business: float
    collateral: float
    character: float
    capacity: float


class CreditScoreResult(BaseModel):
    score: int
    risk_category: str
    category_description: str
    recommended_rate: Optional[float] = None
    recommended_rate_min: Optional[float] = None
    recommended_rate_max: Optional[float] = None
    max_ltv: Optional[float] = None
    sub_scores: CreditSubScores
    defaults_applied: list[str] = []


class LoanRecommendation(BaseModel):
    decision: str
    approved_amount: float
    interest_rate_min: Optional[float] = None
    interest_rate_max: Optional[float] = None
    max_ltv: Optional[float] = None
    conditions: list[str]
    monitoring: str
    preliminary_decision: str
    next_steps: list[str]
    turnaround: str


class CreditScoreRequest(BaseModel):
    """Request body for scoring a borrower and loan request."""
    borrower: BorrowerProfile
    request: LoanRequest


class CreditScoreResponse(BaseModel):
    result: CreditScoreResult
    recommendation: LoanRecommendation
    narrative: Optional[str] = None
    narrative_available: bool = False
