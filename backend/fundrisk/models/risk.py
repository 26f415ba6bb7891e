from datetime import date
from typing import Optional

from pydantic import BaseModel

from fundrisk.models.loan import (
    BorrowerProfile,
    CollateralRecord,
    LoanRecord,
    LoanTape,
    OptionalNumber,
)


# ---------------------------------------------------------------------------
# Per-loan assessment
# ---------------------------------------------------------------------------
class RiskRating(BaseModel):
    rating: str
    level: str
    description: str


class LoanRiskScores(BaseModel):
    """1-5 scale, 5 = highest risk."""
    financial: int
    collateral: int
    performance: int
    industry: int


class MitigationAction(BaseModel):
    action: str
    category: str
    priority: str
    timeline: str


class MonitoringPlan(BaseModel):
    frequency: str
    requirements: list[str]
    escalation_triggers: list[str]
    next_review_date: date


class LoanRiskAssessment(BaseModel):
    loan_id: str
    probability_of_default: float
    pd_confidence: str
    pd_multipliers: dict[str, float]
    loss_given_default: float
    exposure: float
    expected_loss: float
    rating: RiskRating
    risk_scores: LoanRiskScores
    payment_performance_score: float
    risk_factors: list[str]
    strengths: list[str]
    mitigation_actions: list[MitigationAction]
    monitoring: MonitoringPlan
    defaults_applied: list[str] = []


class LoanRiskRequest(BaseModel):
    """Request body for a single-loan assessment."""
    loan: LoanRecord
    collateral: Optional[CollateralRecord] = None
    borrower: Optional[BorrowerProfile] = None


class LoanRiskResponse(BaseModel):
    assessment: LoanRiskAssessment
    narrative: Optional[str] = None
    narrative_available: bool = False


# ---------------------------------------------------------------------------
# Portfolio
# ---------------------------------------------------------------------------
class PortfolioSnapshot(BaseModel):
    """Aggregate portfolio state. Percentages are 0-100."""
    total_value: OptionalNumber = None
    active_loans: Optional[int] = None
    default_rate: OptionalNumber = None
    delinquency_rate: OptionalNumber = None
    provision_coverage: OptionalNumber = None
    largest_exposure: OptionalNumber = None
    top10_concentration: OptionalNumber = None
    top_sector_concentration: OptionalNumber = None
    geographic_concentration: OptionalNumber = None
    liquidity_ratio: OptionalNumber = None
    cash_and_equivalents: OptionalNumber = None
    weighted_average_maturity: OptionalNumber = None  # months

    model_config = {"frozen": True}


class MarketContext(BaseModel):
    usd_exposure: OptionalNumber = None  # percent of portfolio
    avg_funding_maturity: OptionalNumber = None  # months

    model_config = {"frozen": True}


class CategoryScores(BaseModel):
    """1-5 scale per risk category."""
    credit: float
    concentration: float
    liquidity: float
    market: float
    operational: float


class ConcentrationArea(BaseModel):
    value: float
    limit: float
    exceeds_limit: bool
    risk_level: str


class ConcentrationAnalysis(BaseModel):
    single_borrower: ConcentrationArea
    sector: ConcentrationArea
    geography: ConcentrationArea
    overall_score: int
    overall_level: str


class StressScenarioResult(BaseModel):
    name: str
    default_rate: float  # percent
    collateral_decline: float  # fraction
    stressed_lgd: float
    projected_loss: float
    capital_impact: float


class StressTestResult(BaseModel):
    base_expected_loss: float
    capital_buffer: float
    scenarios: list[StressScenarioResult]
    passes: bool
    required_actions: list[str]
    next_test_due: date


class EarlyWarning(BaseModel):
    category: str
    indicator: str
    current: float
    threshold: float
    severity: str


class Alert(BaseModel):
    alert: str
    action: str
    deadline: str


class EarlyWarningReport(BaseModel):
    warnings: list[EarlyWarning]
    alerts: list[Alert]
    warning_count: int
    critical_count: int
    escalate: bool


class RiskRecommendation(BaseModel):
    category: str
    action: str
    priority: str
    timeline: str


class ModeledLossSummary(BaseModel):
    """Loan-level roll-up when per-loan assessments are supplied."""
    loan_count: int
    total_exposure: float
    expected_loss: float
    weighted_pd: float
    rating_distribution: dict[str, int]


class PortfolioRiskResult(BaseModel):
    category_scores: CategoryScores
    overall_score: float
    overall_level: str
    concentration: ConcentrationAnalysis
    expected_loss: float
    cash_ratio: Optional[float] = None
    maturity_mismatch_months: float
    duration_years: float
    stress_test: StressTestResult
    early_warnings: EarlyWarningReport
    recommendations: list[RiskRecommendation]
    modeled_losses: Optional[ModeledLossSummary] = None
    defaults_applied: list[str] = []


class PortfolioRiskRequest(BaseModel):
    """Either a ready snapshot or raw records from which one is derived."""
    snapshot: Optional[PortfolioSnapshot] = None
    loans: list[LoanRecord] = []
    borrowers: list[BorrowerProfile] = []
    collateral: list[CollateralRecord] = []
    cash_and_equivalents: OptionalNumber = None
    market: MarketContext = MarketContext()


class PortfolioRiskResponse(BaseModel):
    snapshot: PortfolioSnapshot
    result: PortfolioRiskResult
    narrative: Optional[str] = None
    narrative_available: bool = False


class TapeUploadResponse(BaseModel):
    tape: LoanTape
    risk: PortfolioRiskResponse
