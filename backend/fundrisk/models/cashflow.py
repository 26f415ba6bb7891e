from typing import Optional

from pydantic import BaseModel, Field

from fundrisk.models.loan import OptionalNumber


class CashFlowAssumptions(BaseModel):
    """Fund-level inputs. Collection and origination amounts cover the whole horizon."""
    fund_size: OptionalNumber = None
    current_cash: OptionalNumber = None
    expected_principal_repayments: OptionalNumber = None
    expected_interest_collections: OptionalNumber = None
    planned_originations: OptionalNumber = None
    monthly_operating_expenses: OptionalNumber = None
    expected_contributions: OptionalNumber = None
    planned_distributions: OptionalNumber = None  # annual
    horizon_months: Optional[int] = Field(default=None, ge=1, le=120)
    start_month: int = Field(default=1, ge=1, le=12)

    model_config = {"frozen": True}


class MonthlyInflows(BaseModel):
    principal: float
    interest: float
    contributions: float
    total: float


class MonthlyOutflows(BaseModel):
    originations: float
    operating_expenses: float
    distributions: float
    total: float


class MonthlyProjection(BaseModel):
    month: int
    calendar_month: int
    opening_cash: float
    inflows: MonthlyInflows
    outflows: MonthlyOutflows
    net_cash_flow: float
    closing_cash: float
    cash_ratio: Optional[float] = None
    operating_days_coverage: Optional[float] = None

    model_config = {"frozen": True}


class CurrentLiquidity(BaseModel):
    cash: float
    cash_ratio: Optional[float] = None
    operating_days_covered: Optional[float] = None
    rating: str


class ProjectedLiquidity(BaseModel):
    max_balance: float
    min_balance: float
    average_balance: float
    months_below_target: int


class FundingGap(BaseModel):
    month: int
    shortfall: float
    severity: str


class LiquidityRiskIndicators(BaseModel):
    cash_shortfall_risk: bool
    months_below_minimum: int
    cash_flow_volatility: float = 0.0
    funding_gaps: list[FundingGap]


class CashFlowRecommendation(BaseModel):
    category: str
    recommendation: str
    priority: str
    actions: list[str]
    timeline: str


class CashFlowRisk(BaseModel):
    category: str
    risk: str
    impact: str
    probability: str
    mitigation: str


class LiquidityAnalysis(BaseModel):
    current: CurrentLiquidity
    projected: ProjectedLiquidity
    risk_indicators: LiquidityRiskIndicators
    overall_rating: str
    average_monthly_cash_flow: float
    recommendations: list[CashFlowRecommendation]
    risks: list[CashFlowRisk]


class ScenarioOutcome(BaseModel):
    name: str
    inflow_multiplier: float
    outflow_multiplier: float
    probability: float
    final_cash: float
    min_cash: float
    projections: list[MonthlyProjection]


class ScenarioAnalysis(BaseModel):
    scenarios: dict[str, ScenarioOutcome]
    expected_final_cash: float
    liquidity_safe: bool


class CashFlowForecastRequest(BaseModel):
    assumptions: CashFlowAssumptions
    months: Optional[int] = Field(default=None, ge=1, le=120)
    include_scenarios: bool = True


class CashFlowForecastResponse(BaseModel):
    projections: list[MonthlyProjection]
    liquidity: LiquidityAnalysis
    scenarios: Optional[ScenarioAnalysis] = None
    defaults_applied: list[str] = []
    narrative: Optional[str] = None
    narrative_available: bool = False
