from enum import Enum
from typing import Optional

from pydantic import BaseModel

from fundrisk.models.loan import CollateralType, CooperationLevel, OptionalNumber


class RecoveryStrategy(str, Enum):
    negotiated_settlement = "negotiated_settlement"
    collateral_foreclosure = "collateral_foreclosure"
    legal_judgment = "legal_judgment"
    charge_off = "charge_off"


class RecoveryCase(BaseModel):
    loan_id: str
    outstanding_balance: OptionalNumber = None
    collateral_value: OptionalNumber = None
    collateral_type: CollateralType = CollateralType.unsecured
    collateral_condition: Optional[str] = None
    days_past_due: OptionalNumber = None
    cooperation_level: CooperationLevel = CooperationLevel.neutral
    loan_to_value: OptionalNumber = None

    model_config = {"frozen": True}


class RecoveryOption(BaseModel):
    strategy: RecoveryStrategy
    description: str
    timeline_months_min: int
    timeline_months_max: int
    estimated_recovery: float
    cost: float
    probability: float
    net_recovery: float
    expected_value: float
    recovery_roi: float

    model_config = {"frozen": True}


class Milestone(BaseModel):
    milestone: str
    target: str


class StrategySelection(BaseModel):
    option: RecoveryOption
    policy_override: bool
    rationale: list[str]
    milestones: list[Milestone]


class RecoveryScenarioProjection(BaseModel):
    name: str
    weight: float
    gross_recovery: float
    recovery_costs: float
    net_recovery: float
    recovery_rate: Optional[float] = None  # percent of balance
    timeline_months_min: int
    timeline_months_max: int


class RecoveryProjection(BaseModel):
    scenarios: list[RecoveryScenarioProjection]
    expected_amount: float
    recovery_rate: Optional[float] = None
    roi: Optional[float] = None


class RecoveryRisk(BaseModel):
    category: str
    risk: str
    impact: str
    mitigation: str


class LiquidationScenarioResult(BaseModel):
    name: str
    realization_rate: float
    gross_recovery: float
    total_costs: float
    net_recovery: float


class LiquidationAnalysis(BaseModel):
    cost_breakdown: dict[str, float]
    total_estimated_costs: float
    scenarios: list[LiquidationScenarioResult]
    expected_net_recovery: float
    recovery_efficiency: Optional[float] = None
    recommendation: str


class RecoveryPlan(BaseModel):
    loan_id: str
    ranked_options: list[RecoveryOption]
    selection: StrategySelection
    projection: RecoveryProjection
    risks: list[RecoveryRisk]
    overall_risk_level: str
    liquidation: Optional[LiquidationAnalysis] = None
    defaults_applied: list[str] = []


class RecoveryStrategyRequest(BaseModel):
    case: RecoveryCase


class RecoveryStrategyResponse(BaseModel):
    plan: RecoveryPlan
    narrative: Optional[str] = None
    narrative_available: bool = False
