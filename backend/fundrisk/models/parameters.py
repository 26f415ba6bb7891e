"""Versioned, frozen parameter tables consumed by every engine."""
from typing import Literal, Optional

from pydantic import BaseModel, Field

from fundrisk.parameters import defaults as d

_FROZEN = {"frozen": True}


class ThresholdMultiplier(BaseModel):
    """A band that applies when a value is strictly below/above ``threshold``."""
    threshold: float
    multiplier: float
    direction: Literal["below", "above"] = "below"

    model_config = _FROZEN

    def applies(self, value: float) -> bool:
        if self.direction == "below":
            return value < self.threshold
        return value > self.threshold


def _bands(rows) -> list[ThresholdMultiplier]:
    return [ThresholdMultiplier(threshold=t, multiplier=m, direction=dr) for t, m, dr in rows]


class CreditBand(BaseModel):
    min_score: int
    category: str
    rate_min: Optional[float] = None
    rate_max: Optional[float] = None
    max_ltv: Optional[float] = None
    description: str = ""

    model_config = _FROZEN


class CreditParameters(BaseModel):
    weights: dict[str, float] = Field(default_factory=lambda: dict(d.CREDIT_WEIGHTS))
    neutral_financial: float = d.CREDIT_NEUTRAL_FINANCIAL
    default_business: float = d.CREDIT_DEFAULT_BUSINESS
    character: float = d.CREDIT_CHARACTER
    default_capacity: float = d.CREDIT_DEFAULT_CAPACITY
    capacity_floor: float = d.CREDIT_CAPACITY_FLOOR
    debt_service_share: float = d.CREDIT_DEBT_SERVICE_SHARE
    collateral_scores: dict[str, float] = Field(
        default_factory=lambda: dict(d.CREDIT_COLLATERAL_SCORES)
    )
    default_collateral_score: float = d.CREDIT_DEFAULT_COLLATERAL_SCORE
    low_risk_sectors: list[str] = Field(default_factory=lambda: list(d.LOW_RISK_SECTORS))
    high_risk_sectors: list[str] = Field(default_factory=lambda: list(d.HIGH_RISK_SECTORS))
    low_risk_bonus: float = d.LOW_RISK_SECTOR_BONUS
    high_risk_penalty: float = d.HIGH_RISK_SECTOR_PENALTY
    bands: list[CreditBand] = Field(
        default_factory=lambda: [
            CreditBand(
                min_score=s, category=c, rate_min=lo, rate_max=hi, max_ltv=ltv, description=desc
            )
            for s, c, lo, hi, ltv, desc in d.CREDIT_BANDS
        ]
    )
    approval_min_score: int = d.APPROVAL_MIN_SCORE
    full_amount_min_score: int = d.FULL_AMOUNT_MIN_SCORE
    partial_approval_fraction: float = d.PARTIAL_APPROVAL_FRACTION

    model_config = _FROZEN


class RatingBand(BaseModel):
    max_pd: float
    rating: str
    level: str
    description: str

    model_config = _FROZEN


class LoanRiskParameters(BaseModel):
    base_pd: float = d.BASE_PD
    pd_cap: float = d.PD_CAP
    dscr_bands: list[ThresholdMultiplier] = Field(default_factory=lambda: _bands(d.DSCR_PD_BANDS))
    ltv_bands: list[ThresholdMultiplier] = Field(default_factory=lambda: _bands(d.LTV_PD_BANDS))
    dpd_bands: list[ThresholdMultiplier] = Field(default_factory=lambda: _bands(d.DPD_PD_BANDS))
    late_payment_bands: list[ThresholdMultiplier] = Field(
        default_factory=lambda: _bands(d.LATE_PAYMENT_PD_BANDS)
    )
    surcharge_industries: list[str] = Field(
        default_factory=lambda: list(d.PD_SURCHARGE_INDUSTRIES)
    )
    industry_multiplier: float = d.PD_INDUSTRY_MULTIPLIER

    base_lgd: float = d.BASE_LGD
    collateral_lgd: dict[str, float] = Field(default_factory=lambda: dict(d.COLLATERAL_LGD))
    real_estate_high_ltv: float = d.REAL_ESTATE_HIGH_LTV
    real_estate_high_ltv_adj: float = d.REAL_ESTATE_HIGH_LTV_ADJ
    real_estate_low_ltv: float = d.REAL_ESTATE_LOW_LTV
    real_estate_low_ltv_adj: float = d.REAL_ESTATE_LOW_LTV_ADJ
    individual_adj: float = d.INDIVIDUAL_BORROWER_LGD_ADJ
    large_loan_threshold: float = d.LARGE_LOAN_THRESHOLD
    large_loan_adj: float = d.LARGE_LOAN_LGD_ADJ
    small_loan_threshold: float = d.SMALL_LOAN_THRESHOLD
    small_loan_adj: float = d.SMALL_LOAN_LGD_ADJ
    lgd_floor: float = d.LGD_FLOOR
    lgd_cap: float = d.LGD_CAP

    rating_bands: list[RatingBand] = Field(
        default_factory=lambda: [
            RatingBand(max_pd=p, rating=r, level=lv, description=desc)
            for p, r, lv, desc in d.RATING_BANDS
        ]
    )
    confidence_bands: list[tuple[float, str]] = Field(
        default_factory=lambda: list(d.PD_CONFIDENCE_BANDS)
    )
    confidence_floor: str = d.PD_CONFIDENCE_FLOOR
    ltv_min: float = d.LTV_CLAMP[0]
    ltv_max: float = d.LTV_CLAMP[1]

    model_config = _FROZEN


class StressScenarioDefinition(BaseModel):
    name: str
    default_multiplier: float
    collateral_decline: float

    model_config = _FROZEN


class PortfolioParameters(BaseModel):
    weights: dict[str, float] = Field(default_factory=lambda: dict(d.PORTFOLIO_WEIGHTS))
    concentration_limits: dict[str, float] = Field(
        default_factory=lambda: dict(d.CONCENTRATION_LIMITS)
    )
    concentration_levels: dict[str, tuple[float, float]] = Field(
        default_factory=lambda: dict(d.CONCENTRATION_LEVELS)
    )
    default_liquidity_ratio: float = d.DEFAULT_LIQUIDITY_RATIO
    default_usd_exposure: float = d.DEFAULT_USD_EXPOSURE
    default_wam_months: float = d.DEFAULT_WAM_MONTHS
    default_funding_maturity_months: float = d.DEFAULT_FUNDING_MATURITY_MONTHS
    operational_process_score: float = d.OPERATIONAL_PROCESS_SCORE
    operational_system_score: float = d.OPERATIONAL_SYSTEM_SCORE
    operational_compliance_base: float = d.OPERATIONAL_COMPLIANCE_BASE
    base_lgd: float = d.PORTFOLIO_BASE_LGD
    capital_buffer_ratio: float = d.CAPITAL_BUFFER_RATIO
    stress_buffer_tolerance: float = d.STRESS_BUFFER_TOLERANCE
    stress_scenarios: list[StressScenarioDefinition] = Field(
        default_factory=lambda: [
            StressScenarioDefinition(name=n, default_multiplier=m, collateral_decline=c)
            for n, m, c in d.STRESS_SCENARIOS
        ]
    )
    warning_thresholds: dict[str, float] = Field(
        default_factory=lambda: dict(d.WARNING_THRESHOLDS)
    )

    model_config = _FROZEN


class SeasonalityFactors(BaseModel):
    collections: float = 1.0
    originations: float = 1.0
    expenses: float = 1.0

    model_config = _FROZEN


class ContributionTranche(BaseModel):
    share: float
    first_month: int
    last_month: Optional[int] = None  # None runs to the horizon end

    model_config = _FROZEN


class LiquidityRatingBand(BaseModel):
    cash_ratio_below: float
    months_coverage_below: float
    rating: str

    model_config = _FROZEN


class CashFlowParameters(BaseModel):
    seasonality: dict[int, SeasonalityFactors] = Field(
        default_factory=lambda: {
            m: SeasonalityFactors(collections=c, originations=o, expenses=e)
            for m, (c, o, e) in d.SEASONALITY.items()
        }
    )
    contribution_schedule: list[ContributionTranche] = Field(
        default_factory=lambda: [
            ContributionTranche(share=s, first_month=f, last_month=l)
            for s, f, l in d.CONTRIBUTION_SCHEDULE
        ]
    )
    distributions_per_year: int = d.DISTRIBUTIONS_PER_YEAR
    days_per_month: float = d.DAYS_PER_MONTH
    default_horizon_months: int = d.DEFAULT_HORIZON_MONTHS
    liquidity_rating_bands: list[LiquidityRatingBand] = Field(
        default_factory=lambda: [
            LiquidityRatingBand(cash_ratio_below=r, months_coverage_below=m, rating=name)
            for r, m, name in d.LIQUIDITY_RATING_BANDS
        ]
    )
    liquidity_rating_top: str = d.LIQUIDITY_RATING_TOP
    target_cash_ratio: float = d.TARGET_CASH_RATIO
    minimum_cash_ratio: float = d.MINIMUM_CASH_RATIO

    model_config = _FROZEN

    def factors_for(self, calendar_month: int) -> SeasonalityFactors:
        return self.seasonality.get(calendar_month, SeasonalityFactors())


class CashFlowScenarioDefinition(BaseModel):
    name: str
    inflow_multiplier: float
    outflow_multiplier: float
    probability: float

    model_config = _FROZEN


class StrategyTerms(BaseModel):
    recovery_rate: float
    cost_rate: float
    probability: float
    timeline_min: int
    timeline_max: int

    model_config = _FROZEN


class ProjectionScenario(BaseModel):
    name: str
    factor: float
    weight: float
    timeline_factor: float = 1.0

    model_config = _FROZEN


class LiquidationScenario(BaseModel):
    name: str
    realization_rate: float
    cost_factor: float
    weight: float

    model_config = _FROZEN


class RecoveryParameters(BaseModel):
    settlement: StrategyTerms = StrategyTerms(
        recovery_rate=d.SETTLEMENT_BALANCE_RATE,
        cost_rate=d.SETTLEMENT_COST_RATE,
        probability=d.SETTLEMENT_PROBABILITY_FLOOR,
        timeline_min=d.SETTLEMENT_TIMELINE[0],
        timeline_max=d.SETTLEMENT_TIMELINE[1],
    )
    settlement_collateral_rate: float = d.SETTLEMENT_COLLATERAL_RATE
    settlement_probability_bands: list[tuple[float, float]] = Field(
        default_factory=lambda: list(d.SETTLEMENT_PROBABILITY_BANDS)
    )
    foreclosure: StrategyTerms = StrategyTerms(
        recovery_rate=d.FORECLOSURE_DEFAULT_RATE,
        cost_rate=d.FORECLOSURE_COST_RATE,
        probability=d.FORECLOSURE_PROBABILITY,
        timeline_min=d.FORECLOSURE_TIMELINE[0],
        timeline_max=d.FORECLOSURE_TIMELINE[1],
    )
    foreclosure_rates: dict[str, float] = Field(default_factory=lambda: dict(d.FORECLOSURE_RATES))
    legal: StrategyTerms = StrategyTerms(
        recovery_rate=d.LEGAL_RECOVERY_RATE,
        cost_rate=d.LEGAL_COST_RATE,
        probability=d.LEGAL_PROBABILITY,
        timeline_min=d.LEGAL_TIMELINE[0],
        timeline_max=d.LEGAL_TIMELINE[1],
    )
    charge_off: StrategyTerms = StrategyTerms(
        recovery_rate=d.CHARGE_OFF_RECOVERY_RATE,
        cost_rate=d.CHARGE_OFF_COST_RATE,
        probability=d.CHARGE_OFF_PROBABILITY,
        timeline_min=d.CHARGE_OFF_TIMELINE[0],
        timeline_max=d.CHARGE_OFF_TIMELINE[1],
    )
    charge_off_min_dpd: float = d.CHARGE_OFF_MIN_DPD
    cooperative_settlement_max_dpd: float = d.COOPERATIVE_SETTLEMENT_MAX_DPD
    settlement_ev_margin: float = d.SETTLEMENT_EV_MARGIN
    foreclosure_gross_margin: float = d.FORECLOSURE_GROSS_MARGIN
    projection_scenarios: list[ProjectionScenario] = Field(
        default_factory=lambda: [
            ProjectionScenario(name=n, factor=f, weight=w, timeline_factor=t)
            for n, f, w, t in d.RECOVERY_PROJECTION_SCENARIOS
        ]
    )
    liquidation_cost_rates: dict[str, float] = Field(
        default_factory=lambda: dict(d.LIQUIDATION_COST_RATES)
    )
    liquidation_appraisal_cap: float = d.LIQUIDATION_APPRAISAL_CAP
    liquidation_scenarios: list[LiquidationScenario] = Field(
        default_factory=lambda: [
            LiquidationScenario(name=n, realization_rate=r, cost_factor=c, weight=w)
            for n, r, c, w in d.LIQUIDATION_SCENARIOS
        ]
    )
    liquidation_proceed_ratio: float = d.LIQUIDATION_PROCEED_RATIO

    model_config = _FROZEN


class RiskParameters(BaseModel):
    """Complete parameter set. Loaded once, never mutated."""
    version: str = d.PARAMETERS_VERSION
    source: str = "defaults"
    credit: CreditParameters = Field(default_factory=CreditParameters)
    loan_risk: LoanRiskParameters = Field(default_factory=LoanRiskParameters)
    portfolio: PortfolioParameters = Field(default_factory=PortfolioParameters)
    cash_flow: CashFlowParameters = Field(default_factory=CashFlowParameters)
    scenarios: list[CashFlowScenarioDefinition] = Field(
        default_factory=lambda: [
            CashFlowScenarioDefinition(
                name=n, inflow_multiplier=i, outflow_multiplier=o, probability=p
            )
            for n, i, o, p in d.CASH_FLOW_SCENARIOS
        ]
    )
    recovery: RecoveryParameters = Field(default_factory=RecoveryParameters)

    model_config = _FROZEN
