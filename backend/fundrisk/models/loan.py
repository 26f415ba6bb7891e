from datetime import date
from enum import Enum
from typing import Annotated, Any, Optional

from pydantic import BaseModel, BeforeValidator


def _number_or_none(value: Any) -> Any:
    """Coerce blank or non-numeric input to None so the engine applies its default."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return None if value != value else value  # NaN
    if isinstance(value, str):
        text = value.strip().replace(",", "").rstrip("%")
        if not text:
            return None
        try:
            return float(text)
        except ValueError:
            return None
    return None


OptionalNumber = Annotated[Optional[float], BeforeValidator(_number_or_none)]


class BorrowerType(str, Enum):
    individual = "individual"
    business = "business"
    institution = "institution"


class CooperationLevel(str, Enum):
    cooperative = "cooperative"
    neutral = "neutral"
    non_cooperative = "non_cooperative"


class GeographyTier(str, Enum):
    tier1 = "tier1"
    tier2 = "tier2"
    tier3 = "tier3"


class CollateralType(str, Enum):
    real_estate = "real_estate"
    equipment = "equipment"
    vehicle = "vehicle"
    financial = "financial"
    unsecured = "unsecured"


class PaymentHistorySummary(BaseModel):
    late_payments_12m: OptionalNumber = None
    payments_made_12m: OptionalNumber = None

    model_config = {"frozen": True}


class LoanRecord(BaseModel):
    loan_id: str
    principal: OptionalNumber = None
    outstanding_balance: OptionalNumber = None
    interest_rate: OptionalNumber = None  # percent, e.g. 18.0
    maturity_date: Optional[date] = None
    days_past_due: OptionalNumber = None
    borrower_id: Optional[str] = None
    collateral_id: Optional[str] = None
    payment_history: PaymentHistorySummary = PaymentHistorySummary()

    model_config = {"frozen": True}


class BorrowerProfile(BaseModel):
    borrower_id: Optional[str] = None
    borrower_type: BorrowerType = BorrowerType.business
    industry: Optional[str] = None
    years_operating: OptionalNumber = None
    annual_revenue: OptionalNumber = None
    monthly_cash_flow: OptionalNumber = None
    net_worth: OptionalNumber = None
    debt_service_coverage: OptionalNumber = None
    current_ratio: OptionalNumber = None
    debt_to_income: OptionalNumber = None  # percent
    cooperation_level: CooperationLevel = CooperationLevel.neutral
    geography_tier: Optional[GeographyTier] = None
    region: Optional[str] = None

    model_config = {"frozen": True}


class CollateralRecord(BaseModel):
    collateral_id: Optional[str] = None
    collateral_type: CollateralType = CollateralType.unsecured
    appraised_value: OptionalNumber = None
    condition: Optional[str] = None
    title_status: Optional[str] = None
    loan_to_value: OptionalNumber = None  # percent

    model_config = {"frozen": True}


class LoanRequest(BaseModel):
    amount: OptionalNumber = None
    collateral_type: Optional[CollateralType] = None
    term_months: Optional[int] = None
    purpose: Optional[str] = None

    model_config = {"frozen": True}


class LoanTape(BaseModel):
    """Records parsed from an uploaded loan tape."""
    name: str
    loan_count: int
    total_balance: float
    loans: list[LoanRecord]
    borrowers: list[BorrowerProfile] = []
    collateral: list[CollateralRecord] = []
    cash_and_equivalents: OptionalNumber = None
