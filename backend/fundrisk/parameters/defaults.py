"""Built-in numeric defaults for every engine component.

Plain tables only. ``fundrisk.models.parameters.RiskParameters`` wraps them in a
validated, frozen structure and a JSON parameter file may override any entry.
"""
from __future__ import annotations

PARAMETERS_VERSION = "1.0.0"

# ---------------------------------------------------------------------------
# Credit scoring
# ---------------------------------------------------------------------------
CREDIT_WEIGHTS = {
    "financial": 35.0,
    "business": 25.0,
    "collateral": 20.0,
    "character": 15.0,
    "capacity": 5.0,
}

CREDIT_NEUTRAL_FINANCIAL = 50.0
CREDIT_DEFAULT_BUSINESS = 60.0
CREDIT_CHARACTER = 75.0
CREDIT_DEFAULT_CAPACITY = 70.0
CREDIT_CAPACITY_FLOOR = 30.0
CREDIT_DEBT_SERVICE_SHARE = 0.25  # assumed annual debt service as a share of the amount

CREDIT_COLLATERAL_SCORES = {
    "real_estate": 85.0,
    "equipment": 75.0,
}
CREDIT_DEFAULT_COLLATERAL_SCORE = 70.0

LOW_RISK_SECTORS = ["education", "healthcare", "essential services", "government"]
HIGH_RISK_SECTORS = ["mining", "tourism", "hospitality", "garment", "agriculture"]
LOW_RISK_SECTOR_BONUS = 10.0
HIGH_RISK_SECTOR_PENALTY = 15.0

# (min score, category, rate min %, rate max %, max LTV %, description)
CREDIT_BANDS = [
    (90, "excellent", 8.0, 12.0, 80.0, "Prime borrowers"),
    (80, "good", 12.0, 16.0, 70.0, "Strong borrowers"),
    (70, "acceptable", 16.0, 20.0, 60.0, "Standard borrowers"),
    (60, "watchlist", 20.0, 24.0, 50.0, "Monitored borrowers"),
    (50, "subprime", 24.0, 30.0, 40.0, "High-risk borrowers"),
    (0, "declined", None, None, None, "Rejected applications"),
]

APPROVAL_MIN_SCORE = 60
FULL_AMOUNT_MIN_SCORE = 70
PARTIAL_APPROVAL_FRACTION = 0.75

# ---------------------------------------------------------------------------
# Loan risk (PD / LGD)
# ---------------------------------------------------------------------------
BASE_PD = 0.02
PD_CAP = 0.95

# (threshold, multiplier, direction)
DSCR_PD_BANDS = [
    (1.0, 3.0, "below"),
    (1.25, 2.0, "below"),
    (2.0, 0.7, "above"),
]
LTV_PD_BANDS = [
    (90.0, 2.5, "above"),
    (80.0, 1.5, "above"),
    (60.0, 0.8, "below"),
]
DPD_PD_BANDS = [
    (90.0, 5.0, "above"),
    (60.0, 3.0, "above"),
    (30.0, 2.0, "above"),
    (0.0, 1.5, "above"),
]
LATE_PAYMENT_PD_BANDS = [
    (6.0, 2.0, "above"),
    (3.0, 1.3, "above"),
]
PD_SURCHARGE_INDUSTRIES = ["tourism", "hospitality"]
PD_INDUSTRY_MULTIPLIER = 1.5

BASE_LGD = 0.45
COLLATERAL_LGD = {
    "real_estate": 0.30,
    "equipment": 0.50,
    "unsecured": 0.70,
}
REAL_ESTATE_HIGH_LTV = 80.0
REAL_ESTATE_HIGH_LTV_ADJ = 0.10
REAL_ESTATE_LOW_LTV = 60.0
REAL_ESTATE_LOW_LTV_ADJ = -0.05
INDIVIDUAL_BORROWER_LGD_ADJ = 0.05
LARGE_LOAN_THRESHOLD = 1_000_000.0
LARGE_LOAN_LGD_ADJ = -0.05
SMALL_LOAN_THRESHOLD = 100_000.0
SMALL_LOAN_LGD_ADJ = 0.05
LGD_FLOOR = 0.10
LGD_CAP = 0.90

# (max PD, rating, level, description)
RATING_BANDS = [
    (0.01, "AAA", "Minimal", "Exceptional credit quality"),
    (0.025, "AA", "Low", "Very strong credit quality"),
    (0.05, "A", "Low", "Strong credit quality"),
    (0.10, "BBB", "Medium", "Good credit quality"),
    (0.20, "BB", "Medium", "Speculative credit quality"),
    (0.35, "B", "High", "Highly speculative"),
    (1.0, "CCC", "Very High", "Substantial credit risk"),
]

# (PD strictly below, confidence)
PD_CONFIDENCE_BANDS = [
    (0.05, "High"),
    (0.15, "Medium"),
]
PD_CONFIDENCE_FLOOR = "Low"

LTV_CLAMP = (0.0, 500.0)

# ---------------------------------------------------------------------------
# Portfolio risk
# ---------------------------------------------------------------------------
PORTFOLIO_WEIGHTS = {
    "credit": 35.0,
    "concentration": 25.0,
    "liquidity": 20.0,
    "market": 15.0,
    "operational": 5.0,
}

CONCENTRATION_LIMITS = {
    "single_borrower": 10.0,
    "sector": 25.0,
    "geography": 40.0,
}
# (High above, Medium above)
CONCENTRATION_LEVELS = {
    "single_borrower": (15.0, 10.0),
    "sector": (30.0, 20.0),
    "geography": (50.0, 35.0),
}

DEFAULT_LIQUIDITY_RATIO = 20.0
DEFAULT_USD_EXPOSURE = 85.0
DEFAULT_WAM_MONTHS = 24.0
DEFAULT_FUNDING_MATURITY_MONTHS = 60.0

OPERATIONAL_PROCESS_SCORE = 3.0
OPERATIONAL_SYSTEM_SCORE = 2.0
OPERATIONAL_COMPLIANCE_BASE = 2.0

PORTFOLIO_BASE_LGD = 0.45
CAPITAL_BUFFER_RATIO = 0.20
STRESS_BUFFER_TOLERANCE = 0.50

# (name, default-rate multiplier, collateral decline fraction)
STRESS_SCENARIOS = [
    ("base", 1.0, 0.0),
    ("adverse", 2.0, 0.15),
    ("severely_adverse", 3.0, 0.30),
]

WARNING_THRESHOLDS = {
    "default_rate": 3.0,
    "delinquency_rate": 8.0,
    "largest_exposure": 15.0,
    "liquidity_ratio": 15.0,
}

# ---------------------------------------------------------------------------
# Cash flow
# ---------------------------------------------------------------------------
# calendar month -> (collections, originations, expenses)
SEASONALITY = {
    1: (1.2, 0.9, 1.2),
    4: (0.8, 0.7, 1.1),
    6: (0.95, 1.1, 1.05),
    7: (0.95, 1.1, 1.05),
    8: (0.95, 1.1, 1.05),
    9: (0.95, 1.1, 1.05),
    12: (1.2, 0.9, 1.2),
}

# (share, first month, last month or None for the horizon end)
CONTRIBUTION_SCHEDULE = [
    (0.40, 1, 3),
    (0.30, 4, 6),
    (0.30, 7, None),
]
DISTRIBUTIONS_PER_YEAR = 4
DAYS_PER_MONTH = 30.0
DEFAULT_HORIZON_MONTHS = 12

# (cash ratio % below, months of opex below, rating)
LIQUIDITY_RATING_BANDS = [
    (5.0, 2.0, "Critical"),
    (10.0, 3.0, "Low"),
    (15.0, 6.0, "Medium"),
    (25.0, 12.0, "Good"),
]
LIQUIDITY_RATING_TOP = "Excellent"
TARGET_CASH_RATIO = 10.0
MINIMUM_CASH_RATIO = 5.0

# (name, inflow multiplier, outflow multiplier, probability)
CASH_FLOW_SCENARIOS = [
    ("base", 1.0, 1.0, 0.50),
    ("optimistic", 1.2, 0.9, 0.25),
    ("conservative", 0.85, 1.1, 0.20),
    ("stress", 0.7, 1.2, 0.05),
]

# ---------------------------------------------------------------------------
# Recovery
# ---------------------------------------------------------------------------
SETTLEMENT_BALANCE_RATE = 0.85
SETTLEMENT_COLLATERAL_RATE = 0.90
SETTLEMENT_COST_RATE = 0.05
# (DPD strictly below, probability)
SETTLEMENT_PROBABILITY_BANDS = [
    (120.0, 0.70),
    (180.0, 0.50),
]
SETTLEMENT_PROBABILITY_FLOOR = 0.30
SETTLEMENT_TIMELINE = (1, 3)

FORECLOSURE_RATES = {
    "real_estate": 0.75,
    "equipment": 0.60,
    "vehicle": 0.65,
}
FORECLOSURE_DEFAULT_RATE = 0.70
FORECLOSURE_COST_RATE = 0.15
FORECLOSURE_PROBABILITY = 0.80
FORECLOSURE_TIMELINE = (6, 18)

LEGAL_RECOVERY_RATE = 0.60
LEGAL_COST_RATE = 0.20
LEGAL_PROBABILITY = 0.65
LEGAL_TIMELINE = (8, 24)

CHARGE_OFF_MIN_DPD = 360.0
CHARGE_OFF_RECOVERY_RATE = 0.20
CHARGE_OFF_COST_RATE = 0.30
CHARGE_OFF_PROBABILITY = 0.25
CHARGE_OFF_TIMELINE = (12, 36)

COOPERATIVE_SETTLEMENT_MAX_DPD = 120.0
SETTLEMENT_EV_MARGIN = 0.75
FORECLOSURE_GROSS_MARGIN = 0.80

# (name, recovery factor, weight, timeline factor)
RECOVERY_PROJECTION_SCENARIOS = [
    ("optimistic", 1.2, 0.25, 1.0),
    ("expected", 1.0, 0.50, 1.0),
    ("conservative", 0.7, 0.25, 1.3),
]

LIQUIDATION_COST_RATES = {
    "legal": 0.05,
    "appraisal": 0.02,
    "marketing": 0.02,
    "broker": 0.06,
    "maintenance": 0.01,
    "miscellaneous": 0.01,
}
LIQUIDATION_APPRAISAL_CAP = 5000.0
# (name, realization rate, cost factor, weight)
LIQUIDATION_SCENARIOS = [
    ("optimistic", 0.85, 0.9, 0.25),
    ("expected", 0.70, 1.0, 0.50),
    ("pessimistic", 0.55, 1.2, 0.25),
]
LIQUIDATION_PROCEED_RATIO = 0.30
