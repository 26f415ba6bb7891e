"""Parse an uploaded Excel loan tape into loan, borrower and collateral records.

Column matching is flexible (partial, case-insensitive).  Rates and LTVs are
carried as percentages; tapes that express them as decimals (0.18) are scaled
up.  Cells that cannot be read are left empty so the engines apply their
documented defaults.
"""
from __future__ import annotations

import logging
import re
from datetime import date
from io import BytesIO
from typing import BinaryIO

import pandas as pd

from fundrisk.models.loan import (
    BorrowerProfile,
    CollateralRecord,
    CollateralType,
    LoanRecord,
    LoanTape,
    PaymentHistorySummary,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Column matching helpers
# ---------------------------------------------------------------------------
_COLUMN_PATTERNS: dict[str, list[str]] = {
    "loan_id": ["loan id", "loan number", "loan #", "loan_id"],
    "balance": ["outstanding balance", "current balance", "outstanding", "unpaid", "upb", "balance"],
    "principal": ["original amount", "original principal", "original balance", "loan amount", "principal"],
    "rate": ["interest rate", "note rate", "current rate", "rate"],
    "maturity": ["maturity date", "maturity", "due date"],
    "dpd": ["days past due", "days delinquent", "dpd"],
    "late_payments": ["late payments", "times late", "late pays"],
    "borrower_id": ["borrower id", "borrower_id", "borrower name", "borrower"],
    "industry": ["industry", "sector", "naics"],
    "region": ["region", "property state", "state", "county"],
    "dscr": ["dscr", "debt service coverage", "debt service"],
    "revenue": ["annual revenue", "revenue", "sales"],
    "collateral_type": ["collateral type", "security type", "asset type"],
    "collateral_value": ["appraised value", "collateral value", "appraisal", "property value"],
    "ltv": ["ltv", "loan to value", "loan-to-value"],
}

_COLLATERAL_ALIASES: dict[str, CollateralType] = {
    "real estate": CollateralType.real_estate,
    "property": CollateralType.real_estate,
    "land": CollateralType.real_estate,
    "building": CollateralType.real_estate,
    "equipment": CollateralType.equipment,
    "machinery": CollateralType.equipment,
    "vehicle": CollateralType.vehicle,
    "auto": CollateralType.vehicle,
    "truck": CollateralType.vehicle,
    "financial": CollateralType.financial,
    "securities": CollateralType.financial,
    "deposit": CollateralType.financial,
}


def _find_column(columns: list[str], key: str) -> str | None:
    """Find a column name by partial case-insensitive match.

    Patterns are tried in order (most specific first); the first column
    containing a pattern wins.
    """
    patterns = _COLUMN_PATTERNS.get(key, [key])
    col_lower = {c: c.lower().strip() for c in columns}
    for pattern in patterns:
        pat = pattern.lower()
        for orig, low in col_lower.items():
            if pat in low:
                return orig
    return None


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------
def parse_loan_tape(file: BinaryIO, filename: str) -> LoanTape:
    """Parse an Excel loan tape into a LoanTape.

    Raises ValueError on invalid / empty data.
    """
    data = file.read()
    if not data:
        raise ValueError("Uploaded file is empty")

    df = pd.read_excel(BytesIO(data))
    df.columns = [str(c).strip() for c in df.columns]

    if df.empty:
        raise ValueError("Spreadsheet contains no data rows")

    col_map: dict[str, str | None] = {
        key: _find_column(list(df.columns), key) for key in _COLUMN_PATTERNS
    }
    # A single column must not feed two fields (e.g. "Original Balance").
    if col_map["principal"] is not None and col_map["principal"] == col_map["balance"]:
        col_map["principal"] = None

    logger.info("Tape columns: %s", list(df.columns))
    logger.info("Column mapping: %s", col_map)

    balance_col = col_map["balance"] or col_map["principal"]
    if not balance_col:
        raise ValueError(
            f"Cannot find a balance column. Available columns: {list(df.columns)}"
        )

    df[balance_col] = pd.to_numeric(df[balance_col], errors="coerce")
    df = df[df[balance_col].notna() & (df[balance_col] > 0)].copy()

    if df.empty:
        raise ValueError("No valid loan rows after filtering")

    loans: list[LoanRecord] = []
    borrowers: dict[str, BorrowerProfile] = {}
    collateral: list[CollateralRecord] = []

    for _, row in df.iterrows():
        n = len(loans) + 1
        loan_id = _safe_str(row, col_map["loan_id"]) or f"LN-{n:04d}"
        borrower_id = _safe_str(row, col_map["borrower_id"]) or f"BR-{n:04d}"

        if borrower_id not in borrowers:
            borrowers[borrower_id] = BorrowerProfile(
                borrower_id=borrower_id,
                industry=_safe_str(row, col_map["industry"]),
                region=_safe_str(row, col_map["region"]),
                debt_service_coverage=_safe_float(row, col_map["dscr"]),
                annual_revenue=_safe_float(row, col_map["revenue"]),
            )

        collateral_id = None
        ctype = _collateral_type(_safe_str(row, col_map["collateral_type"]))
        value = _safe_float(row, col_map["collateral_value"])
        ltv = _as_percent(_safe_float(row, col_map["ltv"]))
        if ctype is not None or value is not None or ltv is not None:
            collateral_id = f"COL-{loan_id}"
            collateral.append(
                CollateralRecord(
                    collateral_id=collateral_id,
                    collateral_type=ctype or CollateralType.unsecured,
                    appraised_value=value,
                    loan_to_value=ltv,
                )
            )

        loans.append(
            LoanRecord(
                loan_id=loan_id,
                principal=_safe_float(row, col_map["principal"]),
                outstanding_balance=float(row[balance_col]),
                interest_rate=_as_percent(_safe_float(row, col_map["rate"])),
                maturity_date=_safe_date(row, col_map["maturity"]),
                days_past_due=_safe_float(row, col_map["dpd"]),
                borrower_id=borrower_id,
                collateral_id=collateral_id,
                payment_history=PaymentHistorySummary(
                    late_payments_12m=_safe_float(row, col_map["late_payments"]),
                ),
            )
        )

    name = re.sub(r"\.(xlsx?|csv)$", "", filename, flags=re.IGNORECASE)
    name = name.replace("_", " ").replace("-", " ").strip()

    return LoanTape(
        name=name,
        loan_count=len(loans),
        total_balance=round(sum(l.outstanding_balance or 0.0 for l in loans), 2),
        loans=loans,
        borrowers=list(borrowers.values()),
        collateral=collateral,
    )


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------
def _safe_float(row, col: str | None) -> float | None:
    if col is None:
        return None
    try:
        val = float(row[col])
    except (ValueError, TypeError, KeyError):
        return None
    if val != val:  # NaN
        return None
    return val


def _safe_str(row, col: str | None) -> str | None:
    if col is None:
        return None
    val = row.get(col)
    if val is None or (isinstance(val, float) and val != val):
        return None
    if isinstance(val, float) and val.is_integer():
        val = int(val)
    text = str(val).strip()
    return text or None


def _safe_date(row, col: str | None) -> date | None:
    if col is None:
        return None
    ts = pd.to_datetime(row.get(col), errors="coerce")
    if ts is None or pd.isna(ts):
        return None
    return ts.date()


def _as_percent(value: float | None) -> float | None:
    if value is None:
        return None
    return value * 100.0 if 0 < value <= 1 else value


def _collateral_type(text: str | None) -> CollateralType | None:
    if not text:
        return None
    key = text.strip().lower().replace("_", " ").replace("-", " ")
    for alias, ctype in _COLLATERAL_ALIASES.items():
        if alias in key:
            return ctype
    if key in ("unsecured", "none"):
        return CollateralType.unsecured
    return None
