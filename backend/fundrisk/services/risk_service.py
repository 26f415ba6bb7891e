"""Risk orchestration service.

Coordinates credit scoring, per-loan assessment and portfolio aggregation,
deriving the portfolio snapshot from loan records when one is not supplied.
"""
from __future__ import annotations

import logging
from collections import defaultdict
from datetime import date

from fundrisk.engine.credit_scoring import recommend_loan, score_credit
from fundrisk.engine.loan_risk import assess_loan
from fundrisk.engine.portfolio_risk import aggregate
from fundrisk.models.credit import CreditScoreRequest, CreditScoreResponse
from fundrisk.models.loan import BorrowerProfile, CollateralRecord, LoanRecord
from fundrisk.models.risk import (
    LoanRiskAssessment,
    LoanRiskRequest,
    LoanRiskResponse,
    PortfolioRiskRequest,
    PortfolioRiskResponse,
    PortfolioSnapshot,
)
from fundrisk.parameters.registry import get_parameters
from fundrisk.services.narrative_service import (
    build_credit_prompt,
    build_loan_risk_prompt,
    build_portfolio_prompt,
    narrate,
)

logger = logging.getLogger(__name__)

_DAYS_PER_MONTH = 365.25 / 12
_DEFAULT_DPD = 90
_DELINQUENT_DPD = 30


def _balance(loan: LoanRecord) -> float:
    value = loan.outstanding_balance if loan.outstanding_balance is not None else loan.principal
    return max(0.0, value or 0.0)


def _largest_share(exposures: dict[str, float], total: float) -> float | None:
    if not exposures or total <= 0:
        return None
    return round(max(exposures.values()) / total * 100, 2)


def build_portfolio_snapshot(
    loans: list[LoanRecord],
    borrowers: list[BorrowerProfile] | None = None,
    cash: float | None = None,
    as_of: date | None = None,
) -> PortfolioSnapshot:
    """Derive a PortfolioSnapshot from loan-level records.

    - default rate: balance more than 90 days past due / total balance
    - delinquency rate: balance more than 30 days past due / total balance
    - largest exposure / top 10: per borrower (loan id when no borrower)
    - sector and geography: largest share among borrowers with a known value
    - liquidity ratio: cash / (loan book + cash)
    - WAM: balance-weighted months from ``as_of`` to maturity
    """
    borrower_by_id = {b.borrower_id: b for b in (borrowers or []) if b.borrower_id}
    total = sum(_balance(l) for l in loans)

    by_borrower: dict[str, float] = defaultdict(float)
    by_sector: dict[str, float] = defaultdict(float)
    by_region: dict[str, float] = defaultdict(float)
    defaulted = delinquent = 0.0
    maturity_weighted = maturity_balance = 0.0

    for loan in loans:
        balance = _balance(loan)
        by_borrower[loan.borrower_id or loan.loan_id] += balance
        dpd = loan.days_past_due or 0
        if dpd > _DEFAULT_DPD:
            defaulted += balance
        if dpd > _DELINQUENT_DPD:
            delinquent += balance

        borrower = borrower_by_id.get(loan.borrower_id) if loan.borrower_id else None
        if borrower is not None and borrower.industry:
            by_sector[borrower.industry.strip().lower()] += balance
        if borrower is not None:
            region = borrower.region or (borrower.geography_tier.value if borrower.geography_tier else None)
            if region:
                by_region[region] += balance

        if loan.maturity_date is not None and as_of is not None:
            months = max(0.0, (loan.maturity_date - as_of).days / _DAYS_PER_MONTH)
            maturity_weighted += months * balance
            maturity_balance += balance

    top10 = sorted(by_borrower.values(), reverse=True)[:10]
    liquidity_ratio = None
    if cash is not None and total + cash > 0:
        liquidity_ratio = round(max(0.0, cash) / (total + max(0.0, cash)) * 100, 2)

    return PortfolioSnapshot(
        total_value=round(total, 2),
        active_loans=sum(1 for l in loans if _balance(l) > 0),
        default_rate=round(defaulted / total * 100, 2) if total > 0 else None,
        delinquency_rate=round(delinquent / total * 100, 2) if total > 0 else None,
        provision_coverage=None,
        largest_exposure=_largest_share(by_borrower, total),
        top10_concentration=round(sum(top10) / total * 100, 2) if total > 0 else None,
        top_sector_concentration=_largest_share(by_sector, total),
        geographic_concentration=_largest_share(by_region, total),
        liquidity_ratio=liquidity_ratio,
        cash_and_equivalents=cash,
        weighted_average_maturity=(
            round(maturity_weighted / maturity_balance, 1) if maturity_balance > 0 else None
        ),
    )


def assess_loans(
    loans: list[LoanRecord],
    borrowers: list[BorrowerProfile],
    collateral: list[CollateralRecord],
    as_of: date,
) -> list[LoanRiskAssessment]:
    """Assess every loan, joining borrower and collateral records by id."""
    params = get_parameters()
    borrower_by_id = {b.borrower_id: b for b in borrowers if b.borrower_id}
    collateral_by_id = {c.collateral_id: c for c in collateral if c.collateral_id}
    return [
        assess_loan(
            loan,
            collateral_by_id.get(loan.collateral_id) if loan.collateral_id else None,
            borrower_by_id.get(loan.borrower_id) if loan.borrower_id else None,
            params,
            as_of=as_of,
        )
        for loan in loans
    ]


# ---------------------------------------------------------------------------
# Request handlers
# ---------------------------------------------------------------------------
def score_borrower(request: CreditScoreRequest) -> CreditScoreResponse:
    params = get_parameters()
    result = score_credit(request.borrower, request.request, params)
    recommendation = recommend_loan(result, request.request, params)
    narrative, available = narrate(build_credit_prompt(result, recommendation))
    return CreditScoreResponse(
        result=result,
        recommendation=recommendation,
        narrative=narrative,
        narrative_available=available,
    )


def assess_single_loan(request: LoanRiskRequest, as_of: date) -> LoanRiskResponse:
    assessment = assess_loan(
        request.loan, request.collateral, request.borrower, get_parameters(), as_of=as_of
    )
    narrative, available = narrate(build_loan_risk_prompt(assessment))
    return LoanRiskResponse(
        assessment=assessment, narrative=narrative, narrative_available=available
    )


def assess_portfolio(request: PortfolioRiskRequest, as_of: date) -> PortfolioRiskResponse:
    """Aggregate portfolio risk from a snapshot or from loan records."""
    assessments: list[LoanRiskAssessment] = []
    if request.loans:
        assessments = assess_loans(request.loans, request.borrowers, request.collateral, as_of)

    snapshot = request.snapshot
    if snapshot is None:
        snapshot = build_portfolio_snapshot(
            request.loans, request.borrowers,
            request.cash_and_equivalents, as_of,
        )
        logger.info("Derived portfolio snapshot from %d loans", len(request.loans))

    result = aggregate(
        snapshot, request.market, get_parameters(), assessments or None, as_of=as_of
    )
    narrative, available = narrate(build_portfolio_prompt(snapshot, result))
    return PortfolioRiskResponse(
        snapshot=snapshot, result=result, narrative=narrative, narrative_available=available
    )
