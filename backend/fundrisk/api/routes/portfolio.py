from datetime import date

from fastapi import APIRouter, Depends, HTTPException, UploadFile

from fundrisk.api.deps import get_as_of
from fundrisk.models.risk import PortfolioRiskRequest, TapeUploadResponse
from fundrisk.services.risk_service import assess_portfolio
from fundrisk.services.tape_parser import parse_loan_tape

router = APIRouter(tags=["portfolio"])


@router.post("/portfolio/upload", response_model=TapeUploadResponse)
async def upload_loan_tape(file: UploadFile, as_of: date = Depends(get_as_of)):
    """Upload an Excel loan tape and return the parsed records with portfolio risk."""
    if not file.filename:
        raise HTTPException(status_code=400, detail="No filename provided")

    ext = file.filename.rsplit(".", 1)[-1].lower() if "." in file.filename else ""
    if ext not in ("xlsx", "xls"):
        raise HTTPException(
            status_code=400,
            detail=f"Unsupported file type '.{ext}'. Please upload .xlsx or .xls",
        )

    try:
        tape = parse_loan_tape(file.file, file.filename)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))

    request = PortfolioRiskRequest(
        loans=tape.loans,
        borrowers=tape.borrowers,
        collateral=tape.collateral,
        cash_and_equivalents=tape.cash_and_equivalents,
    )
    return TapeUploadResponse(tape=tape, risk=assess_portfolio(request, as_of))
