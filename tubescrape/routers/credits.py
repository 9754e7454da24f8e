from fastapi import APIRouter, Depends

from tubescrape.auth import require_caller_id
from tubescrape.models.credits import CreditBalance, DeductRequest, ResetResult
from tubescrape.services import credits as credits_service

router = APIRouter(prefix="/api/credits", tags=["credits"])


@router.post("/accounts")
def open_account(caller_id: str = Depends(require_caller_id)) -> CreditBalance:
    return credits_service.open_account(caller_id)


@router.get("/balance")
def get_balance(caller_id: str = Depends(require_caller_id)) -> CreditBalance:
    return credits_service.get_balance(caller_id)


@router.post("/deduct")
def deduct_credits(body: DeductRequest, caller_id: str = Depends(require_caller_id)) -> CreditBalance:
    return credits_service.deduct_credits(caller_id, body.deduction)


@router.post("/reset")
def reset_credits(caller_id: str = Depends(require_caller_id)) -> ResetResult:
    return credits_service.reset_all_credits(caller_id)
