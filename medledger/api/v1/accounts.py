from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...core.database import get_db
from ...core.security import ParticipantId
from ...api.deps import get_current_participant
from ...services.account_service import AccountService
from ...schemas.account import DepositRequest, BalanceResponse

router = APIRouter(prefix="/accounts", tags=["Accounts"])

@router.post("/deposit", response_model=BalanceResponse)
async def deposit(
    deposit_data: DepositRequest,
    db: Session = Depends(get_db),
    caller: ParticipantId = Depends(get_current_participant)
):
    """Fund the caller's account."""
    balance = AccountService(db).deposit(caller, deposit_data.amount)
    return BalanceResponse(account=caller, balance=balance)

@router.get("/me", response_model=BalanceResponse)
async def my_balance(
    db: Session = Depends(get_db),
    caller: ParticipantId = Depends(get_current_participant)
):
    account, balance = AccountService(db).get_balance(caller)
    return BalanceResponse(account=account, balance=balance)

@router.get("/escrow", response_model=BalanceResponse)
async def escrow_balance(
    db: Session = Depends(get_db),
    _: ParticipantId = Depends(get_current_participant)
):
    """Current escrow pool balance."""
    account, balance = AccountService(db).get_escrow_balance()
    return BalanceResponse(account=account, balance=balance)
