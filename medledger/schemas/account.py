from pydantic import BaseModel

class DepositRequest(BaseModel):
    amount: int

class BalanceResponse(BaseModel):
    account: str
    balance: int
