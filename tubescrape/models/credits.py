from pydantic import BaseModel


class CreditBalance(BaseModel):
    user_id: str
    credits: int


class DeductRequest(BaseModel):
    deduction: int = 0


class ResetResult(BaseModel):
    accounts_reset: int
    credits: int
    message: str
