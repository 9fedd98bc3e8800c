from pydantic import BaseModel, Field


class Account(BaseModel):
    holder: str
    balance: int


class Token(BaseModel):
    namespace: str
    token_id: int
    owner: str


class AccountCredit(BaseModel):
    amount: int = Field(..., gt=0, description="Amount to add, must be greater than 0")
