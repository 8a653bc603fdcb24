from decimal import Decimal
from pydantic import BaseModel, Field
from typing import List
from app.schemas.settlements import Settlement

class Transaction(BaseModel):
    amount: Decimal
    payer: int
    # empty means the whole roster shares the amount
    beneficiaries: List[int] = Field(default_factory=list)

class GroupBalanceOut(BaseModel):
    net: dict[int, Decimal]
    settlements: list[Settlement]
    residual: dict[int, Decimal] = Field(default_factory=dict)
