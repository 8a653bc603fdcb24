from datetime import datetime
from decimal import Decimal
from pydantic import BaseModel, Field, condecimal
from typing import List

class ExpenseCreate(BaseModel):
    title: str = Field(min_length=1)
    amount: condecimal(gt=0, max_digits=12, decimal_places=2)
    paid_by: int
    # leave empty to split equally across every group member
    beneficiaries: List[int] = Field(default_factory=list)

class ExpenseOut(BaseModel):
    id: int
    group_id: int
    title: str
    amount: Decimal
    paid_by: int
    is_settlement: bool
    beneficiaries: List[int]
    created_at: datetime | None = None

    @classmethod
    def from_expense(cls, expense) -> "ExpenseOut":
        return cls(
            id=expense.id,
            group_id=expense.group_id,
            title=expense.title,
            amount=expense.amount,
            paid_by=expense.paid_by,
            is_settlement=expense.is_settlement,
            beneficiaries=[s.user_id for s in expense.splits],
            created_at=expense.created_at,
        )
