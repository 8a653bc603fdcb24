from decimal import Decimal
from pydantic import BaseModel, condecimal, model_validator

class Settlement(BaseModel):
    from_user: int
    to_user: int
    amount: Decimal

class SettlementPaymentCreate(BaseModel):
    from_user: int
    to_user: int
    amount: condecimal(gt=0, max_digits=12, decimal_places=2)

    @model_validator(mode="after")
    def check_distinct_users(self):
        if self.from_user == self.to_user:
            raise ValueError("Cannot settle up with yourself")
        return self

class GroupDebtOut(Settlement):

    class Config:
        from_attributes = True
