from sqlalchemy import Column, ForeignKey, Integer
from sqlalchemy.orm import relationship
from app.db.session import Base

class ExpenseSplit(Base):
    """One beneficiary of an expense. No rows means the whole group shares it."""
    __tablename__ = "expense_splits"

    id = Column(Integer, primary_key=True)
    expense_id = Column(Integer, ForeignKey("expenses.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, nullable=False)

    expense = relationship("Expense", back_populates="splits")
