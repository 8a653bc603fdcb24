from sqlalchemy import Column, Integer, Numeric, ForeignKey
from app.db.session import Base

class GroupDebt(Base):
    """One edge of a group's current settlement plan."""
    __tablename__ = "group_debts"

    id = Column(Integer, primary_key=True)
    group_id = Column(Integer, ForeignKey("groups.id", ondelete="CASCADE"), nullable=False, index=True)
    from_user = Column(Integer, nullable=False)
    to_user = Column(Integer, nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    # order in which the simplifier emitted the edge
    position = Column(Integer, nullable=False)
