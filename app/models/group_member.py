from sqlalchemy import Column, ForeignKey, Integer, DateTime, UniqueConstraint, func
from app.db.session import Base

class GroupMember(Base):
    __tablename__ = "group_members"
    __table_args__ = (
        UniqueConstraint("group_id", "user_id", name="uq_group_member_user"),
    )

    id = Column(Integer, primary_key=True, index=True)

    group_id = Column(Integer, ForeignKey("groups.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(Integer, nullable=False, index=True)
    joined_at = Column(DateTime(timezone=True), server_default=func.now())
