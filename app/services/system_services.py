from app.db.session import engine
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
import structlog
from app.models.group import Group
from app.models.group_member import GroupMember
from app.models.expense import Expense

logger = structlog.get_logger(__name__)

async def check_db_service():
    try:
        async with engine.connect() as conn:
            await conn.exec_driver_sql("SELECT 1")
    except Exception as e:
        logger.warning("db.health_check_failed", error=str(e))
        return {"db": False, "error": str(e)}

    return {"db": True, "message": "Database is connected"}

async def system_metrics(db: AsyncSession):
    """Row counts for a quick look at how much the ledger holds."""
    groups_q = select(func.count(Group.id))
    members_q = select(func.count(func.distinct(GroupMember.user_id)))
    expenses_q = select(func.count(Expense.id)).where(
        Expense.is_deleted == False,
        Expense.is_settlement == False,
    )
    payments_q = select(func.count(Expense.id)).where(
        Expense.is_deleted == False,
        Expense.is_settlement == True,
    )

    return {
        "groups": await db.scalar(groups_q),
        "members": await db.scalar(members_q),
        "expenses": await db.scalar(expenses_q),
        "payments": await db.scalar(payments_q),
    }
