from app.core.dependencies import fetch_roster, get_group_or_404
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
import structlog
from app.models.expense import Expense
from app.models.expense_split import ExpenseSplit
from app.schemas.expense import ExpenseCreate, ExpenseOut
from app.services.settlement_service import recompute_group_debts
from fastapi import HTTPException

logger = structlog.get_logger(__name__)


# working fine
async def create_expense(db: AsyncSession, data: ExpenseCreate, group_id: int):
    await get_group_or_404(db, group_id)
    roster = set(await fetch_roster(db, group_id))

    # -----------------------------------
    # 1. Payer must belong to the group
    # -----------------------------------
    if data.paid_by not in roster:
        raise HTTPException(400, "Payer is not a member of the group")

    # -----------------------------------
    # 2. Extract & validate split users
    # -----------------------------------
    beneficiaries = data.beneficiaries

    if len(beneficiaries) != len(set(beneficiaries)):
        raise HTTPException(400, "Duplicate users found in splits")

    if not set(beneficiaries) <= roster:
        raise HTTPException(
            400,
            "One or more users in splits are not members of the group"
        )

    # -----------------------------------
    # 3. Create expense + splits
    # -----------------------------------
    expense = Expense(
        group_id=group_id,
        title=data.title,
        amount=data.amount,
        paid_by=data.paid_by,
        splits=[ExpenseSplit(user_id=uid) for uid in beneficiaries],
    )

    db.add(expense)
    await db.flush()  # generates expense.id

    # -----------------------------------
    # 4. Rebuild the group's settlement plan
    # -----------------------------------
    await recompute_group_debts(db, group_id)
    await db.refresh(expense)

    logger.info(
        "expense.created",
        group_id=group_id,
        expense_id=expense.id,
        amount=str(expense.amount),
    )
    return ExpenseOut.from_expense(expense)

async def delete_expense(db: AsyncSession, expense_id: int):
    q = select(Expense).where(Expense.id == expense_id, Expense.is_deleted == False)
    expense = await db.scalar(q)

    if not expense:
        raise HTTPException(404, "Expense not found")

    expense.is_deleted = True
    await db.flush()

    await recompute_group_debts(db, expense.group_id)

    logger.info("expense.deleted", group_id=expense.group_id, expense_id=expense_id)
    return {"status": "deleted"}

async def get_expense_by_id(db: AsyncSession, expense_id: int):
    q = select(Expense).where(Expense.id == expense_id, Expense.is_deleted == False)
    expense = await db.scalar(q)

    if not expense:
        raise HTTPException(404, "Expense not found")

    return ExpenseOut.from_expense(expense)

# working fine
async def get_expenses_by_group(db: AsyncSession, group_id: int):
    await get_group_or_404(db, group_id)

    q = (
        select(Expense)
        .where(
            Expense.group_id == group_id,
            Expense.is_deleted == False,
        )
        .order_by(
            Expense.created_at.desc(),
            Expense.id.desc(),
        )
    )

    res = await db.scalars(q)
    return [ExpenseOut.from_expense(e) for e in res.all()]
