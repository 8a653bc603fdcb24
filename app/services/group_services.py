from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from fastapi import HTTPException
import structlog
from app.core.dependencies import fetch_roster, get_group_or_404
from app.models.expense import Expense
from app.models.expense_split import ExpenseSplit
from app.models.group import Group
from app.models.group_debt import GroupDebt
from app.models.group_member import GroupMember
from app.schemas.group import GroupCreate, GroupDetailOut, GroupOut
from app.schemas.settlements import GroupDebtOut
from app.services.settlement_service import get_group_debts, recompute_group_debts

logger = structlog.get_logger(__name__)

async def create_group(db: AsyncSession, data: GroupCreate):
    group = Group(name=data.name, created_by=data.created_by, currency=data.currency)
    db.add(group)
    await db.flush()

    member = GroupMember(group_id=group.id, user_id=data.created_by)
    db.add(member)

    await db.commit()
    await db.refresh(group)

    logger.info("group.created", group_id=group.id, created_by=data.created_by)
    return group

async def add_member(db: AsyncSession, group_id: int, user_id: int):
    await get_group_or_404(db, group_id)

    if user_id in await fetch_roster(db, group_id):
        raise HTTPException(400, "User already in group")

    member = GroupMember(group_id=group_id, user_id=user_id)
    db.add(member)
    try:
        await db.flush()
    except IntegrityError:
        # a concurrent add got there first
        await db.rollback()
        raise HTTPException(400, "User already in group")

    # equal splits now include the new member
    await recompute_group_debts(db, group_id)
    await db.refresh(member)

    logger.info("group.member_added", group_id=group_id, user_id=user_id)
    return member

async def remove_member(db: AsyncSession, group_id: int, user_id: int):
    group = await get_group_or_404(db, group_id)

    q = select(GroupMember).where(
        GroupMember.group_id == group_id,
        GroupMember.user_id == user_id
    )
    member = await db.scalar(q)

    if not member:
        raise HTTPException(404, "User is not a member of this group")

    await db.delete(member)
    await db.flush()

    # hand the group over to the oldest remaining member
    if group.created_by == user_id:
        remaining = await fetch_roster(db, group_id)
        if remaining:
            group.created_by = remaining[0]

    await recompute_group_debts(db, group_id)

    logger.info("group.member_removed", group_id=group_id, user_id=user_id)
    return {"status": "left"}

async def list_group_for_user(db: AsyncSession, user_id: int):
    q = (
        select(Group)
        .join(GroupMember, GroupMember.group_id == Group.id)
        .where(GroupMember.user_id == user_id)
        .order_by(Group.created_at.desc(), Group.id.desc())
    )
    result = await db.execute(q)
    return result.scalars().all()

async def get_group_detail(db: AsyncSession, group_id: int) -> GroupDetailOut:
    group = await get_group_or_404(db, group_id)
    members = await fetch_roster(db, group_id)
    debts = await get_group_debts(db, group_id)

    return GroupDetailOut(
        **GroupOut.model_validate(group).model_dump(),
        members=members,
        debts=[GroupDebtOut.model_validate(d) for d in debts],
    )

async def delete_group(db: AsyncSession, group_id: int):
    group = await get_group_or_404(db, group_id)

    expense_ids = select(Expense.id).where(Expense.group_id == group_id)

    await db.execute(delete(ExpenseSplit).where(ExpenseSplit.expense_id.in_(expense_ids)))
    await db.execute(delete(Expense).where(Expense.group_id == group_id))
    await db.execute(delete(GroupDebt).where(GroupDebt.group_id == group_id))
    await db.execute(delete(GroupMember).where(GroupMember.group_id == group_id))
    await db.delete(group)
    await db.commit()

    logger.info("group.deleted", group_id=group_id)
    return {"status": "deleted"}
