from fastapi import HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from app.db.session import async_session
from app.models.group import Group
from app.models.group_member import GroupMember

async def get_db():
    async with async_session() as session:
        yield session

async def get_group_or_404(db: AsyncSession, group_id: int, for_update: bool = False) -> Group:
    q = select(Group).where(Group.id == group_id)
    if for_update:
        q = q.with_for_update()

    group = await db.scalar(q)

    if not group:
        raise HTTPException(404, "Group does not exist")

    return group

async def fetch_roster(db: AsyncSession, group_id: int) -> list[int]:
    """User ids of the group's current members, oldest member first."""
    q = (
        select(GroupMember.user_id)
        .where(GroupMember.group_id == group_id)
        .order_by(GroupMember.id)
    )
    res = await db.execute(q)
    return list(res.scalars().all())
