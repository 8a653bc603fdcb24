from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.dependencies import get_db
from app.services.group_services import create_group, add_member, delete_group, get_group_detail, list_group_for_user, remove_member
from app.schemas.group import GroupCreate, GroupDetailOut, GroupMemberCreate, GroupMemberOut, GroupOut

router = APIRouter()

@router.post("/", response_model=GroupOut, status_code=201)
async def create_new_group(data: GroupCreate, db: AsyncSession = Depends(get_db)):
    return await create_group(db, data)

@router.get("/", response_model=list[GroupOut])
async def my_groups(user_id: int, db: AsyncSession = Depends(get_db)):
    return await list_group_for_user(db, user_id)

@router.get("/{group_id}", response_model=GroupDetailOut)
async def group_detail(group_id: int, db: AsyncSession = Depends(get_db)):
    return await get_group_detail(db, group_id)

@router.post("/{group_id}/members", response_model=GroupMemberOut, status_code=201)
async def add_user_to_group(group_id: int, data: GroupMemberCreate, db: AsyncSession = Depends(get_db)):
    return await add_member(db, group_id, data.user_id)

@router.delete("/{group_id}/members/{user_id}")
async def leave_group(group_id: int, user_id: int, db: AsyncSession = Depends(get_db)):
    return await remove_member(db, group_id, user_id)

@router.delete("/{group_id}")
async def remove_group(group_id: int, db: AsyncSession = Depends(get_db)):
    return await delete_group(db, group_id)
