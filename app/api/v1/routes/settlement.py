from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.dependencies import get_db
from app.schemas.balances import GroupBalanceOut
from app.schemas.expense import ExpenseOut
from app.schemas.settlements import GroupDebtOut, SettlementPaymentCreate
from app.services.settlement_service import get_group_balances, get_group_debts, record_payment

router = APIRouter()


@router.get("/{group_id}", response_model=list[GroupDebtOut])
async def get_settlements(group_id: int, db: AsyncSession = Depends(get_db)):
    return await get_group_debts(db, group_id)


@router.get("/{group_id}/balances", response_model=GroupBalanceOut)
async def get_balances(group_id: int, db: AsyncSession = Depends(get_db)):
    return await get_group_balances(db, group_id)


@router.post("/{group_id}/pay", response_model=ExpenseOut, status_code=201)
async def settle_up(
    group_id: int,
    data: SettlementPaymentCreate,
    db: AsyncSession = Depends(get_db),
):
    return await record_payment(db, group_id, data)
