from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, delete
import structlog
from fastapi import HTTPException
from app.core.dependencies import fetch_roster, get_group_or_404
from app.core.utils import (
    SETTLEMENT_EPSILON,
    apply_settlements,
    compute_net_balances,
    simplify_debts,
    to_cents,
)
from app.models.expense import Expense
from app.models.expense_split import ExpenseSplit
from app.models.group_debt import GroupDebt
from app.schemas.balances import GroupBalanceOut, Transaction
from app.schemas.settlements import Settlement, SettlementPaymentCreate
from app.schemas.expense import ExpenseOut

logger = structlog.get_logger(__name__)


async def load_group_transactions(db: AsyncSession, group_id: int) -> list[Transaction]:
    q = (
        select(Expense)
        .where(Expense.group_id == group_id, Expense.is_deleted == False)
        .order_by(Expense.created_at, Expense.id)
    )
    expenses = (await db.scalars(q)).all()

    return [
        Transaction(
            amount=exp.amount,
            payer=exp.paid_by,
            beneficiaries=[s.user_id for s in exp.splits],
        )
        for exp in expenses
    ]


async def recompute_group_debts(db: AsyncSession, group_id: int) -> list[Settlement]:
    """
    Rebuilds the group's settlement plan from its full expense history and
    current roster, replacing the stored plan. Commits the session, so any
    pending change that triggered the recompute is saved together with it.
    """
    # lock the group row so overlapping recomputes for one group serialize
    await get_group_or_404(db, group_id, for_update=True)

    roster = await fetch_roster(db, group_id)
    transactions = await load_group_transactions(db, group_id)

    if roster:
        net = compute_net_balances(transactions, roster)
        plan = simplify_debts(net)
    else:
        logger.info("settlement.empty_roster", group_id=group_id)
        plan = []

    await db.execute(delete(GroupDebt).where(GroupDebt.group_id == group_id))
    db.add_all([
        GroupDebt(
            group_id=group_id,
            from_user=edge.from_user,
            to_user=edge.to_user,
            amount=edge.amount,
            position=pos,
        )
        for pos, edge in enumerate(plan)
    ])
    await db.commit()

    logger.info(
        "settlement.recomputed",
        group_id=group_id,
        transactions=len(transactions),
        debts=len(plan),
    )
    return plan


async def get_group_debts(db: AsyncSession, group_id: int):
    await get_group_or_404(db, group_id)

    q = (
        select(GroupDebt)
        .where(GroupDebt.group_id == group_id)
        .order_by(GroupDebt.position)
    )
    return (await db.scalars(q)).all()


async def get_group_balances(db: AsyncSession, group_id: int) -> GroupBalanceOut:
    await get_group_or_404(db, group_id)

    roster = await fetch_roster(db, group_id)
    if not roster:
        return GroupBalanceOut(net={}, settlements=[])

    transactions = await load_group_transactions(db, group_id)
    net = compute_net_balances(transactions, roster)
    plan = simplify_debts(net)

    net = to_cents(net)
    leftover = apply_settlements(net, plan)

    return GroupBalanceOut(
        net=net,
        settlements=plan,
        residual={
            uid: bal
            for uid, bal in leftover.items()
            if abs(bal) > SETTLEMENT_EPSILON
        },
    )


async def fetch_ledger_participants(db: AsyncSession, group_id: int) -> set[int]:
    """
    Current members plus anyone the group's live expenses still mention.
    A member who left keeps their explicit debts, so they can still pay.
    """
    await get_group_or_404(db, group_id)

    participants = set(await fetch_roster(db, group_id))
    for tx in await load_group_transactions(db, group_id):
        participants.add(tx.payer)
        participants.update(tx.beneficiaries)
    return participants


async def record_payment(db: AsyncSession, group_id: int, data: SettlementPaymentCreate):
    """
    Settle-up: ``from_user`` hands ``amount`` to ``to_user``. Stored as an
    expense paid by ``from_user`` whose only beneficiary is ``to_user``.
    """
    participants = await fetch_ledger_participants(db, group_id)
    for uid in (data.from_user, data.to_user):
        if uid not in participants:
            raise HTTPException(400, f"User {uid} is not a member of this group")

    payment = Expense(
        group_id=group_id,
        title=f"Settlement from {data.from_user} to {data.to_user}",
        amount=data.amount,
        paid_by=data.from_user,
        is_settlement=True,
        splits=[ExpenseSplit(user_id=data.to_user)],
    )
    db.add(payment)
    await db.flush()

    await recompute_group_debts(db, group_id)
    await db.refresh(payment)

    logger.info(
        "settlement.payment_recorded",
        group_id=group_id,
        from_user=data.from_user,
        to_user=data.to_user,
        amount=str(data.amount),
    )
    return ExpenseOut.from_expense(payment)
