from decimal import Decimal, ROUND_HALF_UP, getcontext
from typing import Dict, Iterable, List, Sequence

import structlog

from app.core.exceptions import LedgerIntegrityError
from app.schemas.balances import Transaction
from app.schemas.settlements import Settlement

getcontext().prec = 28
CENTS = Decimal("0.01")
ZERO = Decimal("0")

# anything that rounds to zero cents is settled
SETTLEMENT_EPSILON = Decimal("0.005")

logger = structlog.get_logger(__name__)


def qround(d: Decimal) -> Decimal:
    return d.quantize(CENTS, rounding=ROUND_HALF_UP)


def _unique(ids: Iterable[int]) -> List[int]:
    seen = set()
    out = []
    for i in ids:
        if i not in seen:
            seen.add(i)
            out.append(i)
    return out


def compute_net_balances(
    transactions: Sequence[Transaction],
    roster: Sequence[int],
) -> Dict[int, Decimal]:
    """
    Folds a group's transactions into one signed balance per participant.

        net_balance = total_paid - total_share

    Positive means the others owe this participant. An empty beneficiaries
    list splits the amount equally across the whole roster. Participants
    who appear in a transaction but not in the roster (e.g. a member who
    left the group) get their own entry instead of being dropped, so the
    balances still add up to zero.
    """
    members = _unique(roster)
    if not members:
        raise LedgerIntegrityError("Cannot compute balances for an empty roster")

    balances: Dict[int, Decimal] = {uid: ZERO for uid in members}

    for tx in transactions:
        amount = Decimal(str(tx.amount))
        if amount <= 0:
            raise LedgerIntegrityError(
                f"Transaction amount must be positive, got {amount}"
            )

        involved = _unique(tx.beneficiaries) if tx.beneficiaries else members
        share = amount / len(involved)

        for uid in (tx.payer, *involved):
            if uid not in balances:
                logger.warning("balances.off_roster_participant", user_id=uid)
                balances[uid] = ZERO

        balances[tx.payer] += amount
        for uid in involved:
            balances[uid] -= share

    return balances


def to_cents(net_map: Dict[int, Decimal]) -> Dict[int, Decimal]:
    """
    Rounds every balance to whole cents while keeping the total at zero.

    Rounding each entry on its own can leave a cent or two over; those are
    taken back from the entries that rounding moved furthest in the same
    direction (earlier entries first on ties).
    """
    rounded = {uid: qround(bal) for uid, bal in net_map.items()}
    drift = sum(rounded.values(), ZERO)
    if not drift:
        return rounded

    sign = 1 if drift > 0 else -1
    order = sorted(
        rounded,
        key=lambda uid: sign * (rounded[uid] - net_map[uid]),
        reverse=True,
    )
    for uid in order[: int(abs(drift) / CENTS)]:
        rounded[uid] -= sign * CENTS

    return rounded


def simplify_debts(net_map: Dict[int, Decimal]) -> List[Settlement]:
    """
    Greedy min-cash-flow: match the largest debtor with the largest creditor
    until one side runs out.

    Debtors are sorted most negative first, creditors largest first. Equal
    balances keep the order of ``net_map``, so the same input always gives
    the same plan. Matching runs on whole cents, so every emitted amount is
    exact and paying the plan leaves nobody owing anything.
    """
    net_map = {uid: Decimal(str(bal)) for uid, bal in net_map.items()}
    total = sum(net_map.values(), ZERO)
    if abs(total) > CENTS:
        raise LedgerIntegrityError(f"Balances do not net to zero (sum={total})")

    balances = to_cents(net_map)

    debtors = [[uid, bal] for uid, bal in balances.items() if bal < -SETTLEMENT_EPSILON]
    creditors = [[uid, bal] for uid, bal in balances.items() if bal > SETTLEMENT_EPSILON]

    debtors.sort(key=lambda x: x[1])
    creditors.sort(key=lambda x: x[1], reverse=True)

    transfers: List[Settlement] = []
    i = 0
    j = 0

    while i < len(debtors) and j < len(creditors):
        debtor = debtors[i]
        creditor = creditors[j]

        amount = min(abs(debtor[1]), creditor[1])

        if amount > SETTLEMENT_EPSILON:
            transfers.append(
                Settlement(from_user=debtor[0], to_user=creditor[0], amount=amount)
            )

        debtor[1] += amount
        creditor[1] -= amount

        if abs(debtor[1]) < SETTLEMENT_EPSILON:
            i += 1
        if creditor[1] < SETTLEMENT_EPSILON:
            j += 1

    residual = {
        uid: bal
        for uid, bal in debtors[i:] + creditors[j:]
        if abs(bal) > SETTLEMENT_EPSILON
    }
    if residual:
        logger.warning(
            "settlement.residual",
            residual={uid: str(bal) for uid, bal in residual.items()},
        )

    return transfers


def apply_settlements(
    net_map: Dict[int, Decimal],
    transfers: Iterable[Settlement],
) -> Dict[int, Decimal]:
    """Balances left over once every transfer has been paid."""
    remaining = dict(net_map)
    for t in transfers:
        remaining[t.from_user] = remaining.get(t.from_user, ZERO) + t.amount
        remaining[t.to_user] = remaining.get(t.to_user, ZERO) - t.amount
    return remaining
