from __future__ import annotations

import heapq
from dataclasses import dataclass, field
from typing import List, Mapping, Optional, Sequence

from splitshare.logging import get_logger
from splitshare.models import ParticipantId
from splitshare.money import Money, format_money

log = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class Debt:
    from_user: ParticipantId
    to_user: ParticipantId
    amount: Money


@dataclass(slots=True)
class UserDebts:
    owes: List[Debt] = field(default_factory=list)
    owed_by: List[Debt] = field(default_factory=list)


def simplify(balances: Mapping[ParticipantId, Money]) -> List[Debt]:
    """Suggest transfers that bring every balance to zero.

    Greedy: the largest remaining debtor pays the largest remaining creditor
    ``min(debit, credit)``. Equal amounts are ordered by participant id, so
    ids within one call must be comparable with each other. Produces at most
    ``n - 1`` transfers for ``n`` non-zero balances.
    """
    creditors: list[tuple[int, ParticipantId]] = []
    debtors: list[tuple[int, ParticipantId]] = []

    for user_id, balance in balances.items():
        if balance.cents > 0:
            creditors.append((-balance.cents, user_id))
        elif balance.cents < 0:
            debtors.append((balance.cents, user_id))

    outstanding = sum(-cents for cents, _ in creditors) + sum(cents for cents, _ in debtors)
    if outstanding != 0:
        log.warning("settlement.unbalanced", outstanding_cents=outstanding)

    heapq.heapify(creditors)
    heapq.heapify(debtors)

    debts: list[Debt] = []
    while creditors and debtors:
        cred_neg, cred_id = heapq.heappop(creditors)
        debt_neg, debt_id = heapq.heappop(debtors)

        transfer_cents = min(-cred_neg, -debt_neg)
        debts.append(Debt(from_user=debt_id, to_user=cred_id, amount=Money(transfer_cents)))

        cred_left = -cred_neg - transfer_cents
        debt_left = -debt_neg - transfer_cents
        if cred_left:
            heapq.heappush(creditors, (-cred_left, cred_id))
        if debt_left:
            heapq.heappush(debtors, (-debt_left, debt_id))

    log.debug("settlement.simplified", participants=len(balances), debts=len(debts))
    return debts


def user_debts(user_id: ParticipantId, debts: Sequence[Debt]) -> UserDebts:
    return UserDebts(
        owes=[debt for debt in debts if debt.from_user == user_id],
        owed_by=[debt for debt in debts if debt.to_user == user_id],
    )


def user_total_balance(user_id: ParticipantId, debts: Sequence[Debt]) -> Money:
    total = Money.zero()
    for debt in debts:
        if debt.from_user == user_id:
            total -= debt.amount
        if debt.to_user == user_id:
            total += debt.amount
    return total


def describe_debts(
    debts: Sequence[Debt],
    names: Optional[Mapping[ParticipantId, str]] = None,
    currency: Optional[str] = None,
) -> list[str]:
    names = names or {}
    lines = []
    for debt in debts:
        debtor = names.get(debt.from_user, str(debt.from_user))
        creditor = names.get(debt.to_user, str(debt.to_user))
        lines.append(f"{debtor} owes {creditor} {format_money(debt.amount, currency)}")
    return lines
