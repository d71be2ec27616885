from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Hashable, Iterable, List, Optional

from splitshare.logging import get_logger
from splitshare.models import ParticipantId, SharedExpense
from splitshare.money import Money

log = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class ContactExpense:
    expense_id: Optional[Hashable]
    description: Optional[str]
    occurred_on: Optional[date]
    total_amount: Money
    counterpart_share: Money
    is_settled: bool
    participant_count: int


@dataclass(slots=True)
class ContactBalance:
    user_id: ParticipantId
    contact_id: ParticipantId
    user_paid_expenses: List[ContactExpense] = field(default_factory=list)
    contact_paid_expenses: List[ContactExpense] = field(default_factory=list)
    user_paid_total: Money = field(default_factory=Money.zero)
    user_paid_settled: Money = field(default_factory=Money.zero)
    user_paid_grand_total: Money = field(default_factory=Money.zero)
    contact_paid_total: Money = field(default_factory=Money.zero)
    contact_paid_settled: Money = field(default_factory=Money.zero)
    contact_paid_grand_total: Money = field(default_factory=Money.zero)

    @property
    def net_balance(self) -> Money:
        """Positive: the contact owes the user. Only pending shares count."""
        return self.user_paid_total - self.contact_paid_total

    @property
    def is_settled_up(self) -> bool:
        return not self.net_balance

    @property
    def is_empty(self) -> bool:
        return not self.user_paid_expenses and not self.contact_paid_expenses


def _counterpart_entry(expense: SharedExpense, counterpart: ParticipantId) -> Optional[ContactExpense]:
    split = expense.share_of(counterpart)
    if split is None or not split.amount:
        return None
    return ContactExpense(
        expense_id=expense.expense_id,
        description=expense.description,
        occurred_on=expense.occurred_on,
        total_amount=expense.total,
        counterpart_share=split.amount,
        is_settled=split.is_settled,
        participant_count=expense.participant_count,
    )


def pairwise_balance(
    user_id: ParticipantId,
    contact_id: ParticipantId,
    facts: Iterable[SharedExpense],
) -> ContactBalance:
    balance = ContactBalance(user_id=user_id, contact_id=contact_id)

    for expense in facts:
        if expense.payer == user_id:
            entry = _counterpart_entry(expense, contact_id)
            if entry is None:
                continue
            balance.user_paid_expenses.append(entry)
            balance.user_paid_grand_total += entry.total_amount
            if entry.is_settled:
                balance.user_paid_settled += entry.counterpart_share
            else:
                balance.user_paid_total += entry.counterpart_share
        elif expense.payer == contact_id:
            entry = _counterpart_entry(expense, user_id)
            if entry is None:
                continue
            balance.contact_paid_expenses.append(entry)
            balance.contact_paid_grand_total += entry.total_amount
            if entry.is_settled:
                balance.contact_paid_settled += entry.counterpart_share
            else:
                balance.contact_paid_total += entry.counterpart_share

    log.debug(
        "contact.balance",
        user_paid=len(balance.user_paid_expenses),
        contact_paid=len(balance.contact_paid_expenses),
        net=str(balance.net_balance),
    )
    return balance
