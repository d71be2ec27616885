from __future__ import annotations

from dataclasses import dataclass
from typing import Hashable, Iterable, Mapping, Optional, Sequence

from splitshare.config import get_settings
from splitshare.logging import get_logger
from splitshare.models import ParticipantId, Settlement, SharedExpense
from splitshare.money import Money, format_money
from splitshare.services.balances import aggregate

log = get_logger(__name__)


class SettlementError(ValueError):
    pass


class SelfSettlementError(SettlementError):
    pass


class NonPositiveSettlementError(SettlementError):
    pass


class NothingOwedError(SettlementError):
    pass


class NotOwedError(SettlementError):
    pass


class SettlementExceedsDebtError(SettlementError):
    pass


@dataclass(frozen=True, slots=True)
class MemberBalance:
    user_id: ParticipantId
    total_paid: Money
    total_owed: Money
    settled_paid: Money
    settled_received: Money

    @property
    def net_balance(self) -> Money:
        return self.total_paid - self.total_owed + self.settled_paid - self.settled_received


def group_balances(
    members: Sequence[ParticipantId],
    expenses: Iterable[SharedExpense],
    settlements: Iterable[Settlement] = (),
) -> list[MemberBalance]:
    paid: dict[ParticipantId, Money] = {}
    owed: dict[ParticipantId, Money] = {}
    settled_paid: dict[ParticipantId, Money] = {}
    settled_received: dict[ParticipantId, Money] = {}

    for expense in expenses:
        paid[expense.payer] = paid.get(expense.payer, Money.zero()) + expense.total
        for split in expense.splits:
            owed[split.participant] = owed.get(split.participant, Money.zero()) + split.amount

    for settlement in settlements:
        settled_paid[settlement.from_user] = settled_paid.get(settlement.from_user, Money.zero()) + settlement.amount
        settled_received[settlement.to_user] = (
            settled_received.get(settlement.to_user, Money.zero()) + settlement.amount
        )

    return [
        MemberBalance(
            user_id=member,
            total_paid=paid.get(member, Money.zero()),
            total_owed=owed.get(member, Money.zero()),
            settled_paid=settled_paid.get(member, Money.zero()),
            settled_received=settled_received.get(member, Money.zero()),
        )
        for member in members
    ]


def has_unsettled_balance(balance: MemberBalance) -> bool:
    return abs(balance.net_balance).cents > get_settings().exact_tolerance_cents


def validate_settlement(
    balances: Mapping[ParticipantId, Money],
    from_user: ParticipantId,
    to_user: ParticipantId,
    amount: Money,
    currency: Optional[str] = None,
) -> None:
    """Check a proposed settle-up payment against current group balances."""
    if from_user == to_user:
        raise SelfSettlementError("Cannot record a settlement to yourself")
    if amount.cents <= 0:
        raise NonPositiveSettlementError("Amount must be greater than 0")

    payer_balance = balances.get(from_user, Money.zero())
    recipient_balance = balances.get(to_user, Money.zero())

    if payer_balance.cents >= 0:
        raise NothingOwedError("You don't owe any money to settle.")
    if recipient_balance.cents <= 0:
        raise NotOwedError("This member is not owed any money.")

    tolerance = get_settings().exact_tolerance_cents
    if amount.cents > abs(payer_balance).cents + tolerance:
        raise SettlementExceedsDebtError(
            f"Amount exceeds your total debt. Maximum you can settle: {format_money(abs(payer_balance), currency)}"
        )


def user_group_balances(
    user_id: ParticipantId,
    expenses: Iterable[SharedExpense],
    settlements: Iterable[Settlement] = (),
) -> dict[Optional[Hashable], Money]:
    """Net balance of one user in every group the facts belong to."""
    expenses_by_group: dict[Optional[Hashable], list[SharedExpense]] = {}
    settlements_by_group: dict[Optional[Hashable], list[Settlement]] = {}
    for expense in expenses:
        expenses_by_group.setdefault(expense.group_id, []).append(expense)
    for settlement in settlements:
        settlements_by_group.setdefault(settlement.group_id, []).append(settlement)

    result: dict[Optional[Hashable], Money] = {}
    for group_id in list(expenses_by_group) + [g for g in settlements_by_group if g not in expenses_by_group]:
        balances = aggregate(expenses_by_group.get(group_id, []), settlements_by_group.get(group_id, []))
        result[group_id] = balances.get(user_id, Money.zero())

    log.debug("groups.user_balances", groups=len(result))
    return result
