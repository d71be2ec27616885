from __future__ import annotations

from typing import Iterable, Sequence

from splitshare.logging import get_logger
from splitshare.models import ParticipantId, Settlement, SharedExpense
from splitshare.money import Money

log = get_logger(__name__)


def aggregate(
    expenses: Iterable[SharedExpense],
    settlements: Iterable[Settlement] = (),
    members: Sequence[ParticipantId] = (),
) -> dict[ParticipantId, Money]:
    """Fold expenses and settlements into net balances.

    Positive: the participant is owed money. Negative: they owe money.
    ``members`` are listed first, at zero if no fact mentions them; other
    participants follow in order of first appearance.
    """
    balances: dict[ParticipantId, Money] = {member: Money.zero() for member in members}
    expense_count = 0
    settlement_count = 0

    for expense in expenses:
        expense_count += 1
        balances[expense.payer] = balances.get(expense.payer, Money.zero()) + expense.total
        for split in expense.splits:
            balances[split.participant] = balances.get(split.participant, Money.zero()) - split.amount

    for settlement in settlements:
        settlement_count += 1
        balances[settlement.from_user] = balances.get(settlement.from_user, Money.zero()) + settlement.amount
        balances[settlement.to_user] = balances.get(settlement.to_user, Money.zero()) - settlement.amount

    assert sum(balances.values(), Money.zero()) == Money.zero(), "balances must net to zero"
    log.debug(
        "balances.aggregated",
        expenses=expense_count,
        settlements=settlement_count,
        participants=len(balances),
    )
    return balances
