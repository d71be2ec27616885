from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING, Hashable, Iterable, Optional, Sequence

from splitshare.money import Money

if TYPE_CHECKING:
    from splitshare.services.split import ResolvedSplit

ParticipantId = Hashable


class SplitMethod(str, Enum):
    EQUAL = "equal"
    EXACT = "exact"
    PERCENTAGE = "percentage"
    SHARES = "shares"


@dataclass(frozen=True, slots=True)
class ExpenseSplit:
    participant: ParticipantId
    amount: Money
    is_settled: bool = False
    percentage: Optional[Decimal] = None


@dataclass(frozen=True, slots=True)
class SharedExpense:
    payer: ParticipantId
    total: Money
    splits: Sequence[ExpenseSplit]
    expense_id: Optional[Hashable] = None
    description: Optional[str] = None
    occurred_on: Optional[date] = None
    group_id: Optional[Hashable] = None

    @classmethod
    def from_resolved(
        cls,
        payer: ParticipantId,
        resolved: ResolvedSplit,
        settled: Iterable[ParticipantId] = (),
        **meta: object,
    ) -> SharedExpense:
        settled_ids = set(settled)
        splits = tuple(
            ExpenseSplit(
                participant=share.participant,
                amount=share.amount,
                is_settled=share.participant in settled_ids,
                percentage=share.percentage,
            )
            for share in resolved
        )
        return cls(payer=payer, total=resolved.total, splits=splits, **meta)  # type: ignore[arg-type]

    def share_of(self, participant: ParticipantId) -> Optional[ExpenseSplit]:
        for split in self.splits:
            if split.participant == participant:
                return split
        return None

    @property
    def participant_count(self) -> int:
        people = {split.participant for split in self.splits}
        people.add(self.payer)
        return len(people)


@dataclass(frozen=True, slots=True)
class Settlement:
    from_user: ParticipantId
    to_user: ParticipantId
    amount: Money
    settlement_id: Optional[Hashable] = None
    group_id: Optional[Hashable] = None
