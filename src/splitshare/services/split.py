from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal, ROUND_HALF_UP
from typing import ClassVar, Iterator, Optional, Sequence, Union

from splitshare.config import get_settings
from splitshare.logging import get_logger
from splitshare.models import ParticipantId, SplitMethod
from splitshare.money import CENT, HUNDRED, DecimalLike, Money, as_decimal, format_money, percent_of, round_cents

log = get_logger(__name__)


class SplitError(ValueError):
    kind: ClassVar[str] = "SplitError"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class NoMembersError(SplitError):
    kind = "NoMembers"


class InvalidMethodError(SplitError):
    kind = "InvalidMethod"


class AmountMismatchError(SplitError):
    kind = "AmountMismatch"

    def __init__(self, difference: Money) -> None:
        # difference = total - sum(amounts)
        self.difference = difference
        if difference.cents > 0:
            detail = f"{format_money(difference)} remaining"
        else:
            detail = f"{format_money(abs(difference))} over budget"
        super().__init__(f"Amounts don't add up. {detail}")


class PercentageMismatchError(SplitError):
    kind = "PercentageMismatch"

    def __init__(self, current: Decimal) -> None:
        self.current = current
        diff = HUNDRED - current
        if diff > 0:
            detail = f"{diff:.2f}% remaining"
        else:
            detail = f"{abs(diff):.2f}% over"
        super().__init__(f"Percentages must add up to 100%. Currently: {current:.2f}% ({detail})")


class ZeroSharesError(SplitError):
    kind = "ZeroShares"


class NegativeSharesError(SplitError):
    kind = "NegativeShares"


@dataclass(frozen=True, slots=True)
class SplitInput:
    participant: ParticipantId
    value: Union[DecimalLike, Money] = 0


@dataclass(frozen=True, slots=True)
class SplitShare:
    participant: ParticipantId
    amount: Money
    percentage: Decimal
    shares: Optional[Decimal] = None


@dataclass(frozen=True, slots=True)
class ResolvedSplit:
    total: Money
    method: SplitMethod
    shares: tuple[SplitShare, ...] = field(default_factory=tuple)

    def __iter__(self) -> Iterator[SplitShare]:
        return iter(self.shares)

    def __len__(self) -> int:
        return len(self.shares)

    @property
    def amounts(self) -> dict[ParticipantId, Money]:
        result: dict[ParticipantId, Money] = {}
        for share in self.shares:
            result[share.participant] = result.get(share.participant, Money.zero()) + share.amount
        return result

    def sum(self) -> Money:
        return sum((share.amount for share in self.shares), Money.zero())


def split_amount(total: Money, count: int) -> list[Money]:
    """Divide ``total`` into ``count`` parts differing by at most one cent.

    The first ``total % count`` parts carry the extra cent.
    """
    if count <= 0:
        raise ValueError("count must be positive")
    base, remainder = divmod(total.cents, count)
    return [Money(base + 1) if index < remainder else Money(base) for index in range(count)]


def _absorb_leftover(total: Money, amounts: list[Money]) -> list[Money]:
    leftover = total - sum(amounts, Money.zero())
    if leftover:
        amounts[-1] = amounts[-1] + leftover
    return amounts


def _proportional_cents(total: Money, numerator: Decimal, denominator: Decimal) -> Money:
    return Money(round_cents(Decimal(total.cents) * numerator / denominator))


def calculate_equal_split(total: Money, participants: Sequence[ParticipantId]) -> ResolvedSplit:
    if not participants:
        return ResolvedSplit(total=total, method=SplitMethod.EQUAL)

    amounts = split_amount(total, len(participants))
    even = (HUNDRED / len(participants)).quantize(CENT, rounding=ROUND_HALF_UP)
    shares = tuple(
        SplitShare(
            participant=participant,
            amount=amount,
            percentage=percent_of(amount, total) if total else even,
            shares=Decimal(1),
        )
        for participant, amount in zip(participants, amounts)
    )
    return ResolvedSplit(total=total, method=SplitMethod.EQUAL, shares=shares)


def calculate_exact_split(
    total: Money,
    inputs: Sequence[SplitInput],
    tolerance_cents: Optional[int] = None,
) -> ResolvedSplit:
    if not inputs:
        raise NoMembersError("No members selected")
    if tolerance_cents is None:
        tolerance_cents = get_settings().exact_tolerance_cents

    amounts = [Money.from_decimal(item.value) for item in inputs]
    difference = total - sum(amounts, Money.zero())
    if abs(difference).cents > tolerance_cents:
        raise AmountMismatchError(difference)

    if difference:
        log.info(
            "split.exact.adjusted",
            participant=str(inputs[-1].participant),
            adjustment=str(difference),
        )
        amounts = _absorb_leftover(total, amounts)

    shares = tuple(
        SplitShare(participant=item.participant, amount=amount, percentage=percent_of(amount, total))
        for item, amount in zip(inputs, amounts)
    )
    return ResolvedSplit(total=total, method=SplitMethod.EXACT, shares=shares)


def calculate_percentage_split(
    total: Money,
    inputs: Sequence[SplitInput],
    tolerance: Optional[Decimal] = None,
) -> ResolvedSplit:
    if not inputs:
        raise NoMembersError("No members selected")
    if tolerance is None:
        tolerance = get_settings().percentage_tolerance

    percentages = [as_decimal(item.value) for item in inputs]
    current = sum(percentages, Decimal(0)).quantize(CENT, rounding=ROUND_HALF_UP)
    if abs(current - HUNDRED) > tolerance:
        raise PercentageMismatchError(current)

    amounts = [_proportional_cents(total, pct, HUNDRED) for pct in percentages]
    amounts = _absorb_leftover(total, amounts)

    shares = tuple(
        SplitShare(
            participant=item.participant,
            amount=amount,
            percentage=pct.quantize(CENT, rounding=ROUND_HALF_UP),
        )
        for item, amount, pct in zip(inputs, amounts, percentages)
    )
    return ResolvedSplit(total=total, method=SplitMethod.PERCENTAGE, shares=shares)


def calculate_shares_split(total: Money, inputs: Sequence[SplitInput]) -> ResolvedSplit:
    if not inputs:
        raise NoMembersError("No members selected")

    weights = [as_decimal(item.value) for item in inputs]
    if any(weight < 0 for weight in weights):
        raise NegativeSharesError("Shares cannot be negative")
    total_shares = sum(weights, Decimal(0))
    if total_shares <= 0:
        raise ZeroSharesError("Total shares must be greater than 0")

    amounts = [_proportional_cents(total, weight, total_shares) for weight in weights]
    amounts = _absorb_leftover(total, amounts)
    percentages = [(weight * HUNDRED / total_shares).quantize(CENT, rounding=ROUND_HALF_UP) for weight in weights]
    percentages[-1] += HUNDRED - sum(percentages, Decimal(0))

    shares = tuple(
        SplitShare(
            participant=item.participant,
            amount=amount,
            percentage=pct,
            shares=weight,
        )
        for item, amount, weight, pct in zip(inputs, amounts, weights, percentages)
    )
    return ResolvedSplit(total=total, method=SplitMethod.SHARES, shares=shares)


_REQUIRED_INPUTS = {
    SplitMethod.EXACT: "Exact amounts are required",
    SplitMethod.PERCENTAGE: "Percentages are required",
    SplitMethod.SHARES: "Shares are required",
}


def _resolve_method(method: Union[SplitMethod, str]) -> SplitMethod:
    try:
        return SplitMethod(method)
    except ValueError as exc:
        raise InvalidMethodError("Invalid split method") from exc


def compute_split(
    method: Union[SplitMethod, str],
    total: Union[Money, DecimalLike],
    participants: Sequence[ParticipantId] = (),
    inputs: Optional[Sequence[SplitInput]] = None,
) -> ResolvedSplit:
    """Resolve the per-participant amounts of one shared expense.

    ``participants`` drives the equal split; the other methods take their
    participants, in order, from ``inputs``. Remainder cents are assigned by
    input order: the first participants for an equal split, the last
    participant for every other method.

    Raises a ``SplitError`` subclass when the configuration is invalid.
    """
    total = Money.from_decimal(total)
    try:
        split_method = _resolve_method(method)
        if split_method is SplitMethod.EQUAL:
            resolved = calculate_equal_split(total, list(participants))
        elif not inputs:
            raise NoMembersError(_REQUIRED_INPUTS[split_method] if inputs is None else "No members selected")
        elif split_method is SplitMethod.EXACT:
            resolved = calculate_exact_split(total, inputs)
        elif split_method is SplitMethod.PERCENTAGE:
            resolved = calculate_percentage_split(total, inputs)
        else:
            resolved = calculate_shares_split(total, inputs)
    except SplitError as exc:
        log.info("split.rejected", method=getattr(method, "value", method), kind=exc.kind, reason=exc.message)
        raise

    assert not resolved.shares or resolved.sum() == total
    log.debug("split.computed", method=split_method.value, total=str(total), participants=len(resolved))
    return resolved


def validate_split(
    method: Union[SplitMethod, str],
    total: Union[Money, DecimalLike],
    participants: Sequence[ParticipantId] = (),
    inputs: Optional[Sequence[SplitInput]] = None,
) -> tuple[bool, Optional[str]]:
    try:
        resolved = compute_split(method, total, participants, inputs)
    except SplitError as exc:
        return False, exc.message
    return len(resolved) > 0, None
