import random
from decimal import Decimal

import pytest

from splitshare.models import SplitMethod
from splitshare.money import Money
from splitshare.services.split import (
    AmountMismatchError,
    InvalidMethodError,
    NegativeSharesError,
    NoMembersError,
    PercentageMismatchError,
    SplitInput,
    ZeroSharesError,
    compute_split,
    split_amount,
    validate_split,
)


def cents(*values: int) -> list[Money]:
    return [Money(value) for value in values]


def amounts(resolved) -> list[Money]:
    return [share.amount for share in resolved]


def test_split_amount_even():
    assert split_amount(Money(1000), 4) == cents(250, 250, 250, 250)


def test_split_amount_remainder_goes_to_first():
    assert split_amount(Money(1001), 3) == cents(334, 334, 333)


def test_split_amount_negative_total():
    parts = split_amount(Money(-10000), 3)
    assert sum(parts, Money.zero()) == Money(-10000)
    assert parts == cents(-3333, -3333, -3334)


def test_equal_split_three_ways():
    resolved = compute_split("equal", Money(10000), ["a", "b", "c"])

    assert [share.participant for share in resolved] == ["a", "b", "c"]
    assert amounts(resolved) == cents(3334, 3333, 3333)
    assert resolved.sum() == Money(10000)
    assert resolved.method is SplitMethod.EQUAL
    assert [share.percentage for share in resolved] == [Decimal("33.34"), Decimal("33.33"), Decimal("33.33")]


def test_equal_split_single_member():
    resolved = compute_split(SplitMethod.EQUAL, Decimal("100"), ["a"])
    assert amounts(resolved) == cents(10000)
    assert resolved.shares[0].percentage == Decimal("100.00")


def test_equal_split_zero_total_uses_even_percentages():
    resolved = compute_split("equal", Money.zero(), ["a", "b"])
    assert amounts(resolved) == cents(0, 0)
    assert [share.percentage for share in resolved] == [Decimal("50.00"), Decimal("50.00")]


def test_equal_split_no_members_is_empty():
    resolved = compute_split("equal", Money(10000), [])
    assert len(resolved) == 0
    assert validate_split("equal", Money(10000), []) == (False, None)


def test_exact_split_verbatim():
    inputs = [SplitInput("a", "60"), SplitInput("b", Decimal("40"))]
    resolved = compute_split("exact", Money(10000), inputs=inputs)

    assert amounts(resolved) == cents(6000, 4000)
    assert [share.percentage for share in resolved] == [Decimal("60.00"), Decimal("40.00")]


def test_exact_split_mismatch():
    inputs = [SplitInput("a", 50), SplitInput("b", 40)]
    with pytest.raises(AmountMismatchError) as excinfo:
        compute_split("exact", Money(10000), inputs=inputs)

    assert excinfo.value.kind == "AmountMismatch"
    assert excinfo.value.difference == Money(1000)
    assert "remaining" in excinfo.value.message


def test_exact_split_over_budget_message():
    inputs = [SplitInput("a", 60), SplitInput("b", 50)]
    with pytest.raises(AmountMismatchError) as excinfo:
        compute_split("exact", Money(10000), inputs=inputs)
    assert "over budget" in excinfo.value.message


def test_exact_split_one_cent_tolerance_absorbed_by_last():
    inputs = [SplitInput(p, "33.33") for p in ("a", "b", "c")]
    resolved = compute_split("exact", Money(10000), inputs=inputs)

    assert amounts(resolved) == cents(3333, 3333, 3334)
    assert resolved.sum() == Money(10000)


def test_exact_split_accepts_money_values():
    inputs = [SplitInput("a", Money(2500)), SplitInput("b", Money(7500))]
    resolved = compute_split("exact", Money(10000), inputs=inputs)
    assert [share.percentage for share in resolved] == [Decimal("25.00"), Decimal("75.00")]


def test_percentage_split():
    inputs = [SplitInput("a", 60), SplitInput("b", 40)]
    resolved = compute_split("percentage", Money(10000), inputs=inputs)
    assert amounts(resolved) == cents(6000, 4000)


def test_percentage_split_mismatch():
    inputs = [SplitInput("a", 60), SplitInput("b", 30)]
    with pytest.raises(PercentageMismatchError) as excinfo:
        compute_split("percentage", Money(10000), inputs=inputs)

    assert excinfo.value.kind == "PercentageMismatch"
    assert excinfo.value.message == "Percentages must add up to 100%. Currently: 90.00% (10.00% remaining)"


def test_percentage_split_thirds_sum_exactly():
    inputs = [SplitInput("a", "33.33"), SplitInput("b", "33.33"), SplitInput("c", "33.34")]

    resolved = compute_split("percentage", Money(10000), inputs=inputs)
    assert resolved.sum() == Money(10000)

    small = compute_split("percentage", Money(10), inputs=inputs)
    assert amounts(small) == cents(3, 3, 4)
    assert [share.percentage for share in small] == [Decimal("33.33"), Decimal("33.33"), Decimal("33.34")]


def test_shares_split():
    inputs = [SplitInput("a", 2), SplitInput("b", 1)]
    resolved = compute_split("shares", Money(9000), inputs=inputs)

    assert amounts(resolved) == cents(6000, 3000)
    assert [share.shares for share in resolved] == [Decimal(2), Decimal(1)]


def test_shares_split_percentages():
    inputs = [SplitInput("a", 3), SplitInput("b", 1)]
    resolved = compute_split("shares", Money(10000), inputs=inputs)
    assert [share.percentage for share in resolved] == [Decimal("75.00"), Decimal("25.00")]


def test_shares_split_leftover_to_last():
    inputs = [SplitInput(p, 1) for p in ("a", "b", "c")]
    resolved = compute_split("shares", Money(10000), inputs=inputs)
    assert amounts(resolved) == cents(3333, 3333, 3334)


def test_shares_split_zero_shares():
    inputs = [SplitInput("a", 0), SplitInput("b", 0)]
    with pytest.raises(ZeroSharesError):
        compute_split("shares", Money(10000), inputs=inputs)


def test_shares_split_negative_shares():
    inputs = [SplitInput("a", -1), SplitInput("b", 3)]
    with pytest.raises(NegativeSharesError):
        compute_split("shares", Money(10000), inputs=inputs)


@pytest.mark.parametrize("method", ["exact", "percentage", "shares"])
def test_missing_inputs(method):
    with pytest.raises(NoMembersError):
        compute_split(method, Money(10000), ["a", "b"])
    with pytest.raises(NoMembersError, match="No members selected"):
        compute_split(method, Money(10000), ["a", "b"], inputs=[])


def test_invalid_method():
    with pytest.raises(InvalidMethodError) as excinfo:
        compute_split("itemized", Money(10000), ["a"])
    assert excinfo.value.kind == "InvalidMethod"


def test_float_values_rejected():
    with pytest.raises(TypeError):
        compute_split("equal", 10.0, ["a"])  # type: ignore[arg-type]
    with pytest.raises(TypeError):
        compute_split("exact", Money(100), inputs=[SplitInput("a", 1.0)])  # type: ignore[arg-type]


def test_validate_split():
    assert validate_split("equal", Money(100), ["a", "b"]) == (True, None)

    ok, error = validate_split("shares", Money(100), inputs=[SplitInput("a", 0)])
    assert ok is False
    assert error == "Total shares must be greater than 0"


@pytest.mark.parametrize("seed", range(20))
def test_random_splits_sum_to_total(seed):
    rng = random.Random(seed)
    for _ in range(50):
        total = Money(rng.randint(-50_000, 500_000))
        people = [f"user{i}" for i in range(rng.randint(1, 9))]

        equal = compute_split("equal", total, people)
        assert equal.sum() == total
        base = total.cents // len(people)
        assert all(share.amount.cents in (base, base + 1) for share in equal)

        weights = [SplitInput(p, rng.randint(0, 10)) for p in people]
        if any(item.value for item in weights):
            assert compute_split("shares", total, inputs=weights).sum() == total

        raw = [rng.randint(1, 1000) for _ in people]
        pcts = [(Decimal(value) * 100 / sum(raw)).quantize(Decimal("0.01")) for value in raw]
        pcts[-1] += Decimal(100) - sum(pcts)
        inputs = [SplitInput(p, pct) for p, pct in zip(people, pcts)]
        assert compute_split("percentage", total, inputs=inputs).sum() == total


@pytest.mark.parametrize(
    "values, expected",
    [
        (["50", "49.99"], cents(5000, 5000)),
        (["50", "50.01"], cents(5000, 5000)),
        (["33.33", "33.33", "33.33"], cents(3333, 3333, 3334)),
    ],
)
def test_percentage_split_within_tolerance(values, expected):
    inputs = [SplitInput(f"user{i}", value) for i, value in enumerate(values)]
    resolved = compute_split("percentage", Money(10000), inputs=inputs)
    assert amounts(resolved) == expected


@pytest.mark.parametrize("values", [["50", "49.98"], ["50", "50.02"]])
def test_percentage_split_outside_tolerance(values):
    inputs = [SplitInput(f"user{i}", value) for i, value in enumerate(values)]
    with pytest.raises(PercentageMismatchError):
        compute_split("percentage", Money(10000), inputs=inputs)


@pytest.mark.parametrize(
    "values, expected",
    [
        (["50", "49.99"], cents(5000, 5000)),
        (["50", "50.01"], cents(5000, 5000)),
    ],
)
def test_exact_split_within_tolerance(values, expected):
    inputs = [SplitInput(f"user{i}", value) for i, value in enumerate(values)]
    resolved = compute_split("exact", Money(10000), inputs=inputs)
    assert amounts(resolved) == expected


@pytest.mark.parametrize("values", [["50", "49.98"], ["50", "50.02"]])
def test_exact_split_outside_tolerance(values):
    inputs = [SplitInput(f"user{i}", value) for i, value in enumerate(values)]
    with pytest.raises(AmountMismatchError):
        compute_split("exact", Money(10000), inputs=inputs)


def test_shares_split_percentages_add_up_to_hundred():
    inputs = [SplitInput(p, 1) for p in ("a", "b", "c")]
    resolved = compute_split("shares", Money(10000), inputs=inputs)

    assert [share.percentage for share in resolved] == [Decimal("33.33"), Decimal("33.33"), Decimal("33.34")]
    assert sum(share.percentage for share in resolved) == Decimal(100)


class RecordingLogger:
    def __init__(self) -> None:
        self.events = []

    def info(self, event, **kw):
        self.events.append((event, kw))

    def debug(self, event, **kw):
        self.events.append((event, kw))


def test_rejected_split_logs_method_value(monkeypatch):
    from splitshare.services import split as split_module

    recorder = RecordingLogger()
    monkeypatch.setattr(split_module, "log", recorder)

    with pytest.raises(ZeroSharesError):
        compute_split(SplitMethod.SHARES, Money(100), inputs=[SplitInput("a", 0)])

    assert recorder.events == [
        ("split.rejected", {"method": "shares", "kind": "ZeroShares", "reason": "Total shares must be greater than 0"})
    ]
