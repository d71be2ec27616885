"""Expense splitting and settlement engine."""

from splitshare.models import ExpenseSplit, Settlement, SharedExpense, SplitMethod
from splitshare.money import Money, format_money
from splitshare.services.balances import aggregate
from splitshare.services.contacts import pairwise_balance
from splitshare.services.settlement import Debt, simplify
from splitshare.services.split import SplitError, SplitInput, compute_split, validate_split

__all__ = [
    "Debt",
    "ExpenseSplit",
    "Money",
    "Settlement",
    "SharedExpense",
    "SplitError",
    "SplitInput",
    "SplitMethod",
    "aggregate",
    "compute_split",
    "format_money",
    "pairwise_balance",
    "simplify",
    "validate_split",
]
