"""Balance bounds and interest tiers.

A tier's upper bound is either a finite amount or open (unbounded). The open
case is its own variant rather than a numeric infinity, so arithmetic on it
fails loudly instead of silently producing ``inf``.
"""
import math
import numbers
from dataclasses import dataclass, field, replace
from datetime import date
from functools import total_ordering
from typing import Any, Dict, Optional

from .config import TIER_BOUNDARY_STEP
from .exceptions import InvariantViolationError

FINITE = "finite"
OPEN = "open"


def is_amount(value) -> bool:
    """Check that a value is a finite, real, non-boolean number."""
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        return False
    return math.isfinite(value)


def require_amount(value, name: str):
    """Return ``value`` if it is a non-negative amount, otherwise reject it."""
    if not is_amount(value):
        raise InvariantViolationError(
            f"{name} must be a finite number", rule="numeric", field=name, value=value
        )
    if value < 0:
        raise InvariantViolationError(
            f"{name} cannot be negative", rule="non_negative", field=name, value=value
        )
    return value


@total_ordering
@dataclass(frozen=True, eq=False)
class RangeValue:
    """Upper bound of a tier: ``finite`` with an amount, or ``open``.
    
    Use the ``finite`` and ``open`` constructors rather than the raw fields.
    Open compares greater than every finite bound.
    """
    kind: str
    amount: Optional[float] = None

    def __post_init__(self):
        if self.kind == OPEN:
            if self.amount is not None:
                raise InvariantViolationError("An open bound carries no amount", rule="open_bound")
        elif self.kind == FINITE:
            require_amount(self.amount, "amount")
        else:
            raise InvariantViolationError(f"Unknown bound kind '{self.kind}'", rule="bound_kind")

    @classmethod
    def finite(cls, amount) -> 'RangeValue':
        return cls(FINITE, amount)

    @classmethod
    def open(cls) -> 'RangeValue':
        return cls(OPEN)

    @property
    def is_open(self) -> bool:
        return self.kind == OPEN

    @property
    def is_finite(self) -> bool:
        return self.kind == FINITE

    def successor(self):
        """Lower bound of the tier that follows a tier ending at this bound."""
        return self.plus(TIER_BOUNDARY_STEP).amount

    def plus(self, delta) -> 'RangeValue':
        if self.is_open:
            raise InvariantViolationError("Cannot do arithmetic on an open bound", rule="open_arithmetic")
        return RangeValue.finite(self.amount + delta)

    def _sort_key(self):
        return (1, 0) if self.is_open else (0, self.amount)

    @staticmethod
    def _key_of(other):
        # Plain numbers compare as finite bounds
        if isinstance(other, RangeValue):
            return other._sort_key()
        if is_amount(other):
            return (0, other)
        return None

    def __eq__(self, other):
        other_key = self._key_of(other)
        if other_key is None:
            return NotImplemented
        return self._sort_key() == other_key

    def __lt__(self, other):
        other_key = self._key_of(other)
        if other_key is None:
            return NotImplemented
        return self._sort_key() < other_key

    def __hash__(self):
        return hash(OPEN) if self.is_open else hash(self.amount)

    def __repr__(self):
        if self.is_open:
            return "RangeValue.open()"
        return f"RangeValue.finite({self.amount!r})"


@dataclass(frozen=True)
class InterestTier:
    """A contiguous balance range mapped to a single interest rate.
    
    Attributes:
        min_balance: Lower bound of the range (inclusive).
        max_balance: Upper bound of the range (inclusive), or open.
        rate_percentage: Annual rate in percent.
        effective_date: Date from which the rate applies.
        is_active: Whether the tier is in force.
        description: Free text shown next to the tier.
        id: Persisted identifier, None for tiers created in this session.
        extra: Server fields carried through a save untouched.
    """
    min_balance: float
    max_balance: RangeValue
    rate_percentage: float
    effective_date: date
    is_active: bool = True
    description: str = ""
    id: Optional[int] = None
    extra: Dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    def __post_init__(self):
        require_amount(self.min_balance, "minBalance")
        require_amount(self.rate_percentage, "ratePercentage")
        if not isinstance(self.max_balance, RangeValue):
            raise InvariantViolationError(
                "maxBalance must be a RangeValue", rule="bound_type", value=self.max_balance
            )
        if self.max_balance < self.min_balance:
            raise InvariantViolationError(
                f"maxBalance {self.max_balance.amount} is below minBalance {self.min_balance}",
                rule="ordered_bounds",
            )
        if not isinstance(self.effective_date, date):
            raise InvariantViolationError(
                "effectiveDate must be a date", rule="date", value=self.effective_date
            )
        if not isinstance(self.is_active, bool):
            raise InvariantViolationError("isActive must be a boolean", rule="boolean", value=self.is_active)

    def with_changes(self, **changes) -> 'InterestTier':
        """Return a copy with the given fields replaced (validated again)."""
        return replace(self, **changes)

    def contains(self, balance) -> bool:
        """Check whether a balance falls inside this tier."""
        if balance < self.min_balance:
            return False
        return self.max_balance.is_open or balance <= self.max_balance.amount
