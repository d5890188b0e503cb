"""Tiered interest-rate ranges.

A TierSet partitions the balance line into contiguous, non-overlapping tiers.
Every edit returns a new, validated TierSet; a rejected edit raises
InvariantViolationError and the original set is left as it was.

Invariants checked after every edit:
- at least one tier,
- exactly one open-ended tier, and it is the last one,
- ``t[i + 1].min_balance == t[i].max_balance.amount + 1``,
- ``min_balance <= max_balance`` for every finite tier.
"""
import logging
from datetime import date
from typing import Iterable, Iterator, Optional, Tuple

from .config import (
    DEFAULT_TIER_RATE,
    DEFAULT_TIER_WIDTH,
    TIER_BOUNDARY_STEP,
    TIER_DESCRIPTION_TEMPLATE,
)
from .exceptions import InvariantViolationError
from .range_value import InterestTier, RangeValue, require_amount

logger = logging.getLogger(__name__)

MIN_BALANCE = "minBalance"
MAX_BALANCE = "maxBalance"
RATE_PERCENTAGE = "ratePercentage"

# Snake-case spellings accepted alongside the wire names
_FIELD_ALIASES = {
    "minBalance": MIN_BALANCE,
    "min_balance": MIN_BALANCE,
    "maxBalance": MAX_BALANCE,
    "max_balance": MAX_BALANCE,
    "ratePercentage": RATE_PERCENTAGE,
    "rate_percentage": RATE_PERCENTAGE,
}


def normalize_field(name: str) -> str:
    """Map a boundary field name to its canonical wire spelling."""
    try:
        return _FIELD_ALIASES[name]
    except KeyError:
        raise InvariantViolationError(f"Unknown tier field '{name}'", rule="field", field=name) from None


class TierSet:
    """An ordered, immutable sequence of interest tiers.

    Build one with ``TierSet.from_tiers`` (sorts and validates) or
    ``TierSet.default``. Edits (``add_tier``, ``remove_tier``,
    ``update_boundary``, ``update_details``) return new instances.
    """

    def __init__(self, tiers: Iterable[InterestTier]):
        self._tiers: Tuple[InterestTier, ...] = tuple(tiers)
        validate_tiers(self._tiers)

    @classmethod
    def from_tiers(cls, tiers: Iterable[InterestTier]) -> 'TierSet':
        """Create a TierSet from tiers in any order."""
        return cls(sorted(tiers, key=lambda tier: tier.min_balance))

    @classmethod
    def default(cls, today: Optional[date] = None) -> 'TierSet':
        """A single open tier starting at zero."""
        return cls([
            InterestTier(
                min_balance=0,
                max_balance=RangeValue.open(),
                rate_percentage=DEFAULT_TIER_RATE,
                effective_date=today or date.today(),
                is_active=True,
                description=TIER_DESCRIPTION_TEMPLATE.format(number=1),
            )
        ])

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    @property
    def tiers(self) -> Tuple[InterestTier, ...]:
        return self._tiers

    @property
    def last(self) -> InterestTier:
        return self._tiers[-1]

    def __len__(self) -> int:
        return len(self._tiers)

    def __iter__(self) -> Iterator[InterestTier]:
        return iter(self._tiers)

    def __getitem__(self, index) -> InterestTier:
        return self._tiers[index]

    def __eq__(self, other):
        if not isinstance(other, TierSet):
            return NotImplemented
        return self._tiers == other._tiers

    def __hash__(self):
        return hash(self._tiers)

    def __repr__(self):
        bounds = ", ".join(
            f"[{t.min_balance}, {'open' if t.max_balance.is_open else t.max_balance.amount}] @ {t.rate_percentage}%"
            for t in self._tiers
        )
        return f"TierSet({bounds})"

    def open_tier_count(self) -> int:
        return sum(1 for tier in self._tiers if tier.max_balance.is_open)

    def rate_for_balance(self, balance) -> Optional[float]:
        """Look up the rate of the tier containing ``balance``.

        Returns:
            The rate percentage, or None when the balance is below the first tier.
        """
        for tier in self._tiers:
            if tier.contains(balance):
                return tier.rate_percentage
        return None

    # ------------------------------------------------------------------
    # Edits
    # ------------------------------------------------------------------

    def add_tier(self, today: Optional[date] = None) -> 'TierSet':
        """Append a new open-ended tier after the current last tier.

        If the last tier is open it is first closed at
        ``min_balance + DEFAULT_TIER_WIDTH``. The new tier starts one unit above
        that bound and inherits the previous rate.

        Args:
            today: Effective date of the new tier (defaults to the current date).

        Returns:
            A new TierSet whose last tier is the added one.
        """
        tiers = list(self._tiers)
        previous = tiers[-1]
        if previous.max_balance.is_open:
            previous = previous.with_changes(
                max_balance=RangeValue.finite(previous.min_balance + DEFAULT_TIER_WIDTH)
            )
            tiers[-1] = previous

        tiers.append(InterestTier(
            min_balance=previous.max_balance.successor(),
            max_balance=RangeValue.open(),
            rate_percentage=previous.rate_percentage,
            effective_date=today or date.today(),
            is_active=True,
            description=TIER_DESCRIPTION_TEMPLATE.format(number=len(tiers) + 1),
        ))
        logger.debug("Added tier %d starting at %s", len(tiers), tiers[-1].min_balance)
        return TierSet(tiers)

    def remove_tier(self, index: int) -> 'TierSet':
        """Remove the tier at ``index``.

        Removing the last tier opens the new last tier. Removing an inner
        tier closes the gap it leaves: the successor starts right after the
        predecessor's bound, or, when the first tier is removed, takes over
        its lower bound.

        Raises:
            InvariantViolationError: If only one tier is left or the index is invalid.
        """
        if len(self._tiers) <= 1:
            raise InvariantViolationError(
                "At least one interest tier is required", rule="min_cardinality"
            )
        index = self._check_index(index)
        removed = self._tiers[index]
        tiers = [tier for i, tier in enumerate(self._tiers) if i != index]

        if index == len(tiers):
            tiers[-1] = tiers[-1].with_changes(max_balance=RangeValue.open())
            return TierSet(tiers)

        if index == 0:
            tiers[0] = tiers[0].with_changes(min_balance=removed.min_balance)
            return TierSet(tiers)

        return repair_boundary(TierSet._unchecked(tiers), index - 1, tiers[index - 1].max_balance)

    def update_boundary(self, index: int, field: str, value) -> 'TierSet':
        """Change a tier's minBalance, maxBalance or ratePercentage.

        Args:
            index: Position of the tier to edit.
            field: ``minBalance``, ``maxBalance`` or ``ratePercentage``
                (snake_case spellings also accepted).
            value: A number, or a RangeValue / None (open) for ``maxBalance``.

        Returns:
            A new TierSet with the edit applied and the next tier's lower
            bound repaired when ``maxBalance`` changes.

        Raises:
            InvariantViolationError: If the edit would break an invariant.
        """
        index = self._check_index(index)
        field = normalize_field(field)

        if field == RATE_PERCENTAGE:
            rate = require_amount(value, RATE_PERCENTAGE)
            return self._replace(index, self._tiers[index].with_changes(rate_percentage=rate))

        if field == MIN_BALANCE:
            if index != 0:
                raise InvariantViolationError(
                    "minBalance can only be edited on the first tier",
                    rule="derived_min", index=index,
                )
            amount = require_amount(value, MIN_BALANCE)
            return self._replace(0, self._tiers[0].with_changes(min_balance=amount))

        bound = value if isinstance(value, RangeValue) else (
            RangeValue.open() if value is None else RangeValue.finite(require_amount(value, MAX_BALANCE))
        )
        is_last = index == len(self._tiers) - 1
        if bound.is_open:
            if not is_last:
                raise InvariantViolationError(
                    "Only the last tier can have an open maxBalance",
                    rule="single_open_tier", index=index,
                )
            return self
        if is_last:
            raise InvariantViolationError(
                "The last tier's maxBalance must stay open",
                rule="single_open_tier", index=index,
            )
        return repair_boundary(self, index, bound)

    def update_details(self, index: int, description: Optional[str] = None,
                       effective_date: Optional[date] = None,
                       is_active: Optional[bool] = None) -> 'TierSet':
        """Change the descriptive fields of a tier; bounds are untouched."""
        index = self._check_index(index)
        changes = {}
        if description is not None:
            changes['description'] = str(description)
        if effective_date is not None:
            changes['effective_date'] = effective_date
        if is_active is not None:
            changes['is_active'] = is_active
        if not changes:
            return self
        return self._replace(index, self._tiers[index].with_changes(**changes))

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @classmethod
    def _unchecked(cls, tiers) -> 'TierSet':
        # Intermediate state inside a single edit; validated by the caller's result
        instance = cls.__new__(cls)
        instance._tiers = tuple(tiers)
        return instance

    def _check_index(self, index: int) -> int:
        if isinstance(index, bool) or not isinstance(index, int):
            raise InvariantViolationError(f"Invalid tier index {index!r}", rule="index")
        if not 0 <= index < len(self._tiers):
            raise InvariantViolationError(
                f"Tier index {index} out of range", rule="index", size=len(self._tiers)
            )
        return index

    def _replace(self, index: int, tier: InterestTier) -> 'TierSet':
        tiers = list(self._tiers)
        tiers[index] = tier
        return TierSet(tiers)


def repair_boundary(tier_set: TierSet, index: int, new_max: RangeValue) -> TierSet:
    """Set a tier's finite upper bound and cascade it into the following tiers.

    The successor (if any) starts one unit above ``new_max``. When that start
    passes the successor's own upper bound, the successor is shifted up with
    its width unchanged and the cascade continues with the next tier. The input
    is not modified; the returned TierSet is fully validated.

    Args:
        tier_set: The tiers to edit.
        index: Position of the tier whose upper bound changes.
        new_max: The new finite upper bound.

    Returns:
        A new TierSet.

    Raises:
        InvariantViolationError: If ``new_max`` is open or below the tier's
            own lower bound.
    """
    if not isinstance(new_max, RangeValue):
        new_max = RangeValue.finite(require_amount(new_max, MAX_BALANCE))
    if new_max.is_open:
        raise InvariantViolationError("Boundary repair needs a finite bound", rule="single_open_tier")

    tiers = list(tier_set.tiers)
    tiers[index] = tiers[index].with_changes(max_balance=new_max)
    for j in range(index + 1, len(tiers)):
        following = tiers[j]
        start = tiers[j - 1].max_balance.successor()
        bound = following.max_balance
        shifted = bound.is_finite and bound.amount < start
        if shifted:
            bound = RangeValue.finite(start + (bound.amount - following.min_balance))
        tiers[j] = following.with_changes(min_balance=start, max_balance=bound)
        if not shifted:
            break
    return TierSet(tiers)


def validate_tiers(tiers: Tuple[InterestTier, ...]) -> None:
    """Check the partition invariants of a tier sequence.

    Raises:
        InvariantViolationError: Naming the first broken rule.
    """
    if not tiers:
        raise InvariantViolationError("At least one interest tier is required", rule="min_cardinality")

    for i, tier in enumerate(tiers):
        if not isinstance(tier, InterestTier):
            raise InvariantViolationError(f"Tier {i} is not an InterestTier", rule="tier_type", index=i)
        is_last = i == len(tiers) - 1
        if tier.max_balance.is_open != is_last:
            raise InvariantViolationError(
                "Exactly one tier, the last, must have an open maxBalance",
                rule="single_open_tier", index=i,
            )
        if not is_last:
            expected = tier.max_balance.amount + TIER_BOUNDARY_STEP
            if tiers[i + 1].min_balance != expected:
                raise InvariantViolationError(
                    f"Tier {i + 1} must start at {expected}, found {tiers[i + 1].min_balance}",
                    rule="contiguous", index=i + 1,
                )
