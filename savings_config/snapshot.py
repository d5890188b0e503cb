"""Savings product configuration snapshot.

A snapshot is the unit the hosting screen loads, edits and saves: the tier
set, the document requirement sets and the scalar product settings. It is
replaced wholesale on save; there are no partial updates.
"""
from dataclasses import dataclass, field, fields, replace
from typing import Any, Dict, Optional

from .config import DEFAULT_POSTING_FREQUENCY, MAX_PERCENTAGE, POSTING_FREQUENCIES
from .exceptions import InvariantViolationError
from .membership import ExclusiveMembership
from .range_value import require_amount
from .tier_set import TierSet

AMOUNT = "amount"
PERCENT = "percent"
COUNT = "count"
FLAG = "flag"
CHOICE = "choice"


def _setting(wire_name: str, kind: str, default):
    return field(default=default, metadata={'wire': wire_name, 'kind': kind})


@dataclass(frozen=True)
class SavingsSettings:
    """Scalar settings of a savings product.

    Each field's metadata names its wire key and how it is validated.
    """
    min_deposit_amount: float = _setting("minDepositAmount", AMOUNT, 0)
    max_active_goals_per_saver: int = _setting("maxActiveGoalsPerSaver", COUNT, 0)
    is_round_up_enabled: bool = _setting("isRoundUpEnabled", FLAG, False)
    round_up_nearest_unit: float = _setting("roundUpNearestUnit", AMOUNT, 0)

    is_emergency_withdrawal_enabled: bool = _setting("isEmergencyWithdrawalEnabled", FLAG, False)
    emergency_withdrawal_requires_approval: bool = _setting("emergencyWithdrawalRequiresApproval", FLAG, False)
    emergency_withdrawal_requires_justification: bool = _setting(
        "emergencyWithdrawalRequiresJustification", FLAG, False)
    instant_withdrawal_daily_limit: float = _setting("instantWithdrawalDailyLimit", AMOUNT, 0)
    scheduled_withdrawal_notice_hours: int = _setting("scheduledWithdrawalNoticeHours", COUNT, 0)
    instant_withdrawal_fee_percent: float = _setting("instantWithdrawalFeePercent", PERCENT, 0)
    instant_min_fee: float = _setting("instantMinFee", AMOUNT, 0)
    scheduled_withdrawal_fee_percent: float = _setting("scheduledWithdrawalFeePercent", PERCENT, 0)
    scheduled_min_fee: float = _setting("scheduledMinFee", AMOUNT, 0)
    emergency_withdrawal_fee_percent: float = _setting("emergencyWithdrawalFeePercent", PERCENT, 0)
    emergency_min_fee: float = _setting("emergencyMinFee", AMOUNT, 0)
    is_free_scheduled_withdrawal_enabled: bool = _setting("isFreeScheduledWithdrawalEnabled", FLAG, False)

    is_daily_interest_accrual_enabled: bool = _setting("isDailyInterestAccrualEnabled", FLAG, False)
    is_compound_interest_enabled: bool = _setting("isCompoundInterestEnabled", FLAG, False)
    is_360_day_year_basis_enabled: bool = _setting("is360DayYearBasisEnabled", FLAG, False)
    min_balance_for_interest: float = _setting("minBalanceForInterest", AMOUNT, 0)
    interest_posting_frequency: str = _setting("interestPostingFrequency", CHOICE, DEFAULT_POSTING_FREQUENCY)
    is_interest_statement_enabled: bool = _setting("isInterestStatementEnabled", FLAG, False)
    is_tax_deduction_applicable: bool = _setting("isTaxDeductionApplicable", FLAG, False)
    withholding_tax_percentage: float = _setting("withholdingTaxPercentage", PERCENT, 0)

    def __post_init__(self):
        for setting in fields(self):
            _validate_setting(setting, getattr(self, setting.name))

    @classmethod
    def wire_names(cls) -> Dict[str, str]:
        """Map of attribute name to wire key."""
        return {f.name: f.metadata['wire'] for f in fields(cls)}

    def with_changes(self, **changes) -> 'SavingsSettings':
        unknown = set(changes) - set(self.wire_names())
        if unknown:
            raise InvariantViolationError(
                f"Unknown settings: {sorted(unknown)}", rule="setting", fields=sorted(unknown)
            )
        return replace(self, **changes)


def _validate_setting(setting, value) -> None:
    kind = setting.metadata['kind']
    name = setting.metadata['wire']
    if kind == FLAG:
        if not isinstance(value, bool):
            raise InvariantViolationError(f"{name} must be true or false", rule="boolean", field=name)
    elif kind == CHOICE:
        if value not in POSTING_FREQUENCIES:
            raise InvariantViolationError(
                f"{name} must be one of {', '.join(POSTING_FREQUENCIES)}", rule="choice", field=name
            )
    else:
        require_amount(value, name)
        if kind == PERCENT and value > MAX_PERCENTAGE:
            raise InvariantViolationError(
                f"{name} cannot exceed {MAX_PERCENTAGE:g}%", rule="percentage", field=name
            )
        if kind == COUNT and value != int(value):
            raise InvariantViolationError(f"{name} must be a whole number", rule="count", field=name)


@dataclass(frozen=True)
class ConfigurationSnapshot:
    """Everything the savings product screen edits in one session.

    Attributes:
        tier_set: Interest tiers of the product.
        membership: Required / alternative KYC document type ids.
        settings: Scalar product settings.
        id: Persisted configuration id.
        updated_at: Server timestamp of the loaded configuration.
        extra: Wire fields this core does not interpret, echoed on save.
    """
    tier_set: TierSet
    membership: ExclusiveMembership
    settings: SavingsSettings = field(default_factory=SavingsSettings)
    id: Optional[int] = None
    updated_at: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    def with_tier_set(self, tier_set: TierSet) -> 'ConfigurationSnapshot':
        return replace(self, tier_set=tier_set)

    def with_membership(self, membership: ExclusiveMembership) -> 'ConfigurationSnapshot':
        return replace(self, membership=membership)

    def with_settings(self, **changes) -> 'ConfigurationSnapshot':
        return replace(self, settings=self.settings.with_changes(**changes))
