"""Savings product configuration core.

Tiered interest-rate ranges, mutually exclusive KYC document requirements and
the configuration snapshot that carries them to and from persistence.
"""

from .exceptions import (
    SavingsConfigError,
    InvariantViolationError,
    MalformedWireValueError,
    ServerValidationError,
)
from .membership import DocumentSet, DocumentType, ExclusiveMembership
from .range_value import InterestTier, RangeValue
from .result import ErrorType, Result
from .snapshot import ConfigurationSnapshot, SavingsSettings
from .tier_set import TierSet, repair_boundary

__all__ = ['SavingsConfigError', 'InvariantViolationError', 'MalformedWireValueError',
           'ServerValidationError', 'DocumentSet', 'DocumentType', 'ExclusiveMembership',
           'InterestTier', 'RangeValue', 'ErrorType', 'Result', 'ConfigurationSnapshot',
           'SavingsSettings', 'TierSet', 'repair_boundary']
