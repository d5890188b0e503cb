"""View models for the savings product configuration screen.

Rendering belongs to the hosting screen; these helpers only shape the
current state into rows it can draw.
"""
from dataclasses import dataclass
from typing import Iterable, List

import pandas as pd

from .config import DATE_FORMAT_DISPLAY, OPEN_BOUND_LABEL
from .membership import DocumentSet, DocumentType, ExclusiveMembership
from .tier_set import TierSet

TIER_COLUMNS = ["From", "To", "Rate (%)", "Effective Date", "Active", "Description",
                "Editable Min", "Removable"]


@dataclass
class DocumentRow:
    """One checkbox in a document requirement list."""
    id: int
    name: str
    checked: bool
    disabled: bool


def tier_table(tier_set: TierSet) -> pd.DataFrame:
    """Tabulate the tiers, one row per tier, in balance order.

    The open bound is shown as ``OPEN_BOUND_LABEL``. ``Editable Min`` is only
    true on the first tier (later lower bounds follow their predecessor) and
    ``Removable`` is false when a single tier is left.
    """
    removable = len(tier_set) > 1
    rows = []
    for i, tier in enumerate(tier_set):
        rows.append({
            "From": tier.min_balance,
            "To": OPEN_BOUND_LABEL if tier.max_balance.is_open else tier.max_balance.amount,
            "Rate (%)": tier.rate_percentage,
            "Effective Date": tier.effective_date.strftime(DATE_FORMAT_DISPLAY),
            "Active": tier.is_active,
            "Description": tier.description,
            "Editable Min": i == 0,
            "Removable": removable,
        })
    return pd.DataFrame(rows, columns=TIER_COLUMNS)


def document_rows(membership: ExclusiveMembership, document_types: Iterable[DocumentType],
                  target) -> List[DocumentRow]:
    """Checkbox state for every document type in one of the two lists.

    A row is disabled when the document already sits in the other list.
    """
    target = DocumentSet.parse(target)
    return [
        DocumentRow(
            id=doc.id,
            name=doc.name,
            checked=membership.contains(doc.id, target),
            disabled=membership.is_locked(doc.id, target),
        )
        for doc in document_types
    ]
