"""Wire mapping for the savings configuration.

The persistence collaborator represents the open upper bound of the last
tier as ``null`` (or an absent field). This module converts between that wire
form and RangeValue, and between the configuration JSON and a
ConfigurationSnapshot. Nothing is coerced: a malformed record rejects the
whole load.
"""
import logging
from datetime import date
from typing import Any, Dict, Iterable, List, Optional

from dateutil.parser import isoparse

from ..config import (
    ALTERNATIVE_DOCUMENTS_FIELD,
    DATE_FORMAT_WIRE,
    INTEREST_TIERS_FIELD,
    REQUIRED_DOCUMENTS_FIELD,
)
from ..exceptions import InvariantViolationError, MalformedWireValueError, ServerValidationError
from ..membership import DocumentType, ExclusiveMembership
from ..range_value import InterestTier, RangeValue, is_amount
from ..snapshot import ConfigurationSnapshot, SavingsSettings
from ..tier_set import TierSet

logger = logging.getLogger(__name__)

TIER_FIELDS = ("id", "minBalance", "maxBalance", "ratePercentage",
               "effectiveDate", "isActive", "description")

_SNAPSHOT_FIELDS = {"id", "updatedAt", INTEREST_TIERS_FIELD,
                    REQUIRED_DOCUMENTS_FIELD, ALTERNATIVE_DOCUMENTS_FIELD}


# =============================================================================
# BOUNDS
# =============================================================================

def to_wire(value: RangeValue):
    """Open bound -> None, finite bound -> its amount."""
    if value.is_open:
        return None
    return value.amount


def from_wire(raw, field: str = "maxBalance") -> RangeValue:
    """None -> open bound, non-negative number -> finite bound.

    Raises:
        MalformedWireValueError: For negative, non-numeric or non-finite values.
    """
    if raw is None:
        return RangeValue.open()
    return RangeValue.finite(_amount(raw, field))


def _amount(raw, field: str):
    if not is_amount(raw):
        raise MalformedWireValueError(field, raw, "expected a finite number")
    if raw < 0:
        raise MalformedWireValueError(field, raw, "cannot be negative")
    return raw


# =============================================================================
# TIERS
# =============================================================================

def tier_to_wire(tier: InterestTier) -> Dict[str, Any]:
    """Serialize one tier; the open tier is sent with ``maxBalance: null``."""
    payload = dict(tier.extra)
    if tier.id is not None:
        payload["id"] = tier.id
    payload.update({
        "minBalance": tier.min_balance,
        "maxBalance": to_wire(tier.max_balance),
        "ratePercentage": tier.rate_percentage,
        "effectiveDate": tier.effective_date.strftime(DATE_FORMAT_WIRE),
        "isActive": tier.is_active,
        "description": tier.description,
    })
    return payload


def tier_from_wire(record: Dict[str, Any]) -> InterestTier:
    """Hydrate one tier from its wire record.

    Raises:
        MalformedWireValueError: If a field is missing or has the wrong shape.
    """
    if not isinstance(record, dict):
        raise MalformedWireValueError("interestTier", record, "expected an object")
    if "minBalance" not in record:
        raise MalformedWireValueError("minBalance", None, "missing")
    if "ratePercentage" not in record:
        raise MalformedWireValueError("ratePercentage", None, "missing")

    tier_id = record.get("id")
    if tier_id is not None and (isinstance(tier_id, bool) or not isinstance(tier_id, int)):
        raise MalformedWireValueError("id", tier_id, "expected an integer")

    is_active = record.get("isActive", True)
    if not isinstance(is_active, bool):
        raise MalformedWireValueError("isActive", is_active, "expected a boolean")

    description = record.get("description") or ""
    if not isinstance(description, str):
        raise MalformedWireValueError("description", description, "expected a string")

    return InterestTier(
        min_balance=_amount(record["minBalance"], "minBalance"),
        max_balance=from_wire(record.get("maxBalance")),
        rate_percentage=_amount(record["ratePercentage"], "ratePercentage"),
        effective_date=_parse_date(record.get("effectiveDate"), "effectiveDate"),
        is_active=is_active,
        description=description,
        id=tier_id,
        extra={k: v for k, v in record.items() if k not in TIER_FIELDS},
    )


def tiers_from_wire(records: Optional[Iterable[Dict[str, Any]]]) -> TierSet:
    """Hydrate a TierSet; an empty list becomes the default single open tier."""
    if records is None:
        records = []
    if not isinstance(records, list):
        raise MalformedWireValueError(INTEREST_TIERS_FIELD, records, "expected a list")
    if not records:
        logger.warning("No interest tiers loaded, starting from a single open tier")
        return TierSet.default()
    return TierSet.from_tiers(tier_from_wire(record) for record in records)


def tiers_to_wire(tier_set: TierSet) -> List[Dict[str, Any]]:
    return [tier_to_wire(tier) for tier in tier_set]


def _parse_date(raw, field: str) -> date:
    if isinstance(raw, date):
        return raw
    if not isinstance(raw, str) or not raw:
        raise MalformedWireValueError(field, raw, "expected a YYYY-MM-DD date")
    try:
        return isoparse(raw).date()
    except ValueError as e:
        raise MalformedWireValueError(field, raw, str(e)) from e


# =============================================================================
# DOCUMENT TYPES
# =============================================================================

def document_types_from_wire(payload) -> List[DocumentType]:
    """Read the document type list, plain or paged (``{"content": [...]}``)."""
    if isinstance(payload, dict):
        payload = payload.get("content") or []
    if not isinstance(payload, list):
        raise MalformedWireValueError("documentTypes", payload, "expected a list")

    doc_types = []
    for record in payload:
        if not isinstance(record, dict):
            raise MalformedWireValueError("documentType", record, "expected an object")
        doc_id = record.get("id")
        if isinstance(doc_id, bool) or not isinstance(doc_id, int):
            raise MalformedWireValueError("documentType.id", doc_id, "expected an integer")
        doc_types.append(DocumentType(
            id=doc_id,
            name=record.get("name") or "",
            code=record.get("code") or "",
            description=record.get("description") or "",
            file_type=record.get("fileType") or "",
            active=bool(record.get("active", True)),
        ))
    return doc_types


def _id_list(config: Dict[str, Any], field: str) -> List[int]:
    ids = config.get(field) or []
    if not isinstance(ids, list):
        raise MalformedWireValueError(field, ids, "expected a list of ids")
    for doc_id in ids:
        if isinstance(doc_id, bool) or not isinstance(doc_id, int):
            raise MalformedWireValueError(field, doc_id, "expected an integer id")
    return ids


# =============================================================================
# SNAPSHOT
# =============================================================================

def snapshot_from_wire(config: Dict[str, Any], tiers=None,
                       document_types: Optional[Iterable[DocumentType]] = None) -> ConfigurationSnapshot:
    """Build a snapshot from the configuration and tier endpoints.

    Args:
        config: The configuration object (``data`` of the load response).
        tiers: Tier records from the tier endpoint. When None, the
            configuration's own ``interestTiers`` are used.
        document_types: Known document types; their ids restrict toggles.

    Raises:
        MalformedWireValueError: If any field is malformed.
        InvariantViolationError: If the loaded tiers or document sets break
            an invariant.
    """
    if not isinstance(config, dict):
        raise MalformedWireValueError("configuration", config, "expected an object")
    config_id = config.get("id")
    if config_id is not None and (isinstance(config_id, bool) or not isinstance(config_id, int)):
        raise MalformedWireValueError("id", config_id, "expected an integer")

    wire_names = SavingsSettings.wire_names()
    values = {name: config[wire] for name, wire in wire_names.items() if wire in config}
    try:
        settings = SavingsSettings(**values)
    except InvariantViolationError as e:
        raise MalformedWireValueError(e.details.get('field', 'configuration'), e.details.get('value'),
                                      e.message) from e

    if tiers is None:
        tiers = config.get(INTEREST_TIERS_FIELD)
    tier_set = tiers_from_wire(tiers)

    universe = [doc.id for doc in document_types] if document_types else None
    membership = ExclusiveMembership(
        _id_list(config, REQUIRED_DOCUMENTS_FIELD),
        _id_list(config, ALTERNATIVE_DOCUMENTS_FIELD),
        universe,
    )

    known = _SNAPSHOT_FIELDS | set(wire_names.values())
    snapshot = ConfigurationSnapshot(
        tier_set=tier_set,
        membership=membership,
        settings=settings,
        id=config_id,
        updated_at=config.get("updatedAt"),
        extra={k: v for k, v in config.items() if k not in known},
    )
    logger.info("Loaded savings configuration %s with %d tiers", snapshot.id, len(tier_set))
    return snapshot


def snapshot_to_wire(snapshot: ConfigurationSnapshot) -> Dict[str, Any]:
    """Build the save payload (the whole configuration, never a partial update)."""
    payload = dict(snapshot.extra)
    if snapshot.id is not None:
        payload["id"] = snapshot.id
    for name, wire in SavingsSettings.wire_names().items():
        payload[wire] = getattr(snapshot.settings, name)
    payload[REQUIRED_DOCUMENTS_FIELD] = sorted(snapshot.membership.required)
    payload[ALTERNATIVE_DOCUMENTS_FIELD] = sorted(snapshot.membership.alternative)
    payload[INTEREST_TIERS_FIELD] = tiers_to_wire(snapshot.tier_set)
    if snapshot.updated_at is not None:
        payload["updatedAt"] = snapshot.updated_at
    return payload


# =============================================================================
# RESPONSE ENVELOPE
# =============================================================================

def parse_envelope(response):
    """Unwrap ``{"success": ..., "data": ..., "message": ...}``.

    Returns:
        The ``data`` member of a successful response.

    Raises:
        ServerValidationError: If the server reported a failure; the message
            is kept verbatim.
        MalformedWireValueError: If the response is not an envelope.
    """
    if not isinstance(response, dict):
        raise MalformedWireValueError("response", response, "expected an object")
    if response.get("success"):
        return response.get("data")
    raise ServerValidationError(response.get("message"), response)
