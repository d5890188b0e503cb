"""Mutually exclusive KYC document requirement sets.

A document type may be required or accepted as an alternative, never both.
The guard lives here so the UI only reads ``is_locked`` to render a disabled
control; it does not enforce the rule itself.
"""
from dataclasses import dataclass
from enum import Enum
from typing import FrozenSet, Iterable, List, Optional

from .config import ALTERNATIVE_DOCUMENTS_FIELD, REQUIRED_DOCUMENTS_FIELD
from .exceptions import InvariantViolationError


class DocumentSet(str, Enum):
    REQUIRED = "required"
    ALTERNATIVE = "alternative"

    @property
    def opposite(self) -> 'DocumentSet':
        return DocumentSet.ALTERNATIVE if self is DocumentSet.REQUIRED else DocumentSet.REQUIRED

    @property
    def wire_field(self) -> str:
        return REQUIRED_DOCUMENTS_FIELD if self is DocumentSet.REQUIRED else ALTERNATIVE_DOCUMENTS_FIELD

    @classmethod
    def parse(cls, value) -> 'DocumentSet':
        """Accept a DocumentSet, its value, or its wire field name."""
        if isinstance(value, DocumentSet):
            return value
        for member in cls:
            if value in (member.value, member.wire_field):
                return member
        raise InvariantViolationError(f"Unknown document set '{value}'", rule="document_set", value=value)


def _as_id(doc_id) -> int:
    if isinstance(doc_id, bool) or not isinstance(doc_id, int):
        raise InvariantViolationError(
            f"Document type id must be an integer, got {doc_id!r}", rule="document_id", value=doc_id
        )
    return doc_id


class ExclusiveMembership:
    """Two disjoint sets of document type ids: required and alternative.

    Attributes:
        required: Ids of documents every applicant must provide.
        alternative: Ids accepted when a required document is unavailable.
        universe: Known document type ids; empty means "not restricted".
    """

    def __init__(self, required: Iterable[int] = (), alternative: Iterable[int] = (),
                 universe: Optional[Iterable[int]] = None):
        self._required: FrozenSet[int] = frozenset(_as_id(i) for i in required)
        self._alternative: FrozenSet[int] = frozenset(_as_id(i) for i in alternative)
        self._universe: FrozenSet[int] = frozenset(universe or ())

        overlap = self._required & self._alternative
        if overlap:
            raise InvariantViolationError(
                "A document type cannot be both required and alternative",
                rule="disjoint", ids=sorted(overlap),
            )

    @property
    def required(self) -> FrozenSet[int]:
        return self._required

    @property
    def alternative(self) -> FrozenSet[int]:
        return self._alternative

    @property
    def universe(self) -> FrozenSet[int]:
        return self._universe

    def members(self, target) -> List[int]:
        """Sorted ids of one of the two sets."""
        return sorted(self._set_of(DocumentSet.parse(target)))

    def contains(self, doc_id: int, target) -> bool:
        return doc_id in self._set_of(DocumentSet.parse(target))

    def is_locked(self, doc_id: int, target) -> bool:
        """Whether toggling ``doc_id`` in ``target`` is refused.

        True when the id already belongs to the opposite set.
        """
        return doc_id in self._set_of(DocumentSet.parse(target).opposite)

    def toggle(self, doc_id: int, target) -> 'ExclusiveMembership':
        """Flip membership of ``doc_id`` in ``target``.

        Returns:
            A new ExclusiveMembership.

        Raises:
            InvariantViolationError: If the id is in the opposite set, or is
                not part of a restricted universe.
        """
        target = DocumentSet.parse(target)
        doc_id = _as_id(doc_id)
        if self.is_locked(doc_id, target):
            raise InvariantViolationError(
                f"Document type {doc_id} is already {target.opposite.value}",
                rule="disjoint", id=doc_id,
            )
        if self._universe and doc_id not in self._universe and doc_id not in self._set_of(target):
            raise InvariantViolationError(
                f"Unknown document type {doc_id}", rule="universe", id=doc_id
            )

        members = set(self._set_of(target))
        if doc_id in members:
            members.remove(doc_id)
        else:
            members.add(doc_id)

        if target is DocumentSet.REQUIRED:
            return ExclusiveMembership(members, self._alternative, self._universe)
        return ExclusiveMembership(self._required, members, self._universe)

    def with_universe(self, universe: Iterable[int]) -> 'ExclusiveMembership':
        return ExclusiveMembership(self._required, self._alternative, universe)

    def _set_of(self, target: DocumentSet) -> FrozenSet[int]:
        return self._required if target is DocumentSet.REQUIRED else self._alternative

    def __eq__(self, other):
        if not isinstance(other, ExclusiveMembership):
            return NotImplemented
        return (self._required, self._alternative) == (other._required, other._alternative)

    def __hash__(self):
        return hash((self._required, self._alternative))

    def __repr__(self):
        return (f"ExclusiveMembership(required={sorted(self._required)}, "
                f"alternative={sorted(self._alternative)})")


@dataclass(frozen=True)
class DocumentType:
    """A KYC document type offered by the platform."""
    id: int
    name: str
    code: str = ""
    description: str = ""
    file_type: str = ""
    active: bool = True
