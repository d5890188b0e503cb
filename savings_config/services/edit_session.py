"""Edit session for the savings product configuration screen.

The hosting screen owns one EditSession per edit. All tier and document set
edits go through it one at a time; each returns a Result so a rejected edit
can be surfaced without the form changing.
"""
import logging
from datetime import date
from typing import Any, Callable, Dict, Optional

from ..config import MAX_UNDO_DEPTH
from ..exceptions import MalformedWireValueError, ServerValidationError
from ..result import ErrorType, Result
from ..snapshot import ConfigurationSnapshot
from . import boundary_serializer
from .undo_manager import SnapshotEditCommand, UndoManager

logger = logging.getLogger(__name__)


class EditSession:
    """State container for one configuration edit session.

    Attributes:
        snapshot: The current (edited) configuration.
        is_dirty: Whether the snapshot differs from the last loaded or saved one.
        on_change: Callback invoked with the new snapshot after every change.
    """

    def __init__(self, snapshot: ConfigurationSnapshot,
                 on_change: Callable[[ConfigurationSnapshot], None] = None,
                 max_undo_depth: int = MAX_UNDO_DEPTH):
        """Initialize EditSession.

        Args:
            snapshot: The fully loaded configuration to edit.
            on_change: Optional callback invoked when the snapshot changes.
            max_undo_depth: Number of edits that can be undone.
        """
        self._snapshot = snapshot
        self._saved = snapshot
        self._undo = UndoManager(max_depth=max_undo_depth)
        self.on_change = on_change

    @classmethod
    def from_wire(cls, config: Dict[str, Any], tiers=None, document_types=None,
                  **kwargs) -> 'EditSession':
        """Open a session on a loaded configuration.

        ``document_types`` may be the raw document type payload or parsed
        DocumentType records.
        """
        if isinstance(document_types, dict) or (
                isinstance(document_types, list) and document_types and isinstance(document_types[0], dict)):
            document_types = boundary_serializer.document_types_from_wire(document_types)
        snapshot = boundary_serializer.snapshot_from_wire(config, tiers, document_types)
        return cls(snapshot, **kwargs)

    @property
    def snapshot(self) -> ConfigurationSnapshot:
        return self._snapshot

    @property
    def is_dirty(self) -> bool:
        return self._snapshot != self._saved

    def _set_snapshot(self, snapshot: ConfigurationSnapshot) -> None:
        self._snapshot = snapshot
        if self.on_change:
            self.on_change(snapshot)

    def _apply(self, description: str, edit) -> Result:
        command = SnapshotEditCommand(self, description, edit)
        if self._undo.execute(command):
            return Result.ok(self._snapshot)
        return Result.fail(command.error.message, ErrorType.INVARIANT)

    # ------------------------------------------------------------------
    # Interest tiers
    # ------------------------------------------------------------------

    def add_tier(self, today: Optional[date] = None) -> Result:
        return self._apply(
            "Add tier",
            lambda s: s.with_tier_set(s.tier_set.add_tier(today)),
        )

    def remove_tier(self, index: int) -> Result:
        return self._apply(
            f"Remove tier {index + 1}" if isinstance(index, int) else "Remove tier",
            lambda s: s.with_tier_set(s.tier_set.remove_tier(index)),
        )

    def update_boundary(self, index: int, field: str, value) -> Result:
        return self._apply(
            f"Change {field} of tier {index + 1}" if isinstance(index, int) else f"Change {field}",
            lambda s: s.with_tier_set(s.tier_set.update_boundary(index, field, value)),
        )

    def update_tier_details(self, index: int, **details) -> Result:
        return self._apply(
            f"Edit tier {index + 1}" if isinstance(index, int) else "Edit tier",
            lambda s: s.with_tier_set(s.tier_set.update_details(index, **details)),
        )

    # ------------------------------------------------------------------
    # Documents and settings
    # ------------------------------------------------------------------

    def toggle_document(self, doc_id: int, target) -> Result:
        return self._apply(
            f"Toggle document {doc_id}",
            lambda s: s.with_membership(s.membership.toggle(doc_id, target)),
        )

    def is_document_locked(self, doc_id: int, target) -> bool:
        """Whether the UI should disable the checkbox for ``doc_id``."""
        return self._snapshot.membership.is_locked(doc_id, target)

    def update_settings(self, **changes) -> Result:
        return self._apply(
            f"Change {', '.join(sorted(changes))}",
            lambda s: s.with_settings(**changes),
        )

    # ------------------------------------------------------------------
    # History
    # ------------------------------------------------------------------

    def undo(self) -> Result:
        command = self._undo.undo()
        if command is None:
            return Result.fail("Nothing to undo", ErrorType.NOTHING_TO_UNDO)
        return Result.ok(self._snapshot)

    def redo(self) -> Result:
        command = self._undo.redo()
        if command is None:
            return Result.fail("Nothing to redo", ErrorType.NOTHING_TO_REDO)
        return Result.ok(self._snapshot)

    def can_undo(self) -> bool:
        return self._undo.can_undo()

    def can_redo(self) -> bool:
        return self._undo.can_redo()

    def get_undo_description(self) -> Optional[str]:
        return self._undo.get_undo_description()

    def get_redo_description(self) -> Optional[str]:
        return self._undo.get_redo_description()

    def revert(self) -> None:
        """Drop every unsaved edit and the edit history."""
        self._undo.clear()
        if self.is_dirty:
            self._set_snapshot(self._saved)

    # ------------------------------------------------------------------
    # Saving
    # ------------------------------------------------------------------

    def build_save_payload(self) -> Dict[str, Any]:
        """Wire payload to hand to the persistence collaborator."""
        return boundary_serializer.snapshot_to_wire(self._snapshot)

    def apply_save_response(self, response) -> Result:
        """Record the outcome of a save.

        A successful envelope marks the session clean. A failure is returned
        with the server message verbatim; the snapshot is kept so the user
        can correct it.
        """
        try:
            data = boundary_serializer.parse_envelope(response)
        except ServerValidationError as e:
            logger.warning("Save rejected by server: %s", e.message)
            return Result.fail(e.message, ErrorType.SERVER_VALIDATION)
        except MalformedWireValueError as e:
            logger.error("Unreadable save response: %s", e)
            return Result.fail(e.message, ErrorType.MALFORMED)

        self._saved = self._snapshot
        logger.info("Savings configuration %s saved", self._snapshot.id)
        return Result.ok(data)
