"""Undo/Redo management for the savings configuration editor.

Every edit is wrapped in a command holding the snapshot before and after the
edit. Snapshots are immutable, so undo and redo just swap them back into the
session.
"""
import logging
from abc import ABC, abstractmethod
from typing import Callable, List, Optional

from ..exceptions import SavingsConfigError
from ..snapshot import ConfigurationSnapshot

logger = logging.getLogger(__name__)


class UndoableCommand(ABC):
    """Abstract base class for undoable commands."""

    @property
    @abstractmethod
    def description(self) -> str:
        """Human-readable description of the command."""
        pass

    @abstractmethod
    def execute(self) -> bool:
        """Execute the command. Returns True on success."""
        pass

    @abstractmethod
    def undo(self) -> bool:
        """Undo the command. Returns True on success."""
        pass

    @abstractmethod
    def redo(self) -> bool:
        """Redo the command. Returns True on success."""
        pass


class SnapshotEditCommand(UndoableCommand):
    """Applies a pure edit to the session snapshot.

    The edit is a function from snapshot to snapshot. If it raises a
    SavingsConfigError the command fails, the session keeps its snapshot and
    the reason is kept in ``error``.
    """

    def __init__(self, session, description: str,
                 edit: Callable[[ConfigurationSnapshot], ConfigurationSnapshot]):
        self.session = session
        self.edit = edit
        self._description = description

        self.before: Optional[ConfigurationSnapshot] = None
        self.after: Optional[ConfigurationSnapshot] = None
        self.error: Optional[SavingsConfigError] = None

    @property
    def description(self) -> str:
        return self._description

    def execute(self) -> bool:
        """Run the edit against the current snapshot."""
        self.before = self.session.snapshot
        try:
            self.after = self.edit(self.before)
        except SavingsConfigError as e:
            self.error = e
            logger.warning("Rejected edit '%s': %s", self._description, e.message)
            return False

        self.error = None
        self.session._set_snapshot(self.after)
        logger.debug("Applied edit '%s'", self._description)
        return True

    def undo(self) -> bool:
        """Restore the snapshot from before the edit."""
        if self.before is None:
            return False
        self.session._set_snapshot(self.before)
        return True

    def redo(self) -> bool:
        """Put the edited snapshot back without recomputing it."""
        if self.after is None:
            return False
        self.session._set_snapshot(self.after)
        return True


class UndoManager:
    """Manages undo/redo stacks for multi-step operations.

    Maintains separate stacks for undo and redo operations with a configurable
    maximum depth to prevent unbounded memory usage.
    """

    def __init__(self, max_depth: int = 20):
        self._undo_stack: List[UndoableCommand] = []
        self._redo_stack: List[UndoableCommand] = []
        self._max_depth = max_depth

    def execute(self, command: UndoableCommand) -> bool:
        """Execute a command and add it to the undo stack.

        Clears the redo stack since the command history has diverged.
        """
        if command.execute():
            self._undo_stack.append(command)
            if len(self._undo_stack) > self._max_depth:
                self._undo_stack.pop(0)  # Remove oldest
            self._redo_stack.clear()  # New action clears redo history
            return True
        return False

    def undo(self) -> Optional[UndoableCommand]:
        """Undo the last command.

        Returns the undone command on success, None if stack is empty.
        """
        if not self._undo_stack:
            return None

        command = self._undo_stack.pop()
        if command.undo():
            self._redo_stack.append(command)
            return command
        else:
            # Undo failed, put it back
            self._undo_stack.append(command)
            return None

    def redo(self) -> Optional[UndoableCommand]:
        """Redo the last undone command.

        Returns the redone command on success, None if stack is empty.
        """
        if not self._redo_stack:
            return None

        command = self._redo_stack.pop()
        if command.redo():
            self._undo_stack.append(command)
            return command
        else:
            # Redo failed, put it back
            self._redo_stack.append(command)
            return None

    def can_undo(self) -> bool:
        return len(self._undo_stack) > 0

    def can_redo(self) -> bool:
        return len(self._redo_stack) > 0

    def get_undo_description(self) -> Optional[str]:
        """Get description of the next undo action."""
        if self._undo_stack:
            return self._undo_stack[-1].description
        return None

    def get_redo_description(self) -> Optional[str]:
        """Get description of the next redo action."""
        if self._redo_stack:
            return self._redo_stack[-1].description
        return None

    def clear(self):
        """Clear both undo and redo stacks."""
        self._undo_stack.clear()
        self._redo_stack.clear()
