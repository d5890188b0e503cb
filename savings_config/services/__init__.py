"""Services package for the savings configuration editor.

The domain types (tiers, document sets, snapshot) are pure values; these
services map them to the wire and manage an edit session around them.
"""

from . import boundary_serializer
from .edit_session import EditSession
from .undo_manager import UndoManager, UndoableCommand, SnapshotEditCommand

__all__ = ['boundary_serializer', 'EditSession', 'UndoManager', 'UndoableCommand',
           'SnapshotEditCommand']
