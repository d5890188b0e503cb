"""Tests for the required / alternative document sets."""
import os
import sys
import unittest

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from savings_config.exceptions import InvariantViolationError
from savings_config.membership import DocumentSet, ExclusiveMembership


class TestExclusiveMembership(unittest.TestCase):
    """Toggle behaviour and the disjointness guard."""

    def setUp(self):
        self.membership = ExclusiveMembership()

    def test_toggle_adds_then_removes(self):
        added = self.membership.toggle(3, DocumentSet.REQUIRED)
        self.assertEqual(added.required, {3})
        removed = added.toggle(3, DocumentSet.REQUIRED)
        self.assertEqual(removed.required, set())

    def test_toggle_into_opposite_set_is_refused(self):
        """7 goes to required; the alternative toggle leaves everything as it was."""
        first = self.membership.toggle(7, "required")
        self.assertEqual(first.required, {7})

        with self.assertRaises(InvariantViolationError) as ctx:
            first.toggle(7, "alternative")
        self.assertEqual(ctx.exception.rule, "disjoint")
        self.assertEqual(first.required, {7})
        self.assertEqual(first.alternative, set())

    def test_toggle_returns_new_instance(self):
        result = self.membership.toggle(1, DocumentSet.ALTERNATIVE)
        self.assertEqual(self.membership.alternative, set())
        self.assertEqual(result.alternative, {1})

    def test_is_locked(self):
        membership = ExclusiveMembership(required=[1], alternative=[2])
        self.assertTrue(membership.is_locked(1, DocumentSet.ALTERNATIVE))
        self.assertFalse(membership.is_locked(1, DocumentSet.REQUIRED))
        self.assertTrue(membership.is_locked(2, DocumentSet.REQUIRED))
        self.assertFalse(membership.is_locked(3, DocumentSet.REQUIRED))

    def test_overlapping_sets_rejected(self):
        with self.assertRaises(InvariantViolationError):
            ExclusiveMembership(required=[1, 2], alternative=[2, 3])

    def test_target_spellings(self):
        self.assertIs(DocumentSet.parse("requiredKycDocumentTypeIds"), DocumentSet.REQUIRED)
        self.assertIs(DocumentSet.parse("alternative"), DocumentSet.ALTERNATIVE)
        with self.assertRaises(InvariantViolationError):
            DocumentSet.parse("optional")

    def test_universe_restricts_new_ids(self):
        membership = ExclusiveMembership(universe=[1, 2, 3])
        self.assertEqual(membership.toggle(2, DocumentSet.REQUIRED).required, {2})
        with self.assertRaises(InvariantViolationError) as ctx:
            membership.toggle(99, DocumentSet.REQUIRED)
        self.assertEqual(ctx.exception.rule, "universe")

    def test_stale_id_outside_universe_can_be_removed(self):
        membership = ExclusiveMembership(required=[42], universe=[1, 2])
        self.assertEqual(membership.toggle(42, DocumentSet.REQUIRED).required, set())

    def test_non_integer_id_rejected(self):
        with self.assertRaises(InvariantViolationError):
            self.membership.toggle("7", DocumentSet.REQUIRED)
        with self.assertRaises(InvariantViolationError):
            self.membership.toggle(True, DocumentSet.REQUIRED)

    def test_members_sorted(self):
        membership = ExclusiveMembership(required=[5, 1, 3])
        self.assertEqual(membership.members(DocumentSet.REQUIRED), [1, 3, 5])

    def test_disjoint_after_any_toggle_sequence(self):
        membership = ExclusiveMembership(universe=range(1, 6))
        steps = [(1, "required"), (2, "alternative"), (1, "alternative"), (2, "required"),
                 (3, "required"), (3, "required"), (3, "alternative"), (4, "alternative"),
                 (1, "required"), (1, "alternative")]
        for doc_id, target in steps:
            try:
                membership = membership.toggle(doc_id, target)
            except InvariantViolationError:
                pass
            self.assertEqual(membership.required & membership.alternative, set())
        self.assertEqual(membership.required, set())
        self.assertEqual(membership.alternative, {1, 2, 3, 4})


if __name__ == "__main__":
    unittest.main()
