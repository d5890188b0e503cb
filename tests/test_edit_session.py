"""Tests for the configuration edit session."""
import os
import sys
import unittest
from datetime import date
from unittest.mock import Mock

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from savings_config.membership import DocumentSet
from savings_config.result import ErrorType
from savings_config.services.edit_session import EditSession

TODAY = date(2024, 6, 1)


def config():
    return {
        "id": 7,
        "minDepositAmount": 100,
        "interestPostingFrequency": "MONTHLY",
        "requiredKycDocumentTypeIds": [],
        "alternativeKycDocumentTypeIds": [],
    }


def single_open_tier():
    return [{"id": 1, "minBalance": 0, "maxBalance": None, "ratePercentage": 2.0,
             "effectiveDate": "2024-01-01", "isActive": True, "description": "Base"}]


def document_types():
    return {"content": [{"id": 7, "name": "National ID"}, {"id": 8, "name": "Passport"}]}


def ranges(session):
    return [
        (t.min_balance, None if t.max_balance.is_open else t.max_balance.amount, t.rate_percentage)
        for t in session.snapshot.tier_set
    ]


class TestEditSession(unittest.TestCase):
    """Edits, history and saving through one session."""

    def setUp(self):
        self.on_change = Mock()
        self.session = EditSession.from_wire(config(), single_open_tier(), document_types(),
                                             on_change=self.on_change)

    def test_loaded_session_is_clean(self):
        self.assertFalse(self.session.is_dirty)
        self.assertFalse(self.session.can_undo())
        self.assertEqual(self.session.snapshot.membership.universe, {7, 8})

    def test_add_then_move_boundary(self):
        result = self.session.add_tier(today=TODAY)
        self.assertTrue(result.success)
        self.assertEqual(ranges(self.session), [(0, 50000, 2.0), (50001, None, 2.0)])

        result = self.session.update_boundary(0, "maxBalance", 100000)
        self.assertTrue(result)
        self.assertIs(result.value, self.session.snapshot)
        self.assertEqual(ranges(self.session), [(0, 100000, 2.0), (100001, None, 2.0)])
        self.assertTrue(self.session.is_dirty)
        self.assertEqual(self.on_change.call_count, 2)

    def test_rejected_edit_leaves_form_unchanged(self):
        before = self.session.snapshot
        result = self.session.remove_tier(0)

        self.assertFalse(result.success)
        self.assertEqual(result.error_type, ErrorType.INVARIANT)
        self.assertIn("At least one", result.error)
        self.assertIs(self.session.snapshot, before)
        self.assertFalse(self.session.can_undo())
        self.on_change.assert_not_called()

    def test_remove_last_tier_reopens_previous(self):
        self.session.add_tier(today=TODAY)
        self.session.remove_tier(1)
        self.assertEqual(ranges(self.session), [(0, None, 2.0)])

    def test_toggle_documents(self):
        self.assertTrue(self.session.toggle_document(7, DocumentSet.REQUIRED))
        result = self.session.toggle_document(7, DocumentSet.ALTERNATIVE)

        self.assertFalse(result.success)
        self.assertEqual(result.error_type, ErrorType.INVARIANT)
        self.assertEqual(self.session.snapshot.membership.required, {7})
        self.assertEqual(self.session.snapshot.membership.alternative, set())
        self.assertTrue(self.session.is_document_locked(7, DocumentSet.ALTERNATIVE))

    def test_toggle_unknown_document_rejected(self):
        result = self.session.toggle_document(99, DocumentSet.REQUIRED)
        self.assertFalse(result.success)

    def test_update_settings(self):
        result = self.session.update_settings(min_deposit_amount=250, instant_withdrawal_fee_percent=2.5)
        self.assertTrue(result.success)
        self.assertEqual(self.session.snapshot.settings.min_deposit_amount, 250)

        result = self.session.update_settings(withholding_tax_percentage=150)
        self.assertFalse(result.success)
        self.assertEqual(self.session.snapshot.settings.withholding_tax_percentage, 0)

    def test_update_tier_details(self):
        result = self.session.update_tier_details(0, description="Everyday", is_active=False)
        self.assertTrue(result.success)
        self.assertEqual(self.session.snapshot.tier_set[0].description, "Everyday")

    def test_undo_redo(self):
        original = self.session.snapshot
        self.session.add_tier(today=TODAY)
        self.session.update_boundary(0, "maxBalance", 100000)
        self.assertEqual(self.session.get_undo_description(), "Change maxBalance of tier 1")

        self.assertTrue(self.session.undo())
        self.assertEqual(ranges(self.session), [(0, 50000, 2.0), (50001, None, 2.0)])
        self.assertTrue(self.session.undo())
        self.assertEqual(self.session.snapshot, original)
        self.assertFalse(self.session.is_dirty)

        result = self.session.undo()
        self.assertEqual(result.error_type, ErrorType.NOTHING_TO_UNDO)

        self.assertTrue(self.session.redo())
        self.assertEqual(len(self.session.snapshot.tier_set), 2)
        self.assertEqual(self.session.get_redo_description(), "Change maxBalance of tier 1")

    def test_redo_with_nothing_to_redo(self):
        self.assertEqual(self.session.redo().error_type, ErrorType.NOTHING_TO_REDO)

    def test_revert(self):
        self.session.add_tier(today=TODAY)
        self.session.revert()
        self.assertFalse(self.session.is_dirty)
        self.assertFalse(self.session.can_undo())
        self.assertEqual(len(self.session.snapshot.tier_set), 1)

    def test_save_payload(self):
        self.session.add_tier(today=TODAY)
        self.session.toggle_document(8, DocumentSet.ALTERNATIVE)
        payload = self.session.build_save_payload()

        self.assertEqual(payload["id"], 7)
        self.assertEqual(payload["alternativeKycDocumentTypeIds"], [8])
        self.assertEqual(payload["requiredKycDocumentTypeIds"], [])
        tiers = payload["interestTiers"]
        self.assertEqual([t["maxBalance"] for t in tiers], [50000, None])
        self.assertEqual(tiers[1]["minBalance"], 50001)
        self.assertEqual(tiers[1]["effectiveDate"], "2024-06-01")
        self.assertNotIn("id", tiers[1])

    def test_successful_save_marks_clean(self):
        self.session.add_tier(today=TODAY)
        result = self.session.apply_save_response({"success": True, "data": {"id": 7}})
        self.assertTrue(result.success)
        self.assertEqual(result.value, {"id": 7})
        self.assertFalse(self.session.is_dirty)

    def test_failed_save_shows_server_message(self):
        self.session.add_tier(today=TODAY)
        result = self.session.apply_save_response(
            {"success": False, "message": "Rate for tier 2 exceeds policy maximum"}
        )
        self.assertFalse(result.success)
        self.assertEqual(result.error_type, ErrorType.SERVER_VALIDATION)
        self.assertEqual(result.error, "Rate for tier 2 exceeds policy maximum")
        self.assertTrue(self.session.is_dirty)

    def test_unreadable_save_response(self):
        result = self.session.apply_save_response(None)
        self.assertEqual(result.error_type, ErrorType.MALFORMED)


if __name__ == "__main__":
    unittest.main()
