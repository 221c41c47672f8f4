# tests/test_audit.py
"""
Tests for the append-only audit trail.
"""

from datetime import date

import pytest

from accounting.audit import append_audit, audit_trail
from accounting.models import AuditTrailEntry
from accounting.posting import VoucherHeaderInput, post_voucher


@pytest.fixture
def voucher(actor_context, chart_of_accounts, balanced_lines):
    return post_voucher(
        actor_context,
        VoucherHeaderInput(date=date(2024, 2, 1), narration="Audit"),
        balanced_lines,
    ).voucher


@pytest.mark.django_db
class TestAuditTrail:

    def test_entries_are_ordered_by_insertion(self, company, user, voucher):
        append_audit(company, voucher, user, "Viewed")
        append_audit(company, voucher, user, "Exported", {"format": "csv"})

        entries = list(audit_trail(voucher))
        assert [e.action for e in entries] == ["Posted", "Viewed", "Exported"]
        assert [e.position for e in entries] == [1, 2, 3]
        assert entries[2].details == {"format": "csv"}
        assert entries[1].user_label == "Test Owner"

    def test_positions_are_per_target(self, actor_context, company, user, voucher, balanced_lines):
        other = post_voucher(
            actor_context,
            VoucherHeaderInput(date=date(2024, 2, 2)),
            balanced_lines,
        ).voucher

        append_audit(company, voucher, user, "Viewed")

        assert [e.position for e in audit_trail(other)] == [1]
        assert [e.position for e in audit_trail(voucher)] == [1, 2]

    def test_entry_cannot_be_updated(self, voucher):
        entry = audit_trail(voucher).get()
        entry.action = "Tampered"

        with pytest.raises(RuntimeError, match="append-only"):
            entry.save()

    def test_entry_cannot_be_deleted(self, voucher):
        entry = audit_trail(voucher).get()

        with pytest.raises(RuntimeError, match="append-only"):
            entry.delete()

    def test_bulk_update_and_delete_are_refused(self, voucher):
        with pytest.raises(RuntimeError):
            AuditTrailEntry.objects.filter(target_id=str(voucher.public_id)).update(action="x")

        with pytest.raises(RuntimeError):
            AuditTrailEntry.objects.all().delete()

        assert audit_trail(voucher).get().action == "Posted"

    def test_unsupported_target(self, company, user):
        with pytest.raises(TypeError):
            append_audit(company, company, user, "Posted")
