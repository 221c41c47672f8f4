# tests/test_workflow.py
"""
Tests for voucher workflow commands (submit / approve / reject).
"""

from datetime import date

import pytest
from django.core.exceptions import PermissionDenied
from django.http import Http404

from accounting.audit import audit_trail
from accounting.models import JournalLine, JournalVoucher, PaymentVoucher
from accounting.payments import PaymentItemInput, PaymentVoucherInput, create_payment_voucher
from accounting.posting import VoucherHeaderInput, post_voucher
from accounting.workflow import WorkflowError, approve_voucher, reject_voucher, submit_voucher


def _post(actor, lines, status):
    header = VoucherHeaderInput(date=date(2024, 5, 1), narration="Workflow", status=status)
    return post_voucher(actor, header, lines).voucher


@pytest.fixture
def draft_voucher(actor_context, chart_of_accounts, balanced_lines):
    return _post(actor_context, balanced_lines, JournalVoucher.Status.DRAFT)


@pytest.fixture
def pending_voucher(actor_context, chart_of_accounts, balanced_lines):
    return _post(actor_context, balanced_lines, JournalVoucher.Status.PENDING)


@pytest.mark.django_db
class TestVoucherWorkflow:

    def test_submit_moves_draft_to_pending(self, actor_context, draft_voucher):
        voucher = submit_voucher(actor_context, draft_voucher.public_id)

        assert voucher.status == JournalVoucher.Status.PENDING
        assert [e.action for e in audit_trail(voucher)] == ["Drafted", "Submitted"]

    def test_approve_posts_pending_voucher(self, admin_actor_context, pending_voucher):
        voucher = approve_voucher(admin_actor_context, pending_voucher.public_id)

        voucher.refresh_from_db()
        assert voucher.status == JournalVoucher.Status.POSTED
        assert voucher.posted_by == admin_actor_context.user
        assert voucher.posted_at is not None
        entries = list(audit_trail(voucher))
        assert [e.action for e in entries] == ["Submitted", "Posted"]
        assert [e.position for e in entries] == [1, 2]

    def test_reject_records_reason(self, admin_actor_context, pending_voucher):
        voucher = reject_voucher(admin_actor_context, pending_voucher.public_id, "Wrong cost centre")

        assert voucher.status == JournalVoucher.Status.REJECTED
        last = list(audit_trail(voucher))[-1]
        assert last.action == "Rejected"
        assert last.details == {"reason": "Wrong cost centre"}

    def test_draft_cannot_be_approved(self, actor_context, draft_voucher):
        with pytest.raises(WorkflowError, match="DRAFT -> POSTED"):
            approve_voucher(actor_context, draft_voucher.public_id)

    @pytest.mark.parametrize("action", [submit_voucher, approve_voucher, reject_voucher])
    def test_posted_voucher_is_terminal(self, actor_context, chart_of_accounts, balanced_lines, action):
        posted = _post(actor_context, balanced_lines, JournalVoucher.Status.POSTED)

        with pytest.raises(WorkflowError):
            action(actor_context, posted.public_id)

        posted.refresh_from_db()
        assert posted.status == JournalVoucher.Status.POSTED
        assert len(audit_trail(posted)) == 1

    def test_rejected_voucher_cannot_be_approved(self, actor_context, pending_voucher):
        reject_voucher(actor_context, pending_voucher.public_id)

        with pytest.raises(WorkflowError):
            approve_voucher(actor_context, pending_voucher.public_id)

    def test_approve_rechecks_balance(self, actor_context, pending_voucher):
        line = pending_voucher.lines.get(line_no=2)
        JournalLine.objects.filter(pk=line.pk).update(credit="90.00")

        with pytest.raises(WorkflowError, match="Unbalanced: 100 != 90"):
            approve_voucher(actor_context, pending_voucher.public_id)

        pending_voucher.refresh_from_db()
        assert pending_voucher.status == JournalVoucher.Status.PENDING

    def test_user_cannot_approve(self, user_actor_context, pending_voucher):
        with pytest.raises(PermissionDenied):
            approve_voucher(user_actor_context, pending_voucher.public_id)

    def test_other_tenant_cannot_see_voucher(self, second_actor_context, pending_voucher):
        with pytest.raises(Http404):
            approve_voucher(second_actor_context, pending_voucher.public_id)

    def test_payment_journal_follows_its_payment_voucher(self, actor_context, chart_of_accounts):
        data = PaymentVoucherInput(
            voucher_date=date(2024, 5, 1),
            payment_type=PaymentVoucher.PaymentType.BANK,
            currency="USD",
            payee_type=PaymentVoucher.PayeeType.SUPPLIER,
            payee_code="SUP-001",
            narration="May rent",
            bank_cash_account_code="1010",
            items=[PaymentItemInput(gl_account_code="5010", amount="100")],
        )
        voucher = create_payment_voucher(actor_context, data).voucher

        with pytest.raises(WorkflowError, match="payment voucher"):
            approve_voucher(actor_context, voucher.public_id)
        with pytest.raises(WorkflowError, match="payment voucher"):
            reject_voucher(actor_context, voucher.public_id)

    def test_source_text_alone_does_not_lock_a_voucher(self, actor_context, chart_of_accounts, balanced_lines):
        header = VoucherHeaderInput(
            date=date(2024, 5, 1),
            status=JournalVoucher.Status.PENDING,
            voucher_type=JournalVoucher.VoucherType.PAYMENT,
            source_document="PV",
            source_reference="PV/2024/000099",
        )
        voucher = post_voucher(actor_context, header, balanced_lines).voucher

        approved = approve_voucher(actor_context, voucher.public_id)

        assert approved.status == JournalVoucher.Status.POSTED
