# tests/test_receiving.py
"""
Tests for goods received notes and their accrual journals.
"""

from datetime import date
from decimal import Decimal

import pytest
from django.core.exceptions import PermissionDenied

from accounting.audit import audit_trail
from accounting.models import GoodsReceivedNote, JournalVoucher
from accounting.receiving import GoodsReceiptInput, ReceivedItemInput, receive_goods


def receipt(items, **kwargs):
    kwargs.setdefault("purchase_order_number", "PO-7781")
    kwargs.setdefault("received_date", date(2024, 7, 3))
    kwargs.setdefault("supplier_name", "Acme Supplies")
    return GoodsReceiptInput(items=items, **kwargs)


@pytest.mark.django_db
class TestReceiveGoods:

    def test_receipt_posts_accrual(self, actor_context, chart_of_accounts):
        data = receipt([
            ReceivedItemInput(quantity_received=Decimal("10"), unit_cost=Decimal("12.5"), description="Paper"),
            ReceivedItemInput(quantity_received=Decimal("3"), unit_cost=Decimal("0.3333"), description="Pens"),
        ])

        result = receive_goods(actor_context, data)

        assert result.success
        grn = result.data
        journal = result.voucher
        assert grn.grn_number == "GRN-2024-00001"
        assert grn.total_received_value == Decimal("126.00")
        assert grn.lines.count() == 2

        assert journal.status == JournalVoucher.Status.POSTED
        assert journal.voucher_type == JournalVoucher.VoucherType.ACCRUAL
        assert journal.voucher_number == "JV-2024-00001"
        assert journal.source_document == "GRN"
        assert journal.source_reference == "GRN-2024-00001"
        assert [(l.account.code, l.debit, l.credit) for l in journal.lines.order_by("line_no")] == [
            ("501010", Decimal("126.00"), Decimal("0.00")),
            ("201030", Decimal("0.00"), Decimal("126.00")),
        ]
        assert [e.action for e in audit_trail(grn)] == ["Received"]
        assert [e.action for e in audit_trail(journal)] == ["Posted"]

    def test_accounts_can_be_overridden(self, actor_context, chart_of_accounts):
        data = receipt(
            [ReceivedItemInput(quantity_received=Decimal("1"), unit_cost=Decimal("40"))],
            inventory_account_code="5010",
            accrual_account_code="21020",
        )

        journal = receive_goods(actor_context, data).voucher

        assert [l.account.code for l in journal.lines.order_by("line_no")] == ["5010", "21020"]

    def test_zero_value_receipt_is_rejected(self, actor_context, chart_of_accounts):
        result = receive_goods(
            actor_context,
            receipt([ReceivedItemInput(quantity_received=Decimal("0"), unit_cost=Decimal("9"))]),
        )

        assert not result.success
        assert "ZeroAmountVoucher" in result.errors
        assert GoodsReceivedNote.objects.count() == 0
        assert JournalVoucher.objects.count() == 0

    def test_receipt_without_items(self, actor_context, chart_of_accounts):
        result = receive_goods(actor_context, receipt([]))

        assert result.errors == ["EmptyLineSet"]
        assert GoodsReceivedNote.objects.count() == 0
        assert JournalVoucher.objects.count() == 0

    def test_missing_accrual_account_is_unknown(self, settings, actor_context, chart_of_accounts):
        settings.LEDGER_GRN_ACCRUAL_ACCOUNT = "209999"

        result = receive_goods(
            actor_context,
            receipt([ReceivedItemInput(quantity_received=Decimal("1"), unit_cost=Decimal("5"))]),
        )

        assert result.errors == ["UnknownAccount: 209999"]

    def test_viewer_cannot_receive(self, viewer_actor_context, chart_of_accounts):
        with pytest.raises(PermissionDenied):
            receive_goods(
                viewer_actor_context,
                receipt([ReceivedItemInput(quantity_received=Decimal("1"), unit_cost=Decimal("5"))]),
            )
