# accounting/receiving.py
"""
Goods received notes.

Receiving goods accrues the liability immediately: the GRN and a POSTED
accrual journal are written together.

    Dr  inventory account     total received value
    Cr  GRN accrual account   total received value
"""

import datetime
import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Optional

from django.conf import settings
from django.db import DatabaseError, transaction

from accounts.authz import ActorContext, require
from accounting.audit import append_audit
from accounting.models import GoodsReceivedNote, GoodsReceivedNoteLine, JournalVoucher
from accounting.posting import PostingResult, VoucherHeaderInput, persist_voucher
from accounting.sequences import next_document_number
from accounting.validation import ZERO, LineInput, to_money, validate_lines
from accounting.write_barrier import command_writes_allowed


logger = logging.getLogger(__name__)

STORAGE_FAILURE_MESSAGE = "Failed to record goods received"


@dataclass
class ReceivedItemInput:
    quantity_received: Decimal
    unit_cost: Decimal
    description: str = ""

    @property
    def line_value(self) -> Decimal:
        return to_money(Decimal(str(self.quantity_received)) * Decimal(str(self.unit_cost)))


@dataclass
class GoodsReceiptInput:
    purchase_order_number: str
    received_date: datetime.date
    items: list = field(default_factory=list)
    supplier_name: str = ""
    inventory_account_code: Optional[str] = None
    accrual_account_code: Optional[str] = None

    @property
    def total_value(self) -> Decimal:
        return sum((item.line_value for item in self.items), ZERO)


def receive_goods(actor: ActorContext, data: GoodsReceiptInput) -> PostingResult:
    """
    Record a goods receipt and post its accrual.

    Returns PostingResult with ``voucher`` = the accrual journal and
    ``data`` = the GoodsReceivedNote.
    """
    require(actor, "receiving.create")

    if not data.items:
        return PostingResult.validation_failed(["EmptyLineSet"])

    inventory_code = data.inventory_account_code or settings.LEDGER_GRN_INVENTORY_ACCOUNT
    accrual_code = data.accrual_account_code or settings.LEDGER_GRN_ACCRUAL_ACCOUNT
    total = data.total_value
    description = f"Goods received against PO {data.purchase_order_number}"

    lines = [
        LineInput(account_code=inventory_code, debit=total, description=description),
        LineInput(account_code=accrual_code, credit=total, description=description),
    ]
    validation = validate_lines(actor.company, lines)
    if not validation.ok:
        logger.info(
            "Goods receipt rejected by validation",
            extra={"company_id": actor.company.id, "errors": validation.messages},
        )
        return PostingResult.validation_failed(validation.messages)

    try:
        with transaction.atomic():
            grn_number = next_document_number(actor.company, "GRN", data.received_date.year)
            header = VoucherHeaderInput(
                date=data.received_date,
                narration=f"GRN {grn_number}: {description}",
                voucher_type=JournalVoucher.VoucherType.ACCRUAL,
                status=JournalVoucher.Status.POSTED,
                source_document="GRN",
                source_reference=grn_number,
            )
            journal = persist_voucher(
                actor,
                header,
                lines,
                validation,
                JournalVoucher.Status.POSTED,
                audit_details={"grn": grn_number},
            )

            with command_writes_allowed():
                grn = GoodsReceivedNote.objects.create(
                    company=actor.company,
                    grn_number=grn_number,
                    purchase_order_number=data.purchase_order_number,
                    supplier_name=data.supplier_name,
                    received_date=data.received_date,
                    total_received_value=total,
                    journal_voucher=journal,
                    created_by=actor.user,
                )
                for line_no, item in enumerate(data.items, start=1):
                    GoodsReceivedNoteLine.objects.create(
                        grn=grn,
                        line_no=line_no,
                        description=item.description,
                        quantity_received=item.quantity_received,
                        unit_cost=item.unit_cost,
                    )

            append_audit(
                actor.company,
                grn,
                actor.user,
                "Received",
                {"journal_voucher": journal.voucher_number, "total": str(total)},
            )
    except DatabaseError:
        logger.exception(
            "Goods receipt storage failed",
            extra={"company_id": actor.company.id, "purchase_order": data.purchase_order_number},
        )
        return PostingResult.storage_failed(STORAGE_FAILURE_MESSAGE)

    logger.info(
        "GRN %s recorded, accrual %s posted",
        grn.grn_number,
        journal.voucher_number,
        extra={"company_id": actor.company.id, "voucher_number": journal.voucher_number},
    )
    return PostingResult.ok(journal, data=grn)
