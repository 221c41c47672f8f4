# accounting/payments.py
"""
Payment voucher commands.

A payment voucher is raised as SUBMITTED together with a PENDING payment
journal (PJ-...). Approving the payment voucher posts the journal;
rejecting it rejects the journal. Both documents always move together.

Journal lines generated for a payment voucher, in order:
    Dr  item GL account        amount       (per item)
    Dr  VAT input account      vat_amount   (per item, when > 0)
    Cr  WHT payable account    total_wht    (when > 0)
    Cr  bank / cash account    net_payable
"""

import datetime
import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Optional

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import DatabaseError, transaction
from django.http import Http404
from django.utils import timezone

from accounts.authz import ActorContext, require
from accounting.audit import append_audit
from accounting.models import JournalVoucher, PaymentVoucher, PaymentVoucherLine
from accounting.policies import can_decide_payment_voucher
from accounting.posting import PostingResult, VoucherHeaderInput, persist_voucher
from accounting.sequences import next_document_number
from accounting.validation import ZERO, LineInput, to_money, validate_lines
from accounting.workflow import WorkflowError, approve_locked_voucher, reject_locked_voucher
from accounting.write_barrier import command_writes_allowed


logger = logging.getLogger(__name__)

STORAGE_FAILURE_MESSAGE = "Failed to create payment voucher"


@dataclass
class PaymentItemInput:
    gl_account_code: str
    amount: Decimal
    vat_amount: Decimal = ZERO
    wht_amount: Decimal = ZERO
    description: str = ""
    cost_center: str = ""

    def __post_init__(self):
        self.gl_account_code = str(self.gl_account_code or "").strip()
        self.amount = to_money(self.amount)
        self.vat_amount = to_money(self.vat_amount)
        self.wht_amount = to_money(self.wht_amount)


@dataclass
class PaymentVoucherInput:
    voucher_date: datetime.date
    payment_type: str
    currency: str
    payee_type: str
    payee_code: str
    narration: str
    bank_cash_account_code: str
    items: list = field(default_factory=list)
    payment_mode: str = PaymentVoucher.PaymentMode.TRANSFER
    exchange_rate: Decimal = Decimal("1.0")
    payee_name: str = ""
    source_module: str = ""
    source_document_no: str = ""

    @property
    def gross_amount(self) -> Decimal:
        return sum((item.amount for item in self.items), ZERO)

    @property
    def total_vat(self) -> Decimal:
        return sum((item.vat_amount for item in self.items), ZERO)

    @property
    def total_wht(self) -> Decimal:
        return sum((item.wht_amount for item in self.items), ZERO)

    @property
    def net_payable(self) -> Decimal:
        return self.gross_amount + self.total_vat - self.total_wht


def build_payment_lines(data: PaymentVoucherInput) -> list[LineInput]:
    vat_account = settings.LEDGER_VAT_INPUT_ACCOUNT
    wht_account = settings.LEDGER_WHT_PAYABLE_ACCOUNT
    payee = data.payee_code

    lines = []
    for item in data.items:
        lines.append(LineInput(
            account_code=item.gl_account_code,
            debit=item.amount,
            payee_id=payee,
            description=item.description or data.narration,
        ))
        if item.vat_amount > 0:
            lines.append(LineInput(
                account_code=vat_account,
                debit=item.vat_amount,
                payee_id=payee,
                description=f"VAT on {item.description or data.narration}",
            ))

    if data.total_wht > 0:
        lines.append(LineInput(
            account_code=wht_account,
            credit=data.total_wht,
            payee_id=payee,
            description=f"WHT withheld from {data.payee_name or payee}",
        ))

    lines.append(LineInput(
        account_code=data.bank_cash_account_code,
        credit=data.net_payable,
        payee_id=payee,
        description=data.narration,
    ))
    return lines


def create_payment_voucher(actor: ActorContext, data: PaymentVoucherInput) -> PostingResult:
    """
    Raise a payment voucher and its pending journal.

    Returns PostingResult with ``voucher`` = the journal voucher and
    ``data`` = the PaymentVoucher.
    """
    require(actor, "payments.create")

    if not data.items:
        return PostingResult.validation_failed(["EmptyLineSet"])

    lines = build_payment_lines(data)
    validation = validate_lines(actor.company, lines)
    if not validation.ok:
        logger.info(
            "Payment voucher rejected by validation",
            extra={"company_id": actor.company.id, "errors": validation.messages},
        )
        return PostingResult.validation_failed(validation.messages)

    try:
        with transaction.atomic():
            number = next_document_number(
                actor.company, "PV", data.voucher_date.year, width=6, sep="/",
            )
            header = VoucherHeaderInput(
                date=data.voucher_date,
                narration=data.narration,
                voucher_type=JournalVoucher.VoucherType.PAYMENT,
                status=JournalVoucher.Status.PENDING,
                source_document="PV",
                source_reference=number,
            )
            journal = persist_voucher(
                actor,
                header,
                lines,
                validation,
                JournalVoucher.Status.PENDING,
                audit_details={"payment_voucher": number},
            )

            with command_writes_allowed():
                payment_voucher = PaymentVoucher.objects.create(
                    company=actor.company,
                    voucher_number=number,
                    voucher_date=data.voucher_date,
                    payment_type=data.payment_type,
                    payment_mode=data.payment_mode,
                    currency=data.currency,
                    exchange_rate=data.exchange_rate,
                    payee_type=data.payee_type,
                    payee_code=data.payee_code,
                    payee_name=data.payee_name,
                    narration=data.narration,
                    source_module=data.source_module,
                    source_document_no=data.source_document_no,
                    bank_cash_account_code=data.bank_cash_account_code,
                    gross_amount=data.gross_amount,
                    total_vat=data.total_vat,
                    total_wht=data.total_wht,
                    net_payable=data.net_payable,
                    status=PaymentVoucher.Status.SUBMITTED,
                    journal_voucher=journal,
                    prepared_by=actor.user,
                )
                for line_no, item in enumerate(data.items, start=1):
                    PaymentVoucherLine.objects.create(
                        payment_voucher=payment_voucher,
                        line_no=line_no,
                        gl_account_code=item.gl_account_code,
                        description=item.description,
                        cost_center=item.cost_center,
                        amount=item.amount,
                        vat_amount=item.vat_amount,
                        wht_amount=item.wht_amount,
                    )

            append_audit(
                actor.company,
                payment_voucher,
                actor.user,
                "Submitted",
                {
                    "journal_voucher": journal.voucher_number,
                    "net_payable": str(data.net_payable),
                },
            )
    except DatabaseError:
        logger.exception(
            "Payment voucher storage failed",
            extra={"company_id": actor.company.id, "payee_code": data.payee_code},
        )
        return PostingResult.storage_failed(STORAGE_FAILURE_MESSAGE)

    logger.info(
        "Payment voucher %s submitted with journal %s",
        payment_voucher.voucher_number,
        journal.voucher_number,
        extra={
            "company_id": actor.company.id,
            "voucher_number": journal.voucher_number,
            "net_payable": str(data.net_payable),
        },
    )
    return PostingResult.ok(journal, data=payment_voucher)


def _lock_payment_voucher(actor: ActorContext, public_id) -> PaymentVoucher:
    try:
        payment_voucher = PaymentVoucher.objects.select_for_update().get(
            company=actor.company,
            public_id=public_id,
        )
    except (PaymentVoucher.DoesNotExist, ValueError, ValidationError):
        raise Http404("Payment voucher not found.")

    allowed, reason = can_decide_payment_voucher(actor, payment_voucher)
    if not allowed:
        raise WorkflowError(reason)
    return payment_voucher


def _lock_journal(payment_voucher: PaymentVoucher) -> Optional[JournalVoucher]:
    if payment_voucher.journal_voucher_id is None:
        return None
    return JournalVoucher.objects.select_for_update().get(pk=payment_voucher.journal_voucher_id)


@transaction.atomic
def approve_payment_voucher(actor: ActorContext, public_id) -> PaymentVoucher:
    require(actor, "payments.approve")
    payment_voucher = _lock_payment_voucher(actor, public_id)

    journal = _lock_journal(payment_voucher)
    if journal is not None:
        approve_locked_voucher(
            actor, journal, {"payment_voucher": payment_voucher.voucher_number},
        )

    with command_writes_allowed():
        payment_voucher.status = PaymentVoucher.Status.APPROVED
        payment_voucher.approved_by = actor.user
        payment_voucher.approval_date = timezone.now()
        payment_voucher.save(update_fields=["status", "approved_by", "approval_date"])
    append_audit(actor.company, payment_voucher, actor.user, "Approved")

    logger.info("Payment voucher %s approved", payment_voucher.voucher_number,
                extra={"company_id": actor.company.id})
    return payment_voucher


@transaction.atomic
def reject_payment_voucher(actor: ActorContext, public_id, reason: str = "") -> PaymentVoucher:
    require(actor, "payments.approve")
    payment_voucher = _lock_payment_voucher(actor, public_id)

    journal = _lock_journal(payment_voucher)
    if journal is not None:
        reject_locked_voucher(actor, journal, reason)

    with command_writes_allowed():
        payment_voucher.status = PaymentVoucher.Status.REJECTED
        payment_voucher.approved_by = actor.user
        payment_voucher.approval_date = timezone.now()
        payment_voucher.save(update_fields=["status", "approved_by", "approval_date"])
    append_audit(
        actor.company,
        payment_voucher,
        actor.user,
        "Rejected",
        {"reason": reason} if reason else None,
    )

    logger.info("Payment voucher %s rejected", payment_voucher.voucher_number,
                extra={"company_id": actor.company.id})
    return payment_voucher
