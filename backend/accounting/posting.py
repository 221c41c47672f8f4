# accounting/posting.py
"""
Journal poster.

post_voucher() validates a line set and, only if it balances, writes the
voucher header, its lines and one audit entry in a single transaction.
Nothing is written when validation fails, and a storage failure rolls the
whole voucher back.

Usage:
    result = post_voucher(actor, VoucherHeaderInput(date=...), lines)
    if result.success:
        voucher = result.voucher
    elif result.errors:
        ...  # validation messages, e.g. ["Unbalanced: 100 != 99.5"]
    else:
        ...  # result.error, storage failure
"""

import datetime
import logging
from dataclasses import dataclass
from typing import Optional, Sequence

from django.db import DatabaseError, transaction
from django.utils import timezone

from accounts.authz import ActorContext, require
from accounting.audit import append_audit
from accounting.models import JournalLine, JournalVoucher
from accounting.sequences import next_document_number
from accounting.validation import LineInput, ValidationResult, validate_lines
from accounting.write_barrier import command_writes_allowed


logger = logging.getLogger(__name__)

STORAGE_FAILURE_MESSAGE = "Failed to post journal voucher"

DEFAULT_STATUS = {
    JournalVoucher.VoucherType.MANUAL: JournalVoucher.Status.POSTED,
    JournalVoucher.VoucherType.PAYMENT: JournalVoucher.Status.PENDING,
    JournalVoucher.VoucherType.ACCRUAL: JournalVoucher.Status.POSTED,
}

INITIAL_STATUSES = (
    JournalVoucher.Status.DRAFT,
    JournalVoucher.Status.PENDING,
    JournalVoucher.Status.POSTED,
)

AUDIT_ACTIONS = {
    JournalVoucher.Status.DRAFT: "Drafted",
    JournalVoucher.Status.PENDING: "Submitted",
    JournalVoucher.Status.POSTED: "Posted",
}

NUMBER_PREFIXES = {
    JournalVoucher.VoucherType.MANUAL: "JV",
    JournalVoucher.VoucherType.PAYMENT: "PJ",
    JournalVoucher.VoucherType.ACCRUAL: "JV",
}


@dataclass
class VoucherHeaderInput:
    date: datetime.date
    narration: str = ""
    voucher_type: str = JournalVoucher.VoucherType.MANUAL
    status: Optional[str] = None
    source_document: str = ""
    source_reference: str = ""

    def initial_status(self) -> str:
        return self.status or DEFAULT_STATUS[self.voucher_type]


class PostingResult:
    """
    Outcome of a posting command.

    Exactly one of these holds:
    - success: ``voucher`` is the persisted JournalVoucher (``data`` may carry
      the source document, e.g. the PaymentVoucher)
    - validation failure: ``errors`` lists the messages, nothing was written
    - storage failure: ``error`` is an opaque message, nothing was committed
    """

    def __init__(self, success: bool, voucher=None, data=None, errors=None, error: str = None):
        self.success = success
        self.voucher = voucher
        self.data = data
        self.errors = errors or []
        self.error = error

    @classmethod
    def ok(cls, voucher, data=None):
        return cls(success=True, voucher=voucher, data=data)

    @classmethod
    def validation_failed(cls, errors):
        return cls(success=False, errors=list(errors))

    @classmethod
    def storage_failed(cls, message: str = STORAGE_FAILURE_MESSAGE):
        return cls(success=False, error=message)

    @property
    def is_validation_failure(self) -> bool:
        return not self.success and bool(self.errors)

    def __repr__(self):
        if self.success:
            return f"<PostingResult ok {self.voucher}>"
        return f"<PostingResult failed errors={self.errors!r} error={self.error!r}>"


def persist_voucher(
    actor: ActorContext,
    header: VoucherHeaderInput,
    lines: Sequence[LineInput],
    validation: ValidationResult,
    status: str,
    audit_details: Optional[dict] = None,
) -> JournalVoucher:
    """
    Write header, lines and the audit entry. Caller owns the transaction.
    """
    company = actor.company
    number = next_document_number(
        company,
        NUMBER_PREFIXES[header.voucher_type],
        header.date.year,
    )
    now = timezone.now()
    posted = status == JournalVoucher.Status.POSTED

    with command_writes_allowed():
        voucher = JournalVoucher.objects.create(
            company=company,
            voucher_number=number,
            date=header.date,
            narration=header.narration or "",
            voucher_type=header.voucher_type,
            status=status,
            total_debit=validation.total_debit,
            total_credit=validation.total_credit,
            source_document=header.source_document or "",
            source_reference=header.source_reference or "",
            created_by=actor.user,
            posted_by=actor.user if posted else None,
            posted_at=now if posted else None,
        )

        for line_no, line in enumerate(lines, start=1):
            JournalLine.objects.create(
                voucher=voucher,
                company=company,
                line_no=line_no,
                account=validation.accounts[line.account_code],
                description=line.description,
                payee_id=line.payee_id,
                debit=line.debit,
                credit=line.credit,
            )

    details = {
        "voucher_number": number,
        "total_debit": str(validation.total_debit),
        "total_credit": str(validation.total_credit),
        "line_count": len(lines),
    }
    if audit_details:
        details.update(audit_details)
    append_audit(company, voucher, actor.user, AUDIT_ACTIONS[status], details)
    return voucher


def post_voucher(
    actor: ActorContext,
    header: VoucherHeaderInput,
    lines: Sequence[LineInput],
) -> PostingResult:
    """
    Validate and persist one journal voucher.

    Raises PermissionDenied if the actor may not create (or, for an
    immediately posted voucher, post) journals. All other failures are
    returned as a PostingResult.
    """
    require(actor, "journal.create")
    status = header.initial_status()
    if status not in INITIAL_STATUSES:
        raise ValueError(f"Vouchers cannot be created in status {status}.")
    if status == JournalVoucher.Status.POSTED:
        require(actor, "journal.post")

    lines = list(lines)
    validation = validate_lines(actor.company, lines)
    if not validation.ok:
        logger.info(
            "Journal voucher rejected by validation",
            extra={
                "company_id": actor.company.id,
                "errors": validation.messages,
                "line_count": len(lines),
            },
        )
        return PostingResult.validation_failed(validation.messages)

    try:
        with transaction.atomic():
            voucher = persist_voucher(actor, header, lines, validation, status)
    except DatabaseError:
        logger.exception(
            "Journal voucher storage failed",
            extra={"company_id": actor.company.id, "line_count": len(lines)},
        )
        return PostingResult.storage_failed()

    logger.info(
        "Journal voucher %s created as %s",
        voucher.voucher_number,
        status,
        extra={
            "company_id": actor.company.id,
            "voucher_number": voucher.voucher_number,
            "line_count": len(lines),
        },
    )
    return PostingResult.ok(voucher)
