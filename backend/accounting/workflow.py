# accounting/workflow.py
"""
Journal voucher workflow commands.

    DRAFT --submit--> PENDING --approve--> POSTED
                      PENDING --reject---> REJECTED

Each command locks the voucher row, checks the transition, updates the
status and appends an audit entry in one transaction.
"""

import logging

from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import Sum
from django.http import Http404
from django.utils import timezone

from accounts.authz import ActorContext, require
from accounting.audit import append_audit
from accounting.models import JournalVoucher
from accounting.policies import (
    PolicyViolation,
    can_approve_voucher,
    can_reject_voucher,
    can_submit_voucher,
    is_document_controlled,
)
from accounting.validation import ZERO, balance_tolerance, format_amount
from accounting.write_barrier import command_writes_allowed


logger = logging.getLogger(__name__)


class WorkflowError(PolicyViolation):
    """An action that the document's current state does not allow."""
    pass


def _lock_voucher(actor: ActorContext, public_id) -> JournalVoucher:
    try:
        return JournalVoucher.objects.select_for_update().get(
            company=actor.company,
            public_id=public_id,
        )
    except (JournalVoucher.DoesNotExist, ValueError, ValidationError):
        raise Http404("Journal voucher not found.")


def _check(allowed_reason: tuple[bool, str]) -> None:
    allowed, reason = allowed_reason
    if not allowed:
        raise WorkflowError(reason)


def _line_totals(voucher: JournalVoucher):
    totals = voucher.lines.aggregate(debit=Sum("debit"), credit=Sum("credit"))
    return totals["debit"] or ZERO, totals["credit"] or ZERO


@transaction.atomic
def submit_voucher(actor: ActorContext, public_id) -> JournalVoucher:
    require(actor, "journal.create")
    voucher = _lock_voucher(actor, public_id)
    _check(can_submit_voucher(actor, voucher))

    with command_writes_allowed():
        voucher.status = JournalVoucher.Status.PENDING
        voucher.save(update_fields=["status", "updated_at"])
    append_audit(actor.company, voucher, actor.user, "Submitted")

    logger.info("Journal voucher %s submitted", voucher.voucher_number,
                extra={"company_id": actor.company.id, "voucher_number": voucher.voucher_number})
    return voucher


def approve_locked_voucher(actor: ActorContext, voucher: JournalVoucher, details=None) -> JournalVoucher:
    """
    Post a PENDING voucher that the caller has already locked.
    The line totals are checked again before posting.
    """
    _check(can_approve_voucher(actor, voucher))

    total_debit, total_credit = _line_totals(voucher)
    if abs(total_debit - total_credit) > balance_tolerance():
        raise WorkflowError(
            f"Unbalanced: {format_amount(total_debit)} != {format_amount(total_credit)}"
        )

    with command_writes_allowed():
        voucher.status = JournalVoucher.Status.POSTED
        voucher.posted_by = actor.user
        voucher.posted_at = timezone.now()
        voucher.save(update_fields=["status", "posted_by", "posted_at", "updated_at"])
    append_audit(actor.company, voucher, actor.user, "Posted", details)
    return voucher


def reject_locked_voucher(actor: ActorContext, voucher: JournalVoucher, reason: str = "") -> JournalVoucher:
    _check(can_reject_voucher(actor, voucher))

    with command_writes_allowed():
        voucher.status = JournalVoucher.Status.REJECTED
        voucher.save(update_fields=["status", "updated_at"])
    append_audit(
        actor.company,
        voucher,
        actor.user,
        "Rejected",
        {"reason": reason} if reason else None,
    )
    return voucher


@transaction.atomic
def approve_voucher(actor: ActorContext, public_id) -> JournalVoucher:
    require(actor, "journal.post")
    voucher = _lock_voucher(actor, public_id)
    if is_document_controlled(voucher):
        raise WorkflowError("Payment journals are approved through their payment voucher.")

    approve_locked_voucher(actor, voucher)
    logger.info("Journal voucher %s posted", voucher.voucher_number,
                extra={"company_id": actor.company.id, "voucher_number": voucher.voucher_number})
    return voucher


@transaction.atomic
def reject_voucher(actor: ActorContext, public_id, reason: str = "") -> JournalVoucher:
    require(actor, "journal.post")
    voucher = _lock_voucher(actor, public_id)
    if is_document_controlled(voucher):
        raise WorkflowError("Payment journals are rejected through their payment voucher.")

    reject_locked_voucher(actor, voucher, reason)
    logger.info("Journal voucher %s rejected", voucher.voucher_number,
                extra={"company_id": actor.company.id, "voucher_number": voucher.voucher_number})
    return voucher
