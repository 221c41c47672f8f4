# accounting/policies.py
"""
Business policy functions for ledger operations.

Policies answer: "Is this action allowed given the current state?"
They do NOT perform the action; that is the command's job.

Workflow Rules vs Model Invariants
==================================
Status transitions are enforced HERE, not in model.save(). The database
enforces true invariants only (one side per line, non-negative amounts,
unique numbers).

Usage:
    from accounting.policies import can_approve_voucher

    allowed, reason = can_approve_voucher(actor, voucher)
    if not allowed:
        raise WorkflowError(reason)

Design Principles:
1. Policies are pure functions (no side effects)
2. Policies return (bool, str) tuples for clear error messages
3. Commands compose policies as needed
"""

from accounting.models import JournalVoucher, PaymentVoucher


class PolicyViolation(Exception):
    """Raised when a business policy is violated."""
    pass


# =============================================================================
# Tenant Boundary Policies
# =============================================================================

def check_tenant_boundary(actor, entity) -> bool:
    """
    Verify entity belongs to actor's company.
    This is the fundamental multi-tenant security check.
    """
    entity_company_id = getattr(entity, "company_id", None)
    if entity_company_id is None:
        company = getattr(entity, "company", None)
        entity_company_id = getattr(company, "id", None) if company else None
    return entity_company_id == actor.company.id


# =============================================================================
# Journal Voucher Status Transitions
# =============================================================================

VOUCHER_TRANSITIONS = {
    (JournalVoucher.Status.DRAFT, JournalVoucher.Status.PENDING),
    (JournalVoucher.Status.PENDING, JournalVoucher.Status.POSTED),
    (JournalVoucher.Status.PENDING, JournalVoucher.Status.REJECTED),
}


def validate_status_transition(old_status, new_status) -> tuple[bool, str]:
    """
    Allowed transitions:
    - DRAFT -> PENDING (submit)
    - PENDING -> POSTED (approve)
    - PENDING -> REJECTED (reject)

    POSTED, REJECTED and CANCELLED are terminal.
    """
    if (old_status, new_status) in VOUCHER_TRANSITIONS:
        return True, ""
    return False, f"Invalid status transition: {old_status} -> {new_status}"


def _can_move_voucher(actor, voucher, new_status) -> tuple[bool, str]:
    if not check_tenant_boundary(actor, voucher):
        return False, "Cross-company action denied."
    return validate_status_transition(voucher.status, new_status)


def can_submit_voucher(actor, voucher) -> tuple[bool, str]:
    return _can_move_voucher(actor, voucher, JournalVoucher.Status.PENDING)


def can_approve_voucher(actor, voucher) -> tuple[bool, str]:
    return _can_move_voucher(actor, voucher, JournalVoucher.Status.POSTED)


def can_reject_voucher(actor, voucher) -> tuple[bool, str]:
    return _can_move_voucher(actor, voucher, JournalVoucher.Status.REJECTED)


def is_document_controlled(voucher) -> bool:
    """
    Vouchers raised by a payment voucher follow that document's workflow
    and cannot be moved on their own. Only a linked PaymentVoucher counts,
    not the free-text source_document.
    """
    return PaymentVoucher.objects.filter(journal_voucher=voucher).exists()


# =============================================================================
# Payment Voucher Policies
# =============================================================================

def can_decide_payment_voucher(actor, payment_voucher) -> tuple[bool, str]:
    """
    Approve and reject share the same rule: only SUBMITTED documents
    can be decided.
    """
    if not check_tenant_boundary(actor, payment_voucher):
        return False, "Cross-company action denied."

    if payment_voucher.status != PaymentVoucher.Status.SUBMITTED:
        return False, f"Payment voucher is already {payment_voucher.status}."

    return True, ""
