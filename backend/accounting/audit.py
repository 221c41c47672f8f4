# accounting/audit.py
"""
Audit trail recorder.

Entries are appended, never changed. Callers invoke append_audit() inside
the same transaction as the state change it records, so an action and its
audit entry commit or roll back together.
"""

from django.db.models import Max

from accounting.models import (
    AuditTrailEntry,
    GoodsReceivedNote,
    JournalVoucher,
    PaymentVoucher,
)
from accounting.write_barrier import command_writes_allowed


_TARGET_TYPES = {
    JournalVoucher: AuditTrailEntry.TargetType.JOURNAL_VOUCHER,
    PaymentVoucher: AuditTrailEntry.TargetType.PAYMENT_VOUCHER,
    GoodsReceivedNote: AuditTrailEntry.TargetType.GOODS_RECEIVED_NOTE,
}


def _target_key(target) -> tuple[str, str]:
    try:
        target_type = _TARGET_TYPES[type(target)]
    except KeyError:
        raise TypeError(f"Cannot audit objects of type {type(target).__name__}")
    return target_type, str(target.public_id)


def _user_label(user) -> str:
    if user is None:
        return ""
    return getattr(user, "name", "") or getattr(user, "email", "") or str(user)


def append_audit(company, target, actor_user, action: str, details=None) -> AuditTrailEntry:
    """Append one entry to the target's trail at the next position."""
    target_type, target_id = _target_key(target)
    last = AuditTrailEntry.objects.filter(
        target_type=target_type,
        target_id=target_id,
    ).aggregate(last=Max("position"))["last"]

    with command_writes_allowed():
        return AuditTrailEntry.objects.create(
            company=company,
            target_type=target_type,
            target_id=target_id,
            position=(last or 0) + 1,
            user=actor_user,
            user_label=_user_label(actor_user),
            action=action,
            details=details,
        )


def audit_trail(target):
    """Entries for a target in insertion order."""
    target_type, target_id = _target_key(target)
    return AuditTrailEntry.objects.filter(
        target_type=target_type,
        target_id=target_id,
    ).select_related("user").order_by("position")
