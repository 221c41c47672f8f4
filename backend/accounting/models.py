# accounting/models.py
"""
Ledger models for Ledgerpost.

Ownership:
=========
- Account is maintained by chart-of-accounts administration (Django admin,
  fixtures). The posting code only reads it.
- Everything else is COMMAND-OWNED: rows are written exclusively by the
  command modules (posting, workflow, payments, receiving, audit) inside
  command_writes_allowed(). Direct saves raise RuntimeError.

Models:
- CompanySequence: per-company counters for human-readable numbers
- Account: Chart of Accounts
- JournalVoucher: voucher header
- JournalLine: debit/credit lines of a voucher
- AuditTrailEntry: append-only action log for vouchers and source documents
- PaymentVoucher / PaymentVoucherLine: payment documents
- GoodsReceivedNote / GoodsReceivedNoteLine: receipts accrued to the ledger
"""

import uuid
from decimal import Decimal

from django.conf import settings
from django.db import models
from django.db.models import Q
from django.utils import timezone

from accounts.models import Company
from accounting.write_barrier import assert_command_write


class CommandOwnedModel(models.Model):
    class Meta:
        abstract = True

    def save(self, *args, **kwargs):
        assert_command_write(self.__class__.__name__)
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        assert_command_write(self.__class__.__name__)
        return super().delete(*args, **kwargs)


class CompanySequence(CommandOwnedModel):
    """
    Per-company counters for sequential identifiers.

    Rows are locked with select_for_update while a number is allocated,
    so concurrent postings in one company never share a number.
    """

    company = models.ForeignKey(
        Company,
        on_delete=models.CASCADE,
        related_name="sequences",
    )
    name = models.CharField(max_length=100)
    next_value = models.BigIntegerField(default=1)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["company", "name"],
                name="uniq_company_sequence_name",
            ),
        ]

    def __str__(self):
        return f"{self.company_id}:{self.name}={self.next_value}"


class Account(models.Model):
    """
    Chart of Accounts entry.

    Accounts referenced by journal lines are protected from deletion.
    Header accounts group others and cannot receive postings.
    """

    class AccountType(models.TextChoices):
        ASSET = "ASSET", "Asset"
        LIABILITY = "LIABILITY", "Liability"
        EQUITY = "EQUITY", "Equity"
        REVENUE = "REVENUE", "Revenue"
        EXPENSE = "EXPENSE", "Expense"
        OTHER = "OTHER", "Other"

    class NormalBalance(models.TextChoices):
        DEBIT = "DEBIT", "Debit"
        CREDIT = "CREDIT", "Credit"

    class Status(models.TextChoices):
        ACTIVE = "ACTIVE", "Active"
        INACTIVE = "INACTIVE", "Inactive"

    NORMAL_BALANCE_MAP = {
        AccountType.ASSET: NormalBalance.DEBIT,
        AccountType.LIABILITY: NormalBalance.CREDIT,
        AccountType.EQUITY: NormalBalance.CREDIT,
        AccountType.REVENUE: NormalBalance.CREDIT,
        AccountType.EXPENSE: NormalBalance.DEBIT,
        AccountType.OTHER: NormalBalance.DEBIT,
    }

    company = models.ForeignKey(
        Company,
        on_delete=models.CASCADE,
        related_name="accounts",
    )
    public_id = models.UUIDField(default=uuid.uuid4, editable=False, unique=True)
    code = models.CharField(max_length=20)
    name = models.CharField(max_length=255)
    account_type = models.CharField(
        max_length=20,
        choices=AccountType.choices,
        db_column="type",
    )
    normal_balance = models.CharField(
        max_length=10,
        choices=NormalBalance.choices,
        editable=False,
    )
    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.ACTIVE,
    )
    is_header = models.BooleanField(
        default=False,
        help_text="Header accounts group other accounts and cannot receive postings",
    )
    description = models.TextField(blank=True, default="")
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["company", "code"],
                name="uniq_account_code_per_company",
            )
        ]
        ordering = ["code"]
        indexes = [
            models.Index(fields=["company", "account_type"], name="accounting__company_5d1c0e_idx"),
        ]

    def __str__(self):
        return f"{self.code} - {self.name}"

    def save(self, *args, **kwargs):
        self.normal_balance = self.NORMAL_BALANCE_MAP.get(
            self.account_type,
            self.NormalBalance.DEBIT,
        )
        super().save(*args, **kwargs)

    @property
    def is_postable(self) -> bool:
        """Returns True if this account can receive journal line postings."""
        return not self.is_header and self.status == self.Status.ACTIVE


class JournalVoucher(CommandOwnedModel):
    """
    Journal voucher header.

    Workflow: DRAFT -> PENDING -> POSTED
                       PENDING -> REJECTED
    POSTED and REJECTED are terminal. CANCELLED is set by reversal tooling
    outside this service.
    """

    class Status(models.TextChoices):
        DRAFT = "DRAFT", "Draft"
        PENDING = "PENDING", "Pending"
        POSTED = "POSTED", "Posted"
        REJECTED = "REJECTED", "Rejected"
        CANCELLED = "CANCELLED", "Cancelled"

    class VoucherType(models.TextChoices):
        MANUAL = "MANUAL", "Manual journal"
        PAYMENT = "PAYMENT", "Payment voucher"
        ACCRUAL = "ACCRUAL", "Accrual"

    company = models.ForeignKey(
        Company,
        on_delete=models.CASCADE,
        related_name="journal_vouchers",
    )
    public_id = models.UUIDField(default=uuid.uuid4, editable=False, unique=True)
    voucher_number = models.CharField(max_length=50)
    date = models.DateField()
    narration = models.CharField(max_length=255, blank=True, default="")
    voucher_type = models.CharField(
        max_length=12,
        choices=VoucherType.choices,
        default=VoucherType.MANUAL,
    )
    status = models.CharField(
        max_length=12,
        choices=Status.choices,
        default=Status.DRAFT,
    )
    total_debit = models.DecimalField(max_digits=18, decimal_places=2, default=Decimal("0.00"))
    total_credit = models.DecimalField(max_digits=18, decimal_places=2, default=Decimal("0.00"))

    # Origin document for vouchers raised by other modules ("PV", "GRN")
    source_document = models.CharField(max_length=20, blank=True, default="")
    source_reference = models.CharField(max_length=100, blank=True, default="")

    created_at = models.DateTimeField(auto_now_add=True)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="created_journal_vouchers",
    )
    posted_at = models.DateTimeField(null=True, blank=True)
    posted_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="posted_journal_vouchers",
    )
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["company", "voucher_number"],
                name="uniq_voucher_number_per_company",
            ),
        ]
        indexes = [
            models.Index(fields=["company", "date", "id"], name="accounting__company_8a7f21_idx"),
            models.Index(fields=["company", "status"], name="accounting__company_3e9b44_idx"),
            models.Index(fields=["company", "source_document", "source_reference"], name="accounting__company_c20d7a_idx"),
        ]
        ordering = ["-date", "-id"]

    def __str__(self):
        return f"{self.voucher_number} ({self.date}) {self.status}"


class JournalLine(CommandOwnedModel):
    """
    Individual line within a journal voucher.
    Each line affects one account with either a debit or credit amount.
    """

    voucher = models.ForeignKey(
        JournalVoucher,
        on_delete=models.CASCADE,
        related_name="lines",
    )
    company = models.ForeignKey(
        Company,
        on_delete=models.CASCADE,
        related_name="journal_lines",
    )
    line_no = models.PositiveIntegerField()
    account = models.ForeignKey(
        Account,
        on_delete=models.PROTECT,
        related_name="journal_lines",
    )
    description = models.CharField(max_length=255, blank=True, default="")
    payee_id = models.CharField(max_length=64, blank=True, default="")
    debit = models.DecimalField(max_digits=18, decimal_places=2, default=Decimal("0.00"))
    credit = models.DecimalField(max_digits=18, decimal_places=2, default=Decimal("0.00"))

    class Meta:
        ordering = ["voucher", "line_no"]
        constraints = [
            models.UniqueConstraint(
                fields=["voucher", "line_no"],
                name="uniq_voucher_line_no",
            ),
            models.CheckConstraint(
                condition=~(Q(debit__gt=0) & Q(credit__gt=0)),
                name="chk_line_not_both_debit_credit",
            ),
            models.CheckConstraint(
                condition=~(Q(debit__exact=0) & Q(credit__exact=0)),
                name="chk_line_not_both_zero",
            ),
            models.CheckConstraint(
                condition=Q(debit__gte=0) & Q(credit__gte=0),
                name="chk_line_non_negative",
            ),
        ]
        indexes = [
            models.Index(fields=["company", "account"], name="accounting__company_f41b90_idx"),
        ]

    def __str__(self):
        return f"{self.voucher_id} L{self.line_no}"


class AppendOnlyQuerySet(models.QuerySet):
    """QuerySet that refuses bulk mutation of existing rows."""

    def update(self, **kwargs):
        raise RuntimeError(f"{self.model.__name__} is append-only; rows cannot be updated.")

    def delete(self):
        raise RuntimeError(f"{self.model.__name__} is append-only; rows cannot be deleted.")


class AuditTrailEntry(models.Model):
    """
    Append-only action record attached to a voucher or source document.

    ``position`` is the authoritative order within a target; ``timestamp``
    is informational.
    """

    class TargetType(models.TextChoices):
        JOURNAL_VOUCHER = "JOURNAL_VOUCHER", "Journal voucher"
        PAYMENT_VOUCHER = "PAYMENT_VOUCHER", "Payment voucher"
        GOODS_RECEIVED_NOTE = "GOODS_RECEIVED_NOTE", "Goods received note"

    objects = AppendOnlyQuerySet.as_manager()

    company = models.ForeignKey(
        Company,
        on_delete=models.CASCADE,
        related_name="audit_entries",
    )
    target_type = models.CharField(max_length=30, choices=TargetType.choices)
    target_id = models.CharField(max_length=64)
    position = models.PositiveIntegerField()
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="audit_entries",
    )
    user_label = models.CharField(max_length=255, blank=True, default="")
    action = models.CharField(max_length=50)
    timestamp = models.DateTimeField(default=timezone.now)
    details = models.JSONField(null=True, blank=True)

    class Meta:
        ordering = ["target_type", "target_id", "position"]
        constraints = [
            models.UniqueConstraint(
                fields=["target_type", "target_id", "position"],
                name="uniq_audit_target_position",
            ),
        ]
        indexes = [
            models.Index(fields=["company", "target_type", "target_id"], name="accounting__company_07b6e3_idx"),
        ]
        verbose_name_plural = "audit trail entries"

    def __str__(self):
        return f"{self.target_type}:{self.target_id}#{self.position} {self.action}"

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise RuntimeError("AuditTrailEntry is append-only; rows cannot be updated.")
        assert_command_write("AuditTrailEntry")
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise RuntimeError("AuditTrailEntry is append-only; rows cannot be deleted.")


class PaymentVoucher(CommandOwnedModel):
    """
    Payment document. Creating one raises a PENDING journal voucher;
    approving it posts that journal.
    """

    class Status(models.TextChoices):
        SUBMITTED = "SUBMITTED", "Submitted"
        APPROVED = "APPROVED", "Approved"
        REJECTED = "REJECTED", "Rejected"

    class PaymentType(models.TextChoices):
        BANK = "BANK", "Bank"
        CASH = "CASH", "Cash"
        MOBILE = "MOBILE", "Mobile"
        FX = "FX", "FX"

    class PaymentMode(models.TextChoices):
        TRANSFER = "TRANSFER", "Transfer"
        CHEQUE = "CHEQUE", "Cheque"
        CASH = "CASH", "Cash"

    class PayeeType(models.TextChoices):
        SUPPLIER = "SUPPLIER", "Supplier"
        STAFF = "STAFF", "Staff"
        GOVT = "GOVT", "Government"
        OTHER = "OTHER", "Other"

    company = models.ForeignKey(
        Company,
        on_delete=models.CASCADE,
        related_name="payment_vouchers",
    )
    public_id = models.UUIDField(default=uuid.uuid4, editable=False, unique=True)
    voucher_number = models.CharField(max_length=50)
    voucher_date = models.DateField()
    payment_type = models.CharField(max_length=10, choices=PaymentType.choices)
    payment_mode = models.CharField(max_length=10, choices=PaymentMode.choices, default=PaymentMode.TRANSFER)
    currency = models.CharField(max_length=3)
    exchange_rate = models.DecimalField(max_digits=18, decimal_places=6, default=Decimal("1.0"))
    payee_type = models.CharField(max_length=10, choices=PayeeType.choices)
    payee_code = models.CharField(max_length=64)
    payee_name = models.CharField(max_length=255, blank=True, default="")
    narration = models.CharField(max_length=255)
    source_module = models.CharField(max_length=50, blank=True, default="")
    source_document_no = models.CharField(max_length=100, blank=True, default="")
    bank_cash_account_code = models.CharField(max_length=20)
    gross_amount = models.DecimalField(max_digits=18, decimal_places=2)
    total_vat = models.DecimalField(max_digits=18, decimal_places=2, default=Decimal("0.00"))
    total_wht = models.DecimalField(max_digits=18, decimal_places=2, default=Decimal("0.00"))
    net_payable = models.DecimalField(max_digits=18, decimal_places=2)
    status = models.CharField(max_length=10, choices=Status.choices, default=Status.SUBMITTED)
    journal_voucher = models.OneToOneField(
        JournalVoucher,
        null=True,
        blank=True,
        on_delete=models.PROTECT,
        related_name="payment_voucher",
    )
    prepared_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True,
        on_delete=models.SET_NULL,
        related_name="prepared_payment_vouchers",
    )
    approved_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="approved_payment_vouchers",
    )
    approval_date = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["company", "voucher_number"],
                name="uniq_payment_voucher_number_per_company",
            ),
        ]
        ordering = ["-voucher_date", "-id"]

    def __str__(self):
        return f"{self.voucher_number} {self.payee_name} {self.status}"


class PaymentVoucherLine(CommandOwnedModel):
    payment_voucher = models.ForeignKey(
        PaymentVoucher,
        on_delete=models.CASCADE,
        related_name="lines",
    )
    line_no = models.PositiveIntegerField()
    gl_account_code = models.CharField(max_length=20)
    description = models.CharField(max_length=255, blank=True, default="")
    cost_center = models.CharField(max_length=50, blank=True, default="")
    amount = models.DecimalField(max_digits=18, decimal_places=2)
    vat_amount = models.DecimalField(max_digits=18, decimal_places=2, default=Decimal("0.00"))
    wht_amount = models.DecimalField(max_digits=18, decimal_places=2, default=Decimal("0.00"))

    class Meta:
        ordering = ["payment_voucher", "line_no"]


class GoodsReceivedNote(CommandOwnedModel):
    """Goods received against a purchase order, accrued to the ledger on receipt."""

    company = models.ForeignKey(
        Company,
        on_delete=models.CASCADE,
        related_name="goods_received_notes",
    )
    public_id = models.UUIDField(default=uuid.uuid4, editable=False, unique=True)
    grn_number = models.CharField(max_length=50)
    purchase_order_number = models.CharField(max_length=50)
    supplier_name = models.CharField(max_length=255, blank=True, default="")
    received_date = models.DateField()
    total_received_value = models.DecimalField(max_digits=18, decimal_places=2)
    journal_voucher = models.OneToOneField(
        JournalVoucher,
        null=True,
        blank=True,
        on_delete=models.PROTECT,
        related_name="goods_received_note",
    )
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True,
        on_delete=models.SET_NULL,
        related_name="received_goods",
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["company", "grn_number"],
                name="uniq_grn_number_per_company",
            ),
        ]
        ordering = ["-received_date", "-id"]

    def __str__(self):
        return f"{self.grn_number} (PO {self.purchase_order_number})"


class GoodsReceivedNoteLine(CommandOwnedModel):
    grn = models.ForeignKey(
        GoodsReceivedNote,
        on_delete=models.CASCADE,
        related_name="lines",
    )
    line_no = models.PositiveIntegerField()
    description = models.CharField(max_length=255, blank=True, default="")
    quantity_received = models.DecimalField(max_digits=18, decimal_places=4)
    unit_cost = models.DecimalField(max_digits=18, decimal_places=4)

    class Meta:
        ordering = ["grn", "line_no"]

    @property
    def line_value(self) -> Decimal:
        return (self.quantity_received * self.unit_cost).quantize(Decimal("0.01"))
