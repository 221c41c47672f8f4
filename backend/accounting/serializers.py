# accounting/serializers.py
"""
Serializers for the accounting API.

Note: These serializers are used for:
1. Input validation (request shape and types, camelCase -> snake_case)
2. Output formatting

Ledger rules (balance, known accounts, one side per line) are NOT checked
here; they belong to accounting.validation so every posting path applies
them the same way. Views hand validated input to the command modules.
"""

from decimal import Decimal

from rest_framework import serializers

from .audit import audit_trail
from .models import (
    Account,
    AuditTrailEntry,
    GoodsReceivedNote,
    JournalLine,
    JournalVoucher,
    PaymentVoucher,
    PaymentVoucherLine,
)
from .payments import PaymentItemInput, PaymentVoucherInput
from .posting import INITIAL_STATUSES, VoucherHeaderInput
from .receiving import GoodsReceiptInput, ReceivedItemInput
from .validation import MAX_AMOUNT, LineInput


# Set only by the payment voucher and GRN commands
RESERVED_SOURCE_DOCUMENTS = frozenset({"PV", "GRN"})


def _amount_field(**kwargs):
    # Bounded to the stored column; precision is normalized to cents by LineInput
    return serializers.DecimalField(
        max_digits=None,
        decimal_places=None,
        max_value=MAX_AMOUNT,
        required=False,
        default=Decimal("0"),
        **kwargs,
    )


def _optional_text(source, max_length=255):
    return serializers.CharField(
        source=source,
        max_length=max_length,
        required=False,
        allow_blank=True,
        allow_null=True,
        default="",
    )


# =============================================================================
# Input
# =============================================================================

class JournalLineInputSerializer(serializers.Serializer):
    accountCode = serializers.CharField(source="account_code", max_length=20)
    debit = _amount_field()
    credit = _amount_field()
    payeeId = _optional_text("payee_id", max_length=64)
    description = serializers.CharField(max_length=255, required=False, allow_blank=True, allow_null=True, default="")


class VoucherInputSerializer(serializers.Serializer):
    """
    POST /vouchers/ body (tenantId and actorId are read by the view).
    """
    date = serializers.DateField()
    narration = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")
    type = serializers.ChoiceField(
        source="voucher_type",
        choices=JournalVoucher.VoucherType.choices,
        required=False,
        default=JournalVoucher.VoucherType.MANUAL,
    )
    status = serializers.ChoiceField(
        choices=[(s.value, s.label) for s in INITIAL_STATUSES],
        required=False,
        allow_null=True,
        default=None,
    )
    sourceDocument = _optional_text("source_document", max_length=20)
    sourceReference = _optional_text("source_reference", max_length=100)
    lines = JournalLineInputSerializer(many=True)

    def validate_sourceDocument(self, value):
        if value and value.strip().upper() in RESERVED_SOURCE_DOCUMENTS:
            raise serializers.ValidationError(
                f"{value} is reserved for vouchers raised by their source document."
            )
        return value

    def build_header(self) -> VoucherHeaderInput:
        data = self.validated_data
        return VoucherHeaderInput(
            date=data["date"],
            narration=data.get("narration") or "",
            voucher_type=data["voucher_type"],
            status=data.get("status"),
            source_document=data.get("source_document") or "",
            source_reference=data.get("source_reference") or "",
        )

    def build_lines(self) -> list[LineInput]:
        return [LineInput(**line) for line in self.validated_data["lines"]]


class WorkflowActionSerializer(serializers.Serializer):
    reason = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")


class PaymentItemInputSerializer(serializers.Serializer):
    glAccountCode = serializers.CharField(source="gl_account_code", max_length=20)
    description = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")
    costCenter = serializers.CharField(source="cost_center", max_length=50, required=False, allow_blank=True, default="")
    amount = serializers.DecimalField(max_digits=None, decimal_places=None, max_value=MAX_AMOUNT)
    vatAmount = _amount_field(source="vat_amount")
    whtAmount = _amount_field(source="wht_amount")


class PaymentVoucherInputSerializer(serializers.Serializer):
    voucherDate = serializers.DateField(source="voucher_date")
    paymentType = serializers.ChoiceField(source="payment_type", choices=PaymentVoucher.PaymentType.choices)
    paymentMode = serializers.ChoiceField(
        source="payment_mode",
        choices=PaymentVoucher.PaymentMode.choices,
        required=False,
        default=PaymentVoucher.PaymentMode.TRANSFER,
    )
    currency = serializers.CharField(max_length=3)
    exchangeRate = serializers.DecimalField(
        source="exchange_rate",
        max_digits=18,
        decimal_places=6,
        min_value=Decimal("0.000001"),
        required=False,
        default=Decimal("1.0"),
    )
    payeeType = serializers.ChoiceField(source="payee_type", choices=PaymentVoucher.PayeeType.choices)
    payeeCode = serializers.CharField(source="payee_code", max_length=64)
    payeeName = serializers.CharField(source="payee_name", max_length=255, required=False, allow_blank=True, default="")
    narration = serializers.CharField(max_length=255)
    sourceModule = serializers.CharField(source="source_module", max_length=50, required=False, allow_blank=True, default="")
    sourceDocumentNo = serializers.CharField(source="source_document_no", max_length=100, required=False, allow_blank=True, default="")
    bankCashAccountCode = serializers.CharField(source="bank_cash_account_code", max_length=20)
    items = PaymentItemInputSerializer(many=True)

    def build_input(self) -> PaymentVoucherInput:
        data = dict(self.validated_data)
        items = [PaymentItemInput(**item) for item in data.pop("items")]
        return PaymentVoucherInput(items=items, **data)


class ReceivedItemInputSerializer(serializers.Serializer):
    description = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")
    quantityReceived = serializers.DecimalField(
        source="quantity_received", max_digits=18, decimal_places=4, min_value=Decimal("0"),
    )
    unitCost = serializers.DecimalField(
        source="unit_cost", max_digits=18, decimal_places=4, min_value=Decimal("0"),
    )


class GoodsReceiptInputSerializer(serializers.Serializer):
    purchaseOrderNumber = serializers.CharField(source="purchase_order_number", max_length=50)
    supplierName = serializers.CharField(source="supplier_name", max_length=255, required=False, allow_blank=True, default="")
    receivedDate = serializers.DateField(source="received_date")
    inventoryAccountCode = serializers.CharField(
        source="inventory_account_code", max_length=20, required=False, allow_null=True, default=None,
    )
    accrualAccountCode = serializers.CharField(
        source="accrual_account_code", max_length=20, required=False, allow_null=True, default=None,
    )
    items = ReceivedItemInputSerializer(many=True)

    def build_input(self) -> GoodsReceiptInput:
        data = dict(self.validated_data)
        items = [ReceivedItemInput(**item) for item in data.pop("items")]
        return GoodsReceiptInput(items=items, **data)


# =============================================================================
# Output
# =============================================================================

class AccountSerializer(serializers.ModelSerializer):
    accountId = serializers.UUIDField(source="public_id", read_only=True)
    type = serializers.CharField(source="account_type", read_only=True)
    normalBalance = serializers.CharField(source="normal_balance", read_only=True)
    isHeader = serializers.BooleanField(source="is_header", read_only=True)

    class Meta:
        model = Account
        fields = ["accountId", "code", "name", "type", "normalBalance", "status", "isHeader"]


class JournalLineSerializer(serializers.ModelSerializer):
    lineNo = serializers.IntegerField(source="line_no", read_only=True)
    accountCode = serializers.CharField(source="account.code", read_only=True)
    accountName = serializers.CharField(source="account.name", read_only=True)
    payeeId = serializers.CharField(source="payee_id", read_only=True)

    class Meta:
        model = JournalLine
        fields = ["lineNo", "accountCode", "accountName", "debit", "credit", "payeeId", "description"]


class AuditTrailEntrySerializer(serializers.ModelSerializer):
    user = serializers.CharField(source="user_label", read_only=True)

    class Meta:
        model = AuditTrailEntry
        fields = ["position", "user", "action", "timestamp", "details"]


class JournalVoucherSerializer(serializers.ModelSerializer):
    """Voucher header, used for lists."""
    voucherId = serializers.UUIDField(source="public_id", read_only=True)
    voucherNumber = serializers.CharField(source="voucher_number", read_only=True)
    type = serializers.CharField(source="voucher_type", read_only=True)
    totalDebit = serializers.DecimalField(source="total_debit", max_digits=18, decimal_places=2, read_only=True)
    totalCredit = serializers.DecimalField(source="total_credit", max_digits=18, decimal_places=2, read_only=True)
    sourceDocument = serializers.CharField(source="source_document", read_only=True)
    sourceReference = serializers.CharField(source="source_reference", read_only=True)
    createdBy = serializers.EmailField(source="created_by.email", read_only=True, default=None)
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)
    postedBy = serializers.EmailField(source="posted_by.email", read_only=True, default=None)
    postedAt = serializers.DateTimeField(source="posted_at", read_only=True)

    class Meta:
        model = JournalVoucher
        fields = [
            "voucherId", "voucherNumber", "date", "narration", "type", "status",
            "totalDebit", "totalCredit", "sourceDocument", "sourceReference",
            "createdBy", "createdAt", "postedBy", "postedAt",
        ]


class JournalVoucherDetailSerializer(JournalVoucherSerializer):
    """Voucher with its lines and audit trail."""
    lines = JournalLineSerializer(many=True, read_only=True)
    auditTrail = serializers.SerializerMethodField()

    class Meta(JournalVoucherSerializer.Meta):
        fields = JournalVoucherSerializer.Meta.fields + ["lines", "auditTrail"]

    def get_auditTrail(self, obj):
        return AuditTrailEntrySerializer(audit_trail(obj), many=True).data


class PaymentVoucherLineSerializer(serializers.ModelSerializer):
    lineNo = serializers.IntegerField(source="line_no", read_only=True)
    glAccountCode = serializers.CharField(source="gl_account_code", read_only=True)
    costCenter = serializers.CharField(source="cost_center", read_only=True)
    vatAmount = serializers.DecimalField(source="vat_amount", max_digits=18, decimal_places=2, read_only=True)
    whtAmount = serializers.DecimalField(source="wht_amount", max_digits=18, decimal_places=2, read_only=True)

    class Meta:
        model = PaymentVoucherLine
        fields = ["lineNo", "glAccountCode", "description", "costCenter", "amount", "vatAmount", "whtAmount"]


class PaymentVoucherSerializer(serializers.ModelSerializer):
    paymentVoucherId = serializers.UUIDField(source="public_id", read_only=True)
    voucherNumber = serializers.CharField(source="voucher_number", read_only=True)
    voucherDate = serializers.DateField(source="voucher_date", read_only=True)
    paymentType = serializers.CharField(source="payment_type", read_only=True)
    paymentMode = serializers.CharField(source="payment_mode", read_only=True)
    payeeType = serializers.CharField(source="payee_type", read_only=True)
    payeeCode = serializers.CharField(source="payee_code", read_only=True)
    payeeName = serializers.CharField(source="payee_name", read_only=True)
    bankCashAccountCode = serializers.CharField(source="bank_cash_account_code", read_only=True)
    grossAmount = serializers.DecimalField(source="gross_amount", max_digits=18, decimal_places=2, read_only=True)
    totalVat = serializers.DecimalField(source="total_vat", max_digits=18, decimal_places=2, read_only=True)
    totalWht = serializers.DecimalField(source="total_wht", max_digits=18, decimal_places=2, read_only=True)
    netPayable = serializers.DecimalField(source="net_payable", max_digits=18, decimal_places=2, read_only=True)
    journalVoucher = JournalVoucherSerializer(source="journal_voucher", read_only=True)
    items = PaymentVoucherLineSerializer(source="lines", many=True, read_only=True)
    approvedBy = serializers.EmailField(source="approved_by.email", read_only=True, default=None)
    approvalDate = serializers.DateTimeField(source="approval_date", read_only=True)
    auditTrail = serializers.SerializerMethodField()

    class Meta:
        model = PaymentVoucher
        fields = [
            "paymentVoucherId", "voucherNumber", "voucherDate", "paymentType", "paymentMode",
            "currency", "payeeType", "payeeCode", "payeeName", "narration",
            "bankCashAccountCode", "grossAmount", "totalVat", "totalWht", "netPayable",
            "status", "approvedBy", "approvalDate", "journalVoucher", "items", "auditTrail",
        ]

    def get_auditTrail(self, obj):
        return AuditTrailEntrySerializer(audit_trail(obj), many=True).data


class GoodsReceivedNoteSerializer(serializers.ModelSerializer):
    grnId = serializers.UUIDField(source="public_id", read_only=True)
    grnNumber = serializers.CharField(source="grn_number", read_only=True)
    purchaseOrderNumber = serializers.CharField(source="purchase_order_number", read_only=True)
    supplierName = serializers.CharField(source="supplier_name", read_only=True)
    receivedDate = serializers.DateField(source="received_date", read_only=True)
    totalReceivedValue = serializers.DecimalField(
        source="total_received_value", max_digits=18, decimal_places=2, read_only=True,
    )
    journalVoucher = JournalVoucherSerializer(source="journal_voucher", read_only=True)

    class Meta:
        model = GoodsReceivedNote
        fields = [
            "grnId", "grnNumber", "purchaseOrderNumber", "supplierName",
            "receivedDate", "totalReceivedValue", "journalVoucher",
        ]
