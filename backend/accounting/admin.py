"""
Django admin configuration for accounting models.

Account is maintained here: the admin is the chart-of-accounts
administration tool.

Everything else is COMMAND-OWNED and shown read-only. Vouchers, lines,
audit entries and source documents are written only by the command
modules; their save() refuses writes from anywhere else.
"""

from django.contrib import admin
from django.utils.html import format_html

from .models import (
    Account,
    AuditTrailEntry,
    GoodsReceivedNote,
    GoodsReceivedNoteLine,
    JournalLine,
    JournalVoucher,
    PaymentVoucher,
    PaymentVoucherLine,
)


class ReadOnlyModelAdmin(admin.ModelAdmin):
    """
    Base admin class for command-owned models.

    To modify these models, use the API (posting/workflow/payments/receiving).
    """

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False

    def changeform_view(self, request, object_id=None, form_url="", extra_context=None):
        extra_context = extra_context or {}
        extra_context["show_save"] = False
        extra_context["show_save_and_continue"] = False
        extra_context["show_save_and_add_another"] = False
        return super().changeform_view(request, object_id, form_url, extra_context)


class ReadOnlyInline(admin.TabularInline):
    extra = 0

    def has_add_permission(self, request, obj=None):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


class JournalLineInline(ReadOnlyInline):
    model = JournalLine
    fields = ["line_no", "account", "payee_id", "description", "debit", "credit"]
    readonly_fields = fields


class PaymentVoucherLineInline(ReadOnlyInline):
    model = PaymentVoucherLine
    fields = ["line_no", "gl_account_code", "description", "cost_center", "amount", "vat_amount", "wht_amount"]
    readonly_fields = fields


class GoodsReceivedNoteLineInline(ReadOnlyInline):
    model = GoodsReceivedNoteLine
    fields = ["line_no", "description", "quantity_received", "unit_cost"]
    readonly_fields = fields


# =============================================================================
# Chart of Accounts
# =============================================================================

@admin.register(Account)
class AccountAdmin(admin.ModelAdmin):
    """Chart of accounts maintenance. Accounts with journal lines cannot be deleted (PROTECT)."""

    list_display = ["code", "name", "account_type", "normal_balance", "status", "is_header", "company"]
    list_filter = ["company", "account_type", "status", "is_header"]
    search_fields = ["code", "name", "description"]
    list_select_related = ["company"]
    ordering = ["company", "code"]
    readonly_fields = ["public_id", "normal_balance", "created_at", "updated_at"]

    fieldsets = (
        (None, {
            "fields": ("company", "code", "name", "public_id"),
        }),
        ("Classification", {
            "fields": ("account_type", "normal_balance", "status", "is_header"),
        }),
        ("Description", {
            "fields": ("description",),
        }),
        ("Timestamps", {
            "fields": ("created_at", "updated_at"),
            "classes": ("collapse",),
        }),
    )

    def get_readonly_fields(self, request, obj=None):
        # Code and company identify the account once lines may reference it
        if obj is not None:
            return self.readonly_fields + ["company", "code"]
        return self.readonly_fields


# =============================================================================
# Journal Vouchers
# =============================================================================

@admin.register(JournalVoucher)
class JournalVoucherAdmin(ReadOnlyModelAdmin):
    list_display = [
        "voucher_number", "date", "narration_truncated", "voucher_type",
        "status_colored", "total_debit", "total_credit", "company",
    ]
    list_filter = ["company", "status", "voucher_type", "date"]
    search_fields = ["voucher_number", "narration", "source_reference"]
    date_hierarchy = "date"
    list_select_related = ["company", "created_by", "posted_by"]
    ordering = ["-date", "-id"]
    readonly_fields = [
        "company", "public_id", "voucher_number", "date", "narration", "voucher_type",
        "status", "total_debit", "total_credit", "source_document", "source_reference",
        "created_by", "created_at", "posted_by", "posted_at", "updated_at",
    ]
    inlines = [JournalLineInline]

    @admin.display(description="Narration")
    def narration_truncated(self, obj):
        if len(obj.narration) > 50:
            return f"{obj.narration[:50]}..."
        return obj.narration

    @admin.display(description="Status", ordering="status")
    def status_colored(self, obj):
        colors = {
            JournalVoucher.Status.DRAFT: "#999",
            JournalVoucher.Status.PENDING: "#007bff",
            JournalVoucher.Status.POSTED: "#28a745",
            JournalVoucher.Status.REJECTED: "#dc3545",
            JournalVoucher.Status.CANCELLED: "#6c757d",
        }
        return format_html(
            '<span style="color: {}; font-weight: bold;">{}</span>',
            colors.get(obj.status, "#000"),
            obj.get_status_display(),
        )


@admin.register(AuditTrailEntry)
class AuditTrailEntryAdmin(ReadOnlyModelAdmin):
    list_display = ["target_type", "target_id", "position", "action", "user_label", "timestamp", "company"]
    list_filter = ["company", "target_type", "action"]
    search_fields = ["target_id", "user_label", "action"]
    ordering = ["target_type", "target_id", "position"]
    readonly_fields = [
        "company", "target_type", "target_id", "position",
        "user", "user_label", "action", "timestamp", "details",
    ]


# =============================================================================
# Source Documents
# =============================================================================

@admin.register(PaymentVoucher)
class PaymentVoucherAdmin(ReadOnlyModelAdmin):
    list_display = [
        "voucher_number", "voucher_date", "payee_name", "payment_type",
        "net_payable", "currency", "status", "company",
    ]
    list_filter = ["company", "status", "payment_type", "payee_type"]
    search_fields = ["voucher_number", "payee_code", "payee_name", "narration"]
    list_select_related = ["company", "journal_voucher"]
    readonly_fields = [
        "company", "public_id", "voucher_number", "voucher_date", "payment_type", "payment_mode",
        "currency", "exchange_rate", "payee_type", "payee_code", "payee_name", "narration",
        "source_module", "source_document_no", "bank_cash_account_code",
        "gross_amount", "total_vat", "total_wht", "net_payable", "status",
        "journal_voucher", "prepared_by", "approved_by", "approval_date", "created_at",
    ]
    inlines = [PaymentVoucherLineInline]


@admin.register(GoodsReceivedNote)
class GoodsReceivedNoteAdmin(ReadOnlyModelAdmin):
    list_display = ["grn_number", "purchase_order_number", "supplier_name", "received_date", "total_received_value", "company"]
    list_filter = ["company", "received_date"]
    search_fields = ["grn_number", "purchase_order_number", "supplier_name"]
    readonly_fields = [
        "company", "public_id", "grn_number", "purchase_order_number", "supplier_name",
        "received_date", "total_received_value", "journal_voucher", "created_by", "created_at",
    ]
    inlines = [GoodsReceivedNoteLineInline]
