# accounting/views.py
"""
Thin views that delegate to the command modules.

Views handle: HTTP parsing, actor resolution, response formatting.
Commands handle: permissions, ledger rules, persistence, audit.

CRITICAL: All mutations MUST go through commands (posting, workflow,
payments, receiving). Views never call .save() on ledger models.

Response envelope:
    success          {"success": true, ...}
    validation       422 {"success": false, "errors": [...]}
    everything else  {"success": false, "error": "..."} (see accounting.exceptions)
"""

from datetime import datetime

from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.exceptions import ParseError, ValidationError
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.authz import require, resolve_actor
from .coa import list_accounts
from .exports import (
    VOUCHER_EXPORT_COLUMNS,
    VOUCHER_LINE_EXPORT_COLUMNS,
    ExportFormat,
    create_export_response,
    prepare_voucher_export_data,
    prepare_voucher_lines_export_data,
)
from .models import JournalVoucher, PaymentVoucher
from .payments import approve_payment_voucher, create_payment_voucher, reject_payment_voucher
from .posting import post_voucher
from .receiving import receive_goods
from .serializers import (
    AccountSerializer,
    GoodsReceiptInputSerializer,
    GoodsReceivedNoteSerializer,
    JournalVoucherDetailSerializer,
    JournalVoucherSerializer,
    PaymentVoucherInputSerializer,
    PaymentVoucherSerializer,
    VoucherInputSerializer,
    WorkflowActionSerializer,
)
from .workflow import approve_voucher, reject_voucher, submit_voucher


def _json_body(request) -> dict:
    """Parsed JSON object body; anything else is treated as malformed."""
    data = request.data
    if not isinstance(data, dict):
        raise ParseError()
    return data


def _posting_response(result, output: dict) -> Response:
    if result.success:
        return Response({"success": True, **output}, status=status.HTTP_201_CREATED)
    if result.errors:
        return Response(
            {"success": False, "errors": result.errors},
            status=status.HTTP_422_UNPROCESSABLE_ENTITY,
        )
    return Response(
        {"success": False, "error": result.error},
        status=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )


def _vouchers_for(actor, params):
    vouchers = JournalVoucher.objects.filter(
        company=actor.company,
    ).select_related("created_by", "posted_by")

    status_filter = params.get("status")
    if status_filter:
        if status_filter not in JournalVoucher.Status.values:
            raise ValidationError({"status": f"Unknown status {status_filter}."})
        vouchers = vouchers.filter(status=status_filter)

    type_filter = params.get("type")
    if type_filter:
        if type_filter not in JournalVoucher.VoucherType.values:
            raise ValidationError({"type": f"Unknown voucher type {type_filter}."})
        vouchers = vouchers.filter(voucher_type=type_filter)

    return vouchers.order_by("-date", "-id")


# =============================================================================
# Chart of Accounts
# =============================================================================

class AccountListView(APIView):
    """
    GET /api/accounting/accounts/ -> active accounts of the tenant

    Query params:
        includeInactive: "true" to list inactive accounts as well
    """

    def get(self, request):
        actor = resolve_actor(request)
        require(actor, "accounts.view")

        include_inactive = request.query_params.get("includeInactive", "").lower() == "true"
        accounts = list_accounts(actor.company, include_inactive=include_inactive)
        return Response({
            "success": True,
            "accounts": AccountSerializer(accounts, many=True).data,
        })


# =============================================================================
# Journal Vouchers
# =============================================================================

class VoucherListCreateView(APIView):
    """
    GET /api/accounting/vouchers/ -> list vouchers (filters: status, type)
    POST /api/accounting/vouchers/ -> validate and post a voucher
    """

    def get(self, request):
        actor = resolve_actor(request)
        require(actor, "journal.view")

        vouchers = _vouchers_for(actor, request.query_params)
        return Response({
            "success": True,
            "vouchers": JournalVoucherSerializer(vouchers, many=True).data,
        })

    def post(self, request):
        data = _json_body(request)
        actor = resolve_actor(request)

        serializer = VoucherInputSerializer(data=data)
        serializer.is_valid(raise_exception=True)

        result = post_voucher(actor, serializer.build_header(), serializer.build_lines())
        output = {}
        if result.success:
            voucher = result.voucher
            output = {
                "voucherId": str(voucher.public_id),
                "voucherNumber": voucher.voucher_number,
                "status": voucher.status,
                "totalDebit": str(voucher.total_debit),
                "totalCredit": str(voucher.total_credit),
            }
        return _posting_response(result, output)


class VoucherDetailView(APIView):
    """
    GET /api/accounting/vouchers/<public_id>/ -> voucher with lines and audit trail
    """

    def get(self, request, public_id):
        actor = resolve_actor(request)
        require(actor, "journal.view")

        voucher = get_object_or_404(
            JournalVoucher.objects.select_related(
                "created_by", "posted_by",
            ).prefetch_related("lines__account"),
            company=actor.company,
            public_id=public_id,
        )
        return Response({
            "success": True,
            "voucher": JournalVoucherDetailSerializer(voucher).data,
        })


class VoucherActionView(APIView):
    """
    Base for POST /api/accounting/vouchers/<public_id>/<action>/.
    Illegal transitions surface as 409 through the exception handler.
    """

    def run(self, actor, public_id, reason):
        raise NotImplementedError

    def post(self, request, public_id):
        data = _json_body(request)
        actor = resolve_actor(request)

        serializer = WorkflowActionSerializer(data=data)
        serializer.is_valid(raise_exception=True)

        voucher = self.run(actor, public_id, serializer.validated_data.get("reason", ""))
        return Response({
            "success": True,
            "voucher": JournalVoucherSerializer(voucher).data,
        })


class VoucherSubmitView(VoucherActionView):
    """POST /api/accounting/vouchers/<public_id>/submit/ -> DRAFT to PENDING"""

    def run(self, actor, public_id, reason):
        return submit_voucher(actor, public_id)


class VoucherApproveView(VoucherActionView):
    """POST /api/accounting/vouchers/<public_id>/approve/ -> PENDING to POSTED"""

    def run(self, actor, public_id, reason):
        return approve_voucher(actor, public_id)


class VoucherRejectView(VoucherActionView):
    """POST /api/accounting/vouchers/<public_id>/reject/ -> PENDING to REJECTED"""

    def run(self, actor, public_id, reason):
        return reject_voucher(actor, public_id, reason)


class VoucherExportView(APIView):
    """
    GET /api/accounting/vouchers/export/ -> voucher register download

    Query params:
        format: xlsx, csv (default: xlsx)
        detail: summary/lines (default: summary)
        status, type: same filters as the list endpoint
        dateFrom, dateTo: YYYY-MM-DD bounds (optional)
    """

    def get(self, request):
        actor = resolve_actor(request)
        require(actor, "journal.export")

        export_format = request.query_params.get("format", ExportFormat.EXCEL)
        detail_level = request.query_params.get("detail", "summary")

        if export_format not in ExportFormat.CHOICES:
            raise ValidationError(
                {"format": f"Invalid format. Must be one of: {', '.join(ExportFormat.CHOICES)}"}
            )
        if detail_level not in ("summary", "lines"):
            raise ValidationError({"detail": "Invalid detail level. Must be 'summary' or 'lines'."})

        vouchers = _vouchers_for(actor, request.query_params)
        for param, lookup in (("dateFrom", "date__gte"), ("dateTo", "date__lte")):
            value = request.query_params.get(param)
            if not value:
                continue
            try:
                bound = datetime.strptime(value, "%Y-%m-%d").date()
            except ValueError:
                raise ValidationError({param: "Invalid date format. Use YYYY-MM-DD."})
            vouchers = vouchers.filter(**{lookup: bound})

        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        if detail_level == "lines":
            vouchers = vouchers.prefetch_related("lines__account")
            data = prepare_voucher_lines_export_data(vouchers)
            columns = VOUCHER_LINE_EXPORT_COLUMNS
            title = "Journal Voucher Lines"
            filename = f"journal_voucher_lines_{timestamp}"
        else:
            data = prepare_voucher_export_data(vouchers)
            columns = VOUCHER_EXPORT_COLUMNS
            title = "Journal Vouchers"
            filename = f"journal_vouchers_{timestamp}"

        return create_export_response(
            data=data,
            columns=columns,
            format=export_format,
            filename=filename,
            title=title,
        )


# =============================================================================
# Payment Vouchers
# =============================================================================

def _payment_voucher_output(payment_voucher) -> dict:
    payment_voucher = PaymentVoucher.objects.select_related(
        "journal_voucher", "approved_by",
    ).prefetch_related("lines").get(pk=payment_voucher.pk)
    return {"paymentVoucher": PaymentVoucherSerializer(payment_voucher).data}


class PaymentVoucherCreateView(APIView):
    """
    POST /api/accounting/payment-vouchers/ -> raise a payment voucher and its pending journal
    """

    def post(self, request):
        data = _json_body(request)
        actor = resolve_actor(request)

        serializer = PaymentVoucherInputSerializer(data=data)
        serializer.is_valid(raise_exception=True)

        result = create_payment_voucher(actor, serializer.build_input())
        output = _payment_voucher_output(result.data) if result.success else {}
        return _posting_response(result, output)


class PaymentVoucherDetailView(APIView):
    """GET /api/accounting/payment-vouchers/<public_id>/"""

    def get(self, request, public_id):
        actor = resolve_actor(request)
        require(actor, "journal.view")

        payment_voucher = get_object_or_404(
            PaymentVoucher,
            company=actor.company,
            public_id=public_id,
        )
        return Response({"success": True, **_payment_voucher_output(payment_voucher)})


class PaymentVoucherApproveView(APIView):
    """POST /api/accounting/payment-vouchers/<public_id>/approve/"""

    def post(self, request, public_id):
        _json_body(request)
        actor = resolve_actor(request)

        payment_voucher = approve_payment_voucher(actor, public_id)
        return Response({"success": True, **_payment_voucher_output(payment_voucher)})


class PaymentVoucherRejectView(APIView):
    """POST /api/accounting/payment-vouchers/<public_id>/reject/"""

    def post(self, request, public_id):
        data = _json_body(request)
        actor = resolve_actor(request)

        serializer = WorkflowActionSerializer(data=data)
        serializer.is_valid(raise_exception=True)

        payment_voucher = reject_payment_voucher(
            actor, public_id, serializer.validated_data.get("reason", ""),
        )
        return Response({"success": True, **_payment_voucher_output(payment_voucher)})


# =============================================================================
# Goods Received Notes
# =============================================================================

class GoodsReceivedNoteCreateView(APIView):
    """
    POST /api/accounting/grns/ -> record goods received and post the accrual
    """

    def post(self, request):
        data = _json_body(request)
        actor = resolve_actor(request)

        serializer = GoodsReceiptInputSerializer(data=data)
        serializer.is_valid(raise_exception=True)

        result = receive_goods(actor, serializer.build_input())
        output = {}
        if result.success:
            output = {"grn": GoodsReceivedNoteSerializer(result.data).data}
        return _posting_response(result, output)
