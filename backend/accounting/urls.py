# accounting/urls.py
"""
URL configuration for accounting API.

Endpoints:
- /accounts/ - Chart of Accounts (read-only)
- /vouchers/ - Journal vouchers with workflow actions and export
- /payment-vouchers/ - Payment vouchers with approve/reject
- /grns/ - Goods received notes
"""

from django.urls import path

from .views import (
    AccountListView,
    GoodsReceivedNoteCreateView,
    PaymentVoucherApproveView,
    PaymentVoucherCreateView,
    PaymentVoucherDetailView,
    PaymentVoucherRejectView,
    VoucherApproveView,
    VoucherDetailView,
    VoucherExportView,
    VoucherListCreateView,
    VoucherRejectView,
    VoucherSubmitView,
)

app_name = "accounting"

urlpatterns = [
    path("accounts/", AccountListView.as_view(), name="account-list"),

    path("vouchers/", VoucherListCreateView.as_view(), name="voucher-list"),
    path("vouchers/export/", VoucherExportView.as_view(), name="voucher-export"),
    path("vouchers/<uuid:public_id>/", VoucherDetailView.as_view(), name="voucher-detail"),
    path("vouchers/<uuid:public_id>/submit/", VoucherSubmitView.as_view(), name="voucher-submit"),
    path("vouchers/<uuid:public_id>/approve/", VoucherApproveView.as_view(), name="voucher-approve"),
    path("vouchers/<uuid:public_id>/reject/", VoucherRejectView.as_view(), name="voucher-reject"),

    path("payment-vouchers/", PaymentVoucherCreateView.as_view(), name="payment-voucher-create"),
    path("payment-vouchers/<uuid:public_id>/", PaymentVoucherDetailView.as_view(), name="payment-voucher-detail"),
    path("payment-vouchers/<uuid:public_id>/approve/", PaymentVoucherApproveView.as_view(), name="payment-voucher-approve"),
    path("payment-vouchers/<uuid:public_id>/reject/", PaymentVoucherRejectView.as_view(), name="payment-voucher-reject"),

    path("grns/", GoodsReceivedNoteCreateView.as_view(), name="grn-create"),
]
