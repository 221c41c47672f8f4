# accounting/__init__.py
"""
Accounting app - balanced journal posting for Ledgerpost.

This app provides:
- Account: tenant-scoped Chart of Accounts
- JournalVoucher / JournalLine: double-entry vouchers
- AuditTrailEntry: append-only action log
- PaymentVoucher, GoodsReceivedNote: source documents that raise vouchers

Command modules (posting, workflow, payments, receiving) perform every
ledger write.
"""
