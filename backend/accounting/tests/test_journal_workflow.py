# accounting/tests/test_journal_workflow.py
"""
Integration tests for the journal voucher workflow.

These tests use API-level testing to verify the full lifecycle
of journal vouchers: draft -> submit -> approve / reject.

Tests verify the API responses rather than direct database queries
to avoid transaction isolation issues between the API client and
test database connections.
"""
from django.contrib.auth import get_user_model
from django.test import TransactionTestCase
from rest_framework.test import APIClient

from accounts.models import Company, CompanyMembership
from accounts.permissions import grant_role_defaults
from accounting.models import Account


class TestJournalVoucherThinFlow(TransactionTestCase):
    """
    Thin integration test (API-level):
    - Clerk (USER) drafts a voucher and submits it -> PENDING
    - Clerk cannot approve
    - Approver (ADMIN) approves -> POSTED, or rejects -> REJECTED
    - Detail endpoint shows the audit trail in order
    """

    def setUp(self):
        self.client = APIClient()
        User = get_user_model()

        self.clerk = User.objects.create_user(
            email="clerk@example.com",
            password="pass12345",
            name="Clerk",
        )
        self.approver = User.objects.create_user(
            email="approver@example.com",
            password="pass12345",
            name="Approver",
        )

        self.company = Company.objects.create(
            name="Test Co",
            slug="testco",
            default_currency="EGP",
        )

        for user, role in ((self.clerk, CompanyMembership.Role.USER), (self.approver, CompanyMembership.Role.ADMIN)):
            membership = CompanyMembership.objects.create(
                user=user,
                company=self.company,
                role=role,
                is_active=True,
            )
            grant_role_defaults(membership)

        Account.objects.create(
            company=self.company,
            code="5010",
            name="Office Expenses",
            account_type=Account.AccountType.EXPENSE,
        )
        Account.objects.create(
            company=self.company,
            code="1010",
            name="Bank",
            account_type=Account.AccountType.ASSET,
        )

    def ids(self, user):
        return {"tenantId": self.company.slug, "actorId": user.email}

    def create_draft(self):
        body = {
            **self.ids(self.clerk),
            "date": "2024-05-02",
            "narration": "Courier charges",
            "status": "DRAFT",
            "lines": [
                {"accountCode": "5010", "debit": "42.50"},
                {"accountCode": "1010", "credit": "42.50"},
            ],
        }
        response = self.client.post("/api/accounting/vouchers/", body, format="json")
        self.assertEqual(response.status_code, 201, response.content)
        self.assertEqual(response.json()["status"], "DRAFT")
        return response.json()["voucherId"]

    def action(self, voucher_id, name, user, **extra):
        return self.client.post(
            f"/api/accounting/vouchers/{voucher_id}/{name}/",
            {**self.ids(user), **extra},
            format="json",
        )

    def test_submit_then_approve(self):
        voucher_id = self.create_draft()

        response = self.action(voucher_id, "submit", self.clerk)
        self.assertEqual(response.status_code, 200, response.content)
        self.assertEqual(response.json()["voucher"]["status"], "PENDING")

        response = self.action(voucher_id, "approve", self.clerk)
        self.assertEqual(response.status_code, 403)

        response = self.action(voucher_id, "approve", self.approver)
        self.assertEqual(response.status_code, 200, response.content)
        voucher = response.json()["voucher"]
        self.assertEqual(voucher["status"], "POSTED")
        self.assertEqual(voucher["postedBy"], "approver@example.com")

        response = self.client.get(
            f"/api/accounting/vouchers/{voucher_id}/",
            self.ids(self.clerk),
        )
        self.assertEqual(response.status_code, 200)
        trail = response.json()["voucher"]["auditTrail"]
        self.assertEqual([e["action"] for e in trail], ["Drafted", "Submitted", "Posted"])
        self.assertEqual([e["user"] for e in trail], ["Clerk", "Clerk", "Approver"])

    def test_submit_then_reject(self):
        voucher_id = self.create_draft()
        self.action(voucher_id, "submit", self.clerk)

        response = self.action(voucher_id, "reject", self.approver, reason="Missing receipt")
        self.assertEqual(response.status_code, 200, response.content)
        self.assertEqual(response.json()["voucher"]["status"], "REJECTED")

        response = self.action(voucher_id, "approve", self.approver)
        self.assertEqual(response.status_code, 409)
        self.assertEqual(
            response.json()["error"],
            "Invalid status transition: REJECTED -> POSTED",
        )

        response = self.client.get(
            f"/api/accounting/vouchers/{voucher_id}/",
            self.ids(self.approver),
        )
        trail = response.json()["voucher"]["auditTrail"]
        self.assertEqual(trail[-1]["action"], "Rejected")
        self.assertEqual(trail[-1]["details"], {"reason": "Missing receipt"})

    def test_draft_cannot_be_approved_directly(self):
        voucher_id = self.create_draft()

        response = self.action(voucher_id, "approve", self.approver)

        self.assertEqual(response.status_code, 409)
        self.assertEqual(
            response.json()["error"],
            "Invalid status transition: DRAFT -> POSTED",
        )

    def test_unknown_voucher_is_404(self):
        response = self.action("00000000-0000-0000-0000-000000000000", "submit", self.clerk)
        self.assertEqual(response.status_code, 404)
