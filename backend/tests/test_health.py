# tests/test_health.py
"""
Tests for the operations health endpoints.
"""

from datetime import date
from decimal import Decimal

import pytest

from accounting.models import JournalVoucher
from accounting.write_barrier import command_writes_allowed
from ops.health import HealthCheck


def test_liveness(client):
    response = client.get("/_health/live")

    assert response.status_code == 200
    assert response.json() == {"status": "alive"}


@pytest.mark.django_db
def test_readiness(client):
    response = client.get("/_health/ready")

    assert response.status_code == 200
    assert response.json()["status"] == "ready"
    assert response.json()["database"]["status"] == "healthy"


@pytest.mark.django_db
class TestLedgerIntegrity:

    def test_balanced_ledger_is_healthy(self, actor_context, chart_of_accounts, balanced_lines):
        from accounting.posting import VoucherHeaderInput, post_voucher

        post_voucher(actor_context, VoucherHeaderInput(date=date(2024, 1, 5)), balanced_lines)

        assert HealthCheck.check_ledger_integrity() == {"status": "healthy", "unbalanced_vouchers": 0}

    def test_unbalanced_posted_voucher_is_reported(self, company, client):
        with command_writes_allowed():
            JournalVoucher.objects.create(
                company=company,
                voucher_number="JV-2024-00042",
                date=date(2024, 1, 5),
                status=JournalVoucher.Status.POSTED,
                total_debit=Decimal("100.00"),
                total_credit=Decimal("90.00"),
            )
            JournalVoucher.objects.create(
                company=company,
                voucher_number="JV-2024-00043",
                date=date(2024, 1, 5),
                status=JournalVoucher.Status.DRAFT,
                total_debit=Decimal("100.00"),
                total_credit=Decimal("90.00"),
            )

        result = HealthCheck.check_ledger_integrity()

        assert result["status"] == "unhealthy"
        assert result["unbalanced_vouchers"] == 1
        assert result["sample"] == ["JV-2024-00042"]

        response = client.get("/_health/full")
        assert response.status_code == 503
        assert response.json()["checks"]["ledger_integrity"]["status"] == "unhealthy"
