# tests/conftest.py
"""
Pytest fixtures for Ledgerpost tests.

- ActorContext requires: user, company, membership, perms
- Non-owner memberships get their role defaults via grant_role_defaults()
- chart_of_accounts seeds the codes used by the posting, payment and
  receiving flows
"""

from decimal import Decimal
from uuid import uuid4

import pytest
from django.conf import settings
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient

from accounts.authz import ActorContext
from accounts.models import Company, CompanyMembership
from accounts.permissions import grant_role_defaults
from accounting.models import Account
from accounting.validation import LineInput


User = get_user_model()


@pytest.fixture(autouse=True, scope="session")
def _testing_settings():
    """Tests create ledger rows directly; the write barrier is relaxed for them."""
    settings.TESTING = True


def make_actor(membership) -> ActorContext:
    perms = frozenset(membership.permissions.values_list("code", flat=True))
    return ActorContext(
        user=membership.user,
        company=membership.company,
        membership=membership,
        perms=perms,
    )


def make_account(company, code, name, account_type, **extra) -> Account:
    return Account.objects.create(
        company=company,
        code=code,
        name=name,
        account_type=account_type,
        **extra,
    )


# =============================================================================
# Company & User Fixtures
# =============================================================================

@pytest.fixture
def company(db):
    """Create a test company."""
    return Company.objects.create(
        public_id=uuid4(),
        name="Test Company",
        slug="test-company",
        default_currency="USD",
        is_active=True,
    )


@pytest.fixture
def second_company(db):
    """Create a second test company for multi-tenant tests."""
    return Company.objects.create(
        public_id=uuid4(),
        name="Second Company",
        slug="second-company",
        default_currency="EUR",
        is_active=True,
    )


@pytest.fixture
def user(db):
    """Create a test user (company owner)."""
    return User.objects.create_user(
        email="owner@test.com",
        password="testpass123",
        name="Test Owner",
    )


@pytest.fixture
def admin_user(db):
    return User.objects.create_user(
        email="admin@test.com",
        password="testpass123",
        name="Test Admin",
    )


@pytest.fixture
def regular_user(db):
    return User.objects.create_user(
        email="user@test.com",
        password="testpass123",
        name="Test User",
    )


@pytest.fixture
def viewer_user(db):
    return User.objects.create_user(
        email="viewer@test.com",
        password="testpass123",
        name="Test Viewer",
    )


@pytest.fixture
def owner_membership(db, company, user):
    """Create owner membership."""
    return CompanyMembership.objects.create(
        company=company,
        user=user,
        role=CompanyMembership.Role.OWNER,
        is_active=True,
    )


@pytest.fixture
def admin_membership(db, company, admin_user, user):
    membership = CompanyMembership.objects.create(
        company=company,
        user=admin_user,
        role=CompanyMembership.Role.ADMIN,
        is_active=True,
    )
    grant_role_defaults(membership, granted_by=user)
    return membership


@pytest.fixture
def user_membership(db, company, regular_user, user):
    membership = CompanyMembership.objects.create(
        company=company,
        user=regular_user,
        role=CompanyMembership.Role.USER,
        is_active=True,
    )
    grant_role_defaults(membership, granted_by=user)
    return membership


@pytest.fixture
def viewer_membership(db, company, viewer_user, user):
    membership = CompanyMembership.objects.create(
        company=company,
        user=viewer_user,
        role=CompanyMembership.Role.VIEWER,
        is_active=True,
    )
    grant_role_defaults(membership, granted_by=user)
    return membership


# =============================================================================
# Actor Context Fixtures
# =============================================================================

@pytest.fixture
def actor_context(owner_membership):
    """ActorContext for the owner user."""
    return make_actor(owner_membership)


@pytest.fixture
def admin_actor_context(admin_membership):
    return make_actor(admin_membership)


@pytest.fixture
def user_actor_context(user_membership):
    return make_actor(user_membership)


@pytest.fixture
def viewer_actor_context(viewer_membership):
    return make_actor(viewer_membership)


@pytest.fixture
def second_actor_context(db, second_company, user):
    """The same owner user acting in the second company."""
    membership = CompanyMembership.objects.create(
        company=second_company,
        user=user,
        role=CompanyMembership.Role.OWNER,
        is_active=True,
    )
    return make_actor(membership)


# =============================================================================
# Account Fixtures
# =============================================================================

@pytest.fixture
def chart_of_accounts(db, company):
    """
    Accounts of the test company keyed by code.

    5010 expense, 1010 bank, 12050 VAT input, 21020 WHT payable,
    501010 inventory, 201030 GRN accrual, plus a header (1000) and an
    inactive account (6990).
    """
    specs = [
        ("5010", "Office Supplies", Account.AccountType.EXPENSE, {}),
        ("5020", "Professional Fees", Account.AccountType.EXPENSE, {}),
        ("1010", "Main Bank Account", Account.AccountType.ASSET, {}),
        ("12050", "VAT Input", Account.AccountType.ASSET, {}),
        ("21020", "WHT Payable", Account.AccountType.LIABILITY, {}),
        ("501010", "Inventory", Account.AccountType.ASSET, {}),
        ("201030", "GRN Accrual", Account.AccountType.LIABILITY, {}),
        ("1000", "Current Assets", Account.AccountType.ASSET, {"is_header": True}),
        ("6990", "Retired Expenses", Account.AccountType.EXPENSE, {"status": Account.Status.INACTIVE}),
    ]
    return {
        code: make_account(company, code, name, account_type, **extra)
        for code, name, account_type, extra in specs
    }


@pytest.fixture
def second_company_accounts(db, second_company):
    """Second tenant has a bank account but no 5010."""
    return {
        "1010": make_account(second_company, "1010", "Bank", Account.AccountType.ASSET),
        "4010": make_account(second_company, "4010", "Sales", Account.AccountType.REVENUE),
    }


# =============================================================================
# Line Sets
# =============================================================================

@pytest.fixture
def balanced_lines():
    """5010 Dr 100 / 1010 Cr 100."""
    return [
        LineInput(account_code="5010", debit=Decimal("100"), description="Stationery"),
        LineInput(account_code="1010", credit=Decimal("100"), description="Paid from bank"),
    ]


# =============================================================================
# API
# =============================================================================

@pytest.fixture
def api_client():
    return APIClient()
