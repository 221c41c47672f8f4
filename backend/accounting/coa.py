# accounting/coa.py
"""
Chart of Accounts lookup.

Read-only. Every query is filtered by company: an account code that
exists for one tenant is unknown to every other tenant.
"""

from typing import Iterable

from accounting.models import Account


def resolve_accounts(company, codes: Iterable[str]) -> dict[str, Account]:
    """Resolve several codes with one query. Unknown codes are absent from the result."""
    wanted = {str(c).strip() for c in codes if c is not None}
    if not wanted:
        return {}
    return {
        account.code: account
        for account in Account.objects.filter(company=company, code__in=wanted)
    }


def list_accounts(company, include_inactive: bool = False):
    qs = Account.objects.filter(company=company)
    if not include_inactive:
        qs = qs.filter(status=Account.Status.ACTIVE)
    return qs.order_by("code")
