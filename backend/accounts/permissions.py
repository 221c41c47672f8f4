# accounts/permissions.py
from __future__ import annotations

from typing import Optional
from django.db import transaction

from accounts.models import PermissionCode, CompanyMembership, CompanyMembershipPermission
from accounts.permission_defaults import ROLE_DEFAULTS


@transaction.atomic
def grant_role_defaults(
    membership: CompanyMembership,
    granted_by=None,
    overwrite: bool = False,
) -> int:
    """
    Grant default permissions for the membership.role.

    - Idempotent by default: only grants missing codes.
    - If overwrite=True: first removes existing permissions then grants defaults.
    Returns number of permissions newly granted.
    """
    default_codes = ROLE_DEFAULTS.get(membership.role, set())

    if overwrite:
        CompanyMembershipPermission.objects.filter(
            membership=membership,
            company=membership.company,
        ).delete()

    # Ensure PermissionCode rows exist for these codes
    existing = set(PermissionCode.objects.filter(code__in=default_codes).values_list("code", flat=True))
    missing = [c for c in default_codes if c not in existing]
    if missing:
        PermissionCode.objects.bulk_create(
            [
                PermissionCode(code=c, name=c, module=c.split(".")[0])
                for c in missing
            ],
            ignore_conflicts=True,
        )

    perms = list(PermissionCode.objects.filter(code__in=default_codes))

    already = set(
        CompanyMembershipPermission.objects.filter(
            membership=membership,
            permission__in=perms,
        ).values_list("permission__code", flat=True)
    )

    to_grant = [p for p in perms if p.code not in already]
    if not to_grant:
        return 0

    CompanyMembershipPermission.objects.bulk_create(
        [
            CompanyMembershipPermission(
                membership=membership,
                company=membership.company,
                permission=p,
                granted_by=granted_by,
            )
            for p in to_grant
        ],
        ignore_conflicts=True,
    )
    return len(to_grant)


def revoke_permission(membership: CompanyMembership, code: str) -> bool:
    """Remove an explicit grant. Returns True if a grant was removed."""
    deleted, _ = CompanyMembershipPermission.objects.filter(
        membership=membership,
        permission__code=code,
    ).delete()
    return deleted > 0


def grant_permission(membership: CompanyMembership, code: str, granted_by: Optional[object] = None) -> None:
    permission, _ = PermissionCode.objects.get_or_create(
        code=code,
        defaults={"name": code, "module": code.split(".")[0]},
    )
    CompanyMembershipPermission.objects.get_or_create(
        membership=membership,
        permission=permission,
        defaults={"company": membership.company, "granted_by": granted_by},
    )
