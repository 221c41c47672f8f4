# accounts/authz.py
"""
Authorization utilities for Ledgerpost.

Provides:
- ActorContext: Immutable context for the current request
- resolve_actor: Build actor context for an API request
- resolve_actor_from_ids: Build actor context from tenant/actor identifiers
- require: Check permissions and raise if not granted

Authentication happens upstream of this service. Requests carry a
``tenantId`` (company public id or slug) and an ``actorId`` (user public id
or email); the actor must hold an active membership in that company.

CRITICAL: Permissions are checked:
1. First by role (OWNER: implicit allow)
2. ADMIN/USER/VIEWER: explicit permissions only (defaults + manual)
"""

import uuid
from collections.abc import Mapping
from dataclasses import dataclass
from typing import FrozenSet

from django.contrib.auth import get_user_model
from django.core.exceptions import PermissionDenied
from rest_framework.exceptions import ValidationError

from accounts.models import CompanyMembership, Company


@dataclass(frozen=True)
class ActorContext:
    """
    Immutable context for the current actor (user + company).

    This is passed to commands and policies to provide context
    about who is performing an action and in which company.

    Attributes:
        user: The acting user
        company: The active company (tenant)
        membership: The user's membership in the company
        perms: Set of explicit permission codes the user has
    """
    user: object  # User model
    company: Company
    membership: CompanyMembership
    perms: FrozenSet[str]  # Explicit permission codes

    def has(self, code: str) -> bool:
        """
        Check if actor has a specific permission.

        Order of checks:
        1. inactive membership: deny
        2. OWNER: implicit allow
        3. everyone else: only codes in perms
        """
        if not self.membership.is_active:
            return False

        if self.membership.role == CompanyMembership.Role.OWNER:
            return True
        return code in self.perms

    @property
    def is_owner(self) -> bool:
        """Check if user is the company owner."""
        return self.membership.role == CompanyMembership.Role.OWNER

    @property
    def role(self) -> str:
        """Get the user's role in this company."""
        return self.membership.role


def _lookup(model, identifier: str, fallback_field: str):
    """Find by public_id when the identifier is a UUID, else by fallback_field."""
    try:
        return model.objects.get(public_id=uuid.UUID(str(identifier)))
    except (ValueError, TypeError):
        return model.objects.get(**{fallback_field: identifier})


def resolve_actor_from_ids(tenant_id, actor_id) -> ActorContext:
    """
    Resolve the ActorContext for a tenant/actor pair.

    Membership and permissions are loaded fresh on every call so that
    permission changes take effect immediately.

    Raises:
        ValidationError: tenantId or actorId missing.
        PermissionDenied: unknown tenant or actor, inactive company, or no
            active membership of the actor in the tenant.
    """
    if not tenant_id:
        raise ValidationError({"tenantId": "This field is required."})
    if not actor_id:
        raise ValidationError({"actorId": "This field is required."})

    User = get_user_model()
    try:
        company = _lookup(Company, tenant_id, "slug")
    except Company.DoesNotExist:
        raise PermissionDenied("Unknown tenant.")
    if not company.is_active:
        raise PermissionDenied("Tenant is inactive.")

    try:
        user = _lookup(User, actor_id, "email")
    except User.DoesNotExist:
        raise PermissionDenied("Unknown actor.")

    try:
        membership = CompanyMembership.objects.select_related(
            "company"
        ).prefetch_related(
            "permissions"
        ).get(
            user=user,
            company=company,
            is_active=True,
        )
    except CompanyMembership.DoesNotExist:
        raise PermissionDenied("Actor is not an active member of this tenant.")

    perms = frozenset(
        membership.permissions.values_list("code", flat=True)
    )

    return ActorContext(
        user=user,
        company=company,
        membership=membership,
        perms=perms,
    )


def require(actor: ActorContext, code: str) -> None:
    """
    Require that the actor has a specific permission.

    Raises PermissionDenied if the permission is not granted.

    Example:
        require(actor, "journal.post")
        # If we get here, permission is granted
    """
    if not actor.has(code):
        raise PermissionDenied(f"Permission denied: {code}")


def resolve_actor(request) -> ActorContext:
    """
    Extract ActorContext from the current request.

    This is called at the start of every view that needs authorization.
    ``tenantId``/``actorId`` are read from the JSON body when present,
    otherwise from the query string (GET requests).

    Raises:
        ValidationError, PermissionDenied: see resolve_actor_from_ids
    """
    data = getattr(request, "data", None)
    if not isinstance(data, Mapping):
        data = {}
    params = getattr(request, "query_params", None) or request.GET

    tenant_id = data.get("tenantId") or params.get("tenantId")
    actor_id = data.get("actorId") or params.get("actorId")
    return resolve_actor_from_ids(tenant_id, actor_id)
