#accounts/tests/test_permissions_defaults.py

from django.core.exceptions import PermissionDenied
from django.test import TestCase
from django.contrib.auth import get_user_model
from rest_framework.exceptions import ValidationError

from accounts.models import Company, CompanyMembership
from accounts.authz import ActorContext, require, resolve_actor_from_ids
from accounts.permissions import grant_permission, grant_role_defaults, revoke_permission
from accounts.models import CompanyMembershipPermission, PermissionCode
from accounts.permission_defaults import ROLE_DEFAULTS, all_permission_codes


User = get_user_model()


def actor_for(membership):
    perms = frozenset(membership.permissions.values_list("code", flat=True))
    return ActorContext(user=membership.user, company=membership.company, membership=membership, perms=perms)


class TestPermissionDefaults(TestCase):
    def setUp(self):
        self.company = Company.objects.create(name="C1", slug="c1")
        self.owner = User.objects.create_user(email="o@test.com", password="pass12345")
        self.user = User.objects.create_user(email="u@test.com", password="pass12345")
        self.admin = User.objects.create_user(email="a@test.com", password="pass12345")
        self.viewer = User.objects.create_user(email="v@test.com", password="pass12345")

        self.owner_m = CompanyMembership.objects.create(user=self.owner, company=self.company, role="OWNER", is_active=True)
        self.user_m = CompanyMembership.objects.create(user=self.user, company=self.company, role="USER", is_active=True)
        self.admin_m = CompanyMembership.objects.create(user=self.admin, company=self.company, role="ADMIN", is_active=True)
        self.viewer_m = CompanyMembership.objects.create(user=self.viewer, company=self.company, role="VIEWER", is_active=True)

        grant_role_defaults(self.owner_m, granted_by=self.owner)
        grant_role_defaults(self.user_m, granted_by=self.owner)
        grant_role_defaults(self.admin_m, granted_by=self.owner)
        grant_role_defaults(self.viewer_m, granted_by=self.owner)

    def test_user_can_create_but_not_post(self):
        actor = actor_for(self.user_m)
        self.assertTrue(actor.has("journal.create"))
        self.assertFalse(actor.has("journal.post"))
        self.assertFalse(actor.has("payments.approve"))

    def test_viewer_is_read_only(self):
        actor = actor_for(self.viewer_m)
        self.assertTrue(actor.has("journal.view"))
        self.assertFalse(actor.has("journal.create"))
        self.assertFalse(actor.has("receiving.create"))

    def test_owner_is_implicitly_allowed(self):
        CompanyMembershipPermission.objects.filter(membership=self.owner_m).delete()
        actor = actor_for(self.owner_m)
        self.assertEqual(actor.perms, frozenset())
        self.assertTrue(actor.has("journal.post"))
        self.assertTrue(actor.has("anything.at_all"))

    def test_admin_permissions_are_real(self):
        actor = actor_for(self.admin_m)
        self.assertTrue(actor.has("journal.post"))
        self.assertFalse(actor.has("anything.at_all"))

    def test_admin_revocation_actually_blocks(self):
        self.assertTrue(revoke_permission(self.admin_m, "journal.post"))
        self.assertFalse(revoke_permission(self.admin_m, "journal.post"))

        actor = actor_for(self.admin_m)
        self.assertFalse(actor.has("journal.post"))
        with self.assertRaises(PermissionDenied):
            require(actor, "journal.post")

    def test_explicit_grant(self):
        grant_permission(self.viewer_m, "journal.export", granted_by=self.owner)
        grant_permission(self.viewer_m, "journal.export", granted_by=self.owner)

        self.assertEqual(
            CompanyMembershipPermission.objects.filter(
                membership=self.viewer_m, permission__code="journal.export",
            ).count(),
            1,
        )
        self.assertTrue(actor_for(self.viewer_m).has("journal.export"))

    def test_grant_is_idempotent(self):
        self.assertEqual(grant_role_defaults(self.user_m, granted_by=self.owner), 0)
        self.assertEqual(self.user_m.permissions.count(), len(ROLE_DEFAULTS["USER"]))

    def test_overwrite_restores_defaults(self):
        revoke_permission(self.user_m, "journal.create")
        grant_permission(self.user_m, "journal.export")

        granted = grant_role_defaults(self.user_m, overwrite=True)

        self.assertEqual(granted, len(ROLE_DEFAULTS["USER"]))
        codes = set(self.user_m.permissions.values_list("code", flat=True))
        self.assertEqual(codes, ROLE_DEFAULTS["USER"])

    def test_permission_codes_registered(self):
        registered = set(PermissionCode.objects.values_list("code", flat=True))
        self.assertTrue(all_permission_codes() <= registered)

    def test_inactive_membership_grants_nothing(self):
        self.owner_m.is_active = False
        self.owner_m.save()
        self.assertFalse(actor_for(self.owner_m).has("journal.view"))


class TestResolveActor(TestCase):
    def setUp(self):
        self.company = Company.objects.create(name="C1", slug="c1")
        self.other = Company.objects.create(name="C2", slug="c2")
        self.user = User.objects.create_user(email="u@test.com", password="pass12345")
        self.membership = CompanyMembership.objects.create(
            user=self.user, company=self.company, role="USER", is_active=True
        )
        grant_role_defaults(self.membership)

    def test_resolves_by_public_id(self):
        actor = resolve_actor_from_ids(str(self.company.public_id), str(self.user.public_id))
        self.assertEqual(actor.company, self.company)
        self.assertEqual(actor.user, self.user)
        self.assertEqual(actor.role, "USER")
        self.assertIn("journal.create", actor.perms)

    def test_resolves_by_slug_and_email(self):
        actor = resolve_actor_from_ids("c1", "u@test.com")
        self.assertEqual(actor.membership, self.membership)

    def test_missing_identifiers(self):
        with self.assertRaises(ValidationError) as ctx:
            resolve_actor_from_ids(None, "u@test.com")
        self.assertIn("tenantId", ctx.exception.detail)
        with self.assertRaises(ValidationError) as ctx:
            resolve_actor_from_ids("c1", "")
        self.assertIn("actorId", ctx.exception.detail)

    def test_unknown_tenant_and_actor(self):
        with self.assertRaisesMessage(PermissionDenied, "Unknown tenant."):
            resolve_actor_from_ids("nope", "u@test.com")
        with self.assertRaisesMessage(PermissionDenied, "Unknown actor."):
            resolve_actor_from_ids("c1", "ghost@test.com")

    def test_non_member(self):
        with self.assertRaises(PermissionDenied):
            resolve_actor_from_ids("c2", "u@test.com")

    def test_inactive_company(self):
        self.company.is_active = False
        self.company.save()
        with self.assertRaisesMessage(PermissionDenied, "Tenant is inactive."):
            resolve_actor_from_ids("c1", "u@test.com")
