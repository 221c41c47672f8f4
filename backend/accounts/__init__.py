# accounts/__init__.py
"""
Accounts app - tenants and actors for Ledgerpost.

This app provides:
- Company: Tenant/organization model
- User: Custom user model (email login)
- CompanyMembership: User-Company relationship with a role
- PermissionCode: Fine-grained permission codes
- ActorContext: Authorization context utilities

Multi-tenancy is enforced at every layer through the ActorContext pattern.
"""
