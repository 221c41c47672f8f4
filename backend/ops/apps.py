from django.apps import AppConfig


class OpsConfig(AppConfig):
    """Operations & observability endpoints (health probes, logging)."""

    name = "ops"
    verbose_name = "Operations"
