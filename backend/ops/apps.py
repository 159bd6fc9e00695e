from django.apps import AppConfig


class OpsConfig(AppConfig):
    """Operations: structured logging and Prometheus metrics."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "ops"
    verbose_name = "Operations"
