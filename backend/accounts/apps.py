# accounts/apps.py
"""Accounts app configuration."""

from django.apps import AppConfig
from django.conf import settings
from django.core.exceptions import ImproperlyConfigured


class AccountsConfig(AppConfig):
    """Configuration for the accounts app."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "accounts"
    verbose_name = "Accounts & Profiles"

    def ready(self):
        """Refuse to start without usable field keys when encryption is required."""
        from vault.keys import key_configuration_errors

        if getattr(settings, "FIELD_ENCRYPTION_REQUIRED", False):
            errors = key_configuration_errors()
            if errors:
                raise ImproperlyConfigured(
                    "Field encryption is required but misconfigured: " + "; ".join(errors)
                )
