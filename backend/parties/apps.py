# parties/apps.py
"""Parties app configuration."""

from django.apps import AppConfig
from django.conf import settings
from django.db.models.signals import post_save


class PartiesConfig(AppConfig):
    """Configuration for the parties app."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "parties"
    verbose_name = "Account Parties & Invitations"

    def ready(self):
        """Link party rows to users as they register."""
        from parties.commands import link_pending_parties

        def _on_user_saved(sender, instance, created, **kwargs):
            if created and instance.email:
                link_pending_parties(instance)

        post_save.connect(
            _on_user_saved,
            sender=settings.AUTH_USER_MODEL,
            dispatch_uid="parties.link_on_registration",
            weak=False,
        )
