"""
Django Artisan app configuration.
"""

from django.apps import AppConfig
from django.utils.translation import gettext_lazy as _


class ArtisanConfig(AppConfig):
    """Artisan application configuration."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "artisan"
    verbose_name = _("Planning et relances")

    def ready(self):
        """Import signal handlers when app is ready."""
        # Import handlers to register them
        from artisan.signals import handlers  # noqa: F401
