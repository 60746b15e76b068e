import logging

from django.apps import AppConfig

logger = logging.getLogger(__name__)


class WebhooksConfig(AppConfig):
    """Django app configuration for webhooks."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "webhooks"
    label = "webhooks"

    def ready(self) -> None:
        """Called when Django starts - check the project service settings.

        A misconfigured service would otherwise only fail on the first
        webhook delivery.
        """
        from webhooks.exceptions import ServiceConfigurationError
        from webhooks.services.project_services import load_project_services

        try:
            services = load_project_services()
        except ServiceConfigurationError as e:
            logger.error(f"Invalid PROJECT_SERVICES configuration: {e.message}")
            raise

        logger.info(
            f"Loaded {len(services)} project services",
            extra={"services": [service.to_param() for service in services]},
        )
