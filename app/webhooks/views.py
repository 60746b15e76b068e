import logging

from django.conf import settings
from django.http import HttpRequest, JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_http_methods

from .exceptions import (
    ServiceConfigurationError,
    UnsupportedKindError,
    WebhookError,
    WebhookSignatureError,
    create_error_response,
    create_success_response,
)
from .providers.gitlab import GitLabProvider
from .services.project_services import execute_services, load_project_services

logger = logging.getLogger(__name__)


def get_provider() -> GitLabProvider:
    return GitLabProvider(getattr(settings, "GITLAB_WEBHOOK_TOKEN", ""))


@csrf_exempt
@require_http_methods(["POST"])
def gitlab_webhook(request: HttpRequest) -> JsonResponse:
    """Handle GitLab project webhooks"""
    logger.info(
        "Processing GitLab webhook",
        extra={
            "content_type": request.content_type,
            "gitlab_event": request.headers.get(GitLabProvider.EVENT_HEADER),
        },
    )

    try:
        provider = get_provider()

        # Validate webhook token
        if not provider.validate_webhook(request):
            raise WebhookSignatureError()

        event = provider.parse_webhook(request)
        services = load_project_services()
        enqueued = execute_services(event, services)

        logger.info(
            "Dispatched GitLab event",
            extra={"event_kind": event.kind.value, "services": enqueued},
        )
        response = create_success_response("GitLab webhook processed successfully")
        response["services"] = enqueued
        return JsonResponse(response, status=200)

    except WebhookSignatureError as e:
        logger.warning("Invalid token for GitLab webhook")
        return JsonResponse(create_error_response(e, 401), status=401)

    except ServiceConfigurationError as e:
        logger.error(f"Invalid project service configuration: {e.message}")
        return JsonResponse(create_error_response(e, 500), status=500)

    except UnsupportedKindError as e:
        # Dropped on purpose; GitLab should not redeliver it
        logger.info(f"Ignoring GitLab webhook: {e.message}", extra={"kind": e.kind})
        return JsonResponse(
            create_success_response(f"Event kind ignored: {e.kind}"), status=200
        )

    except WebhookError as e:
        logger.warning(f"Webhook validation error for GitLab: {str(e)}")
        return JsonResponse(create_error_response(e, 400), status=400)

    except Exception as e:
        logger.error("Unexpected error in GitLab webhook", exc_info=True)
        return JsonResponse(create_error_response(e, 500), status=500)


@require_http_methods(["GET"])
def health_check(request: HttpRequest) -> JsonResponse:
    """Health check endpoint"""
    return JsonResponse({"status": "healthy", "service": "webhook-processor"})
