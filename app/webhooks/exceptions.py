import logging
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


class WebhookError(Exception):
    """Base class for webhook-related errors"""

    def __init__(self, message: str, error_code: str = "WEBHOOK_ERROR"):
        self.message = message
        self.error_code = error_code
        super().__init__(message)


class ValidationError(WebhookError):
    """Raised when a required payload field is absent, null or mistyped"""

    def __init__(
        self, message: str = "Invalid webhook payload", field: Optional[str] = None
    ):
        self.field = field
        super().__init__(message, "INVALID_PAYLOAD")

    @classmethod
    def missing(cls, field: str) -> "ValidationError":
        """Build the error for a required field that is absent or null"""
        return cls(f"Missing required field: {field}", field=field)


class UnsupportedKindError(WebhookError):
    """Raised when the event kind is not recognized"""

    def __init__(self, kind: Any = None):
        self.kind = kind
        super().__init__(f"Unsupported event kind: {kind}", "UNSUPPORTED_KIND")


class WebhookSignatureError(WebhookError):
    """Raised when the webhook secret token does not match"""

    def __init__(self, message: str = "Invalid webhook token"):
        super().__init__(message, "INVALID_TOKEN")


class ServiceConfigurationError(WebhookError):
    """Raised when an active project service is missing required settings"""

    def __init__(self, message: str = "Invalid service configuration"):
        super().__init__(message, "INVALID_SERVICE_CONFIGURATION")


def create_error_response(error: Exception, status_code: int = 500) -> Dict[str, Any]:
    """Create a standardized error response that doesn't leak internal details"""

    if isinstance(error, WebhookError):
        # Safe to expose webhook-specific errors
        logger.warning(
            f"Webhook error: {error.error_code}",
            extra={"error_code": error.error_code, "error_message": error.message},
        )
        return {
            "error": {"code": error.error_code, "message": error.message},
            "status": "error",
        }

    # For unexpected errors, log details but return generic message
    logger.error(f"Unexpected error in webhook processing: {str(error)}", exc_info=True)

    if status_code >= 500:
        return {
            "error": {
                "code": "INTERNAL_ERROR",
                "message": "An internal error occurred while processing the webhook",
            },
            "status": "error",
        }

    return {
        "error": {
            "code": "REQUEST_ERROR",
            "message": "The webhook request could not be processed",
        },
        "status": "error",
    }


def create_success_response(
    message: str = "Webhook processed successfully",
) -> Dict[str, Any]:
    """Create a standardized success response"""
    return {"status": "success", "message": message}
