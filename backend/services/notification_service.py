"""
Reset-code delivery.

The real delivery channel (WhatsApp, SMS) lives outside this service. Codes
are either written to the log (development) or POSTed to a webhook that the
messaging bot consumes. Delivery is fire-and-forget: failures are logged but
never raised, so a flaky channel cannot block a reset request.
"""

import httpx
from loguru import logger

from helpers.masking import mask_identifier
from models.config import settings


class NotificationService:
    """Hand reset codes to the configured delivery channel."""

    @staticmethod
    def _post_webhook(payload: dict[str, str | int]) -> bool:
        url = settings.NOTIFIER_WEBHOOK_URL
        if not url:
            logger.warning("Webhook notifier selected but NOTIFIER_WEBHOOK_URL unset")
            return False

        try:
            with httpx.Client(timeout=settings.NOTIFIER_TIMEOUT_SECONDS) as client:
                response = client.post(url, json=payload)
                response.raise_for_status()
            return True
        except httpx.TimeoutException:
            logger.warning("Notifier webhook timed out")
            return False
        except httpx.HTTPStatusError as e:
            logger.warning(
                f"Notifier webhook returned HTTP {e.response.status_code}"
            )
            return False
        except httpx.HTTPError as e:
            logger.warning(f"Notifier webhook error: {e}")
            return False

    @classmethod
    def send_reset_code(
        cls, account_id: str, recipient: str | None, code: str, expires_in_seconds: int
    ) -> bool:
        """
        Deliver a password reset code.

        Args:
            account_id: Account the code belongs to
            recipient: Contact number to deliver to (falls back to account_id)
            code: The reset code
            expires_in_seconds: Code lifetime, included in the message

        Returns:
            True if the channel accepted the message, False otherwise
        """
        destination = recipient or account_id
        minutes = max(1, expires_in_seconds // 60)

        if settings.NOTIFIER_PROVIDER == "webhook":
            sent = cls._post_webhook(
                {
                    "to": destination,
                    "account_id": account_id,
                    "message": (
                        f"Your password reset code is {code}. "
                        f"It expires in {minutes} minutes."
                    ),
                    "expires_in_seconds": expires_in_seconds,
                }
            )
            if sent:
                logger.info(
                    "Reset code dispatched",
                    recipient=mask_identifier(destination),
                )
            return sent

        # Console provider: code only appears outside production logs
        if settings.ENVIRONMENT == "production":
            logger.info(
                "Reset code generated (console notifier)",
                recipient=mask_identifier(destination),
            )
        else:
            logger.info(
                f"Reset code for {mask_identifier(destination)}: {code}"
            )
        return True
