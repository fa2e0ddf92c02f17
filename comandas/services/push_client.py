"""Web Push transport client (VAPID) built on pywebpush."""
import logging
from typing import Any, Dict, Optional

import requests
from flask import Flask, current_app
from pywebpush import webpush, WebPushException

from comandas.exceptions import PushDeliveryError, PushSubscriptionGoneError

logger = logging.getLogger(__name__)

# Status the push service returns once a subscription has been unregistered
GONE_STATUS = 410


class WebPushClient:
    """Cliente para enviar notificaciones Web Push a un endpoint de suscripción."""

    def __init__(
        self,
        vapid_private_key: str,
        vapid_subject: str,
        ttl: int = 86400,
        timeout: Optional[int] = 10
    ):
        """
        Initialize the push client.

        Args:
            vapid_private_key: VAPID private key (base64url or PEM path)
            vapid_subject: Contact URI sent in the VAPID claims (mailto: or https:)
            ttl: Seconds the push service should keep an undelivered message
            timeout: HTTP timeout for each delivery
        """
        self.vapid_private_key = vapid_private_key
        self.vapid_subject = vapid_subject
        self.ttl = ttl
        self.timeout = timeout

    def is_configured(self) -> bool:
        return bool(self.vapid_private_key and self.vapid_subject)

    def send(self, subscription_info: Dict[str, Any], payload: str) -> None:
        """
        Deliver one payload to one subscription.

        Raises:
            PushSubscriptionGoneError: The endpoint no longer exists (HTTP 410)
            PushDeliveryError: Any other failure (rate limit, network, config)
        """
        endpoint = subscription_info.get('endpoint')

        if not self.is_configured():
            raise PushDeliveryError('VAPID no está configurado', endpoint=endpoint)

        try:
            webpush(
                subscription_info=subscription_info,
                data=payload,
                vapid_private_key=self.vapid_private_key,
                # webpush adds aud/exp to the claims dict, so each call gets its own
                vapid_claims={'sub': self.vapid_subject},
                ttl=self.ttl,
                timeout=self.timeout
            )
        except WebPushException as e:
            status = e.response.status_code if e.response is not None else None
            if status == GONE_STATUS:
                raise PushSubscriptionGoneError(endpoint, upstream_status=status) from e
            raise PushDeliveryError(str(e), endpoint=endpoint, upstream_status=status) from e
        except requests.RequestException as e:
            raise PushDeliveryError(f'Error de red enviando push: {e}', endpoint=endpoint) from e


def init_push(app: Flask) -> WebPushClient:
    """Build the push client from app config and attach it to the app."""
    client = WebPushClient(
        vapid_private_key=app.config.get('VAPID_PRIVATE_KEY', ''),
        vapid_subject=app.config.get('VAPID_SUBJECT', ''),
        ttl=app.config.get('PUSH_TTL', 86400),
        timeout=app.config.get('PUSH_TIMEOUT', 10)
    )
    if not client.is_configured():
        logger.warning("[PUSH] VAPID keys missing. Push notifications will fail until configured.")
    app.extensions['push_client'] = client
    return client


def get_push_client():
    """Get the push client attached to the current app."""
    client = current_app.extensions.get('push_client')
    if client is None:
        raise RuntimeError("Push client not initialized.")
    return client
