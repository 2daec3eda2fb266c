"""
Webhook Notification Client

Delivers crisis notifications to the notification gateway over HTTPS.

Endpoints (relative to the configured base URL):
- POST /emergency-services
- POST /crisis-counselor
- POST /counselor
- POST /emergency-resources
"""

from typing import Optional

import httpx
from tenacity import (
    AsyncRetrying,
    RetryError,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type,
)

from mindlens.config import get_settings
from mindlens.config.logging_config import get_logger
from mindlens.domain.models.safety_models import CrisisAlert
from mindlens.infrastructure.notifications.client import (
    NotificationClient,
    NotificationResult,
)
from mindlens.services.safety.emergency_resources import EmergencyResourceResolver

logger = get_logger(__name__)


class _RetryableStatus(Exception):
    """Raised internally for 5xx/429 responses so tenacity retries them."""


class WebhookNotifier(NotificationClient):
    """
    httpx-based notification gateway client.

    Transport errors and non-2xx responses are retried, then reported
    as failed NotificationResults. Nothing is raised to the caller.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        api_token: Optional[str] = None,
        retry_attempts: Optional[int] = None,
        timeout_seconds: Optional[float] = None,
        resource_resolver: Optional[EmergencyResourceResolver] = None,
        country_code: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        settings = get_settings()

        self._base_url = (base_url or settings.notifications.base_url).rstrip("/")
        self._api_token = api_token or settings.notifications.api_token.get_secret_value()
        self._retry_attempts = retry_attempts or settings.notifications.retry_attempts
        self._timeout = timeout_seconds or settings.timeouts.notification
        self._resources = resource_resolver or EmergencyResourceResolver()
        self._country_code = country_code or settings.default_country_code
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            headers = {"Content-Type": "application/json"}
            if self._api_token:
                headers["Authorization"] = f"Bearer {self._api_token}"
            self._client = httpx.AsyncClient(
                base_url=self._base_url,
                headers=headers,
                timeout=self._timeout,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def _post(self, channel: str, path: str, payload: dict) -> NotificationResult:
        client = self._get_client()
        try:
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(self._retry_attempts),
                wait=wait_exponential(multiplier=0.2, min=0.2, max=2),
                retry=retry_if_exception_type((httpx.TransportError, _RetryableStatus)),
            ):
                with attempt:
                    response = await client.post(path, json=payload)
                    if response.status_code == 429 or response.status_code >= 500:
                        raise _RetryableStatus(f"HTTP {response.status_code}")
        except RetryError as e:
            cause = e.last_attempt.exception()
            logger.error("Notification delivery failed", channel=channel, error=str(cause))
            return NotificationResult(channel=channel, success=False, error=str(cause))
        except httpx.HTTPError as e:
            logger.error("Notification request error", channel=channel, error=str(e))
            return NotificationResult(channel=channel, success=False, error=str(e))

        if response.is_success:
            return NotificationResult(channel=channel, success=True)

        logger.error("Notification rejected", channel=channel, status_code=response.status_code)
        return NotificationResult(
            channel=channel,
            success=False,
            error=f"HTTP {response.status_code}",
        )

    def _alert_payload(self, alert: CrisisAlert) -> dict:
        return {
            "alert_id": alert.alert_id,
            "user_id": alert.user_id,
            "session_id": alert.session_id,
            "severity": alert.severity.label,
            "triggers": list(alert.triggers),
            "timestamp": alert.timestamp.isoformat(),
        }

    async def notify_emergency_services(self, alert: CrisisAlert) -> NotificationResult:
        payload = {**self._alert_payload(alert), "protocol": "immediate_response_required"}
        return await self._post("emergency_services", "/emergency-services", payload)

    async def alert_crisis_counselor(self, alert: CrisisAlert) -> NotificationResult:
        payload = {**self._alert_payload(alert), "response_time": "within_5_minutes"}
        return await self._post("crisis_counselor", "/crisis-counselor", payload)

    async def notify_counselor(self, alert: CrisisAlert) -> NotificationResult:
        payload = {**self._alert_payload(alert), "recommendation": "safety_plan"}
        return await self._post("counselor", "/counselor", payload)

    async def display_emergency_resources(self, user_id: Optional[str]) -> NotificationResult:
        payload = {
            "user_id": user_id,
            "message": self._resources.format_crisis_message(self._country_code),
        }
        return await self._post("emergency_resources", "/emergency-resources", payload)
