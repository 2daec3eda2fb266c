"""
Unit Tests for Audit Trail and Notification Gateway

Tests the database-backed audit trail against SQLite and the webhook
notifier against a mocked HTTP transport.
"""

import json

import httpx
import pytest
import pytest_asyncio

from mindlens.config import Settings
from mindlens.config.settings import DatabaseSettings
from mindlens.domain.enums.alert_severity import AlertSeverity, DispatchAction
from mindlens.domain.models.safety_models import CrisisAlert, DispatchOutcome
from mindlens.infrastructure.audit.database_client import DatabaseAuditTrail
from mindlens.infrastructure.database.connection import DatabaseManager
from mindlens.infrastructure.notifications.webhook_client import WebhookNotifier


def make_alert(**overrides) -> CrisisAlert:
    fields = dict(
        severity=AlertSeverity.CRITICAL,
        triggers=("Self-harm ideation reported", "Critical score detected"),
        action_taken="Emergency services notified, crisis counselor alerted",
        escalated=True,
        user_id="user-1",
        session_id="MS-1",
        outcomes=(
            DispatchOutcome(DispatchAction.NOTIFY_EMERGENCY_SERVICES, success=True),
            DispatchOutcome(DispatchAction.ALERT_CRISIS_COUNSELOR, success=False, error="HTTP 503"),
        ),
    )
    fields.update(overrides)
    return CrisisAlert(**fields)


@pytest_asyncio.fixture
async def database():
    settings = Settings(database=DatabaseSettings(url_override="sqlite+aiosqlite:///:memory:"))
    db = DatabaseManager(settings)
    await db.initialize(create_schema=True)
    yield db
    await db.close()


class TestDatabaseAuditTrail:
    """Tests for the append-only audit table."""

    @pytest.mark.asyncio
    async def test_append_persists_alert(self, database: DatabaseManager) -> None:
        audit = DatabaseAuditTrail(database)
        alert = make_alert()

        receipt = await audit.append(alert)

        assert receipt.success is True
        rows = await audit.list_for_session("MS-1")
        assert len(rows) == 1
        row = rows[0]
        assert row.alert_id == alert.alert_id
        assert row.severity == "critical"
        assert row.triggers == list(alert.triggers)
        assert row.escalated is True
        assert row.partial_failure is True
        assert row.outcomes[1] == {
            "action": "alert_crisis_counselor",
            "success": False,
            "error": "HTTP 503",
        }

    @pytest.mark.asyncio
    async def test_duplicate_alert_id_rejected(self, database: DatabaseManager) -> None:
        """Test that re-inserting the same alert is reported as a failed write."""
        audit = DatabaseAuditTrail(database)
        alert = make_alert()
        await audit.append(alert)

        receipt = await audit.append(alert)

        assert receipt.success is False
        assert len(await audit.list_for_session("MS-1")) == 1

    @pytest.mark.asyncio
    async def test_health_check(self, database: DatabaseManager) -> None:
        assert await database.health_check() is True


class TestWebhookNotifier:
    """Tests for the HTTP notification gateway client."""

    @staticmethod
    def make_notifier(handler, retry_attempts: int = 2) -> WebhookNotifier:
        return WebhookNotifier(
            base_url="https://gateway.test/notifications",
            api_token="test-token",
            retry_attempts=retry_attempts,
            timeout_seconds=1.0,
            country_code="US",
            transport=httpx.MockTransport(handler),
        )

    @pytest.mark.asyncio
    async def test_emergency_notification_payload(self) -> None:
        requests: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(202)

        notifier = self.make_notifier(handler)
        alert = make_alert()

        result = await notifier.notify_emergency_services(alert)
        await notifier.close()

        assert result.success is True
        assert result.channel == "emergency_services"
        assert requests[0].url.path == "/notifications/emergency-services"
        assert requests[0].headers["Authorization"] == "Bearer test-token"
        body = json.loads(requests[0].content)
        assert body["alert_id"] == alert.alert_id
        assert body["severity"] == "critical"
        assert body["protocol"] == "immediate_response_required"

    @pytest.mark.asyncio
    async def test_emergency_resources_message(self) -> None:
        bodies: list[dict] = []

        def handler(request: httpx.Request) -> httpx.Response:
            bodies.append(json.loads(request.content))
            return httpx.Response(200)

        notifier = self.make_notifier(handler)

        result = await notifier.display_emergency_resources("user-1")
        await notifier.close()

        assert result.success is True
        assert bodies[0]["user_id"] == "user-1"
        assert "- Emergency: 911" in bodies[0]["message"]

    @pytest.mark.asyncio
    async def test_server_error_retried_then_reported(self) -> None:
        """Test that 5xx responses are retried and end as a failed result."""
        attempts = []

        def handler(request: httpx.Request) -> httpx.Response:
            attempts.append(request)
            return httpx.Response(503)

        notifier = self.make_notifier(handler, retry_attempts=2)

        result = await notifier.alert_crisis_counselor(make_alert())
        await notifier.close()

        assert result.success is False
        assert "503" in result.error
        assert len(attempts) == 2

    @pytest.mark.asyncio
    async def test_client_error_not_retried(self) -> None:
        attempts = []

        def handler(request: httpx.Request) -> httpx.Response:
            attempts.append(request)
            return httpx.Response(400)

        notifier = self.make_notifier(handler, retry_attempts=3)

        result = await notifier.notify_counselor(make_alert(severity=AlertSeverity.LOW))
        await notifier.close()

        assert result.success is False
        assert result.error == "HTTP 400"
        assert len(attempts) == 1

    @pytest.mark.asyncio
    async def test_transport_error_reported(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused")

        notifier = self.make_notifier(handler, retry_attempts=1)

        result = await notifier.notify_counselor(make_alert())
        await notifier.close()

        assert result.success is False
        assert "connection refused" in result.error
