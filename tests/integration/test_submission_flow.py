"""
Integration Tests - Submission Flow

Tests the complete validate -> encrypt -> store -> respond -> forward
pipeline against in-memory collaborators.
"""

import asyncio
import json

import pytest

from mindlens.config import Settings
from mindlens.domain.enums.alert_severity import AlertSeverity
from mindlens.domain.errors import (
    AuditWriteError,
    EmotionAnalysisError,
    MalformedInputError,
    StorageUploadError,
)
from mindlens.domain.models.submission import EncryptedPayload
from mindlens.infrastructure.analytics.memory_client import InMemoryAnalyticsClient
from mindlens.infrastructure.audit.memory_client import InMemoryAuditTrail
from mindlens.infrastructure.crypto import (
    KeyWrapper,
    PayloadCipher,
    generate_key_encryption_key,
    hash_identifier,
)
from mindlens.infrastructure.emotion.memory_client import StaticEmotionAnalyzer
from mindlens.infrastructure.notifications.memory_client import RecordingNotifier
from mindlens.infrastructure.storage.memory_client import InMemoryStorageClient
from mindlens.services.safety.response_coordinator import SafetyResponseCoordinator
from mindlens.services.submission.pipeline import EncryptedSubmissionPipeline

ALL_ZERO = [0, 0, 0, 0, 0, 0, 0, 0, 0]
ALL_MAX = [3, 3, 3, 3, 3, 3, 3, 3, 3]
FACE_IMAGE = b"\xff\xd8\xff\xe0fake-jpeg-bytes"


def build_pipeline(
    test_settings: Settings,
    storage: InMemoryStorageClient | None = None,
    notifier: RecordingNotifier | None = None,
    audit: InMemoryAuditTrail | None = None,
    analytics: InMemoryAnalyticsClient | None = None,
    emotion: StaticEmotionAnalyzer | None = None,
    key_wrapper: KeyWrapper | None = None,
) -> EncryptedSubmissionPipeline:
    coordinator = SafetyResponseCoordinator(
        notifier=notifier or RecordingNotifier(),
        audit_trail=audit or InMemoryAuditTrail(),
        notification_timeout=test_settings.timeouts.notification,
        audit_timeout=test_settings.timeouts.audit,
    )
    return EncryptedSubmissionPipeline(
        storage=storage or InMemoryStorageClient(),
        coordinator=coordinator,
        analytics=analytics or InMemoryAnalyticsClient(),
        emotion_analyzer=emotion or StaticEmotionAnalyzer(),
        key_wrapper=key_wrapper,
        timeouts=test_settings.timeouts,
    )


class TestSubmissionFlow:
    """Happy-path submission tests."""

    @pytest.mark.asyncio
    async def test_submission_stores_only_ciphertext(
        self,
        pipeline: EncryptedSubmissionPipeline,
        storage: InMemoryStorageClient,
    ) -> None:
        """Test that the stored record is ciphertext and carries no raw identifier."""
        result = await pipeline.submit("user-123456789", [1, 1, 1, 1, 1, 1, 1, 1, 0])

        assert result.session_id.startswith("MS-")
        assert result.score == 8
        assert result.storage_locator == f"gs://test-bucket/assessments/{result.session_id}/data.enc"

        stored = storage.get(result.storage_locator)
        assert stored is not None
        assert b"user-123456789" not in stored.data
        assert b"responses" not in stored.data
        assert stored.metadata["owner"] == hash_identifier("user-123456789")
        assert "user_id" not in stored.metadata

    @pytest.mark.asyncio
    async def test_safety_response_recorded(
        self,
        pipeline: EncryptedSubmissionPipeline,
        notifier: RecordingNotifier,
        audit_trail: InMemoryAuditTrail,
    ) -> None:
        result = await pipeline.submit("user-1", ALL_MAX)

        assert result.requires_immediate_action is True
        assert result.crisis_alert.severity == AlertSeverity.CRITICAL
        assert result.crisis_alert.session_id == result.session_id
        assert notifier.channels_called == ["emergency_services", "crisis_counselor"]
        assert audit_trail.alerts == [result.crisis_alert]

    @pytest.mark.asyncio
    async def test_face_image_analyzed_and_stored_encrypted(
        self,
        pipeline: EncryptedSubmissionPipeline,
        storage: InMemoryStorageClient,
        emotion_analyzer: StaticEmotionAnalyzer,
    ) -> None:
        result = await pipeline.submit("user-1", ALL_ZERO, face_image=FACE_IMAGE)

        assert result.emotion_analysis is not None
        assert result.emotion_analysis.primary_emotion == "Neutral"
        assert emotion_analyzer.calls == [len(FACE_IMAGE)]
        assert result.face_scan_locator == f"gs://test-bucket/face-scans/{result.session_id}/scan.enc"
        assert FACE_IMAGE not in storage.get(result.face_scan_locator).data

    @pytest.mark.asyncio
    async def test_no_face_image_skips_analysis(
        self,
        pipeline: EncryptedSubmissionPipeline,
        emotion_analyzer: StaticEmotionAnalyzer,
    ) -> None:
        result = await pipeline.submit("user-1", ALL_ZERO)

        assert result.emotion_analysis is None
        assert result.face_scan_locator is None
        assert emotion_analyzer.calls == []


class TestConsent:
    """Tests that research forwarding is gated on consent only."""

    @pytest.mark.asyncio
    async def test_no_consent_never_calls_analytics(
        self,
        pipeline: EncryptedSubmissionPipeline,
        analytics: InMemoryAnalyticsClient,
        audit_trail: InMemoryAuditTrail,
    ) -> None:
        """Test that consent=False skips analytics but not the safety response."""
        result = await pipeline.submit("user-1", ALL_MAX, face_image=FACE_IMAGE, consent_to_research=False)

        assert analytics.insert_calls == 0
        assert result.analytics_forwarded is False
        assert audit_trail.append_calls == 1

    @pytest.mark.asyncio
    async def test_consent_forwards_deidentified_record(
        self,
        pipeline: EncryptedSubmissionPipeline,
        analytics: InMemoryAnalyticsClient,
    ) -> None:
        result = await pipeline.submit(
            "user-123", [2, 2, 2, 2, 2, 2, 2, 1, 0], face_image=FACE_IMAGE, consent_to_research=True
        )

        assert result.analytics_forwarded is True
        assert len(analytics.records) == 1
        row = analytics.records[0].to_row()
        assert row["record_id"] == hash_identifier(result.session_id)
        assert row["phq_score"] == 15
        assert row["severity_tier"] == "high"
        assert row["severity_level"] == "severe"
        assert row["primary_emotion"] == "Neutral"
        assert row["consent_research"] is True
        assert "user-123" not in json.dumps(row)
        assert "responses" not in row

    @pytest.mark.asyncio
    async def test_consent_without_face_image_reports_unknown_emotion(
        self,
        pipeline: EncryptedSubmissionPipeline,
        analytics: InMemoryAnalyticsClient,
    ) -> None:
        await pipeline.submit("user-1", ALL_ZERO, consent_to_research=True)

        assert analytics.records[0].primary_emotion == "unknown"

    @pytest.mark.asyncio
    async def test_analytics_failure_is_soft(self, test_settings: Settings) -> None:
        """Test that a raising analytics store leaves the submission intact."""
        audit = InMemoryAuditTrail()
        analytics = InMemoryAnalyticsClient(error=ConnectionError("bigquery unavailable"))
        pipeline = build_pipeline(test_settings, audit=audit, analytics=analytics)

        result = await pipeline.submit("user-1", ALL_MAX, consent_to_research=True)

        assert result.analytics_forwarded is False
        assert analytics.insert_calls == 1
        assert audit.append_calls == 1

    @pytest.mark.asyncio
    async def test_rejected_analytics_insert_is_soft(self, test_settings: Settings) -> None:
        analytics = InMemoryAnalyticsClient(reject_inserts=True)
        pipeline = build_pipeline(test_settings, analytics=analytics)

        result = await pipeline.submit("user-1", ALL_ZERO, consent_to_research=True)

        assert result.analytics_forwarded is False


class TestKeyHandling:
    """Tests that keys are fresh per submission."""

    @pytest.mark.asyncio
    async def test_identical_submissions_use_distinct_ivs_and_ciphertexts(
        self,
        pipeline: EncryptedSubmissionPipeline,
        storage: InMemoryStorageClient,
    ) -> None:
        first = await pipeline.submit("user-1", ALL_ZERO)
        second = await pipeline.submit("user-1", ALL_ZERO)

        a = EncryptedPayload.from_bytes(storage.get(first.storage_locator).data)
        b = EncryptedPayload.from_bytes(storage.get(second.storage_locator).data)
        assert a.iv != b.iv
        assert a.ciphertext != b.ciphertext

    @pytest.mark.asyncio
    async def test_escrowed_keys_differ_and_decrypt_record(self, test_settings: Settings) -> None:
        """Test that escrowed keys are distinct per call and recover the record."""
        storage = InMemoryStorageClient()
        wrapper = KeyWrapper.from_base64(generate_key_encryption_key())
        pipeline = build_pipeline(test_settings, storage=storage, key_wrapper=wrapper)

        first = await pipeline.submit("user-1", ALL_ZERO)
        second = await pipeline.submit("user-1", ALL_ZERO)

        assert first.key_locator == f"gs://mindlens-encrypted-data/keys/{first.session_id}/key.wrapped"
        key_a = wrapper.unwrap(EncryptedPayload.from_bytes(storage.get(first.key_locator).data), first.session_id)
        key_b = wrapper.unwrap(EncryptedPayload.from_bytes(storage.get(second.key_locator).data), second.session_id)
        assert key_a.key_id != key_b.key_id

        payload = EncryptedPayload.from_bytes(storage.get(first.storage_locator).data)
        record = json.loads(PayloadCipher().decrypt(payload, key_a, first.session_id.encode("utf-8")))
        assert record["user_id"] == "user-1"
        assert record["session_id"] == first.session_id
        assert record["responses"] == ALL_ZERO
        assert record["score"] == 0

    @pytest.mark.asyncio
    async def test_no_escrow_by_default(self, pipeline: EncryptedSubmissionPipeline) -> None:
        result = await pipeline.submit("user-1", ALL_ZERO)

        assert result.key_locator is None


class TestFailureSemantics:
    """Tests fatal and soft failure handling."""

    @pytest.mark.asyncio
    async def test_malformed_input_performs_no_io(
        self,
        pipeline: EncryptedSubmissionPipeline,
        storage: InMemoryStorageClient,
        notifier: RecordingNotifier,
        audit_trail: InMemoryAuditTrail,
        analytics: InMemoryAnalyticsClient,
        emotion_analyzer: StaticEmotionAnalyzer,
    ) -> None:
        with pytest.raises(MalformedInputError):
            await pipeline.submit("user-1", [0, 0, 0], face_image=FACE_IMAGE, consent_to_research=True)

        assert storage.objects == {}
        assert notifier.calls == []
        assert audit_trail.append_calls == 0
        assert analytics.insert_calls == 0
        assert emotion_analyzer.calls == []

    @pytest.mark.asyncio
    async def test_emotion_failure_yields_none_and_safety_still_runs(self, test_settings: Settings) -> None:
        """Test that a raising emotion analyzer leaves emotion_analysis None."""
        notifier = RecordingNotifier()
        audit = InMemoryAuditTrail()
        emotion = StaticEmotionAnalyzer(error=EmotionAnalysisError("model endpoint 500"))
        pipeline = build_pipeline(test_settings, notifier=notifier, audit=audit, emotion=emotion)

        result = await pipeline.submit("user-1", ALL_MAX, face_image=FACE_IMAGE)

        assert result.emotion_analysis is None
        assert result.face_scan_locator is not None
        assert notifier.channels_called == ["emergency_services", "crisis_counselor"]
        assert audit.append_calls == 1

    @pytest.mark.asyncio
    async def test_unexpected_emotion_error_is_soft(self, test_settings: Settings) -> None:
        emotion = StaticEmotionAnalyzer(error=ValueError("bad tensor"))
        pipeline = build_pipeline(test_settings, emotion=emotion)

        result = await pipeline.submit("user-1", ALL_ZERO, face_image=FACE_IMAGE)

        assert result.emotion_analysis is None

    @pytest.mark.asyncio
    async def test_storage_failure_still_runs_safety_response(self, test_settings: Settings) -> None:
        """Test that the safety response runs even when the record is not stored."""
        notifier = RecordingNotifier()
        audit = InMemoryAuditTrail()
        analytics = InMemoryAnalyticsClient()
        pipeline = build_pipeline(
            test_settings,
            storage=InMemoryStorageClient(fail_uploads=True),
            notifier=notifier,
            audit=audit,
            analytics=analytics,
        )

        with pytest.raises(StorageUploadError) as exc_info:
            await pipeline.submit("user-1", ALL_MAX, consent_to_research=True)

        error = exc_info.value
        assert error.safety_check.requires_immediate_action is True
        assert error.crisis_alert.severity == AlertSeverity.CRITICAL
        assert audit.append_calls == 1
        assert notifier.channels_called == ["emergency_services", "crisis_counselor"]
        assert analytics.insert_calls == 0

    @pytest.mark.asyncio
    async def test_audit_failure_is_fatal(self, test_settings: Settings) -> None:
        analytics = InMemoryAnalyticsClient()
        pipeline = build_pipeline(
            test_settings,
            audit=InMemoryAuditTrail(reject=True),
            analytics=analytics,
        )

        with pytest.raises(AuditWriteError):
            await pipeline.submit("user-1", ALL_ZERO, consent_to_research=True)

        assert analytics.insert_calls == 0

    @pytest.mark.asyncio
    async def test_audit_failure_carries_safety_check(self, test_settings: Settings) -> None:
        """Test that the caller can still surface resources when the alert is unrecorded."""
        pipeline = build_pipeline(test_settings, audit=InMemoryAuditTrail(reject=True))

        with pytest.raises(AuditWriteError) as exc_info:
            await pipeline.submit("user-1", ALL_MAX)

        assert exc_info.value.safety_check.requires_immediate_action is True
        assert exc_info.value.crisis_alert is None

    @pytest.mark.asyncio
    async def test_storage_and_audit_failure_carries_safety_check(self, test_settings: Settings) -> None:
        audit = InMemoryAuditTrail(reject=True)
        pipeline = build_pipeline(
            test_settings,
            storage=InMemoryStorageClient(fail_uploads=True),
            audit=audit,
        )

        with pytest.raises(AuditWriteError) as exc_info:
            await pipeline.submit("user-1", ALL_MAX)

        assert exc_info.value.safety_check.score == 27
        assert audit.append_calls == 1

    @pytest.mark.asyncio
    async def test_notification_failure_surfaces_as_flag(self, test_settings: Settings) -> None:
        notifier = RecordingNotifier(raising={"counselor": TimeoutError("gateway timeout")})
        pipeline = build_pipeline(test_settings, notifier=notifier)

        result = await pipeline.submit("user-1", ALL_ZERO)

        assert result.notification_partial_failure is True
        assert result.to_dict()["notification_partial_failure"] is True


class TestCancellation:
    """Tests that caller cancellation never drops the safety response."""

    @pytest.mark.asyncio
    async def test_cancelled_submission_completes_safety_response(self, test_settings: Settings) -> None:
        """Test that a caller timeout leaves the safety response running to completion."""
        notifier = RecordingNotifier(hanging={"emergency_services"})
        audit = InMemoryAuditTrail()
        pipeline = build_pipeline(test_settings, notifier=notifier, audit=audit)

        with pytest.raises(asyncio.TimeoutError):
            await asyncio.wait_for(pipeline.submit("user-1", ALL_MAX), timeout=0.05)

        await asyncio.wait_for(pipeline.drain(), timeout=5)

        assert audit.append_calls == 1
        assert notifier.channels_called == ["emergency_services", "crisis_counselor"]
        assert audit.alerts[0].failed_actions != ()


class TestErasure:
    """Tests for deleting a stored submission."""

    @pytest.mark.asyncio
    async def test_erase_removes_record_face_scan_and_key(self, test_settings: Settings) -> None:
        storage = InMemoryStorageClient()
        audit = InMemoryAuditTrail()
        pipeline = build_pipeline(
            test_settings,
            storage=storage,
            audit=audit,
            key_wrapper=KeyWrapper.from_base64(generate_key_encryption_key()),
        )
        result = await pipeline.submit("user-1", ALL_ZERO, face_image=FACE_IMAGE)
        assert len(storage.objects) == 3

        deleted = await pipeline.erase(result.session_id)

        assert deleted[0] == result.key_locator
        assert set(deleted) == {result.key_locator, result.storage_locator, result.face_scan_locator}
        assert storage.objects == {}
        # Crisis alerts stay in the append-only trail
        assert len(audit.alerts) == 1

    @pytest.mark.asyncio
    async def test_erase_leaves_other_sessions(
        self,
        pipeline: EncryptedSubmissionPipeline,
        storage: InMemoryStorageClient,
    ) -> None:
        first = await pipeline.submit("user-1", ALL_ZERO)
        second = await pipeline.submit("user-1", ALL_ZERO)

        await pipeline.erase(first.session_id)

        assert storage.get(first.storage_locator) is None
        assert storage.get(second.storage_locator) is not None

    @pytest.mark.asyncio
    async def test_erase_unknown_session_deletes_nothing(self, pipeline: EncryptedSubmissionPipeline) -> None:
        assert await pipeline.erase("MS-1-000000000") == []
