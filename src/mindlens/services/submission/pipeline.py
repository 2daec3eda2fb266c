"""
Encrypted Submission Pipeline

Orchestrates one assessment submission:

1. Validate and score the responses (no I/O before this succeeds)
2. Encrypt the canonical record under a fresh per-submission key
3. Store the ciphertext (and the wrapped key when escrow is enabled)
4. Run emotion analysis on the face image, concurrently with
5. The safety response (never conditional on consent)
6. Forward a de-identified record when the user consented

SAFETY-CRITICAL: The safety response runs even when storage fails and
is shielded from cancellation of the caller. If the caller goes away
mid-flight the response keeps running and an "abandoned submission"
event is raised for manual verification.

PRIVACY: The plaintext record, the raw face image and the key never
leave this call. Storage only ever receives ciphertext.
"""

import asyncio
from datetime import datetime, timezone
from typing import Iterable, Optional
from uuid import uuid4

from mindlens.config import get_settings
from mindlens.config.settings import TimeoutSettings
from mindlens.config.logging_config import get_logger
from mindlens.domain.enums.alert_severity import AlertSeverity
from mindlens.domain.errors import (
    AnalyticsForwardError,
    AuditWriteError,
    EmotionAnalysisError,
    EncryptionError,
    MalformedInputError,
    StorageUploadError,
)
from mindlens.domain.models.emotion import EmotionAnalysisResult
from mindlens.domain.models.questionnaire import QuestionnaireResponse
from mindlens.domain.models.safety_models import CrisisAlert, SafetyCheck
from mindlens.domain.models.submission import EncryptedPayload, SubmissionResult
from mindlens.infrastructure.analytics.client import AnalyticsClient
from mindlens.infrastructure.crypto import (
    KeyWrapper,
    PayloadCipher,
    SubmissionKey,
    canonical_json,
    hash_identifier,
)
from mindlens.infrastructure.emotion.client import EmotionAnalyzer
from mindlens.infrastructure.metrics.prometheus_metrics import (
    track_analytics_forward,
    track_latency,
    track_submission,
)
from mindlens.infrastructure.monitoring.sentry_integration import capture_safety_event
from mindlens.infrastructure.storage.client import StorageClient
from mindlens.services.safety.response_coordinator import SafetyResponseCoordinator
from mindlens.services.submission.deidentify import build_deidentified_record

logger = get_logger(__name__)

ABANDONED_MESSAGE = "Submission abandoned: verify safety response"


def new_session_id(now: datetime) -> str:
    return f"MS-{int(now.timestamp() * 1000)}-{uuid4().hex[:9]}"


def assessment_locator(session_id: str) -> str:
    return f"assessments/{session_id}/data.enc"


def face_scan_locator(session_id: str) -> str:
    return f"face-scans/{session_id}/scan.enc"


def key_locator(session_id: str) -> str:
    return f"keys/{session_id}/key.wrapped"


class _EncryptedSubmission:
    """Ciphertexts produced under one submission key."""

    def __init__(
        self,
        record: EncryptedPayload,
        face_scan: Optional[EncryptedPayload],
        wrapped_key: Optional[EncryptedPayload],
    ) -> None:
        self.record = record
        self.face_scan = face_scan
        self.wrapped_key = wrapped_key


class EncryptedSubmissionPipeline:
    """
    Per-submission orchestration of encryption, storage, emotion
    analysis, safety response and research forwarding.

    Each submit() call owns its own key, SafetyCheck and CrisisAlert;
    nothing is shared between calls.

    Usage:
        pipeline = EncryptedSubmissionPipeline(storage, coordinator, analytics, emotion)
        result = await pipeline.submit("user-123", responses, face_image=jpeg, consent_to_research=True)
    """

    def __init__(
        self,
        storage: StorageClient,
        coordinator: SafetyResponseCoordinator,
        analytics: Optional[AnalyticsClient] = None,
        emotion_analyzer: Optional[EmotionAnalyzer] = None,
        key_wrapper: Optional[KeyWrapper] = None,
        cipher: Optional[PayloadCipher] = None,
        timeouts: Optional[TimeoutSettings] = None,
    ) -> None:
        self._storage = storage
        self._coordinator = coordinator
        self._analytics = analytics
        self._emotion = emotion_analyzer
        self._key_wrapper = key_wrapper
        self._cipher = cipher or PayloadCipher()
        self._timeouts = timeouts or get_settings().timeouts
        # Safety responses that outlived a cancelled submit()
        self._abandoned: set[asyncio.Task] = set()

    async def submit(
        self,
        user_id: str,
        responses: QuestionnaireResponse | Iterable[int],
        face_image: Optional[bytes] = None,
        consent_to_research: bool = False,
    ) -> SubmissionResult:
        """
        Process one assessment submission.

        Returns:
            SubmissionResult

        Raises:
            MalformedInputError: Invalid responses (nothing stored or sent)
            EncryptionError: Record could not be encrypted
            StorageUploadError: Encrypted record not stored
            AuditWriteError: Crisis alert not recorded
        """
        submitted_at = datetime.now(timezone.utc)
        session_id = new_session_id(submitted_at)
        log = logger.bind(session_id=session_id)

        try:
            questionnaire = QuestionnaireResponse.from_answers(responses)
        except MalformedInputError:
            track_submission("malformed")
            raise

        engine = self._coordinator.engine
        check, severity = engine.assess_and_classify(
            questionnaire,
            user_id=user_id,
            session_id=session_id,
        )

        # Safety response starts as soon as the check exists; it is
        # awaited only through shield() so caller cancellation cannot stop it
        safety_task = asyncio.create_task(self._coordinator.respond(check))

        try:
            storage_locator, stored_key_locator, face_payload = await self._store_record(
                user_id, session_id, submitted_at, questionnaire, check, face_image
            )
        except (EncryptionError, StorageUploadError) as e:
            track_submission("storage_failed")
            log.error("Encrypted record not stored", error=str(e))
            e.safety_check = check
            try:
                e.crisis_alert = await self._await_safety(safety_task, check)
            except AuditWriteError as audit_error:
                track_submission("audit_failed")
                audit_error.safety_check = check
                raise
            raise
        except asyncio.CancelledError:
            self._abandon(safety_task, session_id, check)
            raise

        emotion: Optional[EmotionAnalysisResult] = None
        face_locator: Optional[str] = None
        if face_image and face_payload is not None:
            emotion_task = asyncio.create_task(
                self._analyze_face(session_id, face_image, face_payload)
            )
            try:
                emotion, face_locator = await emotion_task
            except asyncio.CancelledError:
                self._abandon(safety_task, session_id, check)
                raise

        try:
            alert = await self._await_safety(safety_task, check)
        except AuditWriteError as e:
            track_submission("audit_failed")
            e.safety_check = check
            raise

        analytics_forwarded = False
        if consent_to_research:
            analytics_forwarded = await self._forward_analytics(
                session_id, check, severity, emotion, submitted_at
            )
        else:
            track_analytics_forward("skipped")

        track_submission("completed")
        log.info(
            "Submission completed",
            severity=severity.label,
            analytics_forwarded=analytics_forwarded,
            emotion_available=emotion is not None,
            notification_partial_failure=alert.partial_failure,
        )

        return SubmissionResult(
            session_id=session_id,
            score=check.score,
            storage_locator=storage_locator,
            safety_check=check,
            crisis_alert=alert,
            emotion_analysis=emotion,
            face_scan_locator=face_locator,
            key_locator=stored_key_locator,
            analytics_forwarded=analytics_forwarded,
        )

    # =========================================================================
    # ENCRYPTION AND STORAGE
    # =========================================================================

    def _encrypt(
        self,
        user_id: str,
        session_id: str,
        submitted_at: datetime,
        questionnaire: QuestionnaireResponse,
        score: int,
        face_image: Optional[bytes],
    ) -> _EncryptedSubmission:
        """Encrypt everything under one fresh key; the key is zeroed on return."""
        plaintext = canonical_json({
            "user_id": user_id,
            "session_id": session_id,
            "timestamp": submitted_at.isoformat(),
            "responses": list(questionnaire),
            "score": score,
        })
        aad = session_id.encode("utf-8")

        with SubmissionKey.generate() as key:
            record = self._cipher.encrypt(plaintext, key, aad)
            face_scan = self._cipher.encrypt(face_image, key, aad) if face_image else None
            wrapped = self._key_wrapper.wrap(key, session_id) if self._key_wrapper else None

        return _EncryptedSubmission(record=record, face_scan=face_scan, wrapped_key=wrapped)

    async def _store_record(
        self,
        user_id: str,
        session_id: str,
        submitted_at: datetime,
        questionnaire: QuestionnaireResponse,
        check: SafetyCheck,
        face_image: Optional[bytes],
    ) -> tuple[str, Optional[str], Optional[EncryptedPayload]]:
        encrypted = self._encrypt(
            user_id, session_id, submitted_at, questionnaire, check.score, face_image
        )

        metadata = {
            "session_id": session_id,
            "owner": hash_identifier(user_id),
            "algorithm": encrypted.record.algorithm,
            "content": "assessment",
        }
        receipt = await self._upload(
            assessment_locator(session_id),
            self._storage.upload(assessment_locator(session_id), encrypted.record.to_bytes(), metadata),
        )

        stored_key_locator = None
        if encrypted.wrapped_key is not None:
            key_receipt = await self._upload(
                key_locator(session_id),
                self._storage.upload_blob(key_locator(session_id), encrypted.wrapped_key.to_bytes()),
            )
            stored_key_locator = key_receipt.locator

        logger.info(
            "Encrypted record stored",
            session_id=session_id,
            backend=self._storage.backend_name,
            size_bytes=receipt.size_bytes,
            key_escrowed=stored_key_locator is not None,
        )
        return receipt.locator, stored_key_locator, encrypted.face_scan

    async def _upload(self, locator_hint: str, call):
        try:
            with track_latency("storage"):
                return await asyncio.wait_for(call, timeout=self._timeouts.storage)
        except StorageUploadError:
            raise
        except asyncio.TimeoutError as e:
            raise StorageUploadError(
                locator_hint, f"timed out after {self._timeouts.storage}s", original_error=e
            ) from e
        except Exception as e:
            raise StorageUploadError(locator_hint, str(e) or type(e).__name__, original_error=e) from e

    # =========================================================================
    # EMOTION ANALYSIS
    # =========================================================================

    async def _analyze_face(
        self,
        session_id: str,
        face_image: bytes,
        face_payload: EncryptedPayload,
    ) -> tuple[Optional[EmotionAnalysisResult], Optional[str]]:
        """
        Upload the encrypted face scan and analyze the raw image.

        Both halves are best-effort; failures are logged and reported
        as None. Never raises except on cancellation.
        """
        upload = asyncio.create_task(self._upload_face_scan(session_id, face_payload))
        emotion: Optional[EmotionAnalysisResult] = None

        if self._emotion is None:
            logger.info("No emotion analyzer configured, emotion treated as unknown", session_id=session_id)
        else:
            try:
                with track_latency("emotion"):
                    emotion = await asyncio.wait_for(
                        self._emotion.analyze(face_image), timeout=self._timeouts.emotion
                    )
            except asyncio.TimeoutError as e:
                error = EmotionAnalysisError(f"timed out after {self._timeouts.emotion}s", original_error=e)
                logger.warning("Emotion analysis failed", session_id=session_id, error=str(error))
            except asyncio.CancelledError:
                upload.cancel()
                raise
            except Exception as e:
                error = e if isinstance(e, EmotionAnalysisError) else EmotionAnalysisError(str(e), original_error=e)
                logger.warning("Emotion analysis failed", session_id=session_id, error=str(error))

        return emotion, await upload

    async def _upload_face_scan(self, session_id: str, face_payload: EncryptedPayload) -> Optional[str]:
        hint = face_scan_locator(session_id)
        try:
            receipt = await self._upload(
                hint, self._storage.upload_blob(hint, face_payload.to_bytes())
            )
        except StorageUploadError as e:
            logger.warning("Encrypted face scan not stored", session_id=session_id, error=str(e))
            return None
        return receipt.locator

    # =========================================================================
    # SAFETY RESPONSE
    # =========================================================================

    async def _await_safety(self, safety_task: asyncio.Task, check: SafetyCheck) -> CrisisAlert:
        """Await the shielded safety response; escalate if the caller is cancelled."""
        try:
            return await asyncio.shield(safety_task)
        except asyncio.CancelledError:
            self._abandon(safety_task, check.session_id, check)
            raise

    def _abandon(self, safety_task: asyncio.Task, session_id: str, check: SafetyCheck) -> None:
        """Caller cancelled: keep the safety response alive and escalate."""
        track_submission("abandoned")
        logger.critical(
            ABANDONED_MESSAGE,
            session_id=session_id,
            requires_immediate_action=check.requires_immediate_action,
            safety_response_done=safety_task.done(),
        )
        capture_safety_event(
            ABANDONED_MESSAGE,
            level="error",
            extra={
                "session_id": session_id,
                "requires_immediate_action": check.requires_immediate_action,
                "safety_response_done": safety_task.done(),
            },
        )

        if not safety_task.done():
            self._abandoned.add(safety_task)
            safety_task.add_done_callback(lambda t: self._finish_abandoned(t, session_id))
        else:
            self._finish_abandoned(safety_task, session_id, tracked=False)

    def _finish_abandoned(self, task: asyncio.Task, session_id: str, tracked: bool = True) -> None:
        if tracked:
            self._abandoned.discard(task)
        if task.cancelled():
            logger.critical("Safety response cancelled for abandoned submission", session_id=session_id)
            return
        error = task.exception()
        if error is not None:
            logger.critical(
                "Safety response failed for abandoned submission",
                session_id=session_id,
                error=str(error),
            )
        else:
            logger.warning(
                "Safety response completed for abandoned submission",
                session_id=session_id,
                alert_id=task.result().alert_id,
            )

    async def drain(self) -> None:
        """Wait for safety responses that outlived cancelled submissions."""
        if self._abandoned:
            await asyncio.gather(*list(self._abandoned), return_exceptions=True)

    # =========================================================================
    # ERASURE
    # =========================================================================

    async def erase(self, session_id: str) -> list[str]:
        """
        Delete every stored object of one submission.

        The escrowed key goes first: once it is gone the record is
        unreadable even if a later delete fails. The crisis alert audit
        trail is append-only and is not touched.

        Returns:
            Locators of the objects that were deleted (empty if none existed)

        Raises:
            StorageUploadError: The storage backend failed or timed out
        """
        deleted: list[str] = []
        for hint in (key_locator(session_id), assessment_locator(session_id), face_scan_locator(session_id)):
            locator = self._storage.locator_for(hint)
            try:
                removed = await asyncio.wait_for(
                    self._storage.delete(locator), timeout=self._timeouts.storage
                )
            except asyncio.TimeoutError as e:
                raise StorageUploadError(
                    hint, f"delete timed out after {self._timeouts.storage}s", original_error=e
                ) from e
            except StorageUploadError:
                raise
            except Exception as e:
                raise StorageUploadError(hint, f"delete failed: {e}", original_error=e) from e
            if removed:
                deleted.append(locator)

        logger.info("Submission erased", session_id=session_id, objects_deleted=len(deleted))
        return deleted

    # =========================================================================
    # ANALYTICS
    # =========================================================================

    async def _forward_analytics(
        self,
        session_id: str,
        check: SafetyCheck,
        severity: AlertSeverity,
        emotion: Optional[EmotionAnalysisResult],
        submitted_at: datetime,
    ) -> bool:
        """Best-effort research forwarding. Never raises except on cancellation."""
        if self._analytics is None:
            track_analytics_forward("skipped")
            return False

        record = build_deidentified_record(session_id, check, severity, emotion, submitted_at)
        error: Optional[AnalyticsForwardError] = None
        try:
            with track_latency("analytics"):
                result = await asyncio.wait_for(
                    self._analytics.insert(record), timeout=self._timeouts.analytics
                )
            if not result.success:
                error = AnalyticsForwardError(result.error or "insert rejected")
        except asyncio.TimeoutError as e:
            error = AnalyticsForwardError(f"timed out after {self._timeouts.analytics}s", original_error=e)
        except Exception as e:
            error = AnalyticsForwardError(str(e) or type(e).__name__, original_error=e)

        if error is not None:
            track_analytics_forward("failure")
            logger.warning("Research record not forwarded", session_id=session_id, error=str(error))
            return False

        track_analytics_forward("success")
        return True
