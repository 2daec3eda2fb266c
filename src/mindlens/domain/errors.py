"""
Error Taxonomy

Typed errors raised across the assessment pipeline.

Fatal (propagated to the caller):
- MalformedInputError: invalid response vector, raised before any I/O
- AuditWriteError: a crisis alert could not be recorded
- EncryptionError / StorageUploadError: no stored encrypted record

Soft (logged and surfaced as flags on result objects):
- NotificationDispatchError
- AnalyticsForwardError
- EmotionAnalysisError
"""

from typing import Any, Optional


class MindLensError(Exception):
    """Base exception for pipeline errors."""

    def __init__(
        self,
        message: str,
        collaborator: str = "core",
        is_retryable: bool = False,
        original_error: Optional[BaseException] = None,
    ) -> None:
        super().__init__(message)
        self.collaborator = collaborator
        self.is_retryable = is_retryable
        self.original_error = original_error
        # Set by the submission pipeline once the risk check exists
        self.safety_check: Any = None
        self.crisis_alert: Any = None


class MalformedInputError(MindLensError):
    """Questionnaire responses have the wrong shape or out-of-range values."""

    def __init__(self, message: str, *, field: str = "responses") -> None:
        super().__init__(message, collaborator="risk_engine")
        self.field = field


class NotificationDispatchError(MindLensError):
    """A notification collaborator call failed, timed out, or raised."""

    def __init__(
        self,
        channel: str,
        reason: str,
        original_error: Optional[BaseException] = None,
    ) -> None:
        super().__init__(
            f"Notification via {channel} failed: {reason}",
            collaborator="notifications",
            is_retryable=True,
            original_error=original_error,
        )
        self.channel = channel
        self.reason = reason


class AuditWriteError(MindLensError):
    """
    The mandatory audit-trail write failed.

    SAFETY_CRITICAL: Always propagated. An alert that cannot be
    recorded is worse than a slow alert.
    """

    def __init__(
        self,
        alert_id: str,
        reason: str,
        original_error: Optional[BaseException] = None,
    ) -> None:
        super().__init__(
            f"Audit write failed for alert {alert_id}: {reason}",
            collaborator="audit",
            is_retryable=False,
            original_error=original_error,
        )
        self.alert_id = alert_id


class AnalyticsForwardError(MindLensError):
    """Forwarding the de-identified record failed (best-effort step)."""

    def __init__(self, reason: str, original_error: Optional[BaseException] = None) -> None:
        super().__init__(
            f"Analytics forwarding failed: {reason}",
            collaborator="analytics",
            is_retryable=True,
            original_error=original_error,
        )


class EmotionAnalysisError(MindLensError):
    """The emotion-analysis collaborator failed; result treated as unknown."""

    def __init__(self, reason: str, original_error: Optional[BaseException] = None) -> None:
        super().__init__(
            f"Emotion analysis failed: {reason}",
            collaborator="emotion",
            is_retryable=True,
            original_error=original_error,
        )


class EncryptionError(MindLensError):
    """Encryption, decryption or key handling failed."""

    def __init__(self, reason: str, original_error: Optional[BaseException] = None) -> None:
        super().__init__(
            f"Encryption failed: {reason}",
            collaborator="crypto",
            is_retryable=False,
            original_error=original_error,
        )


class StorageUploadError(MindLensError):
    """
    Uploading the encrypted payload failed.

    The caller must retry the whole submission; the key is
    regenerated on retry and never reused.
    """

    def __init__(
        self,
        locator_hint: str,
        reason: str,
        original_error: Optional[BaseException] = None,
    ) -> None:
        super().__init__(
            f"Upload to {locator_hint} failed: {reason}",
            collaborator="storage",
            is_retryable=True,
            original_error=original_error,
        )
        self.locator_hint = locator_hint
