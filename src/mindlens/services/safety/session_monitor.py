"""
Session Monitor

Crisis keyword detection for live counseling session transcripts.

Active sessions live in a MonitoringContext owned by the caller, so
two contexts never see each other's sessions.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional

from mindlens.config.logging_config import get_logger

logger = get_logger(__name__)

CRISIS_KEYWORDS = (
    "suicide",
    "kill myself",
    "end my life",
    "want to die",
    "better off dead",
    "hurt myself",
)


@dataclass(frozen=True)
class TranscriptAnalysis:
    safe: bool
    concerns: tuple[str, ...] = ()


@dataclass
class MonitoredSession:
    session_id: str
    user_id: str
    started_at: datetime
    concerns: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class SessionSummary:
    session_id: str
    duration_seconds: float
    concern_count: int


@dataclass
class MonitoringContext:
    """Registry of sessions under monitoring, scoped to its owner."""

    sessions: dict[str, MonitoredSession] = field(default_factory=dict)

    def get(self, session_id: str) -> Optional[MonitoredSession]:
        return self.sessions.get(session_id)


class SessionMonitor:
    """
    Monitors counseling session transcripts for crisis language.

    Usage:
        context = MonitoringContext()
        monitor = SessionMonitor(context)
        monitor.start("MS-1", "user-123")
        analysis = monitor.analyze_transcript("MS-1", text)
        summary = monitor.end("MS-1")
    """

    def __init__(self, context: MonitoringContext, keywords: tuple[str, ...] = CRISIS_KEYWORDS) -> None:
        self._context = context
        self._keywords = keywords

    def start(self, session_id: str, user_id: str) -> MonitoredSession:
        session = MonitoredSession(
            session_id=session_id,
            user_id=user_id,
            started_at=datetime.now(timezone.utc),
        )
        self._context.sessions[session_id] = session
        logger.info("Session monitoring started", session_id=session_id, user_id=user_id)
        return session

    def analyze_transcript(self, session_id: str, transcript: str) -> TranscriptAnalysis:
        """Detect crisis keywords (case-insensitive substring match)."""
        lowered = transcript.lower()
        concerns = tuple(
            f'Crisis keyword detected: "{keyword}"'
            for keyword in self._keywords
            if keyword in lowered
        )

        session = self._context.get(session_id)
        if session is not None:
            session.concerns.extend(concerns)

        if concerns:
            logger.warning(
                "Safety concerns detected in session",
                session_id=session_id,
                concern_count=len(concerns),
                action="alert_counselor",
            )

        return TranscriptAnalysis(safe=not concerns, concerns=concerns)

    def end(self, session_id: str) -> Optional[SessionSummary]:
        session = self._context.sessions.pop(session_id, None)
        if session is None:
            return None

        duration = (datetime.now(timezone.utc) - session.started_at).total_seconds()
        logger.info(
            "Session monitoring completed",
            session_id=session_id,
            duration_seconds=round(duration, 1),
            concern_count=len(session.concerns),
        )
        return SessionSummary(
            session_id=session_id,
            duration_seconds=duration,
            concern_count=len(session.concerns),
        )
