"""
Risk Assessment Engine

Deterministic PHQ-9 risk classification.

SAFETY-CRITICAL: This engine decides whether emergency services are
notified. Identical input always yields an identical SafetyCheck;
the engine performs no I/O and holds no state between calls.

CLINICAL_VALIDATION_REQUIRED: All thresholds are policy constants.
"""

from dataclasses import dataclass
from typing import Iterable, Optional

from mindlens.config.logging_config import get_logger
from mindlens.domain.enums.alert_severity import AlertSeverity
from mindlens.domain.models.questionnaire import (
    MAX_ITEM_SCORE,
    SELF_HARM_QUESTION_INDEX,
    QuestionnaireResponse,
)
from mindlens.domain.models.safety_models import SafetyCheck
from mindlens.infrastructure.metrics.prometheus_metrics import track_risk_assessment

logger = get_logger(__name__)

SELF_HARM_INDICATOR = "Self-harm ideation reported"
CRITICAL_SCORE_INDICATOR = "Critical score detected"
HIGH_RISK_SCORE_INDICATOR = "High-risk score"
MULTIPLE_SEVERE_INDICATOR = "Multiple severe symptoms reported"


@dataclass(frozen=True)
class RiskThresholds:
    """
    Risk policy constants.

    CLINICAL_VALIDATION_REQUIRED: ``medium_indicator_count`` in
    particular has not been validated against a clinical standard.
    """

    critical_score: int = 20
    high_score: int = 15
    self_harm_flag: int = 1
    self_harm_immediate: int = 2
    severe_symptom_count: int = 5
    medium_indicator_count: int = 2


class RiskAssessmentEngine:
    """
    Pure PHQ-9 risk scorer.

    Rules, evaluated in order (indicator order follows rule order):
    1. Self-harm item >= 1: "Self-harm ideation reported", item flagged
    2. Score >= 20: "Critical score detected", else score >= 15: "High-risk score"
    3. Five or more items at 3: "Multiple severe symptoms reported"

    Immediate action is required when the self-harm item is >= 2 or
    the score is >= 20.

    Usage:
        engine = RiskAssessmentEngine()
        check = engine.assess([0, 1, 2, 3, 0, 1, 2, 3, 0])
        severity = engine.classify_severity(check)
    """

    def __init__(self, thresholds: Optional[RiskThresholds] = None) -> None:
        self.thresholds = thresholds or RiskThresholds()

    def assess(
        self,
        responses: QuestionnaireResponse | Iterable[int],
        *,
        user_id: Optional[str] = None,
        session_id: Optional[str] = None,
    ) -> SafetyCheck:
        """
        Score a response vector.

        Raises:
            MalformedInputError: Wrong length or out-of-range values
        """
        questionnaire = QuestionnaireResponse.from_answers(responses)
        t = self.thresholds

        score = questionnaire.total
        self_harm = questionnaire.self_harm_score
        indicators: list[str] = []
        flagged: list[int] = []

        if self_harm >= t.self_harm_flag:
            indicators.append(SELF_HARM_INDICATOR)
            flagged.append(SELF_HARM_QUESTION_INDEX)

        if score >= t.critical_score:
            indicators.append(CRITICAL_SCORE_INDICATOR)
        elif score >= t.high_score:
            indicators.append(HIGH_RISK_SCORE_INDICATOR)

        if questionnaire.count_at(MAX_ITEM_SCORE) >= t.severe_symptom_count:
            indicators.append(MULTIPLE_SEVERE_INDICATOR)

        requires_immediate_action = (
            self_harm >= t.self_harm_immediate or score >= t.critical_score
        )

        return SafetyCheck(
            score=score,
            risk_indicators=tuple(indicators),
            flagged_responses=tuple(flagged),
            requires_immediate_action=requires_immediate_action,
            user_id=user_id,
            session_id=session_id,
        )

    def classify_severity(self, check: SafetyCheck) -> AlertSeverity:
        """
        Map a SafetyCheck to a severity tier.

        First match wins: critical, high, medium, low.
        """
        if check.requires_immediate_action:
            return AlertSeverity.CRITICAL
        if check.score >= self.thresholds.high_score:
            return AlertSeverity.HIGH
        if check.indicator_count >= self.thresholds.medium_indicator_count:
            return AlertSeverity.MEDIUM
        return AlertSeverity.LOW

    def assess_and_classify(
        self,
        responses: QuestionnaireResponse | Iterable[int],
        *,
        user_id: Optional[str] = None,
        session_id: Optional[str] = None,
    ) -> tuple[SafetyCheck, AlertSeverity]:
        """Assess, classify and record the outcome in metrics and logs."""
        check = self.assess(responses, user_id=user_id, session_id=session_id)
        severity = self.classify_severity(check)

        track_risk_assessment(severity.label)
        logger.info(
            "Risk assessment completed",
            session_id=session_id,
            severity=severity.label,
            score=check.score,
            indicator_count=check.indicator_count,
            requires_immediate_action=check.requires_immediate_action,
        )
        return check, severity
