"""
Unit Tests for Risk Assessment Engine

Tests PHQ-9 scoring rules, immediate-action boundaries and severity tiering.
"""

import pytest

from mindlens.domain.enums.alert_severity import AlertSeverity
from mindlens.domain.errors import MalformedInputError
from mindlens.domain.models.safety_models import SafetyCheck
from mindlens.services.safety.risk_engine import (
    CRITICAL_SCORE_INDICATOR,
    HIGH_RISK_SCORE_INDICATOR,
    MULTIPLE_SEVERE_INDICATOR,
    SELF_HARM_INDICATOR,
    RiskAssessmentEngine,
    RiskThresholds,
)


class TestAssess:
    """Tests for RiskAssessmentEngine.assess."""

    @pytest.fixture
    def engine(self) -> RiskAssessmentEngine:
        return RiskAssessmentEngine()

    def test_all_zero_responses(self, engine: RiskAssessmentEngine) -> None:
        """Test that a zero vector triggers nothing."""
        check = engine.assess([0, 0, 0, 0, 0, 0, 0, 0, 0])

        assert check.score == 0
        assert check.risk_indicators == ()
        assert check.flagged_responses == ()
        assert check.requires_immediate_action is False
        assert engine.classify_severity(check) == AlertSeverity.LOW

    def test_all_max_responses(self, engine: RiskAssessmentEngine) -> None:
        """Test that a maximal vector triggers every applicable indicator in rule order."""
        check = engine.assess([3, 3, 3, 3, 3, 3, 3, 3, 3])

        assert check.score == 27
        assert check.risk_indicators == (
            SELF_HARM_INDICATOR,
            CRITICAL_SCORE_INDICATOR,
            MULTIPLE_SEVERE_INDICATOR,
        )
        assert check.flagged_responses == (8,)
        assert check.requires_immediate_action is True
        assert engine.classify_severity(check) == AlertSeverity.CRITICAL

    def test_moderate_score_without_self_harm(self, engine: RiskAssessmentEngine) -> None:
        """Test [2,2,2,1,1,1,1,1,0]: score 11, no indicators, low severity."""
        check = engine.assess([2, 2, 2, 1, 1, 1, 1, 1, 0])

        assert check.score == 11
        assert check.risk_indicators == ()
        assert check.requires_immediate_action is False
        assert engine.classify_severity(check) == AlertSeverity.LOW

    def test_indicator_labels(self) -> None:
        assert SELF_HARM_INDICATOR == "Self-harm ideation reported"
        assert CRITICAL_SCORE_INDICATOR == "Critical score detected"
        assert HIGH_RISK_SCORE_INDICATOR == "High-risk score"
        assert MULTIPLE_SEVERE_INDICATOR == "Multiple severe symptoms reported"

    def test_self_harm_item_flagged_at_one(self, engine: RiskAssessmentEngine) -> None:
        """Test that any non-zero self-harm answer is flagged but not immediate."""
        check = engine.assess([0, 0, 0, 0, 0, 0, 0, 0, 1])

        assert check.risk_indicators == (SELF_HARM_INDICATOR,)
        assert check.flagged_responses == (8,)
        assert check.requires_immediate_action is False

    def test_self_harm_item_at_two_requires_immediate_action(self, engine: RiskAssessmentEngine) -> None:
        check = engine.assess([0, 0, 0, 0, 0, 0, 0, 0, 2])

        assert check.score == 2
        assert check.requires_immediate_action is True
        assert engine.classify_severity(check) == AlertSeverity.CRITICAL

    def test_score_exactly_20_requires_immediate_action(self, engine: RiskAssessmentEngine) -> None:
        """Test the critical boundary: score 20 with no self-harm answer."""
        check = engine.assess([3, 3, 3, 3, 3, 2, 2, 1, 0])

        assert check.score == 20
        assert CRITICAL_SCORE_INDICATOR in check.risk_indicators
        assert HIGH_RISK_SCORE_INDICATOR not in check.risk_indicators
        assert check.requires_immediate_action is True

    def test_score_19_with_self_harm_one_is_not_immediate(self, engine: RiskAssessmentEngine) -> None:
        check = engine.assess([3, 3, 3, 3, 2, 2, 1, 1, 1])

        assert check.score == 19
        assert check.risk_indicators == (SELF_HARM_INDICATOR, HIGH_RISK_SCORE_INDICATOR)
        assert check.requires_immediate_action is False
        assert engine.classify_severity(check) == AlertSeverity.HIGH

    def test_score_15_is_high_risk(self, engine: RiskAssessmentEngine) -> None:
        check = engine.assess([2, 2, 2, 2, 2, 2, 2, 1, 0])

        assert check.score == 15
        assert check.risk_indicators == (HIGH_RISK_SCORE_INDICATOR,)
        assert engine.classify_severity(check) == AlertSeverity.HIGH

    def test_score_14_is_not_high_risk(self, engine: RiskAssessmentEngine) -> None:
        check = engine.assess([2, 2, 2, 2, 2, 2, 2, 0, 0])

        assert check.score == 14
        assert check.risk_indicators == ()

    def test_five_severe_answers(self, engine: RiskAssessmentEngine) -> None:
        """Test that exactly five answers at 3 trigger the severe-symptoms indicator."""
        check = engine.assess([3, 3, 3, 3, 3, 0, 0, 0, 0])

        assert check.score == 15
        assert check.risk_indicators == (HIGH_RISK_SCORE_INDICATOR, MULTIPLE_SEVERE_INDICATOR)

    def test_four_severe_answers(self, engine: RiskAssessmentEngine) -> None:
        check = engine.assess([3, 3, 3, 3, 0, 0, 0, 0, 0])

        assert MULTIPLE_SEVERE_INDICATOR not in check.risk_indicators

    def test_assess_is_pure(self, engine: RiskAssessmentEngine) -> None:
        """Test that identical input yields an identical SafetyCheck."""
        responses = [1, 2, 3, 0, 1, 2, 3, 0, 1]

        assert engine.assess(responses) == engine.assess(responses)

    def test_identity_carried_through(self, engine: RiskAssessmentEngine) -> None:
        check = engine.assess([0] * 9, user_id="user-1", session_id="MS-1")

        assert check.user_id == "user-1"
        assert check.session_id == "MS-1"

    @pytest.mark.parametrize(
        "responses",
        [
            [],
            [0] * 8,
            [0] * 10,
            [0, 0, 0, 0, 0, 0, 0, 0, 4],
            [-1, 0, 0, 0, 0, 0, 0, 0, 0],
            [0, 0, 0, 0, 0, 0, 0, 0, 1.5],
            [0, 0, 0, 0, 0, 0, 0, 0, "1"],
            [True, 0, 0, 0, 0, 0, 0, 0, 0],
        ],
    )
    def test_malformed_input_rejected(self, engine: RiskAssessmentEngine, responses: list) -> None:
        """Test that wrong length or out-of-range values fail loudly."""
        with pytest.raises(MalformedInputError):
            engine.assess(responses)

    def test_string_input_rejected(self, engine: RiskAssessmentEngine) -> None:
        with pytest.raises(MalformedInputError):
            engine.assess("000000000")


class TestClassifySeverity:
    """Tests for severity tiering order."""

    @pytest.fixture
    def engine(self) -> RiskAssessmentEngine:
        return RiskAssessmentEngine()

    def test_high_wins_over_medium(self, engine: RiskAssessmentEngine) -> None:
        """Test that score >= 15 with two indicators classifies as high, not medium."""
        check = SafetyCheck(
            score=16,
            risk_indicators=(SELF_HARM_INDICATOR, HIGH_RISK_SCORE_INDICATOR),
        )

        assert engine.classify_severity(check) == AlertSeverity.HIGH

    def test_critical_wins_over_high(self, engine: RiskAssessmentEngine) -> None:
        check = SafetyCheck(score=16, requires_immediate_action=True)

        assert engine.classify_severity(check) == AlertSeverity.CRITICAL

    def test_two_indicators_below_high_score_is_medium(self, engine: RiskAssessmentEngine) -> None:
        check = SafetyCheck(
            score=12,
            risk_indicators=(SELF_HARM_INDICATOR, MULTIPLE_SEVERE_INDICATOR),
        )

        assert engine.classify_severity(check) == AlertSeverity.MEDIUM

    def test_medium_reachable_from_assess(self, engine: RiskAssessmentEngine) -> None:
        """Test medium via assess with a lowered severe-symptom threshold."""
        engine = RiskAssessmentEngine(RiskThresholds(severe_symptom_count=3))
        check = engine.assess([3, 3, 3, 0, 0, 0, 0, 0, 1])

        assert check.score == 10
        assert check.risk_indicators == (SELF_HARM_INDICATOR, MULTIPLE_SEVERE_INDICATOR)
        assert engine.classify_severity(check) == AlertSeverity.MEDIUM

    def test_single_indicator_is_low(self, engine: RiskAssessmentEngine) -> None:
        check = SafetyCheck(score=3, risk_indicators=(SELF_HARM_INDICATOR,))

        assert engine.classify_severity(check) == AlertSeverity.LOW

    def test_severity_ordering(self) -> None:
        assert AlertSeverity.LOW < AlertSeverity.MEDIUM < AlertSeverity.HIGH < AlertSeverity.CRITICAL
