"""
Unit Tests for Crisis Resources

Tests emergency resource resolution, safety plan generation and
session transcript monitoring.
"""

import json

import pytest

from mindlens.domain.enums.alert_severity import ScoreBand
from mindlens.services.safety import (
    EmergencyResourceResolver,
    MonitoringContext,
    SafetyPlanGenerator,
    SessionMonitor,
)


class TestEmergencyResourceResolver:
    """Tests for jurisdiction-aware resource lookup."""

    @pytest.fixture
    def resolver(self) -> EmergencyResourceResolver:
        return EmergencyResourceResolver()

    def test_us_resources(self, resolver: EmergencyResourceResolver) -> None:
        resources = resolver.get_resources("US")

        assert resources.emergency_number == "911"
        assert resources.resources[0].contact == "988"
        assert [r.name for r in resources.get_crisis_hotlines()] == [
            "988 Suicide & Crisis Lifeline",
            "Veterans Crisis Line",
        ]

    def test_lookup_is_case_insensitive(self, resolver: EmergencyResourceResolver) -> None:
        assert resolver.get_resources("gb").emergency_number == "999"

    def test_unknown_country_falls_back_to_international(self, resolver: EmergencyResourceResolver) -> None:
        resources = resolver.get_resources("ZZ")

        assert resources.country_code == "INTL"
        assert resources.resources[0].contact == "https://findahelpline.com"
        assert resolver.get_primary_hotline("ZZ") is None

    def test_crisis_message(self, resolver: EmergencyResourceResolver) -> None:
        """Test the plain-text crisis message layout."""
        lines = resolver.format_crisis_message("US").splitlines()

        assert lines[0] == "If you're in crisis or having thoughts of self-harm:"
        assert lines[1] == "- Emergency: 911"
        assert lines[2] == "- 988 Suicide & Crisis Lifeline: 988 (24/7)"
        assert len(lines) == 6

    def test_crisis_message_without_emergency_number(self, resolver: EmergencyResourceResolver) -> None:
        message = resolver.format_crisis_message("ZZ")

        assert "Emergency:" not in message
        assert "findahelpline.com" in message

    def test_config_file_overrides(self, tmp_path) -> None:
        config = tmp_path / "resources.json"
        config.write_text(json.dumps({
            "ca": {
                "country_name": "Canada",
                "emergency_number": "911",
                "resources": [
                    {"name": "Talk Suicide Canada", "resource_type": "hotline", "contact": "988"},
                ],
            },
        }))

        resolver = EmergencyResourceResolver(str(config))

        assert resolver.get_primary_hotline("CA").name == "Talk Suicide Canada"
        assert resolver.list_supported_countries() == ["CA", "GB", "US"]

    def test_broken_config_keeps_built_ins(self, tmp_path) -> None:
        config = tmp_path / "resources.json"
        config.write_text("{not json")

        resolver = EmergencyResourceResolver(str(config))

        assert resolver.list_supported_countries() == ["GB", "US"]


class TestSafetyPlanGenerator:
    """Tests for safety plan generation."""

    @pytest.fixture
    def generator(self) -> SafetyPlanGenerator:
        return SafetyPlanGenerator()

    def test_plan_contents(self, generator: SafetyPlanGenerator) -> None:
        plan = generator.generate(12, "US")

        assert plan.score_band == ScoreBand.MODERATE
        assert plan.country_code == "US"
        assert "Thoughts of self-harm or suicide" in plan.warning_signs
        assert "Emergency Services: 911" in plan.support_contacts
        assert plan.professional_resources[0] == "Your assigned counselor (available within 24h)"

    def test_severe_plan_lists_emergency_department_first(self, generator: SafetyPlanGenerator) -> None:
        plan = generator.generate(22, "GB")

        assert plan.score_band == ScoreBand.SEVERE
        assert plan.professional_resources[0] == "Hospital emergency department"
        assert "Samaritans: 116 123" in plan.support_contacts

    def test_to_dict(self, generator: SafetyPlanGenerator) -> None:
        data = generator.generate(3).to_dict()

        assert data["score_band"] == "mild"
        assert isinstance(data["coping_strategies"], list)


class TestSessionMonitor:
    """Tests for transcript crisis keyword detection."""

    def test_safe_transcript(self) -> None:
        monitor = SessionMonitor(MonitoringContext())
        monitor.start("MS-1", "user-1")

        analysis = monitor.analyze_transcript("MS-1", "I had a good week at work.")

        assert analysis.safe is True
        assert analysis.concerns == ()

    def test_keywords_detected_case_insensitively(self) -> None:
        monitor = SessionMonitor(MonitoringContext())
        monitor.start("MS-1", "user-1")

        analysis = monitor.analyze_transcript("MS-1", "Sometimes I WANT TO DIE, I feel better off dead.")

        assert analysis.safe is False
        assert analysis.concerns == (
            'Crisis keyword detected: "want to die"',
            'Crisis keyword detected: "better off dead"',
        )

    def test_end_summarizes_concerns(self) -> None:
        context = MonitoringContext()
        monitor = SessionMonitor(context)
        monitor.start("MS-1", "user-1")
        monitor.analyze_transcript("MS-1", "I want to hurt myself")

        summary = monitor.end("MS-1")

        assert summary.session_id == "MS-1"
        assert summary.concern_count == 1
        assert summary.duration_seconds >= 0
        assert context.get("MS-1") is None

    def test_end_unknown_session(self) -> None:
        assert SessionMonitor(MonitoringContext()).end("missing") is None

    def test_contexts_are_isolated(self) -> None:
        """Test that sessions in one context are invisible to another."""
        first, second = MonitoringContext(), MonitoringContext()
        SessionMonitor(first).start("MS-1", "user-1")

        assert second.get("MS-1") is None
        assert SessionMonitor(second).end("MS-1") is None
        assert first.get("MS-1") is not None
