"""Safety services package."""

from mindlens.services.safety.risk_engine import RiskAssessmentEngine, RiskThresholds
from mindlens.services.safety.response_coordinator import SafetyResponseCoordinator
from mindlens.services.safety.emergency_resources import EmergencyResourceResolver
from mindlens.services.safety.safety_plan import SafetyPlan, SafetyPlanGenerator
from mindlens.services.safety.session_monitor import (
    MonitoringContext,
    SessionMonitor,
    TranscriptAnalysis,
)

__all__ = [
    # Risk engine
    "RiskAssessmentEngine",
    "RiskThresholds",
    # Crisis response
    "SafetyResponseCoordinator",
    # Emergency resources
    "EmergencyResourceResolver",
    "SafetyPlan",
    "SafetyPlanGenerator",
    # Session monitoring
    "MonitoringContext",
    "SessionMonitor",
    "TranscriptAnalysis",
]
