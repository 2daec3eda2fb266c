"""
Safety Plan Generator

Builds a personalised safety plan for at-risk users. Support contacts
come from the jurisdiction's emergency resources.

CLINICAL_REVIEW_REQUIRED: Plan content must be reviewed by clinicians.
"""

from dataclasses import dataclass
from typing import Optional

from mindlens.domain.enums.alert_severity import ScoreBand
from mindlens.services.safety.emergency_resources import EmergencyResourceResolver

WARNING_SIGNS = (
    "Thoughts of self-harm or suicide",
    "Overwhelming feelings of hopelessness",
    "Withdrawal from friends and activities",
    "Dramatic mood changes",
    "Increased substance use",
)

COPING_STRATEGIES = (
    "Practice deep breathing exercises",
    "Use grounding techniques (5-4-3-2-1 method)",
    "Take a walk outside",
    "Listen to calming music",
    "Write in a journal",
    "Reach out to a trusted friend",
)

PROFESSIONAL_RESOURCES = (
    "Your assigned counselor (available within 24h)",
    "Local emergency mental health services",
    "Hospital emergency department",
)


@dataclass(frozen=True)
class SafetyPlan:
    score_band: ScoreBand
    country_code: str
    warning_signs: tuple[str, ...] = ()
    coping_strategies: tuple[str, ...] = ()
    support_contacts: tuple[str, ...] = ()
    professional_resources: tuple[str, ...] = ()

    def to_dict(self) -> dict:
        return {
            "score_band": self.score_band.value,
            "country_code": self.country_code,
            "warning_signs": list(self.warning_signs),
            "coping_strategies": list(self.coping_strategies),
            "support_contacts": list(self.support_contacts),
            "professional_resources": list(self.professional_resources),
        }


class SafetyPlanGenerator:
    """Creates safety plans; contacts are localised per country."""

    def __init__(self, resource_resolver: Optional[EmergencyResourceResolver] = None) -> None:
        self._resources = resource_resolver or EmergencyResourceResolver()

    def generate(self, score: int, country_code: str = "US") -> SafetyPlan:
        band = ScoreBand.from_score(score)
        resources = self._resources.get_resources(country_code)

        return SafetyPlan(
            score_band=band,
            country_code=resources.country_code,
            warning_signs=WARNING_SIGNS,
            coping_strategies=COPING_STRATEGIES,
            support_contacts=tuple(self._resources.support_contacts(country_code)),
            # Emergency department first for severe scores
            professional_resources=(
                tuple(reversed(PROFESSIONAL_RESOURCES)) if band is ScoreBand.SEVERE
                else PROFESSIONAL_RESOURCES
            ),
        )
