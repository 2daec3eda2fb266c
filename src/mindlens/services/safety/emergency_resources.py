"""
Emergency Resources

Jurisdiction-aware crisis hotline resolver. Built-in entries can be
overridden per country from a JSON file.

LEGAL_REVIEW_REQUIRED: Hotline numbers must be verified for each
jurisdiction before production use.
"""

from dataclasses import dataclass, field
from typing import Optional
import json
import os

from mindlens.config.logging_config import get_logger

logger = get_logger(__name__)


@dataclass
class EmergencyResource:
    """
    A single crisis resource.

    Attributes:
        name: Resource name (e.g., "988 Suicide & Crisis Lifeline")
        resource_type: hotline, text, website
        contact: Number, text instruction or URL
        available_24_7: Whether available around the clock
    """

    name: str
    resource_type: str
    contact: str
    description: str = ""
    available_24_7: bool = True

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "type": self.resource_type,
            "contact": self.contact,
            "description": self.description,
            "available_24_7": self.available_24_7,
        }

    def format_for_user(self) -> str:
        availability = " (24/7)" if self.available_24_7 else ""
        return f"- {self.name}: {self.contact}{availability}"


@dataclass
class JurisdictionResources:
    """Crisis resources for one country."""

    country_code: str
    country_name: str
    resources: list[EmergencyResource] = field(default_factory=list)
    emergency_number: str = ""

    def get_crisis_hotlines(self) -> list[EmergencyResource]:
        return [r for r in self.resources if r.resource_type == "hotline"]

    def to_dict(self) -> dict:
        return {
            "country_code": self.country_code,
            "country_name": self.country_name,
            "emergency_number": self.emergency_number,
            "resources": [r.to_dict() for r in self.resources],
        }


class EmergencyResourceResolver:
    """
    Resolves crisis resources for a country code.

    Unknown jurisdictions fall back to the international helpline
    directory.

    Usage:
        resolver = EmergencyResourceResolver()
        resources = resolver.get_resources("US")
        message = resolver.format_crisis_message("US")
    """

    DEFAULT_RESOURCES: JurisdictionResources = JurisdictionResources(
        country_code="INTL",
        country_name="International",
        resources=[
            EmergencyResource(
                name="International Crisis Helplines",
                resource_type="website",
                contact="https://findahelpline.com",
                description="Directory of crisis helplines worldwide",
            ),
        ],
    )

    BUILT_IN_RESOURCES: dict[str, JurisdictionResources] = {
        "US": JurisdictionResources(
            country_code="US",
            country_name="United States",
            emergency_number="911",
            resources=[
                EmergencyResource(
                    name="988 Suicide & Crisis Lifeline",
                    resource_type="hotline",
                    contact="988",
                    description="Call or text 988",
                ),
                EmergencyResource(
                    name="Crisis Text Line",
                    resource_type="text",
                    contact="Text HOME to 741741",
                    description="Text-based crisis support",
                ),
                EmergencyResource(
                    name="Veterans Crisis Line",
                    resource_type="hotline",
                    contact="988 (Press 1)",
                    description="Support for veterans and their families",
                ),
            ],
        ),
        "GB": JurisdictionResources(
            country_code="GB",
            country_name="United Kingdom",
            emergency_number="999",
            resources=[
                EmergencyResource(
                    name="Samaritans",
                    resource_type="hotline",
                    contact="116 123",
                    description="Emotional support for anyone in distress",
                ),
                EmergencyResource(
                    name="SHOUT",
                    resource_type="text",
                    contact="Text SHOUT to 85258",
                ),
            ],
        ),
    }

    def __init__(self, config_path: Optional[str] = None) -> None:
        self._resources = dict(self.BUILT_IN_RESOURCES)

        if config_path and os.path.exists(config_path):
            self._load_config(config_path)

    def _load_config(self, config_path: str) -> None:
        """Load country overrides from a JSON file."""
        try:
            with open(config_path, "r", encoding="utf-8") as f:
                data = json.load(f)

            for country_code, country_data in data.items():
                code = country_code.upper()
                self._resources[code] = JurisdictionResources(
                    country_code=code,
                    country_name=country_data.get("country_name", code),
                    emergency_number=country_data.get("emergency_number", ""),
                    resources=[
                        EmergencyResource(**r) for r in country_data.get("resources", [])
                    ],
                )

            logger.info(
                "Loaded emergency resources config",
                path=config_path,
                jurisdiction_count=len(data),
            )
        except (OSError, ValueError, TypeError) as e:
            # Built-in resources remain in effect
            logger.error("Failed to load resources config", path=config_path, error=str(e))

    def get_resources(self, country_code: str) -> JurisdictionResources:
        code = (country_code or "").upper()
        if code in self._resources:
            return self._resources[code]

        logger.warning("No resources for jurisdiction, using default", country_code=code)
        return self.DEFAULT_RESOURCES

    def format_crisis_message(self, country_code: str = "US") -> str:
        """Plain-text crisis message listing emergency number and hotlines."""
        resources = self.get_resources(country_code)

        lines = ["If you're in crisis or having thoughts of self-harm:"]
        if resources.emergency_number:
            lines.append(f"- Emergency: {resources.emergency_number}")
        for resource in resources.resources[:3]:
            lines.append(resource.format_for_user())
        lines.append("You don't have to face this alone. Professional support is available.")

        return "\n".join(lines)

    def support_contacts(self, country_code: str = "US") -> list[str]:
        """Short contact lines for a safety plan."""
        resources = self.get_resources(country_code)
        contacts = [f"{r.name}: {r.contact}" for r in resources.resources]
        if resources.emergency_number:
            contacts.append(f"Emergency Services: {resources.emergency_number}")
        return contacts

    def get_primary_hotline(self, country_code: str) -> Optional[EmergencyResource]:
        hotlines = self.get_resources(country_code).get_crisis_hotlines()
        return hotlines[0] if hotlines else None

    def list_supported_countries(self) -> list[str]:
        return sorted(self._resources.keys())
