"""
Configuration loader for the Security Delivery engine.

Loads settings from delivery_config.yaml and provides typed access to all
configuration sections, including the activity catalog, critical path
grouping tables, day rates and public holidays.
"""
from pathlib import Path
from typing import List, Optional
from functools import lru_cache

import yaml

from secdelivery.domain.entities import (
    ActivityTemplate,
    ConcurrencyBlock,
    DayRateTable,
    GroupingTables,
    MatchMode,
)
from secdelivery.domain.services.calendar import normalize_holidays
from secdelivery.domain.services.timeline_builder import DEFAULT_ROLE_MAPPING


# Default config path, shipped alongside the package
DEFAULT_CONFIG_PATH = Path(__file__).parent / "delivery_config.yaml"

# Used when the config file has no critical_path section
DEFAULT_CONCURRENT_BLOCKS = (
    {
        "match": "exact",
        "groups": [
            ["Business Impact Analysis", "Gov Assure Profiling"],
            ["Obligations Discovery", "3rd Party Assessments",
             "Intellectual Property Assessments", "Data Sharing Agreements"],
            ["Threat Assessment", "Initial Threat Model"],
            ["DPIA Part 1", "DPIA Part 2"],
        ],
    },
    {
        "match": "substring",
        "groups": [
            ["Risk Appetite Capture", "Initial Risk Assessment"],
            ["Cyber Governance Process Definition", "Continual Assurance Process Definition"],
            ["cyber security requirements"],
        ],
    },
    {
        "match": "substring",
        "groups": [
            ["Cyber Testing – Static Analysis", "Cyber Testing – Dynamic Analysis",
             "Cyber Testing – ITHC"],
            ["Deeper Threat Modelling", "Security Controls Definition",
             "Security Monitoring Requirements"],
        ],
    },
    {
        "match": "substring",
        "groups": [
            ["Compliance Document Completion"],
            ["Risk Profile Acceptance"],
        ],
    },
)


class ConfigurationError(Exception):
    """Raised when configuration loading or validation fails."""
    pass


class DeliveryConfig:
    """
    Configuration manager for the Security Delivery engine.

    Loads YAML configuration and provides typed access to all sections.
    Use get_config() to obtain the singleton instance.
    """

    def __init__(self, config_path: Optional[Path] = None):
        self._config_path = config_path or DEFAULT_CONFIG_PATH
        self._config: dict = {}
        self._load()

    def _load(self) -> None:
        """Load configuration from YAML file."""
        if not self._config_path.exists():
            raise ConfigurationError(f"Config file not found: {self._config_path}")

        try:
            with open(self._config_path, 'r', encoding='utf-8') as f:
                self._config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in config file: {e}")

        if not isinstance(self._config, dict):
            raise ConfigurationError("Config file must contain a YAML mapping")

    def reload(self) -> None:
        """Reload configuration from disk."""
        self._load()
        # Clear the cached singleton to force reload on next get_config()
        get_config.cache_clear()

    @property
    def version(self) -> str:
        """Configuration file version."""
        return self._config.get("version", "unknown")

    # =========================================================================
    # Working Time
    # =========================================================================

    @property
    def working_hours_per_week(self) -> float:
        """Contracted hours per week, used for cross-charging."""
        return float(self._config.get("working_hours_per_week", 40))

    @property
    def hours_per_day(self) -> float:
        """Cross-charging hours per working day (weekly hours / 5)."""
        return self.working_hours_per_week / 5

    @property
    def effort_hours_per_day(self) -> float:
        """Hours in one effort day for timeline and critical path estimates."""
        return float(self._config.get("effort_hours_per_day", 8))

    # =========================================================================
    # Timeline
    # =========================================================================

    @property
    def timeline(self) -> dict:
        """Timeline configuration."""
        return self._config.get("timeline", {})

    @property
    def activity_catalog(self) -> list:
        """Raw ordered activity catalog entries."""
        return self.timeline.get("activities", [])

    def activity_templates(self) -> List[ActivityTemplate]:
        """
        Ordered activity templates built from the catalog.

        Raises:
            InvalidActivityTemplateError: For blank names or negative days
        """
        return [ActivityTemplate.from_dict(entry) for entry in self.activity_catalog]

    @property
    def role_mapping(self) -> dict:
        """Project role -> timeline role mapping."""
        return self.timeline.get("role_mapping", dict(DEFAULT_ROLE_MAPPING))

    # =========================================================================
    # Critical Path
    # =========================================================================

    @property
    def critical_path(self) -> dict:
        """Critical path grouping configuration."""
        return self._config.get("critical_path", {})

    def grouping_tables(self) -> GroupingTables:
        """
        Concurrency blocks and sequential groups for the decomposer.

        Raises:
            ConfigurationError: If a block names an unknown match mode
        """
        blocks = self.critical_path.get("concurrent_blocks", DEFAULT_CONCURRENT_BLOCKS)
        try:
            concurrent = tuple(ConcurrencyBlock.from_dict(b) for b in blocks)
        except ValueError as e:
            valid = ", ".join(m.value for m in MatchMode)
            raise ConfigurationError(f"Invalid critical path block ({e}); match must be one of: {valid}")
        sequential = tuple(
            tuple(str(name) for name in group)
            for group in self.critical_path.get("sequential_groups", []) or []
        )
        return GroupingTables(concurrent_blocks=concurrent, sequential_groups=sequential)

    # =========================================================================
    # Day Rates
    # =========================================================================

    @property
    def day_rates(self) -> dict:
        """Role -> SFIA grade -> day rate."""
        return self._config.get("day_rates", {})

    def day_rate_table(self) -> DayRateTable:
        return DayRateTable(self.day_rates)

    def get_day_rate(self, role: str, grade) -> float:
        """
        Get the day rate for a role and grade.

        Args:
            role: Day-rate role key (e.g., 'security_architect')
            grade: SFIA grade (e.g., 4 or '4')

        Returns:
            Day rate, or 0.0 when not configured
        """
        return self.day_rate_table().rate_for(role, grade)

    # =========================================================================
    # Holidays & Absences
    # =========================================================================

    @property
    def public_holidays(self) -> list:
        """Public holiday entries ({date, name})."""
        return self._config.get("public_holidays", [])

    def holiday_dates(self) -> frozenset:
        """Public holiday ISO date strings for the working calendar."""
        return normalize_holidays(h["date"] for h in self.public_holidays if h.get("date"))

    @property
    def absences(self) -> dict:
        """Absence configuration."""
        return self._config.get("absences", {})

    @property
    def holiday_sync_horizon_days(self) -> int:
        """How many days ahead public holidays are turned into absences."""
        return int(self.absences.get("holiday_sync_horizon_days", 365))


@lru_cache(maxsize=1)
def get_config(config_path: Optional[str] = None) -> DeliveryConfig:
    """
    Get the singleton configuration instance.

    Args:
        config_path: Optional path to config file. Only used on first call.

    Returns:
        DeliveryConfig singleton instance
    """
    path = Path(config_path) if config_path else None
    return DeliveryConfig(path)


def reload_config() -> DeliveryConfig:
    """Reload configuration from disk and return new instance."""
    get_config.cache_clear()
    return get_config()
