"""
Tests for the timeline builder.
"""
import pytest
from datetime import date

from secdelivery.config import get_config
from secdelivery.domain.entities import (
    ActivityTemplate,
    AllocationRecord,
    EffortHours,
    Phase,
    ProjectMembership,
)
from secdelivery.domain.exceptions import InvalidActivityTemplateError
from secdelivery.domain.services import TimelineBuilder, derive_role_allocations


MONDAY = date(2025, 1, 6)


@pytest.fixture
def catalog():
    return [
        ActivityTemplate("Security Ownership", info_assurer_days=1, security_architect_days=0.5),
        ActivityTemplate("Business Impact Analysis", info_assurer_days=2, security_architect_days=1),
        ActivityTemplate("End Security Discovery", is_milestone=True),
        ActivityTemplate(
            "Threat Assessment",
            info_assurer_days=1, security_architect_days=2, soc_analyst_days=0.5,
        ),
    ]


def _dates(timeline):
    return [(e.name, e.date) for e in timeline.events]


class TestBuild:
    """Tests for TimelineBuilder.build."""

    def test_full_allocation(self, catalog):
        timeline = TimelineBuilder(catalog).build(MONDAY)

        assert _dates(timeline) == [
            ("Project Start", date(2025, 1, 6)),
            ("Security Ownership", date(2025, 1, 7)),
            ("Business Impact Analysis", date(2025, 1, 9)),
            ("End Security Discovery", date(2025, 1, 9)),
            ("Threat Assessment", date(2025, 1, 13)),
            ("End Security Alpha", date(2025, 1, 13)),
        ]
        assert timeline.end_date == date(2025, 1, 13)

    def test_milestones(self, catalog):
        timeline = TimelineBuilder(catalog).build(MONDAY)
        names = [m.name for m in timeline.milestones]
        assert names == ["Project Start", "End Security Discovery", "End Security Alpha"]
        assert all(m.effort_hours is None for m in timeline.milestones)

    def test_effort_from_unadjusted_days(self, catalog):
        timeline = TimelineBuilder(catalog).build(MONDAY, role_allocations={"info_assurer": 50})
        bia = next(e for e in timeline.events if e.name == "Business Impact Analysis")
        assert bia.effort_hours == EffortHours(risk_manager=16, security_architect=8, soc=0)

    def test_half_allocation_stretches_schedule(self, catalog):
        timeline = TimelineBuilder(catalog).build(MONDAY, role_allocations={"info_assurer": 50})
        dates = dict(_dates(timeline))
        # 1 day at 50% takes 2 working days; 2 days takes 4
        assert dates["Security Ownership"] == date(2025, 1, 8)
        assert dates["Business Impact Analysis"] == date(2025, 1, 14)

    def test_zero_allocation_treated_as_full(self, catalog):
        builder = TimelineBuilder(catalog)
        assert _dates(builder.build(MONDAY, role_allocations={"info_assurer": 0})) == \
            _dates(builder.build(MONDAY))

    def test_unknown_roles_ignored(self, catalog):
        builder = TimelineBuilder(catalog)
        assert _dates(builder.build(MONDAY, role_allocations={"sec_mon": 10})) == \
            _dates(builder.build(MONDAY))

    def test_holidays_skipped(self):
        builder = TimelineBuilder(
            [ActivityTemplate("Security Ownership", info_assurer_days=1)],
            holidays=["2025-01-01"],
        )
        timeline = builder.build(date(2024, 12, 31))
        assert dict(_dates(timeline))["Security Ownership"] == date(2025, 1, 2)

    def test_zero_effort_activity_skipped(self, catalog):
        catalog.insert(1, ActivityTemplate("Placeholder"))
        timeline = TimelineBuilder(catalog).build(MONDAY)
        assert "Placeholder" not in [e.name for e in timeline.events]

    def test_go_live_appended(self, catalog):
        timeline = TimelineBuilder(catalog).build(MONDAY, go_live=date(2025, 3, 31))
        last = timeline.events[-1]
        assert last.name == "Go Live"
        assert last.phase is Phase.GO_LIVE
        assert last.date == date(2025, 3, 31)

    def test_go_live_before_schedule_not_reconciled(self, catalog):
        """Test an early go-live is still emitted with its own date."""
        timeline = TimelineBuilder(catalog).build(MONDAY, go_live=date(2025, 1, 8))
        assert timeline.events[-1].date == date(2025, 1, 8)
        assert timeline.end_date == date(2025, 1, 13)

    def test_dates_non_decreasing(self, catalog):
        timeline = TimelineBuilder(catalog).build(MONDAY, role_allocations={"soc": 30})
        dates = [e.date for e in timeline.events]
        assert dates == sorted(dates)

    def test_deterministic(self, catalog):
        builder = TimelineBuilder(catalog, holidays=["2025-01-08"])
        assert builder.build(MONDAY).events == builder.build(MONDAY).events


class TestEmptyInputs:
    """Tests for empty timelines."""

    def test_no_start_date(self, catalog):
        timeline = TimelineBuilder(catalog).build(None)
        assert timeline.events == []
        assert timeline.end_date is None

    def test_empty_catalog(self):
        assert len(TimelineBuilder([]).build(MONDAY)) == 0


class TestPhases:
    """Tests for phase tagging against the shipped catalog."""

    @pytest.fixture
    def timeline(self):
        return TimelineBuilder(get_config().activity_templates()).build(MONDAY)

    def test_discovery_through_index_16(self, timeline):
        phases = {e.name: e.phase for e in timeline.events}
        assert phases["Security Ownership"] is Phase.DISCOVERY
        assert phases["Cyber Security Requirements"] is Phase.DISCOVERY

    def test_alpha_after_index_16(self, timeline):
        phases = {e.name: e.phase for e in timeline.events}
        assert phases["Deeper Threat Modelling"] is Phase.ALPHA
        assert phases["Risk Profile Acceptance"] is Phase.ALPHA
        assert phases["End Security Alpha"] is Phase.ALPHA

    def test_activity_count(self, timeline):
        assert len(timeline.activities) == 24


class TestActivityTemplate:
    """Tests for ActivityTemplate validation."""

    def test_blank_name_rejected(self):
        with pytest.raises(InvalidActivityTemplateError):
            ActivityTemplate("  ")

    def test_negative_days_rejected(self):
        with pytest.raises(InvalidActivityTemplateError) as exc_info:
            ActivityTemplate("BIA", info_assurer_days=-1)
        assert exc_info.value.code == "INVALID_ACTIVITY_TEMPLATE"

    def test_from_dict_defaults(self):
        template = ActivityTemplate.from_dict({"name": "DPIA Part 1", "info_assurer_days": 1})
        assert template.security_architect_days == 0.0
        assert template.is_milestone is False


class TestDeriveRoleAllocations:
    """Tests for derive_role_allocations."""

    def test_maps_members_to_timeline_roles(self):
        memberships = [
            ProjectMembership("u1", "p1", "risk_manager"),
            ProjectMembership("u2", "p1", "security_architect"),
            ProjectMembership("u3", "p1", "sec_mon"),
            ProjectMembership("u4", "p1", "delivery"),
            ProjectMembership("u5", "p2", "risk_manager"),
        ]
        allocations = [
            AllocationRecord("u1", "p1", 50),
            AllocationRecord("u2", "p1", 0),
            AllocationRecord("u5", "p2", 20),
        ]
        result = derive_role_allocations("p1", memberships, allocations)

        assert result == {"info_assurer": 50, "security_architect": 100, "soc": 100}

    def test_no_members(self):
        assert derive_role_allocations("p1", [], []) == {}
