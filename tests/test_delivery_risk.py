"""
Tests for deliverable status and timeline risk.
"""
from datetime import date

from secdelivery.domain.entities import DeliverableAssignment
from secdelivery.domain.services import ActivityStatus, activity_status, has_timeline_risk


TODAY = date(2025, 1, 6)


class TestActivityStatus:
    """Tests for activity_status."""

    def test_no_assignment(self):
        assert activity_status(date(2025, 1, 1), None, TODAY) is ActivityStatus.DEFAULT

    def test_not_required_wins(self):
        assignment = DeliverableAssignment("BIA", required=False, is_completed=True)
        assert activity_status(date(2025, 1, 1), assignment, TODAY) is ActivityStatus.NOT_REQUIRED

    def test_completed(self):
        assignment = DeliverableAssignment("BIA", is_completed=True)
        assert activity_status(date(2025, 1, 1), assignment, TODAY) is ActivityStatus.COMPLETED

    def test_overdue(self):
        assignment = DeliverableAssignment("BIA")
        assert activity_status(date(2025, 1, 3), assignment, TODAY) is ActivityStatus.OVERDUE

    def test_due_today_is_not_overdue(self):
        assignment = DeliverableAssignment("BIA")
        assert activity_status(TODAY, assignment, TODAY) is ActivityStatus.DEFAULT

    def test_at_risk_when_effort_exceeds_time_left(self):
        # Mon and Tue leave 16 working hours
        assignment = DeliverableAssignment("BIA", effort_hours=24)
        assert activity_status(date(2025, 1, 7), assignment, TODAY) is ActivityStatus.AT_RISK

    def test_enough_time_left(self):
        assignment = DeliverableAssignment("BIA", effort_hours=16)
        assert activity_status(date(2025, 1, 7), assignment, TODAY) is ActivityStatus.DEFAULT

    def test_holidays_not_deducted(self):
        """Test the capacity check counts a bank holiday as available time."""
        assignment = DeliverableAssignment("BIA", effort_hours=24)
        assert activity_status(
            date(2025, 1, 3), assignment, date(2025, 1, 1)
        ) is ActivityStatus.DEFAULT

    def test_status_values(self):
        assert ActivityStatus.NOT_REQUIRED.value == "not-required"
        assert ActivityStatus.AT_RISK.value == "at-risk"


class TestTimelineRisk:
    """Tests for has_timeline_risk."""

    def test_no_go_live(self):
        assignments = [DeliverableAssignment("BIA", due_date=date(2025, 6, 1))]
        assert has_timeline_risk(None, assignments) is False

    def test_no_due_dates(self):
        assert has_timeline_risk(date(2025, 3, 31), [DeliverableAssignment("BIA")]) is False

    def test_last_due_after_go_live(self):
        assignments = [
            DeliverableAssignment("BIA", due_date=date(2025, 2, 1)),
            DeliverableAssignment("DPIA Part 1", due_date=date(2025, 4, 1)),
        ]
        assert has_timeline_risk(date(2025, 3, 31), assignments) is True

    def test_due_on_go_live(self):
        assignments = [DeliverableAssignment("BIA", due_date=date(2025, 3, 31))]
        assert has_timeline_risk(date(2025, 3, 31), assignments) is False
