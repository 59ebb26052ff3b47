"""
Tests for the command-line interface.
"""
import pytest
from pathlib import Path

import pandas as pd
from click.testing import CliRunner

from secdelivery.cli import cli


SCENARIO = str(Path(__file__).parent / "fixtures" / "scenario.yaml")


@pytest.fixture
def runner():
    return CliRunner()


class TestCLICommands:
    """Tests for CLI command structure."""

    def test_subcommands_registered(self):
        """Test all subcommands are registered."""
        command_names = list(cli.commands.keys())

        assert 'timeline' in command_names
        assert 'critical-path' in command_names
        assert 'cross-charge' in command_names

    def test_version(self, runner):
        result = runner.invoke(cli, ['--version'])
        assert result.exit_code == 0
        assert '1.0.0' in result.output


class TestTimelineCommand:
    """Tests for the timeline command."""

    def test_from_start_date(self, runner):
        result = runner.invoke(cli, ['timeline', '--start', '2025-01-06'])

        assert result.exit_code == 0, result.output
        assert 'Security Delivery Timeline' in result.output
        assert 'Project Start' in result.output
        assert 'Risk Profile Acceptance' in result.output
        assert 'End Security Alpha' in result.output

    def test_from_scenario_project(self, runner):
        result = runner.invoke(cli, ['timeline', '--scenario', SCENARIO, '--project', 'p1'])

        assert result.exit_code == 0, result.output
        assert 'info_assurer=60%, security_architect=50%, soc=100%' in result.output
        assert 'Go Live' in result.output

    def test_start_date_required(self, runner):
        result = runner.invoke(cli, ['timeline'])
        assert result.exit_code == 1
        assert 'start date is required' in result.output

    def test_unknown_project(self, runner):
        result = runner.invoke(cli, ['timeline', '--scenario', SCENARIO, '--project', 'p404'])
        assert result.exit_code == 1
        assert "Project 'p404' not found" in result.output


class TestCriticalPathCommand:
    """Tests for the critical-path command."""

    def test_totals(self, runner):
        result = runner.invoke(cli, ['critical-path', '--start', '2025-01-06'])

        assert result.exit_code == 0, result.output
        assert 'Total duration:  25 days' in result.output
        assert 'Activities:      24' in result.output
        assert 'parallel' in result.output

    def test_status_and_timeline_risk(self, runner):
        result = runner.invoke(cli, [
            'critical-path', '--scenario', SCENARIO, '--project', 'p1', '--today', '2025-01-06',
        ])

        assert result.exit_code == 0, result.output
        assert 'not-required' in result.output
        assert 'Timeline risk' in result.output


class TestCrossChargeCommand:
    """Tests for the cross-charge command."""

    def test_writes_csv(self, runner, tmp_path):
        output = tmp_path / "charges.csv"
        result = runner.invoke(cli, [
            'cross-charge', '--scenario', SCENARIO,
            '--start', '2025-01-06', '--end', '2025-01-10',
            '--output', str(output),
        ])

        assert result.exit_code == 0, result.output
        assert 'Payments Platform' in result.output

        frame = pd.read_csv(output)
        assert len(frame) == 5
        ada = frame[(frame.project_id == 'p1') & (frame.user_id == 'u1')].iloc[0]
        assert ada.hours == pytest.approx(37.5)
        assert ada.cost == pytest.approx(3250.0)

        alan = frame[(frame.project_id == 'p2') & (frame.user_id == 'u2')].iloc[0]
        assert alan.hours == pytest.approx(15.0)

        totals = frame.groupby('project_id').hours.sum()
        assert totals['p1'] == pytest.approx(75.0)
        assert totals['p2'] == pytest.approx(30.0)

    def test_individual_cohort(self, runner, tmp_path):
        output = tmp_path / "charges.csv"
        result = runner.invoke(cli, [
            'cross-charge', '--scenario', SCENARIO,
            '--start', '2025-01-06', '--end', '2025-01-10',
            '--group-type', 'individual', '--group-value', 'u3',
            '--output', str(output),
        ])

        assert result.exit_code == 0, result.output
        frame = pd.read_csv(output)
        assert set(frame.user_id) == {'u3'}
        assert frame.cost.sum() == pytest.approx(3000.0)

    def test_holiday_absences(self, runner, tmp_path):
        without, with_holidays = tmp_path / "without.csv", tmp_path / "with.csv"
        args = ['cross-charge', '--scenario', SCENARIO, '--start', '2025-01-01', '--end', '2025-01-03',
                '--group-type', 'individual', '--group-value', 'u1']

        assert runner.invoke(cli, args + ['--output', str(without)]).exit_code == 0
        assert runner.invoke(cli, args + ['--holiday-absences', '--output', str(with_holidays)]).exit_code == 0

        assert pd.read_csv(without).hours.sum() == pytest.approx(22.5)
        assert pd.read_csv(with_holidays).hours.sum() == pytest.approx(15.0)

    def test_holiday_sync_horizon_caps_range(self, runner, tmp_path):
        """Test holidays beyond the configured sync horizon are still charged."""
        default_config = Path(__file__).parent.parent / "secdelivery" / "delivery_config.yaml"
        config_path = tmp_path / "delivery_config.yaml"
        config_path.write_text(
            default_config.read_text(encoding="utf-8").replace(
                "holiday_sync_horizon_days: 365", "holiday_sync_horizon_days: 0"
            ),
            encoding="utf-8",
        )
        args = ['cross-charge', '--scenario', SCENARIO, '--start', '2024-12-31', '--end', '2025-01-02',
                '--group-type', 'individual', '--group-value', 'u1', '--holiday-absences']
        capped, default = tmp_path / "capped.csv", tmp_path / "default.csv"

        assert runner.invoke(cli, args + ['--config', str(config_path), '--output', str(capped)]).exit_code == 0
        assert runner.invoke(cli, args + ['--output', str(default)]).exit_code == 0

        # New Year's Day is one day past a zero-day horizon
        assert pd.read_csv(capped).hours.sum() == pytest.approx(22.5)
        assert pd.read_csv(default).hours.sum() == pytest.approx(15.0)

    def test_end_before_start(self, runner):
        result = runner.invoke(cli, [
            'cross-charge', '--scenario', SCENARIO, '--start', '2025-01-10', '--end', '2025-01-06',
        ])
        assert result.exit_code == 1
        assert 'must not be before' in result.output

    def test_empty_cohort(self, runner):
        result = runner.invoke(cli, [
            'cross-charge', '--scenario', SCENARIO, '--start', '2025-01-06', '--end', '2025-01-10',
            '--group-type', 'workstream', '--group-value', 'finance',
        ])
        assert result.exit_code == 0
        assert 'No users match' in result.output

    def test_unknown_group_type_rejected(self, runner):
        result = runner.invoke(cli, [
            'cross-charge', '--scenario', SCENARIO, '--start', '2025-01-06', '--end', '2025-01-10',
            '--group-type', 'department',
        ])
        assert result.exit_code == 2
