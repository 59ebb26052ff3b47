"""
CLI for the Security Delivery engine.

Usage:
    secdelivery timeline --start 2025-01-06 --go-live 2025-06-30
    secdelivery timeline --scenario scenario.yaml --project p1
    secdelivery critical-path --scenario scenario.yaml --project p1 --today 2025-02-03
    secdelivery cross-charge --scenario scenario.yaml --start 2025-01-01 --end 2025-03-31

Commands:
    timeline        Print the dated delivery timeline for a project
    critical-path   Print the critical path segments and effort totals
    cross-charge    Attribute people's time and cost to projects over a range
"""
import logging
import math

import click

from secdelivery import __version__
from secdelivery.config import ConfigurationError, get_config
from secdelivery.domain.exceptions import DomainError
from secdelivery.domain.services import (
    AllocationResolver,
    CriticalPathDecomposer,
    CrossChargeAggregator,
    TimelineBuilder,
    derive_role_allocations,
    has_timeline_risk,
    holiday_absences,
    select_cohort,
    validate_range,
)
from secdelivery.domain.services.cross_charge_service import COHORT_TYPES
from secdelivery.scenario import Scenario, load_scenario
from secdelivery.tabular import (
    cross_charge_frame,
    project_totals_frame,
    segments_frame,
    timeline_frame,
)

logger = logging.getLogger(__name__)

DATE = click.DateTime(formats=["%Y-%m-%d"])


def _load(config_path, scenario_path):
    try:
        config = get_config(config_path)
        scenario = load_scenario(scenario_path) if scenario_path else Scenario()
    except ConfigurationError as e:
        raise click.ClickException(str(e))
    logger.debug(
        f"Loaded config v{config.version}, {len(scenario.projects)} project(s), "
        f"{len(scenario.profiles)} profile(s)"
    )
    return config, scenario


def _project_inputs(config, scenario, project_id, start, go_live):
    """Start date, go-live and role allocations for one project."""
    role_allocations = {}
    if project_id:
        project = scenario.project(project_id)
        if project is None:
            raise click.ClickException(f"Project '{project_id}' not found in scenario")
        start = start or project.start_date
        go_live = go_live or project.go_live
        role_allocations = derive_role_allocations(
            project_id,
            scenario.membership_entities(),
            scenario.current_allocation_entities(),
            config.role_mapping,
        )
    if start is None:
        raise click.ClickException("A project start date is required (--start or --project)")
    return start, go_live, role_allocations


def _build_timeline(config, start, go_live, role_allocations):
    try:
        builder = TimelineBuilder(
            config.activity_templates(),
            holidays=config.holiday_dates(),
            effort_hours_per_day=config.effort_hours_per_day,
        )
    except DomainError as e:
        raise click.ClickException(e.message)
    return builder.build(start, go_live, role_allocations)


@click.group()
@click.version_option(version=__version__)
@click.option('--verbose', '-v', is_flag=True, help='Enable debug logging')
def cli(verbose: bool):
    """Security Delivery scheduling and cross-charging CLI.

    Builds allocation-adjusted delivery timelines, decomposes them into a
    critical path, and attributes people's time and cost to projects.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )


@cli.command()
@click.option('--start', type=DATE, default=None, help='Project start date (YYYY-MM-DD)')
@click.option('--go-live', type=DATE, default=None, help='Planned go-live date (YYYY-MM-DD)')
@click.option('--scenario', type=click.Path(exists=True), default=None,
              help='Scenario YAML with projects, members and allocations')
@click.option('--project', 'project_id', default=None, help='Project id within the scenario')
@click.option('--config', 'config_path', type=click.Path(exists=True), default=None,
              help='Path to delivery configuration YAML')
def timeline(start, go_live, scenario, project_id, config_path):
    """Print the dated delivery timeline for a project."""
    config, scenario_doc = _load(config_path, scenario)
    start, go_live, role_allocations = _project_inputs(
        config, scenario_doc, project_id,
        start.date() if start else None, go_live.date() if go_live else None,
    )

    result = _build_timeline(config, start, go_live, role_allocations)
    if not result.events:
        click.echo("No timeline data available.")
        return

    click.echo(click.style('Security Delivery Timeline', fg='cyan', bold=True))
    if role_allocations:
        allocations = ", ".join(f"{role}={pct:g}%" for role, pct in sorted(role_allocations.items()))
        click.echo(f"Role allocations: {allocations}")
    click.echo(timeline_frame(result.events).to_string(index=False))

    if go_live and result.end_date and result.end_date > go_live:
        click.echo(click.style(
            f"\nEnd of Alpha ({result.end_date}) is after go-live ({go_live})", fg='yellow'
        ))


@cli.command('critical-path')
@click.option('--start', type=DATE, default=None, help='Project start date (YYYY-MM-DD)')
@click.option('--go-live', type=DATE, default=None, help='Planned go-live date (YYYY-MM-DD)')
@click.option('--scenario', type=click.Path(exists=True), default=None,
              help='Scenario YAML with projects, members and assignments')
@click.option('--project', 'project_id', default=None, help='Project id within the scenario')
@click.option('--today', type=DATE, default=None, help='Reference date for activity status')
@click.option('--config', 'config_path', type=click.Path(exists=True), default=None,
              help='Path to delivery configuration YAML')
def critical_path(start, go_live, scenario, project_id, today, config_path):
    """Print the critical path segments and effort totals."""
    config, scenario_doc = _load(config_path, scenario)
    start, go_live, role_allocations = _project_inputs(
        config, scenario_doc, project_id,
        start.date() if start else None, go_live.date() if go_live else None,
    )
    assignments = scenario_doc.assignments_for(project_id) if project_id else []

    result = _build_timeline(config, start, go_live, role_allocations)
    try:
        decomposer = CriticalPathDecomposer(
            config.grouping_tables(), effort_hours_per_day=config.effort_hours_per_day
        )
        summary = decomposer.summarize(result.activities, assignments)
    except (ConfigurationError, DomainError) as e:
        raise click.ClickException(str(e))

    if not summary.segments:
        click.echo("No timeline data available. Please set a project start date.")
        return

    click.echo(click.style('Critical Path for Security Delivery', fg='cyan', bold=True))
    click.echo(f"Total duration:  {summary.total_days} days")
    click.echo(f"Completion date: {summary.completion_date.strftime('%d %b %Y')}")
    click.echo(f"Activities:      {summary.activity_count}\n")

    for role in ('risk_manager', 'security_architect', 'soc'):
        maximum = getattr(summary.total_effort, role)
        minimum = getattr(summary.critical_path_effort, role)
        click.echo(
            f"  {role:<20} maximum {maximum:g}h ({math.ceil(maximum / decomposer.effort_hours_per_day)}d)"
            f"  minimum {minimum:g}h ({math.ceil(minimum / decomposer.effort_hours_per_day)}d)"
        )

    frame = segments_frame(
        summary, assignments,
        today=today.date() if today else None,
        effort_hours_per_day=config.effort_hours_per_day,
    )
    click.echo("")
    click.echo(frame.to_string(index=False))

    if has_timeline_risk(go_live, assignments):
        click.echo(click.style("\nTimeline risk: deliverables are due after go-live", fg='red'))


@cli.command('cross-charge')
@click.option('--scenario', type=click.Path(exists=True), required=True,
              help='Scenario YAML with profiles, allocations and absences')
@click.option('--start', type=DATE, required=True, help='First day of the range (YYYY-MM-DD)')
@click.option('--end', type=DATE, required=True, help='Last day of the range (YYYY-MM-DD)')
@click.option('--group-type', type=click.Choice(COHORT_TYPES), default='whole_team',
              help='How to select the cohort')
@click.option('--group-value', default=None,
              help='Workstream, role, user id or project id for the cohort')
@click.option('--holiday-absences', 'with_holidays', is_flag=True,
              help='Treat configured public holidays in the range as absences')
@click.option('--output', type=click.Path(), default=None, help='Write the breakdown to CSV')
@click.option('--config', 'config_path', type=click.Path(exists=True), default=None,
              help='Path to delivery configuration YAML')
def cross_charge(scenario, start, end, group_type, group_value, with_holidays, output,
                 config_path):
    """Attribute people's time and cost to projects over a date range."""
    config, scenario_doc = _load(config_path, scenario)
    start, end = start.date(), end.date()

    try:
        validate_range(start, end)
        user_ids = select_cohort(
            group_type, group_value, list(scenario_doc.profile_map().values()),
            scenario_doc.membership_entities(),
        )
    except DomainError as e:
        raise click.ClickException(e.message)

    if not user_ids:
        click.echo("No users match the selected cohort.")
        return

    absences = scenario_doc.absence_entities()
    if with_holidays:
        absences += holiday_absences(
            config.public_holidays, user_ids, start,
            existing=absences,
            horizon_days=min((end - start).days, config.holiday_sync_horizon_days),
        )

    resolver = AllocationResolver(
        scenario_doc.history_entities(),
        scenario_doc.current_allocation_entities(),
        scenario_doc.membership_entities(),
    )
    aggregator = CrossChargeAggregator(
        resolver, config.day_rate_table(), config.working_hours_per_week
    )
    results = aggregator.aggregate(
        start, end, user_ids, absences,
        profiles=scenario_doc.profile_map(),
        project_titles=scenario_doc.project_titles(),
    )

    if not results:
        click.echo("No allocated time in the selected range.")
        return

    click.echo(click.style(f'Cross-Charging {start} to {end}', fg='cyan', bold=True))
    click.echo(project_totals_frame(results).to_string(index=False))
    breakdown = cross_charge_frame(results)
    click.echo("")
    click.echo(breakdown.to_string(index=False))

    if output:
        breakdown.to_csv(output, index=False)
        click.echo(click.style(f"\nWrote {len(breakdown)} row(s) to {output}", fg='green'))


if __name__ == '__main__':
    cli()
