#!/usr/bin/env python3
import json
import os
import sys

import click

from cohort_signup import deploy
from cohort_signup.payments.replay import replay_payments
from cohort_signup.reconcile import reconcile
from cohort_signup.registration.availability import check_availability
from cohort_signup.shared.config import Settings
from cohort_signup.shared.exceptions import CohortSignupError
from cohort_signup.shared.logs import configure_logging
from cohort_signup.shared.notion import NotionStore
from cohort_signup.shared.utils import load_yaml


def load_config(config_file):
    """Loads the YAML configuration file. A missing file means environment-only settings."""
    if not os.path.exists(config_file):
        return {}
    return load_yaml(config_file)


class Context:

    def __init__(self, config_file):
        self.config_file = config_file
        self.data = load_config(config_file)
        self._settings = None
        self._store = None

    @property
    def options(self):
        return self.data.get('options') or {}

    @property
    def settings(self):
        if self._settings is None:
            self._settings = Settings.from_mapping(self.data)
        return self._settings

    @property
    def store(self):
        if self._store is None:
            self._store = NotionStore(self.settings)
        return self._store


pass_context = click.make_pass_decorator(Context)


@click.group()
@click.option('--config', default='data.yaml', show_default=True,
              help='YAML data file.')
@click.option('--log-level', default=None, help='Overrides LOG_LEVEL.')
@click.pass_context
def cli(ctx, config, log_level):
    """Operator tooling for the cohort registration functions."""
    configure_logging(log_level)
    ctx.obj = Context(config)


@cli.command('check-avail')
@click.argument('cohort')
@click.option('--date', 'start_date', default=None, help='Start date (yyyy-mm-dd).')
@pass_context
def check_avail(ctx, cohort, start_date):
    """Shows paid registrations and spots left for a cohort."""
    try:
        availability = check_availability(ctx.store, cohort, start_date,
                                          capacity=ctx.settings.capacity)
    except CohortSignupError as e:
        raise click.ClickException(str(e))
    click.echo(json.dumps(availability.to_response(), indent=2))


@cli.command('reconcile')
@pass_context
def reconcile_command(ctx):
    """Reports duplicate registrations and over-capacity cohort dates."""
    try:
        report = reconcile(ctx.store, ctx.settings)
    except CohortSignupError as e:
        raise click.ClickException(str(e))

    click.echo(f"{report['registrations']} registrations checked")
    for (email, cohort, start_date), ids in report['duplicates'].items():
        click.echo(f"DUPLICATE {email} {cohort} {start_date}: {', '.join(ids)}")
    for (cohort, start_date), ids in report['over_capacity'].items():
        click.echo(f"OVER CAPACITY {cohort} {start_date}: {len(ids)} paid "
                   f"(capacity {ctx.settings.capacity})")
    if report['duplicates'] or report['over_capacity']:
        sys.exit(1)
    click.echo("No conflicts found.")


@cli.command('replay-payments')
@click.option('--since', default=None, help='Only sessions created on or after this date (yyyy-mm-dd).')
@pass_context
def replay_payments_command(ctx, since):
    """Applies completed Stripe Checkout Sessions to the registrations."""
    try:
        results = replay_payments(ctx.store, ctx.settings, since=since)
    except CohortSignupError as e:
        raise click.ClickException(str(e))

    for session_id, result in results:
        if 'error' in result:
            click.echo(f"  SKIPPED {session_id}: {result['error']}")
        elif result.get('ignored'):
            click.echo(f"  IGNORED {session_id}: {result['reason']}")
        else:
            click.echo(f"  {session_id}: {result['updated']} updated ({result['email']})")
    click.echo(f"Replayed {len(results)} sessions.")


@cli.command('deploy')
@click.option('--dry-run', is_flag=True, help='Package without deploying to AWS.')
@pass_context
def deploy_command(ctx, dry_run):
    """Packages and deploys the configured Lambda functions."""
    functions = ctx.data.get('lambda_functions') or []
    if not functions:
        click.echo("No Lambda functions found in the data file.")
        return
    try:
        settings = ctx.settings
    except CohortSignupError as e:
        raise click.ClickException(str(e))

    for function in functions:
        if not function.get('deploy', True):
            continue
        zip_path = deploy.package_lambda(function['name'])
        status = deploy.deploy_lambda(zip_path, function, ctx.options, settings,
                                      dry_run=dry_run)
        click.echo(f"{function['name']}: {status}")


@cli.command('check-endpoints')
@pass_context
def check_endpoints_command(ctx):
    """Smoke-tests the deployed endpoints listed under api_endpoints."""
    endpoints = ctx.data.get('api_endpoints') or []
    if not endpoints:
        click.echo("No API endpoints found in the data file.")
        return
    failures = deploy.check_endpoints(endpoints)
    if failures:
        click.echo(f"{failures} API endpoint tests failed.")
        sys.exit(1)
    click.echo("All API endpoint tests passed.")


def main():
    cli()


if __name__ == '__main__':
    main()
