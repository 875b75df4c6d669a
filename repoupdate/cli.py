#!/usr/bin/env python3

import json
import logging
import sys
from functools import wraps
from pathlib import Path

import click
from rich.console import Console
from rich.text import Text

from repoupdate.config import (
    load_config,
    get_config_path,
    configure_logging,
    UpdateConfig,
)
from repoupdate.domain.operation import OperationStatus, UpdateResult
from repoupdate.exit_codes import (
    CommandError,
    ConfigError,
    INTERRUPTED,
    exit_code_for_result,
)
from repoupdate.services.update_service import UpdateService

console = Console()

STATUS_STYLES = {
    OperationStatus.SUCCESS: ("✓", "green"),
    OperationStatus.UP_TO_DATE: ("✓", "cyan"),
    OperationStatus.SKIPPED: ("!", "yellow"),
    OperationStatus.FAILED: ("✗", "red"),
}


def handle_errors(func):
    """Turn CommandError and Ctrl+C into exit codes."""
    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except KeyboardInterrupt:
            click.echo("Interrupted by user", err=True)
            sys.exit(INTERRUPTED)
        except CommandError as e:
            click.echo(f"Error: {e}", err=True)
            sys.exit(e.exit_code)
    return wrapper


def get_service(ctx) -> UpdateService:
    """Build the UpdateService for the selected working copy."""
    obj = ctx.ensure_object(dict)
    if 'service' not in obj:
        try:
            config = UpdateConfig.from_config(obj.get('config') or load_config(), base_dir=obj.get('base_dir'))
        except ValueError as e:
            raise ConfigError(str(e)) from e
        if not Path(config.base_dir).is_dir():
            raise ConfigError(f"Base directory does not exist: {config.base_dir}")
        obj['service'] = UpdateService(config)
    return obj['service']


def show_result(result: UpdateResult, json_output: bool):
    """Print a flow result and exit with the matching code."""
    if json_output:
        print(json.dumps(result.to_dict(), ensure_ascii=False), flush=True)
    else:
        symbol, style = STATUS_STYLES[result.status]
        line = Text()
        line.append(f"{symbol} ", style=f"bold {style}")
        line.append(result.message or result.error or result.action)
        if result.branch:
            line.append(f" ({result.branch})", style="dim")
        console.print(line)

    sys.exit(exit_code_for_result(result))


@click.group()
@click.version_option(package_name='repoupdate')
@click.option('--base-dir', type=click.Path(file_okay=False), default=None,
              help='Working copy to operate on (default: config or current directory)')
@click.option('--verbose', '-v', is_flag=True, help='Log git output at debug level')
@click.pass_context
def cli(ctx, base_dir, verbose):
    """repoupdate - Self-update an installed application from its git history.

    Fetches the full remote history, fast-forwards the current branch,
    moves between release branches and reports the running version.
    """
    config = load_config()
    configure_logging(logging.DEBUG if verbose else None, config)
    ctx.ensure_object(dict)
    ctx.obj['config'] = config
    ctx.obj['base_dir'] = base_dir


@cli.command('update')
@click.option('--minor', is_flag=True, help='Switch to the latest minor branch of the current release')
@click.option('--json', 'json_output', is_flag=True, help='Output result as JSON')
@click.pass_context
@handle_errors
def update_handler(ctx, minor, json_output):
    """Update the working copy to the latest upstream commit.

    With --minor, switch from release-<major> (or release-<major>.<minor>)
    to the newest release-<major>.<minor> branch instead.

    Examples:

    \b
        repoupdate update
        repoupdate --base-dir /opt/myapp update --minor
    """
    service = get_service(ctx)
    result = service.update_to_latest_minor() if minor else service.update_to_latest()
    show_result(result, json_output)


@cli.command('switch')
@click.argument('branch')
@click.option('--json', 'json_output', is_flag=True, help='Output result as JSON')
@click.pass_context
@handle_errors
def switch_handler(ctx, branch, json_output):
    """Switch the working copy to BRANCH.

    Names starting with a digit (or v and a digit) are treated as tags
    and checked out detached.
    """
    result = get_service(ctx).switch_branch(branch)
    show_result(result, json_output)


@cli.command('check')
@click.option('--json', 'json_output', is_flag=True, help='Output result as JSON')
@click.pass_context
@handle_errors
def check_handler(ctx, json_output):
    """Fetch and report whether upstream has new commits."""
    result = get_service(ctx).check_for_updates()
    show_result(result, json_output)


@cli.command('version')
@click.pass_context
@handle_errors
def version_handler(ctx):
    """Print the version of the working copy."""
    click.echo(get_service(ctx).version())


@cli.command('branches')
@click.option('--json', 'json_output', is_flag=True, help='Output as JSONL')
@click.pass_context
@handle_errors
def branches_handler(ctx, json_output):
    """List local and remote branches without the origin prefix."""
    service = get_service(ctx)
    current = service.repo.current_branch()
    for branch in service.repo.all_branches():
        if json_output:
            print(json.dumps({'branch': branch, 'current': branch == current}))
        elif branch == current:
            console.print(Text(f"* {branch}", style="bold green"))
        else:
            console.print(Text(f"  {branch}"))


@cli.group('config')
def config_cmd():
    """Inspect repoupdate configuration."""
    pass


@config_cmd.command('show')
@click.pass_context
def config_show(ctx):
    """Print the effective configuration as JSON."""
    config = ctx.obj.get('config') or load_config()
    click.echo(json.dumps(config, indent=2))


@config_cmd.command('path')
def config_path():
    """Print the configuration file location."""
    click.echo(str(get_config_path()))


def main():
    cli()

if __name__ == "__main__":
    main()
