"""Main CLI entry point for Site Migration Tool."""

import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .. import __version__
from ..config.config import Config
from ..migration.extensions import NullExtensionLoader
from ..migration.ledger import MigrationResult
from ..migration.registry import default_registry
from ..migration.report import generate_migration_report, summarize_by_type
from ..utils.logging import setup_logging

console = Console()

DEFAULT_CONFIG_PATHS = ['site-migrate.yaml', 'site-migrate.yml', '.site-migrate.yaml']
MAX_LISTED_MESSAGES = 5
# Wide enough that the summary title never wraps
SUMMARY_MIN_WIDTH = 48


@click.group()
@click.version_option(version=__version__, prog_name='site-migrate')
@click.option(
    '--config',
    '-c',
    type=click.Path(exists=True),
    help='Path to configuration file',
)
@click.option(
    '--verbose',
    '-v',
    is_flag=True,
    help='Enable verbose logging',
)
@click.pass_context
def cli(ctx: click.Context, config: Optional[str], verbose: bool) -> None:
    """Site Migration Tool - Convert static sites from other generators to a Jekyll layout."""
    ctx.ensure_object(dict)

    if config:
        ctx.obj['config_path'] = config
    ctx.obj['verbose'] = verbose

    # Basic logging until the config file has been read
    log_level = 'DEBUG' if verbose else 'INFO'
    setup_logging(log_level)


@cli.command()
@click.option(
    '--output',
    '-o',
    default='site-migrate.yaml',
    help='Output configuration file path',
)
@click.pass_context
def init(ctx: click.Context, output: str) -> None:
    """Initialize a new configuration file."""
    console.print(
        Panel.fit(
            '[bold green]Site Migration Tool[/bold green]\n'
            'Initializing configuration...',
            border_style='green',
        )
    )

    try:
        Config.create_template(output)

        console.print(f'[green]✓[/green] Configuration template created at: {output}')
        console.print(f'[yellow]Edit {output} to change migration defaults[/yellow]')

    except Exception as e:
        console.print(f'[red]✗[/red] Failed to create configuration: {e}')
        sys.exit(1)


@cli.command()
def engines() -> None:
    """List supported source generators in detection order."""
    table = Table(title='Supported Engines')
    table.add_column('#', style='dim')
    table.add_column('Engine', style='cyan')
    table.add_column('Aliases', style='magenta')
    table.add_column('Description', style='green')

    for position, engine in enumerate(default_registry(), start=1):
        table.add_row(
            str(position), engine.name, ', '.join(engine.aliases), engine.description
        )

    console.print(table)


@cli.command()
@click.argument('source', type=click.Path(exists=True, file_okay=False))
@click.pass_context
def detect(ctx: click.Context, source: str) -> None:
    """Show which engine would migrate SOURCE."""
    registry = default_registry()
    candidates = registry.candidates(Path(source))

    if not candidates:
        console.print(f'[red]✗[/red] No supported site generator detected in {source}')
        sys.exit(1)

    console.print(f'[green]✓[/green] Detected engine: [bold]{candidates[0].name}[/bold]')
    if len(candidates) > 1:
        console.print(
            '[yellow]Other matching engines:[/yellow] '
            + ', '.join(engine.name for engine in candidates[1:])
        )


@cli.command()
@click.argument('source', type=click.Path(exists=True, file_okay=False))
@click.option('--dest', '-d', help='Destination directory')
@click.option('--engine', '-e', help='Engine to use instead of auto-detection')
@click.option('--clean', is_flag=True, help='Delete the destination before migrating')
@click.option('--no-report', is_flag=True, help='Do not write MIGRATION.md')
@click.pass_context
def migrate(
    ctx: click.Context,
    source: str,
    dest: Optional[str],
    engine: Optional[str],
    clean: bool,
    no_report: bool,
) -> None:
    """Migrate the site in SOURCE."""
    console.print(
        Panel.fit(
            '[bold blue]Site Migration Tool[/bold blue]\n'
            'Starting migration process...',
            border_style='blue',
        )
    )

    try:
        config = _load_config(ctx)
        _setup_logging_with_config(ctx, config)

        selected = default_registry().resolve(Path(source), engine or config.migrate.engine)
        options = config.options_for(
            source,
            destination=dest,
            clean=True if clean else None,
            verbose=True if ctx.obj.get('verbose') else None,
        )
        console.print(
            f'[blue]Engine:[/blue] {selected.name}  '
            f'[blue]Destination:[/blue] {options.dest_dir}'
        )

        with console.status(f'[blue]Migrating {selected.name} site...'):
            result = selected.migrate(options)

        console.print('[green]✓[/green] Migration completed successfully')

        if config.migrate.write_report and not no_report:
            report_path = generate_migration_report(result, options.dest_dir)
            console.print(f'[green]✓[/green] Migration report written to {report_path}')

        _display_migration_summary(result)

    except Exception as e:
        console.print(f'[red]✗[/red] Migration failed: {e}')
        if ctx.obj.get('verbose'):
            console.print_exception()
        sys.exit(1)


@cli.command()
@click.pass_context
def status(ctx: click.Context) -> None:
    """Show the effective configuration."""
    console.print(
        Panel.fit(
            '[bold magenta]Site Migration Tool[/bold magenta]\nConfiguration Status',
            border_style='magenta',
        )
    )

    try:
        config = _load_config(ctx)
        _setup_logging_with_config(ctx, config)

        table = Table(title='Migration Configuration')
        table.add_column('Setting', style='cyan')
        table.add_column('Value', style='green')

        table.add_row('Destination', config.migrate.destination)
        table.add_row('Engine', config.migrate.engine or 'auto-detect')
        table.add_row('Clean Destination', '✓' if config.migrate.clean else '✗')
        table.add_row('Verbose', '✓' if config.migrate.verbose else '✗')
        table.add_row('Write Report', '✓' if config.migrate.write_report else '✗')
        table.add_row('Extensions', '✓' if config.extensions.enabled else '✗')
        table.add_row('Log Level', config.logging.level)
        table.add_row('Log File', config.logging.file or '-')

        console.print(table)

        if config.extensions.enabled and config.extensions.paths:
            _display_extensions(config)

    except Exception as e:
        console.print(f'[red]✗[/red] Failed to load status: {e}')
        if ctx.obj.get('verbose'):
            console.print_exception()
        sys.exit(1)


def _load_config(ctx: click.Context) -> Config:
    """Load configuration from file or environment."""
    config_path = ctx.obj.get('config_path')

    if config_path:
        return Config.from_file(config_path)

    for path in DEFAULT_CONFIG_PATHS:
        if Path(path).exists():
            return Config.from_file(path)

    return Config.from_env()


def _setup_logging_with_config(ctx: click.Context, config: Config) -> None:
    """Setup logging with configuration from config file."""
    verbose = ctx.obj.get('verbose', False)

    # The verbose flag overrides the configured level
    log_level = 'DEBUG' if verbose else config.logging.level
    setup_logging(
        level=log_level, log_file=config.logging.file, log_format=config.logging.format
    )


def _display_extensions(config: Config) -> None:
    """List configured extensions; none of them are executed."""
    loader = NullExtensionLoader()
    table = Table(title='Extensions')
    table.add_column('Path', style='cyan')
    table.add_column('State', style='yellow')

    for path in config.extensions.paths:
        handle = loader.load(Path(path))
        table.add_row(str(handle.path), 'loaded' if handle.loaded else 'inert')
        loader.unload(handle)

    console.print(table)


def _display_migration_summary(result: MigrationResult) -> None:
    """Display migration summary results."""
    table = Table(
        title=f'{result.engine_name} Migration Summary', min_width=SUMMARY_MIN_WIDTH
    )
    table.add_column('Change Type', style='cyan')
    table.add_column('Files', style='green')

    for change_type, count in summarize_by_type(result).items():
        table.add_row(str(change_type), str(count))
    table.add_row('Total', str(len(result.changes)), style='bold')

    console.print(table)

    if result.warnings:
        console.print(f'\n[yellow]Warnings ({len(result.warnings)}):[/yellow]')
        for warning in result.warnings[:MAX_LISTED_MESSAGES]:
            console.print(f'  • {warning}')
        if len(result.warnings) > MAX_LISTED_MESSAGES:
            console.print(
                f'  ... and {len(result.warnings) - MAX_LISTED_MESSAGES} more warnings'
            )

    if result.errors:
        console.print(f'\n[red]Errors ({len(result.errors)}):[/red]')
        for error in result.errors[:MAX_LISTED_MESSAGES]:
            console.print(f'  • {error}')
        if len(result.errors) > MAX_LISTED_MESSAGES:
            console.print(
                f'  ... and {len(result.errors) - MAX_LISTED_MESSAGES} more errors'
            )


def main() -> None:
    """Main entry point for the CLI application."""
    try:
        cli()
    except KeyboardInterrupt:
        console.print('\n[red]Migration interrupted by user[/red]')
        sys.exit(1)
    except Exception as e:
        console.print(f'[red]Error: {e}[/red]')
        sys.exit(1)


if __name__ == '__main__':
    main()
