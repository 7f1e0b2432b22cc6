"""Migration report generation."""

from datetime import datetime
from pathlib import Path
from typing import Dict, Optional

from loguru import logger

from ..utils.fs import write_text
from .ledger import ChangeType, MigrationResult


def summarize_by_type(result: MigrationResult) -> Dict[ChangeType, int]:
    """Count changes per change type, in declaration order."""
    counts = result.counts_by_type()
    return {change_type: counts[change_type.value] for change_type in ChangeType}


def _cell(value: str) -> str:
    return value.replace('|', '\\|').replace('\n', ' ')


def render_migration_report(
    result: MigrationResult, generated_at: Optional[datetime] = None
) -> str:
    """Render the Markdown body of ``MIGRATION.md``.

    Args:
        result: Completed migration ledger
        generated_at: Timestamp shown in the overview, defaults to now

    Returns:
        Report text
    """
    generated_at = generated_at or datetime.now()
    lines = [
        '# Migration Report',
        '',
        '## Overview',
        '',
        f'- **Source Engine**: {result.engine_name}',
        f'- **Migration Date**: {generated_at:%Y-%m-%d %H:%M:%S}',
        f'- **Total Changes**: {len(result.changes)}',
    ]
    for change_type, count in summarize_by_type(result).items():
        lines.append(f'  - {change_type!s}: {count}')
    lines += [
        f'- **Warnings**: {len(result.warnings)}',
        f'- **Errors**: {len(result.errors)}',
        '',
        '## Changes',
        '',
    ]

    if result.changes:
        lines += ['| File | Type | Description |', '|------|------|-------------|']
        lines += [
            f'| {_cell(c.file_path)} | {c.change_type!s} | {_cell(c.description)} |'
            for c in result.changes
        ]
    else:
        lines.append('No files were changed.')

    lines += ['', '## Warnings', '']
    lines += [f'- {w}' for w in result.warnings] or ['None.']

    if result.errors:
        lines += ['', '## Errors', '']
        lines += [f'- {e}' for e in result.errors]

    lines += [
        '',
        '## Next Steps',
        '',
        '1. Review the migrated content to ensure everything was converted correctly.',
        '2. Build the site with Jekyll and fix any template errors.',
        '3. Address any warnings listed above.',
        '4. Check the README.md files in each directory for guidance about the '
        'migrated components.',
        '',
    ]
    return '\n'.join(lines)


def generate_migration_report(result: MigrationResult, dest_dir: Path) -> Path:
    """Write ``MIGRATION.md`` into the destination directory.

    Args:
        result: Completed migration ledger
        dest_dir: Destination root

    Returns:
        Path of the written report

    Raises:
        MigrationWriteError: If the report cannot be written
    """
    report_path = Path(dest_dir) / 'MIGRATION.md'
    write_text(report_path, render_migration_report(result))
    logger.bind(component='report').info(f'Migration report written to {report_path}')
    return report_path
