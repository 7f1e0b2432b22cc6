"""Change ledger recording what a migration did."""

from enum import Enum
from typing import Dict, List

from pydantic import BaseModel, ConfigDict, Field


class ChangeType(str, Enum):
    """How a destination file came to exist."""

    CREATED = 'created'
    CONVERTED = 'converted'
    COPIED = 'copied'
    SKIPPED = 'skipped'

    def __str__(self) -> str:
        return self.value.capitalize()


class MigrationChange(BaseModel):
    """One ledger entry describing a single file's treatment."""

    model_config = ConfigDict(frozen=True)

    file_path: str = Field(..., description='Path relative to the destination root')
    change_type: ChangeType = Field(..., description='Kind of change')
    description: str = Field(default='', description='Human readable note')


class MigrationResult(BaseModel):
    """Ordered account of a migration run."""

    engine_name: str = Field(..., description='Engine that performed the migration')
    changes: List[MigrationChange] = Field(
        default_factory=list, description='Changes in execution order'
    )
    warnings: List[str] = Field(
        default_factory=list, description='Advisories that did not block the run'
    )
    errors: List[str] = Field(
        default_factory=list,
        description='Per-file problems that were reported but not fatal',
    )

    def add_change(
        self, file_path: str, change_type: ChangeType, description: str = ''
    ) -> MigrationChange:
        """Append a change to the ledger.

        Args:
            file_path: Path relative to the destination root
            change_type: Kind of change
            description: Human readable note

        Returns:
            The recorded change
        """
        change = MigrationChange(
            file_path=file_path, change_type=change_type, description=description
        )
        self.changes.append(change)
        return change

    def add_warning(self, message: str) -> None:
        self.warnings.append(message)

    def add_error(self, message: str) -> None:
        self.errors.append(message)

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)

    def paths_for(self, change_type: ChangeType) -> List[str]:
        """List recorded file paths of one change type, in ledger order."""
        return [c.file_path for c in self.changes if c.change_type == change_type]

    def counts_by_type(self) -> Dict[str, int]:
        """Count changes per type, including types with no entries."""
        counts = {change_type.value: 0 for change_type in ChangeType}
        for change in self.changes:
            counts[change.change_type.value] += 1
        return counts
