"""Migration engine, stages and reporting."""

from .ledger import ChangeType, MigrationChange, MigrationResult
from .stages import (
    Stage,
    CopyTreeStage,
    PostsStage,
    ConfigStage,
    ScaffoldStage,
    GitignoreStage,
    ReadmeStage,
    NotImplementedStage,
)
from .engine import MigrationEngine
from .registry import EngineRegistry, default_registry
from .report import generate_migration_report, summarize_by_type
from .extensions import ExtensionHandle, ExtensionLoader, NullExtensionLoader

__all__ = [
    'ChangeType',
    'MigrationChange',
    'MigrationResult',
    'Stage',
    'CopyTreeStage',
    'PostsStage',
    'ConfigStage',
    'ScaffoldStage',
    'GitignoreStage',
    'ReadmeStage',
    'NotImplementedStage',
    'MigrationEngine',
    'EngineRegistry',
    'default_registry',
    'generate_migration_report',
    'summarize_by_type',
    'ExtensionHandle',
    'ExtensionLoader',
    'NullExtensionLoader',
]
