"""Configuration management for Site Migration Tool."""

from typing import Optional, Dict, Any, List
from pathlib import Path
import os

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
import yaml
from dotenv import load_dotenv

from ..utils.fs import is_within


class MigrationOptions(BaseModel):
    """Immutable options for a single migration run."""

    model_config = ConfigDict(frozen=True)

    source_dir: Path = Field(..., description='Directory of the site to migrate')
    dest_dir: Path = Field(..., description='Directory to write the migrated site to')
    clean: bool = Field(
        default=False, description='Delete and recreate the destination first'
    )
    verbose: bool = Field(default=False, description='Log every migrated file')

    @model_validator(mode='after')
    def validate_clean_target(self) -> 'MigrationOptions':
        """Refuse to clean a destination that would wipe out the source."""
        if self.clean and is_within(self.source_dir, self.dest_dir):
            raise ValueError(
                'dest_dir must not contain source_dir when clean is enabled'
            )
        return self


class MigrateConfig(BaseModel):
    """Defaults applied to migrate runs."""

    destination: str = Field(
        default='./site-migrated', description='Default destination directory'
    )
    engine: Optional[str] = Field(
        default=None, description='Force an engine instead of auto-detecting'
    )
    clean: bool = Field(default=False, description='Clean destination before run')
    verbose: bool = Field(default=False, description='Log every migrated file')
    write_report: bool = Field(
        default=True, description='Write MIGRATION.md after a successful run'
    )

    @field_validator('engine')
    @classmethod
    def validate_engine(cls, v):
        """Normalise engine names to lower case."""
        if v is not None:
            v = v.strip().lower()
            if not v:
                return None
        return v


class ExtensionsConfig(BaseModel):
    """External extension settings."""

    enabled: bool = Field(default=False, description='Load external extensions')
    paths: List[str] = Field(
        default_factory=list, description='Extension files to load'
    )


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field(default='INFO', description='Log level')
    file: Optional[str] = Field(default=None, description='Log file path')
    format: Optional[str] = Field(default=None, description='Log format')

    @field_validator('level')
    @classmethod
    def validate_log_level(cls, v):
        """Validate log level."""
        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        if v.upper() not in valid_levels:
            raise ValueError(f'Log level must be one of: {valid_levels}')
        return v.upper()


class Config(BaseModel):
    """Main configuration class for Site Migration Tool."""

    model_config = ConfigDict(extra='forbid')

    migrate: MigrateConfig = Field(
        default_factory=MigrateConfig, description='Migration defaults'
    )
    extensions: ExtensionsConfig = Field(
        default_factory=ExtensionsConfig, description='Extension settings'
    )
    logging: LoggingConfig = Field(
        default_factory=LoggingConfig, description='Logging settings'
    )

    @classmethod
    def from_file(cls, config_path: str) -> 'Config':
        """Load configuration from YAML file."""
        config_file = Path(config_path)

        if not config_file.exists():
            raise FileNotFoundError(f'Configuration file not found: {config_path}')

        with open(config_file, 'r', encoding='utf-8') as f:
            config_data = yaml.safe_load(f)

        return cls(**(config_data or {}))

    @classmethod
    def from_env(cls) -> 'Config':
        """Load configuration from environment variables."""
        load_dotenv()

        extension_paths = os.getenv('SITE_MIGRATE_EXTENSIONS')

        config_data = {
            'migrate': {
                'destination': os.getenv('SITE_MIGRATE_DESTINATION'),
                'engine': os.getenv('SITE_MIGRATE_ENGINE'),
                'clean': _env_flag('SITE_MIGRATE_CLEAN'),
                'verbose': _env_flag('SITE_MIGRATE_VERBOSE'),
                'write_report': _env_flag('SITE_MIGRATE_WRITE_REPORT'),
            },
            'extensions': {
                'enabled': _env_flag('SITE_MIGRATE_EXTENSIONS_ENABLED'),
                'paths': extension_paths.split(os.pathsep)
                if extension_paths
                else None,
            },
            'logging': {
                'level': os.getenv('LOG_LEVEL'),
                'file': os.getenv('LOG_FILE'),
            },
        }

        config_data = cls._remove_none_values(config_data)

        return cls(**config_data)

    @staticmethod
    def _remove_none_values(data: Dict[str, Any]) -> Dict[str, Any]:
        """Recursively remove None values from dictionary."""
        if isinstance(data, dict):
            return {
                k: Config._remove_none_values(v)
                for k, v in data.items()
                if v is not None
            }
        return data

    def to_file(self, config_path: str) -> None:
        """Save configuration to YAML file."""
        config_file = Path(config_path)
        config_file.parent.mkdir(parents=True, exist_ok=True)

        with open(config_file, 'w', encoding='utf-8') as f:
            yaml.safe_dump(
                self.model_dump(),
                f,
                default_flow_style=False,
                indent=2,
                sort_keys=False,
            )

    def options_for(
        self,
        source: str,
        destination: Optional[str] = None,
        clean: Optional[bool] = None,
        verbose: Optional[bool] = None,
    ) -> MigrationOptions:
        """Build run options, letting explicit arguments win over defaults.

        Args:
            source: Source site directory
            destination: Destination directory (defaults to migrate.destination)
            clean: Clean flag override
            verbose: Verbose flag override

        Returns:
            Migration options for one run
        """
        return MigrationOptions(
            source_dir=Path(source),
            dest_dir=Path(destination or self.migrate.destination),
            clean=self.migrate.clean if clean is None else clean,
            verbose=self.migrate.verbose if verbose is None else verbose,
        )

    @staticmethod
    def create_template(output_path: str) -> None:
        """Create a configuration template file."""
        template_config = {
            'migrate': {
                'destination': './site-migrated',
                'engine': None,
                'clean': False,
                'verbose': False,
                'write_report': True,
            },
            'extensions': {
                'enabled': False,
                'paths': [],
            },
            'logging': {
                'level': 'INFO',
                'file': 'migration.log',
                'format': None,
            },
        }

        config_file = Path(output_path)
        config_file.parent.mkdir(parents=True, exist_ok=True)

        with open(config_file, 'w', encoding='utf-8') as f:
            yaml.safe_dump(
                template_config, f, default_flow_style=False, indent=2, sort_keys=False
            )


def _env_flag(name: str) -> Optional[bool]:
    """Read a boolean environment variable, None when unset."""
    value = os.getenv(name)
    if value is None:
        return None
    return value.strip().lower() in ('1', 'true', 'yes', 'on')
