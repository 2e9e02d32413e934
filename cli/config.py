"""Configuration file handling for the schemadump CLI.

The config lives in ``~/.schemadump.yaml`` (or ``$SCHEMADUMP_CONFIG``) and
holds named connection strings plus defaults for CLI options.
"""

import os
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, ValidationError

from schemadump.sources.database.engine import SUPPORTED_DATABASE_TYPES

CONFIG_ENV_VAR = "SCHEMADUMP_CONFIG"
CONFIG_FILE_NAME = ".schemadump.yaml"


class OutputDefaults(BaseModel):
    """Defaults for dump output"""

    format: str = Field(default="json", description="Output format: json or yaml")
    pretty: bool = Field(default=False, description="Pretty-print JSON output")


class DatabaseDefaults(BaseModel):
    """Defaults for database extraction"""

    type: str | None = Field(default=None, description="Database type: postgresql, mysql, or sqlite")
    schema_name: str | None = Field(default=None, alias="schema", description="Database schema name")

    model_config = {"populate_by_name": True}


class Defaults(BaseModel):
    output: OutputDefaults = Field(default_factory=OutputDefaults)
    database: DatabaseDefaults = Field(default_factory=DatabaseDefaults)


class Config(BaseModel):
    """Contents of the config file"""

    version: str = Field(default="1.0", description="Config file format version")
    connections: dict[str, str] = Field(default_factory=dict, description="Named connection strings")
    defaults: Defaults = Field(default_factory=Defaults)


def get_config_path() -> Path:
    """Return the config file path, honouring $SCHEMADUMP_CONFIG."""
    override = os.environ.get(CONFIG_ENV_VAR)
    if override:
        return Path(override)
    return Path.home() / CONFIG_FILE_NAME


def load_config() -> Config:
    """Load the config file; a missing file yields the defaults.

    Raises:
        ValueError: If the file is not valid YAML or does not match the schema
    """
    config_path = get_config_path()
    if not config_path.exists():
        return Config()

    try:
        with config_path.open(encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in {config_path}: {e}") from e

    if not isinstance(data, dict):
        raise ValueError(f"Invalid config in {config_path}: expected a mapping")

    try:
        return Config.model_validate(data)
    except ValidationError as e:
        raise ValueError(f"Invalid config in {config_path}: {e}") from e


def save_config(config: Config) -> Path:
    """Write config to the config file and return its path."""
    config_path = get_config_path()
    config_path.parent.mkdir(parents=True, exist_ok=True)
    data = config.model_dump(by_alias=True)
    config_path.write_text(
        yaml.dump(data, default_flow_style=False, allow_unicode=True, sort_keys=False),
        encoding="utf-8",
    )
    return config_path


def init_config(force: bool = False) -> Path:
    """Create a config file with default values.

    Raises:
        FileExistsError: If the file exists and force is False
    """
    config_path = get_config_path()
    if config_path.exists() and not force:
        raise FileExistsError(f"Config file already exists: {config_path}")
    return save_config(Config())


def get_connection(name: str, config: Config | None = None) -> str:
    """Look up a named connection.

    Raises:
        KeyError: If no connection has that name
    """
    config = config or load_config()
    if name not in config.connections:
        raise KeyError(f"Connection '{name}' not found in config")
    return config.connections[name]


def resolve_connection(value: str, config: Config | None = None) -> str:
    """Resolve ``@name`` references to connection strings; other values pass through."""
    if value.startswith("@"):
        return get_connection(value[1:], config)
    return value


def get_output_defaults(config: Config | None = None) -> OutputDefaults:
    config = config or load_config()
    return config.defaults.output


def get_database_defaults(config: Config | None = None) -> DatabaseDefaults:
    config = config or load_config()
    return config.defaults.database


def validate_config(config: Config) -> list[str]:
    """Return a list of problems with config; empty when it is valid."""
    errors = []
    if config.defaults.output.format not in ("json", "yaml"):
        errors.append("'defaults.output.format' must be 'json' or 'yaml'")
    database_type = config.defaults.database.type
    if database_type is not None and database_type not in SUPPORTED_DATABASE_TYPES:
        errors.append(f"'defaults.database.type' must be one of {', '.join(SUPPORTED_DATABASE_TYPES)}")
    for name, connection in config.connections.items():
        if "://" not in connection:
            errors.append(f"Connection '{name}' is not a URL")
    return errors
