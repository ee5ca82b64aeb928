"""Loading of db.toml profiles and declared table definitions."""

import tomllib
from pathlib import Path

from sqlschema.config.models import DatabaseConfig, DatabaseProfile, TableDefinitions

DEFAULT_CONFIG_FILE = "db.toml"


def load_db_config(config_path: Path | None = None) -> DatabaseConfig:
    """Load database configuration from TOML file.

    Args:
        config_path: Path to db.toml (default: ./db.toml)

    Returns:
        DatabaseConfig with all profiles

    Raises:
        FileNotFoundError: If config file doesn't exist
        ValueError: If config format is invalid

    Example:
        >>> config = load_db_config(Path("db.toml"))
        >>> sorted(config.profiles)
        ['local', 'staging']
    """
    if config_path is None:
        config_path = Path.cwd() / DEFAULT_CONFIG_FILE

    if not config_path.exists():
        raise FileNotFoundError(
            f"Database config not found: {config_path}\n"
            f"Create a db.toml with a [profiles.<name>] section."
        )

    with open(config_path, "rb") as f:
        data = tomllib.load(f)

    # Parse profiles
    profiles = {}
    for name, profile_data in data.get("profiles", {}).items():
        profiles[name] = DatabaseProfile(**profile_data)

    # Parse schema settings
    schema_settings = data.get("schema", {})

    return DatabaseConfig(
        profiles=profiles,
        default_profile=data.get("default_profile"),
        schema_file=schema_settings.get("file", "tables.toml"),
    )


def load_table_definitions(path: str | Path) -> TableDefinitions:
    """Load declared tables from a TOML file.

    The file holds one ``[[tables]]`` entry per table, with
    ``[[tables.columns]]`` and ``[[tables.indexes]]`` arrays::

        [[tables]]
        name = "users"
        engine = "InnoDB"

        [[tables.columns]]
        name = "id"
        data_type = "bigint(20)"
        auto_increment = true

        [[tables.indexes]]
        kind = "primary"
        columns = ["id"]

    Args:
        path: Path to the definition file.

    Returns:
        ``TableDefinitions`` with the tables in file order.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If a table definition is invalid.
    """
    definition_path = Path(path)
    if not definition_path.exists():
        raise FileNotFoundError(f"Table definition file not found: {definition_path}")

    with open(definition_path, "rb") as f:
        data = tomllib.load(f)

    definitions = TableDefinitions.model_validate(data)
    if not definitions.tables:
        raise ValueError(f"No tables declared in {definition_path.name}")
    return definitions
