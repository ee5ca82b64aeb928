"""Configuration management: profiles, TOML loading, and config models.

Usage:
    >>> from sqlschema.config import load_db_config, load_table_definitions
"""

from sqlschema.config.loader import load_db_config, load_table_definitions
from sqlschema.config.models import DatabaseConfig, DatabaseProfile, TableDefinitions

__all__ = [
    "load_db_config",
    "load_table_definitions",
    "DatabaseConfig",
    "DatabaseProfile",
    "TableDefinitions",
]
