"""Pydantic models for database configuration and declared tables."""

from pydantic import BaseModel, Field

from sqlschema.schema.models import TableSchema


# ============================================================================
# Configuration Models
# ============================================================================


class DatabaseProfile(BaseModel):
    """Database connection profile from db.toml."""

    url: str
    description: str = ""
    db_password: str | None = None  # For [YOUR-PASSWORD] placeholder substitution


class DatabaseConfig(BaseModel):
    """Complete database configuration from db.toml."""

    profiles: dict[str, DatabaseProfile]
    default_profile: str | None = None
    schema_file: str = "tables.toml"


# ============================================================================
# Declared Tables
# ============================================================================


class TableDefinitions(BaseModel):
    """Declared tables loaded from a table definition file."""

    tables: list[TableSchema] = Field(default_factory=list)

    def get(self, name: str) -> TableSchema | None:
        for table in self.tables:
            if table.name == name:
                return table
        return None
