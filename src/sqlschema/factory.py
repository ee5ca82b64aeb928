"""Database adapter factory.

Resolves a profile from db.toml and builds an ``AsyncMySQLAdapter`` for it.

Profile resolution order:
1. Explicit ``profile_name`` argument (e.g. ``--profile``)
2. ``<prefix>DB_PROFILE`` environment variable
3. ``default_profile`` key in db.toml
4. Raise ``ProfileNotFoundError``

Usage:
    from sqlschema.factory import get_adapter

    adapter = get_adapter()                      # active profile
    adapter = get_adapter("staging")             # explicit profile
    adapter = get_adapter(env_prefix="APP_")     # reads APP_DB_PROFILE
"""

import os
from pathlib import Path
from urllib.parse import quote

from sqlschema.adapters.mysql import AsyncMySQLAdapter
from sqlschema.config.loader import load_db_config
from sqlschema.config.models import DatabaseConfig, DatabaseProfile

PASSWORD_PLACEHOLDER = "[YOUR-PASSWORD]"


class ProfileNotFoundError(Exception):
    """Raised when no database profile is configured or the name is unknown."""

    pass


def resolve_url(profile: DatabaseProfile) -> str:
    """Resolve profile URL with password substitution.

    Args:
        profile: Database profile from config

    Returns:
        Connection URL with password substituted

    Example:
        >>> p = DatabaseProfile(url="mysql://root:[YOUR-PASSWORD]@db/app", db_password="p@ss")
        >>> resolve_url(p)
        'mysql://root:p%40ss@db/app'
    """
    url = profile.url
    if profile.db_password and PASSWORD_PLACEHOLDER in url:
        url = url.replace(PASSWORD_PLACEHOLDER, quote(profile.db_password, safe=""))
    return url


def get_active_profile_name(
    env_prefix: str = "",
    config: DatabaseConfig | None = None,
) -> str:
    """Get active profile name from env var or db.toml default.

    Args:
        env_prefix: Prefix for the environment variable
            (``APP_`` reads ``APP_DB_PROFILE``).
        config: Loaded config to read ``default_profile`` from.

    Returns:
        Profile name

    Raises:
        ProfileNotFoundError: If no profile is configured
    """
    env_profile = os.environ.get(f"{env_prefix}DB_PROFILE")
    if env_profile:
        return env_profile

    if config is not None and config.default_profile:
        return config.default_profile

    raise ProfileNotFoundError(
        "No database profile configured.\n"
        f"Set {env_prefix}DB_PROFILE=<name>, pass --profile, "
        "or set default_profile in db.toml"
    )


def get_profile(
    profile_name: str | None = None,
    env_prefix: str = "",
    config_path: Path | None = None,
) -> tuple[str, DatabaseProfile]:
    """Get active profile name and configuration.

    Returns:
        Tuple of (profile_name, DatabaseProfile)

    Raises:
        FileNotFoundError: If db.toml doesn't exist
        ProfileNotFoundError: If no profile configured or not in db.toml
    """
    config = load_db_config(config_path)
    if profile_name is None:
        profile_name = get_active_profile_name(env_prefix=env_prefix, config=config)

    if profile_name not in config.profiles:
        available = ", ".join(config.profiles.keys()) or "(none)"
        raise ProfileNotFoundError(
            f"Profile '{profile_name}' not found in db.toml. Available: {available}"
        )

    return profile_name, config.profiles[profile_name]


def get_adapter(
    profile_name: str | None = None,
    env_prefix: str = "",
    config_path: Path | None = None,
) -> AsyncMySQLAdapter:
    """Create an adapter for the active (or given) profile.

    The caller owns the adapter and must ``await adapter.close()``.

    Raises:
        FileNotFoundError: If db.toml doesn't exist
        ProfileNotFoundError: If no usable profile is configured
    """
    _, profile = get_profile(profile_name, env_prefix=env_prefix, config_path=config_path)
    return AsyncMySQLAdapter(resolve_url(profile))
