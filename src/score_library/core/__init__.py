"""Core infrastructure layer - no business logic dependencies.

This module provides foundation-level services:
- Configuration management (TOML)
- Database connections (SQLite locally, PostgreSQL remotely)
- Logging (Loguru) and console output (Rich)

Clean architecture principle: The core layer has no dependencies on
domain or application layers.
"""

# Configuration
from .config import (
    Config,
    load_config,
    get_config_dir,
    get_config_path,
    get_data_dir,
    create_default_config,
    ensure_directories,
)

# Database
from .database import (
    get_database_path,
    get_db_connection,
    init_database,
    migrate_database,
)
from .db_adapter import (
    get_postgres_connection,
    init_postgres_schema,
    is_postgres_url,
)

# Output
from .output import log, setup_loguru, setup_from_config

__all__ = [
    # Config
    "Config",
    "load_config",
    "get_config_dir",
    "get_config_path",
    "get_data_dir",
    "create_default_config",
    "ensure_directories",
    # Database
    "get_database_path",
    "get_db_connection",
    "init_database",
    "migrate_database",
    "get_postgres_connection",
    "init_postgres_schema",
    "is_postgres_url",
    # Output
    "log",
    "setup_loguru",
    "setup_from_config",
]
