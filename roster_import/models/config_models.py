from __future__ import annotations

from dataclasses import dataclass, field

"""Config dataclasses for the student roster importer.

These are the typed form of config/import.yml after schema validation in
roster_import/config/loader.py. Environment variables take precedence over the
database section (see cli._resolve_dsn).
"""


@dataclass(frozen=True)
class DatabaseConfig:
    """Database connection configuration.

    Used as fallback when environment variables are not set.
    """
    host: str | None = None
    port: int | None = None
    user: str | None = None
    password: str | None = None
    database: str | None = None
    dsn: str | None = None


@dataclass(frozen=True)
class ClassSeed:
    """A class entry declared in the config file (dry-run / offline mode only)."""
    id: str
    name: str
    sort_order: int = 0


@dataclass(frozen=True)
class ImportConfig:
    """Root configuration object for one import run."""
    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    batch_size: int = 100  # rows per upsert round-trip
    students_table: str = "students"
    classes_table: str = "classes"
    error_log_dir: str = "logs"
    timezone: str = "UTC"
    classes: tuple[ClassSeed, ...] = ()  # offline class list, ignored when a DB is reachable
