"""
Database connector for the hosted Postgres service and the embedded SQLite file.

The backend is chosen once, from an explicit ``DbConfig``, by
``create_db_handle``. Both backends are exposed through the same ``DbHandle``:
an engine, a session factory and SQLAlchemy ``Table`` definitions that match
the physical schema of the chosen backend.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Optional

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Integer,
    MetaData,
    String,
    Table,
    Text,
    create_engine,
    text,
)
from sqlalchemy.dialects.postgresql import ARRAY
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

if TYPE_CHECKING:
    from drrm.config import Settings

logger = logging.getLogger(__name__)

MEMORY_PATH = ":memory:"


class BackendKind(str, enum.Enum):
    HOSTED = "hosted"
    EMBEDDED = "embedded"


class BackendUnavailableError(RuntimeError):
    """No working database backend could be opened."""


@dataclass(frozen=True)
class DbConfig:
    database_url: Optional[str] = None
    sqlite_path: str = "./dev.sqlite"
    create_hosted_schema: bool = False

    @property
    def kind(self) -> BackendKind:
        # An empty connection string counts as absent.
        return BackendKind.HOSTED if self.database_url else BackendKind.EMBEDDED

    @classmethod
    def from_settings(cls, settings: "Settings") -> "DbConfig":
        return cls(
            database_url=settings.database_url,
            sqlite_path=settings.sqlite_path,
            create_hosted_schema=settings.create_hosted_schema,
        )


@dataclass(frozen=True)
class Tables:
    metadata: MetaData
    users: Table
    incidents: Table
    go_bag_items: Table
    evacuation_centers: Table
    households: Table
    members: Table
    check_ins: Table
    hazard_zones: Table
    pois: Table


def build_tables(kind: BackendKind) -> Tables:
    """
    Table definitions for one backend. SQLite has no boolean or array column
    type, so flags are plain integers and coordinates a text blob there.
    """
    hosted = kind is BackendKind.HOSTED
    flag = Boolean if hosted else Integer
    sequence = ARRAY(Text) if hosted else Text
    metadata = MetaData()

    def id_column() -> Column:
        return Column("id", Integer, primary_key=True, autoincrement=True)

    def flag_column(name: str, default: bool) -> Column:
        if hosted:
            server_default = text("true" if default else "false")
        else:
            server_default = text("1" if default else "0")
        return Column(name, flag, nullable=False, server_default=server_default)

    return Tables(
        metadata=metadata,
        users=Table(
            "users",
            metadata,
            Column("id", String, primary_key=True),
            Column("username", Text, nullable=False, unique=True),
            Column("password", Text, nullable=False),
        ),
        incidents=Table(
            "incidents",
            metadata,
            id_column(),
            Column("type", Text, nullable=False),
            Column("description", Text, nullable=False),
            Column("location", Text, nullable=False),
            Column("latitude", Text),
            Column("longitude", Text),
            flag_column("is_anonymous", False),
            Column(
                "reported_at",
                DateTime,
                nullable=False,
                server_default=text("CURRENT_TIMESTAMP"),
            ),
        ),
        go_bag_items=Table(
            "go_bag_items",
            metadata,
            id_column(),
            Column("category", Text, nullable=False),
            Column("name", Text, nullable=False),
            flag_column("checked", False),
        ),
        evacuation_centers=Table(
            "evacuation_centers",
            metadata,
            id_column(),
            Column("name", Text, nullable=False),
            Column("distance", Text, nullable=False),
            Column("capacity", Text, nullable=False),
            Column("status", Text, nullable=False, server_default=text("'Open'")),
            Column("latitude", Text),
            Column("longitude", Text),
        ),
        households=Table(
            "households",
            metadata,
            id_column(),
            Column("name", Text, nullable=False),
            Column("address", Text),
        ),
        members=Table(
            "members",
            metadata,
            id_column(),
            Column("household_id", Integer, nullable=False, index=True),
            Column("name", Text, nullable=False),
            Column("contact", Text),
            Column("last_known_location", Text),
            Column("status", Text, nullable=False, server_default=text("'unknown'")),
        ),
        check_ins=Table(
            "check_ins",
            metadata,
            id_column(),
            Column("member_id", Integer, nullable=False, index=True),
            Column("location", Text),
            flag_column("is_safe", True),
            Column(
                "timestamp",
                DateTime,
                nullable=False,
                server_default=text("CURRENT_TIMESTAMP"),
            ),
        ),
        hazard_zones=Table(
            "hazard_zones",
            metadata,
            id_column(),
            Column("name", Text, nullable=False),
            Column("type", Text, nullable=False),
            Column("coordinates", sequence, nullable=False),
            Column("severity", Text, nullable=False, server_default=text("'medium'")),
        ),
        pois=Table(
            "pois",
            metadata,
            id_column(),
            Column("name", Text, nullable=False),
            Column("type", Text, nullable=False, index=True),
            Column("latitude", Text, nullable=False),
            Column("longitude", Text, nullable=False),
            Column("address", Text),
            flag_column("available", True),
        ),
    )


EMBEDDED_SCHEMA = (
    """
    CREATE TABLE IF NOT EXISTS users (
      id TEXT PRIMARY KEY,
      username TEXT NOT NULL UNIQUE,
      password TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS incidents (
      id INTEGER PRIMARY KEY AUTOINCREMENT,
      type TEXT NOT NULL,
      description TEXT NOT NULL,
      location TEXT NOT NULL,
      latitude TEXT,
      longitude TEXT,
      is_anonymous INTEGER NOT NULL DEFAULT 0,
      reported_at DATETIME NOT NULL DEFAULT CURRENT_TIMESTAMP
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS go_bag_items (
      id INTEGER PRIMARY KEY AUTOINCREMENT,
      category TEXT NOT NULL,
      name TEXT NOT NULL,
      checked INTEGER NOT NULL DEFAULT 0
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS evacuation_centers (
      id INTEGER PRIMARY KEY AUTOINCREMENT,
      name TEXT NOT NULL,
      distance TEXT NOT NULL,
      capacity TEXT NOT NULL,
      status TEXT NOT NULL DEFAULT 'Open',
      latitude TEXT,
      longitude TEXT
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS households (
      id INTEGER PRIMARY KEY AUTOINCREMENT,
      name TEXT NOT NULL,
      address TEXT
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS members (
      id INTEGER PRIMARY KEY AUTOINCREMENT,
      household_id INTEGER NOT NULL,
      name TEXT NOT NULL,
      contact TEXT,
      last_known_location TEXT,
      status TEXT NOT NULL DEFAULT 'unknown'
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS check_ins (
      id INTEGER PRIMARY KEY AUTOINCREMENT,
      member_id INTEGER NOT NULL,
      location TEXT,
      is_safe INTEGER NOT NULL DEFAULT 1,
      timestamp DATETIME NOT NULL DEFAULT CURRENT_TIMESTAMP
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS hazard_zones (
      id INTEGER PRIMARY KEY AUTOINCREMENT,
      name TEXT NOT NULL,
      type TEXT NOT NULL,
      coordinates TEXT NOT NULL,
      severity TEXT NOT NULL DEFAULT 'medium'
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS pois (
      id INTEGER PRIMARY KEY AUTOINCREMENT,
      name TEXT NOT NULL,
      type TEXT NOT NULL,
      latitude TEXT NOT NULL,
      longitude TEXT NOT NULL,
      address TEXT,
      available INTEGER NOT NULL DEFAULT 1
    )
    """,
)


@dataclass
class DbHandle:
    """Query handle shared by the storage adapter."""

    engine: Engine
    kind: BackendKind
    tables: Tables
    Session: sessionmaker = field(init=False, repr=False)

    def __post_init__(self):
        self.Session = sessionmaker(
            bind=self.engine, class_=Session, expire_on_commit=False, future=True
        )

    @property
    def is_embedded(self) -> bool:
        return self.kind is BackendKind.EMBEDDED

    def dispose(self) -> None:
        self.engine.dispose()


def _hosted_url(database_url: str) -> str:
    # Hosted providers hand out postgres:// URLs, which SQLAlchemy rejects.
    if database_url.startswith("postgres://"):
        return "postgresql://" + database_url[len("postgres://") :]
    return database_url


def _open_hosted(config: DbConfig, tables: Tables) -> Engine:
    engine = create_engine(
        _hosted_url(config.database_url),
        future=True,
        pool_pre_ping=True,
        pool_recycle=1800,
    )
    if config.create_hosted_schema:
        tables.metadata.create_all(engine)
    return engine


def _open_embedded(config: DbConfig) -> Engine:
    path = config.sqlite_path
    if path == MEMORY_PATH:
        # One shared connection, otherwise every thread sees its own empty db.
        engine = create_engine(
            "sqlite+pysqlite:///:memory:",
            future=True,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    else:
        Path(path).expanduser().parent.mkdir(parents=True, exist_ok=True)
        engine = create_engine(
            f"sqlite+pysqlite:///{Path(path).expanduser()}",
            future=True,
            connect_args={"check_same_thread": False},
        )
    with engine.begin() as conn:
        for statement in EMBEDDED_SCHEMA:
            conn.exec_driver_sql(statement)
    return engine


def create_db_handle(config: DbConfig) -> DbHandle:
    """
    Open the backend selected by ``config``.

    Raises ``BackendUnavailableError`` when the backend cannot be opened; the
    service must not start without one.
    """
    kind = config.kind
    tables = build_tables(kind)
    try:
        if kind is BackendKind.HOSTED:
            logger.info("Using hosted database")
            engine = _open_hosted(config, tables)
        else:
            logger.warning(
                "DATABASE_URL not set, using local SQLite database at %r",
                config.sqlite_path,
            )
            engine = _open_embedded(config)
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError, ImportError) as exc:
        raise BackendUnavailableError(
            f"Could not open {kind.value} database: {exc}"
        ) from exc
    return DbHandle(engine=engine, kind=kind, tables=tables)
