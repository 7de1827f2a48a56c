"""
Database schema and connection management.

Uses SQLAlchemy Core for the countries and jobs tables. Connections are
opened in autocommit mode: every statement is committed on its own and
nothing groups the existence check with the write that follows it.
"""

from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional, Union

from sqlalchemy import Column, Integer, MetaData, String, Table, create_engine
from sqlalchemy.engine import Connection, Engine, URL, make_url
from sqlalchemy.exc import ArgumentError, SQLAlchemyError

from .config import DEFAULT_HOST, DEFAULT_PORT, DEFAULT_SERVICE, Settings
from .errors import DatabaseOperationError

metadata = MetaData()

countries = Table(
    "countries",
    metadata,
    Column("country_id", String(2), primary_key=True),
    Column("country_name", String(40)),
    Column("region_id", Integer),
)

jobs = Table(
    "jobs",
    metadata,
    Column("job_id", String(10), primary_key=True),
    Column("job_title", String(35), nullable=False),
    Column("min_salary", Integer),
    Column("max_salary", Integer),
)


def oracle_url(
    host: str = DEFAULT_HOST,
    service_name: str = DEFAULT_SERVICE,
    port: Optional[int] = None,
    username: Optional[str] = None,
    password: Optional[str] = None,
) -> URL:
    """
    Build an Oracle connection URL from host and service name.

    Args:
        host: Database host
        service_name: Oracle service name (e.g. "orcl")
        port: Listener port, 1521 when omitted
        username: Optional user
        password: Optional password

    Returns:
        SQLAlchemy URL for the oracledb driver
    """
    return URL.create(
        "oracle+oracledb",
        username=username,
        password=password,
        host=host,
        port=port or DEFAULT_PORT,
        query={"service_name": service_name},
    )


def url_from_settings(settings: Settings) -> Union[str, URL]:
    """DATABASE_URL wins; otherwise assemble an Oracle URL from the parts."""
    if settings.database_url:
        return settings.database_url
    return oracle_url(
        host=settings.db_host,
        service_name=settings.db_service,
        port=settings.db_port,
        username=settings.db_user,
        password=settings.db_password,
    )


def describe_url(url: Union[str, URL]) -> str:
    """Render a URL for logs with the password masked."""
    try:
        return make_url(url).render_as_string(hide_password=True)
    except ArgumentError:
        return "<unparseable url>"


def get_engine(url: Union[str, URL]) -> Engine:
    """
    Create an autocommit engine for the given URL.

    Raises:
        DatabaseOperationError: URL is malformed or its driver is missing
    """
    try:
        return create_engine(url, isolation_level="AUTOCOMMIT")
    except (SQLAlchemyError, ImportError) as e:
        raise DatabaseOperationError(f"Cannot create engine for {describe_url(url)}: {e}") from e


def _ensure_sqlite_parent(url: Union[str, URL]) -> None:
    parsed = make_url(url)
    if parsed.get_backend_name() != "sqlite":
        return
    if parsed.database and parsed.database != ":memory:":
        Path(parsed.database).parent.mkdir(parents=True, exist_ok=True)


def init_database(url: Union[str, URL]) -> None:
    """
    Create the countries and jobs tables if they do not exist.

    For SQLite URLs the parent directory of the database file is created.

    Args:
        url: SQLAlchemy database URL
    """
    engine = get_engine(url)
    try:
        _ensure_sqlite_parent(url)
        metadata.create_all(engine)
    except SQLAlchemyError as e:
        raise DatabaseOperationError(f"Schema creation failed: {e}") from e
    finally:
        engine.dispose()


@contextmanager
def connect(url: Union[str, URL]) -> Iterator[Connection]:
    """
    Open a connection scoped to a with-block.

    The connection is closed and the engine disposed on every exit path,
    including when the block raises.

    Example:
        with connect("sqlite:///data/hr.db") as conn:
            upsert(conn, Country("ES", 1, "Spain"))
    """
    engine = get_engine(url)
    try:
        try:
            conn = engine.connect()
        except SQLAlchemyError as e:
            raise DatabaseOperationError(f"Cannot connect to {describe_url(url)}: {e}") from e
        try:
            yield conn
        finally:
            conn.close()
    finally:
        engine.dispose()
