"""
Check-then-act upsert for the countries and jobs tables.

Each call counts the rows holding the record's key, then runs either an
UPDATE or an INSERT. The two steps are separate statements with nothing
around them: another writer can create or delete the row in between, so
concurrent upserts of one key may lose an update or fail on the primary
key. Callers that need an atomic write must use a native MERGE themselves.

Statements are written with ``?`` placeholders and rebound as SQLAlchemy
bind parameters, so every driver receives its own paramstyle.
"""

from dataclasses import dataclass
from typing import Any, List, Mapping, Optional, Sequence, Tuple, Type

from sqlalchemy import Integer, String, bindparam, text
from sqlalchemy.engine import Connection
from sqlalchemy.exc import SQLAlchemyError

from .errors import DatabaseOperationError
from .logger import StructuredLogger, get_logger
from .models import Country, Job

_SQL_TYPES = {str: String, int: Integer}


@dataclass(frozen=True)
class ColumnSpec:
    name: str
    type: Type  # str or int


@dataclass(frozen=True)
class UpsertTarget:
    """
    Table shape the generic upsert writes to.

    Args:
        table: Table name
        key_column: Natural key column, always text
        columns: Non-key columns in the order they are SET and INSERTed
    """

    table: str
    key_column: str
    columns: Tuple[ColumnSpec, ...]

    @property
    def count_sql(self) -> str:
        return f"SELECT COUNT(*) FROM {self.table} WHERE {self.key_column} = ?"

    @property
    def update_sql(self) -> str:
        assignments = ", ".join(f"{c.name} = ?" for c in self.columns)
        return f"UPDATE {self.table} SET {assignments} WHERE {self.key_column} = ?"

    @property
    def insert_sql(self) -> str:
        names = [self.key_column] + [c.name for c in self.columns]
        placeholders = ", ".join("?" for _ in names)
        return f"INSERT INTO {self.table} ({', '.join(names)}) VALUES ({placeholders})"


COUNTRIES = UpsertTarget(
    table="countries",
    key_column="country_id",
    columns=(ColumnSpec("country_name", str), ColumnSpec("region_id", int)),
)

JOBS = UpsertTarget(
    table="jobs",
    key_column="job_id",
    columns=(
        ColumnSpec("job_title", str),
        ColumnSpec("min_salary", int),
        ColumnSpec("max_salary", int),
    ),
)


def _check_type(column: str, value: Any, expected: Type) -> None:
    # bool is an int subclass but never a valid salary or region
    if isinstance(value, bool) or not isinstance(value, expected):
        raise DatabaseOperationError(
            f"Column '{column}' expects {expected.__name__}, got {type(value).__name__}"
        )


def _execute(
    connection: Connection,
    sql: str,
    params: Sequence[Tuple[str, Any, Type]],
    logger: StructuredLogger,
):
    """
    Run a ``?``-style statement with positional (column, value, type) params.

    Raises:
        DatabaseOperationError: bind type mismatch or any driver failure
    """
    pieces = sql.split("?")
    if len(pieces) - 1 != len(params):
        raise ValueError(f"Statement expects {len(pieces) - 1} parameters, got {len(params)}")

    bound_sql = pieces[0]
    binds = []
    values = {}
    for i, ((column, value, py_type), tail) in enumerate(zip(params, pieces[1:]), 1):
        _check_type(column, value, py_type)
        name = f"p{i}"
        bound_sql += f":{name}{tail}"
        binds.append(bindparam(name, type_=_SQL_TYPES[py_type]()))
        values[name] = value

    logger.debug("Executing statement", sql=sql, params=[p[1] for p in params])
    try:
        return connection.execute(text(bound_sql).bindparams(*binds), values)
    except SQLAlchemyError as e:
        raise DatabaseOperationError(f"Statement failed: {sql}: {e}") from e


def _count(connection: Connection, target: UpsertTarget, key: str, logger: StructuredLogger) -> int:
    result = _execute(connection, target.count_sql, [(target.key_column, key, str)], logger)
    try:
        row = result.first()
    except SQLAlchemyError as e:
        raise DatabaseOperationError(f"Could not read count for {target.table}: {e}") from e
    if row is None:
        raise DatabaseOperationError(f"Count query on {target.table} returned no rows")
    return int(row[0])


def upsert_row(
    connection: Connection,
    target: UpsertTarget,
    key: str,
    attributes: Mapping[str, Any],
    logger: Optional[StructuredLogger] = None,
) -> int:
    """
    Insert or update one row identified by its natural key.

    The key is matched exactly; no case folding or trimming is applied.

    Args:
        connection: Open caller-owned connection (not committed or closed here)
        target: Table description
        key: Natural key value
        attributes: Value for every column in target.columns
        logger: Receives statement and outcome logs (default: global logger)

    Returns:
        Rows affected by the UPDATE or INSERT

    Raises:
        DatabaseOperationError: Any failure while counting or writing
    """
    log = logger or get_logger()

    missing = [c.name for c in target.columns if c.name not in attributes]
    if missing:
        raise ValueError(f"Missing attributes for {target.table}: {', '.join(missing)}")
    attrs: List[Tuple[str, Any, Type]] = [
        (c.name, attributes[c.name], c.type) for c in target.columns
    ]
    key_param = (target.key_column, key, str)

    log.record_upsert_attempt(target.table)
    try:
        if _count(connection, target, key, log) > 0:
            result = _execute(connection, target.update_sql, attrs + [key_param], log)
            rows = result.rowcount
            log.record_update(target.table, rows)
            log.debug("Rows updated", table=target.table, key=key, rows=rows)
        else:
            result = _execute(connection, target.insert_sql, [key_param] + attrs, log)
            rows = result.rowcount
            log.record_insert(target.table, rows)
            log.debug("Rows inserted", table=target.table, key=key, rows=rows)
    except DatabaseOperationError as e:
        cause = e.__cause__ if e.__cause__ is not None else e
        log.record_upsert_failure(target.table, type(cause).__name__)
        raise
    return rows


def upsert_country(
    connection: Connection, country: Country, logger: Optional[StructuredLogger] = None
) -> int:
    """Insert or update a country keyed by country_id."""
    return upsert_row(
        connection,
        COUNTRIES,
        country.country_id,
        {"country_name": country.country_name, "region_id": country.region_id},
        logger,
    )


def upsert_job(connection: Connection, job: Job, logger: Optional[StructuredLogger] = None) -> int:
    """Insert or update a job keyed by job_id."""
    return upsert_row(
        connection,
        JOBS,
        job.job_id,
        {
            "job_title": job.job_title,
            "min_salary": job.min_salary,
            "max_salary": job.max_salary,
        },
        logger,
    )


_UPSERTS = {
    Country: upsert_country,
    Job: upsert_job,
}


def upsert(connection: Connection, record, logger: Optional[StructuredLogger] = None) -> int:
    """
    Insert or update any supported record.

    Raises:
        TypeError: record is neither a Country nor a Job
        DatabaseOperationError: Any failure while counting or writing
    """
    func = _UPSERTS.get(type(record))
    if func is None:
        raise TypeError(f"No upsert defined for {type(record).__name__}")
    return func(connection, record, logger)
