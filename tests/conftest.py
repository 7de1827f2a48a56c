"""
Pytest configuration and shared fixtures.
"""

import pytest

from hrsync.database import connect, init_database
from hrsync.logger import StructuredLogger, reset_logger
from hrsync.models import Country, Job


@pytest.fixture(autouse=True)
def isolated_logger():
    """Keep the global logger from leaking between tests."""
    reset_logger()
    yield
    reset_logger()


@pytest.fixture
def logger(tmp_path) -> StructuredLogger:
    """File-only logger writing under tmp_path."""
    return StructuredLogger(
        name="hrsync-test",
        level="DEBUG",
        log_dir=tmp_path / "logs",
        enable_console=False,
    )


@pytest.fixture
def db_url(tmp_path) -> str:
    """URL of an initialized SQLite database file."""
    db_path = tmp_path / "hr.db"
    url = f"sqlite:///{db_path}"
    init_database(url)
    return url


@pytest.fixture
def conn(db_url):
    """Open connection to the initialized database."""
    with connect(db_url) as connection:
        yield connection


@pytest.fixture
def spain() -> Country:
    return Country("ES", 1, "Spain")


@pytest.fixture
def ciso() -> Job:
    return Job("SEC_CISO", "Chief Information Security Officer", 11600, 18350)
