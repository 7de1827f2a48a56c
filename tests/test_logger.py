"""
Tests for logger functionality.
"""

from pathlib import Path
from hrsync.logger import StructuredLogger, get_logger, reset_logger


class TestStructuredLogger:
    """Test structured logging functionality."""

    def test_logger_creation(self, tmp_path):
        """Logger should be created with default settings."""
        logger = StructuredLogger(
            name="test",
            level="INFO",
            log_dir=tmp_path,
            enable_console=False,
        )

        assert logger.logger.name == "test"
        assert logger.metrics["upserts_attempted"] == 0

    def test_log_methods(self, tmp_path):
        """All log level methods should work."""
        logger = StructuredLogger(
            name="test",
            log_dir=tmp_path,
            enable_console=False,
        )

        # Should not raise exceptions
        logger.debug("Debug message")
        logger.info("Info message")
        logger.warning("Warning message")
        logger.error("Error message")
        logger.critical("Critical message")

    def test_log_with_context(self, tmp_path):
        """Context is rendered as JSON after the message."""
        logger = StructuredLogger(
            name="test",
            log_dir=tmp_path,
            enable_console=False,
        )

        logger.info("Rows inserted", table="countries", key="ES", rows=1)

        content = next(tmp_path.glob("*.log")).read_text()
        assert 'Rows inserted | Context: {"table": "countries", "key": "ES", "rows": 1}' in content

    def test_context_with_non_json_values(self, tmp_path):
        """Values json cannot encode are stringified."""
        logger = StructuredLogger(
            name="test",
            log_dir=tmp_path,
            enable_console=False,
        )

        logger.info("Path context", path=Path("data/hr.db"))

        content = next(tmp_path.glob("*.log")).read_text()
        assert "hr.db" in content

    def test_upsert_metrics(self, tmp_path):
        """Metrics should be tracked per table."""
        logger = StructuredLogger(
            name="test",
            log_dir=tmp_path,
            enable_console=False,
        )

        logger.record_upsert_attempt("countries")
        logger.record_insert("countries", 1)

        logger.record_upsert_attempt("countries")
        logger.record_update("countries", 1)

        logger.record_upsert_attempt("jobs")
        logger.record_upsert_failure("jobs", "IntegrityError")

        metrics = logger.get_metrics()

        assert metrics["upserts_attempted"] == 3
        assert metrics["rows_inserted"] == 1
        assert metrics["rows_updated"] == 1
        assert metrics["upserts_failed"] == 1
        assert metrics["errors_by_type"]["IntegrityError"] == 1
        assert metrics["tables"]["countries"] == {"inserted": 1, "updated": 1, "failed": 0}
        assert metrics["tables"]["jobs"]["failed"] == 1

    def test_metrics_summary(self, tmp_path):
        logger = StructuredLogger(
            name="test",
            log_dir=tmp_path,
            enable_console=False,
        )
        logger.record_upsert_attempt("jobs")
        logger.record_insert("jobs", 1)

        logger.log_metrics_summary()

        content = next(tmp_path.glob("*.log")).read_text()
        assert "Rows: 1 inserted, 0 updated" in content
        assert "jobs: inserted=1 updated=0 failed=0" in content

    def test_level_filters_console(self, tmp_path, capsys):
        """Console honours the level; the file always gets DEBUG."""
        logger = StructuredLogger(
            name="test",
            level="INFO",
            log_dir=tmp_path,
        )
        logger.logger.setLevel("DEBUG")

        logger.debug("Executing statement")

        assert "Executing statement" not in capsys.readouterr().out
        assert "Executing statement" in next(tmp_path.glob("*.log")).read_text()

    def test_log_file_creation(self, tmp_path):
        """Log file should be created in specified directory."""
        logger = StructuredLogger(
            name="test",
            log_dir=tmp_path,
            enable_console=False,
        )

        logger.info("Test message")

        log_files = list(tmp_path.glob("hrsync_*.log"))
        assert len(log_files) == 1

        log_content = log_files[0].read_text()
        assert "Test message" in log_content


class TestGlobalLogger:
    """Test global logger singleton."""

    def test_get_logger_singleton(self, tmp_path):
        """get_logger should return same instance."""
        reset_logger()

        logger1 = get_logger(log_dir=tmp_path, enable_console=False)
        logger2 = get_logger()

        assert logger1 is logger2

    def test_reset_logger(self, tmp_path):
        """reset_logger should create new instance."""
        reset_logger()

        logger1 = get_logger(log_dir=tmp_path, enable_console=False)
        logger1.record_upsert_attempt("countries")

        reset_logger()

        logger2 = get_logger(log_dir=tmp_path, enable_console=False)

        assert logger2 is not logger1
        assert logger2.metrics["upserts_attempted"] == 0
