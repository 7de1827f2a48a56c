import argparse
from dataclasses import asdict
import sys
from typing import List, Optional

from . import __version__
from .config import Settings, load_env
from .database import connect, describe_url, init_database, url_from_settings
from .errors import DatabaseOperationError
from .logger import StructuredLogger, get_logger
from .models import Country, Job
from .upsert import upsert

EXAMPLE_COUNTRY = Country("ES", 1, "Spain")
EXAMPLE_JOB = Job("SEC_CISO", "Chief Information Security Officer", 11600, 18350)


def run_upserts(url, records: List, logger: StructuredLogger) -> bool:
    """
    Upsert records in order over one scoped connection.

    Stops at the first failure; rows already written stay written.

    Returns:
        True if every record was written, False otherwise
    """
    try:
        with connect(url) as conn:
            logger.info("Connection established", url=describe_url(url))
            for record in records:
                rows = upsert(conn, record, logger)
                logger.info(f"Upserted {type(record).__name__}", record=asdict(record), rows=rows)
    except DatabaseOperationError as e:
        logger.error(f"Database operation failed: {e}")
        return False
    finally:
        logger.log_metrics_summary()
    return True


def cmd_demo(args: argparse.Namespace, logger: StructuredLogger) -> int:
    return 0 if run_upserts(args.url, [EXAMPLE_COUNTRY, EXAMPLE_JOB], logger) else 1


def cmd_country(args: argparse.Namespace, logger: StructuredLogger) -> int:
    country = Country(args.id, args.region, args.name)
    return 0 if run_upserts(args.url, [country], logger) else 1


def cmd_job(args: argparse.Namespace, logger: StructuredLogger) -> int:
    if args.min_salary > args.max_salary:
        logger.warning("Minimum salary exceeds maximum", job_id=args.id)
    job = Job(args.id, args.title, args.min_salary, args.max_salary)
    return 0 if run_upserts(args.url, [job], logger) else 1


def cmd_init_db(args: argparse.Namespace, logger: StructuredLogger) -> int:
    try:
        init_database(args.url)
    except DatabaseOperationError as e:
        logger.error(f"Schema creation failed: {e}")
        return 1
    logger.info("Schema ready", url=describe_url(args.url))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="hrsync", description="Insert or update HR reference rows")
    parser.add_argument("--version", action="store_true", help="Show version and exit")
    parser.add_argument("--url", help="SQLAlchemy database URL (default: DATABASE_URL or HR_DB_* settings)")
    parser.add_argument("--log-level", help="DEBUG, INFO, WARNING, ERROR (default: HR_LOG_LEVEL or INFO)")
    subparsers = parser.add_subparsers(dest="command")

    demo = subparsers.add_parser("demo", help="Upsert the example country ES and job SEC_CISO")
    demo.set_defaults(func=cmd_demo)

    cty = subparsers.add_parser("country", help="Insert or update one country")
    cty.add_argument("--id", required=True, help="Country code, e.g. ES")
    cty.add_argument("--name", required=True, help="Country name")
    cty.add_argument("--region", required=True, type=int, help="Region id")
    cty.set_defaults(func=cmd_country)

    job = subparsers.add_parser("job", help="Insert or update one job")
    job.add_argument("--id", required=True, help="Job id, e.g. SEC_CISO")
    job.add_argument("--title", required=True, help="Job title")
    job.add_argument("--min-salary", required=True, type=int, help="Minimum salary")
    job.add_argument("--max-salary", required=True, type=int, help="Maximum salary")
    job.set_defaults(func=cmd_job)

    idb = subparsers.add_parser("init-db", help="Create the countries and jobs tables")
    idb.set_defaults(func=cmd_init_db)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    load_env()
    settings = Settings.from_env()
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.version:
        print(__version__)
        return 0

    if not hasattr(args, "func"):
        parser.print_help()
        return 2

    if not args.url:
        args.url = url_from_settings(settings)

    logger = get_logger(level=args.log_level or settings.log_level, log_dir=settings.log_dir)
    return args.func(args, logger)


if __name__ == "__main__":
    sys.exit(main())
