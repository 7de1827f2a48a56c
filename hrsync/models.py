"""
Record types written by the upsert executor.

Plain immutable value objects; the executor only reads their fields.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class Country:
    """Row of the countries table, keyed by country_id."""

    country_id: str
    region_id: int
    country_name: str


@dataclass(frozen=True)
class Job:
    """Row of the jobs table, keyed by job_id."""

    job_id: str
    job_title: str
    min_salary: int
    max_salary: int
