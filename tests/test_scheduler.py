"""
tests/test_scheduler.py

Scheduler wiring for the mail ingestion job.
"""

from __future__ import annotations

import logging

import pytest
from apscheduler.triggers.cron import CronTrigger

from app.config import IngestionSettings
from app.domain.ingestion import CycleSummary
from app.scheduler.jobs import build_scheduler, run_ingestion_cycle_job


class _Runner:
    def __init__(self, result: CycleSummary | None = None, error: Exception | None = None) -> None:
        self.result = result
        self.error = error
        self.calls = 0

    def run_if_idle(self) -> CycleSummary | None:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.result


class TestBuildScheduler:
    def test_registers_single_instance_cron_job(self) -> None:
        scheduler = build_scheduler(IngestionSettings(cron="*/5 * * * *"))

        (job,) = scheduler.get_jobs()
        assert job.id == "mail_ingestion"
        assert job.max_instances == 1
        assert job.coalesce is True
        assert isinstance(job.trigger, CronTrigger)
        assert str(job.trigger.fields[CronTrigger.FIELD_NAMES.index("minute")]) == "*/5"

    def test_disabled_scheduler_has_no_jobs(self) -> None:
        scheduler = build_scheduler(IngestionSettings(scheduler_enabled=False))

        assert scheduler.get_jobs() == []

    def test_invalid_cron_is_rejected(self) -> None:
        with pytest.raises(ValueError):
            build_scheduler(IngestionSettings(cron="every minute"))


class TestIngestionJob:
    def test_runs_cycle_through_runner(self, caplog) -> None:
        runner = _Runner(result=CycleSummary(processed=2, snapshots_created=2))

        with caplog.at_level(logging.INFO, logger="app.scheduler.jobs"):
            run_ingestion_cycle_job(runner)

        assert runner.calls == 1
        assert "mail_ingestion complete processed=2" in caplog.text

    def test_logs_skip_when_busy(self, caplog) -> None:
        with caplog.at_level(logging.INFO, logger="app.scheduler.jobs"):
            run_ingestion_cycle_job(_Runner(result=None))

        assert "skipped" in caplog.text

    def test_errors_do_not_escape(self, caplog) -> None:
        with caplog.at_level(logging.ERROR, logger="app.scheduler.jobs"):
            run_ingestion_cycle_job(_Runner(error=RuntimeError("db down")))

        assert "db down" in caplog.text
