"""Batch job analyzers."""

from collections.abc import Iterable
from datetime import datetime, timedelta

from kubehealth.domain.issues import FailedJob, MissedSchedule
from kubehealth.domain.snapshots import CronJobSnapshot, JobSnapshot, find_condition


def is_job_failed_over_grace(
    job: JobSnapshot, *, grace_minutes: int, now: datetime
) -> bool:
    """Return whether job has a true Failed condition and is older than grace."""
    if not any(c.type == "Failed" and c.status == "True" for c in job.conditions):
        return False
    created = job.creation_time or now
    return now - created > timedelta(minutes=grace_minutes)


def analyze_failed_jobs(
    jobs: Iterable[JobSnapshot], *, grace_minutes: int, now: datetime
) -> list[FailedJob]:
    """Report failed jobs older than grace."""
    failed: list[FailedJob] = []
    for job in jobs:
        if not job.name:
            continue
        if not is_job_failed_over_grace(job, grace_minutes=grace_minutes, now=now):
            continue
        condition = find_condition(job.conditions, "Failed")
        failed.append(
            FailedJob(
                namespace=job.namespace,
                job=job.name,
                failed_count=job.failed,
                last_failure_time=condition.last_transition_time if condition else None,
                reason=condition.reason if condition else None,
            )
        )
    return failed


def missed_runs(
    last_scheduled: datetime, *, grace_minutes: int, now: datetime
) -> int | None:
    """Estimate missed runs since the last schedule.

    The grace period doubles as the expected schedule interval. This
    over-reports jobs scheduled less often than the grace period.
    """
    if grace_minutes <= 0:
        return None
    expected_next = last_scheduled + timedelta(minutes=grace_minutes)
    if now <= expected_next:
        return None
    overdue_minutes = int((now - expected_next).total_seconds() // 60)
    return overdue_minutes // grace_minutes + 1


def analyze_missed_schedules(
    cronjobs: Iterable[CronJobSnapshot], *, grace_minutes: int, now: datetime
) -> list[MissedSchedule]:
    """Report recurring jobs that look overdue; jobs never scheduled are skipped."""
    missed: list[MissedSchedule] = []
    for cronjob in cronjobs:
        if not cronjob.name or cronjob.last_schedule_time is None:
            continue
        count = missed_runs(
            cronjob.last_schedule_time, grace_minutes=grace_minutes, now=now
        )
        if count is not None:
            missed.append(
                MissedSchedule(
                    namespace=cronjob.namespace,
                    name=cronjob.name,
                    last_schedule_time=cronjob.last_schedule_time,
                    missed_count=count,
                )
            )
    return missed
