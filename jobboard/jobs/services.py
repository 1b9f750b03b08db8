"""Job posting mutations for company members.

Every entry point authorizes through ``require_company_role`` and scopes its
writes by the caller's ``company_id``, so a job id belonging to another
company simply matches no row.
"""

from __future__ import annotations

import logging

from django.db import DatabaseError, transaction
from django.db.models import F

from accounts.identity import AccessDenied, JOB_MANAGER_ROLES, require_company_role
from accounts.models import Company, Subscription
from jobboard import revalidation
from jobboard.results import ActionResult

from .models import Job, JobStatus
from .quota import evaluate_subscription

logger = logging.getLogger(__name__)

MUTABLE_FIELDS = (
    "title",
    "category",
    "description",
    "location",
    "is_remote",
    "job_type",
    "experience_level",
    "salary_min",
    "salary_max",
    "salary_currency",
    "application_deadline",
    "requirements",
    "benefits",
    "tags",
)


def _job_values(data: dict) -> dict:
    values = {name: data.get(name) for name in MUTABLE_FIELDS if name in data}
    for name in ("requirements", "benefits", "tags"):
        if name in values:
            values[name] = list(values[name] or [])
    return values


def _invalidate_job_pages(company_id):
    revalidation.revalidate_path(revalidation.company_path(revalidation.JOB_LIST, company_id))


def _bump_usage_counters(subscription_id: int, company_id: int) -> None:
    """Count a new posting against the plan and the company's cached total.

    Runs in a savepoint: if it fails the job stays created and the counters
    lag by one until corrected.
    """
    try:
        with transaction.atomic():
            Subscription.objects.filter(id=subscription_id).update(job_posts_used=F("job_posts_used") + 1)
            Company.objects.filter(id=company_id).update(total_job=F("total_job") + 1)
    except DatabaseError:
        logger.exception(
            "Failed to increment job usage counters: subscription_id=%s company_id=%s",
            subscription_id,
            company_id,
        )


def create_job(user, data: dict) -> ActionResult:
    try:
        session = require_company_role(user, JOB_MANAGER_ROLES)
    except AccessDenied as exc:
        return ActionResult.fail(exc.message, exc.reason)

    company_id = session.company_id
    values = _job_values(data)
    try:
        with transaction.atomic():
            # lock the plan row so concurrent posts cannot both pass the limit check
            subscription = (
                Subscription.objects.select_for_update()
                .filter(company_id=company_id, is_active=True)
                .order_by("-created_at", "-id")
                .first()
            )
            decision = evaluate_subscription(subscription)
            if not decision.allowed:
                logger.info(
                    "Job creation blocked: company_id=%s reason=%s used=%s limit=%s",
                    company_id,
                    decision.reason,
                    decision.jobs_used,
                    decision.jobs_limit,
                )
                return ActionResult.fail(
                    decision.message,
                    decision.reason,
                    plan_type=decision.plan_type,
                    jobs_used=decision.jobs_used,
                    jobs_limit=decision.jobs_limit,
                )

            job = Job.objects.create(
                company_id=company_id,
                posted_by=session.profile,
                status=JobStatus.ACTIVE,
                **values,
            )
            _bump_usage_counters(subscription.id, company_id)
    except DatabaseError as exc:
        logger.exception("Error creating job: company_id=%s", company_id)
        return ActionResult.fail(f"Error creating job: {exc}", "store_error")

    _invalidate_job_pages(company_id)
    logger.info("Job created: job_id=%s company_id=%s user=%s", job.id, company_id, user.username)
    return ActionResult.ok("Job created successfully", job_id=job.id)


def edit_job(user, job_id: int, data: dict) -> ActionResult:
    try:
        session = require_company_role(user, JOB_MANAGER_ROLES)
    except AccessDenied as exc:
        return ActionResult.fail(exc.message, exc.reason)

    try:
        updated = Job.objects.filter(id=job_id, company_id=session.company_id).update(**_job_values(data))
    except DatabaseError:
        logger.exception("Error updating job: job_id=%s company_id=%s", job_id, session.company_id)
        return ActionResult.fail("Error updating job", "store_error")

    if not updated:
        logger.warning("Job update matched no row: job_id=%s company_id=%s", job_id, session.company_id)
        return ActionResult.fail("Job not found.", "not_found", rows=0)

    _invalidate_job_pages(session.company_id)
    logger.info("Job updated: job_id=%s company_id=%s user=%s", job_id, session.company_id, user.username)
    return ActionResult.ok("Job updated successfully", rows=updated)


def set_job_status(user, job_id: int, status: str) -> ActionResult:
    if status not in JobStatus.values:
        return ActionResult.fail("Invalid job status.", "invalid")
    try:
        session = require_company_role(user, JOB_MANAGER_ROLES)
    except AccessDenied as exc:
        return ActionResult.fail(exc.message, exc.reason)

    updated = Job.objects.filter(id=job_id, company_id=session.company_id).update(status=status)
    if not updated:
        return ActionResult.fail("Job not found.", "not_found", rows=0)
    _invalidate_job_pages(session.company_id)
    logger.info("Job status changed: job_id=%s status=%s user=%s", job_id, status, user.username)
    return ActionResult.ok("Job status updated", rows=updated)


def delete_job(user, job_id) -> ActionResult:
    try:
        session = require_company_role(user, JOB_MANAGER_ROLES)
    except AccessDenied as exc:
        return ActionResult.fail(exc.message, exc.reason)

    company_id = session.company_id
    try:
        with transaction.atomic():
            _, per_model = Job.objects.filter(id=job_id, company_id=company_id).delete()
            # the total includes cascaded applications; count only job rows
            rows = per_model.get(Job._meta.label, 0)
            if rows:
                Company.objects.filter(id=company_id, total_job__gt=0).update(total_job=F("total_job") - 1)
    except DatabaseError:
        logger.exception("Error deleting job: job_id=%s company_id=%s", job_id, company_id)
        return ActionResult.fail("Error deleting job. Please try again later.", "store_error")

    if not rows:
        logger.warning("Job delete matched no row: job_id=%s company_id=%s", job_id, company_id)
        return ActionResult.fail("Job not found.", "not_found", rows=0)

    _invalidate_job_pages(company_id)
    logger.info("Job deleted: job_id=%s company_id=%s user=%s", job_id, company_id, user.username)
    return ActionResult.ok("Job deleted successfully", rows=rows)


def list_company_jobs(company_id) -> list[Job]:
    return revalidation.cached_page(
        revalidation.company_path(revalidation.JOB_LIST, company_id),
        lambda: list(Job.objects.for_company(company_id).select_related("category").recent()),
    )


def get_company_job(company_id, job_id) -> Job | None:
    return Job.objects.select_related("category", "company").filter(id=job_id, company_id=company_id).first()
