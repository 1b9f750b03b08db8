"""Job applications: submission by job seekers, review by company members."""

from __future__ import annotations

import logging
from datetime import timedelta

from django.db import DatabaseError, IntegrityError, transaction
from django.utils import timezone

from accounts.identity import AccessDenied, JOB_MANAGER_ROLES, require_company_role, resolve_profile
from jobboard import storage
from jobboard.results import ActionResult

from . import notifications
from .models import Application, ApplicationStatus, Job, JobStatus

logger = logging.getLogger(__name__)

ALREADY_APPLIED_MESSAGE = "You have already applied to this job."


def _already_applied(job_id) -> ActionResult:
    return ActionResult.fail(ALREADY_APPLIED_MESSAGE, "already_applied", already_applied=True, job_id=job_id)


def create_application(user, job_id, cover_letter: str, resume_file) -> ActionResult:
    """Submit an application for ``job_id``.

    A missing job seeker profile raises ``ProfileNotFound``: the caller is
    expected to send the user to the profile form. Duplicates come back as a
    soft failure with ``already_applied``. The ``(job, job_seeker)`` unique
    constraint decides; the pre-check only saves the upload.
    """
    profile = resolve_profile(user)

    job = Job.objects.select_related("company").filter(id=job_id).first()
    if job is None:
        return ActionResult.fail("Job not found.", "not_found")
    if job.status != JobStatus.ACTIVE:
        return ActionResult.fail("This job is no longer accepting applications.", "job_closed")

    if Application.objects.filter(job=job, job_seeker=profile).exists():
        return _already_applied(job.id)

    try:
        resume_path = storage.upload(
            storage.RESUMES,
            storage.object_key(user.pk, resume_file.name),
            resume_file,
            upsert=True,
        )
    except storage.StorageError:
        return ActionResult.fail("Failed to upload resume. Please try again.", "upload_error")

    try:
        with transaction.atomic():
            application = Application.objects.create(
                job=job,
                job_seeker=profile,
                cover_letter=cover_letter,
                resume_url=resume_path,
                status=ApplicationStatus.PENDING,
            )
    except IntegrityError:
        logger.info("Duplicate application rejected by constraint: job_id=%s profile_id=%s", job.id, profile.id)
        return _already_applied(job.id)
    except DatabaseError:
        logger.exception("Application insert failed: job_id=%s profile_id=%s", job.id, profile.id)
        return ActionResult.fail("Failed to submit application. Please try again.", "store_error")

    notifications.notify_application_received(application, profile.full_name)
    logger.info(
        "Application submitted: app_id=%s job_id=%s user=%s",
        application.id,
        job.id,
        user.username,
    )
    return ActionResult.ok(
        "Application submitted successfully.",
        application_id=application.id,
        job_id=job.id,
        job_title=job.title,
    )


def list_seeker_applications(user, *, days: int = 30):
    profile = resolve_profile(user)
    since = timezone.now() - timedelta(days=days)
    return (
        Application.objects.for_job_seeker(profile)
        .filter(applied_at__gte=since)
        .select_related("job", "job__company")
        .order_by("-applied_at")
    )


def list_company_applications(company_id, status: str | None = None):
    qs = Application.objects.for_company(company_id).select_related("job", "job_seeker", "job_seeker__user")
    if status:
        qs = qs.filter(status=status)
    return qs.order_by("-applied_at")


def get_application_detail(company_id, application_id, *, mark_read: bool = False) -> Application | None:
    application = (
        Application.objects.for_company(company_id)
        .select_related("job", "job__company", "job_seeker", "job_seeker__user")
        .filter(id=application_id)
        .first()
    )
    if application is not None and mark_read:
        notifications.mark_application_notifications_read(company_id, application.id)
    return application


def update_application_status(user, application_id, status: str) -> ActionResult:
    """Overwrite the status of an application of the caller's company."""
    if status not in ApplicationStatus.values:
        return ActionResult.fail("Invalid application status.", "invalid")
    try:
        session = require_company_role(user, JOB_MANAGER_ROLES)
    except AccessDenied as exc:
        return ActionResult.fail(exc.message, exc.reason)

    application = get_application_detail(session.company_id, application_id)
    if application is None:
        return ActionResult.fail("Application not found", "not_found")

    try:
        Application.objects.filter(id=application.id).update(status=status, updated_at=timezone.now())
    except DatabaseError:
        logger.exception("Error updating application status: app_id=%s", application_id)
        return ActionResult.fail("Failed to update application status", "store_error")

    application.status = status
    notifications.notify_application_status(application, session.profile.full_name)
    logger.info("Application status changed: app_id=%s status=%s user=%s", application.id, status, user.username)
    return ActionResult.ok("Application status updated.", application_id=application.id, status=status)
