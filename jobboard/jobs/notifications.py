"""Company notifications: emitted on application activity, read by members."""

import logging
from datetime import timedelta

from django.conf import settings
from django.db import DatabaseError, transaction
from django.utils import timezone

from .models import Notification

logger = logging.getLogger(__name__)


def _window_start():
    days = getattr(settings, "JOBBOARD_NOTIFICATION_WINDOW_DAYS", 30)
    return timezone.now() - timedelta(days=days)


def create_company_notification(company_id, *, type: str, title: str, message: str = "", job=None, application=None):
    """Write one notification row; a store failure is logged and swallowed."""
    try:
        with transaction.atomic():
            return Notification.objects.create(
                company_id=company_id,
                type=type,
                title=title,
                message=message or None,
                related_job=job,
                related_application=application,
            )
    except DatabaseError:
        logger.exception("Failed to create notification: company_id=%s type=%s", company_id, type)
        return None


def notify_application_received(application, applicant_name: str):
    job = application.job
    return create_company_notification(
        job.company_id,
        type=Notification.Type.APPLICATION_RECEIVED,
        title=f"New application for {job.title}",
        message=f"New application received from {applicant_name}",
        job=job,
        application=application,
    )


def notify_application_status(application, changed_by: str):
    job = application.job
    return create_company_notification(
        job.company_id,
        type=Notification.Type.APPLICATION_STATUS,
        title=f"Application status changed for {job.title}",
        message=f"{changed_by} moved the application to {application.get_status_display()}",
        job=job,
        application=application,
    )


def recent_notifications(company_id):
    return Notification.objects.filter(company_id=company_id, created_at__gte=_window_start()).select_related(
        "related_job", "related_application"
    )


def unread_count(company_id) -> int:
    return recent_notifications(company_id).filter(is_read=False).count()


def mark_read(company_id, notification_id) -> int:
    """Mark one notification read. Re-applying it changes nothing."""
    return Notification.objects.filter(id=notification_id, company_id=company_id, is_read=False).update(
        is_read=True, read_at=timezone.now()
    )


def mark_all_read(company_id) -> int:
    return Notification.objects.filter(company_id=company_id, is_read=False).update(
        is_read=True, read_at=timezone.now()
    )


def mark_application_notifications_read(company_id, application_id) -> int:
    return Notification.objects.filter(
        company_id=company_id, related_application_id=application_id, is_read=False
    ).update(is_read=True, read_at=timezone.now())
