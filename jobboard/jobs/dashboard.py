"""Company dashboard figures."""

from __future__ import annotations

from datetime import date

from django.db.models import Count, Q
from django.db.models.functions import TruncMonth
from django.utils import timezone

from accounts.models import CompanyMember

from .models import Job, JobStatus, JobType

MONTHS_SHOWN = 6
LATEST_JOBS_SHOWN = 5


def _month_starts(today: date, months: int) -> list[date]:
    """First day of each of the last ``months`` months, oldest first."""
    starts = []
    year, month = today.year, today.month
    for _ in range(months):
        starts.append(date(year, month, 1))
        month -= 1
        if month == 0:
            year, month = year - 1, 12
    return list(reversed(starts))


def get_statistics(company_id) -> dict:
    jobs = Job.objects.for_company(company_id).aggregate(
        total=Count("id"),
        active=Count("id", filter=Q(status=JobStatus.ACTIVE)),
    )
    members = CompanyMember.objects.filter(company_id=company_id).aggregate(
        total=Count("id"),
        active=Count("id", filter=Q(is_active=True)),
    )
    return {
        "total_jobs": jobs["total"],
        "active_jobs": jobs["active"],
        "total_members": members["total"],
        "active_members": members["active"],
    }


def _distribution(qs, field: str, labels: dict | None = None) -> list[dict]:
    rows = qs.values(field).annotate(count=Count("id")).order_by("-count", field)
    out = []
    for row in rows:
        key = row[field] or "Not specified"
        out.append({"name": (labels or {}).get(key, key), "value": row["count"]})
    return out


def posts_per_month(company_id, months: int = MONTHS_SHOWN, today: date | None = None) -> list[dict]:
    today = today or timezone.localdate()
    starts = _month_starts(today, months)
    counts = {start: 0 for start in starts}
    rows = (
        Job.objects.for_company(company_id)
        .filter(created_at__date__gte=starts[0])
        .annotate(month=TruncMonth("created_at"))
        .values("month")
        .annotate(c=Count("id"))
    )
    for row in rows:
        month = row["month"]
        if month is None:
            continue
        key = month.date() if hasattr(month, "date") else month
        if key in counts:
            counts[key] = row["c"]
    return [{"month": start.strftime("%b %Y"), "value": counts[start]} for start in starts]


def company_dashboard(company_id) -> dict:
    """Everything the dashboard page renders."""
    jobs = Job.objects.for_company(company_id)
    remote = jobs.filter(is_remote=True).count()
    return {
        "stats": get_statistics(company_id),
        "job_types": _distribution(jobs, "job_type", dict(JobType.choices)),
        "statuses": _distribution(jobs, "status", dict(JobStatus.choices)),
        "experience_levels": _distribution(jobs, "experience_level"),
        "remote_split": [
            {"name": "Remote", "value": remote},
            {"name": "On-site", "value": jobs.count() - remote},
        ],
        "posts_per_month": posts_per_month(company_id),
        "latest_jobs": list(jobs.select_related("category").order_by("-created_at")[:LATEST_JOBS_SHOWN]),
    }
