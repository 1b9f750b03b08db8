import logging
import re

from django.contrib import messages
from django.core.paginator import Paginator
from django.db.models import Count, Q
from django.shortcuts import get_object_or_404, redirect, render
from django.utils.http import url_has_allowed_host_and_scheme
from django.views.decorators.http import require_http_methods, require_POST

from accounts.decorators import company_member, job_manager_required, jobseeker_required, redirect_for_denial
from accounts.identity import ProfileNotFound
from accounts.models import Company
from jobboard import storage

from . import applications, dashboard, notifications, services
from .forms import ApplicationForm, ApplicationStatusForm, JobForm, JobStatusForm
from .models import ApplicationStatus, Job, JobStatus, JobType
from .quota import can_create_job

logger = logging.getLogger(__name__)

RELATED_JOBS_SHOWN = 4


def _paginate(request, queryset, per_page=10):
    paginator = Paginator(queryset, per_page)
    page_number = request.GET.get("page") or 1
    return paginator.get_page(page_number)


def _normalize_space(v: str | None) -> str:
    return re.sub(r"\s+", " ", (v or "")).strip()


def _next_url(request, fallback: str):
    next_url = request.POST.get("next") or request.META.get("HTTP_REFERER")
    if next_url and url_has_allowed_host_and_scheme(next_url, allowed_hosts={request.get_host()}):
        return next_url
    return fallback


def _with_logo(jobs):
    for job in jobs:
        job.logo = storage.public_url(storage.COMPANY_LOGOS, job.company.logo_url)
    return jobs


# -----------------------------
# Company: Dashboard
# -----------------------------
@company_member
def company_dashboard(request):
    session = request.company_session
    ctx = dashboard.company_dashboard(session.company_id)
    ctx.update({"company": session.company, "quota": can_create_job(request.user)})
    return render(request, "jobs/dashboard.html", ctx)


# -----------------------------
# Company: Jobs
# -----------------------------
@company_member
def company_jobs(request):
    session = request.company_session
    jobs = services.list_company_jobs(session.company_id)
    return render(
        request,
        "jobs/company_jobs.html",
        {"jobs": jobs, "can_manage": session.can_manage_jobs, "quota": can_create_job(request.user)},
    )


@job_manager_required
@require_http_methods(["GET", "POST"])
def create_job(request):
    quota = can_create_job(request.user)
    if not quota.allowed:
        messages.error(request, quota.message)
        if quota.reason in {"no_subscription", "subscription_expired", "limit_reached"}:
            return redirect("subscription")
        return redirect("company_jobs")

    if request.method == "POST":
        form = JobForm(request.POST)
        if form.is_valid():
            result = services.create_job(request.user, form.job_fields())
            if result.success:
                messages.success(request, result.message)
                return redirect("company_job_detail", job_id=result.get("job_id"))
            messages.error(request, result.message)
            if result.reason == "limit_reached":
                return redirect("subscription")
    else:
        form = JobForm()

    return render(request, "jobs/job_form.html", {"form": form, "quota": quota, "job": None})


@job_manager_required
@require_http_methods(["GET", "POST"])
def edit_job(request, job_id):
    job = services.get_company_job(request.company_session.company_id, job_id)
    if job is None:
        messages.error(request, "Job not found.")
        return redirect("company_jobs")

    if request.method == "POST":
        form = JobForm(request.POST, instance=job)
        if form.is_valid():
            result = services.edit_job(request.user, job.id, form.job_fields())
            if result.success:
                messages.success(request, result.message)
                return redirect("company_job_detail", job_id=job.id)
            messages.error(request, result.message)
    else:
        form = JobForm(instance=job)

    return render(request, "jobs/job_form.html", {"form": form, "job": job})


@job_manager_required
@require_POST
def delete_job(request, job_id):
    result = services.delete_job(request.user, job_id)
    if result.success:
        messages.success(request, result.message)
    else:
        messages.error(request, result.message)
    return redirect("company_jobs")


@job_manager_required
@require_POST
def change_job_status(request, job_id):
    form = JobStatusForm(request.POST)
    if not form.is_valid():
        messages.error(request, "Invalid job status.")
        return redirect("company_job_detail", job_id=job_id)
    result = services.set_job_status(request.user, job_id, form.cleaned_data["status"])
    if result.success:
        messages.success(request, result.message)
    else:
        messages.error(request, result.message)
    return redirect("company_job_detail", job_id=job_id)


@company_member
def company_job_detail(request, job_id):
    session = request.company_session
    job = services.get_company_job(session.company_id, job_id)
    if job is None:
        messages.error(request, "Job not found.")
        return redirect("company_jobs")
    return render(
        request,
        "jobs/company_job_detail.html",
        {
            "job": job,
            "applications": job.applications.select_related("job_seeker").order_by("-applied_at"),
            "status_form": JobStatusForm(initial={"status": job.status}),
            "can_manage": session.can_manage_jobs,
        },
    )


# -----------------------------
# Company: Applications
# -----------------------------
@company_member
def company_applications(request):
    session = request.company_session
    status = (request.GET.get("status") or "all").lower()
    if status != "all" and status not in ApplicationStatus.values:
        status = "all"

    base_qs = applications.list_company_applications(session.company_id)
    counts = dict(base_qs.order_by().values_list("status").annotate(c=Count("id")))
    counts["all"] = sum(counts.values())
    return render(
        request,
        "jobs/company_applications.html",
        {
            "applications": _paginate(
                request, applications.list_company_applications(session.company_id, None if status == "all" else status)
            ),
            "status": status,
            "counts": counts,
            "statuses": ApplicationStatus.choices,
        },
    )


@company_member
def company_application_detail(request, application_id):
    session = request.company_session
    application = applications.get_application_detail(session.company_id, application_id, mark_read=True)
    if application is None:
        messages.error(request, "Application not found")
        return redirect("company_applications")
    return render(
        request,
        "jobs/company_application_detail.html",
        {
            "application": application,
            "resume_link": storage.public_url(storage.RESUMES, application.resume_url),
            "status_form": ApplicationStatusForm(initial={"status": application.status}),
            "can_manage": session.can_manage_jobs,
        },
    )


@job_manager_required
@require_POST
def change_application_status(request, application_id):
    form = ApplicationStatusForm(request.POST)
    if not form.is_valid():
        messages.error(request, "Invalid application status.")
        return redirect("company_application_detail", application_id=application_id)
    result = applications.update_application_status(request.user, application_id, form.cleaned_data["status"])
    if result.success:
        messages.success(request, result.message)
    else:
        messages.error(request, result.message)
    return redirect("company_application_detail", application_id=application_id)


# -----------------------------
# Company: Notifications
# -----------------------------
@company_member
def notifications_list(request):
    company_id = request.company_session.company_id
    return render(
        request,
        "jobs/notifications.html",
        {"notifications": notifications.recent_notifications(company_id)},
    )


@company_member
@require_POST
def notification_mark_read(request, notification_id):
    notifications.mark_read(request.company_session.company_id, notification_id)
    return redirect(_next_url(request, "notifications_list"))


@company_member
@require_POST
def notifications_mark_all_read(request):
    updated = notifications.mark_all_read(request.company_session.company_id)
    if updated:
        messages.success(request, f"Marked {updated} notification(s) as read.")
    return redirect(_next_url(request, "notifications_list"))


# -----------------------------
# Job Seeker: Apply + my apps
# -----------------------------
@jobseeker_required
@require_http_methods(["GET", "POST"])
def apply_job(request, job_id):
    job = get_object_or_404(Job.objects.select_related("company"), id=job_id)
    if job.status != JobStatus.ACTIVE:
        messages.error(request, "This job is no longer accepting applications.")
        return redirect("job_detail", job_id=job.id)

    if request.method == "POST":
        form = ApplicationForm(request.POST, request.FILES)
        if form.is_valid():
            try:
                result = applications.create_application(
                    request.user,
                    job.id,
                    form.cleaned_data["cover_letter"],
                    form.cleaned_data["resume"],
                )
            except ProfileNotFound as exc:
                return redirect_for_denial(request, exc)

            if result.success:
                return redirect("apply_success", job_id=job.id)
            if result.get("already_applied"):
                messages.info(request, result.message)
                return redirect("my_applications")
            messages.error(request, result.message)
    else:
        form = ApplicationForm()

    return render(request, "jobs/apply.html", {"form": form, "job": job})


@jobseeker_required
def apply_success(request, job_id):
    job = get_object_or_404(Job.objects.select_related("company"), id=job_id)
    return render(request, "jobs/apply_success.html", {"job": job})


@jobseeker_required
def my_applications(request):
    try:
        apps = applications.list_seeker_applications(request.user)
    except ProfileNotFound as exc:
        return redirect_for_denial(request, exc)
    return render(request, "jobs/my_applications.html", {"applications": apps})


# -----------------------------
# Public: Landing pages
# -----------------------------
def home_public(request):
    q = _normalize_space(request.GET.get("q"))
    job_type = request.GET.get("job_type") or ""
    if job_type not in JobType.values:
        job_type = ""

    jobs = Job.objects.active().select_related("company", "category").search(q=q, job_type=job_type).recent()
    page_obj = _paginate(request, jobs, per_page=12)
    _with_logo(page_obj.object_list)
    return render(
        request,
        "jobs/home_public.html",
        {
            "page_obj": page_obj,
            "q": q,
            "job_type": job_type,
            "job_types": JobType.choices,
            "stats": {"jobs": Job.objects.active().count(), "companies": Company.objects.count()},
        },
    )


def job_detail(request, job_id):
    job = get_object_or_404(Job.objects.select_related("company", "category"), id=job_id)
    related = list(
        Job.objects.active()
        .filter(company_id=job.company_id)
        .exclude(id=job.id)
        .select_related("company")
        .recent()[:RELATED_JOBS_SHOWN]
    )
    return render(
        request,
        "jobs/job_detail.html",
        {
            "job": job,
            "logo": storage.public_url(storage.COMPANY_LOGOS, job.company.logo_url),
            "related_jobs": _with_logo(related),
        },
    )


def company_list(request):
    companies = Company.objects.annotate(
        jobs_count=Count("jobs", filter=Q(jobs__status=JobStatus.ACTIVE))
    ).order_by("company_name")
    page_obj = _paginate(request, companies, per_page=12)
    for company in page_obj.object_list:
        company.logo = storage.public_url(storage.COMPANY_LOGOS, company.logo_url)
    return render(request, "jobs/company_list.html", {"page_obj": page_obj})


def company_detail(request, company_id):
    company = get_object_or_404(Company, id=company_id)
    jobs = list(Job.objects.active().filter(company=company).select_related("company").recent())
    return render(
        request,
        "jobs/company_detail.html",
        {
            "company": company,
            "logo": storage.public_url(storage.COMPANY_LOGOS, company.logo_url),
            "jobs": jobs,
            "jobs_count": len(jobs),
        },
    )
