from datetime import timedelta
from unittest import mock

from django import forms
from django.contrib.auth.models import AnonymousUser
from django.core.cache import cache
from django.core.cache.backends.db import DatabaseCache
from django.core.files.uploadedfile import SimpleUploadedFile
from django.core.management import call_command
from django.db import DatabaseError
from django.db.models.query import QuerySet
from django.test import TestCase, override_settings
from django.urls import reverse
from django.utils import timezone

from accounts.identity import ProfileNotFound
from accounts.models import Company, CompanyMember, Profile, Subscription, User
from jobboard import revalidation, storage

from . import applications, dashboard, notifications, services
from .forms import ApplicationForm, JobForm, StringListField
from .models import Application, ApplicationStatus, Job, JobStatus, Notification
from .quota import can_create_job

LOCMEM_CACHE = {"default": {"BACKEND": "django.core.cache.backends.locmem.LocMemCache", "LOCATION": "tests"}}
DATABASE_CACHE = {"default": {"BACKEND": "django.core.cache.backends.db.DatabaseCache", "LOCATION": "test_page_cache"}}


def make_member(email, company=None, role=CompanyMember.Role.ADMIN, company_name="ACME"):
    user = User.objects.create_user(username=email, email=email, password="pass", user_type="company")
    profile = Profile.objects.create(user=user, full_name=email.split("@")[0].title())
    company = company or Company.objects.create(company_name=company_name)
    CompanyMember.objects.create(company=company, profile=profile, role=role)
    return user, company


def make_seeker(email="seeker@example.com", full_name="Job Seeker"):
    user = User.objects.create_user(username=email, email=email, password="pass", user_type="jobseeker")
    Profile.objects.create(user=user, full_name=full_name)
    return user


def subscribe(company, used=0, limit=5, **kwargs):
    return Subscription.objects.create(
        company=company, plan_type="monthly", job_posts_used=used, job_posts_limit=limit, **kwargs
    )


def make_job(company, title="Backend Developer", **kwargs):
    kwargs.setdefault("location", "Phnom Penh")
    return Job.objects.create(company=company, title=title, **kwargs)


def job_data(**overrides):
    data = {
        "title": "Backend Developer",
        "description": "Work with Django and PostgreSQL",
        "location": "Phnom Penh",
        "is_remote": False,
        "job_type": "full_time",
        "experience_level": "Mid Level",
        "salary_min": 800,
        "salary_max": 1500,
        "salary_currency": "USD",
        "requirements": ["Python", "Django"],
        "benefits": ["Insurance"],
        "tags": ["backend"],
    }
    data.update(overrides)
    return data


def pdf_resume(name="resume.pdf"):
    return SimpleUploadedFile(name, b"%PDF-1.4 resume", content_type="application/pdf")


class QuotaGateTests(TestCase):
    def setUp(self):
        self.user, self.company = make_member("admin@acme.com")

    def test_anonymous_user(self):
        self.assertEqual(can_create_job(AnonymousUser()).reason, "not_authenticated")

    def test_user_without_profile(self):
        user = User.objects.create_user(username="np@x.com", email="np@x.com", password="pass", user_type="company")
        self.assertEqual(can_create_job(user).reason, "no_profile")

    def test_profile_without_membership(self):
        user = make_seeker()
        self.assertEqual(can_create_job(user).reason, "no_company")

    def test_no_subscription(self):
        decision = can_create_job(self.user)
        self.assertFalse(decision.allowed)
        self.assertEqual(decision.reason, "no_subscription")

    def test_expired_subscription(self):
        subscribe(self.company, end_date=timezone.now() - timedelta(days=1))
        self.assertEqual(can_create_job(self.user).reason, "subscription_expired")

    def test_limit_reached(self):
        subscribe(self.company, used=3, limit=3)
        decision = can_create_job(self.user)
        self.assertEqual(decision.reason, "limit_reached")
        self.assertEqual((decision.jobs_used, decision.jobs_limit), (3, 3))
        self.assertEqual(decision.remaining_jobs, 0)

    def test_allowed_reports_usage(self):
        subscribe(self.company, used=1, limit=5)
        decision = can_create_job(self.user)
        self.assertTrue(decision.allowed)
        self.assertEqual(decision.plan_type, "monthly")
        self.assertEqual(decision.remaining_jobs, 4)
        self.assertEqual(decision.message, "")

    def test_latest_active_subscription_is_used(self):
        subscribe(self.company, used=5, limit=5, is_active=False)
        subscribe(self.company, used=0, limit=2)
        self.assertTrue(can_create_job(self.user).allowed)

    @override_settings(JOBBOARD_LEGACY_JOB_LIMIT=3)
    def test_legacy_company_limit(self):
        subscribe(self.company, used=0, limit=10)
        Company.objects.filter(id=self.company.id).update(total_job=3)
        decision = can_create_job(self.user)
        self.assertEqual(decision.reason, "limit_reached")
        self.assertEqual(decision.jobs_limit, 3)

    def test_legacy_limit_disabled_by_default(self):
        subscribe(self.company, used=0, limit=10)
        Company.objects.filter(id=self.company.id).update(total_job=50)
        self.assertTrue(can_create_job(self.user).allowed)


class JobServiceTests(TestCase):
    def setUp(self):
        self.admin, self.company = make_member("admin@acme.com")
        self.recruiter, _ = make_member("rec@acme.com", company=self.company, role=CompanyMember.Role.RECRUITER)
        self.other_admin, self.other_company = make_member("admin@globex.com", company_name="Globex")

    def test_create_job_at_limit_inserts_nothing(self):
        subscribe(self.company, used=3, limit=3)
        result = services.create_job(self.recruiter, job_data())
        self.assertFalse(result.success)
        self.assertEqual(result.reason, "limit_reached")
        self.assertEqual(Job.objects.count(), 0)

    def test_create_job_counts_against_plan(self):
        sub = subscribe(self.company, used=1, limit=3)
        result = services.create_job(self.recruiter, job_data())
        self.assertTrue(result.success)

        job = Job.objects.get(id=result.get("job_id"))
        self.assertEqual(job.company, self.company)
        self.assertEqual(job.status, JobStatus.ACTIVE)
        self.assertEqual(job.posted_by.user, self.recruiter)
        self.assertEqual(job.requirements, ["Python", "Django"])
        sub.refresh_from_db()
        self.company.refresh_from_db()
        self.assertEqual(sub.job_posts_used, 2)
        self.assertEqual(self.company.total_job, 1)

    def test_create_job_without_subscription(self):
        result = services.create_job(self.admin, job_data())
        self.assertEqual(result.reason, "no_subscription")
        self.assertFalse(Job.objects.exists())

    def test_recruiter_edits_own_company_job(self):
        job = make_job(self.company)
        result = services.edit_job(self.recruiter, job.id, job_data(title="Senior Backend Developer"))
        self.assertTrue(result.success)
        self.assertEqual(result.get("rows"), 1)
        job.refresh_from_db()
        self.assertEqual(job.title, "Senior Backend Developer")

    def test_edit_other_company_job_affects_no_row(self):
        foreign = make_job(self.other_company, title="Globex Job")
        result = services.edit_job(self.recruiter, foreign.id, job_data(title="Hijacked"))
        self.assertFalse(result.success)
        self.assertEqual(result.get("rows"), 0)
        foreign.refresh_from_db()
        self.assertEqual(foreign.title, "Globex Job")

    def test_edit_keeps_status(self):
        job = make_job(self.company, status=JobStatus.CLOSED)
        services.edit_job(self.admin, job.id, job_data())
        job.refresh_from_db()
        self.assertEqual(job.status, JobStatus.CLOSED)

    def test_principal_without_membership_cannot_mutate(self):
        seeker = make_seeker()
        job = make_job(self.company)
        for result in (
            services.create_job(seeker, job_data()),
            services.edit_job(seeker, job.id, job_data(title="Changed")),
            services.delete_job(seeker, job.id),
        ):
            self.assertFalse(result.success)
            self.assertEqual(result.reason, "no_company")
        self.assertTrue(Job.objects.filter(id=job.id, title="Backend Developer").exists())

    def test_viewer_cannot_mutate(self):
        viewer, _ = make_member("viewer@acme.com", company=self.company, role=CompanyMember.Role.VIEWER)
        subscribe(self.company)
        result = services.create_job(viewer, job_data())
        self.assertEqual(result.reason, "insufficient_role")

    def test_deleting_other_company_job_is_noop(self):
        foreign = make_job(self.other_company)
        result = services.delete_job(self.admin, foreign.id)
        self.assertFalse(result.success)
        self.assertEqual(result.get("rows"), 0)
        self.assertTrue(Job.objects.filter(id=foreign.id).exists())

    def test_delete_job_counts_only_job_rows(self):
        Company.objects.filter(id=self.company.id).update(total_job=1)
        job = make_job(self.company)
        seeker = make_seeker()
        Application.objects.create(job=job, job_seeker=seeker.profile, cover_letter="Hello there, hire me")

        result = services.delete_job(self.recruiter, job.id)
        self.assertTrue(result.success)
        self.assertEqual(result.get("rows"), 1)
        self.assertFalse(Application.objects.exists())
        self.company.refresh_from_db()
        self.assertEqual(self.company.total_job, 0)

    def test_set_job_status(self):
        job = make_job(self.company)
        self.assertTrue(services.set_job_status(self.admin, job.id, JobStatus.CLOSED).success)
        job.refresh_from_db()
        self.assertEqual(job.status, JobStatus.CLOSED)
        self.assertEqual(services.set_job_status(self.admin, job.id, "bogus").reason, "invalid")
        self.assertEqual(services.set_job_status(self.other_admin, job.id, JobStatus.ACTIVE).reason, "not_found")


@override_settings(CACHES=LOCMEM_CACHE)
class RevalidationTests(TestCase):
    def setUp(self):
        cache.clear()
        self.admin, self.company = make_member("admin@acme.com")

    def test_company_job_list_is_cached_until_revalidated(self):
        make_job(self.company, title="First Job")
        self.assertEqual([j.title for j in services.list_company_jobs(self.company.id)], ["First Job"])

        make_job(self.company, title="Second Job")
        self.assertEqual(len(services.list_company_jobs(self.company.id)), 1)

        revalidation.revalidate_path(revalidation.company_path(revalidation.JOB_LIST, self.company.id))
        self.assertEqual(len(services.list_company_jobs(self.company.id)), 2)

    def test_mutation_invalidates_job_list(self):
        subscribe(self.company)
        self.assertEqual(services.list_company_jobs(self.company.id), [])
        services.create_job(self.admin, job_data())
        self.assertEqual(len(services.list_company_jobs(self.company.id)), 1)

    def test_edit_and_delete_invalidate_job_list(self):
        job = make_job(self.company, title="First Job")
        self.assertEqual([j.title for j in services.list_company_jobs(self.company.id)], ["First Job"])

        services.edit_job(self.admin, job.id, {"title": "Renamed Job"})
        self.assertEqual([j.title for j in services.list_company_jobs(self.company.id)], ["Renamed Job"])

        services.delete_job(self.admin, job.id)
        self.assertEqual(services.list_company_jobs(self.company.id), [])

    def test_cache_entries_are_scoped_by_company(self):
        _, other = make_member("admin@globex.com", company_name="Globex")
        make_job(self.company)
        self.assertEqual(len(services.list_company_jobs(self.company.id)), 1)
        self.assertEqual(services.list_company_jobs(other.id), [])


@override_settings(CACHES=DATABASE_CACHE)
class SharedCacheTests(TestCase):
    """Two cache clients on one table stand in for two web workers."""

    def setUp(self):
        call_command("createcachetable", verbosity=0)
        self.admin, self.company = make_member("admin@acme.com")
        subscribe(self.company)
        self.other_worker = DatabaseCache(DATABASE_CACHE["default"]["LOCATION"], {})
        self.key = f"page:{revalidation.company_path(revalidation.JOB_LIST, self.company.id)}"

    def test_job_list_entry_is_shared(self):
        make_job(self.company, title="First Job")
        services.list_company_jobs(self.company.id)
        self.assertEqual([j.title for j in self.other_worker.get(self.key)], ["First Job"])

    def test_mutation_clears_entry_for_every_worker(self):
        services.list_company_jobs(self.company.id)
        self.assertEqual(self.other_worker.get(self.key), [])

        services.create_job(self.admin, job_data())
        self.assertIsNone(self.other_worker.get(self.key))


class ApplicationWorkflowTests(TestCase):
    def setUp(self):
        self.admin, self.company = make_member("admin@acme.com")
        self.job = make_job(self.company)
        self.seeker = make_seeker()

    def test_apply_creates_pending_application_and_notification(self):
        cover_letter = "I bring five years of Django and PostgreSQL work, "
        self.assertEqual(len(cover_letter), 50)
        result = applications.create_application(self.seeker, self.job.id, cover_letter, pdf_resume())
        self.assertTrue(result.success, result.message)

        application = Application.objects.get()
        self.assertEqual(application.status, ApplicationStatus.PENDING)
        self.assertEqual(application.job_seeker, self.seeker.profile)
        self.assertEqual(application.resume_url, f"{self.seeker.pk}/resume.pdf")
        self.assertTrue(storage.exists(storage.RESUMES, application.resume_url))

        notification = Notification.objects.get()
        self.assertEqual(notification.company, self.company)
        self.assertEqual(notification.type, Notification.Type.APPLICATION_RECEIVED)
        self.assertEqual(notification.related_application, application)
        self.assertFalse(notification.is_read)

    def test_second_application_is_rejected(self):
        applications.create_application(self.seeker, self.job.id, "First application letter", pdf_resume())
        result = applications.create_application(self.seeker, self.job.id, "Second application letter", pdf_resume())
        self.assertFalse(result.success)
        self.assertTrue(result.get("already_applied"))
        self.assertEqual(Application.objects.count(), 1)
        self.assertEqual(Notification.objects.count(), 1)

    def test_unique_constraint_decides_when_precheck_misses(self):
        Application.objects.create(job=self.job, job_seeker=self.seeker.profile, cover_letter="Existing letter")
        with mock.patch.object(QuerySet, "exists", return_value=False):
            result = applications.create_application(self.seeker, self.job.id, "Racing application", pdf_resume())
        self.assertEqual(result.reason, "already_applied")
        self.assertTrue(result.get("already_applied"))
        self.assertEqual(Application.objects.count(), 1)

    def test_resume_upload_overwrites_same_key(self):
        other_job = make_job(self.company, title="Frontend Engineer")
        applications.create_application(self.seeker, self.job.id, "First application letter", pdf_resume())
        applications.create_application(self.seeker, other_job.id, "Second application letter", pdf_resume())
        paths = set(Application.objects.values_list("resume_url", flat=True))
        self.assertEqual(paths, {f"{self.seeker.pk}/resume.pdf"})

    def test_missing_profile_raises(self):
        user = User.objects.create_user(username="np@x.com", email="np@x.com", password="pass", user_type="jobseeker")
        with self.assertRaises(ProfileNotFound):
            applications.create_application(user, self.job.id, "Some cover letter", pdf_resume())

    def test_closed_job_rejects_applications(self):
        Job.objects.filter(id=self.job.id).update(status=JobStatus.CLOSED)
        result = applications.create_application(self.seeker, self.job.id, "Some cover letter", pdf_resume())
        self.assertEqual(result.reason, "job_closed")
        self.assertFalse(Application.objects.exists())

    def test_notification_failure_does_not_fail_application(self):
        with mock.patch.object(Notification.objects, "create", side_effect=DatabaseError("down")):
            result = applications.create_application(self.seeker, self.job.id, "Some cover letter", pdf_resume())
        self.assertTrue(result.success)
        self.assertEqual(Application.objects.count(), 1)
        self.assertFalse(Notification.objects.exists())

    def test_status_update_requires_owning_company(self):
        application = Application.objects.create(job=self.job, job_seeker=self.seeker.profile, cover_letter="Letter")
        other_admin, _ = make_member("admin@globex.com", company_name="Globex")

        result = applications.update_application_status(other_admin, application.id, ApplicationStatus.ACCEPTED)
        self.assertEqual(result.reason, "not_found")
        application.refresh_from_db()
        self.assertEqual(application.status, ApplicationStatus.PENDING)

        result = applications.update_application_status(self.admin, application.id, ApplicationStatus.REVIEWING)
        self.assertTrue(result.success)
        application.refresh_from_db()
        self.assertEqual(application.status, ApplicationStatus.REVIEWING)
        self.assertTrue(
            Notification.objects.filter(related_application=application, type=Notification.Type.APPLICATION_STATUS).exists()
        )

    def test_seeker_list_covers_last_month(self):
        recent = Application.objects.create(job=self.job, job_seeker=self.seeker.profile, cover_letter="Letter")
        old_job = make_job(self.company, title="Old Job")
        old = Application.objects.create(job=old_job, job_seeker=self.seeker.profile, cover_letter="Letter")
        Application.objects.filter(id=old.id).update(applied_at=timezone.now() - timedelta(days=45))
        self.assertEqual(list(applications.list_seeker_applications(self.seeker)), [recent])

    def test_company_list_filters_by_status_and_tenant(self):
        a1 = Application.objects.create(job=self.job, job_seeker=self.seeker.profile, cover_letter="Letter")
        other = make_seeker("other@example.com")
        a2 = Application.objects.create(
            job=self.job, job_seeker=other.profile, cover_letter="Letter", status=ApplicationStatus.ACCEPTED
        )
        _, globex = make_member("admin@globex.com", company_name="Globex")
        self.assertEqual(set(applications.list_company_applications(self.company.id)), {a1, a2})
        self.assertEqual(list(applications.list_company_applications(self.company.id, "accepted")), [a2])
        self.assertFalse(applications.list_company_applications(globex.id).exists())

    def test_detail_marks_related_notifications_read(self):
        applications.create_application(self.seeker, self.job.id, "Some cover letter", pdf_resume())
        application = Application.objects.get()
        detail = applications.get_application_detail(self.company.id, application.id, mark_read=True)
        self.assertEqual(detail, application)
        self.assertEqual(notifications.unread_count(self.company.id), 0)


class NotificationTests(TestCase):
    def setUp(self):
        self.admin, self.company = make_member("admin@acme.com")
        self.other_admin, self.other_company = make_member("admin@globex.com", company_name="Globex")
        self.note = notifications.create_company_notification(
            self.company.id, type=Notification.Type.APPLICATION_RECEIVED, title="New application"
        )

    def test_mark_read_is_idempotent(self):
        self.assertEqual(notifications.mark_read(self.company.id, self.note.id), 1)
        self.note.refresh_from_db()
        first_read_at = self.note.read_at
        self.assertTrue(self.note.is_read)
        self.assertIsNotNone(first_read_at)

        self.assertEqual(notifications.mark_read(self.company.id, self.note.id), 0)
        self.note.refresh_from_db()
        self.assertTrue(self.note.is_read)
        self.assertEqual(self.note.read_at, first_read_at)

    def test_mark_read_is_scoped_by_company(self):
        self.assertEqual(notifications.mark_read(self.other_company.id, self.note.id), 0)
        self.note.refresh_from_db()
        self.assertFalse(self.note.is_read)

    def test_mark_all_read(self):
        notifications.create_company_notification(self.company.id, type="application_received", title="Another")
        notifications.create_company_notification(self.other_company.id, type="application_received", title="Theirs")
        self.assertEqual(notifications.mark_all_read(self.company.id), 2)
        self.assertEqual(notifications.unread_count(self.company.id), 0)
        self.assertEqual(notifications.unread_count(self.other_company.id), 1)

    def test_unread_count_covers_last_month(self):
        old = notifications.create_company_notification(self.company.id, type="application_received", title="Old")
        Notification.objects.filter(id=old.id).update(created_at=timezone.now() - timedelta(days=40))
        self.assertEqual(notifications.unread_count(self.company.id), 1)

    def test_mark_read_view_redirects_to_next(self):
        self.client.login(username="admin@acme.com", password="pass")
        resp = self.client.post(
            reverse("notification_mark_read", args=[self.note.id]), {"next": reverse("notifications_list")}
        )
        self.assertRedirects(resp, reverse("notifications_list"))
        self.note.refresh_from_db()
        self.assertTrue(self.note.is_read)

    def test_unread_count_in_navigation(self):
        self.client.login(username="admin@acme.com", password="pass")
        resp = self.client.get(reverse("notifications_list"))
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.context["nav_unread_notifications"], 1)
        self.assertContains(resp, "New application")


class DashboardTests(TestCase):
    def setUp(self):
        self.admin, self.company = make_member("admin@acme.com")
        rec, _ = make_member("rec@acme.com", company=self.company, role=CompanyMember.Role.RECRUITER)
        CompanyMember.objects.filter(profile__user=rec).update(is_active=False)
        make_job(self.company, job_type="full_time", experience_level="Mid Level", is_remote=True)
        make_job(self.company, title="Designer", job_type="part_time", status=JobStatus.CLOSED)
        old = make_job(self.company, title="Old Job")
        Job.objects.filter(id=old.id).update(created_at=timezone.now() - timedelta(days=400))

    def test_statistics(self):
        stats = dashboard.get_statistics(self.company.id)
        self.assertEqual(stats, {"total_jobs": 3, "active_jobs": 2, "total_members": 2, "active_members": 1})

    def test_distributions_and_latest(self):
        data = dashboard.company_dashboard(self.company.id)
        job_types = {row["name"]: row["value"] for row in data["job_types"]}
        self.assertEqual(job_types, {"Full Time": 2, "Part Time": 1})
        self.assertIn({"name": "Remote", "value": 1}, data["remote_split"])
        self.assertIn({"name": "On-site", "value": 2}, data["remote_split"])
        self.assertEqual(len(data["latest_jobs"]), 3)

    def test_posts_per_month_covers_six_months(self):
        months = dashboard.posts_per_month(self.company.id)
        self.assertEqual(len(months), 6)
        self.assertEqual(months[-1]["value"], 2)
        self.assertEqual(sum(row["value"] for row in months), 2)

    def test_dashboard_view(self):
        self.client.login(username="admin@acme.com", password="pass")
        resp = self.client.get(reverse("company_dashboard"))
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.context["stats"]["total_jobs"], 3)


class JobFormTests(TestCase):
    def form_data(self, **overrides):
        data = job_data(requirements="Python\nDjango", benefits='["Insurance"]', tags="")
        data.update(overrides)
        return data

    def test_valid_form(self):
        form = JobForm(data=self.form_data())
        self.assertTrue(form.is_valid(), form.errors)
        fields = form.job_fields()
        self.assertEqual(fields["requirements"], ["Python", "Django"])
        self.assertEqual(fields["benefits"], ["Insurance"])
        self.assertEqual(fields["tags"], [])

    def test_short_title(self):
        form = JobForm(data=self.form_data(title="Dev"))
        self.assertIn("title", form.errors)

    def test_past_deadline(self):
        yesterday = timezone.localdate() - timedelta(days=1)
        form = JobForm(data=self.form_data(application_deadline=yesterday.isoformat()))
        self.assertIn("application_deadline", form.errors)

    def test_salary_range(self):
        form = JobForm(data=self.form_data(salary_min=2000, salary_max=1000))
        self.assertIn("salary_max", form.errors)

    def test_requirements_required(self):
        form = JobForm(data=self.form_data(requirements=""))
        self.assertEqual(form.errors["requirements"], ["At least one requirement is needed"])

    def test_string_list_rejects_bad_json(self):
        field = StringListField()
        with self.assertRaises(forms.ValidationError) as ctx:
            field.clean('["unterminated')
        self.assertIn("Invalid data format", str(ctx.exception))

    def test_application_form_rejects_non_document(self):
        form = ApplicationForm(
            data={"cover_letter": "A long enough cover letter"},
            files={"resume": SimpleUploadedFile("photo.png", b"png", content_type="image/png")},
        )
        self.assertIn("resume", form.errors)

    def test_application_form_cover_letter_length(self):
        form = ApplicationForm(data={"cover_letter": "short"}, files={"resume": pdf_resume()})
        self.assertIn("cover_letter", form.errors)


class CompanyJobViewTests(TestCase):
    def setUp(self):
        self.admin, self.company = make_member("admin@acme.com")
        self.sub = subscribe(self.company, used=0, limit=1)
        self.client.login(username="admin@acme.com", password="pass")

    def test_create_job_view(self):
        data = job_data(requirements="Python", benefits="Insurance", tags="")
        resp = self.client.post(reverse("create_job"), data)
        job = Job.objects.get()
        self.assertRedirects(resp, reverse("company_job_detail", args=[job.id]))

    def test_create_job_view_redirects_to_subscription_at_limit(self):
        Subscription.objects.filter(id=self.sub.id).update(job_posts_used=1)
        resp = self.client.get(reverse("create_job"))
        self.assertRedirects(resp, reverse("subscription"))

    def test_delete_foreign_job_view(self):
        _, other = make_member("admin@globex.com", company_name="Globex")
        foreign = make_job(other)
        resp = self.client.post(reverse("delete_job", args=[foreign.id]))
        self.assertRedirects(resp, reverse("company_jobs"))
        self.assertTrue(Job.objects.filter(id=foreign.id).exists())

    def test_company_user_without_company_is_sent_to_onboarding(self):
        User.objects.create_user(username="new@x.com", email="new@x.com", password="pass", user_type="company")
        self.client.logout()
        self.client.login(username="new@x.com", password="pass")
        resp = self.client.get(reverse("company_jobs"))
        self.assertRedirects(resp, reverse("company_application"))


class PublicPageTests(TestCase):
    def setUp(self):
        _, self.company = make_member("admin@acme.com")
        make_job(self.company, title="Backend Developer", description="Django and PostgreSQL")
        make_job(self.company, title="UI Designer", job_type="part_time")
        make_job(self.company, title="Closed Role", status=JobStatus.CLOSED)

    def test_landing_lists_active_jobs(self):
        resp = self.client.get(reverse("home"))
        self.assertContains(resp, "Backend Developer")
        self.assertContains(resp, "UI Designer")
        self.assertNotContains(resp, "Closed Role")

    def test_search_and_job_type_filter(self):
        resp = self.client.get(reverse("job_list"), {"q": "django"})
        self.assertContains(resp, "Backend Developer")
        self.assertNotContains(resp, "UI Designer")

        resp = self.client.get(reverse("job_list"), {"job_type": "part_time"})
        self.assertContains(resp, "UI Designer")
        self.assertNotContains(resp, "Backend Developer")

    def test_job_detail_shows_same_company_jobs(self):
        job = Job.objects.get(title="Backend Developer")
        resp = self.client.get(reverse("job_detail", args=[job.id]))
        self.assertEqual(resp.status_code, 200)
        self.assertEqual([j.title for j in resp.context["related_jobs"]], ["UI Designer"])

    def test_company_pages(self):
        resp = self.client.get(reverse("company_list"))
        self.assertContains(resp, "ACME")
        resp = self.client.get(reverse("company_detail", args=[self.company.id]))
        self.assertEqual(resp.context["jobs_count"], 2)


class ApplyViewTests(TestCase):
    def setUp(self):
        _, self.company = make_member("admin@acme.com")
        self.job = make_job(self.company)
        self.seeker = make_seeker()
        self.client.login(username="seeker@example.com", password="pass")

    def test_apply_flow(self):
        resp = self.client.post(
            reverse("apply_job", args=[self.job.id]),
            {"cover_letter": "I would love to join the team at ACME.", "resume": pdf_resume()},
        )
        self.assertRedirects(resp, reverse("apply_success", args=[self.job.id]))
        self.assertEqual(Application.objects.filter(job=self.job).count(), 1)

        resp = self.client.get(reverse("my_applications"))
        self.assertContains(resp, self.job.title)

    def test_duplicate_apply_redirects_to_my_applications(self):
        Application.objects.create(job=self.job, job_seeker=self.seeker.profile, cover_letter="Letter")
        resp = self.client.post(
            reverse("apply_job", args=[self.job.id]),
            {"cover_letter": "I would love to join the team at ACME.", "resume": pdf_resume()},
        )
        self.assertRedirects(resp, reverse("my_applications"))
        self.assertEqual(Application.objects.count(), 1)

    def test_company_users_cannot_apply(self):
        self.client.logout()
        self.client.login(username="admin@acme.com", password="pass")
        resp = self.client.get(reverse("apply_job", args=[self.job.id]))
        self.assertRedirects(resp, reverse("home"))
