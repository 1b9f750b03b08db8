from django.db import models
from django.db.models import Q

from accounts.models import Company, Profile


class JobType(models.TextChoices):
    FULL_TIME = "full_time", "Full Time"
    PART_TIME = "part_time", "Part Time"
    REMOTE = "remote", "Remote"
    HYBRID = "hybrid", "Hybrid"


class JobStatus(models.TextChoices):
    ACTIVE = "active", "Active"
    DRAFT = "draft", "Draft"
    EXPIRED = "expired", "Expired"
    CLOSED = "closed", "Closed"


class Currency(models.TextChoices):
    USD = "USD", "USD ($)"
    KHR = "KHR", "KHR (៛)"


class ApplicationStatus(models.TextChoices):
    PENDING = "pending", "Pending"
    REVIEWING = "reviewing", "Reviewing"
    ACCEPTED = "accepted", "Accepted"
    REJECTED = "rejected", "Rejected"


class JobCategory(models.Model):
    name = models.CharField(max_length=100, unique=True)
    description = models.TextField(blank=True, null=True)
    is_active = models.BooleanField(default=True)

    class Meta:
        ordering = ["name"]
        verbose_name_plural = "job categories"

    def __str__(self):
        return self.name


class JobQuerySet(models.QuerySet):
    def for_company(self, company_id):
        return self.filter(company_id=company_id)

    def active(self):
        return self.filter(status=JobStatus.ACTIVE)

    def recent(self):
        return self.order_by("-created_at", "-id")

    def search(self, *, q: str | None = None, job_type: str | None = None, location: str | None = None):
        qs = self
        if q:
            for token in q.split():
                qs = qs.filter(
                    Q(title__icontains=token)
                    | Q(description__icontains=token)
                    | Q(company__company_name__icontains=token)
                )
        if job_type:
            qs = qs.filter(job_type=job_type)
        if location:
            qs = qs.filter(location__icontains=location)
        return qs


class Job(models.Model):
    company = models.ForeignKey(Company, on_delete=models.CASCADE, related_name="jobs")
    category = models.ForeignKey(JobCategory, on_delete=models.SET_NULL, related_name="jobs", blank=True, null=True)
    posted_by = models.ForeignKey(Profile, on_delete=models.SET_NULL, related_name="posted_jobs", blank=True, null=True)
    title = models.CharField(max_length=200)
    description = models.TextField(blank=True, null=True)
    location = models.CharField(max_length=200)
    is_remote = models.BooleanField(default=False)
    job_type = models.CharField(max_length=20, choices=JobType.choices, default=JobType.FULL_TIME)
    experience_level = models.CharField(max_length=50, blank=True)
    salary_min = models.PositiveIntegerField(blank=True, null=True)
    salary_max = models.PositiveIntegerField(blank=True, null=True)
    salary_currency = models.CharField(max_length=3, choices=Currency.choices, default=Currency.USD)
    requirements = models.JSONField(default=list, blank=True)
    benefits = models.JSONField(default=list, blank=True)
    tags = models.JSONField(default=list, blank=True)
    status = models.CharField(max_length=20, choices=JobStatus.choices, default=JobStatus.ACTIVE)
    application_deadline = models.DateField(blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = JobQuerySet.as_manager()

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["company", "status"], name="job_company_status_idx"),
        ]

    def __str__(self):
        return self.title


class ApplicationQuerySet(models.QuerySet):
    def for_company(self, company_id):
        return self.filter(job__company_id=company_id)

    def for_job_seeker(self, profile):
        return self.filter(job_seeker=profile)


class Application(models.Model):
    job = models.ForeignKey(Job, on_delete=models.CASCADE, related_name="applications")
    job_seeker = models.ForeignKey(Profile, on_delete=models.CASCADE, related_name="applications")
    cover_letter = models.TextField()
    resume_url = models.CharField(max_length=255, blank=True, null=True)
    status = models.CharField(max_length=20, choices=ApplicationStatus.choices, default=ApplicationStatus.PENDING)
    applied_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = ApplicationQuerySet.as_manager()

    class Meta:
        ordering = ["-applied_at"]
        constraints = [
            models.UniqueConstraint(fields=["job", "job_seeker"], name="unique_application_per_job_seeker"),
        ]

    def __str__(self):
        return f"{self.job_seeker} -> {self.job}"


class Notification(models.Model):
    class Type(models.TextChoices):
        APPLICATION_RECEIVED = "application_received", "Application received"
        APPLICATION_STATUS = "application_status", "Application status changed"

    company = models.ForeignKey(Company, on_delete=models.CASCADE, related_name="notifications")
    type = models.CharField(max_length=30, choices=Type.choices)
    title = models.CharField(max_length=200)
    message = models.TextField(blank=True, null=True)
    is_read = models.BooleanField(default=False)
    read_at = models.DateTimeField(blank=True, null=True)
    related_job = models.ForeignKey(Job, on_delete=models.SET_NULL, related_name="notifications", blank=True, null=True)
    related_application = models.ForeignKey(
        Application, on_delete=models.SET_NULL, related_name="notifications", blank=True, null=True
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at", "-id"]

    def __str__(self):
        return self.title
