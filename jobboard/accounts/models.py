from django.contrib.auth.models import AbstractUser
from django.db import models
from django.db.models import Q
from django.utils import timezone


class User(AbstractUser):
    class UserType(models.TextChoices):
        JOBSEEKER = "jobseeker", "Job Seeker"
        COMPANY = "company", "Company"

    email = models.EmailField(unique=True)
    user_type = models.CharField(max_length=20, choices=UserType.choices, blank=True)

    @property
    def display_name(self) -> str:
        return self.get_full_name() or self.username


class Profile(models.Model):
    """One per authenticated principal, created by the profile forms."""

    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name="profile")
    full_name = models.CharField(max_length=150)
    phone = models.CharField(max_length=30, blank=True, null=True)
    location = models.CharField(max_length=200, blank=True, null=True)
    bio = models.TextField(blank=True, null=True)
    experience_level = models.CharField(max_length=50, blank=True, null=True)
    linkedin_url = models.URLField(blank=True, null=True)
    avatar_url = models.CharField(max_length=255, blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.full_name


class Company(models.Model):
    company_name = models.CharField(max_length=200)
    description = models.TextField(blank=True, null=True)
    industry = models.CharField(max_length=100, blank=True, null=True)
    headquarters = models.CharField(max_length=200, blank=True, null=True)
    founding_year = models.PositiveIntegerField(blank=True, null=True)
    company_size = models.CharField(max_length=50, blank=True, null=True)
    company_website = models.URLField(blank=True, null=True)
    linkedin_url = models.URLField(blank=True, null=True)
    logo_url = models.CharField(max_length=255, blank=True, null=True)
    # cached counter, maintained by jobs.services
    total_job = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["company_name"]
        verbose_name_plural = "companies"

    def __str__(self):
        return self.company_name


class CompanyMember(models.Model):
    class Role(models.TextChoices):
        ADMIN = "admin", "Admin"
        RECRUITER = "recruiter", "Recruiter"
        VIEWER = "viewer", "Viewer"

    company = models.ForeignKey(Company, on_delete=models.CASCADE, related_name="members")
    profile = models.ForeignKey(Profile, on_delete=models.CASCADE, related_name="memberships")
    role = models.CharField(max_length=20, choices=Role.choices, default=Role.RECRUITER)
    is_active = models.BooleanField(default=True)
    joined_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["profile"],
                condition=Q(is_active=True),
                name="one_active_membership_per_profile",
            ),
        ]

    def __str__(self):
        return f"{self.profile} @ {self.company} ({self.role})"


class SubscriptionQuerySet(models.QuerySet):
    def current_for(self, company_id):
        """Latest active subscription row for the company, or None."""
        return self.filter(company_id=company_id, is_active=True).order_by("-created_at", "-id").first()


class Subscription(models.Model):
    class PlanType(models.TextChoices):
        FREE = "free", "Free"
        WEEKLY = "weekly", "Weekly"
        MONTHLY = "monthly", "Monthly"
        YEARLY = "yearly", "Yearly"

    company = models.ForeignKey(Company, on_delete=models.CASCADE, related_name="subscriptions")
    plan_type = models.CharField(max_length=20, choices=PlanType.choices, default=PlanType.FREE)
    job_posts_limit = models.PositiveIntegerField(default=0)
    job_posts_used = models.PositiveIntegerField(default=0)
    start_date = models.DateTimeField(default=timezone.now)
    end_date = models.DateTimeField(blank=True, null=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    objects = SubscriptionQuerySet.as_manager()

    class Meta:
        ordering = ["-created_at"]

    def __str__(self):
        return f"{self.company} - {self.plan_type} ({self.job_posts_used}/{self.job_posts_limit})"

    def is_expired(self, now=None) -> bool:
        if not self.end_date:
            return False
        return (now or timezone.now()) > self.end_date

    @property
    def remaining_posts(self) -> int:
        return max(0, self.job_posts_limit - self.job_posts_used)
