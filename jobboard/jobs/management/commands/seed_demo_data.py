import random

from django.contrib.auth import get_user_model
from django.core.files.base import ContentFile
from django.core.management.base import BaseCommand
from django.db import transaction

from accounts.models import Company, CompanyMember, Profile, Subscription
from accounts.subscriptions import get_plan, start_subscription
from jobboard import storage
from jobs.constants import COMPANY_SIZES, EXPERIENCE_LEVELS
from jobs.models import Application, ApplicationStatus, Job, JobCategory, JobStatus, JobType
from jobs.notifications import notify_application_received

User = get_user_model()


class Command(BaseCommand):
    help = "Seed demo data (companies with admins and recruiters, job seekers, jobs, applications)."

    def add_arguments(self, parser):
        parser.add_argument("--prefix", type=str, default="demo")
        parser.add_argument("--companies", type=int, default=4)
        parser.add_argument("--recruiters-per-company", type=int, default=1)
        parser.add_argument("--jobseekers", type=int, default=10)
        parser.add_argument("--jobs-per-company", type=int, default=5)
        parser.add_argument("--applications-per-seeker", type=int, default=3)
        parser.add_argument("--plan", type=str, default="monthly", choices=["free", "weekly", "monthly", "yearly"])
        parser.add_argument("--password", type=str, default="DemoPass123!")
        parser.add_argument("--seed", type=int, default=42)
        parser.add_argument("--wipe", action="store_true", help="Delete existing users starting with prefix before seeding.")

    def _make_user(self, email, first_name, last_name, user_type, password):
        user, _ = User.objects.get_or_create(
            username=email,
            defaults={"email": email, "user_type": user_type},
        )
        # Keep demo credentials predictable.
        user.email = email
        user.first_name = first_name
        user.last_name = last_name
        user.user_type = user_type
        user.is_active = True
        user.set_password(password)
        user.save()
        return user

    def _profile(self, user, **defaults):
        profile, _ = Profile.objects.get_or_create(user=user, defaults={"full_name": user.display_name, **defaults})
        return profile

    @transaction.atomic
    def handle(self, *args, **opts):
        rnd = random.Random(opts["seed"])
        prefix = (opts["prefix"] or "demo").strip().lower()
        companies_n = max(1, int(opts["companies"]))
        recruiters_n = max(0, int(opts["recruiters_per_company"]))
        seekers_n = max(1, int(opts["jobseekers"]))
        jobs_per_company = max(1, int(opts["jobs_per_company"]))
        apps_per_seeker = max(0, int(opts["applications_per_seeker"]))
        password = opts["password"]
        plan = get_plan(opts["plan"])

        if opts["wipe"]:
            Company.objects.filter(members__profile__user__username__startswith=f"{prefix}_").delete()
            User.objects.filter(username__startswith=f"{prefix}_").delete()

        company_names = [
            "Mekong Digital",
            "Angkor Analytics",
            "Tonle Systems",
            "Riverside Health",
            "Lotus Logistics",
            "Golden Gate Finance",
        ]
        industries = ["Technology", "Healthcare", "Finance", "Logistics", "Education", "Retail"]
        categories = [
            JobCategory.objects.get_or_create(name=name)[0]
            for name in ("Engineering", "Design", "Data", "Operations", "Sales")
        ]
        job_templates = [
            ("Backend Developer", "Build and maintain APIs, background jobs and PostgreSQL schemas."),
            ("Frontend Engineer", "Develop responsive interfaces with modern JavaScript and API integrations."),
            ("Data Analyst", "Turn product and hiring data into dashboards and actionable insights."),
            ("DevOps Engineer", "Automate CI/CD pipelines, deployments and runtime monitoring."),
            ("Product Designer", "Prototype user journeys and design system components."),
            ("Sales Executive", "Grow key accounts and manage the regional sales pipeline."),
        ]
        locations = ["Phnom Penh", "Siem Reap", "Battambang", "Remote", "Kampot"]

        created_jobs = []
        company_creds = []
        seeker_creds = []

        for i in range(1, companies_n + 1):
            email = f"{prefix}_admin_{i}@example.com"
            admin = self._make_user(email, "Admin", str(i), User.UserType.COMPANY, password)
            admin_profile = self._profile(admin, phone=f"+855-12-000-{100 + i}")

            member = CompanyMember.objects.filter(profile=admin_profile, is_active=True).select_related("company").first()
            if member:
                company = member.company
            else:
                company = Company.objects.create(
                    company_name=f"{company_names[(i - 1) % len(company_names)]} {i}",
                    description="Hiring across engineering, product and data teams.",
                    industry=industries[(i - 1) % len(industries)],
                    headquarters=locations[(i - 1) % len(locations)],
                    founding_year=rnd.randint(1995, 2022),
                    company_size=rnd.choice(COMPANY_SIZES),
                    company_website="https://example.com",
                )
                CompanyMember.objects.create(company=company, profile=admin_profile, role=CompanyMember.Role.ADMIN)
            company_creds.append((email, password))

            for r in range(1, recruiters_n + 1):
                rec_email = f"{prefix}_recruiter_{i}_{r}@example.com"
                recruiter = self._make_user(rec_email, "Recruiter", f"{i}.{r}", User.UserType.COMPANY, password)
                rec_profile = self._profile(recruiter)
                if not CompanyMember.objects.filter(profile=rec_profile, is_active=True).exists():
                    CompanyMember.objects.create(company=company, profile=rec_profile, role=CompanyMember.Role.RECRUITER)

            subscription = Subscription.objects.current_for(company.id) or start_subscription(company, plan)
            for j in range(1, jobs_per_company + 1):
                title_base, description = job_templates[(j + i - 2) % len(job_templates)]
                salary_min = rnd.randint(400, 1500) * 10
                job, created = Job.objects.get_or_create(
                    company=company,
                    title=f"{title_base} - Team {i}.{j}",
                    defaults={
                        "category": rnd.choice(categories),
                        "posted_by": admin_profile,
                        "description": description,
                        "location": rnd.choice(locations),
                        "is_remote": rnd.random() < 0.3,
                        "job_type": rnd.choice(JobType.values),
                        "experience_level": rnd.choice(EXPERIENCE_LEVELS),
                        "salary_min": salary_min,
                        "salary_max": salary_min + rnd.randint(100, 800) * 10,
                        "requirements": ["2+ years of relevant experience", "Good written English"],
                        "benefits": ["Health insurance", "Flexible hours"],
                        "tags": [title_base.split()[0].lower()],
                        "status": rnd.choices(JobStatus.values, weights=[70, 10, 10, 10], k=1)[0],
                    },
                )
                if created:
                    subscription.job_posts_used += 1
                    company.total_job += 1
                if job.status == JobStatus.ACTIVE:
                    created_jobs.append(job)
            subscription.job_posts_limit = max(subscription.job_posts_limit, subscription.job_posts_used)
            subscription.save(update_fields=["job_posts_used", "job_posts_limit"])
            company.save(update_fields=["total_job"])

        for i in range(1, seekers_n + 1):
            email = f"{prefix}_seeker_{i}@example.com"
            user = self._make_user(email, "Seeker", str(i), User.UserType.JOBSEEKER, password)
            profile = self._profile(
                user,
                location=rnd.choice(locations),
                experience_level=rnd.choice(EXPERIENCE_LEVELS),
                bio="Motivated professional looking for the next challenge.",
            )
            seeker_creds.append((email, password))

            resume_path = storage.object_key(user.pk, "resume.txt")
            if not storage.exists(storage.RESUMES, resume_path):
                storage.upload(
                    storage.RESUMES,
                    resume_path,
                    ContentFile(f"Resume for {profile.full_name}\n".encode()),
                )

            for job in rnd.sample(created_jobs, k=min(apps_per_seeker, len(created_jobs))):
                application, created = Application.objects.get_or_create(
                    job=job,
                    job_seeker=profile,
                    defaults={
                        "cover_letter": "I am interested in this role and believe my background is a strong fit.",
                        "resume_url": resume_path,
                        "status": rnd.choices(ApplicationStatus.values, weights=[50, 25, 10, 15], k=1)[0],
                    },
                )
                if created:
                    notify_application_received(application, profile.full_name)

        self.stdout.write(self.style.SUCCESS("Seeded demo data successfully."))
        self.stdout.write(f"Created/updated companies: {companies_n}")
        self.stdout.write(f"Created/updated job seekers: {seekers_n}")
        self.stdout.write("")
        self.stdout.write("Sample credentials:")
        for email, pwd in company_creds[:3]:
            self.stdout.write(f"  {email} / {pwd}")
        for email, pwd in seeker_creds[:3]:
            self.stdout.write(f"  {email} / {pwd}")
