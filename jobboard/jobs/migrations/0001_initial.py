from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("accounts", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="JobCategory",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=100, unique=True)),
                ("description", models.TextField(blank=True, null=True)),
                ("is_active", models.BooleanField(default=True)),
            ],
            options={
                "verbose_name_plural": "job categories",
                "ordering": ["name"],
            },
        ),
        migrations.CreateModel(
            name="Job",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("title", models.CharField(max_length=200)),
                ("description", models.TextField(blank=True, null=True)),
                ("location", models.CharField(max_length=200)),
                ("is_remote", models.BooleanField(default=False)),
                ("job_type", models.CharField(choices=[("full_time", "Full Time"), ("part_time", "Part Time"), ("remote", "Remote"), ("hybrid", "Hybrid")], default="full_time", max_length=20)),
                ("experience_level", models.CharField(blank=True, max_length=50)),
                ("salary_min", models.PositiveIntegerField(blank=True, null=True)),
                ("salary_max", models.PositiveIntegerField(blank=True, null=True)),
                ("salary_currency", models.CharField(choices=[("USD", "USD ($)"), ("KHR", "KHR (៛)")], default="USD", max_length=3)),
                ("requirements", models.JSONField(blank=True, default=list)),
                ("benefits", models.JSONField(blank=True, default=list)),
                ("tags", models.JSONField(blank=True, default=list)),
                ("status", models.CharField(choices=[("active", "Active"), ("draft", "Draft"), ("expired", "Expired"), ("closed", "Closed")], default="active", max_length=20)),
                ("application_deadline", models.DateField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("category", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="jobs", to="jobs.jobcategory")),
                ("company", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="jobs", to="accounts.company")),
                ("posted_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="posted_jobs", to="accounts.profile")),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [models.Index(fields=["company", "status"], name="job_company_status_idx")],
            },
        ),
        migrations.CreateModel(
            name="Application",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("cover_letter", models.TextField()),
                ("resume_url", models.CharField(blank=True, max_length=255, null=True)),
                ("status", models.CharField(choices=[("pending", "Pending"), ("reviewing", "Reviewing"), ("accepted", "Accepted"), ("rejected", "Rejected")], default="pending", max_length=20)),
                ("applied_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("job", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="applications", to="jobs.job")),
                ("job_seeker", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="applications", to="accounts.profile")),
            ],
            options={
                "ordering": ["-applied_at"],
                "constraints": [
                    models.UniqueConstraint(fields=("job", "job_seeker"), name="unique_application_per_job_seeker"),
                ],
            },
        ),
        migrations.CreateModel(
            name="Notification",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("type", models.CharField(choices=[("application_received", "Application received"), ("application_status", "Application status changed")], max_length=30)),
                ("title", models.CharField(max_length=200)),
                ("message", models.TextField(blank=True, null=True)),
                ("is_read", models.BooleanField(default=False)),
                ("read_at", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("company", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="notifications", to="accounts.company")),
                ("related_application", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="notifications", to="jobs.application")),
                ("related_job", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="notifications", to="jobs.job")),
            ],
            options={
                "ordering": ["-created_at", "-id"],
            },
        ),
    ]
