from django.contrib import admin

from .models import Application, Job, JobCategory, Notification


@admin.register(Job)
class JobAdmin(admin.ModelAdmin):
    list_display = ("title", "company", "job_type", "status", "created_at")
    list_filter = ("status", "job_type", "is_remote")
    search_fields = ("title", "company__company_name")


@admin.register(Application)
class ApplicationAdmin(admin.ModelAdmin):
    list_display = ("job", "job_seeker", "status", "applied_at")
    list_filter = ("status",)


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    list_display = ("title", "company", "type", "is_read", "created_at")
    list_filter = ("type", "is_read")


admin.site.register(JobCategory)
