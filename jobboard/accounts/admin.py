from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as DjangoUserAdmin

from .models import Company, CompanyMember, Profile, Subscription, User


@admin.register(User)
class UserAdmin(DjangoUserAdmin):
    fieldsets = DjangoUserAdmin.fieldsets + (
        ("JobBoard", {"fields": ("user_type",)}),
    )
    list_display = ("username", "email", "user_type", "is_active", "is_staff")


class CompanyMemberInline(admin.TabularInline):
    model = CompanyMember
    extra = 0


@admin.register(Company)
class CompanyAdmin(admin.ModelAdmin):
    list_display = ("company_name", "industry", "total_job", "created_at")
    search_fields = ("company_name",)
    inlines = [CompanyMemberInline]


@admin.register(Subscription)
class SubscriptionAdmin(admin.ModelAdmin):
    list_display = ("company", "plan_type", "job_posts_used", "job_posts_limit", "end_date", "is_active")
    list_filter = ("plan_type", "is_active")


admin.site.register(Profile)
