from django.urls import path
from . import views

urlpatterns = [
    # public
    path("", views.home_public, name="job_list"),
    path("<int:job_id>/", views.job_detail, name="job_detail"),
    path("<int:job_id>/apply/", views.apply_job, name="apply_job"),
    path("<int:job_id>/apply/success/", views.apply_success, name="apply_success"),
    path("companies/", views.company_list, name="company_list"),
    path("companies/<int:company_id>/", views.company_detail, name="company_detail"),
    path("my-applications/", views.my_applications, name="my_applications"),
    # company
    path("dashboard/", views.company_dashboard, name="company_dashboard"),
    path("job-list/", views.company_jobs, name="company_jobs"),
    path("job-list/new/", views.create_job, name="create_job"),
    path("job-list/<int:job_id>/", views.company_job_detail, name="company_job_detail"),
    path("job-list/<int:job_id>/edit/", views.edit_job, name="edit_job"),
    path("job-list/<int:job_id>/delete/", views.delete_job, name="delete_job"),
    path("job-list/<int:job_id>/status/", views.change_job_status, name="change_job_status"),
    path("applications/", views.company_applications, name="company_applications"),
    path("applications/<int:application_id>/", views.company_application_detail, name="company_application_detail"),
    path(
        "applications/<int:application_id>/status/",
        views.change_application_status,
        name="change_application_status",
    ),
    path("notifications/", views.notifications_list, name="notifications_list"),
    path("notifications/mark-all-read/", views.notifications_mark_all_read, name="notifications_mark_all_read"),
    path("notifications/<int:notification_id>/read/", views.notification_mark_read, name="notification_mark_read"),
]
