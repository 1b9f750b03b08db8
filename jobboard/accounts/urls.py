from django.urls import path
from . import views

urlpatterns = [
    path("signup/", views.signup, name="signup"),
    path("login/", views.user_login, name="login"),
    path("logout/", views.user_logout, name="logout"),
    path("profile-application/", views.profile_application, name="profile_application"),
    path("company-application/", views.company_application, name="company_application"),
    path("company-profile/", views.company_profile, name="company_profile"),
    path("user-profile/", views.user_profile, name="user_profile"),
    path("company-users/", views.company_users, name="company_users"),
    path("company-users/new/", views.company_user_create, name="company_user_create"),
    path("company-users/<int:user_id>/", views.company_user_detail, name="company_user_detail"),
    path("company-users/<int:user_id>/deactivate/", views.company_user_deactivate, name="company_user_deactivate"),
    path("subscription/", views.subscription, name="subscription"),
    path("subscription/purchase/", views.subscription_purchase, name="subscription_purchase"),
]
