import logging

from django.conf import settings
from django.contrib import messages
from django.contrib.auth import authenticate, get_user_model, login, logout, update_session_auth_hash
from django.contrib.auth.decorators import login_required
from django.db import IntegrityError, transaction
from django.shortcuts import redirect, render
from django.views.decorators.http import require_http_methods, require_POST

from jobboard import storage
from jobs.quota import can_create_job

from . import services, subscriptions
from .decorators import company_admin_required, company_member, company_required, jobseeker_required
from .forms import (
    CompanyApplicationForm,
    CompanyProfileForm,
    CompanyUserForm,
    LoginForm,
    ProfileForm,
    SignUpForm,
    UserProfileForm,
)
from .identity import AccessDenied
from .models import Profile, Subscription

logger = logging.getLogger(__name__)
User = get_user_model()


def _flash(request, result):
    if result.success:
        messages.success(request, result.message)
    else:
        messages.error(request, result.message)


def _landing_for(user):
    if user.user_type == User.UserType.COMPANY:
        return "company_dashboard"
    return "home"


# -----------------------------
# Sign up / Login / Logout
# -----------------------------
@require_http_methods(["GET", "POST"])
def signup(request):
    if request.method == "POST":
        form = SignUpForm(request.POST)
        if form.is_valid():
            data = form.cleaned_data
            try:
                with transaction.atomic():
                    user = User.objects.create_user(
                        username=data["email"],
                        email=data["email"],
                        password=data["password"],
                        first_name=data["first_name"],
                        last_name=data["last_name"],
                        user_type=data["user_type"],
                    )
            except IntegrityError:
                form.add_error("email", "Email already exist")
                return render(request, "accounts/signup.html", {"form": form})
            logger.info("User signed up: username=%s user_type=%s", user.username, user.user_type)
            messages.success(request, "Account created. Please log in.")
            return redirect("login")
        logger.warning("Sign up failed: errors=%s", form.errors.as_json())
    else:
        form = SignUpForm()
    return render(request, "accounts/signup.html", {"form": form})


@require_http_methods(["GET", "POST"])
def user_login(request):
    if request.method == "POST":
        form = LoginForm(request.POST)
        if form.is_valid():
            email = form.cleaned_data["email"].strip().lower()
            user_type = form.cleaned_data["user_type"]
            account = User.objects.filter(email__iexact=email).first()
            user = None
            if account is not None:
                user = authenticate(request, username=account.username, password=form.cleaned_data["password"])

            if user is None:
                messages.error(request, "Invalid email or password.")
                logger.info("Login failed: email=%s", email)
            elif user.user_type != user_type:
                messages.error(request, "This account is not registered with the selected user type.")
                logger.info("Login rejected (user type mismatch): username=%s", user.username)
            else:
                login(request, user)
                request.session.set_expiry(getattr(settings, "SESSION_COOKIE_AGE", 3600))
                logger.info("Login success: username=%s user_type=%s", user.username, user.user_type)
                if not Profile.objects.filter(user=user).exists():
                    messages.info(request, "Please complete your profile first.")
                    if user.user_type == User.UserType.COMPANY:
                        return redirect("company_application")
                    return redirect("profile_application")
                messages.success(request, "Logged in successfully!")
                return redirect(_landing_for(user))
    else:
        form = LoginForm()

    return render(request, "accounts/login.html", {"form": form})


@require_http_methods(["POST", "GET"])
def user_logout(request):
    username = request.user.username if request.user.is_authenticated else None
    logout(request)
    if username:
        logger.info("Logout: username=%s", username)
    messages.info(request, "Logged out successfully.")
    return redirect("login")


# -----------------------------
# Onboarding
# -----------------------------
@jobseeker_required
@require_http_methods(["GET", "POST"])
def profile_application(request):
    instance = Profile.objects.filter(user=request.user).first()
    if request.method == "POST":
        form = ProfileForm(request.POST, request.FILES, instance=instance)
        if form.is_valid():
            result = services.create_profile(request.user, form.cleaned_data, form.cleaned_data.get("avatar"))
            _flash(request, result)
            if result.success:
                return redirect("home")
    else:
        initial = {} if instance else {"full_name": request.user.display_name}
        form = ProfileForm(instance=instance, initial=initial)
    return render(request, "accounts/profile_application.html", {"form": form})


@company_required
@require_http_methods(["GET", "POST"])
def company_application(request):
    if request.method == "POST":
        form = CompanyApplicationForm(request.POST, request.FILES)
        if form.is_valid():
            data = form.cleaned_data
            result = services.create_company_profile(request.user, data, data.get("avatar"), data.get("logo"))
            _flash(request, result)
            if result.success:
                return redirect("company_dashboard")
            if result.reason == "already_member":
                return redirect("company_profile")
    else:
        form = CompanyApplicationForm(initial={"full_name": request.user.display_name})
    return render(request, "accounts/company_application.html", {"form": form})


# -----------------------------
# Company profile / own profile
# -----------------------------
@company_member
@require_http_methods(["GET", "POST"])
def company_profile(request):
    session = request.company_session
    if request.method == "POST":
        form = CompanyProfileForm(request.POST, request.FILES, instance=session.company)
        if form.is_valid():
            result = services.update_company_profile(request.user, form.cleaned_data, form.cleaned_data.get("logo"))
            _flash(request, result)
            if result.success:
                return redirect("company_profile")
    else:
        form = CompanyProfileForm(instance=session.company)
    return render(
        request,
        "accounts/company_profile.html",
        {
            "form": form,
            "company": session.company,
            "logo_url": storage.public_url(storage.COMPANY_LOGOS, session.company.logo_url),
            "can_edit": session.is_admin,
        },
    )


@login_required
@require_http_methods(["GET", "POST"])
def user_profile(request):
    profile = Profile.objects.filter(user=request.user).first()
    if profile is None:
        messages.error(request, "Profile not found. Please create your profile first.")
        if request.user.user_type == User.UserType.COMPANY:
            return redirect("company_application")
        return redirect("profile_application")

    if request.method == "POST":
        form = UserProfileForm(request.POST, request.FILES, instance=profile)
        if form.is_valid():
            new_password = form.cleaned_data.get("new_password") or None
            result = services.update_own_profile(
                request.user, form.cleaned_data, form.cleaned_data.get("avatar"), new_password
            )
            if result.success and result.get("password_changed"):
                update_session_auth_hash(request, request.user)
            _flash(request, result)
            if result.success:
                return redirect("user_profile")
    else:
        form = UserProfileForm(instance=profile)
    return render(
        request,
        "accounts/user_profile.html",
        {"form": form, "profile": profile, "avatar": storage.public_url(services.avatar_bucket(request.user), profile.avatar_url)},
    )


# -----------------------------
# Company users
# -----------------------------
@company_member
def company_users(request):
    name = (request.GET.get("name") or "").strip()
    try:
        members = services.list_company_users(request.user, name or None)
    except AccessDenied as exc:
        messages.error(request, exc.message)
        return redirect("company_dashboard")
    return render(
        request,
        "accounts/company_users.html",
        {"members": members, "name": name, "can_manage": request.company_session.is_admin},
    )


@company_admin_required
@require_http_methods(["GET", "POST"])
def company_user_create(request):
    if request.method == "POST":
        form = CompanyUserForm(request.POST, request.FILES)
        if form.is_valid():
            result = services.create_company_user(request.user, form.cleaned_data, form.cleaned_data.get("avatar"))
            if result.success:
                messages.success(request, result.message)
                return redirect("company_users")
            if result.reason == "email_taken":
                form.add_error("email", result.message)
            else:
                messages.error(request, result.message)
    else:
        form = CompanyUserForm()
    return render(request, "accounts/company_user_form.html", {"form": form, "member": None})


@company_member
@require_http_methods(["GET", "POST"])
def company_user_detail(request, user_id):
    member = services.get_company_user(request.user, user_id)
    if member is None:
        messages.error(request, "User not found in your company.")
        return redirect("company_users")

    can_edit = request.company_session.is_admin
    if request.method == "POST":
        if not can_edit:
            messages.error(request, "You do not have permission to edit users. Contact your company admin.")
            return redirect("company_user_detail", user_id=user_id)
        form = CompanyUserForm(request.POST, request.FILES, editing=True)
        if form.is_valid():
            result = services.edit_company_user(request.user, user_id, form.cleaned_data, form.cleaned_data.get("avatar"))
            if result.success:
                messages.success(request, result.message)
                return redirect("company_user_detail", user_id=user_id)
            if result.reason == "email_taken":
                form.add_error("email", result.message)
            else:
                messages.error(request, result.message)
    else:
        form = CompanyUserForm(
            editing=True,
            initial={
                "full_name": member.profile.full_name,
                "email": member.profile.user.email,
                "phone": member.profile.phone,
                "location": member.profile.location,
            },
        )
    return render(
        request,
        "accounts/company_user_form.html",
        {
            "form": form,
            "member": member,
            "can_edit": can_edit,
            "avatar": storage.public_url(storage.AVATARS, member.profile.avatar_url),
        },
    )


@company_admin_required
@require_POST
def company_user_deactivate(request, user_id):
    _flash(request, services.deactivate_company_user(request.user, user_id))
    return redirect("company_users")


# -----------------------------
# Subscription
# -----------------------------
@company_member
def subscription(request):
    session = request.company_session
    return render(
        request,
        "accounts/subscription.html",
        {
            "plans": subscriptions.PLANS,
            "current": Subscription.objects.current_for(session.company_id),
            "quota": can_create_job(request.user),
            "can_purchase": session.is_admin,
        },
    )


@company_admin_required
@require_POST
def subscription_purchase(request):
    result = subscriptions.request_purchase(request.user, request.POST.get("plan_type", ""))
    if result.success:
        messages.info(request, result.message)
    else:
        messages.error(request, result.message)
    return redirect("subscription")
