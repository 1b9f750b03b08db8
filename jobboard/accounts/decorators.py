from functools import wraps

from django.contrib import messages
from django.contrib.auth.decorators import login_required
from django.shortcuts import redirect

from .identity import AccessDenied, JOB_MANAGER_ROLES, NoMembership, ProfileNotFound, require_company_role
from .models import CompanyMember, User


def user_type_required(user_type: str):
    """Ensure logged-in user signed up with the given user type."""
    def decorator(view_func):
        @login_required
        @wraps(view_func)
        def _wrapped(request, *args, **kwargs):
            if getattr(request.user, "user_type", "") != user_type:
                messages.error(request, "Access denied.")
                return redirect("home")
            return view_func(request, *args, **kwargs)
        return _wrapped
    return decorator


company_required = user_type_required(User.UserType.COMPANY)
jobseeker_required = user_type_required(User.UserType.JOBSEEKER)


def redirect_for_denial(request, exc: AccessDenied):
    """Flash the denial and send the user where they can fix it."""
    messages.error(request, exc.message)
    if isinstance(exc, ProfileNotFound):
        if getattr(request.user, "user_type", "") == User.UserType.COMPANY:
            return redirect("company_application")
        return redirect("profile_application")
    if isinstance(exc, NoMembership):
        return redirect("company_application")
    return redirect("home")


def company_member_required(roles=tuple(CompanyMember.Role.values)):
    """Resolve the caller's company membership and attach it as request.company_session."""
    def decorator(view_func):
        @login_required
        @wraps(view_func)
        def _wrapped(request, *args, **kwargs):
            try:
                request.company_session = require_company_role(request.user, roles)
            except AccessDenied as exc:
                return redirect_for_denial(request, exc)
            return view_func(request, *args, **kwargs)
        return _wrapped
    return decorator


company_member = company_member_required()
job_manager_required = company_member_required(JOB_MANAGER_ROLES)
company_admin_required = company_member_required((CompanyMember.Role.ADMIN,))
