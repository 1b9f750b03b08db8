"""Identity and company membership resolution.

Every company-scoped operation goes through ``require_company_role``: it maps
the requesting user to a profile, then to the single active membership of
that profile, and returns a ``CompanySession`` that the caller uses to scope
its queries. Nothing is cached; each request resolves again.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable

from .models import Company, CompanyMember, Profile

logger = logging.getLogger(__name__)

JOB_MANAGER_ROLES = (CompanyMember.Role.ADMIN, CompanyMember.Role.RECRUITER)
ADMIN_ROLES = (CompanyMember.Role.ADMIN,)


class AccessDenied(Exception):
    reason = "access_denied"
    message = "Access denied."

    def __init__(self, message: str | None = None):
        super().__init__(message or self.message)
        if message:
            self.message = message


class NotAuthenticated(AccessDenied):
    reason = "not_authenticated"
    message = "User not authenticated"


class ProfileNotFound(AccessDenied):
    reason = "no_profile"
    message = "Profile not found. Please create your profile first."


class NoMembership(AccessDenied):
    reason = "no_company"
    message = "You are not a member of any company. Please create a company profile first."


class InsufficientRole(AccessDenied):
    reason = "insufficient_role"
    message = "You do not have permission to perform this action. Contact your company admin."


@dataclass(frozen=True)
class CompanySession:
    profile: Profile
    member: CompanyMember
    company: Company

    @property
    def profile_id(self) -> int:
        return self.profile.id

    @property
    def company_id(self) -> int:
        return self.member.company_id

    @property
    def role(self) -> str:
        return self.member.role

    @property
    def is_admin(self) -> bool:
        return self.role == CompanyMember.Role.ADMIN

    @property
    def can_manage_jobs(self) -> bool:
        return self.role in JOB_MANAGER_ROLES


def resolve_profile(user) -> Profile:
    if user is None or not user.is_authenticated:
        raise NotAuthenticated()
    profile = Profile.objects.filter(user_id=user.pk).first()
    if profile is None:
        raise ProfileNotFound()
    return profile


def resolve_membership(user) -> CompanySession:
    profile = resolve_profile(user)
    member = (
        CompanyMember.objects.select_related("company")
        .filter(profile=profile, is_active=True)
        .first()
    )
    if member is None:
        raise NoMembership()
    return CompanySession(profile=profile, member=member, company=member.company)


def require_company_role(user, roles: Iterable[str] = JOB_MANAGER_ROLES) -> CompanySession:
    session = resolve_membership(user)
    if session.role not in tuple(roles):
        logger.info(
            "Role check failed: user=%s company_id=%s role=%s",
            getattr(user, "username", None),
            session.company_id,
            session.role,
        )
        raise InsufficientRole()
    return session
