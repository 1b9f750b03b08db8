"""Profile, company onboarding and company user management."""

from __future__ import annotations

import logging

from django.contrib.auth import get_user_model
from django.db import DatabaseError, IntegrityError, transaction
from django.db.models import Q
from django.utils import timezone

from jobboard import storage
from jobboard.results import ActionResult

from .identity import ADMIN_ROLES, AccessDenied, JOB_MANAGER_ROLES, require_company_role, resolve_profile
from .models import Company, CompanyMember, Profile
from .subscriptions import FREE_PLAN, start_subscription

logger = logging.getLogger(__name__)
User = get_user_model()

PROFILE_FIELDS = ("full_name", "phone", "location", "bio", "experience_level", "linkedin_url")
COMPANY_FIELDS = (
    "company_name",
    "description",
    "industry",
    "headquarters",
    "founding_year",
    "company_size",
    "company_website",
    "linkedin_url",
)


def _pick(data: dict, fields) -> dict:
    return {name: data[name] for name in fields if name in data}


def _has_file(f) -> bool:
    return f is not None and getattr(f, "size", 0) > 0


def _email_taken(email: str, exclude_pk=None) -> bool:
    qs = User.objects.filter(Q(email__iexact=email) | Q(username__iexact=email))
    if exclude_pk is not None:
        qs = qs.exclude(pk=exclude_pk)
    return qs.exists()


def _member_avatar_key(user_id, upload) -> str:
    return storage.object_key(user_id, f"avatar.{storage.file_extension(upload.name)}")


def avatar_bucket(user) -> str:
    """Job seeker avatars live in the profiles bucket, company members' in avatars."""
    if user.user_type == User.UserType.JOBSEEKER:
        return storage.PROFILES
    return storage.AVATARS


def _replace_object(bucket: str, old_path: str | None, new_path: str, upload) -> str:
    """Delete the previous object (if any) and store ``upload`` at ``new_path``."""
    if old_path and old_path != new_path:
        try:
            storage.remove(bucket, [old_path])
        except storage.StorageError:
            logger.warning("Could not delete old object: bucket=%s path=%s", bucket, old_path)
    return storage.upload(bucket, new_path, upload, upsert=True)


# -----------------------------
# Profiles
# -----------------------------
def create_profile(user, data: dict, avatar=None) -> ActionResult:
    """Create or update the job seeker profile of ``user``."""
    if not user.is_authenticated:
        return ActionResult.fail("User not authenticated", "not_authenticated")

    values = _pick(data, PROFILE_FIELDS)
    if _has_file(avatar):
        stamp = int(timezone.now().timestamp() * 1000)
        path = storage.object_key("avatars", f"{user.pk}-{stamp}.{storage.file_extension(avatar.name)}")
        try:
            values["avatar_url"] = storage.upload(storage.PROFILES, path, avatar)
        except storage.StorageError as exc:
            return ActionResult.fail(f"Error uploading avatar: {exc}", "upload_error")

    try:
        profile, created = Profile.objects.update_or_create(user=user, defaults=values)
    except DatabaseError:
        logger.exception("Error creating profile: user=%s", user.username)
        return ActionResult.fail("Error creating profile", "store_error")

    logger.info("Profile %s: profile_id=%s user=%s", "created" if created else "updated", profile.id, user.username)
    return ActionResult.ok("Profile saved.", profile_id=profile.id)


def create_company_profile(user, data: dict, avatar=None, logo=None) -> ActionResult:
    """Onboard a company: profile, company row, admin membership and a free plan.

    If the membership or the free plan cannot be written the company row is
    removed again, so no company is left without an admin or a plan.
    """
    if not user.is_authenticated:
        return ActionResult.fail("User not authenticated", "not_authenticated")
    if CompanyMember.objects.filter(profile__user=user, is_active=True).exists():
        return ActionResult.fail("You already belong to a company.", "already_member")

    profile_values = _pick(data, ("full_name", "phone", "location"))
    company_values = _pick(data, COMPANY_FIELDS)
    try:
        if _has_file(avatar):
            profile_values["avatar_url"] = storage.upload(storage.AVATARS, _member_avatar_key(user.pk, avatar), avatar)
        if _has_file(logo):
            key = storage.object_key(user.pk, f"company-logo.{storage.file_extension(logo.name)}")
            company_values["logo_url"] = storage.upload(storage.COMPANY_LOGOS, key, logo)
    except storage.StorageError as exc:
        return ActionResult.fail(f"Error uploading file: {exc}", "upload_error")

    try:
        profile, _ = Profile.objects.update_or_create(user=user, defaults=profile_values)
    except DatabaseError:
        logger.exception("Error creating profile: user=%s", user.username)
        return ActionResult.fail("Error creating profile", "store_error")

    try:
        company = Company.objects.create(**company_values)
    except DatabaseError:
        logger.exception("Error creating company: user=%s", user.username)
        return ActionResult.fail("Error creating company", "store_error")

    try:
        with transaction.atomic():
            CompanyMember.objects.create(
                company=company,
                profile=profile,
                role=CompanyMember.Role.ADMIN,
                is_active=True,
            )
    except DatabaseError:
        logger.exception("Failed to add company admin, removing company: company_id=%s user=%s", company.id, user.username)
        Company.objects.filter(id=company.id).delete()
        return ActionResult.fail(
            "Failed to set up company membership. Contact support if this persists.",
            "membership_error",
        )

    try:
        with transaction.atomic():
            start_subscription(company, FREE_PLAN)
    except DatabaseError:
        logger.exception("Failed to open free plan, removing company: company_id=%s user=%s", company.id, user.username)
        Company.objects.filter(id=company.id).delete()
        return ActionResult.fail(
            "Failed to set up the company plan. Contact support if this persists.",
            "subscription_error",
        )

    logger.info("Company created: company_id=%s admin=%s", company.id, user.username)
    return ActionResult.ok("Company profile created.", company_id=company.id, profile_id=profile.id)


def update_company_profile(user, data: dict, logo=None) -> ActionResult:
    try:
        session = require_company_role(user, ADMIN_ROLES)
    except AccessDenied as exc:
        return ActionResult.fail(exc.message, exc.reason)

    company = session.company
    values = _pick(data, COMPANY_FIELDS)
    if _has_file(logo):
        key = storage.object_key(user.pk, f"company-logo.{storage.file_extension(logo.name)}")
        try:
            values["logo_url"] = _replace_object(storage.COMPANY_LOGOS, company.logo_url, key, logo)
        except storage.StorageError as exc:
            return ActionResult.fail(f"Error uploading company logo: {exc}", "upload_error")

    try:
        Company.objects.filter(id=company.id).update(updated_at=timezone.now(), **values)
    except DatabaseError:
        logger.exception("Error updating company: company_id=%s", company.id)
        return ActionResult.fail("Error updating company profile", "store_error")

    logger.info("Company updated: company_id=%s user=%s", company.id, user.username)
    return ActionResult.ok("Company profile updated successfully.", company_id=company.id)


def update_own_profile(user, data: dict, avatar=None, new_password: str | None = None) -> ActionResult:
    try:
        profile = resolve_profile(user)
    except AccessDenied as exc:
        return ActionResult.fail(exc.message, exc.reason)

    values = _pick(data, PROFILE_FIELDS)
    if _has_file(avatar):
        try:
            bucket = avatar_bucket(user)
            key = _member_avatar_key(user.pk, avatar)
            if bucket == storage.PROFILES:
                key = storage.object_key("avatars", f"{user.pk}.{storage.file_extension(avatar.name)}")
            values["avatar_url"] = _replace_object(bucket, profile.avatar_url, key, avatar)
        except storage.StorageError as exc:
            return ActionResult.fail(f"Error uploading avatar: {exc}", "upload_error")

    for name, value in values.items():
        setattr(profile, name, value)
    try:
        with transaction.atomic():
            profile.save()
            if new_password:
                user.set_password(new_password)
                user.save(update_fields=["password"])
    except DatabaseError:
        logger.exception("Error updating profile: profile_id=%s", profile.id)
        return ActionResult.fail("Error updating profile", "store_error")

    logger.info("Profile updated: profile_id=%s password_changed=%s", profile.id, bool(new_password))
    return ActionResult.ok("Profile updated successfully.", password_changed=bool(new_password))


# -----------------------------
# Company users
# -----------------------------
def create_company_user(user, data: dict, avatar=None) -> ActionResult:
    try:
        session = require_company_role(user, ADMIN_ROLES)
    except AccessDenied as exc:
        return ActionResult.fail(exc.message, exc.reason)

    email = (data.get("email") or "").strip().lower()
    if _email_taken(email):
        return ActionResult.fail("Email already exist", "email_taken")

    full_name = (data.get("full_name") or "").strip()
    first_name, _, last_name = full_name.partition(" ")
    try:
        with transaction.atomic():
            new_user = User.objects.create_user(
                username=email,
                email=email,
                password=data.get("password"),
                first_name=first_name,
                last_name=last_name,
                user_type=User.UserType.COMPANY,
            )
            profile = Profile.objects.create(
                user=new_user,
                full_name=full_name,
                phone=data.get("phone") or None,
                location=data.get("location") or None,
            )
            CompanyMember.objects.create(
                company_id=session.company_id,
                profile=profile,
                role=CompanyMember.Role.RECRUITER,
                is_active=True,
            )
    except IntegrityError:
        return ActionResult.fail("Email already exist", "email_taken")
    except DatabaseError:
        logger.exception("Error creating company user: company_id=%s", session.company_id)
        return ActionResult.fail("Error creating new user.", "store_error")

    if _has_file(avatar):
        try:
            path = storage.upload(storage.AVATARS, _member_avatar_key(new_user.pk, avatar), avatar)
            Profile.objects.filter(id=profile.id).update(avatar_url=path)
        except storage.StorageError:
            logger.warning("Avatar upload failed for new company user: user_id=%s", new_user.pk)

    logger.info("Company user created: user_id=%s company_id=%s by=%s", new_user.pk, session.company_id, user.username)
    return ActionResult.ok("User created successfully.", user_id=new_user.pk, profile_id=profile.id)


def list_company_users(user, name_filter: str | None = None):
    """Recruiters of the caller's company. Raises ``AccessDenied``."""
    session = require_company_role(user, JOB_MANAGER_ROLES)
    qs = (
        CompanyMember.objects.filter(company_id=session.company_id, role=CompanyMember.Role.RECRUITER)
        .select_related("profile", "profile__user")
        .order_by("profile__full_name")
    )
    if name_filter:
        qs = qs.filter(profile__full_name__icontains=name_filter.strip())
    return qs


def _same_company_member(session, target_user_id) -> CompanyMember | None:
    return (
        CompanyMember.objects.select_related("profile", "profile__user")
        .filter(company_id=session.company_id, profile__user_id=target_user_id)
        .order_by("-is_active", "-joined_at")
        .first()
    )


def get_company_user(user, target_user_id) -> CompanyMember | None:
    session = require_company_role(user, JOB_MANAGER_ROLES)
    return _same_company_member(session, target_user_id)


def edit_company_user(user, target_user_id, data: dict, avatar=None) -> ActionResult:
    try:
        session = require_company_role(user, ADMIN_ROLES)
    except AccessDenied as exc:
        return ActionResult.fail(exc.message, exc.reason)

    member = _same_company_member(session, target_user_id)
    if member is None:
        return ActionResult.fail("User not found in your company.", "not_found")

    profile = member.profile
    target = profile.user
    email = (data.get("email") or "").strip().lower()
    if email and email != target.email.lower():
        if _email_taken(email, exclude_pk=target.pk):
            return ActionResult.fail("Email already exist", "email_taken")
        # Accounts sign in by email, which doubles as the username.
        target.email = email
        target.username = email

    for name, value in _pick(data, ("full_name", "phone", "location")).items():
        setattr(profile, name, value)
    if _has_file(avatar):
        try:
            profile.avatar_url = _replace_object(
                storage.AVATARS, profile.avatar_url, _member_avatar_key(target_user_id, avatar), avatar
            )
        except storage.StorageError as exc:
            return ActionResult.fail(f"Error uploading avatar: {exc}", "upload_error")

    try:
        with transaction.atomic():
            profile.save()
            if data.get("password"):
                target.set_password(data["password"])
            target.save()
    except IntegrityError:
        return ActionResult.fail("Email already exist", "email_taken")
    except DatabaseError:
        logger.exception("Error updating company user: user_id=%s", target_user_id)
        return ActionResult.fail("Error updating user.", "store_error")

    logger.info("Company user updated: user_id=%s by=%s", target_user_id, user.username)
    return ActionResult.ok("User updated successfully.", user_id=target.pk)


def deactivate_company_user(user, target_user_id) -> ActionResult:
    try:
        session = require_company_role(user, ADMIN_ROLES)
    except AccessDenied as exc:
        return ActionResult.fail(exc.message, exc.reason)

    if target_user_id == user.pk:
        return ActionResult.fail("You cannot deactivate your own account.", "invalid")

    member = _same_company_member(session, target_user_id)
    if member is None or not member.is_active:
        return ActionResult.fail("User not found in your company.", "not_found")

    with transaction.atomic():
        CompanyMember.objects.filter(id=member.id).update(is_active=False)
        User.objects.filter(pk=target_user_id).update(is_active=False)

    logger.info("Company user deactivated: user_id=%s company_id=%s by=%s", target_user_id, session.company_id, user.username)
    return ActionResult.ok("User deactivated successfully.", user_id=target_user_id)
