from unittest import mock

from django.contrib.auth.models import AnonymousUser
from django.core.files.uploadedfile import SimpleUploadedFile
from django.db import DatabaseError, IntegrityError, transaction
from django.test import TestCase
from django.urls import reverse

from jobboard import storage

from . import services, subscriptions
from .identity import (
    ADMIN_ROLES,
    InsufficientRole,
    NoMembership,
    NotAuthenticated,
    ProfileNotFound,
    require_company_role,
    resolve_membership,
    resolve_profile,
)
from .models import Company, CompanyMember, Profile, Subscription, User


def make_user(email, user_type="company", password="pass", full_name=None):
    user = User.objects.create_user(username=email, email=email, password=password, user_type=user_type)
    if full_name:
        Profile.objects.create(user=user, full_name=full_name)
    return user


def add_member(user, company, role=CompanyMember.Role.ADMIN):
    return CompanyMember.objects.create(company=company, profile=user.profile, role=role)


def image(name="logo.png"):
    return SimpleUploadedFile(name, b"\x89PNG image", content_type="image/png")


class IdentityTests(TestCase):
    def setUp(self):
        self.company = Company.objects.create(company_name="ACME")
        self.admin = make_user("admin@acme.com", full_name="Alice Admin")
        add_member(self.admin, self.company)

    def test_anonymous(self):
        with self.assertRaises(NotAuthenticated):
            resolve_profile(AnonymousUser())

    def test_missing_profile(self):
        user = make_user("np@acme.com")
        with self.assertRaises(ProfileNotFound) as ctx:
            resolve_membership(user)
        self.assertEqual(ctx.exception.reason, "no_profile")

    def test_missing_membership(self):
        user = make_user("seeker@example.com", user_type="jobseeker", full_name="Sam Seeker")
        with self.assertRaises(NoMembership):
            resolve_membership(user)

    def test_session_exposes_company_and_role(self):
        session = resolve_membership(self.admin)
        self.assertEqual(session.company_id, self.company.id)
        self.assertEqual(session.profile_id, self.admin.profile.id)
        self.assertTrue(session.is_admin)
        self.assertTrue(session.can_manage_jobs)

    def test_inactive_membership_is_ignored(self):
        CompanyMember.objects.filter(profile=self.admin.profile).update(is_active=False)
        with self.assertRaises(NoMembership):
            resolve_membership(self.admin)

    def test_role_guard(self):
        viewer = make_user("viewer@acme.com", full_name="Vic Viewer")
        add_member(viewer, self.company, CompanyMember.Role.VIEWER)
        with self.assertRaises(InsufficientRole):
            require_company_role(viewer)
        self.assertEqual(require_company_role(self.admin, ADMIN_ROLES).role, "admin")

    def test_one_active_membership_per_profile(self):
        other = Company.objects.create(company_name="Globex")
        with self.assertRaises(IntegrityError):
            with transaction.atomic():
                add_member(self.admin, other)

        CompanyMember.objects.filter(profile=self.admin.profile).update(is_active=False)
        add_member(self.admin, other)
        self.assertEqual(resolve_membership(self.admin).company_id, other.id)


class AuthViewTests(TestCase):
    def test_signup(self):
        resp = self.client.post(
            reverse("signup"),
            {
                "first_name": "Sam",
                "last_name": "Seeker",
                "email": "Sam@Example.com",
                "password": "secret123",
                "user_type": "jobseeker",
            },
        )
        self.assertRedirects(resp, reverse("login"))
        user = User.objects.get(email="sam@example.com")
        self.assertEqual(user.user_type, "jobseeker")
        self.assertEqual(user.display_name, "Sam Seeker")

    def test_signup_rejects_taken_email(self):
        make_user("taken@example.com")
        resp = self.client.post(
            reverse("signup"),
            {
                "first_name": "A",
                "last_name": "B",
                "email": "taken@example.com",
                "password": "secret123",
                "user_type": "company",
            },
        )
        self.assertEqual(resp.status_code, 200)
        self.assertContains(resp, "Email already exist")

    def test_login_rejects_user_type_mismatch(self):
        make_user("seeker@example.com", user_type="jobseeker", full_name="Sam Seeker")
        resp = self.client.post(
            reverse("login"), {"email": "seeker@example.com", "password": "pass", "user_type": "company"}
        )
        self.assertEqual(resp.status_code, 200)
        self.assertNotIn("_auth_user_id", self.client.session)

    def test_login_without_profile_goes_to_profile_form(self):
        make_user("seeker@example.com", user_type="jobseeker")
        resp = self.client.post(
            reverse("login"), {"email": "seeker@example.com", "password": "pass", "user_type": "jobseeker"}
        )
        self.assertRedirects(resp, reverse("profile_application"))
        self.assertIn("_auth_user_id", self.client.session)

    def test_company_login_goes_to_dashboard(self):
        company = Company.objects.create(company_name="ACME")
        add_member(make_user("admin@acme.com", full_name="Alice Admin"), company)
        resp = self.client.post(
            reverse("login"), {"email": "admin@acme.com", "password": "pass", "user_type": "company"}
        )
        self.assertRedirects(resp, reverse("company_dashboard"))

    def test_profile_application(self):
        make_user("seeker@example.com", user_type="jobseeker")
        self.client.login(username="seeker@example.com", password="pass")
        resp = self.client.post(
            reverse("profile_application"),
            {"full_name": "Sam Seeker", "location": "Phnom Penh", "experience_level": "Entry Level"},
        )
        self.assertRedirects(resp, reverse("home"))
        profile = Profile.objects.get(user__email="seeker@example.com")
        self.assertEqual(profile.experience_level, "Entry Level")


class CompanyOnboardingTests(TestCase):
    def setUp(self):
        self.user = make_user("founder@acme.com")

    def test_company_application_view(self):
        self.client.login(username="founder@acme.com", password="pass")
        resp = self.client.post(
            reverse("company_application"),
            {"full_name": "Fay Founder", "company_name": "ACME", "industry": "Technology", "logo": image()},
        )
        self.assertRedirects(resp, reverse("company_dashboard"))

        company = Company.objects.get()
        member = CompanyMember.objects.get()
        self.assertEqual(member.company, company)
        self.assertEqual(member.role, CompanyMember.Role.ADMIN)
        self.assertEqual(member.profile.full_name, "Fay Founder")
        self.assertEqual(company.logo_url, f"{self.user.pk}/company-logo.png")
        self.assertTrue(storage.exists(storage.COMPANY_LOGOS, company.logo_url))

        plan = Subscription.objects.current_for(company.id)
        self.assertEqual(plan.plan_type, Subscription.PlanType.FREE)
        self.assertEqual(plan.job_posts_limit, subscriptions.FREE_PLAN.job_posts_limit)

    def test_second_company_is_refused(self):
        services.create_company_profile(self.user, {"full_name": "Fay", "company_name": "ACME"})
        result = services.create_company_profile(self.user, {"full_name": "Fay", "company_name": "Other"})
        self.assertEqual(result.reason, "already_member")
        self.assertEqual(Company.objects.count(), 1)

    def test_company_removed_when_membership_fails(self):
        with mock.patch.object(CompanyMember.objects, "create", side_effect=DatabaseError("boom")):
            result = services.create_company_profile(self.user, {"full_name": "Fay", "company_name": "ACME"})
        self.assertFalse(result.success)
        self.assertEqual(result.reason, "membership_error")
        self.assertFalse(Company.objects.exists())
        self.assertTrue(Profile.objects.filter(user=self.user).exists())

    def test_company_removed_when_free_plan_fails(self):
        with mock.patch("accounts.services.start_subscription", side_effect=DatabaseError("boom")):
            result = services.create_company_profile(self.user, {"full_name": "Fay", "company_name": "ACME"})
        self.assertFalse(result.success)
        self.assertEqual(result.reason, "subscription_error")
        self.assertFalse(Company.objects.exists())
        self.assertFalse(CompanyMember.objects.exists())

        retry = services.create_company_profile(self.user, {"full_name": "Fay", "company_name": "ACME"})
        self.assertTrue(retry.success)
        self.assertIsNotNone(Subscription.objects.current_for(retry.get("company_id")))


class CompanyProfileTests(TestCase):
    def setUp(self):
        self.company = Company.objects.create(company_name="ACME")
        self.admin = make_user("admin@acme.com", full_name="Alice Admin")
        add_member(self.admin, self.company)
        self.recruiter = make_user("rec@acme.com", full_name="Rob Recruiter")
        add_member(self.recruiter, self.company, CompanyMember.Role.RECRUITER)

    def test_admin_updates_company_and_replaces_logo(self):
        first = services.update_company_profile(self.admin, {"company_name": "ACME Corp"}, image("logo.png"))
        self.assertTrue(first.success)
        self.company.refresh_from_db()
        old_path = self.company.logo_url
        self.assertEqual(self.company.company_name, "ACME Corp")

        services.update_company_profile(self.admin, {"company_name": "ACME Corp"}, image("logo.jpg"))
        self.company.refresh_from_db()
        self.assertEqual(self.company.logo_url, f"{self.admin.pk}/company-logo.jpg")
        self.assertFalse(storage.exists(storage.COMPANY_LOGOS, old_path))
        self.assertTrue(storage.exists(storage.COMPANY_LOGOS, self.company.logo_url))

    def test_recruiter_cannot_update_company(self):
        result = services.update_company_profile(self.recruiter, {"company_name": "Renamed"})
        self.assertEqual(result.reason, "insufficient_role")
        self.company.refresh_from_db()
        self.assertEqual(self.company.company_name, "ACME")

    def test_update_own_profile_with_password_change(self):
        result = services.update_own_profile(self.recruiter, {"full_name": "Robin Recruiter"}, None, "N3w-Passw0rd!")
        self.assertTrue(result.success)
        self.assertTrue(result.get("password_changed"))
        self.recruiter.refresh_from_db()
        self.assertTrue(self.recruiter.check_password("N3w-Passw0rd!"))
        self.assertEqual(Profile.objects.get(user=self.recruiter).full_name, "Robin Recruiter")


class CompanyUserTests(TestCase):
    def setUp(self):
        self.company = Company.objects.create(company_name="ACME")
        self.admin = make_user("admin@acme.com", full_name="Alice Admin")
        add_member(self.admin, self.company)

    def new_user(self, **overrides):
        data = {"full_name": "Carol Smith", "email": "carol@acme.com", "password": "secret123", "phone": ""}
        data.update(overrides)
        return services.create_company_user(self.admin, data)

    def test_admin_creates_recruiter(self):
        result = self.new_user()
        self.assertTrue(result.success)
        user = User.objects.get(email="carol@acme.com")
        self.assertEqual(user.user_type, "company")
        self.assertTrue(user.check_password("secret123"))
        member = CompanyMember.objects.get(profile__user=user)
        self.assertEqual(member.company, self.company)
        self.assertEqual(member.role, CompanyMember.Role.RECRUITER)

    def test_duplicate_email(self):
        self.new_user()
        result = self.new_user(full_name="Other Carol")
        self.assertFalse(result.success)
        self.assertEqual(result.message, "Email already exist")
        self.assertEqual(User.objects.filter(email="carol@acme.com").count(), 1)

    def test_recruiter_cannot_create_users(self):
        self.new_user()
        carol = User.objects.get(email="carol@acme.com")
        result = services.create_company_user(carol, {"full_name": "Dan", "email": "dan@acme.com", "password": "x"})
        self.assertEqual(result.reason, "insufficient_role")
        self.assertFalse(User.objects.filter(email="dan@acme.com").exists())

    def test_list_with_name_filter(self):
        self.new_user()
        self.new_user(full_name="Bob Builder", email="bob@acme.com")
        names = [m.profile.full_name for m in services.list_company_users(self.admin)]
        self.assertEqual(names, ["Bob Builder", "Carol Smith"])
        filtered = services.list_company_users(self.admin, "carol")
        self.assertEqual([m.profile.user.email for m in filtered], ["carol@acme.com"])

    def test_edit_is_scoped_to_company(self):
        other = Company.objects.create(company_name="Globex")
        outsider = make_user("out@globex.com", full_name="Out Sider")
        add_member(outsider, other, CompanyMember.Role.RECRUITER)
        result = services.edit_company_user(self.admin, outsider.pk, {"full_name": "Renamed"})
        self.assertEqual(result.reason, "not_found")

        self.new_user()
        carol = User.objects.get(email="carol@acme.com")
        result = services.edit_company_user(self.admin, carol.pk, {"full_name": "Carol Jones", "email": "cj@acme.com"})
        self.assertTrue(result.success)
        carol.refresh_from_db()
        self.assertEqual(carol.email, "cj@acme.com")
        self.assertEqual(Profile.objects.get(user=carol).full_name, "Carol Jones")

    def test_changed_email_frees_old_address(self):
        self.new_user()
        carol = User.objects.get(email="carol@acme.com")
        services.edit_company_user(self.admin, carol.pk, {"full_name": "Carol Smith", "email": "cj@acme.com"})
        carol.refresh_from_db()
        self.assertEqual(carol.username, "cj@acme.com")
        self.assertTrue(self.client.login(username="cj@acme.com", password="secret123"))
        self.client.logout()

        resp = self.client.post(
            reverse("signup"),
            {
                "first_name": "New",
                "last_name": "Carol",
                "email": "carol@acme.com",
                "password": "secret123",
                "user_type": "jobseeker",
            },
        )
        self.assertRedirects(resp, reverse("login"))
        self.assertEqual(User.objects.get(username="carol@acme.com").user_type, "jobseeker")

    def test_signup_rejects_address_held_as_username(self):
        User.objects.create_user(username="old@acme.com", email="new@acme.com", password="pass")
        resp = self.client.post(
            reverse("signup"),
            {
                "first_name": "A",
                "last_name": "B",
                "email": "old@acme.com",
                "password": "secret123",
                "user_type": "company",
            },
        )
        self.assertEqual(resp.status_code, 200)
        self.assertContains(resp, "Email already exist")

    def test_rejected_edit_keeps_avatar(self):
        self.new_user()
        self.new_user(full_name="Bob Builder", email="bob@acme.com")
        carol = User.objects.get(email="carol@acme.com")
        services.edit_company_user(self.admin, carol.pk, {"full_name": "Carol Smith"}, image("a.png"))
        avatar = Profile.objects.get(user=carol).avatar_url
        self.assertEqual(avatar, f"{carol.pk}/avatar.png")

        result = services.edit_company_user(
            self.admin, carol.pk, {"full_name": "Carol Smith", "email": "bob@acme.com"}, image("b.jpg")
        )
        self.assertEqual(result.reason, "email_taken")
        self.assertEqual(Profile.objects.get(user=carol).avatar_url, avatar)
        self.assertTrue(storage.exists(storage.AVATARS, avatar))
        self.assertFalse(storage.exists(storage.AVATARS, f"{carol.pk}/avatar.jpg"))

    def test_deactivate(self):
        self.new_user()
        carol = User.objects.get(email="carol@acme.com")
        result = services.deactivate_company_user(self.admin, carol.pk)
        self.assertTrue(result.success)
        carol.refresh_from_db()
        self.assertFalse(carol.is_active)
        self.assertFalse(CompanyMember.objects.get(profile__user=carol).is_active)
        self.assertTrue(Profile.objects.filter(user=carol).exists())

        self.assertEqual(services.deactivate_company_user(self.admin, self.admin.pk).reason, "invalid")

    def test_company_users_view(self):
        self.new_user()
        self.client.login(username="admin@acme.com", password="pass")
        resp = self.client.get(reverse("company_users"), {"name": "carol"})
        self.assertContains(resp, "carol@acme.com")


class SubscriptionTests(TestCase):
    def setUp(self):
        self.company = Company.objects.create(company_name="ACME")
        self.admin = make_user("admin@acme.com", full_name="Alice Admin")
        add_member(self.admin, self.company)
        subscriptions.start_subscription(self.company, subscriptions.FREE_PLAN)

    def test_plan_catalogue(self):
        durations = {plan.plan_type: plan.duration_days for plan in subscriptions.PLANS}
        self.assertEqual(durations, {"weekly": 7, "monthly": 30, "yearly": 365})
        self.assertIsNone(subscriptions.FREE_PLAN.end_date())

    def test_purchase_is_not_fulfilled(self):
        self.client.login(username="admin@acme.com", password="pass")
        resp = self.client.post(reverse("subscription_purchase"), {"plan_type": "monthly"})
        self.assertRedirects(resp, reverse("subscription"))
        self.assertEqual(Subscription.objects.count(), 1)
        self.assertEqual(Subscription.objects.get().plan_type, "free")

    def test_unknown_plan(self):
        self.assertEqual(subscriptions.request_purchase(self.admin, "lifetime").reason, "invalid")

    def test_subscription_page_shows_usage(self):
        self.client.login(username="admin@acme.com", password="pass")
        resp = self.client.get(reverse("subscription"))
        self.assertEqual(resp.status_code, 200)
        self.assertTrue(resp.context["quota"].allowed)
        self.assertContains(resp, "0 of 3 job posts used")
