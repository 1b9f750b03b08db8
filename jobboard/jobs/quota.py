"""Job posting quota gate.

``can_create_job`` answers "may this user post a job right now?" without
raising: every failure is a tagged reason the caller can branch on to pick a
message or a redirect (subscription page, profile form, ...).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from django.conf import settings
from django.utils import timezone

from accounts.identity import AccessDenied, resolve_membership
from accounts.models import Company, Subscription

logger = logging.getLogger(__name__)

REASON_MESSAGES = {
    "not_authenticated": "Please log in first.",
    "no_profile": "Profile not found. Please create your profile first.",
    "no_company": "You are not a member of any company. Please create a company profile first.",
    "company_not_found": "Company not found.",
    "no_subscription": "Your company has no active subscription. Choose a plan to start posting jobs.",
    "subscription_expired": "Your subscription has expired. Renew your plan to post more jobs.",
    "limit_reached": "You have reached the job posting limit of your plan.",
}


@dataclass(frozen=True)
class QuotaDecision:
    allowed: bool
    reason: str | None = None
    plan_type: str | None = None
    jobs_used: int | None = None
    jobs_limit: int | None = None

    @property
    def remaining_jobs(self) -> int | None:
        if self.jobs_limit is None or self.jobs_used is None:
            return None
        return max(0, self.jobs_limit - self.jobs_used)

    @property
    def message(self) -> str:
        if self.allowed:
            return ""
        return REASON_MESSAGES.get(self.reason, "You cannot post a job right now.")


def evaluate_subscription(subscription: Subscription | None, now=None) -> QuotaDecision:
    """Subscription part of the gate; also used by job creation itself."""
    if subscription is None:
        return QuotaDecision(False, "no_subscription")
    if subscription.is_expired(now or timezone.now()):
        return QuotaDecision(False, "subscription_expired", plan_type=subscription.plan_type)

    used = subscription.job_posts_used or 0
    limit = subscription.job_posts_limit or 0
    if used >= limit:
        return QuotaDecision(False, "limit_reached", subscription.plan_type, used, limit)
    return QuotaDecision(True, None, subscription.plan_type, used, limit)


def can_create_job(user) -> QuotaDecision:
    try:
        session = resolve_membership(user)
    except AccessDenied as exc:
        return QuotaDecision(False, exc.reason)

    company = Company.objects.filter(id=session.company_id).first()
    if company is None:
        return QuotaDecision(False, "company_not_found")

    legacy_limit = getattr(settings, "JOBBOARD_LEGACY_JOB_LIMIT", None)
    if legacy_limit is not None and company.total_job >= legacy_limit:
        logger.info("Legacy job limit reached: company_id=%s total_job=%s", company.id, company.total_job)
        return QuotaDecision(False, "limit_reached", jobs_used=company.total_job, jobs_limit=legacy_limit)

    return evaluate_subscription(Subscription.objects.current_for(company.id))
