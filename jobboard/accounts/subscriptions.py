"""Subscription plan catalogue.

Purchasing is not wired to a payment provider: ``request_purchase`` records
the intent in the log and leaves the company's subscriptions untouched.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import timedelta
from decimal import Decimal

from django.utils import timezone

from jobboard.results import ActionResult

from .identity import AccessDenied, ADMIN_ROLES, require_company_role
from .models import Subscription

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Plan:
    plan_type: str
    name: str
    duration_days: int | None
    price: Decimal
    job_posts_limit: int
    features: tuple[str, ...] = ()

    def end_date(self, start=None):
        if self.duration_days is None:
            return None
        return (start or timezone.now()) + timedelta(days=self.duration_days)


FREE_PLAN = Plan(Subscription.PlanType.FREE, "Free", None, Decimal("0.00"), 3, ("Up to 3 job posts",))

PLANS = (
    Plan(
        Subscription.PlanType.WEEKLY,
        "Weekly",
        7,
        Decimal("1.99"),
        5,
        ("Up to 5 job posts", "Listed for 7 days"),
    ),
    Plan(
        Subscription.PlanType.MONTHLY,
        "Monthly",
        30,
        Decimal("5.99"),
        20,
        ("Up to 20 job posts", "Listed for 30 days", "Dashboard statistics"),
    ),
    Plan(
        Subscription.PlanType.YEARLY,
        "Yearly",
        365,
        Decimal("49.99"),
        300,
        ("Up to 300 job posts", "Listed for a full year", "Dashboard statistics"),
    ),
)


def get_plan(plan_type: str) -> Plan | None:
    if plan_type == FREE_PLAN.plan_type:
        return FREE_PLAN
    return next((plan for plan in PLANS if plan.plan_type == plan_type), None)


def start_subscription(company, plan: Plan, *, now=None) -> Subscription:
    """Open a subscription row for ``plan``. Used by onboarding and seed data."""
    now = now or timezone.now()
    return Subscription.objects.create(
        company=company,
        plan_type=plan.plan_type,
        job_posts_limit=plan.job_posts_limit,
        job_posts_used=0,
        start_date=now,
        end_date=plan.end_date(now),
        is_active=True,
    )


def request_purchase(user, plan_type: str) -> ActionResult:
    plan = get_plan(plan_type)
    if plan is None or plan is FREE_PLAN:
        return ActionResult.fail("Unknown plan.", "invalid")
    try:
        session = require_company_role(user, ADMIN_ROLES)
    except AccessDenied as exc:
        return ActionResult.fail(exc.message, exc.reason)

    logger.info(
        "Subscription purchase requested: company_id=%s plan=%s price=%s user=%s",
        session.company_id,
        plan.plan_type,
        plan.price,
        user.username,
    )
    return ActionResult.ok(
        f"Online payment is not available yet. Contact us to activate the {plan.name} plan.",
        plan_type=plan.plan_type,
    )
