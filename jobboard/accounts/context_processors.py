from jobs.notifications import recent_notifications

from .models import CompanyMember


def company_nav(request):
    empty = {"nav_unread_notifications": 0, "nav_recent_notifications": [], "nav_company": None}
    if not getattr(request, "user", None) or not request.user.is_authenticated:
        return empty
    member = (
        CompanyMember.objects.select_related("company")
        .filter(profile__user=request.user, is_active=True)
        .first()
    )
    if member is None:
        return empty
    qs = recent_notifications(member.company_id)
    return {
        "nav_unread_notifications": qs.filter(is_read=False).count(),
        "nav_recent_notifications": list(qs[:5]),
        "nav_company": member.company,
    }
