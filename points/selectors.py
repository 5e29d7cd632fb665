from .conf import points_setting
from .dual import DualBalanceLedger
from .models import PointsAccount, PointsLedgerEntry


def get_user_balances(user):
    return DualBalanceLedger().get_user_balances(user)


def leaderboard(limit=10):
    """Accounts on the cumulative track, best first. Ties go to the older account."""
    return (
        PointsAccount.objects
        .filter(point_type=points_setting("CUMULATIVE_TYPE"), balance__gt=0, user__is_active=True)
        .select_related("user")
        .order_by("-balance", "created_at")[:limit]
    )


def user_rank(user):
    """1-based leaderboard position, or None when the user has no cumulative points."""
    account = PointsAccount.objects.filter(
        user=user, point_type=points_setting("CUMULATIVE_TYPE"), balance__gt=0
    ).first()
    if account is None:
        return None
    ahead = PointsAccount.objects.filter(
        point_type=points_setting("CUMULATIVE_TYPE"),
        user__is_active=True,
        balance__gt=account.balance,
    ).count()
    return ahead + 1


def item_history(item_ref):
    """Every ledger entry written for one item, oldest first."""
    return (
        PointsLedgerEntry.objects
        .filter(item_ref=item_ref)
        .select_related("account")
        .order_by("created_at", "id")
    )
