import logging

from django.db import transaction

from .conf import points_setting
from .exceptions import LedgerUnavailable
from .models import PointsAccount

logger = logging.getLogger(__name__)


class CurrencyLedger:
    """
    The currency ledger the dual balance ledger is built on: signed additions
    per user and point type, each one logged with the resulting balance.
    """

    def is_available(self) -> bool:
        if not points_setting("LEDGER_ENABLED"):
            return False
        registered = set(points_setting("REGISTERED_TYPES"))
        return {points_setting("SPENDABLE_TYPE"), points_setting("CUMULATIVE_TYPE")} <= registered

    def ensure_available(self):
        if not points_setting("LEDGER_ENABLED"):
            raise LedgerUnavailable("Currency ledger is disabled")
        registered = set(points_setting("REGISTERED_TYPES"))
        for point_type in (points_setting("SPENDABLE_TYPE"), points_setting("CUMULATIVE_TYPE")):
            if point_type not in registered:
                raise LedgerUnavailable(f"Point type '{point_type}' is not registered")

    @transaction.atomic
    def add(self, user, amount: int, reference: str, memo: str = "", item_ref: str = "", point_type: str = None) -> bool:
        """Apply a signed `amount` to the user's `point_type` balance. Zero is a no-op."""
        self.ensure_available()
        point_type = point_type or points_setting("SPENDABLE_TYPE")
        amount = int(amount)
        if amount == 0:
            return True

        account, _ = PointsAccount.objects.select_for_update().get_or_create(
            user=user, point_type=point_type, defaults={"balance": 0}
        )
        entry = account.apply_points(amount, reference=reference, memo=memo, item_ref=item_ref)
        logger.debug(
            "Ledger %s %+d for user %s (%s) → %s", point_type, amount, user.pk, reference, entry.balance_after
        )
        return True

    @transaction.atomic
    def deduct_up_to(self, user, amount: int, reference: str, memo: str = "", item_ref: str = "",
                     point_type: str = None) -> int:
        """
        Remove at most `amount`, never taking the balance below zero. The amount
        is decided from the locked account row. Returns how much was removed.
        """
        self.ensure_available()
        point_type = point_type or points_setting("SPENDABLE_TYPE")
        amount = int(amount)
        if amount <= 0:
            return 0

        account, _ = PointsAccount.objects.select_for_update().get_or_create(
            user=user, point_type=point_type, defaults={"balance": 0}
        )
        removed = min(amount, max(account.balance, 0))
        if removed:
            entry = account.apply_points(-removed, reference=reference, memo=memo, item_ref=item_ref)
            logger.debug(
                "Ledger %s -%d of %d for user %s (%s) → %s",
                point_type, removed, amount, user.pk, reference, entry.balance_after,
            )
        return removed

    def get_balance(self, user, point_type: str = None) -> int:
        self.ensure_available()
        point_type = point_type or points_setting("SPENDABLE_TYPE")
        return (
            PointsAccount.objects.filter(user=user, point_type=point_type)
            .values_list("balance", flat=True)
            .first()
            or 0
        )
