"""
Dual balance ledger.

Every award lands on two tracks: the spendable balance the user can redeem and
the cumulative balance used for the leaderboard. Awards are all-or-nothing; a
failed cumulative award is compensated on the spendable track. Revocations
are all-or-nothing too: a failed cumulative revoke puts the spendable points
back. Spendable never goes below zero; cumulative follows the configured policy.
"""
import logging
from dataclasses import dataclass

from django.db import DatabaseError

from .conf import REVOKE_POLICIES, points_setting
from .exceptions import LedgerUnavailable
from .ledger import CurrencyLedger

logger = logging.getLogger(__name__)


@dataclass
class RevokeResult:
    success: bool
    requested: int = 0
    spendable: int = 0
    cumulative: int = 0

    @property
    def shortfall(self) -> int:
        """Spendable points the no-debt policy left with the user."""
        if not self.success:
            return 0
        return max(self.requested - self.spendable, 0)

    def __bool__(self):
        return self.success


class DualBalanceLedger:
    def __init__(self, ledger: CurrencyLedger = None):
        self.ledger = ledger or CurrencyLedger()

    @property
    def spendable_type(self):
        return points_setting("SPENDABLE_TYPE")

    @property
    def cumulative_type(self):
        return points_setting("CUMULATIVE_TYPE")

    def _add(self, user, amount, reference, memo, item_ref, point_type) -> bool:
        try:
            return bool(self.ledger.add(user, amount, reference, memo, item_ref, point_type))
        except DatabaseError:
            logger.exception("Ledger write failed: %s %+d for user %s (%s)", point_type, amount, user.pk, reference)
            return False

    def _deduct(self, user, amount, reference, memo, item_ref, point_type):
        """Amount removed from the locked balance, or None when the write failed."""
        try:
            return self.ledger.deduct_up_to(user, amount, reference, memo, item_ref, point_type)
        except DatabaseError:
            logger.exception("Ledger write failed: %s -%d for user %s (%s)", point_type, amount, user.pk, reference)
            return None

    def _check_available(self, action, user, amount, item_ref) -> bool:
        try:
            self.ledger.ensure_available()
        except LedgerUnavailable as e:
            logger.error("Cannot %s %d points for user %s (%s): %s", action, amount, user.pk, item_ref, e)
            return False
        return True

    def award(self, user, amount: int, reference: str, memo: str = "", item_ref: str = "") -> bool:
        """Add `amount` to both tracks as one logical operation."""
        amount = int(amount)
        if amount == 0:
            return True
        if amount < 0:
            logger.error("Refusing to award negative amount %d to user %s (%s)", amount, user.pk, item_ref)
            return False
        if not self._check_available("award", user, amount, item_ref):
            return False

        if not self._add(user, amount, reference, memo, item_ref, self.spendable_type):
            logger.error("Spendable award of %d failed for user %s (%s)", amount, user.pk, item_ref)
            return False

        leaderboard_reference = f"leaderboard_{reference}"
        if not self._add(user, amount, leaderboard_reference, f"{memo} (leaderboard)", item_ref, self.cumulative_type):
            rolled_back = self._add(
                user, -amount, f"{reference}_rollback",
                f"Rollback: leaderboard points failed - {memo}", item_ref, self.spendable_type,
            )
            logger.error(
                "Cumulative award of %d failed for user %s (%s); spendable rollback %s",
                amount, user.pk, item_ref, "succeeded" if rolled_back else "FAILED",
            )
            return False

        logger.info("Awarded %d points to user %s (%s)", amount, user.pk, item_ref)
        return True

    def revoke(self, user, amount: int, reference: str, memo: str = "", item_ref: str = "") -> RevokeResult:
        """
        Take `amount` back from both tracks as one logical operation. Spendable
        removes at most the locked balance; cumulative removes the full amount
        unless the "clamp" policy is configured. If the cumulative write fails,
        the spendable removal is put back, so a failed revoke leaves both tracks
        as they were. Returns what each track actually lost.
        """
        amount = int(amount)
        if amount == 0:
            return RevokeResult(True)
        if amount < 0:
            logger.error("Refusing to revoke negative amount %d from user %s (%s)", amount, user.pk, item_ref)
            return RevokeResult(False, amount)
        if not self._check_available("revoke", user, amount, item_ref):
            return RevokeResult(False, amount)

        policy = points_setting("CUMULATIVE_REVOKE_POLICY")
        if policy not in REVOKE_POLICIES:
            logger.warning("Unknown cumulative revoke policy '%s'; using 'full'", policy)
            policy = "full"

        removed = self._deduct(user, amount, f"revoke_{reference}", memo, item_ref, self.spendable_type)
        if removed is None:
            logger.error("Spendable revoke of %d failed for user %s (%s)", amount, user.pk, item_ref)
            return RevokeResult(False, amount)
        if removed < amount:
            logger.info(
                "No-debt policy: revoked %d of %d spendable points from user %s (%s)",
                removed, amount, user.pk, item_ref,
            )

        leaderboard_reference = f"revoke_leaderboard_{reference}"
        leaderboard_memo = f"{memo} (leaderboard)"
        if policy == "clamp":
            cumulative = self._deduct(user, amount, leaderboard_reference, leaderboard_memo, item_ref,
                                      self.cumulative_type)
        elif self._add(user, -amount, leaderboard_reference, leaderboard_memo, item_ref, self.cumulative_type):
            cumulative = amount
        else:
            cumulative = None

        if cumulative is None:
            restored = True
            if removed:
                restored = self._add(
                    user, removed, f"revoke_{reference}_rollback",
                    f"Rollback: leaderboard revoke failed - {memo}", item_ref, self.spendable_type,
                )
            logger.error(
                "Cumulative revoke of %d failed for user %s (%s); spendable rollback of %d %s",
                amount, user.pk, item_ref, removed, "succeeded" if restored else "FAILED",
            )
            return RevokeResult(False, amount)

        logger.info(
            "Revoked points from user %s (%s): spendable=%d/%d cumulative=%d/%d",
            user.pk, item_ref, removed, amount, cumulative, amount,
        )
        return RevokeResult(True, amount, spendable=removed, cumulative=cumulative)

    def get_user_balances(self, user) -> dict:
        if not self.ledger.is_available():
            return {"spendable": 0, "cumulative": 0}
        return {
            "spendable": self.ledger.get_balance(user, self.spendable_type),
            "cumulative": self.ledger.get_balance(user, self.cumulative_type),
        }
