"""
Points engine.

For each content item the engine keeps the owner's balances equal to what the
item is currently worth: the computed value while the item is published, zero
otherwise. It never trusts an in-memory flag; every call compares the live
computed value with the persisted audit record and moves only the difference,
so any number of redundant or reordered triggers converge on the same result.
"""
import logging

from .audit import AuditTrailStore
from .conf import category_display_name, category_reference, points_setting
from .dual import DualBalanceLedger
from .providers import get_provider

logger = logging.getLogger(__name__)

ACTIVE = "active"
INACTIVE = "inactive"
GONE = "gone"

ACTIVE_STATUSES = {"publish"}
INACTIVE_STATUSES = {"draft", "pending", "rejected", "trash"}

STATUS_LABELS = {
    "draft": "draft",
    "pending": "awaiting approval",
    "rejected": "rejected",
    "trash": "trash",
    "deleted": "deleted",
}


def phase_for(status):
    if status in ACTIVE_STATUSES:
        return ACTIVE
    if status == "deleted":
        return GONE
    return INACTIVE


class PointsEngine:
    def __init__(self, ledger: DualBalanceLedger = None, audit_store: AuditTrailStore = None, provider_for=None):
        self.ledger = ledger or DualBalanceLedger()
        self.audit = audit_store or AuditTrailStore()
        self.provider_for = provider_for or get_provider

    # ------------------------- helpers -------------------------

    def _item_ref(self, item):
        return f"{item.category}:{item.pk}"

    def _memo(self, item, context, delta=0):
        display = category_display_name(item.category).lower()
        if context == "award":
            return f"Points for approved {display}: {item.display_title()}"
        if context == "adjust":
            return f"Points adjusted for {display}: {item.display_title()} ({delta:+d})"
        label = STATUS_LABELS.get(context, context)
        return f'Points revoked: {item.display_title()} changed to "{label}"'

    def compute_points(self, item):
        """Current value of the item, or None when the provider's answer is unusable."""
        computed = self.provider_for(item.category).compute(item)
        maximum = points_setting("MAX_POINTS")
        if not isinstance(computed, int) or computed < 0 or computed > maximum:
            logger.error(
                "Invalid point value %r for %s (allowed 0..%d); refusing to award",
                computed, self._item_ref(item), maximum,
            )
            return None
        return computed

    def _populate_stored_value(self, item, computed):
        if item.points_assigned or computed <= 0:
            return
        item.points_assigned = computed
        item.save(update_fields=["points_assigned", "updated_at"])
        logger.info("Auto-populated %d points on %s", computed, self._item_ref(item))

    # ------------------------- operations ----------------------

    def synchronize(self, item) -> bool:
        """
        Converge the owner's balances to what `item` is worth right now.
        Safe to call any number of times; an unchanged value issues no ledger calls.
        """
        if item.owner_id is None:
            logger.warning("Skipping %s: no owner", self._item_ref(item))
            return False

        computed = self.compute_points(item)
        if computed is None:
            return False
        self._populate_stored_value(item, computed)

        audit = self.audit.get(item)
        self.audit.record_stored_value(audit, item.points_assigned or 0)

        if phase_for(item.status) != ACTIVE:
            if audit.last_awarded_points > 0:
                logger.info(
                    "%s is '%s' but still holds %d points; revoking",
                    self._item_ref(item), item.status, audit.last_awarded_points,
                )
                return self._revoke(item, audit, item.status)
            return True

        delta = computed - audit.last_awarded_points
        if delta == 0:
            return True

        reference = category_reference(item.category)
        item_ref = self._item_ref(item)

        if delta > 0:
            context = "award" if audit.last_awarded_points == 0 else "adjust"
            if not self.ledger.award(item.owner, delta, reference, self._memo(item, context, delta), item_ref):
                logger.error("Failed to award %+d points for %s", delta, item_ref)
                return False
            self.audit.record_award(audit, computed)
        else:
            result = self.ledger.revoke(item.owner, -delta, reference, self._memo(item, "adjust", delta), item_ref)
            if not result:
                logger.error("Failed to revoke %+d points for %s", delta, item_ref)
                return False
            self.audit.record_award(audit, computed, unrecovered=result.shortfall)

        logger.info("Points for %s adjusted by %+d (total %d)", item_ref, delta, computed)
        return True

    def revoke(self, item, reason: str) -> bool:
        """Take back everything the item contributed to its owner's balances."""
        audit = self.audit.get(item)
        self.audit.record_stored_value(audit, item.points_assigned or 0)
        return self._revoke(item, audit, reason)

    def _revoke(self, item, audit, reason) -> bool:
        owed = audit.last_awarded_points
        if owed == 0:
            return True

        owner = item.owner if item.owner_id else audit.owner
        if owner is None:
            logger.error("Cannot revoke %d points for %s: owner unknown", owed, self._item_ref(item))
            return False

        result = self.ledger.revoke(
            owner, owed, category_reference(item.category), self._memo(item, reason), self._item_ref(item)
        )
        if not result:
            logger.error("Failed to revoke %d points for %s (%s)", owed, self._item_ref(item), reason)
            return False

        self.audit.record_revoke(audit, unrecovered=result.shortfall)
        logger.info(
            "Revoked points for %s (%s): spendable=%d/%d cumulative=%d/%d",
            self._item_ref(item), reason, result.spendable, owed, result.cumulative, owed,
        )
        return True

    def finalize(self, item) -> bool:
        """The item is about to be destroyed: revoke whatever it still holds and close its record."""
        audit = self.audit.get(item)
        if not self._revoke(item, audit, "deleted"):
            return False
        self.audit.finalize(audit)
        return True


def build_engine() -> PointsEngine:
    return PointsEngine(ledger=DualBalanceLedger(), audit_store=AuditTrailStore(), provider_for=get_provider)
