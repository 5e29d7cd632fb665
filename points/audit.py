from django.contrib.contenttypes.models import ContentType
from django.utils import timezone

from .models import AwardAudit


class AuditTrailStore:
    """Persisted per-item bookkeeping of the points currently reflected in balances."""

    def _lookup(self, item):
        return {
            "content_type": ContentType.objects.get_for_model(item, for_concrete_model=True),
            "object_id": item.pk,
        }

    def peek(self, item):
        return AwardAudit.objects.filter(**self._lookup(item)).first()

    def get(self, item) -> AwardAudit:
        """Return the item's audit record, creating it on first use."""
        audit, _ = AwardAudit.objects.get_or_create(
            **self._lookup(item),
            defaults={"owner_id": item.owner_id, "category": item.category},
        )
        return audit

    def record_award(self, audit: AwardAudit, awarded: int, unrecovered: int = 0):
        audit.last_awarded_points = awarded
        audit.unrecovered_points += unrecovered
        audit.save(update_fields=["last_awarded_points", "unrecovered_points", "updated_at"])

    def record_stored_value(self, audit: AwardAudit, stored: int):
        """Mirror the value currently written on the item."""
        if audit.recorded_points == stored:
            return
        audit.recorded_points = stored
        audit.save(update_fields=["recorded_points", "updated_at"])

    def record_revoke(self, audit: AwardAudit, unrecovered: int = 0):
        audit.last_awarded_points = 0
        audit.unrecovered_points += unrecovered
        audit.save(update_fields=["last_awarded_points", "unrecovered_points", "updated_at"])

    def finalize(self, audit: AwardAudit):
        audit.finalized_at = timezone.now()
        audit.save(update_fields=["finalized_at", "updated_at"])
