from django.db import models, transaction
from django.conf import settings
from django.contrib.contenttypes.models import ContentType


class PointsAccount(models.Model):
    """One balance per user and point type (spendable, cumulative)."""
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="points_accounts")
    point_type = models.CharField(max_length=40)
    balance = models.IntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        unique_together = (("user", "point_type"),)
        indexes = [
            models.Index(fields=["point_type", "balance"], name="points_acct_type_balance_idx"),
        ]

    def __str__(self):
        return f"{self.user} [{self.point_type}] → {self.balance} pts"

    @transaction.atomic
    def apply_points(self, delta, *, reference="", memo="", item_ref=""):
        """Add (or subtract) points and log the transaction."""
        self.balance = (self.balance or 0) + int(delta)
        self.save(update_fields=["balance", "updated_at"])
        return PointsLedgerEntry.objects.create(
            account=self,
            delta=int(delta),
            reference=reference[:100],
            memo=memo[:255],
            item_ref=item_ref[:64],
            balance_after=self.balance,
        )


class PointsLedgerEntry(models.Model):
    account = models.ForeignKey(PointsAccount, on_delete=models.CASCADE, related_name="entries")
    delta = models.IntegerField()  # positive or negative
    reference = models.CharField(max_length=100, blank=True)
    memo = models.CharField(max_length=255, blank=True)
    item_ref = models.CharField(max_length=64, blank=True, db_index=True)
    balance_after = models.IntegerField()
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at", "-id"]
        verbose_name_plural = "Points ledger entries"

    def __str__(self):
        sign = "+" if self.delta >= 0 else ""
        return f"{self.account.user} {sign}{self.delta} [{self.reference}] → {self.balance_after}"


class AwardAudit(models.Model):
    """
    Per-item record of what the engine believes is reflected in the owner's
    balances. Rows outlive the item: a deleted item keeps a finalized row.
    """
    content_type = models.ForeignKey(ContentType, on_delete=models.CASCADE)
    object_id = models.PositiveBigIntegerField()
    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL, null=True, blank=True, on_delete=models.SET_NULL, related_name="award_audits"
    )
    category = models.CharField(max_length=40)

    last_awarded_points = models.PositiveIntegerField(default=0)
    recorded_points = models.PositiveIntegerField(default=0)
    # spendable points the no-debt policy could not take back
    unrecovered_points = models.PositiveIntegerField(default=0)

    finalized_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["content_type", "object_id"], name="unique_award_audit_item"),
        ]

    def __str__(self):
        return f"AwardAudit<{self.item_ref}> {self.last_awarded_points} pts"

    @property
    def item_ref(self):
        return f"{self.category}:{self.object_id}"

    @property
    def is_finalized(self):
        return self.finalized_at is not None
