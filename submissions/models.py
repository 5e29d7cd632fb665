from django.db import models
from django.conf import settings


class Submission(models.Model):
    """A user submission (realization or invoice) moving through approval."""

    CATEGORY_CHOICES = [
        ("realization", "Realization"),
        ("invoice", "Invoice"),
    ]
    STATUS_CHOICES = [
        ("draft", "Draft"),
        ("pending", "Pending"),
        ("publish", "Published"),
        ("rejected", "Rejected"),
        ("trash", "Trash"),
    ]

    owner = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="submissions")
    category = models.CharField(max_length=20, choices=CATEGORY_CHOICES)
    title = models.CharField(max_length=200, blank=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default="draft")

    # value recorded on the item; admins may override it for fixed-value categories
    points_assigned = models.PositiveIntegerField(null=True, blank=True)
    rejection_reason = models.TextField(blank=True)

    # invoice fields
    invoice_value = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    invoice_number = models.CharField(max_length=64, blank=True)
    invoice_date = models.DateField(null=True, blank=True)

    # realization fields
    area_sqm = models.PositiveIntegerField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["owner", "status"], name="submission_owner_status_idx"),
            models.Index(fields=["category", "status"], name="submission_cat_status_idx"),
        ]

    def __str__(self):
        return f"{self.get_category_display()}#{self.pk} ({self.status})"

    @property
    def is_published(self):
        return self.status == "publish"

    def display_title(self):
        return self.title or f"{self.get_category_display()} #{self.pk}"
