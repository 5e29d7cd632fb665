import logging

from django.db import transaction

from .models import Submission
from .signals import fields_finalized

log = logging.getLogger(__name__)

EDITABLE_FIELDS = {
    "title",
    "points_assigned",
    "rejection_reason",
    "invoice_value",
    "invoice_number",
    "invoice_date",
    "area_sqm",
    "status",
}


@transaction.atomic
def save_fields(submission: Submission, **fields) -> Submission:
    """
    Editor path: write the given fields, then announce that the item's
    fields are final. Points are synchronized from the announcement.
    """
    unknown = set(fields) - EDITABLE_FIELDS
    if unknown:
        raise ValueError(f"Unknown submission fields: {', '.join(sorted(unknown))}")

    for name, value in fields.items():
        setattr(submission, name, value)
    submission.save()

    fields_finalized.send(sender=Submission, submission_id=submission.pk)
    return submission


def change_status(submission: Submission, new_status: str, *, reason: str = "") -> bool:
    """
    Administrative path: persist only the status (and optional rejection reason).
    Returns True when the requested status is the one that got stored; the
    publish gate may keep the previous one.
    """
    valid = {code for code, _ in Submission.STATUS_CHOICES}
    if new_status not in valid:
        raise ValueError(f"Unknown status '{new_status}'")

    submission.status = new_status
    update_fields = ["status", "updated_at"]
    if new_status == "rejected" and reason:
        submission.rejection_reason = reason
        update_fields.append("rejection_reason")
    submission.save(update_fields=update_fields)

    stored = submission.status == new_status
    if not stored:
        log.info("Submission %s stayed '%s' (requested '%s')", submission.pk, submission.status, new_status)
    return stored


def approve(submission: Submission) -> bool:
    return change_status(submission, "publish")


def reject(submission: Submission, reason: str = "") -> bool:
    return change_status(submission, "rejected", reason=reason)


def trash(submission: Submission) -> bool:
    return change_status(submission, "trash")


def destroy(submission: Submission) -> None:
    """Permanently delete the submission."""
    submission.delete()
