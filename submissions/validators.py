import logging

from django.conf import settings
from django.core.exceptions import ValidationError
from django.utils.module_loading import import_string

logger = logging.getLogger(__name__)

DEFAULT_VALIDATORS = [
    "submissions.validators.validate_owner_active",
    "submissions.validators.validate_invoice_value",
]


def validate_owner_active(submission):
    owner = submission.owner
    if owner is None or not owner.is_active:
        raise ValidationError("The submission owner is missing or inactive.", code="owner_inactive")


def validate_invoice_value(submission):
    if submission.category != "invoice":
        return
    if submission.invoice_value is None or submission.invoice_value <= 0:
        raise ValidationError("An invoice needs a positive value before it can be approved.", code="invoice_value")


def _get_validators():
    paths = getattr(settings, "SUBMISSIONS_PUBLISH_VALIDATORS", DEFAULT_VALIDATORS)
    return [import_string(path) for path in paths]


def run_publish_gate(submission):
    """
    Run every configured publish validator against the submission.
    Returns the list of error messages; an empty list means publishing is allowed.
    """
    errors = []
    for validator in _get_validators():
        try:
            validator(submission)
        except ValidationError as e:
            errors.extend(e.messages)
    if errors:
        logger.warning("Publish refused for submission %s: %s", submission.pk, "; ".join(errors))
    return errors
