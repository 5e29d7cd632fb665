import logging

from django.core.signals import setting_changed
from django.db.models.signals import post_save, pre_delete, pre_save
from django.dispatch import receiver

from submissions.models import Submission
from submissions.signals import fields_finalized

from .providers import clear_provider_cache
from .router import TriggerRouter

logger = logging.getLogger(__name__)


# --- Submission lifecycle -> points ---

@receiver(pre_save, sender=Submission)
def remember_persisted_status(sender, instance, raw=False, **kwargs):
    instance._persisted_status = None
    if raw or not instance.pk:
        return
    instance._persisted_status = (
        sender.objects.filter(pk=instance.pk).values_list("status", flat=True).first()
    )


@receiver(post_save, sender=Submission)
def route_status_change(sender, instance, created, raw=False, **kwargs):
    if raw:
        return
    old_status = getattr(instance, "_persisted_status", None)
    if not created and old_status == instance.status:
        return
    ok = TriggerRouter().lifecycle_state_changed(instance, old_status, instance.status)
    if not ok:
        logger.error(
            "Points not synchronized for submission %s (%s → %s); the next signal will retry",
            instance.pk, old_status or "new", instance.status,
        )


@receiver(fields_finalized)
def route_fields_finalized(sender, submission_id, **kwargs):
    if not TriggerRouter().fields_finalized(submission_id):
        logger.error("Points not synchronized for submission %s after field save", submission_id)


@receiver(pre_delete, sender=Submission)
def route_item_destroyed(sender, instance, **kwargs):
    if not TriggerRouter().item_destroyed(instance):
        logger.error("Could not revoke points for deleted submission %s", instance.pk)


@receiver(setting_changed)
def reset_providers(sender, setting, **kwargs):
    if setting == "POINTS":
        clear_provider_cache()
