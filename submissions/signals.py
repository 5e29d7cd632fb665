from django.db.models.signals import pre_save
from django.dispatch import Signal, receiver

from .models import Submission
from .validators import run_publish_gate

# Sent once every structured field of a submission has been written.
# Receivers get `sender=Submission` and `submission_id`.
fields_finalized = Signal()


@receiver(pre_save, sender=Submission)
def enforce_publish_gate(sender, instance, **kwargs):
    if instance.status != "publish":
        return

    previous = "pending"
    if instance.pk:
        try:
            previous = sender.objects.values_list("status", flat=True).get(pk=instance.pk)
        except sender.DoesNotExist:
            pass
    if previous == "publish":
        return

    errors = run_publish_gate(instance)
    instance._publish_gate_errors = errors
    if errors:
        # persist the prior state instead of the refused transition
        instance.status = previous
