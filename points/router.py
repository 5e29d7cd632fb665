"""
Trigger router.

The host emits three kinds of signal for a submission: its status changed, its
fields were finalized, or it is being destroyed. Editor saves and admin actions
each reliably emit only one of the first two, in no guaranteed order, so the
router never trusts the payload. It reloads the item and lets the current
persisted status decide between `synchronize` and `revoke`.
"""
import logging
import threading
from contextlib import contextmanager

from django.apps import apps

from .engine import ACTIVE, PointsEngine, build_engine, phase_for

logger = logging.getLogger(__name__)

_local = threading.local()


@contextmanager
def item_guard(key):
    """Yields False when `key` is already being processed higher up this thread's stack."""
    active = getattr(_local, "active", None)
    if active is None:
        active = _local.active = set()
    if key in active:
        yield False
        return
    active.add(key)
    try:
        yield True
    finally:
        active.discard(key)


class TriggerRouter:
    def __init__(self, engine: PointsEngine = None, model=None):
        self.engine = engine or build_engine()
        self._model = model

    @property
    def model(self):
        return self._model or apps.get_model("submissions", "Submission")

    def _key(self, item_id):
        return f"{self.model._meta.label_lower}:{item_id}"

    def _reload(self, item_id):
        return self.model.objects.select_related("owner").filter(pk=item_id).first()

    def lifecycle_state_changed(self, item, old_status, new_status) -> bool:
        item_id = getattr(item, "pk", item)
        with item_guard(self._key(item_id)) as entered:
            if not entered:
                logger.debug("Ignoring nested status signal for %s", item_id)
                return True

            current = self._reload(item_id)
            if current is None:
                if isinstance(item, self.model):
                    return self.engine.finalize(item)
                return True

            if current.status != new_status:
                logger.info(
                    "Status signal for %s said '%s' but the item is '%s'; using the stored status",
                    item_id, new_status, current.status,
                )

            new_phase = phase_for(current.status)
            if new_phase == ACTIVE:
                return self.engine.synchronize(current)
            if phase_for(old_status) == ACTIVE:
                return self.engine.revoke(current, reason=current.status)
            return self.engine.synchronize(current)

    def fields_finalized(self, item) -> bool:
        item_id = getattr(item, "pk", item)
        with item_guard(self._key(item_id)) as entered:
            if not entered:
                logger.debug("Ignoring nested fields signal for %s", item_id)
                return True
            current = self._reload(item_id)
            if current is None:
                return True
            return self.engine.synchronize(current)

    def item_destroyed(self, item) -> bool:
        with item_guard(self._key(item.pk)) as entered:
            if not entered:
                logger.debug("Ignoring nested destroy signal for %s", item.pk)
                return True
            return self.engine.finalize(item)
