"""
Point value providers, one per content category.

A provider answers a single question: how many points is this item worth right
now? It reads the item's own fields and never writes anything, so the engine
may call it as often as it likes.
"""
import logging
from decimal import Decimal, InvalidOperation

from django.utils.module_loading import import_string

from .conf import category_config

logger = logging.getLogger(__name__)


class PointValueProvider:
    def compute(self, item) -> int:
        raise NotImplementedError


class FixedPointsProvider(PointValueProvider):
    """
    Constant award per item. A positive value already stored on the item is an
    administrator override and wins over the constant.
    """

    def __init__(self, default: int, field: str = "points_assigned", allow_override: bool = True):
        self.default = int(default)
        self.field = field
        self.allow_override = allow_override

    def compute(self, item) -> int:
        if self.allow_override:
            stored = getattr(item, self.field, None)
            if stored:
                return int(stored)
        return self.default


class DivisorPointsProvider(PointValueProvider):
    """floor(item.<field> / divisor), never negative; e.g. 10 CZK of invoice = 1 point."""

    def __init__(self, field: str, divisor: int):
        if int(divisor) <= 0:
            raise ValueError("divisor must be positive")
        self.field = field
        self.divisor = int(divisor)

    def compute(self, item) -> int:
        raw = getattr(item, self.field, None)
        if raw in (None, ""):
            return 0
        try:
            value = Decimal(str(raw))
        except InvalidOperation:
            logger.warning("Non-numeric %s=%r on %s; computing 0 points", self.field, raw, item)
            return 0
        if value <= 0:
            return 0
        return int(value // self.divisor)


_cache = {}


def get_provider(category) -> PointValueProvider:
    """Build (once) the provider configured for `category` in settings.POINTS."""
    provider = _cache.get(category)
    if provider is None:
        config = category_config(category)
        cls = import_string(config["provider"])
        provider = cls(**config.get("options", {}))
        _cache[category] = provider
    return provider


def clear_provider_cache(**kwargs):
    _cache.clear()
