from django.conf import settings

DEFAULTS = {
    "LEDGER_ENABLED": True,
    "SPENDABLE_TYPE": "spendable",
    "CUMULATIVE_TYPE": "cumulative",
    "REGISTERED_TYPES": ["spendable", "cumulative"],
    "CUMULATIVE_REVOKE_POLICY": "full",
    "MAX_POINTS": 100000,
    "CATEGORIES": {},
}

REVOKE_POLICIES = {"full", "clamp"}


def points_setting(name):
    """Read one key of settings.POINTS, falling back to the built-in default."""
    configured = getattr(settings, "POINTS", {}) or {}
    if name in configured:
        return configured[name]
    return DEFAULTS[name]


def category_config(category):
    categories = points_setting("CATEGORIES")
    try:
        return categories[category]
    except KeyError:
        raise KeyError(f"No points configuration for category '{category}'") from None


def category_reference(category):
    return category_config(category).get("reference") or f"approval_of_{category}"


def category_display_name(category):
    return category_config(category).get("display_name") or category.title()
