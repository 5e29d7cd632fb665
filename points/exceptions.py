class PointsError(Exception):
    """Base error for point operations."""


class LedgerUnavailable(PointsError):
    """Raised when the currency ledger is disabled or a point type is not registered."""
