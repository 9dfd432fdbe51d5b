class CafePlannerError(Exception):
    """Base exception for cafe planning errors."""


class ValidationError(CafePlannerError):
    """Raised when a plan, stop or request value violates a plan invariant."""


class MissingLocationError(CafePlannerError):
    """Raised when a stop lacks coordinates for an operation that needs them."""


class NotFoundError(CafePlannerError):
    """Raised when a cafe, stop or archived plan id cannot be found."""
