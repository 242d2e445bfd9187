"""
Assessment errors - Recoverable failures raised by the assessment core.

None of these are fatal: a call that raises leaves every catalog and
profile untouched, so the caller can retry with different input.
"""


class AssessmentError(Exception):
    """Base class for all assessment core errors."""


class CapacityExceeded(AssessmentError):
    """Catalog or profile store is at its configured limit."""

    def __init__(self, store: str, capacity: int):
        self.store = store
        self.capacity = capacity
        super().__init__(f"{store} is full (capacity {capacity})")


class NotFound(AssessmentError):
    """Lookup by id found no match."""

    def __init__(self, kind: str, ident):
        self.kind = kind
        self.ident = ident
        super().__init__(f"{kind} {ident!r} not found")


class InvalidArgument(AssessmentError, ValueError):
    """Topic, difficulty, answer index or similar outside its declared range."""


class NoCandidates(AssessmentError):
    """A question was requested from an empty catalog."""
