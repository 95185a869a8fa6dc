"""
Exception types raised by the deduplication engine.

Noisy scraped data never raises. Only caller misuse (bad thresholds,
bad configuration) and lookup provider failures surface as exceptions.
"""

from typing import List, Optional


class DedupError(Exception):
    """Base class for all engine errors."""
    pass


class InvalidThresholdError(DedupError, ValueError):
    """Raised when a similarity threshold is outside [0, 1]."""
    pass


class ConfigurationError(DedupError, ValueError):
    """Raised when weights or environment configuration are invalid."""
    pass


class LookupFailedError(DedupError):
    """The injected lookup provider failed for a single job."""

    def __init__(self, job_id: str, cause: BaseException):
        self.job_id = job_id
        self.cause = cause
        super().__init__(f"Lookup failed for job {job_id!r}: {cause}")
        self.__cause__ = cause


class LookupBatchError(DedupError):
    """
    One or more lookups failed while reconciling a batch.

    The batch is still processed to completion. ``result`` holds the
    ReconciliationResult so callers can keep the partial output and
    retry or skip the failed job ids.
    """

    def __init__(self, failures: List[LookupFailedError], result: Optional[object] = None):
        self.failures = failures
        self.result = result
        ids = ", ".join(f.job_id for f in failures)
        super().__init__(f"{len(failures)} lookup(s) failed: {ids}")

    @property
    def job_ids(self) -> List[str]:
        return [f.job_id for f in self.failures]


def check_threshold(threshold: float, name: str = "threshold") -> float:
    """Validate a similarity threshold at the call boundary."""
    if isinstance(threshold, bool) or not isinstance(threshold, (int, float)):
        raise InvalidThresholdError(f"{name} must be a number, got {threshold!r}")
    if not 0.0 <= threshold <= 1.0:
        raise InvalidThresholdError(f"{name} must be within [0, 1], got {threshold}")
    return float(threshold)
