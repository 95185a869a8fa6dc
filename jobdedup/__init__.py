"""Deduplication and reconciliation of scraped job listings."""

__version__ = "0.1.0"

from .errors import (
    ConfigurationError,
    DedupError,
    InvalidThresholdError,
    LookupBatchError,
    LookupFailedError,
)
from .grouping import DuplicateGrouper, fast_deduplicate, find_duplicates, group_similar_jobs
from .merge import merge_duplicate_jobs
from .models import (
    BatchResult,
    DuplicateMatch,
    JobListing,
    MatchReason,
    Metadata,
    Salary,
    SimilarityGroup,
    Source,
)
from .reconcile import (
    DatabaseReconciler,
    ReconciliationResult,
    reconcile_batch,
    reconcile_with_database,
    remove_duplicates_from_database,
)
from .similarity import JobSimilarityScorer, SimilarityWeights, score

__all__ = [
    "BatchResult",
    "ConfigurationError",
    "DatabaseReconciler",
    "DedupError",
    "DuplicateGrouper",
    "DuplicateMatch",
    "InvalidThresholdError",
    "JobListing",
    "JobSimilarityScorer",
    "LookupBatchError",
    "LookupFailedError",
    "MatchReason",
    "Metadata",
    "ReconciliationResult",
    "Salary",
    "SimilarityGroup",
    "SimilarityWeights",
    "Source",
    "fast_deduplicate",
    "find_duplicates",
    "group_similar_jobs",
    "merge_duplicate_jobs",
    "reconcile_batch",
    "reconcile_with_database",
    "remove_duplicates_from_database",
    "score",
]
