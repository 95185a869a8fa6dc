"""
Reconciliation of scraped batches.

Responsibilities:
- Collapse a batch into merged, unique listings with duplicate lineage.
- Classify a batch against already persisted jobs via an injected lookup.

Non-Responsibilities:
- No database access of its own.
- No merging into persisted records; callers own upserts.
- No retries; retry policy belongs to the lookup provider.

Invariant:
The keep/drop decision for a job depends only on that job's own lookup
results, so sequential and concurrent runs agree.
"""

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Callable, Iterable, List, Optional, Sequence, Tuple

from .errors import LookupBatchError, LookupFailedError, check_threshold
from .grouping import DEFAULT_GROUP_THRESHOLD, DuplicateGrouper
from .logger import get_logger
from .merge import merge_duplicate_jobs
from .models import BatchResult, DuplicateMatch, JobListing
from .similarity import JobSimilarityScorer

DEFAULT_DATABASE_THRESHOLD = 0.8

LookupProvider = Callable[[JobListing], Optional[Iterable[JobListing]]]

_KEPT = "kept"
_DROPPED = "dropped"
_FAILED = "failed"
_PENDING = "pending"


@dataclass
class ReconciliationResult:
    kept: List[JobListing] = field(default_factory=list)
    dropped: List[Tuple[JobListing, DuplicateMatch]] = field(default_factory=list)
    failures: List[LookupFailedError] = field(default_factory=list)
    pending: List[JobListing] = field(default_factory=list)

    @property
    def cancelled(self) -> bool:
        return bool(self.pending)


def reconcile_batch(
    jobs: Sequence[JobListing],
    threshold: float = DEFAULT_GROUP_THRESHOLD,
    grouper: Optional[DuplicateGrouper] = None,
) -> BatchResult:
    """
    Run the batch pipeline: group, then merge each group into its representative.

    Returns:
        BatchResult whose ``unique`` holds one merged listing per group
        and whose ``duplicates`` records which ids were folded into it
    """
    grouper = grouper or DuplicateGrouper()
    result = BatchResult()
    for group in grouper.group_similar_jobs(jobs, threshold):
        result.unique.append(merge_duplicate_jobs(group.representative, group.duplicates))
        result.duplicates.extend(grouper.group_matches(group, threshold))

    get_logger().info(
        "Batch reconciled",
        total_jobs=len(jobs),
        merged_jobs=len(result.unique),
        duplicates=len(result.duplicates),
    )
    return result


class DatabaseReconciler:
    """Drops candidates that an injected lookup shows are already persisted."""

    def __init__(
        self,
        lookup: LookupProvider,
        scorer: Optional[JobSimilarityScorer] = None,
        threshold: float = DEFAULT_DATABASE_THRESHOLD,
    ):
        self.lookup = lookup
        self.scorer = scorer or JobSimilarityScorer()
        self.threshold = check_threshold(threshold)

    def match_existing(self, job: JobListing, existing: Iterable[JobListing]) -> Optional[DuplicateMatch]:
        """First persisted job that ``job`` duplicates, in lookup order."""
        for known in existing:
            reason = self.scorer.classify(known, job, self.threshold)
            if reason is not None:
                return DuplicateMatch(known.id, job.id, reason, self.scorer.score(known, job))
        return None

    def _process(self, job: JobListing, cancel_event) -> Tuple[str, object]:
        if cancel_event is not None and cancel_event.is_set():
            return _PENDING, None

        logger = get_logger()
        try:
            existing = list(self.lookup(job) or [])
        except Exception as e:
            logger.record_lookup(failed=True)
            logger.warning("Lookup failed", job_id=job.id, error=str(e))
            return _FAILED, LookupFailedError(job.id, e)
        logger.record_lookup()

        match = self.match_existing(job, existing)
        if match is None:
            return _KEPT, None
        logger.debug(
            "Job marked as duplicate of persisted job",
            job_id=job.id,
            existing_id=match.primary_id,
            reason=match.reason.value,
        )
        return _DROPPED, match

    def reconcile(
        self,
        new_jobs: Sequence[JobListing],
        max_workers: int = 1,
        cancel_event=None,
    ) -> ReconciliationResult:
        """
        Classify every job in ``new_jobs`` as new or already known.

        Args:
            new_jobs: Fresh candidates
            max_workers: Concurrent lookups; 1 runs strictly in input order
            cancel_event: Object with ``is_set()``, checked before each lookup

        Returns:
            ReconciliationResult with outputs in input order. A failed
            lookup keeps its job and is listed in ``failures``.
        """
        if max_workers < 1:
            raise ValueError(f"max_workers must be >= 1, got {max_workers}")
        new_jobs = list(new_jobs)

        if max_workers == 1:
            outcomes = []
            for job in new_jobs:
                outcome = self._process(job, cancel_event)
                outcomes.append(outcome)
                if outcome[0] == _PENDING:
                    outcomes.extend((_PENDING, None) for _ in new_jobs[len(outcomes):])
                    break
        else:
            with ThreadPoolExecutor(max_workers=max_workers) as pool:
                outcomes = list(pool.map(lambda job: self._process(job, cancel_event), new_jobs))

        result = ReconciliationResult()
        for job, (status, payload) in zip(new_jobs, outcomes):
            if status == _PENDING:
                result.pending.append(job)
            elif status == _DROPPED:
                result.dropped.append((job, payload))
            else:
                if status == _FAILED:
                    result.failures.append(payload)
                result.kept.append(job)

        logger = get_logger()
        logger.record_dropped(len(result.dropped))
        logger.info(
            "Database deduplication completed",
            original_count=len(new_jobs),
            unique_count=len(result.kept),
            duplicates_removed=len(result.dropped),
            lookup_failures=len(result.failures),
            pending=len(result.pending),
        )
        return result


def reconcile_with_database(
    new_jobs: Sequence[JobListing],
    lookup: LookupProvider,
    threshold: float = DEFAULT_DATABASE_THRESHOLD,
    max_workers: int = 1,
    cancel_event=None,
) -> ReconciliationResult:
    return DatabaseReconciler(lookup, threshold=threshold).reconcile(
        new_jobs, max_workers=max_workers, cancel_event=cancel_event
    )


def remove_duplicates_from_database(
    new_jobs: Sequence[JobListing],
    lookup: LookupProvider,
    threshold: float = DEFAULT_DATABASE_THRESHOLD,
    max_workers: int = 1,
    cancel_event=None,
) -> List[JobListing]:
    """
    Return the subset of ``new_jobs`` not already known to the store.

    Raises:
        LookupBatchError: After the whole batch ran, if any lookup failed.
            ``error.result`` carries the ReconciliationResult.
    """
    result = reconcile_with_database(new_jobs, lookup, threshold, max_workers, cancel_event)
    if result.failures:
        raise LookupBatchError(result.failures, result) from result.failures[0]
    return result.kept
