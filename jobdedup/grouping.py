"""
Duplicate grouping for a batch of freshly scraped listings.

Greedy star clustering: each candidate, in input order, is compared
against the anchor (first member) of every open cluster and joins the
first cluster it matches, else opens a new one. Only similarity to the
anchor is guaranteed; two non-anchor members of the same cluster need
not be similar to each other.

Match precedence per candidate:
    1. exact URL against any member of any cluster
    2. exact title + company against a cluster anchor
    3. weighted score >= threshold against a cluster anchor, first cluster
       in creation order that crosses the threshold
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

from .errors import check_threshold
from .logger import get_logger
from .models import BatchResult, DuplicateMatch, JobListing, MatchReason, SimilarityGroup
from .normalize import canonical_url, job_fingerprint
from .similarity import JobSimilarityScorer, same_title_company

DEFAULT_DUPLICATE_THRESHOLD = 0.75
DEFAULT_GROUP_THRESHOLD = 0.7


@dataclass
class _Cluster:
    anchor_index: int
    indexes: List[int] = field(default_factory=list)
    links: Dict[int, Tuple[MatchReason, float]] = field(default_factory=dict)


def representative_key(job: JobListing, position: int) -> Tuple[float, float, int]:
    """Sort key: higher confidence, then more recent scrape, then earlier input."""
    return (job.metadata.confidence, job.source.scraped_timestamp(), -position)


def select_representative(members: Sequence[JobListing]) -> JobListing:
    if not members:
        raise ValueError("Cannot select a representative from an empty group")
    best = max(range(len(members)), key=lambda i: representative_key(members[i], i))
    return members[best]


class DuplicateGrouper:
    """Partitions a batch into clusters of near-duplicate listings."""

    def __init__(
        self,
        scorer: Optional[JobSimilarityScorer] = None,
        threshold: float = DEFAULT_DUPLICATE_THRESHOLD,
    ):
        self.scorer = scorer or JobSimilarityScorer()
        self.threshold = check_threshold(threshold)

    def _cluster(self, jobs: Sequence[JobListing], threshold: float) -> List[_Cluster]:
        logger = get_logger()
        clusters: List[_Cluster] = []
        by_url: Dict[str, _Cluster] = {}
        comparisons = 0

        for index, job in enumerate(jobs):
            target: Optional[_Cluster] = None
            link: Optional[Tuple[MatchReason, float]] = None

            url_key = canonical_url(job.url)
            if url_key and url_key in by_url:
                target = by_url[url_key]
                link = (MatchReason.EXACT_URL, 1.0)

            if target is None:
                for cluster in clusters:
                    anchor = jobs[cluster.anchor_index]
                    if same_title_company(job, anchor):
                        target = cluster
                        link = (MatchReason.EXACT_TITLE_COMPANY, self.scorer.score(job, anchor))
                        break

            if target is None:
                for cluster in clusters:
                    comparisons += 1
                    s = self.scorer.score(job, jobs[cluster.anchor_index])
                    if s >= threshold:
                        target, link = cluster, (MatchReason.FUZZY, s)
                        break

            if target is None:
                target = _Cluster(anchor_index=index)
                clusters.append(target)
            else:
                target.links[index] = link
                logger.record_duplicate(link[0].value)
                logger.debug(
                    "Candidate joined cluster",
                    job_id=job.id,
                    anchor_id=jobs[target.anchor_index].id,
                    reason=link[0].value,
                    score=round(link[1], 4),
                )
            target.indexes.append(index)
            if url_key and url_key not in by_url:
                by_url[url_key] = target

        logger.record_comparisons(comparisons)
        logger.record_batch(len(clusters))
        return clusters

    def find_duplicates(self, jobs: Sequence[JobListing]) -> BatchResult:
        """
        Split a batch into unique listings and duplicate lineage.

        Each cluster's anchor (its earliest member) is the primary; every
        other member yields one DuplicateMatch pointing at it.

        Args:
            jobs: Candidate listings in scrape order

        Returns:
            BatchResult with ``unique`` in input order and ``duplicates``
            ordered by the duplicate's input position
        """
        jobs = list(jobs)
        if not jobs:
            return BatchResult(unique=[], duplicates=[])

        clusters = self._cluster(jobs, self.threshold)
        unique = [jobs[c.anchor_index] for c in clusters]
        matches: List[Tuple[int, DuplicateMatch]] = []
        for cluster in clusters:
            primary = jobs[cluster.anchor_index]
            for index, (reason, score) in cluster.links.items():
                matches.append((index, DuplicateMatch(primary.id, jobs[index].id, reason, score)))
        matches.sort(key=lambda pair: pair[0])

        get_logger().info(
            "Deduplication completed",
            total_jobs=len(jobs),
            unique_jobs=len(unique),
            duplicates=len(matches),
        )
        return BatchResult(unique=unique, duplicates=[m for _, m in matches])

    def group_similar_jobs(self, jobs: Sequence[JobListing], threshold: float = DEFAULT_GROUP_THRESHOLD) -> List[SimilarityGroup]:
        """
        Cluster a batch and elect a representative per cluster.

        The representative is the member with the highest confidence; ties
        go to the most recent scrape, then to the earliest input position.
        Groups come back in the order their first member appeared.
        """
        threshold = check_threshold(threshold)
        jobs = list(jobs)
        groups = []
        for cluster in self._cluster(jobs, threshold):
            members = [jobs[i] for i in cluster.indexes]
            anchor_id = jobs[cluster.anchor_index].id
            links = {
                pos: DuplicateMatch(anchor_id, jobs[i].id, *cluster.links[i])
                for pos, i in enumerate(cluster.indexes)
                if i in cluster.links
            }
            groups.append(SimilarityGroup(members=members, representative=select_representative(members), links=links))
        return groups

    def group_matches(self, group: SimilarityGroup, threshold: float = DEFAULT_GROUP_THRESHOLD) -> List[DuplicateMatch]:
        """
        Lineage for a group relative to its elected representative.

        A member that does not itself match the representative keeps the
        link it joined the group with, which names the anchor as primary.
        A non-representative anchor is linked back through the
        representative's own join.

        Raises:
            ValueError: if a member has no match to report, which only
                happens for groups not built by group_similar_jobs
        """
        threshold = check_threshold(threshold)
        rep = group.representative
        rep_pos = next((i for i, m in enumerate(group.members) if m is rep), None)
        if rep_pos is None:
            raise ValueError("Representative is not a member of its group")

        matches = []
        for pos, member in enumerate(group.members):
            if pos == rep_pos:
                continue
            reason = self.scorer.classify(rep, member, threshold)
            if reason is not None:
                matches.append(DuplicateMatch(rep.id, member.id, reason, self.scorer.score(rep, member)))
            elif pos in group.links:
                matches.append(group.links[pos])
            elif rep_pos in group.links:
                joined = group.links[rep_pos]
                matches.append(DuplicateMatch(rep.id, member.id, joined.reason, joined.score))
            else:
                raise ValueError(f"No recorded match for member {member.id}")
        return matches


def fast_deduplicate(jobs: Sequence[JobListing]) -> List[JobListing]:
    """O(n) pass keeping the first listing per title/company/location fingerprint."""
    seen = set()
    unique = []
    for job in jobs:
        key = job_fingerprint(job.title, job.company, job.location)
        if key not in seen:
            seen.add(key)
            unique.append(job)

    get_logger().info(
        "Fast deduplication completed",
        original_count=len(jobs),
        unique_count=len(unique),
        duplicates_removed=len(jobs) - len(unique),
    )
    return unique


_default_grouper: Optional[DuplicateGrouper] = None


def _grouper() -> DuplicateGrouper:
    global _default_grouper
    if _default_grouper is None:
        _default_grouper = DuplicateGrouper()
    return _default_grouper


def find_duplicates(jobs: Sequence[JobListing]) -> BatchResult:
    return _grouper().find_duplicates(jobs)


def group_similar_jobs(jobs: Sequence[JobListing], threshold: float = DEFAULT_GROUP_THRESHOLD) -> List[SimilarityGroup]:
    return _grouper().group_similar_jobs(jobs, threshold)
