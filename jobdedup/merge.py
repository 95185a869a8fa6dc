"""
Field-level merge of a duplicate cluster into its representative.

Merge policy, applied in this order:
    requirements, benefits, tags   case-insensitive union, first-seen casing and order
    description                    longest non-empty, primary wins ties
    salary                         primary's, else the first duplicate that has one
    metadata.confidence            max across all inputs
    metadata.raw_data["sources"]   every contributing source site, first-seen order
    everything else                primary's value, unchanged

Inputs are never mutated; a new JobListing is returned.
"""

from dataclasses import replace
from typing import Iterable, List, Sequence

from .models import JobListing
from .normalize import text_key


def union_casefold(*lists: Iterable[str]) -> List[str]:
    """Concatenate lists dropping case-insensitive repeats; first casing and order win."""
    seen = set()
    merged = []
    for items in lists:
        for item in items:
            key = text_key(item)
            if key in seen:
                continue
            seen.add(key)
            merged.append(item)
    return merged


def _source_sites(job: JobListing) -> List[str]:
    known = (job.metadata.raw_data or {}).get("sources")
    if isinstance(known, list):
        return [s for s in known if isinstance(s, str)]
    return [job.source.site]


def merge_sources(candidates: Sequence[JobListing]) -> List[str]:
    """Sites that carried any of ``candidates``, first-seen order, blanks dropped."""
    sites = []
    for job in candidates:
        for site in _source_sites(job):
            if site and site not in sites:
                sites.append(site)
    return sites


def _longest_description(candidates: Sequence[JobListing]) -> str:
    best = candidates[0].description
    for job in candidates[1:]:
        if len(job.description.strip()) > len(best.strip()):
            best = job.description
    return best


def merge_duplicate_jobs(primary: JobListing, duplicates: Sequence[JobListing]) -> JobListing:
    """
    Fold ``duplicates`` into ``primary``.

    Identity fields (title, company, location, url, employment type,
    remote, posted date, source, id) always come from ``primary``.

    Args:
        primary: The cluster representative
        duplicates: Other members of the cluster, in any order

    Returns:
        A new JobListing. With no duplicates the result equals ``primary``.
    """
    if not duplicates:
        return primary

    candidates = [primary, *duplicates]

    salary = primary.salary
    if salary is None:
        salary = next((d.salary for d in duplicates if d.salary is not None), None)

    confidence = max(job.metadata.confidence for job in candidates)
    raw_data = dict(primary.metadata.raw_data or {})
    raw_data["sources"] = merge_sources(candidates)

    return replace(
        primary,
        requirements=union_casefold(*(job.requirements for job in candidates)),
        benefits=union_casefold(*(job.benefits for job in candidates)),
        tags=union_casefold(*(job.tags for job in candidates)),
        description=_longest_description(candidates),
        salary=salary,
        metadata=replace(primary.metadata, confidence=confidence, raw_data=raw_data),
    )
