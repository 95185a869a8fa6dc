"""
Similarity scoring between two job listings.

Responsibilities:
- Compute a bounded, symmetric score in [0, 1] for a pair of listings.
- Classify a pair by match reason (exact URL, exact title+company, fuzzy).

Non-Responsibilities:
- No clustering.
- No persistence.

Invariant:
Given identical inputs, score() always returns the same value and
score(a, b) == score(b, a).
"""

from dataclasses import dataclass
from typing import Iterable, Optional

from .errors import ConfigurationError, check_threshold
from .models import JobListing, MatchReason
from .normalize import same_text, same_url, tokenize

DEFAULT_DESCRIPTION_TOKENS = 200


def jaccard_similarity(a: Iterable[str], b: Iterable[str]) -> float:
    sa, sb = set(a), set(b)
    if not sa or not sb:
        return 0.0
    return len(sa & sb) / len(sa | sb)


def text_similarity(a: Optional[str], b: Optional[str], limit: Optional[int] = None) -> float:
    """Jaccard over case-folded word tokens; empty text scores 0."""
    return jaccard_similarity(tokenize(a, limit), tokenize(b, limit))


def company_similarity(a: Optional[str], b: Optional[str]) -> float:
    if same_text(a, b):
        return 1.0
    return text_similarity(a, b)


@dataclass(frozen=True)
class SimilarityWeights:
    title: float = 0.4
    company: float = 0.3
    description: float = 0.3

    def __post_init__(self):
        values = (self.title, self.company, self.description)
        if any(v < 0 for v in values):
            raise ConfigurationError(f"Similarity weights must be non-negative: {values}")
        if abs(sum(values) - 1.0) > 1e-9:
            raise ConfigurationError(f"Similarity weights must sum to 1.0, got {sum(values)}")


@dataclass(frozen=True)
class ScoreBreakdown:
    title: float
    company: float
    description: float
    url_match: bool
    score: float

    def to_dict(self) -> dict:
        return {
            "title": round(self.title, 4),
            "company": round(self.company, 4),
            "description": round(self.description, 4),
            "url_match": self.url_match,
            "score": round(self.score, 4),
        }


class JobSimilarityScorer:
    """
    Weighted title/company/description scorer.

    Equal listings and listings with the same canonical URL score 1.0
    without looking at their text.
    """

    def __init__(
        self,
        weights: Optional[SimilarityWeights] = None,
        description_tokens: int = DEFAULT_DESCRIPTION_TOKENS,
    ):
        if description_tokens <= 0:
            raise ConfigurationError(f"description_tokens must be positive, got {description_tokens}")
        self.weights = weights or SimilarityWeights()
        self.description_tokens = description_tokens

    def breakdown(self, a: JobListing, b: JobListing) -> ScoreBreakdown:
        url_match = same_url(a.url, b.url)
        if url_match or a is b or a == b:
            return ScoreBreakdown(1.0, 1.0, 1.0, url_match, 1.0)

        title = text_similarity(a.title, b.title)
        company = company_similarity(a.company, b.company)
        description = text_similarity(a.description, b.description, self.description_tokens)
        total = (
            title * self.weights.title
            + company * self.weights.company
            + description * self.weights.description
        )
        return ScoreBreakdown(title, company, description, False, min(1.0, max(0.0, total)))

    def score(self, a: JobListing, b: JobListing) -> float:
        return self.breakdown(a, b).score

    def classify(self, a: JobListing, b: JobListing, threshold: float) -> Optional[MatchReason]:
        """
        Return why ``a`` and ``b`` are the same posting, or None.

        Checks run in a fixed order: URL, exact title+company, then the
        weighted score against ``threshold``.
        """
        threshold = check_threshold(threshold)
        if same_url(a.url, b.url):
            return MatchReason.EXACT_URL
        if same_title_company(a, b):
            return MatchReason.EXACT_TITLE_COMPANY
        if self.score(a, b) >= threshold:
            return MatchReason.FUZZY
        return None


def same_title_company(a: JobListing, b: JobListing) -> bool:
    return same_text(a.title, b.title) and same_text(a.company, b.company)


_default_scorer = JobSimilarityScorer()


def score(a: JobListing, b: JobListing) -> float:
    """Score two listings with the default weights."""
    return _default_scorer.score(a, b)
