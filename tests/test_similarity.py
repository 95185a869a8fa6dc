"""
Tests for the similarity scorer.
"""

import itertools

import pytest

from jobdedup.errors import ConfigurationError, InvalidThresholdError
from jobdedup.models import JobListing, MatchReason
from jobdedup.similarity import (
    JobSimilarityScorer,
    SimilarityWeights,
    jaccard_similarity,
    score,
    text_similarity,
)


class TestTextSimilarity:
    """Token-level helpers."""

    def test_jaccard_basic(self):
        assert jaccard_similarity(["a", "b"], ["b", "c"]) == pytest.approx(1 / 3)

    def test_jaccard_empty_side_is_zero(self):
        assert jaccard_similarity([], ["a"]) == 0.0
        assert jaccard_similarity([], []) == 0.0

    def test_case_and_punctuation_ignored(self):
        """Casing and punctuation should not affect token similarity."""
        assert text_similarity("Senior, Data-Engineer", "senior data engineer") == 1.0

    def test_none_treated_as_empty(self):
        assert text_similarity(None, "engineer") == 0.0


class TestScore:
    """Weighted job-level scoring."""

    def test_reflexive(self, sample_jobs):
        for job in sample_jobs:
            assert score(job, job) == 1.0

    def test_reflexive_without_url_or_description(self, make_job):
        bare = make_job(id="bare", url="", title="Dev", company="Acme")
        twin = make_job(id="bare", url="", title="Dev", company="Acme")
        assert score(bare, bare) == 1.0
        assert score(bare, twin) == 1.0
        assert JobSimilarityScorer().breakdown(bare, bare).url_match is False

    def test_symmetric(self, sample_jobs, make_job):
        jobs = sample_jobs + [
            make_job(id="x", title="Frontend Software Developer", company="tech corp"),
            make_job(id="y", title="", company="", description=""),
        ]
        for a, b in itertools.product(jobs, repeat=2):
            assert score(a, b) == score(b, a)

    def test_bounded(self, sample_jobs):
        for a, b in itertools.product(sample_jobs, repeat=2):
            assert 0.0 <= score(a, b) <= 1.0

    def test_url_short_circuit(self, make_job):
        """Identical normalized URLs score 1.0 whatever else differs."""
        a = make_job(id="a", url="https://X.com/jobs/1/", title="Chef", company="Diner")
        b = make_job(id="b", url="https://x.com/jobs/1", title="Pilot", company="Airline")
        assert score(a, b) == 1.0

    def test_tracking_params_ignored_for_url(self, make_job):
        a = make_job(id="a", url="https://x.com/jobs/1?utm_source=feed&ref=home")
        b = make_job(id="b", url="https://x.com/jobs/1")
        assert score(a, b) == 1.0

    def test_weighted_fuzzy_score(self, make_job):
        """2/3 title overlap, same company, same description."""
        a = make_job(id="a", title="Frontend Developer", company="Tech Corp", description="Build user interfaces")
        b = make_job(id="b", title="Frontend Software Developer", company="Tech Corp", description="Build user interfaces")
        assert score(a, b) == pytest.approx(0.4 * 2 / 3 + 0.3 + 0.3)

    def test_unrelated_jobs_score_low(self, sample_jobs):
        assert score(sample_jobs[0], sample_jobs[2]) < 0.3

    def test_degenerate_inputs_do_not_raise(self):
        """Listings with only an id still score, contributing zero."""
        a = JobListing(id="a")
        b = JobListing(id="b")
        assert score(a, b) == 0.0

    def test_company_case_insensitive_exact(self, make_job):
        scorer = JobSimilarityScorer()
        a = make_job(id="a", company="ACME Inc")
        b = make_job(id="b", company="acme inc")
        assert scorer.breakdown(a, b).company == 1.0

    def test_description_token_limit(self, make_job):
        """Only the first N description tokens are compared."""
        scorer = JobSimilarityScorer(description_tokens=3)
        a = make_job(id="a", description="alpha beta gamma delta epsilon")
        b = make_job(id="b", description="alpha beta gamma zeta theta")
        assert scorer.breakdown(a, b).description == 1.0

    def test_breakdown_reports_url_match(self, make_job):
        a = make_job(id="a", url="https://x.com/1")
        b = make_job(id="b", url="https://x.com/1")
        result = JobSimilarityScorer().breakdown(a, b)
        assert result.url_match is True
        assert result.to_dict()["score"] == 1.0


class TestClassify:
    """Match reason classification order."""

    def test_url_beats_title_company(self, make_job):
        a = make_job(id="a", url="https://x.com/1", title="Dev", company="Acme")
        b = make_job(id="b", url="https://x.com/1", title="Dev", company="Acme")
        assert JobSimilarityScorer().classify(a, b, 0.75) == MatchReason.EXACT_URL

    def test_title_company(self, sample_jobs):
        reason = JobSimilarityScorer().classify(sample_jobs[0], sample_jobs[1], 0.75)
        assert reason == MatchReason.EXACT_TITLE_COMPANY

    def test_no_match(self, sample_jobs):
        assert JobSimilarityScorer().classify(sample_jobs[0], sample_jobs[2], 0.75) is None

    @pytest.mark.parametrize("threshold", [-0.01, 1.01, float("nan")])
    def test_threshold_out_of_range(self, sample_jobs, threshold):
        with pytest.raises(InvalidThresholdError):
            JobSimilarityScorer().classify(sample_jobs[0], sample_jobs[1], threshold)


class TestWeights:
    """Weight validation."""

    def test_weights_must_sum_to_one(self):
        with pytest.raises(ConfigurationError):
            SimilarityWeights(title=0.5, company=0.5, description=0.5)

    def test_negative_weight_rejected(self):
        with pytest.raises(ConfigurationError):
            SimilarityWeights(title=1.2, company=-0.2, description=0.0)

    def test_custom_weights(self, make_job):
        scorer = JobSimilarityScorer(SimilarityWeights(title=1.0, company=0.0, description=0.0))
        a = make_job(id="a", title="Data Engineer", company="A")
        b = make_job(id="b", title="Data Engineer", company="B")
        assert scorer.score(a, b) == 1.0

    def test_description_tokens_must_be_positive(self):
        with pytest.raises(ConfigurationError):
            JobSimilarityScorer(description_tokens=0)
