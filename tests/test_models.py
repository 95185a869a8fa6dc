"""
Tests for listing parsing and serialization.
"""

from datetime import datetime, timezone

from jobdedup.models import DuplicateMatch, JobListing, MatchReason, Salary, SimilarityGroup


class TestFromDict:
    """Parsing acquisition-layer payloads."""

    def test_camel_case_payload(self, raw_listing):
        job = JobListing.from_dict(raw_listing)

        assert job.id == "abc-123"
        assert job.employment_type == "full-time"
        assert job.remote is True
        assert job.salary == Salary(min=120000.0, max=150000.0, currency="USD", period="yearly")
        assert job.posted_date == datetime(2024, 3, 1, tzinfo=timezone.utc)
        assert job.source.site == "greenhouse"
        assert job.source.scraped_at == datetime(2024, 3, 2, 10, 0, tzinfo=timezone.utc)
        assert job.metadata.confidence == 0.85

    def test_snake_case_payload(self):
        job = JobListing.from_dict({
            "id": "x",
            "employment_type": "contract",
            "posted_date": "2024-01-05",
            "source": {"site": "lever", "original_url": "https://l.co/1", "scraped_at": "2024-01-06T00:00:00"},
        })
        assert job.employment_type == "contract"
        assert job.posted_date == datetime(2024, 1, 5)
        assert job.source.original_url == "https://l.co/1"

    def test_missing_fields_get_defaults(self):
        job = JobListing.from_dict({"id": "bare"})

        assert job.title == ""
        assert job.url == ""
        assert job.requirements == []
        assert job.salary is None
        assert job.remote is False
        assert job.employment_type == "full-time"
        assert job.source.scraped_at is None
        assert job.metadata.confidence == 0.0

    def test_noisy_values_tolerated(self):
        job = JobListing.from_dict({
            "id": 7,
            "title": None,
            "requirements": ["Python", 3, "", "  SQL "],
            "salary": {"min": "n/a"},
            "employmentType": "gig",
            "remote": "false",
            "postedDate": "yesterday",
            "metadata": {"confidence": 4.2, "rawData": {"html": "<div/>"}},
        })
        assert job.id == "7"
        assert job.title == ""
        assert job.requirements == ["Python", "SQL"]
        assert job.salary is None
        assert job.employment_type == "full-time"
        assert job.remote is False
        assert job.posted_date is None
        assert job.metadata.confidence == 1.0
        assert job.metadata.raw_data == {"html": "<div/>"}

    def test_original_url_defaults_to_url(self):
        job = JobListing.from_dict({"id": "a", "url": "https://x.com/1"})
        assert job.source.original_url == "https://x.com/1"


class TestToDict:

    def test_round_trip(self, raw_listing):
        job = JobListing.from_dict(raw_listing)
        data = job.to_dict()

        assert "unexpectedField" not in data
        assert data["source"]["originalUrl"] == raw_listing["source"]["originalUrl"]
        assert JobListing.from_dict(data) == job

    def test_duplicate_match_serializes_reason_value(self):
        match = DuplicateMatch("a", "b", MatchReason.FUZZY, 0.87654)
        assert match.to_dict() == {"primaryId": "a", "duplicateId": "b", "reason": "fuzzy_match", "score": 0.8765}


class TestSimilarityGroup:

    def test_duplicates_exclude_representative_once(self, make_job):
        a, b = make_job(id="a"), make_job(id="b")
        group = SimilarityGroup(members=[a, b], representative=b)
        assert group.duplicates == [a]
        assert len(group) == 2
