"""
Pytest configuration and shared fixtures.
"""

from datetime import datetime
from typing import Any, Dict, List

import pytest

from jobdedup.logger import get_logger, reset_logger
from jobdedup.models import JobListing, Metadata, Source


@pytest.fixture(autouse=True)
def quiet_logger():
    """Silence engine logging and start each test with fresh metrics."""
    reset_logger()
    logger = get_logger(enable_console=False)
    yield logger
    reset_logger()


@pytest.fixture
def make_job():
    """Factory for listings; keyword overrides replace defaults."""
    def _make(
        id: str = "job",
        confidence: float = 0.8,
        site: str = "Indeed",
        scraped_at: datetime = datetime(2024, 1, 1),
        **fields: Any,
    ) -> JobListing:
        url = fields.pop("url", f"https://example.com/{id}")
        return JobListing(
            id=id,
            url=url,
            source=Source(site=site, original_url=url, scraped_at=scraped_at),
            metadata=Metadata(confidence=confidence),
            **fields,
        )
    return _make


@pytest.fixture
def sample_jobs(make_job) -> List[JobListing]:
    """Two postings of the same role from different sites plus an unrelated one."""
    return [
        make_job(
            id="job1",
            title="Frontend Developer",
            company="Tech Corp",
            location="San Francisco",
            description="Build amazing user interfaces with React",
            requirements=["React", "JavaScript"],
            benefits=["Health insurance"],
            tags=["react", "frontend"],
            site="Indeed",
            scraped_at=datetime(2024, 1, 1),
            confidence=0.8,
        ),
        make_job(
            id="job2",
            title="Frontend Developer",
            company="Tech Corp",
            location="San Francisco",
            description="Build amazing user interfaces with React and TypeScript",
            requirements=["React", "TypeScript"],
            benefits=["Health insurance", "Remote work"],
            tags=["react", "typescript"],
            site="LinkedIn",
            scraped_at=datetime(2024, 1, 2),
            confidence=0.9,
        ),
        make_job(
            id="job3",
            title="Backend Engineer",
            company="Different Corp",
            location="New York",
            description="Build scalable APIs with Node.js",
            requirements=["Node.js", "MongoDB"],
            benefits=["Remote work"],
            tags=["nodejs", "backend"],
            remote=True,
            site="Glassdoor",
            scraped_at=datetime(2024, 1, 3),
            confidence=0.7,
        ),
    ]


@pytest.fixture
def raw_listing() -> Dict[str, Any]:
    """Acquisition-layer payload in camelCase."""
    return {
        "id": "abc-123",
        "title": "Data Engineer",
        "company": "Acme Corp",
        "location": "Remote",
        "description": "Build pipelines with Spark and Airflow",
        "url": "https://boards.greenhouse.io/acme/jobs/12345",
        "salary": {"min": 120000, "max": 150000, "currency": "USD", "period": "yearly"},
        "employmentType": "full-time",
        "remote": True,
        "postedDate": "2024-03-01T00:00:00Z",
        "requirements": ["Python", "SQL"],
        "benefits": ["401k"],
        "tags": ["data"],
        "source": {
            "site": "greenhouse",
            "originalUrl": "https://boards.greenhouse.io/acme/jobs/12345",
            "scrapedAt": "2024-03-02T10:00:00Z",
        },
        "metadata": {"confidence": 0.85},
        "unexpectedField": "ignored",
    }
