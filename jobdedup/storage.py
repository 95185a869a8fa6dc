"""
Reference persistent store for reconciled listings.

``JobStore.find_candidates`` has the lookup signature the reconciler
expects, so a store can be passed straight to
remove_duplicates_from_database. Transient SQLite errors are retried
here, in the provider, never in the engine.
"""

import json
from pathlib import Path
from typing import List

from sqlalchemy import or_
from sqlalchemy.exc import OperationalError

from .database import JobRecord, get_session, init_database
from .logger import get_logger
from .models import JobListing
from .normalize import canonical_url, text_key
from .retry import exponential_backoff


def _record_fields(job: JobListing) -> dict:
    return {
        "url": job.url,
        "canonical_url": canonical_url(job.url),
        "title": job.title,
        "company": job.company,
        "title_key": text_key(job.title),
        "company_key": text_key(job.company),
        "location": job.location,
        "payload": json.dumps(job.to_dict(), ensure_ascii=False, sort_keys=True),
    }


def record_to_listing(record: JobRecord) -> JobListing:
    return JobListing.from_dict(json.loads(record.payload))


class JobStore:
    """SQLite-backed lookup and upsert for JobListing values."""

    def __init__(self, db_path: Path):
        self.db_path = Path(db_path)
        init_database(self.db_path)

    @exponential_backoff(max_retries=2, base_delay=0.2, exceptions=(OperationalError,))
    def find_candidates(self, job: JobListing) -> List[JobListing]:
        """
        Persisted jobs that might be the same posting as ``job``.

        Matches on canonical URL, or on case-folded company + title.
        """
        conditions = []
        url_key = canonical_url(job.url)
        if url_key:
            conditions.append(JobRecord.canonical_url == url_key)
        title_key, company_key = text_key(job.title), text_key(job.company)
        if title_key and company_key:
            conditions.append((JobRecord.company_key == company_key) & (JobRecord.title_key == title_key))
        if not conditions:
            return []

        session = get_session(self.db_path)
        try:
            records = session.query(JobRecord).filter(or_(*conditions)).order_by(JobRecord.created_at).all()
            return [record_to_listing(r) for r in records]
        finally:
            session.close()

    def upsert(self, job: JobListing) -> str:
        """
        Insert or update a listing by id.

        Returns:
            "new", "updated" or "no-change"
        """
        fields = _record_fields(job)
        session = get_session(self.db_path)
        try:
            record = session.get(JobRecord, job.id)
            if record is None:
                session.add(JobRecord(id=job.id, **fields))
                status = "new"
            elif any(getattr(record, k) != v for k, v in fields.items()):
                for k, v in fields.items():
                    setattr(record, k, v)
                status = "updated"
            else:
                status = "no-change"
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

        get_logger().debug("Job upserted", job_id=job.id, status=status)
        return status

    def count(self) -> int:
        session = get_session(self.db_path)
        try:
            return session.query(JobRecord).count()
        finally:
            session.close()
