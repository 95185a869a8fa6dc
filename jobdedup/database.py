"""
Database schema and connection management for the reference job store.

Uses SQLite with SQLAlchemy. The deduplication engine never imports
this module; it only sees the lookup function a JobStore exposes.
"""

from datetime import datetime
from pathlib import Path
from sqlalchemy import create_engine, Column, String, Text, DateTime, Index
from sqlalchemy.orm import declarative_base, sessionmaker

Base = declarative_base()


class JobRecord(Base):
    """Persisted job listing."""

    __tablename__ = "jobs"

    id = Column(String, primary_key=True)
    url = Column(String, nullable=False, default="")
    canonical_url = Column(String, nullable=False, default="", index=True)
    title = Column(String, nullable=False, default="")
    company = Column(String, nullable=False, default="")
    title_key = Column(String, nullable=False, default="")  # case-folded title
    company_key = Column(String, nullable=False, default="")  # case-folded company
    location = Column(String, nullable=False, default="")
    payload = Column(Text, nullable=False)  # JobListing.to_dict() as JSON
    created_at = Column(DateTime, nullable=False, default=datetime.now)
    updated_at = Column(DateTime, nullable=False, default=datetime.now, onupdate=datetime.now)

    __table_args__ = (Index("ix_jobs_company_title", "company_key", "title_key"),)


def init_database(db_path: Path) -> None:
    """
    Initialize database and create tables.

    Args:
        db_path: Path to SQLite database file
    """
    db_path.parent.mkdir(parents=True, exist_ok=True)
    engine = create_engine(f"sqlite:///{db_path}")
    Base.metadata.create_all(engine)


def get_session(db_path: Path):
    """
    Get database session.

    Args:
        db_path: Path to SQLite database file

    Returns:
        SQLAlchemy session
    """
    engine = create_engine(f"sqlite:///{db_path}")
    Session = sessionmaker(bind=engine)
    return Session()
