"""
Data model for scraped job listings and deduplication results.

Listings are immutable. Every optional field is explicit and has a
documented default so the engine never has to guess whether a value
is present:

    text fields      -> ""
    list fields      -> []
    salary           -> None
    employment_type  -> "full-time"
    remote           -> False
    dates            -> None
"""

from dataclasses import dataclass, field, asdict
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

SALARY_PERIODS = ("hourly", "daily", "weekly", "monthly", "yearly")
EMPLOYMENT_TYPES = ("full-time", "part-time", "contract", "temporary", "internship", "freelance")


def parse_datetime(value: Any) -> Optional[datetime]:
    """Parse an ISO-8601 string or epoch seconds; None when unparseable."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return datetime.fromtimestamp(value, tz=timezone.utc)
    if isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            return datetime.fromisoformat(text)
        except ValueError:
            return None
    return None


def _format_datetime(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def _pick(data: Dict[str, Any], *keys: str, default: Any = None) -> Any:
    for key in keys:
        if key in data and data[key] is not None:
            return data[key]
    return default


def _str_list(value: Any) -> List[str]:
    if not isinstance(value, (list, tuple)):
        return []
    return [v.strip() for v in value if isinstance(v, str) and v.strip()]


def _bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("true", "1", "yes", "remote")
    return bool(value)


def _float_or_none(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    try:
        return float(value) if value is not None else None
    except (TypeError, ValueError):
        return None


@dataclass(frozen=True)
class Salary:
    min: Optional[float] = None
    max: Optional[float] = None
    currency: str = "USD"
    period: str = "yearly"

    @classmethod
    def from_dict(cls, data: Any) -> Optional["Salary"]:
        if not isinstance(data, dict):
            return None
        low = _float_or_none(data.get("min"))
        high = _float_or_none(data.get("max"))
        if low is None and high is None:
            return None
        period = data.get("period") if data.get("period") in SALARY_PERIODS else "yearly"
        currency = data.get("currency") if isinstance(data.get("currency"), str) and data.get("currency") else "USD"
        return cls(min=low, max=high, currency=currency, period=period)


@dataclass(frozen=True)
class Source:
    site: str = ""
    original_url: str = ""
    scraped_at: Optional[datetime] = None

    def scraped_timestamp(self) -> float:
        """Seconds since epoch; naive datetimes are read as UTC, missing sorts oldest."""
        if self.scraped_at is None:
            return float("-inf")
        dt = self.scraped_at
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=timezone.utc)
        return dt.timestamp()


@dataclass(frozen=True)
class Metadata:
    confidence: float = 0.0
    raw_data: Optional[Dict[str, Any]] = None


@dataclass(frozen=True)
class JobListing:
    """A single scraped job posting."""

    id: str
    title: str = ""
    company: str = ""
    location: str = ""
    description: str = ""
    url: str = ""
    salary: Optional[Salary] = None
    employment_type: str = "full-time"
    remote: bool = False
    posted_date: Optional[datetime] = None
    expiry_date: Optional[datetime] = None
    requirements: List[str] = field(default_factory=list)
    benefits: List[str] = field(default_factory=list)
    tags: List[str] = field(default_factory=list)
    source: Source = field(default_factory=Source)
    metadata: Metadata = field(default_factory=Metadata)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "JobListing":
        """
        Build a listing from an acquisition-layer payload.

        Accepts camelCase or snake_case keys. Unknown keys are ignored and
        missing optional fields fall back to their defaults; this never
        raises for noisy data.
        """
        source_data = data.get("source") if isinstance(data.get("source"), dict) else {}
        metadata_data = data.get("metadata") if isinstance(data.get("metadata"), dict) else {}

        confidence = _float_or_none(metadata_data.get("confidence"))
        if confidence is None or confidence != confidence:
            confidence = 0.0
        confidence = min(1.0, max(0.0, confidence))

        raw_data = metadata_data.get("rawData", metadata_data.get("raw_data"))
        employment_type = _pick(data, "employmentType", "employment_type", default="full-time")
        if employment_type not in EMPLOYMENT_TYPES:
            employment_type = "full-time"

        url = str(_pick(data, "url", default="") or "")
        return cls(
            id=str(_pick(data, "id", default="") or ""),
            title=str(_pick(data, "title", default="") or ""),
            company=str(_pick(data, "company", default="") or ""),
            location=str(_pick(data, "location", default="") or ""),
            description=str(_pick(data, "description", default="") or ""),
            url=url,
            salary=Salary.from_dict(data.get("salary")),
            employment_type=employment_type,
            remote=_bool(_pick(data, "remote", default=False)),
            posted_date=parse_datetime(_pick(data, "postedDate", "posted_date")),
            expiry_date=parse_datetime(_pick(data, "expiryDate", "expiry_date")),
            requirements=_str_list(data.get("requirements")),
            benefits=_str_list(data.get("benefits")),
            tags=_str_list(data.get("tags")),
            source=Source(
                site=str(_pick(source_data, "site", default="") or ""),
                original_url=str(_pick(source_data, "originalUrl", "original_url", default=url) or ""),
                scraped_at=parse_datetime(_pick(source_data, "scrapedAt", "scraped_at")),
            ),
            metadata=Metadata(
                confidence=confidence,
                raw_data=raw_data if isinstance(raw_data, dict) else None,
            ),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the camelCase shape used by the acquisition layer."""
        data: Dict[str, Any] = {
            "id": self.id,
            "title": self.title,
            "company": self.company,
            "location": self.location,
            "description": self.description,
            "url": self.url,
            "employmentType": self.employment_type,
            "remote": self.remote,
            "postedDate": _format_datetime(self.posted_date),
            "expiryDate": _format_datetime(self.expiry_date),
            "requirements": list(self.requirements),
            "benefits": list(self.benefits),
            "tags": list(self.tags),
            "source": {
                "site": self.source.site,
                "originalUrl": self.source.original_url,
                "scrapedAt": _format_datetime(self.source.scraped_at),
            },
            "metadata": {"confidence": self.metadata.confidence},
        }
        if self.salary is not None:
            data["salary"] = asdict(self.salary)
        if self.metadata.raw_data is not None:
            data["metadata"]["rawData"] = self.metadata.raw_data
        return data


class MatchReason(str, Enum):
    EXACT_URL = "exact_url_match"
    EXACT_TITLE_COMPANY = "exact_title_company_match"
    FUZZY = "fuzzy_match"


@dataclass(frozen=True)
class DuplicateMatch:
    """Lineage record: ``duplicate_id`` was folded into ``primary_id``."""

    primary_id: str
    duplicate_id: str
    reason: MatchReason
    score: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "primaryId": self.primary_id,
            "duplicateId": self.duplicate_id,
            "reason": self.reason.value,
            "score": round(self.score, 4),
        }


@dataclass
class SimilarityGroup:
    members: List[JobListing]
    representative: JobListing
    # member position -> how that member joined the group, anchor as primary
    links: Dict[int, DuplicateMatch] = field(default_factory=dict)

    @property
    def duplicates(self) -> List[JobListing]:
        """Members other than the representative, in input order."""
        rest = list(self.members)
        for i, member in enumerate(rest):
            if member is self.representative:
                del rest[i]
                break
        return rest

    def __len__(self) -> int:
        return len(self.members)


@dataclass
class BatchResult:
    unique: List[JobListing] = field(default_factory=list)
    duplicates: List[DuplicateMatch] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "unique": [job.to_dict() for job in self.unique],
            "duplicates": [match.to_dict() for match in self.duplicates],
        }
