from typing import Any, Dict, List
from urllib.parse import urlparse

from .models import SALARY_PERIODS

TEXT_FIELDS = ["id", "title", "company", "location", "description", "url"]
LIST_FIELDS = ["requirements", "benefits", "tags"]


def _is_non_empty_str(v: Any) -> bool:
    return isinstance(v, str) and v.strip() != ""


def _valid_url(v: str) -> bool:
    try:
        p = urlparse(v)
        return bool(p.scheme and p.netloc)
    except ValueError:
        return False


def _is_number(v: Any) -> bool:
    return isinstance(v, (int, float)) and not isinstance(v, bool)


def validate_listing(data: Dict[str, Any]) -> List[str]:
    """
    Returns a list of validation problems for a raw scraped payload.
    Empty list means valid. The engine still accepts invalid payloads;
    this is for reporting noisy sources, not for rejecting input.
    """
    errors: List[str] = []

    if not isinstance(data, dict):
        return ["Listing must be a JSON object"]

    if not _is_non_empty_str(data.get("id")):
        errors.append("Missing required field: id")
    if not _is_non_empty_str(data.get("title")) and not _is_non_empty_str(data.get("url")):
        errors.append("Listing needs at least a title or a url")

    for f in TEXT_FIELDS:
        if f in data and data[f] is not None and not isinstance(data[f], str):
            errors.append(f"Field '{f}' must be a string if provided")

    if _is_non_empty_str(data.get("url")) and not _valid_url(data["url"]):
        errors.append("Field 'url' must be a valid absolute URL (scheme + host)")

    for f in LIST_FIELDS:
        value = data.get(f)
        if value is None:
            continue
        if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
            errors.append(f"Field '{f}' must be a list of strings")
            continue
        folded = [" ".join(v.casefold().split()) for v in value]
        if len(set(folded)) != len(folded):
            errors.append(f"Field '{f}' contains case-insensitive duplicates")

    metadata = data.get("metadata")
    if isinstance(metadata, dict) and "confidence" in metadata:
        confidence = metadata["confidence"]
        if not _is_number(confidence) or not 0.0 <= confidence <= 1.0:
            errors.append("Field 'metadata.confidence' must be a number within [0, 1]")

    salary = data.get("salary")
    if isinstance(salary, dict):
        low, high = salary.get("min"), salary.get("max")
        for key, value in (("min", low), ("max", high)):
            if value is not None and not _is_number(value):
                errors.append(f"Field 'salary.{key}' must be a number")
        if _is_number(low) and _is_number(high) and low > high:
            errors.append("Field 'salary.min' must not exceed 'salary.max'")
        if "period" in salary and salary["period"] not in SALARY_PERIODS:
            errors.append(f"Field 'salary.period' must be one of {', '.join(SALARY_PERIODS)}")
    elif salary is not None:
        errors.append("Field 'salary' must be an object if provided")

    return errors
