import hashlib
import re
from typing import List, Optional
from urllib.parse import parse_qsl, urlencode, urlparse

_NON_WORD = re.compile(r"[^\w\s]+")
_SENIORITY = re.compile(r"\b(jr|sr|senior|junior|lead|principal|i|ii|iii|iv|v)\b")
_LEGAL_SUFFIX = re.compile(r"\b(inc|llc|ltd|corp|corporation|company|co|llp|gmbh)\b")
_WORK_MODE = re.compile(r"\b(remote|hybrid|on site|onsite)\b")
_US = re.compile(r"\b(usa|us|united states)\b")

TRACKING_PARAMS = {"ref", "source", "fbclid", "gclid"}
MIN_TOKEN_LENGTH = 2


def fold(s: Optional[str]) -> str:
    """Locale-independent case folding; None becomes ""."""
    return (s or "").casefold()


def normalize_text(s: Optional[str]) -> str:
    folded = _NON_WORD.sub(" ", fold(s))
    return " ".join(folded.split())


def tokenize(s: Optional[str], limit: Optional[int] = None) -> List[str]:
    tokens = [t for t in normalize_text(s).split() if len(t) >= MIN_TOKEN_LENGTH]
    return tokens[:limit] if limit is not None else tokens


def text_key(s: Optional[str]) -> str:
    """Case-folded, whitespace-collapsed form used for exact comparisons."""
    return " ".join(fold(s).split())


def same_text(a: Optional[str], b: Optional[str]) -> bool:
    left = text_key(a)
    return left != "" and left == text_key(b)


def normalize_title(title: Optional[str]) -> str:
    return " ".join(_SENIORITY.sub(" ", normalize_text(title)).split())


def normalize_company(company: Optional[str]) -> str:
    return " ".join(_LEGAL_SUFFIX.sub(" ", normalize_text(company)).split())


def normalize_location(location: Optional[str]) -> str:
    loc = normalize_text(location)
    loc = _WORK_MODE.sub(" ", loc)
    loc = _US.sub("united states", loc)
    return " ".join(loc.split())


def _is_tracking_param(key: str) -> bool:
    key = key.casefold()
    return key.startswith("utm_") or key in TRACKING_PARAMS


def canonical_url(url: Optional[str]) -> str:
    """
    Canonical form used for exact URL matching.

    Case-folded, fragment and tracking parameters dropped, trailing
    slashes removed. Empty input gives "", which never matches.
    """
    raw = fold(url).strip()
    if not raw:
        return ""
    parsed = urlparse(raw)
    path = parsed.path.rstrip("/")
    query = urlencode([(k, v) for k, v in parse_qsl(parsed.query, keep_blank_values=True) if not _is_tracking_param(k)])
    if not (parsed.scheme and parsed.netloc):
        return raw.rstrip("/")
    canonical = f"{parsed.scheme}://{parsed.netloc}{path}"
    return f"{canonical}?{query}" if query else canonical


def same_url(a: Optional[str], b: Optional[str]) -> bool:
    left = canonical_url(a)
    return left != "" and left == canonical_url(b)


def job_fingerprint(title: Optional[str], company: Optional[str], location: Optional[str]) -> str:
    key = "|".join([normalize_title(title), normalize_company(company), normalize_location(location)])
    return hashlib.sha1(key.encode("utf-8")).hexdigest()
