"""
Runtime configuration for the jobdedup command line.

The engine functions take their thresholds as arguments and read no
environment themselves; this module is what the CLI uses to build them.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional

from dotenv import load_dotenv

from .errors import ConfigurationError, check_threshold
from .grouping import DEFAULT_DUPLICATE_THRESHOLD, DEFAULT_GROUP_THRESHOLD
from .reconcile import DEFAULT_DATABASE_THRESHOLD
from .similarity import DEFAULT_DESCRIPTION_TOKENS, SimilarityWeights

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def load_env(env_path: Optional[Path] = None) -> bool:
    """Load .env from the working directory if present. Returns True when loaded."""
    env_path = env_path or Path.cwd() / ".env"
    if not env_path.exists():
        return False
    return load_dotenv(dotenv_path=env_path)


def _float(env: Mapping[str, str], key: str, default: float) -> float:
    raw = env.get(key, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        raise ConfigurationError(f"{key} must be a number, got {raw!r}")


def _int(env: Mapping[str, str], key: str, default: int, minimum: int = 1) -> int:
    raw = env.get(key, "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ConfigurationError(f"{key} must be an integer, got {raw!r}")
    if value < minimum:
        raise ConfigurationError(f"{key} must be >= {minimum}, got {value}")
    return value


@dataclass
class DedupConfig:
    fuzzy_threshold: float = DEFAULT_DUPLICATE_THRESHOLD
    group_threshold: float = DEFAULT_GROUP_THRESHOLD
    database_threshold: float = DEFAULT_DATABASE_THRESHOLD
    description_tokens: int = DEFAULT_DESCRIPTION_TOKENS
    max_workers: int = 1
    log_level: str = "INFO"
    db_path: Path = Path("data/jobs.db")
    weights: SimilarityWeights = field(default_factory=SimilarityWeights)

    def __post_init__(self):
        try:
            check_threshold(self.fuzzy_threshold, "JOBDEDUP_FUZZY_THRESHOLD")
            check_threshold(self.group_threshold, "JOBDEDUP_GROUP_THRESHOLD")
            check_threshold(self.database_threshold, "JOBDEDUP_DATABASE_THRESHOLD")
        except ValueError as e:
            raise ConfigurationError(str(e)) from e
        if self.log_level.upper() not in LOG_LEVELS:
            raise ConfigurationError(f"Unknown log level: {self.log_level}")
        self.log_level = self.log_level.upper()

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "DedupConfig":
        """
        Build a config from environment variables.

        Args:
            env: Mapping to read instead of os.environ (useful for tests)

        Raises:
            ConfigurationError: On unparseable or out-of-range values
        """
        env = os.environ if env is None else env
        weights = SimilarityWeights(
            title=_float(env, "JOBDEDUP_TITLE_WEIGHT", 0.4),
            company=_float(env, "JOBDEDUP_COMPANY_WEIGHT", 0.3),
            description=_float(env, "JOBDEDUP_DESCRIPTION_WEIGHT", 0.3),
        )
        return cls(
            fuzzy_threshold=_float(env, "JOBDEDUP_FUZZY_THRESHOLD", DEFAULT_DUPLICATE_THRESHOLD),
            group_threshold=_float(env, "JOBDEDUP_GROUP_THRESHOLD", DEFAULT_GROUP_THRESHOLD),
            database_threshold=_float(env, "JOBDEDUP_DATABASE_THRESHOLD", DEFAULT_DATABASE_THRESHOLD),
            description_tokens=_int(env, "JOBDEDUP_DESCRIPTION_TOKENS", DEFAULT_DESCRIPTION_TOKENS),
            max_workers=_int(env, "JOBDEDUP_MAX_WORKERS", 1),
            log_level=env.get("JOBDEDUP_LOG_LEVEL", "INFO").strip() or "INFO",
            db_path=Path(env.get("JOBDEDUP_DB_PATH", "").strip() or "data/jobs.db"),
            weights=weights,
        )
