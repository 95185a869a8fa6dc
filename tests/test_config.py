"""
Tests for environment configuration.
"""

import os
from pathlib import Path

import pytest

from jobdedup.config import DedupConfig, load_env
from jobdedup.errors import ConfigurationError


class TestDedupConfig:

    def test_defaults(self):
        config = DedupConfig.from_env({})
        assert config.fuzzy_threshold == 0.75
        assert config.group_threshold == 0.7
        assert config.database_threshold == 0.8
        assert config.description_tokens == 200
        assert config.max_workers == 1
        assert config.log_level == "INFO"
        assert config.db_path == Path("data/jobs.db")
        assert config.weights.title == 0.4

    def test_overrides(self):
        config = DedupConfig.from_env({
            "JOBDEDUP_FUZZY_THRESHOLD": "0.9",
            "JOBDEDUP_MAX_WORKERS": "4",
            "JOBDEDUP_LOG_LEVEL": "debug",
            "JOBDEDUP_DB_PATH": "/tmp/x.db",
            "JOBDEDUP_TITLE_WEIGHT": "0.5",
            "JOBDEDUP_COMPANY_WEIGHT": "0.25",
            "JOBDEDUP_DESCRIPTION_WEIGHT": "0.25",
        })
        assert config.fuzzy_threshold == 0.9
        assert config.max_workers == 4
        assert config.log_level == "DEBUG"
        assert config.db_path == Path("/tmp/x.db")
        assert config.weights.title == 0.5

    @pytest.mark.parametrize("env", [
        {"JOBDEDUP_FUZZY_THRESHOLD": "high"},
        {"JOBDEDUP_GROUP_THRESHOLD": "1.2"},
        {"JOBDEDUP_MAX_WORKERS": "0"},
        {"JOBDEDUP_DESCRIPTION_TOKENS": "many"},
        {"JOBDEDUP_LOG_LEVEL": "LOUD"},
        {"JOBDEDUP_TITLE_WEIGHT": "0.9"},
    ])
    def test_invalid_values(self, env):
        with pytest.raises(ConfigurationError):
            DedupConfig.from_env(env)


class TestLoadEnv:

    def test_missing_file(self, tmp_path):
        assert load_env(tmp_path / ".env") is False

    def test_loads_file(self, tmp_path, monkeypatch):
        env_file = tmp_path / ".env"
        env_file.write_text("JOBDEDUP_TEST_VALUE=42\n")
        monkeypatch.delenv("JOBDEDUP_TEST_VALUE", raising=False)

        assert load_env(env_file) is True
        assert os.environ["JOBDEDUP_TEST_VALUE"] == "42"
        monkeypatch.delenv("JOBDEDUP_TEST_VALUE")
