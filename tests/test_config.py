"""
Unit tests for configuration module.

Tests configuration loading, global option overrides, and validation.
"""

import logging
import os
from unittest.mock import patch

from config import Config


class TestConfig:
    """Test suite for Config class."""

    def test_default_configuration(self):
        """Test that default configuration values are set correctly."""
        with patch.dict(os.environ, {}, clear=True):
            config = Config()

            assert config.log_level == "INFO"
            assert config.log_file is None
            assert config.server_name == "aggregate-paginate-mcp-server"
            assert config.mongo_uri == "mongodb://localhost:27017"
            assert config.mongo_db == "app"
            assert config.default_limit is None
            assert config.allow_disk_use is None
            assert config.custom_labels == {}
            assert config.legacy_limit_fallback is False

    def test_global_options_empty_by_default(self):
        with patch.dict(os.environ, {}, clear=True):
            assert Config().global_options() == {}

    def test_global_options_from_env(self):
        env = {
            "AGGPAGINATE_DEFAULT_LIMIT": "25",
            "AGGPAGINATE_ALLOW_DISK_USE": "yes",
            "AGGPAGINATE_CUSTOM_LABELS": "docs=items, meta=paginator",
            "AGGPAGINATE_LEGACY_LIMIT_FALLBACK": "true",
        }
        with patch.dict(os.environ, env, clear=True):
            options = Config().global_options()

        assert options == {
            "limit": 25,
            "allowDiskUse": True,
            "customLabels": {"docs": "items", "meta": "paginator"},
            "legacyLimitFallback": True,
        }

    def test_allow_disk_use_false_is_an_override(self):
        with patch.dict(os.environ, {"AGGPAGINATE_ALLOW_DISK_USE": "false"}, clear=True):
            assert Config().global_options() == {"allowDiskUse": False}

    def test_invalid_default_limit_is_ignored(self):
        with patch.dict(os.environ, {"AGGPAGINATE_DEFAULT_LIMIT": "ten"}, clear=True):
            config = Config()

        assert config.default_limit is None

    def test_malformed_label_pairs_are_skipped(self):
        with patch.dict(os.environ, {"AGGPAGINATE_CUSTOM_LABELS": "docs,=x,page=,limit=perPage"}, clear=True):
            config = Config()

        assert config.custom_labels == {"limit": "perPage"}

    def test_log_level_from_env(self):
        with patch.dict(os.environ, {"AGGPAGINATE_LOG_LEVEL": "debug"}, clear=True):
            assert Config().log_level == "DEBUG"

    def test_log_file_relative(self):
        with patch.dict(os.environ, {"AGGPAGINATE_LOG_FILE": "logs/paginate.log"}, clear=True):
            config = Config()

        assert config.log_file.is_absolute()
        assert config.log_file.name == "paginate.log"

    def test_validate_warns_on_bad_uri_and_limit(self):
        env = {"AGGPAGINATE_MONGO_URI": "localhost:27017", "AGGPAGINATE_DEFAULT_LIMIT": "0"}
        with patch.dict(os.environ, env, clear=True):
            warnings = Config().validate()

        assert len(warnings) == 2

    def test_validate_clean(self):
        with patch.dict(os.environ, {}, clear=True):
            assert Config().validate() == []

    def test_setup_logging_with_file(self, tmp_path):
        log_file = tmp_path / "logs" / "paginate.log"
        root_logger = logging.getLogger()
        saved_handlers = list(root_logger.handlers)
        saved_level = root_logger.level
        try:
            with patch.dict(
                os.environ,
                {"AGGPAGINATE_LOG_FILE": str(log_file), "AGGPAGINATE_LOG_LEVEL": "WARNING"},
                clear=True,
            ):
                Config().setup_logging()

            assert root_logger.level == logging.WARNING
            assert len(root_logger.handlers) == 2
            assert log_file.parent.exists()
        finally:
            for handler in root_logger.handlers:
                handler.close()
            root_logger.handlers[:] = saved_handlers
            root_logger.setLevel(saved_level)
