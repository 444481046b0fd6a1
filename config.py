"""
Configuration module for aggregate-paginate.

Provides centralized configuration management with support for:
- Environment variables
- Default values
- Global pagination option overrides
- Logging configuration
"""

import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

from dotenv import load_dotenv

# Load environment variables from .env file at project root
_env_path = Path(__file__).resolve().parent / ".env"
load_dotenv(dotenv_path=_env_path)


def _parse_bool(env_var: str, default: bool) -> bool:
    """Parse a boolean value from an environment variable."""
    value = os.getenv(env_var)
    if value is None:
        return default
    return value.lower() in ("true", "1", "t", "y", "yes")


def _parse_optional_bool(env_var: str) -> Optional[bool]:
    """Parse a boolean that is only meaningful when set."""
    value = os.getenv(env_var)
    if value is None or not value.strip():
        return None
    return _parse_bool(env_var, False)


def _parse_optional_int(env_var: str) -> Optional[int]:
    """Parse an integer that is only meaningful when set; junk counts as unset."""
    value = os.getenv(env_var)
    if value is None or not value.strip():
        return None
    try:
        return int(value.strip())
    except ValueError:
        return None


def _parse_label_map(env_var: str) -> Dict[str, str]:
    """Parse ``name=key`` pairs separated by commas, e.g. ``docs=items,meta=paginator``."""
    value = os.getenv(env_var)
    if value is None or not value.strip():
        return {}
    labels = {}
    for item in value.split(","):
        name, sep, key = item.partition("=")
        if sep and name.strip() and key.strip():
            labels[name.strip()] = key.strip()
    return labels


class Config:
    """
    Configuration class for aggregate-paginate settings.

    Supports configuration via environment variables (and .env file) with sensible defaults.
    Relative paths are resolved against the repository root.
    """

    def __init__(self):
        """Initialize configuration from environment variables and defaults."""
        # Repository root detection
        self._repo_root = Path(__file__).resolve().parent

        # Logging configuration
        self.log_level = os.getenv("AGGPAGINATE_LOG_LEVEL", "INFO").upper()
        self.log_file = self._resolve_log_path()

        # Server configuration
        self.server_name = os.getenv("AGGPAGINATE_SERVER_NAME", "aggregate-paginate-mcp-server")
        self.mongo_uri = os.getenv("AGGPAGINATE_MONGO_URI", "mongodb://localhost:27017")
        self.mongo_db = os.getenv("AGGPAGINATE_MONGO_DB", "app")

        # Global pagination overrides (unset means "use the built-in default")
        self.default_limit = _parse_optional_int("AGGPAGINATE_DEFAULT_LIMIT")
        self.allow_disk_use = _parse_optional_bool("AGGPAGINATE_ALLOW_DISK_USE")
        self.custom_labels = _parse_label_map("AGGPAGINATE_CUSTOM_LABELS")
        self.legacy_limit_fallback = _parse_bool("AGGPAGINATE_LEGACY_LIMIT_FALLBACK", False)

    def _resolve_log_path(self) -> Optional[Path]:
        """
        Resolve the log file path from environment.

        If AGGPAGINATE_LOG_FILE is set, logs will be written to that file.
        Otherwise, logs go to stderr only.

        Returns:
            Path to log file, or None for stderr-only logging
        """
        log_env = os.getenv("AGGPAGINATE_LOG_FILE")
        if not log_env:
            return None

        log_path = Path(log_env)
        if log_path.is_absolute():
            return log_path
        else:
            # Relative to repo root
            return self._repo_root / log_path

    def global_options(self) -> Dict[str, Any]:
        """
        Build the global pagination override layer from configuration.

        Only settings that were explicitly configured appear, so unset
        variables never mask the built-in defaults.

        Returns:
            Options mapping suitable for ``set_global_options``
        """
        options: Dict[str, Any] = {}
        if self.default_limit is not None:
            options["limit"] = self.default_limit
        if self.allow_disk_use is not None:
            options["allowDiskUse"] = self.allow_disk_use
        if self.custom_labels:
            options["customLabels"] = dict(self.custom_labels)
        if self.legacy_limit_fallback:
            options["legacyLimitFallback"] = True
        return options

    def setup_logging(self):
        """
        Configure logging based on configuration settings.

        Sets up logging to stderr and optionally to a file.
        Log level is controlled by AGGPAGINATE_LOG_LEVEL.
        """
        # Parse log level
        numeric_level = getattr(logging, self.log_level, logging.INFO)

        # Create formatter
        formatter = logging.Formatter(
            fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s", datefmt="%Y-%m-%d %H:%M:%S"
        )

        # Configure root logger
        root_logger = logging.getLogger()
        root_logger.setLevel(numeric_level)

        # Remove existing handlers to avoid duplicates
        root_logger.handlers.clear()

        # Always add stderr handler
        stderr_handler = logging.StreamHandler()
        stderr_handler.setLevel(numeric_level)
        stderr_handler.setFormatter(formatter)
        root_logger.addHandler(stderr_handler)

        # Add file handler if log file is configured
        if self.log_file:
            # Ensure log directory exists
            self.log_file.parent.mkdir(parents=True, exist_ok=True)

            file_handler = logging.FileHandler(self.log_file)
            file_handler.setLevel(numeric_level)
            file_handler.setFormatter(formatter)
            root_logger.addHandler(file_handler)

            logging.info(f"Logging to file: {self.log_file}")

        logging.info(f"Log level set to: {self.log_level}")
        logging.info(f"MongoDB database: {self.mongo_db}")

    def validate(self) -> list[str]:
        """
        Validate configuration and return any warnings.

        Returns:
            List of warning messages (empty if all valid)
        """
        warnings = []

        if self.default_limit is not None and self.default_limit <= 0:
            warnings.append(
                f"AGGPAGINATE_DEFAULT_LIMIT={self.default_limit} is not positive; "
                "calls without a limit will use the fallback limit."
            )

        if not self.mongo_uri.startswith(("mongodb://", "mongodb+srv://")):
            warnings.append("AGGPAGINATE_MONGO_URI does not look like a MongoDB connection string.")

        # Check if log file directory is writable (if configured)
        if self.log_file:
            log_dir = self.log_file.parent
            if not log_dir.exists():
                try:
                    log_dir.mkdir(parents=True, exist_ok=True)
                except OSError as e:
                    warnings.append(f"Cannot create log directory {log_dir}: {e}")
            elif not os.access(log_dir, os.W_OK):
                warnings.append(f"Log directory not writable: {log_dir}")

        return warnings


# Global configuration instance
config = Config()


def get_config() -> Config:
    """
    Get the global configuration instance.

    Returns:
        Global Config instance
    """
    return config
