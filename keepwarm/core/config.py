"""Configuration management for KeepWarm.

Loads configuration from environment variables and .env file.
Provides validation and sensible defaults.

Usage:
    from keepwarm.core.config import get_config, validate_config

    config = get_config()
    issues = validate_config(config)
    if issues:
        for issue in issues:
            print(f"Config issue: {issue}")
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from keepwarm.core.exceptions import ConfigurationError

# Claude model used for message drafting
CLAUDE_MODEL = "claude-sonnet-4-20250514"

# Default paths (defined once, used by both Config and load_config)
DEFAULT_DB_PATH = Path.home() / ".keepwarm" / "keepwarm.db"
DEFAULT_LOG_PATH = Path.home() / ".keepwarm" / "logs"

DEFAULT_OWNER_ID = "default"
DEFAULT_GENERATION_TIMEOUT = 15.0
DEFAULT_DAILY_CAPACITY = 8
DEFAULT_COUNTRY_CODE = "1"


@dataclass
class Config:
    """Application configuration.

    Attributes:
        db_path: Path to SQLite database file
        log_path: Directory for log files
        owner_id: Person whose network is being managed
        claude_api_key: Anthropic Claude API key (enables generative drafts)
        claude_model: Claude model used for drafting
        generation_timeout: Seconds before a drafting call is abandoned
        daily_capacity: Outreach the owner aims to handle per day
        default_country_code: Calling code for phone numbers typed without one
        debug: Enable debug mode
    """

    db_path: Path = field(default_factory=lambda: DEFAULT_DB_PATH)
    log_path: Path = field(default_factory=lambda: DEFAULT_LOG_PATH)
    owner_id: str = DEFAULT_OWNER_ID

    claude_api_key: Optional[str] = None
    claude_model: str = CLAUDE_MODEL
    generation_timeout: float = DEFAULT_GENERATION_TIMEOUT

    daily_capacity: int = DEFAULT_DAILY_CAPACITY
    default_country_code: str = DEFAULT_COUNTRY_CODE

    debug: bool = False


def load_env_file(path: Path) -> dict[str, str]:
    """Parse .env file.

    Handles:
        - KEY=VALUE format
        - Comments (lines starting with #)
        - Blank lines
        - Quoted values

    Args:
        path: Path to .env file

    Returns:
        Dictionary of environment variables
    """
    env_vars: dict[str, str] = {}

    if not path.exists():
        return env_vars

    with open(path, "r", encoding="utf-8") as f:
        for line in f:
            line = line.strip()

            if not line or line.startswith("#"):
                continue

            if "=" in line:
                key, _, value = line.partition("=")
                key = key.strip()
                value = value.strip()

                if value and value[0] in ('"', "'") and value[-1] == value[0]:
                    value = value[1:-1]

                if key:
                    env_vars[key] = value

    return env_vars


def _get_path(key: str, default: Path, env_vars: dict[str, str]) -> Path:
    """Get path from environment, expanding ~ and resolving."""
    value = os.environ.get(key) or env_vars.get(key)
    if value:
        return Path(value).expanduser().resolve()
    return default


def _get_str(key: str, env_vars: dict[str, str]) -> Optional[str]:
    """Get string from environment."""
    return os.environ.get(key) or env_vars.get(key) or None


def _get_bool(key: str, default: bool, env_vars: dict[str, str]) -> bool:
    """Get boolean from environment."""
    value = os.environ.get(key) or env_vars.get(key)
    if value is None:
        return default
    return value.lower() in ("true", "1", "yes", "on")


def _get_int(key: str, default: int, env_vars: dict[str, str]) -> int:
    """Get integer from environment."""
    value = os.environ.get(key) or env_vars.get(key)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError as e:
        raise ConfigurationError(f"{key} must be an integer, got {value!r}") from e


def _get_float(key: str, default: float, env_vars: dict[str, str]) -> float:
    """Get float from environment."""
    value = os.environ.get(key) or env_vars.get(key)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError as e:
        raise ConfigurationError(f"{key} must be a number, got {value!r}") from e


def load_config(env_file: Optional[Path] = None) -> Config:
    """Load configuration from environment and .env file.

    Priority:
        1. Environment variables (highest)
        2. .env file
        3. Default values (lowest)

    Args:
        env_file: Path to .env file. Defaults to .env in current directory.

    Returns:
        Loaded configuration

    Raises:
        ConfigurationError: If a numeric setting cannot be parsed
    """
    if env_file is None:
        env_file = Path.cwd() / ".env"

    env_vars = load_env_file(env_file)

    return Config(
        db_path=_get_path("KEEPWARM_DB_PATH", DEFAULT_DB_PATH, env_vars),
        log_path=_get_path("KEEPWARM_LOG_PATH", DEFAULT_LOG_PATH, env_vars),
        owner_id=_get_str("KEEPWARM_OWNER_ID", env_vars) or DEFAULT_OWNER_ID,
        claude_api_key=_get_str("CLAUDE_API_KEY", env_vars),
        claude_model=_get_str("KEEPWARM_CLAUDE_MODEL", env_vars) or CLAUDE_MODEL,
        generation_timeout=_get_float(
            "KEEPWARM_GENERATION_TIMEOUT", DEFAULT_GENERATION_TIMEOUT, env_vars
        ),
        daily_capacity=_get_int("KEEPWARM_DAILY_CAPACITY", DEFAULT_DAILY_CAPACITY, env_vars),
        default_country_code=(
            _get_str("KEEPWARM_DEFAULT_COUNTRY_CODE", env_vars) or DEFAULT_COUNTRY_CODE
        ).lstrip("+"),
        debug=_get_bool("KEEPWARM_DEBUG", False, env_vars),
    )


def validate_config(config: Config) -> list[str]:
    """Validate configuration.

    Checks:
        - Database and log directories exist or can be created
        - Directories are writable
        - Numeric settings are in range

    Args:
        config: Configuration to validate

    Returns:
        List of issues (empty if valid)
    """
    issues: list[str] = []

    db_dir = config.db_path.parent
    try:
        db_dir.mkdir(parents=True, exist_ok=True)
        if not os.access(db_dir, os.W_OK):
            issues.append(f"Database directory not writable: {db_dir}")
    except OSError as e:
        issues.append(f"Cannot create database directory {db_dir}: {e}")

    try:
        config.log_path.mkdir(parents=True, exist_ok=True)
        if not os.access(config.log_path, os.W_OK):
            issues.append(f"Log directory not writable: {config.log_path}")
    except OSError as e:
        issues.append(f"Cannot create log directory {config.log_path}: {e}")

    if config.generation_timeout <= 0:
        issues.append(
            f"CRITICAL: KEEPWARM_GENERATION_TIMEOUT must be positive, "
            f"got {config.generation_timeout}"
        )

    if config.daily_capacity < 1:
        issues.append(
            f"KEEPWARM_DAILY_CAPACITY should be at least 1, got {config.daily_capacity}"
        )

    if not config.default_country_code.isdigit():
        issues.append(
            f"KEEPWARM_DEFAULT_COUNTRY_CODE must be digits, got {config.default_country_code!r}"
        )

    if not config.owner_id.strip():
        issues.append("CRITICAL: KEEPWARM_OWNER_ID is blank")

    if not config.claude_api_key:
        issues.append("CLAUDE_API_KEY not set - message suggestions will use templates only")

    return issues


# Singleton config
_config: Optional[Config] = None


def get_config() -> Config:
    """Return cached configuration singleton.

    Loads configuration on first call, returns cached version thereafter.

    Returns:
        Application configuration
    """
    global _config
    if _config is None:
        _config = load_config()
    return _config


def reset_config() -> None:
    """Reset cached configuration.

    Used primarily for testing.
    """
    global _config
    _config = None
