"""Configuration loading and validation for expense insights."""

import os
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Optional

import yaml

from expense_insights.models.category import CategoryRule, RuleTable
from expense_insights.utils.logging_config import get_logger

logger = get_logger(__name__)

DEFAULT_DATABASE_URL = "sqlite:///expenses.db"
DATABASE_URL_ENV = "DATABASE_URL"


class ConfigError(Exception):
    """Exception raised for configuration errors."""

    pass


@dataclass
class AnomalyConfig:
    """Configuration for anomaly detection.

    Attributes:
        multiplier: An expense is anomalous above multiplier x category average.
    """

    multiplier: Decimal = field(default_factory=lambda: Decimal("3"))

    @classmethod
    def from_dict(cls, data: dict[str, object]) -> "AnomalyConfig":
        """Create from dictionary."""
        multiplier = Decimal("3")
        if "multiplier" in data:
            try:
                multiplier = Decimal(str(data["multiplier"]))
            except InvalidOperation as e:
                raise ConfigError(f"anomaly.multiplier is not a number: {data['multiplier']!r}") from e
            if not multiplier.is_finite() or multiplier <= 0:
                raise ConfigError(f"anomaly.multiplier must be positive, got {multiplier}")
        return cls(multiplier=multiplier)


@dataclass
class DashboardConfig:
    """Configuration for the dashboard.

    Attributes:
        top_vendors: Number of top-spend vendors to report.
    """

    top_vendors: int = 5

    @classmethod
    def from_dict(cls, data: dict[str, object]) -> "DashboardConfig":
        """Create from dictionary."""
        top_vendors = int(data.get("top_vendors", 5))  # type: ignore[arg-type]
        if top_vendors < 1:
            raise ConfigError(f"dashboard.top_vendors must be at least 1, got {top_vendors}")
        return cls(top_vendors=top_vendors)


@dataclass
class StorageConfig:
    """Configuration for the storage backend.

    Attributes:
        database_url: SQLAlchemy database URL.
    """

    database_url: str = DEFAULT_DATABASE_URL

    @classmethod
    def from_dict(cls, data: dict[str, object]) -> "StorageConfig":
        """Create from dictionary."""
        return cls(database_url=str(data.get("database_url", DEFAULT_DATABASE_URL)))


@dataclass
class LoggingConfig:
    """Configuration for logging.

    Attributes:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        file: Path to log file.
    """

    level: str = "INFO"
    file: str = "expense_insights.log"

    @classmethod
    def from_dict(cls, data: dict[str, object]) -> "LoggingConfig":
        """Create from dictionary."""
        return cls(
            level=str(data.get("level", "INFO")),
            file=str(data.get("file", "expense_insights.log")),
        )


@dataclass
class Config:
    """Main configuration container.

    Attributes:
        anomaly: Anomaly detection configuration.
        dashboard: Dashboard configuration.
        storage: Storage backend configuration.
        logging: Logging configuration.
        rule_table: Vendor categorization rules, fixed for the process lifetime.
    """

    anomaly: AnomalyConfig = field(default_factory=AnomalyConfig)
    dashboard: DashboardConfig = field(default_factory=DashboardConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    rule_table: RuleTable = field(default_factory=RuleTable.default)


def load_yaml_file(path: Path) -> dict[str, object]:
    """Load a YAML file.

    Args:
        path: Path to the YAML file.

    Returns:
        Parsed YAML content.

    Raises:
        FileNotFoundError: If file doesn't exist.
        ConfigError: If the file is not valid YAML or not a mapping.
    """
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path, encoding="utf-8") as f:
        try:
            content = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if content is None:
        return {}
    if not isinstance(content, dict):
        raise ConfigError(f"{path} must contain a mapping, got {type(content).__name__}")
    return content


def _section(data: dict[str, object], name: str) -> dict[str, object]:
    section = data.get(name)
    if section is None:
        return {}
    if not isinstance(section, dict):
        raise ConfigError(f"'{name}' must be a mapping, got {type(section).__name__}")
    return section


def load_settings(path: Path) -> tuple[AnomalyConfig, DashboardConfig, StorageConfig, LoggingConfig]:
    """Load settings from settings.yaml.

    Args:
        path: Path to settings.yaml.

    Returns:
        Tuple of (AnomalyConfig, DashboardConfig, StorageConfig, LoggingConfig).
    """
    data = load_yaml_file(path)
    try:
        return (
            AnomalyConfig.from_dict(_section(data, "anomaly")),
            DashboardConfig.from_dict(_section(data, "dashboard")),
            StorageConfig.from_dict(_section(data, "storage")),
            LoggingConfig.from_dict(_section(data, "logging")),
        )
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid settings in {path}: {e}") from e


def load_rules(path: Path) -> RuleTable:
    """Load categorization rules from categories.yaml.

    Rules keep their order in the file; that order decides which category
    wins when several keywords appear in one vendor name.

    Args:
        path: Path to categories.yaml.

    Returns:
        RuleTable built from the file.
    """
    data = load_yaml_file(path)

    rule_list = data.get("rules")
    if rule_list is None:
        raise ConfigError(f"{path} has no 'rules' list")
    if not isinstance(rule_list, list):
        raise ConfigError(f"'rules' must be a list, got {type(rule_list).__name__}")

    rules: list[CategoryRule] = []
    for i, rule_data in enumerate(rule_list, 1):
        if not isinstance(rule_data, dict):
            raise ConfigError(f"Rule {i} in {path} must be a mapping")
        try:
            rules.append(CategoryRule.from_dict(rule_data))
        except (KeyError, ValueError) as e:
            raise ConfigError(f"Invalid rule {i} in {path}: {e}") from e

    return RuleTable(rules)


def load_config(
    settings_path: Optional[Path] = None,
    categories_path: Optional[Path] = None,
    config_dir: Optional[Path] = None,
) -> Config:
    """Load complete configuration.

    Missing files fall back to defaults. ``DATABASE_URL`` in the
    environment overrides ``storage.database_url``.

    Args:
        settings_path: Path to settings.yaml (or None to use default).
        categories_path: Path to categories.yaml (or None to use default).
        config_dir: Base config directory (default: ./config).

    Returns:
        Complete Config object.
    """
    if config_dir is None:
        config_dir = Path("config")

    if settings_path is None:
        settings_path = config_dir / "settings.yaml"
    if categories_path is None:
        categories_path = config_dir / "categories.yaml"

    config = Config()

    if settings_path.exists():
        config.anomaly, config.dashboard, config.storage, config.logging = load_settings(settings_path)
        logger.info(f"Loaded settings from {settings_path}")
    else:
        logger.debug(f"Settings file not found: {settings_path}, using defaults")

    if categories_path.exists():
        config.rule_table = load_rules(categories_path)
        logger.info(f"Loaded {len(config.rule_table)} rules from {categories_path}")
    else:
        logger.debug(f"Categories file not found: {categories_path}, using built-in rules")

    env_url = os.environ.get(DATABASE_URL_ENV)
    if env_url:
        config.storage.database_url = env_url

    return config
