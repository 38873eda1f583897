"""Pydantic settings loaded from YAML configuration."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, SecretStr

from bizdigest.core.types import Department, IntegrationMethod

_settings: Settings | None = None

_DEFAULT_CONFIG_PATH = Path("config/settings.yaml")


# ── Thresholds ──────────────────────────────────────────────────


class FinanceThresholds(BaseModel):
    """Alert and action boundaries for sales / margin metrics."""

    model_config = ConfigDict(frozen=True)

    revenue_drop_alert_percentage: float = 10.0
    margin_critical_percentage: float = 20.0
    margin_warning_percentage: float = 30.0
    aov_drop_alert_percentage: float = 10.0
    margin_action_percentage: float = 15.0


class OperationsThresholds(BaseModel):
    """Alert and action boundaries for stock, yield and dispatch metrics."""

    model_config = ConfigDict(frozen=True)

    stock_value_critical: float = 500_000.0
    stock_value_warning: float = 550_000.0
    yield_critical_percentage: float = 75.0
    yield_warning_percentage: float = 85.0
    waste_critical_percentage: float = 15.0
    waste_warning_percentage: float = 10.0
    dispatch_completion_warning: float = 90.0
    batch_yield_alert_percentage: float = 80.0
    yield_action_percentage: float = 80.0


class MarketingThresholds(BaseModel):
    """Alert and action boundaries for campaign metrics."""

    model_config = ConfigDict(frozen=True)

    open_rate_critical: float = 10.0
    open_rate_warning: float = 20.0
    click_rate_critical: float = 1.0
    click_rate_warning: float = 2.0
    high_performing_campaign_revenue: float = 1000.0
    open_rate_action_percentage: float = 15.0


class ThresholdConfig(BaseModel):
    """Per-domain threshold document. Read-only for a whole report run."""

    model_config = ConfigDict(frozen=True)

    finance: FinanceThresholds = FinanceThresholds()
    operations: OperationsThresholds = OperationsThresholds()
    marketing: MarketingThresholds = MarketingThresholds()


# ── Sources ─────────────────────────────────────────────────────


class ShopifyConfig(BaseModel):
    """Shopify Admin REST API configuration."""

    store_url: str = ""
    access_token: SecretStr = SecretStr("")
    api_version: str = "2024-01"
    page_limit: int = 250
    timeout_secs: float = 30.0


class OrderwiseConfig(BaseModel):
    """Orderwise stock / warehouse API configuration."""

    base_url: str = ""
    api_key: SecretStr = SecretStr("")
    username: str = ""
    password: SecretStr = SecretStr("")
    timeout_secs: float = 30.0


class ApteanConfig(BaseModel):
    """Aptean production system — REST API or CSV export."""

    integration_method: IntegrationMethod = IntegrationMethod.API
    api_url: str = ""
    api_key: SecretStr = SecretStr("")
    csv_export_path: str = ""
    csv_filename: str = "yields_export.csv"
    timeout_secs: float = 30.0


class KlaviyoConfig(BaseModel):
    """Klaviyo email campaign API configuration."""

    base_url: str = "https://a.klaviyo.com/api"
    private_key: SecretStr = SecretStr("")
    revision: str = "2024-02-15"
    timeout_secs: float = 30.0


class SourcesConfig(BaseModel):
    """Container for all source adapter configurations."""

    shopify: ShopifyConfig = ShopifyConfig()
    orderwise: OrderwiseConfig = OrderwiseConfig()
    aptean: ApteanConfig = ApteanConfig()
    klaviyo: KlaviyoConfig = KlaviyoConfig()


# ── Delivery / reporting ────────────────────────────────────────


class SlackConfig(BaseModel):
    """Slack incoming-webhook configuration."""

    enabled: bool = False
    webhook_url: SecretStr = SecretStr("")
    executive_channel: str = ""
    finance_channel: str = ""
    operations_channel: str = ""
    marketing_channel: str = ""

    def department_channels(self) -> dict[Department, str]:
        """Departments with a configured channel, in department order."""
        channels = {
            Department.FINANCE: self.finance_channel,
            Department.OPERATIONS: self.operations_channel,
            Department.MARKETING: self.marketing_channel,
        }
        return {dept: name for dept, name in channels.items() if name}


class AlertsConfig(BaseModel):
    """Notification channel configuration."""

    slack: SlackConfig = SlackConfig()
    # Each critical alert is also pushed as its own message.
    push_critical_alerts: bool = True


class ReportingConfig(BaseModel):
    """Report generation settings."""

    company_name: str = "Piper's Farm"
    timezone: str = "Europe/London"
    output_dir: str = "outputs"
    yield_window_days: int = 7


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = "INFO"
    format: str = "json"


class Settings(BaseModel):
    """Root settings container."""

    sources: SourcesConfig = SourcesConfig()
    thresholds: ThresholdConfig = ThresholdConfig()
    alerts: AlertsConfig = AlertsConfig()
    reporting: ReportingConfig = ReportingConfig()
    logging: LoggingConfig = LoggingConfig()


def _read_yaml(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    with open(path) as f:
        raw = yaml.safe_load(f)
    return raw if isinstance(raw, dict) else {}


def load_thresholds(path: str | Path) -> ThresholdConfig:
    """Load a standalone threshold document (YAML or JSON).

    A missing or empty file yields the default thresholds.
    """
    return ThresholdConfig(**_read_yaml(Path(path)))


def load_settings(path: str | Path | None = None) -> Settings:
    """Load settings from a YAML file and cache globally.

    Args:
        path: Path to YAML config. Defaults to config/settings.yaml.

    Returns:
        Parsed Settings instance.
    """
    global _settings  # noqa: PLW0603

    config_path = Path(path) if path else _DEFAULT_CONFIG_PATH
    _settings = Settings(**_read_yaml(config_path))
    return _settings


def get_settings() -> Settings:
    """Return the cached settings, loading defaults if not yet loaded."""
    global _settings  # noqa: PLW0603
    if _settings is None:
        _settings = load_settings()
    return _settings


def reset_settings() -> None:
    """Reset the cached settings (useful for testing)."""
    global _settings  # noqa: PLW0603
    _settings = None
