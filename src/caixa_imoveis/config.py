"""Configuration management."""

import os
from collections.abc import Mapping
from pathlib import Path

from pydantic import BaseModel, Field, SecretStr


class ConfigError(ValueError):
    """Required configuration is missing."""


class Timeouts(BaseModel):
    """Bounded wait configuration in milliseconds."""

    page_load_ms: int = 120_000
    selector_ms: int = 60_000
    wizard_ms: int = 120_000
    pagination_ms: int = 60_000


class Delays(BaseModel):
    """Fixed pauses in seconds, giving the host page's scripts time to react."""

    after_overlay_click: float = 0.4
    after_state_select: float = 1.0
    after_state_reselect: float = 0.8
    after_city_select: float = 1.5
    pagination_fallback: float = 2.5


def _env_value(environ: Mapping[str, str], key: str) -> str | None:
    value = environ.get(key)
    if value is None or not value.strip():
        return None
    return value.strip()


class Config(BaseModel):
    """Application configuration."""

    # Browser settings
    headless: bool = True
    browser_path: Path | None = Field(
        default=None,
        description="Optional browser executable (CHROME_PATH)"
    )
    user_agent: str = (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120 Safari/537.36"
    )
    viewport_width: int = 1366
    viewport_height: int = 768

    # Import endpoint settings (only required by the forwarder)
    import_endpoint: str | None = Field(
        default=None,
        description="Base URL of the WordPress site (WP_URL)"
    )
    import_token: SecretStr | None = Field(
        default=None,
        description="Bearer credential for the import endpoint (WP_TOKEN)"
    )

    # Crawl settings
    region: str = Field(default="RO", description="State (UF) to crawl")
    output_dir: Path = Field(default_factory=Path.cwd)
    request_delay_seconds: float = 1.5

    timeouts: Timeouts = Field(default_factory=Timeouts)
    delays: Delays = Field(default_factory=Delays)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "Config":
        """Build a Config from environment variables.

        Recognized: HEADLESS, CHROME_PATH, WP_URL, WP_TOKEN, CAIXA_REGION,
        CAIXA_OUTPUT_DIR. Only the literal "false" disables headless mode.
        """
        if environ is None:
            environ = os.environ

        values: dict = {}
        headless = _env_value(environ, "HEADLESS")
        if headless is not None:
            values["headless"] = headless.lower() != "false"

        browser_path = _env_value(environ, "CHROME_PATH")
        if browser_path:
            values["browser_path"] = Path(browser_path)

        endpoint = _env_value(environ, "WP_URL")
        if endpoint:
            values["import_endpoint"] = endpoint

        token = _env_value(environ, "WP_TOKEN")
        if token:
            values["import_token"] = SecretStr(token)

        region = _env_value(environ, "CAIXA_REGION")
        if region:
            values["region"] = region.upper()

        output_dir = _env_value(environ, "CAIXA_OUTPUT_DIR")
        if output_dir:
            values["output_dir"] = Path(output_dir)

        return cls(**values)

    def with_overrides(
        self,
        region: str | None = None,
        output_dir: Path | None = None,
        headless: bool | None = None,
    ) -> "Config":
        """Create a new Config with optional overrides.

        Only non-None values override the current settings.
        """
        update: dict = {}
        if region is not None:
            update["region"] = region.upper()
        if output_dir is not None:
            update["output_dir"] = output_dir
        if headless is not None:
            update["headless"] = headless
        return self.model_copy(update=update)

    def require_import_settings(self) -> tuple[str, str]:
        """Return (endpoint, token), raising ConfigError if either is unset."""
        missing = []
        if not self.import_endpoint:
            missing.append("WP_URL")
        if self.import_token is None or not self.import_token.get_secret_value():
            missing.append("WP_TOKEN")
        if missing:
            raise ConfigError(f"Missing required environment variables: {', '.join(missing)}")
        return self.import_endpoint.rstrip("/"), self.import_token.get_secret_value()

    @property
    def city_index_path(self) -> Path:
        return self.output_dir / f"urls_{self.region.lower()}_por_cidade.json"

    @property
    def properties_path(self) -> Path:
        return self.output_dir / f"imoveis_{self.region.lower()}_detalhes.xlsx"

    def ensure_dirs(self) -> None:
        """Ensure the output directory exists."""
        self.output_dir.mkdir(parents=True, exist_ok=True)
