"""Application settings — Pydantic-based configuration with YAML and env var support.

Configuration is loaded from (in order of precedence):
  1. YAML config file (if specified)
  2. Environment variables (INDEXABLE_ prefix)
  3. Default values

The core never reads configuration globally: a ``IndexableSettings`` instance
is passed to whatever builds the engine client and the model facades.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings


class ClientSettings(BaseModel):
    """Search engine connection options."""

    hosts: list[str] = Field(default_factory=lambda: ["http://localhost:9200"], description="Engine node URLs")
    username: str | None = Field(default=None, description="HTTP basic-auth username")
    password: str | None = Field(default=None, description="HTTP basic-auth password")
    api_key: str | None = Field(default=None, description="Encoded API key")
    verify_certs: bool = Field(default=True, description="Verify TLS certificates")
    request_timeout: float = Field(default=10.0, gt=0, description="Per-request timeout in seconds")
    extra: dict[str, Any] = Field(default_factory=dict, description="Extra client constructor options")

    @field_validator("hosts", mode="before")
    @classmethod
    def _parse_hosts(cls, v: Any) -> list[str]:
        """Parse hosts from JSON string (env var) or list."""
        if isinstance(v, str):
            import json

            try:
                parsed = json.loads(v)
                if isinstance(parsed, list):
                    return [str(h) for h in parsed]
            except (json.JSONDecodeError, TypeError):
                pass
            # Single host as plain string
            return [v] if v else []
        return list(v)


class ObservabilitySettings(BaseModel):
    """Observability configuration."""

    log_level: str = Field(default="info", description="Log level: debug, info, warning, error")
    log_format: str = Field(default="json", description="Log format: json, console")


class IndexableSettings(BaseSettings):
    """Root settings.

    Nested settings use double underscores:

    Example:
        INDEXABLE_DEFAULT_INDEX=catalog
        INDEXABLE_CLIENT__HOSTS='["http://es-1:9200", "http://es-2:9200"]'
        INDEXABLE_OBSERVABILITY__LOG_FORMAT=console
    """

    model_config = {
        "env_prefix": "INDEXABLE_",
        "env_nested_delimiter": "__",
        "case_sensitive": False,
        "env_file": ".env",
        "env_file_encoding": "utf-8",
    }

    default_index: str = Field(default="default", description="Index used by models that do not name one")
    client: ClientSettings = Field(default_factory=ClientSettings)
    observability: ObservabilitySettings = Field(default_factory=ObservabilitySettings)

    @classmethod
    def from_yaml(cls, path: str | Path) -> IndexableSettings:
        """Load settings from a YAML configuration file.

        Values from the YAML file are passed as init arguments, so they win
        over environment variables for the keys they set.

        Args:
            path: Path to the YAML config file.

        Returns:
            Populated IndexableSettings instance.
        """
        import yaml  # type: ignore[import-untyped]

        config_path = Path(path)
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")

        with open(config_path) as f:
            data = yaml.safe_load(f) or {}

        return cls(**data)
