"""Pydantic configuration models with validation."""

from __future__ import annotations

from typing import Any, Literal, Optional

from pydantic import (
    AliasChoices,
    AliasPath,
    BaseModel,
    Field,
    field_validator,
    model_validator,
)
from pydantic_settings import BaseSettings, SettingsConfigDict

Environment = Literal["dev", "test", "prod"]
LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR"]
LogFormat = Literal["json", "console"]


class ResolverConfig(BaseModel):
    """Orchestrator limits (YAML section: resolver.*)."""

    deadline_seconds: float = Field(
        default=45.0,
        gt=0,
        description="Overall deadline for one resolution, all hops included.",
    )
    max_hops: int = Field(
        default=6,
        ge=1,
        description="Upper bound on fetched pages per resolution.",
    )
    max_concurrent_requests: int = Field(
        default=4,
        ge=1,
        description="Parallel resolutions allowed by resolve_many().",
    )
    default_provider: str = Field(
        default="vidsrc",
        description="Provider used when a request carries no hint.",
    )


class ValidatorConfig(BaseModel):
    """Stream URL plausibility thresholds (YAML section: validator.*)."""

    min_length: int = Field(default=20, ge=1)
    min_printable_ratio: float = Field(default=0.95, gt=0, le=1)
    excluded_host_prefixes: list[str] = Field(
        default_factory=lambda: ["app2.", "app3."],
        description="Stream hosts that never resolve; such URLs are dropped.",
    )


class ProviderSettings(BaseModel):
    """Per-provider settings (YAML section: providers.<name>.*)."""

    enabled: bool = True
    embed_base_url: str = Field(
        default="",
        description="Scheme and host of the provider's embed pages.",
    )
    player_host: Optional[str] = Field(
        default=None,
        description="Host serving the /rcp/ and /prorcp/ player pages.",
    )
    placeholder_domains: dict[str, str] = Field(
        default_factory=dict,
        description="Values substituted for {vN} placeholders in decoded URLs.",
    )
    decrypt_service_url: Optional[str] = Field(
        default=None,
        description="Remote decrypt endpoint tried after the local codecs.",
    )
    min_token_length: int = Field(default=16, ge=1)

    @field_validator("embed_base_url")
    @classmethod
    def _strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")


class AppConfig(BaseModel):
    """
    Canonical application configuration (validated, final).

    Note:
    - YAML is expected to be sectioned (http/rate_limit/logging/cache/...).
    - Environment variables are handled by EnvOverrides(BaseSettings) to allow strict
      precedence control (defaults < YAML < ENV < overrides) in load.py.
    """

    app_name: str = Field(default="streamtrail", description="Application name.")
    environment: Environment = Field(
        default="dev",
        description="Runtime environment (affects defaults like log format).",
    )

    # HTTP (YAML section: http.*)
    http_timeout_seconds: float = Field(
        default=15.0,
        validation_alias=AliasChoices(
            "http_timeout_seconds",
            AliasPath("http", "timeout_seconds"),
        ),
        description="Per-hop timeout in seconds.",
    )
    http_user_agent: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices(
            "http_user_agent",
            AliasPath("http", "user_agent"),
        ),
        description="User-Agent override for hop requests.",
    )
    http_max_connections: int = Field(
        default=20,
        validation_alias=AliasChoices(
            "http_max_connections",
            AliasPath("http", "max_connections"),
        ),
        description="httpx connection pool size.",
    )
    http_max_keepalive_connections: int = Field(
        default=10,
        validation_alias=AliasChoices(
            "http_max_keepalive_connections",
            AliasPath("http", "max_keepalive_connections"),
        ),
    )
    http_max_retries: int = Field(
        default=2,
        validation_alias=AliasChoices(
            "http_max_retries",
            AliasPath("http", "max_retries"),
        ),
        description="Retries on 429/503 inside the transport.",
    )
    http_backoff_base: float = Field(
        default=1.0,
        validation_alias=AliasChoices(
            "http_backoff_base",
            AliasPath("http", "backoff_base"),
        ),
    )

    # Rate limiting (YAML section: rate_limit.*)
    rate_limit_rps: float = Field(
        default=5.0,
        validation_alias=AliasChoices(
            "rate_limit_rps",
            AliasPath("rate_limit", "rps"),
        ),
        description="Requests per second per upstream host. 0 = unlimited.",
    )
    rate_limit_burst: int = Field(
        default=10,
        validation_alias=AliasChoices(
            "rate_limit_burst",
            AliasPath("rate_limit", "burst"),
        ),
    )
    rate_limit_adaptive: bool = Field(
        default=True,
        validation_alias=AliasChoices(
            "rate_limit_adaptive",
            AliasPath("rate_limit", "adaptive"),
        ),
    )

    # Logging (YAML section: logging.*)
    log_level: LogLevel = Field(
        default="INFO",
        validation_alias=AliasChoices(
            "log_level",
            AliasPath("logging", "level"),
        ),
        description="Log level.",
    )
    log_format: Optional[LogFormat] = Field(
        default=None,
        validation_alias=AliasChoices(
            "log_format",
            AliasPath("logging", "format"),
        ),
        description=(
            "Log renderer format (console/json). If unset, derived from environment."
        ),
    )

    # Remote decrypt result cache (YAML section: cache.*)
    cache_ttl_seconds: int = Field(
        default=600,
        validation_alias=AliasChoices(
            "cache_ttl_seconds",
            AliasPath("cache", "ttl_seconds"),
        ),
    )
    cache_max_size: int = Field(
        default=1024,
        validation_alias=AliasChoices(
            "cache_max_size",
            AliasPath("cache", "max_size"),
        ),
    )

    resolver: ResolverConfig = Field(default_factory=ResolverConfig)
    validator: ValidatorConfig = Field(default_factory=ValidatorConfig)
    providers: dict[str, ProviderSettings] = Field(default_factory=dict)

    @field_validator("http_timeout_seconds")
    @classmethod
    def _validate_http_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("http_timeout_seconds must be > 0")
        return v

    @field_validator("rate_limit_rps")
    @classmethod
    def _validate_rps(cls, v: float) -> float:
        if v < 0:
            raise ValueError("rate_limit_rps must be >= 0")
        return v

    @field_validator("cache_ttl_seconds")
    @classmethod
    def _validate_cache_ttl(cls, v: int) -> int:
        if v < 0:
            raise ValueError("cache_ttl_seconds must be >= 0")
        return v

    @model_validator(mode="after")
    def _derive_defaults(self) -> "AppConfig":
        # Default log format: console in dev/test, json in prod.
        if self.log_format is None:
            self.log_format = "json" if self.environment == "prod" else "console"
        return self

    def provider(self, name: str) -> ProviderSettings:
        """Settings for *name*, or defaults when the section is absent."""
        return self.providers.get(name) or ProviderSettings()

    def to_sectioned_dict(self) -> dict[str, Any]:
        """Dump configuration in the sectioned shape used by config.yaml."""
        return {
            "app_name": self.app_name,
            "environment": self.environment,
            "http": {
                "timeout_seconds": self.http_timeout_seconds,
                "user_agent": self.http_user_agent,
                "max_connections": self.http_max_connections,
                "max_keepalive_connections": self.http_max_keepalive_connections,
                "max_retries": self.http_max_retries,
                "backoff_base": self.http_backoff_base,
            },
            "rate_limit": {
                "rps": self.rate_limit_rps,
                "burst": self.rate_limit_burst,
                "adaptive": self.rate_limit_adaptive,
            },
            "logging": {"level": self.log_level, "format": self.log_format},
            "cache": {
                "ttl_seconds": self.cache_ttl_seconds,
                "max_size": self.cache_max_size,
            },
            "resolver": self.resolver.model_dump(),
            "validator": self.validator.model_dump(),
            "providers": {
                name: settings.model_dump() for name, settings in self.providers.items()
            },
        }


class EnvOverrides(BaseSettings):
    """
    Environment-variable overrides (all optional).

    load.py creates EnvOverrides() to read STREAMTRAIL_* variables, converts
    them to a dict of set values and merges that over YAML/defaults before
    validating AppConfig.

    Supported env var examples (flat, explicit):
    - STREAMTRAIL_HTTP_TIMEOUT_SECONDS
    - STREAMTRAIL_RATE_LIMIT_RPS
    - STREAMTRAIL_RESOLVER_DEADLINE_SECONDS
    - STREAMTRAIL_LOG_LEVEL
    """

    model_config = SettingsConfigDict(
        env_prefix="STREAMTRAIL_",
        extra="ignore",
        case_sensitive=False,
    )

    app_name: Optional[str] = None
    environment: Optional[Environment] = None

    http_timeout_seconds: Optional[float] = None
    http_user_agent: Optional[str] = None
    http_max_connections: Optional[int] = None
    http_max_retries: Optional[int] = None

    rate_limit_rps: Optional[float] = None
    rate_limit_burst: Optional[int] = None
    rate_limit_adaptive: Optional[bool] = None

    log_level: Optional[LogLevel] = None
    log_format: Optional[LogFormat] = None

    cache_ttl_seconds: Optional[int] = None

    resolver_deadline_seconds: Optional[float] = None
    resolver_max_hops: Optional[int] = None
    resolver_max_concurrent_requests: Optional[int] = None
    resolver_default_provider: Optional[str] = None

    def to_update_dict(self) -> dict[str, Any]:
        """Return only values that were actually provided (non-None)."""
        return self.model_dump(exclude_none=True)
