"""Model with service configuration."""

import os
from typing import Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    model_validator,
    FilePath,
    AnyHttpUrl,
    PositiveInt,
    PositiveFloat,
    NonNegativeInt,
    SecretStr,
)

from typing_extensions import Self, Literal

import constants


class ConfigurationBase(BaseModel):
    """Base class for all configuration models that rejects unknown fields."""

    model_config = ConfigDict(extra="forbid")


class TLSConfiguration(ConfigurationBase):
    """TLS configuration."""

    tls_certificate_path: Optional[FilePath] = None
    tls_key_path: Optional[FilePath] = None
    tls_key_password: Optional[FilePath] = None

    @model_validator(mode="after")
    def check_tls_configuration(self) -> Self:
        """Check TLS configuration."""
        if (self.tls_certificate_path is None) != (self.tls_key_path is None):
            raise ValueError(
                "Both tls_certificate_path and tls_key_path must be set to enable TLS"
            )
        return self


class CORSConfiguration(ConfigurationBase):
    """CORS configuration."""

    allow_origins: list[str] = [
        "*"
    ]  # not AnyHttpUrl: we need to support "*" that is not valid URL
    allow_credentials: bool = False
    allow_methods: list[str] = ["*"]
    allow_headers: list[str] = ["*"]

    @model_validator(mode="after")
    def check_cors_configuration(self) -> Self:
        """Check CORS configuration."""
        # credentials are not allowed with wildcard origins per CORS/Fetch spec.
        # see https://fastapi.tiangolo.com/tutorial/cors/
        if self.allow_credentials and "*" in self.allow_origins:
            raise ValueError(
                "Invalid CORS configuration: allow_credentials can not be set to true when "
                "allow origins contains '*' wildcard."
                "Use explicit origins or disable credential."
            )
        return self


class SQLiteDatabaseConfiguration(ConfigurationBase):
    """SQLite database configuration."""

    db_path: str


class PostgreSQLDatabaseConfiguration(ConfigurationBase):
    """PostgreSQL database configuration."""

    host: str = "localhost"
    port: PositiveInt = 5432
    db: str
    user: str
    password: SecretStr
    ssl_mode: str = constants.POSTGRES_DEFAULT_SSL_MODE
    gss_encmode: str = constants.POSTGRES_DEFAULT_GSS_ENCMODE
    ca_cert_path: Optional[FilePath] = None

    @model_validator(mode="after")
    def check_postgres_configuration(self) -> Self:
        """Check PostgreSQL configuration."""
        if self.port > 65535:
            raise ValueError("Port value should be less than 65536")
        return self


class ServiceConfiguration(ConfigurationBase):
    """Service configuration."""

    host: str = "localhost"
    port: PositiveInt = 8080
    workers: PositiveInt = 1
    color_log: bool = True
    access_log: bool = True
    trust_forwarded_for: bool = True
    tls_config: TLSConfiguration = Field(default_factory=TLSConfiguration)
    cors: CORSConfiguration = Field(default_factory=CORSConfiguration)

    @model_validator(mode="after")
    def check_service_configuration(self) -> Self:
        """Check service configuration."""
        if self.port > 65535:
            raise ValueError("Port value should be less than 65536")
        return self


class UpstreamConfiguration(ConfigurationBase):
    """Upstream completion API configuration.

    The API key can be specified directly or read from the environment
    variable named by `api_key_env`.
    """

    url: AnyHttpUrl = Field(
        default=constants.DEFAULT_UPSTREAM_URL, validate_default=True
    )
    api_key: Optional[SecretStr] = None
    api_key_env: str = constants.DEFAULT_UPSTREAM_API_KEY_ENV
    model: str = constants.DEFAULT_UPSTREAM_MODEL
    max_tokens: PositiveInt = constants.DEFAULT_MAX_OUTPUT_TOKENS
    connect_timeout: PositiveFloat = constants.DEFAULT_UPSTREAM_CONNECT_TIMEOUT
    read_timeout: PositiveFloat = constants.DEFAULT_UPSTREAM_READ_TIMEOUT

    def resolved_api_key(self) -> Optional[str]:
        """Return the API key from configuration or from environment."""
        if self.api_key is not None and self.api_key.get_secret_value():
            return self.api_key.get_secret_value()
        return os.environ.get(self.api_key_env) or None

    @property
    def api_key_configured(self) -> bool:
        """Check whether upstream credential is available."""
        return self.resolved_api_key() is not None


class QuotaConfiguration(ConfigurationBase):
    """Daily request limits for plan tiers and anonymous callers."""

    anonymous_requests_per_day: NonNegativeInt = (
        constants.DEFAULT_ANONYMOUS_REQUESTS_PER_DAY
    )
    plans: dict[str, NonNegativeInt] = Field(
        default_factory=lambda: dict(constants.DEFAULT_PLAN_LIMITS)
    )
    default_plan: str = constants.DEFAULT_PLAN

    @model_validator(mode="after")
    def check_default_plan(self) -> Self:
        """Check that the default plan has a configured limit."""
        if self.default_plan not in self.plans:
            raise ValueError(
                f"Default plan '{self.default_plan}' is not listed in plans"
            )
        return self

    def requests_per_day(self, plan: Optional[str]) -> int:
        """Return daily request limit for given plan, default plan if unknown."""
        if plan is not None and plan in self.plans:
            return self.plans[plan]
        return self.plans[self.default_plan]


class UserStoreConfiguration(ConfigurationBase):
    """User store configuration."""

    type: Literal["memory", "sqlite", "postgres"] = constants.USER_STORE_TYPE_MEMORY
    sqlite: Optional[SQLiteDatabaseConfiguration] = None
    postgres: Optional[PostgreSQLDatabaseConfiguration] = None

    @model_validator(mode="after")
    def check_user_store_configuration(self) -> Self:
        """Check user store configuration."""
        match self.type:
            case constants.USER_STORE_TYPE_MEMORY:
                if any([self.sqlite, self.postgres]):
                    raise ValueError(
                        "Database configuration must not be provided for memory user store"
                    )
            case constants.USER_STORE_TYPE_SQLITE:
                if self.sqlite is None:
                    raise ValueError("SQLite user store is selected, but not configured")
                if self.postgres is not None:
                    raise ValueError("Only SQLite user store config must be provided")
            case constants.USER_STORE_TYPE_POSTGRES:
                if self.postgres is None:
                    raise ValueError(
                        "PostgreSQL user store is selected, but not configured"
                    )
                if self.sqlite is not None:
                    raise ValueError(
                        "Only PostgreSQL user store config must be provided"
                    )
        return self


class JwtCookieConfiguration(ConfigurationBase):
    """Configuration for session JWT passed in a cookie."""

    secret: SecretStr
    cookie_name: str = constants.DEFAULT_SESSION_COOKIE_NAME
    user_id_claim: str = constants.DEFAULT_JWT_UID_CLAIM
    algorithm: str = constants.DEFAULT_JWT_ALGORITHM


class AuthenticationConfiguration(ConfigurationBase):
    """Authentication configuration."""

    module: str = constants.DEFAULT_AUTHENTICATION_MODULE
    jwt_cookie_config: Optional[JwtCookieConfiguration] = None

    @model_validator(mode="after")
    def check_authentication_model(self) -> Self:
        """Validate YAML containing authentication configuration section."""
        if self.module not in constants.SUPPORTED_AUTHENTICATION_MODULES:
            supported_modules = ", ".join(
                sorted(constants.SUPPORTED_AUTHENTICATION_MODULES)
            )
            raise ValueError(
                f"Unsupported authentication module '{self.module}'. "
                f"Supported modules: {supported_modules}"
            )

        if self.module == constants.AUTH_MOD_JWT_COOKIE:
            if self.jwt_cookie_config is None:
                raise ValueError(
                    "JWT cookie configuration must be specified when using "
                    "JWT cookie authentication"
                )

        return self

    @property
    def jwt_cookie_configuration(self) -> JwtCookieConfiguration:
        """Return JWT cookie configuration if the module is JWT cookie."""
        if self.module != constants.AUTH_MOD_JWT_COOKIE:
            raise ValueError(
                "JWT cookie configuration is only available for JWT cookie "
                "authentication module"
            )
        if self.jwt_cookie_config is None:
            raise ValueError("JWT cookie configuration should not be None")
        return self.jwt_cookie_config


class Configuration(ConfigurationBase):
    """Global service configuration."""

    name: str
    service: ServiceConfiguration = Field(default_factory=ServiceConfiguration)
    upstream: UpstreamConfiguration = Field(default_factory=UpstreamConfiguration)
    quota: QuotaConfiguration = Field(default_factory=QuotaConfiguration)
    user_store: UserStoreConfiguration = Field(default_factory=UserStoreConfiguration)
    authentication: AuthenticationConfiguration = Field(
        default_factory=AuthenticationConfiguration
    )

    def dump(self, filename: str = "configuration.json") -> None:
        """Dump actual configuration into JSON file."""
        with open(filename, "w", encoding="utf-8") as fout:
            fout.write(self.model_dump_json(indent=4))
