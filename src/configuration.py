"""Configuration loader."""

import logging
from typing import Any, Optional

import yaml
from models.config import (
    AuthenticationConfiguration,
    Configuration,
    QuotaConfiguration,
    ServiceConfiguration,
    UpstreamConfiguration,
    UserStoreConfiguration,
)

from quota.admission import AdmissionController
from quota.in_memory_quota_ledger import InMemoryQuotaLedger
from quota.user_quota_ledger import UserQuotaLedger
from user_store.user_store import UserStore
from user_store.user_store_factory import UserStoreFactory


logger = logging.getLogger(__name__)


class LogicError(Exception):
    """Error in application logic."""


class AppConfig:
    """Singleton class to load and store the configuration."""

    _instance = None

    def __new__(cls, *args: Any, **kwargs: Any) -> "AppConfig":
        """Create a new instance of the class."""
        if not isinstance(cls._instance, cls):
            cls._instance = super().__new__(cls, *args, **kwargs)
        return cls._instance

    def __init__(self) -> None:
        """Initialize the class instance."""
        self._configuration: Optional[Configuration] = None
        self._user_store: Optional[UserStore] = None
        self._admission_controller: Optional[AdmissionController] = None

    def load_configuration(self, filename: str) -> None:
        """Load configuration from YAML file."""
        with open(filename, encoding="utf-8") as fin:
            config_dict = yaml.safe_load(fin)
            logger.info("Loaded configuration from %s", filename)
            self.init_from_dict(config_dict)

    def init_from_dict(self, config_dict: dict[Any, Any]) -> None:
        """Initialize configuration from a dictionary.

        Runtime objects built from previous configuration are dropped.
        """
        self._configuration = Configuration(**config_dict)
        self._user_store = None
        self._admission_controller = None

    def is_loaded(self) -> bool:
        """Check whether configuration has been loaded."""
        return self._configuration is not None

    @property
    def configuration(self) -> Configuration:
        """Return the whole configuration."""
        if self._configuration is None:
            raise LogicError("logic error: configuration is not loaded")
        return self._configuration

    @property
    def service_configuration(self) -> ServiceConfiguration:
        """Return service configuration."""
        if self._configuration is None:
            raise LogicError("logic error: configuration is not loaded")
        return self._configuration.service

    @property
    def upstream_configuration(self) -> UpstreamConfiguration:
        """Return upstream completion API configuration."""
        if self._configuration is None:
            raise LogicError("logic error: configuration is not loaded")
        return self._configuration.upstream

    @property
    def quota_configuration(self) -> QuotaConfiguration:
        """Return quota configuration."""
        if self._configuration is None:
            raise LogicError("logic error: configuration is not loaded")
        return self._configuration.quota

    @property
    def user_store_configuration(self) -> UserStoreConfiguration:
        """Return user store configuration."""
        if self._configuration is None:
            raise LogicError("logic error: configuration is not loaded")
        return self._configuration.user_store

    @property
    def authentication_configuration(self) -> AuthenticationConfiguration:
        """Return authentication configuration."""
        if self._configuration is None:
            raise LogicError("logic error: configuration is not loaded")

        return self._configuration.authentication

    @property
    def user_store(self) -> UserStore:
        """Return the user store, it is created on first access."""
        if self._configuration is None:
            raise LogicError("logic error: configuration is not loaded")
        if self._user_store is None:
            self._user_store = UserStoreFactory.user_store(
                self._configuration.user_store
            )
        return self._user_store

    @property
    def admission_controller(self) -> AdmissionController:
        """Return the admission controller, it is created on first access.

        The anonymous ledger lives as long as the admission controller, so
        anonymous quota is tracked per process.
        """
        if self._configuration is None:
            raise LogicError("logic error: configuration is not loaded")
        if self._admission_controller is None:
            self._admission_controller = AdmissionController(
                self._configuration.quota,
                user_ledger=UserQuotaLedger(self.user_store),
                anonymous_ledger=InMemoryQuotaLedger(),
            )
        return self._admission_controller


configuration: AppConfig = AppConfig()
