"""Package for Concrete Implementations of BlogApp stores"""

import collections.abc
import importlib
import logging
import threading

from blogapp.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


DATABASE_PROVIDERS = {
    "memory": "blogapp.adapters.memory.MemoryProvider",
    "sqlite": "blogapp.adapters.sqlalchemy.SqliteProvider",
    "postgresql": "blogapp.adapters.sqlalchemy.PostgresqlProvider",
}


class Providers(collections.abc.Mapping):
    """Lazily constructed providers, one per configured database"""

    def __init__(self, domain):
        self.domain = domain
        self._providers = None
        self._lock = threading.Lock()

    def __getitem__(self, key):
        providers = self._initialize()
        try:
            return providers[key]
        except KeyError:
            raise ConfigurationError(f"No Provider registered with name {key}")

    def __iter__(self):
        return iter(self._initialize())

    def __len__(self):
        return len(self._initialize())

    def _initialize(self):
        """Read config and initialize providers, once across threads"""
        providers = self._providers
        if providers is None:
            with self._lock:
                if self._providers is None:
                    self._providers = self._build_providers()
                providers = self._providers

        return providers

    def _build_providers(self):
        configured_providers = self.domain.config["databases"]
        provider_objects = {}

        if not isinstance(configured_providers, dict) or (
            "default" not in configured_providers
        ):
            raise ConfigurationError("You must define a 'default' provider")

        for provider_name, conn_info in configured_providers.items():
            try:
                provider_full_path = DATABASE_PROVIDERS[conn_info["provider"]]
            except KeyError:
                raise ConfigurationError(
                    f"Unknown database provider `{conn_info.get('provider')}` "
                    f"for database `{provider_name}`"
                )

            provider_module, provider_class = provider_full_path.rsplit(
                ".", maxsplit=1
            )
            provider_cls = getattr(
                importlib.import_module(provider_module), provider_class
            )
            provider = provider_cls(provider_name, self.domain, conn_info)

            # Initialize a connection to check if everything is ok
            if not provider.is_alive():
                raise ConfigurationError(
                    f"Could not connect to database at {conn_info.get('database_uri')}"
                )

            logger.debug(f"Initialized provider `{provider_name}` ({provider_cls.__name__})")
            provider_objects[provider_name] = provider

        return provider_objects

    def reset(self):
        """Discard constructed providers, so that they are rebuilt from config on next use"""
        with self._lock:
            self._providers = None
