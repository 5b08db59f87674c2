"""Provider factory for building resource providers from configuration."""

from typing import Dict, Type

import structlog

# Local application imports
from core.config import AppConfig, ProviderSpec
from core.errors import ConfigurationError
from core.registry import ResourceRegistry
from providers.base import ResourceProvider
from providers.exceptions import ProviderError
from providers.filesystem import DirectoryResourceProvider, PackageResourceProvider

log = structlog.get_logger(__name__)

class ProviderFactory:
    """
    Factory for creating resource providers from the application config.

    Each entry of ``config.providers`` names a provider and says how to build
    it; ``populate`` registers the built providers in configuration order.
    """
    def __init__(self, config: AppConfig):
        """
        Initializes the factory with application configuration.

        Args:
            config: The loaded AppConfig object.
        """
        self.config: AppConfig = config
        self._provider_map: Dict[str, Type[ResourceProvider]] = {
            "directory": DirectoryResourceProvider,
            "package": PackageResourceProvider,
        }

    def create(self, name: str, spec: ProviderSpec) -> ResourceProvider:
        """
        Builds the provider described by ``spec``.

        Args:
            name: The name the provider will be registered under (for messages).
            spec: The provider's configuration entry.

        Raises:
            ConfigurationError: If the provider type is unknown or the provider
                              cannot be built from its configuration.
        """
        provider_class = self._provider_map.get(spec.type)
        if not provider_class:
            log.error("Unsupported resource provider type", provider=name, provider_type=spec.type)
            raise ConfigurationError(f"Unsupported provider type '{spec.type}' for provider '{name}'")

        try:
            if provider_class is PackageResourceProvider:
                provider = PackageResourceProvider(spec.package, subdirectory=spec.subdirectory)
            else:
                provider = provider_class(spec.path)
        except ProviderError as e:
            log.error("Failed to build resource provider", provider=name, error=str(e))
            raise ConfigurationError(f"Failed to create provider '{name}': {e}") from e

        log.info("Built resource provider", provider=name, provider_type=spec.type)
        return provider

    def create_all(self) -> Dict[str, ResourceProvider]:
        return {name: self.create(name, spec) for name, spec in self.config.providers.items()}

    def populate(self, registry: ResourceRegistry) -> ResourceRegistry:
        """Builds every configured provider and registers it with ``registry``."""
        registry.add_providers(self.create_all())
        log.info("Resource providers registered", count=len(registry), providers=list(registry))
        return registry

    def build_registry(self) -> ResourceRegistry:
        """Creates a registry using the development settings from the config and populates it."""
        registry = ResourceRegistry(
            development_prefix=self.config.development.prefix,
            development_subpath=self.config.development.subpath,
        )
        return self.populate(registry)
