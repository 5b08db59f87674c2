import os
import time
from pathlib import Path
from types import MappingProxyType
from typing import Dict, Iterator, Mapping, Optional

import structlog

from providers.base import ResourceProvider
from providers.exceptions import ProviderError
from .errors import ProviderNotFound
from .metrics import UNKNOWN_PROVIDER, record_development_override, record_lookup, set_registered_providers

log = structlog.get_logger(__name__)

DEFAULT_DEVELOPMENT_PREFIX = "uiFramework.development"
DEFAULT_DEVELOPMENT_SUBPATH = "omod/src/main/webapp/resources"


class ResourceRegistry:
    """
    Registry of named resource providers.

    Providers are kept in registration order; an unscoped lookup asks each one
    in turn and returns the first file found. Build one registry at startup
    and hand it to whatever needs to resolve resources.
    """

    def __init__(
        self,
        properties: Optional[Mapping[str, str]] = None,
        development_prefix: str = DEFAULT_DEVELOPMENT_PREFIX,
        development_subpath: str = DEFAULT_DEVELOPMENT_SUBPATH,
    ):
        """
        Args:
            properties: Lookup consulted for development flags at registration
                        time. Defaults to the process environment.
            development_prefix: A provider registered as ``name`` is switched
                                to development mode when ``<prefix>.<name>`` is set.
            development_subpath: Appended to the flag's value to find the
                                 resource folder inside the working copy.
        """
        self._providers: Dict[str, ResourceProvider] = {}
        self._properties = properties if properties is not None else os.environ
        self.development_prefix = development_prefix
        self.development_subpath = development_subpath

    def register(self, name: str, provider: ResourceProvider) -> None:
        """
        Register ``provider`` under ``name``, replacing any earlier entry.

        If a development flag exists for ``name``, the provider's development
        root is pointed at the working copy before it is stored. Failures to
        do so are logged and the provider is registered unchanged.
        """
        self._check_name(name)
        self._apply_development_root(name, provider)

        if name in self._providers:
            log.info("Replacing resource provider", provider=name)
        self._providers[name] = provider
        set_registered_providers(len(self._providers))
        log.debug("Registered resource provider", provider=name, provider_type=type(provider).__name__)

    def add_providers(self, additional: Mapping[str, ResourceProvider]) -> None:
        """Register every entry of ``additional`` on top of the existing providers."""
        for name, provider in additional.items():
            self.register(name, provider)

    def set_providers(self, providers: Mapping[str, ResourceProvider]) -> None:
        """Replace all registered providers with ``providers``."""
        for name in providers:
            self._check_name(name)
        # clear in place so views from list_providers() stay live
        self._providers.clear()
        self.add_providers(providers)
        set_registered_providers(len(self._providers))

    @staticmethod
    def _check_name(name: str) -> None:
        if not isinstance(name, str) or not name:
            raise ValueError("Resource provider name must be a non-empty string")

    def get(self, name: str) -> ResourceProvider:
        try:
            return self._providers[name]
        except KeyError as exc:  # noqa: EM101
            raise ProviderNotFound(name) from exc

    def resolve(self, provider_name: Optional[str], resource_path: str) -> Optional[Path]:
        """
        Locate a resource file.

        Args:
            provider_name: Provider to ask. If None, every provider is asked in
                           registration order and the first match wins.
            resource_path: Path relative to the provider's resource root.

        Returns:
            The resource file, or None if it was not found.

        Raises:
            ProviderNotFound: If ``provider_name`` is given but not registered.
        """
        start_time = time.perf_counter()
        if provider_name is None:
            for name, provider in self._providers.items():
                found = provider.resolve(resource_path)
                if found is not None:
                    log.debug("Resolved resource", provider=name, resource_path=resource_path)
                    record_lookup(None, "found", start_time, time.perf_counter())
                    return found
            record_lookup(None, "missing", start_time, time.perf_counter())
            return None

        try:
            provider = self.get(provider_name)
        except ProviderNotFound:
            log.warning("Lookup against unregistered resource provider", provider=provider_name, resource_path=resource_path)
            record_lookup(UNKNOWN_PROVIDER, "unknown_provider", start_time, time.perf_counter())
            raise

        found = provider.resolve(resource_path)
        record_lookup(provider_name, "found" if found is not None else "missing", start_time, time.perf_counter())
        return found

    def resolve_any(self, resource_path: str) -> Optional[Path]:
        """Return the resource from whichever provider has it first."""
        return self.resolve(None, resource_path)

    def list_providers(self) -> Mapping[str, ResourceProvider]:
        """Read-only view of the registered providers, in registration order."""
        return MappingProxyType(self._providers)

    def development_property(self, name: str) -> str:
        return f"{self.development_prefix}.{name}"

    def _apply_development_root(self, name: str, provider: ResourceProvider) -> None:
        property_name = self.development_property(name)
        dev_root = self._properties.get(property_name)
        if not dev_root:
            return

        dev_folder = Path(dev_root)
        if self.development_subpath:
            dev_folder = dev_folder / self.development_subpath

        if not dev_folder.is_dir():
            log.warning(
                "development_override_failed",
                provider=name,
                path=str(dev_folder.absolute()),
                reason="does not exist or is not a directory",
            )
            record_development_override(name, "missing_directory")
            return

        try:
            applied = provider.set_development_root(dev_folder)
        except (ProviderError, OSError) as e:
            log.warning(
                "development_override_failed",
                provider=name,
                path=str(dev_folder),
                reason=str(e),
                exc_info=True,
            )
            record_development_override(name, "error")
            return

        if not applied:
            log.warning(
                "development_override_unsupported",
                provider=name,
                path=str(dev_folder),
                reason=f"{type(provider).__name__} has no development root",
            )
            record_development_override(name, "unsupported")
            return

        log.info("Development mode enabled for resource provider", provider=name, path=str(dev_folder), property=property_name)
        record_development_override(name, "applied")

    def __contains__(self, name: object) -> bool:
        return name in self._providers

    def __len__(self) -> int:
        return len(self._providers)

    def __iter__(self) -> Iterator[str]:
        return iter(self._providers)

    def __repr__(self) -> str:
        return f"ResourceRegistry(providers={list(self._providers)!r})"
