"""Core package for the resource registry."""

# Re-export the main registry components
from .errors import ProviderNotFound, ResourceRegistryError
from .registry import ResourceRegistry

__all__ = [
    "ResourceRegistry",
    "ProviderNotFound",
    "ResourceRegistryError",
]
