class ResourceRegistryError(Exception):
    """Base for all custom exceptions."""

class ProviderNotFound(ResourceRegistryError):
    def __init__(self, name: str):
        super().__init__(f"Resource provider '{name}' not registered")
        self.name = name

class ConfigurationError(ResourceRegistryError):
    """Indicates an error in the application's configuration."""
    pass
