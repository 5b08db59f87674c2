"""Common exceptions for the resource provider layer."""

class ProviderError(Exception):
    """Base class for provider-related errors."""
    pass

class DevelopmentRootError(ProviderError):
    """A development root could not be applied to a provider."""

    def __init__(self, provider: str, path, reason: str):
        super().__init__(f"Cannot use {path} as development root for '{provider}': {reason}")
        self.provider = provider
        self.path = path
        self.reason = reason
