"""Base classes and interfaces for resource providers."""

from abc import ABC, abstractmethod
from pathlib import Path, PurePosixPath
from typing import Optional, Union

import structlog

log = structlog.get_logger(__name__)

PathLike = Union[str, Path]


def normalize_resource_path(resource_path: str) -> Optional[PurePosixPath]:
    """
    Turns a URL-style resource path into a safe relative path.

    Returns None for empty paths, paths holding NUL bytes, and paths that
    would climb out of the provider root ("..") once the leading slash is
    stripped.
    """
    if not resource_path or "\x00" in resource_path:
        return None
    cleaned = resource_path.replace("\\", "/").lstrip("/")
    if not cleaned:
        return None
    candidate = PurePosixPath(cleaned)
    if any(part == ".." for part in candidate.parts):
        return None
    return candidate


class ResourceProvider(ABC):
    """A capability that resolves relative resource paths to files under one root."""

    type_name: str = "abstract"

    @abstractmethod
    def resolve(self, resource_path: str) -> Optional[Path]:
        """
        Resolve a relative resource path to a file.

        Args:
            resource_path: Path relative to this provider's resource root,
                           e.g. "images/logo.png".

        Returns:
            The concrete file, or None if this provider does not have it.
        """
        ...

    @property
    def development_root(self) -> Optional[Path]:
        return None

    def set_development_root(self, path: PathLike) -> bool:
        """
        Redirect lookups to a local working copy.

        Providers that have no notion of a development root keep the default,
        which ignores the request and returns False.
        """
        return False


class FileSystemResourceProvider(ResourceProvider):
    """Shared lookup logic for providers backed by a local directory."""

    def __init__(self, root: PathLike):
        self._root = Path(root)
        self._development_root: Optional[Path] = None

    @property
    def root(self) -> Path:
        return self._root

    @property
    def development_root(self) -> Optional[Path]:
        return self._development_root

    def set_development_root(self, path: PathLike) -> bool:
        self._development_root = Path(path)
        log.debug("Development root set", provider=type(self).__name__, path=str(self._development_root))
        return True

    def search_roots(self) -> list[Path]:
        if self._development_root is not None:
            return [self._development_root, self._root]
        return [self._root]

    def resolve(self, resource_path: str) -> Optional[Path]:
        relative = normalize_resource_path(resource_path)
        if relative is None:
            log.debug("Rejected resource path", resource_path=resource_path)
            return None
        for base in self.search_roots():
            found = self._lookup(base, relative)
            if found is not None:
                return found
        return None

    @staticmethod
    def _lookup(base: Path, relative: PurePosixPath) -> Optional[Path]:
        candidate = base.joinpath(*relative.parts)
        try:
            resolved_base = base.resolve()
            resolved = candidate.resolve()
        except (OSError, ValueError):
            return None
        # symlinks may still point outside the root
        if resolved_base != resolved and resolved_base not in resolved.parents:
            return None
        if resolved.is_file():
            return resolved
        return None

    def __repr__(self) -> str:
        return f"{type(self).__name__}(root={str(self._root)!r}, development_root={self._development_root!r})"
