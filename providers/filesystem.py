"""Resource providers that resolve against local directories."""

from importlib import import_module
from pathlib import Path
from typing import Optional

import structlog

from providers.base import FileSystemResourceProvider
from providers.exceptions import ProviderError

log = structlog.get_logger(__name__)


class DirectoryResourceProvider(FileSystemResourceProvider):
    """Serves resources from a plain directory on disk."""

    type_name = "directory"

    def __init__(self, root):
        super().__init__(root)
        if not self.root.is_dir():
            log.warning("Resource directory does not exist", root=str(self.root))


class PackageResourceProvider(FileSystemResourceProvider):
    """
    Serves resources bundled inside an importable Python package.

    The resource root is ``<package directory>/<subdirectory>``, e.g. the
    ``resources`` folder shipped next to a module's ``__init__.py``.
    """

    type_name = "package"

    def __init__(self, package: str, subdirectory: Optional[str] = "resources"):
        self.package = package
        self.subdirectory = subdirectory
        super().__init__(self._package_root(package, subdirectory))

    @staticmethod
    def _package_root(package: str, subdirectory: Optional[str]) -> Path:
        try:
            module = import_module(package)
        except ImportError as exc:
            raise ProviderError(f"Cannot import resource package '{package}': {exc}") from exc

        module_file = getattr(module, "__file__", None)
        if module_file:
            base = Path(module_file).parent
        else:
            # namespace package
            search_path = list(getattr(module, "__path__", []))
            if not search_path:
                raise ProviderError(f"Package '{package}' has no filesystem location")
            base = Path(search_path[0])

        root = base / subdirectory if subdirectory else base
        if not root.is_dir():
            log.warning("Package resource directory does not exist", package=package, root=str(root))
        return root

    def __repr__(self) -> str:
        return f"PackageResourceProvider(package={self.package!r}, root={str(self.root)!r})"

