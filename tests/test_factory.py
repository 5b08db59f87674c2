# Tests for ProviderFactory

import pytest

from core.config import AppConfig, DevelopmentConfig, ProviderSpec
from core.errors import ConfigurationError
from core.registry import ResourceRegistry
from providers.factory import ProviderFactory
from providers.filesystem import DirectoryResourceProvider


def make_config(providers, **kwargs) -> AppConfig:
    return AppConfig(_env_file=None, providers=providers, **kwargs)


def test_create_directory_provider(core_dir):
    factory = ProviderFactory(make_config({}))
    provider = factory.create("core", ProviderSpec(type="directory", path=str(core_dir)))
    assert isinstance(provider, DirectoryResourceProvider)
    assert provider.root == core_dir


def test_create_unknown_package_raises_configuration_error():
    factory = ProviderFactory(make_config({}))
    with pytest.raises(ConfigurationError) as exc_info:
        factory.create("module", ProviderSpec(type="package", package="no_such_resource_pkg_xyz"))
    assert exc_info.value.__cause__ is not None


def test_create_unsupported_type_raises_configuration_error():
    factory = ProviderFactory(make_config({}))
    spec = ProviderSpec.model_construct(type="ftp", path="/srv")
    with pytest.raises(ConfigurationError, match="Unsupported provider type"):
        factory.create("remote", spec)


def test_populate_registers_in_config_order(core_dir, module_dir):
    config = make_config({
        "module": {"type": "directory", "path": str(module_dir)},
        "core": {"type": "directory", "path": str(core_dir)},
    })
    registry = ProviderFactory(config).populate(ResourceRegistry(properties={}))

    assert list(registry) == ["module", "core"]
    assert registry.resolve(None, "a.png") == (core_dir / "a.png").resolve()


def test_build_registry_applies_development_settings(core_dir, tmp_path, monkeypatch):
    checkout = tmp_path / "checkout"
    (checkout / "web").mkdir(parents=True)
    monkeypatch.setenv("myapp.dev.core", str(checkout))
    config = make_config(
        {"core": {"type": "directory", "path": str(core_dir)}},
        development=DevelopmentConfig(prefix="myapp.dev", subpath="web"),
    )

    registry = ProviderFactory(config).build_registry()

    assert registry.get("core").development_root == checkout / "web"
