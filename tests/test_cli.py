import sys

import pytest
import structlog

import cli
import server


@pytest.fixture
def config_file(tmp_path, core_dir, module_dir, monkeypatch):
    # structlog caches loggers once configure_logging has run; send log lines to
    # stderr without caching instead
    monkeypatch.setattr(
        cli, "configure_logging",
        lambda **kwargs: structlog.configure(logger_factory=structlog.PrintLoggerFactory(sys.stderr)),
    )
    path = tmp_path / "config.toml"
    path.write_text(
        "[providers.core]\n"
        'type = "directory"\n'
        f"path = {str(core_dir)!r}\n"
        "[providers.module]\n"
        'type = "directory"\n'
        f"path = {str(module_dir)!r}\n"
    )
    yield str(path)
    structlog.reset_defaults()


def test_resolve_prints_path(config_file, module_dir, capsys):
    assert cli.main(["--config", config_file, "resolve", "b.png"]) == 0
    assert capsys.readouterr().out.strip() == str((module_dir / "b.png").resolve())


def test_resolve_scoped_not_found(config_file, capsys):
    assert cli.main(["--config", config_file, "resolve", "--provider", "core", "b.png"]) == cli.EXIT_NOT_FOUND
    assert "not found" in capsys.readouterr().err


def test_resolve_unknown_provider(config_file, capsys):
    assert cli.main(["--config", config_file, "resolve", "--provider", "missing", "x"]) == cli.EXIT_UNKNOWN_PROVIDER
    assert "missing" in capsys.readouterr().err


def test_list(config_file, capsys):
    assert cli.main(["--config", config_file, "list"]) == 0
    lines = capsys.readouterr().out.splitlines()
    assert [line.split("\t")[0] for line in lines] == ["core", "module"]


def test_missing_config_file(tmp_path, capsys):
    assert cli.main(["--config", str(tmp_path / "nope.toml"), "list"]) == cli.EXIT_CONFIG
    assert "not found" in capsys.readouterr().err


def test_results_only_on_stdout(config_file, capsys):
    assert cli.main(["--config", config_file, "resolve", "a.png"]) == 0
    captured = capsys.readouterr()
    assert len(captured.out.splitlines()) == 1
    assert "Built resource provider" in captured.err


def test_serve_passes_config_path(config_file, monkeypatch):
    calls = []
    monkeypatch.setattr(server, "main", lambda config, config_path=None: calls.append((config, config_path)))

    assert cli.main(["--config", config_file, "serve"]) == 0

    config, config_path = calls[0]
    assert config_path == config_file
    assert list(config.providers) == ["core", "module"]
