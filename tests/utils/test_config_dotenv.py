import importlib
import sys
import builtins
import types
import logging
from pathlib import Path

import pytest


def _reload_config():
    sys.modules.pop("markcrawl.config", None)
    return importlib.import_module("markcrawl.config")


def test_missing_dotenv_logs_warning(monkeypatch, caplog):
    orig_import = builtins.__import__

    def fake_import(name, globals=None, locals=None, fromlist=(), level=0):
        if name == "dotenv" or name.startswith("dotenv."):
            raise ImportError
        return orig_import(name, globals, locals, fromlist, level)

    monkeypatch.setattr(builtins, "__import__", fake_import)
    caplog.set_level(logging.WARNING)
    cfg = _reload_config()
    assert "python-dotenv not available" in caplog.text

    # environment fallback works
    monkeypatch.setenv("USER_AGENT", "X-Agent")
    cfg = _reload_config()
    assert cfg.get_str_env("USER_AGENT", "MarkCrawl/0.1") == "X-Agent"


def test_dotenv_present_but_fails_to_load(monkeypatch, tmp_path):
    tmp_path.joinpath(".env").write_text("USER_AGENT=FromFile")
    monkeypatch.chdir(tmp_path)

    fake = types.SimpleNamespace(load_dotenv=lambda: False)
    monkeypatch.setitem(sys.modules, "dotenv", fake)
    with pytest.raises(RuntimeError):
        _reload_config()


def test_dotenv_loads_sets_variables(monkeypatch, tmp_path):
    tmp_path.joinpath(".env").write_text("MARKCRAWL_PORT=9100")
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("MARKCRAWL_PORT", raising=False)

    def fake_load():
        # emulate dotenv behavior: read .env into the environment
        p = Path(".env")
        for line in p.read_text().splitlines():
            if "=" in line:
                k, v = line.split("=", 1)
                monkeypatch.setenv(k, v)
        return True

    fake = types.SimpleNamespace(load_dotenv=fake_load)
    monkeypatch.setitem(sys.modules, "dotenv", fake)
    cfg = _reload_config()
    assert cfg.get_int_env("MARKCRAWL_PORT", 8000) == 9100


@pytest.mark.parametrize("raw,expected", [
    ("true", True), ("1", True), ("Yes", True), ("off", False), ("0", False),
])
def test_bool_env_values(monkeypatch, raw, expected):
    from markcrawl import config

    monkeypatch.setenv("MARKCRAWL_HEADLESS", raw)
    assert config.get_bool_env("MARKCRAWL_HEADLESS", not expected) is expected


def test_invalid_values_fall_back_to_default(monkeypatch, caplog):
    from markcrawl import config

    monkeypatch.setenv("MARKCRAWL_HEADLESS", "sometimes")
    monkeypatch.setenv("MARKCRAWL_PORT", "eighty")
    assert config.get_bool_env("MARKCRAWL_HEADLESS", True) is True
    assert config.get_int_env("MARKCRAWL_PORT", 8000) == 8000
    assert "Invalid" in caplog.text


def test_empty_values_count_as_unset(monkeypatch):
    from markcrawl import config

    monkeypatch.setenv("DATABASE_URL", "")
    assert config.get_optional_str_env("DATABASE_URL") is None
    assert config.get_str_env("DATABASE_URL", "sqlite://") == "sqlite://"
