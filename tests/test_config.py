"""Tests for configuration loading and source validation."""
import importlib
import json

import pytest

from cdn_registry.infra.common.config import load_app_config, load_sources, parse_source
from cdn_registry.infra.common.errors import ConfigError


def test_parse_minimal_release_asset_source():
    source = parse_source({"package": "foo", "type": "release-asset", "repo": "x/y", "asset_regex": r"\.js$"})
    
    assert source.package == "foo"
    assert source.build.enable is False
    assert source.channel is None
    assert source.file_paths == []


def test_parse_source_combines_path_and_paths():
    source = parse_source({"package": "raw", "type": "raw-file", "repo": "x/y", "path": "a.js", "paths": ["a.js", "b.js"]})
    
    assert source.file_paths == ["a.js", "b.js"]


@pytest.mark.parametrize("package", ["_index", "a/b", "..", ""])
def test_package_must_be_safe_path_segment(package):
    with pytest.raises(ConfigError, match="package"):
        parse_source({"package": package, "type": "raw-file"})


def test_invalid_asset_regex_is_rejected():
    with pytest.raises(ConfigError, match="asset_regex"):
        parse_source({"package": "foo", "type": "release-asset", "asset_regex": "("})


def test_unknown_fields_are_rejected():
    with pytest.raises(ConfigError, match="asset_regx"):
        parse_source({"package": "foo", "type": "release-asset", "asset_regx": "x"})


def test_invalid_channel_is_rejected():
    with pytest.raises(ConfigError, match="channel"):
        parse_source({"package": "foo", "type": "raw-file", "channel": "nightly"})


def test_non_object_entry_is_rejected():
    with pytest.raises(ConfigError, match="must be an object"):
        parse_source(["foo"])


def test_load_sources_json(tmp_path):
    path = tmp_path / "external-sources.json"
    path.write_text(json.dumps({"sources": [{"package": "foo", "type": "raw-file"}]}))
    
    assert load_sources(path) == [{"package": "foo", "type": "raw-file"}]


def test_load_sources_yaml_list(tmp_path):
    path = tmp_path / "sources.yml"
    path.write_text("- package: foo\n  type: release-asset\n  repo: x/y\n")
    
    assert load_sources(path) == [{"package": "foo", "type": "release-asset", "repo": "x/y"}]


def test_load_sources_missing_file(tmp_path):
    with pytest.raises(ConfigError, match="not found"):
        load_sources(tmp_path / "nope.json")


def test_load_sources_rejects_malformed(tmp_path):
    path = tmp_path / "external-sources.json"
    path.write_text("{")
    with pytest.raises(ConfigError, match="Invalid sources file"):
        load_sources(path)
    
    path.write_text(json.dumps({"sources": "foo"}))
    with pytest.raises(ConfigError, match="must hold"):
        load_sources(path)


def test_load_app_config_rejects_unknown_env():
    with pytest.raises(ConfigError, match="Invalid environment"):
        load_app_config("qa")


def test_load_app_config_local(monkeypatch):
    monkeypatch.setenv("GITHUB_ACTIONS", "true")
    
    config = load_app_config("local")
    
    assert config.public_dir
    assert config.http_retries >= 0


@pytest.mark.parametrize("env", ["local", "staging", "production"])
def test_strict_mode_is_off_unless_requested(monkeypatch, env):
    """Test no environment turns strict mode on by default."""
    monkeypatch.delenv("SYNC_STRICT", raising=False)
    
    module = importlib.reload(importlib.import_module(f"config.appconfig.{env}"))
    
    assert module.config.strict is False


@pytest.mark.parametrize("env", ["staging", "production"])
def test_strict_mode_from_environment(monkeypatch, env):
    monkeypatch.setenv("SYNC_STRICT", "true")
    
    module = importlib.reload(importlib.import_module(f"config.appconfig.{env}"))
    
    assert module.config.strict is True
    monkeypatch.delenv("SYNC_STRICT")
    importlib.reload(module)
