"""Tests for configuration loading."""

import pytest

from codepulse_core.config import load_config, load_guidelines


def test_defaults_applied_when_no_config_file(tmp_path):
    config = load_config(config_path=str(tmp_path / "nonexistent.yml"))
    assert config["model"] == "anthropic"
    assert config["cache"] == "memory"
    assert config["cache_ttl_hours"] == 24
    assert config["sweep_interval_minutes"] == 60
    assert config["max_diff_bytes"] == 51200
    assert config["review_max_tokens"] == 4096
    assert config["fix_max_tokens"] == 8192
    assert config["search_workers"] == 1
    assert config["guidelines"] is None


def test_config_file_overrides_defaults(tmp_path):
    cfg = tmp_path / ".codepulse.yml"
    cfg.write_text("model: openai\ncache_ttl_hours: 6\nsearch_workers: 4\n")
    config = load_config(config_path=str(cfg))
    assert config["model"] == "openai"
    assert config["cache_ttl_hours"] == 6
    assert config["search_workers"] == 4


def test_empty_config_file_keeps_defaults(tmp_path):
    cfg = tmp_path / ".codepulse.yml"
    cfg.write_text("")
    config = load_config(config_path=str(cfg))
    assert config["model"] == "anthropic"


def test_cli_overrides_config_file(tmp_path):
    cfg = tmp_path / ".codepulse.yml"
    cfg.write_text("model: openai\n")
    config = load_config(config_path=str(cfg), cli_overrides={"model": "anthropic"})
    assert config["model"] == "anthropic"


def test_none_cli_overrides_ignored(tmp_path):
    cfg = tmp_path / ".codepulse.yml"
    cfg.write_text("port: 8080\n")
    config = load_config(config_path=str(cfg), cli_overrides={"port": None})
    assert config["port"] == 8080


def test_env_vars_loaded(monkeypatch):
    monkeypatch.setenv("GITHUB_TOKEN", "gh-token")
    monkeypatch.setenv("ANTHROPIC_API_KEY", "ant-key")
    monkeypatch.setenv("OPENAI_API_KEY", "oai-key")
    config = load_config(config_path="nonexistent.yml")
    assert config["github_token"] == "gh-token"
    assert config["anthropic_api_key"] == "ant-key"
    assert config["openai_api_key"] == "oai-key"


def test_no_guidelines_by_default():
    config = load_config(config_path="nonexistent.yml")
    assert load_guidelines(config) == ""


def test_custom_guidelines_path(tmp_path):
    guidelines_file = tmp_path / "tms-guidelines.md"
    guidelines_file.write_text("# TMS Guidelines\n- Money is always Decimal")
    cfg = tmp_path / ".codepulse.yml"
    cfg.write_text(f"guidelines: {guidelines_file}\n")
    config = load_config(config_path=str(cfg))
    assert "TMS Guidelines" in load_guidelines(config)


def test_missing_custom_guidelines_raises(tmp_path):
    config = {"guidelines": str(tmp_path / "does-not-exist.md")}
    with pytest.raises(FileNotFoundError):
        load_guidelines(config)
