"""Tests for configuration loading."""

import pytest
import yaml
from pydantic import ValidationError

from blockflow.config import EngineConfig, Settings, load_config


def test_load_config_from_yaml(tmp_path):
    config_data = {
        "geometry": {"card_width": 300, "curve_max": 80},
        "logging": {"level": "debug", "format": "text"},
    }
    path = tmp_path / "config.yaml"
    path.write_text(yaml.dump(config_data))

    cfg = load_config(path)
    assert cfg.geometry.card_width == 300
    assert cfg.geometry.card_height == 164
    assert cfg.geometry.curve_max == 80
    assert cfg.logging.format == "text"


def test_load_config_defaults():
    cfg = EngineConfig()
    assert cfg.geometry.card_width == 272
    assert cfg.geometry.curve_min == 24
    assert cfg.geometry.curve_factor == 0.22
    assert cfg.logging.level == "info"


def test_load_config_empty_file(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("")
    assert load_config(path) == EngineConfig()


def test_load_config_file_not_found():
    with pytest.raises(FileNotFoundError):
        load_config("/nonexistent/path.yaml")


def test_inverted_clamp_rejected():
    with pytest.raises(ValidationError):
        EngineConfig.model_validate({"geometry": {"curve_min": 60, "curve_max": 10}})


def test_settings_from_environment(monkeypatch):
    monkeypatch.setenv("BLOCKFLOW_CONFIG_PATH", "/etc/blockflow.yaml")
    monkeypatch.setenv("BLOCKFLOW_LOG_FORMAT", "text")
    settings = Settings()
    assert settings.config_path == "/etc/blockflow.yaml"
    assert settings.log_format == "text"
    assert settings.log_level is None
