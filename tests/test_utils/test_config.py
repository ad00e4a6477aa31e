"""Tests for configuration loading and validation."""

import pytest
import yaml

from contour.utils.config import (
    CONFIG_SCHEMA,
    ConfigManager,
    get_default_config,
    load_config,
)
from contour.utils.errors import ConfigurationError


def write_yaml(path, data):
    path.write_text(yaml.safe_dump(data))
    return path


class TestConfigManager:
    def test_dot_notation(self):
        config = ConfigManager({"progressive": {"segment_duration": 5.0}})
        assert config.get("progressive.segment_duration") == 5.0
        assert config.get("progressive.missing", default=1) == 1

    def test_required_key(self):
        with pytest.raises(ConfigurationError) as exc_info:
            ConfigManager({}).get("analysis.frame_size", required=True)
        assert exc_info.value.config_key == "analysis.frame_size"

    def test_set_creates_sections(self):
        config = ConfigManager()
        config.set("analysis.hop_size", 128)
        assert config.get_section("analysis") == {"hop_size": 128}

    def test_get_section_of_scalar(self):
        assert ConfigManager({"logging": "loud"}).get_section("logging") == {}

    def test_to_dict_is_a_copy(self):
        config = ConfigManager({"audio": {"target_sample_rate": 8000}})
        snapshot = config.to_dict()
        snapshot["audio"]["target_sample_rate"] = 1
        assert config.get("audio.target_sample_rate") == 8000

    def test_env_interpolation(self, tmp_path, monkeypatch):
        monkeypatch.setenv("CONTOUR_LOG_LEVEL", "DEBUG")
        path = write_yaml(tmp_path / "c.yaml", {
            "logging": {"level": "${CONTOUR_LOG_LEVEL}", "file": "${CONTOUR_UNSET_VAR}"},
            "tags": ["${CONTOUR_LOG_LEVEL}"],
        })

        config = ConfigManager.from_file(path)

        assert config.get("logging.level") == "DEBUG"
        assert config.get("logging.file") == "${CONTOUR_UNSET_VAR}"
        assert config.get("tags") == ["DEBUG"]

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError):
            ConfigManager.from_file(tmp_path / "absent.yaml")

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("progressive: [unclosed")
        with pytest.raises(ConfigurationError):
            ConfigManager.from_file(path)

    def test_root_must_be_mapping(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- 1\n- 2\n")
        with pytest.raises(ConfigurationError):
            ConfigManager.from_file(path)

    def test_validate_types(self):
        config = ConfigManager({"progressive": {"segment_duration": "ten"}})
        with pytest.raises(ConfigurationError) as exc_info:
            config.validate(CONFIG_SCHEMA)
        assert "int or float" in str(exc_info.value)

    def test_validate_required(self):
        with pytest.raises(ConfigurationError):
            ConfigManager({}).validate({"audio.target_sample_rate": {"type": int, "required": True}})


class TestLoadConfig:
    def test_merges_over_defaults(self, tmp_path):
        path = write_yaml(tmp_path / "c.yaml", {"progressive": {"segment_duration": 5.0}})

        config = load_config(str(path))

        assert config["progressive"]["segment_duration"] == 5.0
        assert config["progressive"]["max_cached_segments"] == 6
        assert config["analysis"] == get_default_config()["analysis"]

    def test_explicit_path_must_exist(self, tmp_path):
        with pytest.raises(ConfigurationError):
            load_config(str(tmp_path / "absent.yaml"))

    def test_schema_is_enforced(self, tmp_path):
        path = write_yaml(tmp_path / "c.yaml", {"analysis": {"frame_size": "big"}})
        with pytest.raises(ConfigurationError):
            load_config(str(path))

    def test_bundled_config_matches_defaults(self):
        config = load_config()
        defaults = get_default_config()
        assert config["progressive"] == defaults["progressive"]
        assert config["analysis"] == defaults["analysis"]


class TestDefaults:
    def test_progressive_defaults(self):
        progressive = get_default_config()["progressive"]
        assert progressive == {
            "threshold_duration": 30.0,
            "segment_duration": 10.0,
            "preload_segments": 1,
            "max_cached_segments": 6,
            "cache_decoded_audio": False,
        }

    def test_defaults_are_fresh_copies(self):
        first = get_default_config()
        first["analysis"]["frame_size"] = 1
        assert get_default_config()["analysis"]["frame_size"] == 2048
